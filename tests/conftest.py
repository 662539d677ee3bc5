import uuid

import fakeredis
import pytest
from sqlalchemy import create_engine

from patauth.config import Config
from patauth.tokenstore.memory import MemoryTokenStore
from patauth.tokenstore.redis import RedisTokenStore
from patauth.tokenstore.sql import SQLTokenStore

SIGNING_KEY = "test-key-123"


@pytest.fixture
def memory_store():
    return MemoryTokenStore()


@pytest.fixture
def sql_store(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'tokens.db'}",
        connect_args={"check_same_thread": False},
    )
    store = SQLTokenStore(engine)
    store.create_schema()
    yield store
    engine.dispose()


@pytest.fixture
def fake_redis_store():
    client = fakeredis.FakeAsyncRedis(decode_responses=True)
    return RedisTokenStore(prefix=f"patauth-test:{uuid.uuid4().hex}", client=client)


@pytest.fixture(params=["memory", "sql", "fake_redis"])
def store(request):
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
async def config(store):
    cfg = Config(signing_key=SIGNING_KEY, storage=store)
    yield cfg
    await cfg.touch_dispatcher.drain()
