import pytest
from sqlalchemy import create_engine, inspect

from patauth.errors import InvalidConfigurationError
from patauth.tokenstore.factory import StorageConfig, StorageType, create_token_store
from patauth.tokenstore.memory import MemoryTokenStore
from patauth.tokenstore.redis import RedisTokenStore
from patauth.tokenstore.sql import SQLTokenStore


def test_default_is_memory():
    assert isinstance(create_token_store(), MemoryTokenStore)


def test_sql_store_with_schema(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'factory.db'}")
    store = create_token_store(StorageConfig(type=StorageType.SQL, engine=engine, create_schema=True))
    assert isinstance(store, SQLTokenStore)
    columns = {c["name"] for c in inspect(engine).get_columns("personal_access_tokens")}
    assert columns == {"id", "user_id", "token", "name", "abilities", "created_at", "expires_at", "last_used_at"}
    engine.dispose()


def test_sql_requires_engine():
    with pytest.raises(InvalidConfigurationError):
        create_token_store(StorageConfig(type=StorageType.SQL))


def test_redis_store_is_lazy():
    store = create_token_store(StorageConfig(type="redis", redis_url="redis://localhost:6379/0"))
    assert isinstance(store, RedisTokenStore)
    assert store.prefix == "patauth:token"


def test_redis_requires_url():
    with pytest.raises(InvalidConfigurationError):
        create_token_store(StorageConfig(type=StorageType.REDIS))


def test_unknown_type():
    with pytest.raises(InvalidConfigurationError):
        create_token_store(StorageConfig(type="mongo"))
