import asyncio
from datetime import timedelta

import pytest

from patauth.errors import StorageFailureError, TokenExpiredError, TokenNotFoundError
from patauth.token.hashing import hash_token
from patauth.token.types import PersonalAccessToken, utcnow

pytestmark = pytest.mark.asyncio


def make_record(secret="secret", **overrides):
    base = dict(
        user_id=42,
        token=hash_token(secret),
        name="CI token",
        abilities="read:posts,write:comments",
    )
    base.update(overrides)
    return PersonalAccessToken(**base)


async def test_store_assigns_id_and_finds_by_hash(store):
    record = make_record()
    await store.store_token(record)
    assert record.id is not None and record.id > 0

    found = await store.find_by_hash(record.token)
    assert found.id == record.id
    assert found.user_id == 42
    assert found.name == "CI token"
    assert found.abilities == "read:posts,write:comments"
    assert found.last_used_at is None
    assert found.created_at.tzinfo is not None


async def test_find_by_id(store):
    record = make_record()
    await store.store_token(record)
    found = await store.find_by_id(record.id)
    assert found.token == record.token


async def test_ids_are_distinct(store):
    first, second = make_record("a"), make_record("b")
    await store.store_token(first)
    await store.store_token(second)
    assert first.id != second.id


async def test_missing_record(store):
    with pytest.raises(TokenNotFoundError):
        await store.find_by_hash(hash_token("missing"))
    with pytest.raises(TokenNotFoundError):
        await store.find_by_id(9999)


async def test_duplicate_digest_is_rejected(store):
    await store.store_token(make_record())
    with pytest.raises(StorageFailureError):
        await store.store_token(make_record(user_id=7))
    found = await store.find_by_hash(hash_token("secret"))
    assert found.user_id == 42


async def test_expired_record(store):
    record = make_record(expires_at=utcnow() - timedelta(seconds=1))
    await store.store_token(record)
    with pytest.raises(TokenExpiredError):
        await store.find_by_hash(record.token)
    with pytest.raises(TokenExpiredError):
        await store.find_by_id(record.id)


async def test_unexpired_record(store):
    record = make_record(expires_at=utcnow() + timedelta(hours=1))
    await store.store_token(record)
    found = await store.find_by_hash(record.token)
    assert found.expires_at > utcnow()


async def test_revoke_is_not_idempotent(store):
    record = make_record()
    await store.store_token(record)
    await store.revoke_token(record.token)
    with pytest.raises(TokenNotFoundError):
        await store.find_by_hash(record.token)
    with pytest.raises(TokenNotFoundError):
        await store.find_by_id(record.id)
    with pytest.raises(TokenNotFoundError):
        await store.revoke_token(record.token)


async def test_touch_last_used(store):
    record = make_record()
    await store.store_token(record)
    before = utcnow()
    await store.touch_last_used(record.id)
    found = await store.find_by_id(record.id)
    assert found.last_used_at is not None
    assert found.last_used_at >= before - timedelta(seconds=1)


async def test_touch_missing_record(store):
    with pytest.raises(TokenNotFoundError):
        await store.touch_last_used(12345)


async def test_concurrent_stores_get_unique_ids(store):
    records = [make_record(f"secret-{i}") for i in range(20)]
    await asyncio.gather(*(store.store_token(r) for r in records))
    assert len({r.id for r in records}) == 20


async def test_explicit_id_is_not_reissued(store):
    first = make_record("a", id=1, user_id=1)
    await store.store_token(first)

    second = make_record("b", user_id=2)
    await store.store_token(second)
    assert second.id != 1

    assert (await store.find_by_id(1)).user_id == 1
    assert (await store.find_by_id(second.id)).user_id == 2


async def test_duplicate_explicit_id_is_rejected(store):
    await store.store_token(make_record("a", id=1, user_id=1))
    with pytest.raises(StorageFailureError):
        await store.store_token(make_record("b", id=1, user_id=2))

    assert (await store.find_by_id(1)).user_id == 1
    with pytest.raises(TokenNotFoundError):
        await store.find_by_hash(hash_token("b"))
