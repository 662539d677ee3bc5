"""Redis-backed token store.

Layout:
- Each record is stored as a JSON blob at ``{prefix}:data:{digest}``.
- ``{prefix}:id:{id}`` maps a record id back to its digest.
- ``{prefix}:seq`` is the id sequence, advanced with INCR, so ids are never
  reused even after revocation.

Design Notes:
- Keys carry no TTL; expiry is evaluated on read so an expired token reports
  ``TokenExpiredError`` rather than disappearing as not-found.
- Data and id keys are written together in a WATCH/MULTI transaction that
  rejects a duplicate digest or id; explicit ids advance the sequence.
- Redis errors are re-raised as ``StorageFailureError``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from ..errors import StorageFailureError, TokenNotFoundError
from ..token.types import PersonalAccessToken, utcnow
from .store import TokenStore, ensure_usable

logger = logging.getLogger(__name__)


class RedisTokenStore(TokenStore):
    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        prefix: str = "patauth:token",
        client: Optional[redis.Redis] = None,
    ):
        self.url = url
        self.prefix = prefix.rstrip(":")
        self._client = client

    async def _get_client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.from_url(self.url, decode_responses=True)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # Key helpers
    def _data_key(self, digest: str) -> str:
        return f"{self.prefix}:data:{digest}"

    def _id_key(self, token_id: int) -> str:
        return f"{self.prefix}:id:{token_id}"

    def _seq_key(self) -> str:
        return f"{self.prefix}:seq"

    async def store_token(self, record: PersonalAccessToken) -> None:
        try:
            client = await self._get_client()
            explicit_id = bool(record.id)
            token_id = record.id if explicit_id else int(await client.incr(self._seq_key()))
            stored = replace(record, id=token_id)
            data_key = self._data_key(stored.token)
            id_key = self._id_key(token_id)

            async def insert(pipe) -> None:
                if await pipe.exists(data_key):
                    raise StorageFailureError("duplicate token digest")
                if await pipe.exists(id_key):
                    raise StorageFailureError(f"duplicate token id {token_id}")
                pipe.multi()
                pipe.set(data_key, json.dumps(stored.to_dict()))
                pipe.set(id_key, stored.token)

            # both keys or neither; WATCH retries if either changes underneath
            await client.transaction(insert, data_key, id_key)
            if explicit_id:
                await self._advance_seq(client, token_id)
        except RedisError as e:
            logger.warning("Failed to store token for user %s: %s", record.user_id, e)
            raise StorageFailureError(f"failed to store token: {e}") from e
        record.id = token_id
        logger.debug("Stored token id=%s", record.id)

    async def _advance_seq(self, client: redis.Redis, token_id: int) -> None:
        """Move the id sequence past an explicitly stored id."""
        seq_key = self._seq_key()

        async def bump(pipe) -> None:
            current = int(await pipe.get(seq_key) or 0)
            if current < token_id:
                pipe.multi()
                pipe.set(seq_key, token_id)

        await client.transaction(bump, seq_key)

    async def find_by_hash(self, digest: str) -> PersonalAccessToken:
        return ensure_usable(await self._load(digest))

    async def find_by_id(self, token_id: int) -> PersonalAccessToken:
        try:
            client = await self._get_client()
            digest = await client.get(self._id_key(token_id))
        except RedisError as e:
            raise StorageFailureError(f"token lookup failed: {e}") from e
        if not digest:
            raise TokenNotFoundError()
        return ensure_usable(await self._load(digest))

    async def revoke_token(self, digest: str) -> None:
        record = await self._load(digest)
        if record is None:
            raise TokenNotFoundError()
        try:
            client = await self._get_client()
            pipe = client.pipeline()
            pipe.delete(self._data_key(digest))
            pipe.delete(self._id_key(record.id))
            removed, _ = await pipe.execute()
        except RedisError as e:
            raise StorageFailureError(f"failed to revoke token: {e}") from e
        if removed != 1:
            # lost a race with a concurrent revoke
            raise TokenNotFoundError()

    async def touch_last_used(self, token_id: int) -> None:
        try:
            client = await self._get_client()
            digest = await client.get(self._id_key(token_id))
        except RedisError as e:
            raise StorageFailureError(f"token lookup failed: {e}") from e
        record = await self._load(digest) if digest else None
        if record is None:
            raise TokenNotFoundError()
        record.last_used_at = utcnow()
        try:
            # xx: never resurrect a record revoked in the meantime
            updated = await client.set(self._data_key(digest), json.dumps(record.to_dict()), xx=True)
        except RedisError as e:
            raise StorageFailureError(f"token update failed: {e}") from e
        if not updated:
            raise TokenNotFoundError()

    async def _load(self, digest: str) -> Optional[PersonalAccessToken]:
        try:
            client = await self._get_client()
            raw = await client.get(self._data_key(digest))
        except RedisError as e:
            raise StorageFailureError(f"token lookup failed: {e}") from e
        if not raw:
            return None
        try:
            return PersonalAccessToken.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            logger.error("Decode failure for token record: %s", e)
            raise StorageFailureError(f"corrupt token record: {e}") from e


__all__ = ["RedisTokenStore"]
