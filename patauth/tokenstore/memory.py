"""
In-memory token store.

Records are indexed twice, by digest and by id. A single reader/writer lock
guards both indices: lookups hold the shared side, while ``store_token``,
``revoke_token`` and ``touch_last_used`` hold the exclusive side, so the two
indices are never observed out of step.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import AsyncIterator, Dict

from ..errors import StorageFailureError, TokenNotFoundError
from ..token.types import PersonalAccessToken, utcnow
from .store import TokenStore, ensure_usable

logger = logging.getLogger(__name__)


class ReadWriteLock:
    """asyncio lock allowing many readers or one writer."""

    def __init__(self):
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        async with self._cond:
            await self._cond.wait_for(lambda: not self._writer)
            self._readers += 1
        try:
            yield
        finally:
            async with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        async with self._cond:
            await self._cond.wait_for(lambda: not self._writer and self._readers == 0)
            self._writer = True
        try:
            yield
        finally:
            async with self._cond:
                self._writer = False
                self._cond.notify_all()


class MemoryTokenStore(TokenStore):
    """Process-local token store.

    Ids start at 1 and are never reused within the lifetime of the instance,
    even after revocation.
    """

    def __init__(self):
        self._by_hash: Dict[str, PersonalAccessToken] = {}
        self._by_id: Dict[int, PersonalAccessToken] = {}
        self._next_id = 1
        self._lock = ReadWriteLock()

    async def store_token(self, record: PersonalAccessToken) -> None:
        async with self._lock.write():
            if record.token in self._by_hash:
                raise StorageFailureError("duplicate token digest")
            if record.id is not None and record.id in self._by_id:
                raise StorageFailureError(f"duplicate token id {record.id}")

            if not record.id:
                record.id = self._next_id
            self._next_id = max(self._next_id, record.id + 1)

            stored = replace(record)
            self._by_hash[stored.token] = stored
            self._by_id[stored.id] = stored
        logger.debug("Stored token id=%s", record.id)

    async def find_by_hash(self, digest: str) -> PersonalAccessToken:
        async with self._lock.read():
            record = ensure_usable(self._by_hash.get(digest))
            return replace(record)

    async def find_by_id(self, token_id: int) -> PersonalAccessToken:
        async with self._lock.read():
            record = ensure_usable(self._by_id.get(token_id))
            return replace(record)

    async def revoke_token(self, digest: str) -> None:
        async with self._lock.write():
            record = self._by_hash.pop(digest, None)
            if record is None:
                raise TokenNotFoundError()
            del self._by_id[record.id]

    async def touch_last_used(self, token_id: int) -> None:
        async with self._lock.write():
            record = self._by_id.get(token_id)
            if record is None:
                raise TokenNotFoundError()
            record.last_used_at = utcnow()

    def __len__(self) -> int:
        return len(self._by_id)


def create_memory_store() -> MemoryTokenStore:
    return MemoryTokenStore()


__all__ = ["MemoryTokenStore", "ReadWriteLock", "create_memory_store"]
