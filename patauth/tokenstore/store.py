"""
Storage driver interface for personal access tokens.

Every backend implements the same five operations and raises the same error
types, so generation, validation and revocation never depend on which backend
is configured.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from ..errors import TokenExpiredError, TokenNotFoundError
from ..token.types import PersonalAccessToken


class TokenStore(ABC):
    """Abstract token storage backend."""

    @abstractmethod
    async def store_token(self, record: PersonalAccessToken) -> None:
        """Insert a new record, assigning ``record.id`` if it is unset.

        Raises:
            StorageFailureError: duplicate digest or backend failure.
        """

    @abstractmethod
    async def find_by_hash(self, digest: str) -> PersonalAccessToken:
        """Look a record up by digest.

        Raises:
            TokenNotFoundError: no record with this digest.
            TokenExpiredError: the record is past its ``expires_at``.
        """

    @abstractmethod
    async def find_by_id(self, token_id: int) -> PersonalAccessToken:
        """Look a record up by id, with the same semantics as ``find_by_hash``."""

    @abstractmethod
    async def revoke_token(self, digest: str) -> None:
        """Delete the record with this digest.

        Raises:
            TokenNotFoundError: no record with this digest (revoke is not idempotent).
        """

    @abstractmethod
    async def touch_last_used(self, token_id: int) -> None:
        """Set ``last_used_at`` to now.

        Raises:
            TokenNotFoundError: no record with this id.
        """


def ensure_usable(
    record: Optional[PersonalAccessToken],
    now: Optional[datetime] = None,
) -> PersonalAccessToken:
    """Apply the shared not-found/expired checks to a looked-up record."""
    if record is None:
        raise TokenNotFoundError()
    if record.is_expired(now):
        raise TokenExpiredError()
    return record


__all__ = ["TokenStore", "ensure_usable"]
