"""
Token generation.

A client-facing token has the form ``<id>|<prefix><hex-secret><hex-crc32>``.
Only the SHA-256 digest of the part after ``|`` is persisted.
"""

from __future__ import annotations

import logging
import secrets
import zlib
from typing import TYPE_CHECKING, Optional

from ..errors import InvalidOptionsError, StorageDriverNilError
from .hashing import hash_token
from .types import PersonalAccessToken, TokenOptions, TokenResult, join_abilities, utcnow

if TYPE_CHECKING:  # pragma: no cover
    from ..config import Config

logger = logging.getLogger(__name__)

TOKEN_SEPARATOR = "|"


def compose_secret(random_bytes: bytes, prefix: str = "") -> str:
    """Hex-encode ``random_bytes`` and append a CRC-32 of the hex string."""
    raw = random_bytes.hex()
    # IEEE polynomial rather than Castagnoli; the checksum is appended, never verified
    checksum = zlib.crc32(raw.encode("ascii")) & 0xFFFFFFFF
    return f"{prefix}{raw}{checksum:x}"


def format_plain_text(token_id: int, secret: str) -> str:
    return f"{token_id}{TOKEN_SEPARATOR}{secret}"


class TokenGenerator:
    """Issues new tokens against the configured storage backend."""

    def __init__(self, options: Optional[TokenOptions], config: "Config"):
        self.options = options
        self.config = config

    def generate_secret(self) -> str:
        # secrets draws from the OS CSPRNG; failures propagate, no fallback source
        return compose_secret(secrets.token_bytes(self.config.token_length), self.config.token_prefix)

    async def create(self) -> TokenResult:
        """
        Generate, persist and return a new token.

        Raises:
            InvalidOptionsError: options missing or invalid
            StorageDriverNilError: no storage configured
            InvalidConfigurationError: config failed validation
            StorageFailureError: the backend rejected the record
        """
        if self.options is None:
            raise InvalidOptionsError("token options required")
        self.options.validate()
        if self.config.storage is None:
            raise StorageDriverNilError()
        self.config.validate()

        secret = self.generate_secret()
        digest = hash_token(secret)

        now = utcnow()
        ttl = self.config.token_ttl
        record = PersonalAccessToken(
            user_id=self.options.user_id,
            name=self.options.name,
            token=digest,
            abilities=join_abilities(self.options.abilities),
            created_at=now,
            expires_at=now + ttl if ttl is not None else None,
        )

        await self.config.storage.store_token(record)
        logger.info("Issued token id=%s for user %s", record.id, record.user_id)

        return TokenResult(
            plain_text=format_plain_text(record.id, secret),
            token_id=digest,
            record=record,
        )


async def create_token(options: Optional[TokenOptions], config: "Config") -> str:
    """Issue a token and return the string handed to the client."""
    result = await TokenGenerator(options, config).create()
    return result.plain_text


__all__ = ["TokenGenerator", "create_token", "compose_secret", "format_plain_text", "TOKEN_SEPARATOR"]
