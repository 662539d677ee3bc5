"""Token validation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Tuple

from ..errors import InvalidFormatError, StorageDriverNilError, TokenExpiredError, TokenInvalidError
from .generator import TOKEN_SEPARATOR
from .hashing import digests_match, hash_token
from .types import PersonalAccessToken

if TYPE_CHECKING:  # pragma: no cover
    from ..config import Config

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def parse_token(raw: str) -> Tuple[str, str]:
    """Split a client token into its ``(id, secret)`` parts.

    The id part is returned as given; lookups always go through the digest
    of the secret.
    """
    if raw.startswith(BEARER_PREFIX):
        raw = raw[len(BEARER_PREFIX):]
    parts = raw.split(TOKEN_SEPARATOR)
    if len(parts) != 2:
        raise InvalidFormatError()
    return parts[0], parts[1]


async def validate_token(raw: str, config: "Config") -> PersonalAccessToken:
    """
    Validate a client-supplied token string.

    On success a background update of ``last_used_at`` is scheduled; its
    outcome never affects the result.

    Raises:
        InvalidFormatError: not ``<id>|<secret>``
        TokenNotFoundError: no record for this secret
        TokenExpiredError: record past its expiry
        TokenInvalidError: stored digest does not match
    """
    store = config.storage
    if store is None:
        raise StorageDriverNilError()

    _, secret = parse_token(raw)
    digest = hash_token(secret)

    record = await store.find_by_hash(digest)

    if not digests_match(record.token, digest):
        logger.warning("Storage returned mismatching digest for token id=%s", record.id)
        raise TokenInvalidError()

    if record.is_expired():
        raise TokenExpiredError()

    config.touch_dispatcher.schedule(store, record.id)
    logger.debug("Validated token id=%s", record.id)
    return record


__all__ = ["validate_token", "parse_token", "BEARER_PREFIX"]
