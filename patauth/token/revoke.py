"""Token revocation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .validator import validate_token

if TYPE_CHECKING:  # pragma: no cover
    from ..config import Config

logger = logging.getLogger(__name__)


async def revoke_token(raw: str, config: "Config") -> None:
    """Delete a token that currently passes validation.

    Unknown, expired and already-revoked tokens fail with the error the
    validator raises for them. Validation and deletion are two separate
    storage calls, not one transaction.
    """
    record = await validate_token(raw, config)
    await config.storage.revoke_token(record.token)
    logger.info("Revoked token id=%s for user %s", record.id, record.user_id)
