"""
Token service for patauth.

This module provides the explicit client object that wraps token creation,
validation and revocation around a single validated ``Config``.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from ..config import Config
from ..errors import OperationCancelledError, PatAuthError, StorageDriverNilError
from ..monitoring.metrics import get_registry
from ..token.generator import create_token
from ..token.revoke import revoke_token
from ..token.types import PersonalAccessToken, TokenOptions
from ..token.validator import validate_token

logger = logging.getLogger(__name__)


class TokenService:
    """
    Issues, validates and revokes personal access tokens.

    Construction validates the configuration, so a service that exists is
    always backed by a usable config and storage driver.
    """

    def __init__(self, config: Config):
        """
        Initialize the token service.

        Raises:
            InvalidConfigurationError: config failed validation
            StorageDriverNilError: no storage configured
        """
        config.validate()
        if config.storage is None:
            raise StorageDriverNilError()
        self.config = config
        self._metrics = get_registry()
        logger.info("Token service initialized with %s", type(config.storage).__name__)

    @staticmethod
    def _check_cancelled(cancel: Optional[asyncio.Event]) -> None:
        if cancel is not None and cancel.is_set():
            raise OperationCancelledError()

    async def create_token(self, options: Optional[TokenOptions], cancel: Optional[asyncio.Event] = None) -> str:
        """
        Issue a new token.

        Args:
            options: Owner, label and abilities of the token
            cancel: Optional event; if already set the call fails before storage is touched

        Returns:
            Client-facing token string ``<id>|<secret>``
        """
        self._check_cancelled(cancel)
        plain_text = await create_token(options, self.config)
        self._metrics.observe_issued()
        return plain_text

    async def validate_token(self, raw: str, cancel: Optional[asyncio.Event] = None) -> PersonalAccessToken:
        """
        Validate a client token.

        Args:
            raw: Token string, optionally prefixed with ``Bearer ``
            cancel: Optional cancellation event

        Returns:
            The stored token record
        """
        self._check_cancelled(cancel)
        try:
            record = await validate_token(raw, self.config)
        except PatAuthError as e:
            self._metrics.observe_validation(e.code)
            raise
        self._metrics.observe_validation("valid")
        return record

    async def get_token_info(self, raw: str, cancel: Optional[asyncio.Event] = None) -> PersonalAccessToken:
        """Return the record behind a valid token."""
        return await self.validate_token(raw, cancel)

    async def revoke_token(self, raw: str, cancel: Optional[asyncio.Event] = None) -> None:
        """
        Revoke a token that currently passes validation.

        Args:
            raw: Token string, optionally prefixed with ``Bearer ``
            cancel: Optional cancellation event
        """
        self._check_cancelled(cancel)
        await revoke_token(raw, self.config)
        self._metrics.observe_revoked()

    async def close(self) -> None:
        """Wait for outstanding last-used updates."""
        await self.config.touch_dispatcher.drain()

    def get_service_stats(self) -> Dict[str, Any]:
        """Get service statistics."""
        ttl = self.config.token_ttl
        return {
            "storage": type(self.config.storage).__name__,
            "token_length": self.config.token_length,
            "token_prefix": self.config.token_prefix,
            "token_expiry_seconds": ttl.total_seconds() if ttl else None,
            "pending_touches": self.config.touch_dispatcher.pending,
        }


def create_token_service(**kwargs) -> TokenService:
    """
    Factory function to create a token service.

    Args:
        **kwargs: ``Config`` fields

    Returns:
        Configured token service
    """
    return TokenService(Config(**kwargs))
