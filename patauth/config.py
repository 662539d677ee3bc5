"""
Token policy configuration.

A single explicit ``Config`` object is passed to every lifecycle operation;
there is no process-wide default client.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import TYPE_CHECKING, Optional

from cryptography.hazmat.primitives.asymmetric import rsa

from .errors import InvalidConfigurationError
from .token.touch import TouchDispatcher
from .token.types import ABILITY_LIST_SEPARATOR

if TYPE_CHECKING:  # pragma: no cover
    from .tokenstore.store import TokenStore

logger = logging.getLogger(__name__)

MIN_TOKEN_LENGTH = 16


class SigningMethod(str, Enum):
    """Signing algorithms accepted by the configuration surface."""
    HS256 = "HS256"  # HMAC with SHA-256
    RS256 = "RS256"  # RSA with SHA-256


@dataclass
class Config:
    """Token policy and wiring for generation, validation and revocation.

    Attributes:
        token_length: Number of random bytes in each secret (hex doubles it).
        token_prefix: Literal prefix placed in front of the hex secret.
        expire_at: Lifetime of new tokens; ``None`` or zero means unlimited.
        signing_method: Reserved for a signed-token mode; validated only.
        signing_key: HMAC key material (random per instance by default).
        private_key: RSA private key, required with ``RS256``.
        public_key: RSA public key, required with ``RS256``.
        ability_delimiter: Separator inside one ability (``read:posts``).
        storage: Backend used by every lifecycle operation.
        touch_dispatcher: Runs background last-used updates.
    """
    token_length: int = 32
    token_prefix: str = ""
    expire_at: Optional[timedelta] = field(default_factory=lambda: timedelta(hours=24))
    signing_method: SigningMethod = SigningMethod.HS256
    signing_key: Optional[str] = field(default_factory=lambda: secrets.token_hex(32), repr=False)
    private_key: Optional[rsa.RSAPrivateKey] = field(default=None, repr=False)
    public_key: Optional[rsa.RSAPublicKey] = field(default=None, repr=False)
    ability_delimiter: str = ":"
    storage: Optional["TokenStore"] = None
    touch_dispatcher: TouchDispatcher = field(default_factory=TouchDispatcher, repr=False)

    def validate(self) -> None:
        """Raise ``InvalidConfigurationError`` if the config is unusable."""
        try:
            method = SigningMethod(self.signing_method)
        except ValueError:
            raise InvalidConfigurationError(f"unsupported signing method: {self.signing_method!r}")

        if method is SigningMethod.HS256 and not self.signing_key:
            raise InvalidConfigurationError("signing key cannot be empty")
        if method is SigningMethod.RS256:
            if self.private_key is None or self.public_key is None:
                raise InvalidConfigurationError("missing RSA key pair")
            if not isinstance(self.private_key, rsa.RSAPrivateKey) or not isinstance(self.public_key, rsa.RSAPublicKey):
                raise InvalidConfigurationError("RS256 requires RSA key objects")

        if self.token_length < MIN_TOKEN_LENGTH:
            raise InvalidConfigurationError(
                f"token length must be at least {MIN_TOKEN_LENGTH}, got {self.token_length}"
            )
        if "|" in self.token_prefix:
            raise InvalidConfigurationError("token prefix cannot contain '|'")
        if self.expire_at is not None and self.expire_at < timedelta(0):
            raise InvalidConfigurationError("expire_at cannot be negative")
        if not self.ability_delimiter:
            raise InvalidConfigurationError("ability delimiter cannot be empty")
        if self.ability_delimiter == ABILITY_LIST_SEPARATOR:
            # abilities are persisted comma-joined
            raise InvalidConfigurationError("ability delimiter cannot be ','")

    @property
    def token_ttl(self) -> Optional[timedelta]:
        """Lifetime applied to new tokens, or ``None`` for unlimited."""
        if self.expire_at is None or self.expire_at <= timedelta(0):
            return None
        return self.expire_at


__all__ = ["Config", "SigningMethod", "MIN_TOKEN_LENGTH", "ABILITY_LIST_SEPARATOR"]
