"""
patauth Python Package

Personal access tokens for API clients: issue, validate and revoke opaque
tokens against a pluggable storage backend.
"""

__version__ = "0.1.0"

from .config import Config, SigningMethod
from .errors import (
    PatAuthError,
    InvalidConfigurationError,
    InvalidOptionsError,
    TokenError,
    TokenNotFoundError,
    TokenExpiredError,
    TokenInvalidError,
    InvalidFormatError,
    StorageError,
    StorageDriverNilError,
    StorageFailureError,
    OperationCancelledError,
)
from .token import (
    PersonalAccessToken,
    TokenOptions,
    TokenResult,
    hash_token,
    create_token,
    validate_token,
    revoke_token,
)
from .tokenstore import (
    TokenStore,
    MemoryTokenStore,
    SQLTokenStore,
    RedisTokenStore,
    StorageConfig,
    StorageType,
    create_token_store,
)
from .service import TokenService, create_token_service

__all__ = [
    "Config",
    "SigningMethod",
    "PersonalAccessToken",
    "TokenOptions",
    "TokenResult",
    "hash_token",
    "create_token",
    "validate_token",
    "revoke_token",
    "TokenStore",
    "MemoryTokenStore",
    "SQLTokenStore",
    "RedisTokenStore",
    "StorageConfig",
    "StorageType",
    "create_token_store",
    "TokenService",
    "create_token_service",
    "PatAuthError",
    "InvalidConfigurationError",
    "InvalidOptionsError",
    "TokenError",
    "TokenNotFoundError",
    "TokenExpiredError",
    "TokenInvalidError",
    "InvalidFormatError",
    "StorageError",
    "StorageDriverNilError",
    "StorageFailureError",
    "OperationCancelledError",
]
