"""
Exception hierarchy for patauth.

Every public operation either returns a result or raises exactly one of the
errors below. Storage backends translate their own failures into these types
so callers stay storage-agnostic.
"""

from typing import Optional


class PatAuthError(Exception):
    """Base error for all patauth failures."""

    code = "patauth_error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.__class__.default_message())
        self.message = str(self)

    @classmethod
    def default_message(cls) -> str:
        return cls.code.replace("_", " ")


class InvalidConfigurationError(PatAuthError):
    """Configuration rejected at construction time."""
    code = "invalid_configuration"


class InvalidOptionsError(PatAuthError):
    """Token creation request is malformed (missing options, bad user id)."""
    code = "invalid_options"


class TokenError(PatAuthError):
    """Base class for token lifecycle failures."""
    code = "token_error"


class TokenNotFoundError(TokenError):
    code = "token_not_found"


class TokenExpiredError(TokenError):
    code = "token_expired"


class TokenInvalidError(TokenError):
    """Hash mismatch or generic validation failure."""
    code = "token_invalid"


class InvalidFormatError(TokenInvalidError):
    """Client token string is not ``<id>|<secret>``."""
    code = "invalid_token_format"


class StorageError(PatAuthError):
    code = "storage_error"


class StorageDriverNilError(StorageError):
    """No storage backend configured."""
    code = "storage_driver_nil"

    @classmethod
    def default_message(cls) -> str:
        return "storage driver cannot be None"


class StorageFailureError(StorageError):
    """A backend operation failed (constraint violation, connection error, ...)."""
    code = "storage_failure"


class OperationCancelledError(PatAuthError):
    """Caller-side cancellation observed before an operation started."""
    code = "cancelled"


__all__ = [
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
