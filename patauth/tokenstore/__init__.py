"""
Token store package for patauth.

This package provides the storage driver interface and its in-memory,
relational (SQLAlchemy) and Redis implementations. All backends raise the
same error types so callers stay storage-agnostic.
"""

from .store import TokenStore, ensure_usable
from .memory import MemoryTokenStore, create_memory_store
from .sql import SQLTokenStore, PersonalAccessTokenRow
from .redis import RedisTokenStore
from .factory import StorageConfig, StorageType, create_token_store

__all__ = [
    # Interface
    "TokenStore",
    "ensure_usable",

    # Implementations
    "MemoryTokenStore",
    "create_memory_store",
    "SQLTokenStore",
    "PersonalAccessTokenRow",
    "RedisTokenStore",

    # Factory
    "StorageConfig",
    "StorageType",
    "create_token_store",
]
