"""Storage backend selection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy.engine import Engine

from ..errors import InvalidConfigurationError
from .memory import MemoryTokenStore
from .redis import RedisTokenStore
from .sql import SQLTokenStore
from .store import TokenStore

logger = logging.getLogger(__name__)


class StorageType(str, Enum):
    MEMORY = "memory"
    SQL = "sql"
    REDIS = "redis"


@dataclass
class StorageConfig:
    """Which backend to build and what it needs."""
    type: StorageType = StorageType.MEMORY
    engine: Optional[Engine] = None
    redis_url: Optional[str] = None
    redis_prefix: str = "patauth:token"
    create_schema: bool = False


def create_token_store(config: Optional[StorageConfig] = None) -> TokenStore:
    """
    Build a token store from configuration.

    Args:
        config: Backend selection; defaults to the in-memory store.

    Returns:
        Configured token store

    Raises:
        InvalidConfigurationError: unknown type or missing engine/URL
    """
    config = config or StorageConfig()
    try:
        storage_type = StorageType(config.type)
    except ValueError:
        raise InvalidConfigurationError(f"unknown storage type: {config.type!r}")

    if storage_type is StorageType.MEMORY:
        return MemoryTokenStore()

    if storage_type is StorageType.SQL:
        if config.engine is None:
            raise InvalidConfigurationError("SQLAlchemy engine is required for sql storage")
        store = SQLTokenStore(config.engine)
        if config.create_schema:
            store.create_schema()
        return store

    if not config.redis_url:
        raise InvalidConfigurationError("redis_url is required for redis storage")
    logger.info("Using Redis token store with prefix %s", config.redis_prefix)
    return RedisTokenStore(url=config.redis_url, prefix=config.redis_prefix)


__all__ = ["StorageType", "StorageConfig", "create_token_store"]
