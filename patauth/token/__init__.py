"""
Token module initialization
"""

from .types import (
    PersonalAccessToken,
    TokenOptions,
    TokenResult,
    ABILITY_LIST_SEPARATOR,
    join_abilities,
    split_abilities,
)
from .hashing import hash_token
from .generator import TokenGenerator, create_token, compose_secret
from .validator import validate_token, parse_token
from .revoke import revoke_token
from .touch import TouchDispatcher

__all__ = [
    # Token types
    "PersonalAccessToken",
    "TokenOptions",
    "TokenResult",
    "ABILITY_LIST_SEPARATOR",
    "join_abilities",
    "split_abilities",

    # Lifecycle
    "hash_token",
    "TokenGenerator",
    "create_token",
    "compose_secret",
    "validate_token",
    "parse_token",
    "revoke_token",
    "TouchDispatcher",
]
