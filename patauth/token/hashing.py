"""Digest helpers binding a client secret to its storage key."""

from __future__ import annotations

import hashlib
import hmac


def hash_token(secret: str) -> str:
    """Return the SHA-256 hex digest used as the storage key for ``secret``."""
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


def digests_match(expected: str, actual: str) -> bool:
    return hmac.compare_digest(expected.encode("utf-8"), actual.encode("utf-8"))


__all__ = ["hash_token", "digests_match"]
