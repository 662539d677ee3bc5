"""
Token types for patauth.

``PersonalAccessToken`` is the persisted record; ``TokenOptions`` describes a
creation request and ``TokenResult`` what a successful creation hands back.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..errors import InvalidOptionsError

# Separator between abilities in the persisted string. Segments inside a single
# ability ("read:posts") use Config.ability_delimiter instead.
ABILITY_LIST_SEPARATOR = ","
WILDCARD = "*"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on round trips)."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def join_abilities(abilities: List[str]) -> str:
    return ABILITY_LIST_SEPARATOR.join(abilities)


def split_abilities(abilities: str) -> List[str]:
    if not abilities:
        return []
    return abilities.split(ABILITY_LIST_SEPARATOR)


@dataclass
class PersonalAccessToken:
    """Persisted personal access token record.

    ``token`` holds the digest of the client secret, never the secret itself.
    ``id`` is assigned by the storage backend on first insert.
    """
    user_id: int
    token: str
    abilities: str = ""
    name: Optional[str] = None
    id: Optional[int] = None
    created_at: datetime = field(default_factory=utcnow)
    expires_at: Optional[datetime] = None
    last_used_at: Optional[datetime] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Strict check: a token expiring exactly now is still valid."""
        if self.expires_at is None:
            return False
        return (now or utcnow()) > as_utc(self.expires_at)

    def ability_list(self) -> List[str]:
        return split_abilities(self.abilities)

    def can(self, ability: str, delimiter: str = ":") -> bool:
        """Check whether this token grants ``ability``.

        ``*`` grants everything; a trailing ``*`` segment grants every ability
        under that prefix, so ``read:*`` grants ``read:posts``.
        """
        wanted = ability.split(delimiter)
        for granted in self.ability_list():
            if granted == WILDCARD or granted == ability:
                return True
            segments = granted.split(delimiter)
            if segments[-1] == WILDCARD and len(wanted) >= len(segments):
                if wanted[: len(segments) - 1] == segments[:-1]:
                    return True
        return False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        result = asdict(self)
        for key in ("created_at", "expires_at", "last_used_at"):
            value = result[key]
            result[key] = value.isoformat() if value else None
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PersonalAccessToken":
        def _dt(value: Optional[str]) -> Optional[datetime]:
            return as_utc(datetime.fromisoformat(value)) if value else None

        return cls(
            id=data.get("id"),
            user_id=int(data["user_id"]),
            token=data["token"],
            name=data.get("name"),
            abilities=data.get("abilities") or "",
            created_at=_dt(data.get("created_at")) or utcnow(),
            expires_at=_dt(data.get("expires_at")),
            last_used_at=_dt(data.get("last_used_at")),
        )


@dataclass
class TokenOptions:
    """Parameters for issuing a new token."""
    user_id: int
    name: Optional[str] = None
    abilities: List[str] = field(default_factory=list)

    def validate(self) -> None:
        if isinstance(self.user_id, bool) or not isinstance(self.user_id, int):
            raise InvalidOptionsError("user id must be an integer")
        if self.user_id <= 0:
            raise InvalidOptionsError(f"user id must be positive, got {self.user_id}")
        for ability in self.abilities:
            if ABILITY_LIST_SEPARATOR in ability:
                raise InvalidOptionsError(f"ability cannot contain {ABILITY_LIST_SEPARATOR!r}: {ability!r}")


@dataclass
class TokenResult:
    """Outcome of a successful creation."""
    plain_text: str  # what the client receives
    token_id: str  # digest used as the storage key
    record: PersonalAccessToken


__all__ = [
    "PersonalAccessToken",
    "TokenOptions",
    "TokenResult",
    "ABILITY_LIST_SEPARATOR",
    "WILDCARD",
    "utcnow",
    "as_utc",
    "join_abilities",
    "split_abilities",
]
