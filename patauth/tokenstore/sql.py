"""
Relational token store backed by SQLAlchemy.

All tokens live in a single ``personal_access_tokens`` table keyed by ``id``
with a unique index on ``token`` (the digest). Session work is blocking, so
each operation runs in a worker thread to keep the event loop free.

Tables:
  - personal_access_tokens: one row per issued token
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text, delete, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

from ..errors import StorageFailureError, TokenNotFoundError
from ..token.types import PersonalAccessToken, as_utc, utcnow
from .store import TokenStore, ensure_usable

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class PersonalAccessTokenRow(Base):
    """ORM mapping for ``PersonalAccessToken`` records."""
    __tablename__ = "personal_access_tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    token: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    abilities: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
    last_used_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    def to_record(self) -> PersonalAccessToken:
        return PersonalAccessToken(
            id=self.id,
            user_id=self.user_id,
            token=self.token,
            name=self.name,
            abilities=self.abilities or "",
            created_at=as_utc(self.created_at),
            expires_at=as_utc(self.expires_at),
            last_used_at=as_utc(self.last_used_at),
        )

    @classmethod
    def from_record(cls, record: PersonalAccessToken) -> "PersonalAccessTokenRow":
        row = cls(
            user_id=record.user_id,
            token=record.token,
            name=record.name,
            abilities=record.abilities,
            created_at=record.created_at,
            expires_at=record.expires_at,
            last_used_at=record.last_used_at,
        )
        if record.id:
            row.id = record.id
        return row

    def __repr__(self):
        return f"<PersonalAccessTokenRow(id={self.id}, user_id={self.user_id}, name={self.name})>"


class SQLTokenStore(TokenStore):
    """Token store delegating to row-level CRUD through SQLAlchemy sessions."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    def create_schema(self) -> None:
        """Create the token table if it does not exist."""
        Base.metadata.create_all(self.engine)

    async def store_token(self, record: PersonalAccessToken) -> None:
        record.id = await asyncio.to_thread(self._insert, record)
        logger.debug("Stored token id=%s", record.id)

    async def find_by_hash(self, digest: str) -> PersonalAccessToken:
        record = await asyncio.to_thread(
            self._select_one, select(PersonalAccessTokenRow).where(PersonalAccessTokenRow.token == digest)
        )
        return ensure_usable(record)

    async def find_by_id(self, token_id: int) -> PersonalAccessToken:
        record = await asyncio.to_thread(
            self._select_one, select(PersonalAccessTokenRow).where(PersonalAccessTokenRow.id == token_id)
        )
        return ensure_usable(record)

    async def revoke_token(self, digest: str) -> None:
        deleted = await asyncio.to_thread(
            self._execute_write, delete(PersonalAccessTokenRow).where(PersonalAccessTokenRow.token == digest)
        )
        if deleted == 0:
            raise TokenNotFoundError()

    async def touch_last_used(self, token_id: int) -> None:
        updated = await asyncio.to_thread(
            self._execute_write,
            update(PersonalAccessTokenRow)
            .where(PersonalAccessTokenRow.id == token_id)
            .values(last_used_at=utcnow()),
        )
        if updated == 0:
            raise TokenNotFoundError()

    # Blocking helpers, run via asyncio.to_thread
    def _insert(self, record: PersonalAccessToken) -> int:
        with self._session_factory() as session:
            try:
                row = PersonalAccessTokenRow.from_record(record)
                session.add(row)
                session.commit()
                return row.id
            except SQLAlchemyError as e:
                session.rollback()
                logger.warning("Failed to store token for user %s: %s", record.user_id, e)
                raise StorageFailureError(f"failed to store token: {e}") from e

    def _select_one(self, stmt) -> Optional[PersonalAccessToken]:
        with self._session_factory() as session:
            try:
                row = session.execute(stmt).scalar_one_or_none()
            except SQLAlchemyError as e:
                logger.warning("Token lookup failed: %s", e)
                raise StorageFailureError(f"token lookup failed: {e}") from e
            return row.to_record() if row is not None else None

    def _execute_write(self, stmt) -> int:
        with self._session_factory() as session:
            try:
                result = session.execute(stmt)
                session.commit()
                return result.rowcount
            except SQLAlchemyError as e:
                session.rollback()
                logger.warning("Token update failed: %s", e)
                raise StorageFailureError(f"token update failed: {e}") from e


__all__ = ["SQLTokenStore", "PersonalAccessTokenRow", "Base"]
