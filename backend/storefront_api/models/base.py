"""
Base class and mixins for all SQLAlchemy ORM models.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Opaque primary key for catalog rows."""
    return str(uuid.uuid4())


def as_utc(value: datetime | None) -> datetime | None:
    """
    Normalize a datetime read back from the database to aware UTC.
    SQLite hands back naive values for DateTime(timezone=True) columns.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class TimestampMixin:
    """
    created_at / updated_at audit timestamps.

    Timestamps are set client-side so that ordering keeps microsecond
    resolution on every backend (SQLite CURRENT_TIMESTAMP has seconds).
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=utcnow, nullable=True
    )


class SoftDeleteMixin(TimestampMixin):
    """
    Mixin for trashable tables.

    Fields added:
    - id: opaque string primary key
    - deleted_at: NULL = live, timestamp = trashed

    A row is LIVE while deleted_at is NULL and TRASHED once it is set.
    Purged rows no longer exist; only the trash log remembers them.
    deleted_at is only ever written by the trash lifecycle manager.
    """

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )

    @property
    def is_trashed(self) -> bool:
        return self.deleted_at is not None

    def __repr__(self) -> str:
        state = "trashed" if self.is_trashed else "live"
        return f"<{self.__class__.__name__}(id={self.id}, {state})>"
