"""
Trash Log Model.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class TrashLog(Base):
    """
    Append-only audit record of trash lifecycle transitions.

    Invariants:
    - Written only by the trash lifecycle manager and the retention sweeper
    - Never updated or deleted
    - entity_name is a snapshot taken at the time of the action, so the
      entry stays meaningful after the row is purged
    - performed_by is NULL for system actions (retention sweep)
    """

    __tablename__ = "trash_log"

    # Integer key keeps insertion order as a tie-breaker for equal created_at
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entity_type: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    entity_id: Mapped[str] = mapped_column(String(36), nullable=False)
    entity_name: Mapped[str] = mapped_column(Text, nullable=False)
    action: Mapped[str] = mapped_column(String(30), nullable=False)  # trashed, restored, permanently_deleted
    performed_by: Mapped[Optional[str]] = mapped_column(String(64))
    performed_by_email: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )

    __table_args__ = (
        Index("ix_trash_log_entity", "entity_type", "entity_id"),
    )

    def __repr__(self) -> str:
        return f"<TrashLog({self.entity_type}:{self.entity_id} {self.action})>"
