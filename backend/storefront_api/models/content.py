"""
Storefront Content Models: HomepageSection.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, new_id


class HomepageSection(TimestampMixin, Base):
    """
    Editable homepage block (hero, featured products, banner, ...).
    Sections are hard-deleted; they are not part of the trash.
    """

    __tablename__ = "homepage_sections"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    section_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    title: Mapped[Optional[str]] = mapped_column(Text)
    subtitle: Mapped[Optional[str]] = mapped_column(Text)
    badge_text: Mapped[Optional[str]] = mapped_column(Text)
    content: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(Text)
    is_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    starts_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
