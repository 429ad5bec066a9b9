"""
Sales Models: Order, Coupon.

Only the columns the admin panel and the trash need are modelled here;
checkout writes these tables through its own service.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Float, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, SoftDeleteMixin


class Order(SoftDeleteMixin, Base):
    """
    Customer order.
    Inherits: id, created_at, updated_at, deleted_at from SoftDeleteMixin.
    """

    __tablename__ = "orders"

    order_number: Mapped[str] = mapped_column(String(50), nullable=False)
    customer_email: Mapped[Optional[str]] = mapped_column(Text)
    total_amount_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[str] = mapped_column(String(30), default="pending", nullable=False)
    payment_status: Mapped[str] = mapped_column(String(30), default="unpaid", nullable=False)

    __table_args__ = (
        UniqueConstraint("order_number", name="uq_orders_order_number"),
    )


class Coupon(SoftDeleteMixin, Base):
    """
    Discount coupon.
    Inherits: id, created_at, updated_at, deleted_at from SoftDeleteMixin.
    """

    __tablename__ = "coupons"

    code: Mapped[str] = mapped_column(String(50), nullable=False)
    discount_type: Mapped[str] = mapped_column(String(20), default="percentage", nullable=False)
    discount_value: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
