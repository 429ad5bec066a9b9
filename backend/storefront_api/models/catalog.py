"""
Catalog Models: Category, Brand, Product, ProductVariant, ProductGroupItem,
ProductAttributeDefinition.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront_shared.config.constants import Limits, ProductType
from .base import Base, SoftDeleteMixin, TimestampMixin, new_id


class Category(SoftDeleteMixin, Base):
    """
    Product category, optionally nested under a parent category.
    Inherits: id, created_at, updated_at, deleted_at from SoftDeleteMixin.
    """

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(String(Limits.MAX_SLUG_LENGTH), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    image_url: Mapped[Optional[str]] = mapped_column(Text)
    parent_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("categories.id", ondelete="SET NULL"), index=True
    )
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    parent: Mapped[Optional["Category"]] = relationship(
        remote_side="Category.id", foreign_keys=[parent_id]
    )

    __table_args__ = (
        # Slugs are unique among live rows only; a trashed slug is free
        Index(
            "uq_categories_slug_live",
            "slug",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )


class Brand(SoftDeleteMixin, Base):
    """
    Product brand.
    Inherits: id, created_at, updated_at, deleted_at from SoftDeleteMixin.
    """

    __tablename__ = "brands"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(String(Limits.MAX_SLUG_LENGTH), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    logo_url: Mapped[Optional[str]] = mapped_column(Text)
    website_url: Mapped[Optional[str]] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (
        Index(
            "uq_brands_slug_live",
            "slug",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )


class Product(SoftDeleteMixin, Base):
    """
    Sellable product. Prices are stored in cents.
    Grouped products carry no own price (price_cents = 0); it is derived
    from their child items.
    Inherits: id, created_at, updated_at, deleted_at from SoftDeleteMixin.
    """

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(String(Limits.MAX_SLUG_LENGTH), nullable=False)
    sku: Mapped[Optional[str]] = mapped_column(String(100), index=True)
    barcode: Mapped[Optional[str]] = mapped_column(String(100))
    product_type: Mapped[str] = mapped_column(
        String(20), default=ProductType.SIMPLE, nullable=False
    )
    price_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    compare_at_price_cents: Mapped[Optional[int]] = mapped_column(Integer)
    cost_price_cents: Mapped[Optional[int]] = mapped_column(Integer)
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    low_stock_threshold: Mapped[int] = mapped_column(
        Integer, default=Limits.DEFAULT_LOW_STOCK_THRESHOLD, nullable=False
    )
    category_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("categories.id", ondelete="SET NULL"), index=True
    )
    brand_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("brands.id", ondelete="SET NULL"), index=True
    )
    description: Mapped[Optional[str]] = mapped_column(Text)
    images: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    tags: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    weight: Mapped[Optional[float]] = mapped_column(Float)
    dimensions: Mapped[Optional[dict]] = mapped_column(JSON)
    meta_title: Mapped[Optional[str]] = mapped_column(Text)
    meta_description: Mapped[Optional[str]] = mapped_column(Text)
    meta_keywords: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    publish_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    # Published flag; independent of the trash lifecycle
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    category: Mapped[Optional["Category"]] = relationship(foreign_keys=[category_id])
    brand: Mapped[Optional["Brand"]] = relationship(foreign_keys=[brand_id])
    variants: Mapped[list["ProductVariant"]] = relationship(
        back_populates="product",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ProductVariant.created_at",
    )
    group_items: Mapped[list["ProductGroupItem"]] = relationship(
        back_populates="parent_product",
        cascade="all, delete-orphan",
        passive_deletes=True,
        foreign_keys="ProductGroupItem.parent_product_id",
        order_by="ProductGroupItem.sort_order",
    )
    attribute_definitions: Mapped[list["ProductAttributeDefinition"]] = relationship(
        back_populates="product",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ProductAttributeDefinition.sort_order",
    )

    __table_args__ = (
        Index(
            "uq_products_slug_live",
            "slug",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
        CheckConstraint("quantity >= 0", name="ck_products_quantity_non_negative"),
    )

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.low_stock_threshold


class ProductVariant(TimestampMixin, Base):
    """
    Variant of a variable product (size, colour, ...).
    Variants live and die with their product; they are not trashable.
    """

    __tablename__ = "product_variants"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    product_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    sku: Mapped[Optional[str]] = mapped_column(String(100))
    price_cents: Mapped[Optional[int]] = mapped_column(Integer)
    compare_at_price_cents: Mapped[Optional[int]] = mapped_column(Integer)
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    options: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    product: Mapped["Product"] = relationship(back_populates="variants")


class ProductGroupItem(TimestampMixin, Base):
    """
    Child product of a grouped/bundle product.
    """

    __tablename__ = "product_group_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    parent_product_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    child_product_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    discount_percentage: Mapped[float] = mapped_column(Float, default=0, nullable=False)

    parent_product: Mapped["Product"] = relationship(
        back_populates="group_items", foreign_keys=[parent_product_id]
    )
    child_product: Mapped["Product"] = relationship(foreign_keys=[child_product_id])

    __table_args__ = (
        UniqueConstraint("parent_product_id", "child_product_id", name="uq_product_group_item"),
        CheckConstraint("parent_product_id <> child_product_id", name="ck_group_item_not_self"),
    )


class ProductAttributeDefinition(TimestampMixin, Base):
    """
    Attribute a variable product varies on ("Size": S, M, L).
    Variant options take their keys and values from these definitions.
    """

    __tablename__ = "product_attribute_definitions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    product_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    attribute_name: Mapped[str] = mapped_column(Text, nullable=False)
    attribute_values: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    product: Mapped["Product"] = relationship(back_populates="attribute_definitions")

    __table_args__ = (
        UniqueConstraint("product_id", "attribute_name", name="uq_product_attribute_name"),
    )
