"""
SQLAlchemy ORM Models Package.

All models are organized into domain-specific modules:
- base: Base class, TimestampMixin, SoftDeleteMixin
- catalog: Category, Brand, Product, ProductVariant, ProductGroupItem,
  ProductAttributeDefinition
- sales: Order, Coupon
- content: HomepageSection
- trash: TrashLog
"""

# Base classes
from .base import Base, TimestampMixin, SoftDeleteMixin, utcnow, new_id, as_utc

# Catalog
from .catalog import (
    Category,
    Brand,
    Product,
    ProductVariant,
    ProductGroupItem,
    ProductAttributeDefinition,
)

# Sales
from .sales import Order, Coupon

# Storefront content
from .content import HomepageSection

# Trash audit log
from .trash import TrashLog

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "SoftDeleteMixin",
    "utcnow",
    "new_id",
    "as_utc",
    # Catalog
    "Category",
    "Brand",
    "Product",
    "ProductVariant",
    "ProductGroupItem",
    "ProductAttributeDefinition",
    # Sales
    "Order",
    "Coupon",
    # Content
    "HomepageSection",
    # Trash
    "TrashLog",
]
