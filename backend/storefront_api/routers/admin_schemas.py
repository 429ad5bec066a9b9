"""
Pydantic schemas for admin API endpoints.
Centralized to avoid circular imports between routers and services.

Prices are integer cents throughout. Domain rules (price > 0, stock >= 0,
slug uniqueness) are enforced by the services so they surface as 400
validation errors, not as schema errors.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from storefront_shared.config.constants import Limits, ProductType


# =============================================================================
# Common Schemas
# =============================================================================


class BulkIdsRequest(BaseModel):
    ids: list[str] = Field(min_length=1, max_length=Limits.MAX_BULK_ITEMS)


class BulkActionResult(BaseModel):
    requested: int
    affected: int


# =============================================================================
# Brand Schemas
# =============================================================================


class BrandOutput(BaseModel):
    id: str
    name: str
    slug: str
    description: str | None = None
    logo_url: str | None = None
    website_url: str | None = None
    is_active: bool
    product_count: int = 0
    created_at: datetime
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class BrandCreate(BaseModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    slug: str | None = None
    description: str | None = None
    logo_url: str | None = None
    website_url: str | None = None
    is_active: bool = True


class BrandUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    slug: str | None = None
    description: str | None = None
    logo_url: str | None = None
    website_url: str | None = None
    is_active: bool | None = None


# =============================================================================
# Category Schemas
# =============================================================================


class CategoryOutput(BaseModel):
    id: str
    name: str
    slug: str
    description: str | None = None
    image_url: str | None = None
    parent_id: str | None = None
    sort_order: int
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    slug: str | None = None
    description: str | None = None
    image_url: str | None = None
    parent_id: str | None = None
    sort_order: int | None = None
    is_active: bool = True


class CategoryUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    slug: str | None = None
    description: str | None = None
    image_url: str | None = None
    parent_id: str | None = None
    sort_order: int | None = None
    is_active: bool | None = None


class CategoryImportRow(BaseModel):
    name: str
    slug: str | None = None
    parent_name: str | None = None
    description: str | None = None


class ImportResult(BaseModel):
    created: int = 0
    skipped: int = 0
    errors: list[str] = []


# =============================================================================
# Product Schemas
# =============================================================================


class VariantOutput(BaseModel):
    id: str
    product_id: str
    name: str
    sku: str | None = None
    price_cents: int | None = None
    compare_at_price_cents: int | None = None
    quantity: int
    options: dict[str, Any] = {}
    image_url: str | None = None
    is_active: bool

    class Config:
        from_attributes = True


class VariantCreate(BaseModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    sku: str | None = None
    price_cents: int | None = None
    compare_at_price_cents: int | None = None
    quantity: int = 0
    options: dict[str, Any] = {}
    image_url: str | None = None
    is_active: bool = True


class VariantUpdate(BaseModel):
    name: str | None = None
    sku: str | None = None
    price_cents: int | None = None
    compare_at_price_cents: int | None = None
    quantity: int | None = None
    options: dict[str, Any] | None = None
    image_url: str | None = None
    is_active: bool | None = None


class GroupItemOutput(BaseModel):
    id: str
    parent_product_id: str
    child_product_id: str
    child_name: str | None = None
    quantity: int
    sort_order: int
    discount_percentage: float

    class Config:
        from_attributes = True


class GroupItemCreate(BaseModel):
    child_product_id: str
    quantity: int = Field(default=1, ge=1)
    sort_order: int = 0
    discount_percentage: float = Field(default=0, ge=0, le=100)


class AttributeDefinitionOutput(BaseModel):
    id: str
    product_id: str
    attribute_name: str
    attribute_values: list[str] = []
    sort_order: int
    created_at: datetime

    class Config:
        from_attributes = True


class AttributeDefinitionCreate(BaseModel):
    attribute_name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    attribute_values: list[str] = []
    sort_order: int | None = None


class AttributeDefinitionUpdate(BaseModel):
    attribute_name: str | None = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    attribute_values: list[str] | None = None
    sort_order: int | None = None


class ProductOutput(BaseModel):
    id: str
    name: str
    slug: str
    sku: str | None = None
    barcode: str | None = None
    product_type: str
    price_cents: int
    compare_at_price_cents: int | None = None
    cost_price_cents: int | None = None
    quantity: int
    low_stock_threshold: int
    is_low_stock: bool
    category_id: str | None = None
    brand_id: str | None = None
    description: str | None = None
    images: list[str] = []
    tags: list[str] = []
    weight: float | None = None
    dimensions: dict[str, Any] | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    meta_keywords: list[str] = []
    publish_at: datetime | None = None
    is_active: bool
    is_featured: bool
    created_at: datetime
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    slug: str | None = None
    sku: str | None = None
    barcode: str | None = None
    product_type: str = ProductType.SIMPLE
    price_cents: int = 0
    compare_at_price_cents: int | None = None
    cost_price_cents: int | None = None
    quantity: int = 0
    low_stock_threshold: int = Limits.DEFAULT_LOW_STOCK_THRESHOLD
    category_id: str | None = None
    brand_id: str | None = None
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    images: list[str] = []
    tags: list[str] = []
    weight: float | None = None
    dimensions: dict[str, Any] | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    meta_keywords: list[str] = []
    publish_at: datetime | None = None
    is_active: bool = True
    is_featured: bool = False


class ProductUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    slug: str | None = None
    sku: str | None = None
    barcode: str | None = None
    product_type: str | None = None
    price_cents: int | None = None
    compare_at_price_cents: int | None = None
    cost_price_cents: int | None = None
    quantity: int | None = None
    low_stock_threshold: int | None = None
    category_id: str | None = None
    brand_id: str | None = None
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    images: list[str] | None = None
    tags: list[str] | None = None
    weight: float | None = None
    dimensions: dict[str, Any] | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    meta_keywords: list[str] | None = None
    publish_at: datetime | None = None
    is_active: bool | None = None
    is_featured: bool | None = None


class ProductImportRow(BaseModel):
    """One parsed row of a product import file."""

    name: str
    sku: str | None = None
    product_type: str = ProductType.SIMPLE
    price_cents: int = 0
    compare_at_price_cents: int | None = None
    quantity: int = 0
    category_name: str | None = None
    brand_name: str | None = None
    description: str | None = None
    tags: list[str] = []
    images: list[str] = []
    is_active: bool = True


# =============================================================================
# Homepage Section Schemas
# =============================================================================


class HomepageSectionOutput(BaseModel):
    id: str
    section_type: str
    title: str | None = None
    subtitle: str | None = None
    badge_text: str | None = None
    content: dict[str, Any] = {}
    image_url: str | None = None
    is_enabled: bool
    sort_order: int
    starts_at: datetime | None = None
    expires_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class HomepageSectionCreate(BaseModel):
    section_type: str = Field(min_length=1, max_length=50)
    title: str | None = None
    subtitle: str | None = None
    badge_text: str | None = None
    content: dict[str, Any] = {}
    image_url: str | None = None
    is_enabled: bool = True
    sort_order: int | None = None
    starts_at: datetime | None = None
    expires_at: datetime | None = None


class HomepageSectionUpdate(BaseModel):
    title: str | None = None
    subtitle: str | None = None
    badge_text: str | None = None
    content: dict[str, Any] | None = None
    image_url: str | None = None
    is_enabled: bool | None = None
    sort_order: int | None = None
    starts_at: datetime | None = None
    expires_at: datetime | None = None


# =============================================================================
# Trash Schemas
# =============================================================================


class TrashedItemOutput(BaseModel):
    entity_type: str
    id: str
    name: str
    deleted_at: datetime
    extra: dict[str, Any] = {}


class TrashRef(BaseModel):
    entity_type: str
    id: str


class TrashBulkRequest(BaseModel):
    items: list[TrashRef] = Field(min_length=1, max_length=Limits.MAX_BULK_ITEMS)


class TrashActionResult(BaseModel):
    success: bool
    entity_type: str
    id: str
    action: str


class TrashBulkResult(BaseModel):
    requested: int
    affected: int


class TrashLogOutput(BaseModel):
    id: int
    entity_type: str
    entity_id: str
    entity_name: str
    action: str
    performed_by: str | None = None
    performed_by_email: str | None = None
    created_at: datetime


class SweepOutput(BaseModel):
    success: bool
    cleaned: dict[str, int]
