"""
Registry of trashable entity types.

Static, load-time map from the closed EntityType enumeration to the
configuration the trash lifecycle needs: which table holds the rows,
which column names a row for humans, and which extra columns are shown
next to it in the trash view. Adding a trashable type means adding an
enum member, a registry row and a ``deleted_at`` column on its table;
the lifecycle manager and the sweeper pick it up without changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from storefront_shared.utils.exceptions import ValidationError


class EntityType(str, Enum):
    """Closed set of entity types that share the soft-delete contract."""

    PRODUCT = "product"
    ORDER = "order"
    BRAND = "brand"
    CATEGORY = "category"
    COUPON = "coupon"


@dataclass(frozen=True)
class EntityConfig:
    """
    Per-type trash configuration.

    Attributes:
        table_name: Table holding the rows (must carry ``deleted_at``).
        display_column: Column used as the row's display name.
        extra_columns: Listing context only, never used for lifecycle logic.
        parent_column: Self-referencing column; rows with live children
            cannot be trashed.
        unique_columns: Columns unique among live rows; a trashed row
            cannot be restored while a live row holds the same value.
    """

    table_name: str
    display_column: str
    extra_columns: tuple[str, ...] = ()
    parent_column: str | None = None
    unique_columns: tuple[str, ...] = ()

    @property
    def listing_columns(self) -> tuple[str, ...]:
        """Columns selected when listing trashed rows."""
        return ("id", self.display_column, "deleted_at", *self.extra_columns)


ENTITY_REGISTRY: Mapping[EntityType, EntityConfig] = MappingProxyType({
    EntityType.PRODUCT: EntityConfig(
        table_name="products",
        display_column="name",
        extra_columns=("sku", "price_cents", "quantity", "category_id", "images"),
        unique_columns=("slug",),
    ),
    EntityType.ORDER: EntityConfig(
        table_name="orders",
        display_column="order_number",
        extra_columns=("total_amount_cents", "status", "payment_status"),
    ),
    EntityType.BRAND: EntityConfig(
        table_name="brands",
        display_column="name",
        extra_columns=("slug", "logo_url"),
        unique_columns=("slug",),
    ),
    EntityType.CATEGORY: EntityConfig(
        table_name="categories",
        display_column="name",
        extra_columns=("slug", "image_url"),
        parent_column="parent_id",
        unique_columns=("slug",),
    ),
    EntityType.COUPON: EntityConfig(
        table_name="coupons",
        display_column="code",
        extra_columns=("discount_type", "discount_value", "is_active"),
    ),
})

_missing = set(EntityType) - set(ENTITY_REGISTRY)
if _missing:
    raise RuntimeError(f"Trash registry is missing entity types: {sorted(t.value for t in _missing)}")


def parse_entity_type(value: EntityType | str) -> EntityType:
    """
    Coerce a string such as "brand" into an EntityType.

    Raises:
        ValidationError: If the value is not a trashable entity type.
    """
    if isinstance(value, EntityType):
        return value
    try:
        return EntityType(str(value).lower())
    except ValueError:
        raise ValidationError(
            f"Invalid entity type: {value}",
            field="entity_type",
            allowed=[t.value for t in EntityType],
        )


def get_entity_config(entity_type: EntityType | str) -> EntityConfig:
    """Look up the trash configuration for an entity type."""
    return ENTITY_REGISTRY[parse_entity_type(entity_type)]


def all_entity_types() -> list[EntityType]:
    """Registered types in declaration order."""
    return list(ENTITY_REGISTRY)
