"""
Product Service.

Handles products, their variants, attribute definitions and grouped-product
items.

Business rules:
- Product type is one of simple, variable, grouped, bundle
- Price must be greater than zero, except for grouped products which
  carry no own price (stored as 0)
- Stock (quantity) can never be negative
- Category and brand, when set, must be live
- Slug derived from the name; a taken derived slug gets a numeric suffix
- Delete moves the product to the trash

Usage:
    from storefront_api.services.domain import ProductService

    service = ProductService(db)
    product = service.create({"name": "Air Max", "price_cents": 12900}, actor)
    service.bulk_set_published([product.id], published=False)
"""

from __future__ import annotations

from typing import Any, Iterable

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from storefront_shared.config.constants import Limits, ProductType
from storefront_shared.config.logging import get_logger, mask_email
from storefront_shared.infrastructure.db import safe_commit
from storefront_shared.infrastructure.notifications import DELETE, INSERT, UPDATE
from storefront_shared.utils.exceptions import (
    AppException,
    ConflictError,
    DuplicateEntityError,
    NotFoundError,
    StoreOperationError,
    ValidationError,
)
from storefront_shared.utils.validators import escape_like_pattern, validate_media_url
from storefront_api.models import (
    Brand,
    Category,
    Product,
    ProductAttributeDefinition,
    ProductGroupItem,
    ProductVariant,
)
from storefront_api.routers.admin_schemas import (
    AttributeDefinitionOutput,
    GroupItemOutput,
    ImportResult,
    ProductImportRow,
    ProductOutput,
    VariantOutput,
)
from storefront_api.services.base_service import BaseCRUDService
from storefront_api.services.crud.repository import LiveRepository
from storefront_api.services.trash import Actor, EntityType

logger = get_logger(__name__)

COPY_NAME_SUFFIX = " (Copy)"
COPY_SKU_SUFFIX = "-COPY"


def _clean_values(values: Iterable[str]) -> list[str]:
    """Strip attribute values, dropping blanks and repeats."""
    cleaned: list[str] = []
    for value in values:
        value = str(value).strip()
        if value and value not in cleaned:
            cleaned.append(value)
    return cleaned


class ProductService(BaseCRUDService[Product, ProductOutput]):
    """Service for product management."""

    export_columns = (
        "name",
        "sku",
        "product_type",
        "price_cents",
        "compare_at_price_cents",
        "quantity",
        "category_name",
        "brand_name",
        "description",
        "tags",
        "images",
        "is_active",
    )

    def __init__(self, db: Session, **kwargs: Any):
        super().__init__(
            db=db,
            model=Product,
            output_schema=ProductOutput,
            entity_name="Product",
            entity_type=EntityType.PRODUCT,
            **kwargs,
        )

    # =========================================================================
    # Query Methods
    # =========================================================================

    def list_products(
        self,
        *,
        search: str | None = None,
        category_id: str | None = None,
        brand_id: str | None = None,
        product_type: str | None = None,
        is_active: bool | None = None,
        low_stock_only: bool = False,
        limit: int = Limits.DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[ProductOutput]:
        """Live products, newest first, with optional filters."""
        where: list[Any] = []
        if search:
            pattern = f"%{escape_like_pattern(search.lower())}%"
            where.append(
                func.lower(Product.name).like(pattern, escape="\\")
                | func.lower(func.coalesce(Product.sku, "")).like(pattern, escape="\\")
            )
        if category_id:
            where.append(Product.category_id == category_id)
        if brand_id:
            where.append(Product.brand_id == brand_id)
        if product_type:
            where.append(Product.product_type == product_type)
        if is_active is not None:
            where.append(Product.is_active.is_(is_active))
        if low_stock_only:
            where.append(Product.quantity <= Product.low_stock_threshold)

        return self.list_all(
            where=where,
            order_by=Product.created_at.desc(),
            limit=min(limit, Limits.MAX_PAGE_SIZE),
            offset=offset,
        )

    # =========================================================================
    # Bulk Actions
    # =========================================================================

    def bulk_set_published(self, ids: list[str], *, published: bool) -> int:
        """Publish or unpublish live products; returns the number changed."""
        if not ids:
            return 0
        stmt = (
            update(Product)
            .where(Product.id.in_(ids), Product.deleted_at.is_(None))
            .values(is_active=published)
        )
        try:
            result = self._db.execute(stmt)
            safe_commit(self._db)
        except SQLAlchemyError as e:
            logger.error("Bulk publish failed", published=published, count=len(ids), error=str(e))
            raise StoreOperationError("update", self.table_name) from e
        self._notifier.notify(self.table_name, UPDATE, ids)
        return result.rowcount or 0

    def bulk_trash(self, ids: list[str], actor: Actor) -> int:
        """Move products to the trash in one batch; returns the number trashed."""
        return self.lifecycle(actor).bulk_trash(EntityType.PRODUCT, ids)

    def duplicate(self, product_id: str, actor: Actor) -> ProductOutput:
        """
        Copy a product as an unpublished draft.

        The copy is named "<name> (Copy)", SKUs get "-COPY", and variants
        and attribute definitions are copied along.
        """
        source = self.require_entity(product_id, options=[selectinload(Product.variants)])
        data = {
            "name": f"{source.name}{COPY_NAME_SUFFIX}",
            "sku": f"{source.sku}{COPY_SKU_SUFFIX}" if source.sku else None,
            "barcode": None,
            "product_type": source.product_type,
            "price_cents": source.price_cents,
            "compare_at_price_cents": source.compare_at_price_cents,
            "cost_price_cents": source.cost_price_cents,
            "quantity": source.quantity,
            "low_stock_threshold": source.low_stock_threshold,
            "category_id": source.category_id,
            "brand_id": source.brand_id,
            "description": source.description,
            "images": list(source.images or []),
            "tags": list(source.tags or []),
            "weight": source.weight,
            "dimensions": dict(source.dimensions) if source.dimensions else None,
            "meta_title": source.meta_title,
            "meta_description": source.meta_description,
            "meta_keywords": list(source.meta_keywords or []),
            "is_active": False,
            "is_featured": False,
        }
        self._validate_create(data)

        copy = Product(**data)
        for variant in source.variants:
            copy.variants.append(
                ProductVariant(
                    name=variant.name,
                    sku=f"{variant.sku}{COPY_SKU_SUFFIX}" if variant.sku else None,
                    price_cents=variant.price_cents,
                    compare_at_price_cents=variant.compare_at_price_cents,
                    quantity=variant.quantity,
                    options=dict(variant.options or {}),
                    image_url=variant.image_url,
                    is_active=variant.is_active,
                )
            )
        for definition in source.attribute_definitions:
            copy.attribute_definitions.append(
                ProductAttributeDefinition(
                    attribute_name=definition.attribute_name,
                    attribute_values=list(definition.attribute_values or []),
                    sort_order=definition.sort_order,
                )
            )
        self._db.add(copy)
        self._commit("create", copy)

        logger.info(
            "Product duplicated",
            source_id=product_id,
            copy_id=copy.id,
            variants=len(copy.variants),
            actor=mask_email(actor.email),
        )
        self._notifier.notify(self.table_name, INSERT, [copy.id])
        return self.to_output(copy)

    def import_rows(self, rows: Iterable[ProductImportRow], actor: Actor) -> ImportResult:
        """
        Create products from already-parsed import rows.

        Category and brand are matched by name among live rows. Invalid
        rows are reported and skipped; valid ones are still created.
        """
        result = ImportResult()
        categories = {c.name.lower(): c.id for c in LiveRepository(Category, self._db).find_all()}
        brands = {b.name.lower(): b.id for b in LiveRepository(Brand, self._db).find_all()}

        for index, row in enumerate(rows, start=1):
            data = row.model_dump(exclude={"category_name", "brand_name"})
            if row.category_name:
                data["category_id"] = categories.get(row.category_name.strip().lower())
            if row.brand_name:
                data["brand_id"] = brands.get(row.brand_name.strip().lower())
            try:
                self.create(data, actor)
            except AppException as e:
                result.errors.append(f"Row {index} ({row.name}): {e.detail}")
                result.skipped += 1
                continue
            result.created += 1

        logger.info(
            "Product import finished",
            created=result.created,
            skipped=result.skipped,
            actor=mask_email(actor.email),
        )
        return result

    def export_rows(self) -> list[dict[str, Any]]:
        """Live products, newest first, with category and brand by name as import expects."""
        products = self._repo.find_all(order_by=Product.created_at.desc())
        categories = {c.id: c.name for c in LiveRepository(Category, self._db).find_all()}
        brands = {b.id: b.name for b in LiveRepository(Brand, self._db).find_all()}
        rows = []
        for product in products:
            row = self.to_output(product).model_dump()
            row["category_name"] = categories.get(product.category_id)
            row["brand_name"] = brands.get(product.brand_id)
            rows.append(row)
        return rows

    # =========================================================================
    # Variants
    # =========================================================================

    def list_variants(self, product_id: str) -> list[VariantOutput]:
        self.require_entity(product_id)
        variants = self._db.scalars(
            select(ProductVariant)
            .where(ProductVariant.product_id == product_id)
            .order_by(ProductVariant.created_at)
        ).all()
        return [VariantOutput.model_validate(v) for v in variants]

    def add_variant(self, product_id: str, data: dict[str, Any]) -> VariantOutput:
        self.require_entity(product_id)
        self._validate_variant(data)
        variant = ProductVariant(product_id=product_id, **data)
        self._db.add(variant)
        self._commit("create", variant)
        self._notifier.notify(ProductVariant.__tablename__, INSERT, [variant.id])
        return VariantOutput.model_validate(variant)

    def update_variant(self, product_id: str, variant_id: str, data: dict[str, Any]) -> VariantOutput:
        variant = self._require_variant(product_id, variant_id)
        data = {
            k: v for k, v in data.items()
            if v is not None or k not in ("name", "quantity", "options", "is_active")
        }
        self._validate_variant(data)
        for field_name, value in data.items():
            setattr(variant, field_name, value)
        self._commit("update", variant)
        self._notifier.notify(ProductVariant.__tablename__, UPDATE, [variant.id])
        return VariantOutput.model_validate(variant)

    def delete_variant(self, product_id: str, variant_id: str) -> None:
        variant = self._require_variant(product_id, variant_id)
        self._db.delete(variant)
        try:
            safe_commit(self._db)
        except SQLAlchemyError as e:
            raise StoreOperationError("delete", ProductVariant.__tablename__) from e
        self._notifier.notify(ProductVariant.__tablename__, DELETE, [variant_id])

    def _require_variant(self, product_id: str, variant_id: str) -> ProductVariant:
        self.require_entity(product_id)
        variant = self._db.scalar(
            select(ProductVariant).where(
                ProductVariant.id == variant_id,
                ProductVariant.product_id == product_id,
            )
        )
        if variant is None:
            raise NotFoundError("Variant", variant_id)
        return variant

    def _validate_variant(self, data: dict[str, Any]) -> None:
        price = data.get("price_cents")
        if price is not None and price <= 0:
            raise ValidationError("Variant price must be greater than zero", field="price_cents")
        if data.get("quantity") is not None and data["quantity"] < 0:
            raise ValidationError("Stock cannot be negative", field="quantity")
        if "name" in data and not (data["name"] or "").strip():
            raise ValidationError("Variant name is required", field="name")
        if data.get("image_url"):
            try:
                data["image_url"] = validate_media_url(data["image_url"])
            except ValueError as e:
                raise ValidationError(str(e), field="image_url")

    # =========================================================================
    # Attribute Definitions
    # =========================================================================

    def list_attributes(self, product_id: str) -> list[AttributeDefinitionOutput]:
        self.require_entity(product_id)
        definitions = self._db.scalars(
            select(ProductAttributeDefinition)
            .where(ProductAttributeDefinition.product_id == product_id)
            .order_by(ProductAttributeDefinition.sort_order, ProductAttributeDefinition.created_at)
        ).all()
        return [AttributeDefinitionOutput.model_validate(d) for d in definitions]

    def add_attribute(self, product_id: str, data: dict[str, Any]) -> AttributeDefinitionOutput:
        """
        Define an attribute such as "Size" with its allowed values.

        Names are unique per product, ignoring case. Without a sort order
        the definition goes after the existing ones.
        """
        self.require_entity(product_id)
        name = self._attribute_name(product_id, data["attribute_name"])
        sort_order = data.get("sort_order")
        if sort_order is None:
            sort_order = self._db.scalar(
                select(func.count()).where(ProductAttributeDefinition.product_id == product_id)
            ) or 0
        definition = ProductAttributeDefinition(
            product_id=product_id,
            attribute_name=name,
            attribute_values=_clean_values(data.get("attribute_values") or []),
            sort_order=sort_order,
        )
        self._db.add(definition)
        self._commit("create", definition)
        self._notifier.notify(ProductAttributeDefinition.__tablename__, INSERT, [definition.id])
        return AttributeDefinitionOutput.model_validate(definition)

    def update_attribute(
        self, product_id: str, attribute_id: str, data: dict[str, Any]
    ) -> AttributeDefinitionOutput:
        definition = self._require_attribute(product_id, attribute_id)
        if data.get("attribute_name") is not None:
            definition.attribute_name = self._attribute_name(
                product_id, data["attribute_name"], exclude_id=attribute_id
            )
        if data.get("attribute_values") is not None:
            definition.attribute_values = _clean_values(data["attribute_values"])
        if data.get("sort_order") is not None:
            definition.sort_order = data["sort_order"]
        self._commit("update", definition)
        self._notifier.notify(ProductAttributeDefinition.__tablename__, UPDATE, [definition.id])
        return AttributeDefinitionOutput.model_validate(definition)

    def remove_attribute(self, product_id: str, attribute_id: str) -> None:
        definition = self._require_attribute(product_id, attribute_id)
        self._db.delete(definition)
        try:
            safe_commit(self._db)
        except SQLAlchemyError as e:
            raise StoreOperationError("delete", ProductAttributeDefinition.__tablename__) from e
        self._notifier.notify(ProductAttributeDefinition.__tablename__, DELETE, [attribute_id])

    def _require_attribute(self, product_id: str, attribute_id: str) -> ProductAttributeDefinition:
        self.require_entity(product_id)
        definition = self._db.scalar(
            select(ProductAttributeDefinition).where(
                ProductAttributeDefinition.id == attribute_id,
                ProductAttributeDefinition.product_id == product_id,
            )
        )
        if definition is None:
            raise NotFoundError("Attribute", attribute_id)
        return definition

    def _attribute_name(self, product_id: str, name: str, exclude_id: str | None = None) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Attribute name is required", field="attribute_name")
        query = select(ProductAttributeDefinition.id).where(
            ProductAttributeDefinition.product_id == product_id,
            func.lower(ProductAttributeDefinition.attribute_name) == name.lower(),
        )
        if exclude_id is not None:
            query = query.where(ProductAttributeDefinition.id != exclude_id)
        if self._db.scalar(query) is not None:
            raise DuplicateEntityError("Attribute", name, field="attribute_name", product_id=product_id)
        return name

    # =========================================================================
    # Group Items
    # =========================================================================

    def list_group_items(self, product_id: str) -> list[GroupItemOutput]:
        self.require_entity(product_id)
        items = self._db.scalars(
            select(ProductGroupItem)
            .options(selectinload(ProductGroupItem.child_product))
            .where(ProductGroupItem.parent_product_id == product_id)
            .order_by(ProductGroupItem.sort_order)
        ).all()
        return [self._group_item_output(i) for i in items]

    def add_group_item(self, product_id: str, data: dict[str, Any]) -> GroupItemOutput:
        """
        Add a child product to a grouped/bundle product.

        Raises:
            ValidationError: Child is the parent itself or not a live product.
            ConflictError: Child is already in the group.
        """
        self.require_entity(product_id)
        child_id = data["child_product_id"]
        if child_id == product_id:
            raise ValidationError("A product cannot contain itself", field="child_product_id")
        if self._repo.find_by_id(child_id) is None:
            raise ValidationError("Child product not found", field="child_product_id", child_id=child_id)

        existing = self._db.scalar(
            select(ProductGroupItem).where(
                ProductGroupItem.parent_product_id == product_id,
                ProductGroupItem.child_product_id == child_id,
            )
        )
        if existing is not None:
            raise ConflictError("Product is already part of this group", child_id=child_id)

        item = ProductGroupItem(parent_product_id=product_id, **data)
        self._db.add(item)
        self._commit("create", item)
        self._notifier.notify(ProductGroupItem.__tablename__, INSERT, [item.id])
        return self._group_item_output(item)

    def remove_group_item(self, product_id: str, item_id: str) -> None:
        self.require_entity(product_id)
        item = self._db.scalar(
            select(ProductGroupItem).where(
                ProductGroupItem.id == item_id,
                ProductGroupItem.parent_product_id == product_id,
            )
        )
        if item is None:
            raise NotFoundError("Group item", item_id)
        self._db.delete(item)
        try:
            safe_commit(self._db)
        except SQLAlchemyError as e:
            raise StoreOperationError("delete", ProductGroupItem.__tablename__) from e
        self._notifier.notify(ProductGroupItem.__tablename__, DELETE, [item_id])

    def _group_item_output(self, item: ProductGroupItem) -> GroupItemOutput:
        output = GroupItemOutput.model_validate(item)
        child = item.child_product
        output.child_name = child.name if child is not None and child.deleted_at is None else None
        return output

    # =========================================================================
    # Validation Hooks
    # =========================================================================

    def _validate_create(self, data: dict[str, Any]) -> None:
        data.setdefault("product_type", ProductType.SIMPLE)
        self._validate_fields(data, data)
        self._resolve_slug(data, auto_suffix=True)

    def _validate_update(self, entity: Product, data: dict[str, Any]) -> None:
        merged = {
            "product_type": entity.product_type,
            "price_cents": entity.price_cents,
            "quantity": entity.quantity,
            **{k: v for k, v in data.items() if v is not None},
        }
        self._validate_fields(merged, data)
        self._resolve_slug(data, entity, auto_suffix=True)

    def _validate_fields(self, values: dict[str, Any], data: dict[str, Any]) -> None:
        """
        Check the merged values; normalizes ``data`` in place.
        Nothing has been written when this raises.
        """
        product_type = values.get("product_type")
        if product_type not in ProductType.ALL:
            raise ValidationError(
                f"Invalid product type: {product_type}",
                field="product_type",
                allowed=ProductType.ALL,
            )

        if product_type in ProductType.PRICELESS:
            data["price_cents"] = 0
        elif (values.get("price_cents") or 0) <= 0:
            raise ValidationError("Price must be greater than zero", field="price_cents")

        for field_name in ("compare_at_price_cents", "cost_price_cents"):
            if values.get(field_name) is not None and values[field_name] < 0:
                raise ValidationError(f"{field_name} cannot be negative", field=field_name)

        if (values.get("quantity") or 0) < 0:
            raise ValidationError("Stock cannot be negative", field="quantity", value=values["quantity"])
        if values.get("low_stock_threshold") is not None and values["low_stock_threshold"] < 0:
            raise ValidationError("Low stock threshold cannot be negative", field="low_stock_threshold")

        if values.get("category_id") and LiveRepository(Category, self._db).find_by_id(values["category_id"]) is None:
            raise ValidationError("Category not found", field="category_id")
        if values.get("brand_id") and LiveRepository(Brand, self._db).find_by_id(values["brand_id"]) is None:
            raise ValidationError("Brand not found", field="brand_id")

        if "images" in data and data["images"] is not None:
            try:
                data["images"] = [validate_media_url(u) for u in data["images"] if u]
            except ValueError as e:
                raise ValidationError(str(e), field="images")

        for field_name in (
            "product_type", "images", "tags", "meta_keywords", "low_stock_threshold",
            "is_active", "is_featured", "quantity", "price_cents",
        ):
            if field_name in data and data[field_name] is None:
                data.pop(field_name)
