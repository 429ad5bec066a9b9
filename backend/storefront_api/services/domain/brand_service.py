"""
Brand Service.

Usage:
    from storefront_api.services.domain import BrandService

    service = BrandService(db)
    brands = service.list_with_counts()
    brand = service.create({"name": "Nike"}, actor)
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from storefront_shared.utils.validators import escape_like_pattern
from storefront_api.models import Brand, Product
from storefront_api.routers.admin_schemas import BrandOutput
from storefront_api.services.base_service import BaseCRUDService
from storefront_api.services.trash import EntityType


class BrandService(BaseCRUDService[Brand, BrandOutput]):
    """
    Service for brand management.

    Business rules:
    - Slug derived from the name unless given; unique among live brands
    - Logo and website URLs must be public http(s) URLs
    - Delete moves the brand to the trash
    """

    export_columns = ("name", "slug", "description", "logo_url", "website_url", "is_active", "product_count")

    def __init__(self, db: Session, **kwargs: Any):
        super().__init__(
            db=db,
            model=Brand,
            output_schema=BrandOutput,
            entity_name="Brand",
            entity_type=EntityType.BRAND,
            url_fields={"logo_url", "website_url"},
            **kwargs,
        )

    def list_with_counts(self, *, search: str | None = None) -> list[BrandOutput]:
        """Live brands ordered by name, each with its live product count."""
        where = []
        if search:
            pattern = f"%{escape_like_pattern(search.lower())}%"
            where.append(
                func.lower(Brand.name).like(pattern, escape="\\")
                | Brand.slug.like(pattern, escape="\\")
            )
        brands = self._repo.find_all(where=where, order_by=Brand.name)
        counts = self._product_counts([b.id for b in brands])
        return [self.to_output(b, product_count=counts.get(b.id, 0)) for b in brands]

    def export_rows(self) -> list[dict[str, Any]]:
        return [b.model_dump() for b in self.list_with_counts()]

    def get_by_id(self, entity_id: str, **kwargs: Any) -> BrandOutput:
        brand = self.require_entity(entity_id)
        return self.to_output(brand, product_count=self._product_counts([brand.id]).get(brand.id, 0))

    def to_output(self, entity: Brand, product_count: int = 0) -> BrandOutput:
        output = BrandOutput.model_validate(entity)
        output.product_count = product_count
        return output

    def _product_counts(self, brand_ids: list[str]) -> dict[str, int]:
        if not brand_ids:
            return {}
        rows = self._db.execute(
            select(Product.brand_id, func.count())
            .where(Product.brand_id.in_(brand_ids), Product.deleted_at.is_(None))
            .group_by(Product.brand_id)
        )
        return {brand_id: count for brand_id, count in rows}

    # =========================================================================
    # Validation Hooks
    # =========================================================================

    def _validate_create(self, data: dict[str, Any]) -> None:
        self._resolve_slug(data)

    def _validate_update(self, entity: Brand, data: dict[str, Any]) -> None:
        self._resolve_slug(data, entity)
