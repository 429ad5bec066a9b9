"""
Homepage Section Service.

Sections are plain editable blocks of the storefront homepage. They are
not trashable: delete removes the row.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from storefront_shared.utils.exceptions import NotFoundError, ValidationError
from storefront_api.models import HomepageSection, as_utc
from storefront_api.routers.admin_schemas import HomepageSectionOutput
from storefront_api.services.base_service import BaseCRUDService
from storefront_api.services.trash import Actor


class HomepageSectionService(BaseCRUDService[HomepageSection, HomepageSectionOutput]):

    def __init__(self, db: Session, **kwargs: Any):
        super().__init__(
            db=db,
            model=HomepageSection,
            output_schema=HomepageSectionOutput,
            entity_name="Homepage section",
            url_fields={"image_url"},
            **kwargs,
        )

    def list_ordered(self) -> list[HomepageSectionOutput]:
        return self.list_all(order_by=HomepageSection.sort_order)

    def get_by_type(self, section_type: str) -> HomepageSectionOutput:
        """First section of the given type in display order."""
        entities = self._repo.find_all(
            where=[HomepageSection.section_type == section_type],
            order_by=HomepageSection.sort_order,
            limit=1,
        )
        if not entities:
            raise NotFoundError(f"Homepage section of type '{section_type}'")
        return self.to_output(entities[0])

    def toggle(self, section_id: str, enabled: bool, actor: Actor) -> HomepageSectionOutput:
        return self.update(section_id, {"is_enabled": enabled}, actor)

    def _validate_create(self, data: dict[str, Any]) -> None:
        self._validate_window(data.get("starts_at"), data.get("expires_at"))
        if data.get("sort_order") is None:
            max_order = self._db.scalar(select(func.max(HomepageSection.sort_order)))
            data["sort_order"] = (max_order or 0) + 1
        if data.get("content") is None:
            data["content"] = {}

    def _validate_update(self, entity: HomepageSection, data: dict[str, Any]) -> None:
        self._validate_window(
            data.get("starts_at", entity.starts_at),
            data.get("expires_at", entity.expires_at),
        )
        for field_name in ("content", "is_enabled", "sort_order"):
            if field_name in data and data[field_name] is None:
                data.pop(field_name)

    @staticmethod
    def _validate_window(starts_at, expires_at) -> None:
        if starts_at and expires_at and as_utc(expires_at) <= as_utc(starts_at):
            raise ValidationError("Section must expire after it starts", field="expires_at")
