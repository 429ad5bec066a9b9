"""
Category Service.

Categories form a shallow tree through parent_id. A category cannot be
its own parent, its parent must be a live category, and a category with
live children cannot be trashed (the trash lifecycle refuses it).

Usage:
    from storefront_api.services.domain import CategoryService

    service = CategoryService(db)
    tree = service.list_ordered()
    service.delete(category_id, actor)
"""

from __future__ import annotations

from typing import Any, Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from storefront_shared.config.logging import get_logger
from storefront_shared.utils.exceptions import AppException, ValidationError
from storefront_api.models import Category
from storefront_api.routers.admin_schemas import (
    CategoryImportRow,
    CategoryOutput,
    ImportResult,
)
from storefront_api.services.base_service import BaseCRUDService
from storefront_api.services.trash import Actor, EntityType

logger = get_logger(__name__)


class CategoryService(BaseCRUDService[Category, CategoryOutput]):
    """
    Service for category management.

    Business rules:
    - Slug derived from the name unless given; unique among live categories
    - Parent must exist, be live and differ from the category itself
    - Sort order auto-calculated when not provided
    - Delete moves the category to the trash, refused while it has live children
    """

    export_columns = ("name", "slug", "parent_name", "description", "image_url", "sort_order", "is_active")

    def __init__(self, db: Session, **kwargs: Any):
        super().__init__(
            db=db,
            model=Category,
            output_schema=CategoryOutput,
            entity_name="Category",
            entity_type=EntityType.CATEGORY,
            url_fields={"image_url"},
            **kwargs,
        )

    # =========================================================================
    # Query Methods
    # =========================================================================

    def list_ordered(self) -> list[CategoryOutput]:
        """Live categories by sort order, then name."""
        entities = self._repo.find_all()
        entities = sorted(entities, key=lambda c: (c.sort_order, c.name.lower()))
        return [self.to_output(c) for c in entities]

    def list_children(self, parent_id: str) -> list[CategoryOutput]:
        self.require_entity(parent_id)
        return self.list_all(
            where=[Category.parent_id == parent_id],
            order_by=Category.sort_order,
        )

    def export_rows(self) -> list[dict[str, Any]]:
        """
        Live categories in list order, with the parent referenced by name
        so the file can be imported again.
        """
        categories = self.list_ordered()
        names = {c.id: c.name for c in categories}
        rows = []
        for category in categories:
            row = category.model_dump()
            row["parent_name"] = names.get(category.parent_id) if category.parent_id else None
            rows.append(row)
        return rows

    def get_next_sort_order(self, parent_id: str | None) -> int:
        max_order = self._db.scalar(
            select(func.max(Category.sort_order)).where(
                Category.parent_id.is_(None) if parent_id is None else Category.parent_id == parent_id,
                Category.deleted_at.is_(None),
            )
        )
        return (max_order or 0) + 1

    # =========================================================================
    # Command Methods
    # =========================================================================

    def import_rows(self, rows: Iterable[CategoryImportRow], actor: Actor) -> ImportResult:
        """
        Bulk import parsed rows.

        Top-level rows are created first. Child rows are then created in
        passes, each pass taking the rows whose parent now exists, so a
        row may come before its own parent in the input. A parent name
        that matches an existing live category is used as-is. Rows that
        fail validation, or whose parent never appears, are reported and
        skipped.
        """
        rows = list(rows)
        result = ImportResult()
        by_name = {c.name.lower(): c.id for c in self._repo.find_all()}

        for row in rows:
            if not (row.parent_name or "").strip():
                self._import_row(row, None, by_name, result, actor)

        pending = [r for r in rows if (r.parent_name or "").strip()]
        while pending:
            ready = [r for r in pending if r.parent_name.strip().lower() in by_name]
            if not ready:
                break
            for row in ready:
                self._import_row(row, by_name[row.parent_name.strip().lower()], by_name, result, actor)
            done = {id(r) for r in ready}
            pending = [r for r in pending if id(r) not in done]

        for row in pending:
            result.errors.append(f"{row.name}: parent '{row.parent_name}' not found")
            result.skipped += 1

        logger.info(
            "Category import finished",
            created=result.created,
            skipped=result.skipped,
            errors=len(result.errors),
        )
        return result

    def _import_row(
        self,
        row: CategoryImportRow,
        parent_id: str | None,
        by_name: dict[str, str],
        result: ImportResult,
        actor: Actor,
    ) -> None:
        if row.name.strip().lower() in by_name:
            result.skipped += 1
            return
        try:
            created = self.create(
                {
                    "name": row.name.strip(),
                    "slug": row.slug,
                    "description": row.description,
                    "parent_id": parent_id,
                },
                actor,
            )
        except AppException as e:
            result.errors.append(f"{row.name}: {e.detail}")
            result.skipped += 1
            return
        by_name[created.name.lower()] = created.id
        result.created += 1

    # =========================================================================
    # Validation Hooks
    # =========================================================================

    def _validate_create(self, data: dict[str, Any]) -> None:
        self._resolve_slug(data)
        self._validate_parent(data.get("parent_id"), None)
        if data.get("sort_order") is None:
            data["sort_order"] = self.get_next_sort_order(data.get("parent_id"))

    def _validate_update(self, entity: Category, data: dict[str, Any]) -> None:
        self._resolve_slug(data, entity)
        if "parent_id" in data:
            self._validate_parent(data["parent_id"], entity.id)
        if "sort_order" in data and data["sort_order"] is None:
            data.pop("sort_order")

    def _validate_parent(self, parent_id: str | None, category_id: str | None) -> None:
        if parent_id is None:
            return
        if category_id is not None and parent_id == category_id:
            raise ValidationError("A category cannot be its own parent", field="parent_id")
        parent = self._repo.find_by_id(parent_id)
        if parent is None:
            raise ValidationError("Parent category not found", field="parent_id", parent_id=parent_id)
        if category_id is not None and category_id in self._ancestor_ids(parent):
            raise ValidationError(
                "A category cannot be moved under one of its own descendants",
                field="parent_id",
            )

    def _ancestor_ids(self, category: Category) -> set[str]:
        """Ids on the path from ``category`` up to its root, itself included."""
        seen: set[str] = set()
        current: str | None = category.id
        while current is not None and current not in seen:
            seen.add(current)
            current = self._db.scalar(select(Category.parent_id).where(Category.id == current))
        return seen

    def _validate_delete(self, entity: Category) -> None:
        live_children = self._repo.count(where=[Category.parent_id == entity.id])
        if live_children:
            raise ValidationError(
                f"Category has {live_children} active subcategories. "
                "Move or delete them first.",
                field="id",
            )
