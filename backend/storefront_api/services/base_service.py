"""
Base Service Classes for the admin catalog.

Architecture:
    Router (thin) -> Service (business logic) -> Repository (data access) -> Model

Deletion never removes a row here: services of trashable entities hand
the delete over to the trash lifecycle manager, which sets deleted_at
and writes the trash log entry.

Usage:
    from storefront_api.services.base_service import BaseCRUDService

    class BrandService(BaseCRUDService[Brand, BrandOutput]):
        def __init__(self, db: Session):
            super().__init__(
                db=db,
                model=Brand,
                output_schema=BrandOutput,
                entity_name="Brand",
                entity_type=EntityType.BRAND,
            )
"""

from __future__ import annotations

from abc import ABC
from typing import Any, Generic, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront_shared.config.logging import get_logger, mask_email
from storefront_shared.infrastructure.db import safe_commit
from storefront_shared.infrastructure.notifications import (
    DELETE,
    INSERT,
    UPDATE,
    ChangeNotifier,
    get_notifier,
)
from storefront_shared.utils.exceptions import (
    DuplicateEntityError,
    NotFoundError,
    StoreOperationError,
    ValidationError,
)
from storefront_shared.utils.csv_export import to_csv
from storefront_shared.utils.validators import slugify, validate_media_url, validate_slug
from storefront_api.models import Base
from storefront_api.services.crud.repository import BaseRepository, LiveRepository
from storefront_api.services.trash import (
    Actor,
    EntityType,
    RecordStore,
    TrashLifecycleManager,
)

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
OutputT = TypeVar("OutputT", bound=BaseModel)


class BaseService(ABC, Generic[ModelT]):
    """
    Abstract base service for domain operations.

    Provides repository access; trashable models get a LiveRepository
    so trashed rows stay out of every read.
    """

    def __init__(self, db: Session, model: Type[ModelT], *, trashable: bool = True):
        self._db = db
        self._model = model
        self._repo: BaseRepository[ModelT] = (
            LiveRepository(model, db) if trashable else BaseRepository(model, db)
        )

    @property
    def db(self) -> Session:
        return self._db

    @property
    def repo(self) -> BaseRepository[ModelT]:
        return self._repo


class BaseCRUDService(BaseService[ModelT], Generic[ModelT, OutputT]):
    """
    Base service for entities with CRUD operations.

    Responsibilities:
    - Data access via Repository
    - DTO transformation via output schema
    - Validation hooks run before anything is written
    - Delete delegated to the trash lifecycle (trashable entities)
    - Change notifications after successful writes
    """

    # Column keys of the CSV export, in file order
    export_columns: tuple[str, ...] = ()

    def __init__(
        self,
        db: Session,
        model: Type[ModelT],
        output_schema: Type[OutputT],
        entity_name: str,
        *,
        entity_type: EntityType | None = None,
        url_fields: set[str] | None = None,
        notifier: ChangeNotifier | None = None,
    ):
        super().__init__(db, model, trashable=entity_type is not None)
        self._output_schema = output_schema
        self._entity_name = entity_name
        self._entity_type = entity_type
        self._url_fields = url_fields or set()
        self._notifier = notifier or get_notifier()

    @property
    def entity_name(self) -> str:
        return self._entity_name

    @property
    def table_name(self) -> str:
        return self._model.__tablename__

    # =========================================================================
    # Read Operations
    # =========================================================================

    def get_by_id(self, entity_id: str, *, options: list[Any] | None = None) -> OutputT:
        """
        Get a live entity by ID.

        Raises:
            NotFoundError: If the entity does not exist or is trashed.
        """
        return self.to_output(self.require_entity(entity_id, options=options))

    def get_entity(self, entity_id: str, *, include_trashed: bool = False) -> ModelT | None:
        """Get raw entity (for internal use)."""
        return self._repo.find_by_id(entity_id, include_trashed=include_trashed)

    def require_entity(self, entity_id: str, *, options: list[Any] | None = None) -> ModelT:
        entity = self._repo.find_by_id(entity_id, options=options)
        if entity is None:
            raise NotFoundError(self._entity_name, entity_id)
        return entity

    def list_all(
        self,
        *,
        where: list[Any] | None = None,
        options: list[Any] | None = None,
        limit: int | None = None,
        offset: int | None = None,
        order_by: Any | None = None,
    ) -> list[OutputT]:
        entities = self._repo.find_all(
            where=where or (),
            options=options,
            limit=limit,
            offset=offset,
            order_by=order_by,
        )
        return [self.to_output(e) for e in entities]

    def count(self) -> int:
        return self._repo.count()

    def export_rows(self) -> list[dict[str, Any]]:
        """Live rows as flat dicts; subclasses resolve references to names."""
        return [self.to_output(e).model_dump() for e in self._repo.find_all()]

    def export_csv(self) -> str:
        rows = self.export_rows()
        logger.info("Export generated", entity=self._entity_name, rows=len(rows))
        return to_csv(self.export_columns, rows)

    # =========================================================================
    # Write Operations
    # =========================================================================

    def create(self, data: dict[str, Any], actor: Actor) -> OutputT:
        """
        Create a new entity.

        Raises:
            ValidationError: If data is invalid (nothing is written).
            StoreOperationError: If the insert fails.
        """
        data = self._validate_urls(dict(data))
        self._validate_create(data)

        entity = self._model(**data)
        self._db.add(entity)
        self._commit("create", entity)

        logger.info(
            f"{self._entity_name} created",
            entity_id=entity.id,
            actor=mask_email(actor.email),
        )
        self._after_create(entity, actor)
        self._notifier.notify(self.table_name, INSERT, [entity.id])
        return self.to_output(entity)

    def update(self, entity_id: str, data: dict[str, Any], actor: Actor) -> OutputT:
        """
        Update a live entity with the given fields.

        Raises:
            NotFoundError: If the entity does not exist or is trashed.
            ValidationError: If data is invalid (nothing is written).
            StoreOperationError: If the update fails.
        """
        entity = self.require_entity(entity_id)
        data = self._validate_urls(dict(data))
        self._validate_update(entity, data)

        old_values = {k: getattr(entity, k) for k in data if hasattr(entity, k)}
        for field_name, value in data.items():
            if hasattr(entity, field_name):
                setattr(entity, field_name, value)
        self._commit("update", entity)

        self._after_update(entity, old_values, actor)
        self._notifier.notify(self.table_name, UPDATE, [entity.id])
        return self.to_output(entity)

    def delete(self, entity_id: str, actor: Actor) -> None:
        """
        Delete an entity: trashable entities move to the trash, others
        are removed.

        Raises:
            NotFoundError: If the entity does not exist or is trashed.
            ValidationError: If deletion is not allowed.
        """
        entity = self.require_entity(entity_id)
        self._validate_delete(entity)
        entity_info = self._get_entity_info(entity)

        if self._entity_type is not None:
            self.lifecycle(actor).trash(self._entity_type, entity_id)
        else:
            self._db.delete(entity)
            self._commit("delete", entity)
            self._notifier.notify(self.table_name, DELETE, [entity_id])

        self._after_delete(entity_info, actor)

    def lifecycle(self, actor: Actor) -> TrashLifecycleManager:
        """Trash lifecycle manager bound to this service's session."""
        return TrashLifecycleManager(RecordStore(self._db), actor=actor, notifier=self._notifier)

    # =========================================================================
    # Transformation
    # =========================================================================

    def to_output(self, entity: ModelT) -> OutputT:
        """Convert entity to output DTO. Override for custom transformation."""
        return self._output_schema.model_validate(entity)

    # =========================================================================
    # Validation Hooks (override in subclasses)
    # =========================================================================

    def _validate_create(self, data: dict[str, Any]) -> None:
        pass

    def _validate_update(self, entity: ModelT, data: dict[str, Any]) -> None:
        pass

    def _validate_delete(self, entity: ModelT) -> None:
        pass

    # =========================================================================
    # Lifecycle Hooks (override in subclasses)
    # =========================================================================

    def _after_create(self, entity: ModelT, actor: Actor) -> None:
        pass

    def _after_update(self, entity: ModelT, old_values: dict[str, Any], actor: Actor) -> None:
        pass

    def _after_delete(self, entity_info: dict[str, Any], actor: Actor) -> None:
        pass

    def _get_entity_info(self, entity: ModelT) -> dict[str, Any]:
        return {"id": entity.id, "name": getattr(entity, "name", None)}

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _commit(self, operation: str, entity: ModelT) -> None:
        try:
            safe_commit(self._db)
            if operation != "delete":
                self._db.refresh(entity)
        except SQLAlchemyError as e:
            logger.error(
                f"Failed to {operation} {self._entity_name}",
                error=str(e),
                entity_id=getattr(entity, "id", None),
            )
            raise StoreOperationError(operation, self.table_name) from e

    def _validate_urls(self, data: dict[str, Any]) -> dict[str, Any]:
        """Validate and sanitize URL fields."""
        for field_name in self._url_fields:
            if data.get(field_name):
                try:
                    data[field_name] = validate_media_url(data[field_name])
                except ValueError as e:
                    raise ValidationError(str(e), field=field_name)
        return data

    def _resolve_slug(
        self,
        data: dict[str, Any],
        entity: ModelT | None = None,
        *,
        auto_suffix: bool = False,
    ) -> None:
        """
        Fill or check ``data["slug"]``.

        An explicit slug must be canonical; otherwise it is derived from
        the name. Uniqueness is checked against live rows only. With
        auto_suffix a derived slug that is taken gets "-2", "-3", ...
        instead of failing.
        """
        explicit = data.get("slug")
        if explicit:
            try:
                slug = validate_slug(explicit)
            except ValueError as e:
                raise ValidationError(str(e), field="slug")
        elif "name" in data or entity is None:
            slug = slugify(data.get("name"))
            if not slug:
                raise ValidationError("Name must contain at least one letter or digit", field="name")
            if entity is not None and slug == entity.slug:
                data.pop("slug", None)
                return
        else:
            data.pop("slug", None)
            return

        exclude_id = entity.id if entity is not None else None
        repo: LiveRepository = self._repo  # type: ignore[assignment]
        if repo.slug_taken(slug, exclude_id=exclude_id):
            if explicit or not auto_suffix:
                raise DuplicateEntityError(self._entity_name, slug, field="slug")
            base, n = slug, 2
            while repo.slug_taken(f"{base}-{n}", exclude_id=exclude_id):
                n += 1
            slug = f"{base}-{n}"
        data["slug"] = slug
