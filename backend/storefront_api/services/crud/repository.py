"""
Repository Pattern for database access.

Provides a thin layer between business logic and data access with the
live/trashed split built in: unless asked otherwise every query only
sees LIVE rows (deleted_at IS NULL).

Usage:
    from storefront_api.services.crud.repository import LiveRepository

    brand_repo = LiveRepository(Brand, db)
    brands = brand_repo.find_all(order_by=Brand.name)
    brand = brand_repo.find_by_id(brand_id, include_trashed=True)
    taken = brand_repo.slug_taken("nike")

    # Plain repository for tables without deleted_at
    section_repo = BaseRepository(HomepageSection, db)
"""

from __future__ import annotations

from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from storefront_api.models import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """
    Repository providing common database operations.
    """

    def __init__(self, model: type[ModelT], session: Session):
        self._model = model
        self._session = session

    def _base_query(self, include_trashed: bool = False) -> Select:
        return select(self._model)

    def find_by_id(
        self,
        entity_id: str,
        *,
        options: list[Any] | None = None,
        include_trashed: bool = False,
    ) -> ModelT | None:
        query = self._base_query(include_trashed).where(self._model.id == entity_id)
        if options:
            query = query.options(*options)
        return self._session.scalar(query)

    def find_all(
        self,
        *,
        where: Sequence[Any] = (),
        options: list[Any] | None = None,
        include_trashed: bool = False,
        limit: int | None = None,
        offset: int | None = None,
        order_by: Any | None = None,
    ) -> Sequence[ModelT]:
        """
        Find entities matching optional filters.

        Args:
            where: Extra filter expressions.
            options: SQLAlchemy loader options.
            include_trashed: Include soft-deleted rows.
            limit: Maximum number of results.
            offset: Number of results to skip.
            order_by: Column or expression to order by.
        """
        query = self._base_query(include_trashed).where(*where)
        if options:
            query = query.options(*options)
        if order_by is not None:
            query = query.order_by(order_by)
        if offset is not None:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return self._session.scalars(query).all()

    def count(self, *, where: Sequence[Any] = (), include_trashed: bool = False) -> int:
        query = select(func.count()).select_from(
            self._base_query(include_trashed).where(*where).subquery()
        )
        return self._session.scalar(query) or 0


class LiveRepository(BaseRepository[ModelT]):
    """
    Repository for trashable models (SoftDeleteMixin).

    Trashed rows are invisible unless include_trashed=True. Slug checks
    consider live rows only, so a trashed row never blocks slug reuse.
    """

    def _base_query(self, include_trashed: bool = False) -> Select:
        query = select(self._model)
        if not include_trashed:
            query = query.where(self._model.deleted_at.is_(None))
        return query

    def slug_taken(self, slug: str, exclude_id: str | None = None) -> bool:
        query = self._base_query().where(self._model.slug == slug)
        if exclude_id is not None:
            query = query.where(self._model.id != exclude_id)
        return self._session.scalar(query) is not None
