"""
Table-level record store used by the trash core.

The trash lifecycle works on tables by name (the registry holds table
names, not model classes), so it talks to the database through this
narrow select/update/delete/insert interface on SQLAlchemy Core tables
instead of the ORM. Every call runs in its own committed transaction;
on failure the session is rolled back and StoreOperationError is raised,
leaving the lifecycle state of the affected rows unchanged.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, NoReturn, Sequence

from sqlalchemy import MetaData, Table, delete, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from storefront_shared.config.logging import trash_logger as logger
from storefront_shared.utils.exceptions import StoreOperationError
from storefront_api.models import Base


Row = dict[str, Any]


class RecordStore:
    """
    Select/update/delete/insert over named tables.

    Usage:
        store = RecordStore(db)
        products = store.table("products")
        rows = store.select(
            "products",
            where=[products.c.deleted_at.is_not(None)],
            order_by=[products.c.deleted_at.desc()],
            columns=["id", "name", "deleted_at"],
        )
    """

    def __init__(self, db: Session, metadata: MetaData | None = None):
        self.db = db
        self.metadata = metadata if metadata is not None else Base.metadata

    def table(self, name: str) -> Table:
        try:
            return self.metadata.tables[name]
        except KeyError:
            raise StoreOperationError("access", name, reason="unknown table")

    # =========================================================================
    # Reads
    # =========================================================================

    def select(
        self,
        table: str,
        where: Sequence[ColumnElement[bool]] = (),
        order_by: Sequence[Any] = (),
        columns: Sequence[str] | None = None,
        limit: int | None = None,
    ) -> list[Row]:
        """Return matching rows as plain dicts."""
        t = self.table(table)
        cols = [t.c[name] for name in columns] if columns else [t]
        stmt = select(*cols).where(*where).order_by(*order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            result = self.db.execute(stmt)
            rows = [dict(r._mapping) for r in result]
            self.db.commit()
        except SQLAlchemyError as e:
            self._fail("select", table, e)
        return rows

    def count(self, table: str, where: Sequence[ColumnElement[bool]] = ()) -> int:
        t = self.table(table)
        stmt = select(func.count()).select_from(t).where(*where)
        try:
            total = self.db.scalar(stmt) or 0
            self.db.commit()
        except SQLAlchemyError as e:
            self._fail("count", table, e)
        return int(total)

    # =========================================================================
    # Writes
    # =========================================================================

    def update(
        self,
        table: str,
        fields: Mapping[str, Any],
        ids: Iterable[str] | None = None,
        where: Sequence[ColumnElement[bool]] = (),
    ) -> int:
        """
        Overwrite ``fields`` on rows selected by id and/or filter.

        Returns:
            Number of affected rows.
        """
        t = self.table(table)
        clauses = self._clauses(t, ids, where)
        stmt = update(t).where(*clauses).values(**fields)
        try:
            result = self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as e:
            self._fail("update", table, e)
        return result.rowcount or 0

    def delete(
        self,
        table: str,
        ids: Iterable[str] | None = None,
        where: Sequence[ColumnElement[bool]] = (),
        returning: Sequence[str] = ("id",),
    ) -> list[Row]:
        """
        Remove rows selected by id and/or filter.

        Returns:
            The removed rows, restricted to the ``returning`` columns.
            Uses DELETE ... RETURNING where the dialect supports it,
            otherwise reads the matching rows first inside the same
            transaction.
        """
        t = self.table(table)
        clauses = self._clauses(t, ids, where)
        cols = [t.c[name] for name in returning]
        try:
            if self.db.get_bind().dialect.delete_returning:
                result = self.db.execute(delete(t).where(*clauses).returning(*cols))
                removed = [dict(r._mapping) for r in result]
            else:
                removed = [dict(r._mapping) for r in self.db.execute(select(*cols).where(*clauses))]
                if removed and "id" in returning:
                    self.db.execute(delete(t).where(t.c.id.in_([r["id"] for r in removed])))
                elif removed:
                    self.db.execute(delete(t).where(*clauses))
            self.db.commit()
        except SQLAlchemyError as e:
            self._fail("delete", table, e)
        return removed

    def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> int:
        """Insert rows; returns the number inserted."""
        if not rows:
            return 0
        t = self.table(table)
        try:
            self.db.execute(insert(t), [dict(r) for r in rows])
            self.db.commit()
        except SQLAlchemyError as e:
            self._fail("insert into", table, e)
        return len(rows)

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _clauses(
        t: Table,
        ids: Iterable[str] | None,
        where: Sequence[ColumnElement[bool]],
    ) -> list[ColumnElement[bool]]:
        clauses = list(where)
        if ids is not None:
            clauses.append(t.c.id.in_(list(ids)))
        if not clauses:
            # Unfiltered writes would touch every row of the table
            raise StoreOperationError("filter", t.name, reason="missing filter")
        return clauses

    def _fail(self, operation: str, table: str, error: SQLAlchemyError) -> NoReturn:
        self.db.rollback()
        logger.error(
            "Record store operation failed",
            operation=operation,
            table=table,
            error=str(error),
        )
        raise StoreOperationError(operation, table) from error
