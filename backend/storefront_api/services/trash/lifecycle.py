"""
Trash lifecycle manager.

Every trashable row is in exactly one state:

    LIVE      deleted_at IS NULL
    TRASHED   deleted_at = <timestamp of the trash action>
    PURGED    row removed; only the trash log remembers it

Transitions overwrite the single ``deleted_at`` field (or remove the
row) and are followed by one trash log entry. The state change always
happens first: if it fails, nothing is logged and StoreOperationError
reaches the caller; if the log write fails afterwards, the transition
stands and the failure is only logged.

Bulk operations are grouped per entity type, one batched statement per
group. A failing group contributes zero to the returned count and leaves
its rows untouched while the remaining groups proceed.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable

from storefront_shared.config.constants import TrashAction, UNKNOWN_NAME
from storefront_shared.config.logging import trash_logger as logger
from storefront_shared.config.settings import settings
from storefront_shared.infrastructure.notifications import (
    DELETE,
    UPDATE,
    ChangeNotifier,
    NullNotifier,
)
from storefront_shared.utils.exceptions import (
    DuplicateEntityError,
    NotFoundError,
    StoreOperationError,
    ValidationError,
)
from storefront_api.models.base import as_utc, utcnow

from .audit import ANONYMOUS, Actor, LogEntry, TrashLog
from .registry import (
    EntityConfig,
    EntityType,
    all_entity_types,
    get_entity_config,
    parse_entity_type,
)
from .store import RecordStore, Row

ALL = "all"


@dataclass
class TrashedItem:
    """A trashed row as shown in the trash view."""

    entity_type: EntityType
    id: str
    name: str
    deleted_at: datetime
    extra: dict[str, Any] = field(default_factory=dict)


def _display_name(config: EntityConfig, row: Row) -> str:
    value = row.get(config.display_column)
    return str(value) if value else UNKNOWN_NAME


def group_by_type(items: Iterable[tuple[EntityType | str, str]]) -> "OrderedDict[EntityType, list[str]]":
    """
    Group (entity_type, id) pairs by type, keeping first-seen order and
    dropping duplicate ids.
    """
    grouped: OrderedDict[EntityType, list[str]] = OrderedDict()
    for entity_type, entity_id in items:
        ids = grouped.setdefault(parse_entity_type(entity_type), [])
        if str(entity_id) not in ids:
            ids.append(str(entity_id))
    return grouped


class TrashLifecycleManager:
    """
    Trash, restore and purge rows of any registered entity type.

    Usage:
        manager = TrashLifecycleManager(RecordStore(db), actor=Actor.from_user(user))
        manager.trash(EntityType.BRAND, brand_id)
        manager.restore("brand", brand_id)
    """

    def __init__(
        self,
        store: RecordStore,
        actor: Actor = ANONYMOUS,
        notifier: ChangeNotifier | None = None,
        log_only_on_change: bool | None = None,
    ):
        self.store = store
        self.actor = actor
        self.notifier = notifier or NullNotifier()
        self.log = TrashLog(store)
        self.log_only_on_change = (
            settings.trash_log_only_on_change if log_only_on_change is None else log_only_on_change
        )

    # =========================================================================
    # Listing
    # =========================================================================

    def list_trashed(self, entity_filter: EntityType | str = ALL) -> list[TrashedItem]:
        """
        Trashed rows, newest deletion first.

        With "all", one query per registered type; a type whose query
        fails is logged and skipped, so partial results are returned.
        """
        if entity_filter == ALL:
            types = all_entity_types()
        else:
            types = [parse_entity_type(entity_filter)]

        items: list[TrashedItem] = []
        for entity_type in types:
            config = get_entity_config(entity_type)
            t = self.store.table(config.table_name)
            try:
                rows = self.store.select(
                    config.table_name,
                    where=[t.c.deleted_at.is_not(None)],
                    order_by=[t.c.deleted_at.desc()],
                    columns=config.listing_columns,
                )
            except StoreOperationError as e:
                logger.warning(
                    "Skipping entity type in trash listing",
                    entity_type=entity_type.value,
                    error=str(e),
                )
                continue
            for row in rows:
                items.append(
                    TrashedItem(
                        entity_type=entity_type,
                        id=str(row["id"]),
                        name=_display_name(config, row),
                        deleted_at=as_utc(row["deleted_at"]),
                        extra={col: row.get(col) for col in config.extra_columns},
                    )
                )

        items.sort(key=lambda item: item.deleted_at, reverse=True)
        return items

    # =========================================================================
    # Single-item transitions
    # =========================================================================

    def trash(self, entity_type: EntityType | str, entity_id: str) -> bool:
        """
        Move a row to the trash (deleted_at = now) and log ``trashed``.

        Re-trashing an already trashed row overwrites its timestamp and
        logs again, unless log_only_on_change is set, in which case the
        update is conditional and nothing is logged when the row was
        already trashed (returns False).

        Raises:
            NotFoundError: Row does not exist.
            ValidationError: Row still has live children.
            StoreOperationError: The update failed; nothing was logged.
        """
        etype = parse_entity_type(entity_type)
        config = get_entity_config(etype)
        row = self._get_row(etype, config, entity_id)
        self._ensure_no_live_children(etype, config, entity_id)

        t = self.store.table(config.table_name)
        where = [t.c.deleted_at.is_(None)] if self.log_only_on_change else []
        changed = self.store.update(
            config.table_name, {"deleted_at": utcnow()}, ids=[entity_id], where=where
        )
        if self.log_only_on_change and not changed:
            return False

        self.log_action(etype, entity_id, _display_name(config, row), TrashAction.TRASHED)
        self._notify(config.table_name, UPDATE, [entity_id])
        return True

    def restore(self, entity_type: EntityType | str, entity_id: str) -> bool:
        """
        Bring a row back to LIVE (deleted_at = NULL) and log ``restored``.

        Same failure contract as trash().

        Raises:
            DuplicateEntityError: A live row already holds one of the
                row's unique values (e.g. its slug); nothing is written.
        """
        etype = parse_entity_type(entity_type)
        config = get_entity_config(etype)
        row = self._get_row(etype, config, entity_id)
        if row["deleted_at"] is not None:
            self._ensure_restorable(etype, config, [str(entity_id)])

        t = self.store.table(config.table_name)
        where = [t.c.deleted_at.is_not(None)] if self.log_only_on_change else []
        changed = self.store.update(
            config.table_name, {"deleted_at": None}, ids=[entity_id], where=where
        )
        if self.log_only_on_change and not changed:
            return False

        self.log_action(etype, entity_id, _display_name(config, row), TrashAction.RESTORED)
        self._notify(config.table_name, UPDATE, [entity_id])
        return True

    def undo_trash(self, entity_type: EntityType | str, entity_id: str) -> bool:
        """Undo a trash action right after it happened."""
        return self.restore(entity_type, entity_id)

    def permanent_delete(self, entity_type: EntityType | str, entity_id: str) -> bool:
        """
        Remove a row for good and log ``permanently_deleted`` under the
        display name it had just before the delete.
        """
        etype = parse_entity_type(entity_type)
        config = get_entity_config(etype)
        row = self._get_row(etype, config, entity_id)
        name = _display_name(config, row)

        removed = self.store.delete(config.table_name, ids=[entity_id])
        if not removed:
            raise NotFoundError(etype.value.capitalize(), entity_id)

        self.log_action(etype, entity_id, name, TrashAction.PERMANENTLY_DELETED)
        self._notify(config.table_name, DELETE, [entity_id])
        return True

    # =========================================================================
    # Bulk transitions
    # =========================================================================

    def bulk_trash(self, entity_type: EntityType | str, ids: Iterable[str]) -> int:
        """Trash many rows of one type; returns the number trashed."""
        etype = parse_entity_type(entity_type)
        grouped = group_by_type((etype, i) for i in ids)
        return self._bulk_update(grouped, trashed=True)

    def bulk_restore(self, items: Iterable[tuple[EntityType | str, str]]) -> int:
        """
        Restore a selection of (entity_type, id) pairs.

        Returns the total restored across all type groups; callers must
        not assume all-or-nothing.
        """
        return self._bulk_update(group_by_type(items), trashed=False)

    def bulk_permanent_delete(self, items: Iterable[tuple[EntityType | str, str]]) -> int:
        """Purge a selection of (entity_type, id) pairs; returns the number removed."""
        deleted = 0
        for etype, ids in group_by_type(items).items():
            config = get_entity_config(etype)
            try:
                names = self._names(config, ids)
                removed = self.store.delete(config.table_name, ids=list(names))
            except StoreOperationError as e:
                self._log_group_failure("bulk permanent delete", etype, ids, e)
                continue

            removed_ids = [str(r["id"]) for r in removed]
            deleted += len(removed_ids)
            self._log_many(etype, removed_ids, names, TrashAction.PERMANENTLY_DELETED)
            self._notify(config.table_name, DELETE, removed_ids)
        return deleted

    def _bulk_update(self, grouped: "OrderedDict[EntityType, list[str]]", trashed: bool) -> int:
        action = TrashAction.TRASHED if trashed else TrashAction.RESTORED
        total = 0
        for etype, ids in grouped.items():
            config = get_entity_config(etype)
            t = self.store.table(config.table_name)
            if trashed:
                value = utcnow()
                state_filter = t.c.deleted_at.is_(None)
            else:
                value = None
                state_filter = t.c.deleted_at.is_not(None)
            try:
                if trashed:
                    self._ensure_no_live_children_many(etype, config, ids)
                else:
                    self._ensure_restorable(etype, config, ids)
                names = self._names(
                    config, ids, where=[state_filter] if self.log_only_on_change else ()
                )
                if not names:
                    continue
                where = [state_filter] if self.log_only_on_change else []
                changed = self.store.update(
                    config.table_name, {"deleted_at": value}, ids=list(names), where=where
                )
                if changed < len(names):
                    # Rows removed between the read and the update
                    target_state = t.c.deleted_at.is_not(None) if trashed else t.c.deleted_at.is_(None)
                    names = self._names(config, list(names), where=[target_state])
            except (StoreOperationError, ValidationError) as e:
                self._log_group_failure(f"bulk {action}", etype, ids, e)
                continue

            total += changed
            if not names:
                continue
            self._log_many(etype, list(names), names, action)
            self._notify(config.table_name, UPDATE, list(names))
        return total

    # =========================================================================
    # Audit
    # =========================================================================

    def log_action(
        self,
        entity_type: EntityType | str,
        entity_id: str,
        name: str,
        action: str,
    ) -> bool:
        """
        Append one trash log entry for this manager's actor.

        Never raises on a failed write; returns False instead.
        """
        etype = parse_entity_type(entity_type)
        return self.log.append([self._entry(etype, entity_id, name, action)])

    def _log_many(
        self,
        etype: EntityType,
        ids: list[str],
        names: dict[str, str],
        action: str,
    ) -> bool:
        return self.log.append(
            self._entry(etype, i, names.get(i, UNKNOWN_NAME), action) for i in ids
        )

    def _entry(self, etype: EntityType, entity_id: str, name: str, action: str) -> LogEntry:
        return LogEntry(
            entity_type=etype.value,
            entity_id=str(entity_id),
            entity_name=name,
            action=action,
            performed_by=self.actor.id,
            performed_by_email=self.actor.email,
        )

    def recent_activity(self, limit: int | None = None) -> list[Row]:
        return self.log.recent_activity(limit or settings.trash_activity_limit)

    def history(self, entity_type: EntityType | str, entity_id: str) -> list[Row]:
        return self.log.history(entity_type, entity_id)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _get_row(self, etype: EntityType, config: EntityConfig, entity_id: str) -> Row:
        t = self.store.table(config.table_name)
        rows = self.store.select(
            config.table_name,
            where=[t.c.id == str(entity_id)],
            columns=("id", config.display_column, "deleted_at"),
        )
        if not rows:
            raise NotFoundError(etype.value.capitalize(), entity_id)
        return rows[0]

    def _names(
        self,
        config: EntityConfig,
        ids: list[str],
        where: Iterable[Any] = (),
    ) -> dict[str, str]:
        """Display names of the existing rows among ids, in request order."""
        t = self.store.table(config.table_name)
        rows = self.store.select(
            config.table_name,
            where=[t.c.id.in_(ids), *where],
            columns=("id", config.display_column),
        )
        found = {str(r["id"]): _display_name(config, r) for r in rows}
        return {i: found[i] for i in ids if i in found}

    def _ensure_no_live_children(self, etype: EntityType, config: EntityConfig, entity_id: str) -> None:
        self._ensure_no_live_children_many(etype, config, [str(entity_id)])

    def _ensure_no_live_children_many(
        self, etype: EntityType, config: EntityConfig, ids: list[str]
    ) -> None:
        if not config.parent_column:
            return
        t = self.store.table(config.table_name)
        parent = t.c[config.parent_column]
        # Children trashed in the same selection do not block their parent
        live_children = self.store.count(
            config.table_name,
            where=[parent.in_(ids), t.c.deleted_at.is_(None), t.c.id.not_in(ids)],
        )
        if live_children:
            raise ValidationError(
                f"Cannot delete {etype.value}: it has {live_children} active child item(s). "
                "Move or delete them first.",
                entity_type=etype.value,
                entity_ids=ids,
            )

    def _ensure_restorable(self, etype: EntityType, config: EntityConfig, ids: list[str]) -> None:
        """
        Refuse to restore trashed rows whose unique values are held by a
        live row, or shared by two rows of the same selection.
        """
        if not config.unique_columns:
            return
        t = self.store.table(config.table_name)
        rows = self.store.select(
            config.table_name,
            where=[t.c.id.in_(ids), t.c.deleted_at.is_not(None)],
            columns=("id", *config.unique_columns),
        )
        for column in config.unique_columns:
            values = [r[column] for r in rows if r[column] is not None]
            if not values:
                continue
            taken = self.store.select(
                config.table_name,
                where=[t.c[column].in_(values), t.c.deleted_at.is_(None)],
                columns=(column,),
                limit=1,
            )
            if taken:
                conflict = taken[0][column]
            else:
                conflict = next((v for v in values if values.count(v) > 1), None)
            if conflict is not None:
                raise DuplicateEntityError(
                    etype.value.capitalize(),
                    str(conflict),
                    field=column,
                    entity_ids=ids,
                )

    def _log_group_failure(
        self, operation: str, etype: EntityType, ids: list[str], error: Exception
    ) -> None:
        logger.error(
            "Trash group operation failed",
            operation=operation,
            entity_type=etype.value,
            count=len(ids),
            error=str(error),
        )

    def _notify(self, table: str, event: str, ids: list[str]) -> None:
        if ids:
            self.notifier.notify(table, event, ids)
