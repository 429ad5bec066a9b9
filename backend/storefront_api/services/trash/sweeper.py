"""
Retention sweeper: purge rows that have been in the trash too long.

Stateless and safe to re-run. Each entity type is swept with a single
batched delete (``deleted_at IS NOT NULL AND deleted_at < cutoff``);
removed ids are logged as ``permanently_deleted`` under the placeholder
name "Auto-cleaned" with the system actor, since the rows are gone by
the time they are logged. A type that fails is reported as -1 and does
not stop the others.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from storefront_shared.config.constants import AUTO_CLEANED_NAME, SWEEP_FAILED, TrashAction
from storefront_shared.config.logging import sweeper_logger as logger
from storefront_shared.config.settings import settings
from storefront_shared.infrastructure.notifications import DELETE, ChangeNotifier, NullNotifier
from storefront_shared.utils.exceptions import StoreOperationError
from storefront_api.models.base import utcnow

from .audit import Actor, LogEntry, TrashLog
from .registry import EntityType, all_entity_types, get_entity_config
from .store import RecordStore


@dataclass
class SweepResult:
    """Run summary: entity_type -> rows removed, or -1 if the type failed."""

    success: bool = True
    cleaned: dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(n for n in self.cleaned.values() if n > 0)

    @property
    def failed_types(self) -> list[str]:
        return [t for t, n in self.cleaned.items() if n == SWEEP_FAILED]

    def to_dict(self) -> dict:
        return {"success": self.success, "cleaned": dict(self.cleaned)}


class RetentionSweeper:
    """
    Usage:
        with get_db_context() as db:
            result = RetentionSweeper(RecordStore(db)).run()
    """

    def __init__(
        self,
        store: RecordStore,
        retention_days: int | None = None,
        notifier: ChangeNotifier | None = None,
    ):
        self.store = store
        self.retention = timedelta(
            days=settings.trash_retention_days if retention_days is None else retention_days
        )
        self.notifier = notifier or NullNotifier()
        self.log = TrashLog(store)
        self.actor = Actor.system()

    def cutoff(self, now: datetime | None = None) -> datetime:
        return (now or utcnow()) - self.retention

    def run(self, now: datetime | None = None) -> SweepResult:
        """Purge expired trash across every registered entity type."""
        cutoff = self.cutoff(now)
        result = SweepResult()

        for entity_type in all_entity_types():
            config = get_entity_config(entity_type)
            t = self.store.table(config.table_name)
            try:
                removed = self.store.delete(
                    config.table_name,
                    where=[t.c.deleted_at.is_not(None), t.c.deleted_at < cutoff],
                )
            except StoreOperationError as e:
                logger.error(
                    "Retention sweep failed for entity type",
                    entity_type=entity_type.value,
                    table=config.table_name,
                    error=str(e),
                )
                result.cleaned[entity_type.value] = SWEEP_FAILED
                continue

            ids = [str(r["id"]) for r in removed]
            result.cleaned[entity_type.value] = len(ids)
            if ids:
                self._log_removed(entity_type, ids)
                self.notifier.notify(config.table_name, DELETE, ids)

        logger.info(
            "Retention sweep finished",
            cutoff=cutoff.isoformat(),
            removed=result.total,
            cleaned=result.cleaned,
            failed_types=result.failed_types,
        )
        return result

    def count_eligible(self, now: datetime | None = None) -> dict[str, int]:
        """Dry run: rows a sweep at ``now`` would remove, per entity type."""
        cutoff = self.cutoff(now)
        counts: dict[str, int] = {}
        for entity_type in all_entity_types():
            config = get_entity_config(entity_type)
            t = self.store.table(config.table_name)
            try:
                counts[entity_type.value] = self.store.count(
                    config.table_name,
                    where=[t.c.deleted_at.is_not(None), t.c.deleted_at < cutoff],
                )
            except StoreOperationError:
                counts[entity_type.value] = SWEEP_FAILED
        return counts

    def _log_removed(self, entity_type: EntityType, ids: list[str]) -> None:
        self.log.append(
            LogEntry(
                entity_type=entity_type.value,
                entity_id=i,
                entity_name=AUTO_CLEANED_NAME,
                action=TrashAction.PERMANENTLY_DELETED,
                performed_by=self.actor.id,
                performed_by_email=self.actor.email,
            )
            for i in ids
        )
