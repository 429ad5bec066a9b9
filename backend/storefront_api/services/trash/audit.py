"""
Trash log: append and query helpers.

Entries are written only by the lifecycle manager and the retention
sweeper, and never updated or deleted. Appends are best-effort: a failed
write is logged for operators and reported as False, never raised, so it
cannot undo the state transition it describes.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable

from storefront_shared.config.logging import mask_email, trash_logger as logger
from storefront_shared.config.constants import SYSTEM_ACTOR_EMAIL, TrashAction
from storefront_shared.security.auth import get_user_email, get_user_id
from storefront_shared.utils.exceptions import StoreOperationError
from storefront_api.models.base import utcnow

from .registry import EntityType, parse_entity_type
from .store import RecordStore, Row

TRASH_LOG_TABLE = "trash_log"


@dataclass(frozen=True)
class Actor:
    """Who performed a trash action. ``id`` is None for system actions."""

    id: str | None
    email: str | None

    @classmethod
    def from_user(cls, user: dict[str, Any]) -> "Actor":
        return cls(id=get_user_id(user), email=get_user_email(user))

    @classmethod
    def system(cls) -> "Actor":
        return cls(id=None, email=SYSTEM_ACTOR_EMAIL)


ANONYMOUS = Actor(id=None, email=None)


@dataclass(frozen=True)
class LogEntry:
    entity_type: str
    entity_id: str
    entity_name: str
    action: str
    performed_by: str | None = None
    performed_by_email: str | None = None


class TrashLog:
    """Reads and appends trash log entries through a RecordStore."""

    def __init__(self, store: RecordStore):
        self.store = store

    def append(self, entries: Iterable[LogEntry]) -> bool:
        """
        Append entries in order. Returns False if the write failed.

        Each entry gets its own client-side timestamp so that
        created_at order matches call order.
        """
        rows = [{**asdict(e), "created_at": utcnow()} for e in entries]
        if not rows:
            return True
        for row in rows:
            if row["action"] not in TrashAction.ALL:
                raise ValueError(f"Unknown trash action: {row['action']}")
        try:
            self.store.insert(TRASH_LOG_TABLE, rows)
        except StoreOperationError as e:
            first = rows[0]
            logger.error(
                "Trash log write failed",
                entity_type=first["entity_type"],
                action=first["action"],
                entity_ids=[r["entity_id"] for r in rows],
                actor=mask_email(first["performed_by_email"]),
                error=str(e),
            )
            return False
        return True

    def recent_activity(self, limit: int = 50) -> list[Row]:
        """Newest-first activity feed."""
        t = self.store.table(TRASH_LOG_TABLE)
        return self.store.select(
            TRASH_LOG_TABLE,
            order_by=[t.c.created_at.desc(), t.c.id.desc()],
            limit=limit,
        )

    def history(self, entity_type: EntityType | str, entity_id: str) -> list[Row]:
        """All entries of one entity, oldest first."""
        etype = parse_entity_type(entity_type)
        t = self.store.table(TRASH_LOG_TABLE)
        return self.store.select(
            TRASH_LOG_TABLE,
            where=[t.c.entity_type == etype.value, t.c.entity_id == str(entity_id)],
            order_by=[t.c.created_at.asc(), t.c.id.asc()],
        )
