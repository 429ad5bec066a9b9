"""
Shared dependencies and helpers for admin routers.
"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from storefront_shared.config.constants import Limits
from storefront_shared.infrastructure.db import get_db
from storefront_shared.infrastructure.notifications import get_notifier
from storefront_shared.security.auth import (
    current_user,
    require_admin,
    require_management,
)
from storefront_shared.utils.csv_export import export_filename
from storefront_api.services.trash import Actor, RecordStore, TrashLifecycleManager


def get_actor(user: dict = Depends(current_user)) -> Actor:
    """Actor recorded in the trash log for the authenticated user."""
    return Actor.from_user(user)


def get_lifecycle(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> TrashLifecycleManager:
    return TrashLifecycleManager(RecordStore(db), actor=actor, notifier=get_notifier())


def page_limit(limit: int = Query(Limits.DEFAULT_PAGE_SIZE, ge=1, le=Limits.MAX_PAGE_SIZE)) -> int:
    return limit


def csv_response(content: str, entity_plural: str) -> Response:
    """CSV download named after the entity and today's date."""
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(entity_plural)}"'},
    )


__all__ = [
    "APIRouter",
    "Depends",
    "Query",
    "Response",
    "Session",
    "status",
    "get_db",
    "current_user",
    "require_admin",
    "require_management",
    "get_actor",
    "get_lifecycle",
    "page_limit",
    "csv_response",
    "Actor",
    "TrashLifecycleManager",
]
