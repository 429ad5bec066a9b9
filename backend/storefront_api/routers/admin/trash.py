"""
Global trash endpoints: browse, restore and purge trashed rows of every
registered entity type, and read the trash activity log.
"""

from storefront_shared.config.constants import TrashAction
from storefront_api.models import as_utc
from storefront_api.routers.admin._base import (
    APIRouter, Depends, Query,
    require_admin, require_management, get_lifecycle,
    TrashLifecycleManager,
)
from storefront_api.routers.admin_schemas import (
    TrashActionResult,
    TrashBulkRequest,
    TrashBulkResult,
    TrashedItemOutput,
    TrashLogOutput,
)
from storefront_api.services.trash import ALL, parse_entity_type


router = APIRouter(prefix="/trash", tags=["admin-trash"])


def _log_output(row: dict) -> TrashLogOutput:
    return TrashLogOutput.model_validate({**row, "created_at": as_utc(row["created_at"])})


@router.get("", response_model=list[TrashedItemOutput])
def list_trash(
    entity_type: str = Query(ALL, description="Entity type or 'all'"),
    _user: dict = Depends(require_management),
    lifecycle: TrashLifecycleManager = Depends(get_lifecycle),
) -> list[TrashedItemOutput]:
    """Trashed rows, most recently deleted first."""
    return [
        TrashedItemOutput(
            entity_type=item.entity_type.value,
            id=item.id,
            name=item.name,
            deleted_at=item.deleted_at,
            extra=item.extra,
        )
        for item in lifecycle.list_trashed(entity_type)
    ]


@router.get("/activity", response_model=list[TrashLogOutput])
def trash_activity(
    limit: int = Query(50, ge=1, le=500),
    _user: dict = Depends(require_management),
    lifecycle: TrashLifecycleManager = Depends(get_lifecycle),
) -> list[TrashLogOutput]:
    """Latest trash log entries, newest first."""
    return [_log_output(r) for r in lifecycle.recent_activity(limit)]


@router.get("/{entity_type}/{entity_id}/history", response_model=list[TrashLogOutput])
def trash_history(
    entity_type: str,
    entity_id: str,
    _user: dict = Depends(require_management),
    lifecycle: TrashLifecycleManager = Depends(get_lifecycle),
) -> list[TrashLogOutput]:
    return [_log_output(r) for r in lifecycle.history(entity_type, entity_id)]


@router.post("/bulk-restore", response_model=TrashBulkResult)
def bulk_restore(
    body: TrashBulkRequest,
    _user: dict = Depends(require_admin),
    lifecycle: TrashLifecycleManager = Depends(get_lifecycle),
) -> TrashBulkResult:
    """
    Restore a selection. The count may be lower than requested when an
    entity type fails; those rows stay in the trash.
    """
    items = [(i.entity_type, i.id) for i in body.items]
    return TrashBulkResult(requested=len(items), affected=lifecycle.bulk_restore(items))


@router.post("/bulk-delete", response_model=TrashBulkResult)
def bulk_permanent_delete(
    body: TrashBulkRequest,
    _user: dict = Depends(require_admin),
    lifecycle: TrashLifecycleManager = Depends(get_lifecycle),
) -> TrashBulkResult:
    items = [(i.entity_type, i.id) for i in body.items]
    return TrashBulkResult(requested=len(items), affected=lifecycle.bulk_permanent_delete(items))


@router.post("/{entity_type}/{entity_id}", response_model=TrashActionResult)
def trash_item(
    entity_type: str,
    entity_id: str,
    _user: dict = Depends(require_management),
    lifecycle: TrashLifecycleManager = Depends(get_lifecycle),
) -> TrashActionResult:
    """Move a row to the trash."""
    etype = parse_entity_type(entity_type)
    changed = lifecycle.trash(etype, entity_id)
    return TrashActionResult(success=changed, entity_type=etype.value, id=entity_id, action=TrashAction.TRASHED)


@router.post("/{entity_type}/{entity_id}/restore", response_model=TrashActionResult)
def restore_item(
    entity_type: str,
    entity_id: str,
    _user: dict = Depends(require_admin),
    lifecycle: TrashLifecycleManager = Depends(get_lifecycle),
) -> TrashActionResult:
    etype = parse_entity_type(entity_type)
    changed = lifecycle.restore(etype, entity_id)
    return TrashActionResult(success=changed, entity_type=etype.value, id=entity_id, action=TrashAction.RESTORED)


@router.post("/{entity_type}/{entity_id}/undo", response_model=TrashActionResult)
def undo_trash(
    entity_type: str,
    entity_id: str,
    _user: dict = Depends(require_management),
    lifecycle: TrashLifecycleManager = Depends(get_lifecycle),
) -> TrashActionResult:
    """Undo a trash action from a list view."""
    etype = parse_entity_type(entity_type)
    changed = lifecycle.undo_trash(etype, entity_id)
    return TrashActionResult(success=changed, entity_type=etype.value, id=entity_id, action=TrashAction.RESTORED)


@router.delete("/{entity_type}/{entity_id}", response_model=TrashActionResult)
def permanent_delete(
    entity_type: str,
    entity_id: str,
    _user: dict = Depends(require_admin),
    lifecycle: TrashLifecycleManager = Depends(get_lifecycle),
) -> TrashActionResult:
    """Remove a row for good. Requires ADMIN role."""
    etype = parse_entity_type(entity_type)
    lifecycle.permanent_delete(etype, entity_id)
    return TrashActionResult(
        success=True, entity_type=etype.value, id=entity_id, action=TrashAction.PERMANENTLY_DELETED
    )
