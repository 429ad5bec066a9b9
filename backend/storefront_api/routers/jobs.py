"""
Scheduled job triggers.

The retention sweep is meant to be called by an external scheduler (cron,
a platform job runner) once a day with an ADMIN service token.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from storefront_shared.config.logging import sweeper_logger as logger
from storefront_shared.infrastructure.db import get_db
from storefront_shared.infrastructure.notifications import get_notifier
from storefront_shared.security.auth import require_admin
from storefront_api.routers.admin_schemas import SweepOutput
from storefront_api.services.trash import RecordStore, RetentionSweeper


router = APIRouter(prefix="/api/jobs", tags=["jobs"])


@router.post("/auto-clean-trash", response_model=SweepOutput)
def auto_clean_trash(
    db: Session = Depends(get_db),
    _user: dict = Depends(require_admin),
):
    """
    Purge rows trashed longer than the retention window.

    Returns ``{"success": true, "cleaned": {entity_type: count}}`` where a
    count of -1 marks an entity type that failed. An unexpected error
    aborts the run with 500 ``{"error": ...}``.
    """
    try:
        result = RetentionSweeper(RecordStore(db), notifier=get_notifier()).run()
    except Exception as e:
        logger.error("Retention sweep aborted", error=str(e), exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(e)},
        )
    return SweepOutput(**result.to_dict())
