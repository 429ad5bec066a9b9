"""
Brand management endpoints.
"""

from storefront_api.routers.admin._base import (
    APIRouter, Depends, Query, Response, Session, status,
    get_db, require_management, get_actor, csv_response, Actor,
)
from storefront_api.routers.admin_schemas import BrandCreate, BrandOutput, BrandUpdate
from storefront_api.services.domain import BrandService


router = APIRouter(tags=["admin-brands"])


@router.get("/brands", response_model=list[BrandOutput])
def list_brands(
    search: str | None = Query(None, max_length=100),
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> list[BrandOutput]:
    """Live brands with their product counts."""
    return BrandService(db).list_with_counts(search=search)


@router.get("/brands/export", response_class=Response)
def export_brands(
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> Response:
    """Live brands as a CSV download."""
    return csv_response(BrandService(db).export_csv(), "brands")


@router.get("/brands/{brand_id}", response_model=BrandOutput)
def get_brand(
    brand_id: str,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> BrandOutput:
    return BrandService(db).get_by_id(brand_id)


@router.post("/brands", response_model=BrandOutput, status_code=status.HTTP_201_CREATED)
def create_brand(
    body: BrandCreate,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
    actor: Actor = Depends(get_actor),
) -> BrandOutput:
    """Create a brand. The slug is derived from the name when omitted."""
    return BrandService(db).create(body.model_dump(), actor)


@router.patch("/brands/{brand_id}", response_model=BrandOutput)
def update_brand(
    brand_id: str,
    body: BrandUpdate,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
    actor: Actor = Depends(get_actor),
) -> BrandOutput:
    return BrandService(db).update(brand_id, body.model_dump(exclude_unset=True), actor)


@router.delete("/brands/{brand_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_brand(
    brand_id: str,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
    actor: Actor = Depends(get_actor),
) -> None:
    """Move a brand to the trash."""
    BrandService(db).delete(brand_id, actor)
