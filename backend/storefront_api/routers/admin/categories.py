"""
Category management endpoints.
"""

from storefront_api.routers.admin._base import (
    APIRouter, Depends, Response, Session, status,
    get_db, require_management, get_actor, csv_response, Actor,
)
from storefront_api.routers.admin_schemas import (
    CategoryCreate,
    CategoryImportRow,
    CategoryOutput,
    CategoryUpdate,
    ImportResult,
)
from storefront_api.services.domain import CategoryService


router = APIRouter(tags=["admin-categories"])


@router.get("/categories", response_model=list[CategoryOutput])
def list_categories(
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> list[CategoryOutput]:
    """List live categories in display order."""
    return CategoryService(db).list_ordered()


@router.get("/categories/export", response_class=Response)
def export_categories(
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> Response:
    """Live categories as a CSV download; parents are referenced by name."""
    return csv_response(CategoryService(db).export_csv(), "categories")


@router.get("/categories/{category_id}", response_model=CategoryOutput)
def get_category(
    category_id: str,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> CategoryOutput:
    return CategoryService(db).get_by_id(category_id)


@router.get("/categories/{category_id}/children", response_model=list[CategoryOutput])
def list_category_children(
    category_id: str,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> list[CategoryOutput]:
    return CategoryService(db).list_children(category_id)


@router.post("/categories", response_model=CategoryOutput, status_code=status.HTTP_201_CREATED)
def create_category(
    body: CategoryCreate,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
    actor: Actor = Depends(get_actor),
) -> CategoryOutput:
    return CategoryService(db).create(body.model_dump(), actor)


@router.post("/categories/import", response_model=ImportResult)
def import_categories(
    body: list[CategoryImportRow],
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
    actor: Actor = Depends(get_actor),
) -> ImportResult:
    """Create categories from parsed import rows; parents are created first."""
    return CategoryService(db).import_rows(body, actor)


@router.patch("/categories/{category_id}", response_model=CategoryOutput)
def update_category(
    category_id: str,
    body: CategoryUpdate,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
    actor: Actor = Depends(get_actor),
) -> CategoryOutput:
    return CategoryService(db).update(category_id, body.model_dump(exclude_unset=True), actor)


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: str,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
    actor: Actor = Depends(get_actor),
) -> None:
    """Move a category to the trash. Refused while it has live subcategories."""
    CategoryService(db).delete(category_id, actor)
