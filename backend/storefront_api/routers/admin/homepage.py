"""
Homepage section endpoints.
"""

from pydantic import BaseModel

from storefront_api.routers.admin._base import (
    APIRouter, Depends, Session, status,
    get_db, require_management, get_actor, Actor,
)
from storefront_api.routers.admin_schemas import (
    HomepageSectionCreate,
    HomepageSectionOutput,
    HomepageSectionUpdate,
)
from storefront_api.services.domain import HomepageSectionService


router = APIRouter(prefix="/homepage-sections", tags=["admin-homepage"])


class ToggleBody(BaseModel):
    enabled: bool


@router.get("", response_model=list[HomepageSectionOutput])
def list_sections(
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> list[HomepageSectionOutput]:
    return HomepageSectionService(db).list_ordered()


@router.get("/type/{section_type}", response_model=HomepageSectionOutput)
def get_section_by_type(
    section_type: str,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> HomepageSectionOutput:
    return HomepageSectionService(db).get_by_type(section_type)


@router.post("", response_model=HomepageSectionOutput, status_code=status.HTTP_201_CREATED)
def create_section(
    body: HomepageSectionCreate,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
    actor: Actor = Depends(get_actor),
) -> HomepageSectionOutput:
    return HomepageSectionService(db).create(body.model_dump(), actor)


@router.patch("/{section_id}", response_model=HomepageSectionOutput)
def update_section(
    section_id: str,
    body: HomepageSectionUpdate,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
    actor: Actor = Depends(get_actor),
) -> HomepageSectionOutput:
    return HomepageSectionService(db).update(section_id, body.model_dump(exclude_unset=True), actor)


@router.post("/{section_id}/toggle", response_model=HomepageSectionOutput)
def toggle_section(
    section_id: str,
    body: ToggleBody,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
    actor: Actor = Depends(get_actor),
) -> HomepageSectionOutput:
    return HomepageSectionService(db).toggle(section_id, body.enabled, actor)


@router.delete("/{section_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_section(
    section_id: str,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
    actor: Actor = Depends(get_actor),
) -> None:
    """Remove a section. Sections do not go to the trash."""
    HomepageSectionService(db).delete(section_id, actor)
