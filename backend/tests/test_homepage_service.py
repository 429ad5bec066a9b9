"""
Tests for HomepageSectionService.
"""

from datetime import timedelta

import pytest

from storefront_shared.utils.exceptions import NotFoundError, ValidationError
from storefront_api.models import utcnow
from storefront_api.services.domain import HomepageSectionService


@pytest.fixture
def section_service(db_session):
    return HomepageSectionService(db_session)


class TestHomepageSections:

    def test_sort_order_appended(self, section_service, actor):
        hero = section_service.create({"section_type": "hero", "title": "Summer"}, actor)
        banner = section_service.create({"section_type": "banner"}, actor)

        assert (hero.sort_order, banner.sort_order) == (1, 2)
        assert [s.id for s in section_service.list_ordered()] == [hero.id, banner.id]
        assert hero.content == {}

    def test_get_by_type(self, section_service, actor):
        section_service.create({"section_type": "hero", "title": "Summer"}, actor)

        assert section_service.get_by_type("hero").title == "Summer"
        with pytest.raises(NotFoundError):
            section_service.get_by_type("newsletter")

    def test_toggle(self, section_service, actor):
        section = section_service.create({"section_type": "hero"}, actor)

        assert section_service.toggle(section.id, False, actor).is_enabled is False
        assert section_service.toggle(section.id, True, actor).is_enabled is True

    def test_window_must_be_ordered(self, section_service, actor):
        now = utcnow()
        with pytest.raises(ValidationError):
            section_service.create(
                {"section_type": "promo", "starts_at": now, "expires_at": now - timedelta(days=1)},
                actor,
            )

    def test_update_checks_window_against_stored_start(self, section_service, actor):
        now = utcnow()
        section = section_service.create({"section_type": "promo", "starts_at": now}, actor)
        with pytest.raises(ValidationError):
            section_service.update(section.id, {"expires_at": now - timedelta(hours=1)}, actor)

    def test_delete_removes_row(self, section_service, actor):
        """Sections are not trashable; delete is final."""
        section = section_service.create({"section_type": "hero"}, actor)
        section_service.delete(section.id, actor)

        assert section_service.list_ordered() == []
        with pytest.raises(NotFoundError):
            section_service.get_by_id(section.id)
