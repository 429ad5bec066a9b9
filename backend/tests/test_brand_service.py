"""
Tests for BrandService.

Tests cover:
- Slug derivation and uniqueness among live brands
- Slug reuse after the previous owner was trashed
- URL validation
- Live product counts
- Delete delegating to the trash
"""

import pytest
from sqlalchemy import select

from storefront_shared.utils.exceptions import (
    DuplicateEntityError,
    NotFoundError,
    ValidationError,
)
from storefront_api.models import Brand, TrashLog
from storefront_api.services.domain import BrandService


@pytest.fixture
def brand_service(db_session):
    return BrandService(db_session)


class TestBrandCreate:

    def test_slug_derived_from_name(self, brand_service, actor):
        """Slug is lowercased with runs of punctuation collapsed."""
        brand = brand_service.create({"name": "Tommy  Hilfiger & Co."}, actor)
        assert brand.slug == "tommy-hilfiger-co"

    def test_explicit_slug_must_be_canonical(self, brand_service, actor):
        with pytest.raises(ValidationError):
            brand_service.create({"name": "Adidas", "slug": "Adidas Originals"}, actor)

    def test_duplicate_live_slug_rejected(self, brand_service, actor, seed_brand):
        with pytest.raises(DuplicateEntityError):
            brand_service.create({"name": "NIKE"}, actor)

    def test_slug_reusable_after_trash(self, db_session, brand_service, actor, seed_brand):
        """A trashed brand does not block its slug."""
        brand_service.delete(seed_brand.id, actor)

        replacement = brand_service.create({"name": "Nike"}, actor)

        assert replacement.slug == "nike"
        assert replacement.id != seed_brand.id

    def test_name_without_alphanumerics_rejected(self, brand_service, actor):
        with pytest.raises(ValidationError):
            brand_service.create({"name": "!!!"}, actor)

    @pytest.mark.parametrize(
        "url",
        ["javascript:alert(1)", "http://localhost/logo.png", "ftp://cdn.shop.test/logo.png"],
    )
    def test_unsafe_logo_url_rejected(self, brand_service, actor, url):
        with pytest.raises(ValidationError):
            brand_service.create({"name": "Puma", "logo_url": url}, actor)

    def test_validation_failure_writes_nothing(self, db_session, brand_service, actor):
        with pytest.raises(ValidationError):
            brand_service.create({"name": "Puma", "website_url": "file:///etc/passwd"}, actor)
        assert db_session.scalars(select(Brand)).all() == []


class TestBrandUpdate:

    def test_rename_rederives_slug(self, brand_service, actor, seed_brand):
        updated = brand_service.update(seed_brand.id, {"name": "Nike Sportswear"}, actor)
        assert updated.slug == "nike-sportswear"

    def test_update_to_taken_slug_rejected(self, brand_service, actor, seed_brand):
        other = brand_service.create({"name": "Adidas"}, actor)
        with pytest.raises(DuplicateEntityError):
            brand_service.update(other.id, {"slug": "nike"}, actor)

    def test_trashed_brand_cannot_be_updated(self, brand_service, actor, seed_brand):
        brand_service.delete(seed_brand.id, actor)
        with pytest.raises(NotFoundError):
            brand_service.update(seed_brand.id, {"name": "Nike 2"}, actor)


class TestBrandDelete:

    def test_delete_moves_to_trash(self, db_session, brand_service, actor, seed_brand):
        brand_service.delete(seed_brand.id, actor)

        db_session.expire_all()
        brand = db_session.get(Brand, seed_brand.id)
        assert brand is not None
        assert brand.deleted_at is not None
        [entry] = db_session.scalars(select(TrashLog)).all()
        assert entry.action == "trashed"
        assert entry.entity_name == "Nike"

    def test_trashed_brand_hidden_from_reads(self, brand_service, actor, seed_brand):
        brand_service.delete(seed_brand.id, actor)

        assert brand_service.list_with_counts() == []
        with pytest.raises(NotFoundError):
            brand_service.get_by_id(seed_brand.id)

    def test_restore_after_slug_reuse_fails(self, brand_service, actor, seed_brand):
        """Two live brands cannot share a slug, even through restore."""
        brand_service.delete(seed_brand.id, actor)
        brand_service.create({"name": "Nike"}, actor)

        with pytest.raises(DuplicateEntityError):
            brand_service.lifecycle(actor).restore("brand", seed_brand.id)


class TestBrandQueries:

    def test_product_count_ignores_trashed_products(self, brand_service, make_product, seed_brand, trashed_at):
        make_product("Air Max", brand_id=seed_brand.id)
        gone = make_product("Cortez", brand_id=seed_brand.id)
        trashed_at(gone)

        [brand] = brand_service.list_with_counts()
        assert brand.product_count == 1
        assert brand_service.get_by_id(seed_brand.id).product_count == 1

    def test_search_is_case_insensitive(self, brand_service, actor, seed_brand):
        brand_service.create({"name": "Adidas"}, actor)

        assert [b.name for b in brand_service.list_with_counts(search="NIK")] == ["Nike"]

    def test_search_wildcards_are_literal(self, brand_service, seed_brand):
        assert brand_service.list_with_counts(search="%") == []


class TestBrandExport:

    def test_export_lists_live_brands_with_counts(self, brand_service, actor, make_product, seed_brand):
        make_product("Air Max", brand_id=seed_brand.id)
        gone = brand_service.create({"name": "Reebok"}, actor)
        brand_service.delete(gone.id, actor)

        lines = brand_service.export_csv().splitlines()

        assert lines[0] == "name,slug,description,logo_url,website_url,is_active,product_count"
        assert lines[1:] == ["Nike,nike,,https://cdn.shop.test/nike.png,,true,1"]
