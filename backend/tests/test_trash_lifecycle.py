"""
Tests for the trash lifecycle manager: trash, restore, permanent delete,
bulk operations and the trash log they write.
"""

import pytest
from sqlalchemy import select

from storefront_shared.config.constants import TrashAction, UNKNOWN_NAME
from storefront_shared.utils.exceptions import (
    DuplicateEntityError,
    NotFoundError,
    StoreOperationError,
    ValidationError,
)
from storefront_api.models import Brand, Category, Coupon, Product, TrashLog
from storefront_api.services.trash import Actor, EntityType, RecordStore, TrashLifecycleManager

from tests.conftest import FailingRecordStore, add


class PurgingRecordStore(RecordStore):
    """Removes one row right before the next update on its table, as a concurrent purge would."""

    def __init__(self, db, table, entity_id):
        super().__init__(db)
        self.purge_table = table
        self.purge_id = entity_id

    def update(self, table, *args, **kwargs):
        if table == self.purge_table and self.purge_id is not None:
            self.delete(table, ids=[self.purge_id])
            self.purge_id = None
        return super().update(table, *args, **kwargs)


def deleted_at(db_session, model, entity_id):
    """deleted_at of a row, or "PURGED" when the row no longer exists."""
    row = db_session.execute(select(model.deleted_at).where(model.id == entity_id)).first()
    return "PURGED" if row is None else row[0]


def log_entries(db_session, entity_ids=None):
    query = select(TrashLog).order_by(TrashLog.id)
    if entity_ids is not None:
        query = query.where(TrashLog.entity_id.in_(entity_ids))
    return db_session.scalars(query).all()


class TestTrashAndRestore:

    def test_trash_sets_deleted_at_and_logs(self, db_session, lifecycle, seed_product):
        pid = seed_product.id

        assert lifecycle.trash(EntityType.PRODUCT, pid) is True

        assert deleted_at(db_session, Product, pid) is not None
        [entry] = log_entries(db_session)
        assert entry.entity_type == "product"
        assert entry.entity_id == pid
        assert entry.entity_name == "Air Max"
        assert entry.action == TrashAction.TRASHED
        assert entry.performed_by == "user-admin-1"
        assert entry.performed_by_email == "admin@shop.test"

    def test_round_trip_leaves_other_fields_unchanged(self, db_session, lifecycle, seed_product):
        pid = seed_product.id
        before = {
            c: getattr(seed_product, c)
            for c in ("name", "slug", "sku", "price_cents", "quantity", "category_id", "brand_id", "is_active")
        }

        lifecycle.trash("product", pid)
        lifecycle.restore("product", pid)

        db_session.expire_all()
        product = db_session.get(Product, pid)
        assert product.deleted_at is None
        assert {c: getattr(product, c) for c in before} == before

    @pytest.mark.parametrize(
        "fixture_name,entity_type,expected_name",
        [
            ("seed_brand", "brand", "Nike"),
            ("seed_category", "category", "Shoes"),
            ("seed_order", "order", "ORD-1001"),
            ("seed_coupon", "coupon", "SUMMER10"),
        ],
    )
    def test_every_entity_type_round_trips(self, request, db_session, lifecycle, fixture_name, entity_type, expected_name):
        entity = request.getfixturevalue(fixture_name)
        entity_id = entity.id
        model = type(entity)

        lifecycle.trash(entity_type, entity_id)
        assert deleted_at(db_session, model, entity_id) is not None
        lifecycle.restore(entity_type, entity_id)
        assert deleted_at(db_session, model, entity_id) is None

        names = [e.entity_name for e in log_entries(db_session)]
        assert names == [expected_name, expected_name]

    def test_trash_missing_row_raises_not_found(self, db_session, lifecycle):
        with pytest.raises(NotFoundError):
            lifecycle.trash("product", "does-not-exist")
        assert log_entries(db_session) == []

    def test_retrash_logs_again_by_default(self, db_session, lifecycle, seed_brand):
        bid = seed_brand.id
        lifecycle.trash("brand", bid)
        lifecycle.trash("brand", bid)

        actions = [e.action for e in log_entries(db_session)]
        assert actions == [TrashAction.TRASHED, TrashAction.TRASHED]

    def test_only_on_change_skips_duplicate_entries(self, db_session, store, actor, seed_brand):
        bid = seed_brand.id
        manager = TrashLifecycleManager(store, actor=actor, log_only_on_change=True)

        assert manager.trash("brand", bid) is True
        assert manager.trash("brand", bid) is False
        assert manager.restore("brand", bid) is True
        assert manager.restore("brand", bid) is False

        actions = [e.action for e in log_entries(db_session)]
        assert actions == [TrashAction.TRASHED, TrashAction.RESTORED]

    def test_undo_trash_restores(self, db_session, lifecycle, seed_brand):
        bid = seed_brand.id
        lifecycle.trash("brand", bid)
        lifecycle.undo_trash("brand", bid)

        assert deleted_at(db_session, Brand, bid) is None
        assert log_entries(db_session)[-1].action == TrashAction.RESTORED


class TestCategoryChildren:

    def test_parent_with_live_child_is_refused(self, db_session, lifecycle):
        parent = Category(name="Apparel", slug="apparel")
        db_session.add(parent)
        db_session.commit()
        child = Category(name="Shirts", slug="shirts", parent_id=parent.id)
        db_session.add(child)
        db_session.commit()
        parent_id, child_id = parent.id, child.id

        with pytest.raises(ValidationError):
            lifecycle.trash("category", parent_id)

        assert deleted_at(db_session, Category, parent_id) is None
        assert deleted_at(db_session, Category, child_id) is None
        assert log_entries(db_session) == []

    def test_parent_with_trashed_child_can_be_trashed(self, db_session, lifecycle):
        parent = Category(name="Apparel", slug="apparel")
        db_session.add(parent)
        db_session.commit()
        child = Category(name="Shirts", slug="shirts", parent_id=parent.id)
        db_session.add(child)
        db_session.commit()
        parent_id, child_id = parent.id, child.id

        lifecycle.trash("category", child_id)
        assert lifecycle.trash("category", parent_id) is True
        assert deleted_at(db_session, Category, parent_id) is not None


class TestPermanentDelete:

    def test_permanent_delete_logs_pre_deletion_name(self, db_session, lifecycle, seed_product):
        pid = seed_product.id
        lifecycle.trash("product", pid)

        lifecycle.permanent_delete("product", pid)

        assert deleted_at(db_session, Product, pid) == "PURGED"
        assert pid not in [i.id for i in lifecycle.list_trashed("product")]
        purged = [e for e in log_entries(db_session, [pid]) if e.action == TrashAction.PERMANENTLY_DELETED]
        assert len(purged) == 1
        assert purged[0].entity_name == "Air Max"

    def test_permanent_delete_missing_row(self, lifecycle):
        with pytest.raises(NotFoundError):
            lifecycle.permanent_delete("brand", "nope")

    def test_store_failure_writes_no_log(self, db_session, actor, seed_brand):
        bid = seed_brand.id
        store = FailingRecordStore(db_session, fail_tables={"brands"}, fail_operations={"delete"})
        manager = TrashLifecycleManager(store, actor=actor)

        with pytest.raises(StoreOperationError):
            manager.permanent_delete("brand", bid)

        assert deleted_at(db_session, Brand, bid) is None
        assert log_entries(db_session) == []


class TestAuditLogFailures:

    def test_log_failure_does_not_undo_transition(self, db_session, actor, seed_brand):
        bid = seed_brand.id
        store = FailingRecordStore(db_session, fail_tables={"trash_log"}, fail_operations={"insert"})
        manager = TrashLifecycleManager(store, actor=actor)

        assert manager.trash("brand", bid) is True
        assert deleted_at(db_session, Brand, bid) is not None
        assert manager.restore("brand", bid) is True
        assert deleted_at(db_session, Brand, bid) is None
        assert log_entries(db_session) == []

    def test_log_action_reports_failure(self, db_session, actor):
        store = FailingRecordStore(db_session, fail_tables={"trash_log"})
        manager = TrashLifecycleManager(store, actor=actor)
        assert manager.log_action("brand", "b-1", "Nike", TrashAction.TRASHED) is False


class TestListTrashed:

    def test_lists_all_types_newest_first(self, db_session, lifecycle, seed_product, seed_brand, seed_coupon, trashed_at, days_ago):
        trashed_at(seed_product, days_ago(3))
        trashed_at(seed_brand, days_ago(1))
        trashed_at(seed_coupon, days_ago(2))

        items = lifecycle.list_trashed()

        assert [(i.entity_type.value, i.name) for i in items] == [
            ("brand", "Nike"),
            ("coupon", "SUMMER10"),
            ("product", "Air Max"),
        ]
        assert items[2].extra["sku"] == "AM-1"
        assert items[2].extra["price_cents"] == 12900

    def test_live_rows_are_not_listed(self, lifecycle, seed_product):
        assert lifecycle.list_trashed() == []

    def test_filter_by_type(self, lifecycle, seed_product, seed_brand, trashed_at):
        trashed_at(seed_product)
        trashed_at(seed_brand)

        items = lifecycle.list_trashed("brand")
        assert [i.entity_type for i in items] == [EntityType.BRAND]

    def test_failing_type_is_skipped(self, db_session, actor, seed_product, seed_brand, trashed_at):
        trashed_at(seed_product)
        trashed_at(seed_brand)
        manager = TrashLifecycleManager(FailingRecordStore(db_session, fail_tables={"products"}), actor=actor)

        items = manager.list_trashed()
        assert [i.entity_type for i in items] == [EntityType.BRAND]

    def test_empty_display_name_falls_back(self, db_session, lifecycle, seed_coupon, trashed_at):
        seed_coupon.code = ""
        db_session.commit()
        trashed_at(seed_coupon)

        [item] = lifecycle.list_trashed("coupon")
        assert item.name == UNKNOWN_NAME


class TestBulkOperations:

    def test_bulk_restore_spans_types(self, db_session, lifecycle, seed_product, seed_brand, seed_coupon, trashed_at):
        for entity in (seed_product, seed_brand, seed_coupon):
            trashed_at(entity)
        items = [("product", seed_product.id), ("brand", seed_brand.id), ("coupon", seed_coupon.id)]

        assert lifecycle.bulk_restore(items) == 3
        assert lifecycle.list_trashed() == []
        assert len(log_entries(db_session)) == 3

    def test_bulk_restore_partial_failure(self, db_session, actor, seed_product, seed_brand, seed_coupon, trashed_at):
        for entity in (seed_product, seed_brand, seed_coupon):
            trashed_at(entity)
        pid, bid, cid = seed_product.id, seed_brand.id, seed_coupon.id
        store = FailingRecordStore(db_session, fail_tables={"brands"}, fail_operations={"update"})
        manager = TrashLifecycleManager(store, actor=actor)

        restored = manager.bulk_restore([("product", pid), ("brand", bid), ("coupon", cid)])

        assert restored == 2
        assert restored < 3
        assert deleted_at(db_session, Brand, bid) is not None
        assert deleted_at(db_session, Product, pid) is None
        assert {e.entity_id for e in log_entries(db_session)} == {pid, cid}

    def test_bulk_permanent_delete_partial_failure(self, db_session, actor, seed_brand, seed_coupon, trashed_at):
        trashed_at(seed_brand)
        trashed_at(seed_coupon)
        bid, cid = seed_brand.id, seed_coupon.id
        store = FailingRecordStore(db_session, fail_tables={"coupons"}, fail_operations={"delete"})
        manager = TrashLifecycleManager(store, actor=actor)

        assert manager.bulk_permanent_delete([("brand", bid), ("coupon", cid)]) == 1
        assert deleted_at(db_session, Brand, bid) == "PURGED"
        assert deleted_at(db_session, Coupon, cid) is not None

    def test_bulk_trash_logs_each_item(self, db_session, lifecycle, make_product):
        ids = [make_product(f"Shirt {n}").id for n in range(3)]

        assert lifecycle.bulk_trash("product", ids) == 3
        entries = log_entries(db_session)
        assert [e.entity_name for e in entries] == ["Shirt 0", "Shirt 1", "Shirt 2"]
        assert {e.action for e in entries} == {TrashAction.TRASHED}

    def test_unknown_ids_are_not_counted(self, lifecycle, seed_brand, trashed_at):
        trashed_at(seed_brand)
        assert lifecycle.bulk_restore([("brand", seed_brand.id), ("brand", "missing")]) == 1

    def test_row_purged_during_bulk_restore_is_not_counted(self, db_session, actor, seed_brand, trashed_at):
        puma = add(db_session, Brand(name="Puma", slug="puma"))
        trashed_at(seed_brand)
        trashed_at(puma)
        bid, puma_id = seed_brand.id, puma.id
        manager = TrashLifecycleManager(PurgingRecordStore(db_session, "brands", puma_id), actor=actor)

        assert manager.bulk_restore([("brand", bid), ("brand", puma_id)]) == 1
        assert deleted_at(db_session, Brand, bid) is None
        assert deleted_at(db_session, Brand, puma_id) == "PURGED"
        assert [e.entity_id for e in log_entries(db_session)] == [bid]


class TestRestoreConflicts:

    def test_restore_refused_when_slug_reused(self, db_session, lifecycle, seed_brand):
        bid = seed_brand.id
        lifecycle.trash("brand", bid)
        add(db_session, Brand(name="Nike", slug="nike"))

        with pytest.raises(DuplicateEntityError) as exc:
            lifecycle.restore("brand", bid)

        assert exc.value.status_code == 400
        assert exc.value.field == "slug"
        assert deleted_at(db_session, Brand, bid) is not None
        assert [e.action for e in log_entries(db_session)] == [TrashAction.TRASHED]

    def test_restore_allowed_once_slug_is_free_again(self, db_session, lifecycle, seed_brand):
        bid = seed_brand.id
        lifecycle.trash("brand", bid)
        other = add(db_session, Brand(name="Nike", slug="nike"))
        lifecycle.trash("brand", other.id)

        assert lifecycle.restore("brand", bid) is True
        assert deleted_at(db_session, Brand, bid) is None

    def test_bulk_restore_fails_only_the_conflicting_group(self, db_session, lifecycle, seed_brand, seed_coupon, trashed_at):
        trashed_at(seed_brand)
        trashed_at(seed_coupon)
        bid, cid = seed_brand.id, seed_coupon.id
        add(db_session, Brand(name="Nike", slug="nike"))

        assert lifecycle.bulk_restore([("brand", bid), ("coupon", cid)]) == 1
        assert deleted_at(db_session, Brand, bid) is not None
        assert deleted_at(db_session, Coupon, cid) is None
        assert [e.entity_id for e in log_entries(db_session)] == [cid]

    def test_bulk_restore_of_two_rows_sharing_a_slug(self, db_session, lifecycle, trashed_at):
        first = trashed_at(add(db_session, Category(name="Shoes", slug="shoes")))
        second = trashed_at(add(db_session, Category(name="Shoes", slug="shoes")))

        assert lifecycle.bulk_restore([("category", first.id), ("category", second.id)]) == 0
        assert deleted_at(db_session, Category, first.id) is not None
        assert deleted_at(db_session, Category, second.id) is not None
        assert log_entries(db_session) == []


class TestScenario:

    def test_trash_three_restore_one_purge_two(self, db_session, lifecycle, make_product):
        p1, p2, p3 = (make_product(f"Product {n}").id for n in (1, 2, 3))

        lifecycle.trash("product", p1)
        lifecycle.trash("product", p2)
        lifecycle.trash("product", p3)
        lifecycle.restore("product", p2)
        assert lifecycle.bulk_permanent_delete([("product", p1), ("product", p3)]) == 2

        assert lifecycle.list_trashed("product") == []
        entries = log_entries(db_session, [p1, p2, p3])
        assert [(e.entity_id, e.action) for e in entries] == [
            (p1, TrashAction.TRASHED),
            (p2, TrashAction.TRASHED),
            (p3, TrashAction.TRASHED),
            (p2, TrashAction.RESTORED),
            (p1, TrashAction.PERMANENTLY_DELETED),
            (p3, TrashAction.PERMANENTLY_DELETED),
        ]
