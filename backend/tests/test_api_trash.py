"""
Tests for the global trash endpoints.
"""

from sqlalchemy import select

from storefront_api.models import Brand, Product


class TestTrashAuth:

    def test_unauthenticated(self, client):
        response = client.get("/api/admin/trash")
        assert response.status_code == 401

    def test_role_required(self, client, viewer_headers):
        response = client.get("/api/admin/trash", headers=viewer_headers)
        assert response.status_code == 403

    def test_manager_can_browse(self, client, manager_headers):
        response = client.get("/api/admin/trash", headers=manager_headers)
        assert response.status_code == 200
        assert response.json() == []

    def test_manager_cannot_purge(self, client, manager_headers, seed_brand, trashed_at):
        trashed_at(seed_brand)
        response = client.delete(f"/api/admin/trash/brand/{seed_brand.id}", headers=manager_headers)
        assert response.status_code == 403

    def test_manager_cannot_restore(self, client, manager_headers, seed_brand, trashed_at):
        trashed_at(seed_brand)
        response = client.post(f"/api/admin/trash/brand/{seed_brand.id}/restore", headers=manager_headers)
        assert response.status_code == 403


class TestTrashEndpoints:

    def test_trash_list_restore_flow(self, client, admin_headers, manager_headers, seed_product):
        """Trash from a list view, see it in the trash, restore it."""
        pid = seed_product.id

        response = client.post(f"/api/admin/trash/product/{pid}", headers=manager_headers)
        assert response.status_code == 200
        assert response.json() == {"success": True, "entity_type": "product", "id": pid, "action": "trashed"}

        listed = client.get("/api/admin/trash?entity_type=product", headers=admin_headers).json()
        assert [(i["id"], i["name"]) for i in listed] == [(pid, "Air Max")]
        assert listed[0]["extra"]["sku"] == "AM-1"

        response = client.post(f"/api/admin/trash/product/{pid}/restore", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["action"] == "restored"
        assert client.get("/api/admin/trash", headers=admin_headers).json() == []

    def test_undo_available_to_manager(self, client, manager_headers, seed_brand):
        client.post(f"/api/admin/trash/brand/{seed_brand.id}", headers=manager_headers)
        response = client.post(f"/api/admin/trash/brand/{seed_brand.id}/undo", headers=manager_headers)
        assert response.status_code == 200
        assert response.json()["action"] == "restored"

    def test_invalid_entity_type(self, client, admin_headers):
        response = client.get("/api/admin/trash?entity_type=customer", headers=admin_headers)
        assert response.status_code == 400

    def test_unknown_id(self, client, admin_headers):
        response = client.post("/api/admin/trash/brand/missing", headers=admin_headers)
        assert response.status_code == 404

    def test_category_with_children(self, client, admin_headers, db_session, seed_category):
        from storefront_api.models import Category

        db_session.add(Category(name="Sneakers", slug="sneakers", parent_id=seed_category.id))
        db_session.commit()

        response = client.post(f"/api/admin/trash/category/{seed_category.id}", headers=admin_headers)
        assert response.status_code == 400

    def test_permanent_delete(self, client, admin_headers, db_session, seed_brand, trashed_at):
        trashed_at(seed_brand)
        bid = seed_brand.id

        response = client.delete(f"/api/admin/trash/brand/{bid}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["action"] == "permanently_deleted"
        assert db_session.execute(select(Brand.id).where(Brand.id == bid)).first() is None

        history = client.get(f"/api/admin/trash/brand/{bid}/history", headers=admin_headers).json()
        assert [(h["action"], h["entity_name"]) for h in history] == [("permanently_deleted", "Nike")]

    def test_bulk_restore_and_delete(self, client, admin_headers, db_session, make_product, seed_coupon, trashed_at):
        products = [trashed_at(make_product(f"Tee {n}")) for n in range(2)]
        trashed_at(seed_coupon)
        items = [{"entity_type": "product", "id": p.id} for p in products]

        response = client.post(
            "/api/admin/trash/bulk-restore",
            headers=admin_headers,
            json={"items": items[:1] + [{"entity_type": "coupon", "id": seed_coupon.id}]},
        )
        assert response.json() == {"requested": 2, "affected": 2}

        response = client.post("/api/admin/trash/bulk-delete", headers=admin_headers, json={"items": items[1:]})
        assert response.json() == {"requested": 1, "affected": 1}
        remaining = db_session.scalars(select(Product.name)).all()
        assert remaining == ["Tee 0"]

    def test_bulk_request_needs_items(self, client, admin_headers):
        response = client.post("/api/admin/trash/bulk-restore", headers=admin_headers, json={"items": []})
        assert response.status_code == 422

    def test_activity_feed_newest_first(self, client, admin_headers, seed_brand, seed_coupon):
        client.post(f"/api/admin/trash/brand/{seed_brand.id}", headers=admin_headers)
        client.post(f"/api/admin/trash/coupon/{seed_coupon.id}", headers=admin_headers)

        feed = client.get("/api/admin/trash/activity?limit=10", headers=admin_headers).json()

        assert [e["entity_name"] for e in feed] == ["SUMMER10", "Nike"]
        assert feed[0]["performed_by"] == "user-admin-1"
        assert feed[0]["performed_by_email"] == "admin@shop.test"


class TestCatalogDelete:

    def test_brand_delete_goes_to_trash(self, client, admin_headers, seed_brand):
        response = client.delete(f"/api/admin/brands/{seed_brand.id}", headers=admin_headers)
        assert response.status_code == 204

        listed = client.get("/api/admin/trash", headers=admin_headers).json()
        assert [i["entity_type"] for i in listed] == ["brand"]
        assert client.get(f"/api/admin/brands/{seed_brand.id}", headers=admin_headers).status_code == 404

    def test_create_brand_reusing_trashed_slug(self, client, admin_headers, seed_brand):
        client.delete(f"/api/admin/brands/{seed_brand.id}", headers=admin_headers)

        response = client.post("/api/admin/brands", headers=admin_headers, json={"name": "Nike"})
        assert response.status_code == 201
        assert response.json()["slug"] == "nike"

    def test_restore_onto_reused_slug_is_a_validation_error(self, client, admin_headers, seed_brand):
        client.delete(f"/api/admin/brands/{seed_brand.id}", headers=admin_headers)
        client.post("/api/admin/brands", headers=admin_headers, json={"name": "Nike"})

        response = client.post(f"/api/admin/trash/brand/{seed_brand.id}/restore", headers=admin_headers)

        assert response.status_code == 400
        assert "nike" in response.json()["detail"]
        listed = client.get("/api/admin/trash", headers=admin_headers).json()
        assert [i["id"] for i in listed] == [seed_brand.id]

    def test_create_product_validation(self, client, admin_headers):
        response = client.post(
            "/api/admin/products",
            headers=admin_headers,
            json={"name": "Socks", "price_cents": 0},
        )
        assert response.status_code == 400
