"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Must be set before the settings module is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront_shared.config.constants import Roles
from storefront_shared.infrastructure.db import enable_sqlite_foreign_keys, get_db
from storefront_shared.security.auth import sign_jwt
from storefront_shared.utils.exceptions import StoreOperationError
from storefront_api.main import app
from storefront_api.models import (
    Base,
    Brand,
    Category,
    Coupon,
    Order,
    Product,
    utcnow,
)
from storefront_api.services.trash import Actor, RecordStore, TrashLifecycleManager


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ADMIN_USER = {"sub": "user-admin-1", "email": "admin@shop.test", "roles": [Roles.ADMIN]}
MANAGER_USER = {"sub": "user-manager-1", "email": "manager@shop.test", "roles": [Roles.MANAGER]}
VIEWER_USER = {"sub": "user-viewer-1", "email": "viewer@shop.test", "roles": []}


class FailingRecordStore(RecordStore):
    """
    RecordStore that fails on demand.

    Any call touching a table in ``fail_tables`` raises StoreOperationError,
    optionally limited to the operations in ``fail_operations``.
    """

    def __init__(self, db, fail_tables=(), fail_operations=None):
        super().__init__(db)
        self.fail_tables = set(fail_tables)
        self.fail_operations = set(fail_operations) if fail_operations else None

    def _maybe_fail(self, operation, table):
        if table in self.fail_tables and (
            self.fail_operations is None or operation in self.fail_operations
        ):
            raise StoreOperationError(operation, table)

    def select(self, table, *args, **kwargs):
        self._maybe_fail("select", table)
        return super().select(table, *args, **kwargs)

    def count(self, table, *args, **kwargs):
        self._maybe_fail("count", table)
        return super().count(table, *args, **kwargs)

    def update(self, table, *args, **kwargs):
        self._maybe_fail("update", table)
        return super().update(table, *args, **kwargs)

    def delete(self, table, *args, **kwargs):
        self._maybe_fail("delete", table)
        return super().delete(table, *args, **kwargs)

    def insert(self, table, *args, **kwargs):
        self._maybe_fail("insert", table)
        return super().insert(table, *args, **kwargs)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Create a test client with database session override.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {sign_jwt(ADMIN_USER)}"}


@pytest.fixture
def manager_headers():
    return {"Authorization": f"Bearer {sign_jwt(MANAGER_USER)}"}


@pytest.fixture
def viewer_headers():
    """Authenticated user without an admin panel role."""
    return {"Authorization": f"Bearer {sign_jwt(VIEWER_USER)}"}


@pytest.fixture
def actor():
    return Actor.from_user(ADMIN_USER)


@pytest.fixture
def store(db_session):
    return RecordStore(db_session)


@pytest.fixture
def lifecycle(store, actor):
    return TrashLifecycleManager(store, actor=actor, log_only_on_change=False)


# =============================================================================
# Seed fixtures
# =============================================================================


def add(db_session, entity):
    db_session.add(entity)
    db_session.commit()
    db_session.refresh(entity)
    return entity


@pytest.fixture
def make_product(db_session):
    """Factory for live products: make_product("Air Max", price_cents=12900)."""

    def _make(name="Test Product", **kwargs):
        kwargs.setdefault("slug", name.lower().replace(" ", "-"))
        kwargs.setdefault("price_cents", 1000)
        kwargs.setdefault("quantity", 5)
        return add(db_session, Product(name=name, **kwargs))

    return _make


@pytest.fixture
def seed_brand(db_session):
    return add(db_session, Brand(name="Nike", slug="nike", logo_url="https://cdn.shop.test/nike.png"))


@pytest.fixture
def seed_category(db_session):
    return add(db_session, Category(name="Shoes", slug="shoes"))


@pytest.fixture
def seed_product(make_product, seed_category, seed_brand):
    return make_product(
        "Air Max",
        sku="AM-1",
        price_cents=12900,
        quantity=3,
        category_id=seed_category.id,
        brand_id=seed_brand.id,
    )


@pytest.fixture
def seed_order(db_session):
    return add(
        db_session,
        Order(order_number="ORD-1001", total_amount_cents=5000, status="delivered", payment_status="paid"),
    )


@pytest.fixture
def seed_coupon(db_session):
    return add(db_session, Coupon(code="SUMMER10", discount_type="percentage", discount_value=10))


@pytest.fixture
def trashed_at(db_session):
    """Put a row into the trash at a given time, bypassing the lifecycle (no log entry)."""

    def _trash(entity, when=None):
        entity.deleted_at = when or utcnow()
        db_session.commit()
        db_session.refresh(entity)
        return entity

    return _trash


@pytest.fixture
def days_ago():
    def _ago(days, seconds=0):
        return utcnow() - timedelta(days=days, seconds=seconds)

    return _ago
