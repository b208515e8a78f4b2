"""
Shared fixtures: in-memory SQLite database, service-level session, HTTP client.
Environment is set before any project import so config.settings picks it up.
"""

import os

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["CSRF_ENABLED"] = "false"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["COOKIE_SECURE"] = "false"

import pytest
from fastapi.testclient import TestClient

from config.database import Base, engine, SessionLocal
from main import app
from modules.auth.service import auth_service
from modules.catalog.service import product_service


ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin12345"


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def make_product(db):
    def _make(name="Widget", price="10.00", stock=5, description=""):
        return product_service.create(db, {
            "name": name, "price": price, "stock": stock, "description": description,
        })
    return _make


@pytest.fixture
def seeded():
    """Commit two products and an admin, return their ids. For HTTP-level tests."""
    session = SessionLocal()
    try:
        a = product_service.create(session, {"name": "Laptop Pro 15", "price": "100.00", "stock": 10})
        b = product_service.create(session, {"name": "Wireless Mouse", "price": "50.00", "stock": 10})
        auth_service.create_admin(session, ADMIN_USERNAME, ADMIN_PASSWORD)
        session.commit()
        return {"a": a.id, "b": b.id}
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_client(client, seeded):
    r = client.post(
        "/admin/login",
        data={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
        follow_redirects=False,
    )
    assert r.status_code == 303
    return client
