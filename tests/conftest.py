"""
Shared fixtures: environment defaults, an in-memory stand-in for Motor
collections and an authenticated API client.
"""
import os
from types import SimpleNamespace

import pytest

os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017")
os.environ.setdefault("MONGO_DB_NAME", "finance_dashboard_test")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("ADMIN_USER_ID", "admin")
os.environ.setdefault("ADMIN_PASSWORD", "admin123")

from fastapi.testclient import TestClient  # noqa: E402

from app.main import app  # noqa: E402
from app.routes.auth.auth import get_current_user  # noqa: E402
from app.services.analytics_service import analytics_service  # noqa: E402
from app.services.expense_service import expense_service  # noqa: E402
from app.services.notification_service import notification_service  # noqa: E402
from tests.helpers import FakeCollection  # noqa: E402


@pytest.fixture
def expenses_collection(monkeypatch):
    collection = FakeCollection()
    monkeypatch.setattr(expense_service, "collection", collection)
    return collection


@pytest.fixture
def reads_collection(monkeypatch):
    collection = FakeCollection()
    monkeypatch.setattr(notification_service, "read_collection", collection)
    return collection


@pytest.fixture
def analytics_collections(monkeypatch):
    collections = SimpleNamespace(
        invoices=FakeCollection(),
        expenses=FakeCollection(),
        employees=FakeCollection(),
    )
    monkeypatch.setattr(analytics_service, "invoices", collections.invoices)
    monkeypatch.setattr(analytics_service, "expenses", collections.expenses)
    monkeypatch.setattr(analytics_service, "employees", collections.employees)
    return collections


@pytest.fixture
def client(expenses_collection, reads_collection, analytics_collections):
    """API client with authentication bypassed."""
    app.dependency_overrides[get_current_user] = lambda: {"id": "admin", "name": "Administrator"}
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client():
    return TestClient(app)
