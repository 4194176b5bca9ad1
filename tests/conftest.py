import threading
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from orderhub.core.database import Database
from orderhub.orders.service import OrderService
from orderhub.main import app
from orderhub.api.dependencies import get_db, get_sync, get_order_service

FIXED_NOW = datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)


class RecordingSync:
    """Stands in for StockSync: remembers what would have been pushed."""

    def __init__(self):
        self.calls = []
        self._lock = threading.Lock()

    def dispatch(self, sku, stock):
        with self._lock:
            self.calls.append((sku, stock))

    def dispatch_many(self, changes):
        for sku, stock in changes:
            self.dispatch(sku, stock)


@pytest.fixture
def db(tmp_path):
    return Database(tmp_path / "orderhub-test.db", busy_timeout=30)


@pytest.fixture
def sync():
    return RecordingSync()


@pytest.fixture
def service(db, sync):
    return OrderService(db, sync, clock=lambda: FIXED_NOW)


@pytest.fixture
def client(db, sync, service):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_sync] = lambda: sync
    app.dependency_overrides[get_order_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_customer(db, name="Jane Doe", email="jane@example.com", **extra):
    return db.create_customer({"name": name, "email": email, **extra})


def make_product(db, sku="ABC-1", stock=10, price="10.00", name=None, **extra):
    return db.create_product({
        "name": name or f"Product {sku}",
        "sku": sku,
        "stock": stock,
        "price": price,
        **extra
    })


def make_marketplace(db, name="Amazon", type="amazon", is_connected=True, **extra):
    return db.create_marketplace({
        "name": name,
        "type": type,
        "is_connected": is_connected,
        **extra
    })
