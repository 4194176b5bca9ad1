import logging

import pytest
from fastapi.testclient import TestClient

from orderhub.main import app
from orderhub.core import database as database_module
from orderhub.core.config import Config, CONFIG_ENV_VAR, DB_ENV_VAR
from orderhub.marketplaces import sync as sync_module
from conftest import make_customer, make_product, make_marketplace


def _order_payload(db, **overrides):
    customer = make_customer(db)
    marketplace = make_marketplace(db)
    product = make_product(db, sku="ABC-1", stock=10, price="10.00")
    payload = {
        "customerId": customer["id"],
        "marketplaceId": marketplace["id"],
        "items": [{"productId": product["id"], "quantity": 3, "price": "10.00"}],
    }
    payload.update(overrides)
    return payload


# ==================== Customers ====================

def test_customer_crud(client):
    response = client.post("/api/customers", json={"name": "Jane", "email": "jane@example.com"})
    assert response.status_code == 201
    customer = response.json()
    assert customer["createdAt"]

    response = client.put(f"/api/customers/{customer['id']}", json={"phone": "555"})
    assert response.status_code == 200
    assert response.json()["phone"] == "555"
    assert response.json()["name"] == "Jane"

    assert client.get(f"/api/customers/{customer['id']}").json()["phone"] == "555"
    assert len(client.get("/api/customers").json()) == 1
    assert client.get("/api/customers", params={"email": "nobody@example.com"}).json() == []

    response = client.delete(f"/api/customers/{customer['id']}")
    assert response.json() == {"message": "Customer deleted successfully"}
    assert client.get(f"/api/customers/{customer['id']}").status_code == 404


def test_missing_records_return_404(client):
    for path in ("/api/customers/99", "/api/products/99", "/api/marketplaces/99", "/api/orders/99"):
        response = client.get(path)
        assert response.status_code == 404
        assert response.json()["message"].endswith("not found")
    assert client.put("/api/orders/99", json={"status": "shipped"}).status_code == 404
    assert client.delete("/api/products/99").status_code == 404


def test_validation_error_format(client):
    response = client.post("/api/customers", json={"name": "", "email": "not-an-email"})
    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Validation error"
    assert {e["path"] for e in body["errors"]} == {"name", "email"}


def test_explicit_null_is_rejected(client, db):
    customer = make_customer(db)
    response = client.put(f"/api/customers/{customer['id']}", json={"email": None})
    assert response.status_code == 400


# ==================== Products ====================

def test_product_price_is_a_decimal_string(client):
    response = client.post("/api/products", json={"name": "Mug", "sku": "MUG-1", "price": 4.5, "stock": 3})
    assert response.status_code == 201
    product = response.json()
    assert product["price"] == "4.50"
    assert product["status"] == "active"
    assert client.get("/api/products/sku/MUG-1").json()["id"] == product["id"]


def test_duplicate_sku_is_409(client, db):
    make_product(db, sku="DUP")
    response = client.post("/api/products", json={"name": "Other", "sku": "DUP", "price": "1.00"})
    assert response.status_code == 409
    assert "DUP" in response.json()["message"]


def test_negative_stock_is_rejected(client):
    response = client.post("/api/products", json={"name": "X", "sku": "X", "price": "1.00", "stock": -1})
    assert response.status_code == 400
    assert response.json()["errors"][0]["path"] == "stock"


def test_product_search(client, db):
    make_product(db, sku="WH-1", name="Wireless Headphones")
    make_product(db, sku="SW-1", name="Smart Watch")
    results = client.get("/api/products", params={"search": "watch"}).json()
    assert [p["sku"] for p in results] == ["SW-1"]


# ==================== Marketplaces ====================

def test_marketplace_secret_is_never_returned(client):
    response = client.post("/api/marketplaces", json={
        "name": "Shop", "type": "woocommerce", "isConnected": True,
        "apiKey": "ck", "apiSecret": "cs", "storeUrl": "https://shop.example"
    })
    assert response.status_code == 201
    marketplace = response.json()
    assert "apiSecret" not in marketplace
    assert marketplace["apiKey"] == "ck"
    assert marketplace["stockTracking"] is True


def test_unknown_marketplace_type_is_rejected(client):
    response = client.post("/api/marketplaces", json={"name": "X", "type": "etsy"})
    assert response.status_code == 400


def test_connection_delete_alias(client, db):
    marketplace = make_marketplace(db)
    response = client.delete(f"/api/connections/{marketplace['id']}")
    assert response.json() == {"message": "Connection deleted successfully"}
    response = client.delete(f"/api/connections/{marketplace['id']}")
    assert response.status_code == 404
    assert response.json() == {"message": "Connection not found"}


def test_marketplace_with_orders_cannot_be_deleted(client, db, service):
    payload = _order_payload(db)
    client.post("/api/orders", json=payload)
    response = client.delete(f"/api/marketplaces/{payload['marketplaceId']}")
    assert response.status_code == 409
    assert len(client.get(f"/api/marketplaces/{payload['marketplaceId']}/orders").json()) == 1


# ==================== Orders ====================

def test_create_order(client, db, sync):
    payload = _order_payload(db, totalAmount="999.99")

    response = client.post("/api/orders", json=payload)

    assert response.status_code == 201
    order = response.json()
    assert order["orderId"] == "2026-00001"
    assert order["totalAmount"] == "30.00"
    assert order["customer"]["email"] == "jane@example.com"
    assert order["marketplace"]["name"] == "Amazon"
    assert order["items"][0]["product"]["stock"] == 7
    assert sync.calls == [("ABC-1", 7)]

    assert client.get("/api/products/sku/ABC-1").json()["stock"] == 7
    assert client.get(f"/api/customers/{payload['customerId']}/orders").json()[0]["id"] == order["id"]


def test_create_order_unknown_references(client, db):
    payload = _order_payload(db, customerId=999)
    payload["items"].append({"productId": 555, "quantity": 1, "price": "1.00"})

    response = client.post("/api/orders", json=payload)

    assert response.status_code == 400
    paths = [e["path"] for e in response.json()["errors"]]
    assert paths == ["customerId", "items.1.productId"]
    assert client.get("/api/orders").json() == []


def test_create_order_requires_items(client, db):
    payload = _order_payload(db, items=[])
    response = client.post("/api/orders", json=payload)
    assert response.status_code == 400
    assert response.json()["errors"][0]["path"] == "items"


def test_create_order_rejects_zero_quantity(client, db):
    payload = _order_payload(db)
    payload["items"][0]["quantity"] = 0
    response = client.post("/api/orders", json=payload)
    assert response.status_code == 400
    assert response.json()["errors"][0]["path"] == "items.0.quantity"


def test_update_order_status(client, db):
    order = client.post("/api/orders", json=_order_payload(db)).json()

    response = client.put(f"/api/orders/{order['id']}", json={"status": "shipped"})

    assert response.status_code == 200
    assert response.json()["status"] == "shipped"
    assert response.json()["totalAmount"] == "30.00"
    assert [o["id"] for o in client.get("/api/orders", params={"status": "shipped"}).json()] == [order["id"]]


def test_update_order_rejects_unknown_status(client, db):
    order = client.post("/api/orders", json=_order_payload(db)).json()
    response = client.put(f"/api/orders/{order['id']}", json={"status": "lost"})
    assert response.status_code == 400


# ==================== Stock, stats, health ====================

def test_stock_update(client, db, sync):
    make_product(db, sku="ABC-1", stock=1)
    response = client.post("/api/stock/update", json={"sku": "ABC-1", "quantity": 25})
    assert response.json() == {"message": "Stock updated successfully"}
    assert db.get_product_by_sku("ABC-1")["stock"] == 25
    assert sync.calls == [("ABC-1", 25)]


def test_stock_update_unknown_sku(client, sync):
    response = client.post("/api/stock/update", json={"sku": "NOPE", "quantity": 1})
    assert response.status_code == 404
    assert sync.calls == []


def test_stats_on_empty_database(client):
    response = client.get("/api/stats")
    assert response.status_code == 200
    stats = response.json()
    assert stats["totalSales"] == 0
    assert stats["totalOrders"] == 0
    assert len(stats["salesByDay"]) == 7
    assert stats["ordersByMarketplace"] == []


def test_health(client, db):
    make_product(db)
    body = client.get("/api/health").json()
    assert body["status"] == "healthy"
    assert body["databaseProducts"] == 1


def test_unexpected_errors_are_generic_500(db, monkeypatch):
    from orderhub.api.dependencies import get_db

    def broken(*args, **kwargs):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(db, "get_customers", broken)
    app.dependency_overrides[get_db] = lambda: db
    try:
        response = TestClient(app, raise_server_exceptions=False).get("/api/customers")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error"}


def test_product_id_zero_is_rejected(client, db):
    payload = _order_payload(db)
    payload["items"][0]["productId"] = 0
    response = client.post("/api/orders", json=payload)
    assert response.status_code == 400
    assert response.json()["errors"][0]["path"] == "items.0.productId"
    assert client.get("/api/orders").json() == []


def test_repeated_product_lines_sync_final_level(client, db, sync):
    payload = _order_payload(db)
    payload["items"].append(dict(payload["items"][0]))

    response = client.post("/api/orders", json=payload)

    assert response.status_code == 201
    assert response.json()["totalAmount"] == "60.00"
    assert sync.calls == [("ABC-1", 4)]


def test_product_stock_edit_is_synced(client, db, sync):
    product = make_product(db, sku="ABC-1", stock=10)

    client.put(f"/api/products/{product['id']}", json={"name": "Renamed"})
    assert sync.calls == []

    response = client.put(f"/api/products/{product['id']}", json={"stock": 3})
    assert response.json()["stock"] == 3
    assert sync.calls == [("ABC-1", 3)]


def test_lifespan_opens_database_and_drains_sync(tmp_path, monkeypatch):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "general:\n  log_file: ''\norders: {}\nsync:\n  workers: 1\n", encoding="utf-8"
    )
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))
    monkeypatch.setenv(DB_ENV_VAR, str(tmp_path / "lifespan.db"))
    monkeypatch.setattr(database_module, "_db_instance", None)
    monkeypatch.setattr(sync_module, "_sync_instance", None)
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    Config.reset()
    try:
        with TestClient(app) as test_client:
            assert test_client.get("/api/health").json()["databaseOrders"] == 0
            stock_sync = sync_module.get_stock_sync()
        assert (tmp_path / "lifespan.db").exists()
        with pytest.raises(RuntimeError):
            stock_sync.dispatch("ABC-1", 1)
    finally:
        Config.reset()
        root.handlers[:] = handlers
        root.setLevel(level)
