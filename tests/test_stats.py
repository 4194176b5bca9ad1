import sqlite3
from datetime import date
from decimal import Decimal

from orderhub.analytics.stats import get_sales_stats
from conftest import make_customer, make_product, make_marketplace

TODAY = date(2026, 3, 14)  # a Saturday


def _place(db, marketplace_id, customer_id, price, created_at):
    order_pk, _, _ = db.create_order(
        customer_id=customer_id,
        marketplace_id=marketplace_id,
        items=[{"quantity": 1, "price": Decimal(price), "name": "Item"}],
        total_amount=Decimal(price),
        year=2026
    )
    with sqlite3.connect(db.db_path) as conn:
        conn.execute("UPDATE orders SET created_at = ? WHERE id = ?", (created_at, order_pk))


def test_empty_database(db):
    stats = get_sales_stats(db, today=TODAY)

    assert stats["total_sales"] == 0
    assert stats["total_orders"] == 0
    assert stats["total_customers"] == 0
    assert stats["total_products"] == 0
    assert [d["day"] for d in stats["sales_by_day"]] == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
    assert all(d["sales"] == 0 for d in stats["sales_by_day"])
    assert stats["orders_by_marketplace"] == []


def test_totals_days_and_marketplaces(db):
    customer = make_customer(db)
    make_product(db)
    amazon = make_marketplace(db, name="Amazon")
    ebay = make_marketplace(db, name="eBay", type="ebay")
    make_marketplace(db, name="Local", type="local")

    _place(db, amazon["id"], customer["id"], "30.00", "2026-03-14T08:00:00.000000+00:00")
    _place(db, amazon["id"], customer["id"], "12.50", "2026-03-14T20:00:00+00:00")
    _place(db, ebay["id"], customer["id"], "7.25", "2026-03-10T12:00:00+00:00")
    # outside the seven-day window but still in the totals
    _place(db, ebay["id"], customer["id"], "100.00", "2026-02-01T12:00:00+00:00")

    stats = get_sales_stats(db, today=TODAY)

    assert stats["total_sales"] == 149.75
    assert stats["total_orders"] == 4
    assert stats["total_customers"] == 1
    assert stats["total_products"] == 1
    by_day = {d["day"]: d["sales"] for d in stats["sales_by_day"]}
    assert by_day["Sat"] == 42.5
    assert by_day["Tue"] == 7.25
    assert by_day["Mon"] == 0
    assert sorted(stats["orders_by_marketplace"], key=lambda m: m["marketplace"]) == [
        {"marketplace": "Amazon", "orders": 2},
        {"marketplace": "Local", "orders": 0},
        {"marketplace": "eBay", "orders": 2},
    ]
