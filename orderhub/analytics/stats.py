"""
Dashboard sales statistics.
Computed from full table scans on every call; there is no cached rollup.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Dict, Any, Optional

import pandas as pd

from ..core.database import Database

DAYS_IN_SERIES = 7


def get_sales_stats(db: Database, today: Optional[date] = None) -> Dict[str, Any]:
    """
    Compute dashboard rollups:
    - totals (sales, orders, customers, products)
    - sales for each of the last 7 days, oldest first
    - order count per marketplace
    """
    if today is None:
        today = datetime.now(timezone.utc).date()

    orders = db.get_order_rows()
    marketplaces = db.get_marketplaces()
    days = [today - timedelta(days=offset) for offset in range(DAYS_IN_SERIES - 1, -1, -1)]

    if orders:
        df = pd.DataFrame(orders)
        df['total_amount'] = df['total_amount'].astype(float)
        df['created_at'] = pd.to_datetime(df['created_at'], format='ISO8601', utc=True)
        df['day'] = df['created_at'].dt.date

        total_sales = float(df['total_amount'].sum())
        sales_per_day = df.groupby('day')['total_amount'].sum().to_dict()
        orders_per_marketplace = df.groupby('marketplace_id').size().to_dict()
    else:
        total_sales = 0.0
        sales_per_day = {}
        orders_per_marketplace = {}

    return {
        "total_sales": round(total_sales, 2),
        "total_orders": len(orders),
        "total_customers": db.get_customer_count(),
        "total_products": db.get_product_count(),
        "sales_by_day": [
            {"day": d.strftime('%a'), "sales": round(float(sales_per_day.get(d, 0.0)), 2)}
            for d in days
        ],
        "orders_by_marketplace": [
            {"marketplace": m['name'], "orders": int(orders_per_marketplace.get(m['id'], 0))}
            for m in marketplaces
        ],
    }
