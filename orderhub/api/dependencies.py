"""
FastAPI dependency providers. Tests swap these via ``app.dependency_overrides``.
"""

from fastapi import Depends

from ..core.database import Database, get_database
from ..marketplaces.sync import StockSync, get_stock_sync
from ..orders.service import OrderService


def get_db() -> Database:
    return get_database()


def get_sync() -> StockSync:
    return get_stock_sync()


def get_order_service(
    db: Database = Depends(get_db),
    stock_sync: StockSync = Depends(get_sync)
) -> OrderService:
    return OrderService.from_config(db, stock_sync)
