"""
Stock management endpoints.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..schemas import StockUpdateRequest, MessageResponse
from ..dependencies import get_db, get_sync
from ...core.database import Database
from ...marketplaces.sync import StockSync

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stock", tags=["stock"])


@router.post("/update", response_model=MessageResponse)
async def update_stock(
    payload: StockUpdateRequest,
    db: Database = Depends(get_db),
    stock_sync: StockSync = Depends(get_sync)
):
    """
    Set the stock level of a SKU and push it to connected marketplaces.
    """
    product = db.set_stock_by_sku(payload.sku, payload.quantity)
    if not product:
        raise HTTPException(status_code=404, detail=f"Product {payload.sku} not found")

    logger.info(f"Stock for {payload.sku} set to {product['stock']}")
    stock_sync.dispatch(product['sku'], product['stock'])
    return MessageResponse(message="Stock updated successfully")
