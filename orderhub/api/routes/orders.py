"""
Order API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Optional

from ..schemas import Order, OrderCreate, OrderUpdate, OrderStatus
from ..dependencies import get_db, get_order_service
from ...core.database import Database
from ...orders.service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("", response_model=List[Order])
async def list_orders(
    status: Optional[OrderStatus] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=10000),
    db: Database = Depends(get_db)
):
    """
    Get orders with customer, marketplace and items, newest first.
    """
    return db.get_orders(status=status, limit=limit)


@router.get("/{order_id}", response_model=Order)
async def get_order(order_id: int, db: Database = Depends(get_db)):
    order = db.get_order(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.post("", response_model=Order, status_code=201)
async def create_order(payload: OrderCreate, service: OrderService = Depends(get_order_service)):
    """
    Place an order. The order number and total are generated server-side;
    stock for linked products is decremented and pushed to marketplaces.
    """
    return service.create_order(
        customer_id=payload.customer_id,
        marketplace_id=payload.marketplace_id,
        items=[item.model_dump() for item in payload.items],
        status=payload.status,
        currency=payload.currency,
        client_total=payload.total_amount
    )


@router.put("/{order_id}", response_model=Order)
async def update_order(
    order_id: int,
    payload: OrderUpdate,
    service: OrderService = Depends(get_order_service)
):
    """Partial update, typically a status change."""
    return service.update_order(order_id, payload.model_dump(exclude_unset=True))
