"""
Customer API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Optional

from ..schemas import Customer, CustomerCreate, CustomerUpdate, MessageResponse, Order
from ..dependencies import get_db
from ...core.database import Database

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("", response_model=List[Customer])
async def list_customers(
    email: Optional[str] = Query(None, description="Exact email match"),
    db: Database = Depends(get_db)
):
    """List customers, newest first."""
    return db.get_customers(email=email)


@router.get("/{customer_id}", response_model=Customer)
async def get_customer(customer_id: int, db: Database = Depends(get_db)):
    customer = db.get_customer(customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


@router.get("/{customer_id}/orders", response_model=List[Order])
async def get_customer_orders(customer_id: int, db: Database = Depends(get_db)):
    """All orders placed by a customer."""
    if not db.get_customer(customer_id):
        raise HTTPException(status_code=404, detail="Customer not found")
    return db.get_orders(customer_id=customer_id)


@router.post("", response_model=Customer, status_code=201)
async def create_customer(payload: CustomerCreate, db: Database = Depends(get_db)):
    return db.create_customer(payload.model_dump())


@router.put("/{customer_id}", response_model=Customer)
async def update_customer(customer_id: int, payload: CustomerUpdate, db: Database = Depends(get_db)):
    customer = db.update_customer(customer_id, payload.model_dump(exclude_unset=True))
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


@router.delete("/{customer_id}", response_model=MessageResponse)
async def delete_customer(customer_id: int, db: Database = Depends(get_db)):
    if not db.delete_customer(customer_id):
        raise HTTPException(status_code=404, detail="Customer not found")
    return MessageResponse(message="Customer deleted successfully")
