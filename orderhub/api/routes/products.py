"""
Product API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional, List

from ..schemas import Product, ProductCreate, ProductUpdate, MessageResponse
from ..dependencies import get_db, get_sync
from ...core.database import Database
from ...marketplaces.sync import StockSync

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=List[Product])
async def list_products(
    search: Optional[str] = Query(None, description="Search by name or SKU"),
    db: Database = Depends(get_db)
):
    """
    List all products, newest first.
    """
    return db.get_products(search=search)


@router.get("/sku/{sku}", response_model=Product)
async def get_product_by_sku(sku: str, db: Database = Depends(get_db)):
    product = db.get_product_by_sku(sku)
    if not product:
        raise HTTPException(status_code=404, detail=f"Product {sku} not found")
    return product


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: int, db: Database = Depends(get_db)):
    """
    Get a single product by ID.
    """
    product = db.get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post("", response_model=Product, status_code=201)
async def create_product(payload: ProductCreate, db: Database = Depends(get_db)):
    return db.create_product(payload.model_dump())


@router.put("/{product_id}", response_model=Product)
async def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: Database = Depends(get_db),
    stock_sync: StockSync = Depends(get_sync)
):
    """Partial update. A new stock level is pushed to marketplaces like a stock update."""
    changes = payload.model_dump(exclude_unset=True)
    product = db.update_product(product_id, changes)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    if 'stock' in changes:
        stock_sync.dispatch(product['sku'], product['stock'])
    return product


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(product_id: int, db: Database = Depends(get_db)):
    if not db.delete_product(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return MessageResponse(message="Product deleted successfully")
