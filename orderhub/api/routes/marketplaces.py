"""
Marketplace API endpoints, plus the /connections alias used by the
dashboard to disconnect a channel.
"""

from fastapi import APIRouter, Depends, HTTPException
from typing import List

from ..schemas import Marketplace, MarketplaceCreate, MarketplaceUpdate, MessageResponse, Order
from ..dependencies import get_db
from ...core.database import Database

router = APIRouter(prefix="/marketplaces", tags=["marketplaces"])
connections_router = APIRouter(prefix="/connections", tags=["marketplaces"])


@router.get("", response_model=List[Marketplace])
async def list_marketplaces(db: Database = Depends(get_db)):
    return db.get_marketplaces()


@router.get("/{marketplace_id}", response_model=Marketplace)
async def get_marketplace(marketplace_id: int, db: Database = Depends(get_db)):
    marketplace = db.get_marketplace(marketplace_id)
    if not marketplace:
        raise HTTPException(status_code=404, detail="Marketplace not found")
    return marketplace


@router.get("/{marketplace_id}/orders", response_model=List[Order])
async def get_marketplace_orders(marketplace_id: int, db: Database = Depends(get_db)):
    """All orders received through a marketplace."""
    if not db.get_marketplace(marketplace_id):
        raise HTTPException(status_code=404, detail="Marketplace not found")
    return db.get_orders(marketplace_id=marketplace_id)


@router.post("", response_model=Marketplace, status_code=201)
async def create_marketplace(payload: MarketplaceCreate, db: Database = Depends(get_db)):
    return db.create_marketplace(payload.model_dump())


@router.put("/{marketplace_id}", response_model=Marketplace)
async def update_marketplace(
    marketplace_id: int,
    payload: MarketplaceUpdate,
    db: Database = Depends(get_db)
):
    marketplace = db.update_marketplace(marketplace_id, payload.model_dump(exclude_unset=True))
    if not marketplace:
        raise HTTPException(status_code=404, detail="Marketplace not found")
    return marketplace


@router.delete("/{marketplace_id}", response_model=MessageResponse)
async def delete_marketplace(marketplace_id: int, db: Database = Depends(get_db)):
    """Delete a marketplace. Refused with 409 while orders reference it."""
    if not db.delete_marketplace(marketplace_id):
        raise HTTPException(status_code=404, detail="Marketplace not found")
    return MessageResponse(message="Marketplace deleted successfully")


@connections_router.delete("/{connection_id}", response_model=MessageResponse)
async def delete_connection(connection_id: int, db: Database = Depends(get_db)):
    if not db.delete_marketplace(connection_id):
        raise HTTPException(status_code=404, detail="Connection not found")
    return MessageResponse(message="Connection deleted successfully")
