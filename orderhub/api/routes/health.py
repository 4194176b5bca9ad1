"""
Health check endpoint.
"""

from fastapi import APIRouter, Depends

from ..schemas import HealthResponse
from ..dependencies import get_db
from ...core.database import Database
from ...core.config import APP_VERSION

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(db: Database = Depends(get_db)):
    """Check API health and database status."""
    return HealthResponse(
        status="healthy",
        version=APP_VERSION,
        database_orders=db.get_order_count(),
        database_products=db.get_product_count()
    )
