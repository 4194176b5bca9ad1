"""
Dashboard statistics endpoint.
"""

from fastapi import APIRouter, Depends

from ..schemas import SalesStats
from ..dependencies import get_db
from ...analytics.stats import get_sales_stats
from ...core.database import Database

router = APIRouter(tags=["analytics"])


@router.get("/stats", response_model=SalesStats)
async def get_stats(db: Database = Depends(get_db)):
    """
    Totals, last-7-days sales series and orders per marketplace.
    """
    return get_sales_stats(db)
