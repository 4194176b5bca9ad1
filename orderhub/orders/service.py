"""
Order Service.
Orchestrates order placement: numbering, totals, persistence, stock
decrement and the stock-sync fan-out that follows.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Dict, Any, Optional, Callable

from ..core.database import Database, to_money
from ..core.errors import NotFoundError
from ..core.retry import retry_on_conflict
from ..marketplaces.sync import StockSync
from .numbering import DEFAULT_WIDTH

logger = logging.getLogger(__name__)

ORDER_STATUSES = ("pending", "shipped", "delivered", "cancelled")


def compute_total(items: List[Dict[str, Any]]) -> Decimal:
    """Sum of price x quantity, rounded to cents."""
    return to_money(sum(
        (to_money(item['price']) * item['quantity'] for item in items),
        Decimal("0")
    ))


class OrderService:
    """Service to place and update orders."""

    def __init__(
        self,
        db: Database,
        stock_sync: StockSync,
        default_currency: str = "EUR",
        sequence_width: int = DEFAULT_WIDTH,
        max_attempts: int = 5,
        retry_backoff: float = 0.05,
        restock_on_cancel: bool = False,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)
    ):
        self.db = db
        self.stock_sync = stock_sync
        self.default_currency = default_currency
        self.sequence_width = sequence_width
        self.max_attempts = max_attempts
        self.retry_backoff = retry_backoff
        self.restock_on_cancel = restock_on_cancel
        self.clock = clock

    @classmethod
    def from_config(cls, db: Database, stock_sync: StockSync) -> 'OrderService':
        from ..core.config import get_config
        config = get_config()
        return cls(
            db,
            stock_sync,
            default_currency=config.get('orders', 'default_currency', default='EUR'),
            sequence_width=config.get_int('orders', 'sequence_width', default=DEFAULT_WIDTH),
            max_attempts=config.get_int('orders', 'max_create_attempts', default=5),
            retry_backoff=config.get_float('orders', 'retry_backoff', default=0.05),
            restock_on_cancel=config.get_bool('orders', 'restock_on_cancel', default=False)
        )

    def create_order(
        self,
        customer_id: int,
        marketplace_id: int,
        items: List[Dict[str, Any]],
        status: str = "pending",
        currency: Optional[str] = None,
        client_total: Optional[Decimal] = None
    ) -> Dict[str, Any]:
        """
        Place an order.

        1. Reserve the next order number for the current year
        2. Recompute the total server-side
        3. Persist order, items and stock decrements in one transaction
        4. Dispatch stock sync for every changed SKU

        Returns:
            The joined order (customer, marketplace, items with product)
        """
        total = compute_total(items)
        if client_total is not None and to_money(client_total) != total:
            logger.warning(
                f"Ignoring client total {client_total} for customer {customer_id}; "
                f"recomputed {total}"
            )

        year = self.clock().year
        create = retry_on_conflict(self.max_attempts, self.retry_backoff)(self.db.create_order)
        order_pk, order_number, stock_changes = create(
            customer_id=customer_id,
            marketplace_id=marketplace_id,
            items=items,
            total_amount=total,
            year=year,
            status=status,
            currency=currency or self.default_currency,
            width=self.sequence_width
        )

        # Only after commit: a rolled back order must not leak stock updates
        self.stock_sync.dispatch_many(stock_changes)

        return self.db.get_order(order_pk)

    def update_order(self, order_id: int, updates: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply a partial update (usually a status change) and return the
        refreshed order. Totals are left as they were at creation.
        """
        found, stock_changes = self.db.update_order(
            order_id, updates, restock_on_cancel=self.restock_on_cancel
        )
        if not found:
            raise NotFoundError("Order", order_id)

        if 'status' in updates:
            logger.info(f"Order {order_id} status -> {updates['status']}")
        self.stock_sync.dispatch_many(stock_changes)

        return self.db.get_order(order_id)
