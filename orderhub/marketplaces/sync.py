"""
Stock synchronization fan-out.
After a stock change, pushes the new level for a SKU to every connected
marketplace that tracks and auto-updates stock. Runs off the request path.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, Future
from typing import Callable, Dict, List, Optional, Any, Iterable, Tuple

from ..core.database import Database, get_database
from ..core.config import get_config
from .connectors import get_connector, StockConnector

logger = logging.getLogger(__name__)


class StockSync:
    """Fire-and-forget stock propagation to connected marketplaces."""

    def __init__(
        self,
        db: Database,
        workers: int = 4,
        timeout: int = 30,
        connector_factory: Callable[[Dict[str, Any], int], StockConnector] = get_connector
    ):
        self.db = db
        self.timeout = timeout
        self.connector_factory = connector_factory
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="stock-sync")

    def dispatch(self, sku: str, stock: int) -> Future:
        """Queue a fan-out for one SKU and return immediately."""
        future = self._executor.submit(self.sync_stock, sku, stock)
        future.add_done_callback(self._log_failure)
        return future

    def dispatch_many(self, changes: Iterable[Tuple[str, int]]) -> List[Future]:
        return [self.dispatch(sku, stock) for sku, stock in changes]

    @staticmethod
    def _log_failure(future: Future) -> None:
        exc = future.exception()
        if exc is not None:
            logger.error(f"Stock sync task failed: {exc}", exc_info=exc)

    def sync_stock(self, sku: str, stock: int) -> List[int]:
        """
        Push a SKU's stock level to all eligible marketplaces.
        A failing marketplace is logged and skipped.

        Tasks run in no particular order, so the level is re-read when the
        task runs; ``stock`` is only used if the product is gone.

        Returns:
            IDs of the marketplaces that accepted the update
        """
        product = self.db.get_product_by_sku(sku)
        if product is not None and product['stock'] != stock:
            logger.debug(f"Queued level {stock} for {sku} is stale, pushing {product['stock']}")
            stock = product['stock']

        marketplaces = self.db.get_marketplaces(connected_only=True)
        targets = [m for m in marketplaces if m['stock_tracking'] and m['auto_update_stock']]
        if not targets:
            logger.debug(f"No marketplaces to sync for {sku}")
            return []

        updated = []
        for marketplace in targets:
            try:
                connector = self.connector_factory(marketplace, self.timeout)
                if connector.update_stock(sku, stock):
                    self.db.mark_synced(marketplace['id'])
                    updated.append(marketplace['id'])
            except Exception as e:
                logger.error(f"Stock sync of {sku} to {marketplace['name']} failed: {e}")

        logger.info(f"Synced {sku}={stock} to {len(updated)}/{len(targets)} marketplace(s)")
        return updated

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


_sync_instance: Optional[StockSync] = None


def get_stock_sync() -> StockSync:
    """Get the global stock sync service."""
    global _sync_instance
    if _sync_instance is None:
        config = get_config()
        _sync_instance = StockSync(
            get_database(),
            workers=config.get_int('sync', 'workers', default=4),
            timeout=config.get_int('sync', 'timeout', default=30)
        )
    return _sync_instance
