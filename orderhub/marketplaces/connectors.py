"""
Marketplace connectors: one per marketplace type, each knows how to push a
stock level for a SKU to the external catalog.
"""

import logging
from typing import Dict, Any, Callable

from .client import WooCommerceClient, MarketplaceError

logger = logging.getLogger(__name__)

MARKETPLACE_TYPES = (
    "amazon", "ebay", "shopify", "woocommerce", "kaufland", "shopware6", "local"
)


class StockConnector:
    """Connector for channels without an API integration: logs only."""

    def __init__(self, marketplace: Dict[str, Any], timeout: int = 30):
        self.marketplace = marketplace
        self.timeout = timeout

    def update_stock(self, sku: str, stock: int) -> bool:
        logger.info(
            f"No API integration for {self.marketplace['type']} "
            f"({self.marketplace['name']}); stock {sku}={stock} recorded locally only"
        )
        return True


class WooCommerceConnector(StockConnector):

    def __init__(self, marketplace: Dict[str, Any], timeout: int = 30):
        super().__init__(marketplace, timeout)
        url = marketplace.get('store_url')
        key = marketplace.get('api_key')
        secret = marketplace.get('api_secret')
        if not (url and key and secret):
            raise MarketplaceError(
                f"Marketplace {marketplace['name']} is missing store URL or API credentials"
            )
        self.client = WooCommerceClient(url, key, secret, timeout=timeout)

    def update_stock(self, sku: str, stock: int) -> bool:
        return self.client.update_stock(sku, stock)


ConnectorFactory = Callable[[Dict[str, Any], int], StockConnector]

CONNECTORS: Dict[str, ConnectorFactory] = {
    "woocommerce": WooCommerceConnector,
}


def get_connector(marketplace: Dict[str, Any], timeout: int = 30) -> StockConnector:
    """Build the connector for a marketplace row."""
    factory = CONNECTORS.get(marketplace['type'], StockConnector)
    return factory(marketplace, timeout)
