"""
WooCommerce API Client.
Pushes stock levels to a connected WooCommerce store.
"""

import requests
import logging
from typing import List, Dict, Optional, Any
from urllib.parse import urljoin

logger = logging.getLogger(__name__)


class MarketplaceError(Exception):
    """A marketplace API call failed."""


class WooCommerceClient:
    """Client for WooCommerce REST API."""

    def __init__(self, url: str, consumer_key: str, consumer_secret: str, timeout: int = 30):
        self.base_url = url.rstrip('/') + '/wp-json/wc/v3/'
        self.auth = (consumer_key, consumer_secret)
        self.timeout = timeout
        self.session = requests.Session()

    def _request(self, method: str, endpoint: str, **kwargs) -> Any:
        """Make a request to the WC API."""
        url = urljoin(self.base_url, endpoint)
        try:
            response = self.session.request(
                method,
                url,
                auth=self.auth,
                timeout=self.timeout,
                **kwargs
            )
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            raise MarketplaceError(f"WooCommerce API error: {e}") from e

    def find_product_by_sku(self, sku: str) -> Optional[Dict[str, Any]]:
        """Look up a product by SKU. Returns None if the store doesn't list it."""
        products: List[Dict[str, Any]] = self._request('GET', 'products', params={'sku': sku}) or []
        return products[0] if products else None

    def update_stock(self, sku: str, quantity: int) -> bool:
        """
        Set the stock quantity of the product with the given SKU.

        Returns:
            True if the product was found and updated, False if the store
            has no product with that SKU.
        """
        product = self.find_product_by_sku(sku)
        if product is None:
            logger.info(f"WooCommerce has no product with SKU {sku}, skipping")
            return False

        self._request('PUT', f"products/{product['id']}", json={
            'manage_stock': True,
            'stock_quantity': quantity
        })
        logger.info(f"WooCommerce stock for {sku} set to {quantity}")
        return True
