"""
Demo data: default marketplaces, a few products and customers, and sample
orders placed through the normal order workflow.
"""

import logging
from typing import Dict, Any

from .core.database import Database
from .orders.service import OrderService

logger = logging.getLogger(__name__)

DEFAULT_MARKETPLACES = [
    {"name": "Local Store", "type": "local", "is_connected": True},
    {"name": "Amazon", "type": "amazon", "is_connected": True},
    {"name": "eBay", "type": "ebay", "is_connected": True},
    {"name": "Shopify", "type": "shopify", "is_connected": True},
    {"name": "WooCommerce", "type": "woocommerce", "is_connected": False},
    {"name": "Kaufland", "type": "kaufland", "is_connected": False},
    {"name": "Shopware6", "type": "shopware6", "is_connected": False},
]

SAMPLE_PRODUCTS = [
    {
        "name": "Wireless Headphones",
        "description": "High-quality wireless headphones with noise cancellation",
        "sku": "WH-2023-001",
        "price": "89.99",
        "stock": 45,
    },
    {
        "name": "Smart Watch",
        "description": "Feature-rich smartwatch with health monitoring",
        "sku": "SW-2023-002",
        "price": "199.99",
        "stock": 23,
    },
    {
        "name": "Portable Speaker",
        "description": "Waterproof portable Bluetooth speaker",
        "sku": "PS-2023-003",
        "price": "59.99",
        "stock": 78,
    },
]

SAMPLE_CUSTOMERS = [
    {"name": "John Smith", "email": "john@example.com", "phone": "+1234567890",
     "address": "123 Main St, Berlin, Germany"},
    {"name": "Sarah Johnson", "email": "sarah@example.com", "phone": "+1234567891",
     "address": "456 Oak Ave, Munich, Germany"},
    {"name": "Emma Wilson", "email": "emma.wilson@example.com", "phone": "+49123456789",
     "address": "Unter den Linden 45, Berlin, Germany"},
]

# (customer index, marketplace index, [(product index, quantity)], status)
SAMPLE_ORDERS = [
    (0, 1, [(0, 1)], "shipped"),
    (1, 2, [(1, 1)], "pending"),
    (2, 3, [(2, 2)], "delivered"),
]


def seed_database(db: Database, service: OrderService) -> Dict[str, Any]:
    """Insert demo data. Refuses to run on a database that already has products."""
    if db.get_product_count() > 0:
        logger.warning("Database already contains products, skipping seed")
        return {"skipped": True}

    marketplaces = [db.create_marketplace(m) for m in DEFAULT_MARKETPLACES]
    products = [db.create_product(p) for p in SAMPLE_PRODUCTS]
    customers = [db.create_customer(c) for c in SAMPLE_CUSTOMERS]

    orders = []
    for customer_idx, marketplace_idx, lines, status in SAMPLE_ORDERS:
        items = [
            {
                "product_id": products[p]["id"],
                "quantity": qty,
                "price": products[p]["price"],
            }
            for p, qty in lines
        ]
        orders.append(service.create_order(
            customer_id=customers[customer_idx]["id"],
            marketplace_id=marketplaces[marketplace_idx]["id"],
            items=items,
            status=status
        ))

    logger.info(
        f"Seeded {len(marketplaces)} marketplaces, {len(products)} products, "
        f"{len(customers)} customers, {len(orders)} orders"
    )
    return {
        "skipped": False,
        "marketplaces": len(marketplaces),
        "products": len(products),
        "customers": len(customers),
        "orders": len(orders),
    }
