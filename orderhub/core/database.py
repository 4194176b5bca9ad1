"""
Database operations for OrderHub.
Uses SQLite for storage.
"""

import sqlite3
import logging
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from pathlib import Path
from typing import Optional, List, Dict, Any, Tuple, Iterable
from contextlib import contextmanager

from .errors import ConflictError, OrderNumberConflict, ValidationFailed
from ..orders.numbering import format_order_number, parse_sequence, year_prefix, DEFAULT_WIDTH

logger = logging.getLogger(__name__)

# Table names
CUSTOMERS_TABLE = "customers"
PRODUCTS_TABLE = "products"
MARKETPLACES_TABLE = "marketplaces"
ORDERS_TABLE = "orders"
ORDER_ITEMS_TABLE = "order_items"
SEQUENCES_TABLE = "order_sequences"

# Writable columns per table (everything else is managed here)
COLUMNS = {
    CUSTOMERS_TABLE: ("name", "email", "phone", "address"),
    PRODUCTS_TABLE: ("name", "description", "sku", "price", "stock", "image_url", "status"),
    MARKETPLACES_TABLE: (
        "name", "type", "is_connected", "api_key", "api_secret", "store_url",
        "last_sync", "stock_tracking", "auto_update_stock"
    ),
    ORDERS_TABLE: ("customer_id", "marketplace_id", "status", "currency"),
}

MONEY_COLUMNS = {"price", "total_amount"}
BOOL_COLUMNS = {"is_connected", "stock_tracking", "auto_update_stock"}

ENTITY_NAMES = {
    CUSTOMERS_TABLE: "Customer",
    PRODUCTS_TABLE: "Product",
    MARKETPLACES_TABLE: "Marketplace",
    ORDERS_TABLE: "Order",
}

CENT = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    """Coerce to a Decimal rounded to cents."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _encode(data: Dict[str, Any]) -> Dict[str, Any]:
    encoded = {}
    for key, value in data.items():
        if value is not None and key in MONEY_COLUMNS:
            value = str(to_money(value))
        elif value is not None and key in BOOL_COLUMNS:
            value = 1 if value else 0
        encoded[key] = value
    return encoded


def _decode(row: Optional[sqlite3.Row]) -> Optional[Dict[str, Any]]:
    if row is None:
        return None
    data = dict(row)
    for key in data:
        if data[key] is None:
            continue
        if key in MONEY_COLUMNS:
            data[key] = Decimal(data[key])
        elif key in BOOL_COLUMNS:
            data[key] = bool(data[key])
    return data


def _placeholders(values: Iterable) -> str:
    return ", ".join("?" for _ in values)


class Database:
    """SQLite database manager."""

    def __init__(self, db_path: Path, busy_timeout: float = 30.0):
        self.db_path = db_path
        self.busy_timeout = busy_timeout
        self._ensure_tables()

    @contextmanager
    def _connection(self, immediate: bool = False):
        """
        One connection per unit of work. Everything inside the block commits
        together or rolls back together. ``immediate`` takes the write lock
        up front so concurrent writers queue instead of interleaving.
        """
        conn = sqlite3.connect(self.db_path, timeout=self.busy_timeout, isolation_level=None)
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
            yield conn
            conn.commit()
        except Exception:
            if conn.in_transaction:
                conn.rollback()
            raise
        finally:
            conn.close()

    def _ensure_tables(self) -> None:
        """Create tables if they don't exist."""
        with self._connection() as conn:
            cursor = conn.cursor()

            cursor.execute(f"""
                CREATE TABLE IF NOT EXISTS {CUSTOMERS_TABLE} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL,
                    phone TEXT,
                    address TEXT,
                    created_at TEXT NOT NULL
                )
            """)

            cursor.execute(f"""
                CREATE TABLE IF NOT EXISTS {PRODUCTS_TABLE} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    description TEXT,
                    sku TEXT NOT NULL UNIQUE,
                    price TEXT NOT NULL,
                    stock INTEGER NOT NULL DEFAULT 0,
                    image_url TEXT,
                    status TEXT NOT NULL DEFAULT 'active',
                    created_at TEXT NOT NULL
                )
            """)

            cursor.execute(f"""
                CREATE TABLE IF NOT EXISTS {MARKETPLACES_TABLE} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    type TEXT NOT NULL,
                    is_connected INTEGER NOT NULL DEFAULT 0,
                    api_key TEXT,
                    api_secret TEXT,
                    store_url TEXT,
                    last_sync TEXT,
                    stock_tracking INTEGER NOT NULL DEFAULT 1,
                    auto_update_stock INTEGER NOT NULL DEFAULT 1,
                    created_at TEXT NOT NULL
                )
            """)

            cursor.execute(f"""
                CREATE TABLE IF NOT EXISTS {ORDERS_TABLE} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    order_id TEXT NOT NULL UNIQUE,
                    customer_id INTEGER NOT NULL,
                    marketplace_id INTEGER NOT NULL,
                    status TEXT NOT NULL DEFAULT 'pending',
                    total_amount TEXT NOT NULL,
                    currency TEXT NOT NULL DEFAULT 'EUR',
                    order_date TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY (customer_id) REFERENCES {CUSTOMERS_TABLE}(id) ON DELETE RESTRICT,
                    FOREIGN KEY (marketplace_id) REFERENCES {MARKETPLACES_TABLE}(id) ON DELETE RESTRICT
                )
            """)

            cursor.execute(f"""
                CREATE TABLE IF NOT EXISTS {ORDER_ITEMS_TABLE} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    order_id INTEGER NOT NULL,
                    product_id INTEGER,
                    name TEXT,
                    sku TEXT,
                    quantity INTEGER NOT NULL CHECK (quantity >= 1),
                    price TEXT NOT NULL,
                    FOREIGN KEY (order_id) REFERENCES {ORDERS_TABLE}(id) ON DELETE CASCADE,
                    FOREIGN KEY (product_id) REFERENCES {PRODUCTS_TABLE}(id) ON DELETE RESTRICT
                )
            """)

            # Per-year order number counter
            cursor.execute(f"""
                CREATE TABLE IF NOT EXISTS {SEQUENCES_TABLE} (
                    year INTEGER PRIMARY KEY,
                    last_value INTEGER NOT NULL
                )
            """)

            cursor.execute(f"""
                CREATE INDEX IF NOT EXISTS idx_orders_created
                ON {ORDERS_TABLE}(created_at DESC)
            """)
            cursor.execute(f"""
                CREATE INDEX IF NOT EXISTS idx_orders_customer
                ON {ORDERS_TABLE}(customer_id)
            """)
            cursor.execute(f"""
                CREATE INDEX IF NOT EXISTS idx_orders_marketplace
                ON {ORDERS_TABLE}(marketplace_id)
            """)
            cursor.execute(f"""
                CREATE INDEX IF NOT EXISTS idx_items_order
                ON {ORDER_ITEMS_TABLE}(order_id)
            """)

            logger.info(f"Database initialized at {self.db_path}")

    # ==================== Generic Helpers ====================

    def _insert(self, table: str, data: Dict[str, Any]) -> Dict[str, Any]:
        values = _encode({k: v for k, v in data.items() if k in COLUMNS[table]})
        values['created_at'] = utcnow_iso()
        columns = list(values)

        with self._connection() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(f"""
                    INSERT INTO {table} ({", ".join(columns)})
                    VALUES ({_placeholders(columns)})
                """, [values[c] for c in columns])
            except sqlite3.IntegrityError as e:
                raise self._conflict(table, values, e) from e
            cursor.execute(f"SELECT * FROM {table} WHERE id = ?", (cursor.lastrowid,))
            return _decode(cursor.fetchone())

    def _update(self, table: str, record_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply a partial update. Returns the updated row, or None if missing."""
        values = _encode({k: v for k, v in data.items() if k in COLUMNS[table]})

        with self._connection() as conn:
            cursor = conn.cursor()
            if values:
                assignments = ", ".join(f"{c} = ?" for c in values)
                try:
                    cursor.execute(
                        f"UPDATE {table} SET {assignments} WHERE id = ?",
                        [*values.values(), record_id]
                    )
                except sqlite3.IntegrityError as e:
                    raise self._conflict(table, values, e) from e
            cursor.execute(f"SELECT * FROM {table} WHERE id = ?", (record_id,))
            return _decode(cursor.fetchone())

    def _delete(self, table: str, record_id: int) -> bool:
        """Delete a row. Rows still referenced by orders are refused."""
        with self._connection() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(f"DELETE FROM {table} WHERE id = ?", (record_id,))
            except sqlite3.IntegrityError as e:
                entity = ENTITY_NAMES[table]
                raise ConflictError(f"{entity} {record_id} is referenced by existing orders") from e
            return cursor.rowcount > 0

    def _get(self, table: str, record_id: int) -> Optional[Dict[str, Any]]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT * FROM {table} WHERE id = ?", (record_id,))
            return _decode(cursor.fetchone())

    def _count(self, table: str) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT COUNT(*) as count FROM {table}")
            return cursor.fetchone()['count']

    @staticmethod
    def _conflict(table: str, values: Dict[str, Any], error: sqlite3.IntegrityError) -> ConflictError:
        if table == PRODUCTS_TABLE and 'products.sku' in str(error):
            return ConflictError(f"Product with SKU {values.get('sku')} already exists")
        return ConflictError(f"{ENTITY_NAMES[table]} violates a uniqueness or reference constraint")

    # ==================== Customer Operations ====================

    def get_customers(self, email: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get customers, newest first, optionally filtered by email."""
        with self._connection() as conn:
            cursor = conn.cursor()
            query = f"SELECT * FROM {CUSTOMERS_TABLE}"
            params = []
            if email:
                query += " WHERE email = ?"
                params.append(email)
            query += " ORDER BY created_at DESC, id DESC"
            cursor.execute(query, params)
            return [_decode(row) for row in cursor.fetchall()]

    def get_customer(self, customer_id: int) -> Optional[Dict[str, Any]]:
        return self._get(CUSTOMERS_TABLE, customer_id)

    def get_customer_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        customers = self.get_customers(email=email)
        return customers[0] if customers else None

    def create_customer(self, data: Dict[str, Any]) -> Dict[str, Any]:
        customer = self._insert(CUSTOMERS_TABLE, data)
        logger.debug(f"Added customer: {customer['id']} - {customer['name']}")
        return customer

    def update_customer(self, customer_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self._update(CUSTOMERS_TABLE, customer_id, data)

    def delete_customer(self, customer_id: int) -> bool:
        return self._delete(CUSTOMERS_TABLE, customer_id)

    def get_customer_count(self) -> int:
        return self._count(CUSTOMERS_TABLE)

    # ==================== Product Operations ====================

    def get_products(self, search: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get products, newest first. ``search`` matches name or SKU."""
        with self._connection() as conn:
            cursor = conn.cursor()
            query = f"SELECT * FROM {PRODUCTS_TABLE}"
            params = []
            if search:
                query += " WHERE name LIKE ? OR sku LIKE ?"
                params.extend([f"%{search}%", f"%{search}%"])
            query += " ORDER BY created_at DESC, id DESC"
            cursor.execute(query, params)
            return [_decode(row) for row in cursor.fetchall()]

    def get_product(self, product_id: int) -> Optional[Dict[str, Any]]:
        return self._get(PRODUCTS_TABLE, product_id)

    def get_product_by_sku(self, sku: str) -> Optional[Dict[str, Any]]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT * FROM {PRODUCTS_TABLE} WHERE sku = ?", (sku,))
            return _decode(cursor.fetchone())

    def create_product(self, data: Dict[str, Any]) -> Dict[str, Any]:
        product = self._insert(PRODUCTS_TABLE, data)
        logger.debug(f"Added product: {product['sku']} - {product['name']}")
        return product

    def update_product(self, product_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self._update(PRODUCTS_TABLE, product_id, data)

    def delete_product(self, product_id: int) -> bool:
        return self._delete(PRODUCTS_TABLE, product_id)

    def get_product_count(self) -> int:
        """Get total number of products."""
        return self._count(PRODUCTS_TABLE)

    def set_stock_by_sku(self, sku: str, stock: int) -> Optional[Dict[str, Any]]:
        """Overwrite the stock level of a product. Returns None for an unknown SKU."""
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"UPDATE {PRODUCTS_TABLE} SET stock = ? WHERE sku = ?", (stock, sku))
            if cursor.rowcount == 0:
                return None
            cursor.execute(f"SELECT * FROM {PRODUCTS_TABLE} WHERE sku = ?", (sku,))
            return _decode(cursor.fetchone())

    # ==================== Marketplace Operations ====================

    def get_marketplaces(self, connected_only: bool = False) -> List[Dict[str, Any]]:
        with self._connection() as conn:
            cursor = conn.cursor()
            query = f"SELECT * FROM {MARKETPLACES_TABLE}"
            if connected_only:
                query += " WHERE is_connected = 1"
            query += " ORDER BY created_at DESC, id DESC"
            cursor.execute(query)
            return [_decode(row) for row in cursor.fetchall()]

    def get_marketplace(self, marketplace_id: int) -> Optional[Dict[str, Any]]:
        return self._get(MARKETPLACES_TABLE, marketplace_id)

    def create_marketplace(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._insert(MARKETPLACES_TABLE, data)

    def update_marketplace(self, marketplace_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self._update(MARKETPLACES_TABLE, marketplace_id, data)

    def delete_marketplace(self, marketplace_id: int) -> bool:
        return self._delete(MARKETPLACES_TABLE, marketplace_id)

    def mark_synced(self, marketplace_id: int, timestamp: Optional[str] = None) -> None:
        """Record a successful stock push to a marketplace."""
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"""
                UPDATE {MARKETPLACES_TABLE} SET last_sync = ? WHERE id = ?
            """, (timestamp or utcnow_iso(), marketplace_id))

    # ==================== Order Operations ====================

    def _reserve_sequence(self, cursor: sqlite3.Cursor, year: int) -> int:
        """
        Reserve the next order sequence for a year. Must run inside a write
        transaction. Never goes below the highest number already used, so
        imported or hand-written order ids are skipped.
        """
        cursor.execute(f"SELECT last_value FROM {SEQUENCES_TABLE} WHERE year = ?", (year,))
        row = cursor.fetchone()
        counter = row['last_value'] if row else 0

        cursor.execute(f"""
            SELECT order_id FROM {ORDERS_TABLE}
            WHERE order_id GLOB ?
            ORDER BY length(order_id) DESC, order_id DESC
            LIMIT 1
        """, (f"{year_prefix(year)}[0-9]*",))
        latest = cursor.fetchone()
        highest = (parse_sequence(latest['order_id'], year) or 0) if latest else 0

        next_value = max(counter, highest) + 1
        cursor.execute(f"""
            INSERT INTO {SEQUENCES_TABLE} (year, last_value) VALUES (?, ?)
            ON CONFLICT(year) DO UPDATE SET last_value = excluded.last_value
        """, (year, next_value))
        return next_value

    def _validate_references(
        self,
        cursor: sqlite3.Cursor,
        customer_id: Optional[int],
        marketplace_id: Optional[int],
        product_ids: Dict[int, int]
    ) -> Dict[int, Dict[str, Any]]:
        """Check referenced rows exist. Returns the products keyed by id."""
        errors = []
        if customer_id is not None:
            cursor.execute(f"SELECT id FROM {CUSTOMERS_TABLE} WHERE id = ?", (customer_id,))
            if cursor.fetchone() is None:
                errors.append({"path": "customerId", "message": f"Customer {customer_id} not found"})
        if marketplace_id is not None:
            cursor.execute(f"SELECT id FROM {MARKETPLACES_TABLE} WHERE id = ?", (marketplace_id,))
            if cursor.fetchone() is None:
                errors.append({"path": "marketplaceId", "message": f"Marketplace {marketplace_id} not found"})

        products = {}
        if product_ids:
            ids = sorted(set(product_ids.values()))
            cursor.execute(
                f"SELECT * FROM {PRODUCTS_TABLE} WHERE id IN ({_placeholders(ids)})", ids
            )
            products = {row['id']: _decode(row) for row in cursor.fetchall()}
            for index, product_id in product_ids.items():
                if product_id not in products:
                    errors.append({
                        "path": f"items.{index}.productId",
                        "message": f"Product {product_id} not found"
                    })

        if errors:
            raise ValidationFailed("Validation error", errors)
        return products

    def create_order(
        self,
        customer_id: int,
        marketplace_id: int,
        items: List[Dict[str, Any]],
        total_amount: Decimal,
        year: int,
        status: str = "pending",
        currency: str = "EUR",
        width: int = DEFAULT_WIDTH,
        order_date: Optional[str] = None
    ) -> Tuple[int, str, List[Tuple[str, int]]]:
        """
        Register an order with its items and stock consequences in a single
        transaction.

        Each item is a dict with ``quantity``, ``price`` and optionally
        ``product_id``, ``name``, ``sku``.

        Returns:
            (internal id, order number, [(sku, final stock), ...]), one entry per SKU
        """
        now = utcnow_iso()
        product_ids = {i: item['product_id'] for i, item in enumerate(items) if item.get('product_id') is not None}

        with self._connection(immediate=True) as conn:
            cursor = conn.cursor()
            products = self._validate_references(cursor, customer_id, marketplace_id, product_ids)

            sequence = self._reserve_sequence(cursor, year)
            order_number = format_order_number(year, sequence, width)

            try:
                cursor.execute(f"""
                    INSERT INTO {ORDERS_TABLE}
                    (order_id, customer_id, marketplace_id, status, total_amount, currency, order_date, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    order_number, customer_id, marketplace_id, status,
                    str(to_money(total_amount)), currency, order_date or now, now
                ))
            except sqlite3.IntegrityError as e:
                if 'orders.order_id' in str(e):
                    raise OrderNumberConflict(order_number) from e
                raise
            order_pk = cursor.lastrowid

            for item in items:
                product = products.get(item.get('product_id'))
                cursor.execute(f"""
                    INSERT INTO {ORDER_ITEMS_TABLE} (order_id, product_id, name, sku, quantity, price)
                    VALUES (?, ?, ?, ?, ?, ?)
                """, (
                    order_pk,
                    item.get('product_id'),
                    item.get('name') or (product['name'] if product else None),
                    item.get('sku') or (product['sku'] if product else None),
                    item['quantity'],
                    str(to_money(item['price']))
                ))

            # One entry per SKU holding its level after the last line
            final_levels: Dict[str, int] = {}
            for item in items:
                if item.get('product_id') is None:
                    continue
                sku, stock = self._adjust_stock(cursor, item['product_id'], -item['quantity'])
                final_levels[sku] = stock

            logger.info(f"Created order {order_number} (id={order_pk}, items={len(items)}, total={total_amount})")
            return order_pk, order_number, list(final_levels.items())

    def _adjust_stock(self, cursor: sqlite3.Cursor, product_id: int, delta: int) -> Tuple[str, int]:
        """Shift stock by delta, floored at zero. Returns (sku, new stock)."""
        cursor.execute(f"""
            UPDATE {PRODUCTS_TABLE} SET stock = MAX(0, stock + ?) WHERE id = ?
        """, (delta, product_id))
        cursor.execute(f"SELECT sku, stock FROM {PRODUCTS_TABLE} WHERE id = ?", (product_id,))
        row = cursor.fetchone()
        return row['sku'], row['stock']

    def update_order(
        self,
        order_id: int,
        data: Dict[str, Any],
        restock_on_cancel: bool = False
    ) -> Tuple[bool, List[Tuple[str, int]]]:
        """
        Apply a partial update to an order. Totals are never recomputed.

        Returns:
            (found, [(sku, final stock), ...]) where stock changes only occur
            when ``restock_on_cancel`` is set and the order moves into
            'cancelled'.
        """
        values = {k: v for k, v in data.items() if k in COLUMNS[ORDERS_TABLE]}

        with self._connection(immediate=True) as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT status FROM {ORDERS_TABLE} WHERE id = ?", (order_id,))
            current = cursor.fetchone()
            if current is None:
                return False, []

            self._validate_references(
                cursor, values.get('customer_id'), values.get('marketplace_id'), {}
            )

            if values:
                assignments = ", ".join(f"{c} = ?" for c in values)
                cursor.execute(
                    f"UPDATE {ORDERS_TABLE} SET {assignments} WHERE id = ?",
                    [*values.values(), order_id]
                )

            final_levels: Dict[str, int] = {}
            cancelling = values.get('status') == 'cancelled' and current['status'] != 'cancelled'
            if restock_on_cancel and cancelling:
                cursor.execute(f"""
                    SELECT product_id, quantity FROM {ORDER_ITEMS_TABLE}
                    WHERE order_id = ? AND product_id IS NOT NULL
                """, (order_id,))
                for item in cursor.fetchall():
                    sku, stock = self._adjust_stock(cursor, item['product_id'], item['quantity'])
                    final_levels[sku] = stock
                logger.info(f"Restocked {len(final_levels)} product(s) for cancelled order {order_id}")

            return True, list(final_levels.items())

    def _attach_details(self, cursor: sqlite3.Cursor, orders: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Join customer, marketplace and items (with product) onto order rows."""
        if not orders:
            return orders

        def fetch_by_ids(table: str, ids: set) -> Dict[int, Dict[str, Any]]:
            if not ids:
                return {}
            ids = sorted(ids)
            cursor.execute(f"SELECT * FROM {table} WHERE id IN ({_placeholders(ids)})", ids)
            return {row['id']: _decode(row) for row in cursor.fetchall()}

        customers = fetch_by_ids(CUSTOMERS_TABLE, {o['customer_id'] for o in orders})
        marketplaces = fetch_by_ids(MARKETPLACES_TABLE, {o['marketplace_id'] for o in orders})

        order_ids = [o['id'] for o in orders]
        cursor.execute(f"""
            SELECT * FROM {ORDER_ITEMS_TABLE}
            WHERE order_id IN ({_placeholders(order_ids)})
            ORDER BY id
        """, order_ids)
        items = [_decode(row) for row in cursor.fetchall()]
        products = fetch_by_ids(PRODUCTS_TABLE, {i['product_id'] for i in items if i['product_id']})

        items_by_order: Dict[int, List[Dict[str, Any]]] = {}
        for item in items:
            item['product'] = products.get(item['product_id'])
            items_by_order.setdefault(item['order_id'], []).append(item)

        for order in orders:
            order['customer'] = customers.get(order['customer_id'])
            order['marketplace'] = marketplaces.get(order['marketplace_id'])
            order['items'] = items_by_order.get(order['id'], [])
        return orders

    def get_orders(
        self,
        status: Optional[str] = None,
        customer_id: Optional[int] = None,
        marketplace_id: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """Get orders with details, newest first."""
        with self._connection() as conn:
            cursor = conn.cursor()
            query = f"SELECT * FROM {ORDERS_TABLE}"
            conditions = []
            params: List[Any] = []

            if status:
                conditions.append("status = ?")
                params.append(status)
            if customer_id is not None:
                conditions.append("customer_id = ?")
                params.append(customer_id)
            if marketplace_id is not None:
                conditions.append("marketplace_id = ?")
                params.append(marketplace_id)

            if conditions:
                query += " WHERE " + " AND ".join(conditions)
            query += " ORDER BY created_at DESC, id DESC"
            if limit:
                query += " LIMIT ?"
                params.append(limit)

            cursor.execute(query, params)
            orders = [_decode(row) for row in cursor.fetchall()]
            return self._attach_details(cursor, orders)

    def get_order(self, order_id: int) -> Optional[Dict[str, Any]]:
        """Get a single order with details."""
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT * FROM {ORDERS_TABLE} WHERE id = ?", (order_id,))
            order = _decode(cursor.fetchone())
            if order is None:
                return None
            return self._attach_details(cursor, [order])[0]

    def get_order_rows(self) -> List[Dict[str, Any]]:
        """All orders without joins, for aggregation."""
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"""
                SELECT id, order_id, marketplace_id, status, total_amount, created_at
                FROM {ORDERS_TABLE}
            """)
            return [_decode(row) for row in cursor.fetchall()]

    def get_order_count(self) -> int:
        return self._count(ORDERS_TABLE)


# Global database instance
_db_instance: Optional[Database] = None


def get_database(db_path: Optional[Path] = None) -> Database:
    """Get the global database instance."""
    global _db_instance
    if _db_instance is None:
        from .config import get_config
        config = get_config()
        if db_path is None:
            db_path = config.db_path
        _db_instance = Database(
            db_path,
            busy_timeout=config.get_float('database', 'busy_timeout', default=30.0)
        )
    return _db_instance
