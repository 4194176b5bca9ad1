"""
Pydantic schemas for API request/response validation.
JSON uses camelCase; Python attributes stay snake_case.
"""

from decimal import Decimal
from typing import Optional, List, Literal, ClassVar, Tuple, Annotated

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

OrderStatus = Literal["pending", "shipped", "delivered", "cancelled"]
ProductStatus = Literal["active", "inactive"]
MarketplaceType = Literal["amazon", "ebay", "shopify", "woocommerce", "kaufland", "shopware6", "local"]

Money = Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2)]
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PartialUpdate(CamelModel):
    """Base for PUT bodies: every field optional, but NOT NULL columns can't be nulled."""

    not_nullable: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode='after')
    def _reject_nulls(self):
        nulled = [f for f in self.not_nullable if f in self.model_fields_set and getattr(self, f) is None]
        if nulled:
            raise ValueError(f"Fields cannot be null: {', '.join(to_camel(f) for f in nulled)}")
        return self


# ==================== Customer Schemas ====================

class CustomerBase(CamelModel):
    name: str = Field(min_length=1)
    email: str = Field(pattern=EMAIL_PATTERN)
    phone: Optional[str] = None
    address: Optional[str] = None


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(PartialUpdate):
    not_nullable: ClassVar[Tuple[str, ...]] = ("name", "email")

    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN)
    phone: Optional[str] = None
    address: Optional[str] = None


class Customer(CustomerBase):
    id: int
    created_at: Optional[str] = None


# ==================== Product Schemas ====================

class ProductBase(CamelModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    sku: str = Field(min_length=1)
    price: Money
    stock: int = Field(default=0, ge=0)
    image_url: Optional[str] = None
    status: ProductStatus = "active"


class ProductCreate(ProductBase):
    pass


class ProductUpdate(PartialUpdate):
    not_nullable: ClassVar[Tuple[str, ...]] = ("name", "sku", "price", "stock", "status")

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    sku: Optional[str] = Field(default=None, min_length=1)
    price: Optional[Money] = None
    stock: Optional[int] = Field(default=None, ge=0)
    image_url: Optional[str] = None
    status: Optional[ProductStatus] = None


class Product(ProductBase):
    id: int
    created_at: Optional[str] = None


# ==================== Marketplace Schemas ====================

class MarketplaceBase(CamelModel):
    name: str = Field(min_length=1)
    type: MarketplaceType
    is_connected: bool = False
    api_key: Optional[str] = None
    store_url: Optional[str] = None
    stock_tracking: bool = True
    auto_update_stock: bool = True


class MarketplaceCreate(MarketplaceBase):
    api_secret: Optional[str] = None


class MarketplaceUpdate(PartialUpdate):
    not_nullable: ClassVar[Tuple[str, ...]] = (
        "name", "type", "is_connected", "stock_tracking", "auto_update_stock"
    )

    name: Optional[str] = Field(default=None, min_length=1)
    type: Optional[MarketplaceType] = None
    is_connected: Optional[bool] = None
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    store_url: Optional[str] = None
    stock_tracking: Optional[bool] = None
    auto_update_stock: Optional[bool] = None


class Marketplace(MarketplaceBase):
    """Marketplace as returned by the API. The API secret is never echoed."""
    id: int
    last_sync: Optional[str] = None
    created_at: Optional[str] = None


# ==================== Order Schemas ====================

class OrderItemCreate(CamelModel):
    product_id: Optional[int] = Field(default=None, ge=1)
    name: Optional[str] = None
    sku: Optional[str] = None
    quantity: int = Field(ge=1)
    price: Money


class OrderCreate(CamelModel):
    customer_id: int
    marketplace_id: int
    status: OrderStatus = "pending"
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    items: List[OrderItemCreate] = Field(min_length=1)
    # Accepted for compatibility, never stored: the total is recomputed
    total_amount: Optional[Decimal] = None


class OrderUpdate(PartialUpdate):
    not_nullable: ClassVar[Tuple[str, ...]] = ("status", "currency", "customer_id", "marketplace_id")

    status: Optional[OrderStatus] = None
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    customer_id: Optional[int] = None
    marketplace_id: Optional[int] = None


class OrderItem(CamelModel):
    id: int
    order_id: int
    product_id: Optional[int] = None
    name: Optional[str] = None
    sku: Optional[str] = None
    quantity: int
    price: Decimal
    product: Optional[Product] = None


class Order(CamelModel):
    id: int
    order_id: str
    customer_id: int
    marketplace_id: int
    status: str
    total_amount: Decimal
    currency: str
    order_date: Optional[str] = None
    created_at: Optional[str] = None
    customer: Optional[Customer] = None
    marketplace: Optional[Marketplace] = None
    items: List[OrderItem] = []


# ==================== Stock & Stats Schemas ====================

class StockUpdateRequest(CamelModel):
    sku: str = Field(min_length=1)
    quantity: int = Field(ge=0)


class DaySales(CamelModel):
    day: str
    sales: float


class MarketplaceOrders(CamelModel):
    marketplace: str
    orders: int


class SalesStats(CamelModel):
    total_sales: float
    total_orders: int
    total_customers: int
    total_products: int
    sales_by_day: List[DaySales]
    orders_by_marketplace: List[MarketplaceOrders]


# ==================== Generic Schemas ====================

class FieldError(CamelModel):
    path: str
    message: str


class ErrorResponse(CamelModel):
    message: str
    errors: Optional[List[FieldError]] = None


class MessageResponse(CamelModel):
    message: str


class HealthResponse(CamelModel):
    """Health check response."""
    status: str
    version: str
    database_orders: int
    database_products: int
