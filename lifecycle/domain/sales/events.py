"""Sales domain events: orders and the products they draw on."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from ..shared.base import DomainEvent


class OrderLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    product_name: str
    quantity: int
    unit_price: int


class OrderPlaced(DomainEvent):
    name = "order.placed"

    customer_id: str
    items: tuple[OrderLine, ...]
    total_amount: int
    currency: str


class OrderPaid(DomainEvent):
    name = "order.paid"

    customer_id: str
    payment_method: str
    transaction_id: str | None
    amount: int
    fee: int
    currency: str
    paid_at: datetime


class OrderPaymentFailed(DomainEvent):
    name = "order.payment_failed"

    customer_id: str
    reason: str
    attempt: int


class OrderCancelled(DomainEvent):
    name = "order.cancelled"

    customer_id: str
    reason: str | None


class OrderShipped(DomainEvent):
    name = "order.shipped"

    customer_id: str
    tracking_number: str
    carrier: str
    estimated_delivery: datetime | None


class OrderDelivered(DomainEvent):
    name = "order.delivered"

    customer_id: str
    delivered_at: datetime


class ProductAdded(DomainEvent):
    name = "product.added"

    sku: str
    product_name: str
    stock: int
    price: int
    currency: str


class StockIncreased(DomainEvent):
    name = "product.stock_increased"

    quantity: int
    stock: int
    reason: str


class StockDecreased(DomainEvent):
    name = "product.stock_decreased"

    quantity: int
    stock: int
    reason: str


class LowStockAlert(DomainEvent):
    name = "product.low_stock"

    sku: str
    stock: int
    threshold: int


class ProductPriceChanged(DomainEvent):
    name = "product.price_changed"

    previous_price: int
    new_price: int
    currency: str


SalesEvent = (
    OrderPlaced
    | OrderPaid
    | OrderPaymentFailed
    | OrderShipped
    | OrderDelivered
    | OrderCancelled
    | ProductAdded
    | StockIncreased
    | StockDecreased
    | LowStockAlert
    | ProductPriceChanged
)
