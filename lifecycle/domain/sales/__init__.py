"""Sales context: orders, how they get paid and shipped, and product stock."""

from .entities.order import Order
from .entities.product import DEFAULT_LOW_STOCK_THRESHOLD, Product
from .payments import (
    BankTransferStrategy,
    CreditCardStrategy,
    CryptoStrategy,
    PaymentGateway,
    PaymentStrategy,
    PaymentStrategyRegistry,
    PayPalStrategy,
)
from .value_objects import OrderItem, OrderStatus, PaymentReceipt

__all__ = [
    "DEFAULT_LOW_STOCK_THRESHOLD",
    "BankTransferStrategy",
    "CreditCardStrategy",
    "CryptoStrategy",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PayPalStrategy",
    "PaymentGateway",
    "PaymentReceipt",
    "PaymentStrategy",
    "PaymentStrategyRegistry",
    "Product",
]
