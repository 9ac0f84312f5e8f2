"""Sales statuses and order lines."""

from enum import Enum

from pydantic import Field, field_validator

from ..shared.base import ValueObject
from ..shared.state_machine import TransitionTable
from ..shared.value_objects import Money, ProductId, Quantity


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return ORDER_TRANSITIONS.is_terminal(self)

    def can_transition_to(self, target_status: "OrderStatus") -> bool:
        return ORDER_TRANSITIONS.can_transition(self, target_status)


# FAILED orders may be retried; a retried payment can fail again.
ORDER_TRANSITIONS: TransitionTable[OrderStatus] = TransitionTable(
    {
        OrderStatus.PENDING: {
            OrderStatus.PAID,
            OrderStatus.FAILED,
            OrderStatus.CANCELLED,
        },
        OrderStatus.FAILED: {
            OrderStatus.PAID,
            OrderStatus.FAILED,
            OrderStatus.CANCELLED,
        },
        OrderStatus.PAID: {OrderStatus.SHIPPED},
        OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
        OrderStatus.DELIVERED: set(),  # Terminal state
        OrderStatus.CANCELLED: set(),  # Terminal state
    }
)


class OrderItem(ValueObject):
    product_id: ProductId
    product_name: str = Field(min_length=1, max_length=200)
    quantity: Quantity
    unit_price: Money

    @field_validator("product_name", mode="before")
    @classmethod
    def strip_name(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v

    def subtotal(self) -> Money:
        return self.unit_price.multiply(self.quantity.value)


class PaymentReceipt(ValueObject):
    """Outcome reported by a payment gateway."""

    approved: bool
    transaction_id: str | None = None
    reason: str | None = None
