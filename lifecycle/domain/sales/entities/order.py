"""Order aggregate."""

from datetime import datetime, timezone

from pydantic import Field, field_validator

from ...shared.base import AggregateRoot
from ...shared.exceptions import ValidationError
from ...shared.value_objects import CustomerId, Email, Money, OrderId
from ..events import (
    OrderCancelled,
    OrderDelivered,
    OrderLine,
    OrderPaid,
    OrderPaymentFailed,
    OrderPlaced,
    OrderShipped,
)
from ..value_objects import ORDER_TRANSITIONS, OrderItem, OrderStatus


class Order(AggregateRoot):
    id: OrderId
    customer_id: CustomerId
    customer_email: Email | None = None
    items: list[OrderItem]
    status: OrderStatus = OrderStatus.PENDING
    payment_method: str | None = None
    transaction_id: str | None = None
    paid_at: datetime | None = None
    payment_attempts: int = Field(default=0, ge=0)
    failure_reason: str | None = None
    cancelled_at: datetime | None = None
    tracking_number: str | None = None
    carrier: str | None = None
    shipped_at: datetime | None = None
    estimated_delivery: datetime | None = None
    delivered_at: datetime | None = None

    @field_validator("items")
    @classmethod
    def validate_items(cls, v: list[OrderItem]) -> list[OrderItem]:
        if not v:
            raise ValueError("Order must contain at least one item")
        currencies = {item.unit_price.currency for item in v}
        if len(currencies) > 1:
            raise ValueError("All order items must share one currency")
        return v

    @classmethod
    def place(
        cls,
        order_id: OrderId,
        customer_id: CustomerId,
        items: list[OrderItem],
        placed_at: datetime,
        customer_email: Email | None = None,
    ) -> "Order":
        order = cls(
            id=order_id,
            customer_id=customer_id,
            customer_email=customer_email,
            items=items,
            created_at=placed_at,
        )
        total = order.total()
        order._record(
            OrderPlaced(
                aggregate_id=str(order.id),
                occurred_at=placed_at,
                customer_id=str(customer_id),
                items=tuple(
                    OrderLine(
                        product_id=str(item.product_id),
                        product_name=item.product_name,
                        quantity=item.quantity.value,
                        unit_price=item.unit_price.amount,
                    )
                    for item in order.items
                ),
                total_amount=total.amount,
                currency=total.currency,
            )
        )
        return order

    @property
    def currency(self) -> str:
        return self.items[0].unit_price.currency

    def total(self) -> Money:
        return Money.sum((item.subtotal() for item in self.items), self.currency)

    @property
    def item_count(self) -> int:
        return sum(item.quantity.value for item in self.items)

    def ensure_payable(self) -> None:
        ORDER_TRANSITIONS.ensure(
            self.status,
            OrderStatus.PAID,
            entity_type="Order",
            entity_id=self.id,
            action="pay",
        )

    def mark_as_paid(
        self,
        payment_method: str,
        at: datetime,
        transaction_id: str | None = None,
        fee: Money | None = None,
    ) -> None:
        self._transition(ORDER_TRANSITIONS, OrderStatus.PAID, action="pay", at=at)
        self.payment_method = payment_method
        self.transaction_id = transaction_id
        self.paid_at = at
        self.payment_attempts += 1
        self.failure_reason = None
        self._record(
            OrderPaid(
                aggregate_id=str(self.id),
                occurred_at=at,
                customer_id=str(self.customer_id),
                payment_method=payment_method,
                transaction_id=transaction_id,
                amount=self.total().amount,
                fee=fee.amount if fee else 0,
                currency=self.currency,
                paid_at=at,
            )
        )

    def mark_as_failed(self, reason: str, at: datetime) -> None:
        self._transition(
            ORDER_TRANSITIONS, OrderStatus.FAILED, action="fail payment of", at=at
        )
        self.payment_attempts += 1
        self.failure_reason = reason
        self._record(
            OrderPaymentFailed(
                aggregate_id=str(self.id),
                occurred_at=at,
                customer_id=str(self.customer_id),
                reason=reason,
                attempt=self.payment_attempts,
            )
        )

    def ship(
        self,
        tracking_number: str,
        carrier: str,
        at: datetime,
        estimated_delivery: datetime | None = None,
    ) -> None:
        """Hand a paid order to a carrier."""
        tracking_number = tracking_number.strip()
        carrier = carrier.strip()
        if not tracking_number:
            raise ValidationError(
                "tracking_number", tracking_number, "Tracking number is required"
            )
        if not carrier:
            raise ValidationError("carrier", carrier, "Carrier is required")
        if estimated_delivery is not None and estimated_delivery.tzinfo is None:
            estimated_delivery = estimated_delivery.replace(tzinfo=timezone.utc)
        if estimated_delivery is not None and estimated_delivery < at:
            raise ValidationError(
                "estimated_delivery",
                estimated_delivery.isoformat(),
                "Estimated delivery cannot precede shipment",
            )
        self._transition(ORDER_TRANSITIONS, OrderStatus.SHIPPED, action="ship", at=at)
        self.tracking_number = tracking_number
        self.carrier = carrier
        self.shipped_at = at
        self.estimated_delivery = estimated_delivery
        self._record(
            OrderShipped(
                aggregate_id=str(self.id),
                occurred_at=at,
                customer_id=str(self.customer_id),
                tracking_number=tracking_number,
                carrier=carrier,
                estimated_delivery=estimated_delivery,
            )
        )

    def deliver(self, at: datetime) -> None:
        self._transition(ORDER_TRANSITIONS, OrderStatus.DELIVERED, action="deliver", at=at)
        self.delivered_at = at
        self._record(
            OrderDelivered(
                aggregate_id=str(self.id),
                occurred_at=at,
                customer_id=str(self.customer_id),
                delivered_at=at,
            )
        )

    def cancel(self, at: datetime, reason: str | None = None) -> None:
        self._transition(ORDER_TRANSITIONS, OrderStatus.CANCELLED, action="cancel", at=at)
        self.cancelled_at = at
        self._record(
            OrderCancelled(
                aggregate_id=str(self.id),
                occurred_at=at,
                customer_id=str(self.customer_id),
                reason=reason,
            )
        )
