"""Payment gateway adapter used outside production."""

import logging
import uuid

from lifecycle.domain.sales.payments import PaymentGateway, PaymentStrategy
from lifecycle.domain.sales.value_objects import PaymentReceipt
from lifecycle.domain.shared.value_objects import Money, OrderId

logger = logging.getLogger(__name__)


class InMemoryPaymentGateway(PaymentGateway):
    """Approves every charge unless told to decline a method or an order."""

    def __init__(self) -> None:
        self._declined_methods: set[str] = set()
        self._declined_orders: set[str] = set()
        self.charges: list[tuple[str, Money, str]] = []

    def decline_method(self, key: str) -> None:
        self._declined_methods.add(key.lower())

    def decline_order(self, order_id: OrderId | str) -> None:
        self._declined_orders.add(str(order_id))

    def reset(self) -> None:
        self._declined_methods.clear()
        self._declined_orders.clear()
        self.charges.clear()

    async def charge(
        self, order_id: OrderId, amount: Money, strategy: PaymentStrategy
    ) -> PaymentReceipt:
        self.charges.append((str(order_id), amount, strategy.name))

        if strategy.key in self._declined_methods or str(order_id) in self._declined_orders:
            logger.info(f"Declined {strategy.name} charge of {amount} for order {order_id}")
            return PaymentReceipt(
                approved=False, reason=f"Payment declined by {strategy.name}"
            )

        transaction_id = f"{strategy.transaction_prefix()}-{uuid.uuid4().hex[:12].upper()}"
        logger.info(
            f"Approved {strategy.name} charge of {amount} for order {order_id} "
            f"({transaction_id})"
        )
        return PaymentReceipt(approved=True, transaction_id=transaction_id)
