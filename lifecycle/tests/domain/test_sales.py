"""
Tests for the Order aggregate, payment strategies and the Product aggregate.
"""

import pytest

from lifecycle.domain.sales import (
    BankTransferStrategy,
    CreditCardStrategy,
    CryptoStrategy,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStrategyRegistry,
    PayPalStrategy,
    Product,
)
from lifecycle.domain.sales.events import (
    LowStockAlert,
    OrderCancelled,
    OrderDelivered,
    OrderPaid,
    OrderPaymentFailed,
    OrderPlaced,
    OrderShipped,
    ProductAdded,
    ProductPriceChanged,
    StockDecreased,
    StockIncreased,
)
from lifecycle.domain.shared.exceptions import (
    InsufficientStockError,
    InvalidTransitionError,
    ValidationError,
)
from lifecycle.domain.shared.value_objects import (
    CustomerId,
    Email,
    Money,
    OrderId,
    ProductId,
    Quantity,
    Sku,
)
from lifecycle.tests.conftest import DAY_0, day


def item(product: str, quantity: int, unit_price: int, currency: str = "EUR") -> OrderItem:
    return OrderItem(
        product_id=ProductId.of(product),
        product_name=product.title(),
        quantity=Quantity.of(quantity),
        unit_price=Money.of(unit_price, currency),
    )


def place(items=None) -> Order:
    order = Order.place(
        OrderId.of("order-1"),
        CustomerId.of("cust-1"),
        items or [item("pen", 2, 1000), item("ink", 1, 500)],
        DAY_0,
        customer_email=Email.of("buyer@example.com"),
    )
    return order


class TestOrder:
    """Test Order aggregate."""

    def test_total(self):
        """qty 2 @ 1000 plus qty 1 @ 500 is 2500."""
        order = place()
        assert order.total() == Money.of(2500, "EUR")
        assert order.item_count == 3

    def test_place_emits_single_event(self):
        events = place().pull_domain_events()
        assert len(events) == 1
        assert isinstance(events[0], OrderPlaced)
        assert events[0].total_amount == 2500
        assert events[0].payload()["items"][0] == {
            "product_id": "pen",
            "product_name": "Pen",
            "quantity": 2,
            "unit_price": 1000,
        }

    def test_order_needs_items(self):
        with pytest.raises(ValidationError, match="at least one item"):
            Order.place(OrderId.of("o"), CustomerId.of("c"), [], DAY_0)

    def test_items_share_one_currency(self):
        with pytest.raises(ValidationError, match="one currency"):
            place([item("pen", 1, 100, "EUR"), item("ink", 1, 100, "USD")])

    def test_mark_as_paid_twice(self):
        """Second payment fails and the order stays PAID."""
        order = place()
        order.pull_domain_events()

        order.mark_as_paid("CreditCard", day(1), transaction_id="CC-1")
        assert order.status == OrderStatus.PAID

        with pytest.raises(InvalidTransitionError):
            order.mark_as_paid("CreditCard", day(2))

        assert order.status == OrderStatus.PAID
        assert order.paid_at == day(1)
        events = order.pull_domain_events()
        assert [type(e) for e in events] == [OrderPaid]
        assert events[0].transaction_id == "CC-1"

    def test_failed_order_can_be_paid(self):
        order = place()
        order.mark_as_failed("declined", day(1))
        order.mark_as_paid("PayPal", day(2))
        assert order.status == OrderStatus.PAID
        assert order.payment_attempts == 2
        assert order.failure_reason is None

    def test_paid_order_cannot_fail_or_cancel(self):
        order = place()
        order.mark_as_paid("Crypto", day(1))
        with pytest.raises(InvalidTransitionError):
            order.mark_as_failed("late", day(2))
        with pytest.raises(InvalidTransitionError, match="Cannot cancel"):
            order.cancel(day(2))

    def test_cancel(self):
        order = place()
        order.pull_domain_events()
        order.cancel(day(1), reason="changed mind")
        assert order.status == OrderStatus.CANCELLED
        assert order.cancelled_at == day(1)
        events = order.pull_domain_events()
        assert isinstance(events[0], OrderCancelled)
        assert events[0].reason == "changed mind"
        with pytest.raises(InvalidTransitionError):
            order.ensure_payable()

    def test_mark_as_failed_records_attempt(self):
        order = place()
        order.pull_domain_events()
        order.mark_as_failed("insufficient funds", day(1))
        order.mark_as_failed("insufficient funds", day(2))
        events = order.pull_domain_events()
        assert [type(e) for e in events] == [OrderPaymentFailed, OrderPaymentFailed]
        assert [e.attempt for e in events] == [1, 2]


class TestOrderFulfilment:
    """PAID -> SHIPPED -> DELIVERED."""

    def test_ship_unpaid_order_is_rejected(self):
        order = place()
        order.pull_domain_events()

        with pytest.raises(InvalidTransitionError) as exc_info:
            order.ship("TRK-1", "DHL", day(1))

        assert exc_info.value.current_status == "PENDING"
        assert exc_info.value.attempted == "ship"
        assert order.status == OrderStatus.PENDING
        assert order.tracking_number is None
        assert not order.has_pending_events

    def test_ship_and_deliver(self):
        order = place()
        order.mark_as_paid("CreditCard", day(1))
        order.pull_domain_events()

        order.ship(" TRK-1 ", "DHL", day(2), estimated_delivery=day(5))
        order.deliver(day(4))

        assert order.status == OrderStatus.DELIVERED
        assert order.tracking_number == "TRK-1"
        assert order.shipped_at == day(2)
        assert order.delivered_at == day(4)
        shipped, delivered = order.pull_domain_events()
        assert isinstance(shipped, OrderShipped)
        assert shipped.name == "order.shipped"
        assert shipped.estimated_delivery == day(5)
        assert isinstance(delivered, OrderDelivered)
        assert delivered.delivered_at == day(4)

    def test_shipping_details_are_validated_first(self):
        order = place()
        order.mark_as_paid("CreditCard", day(1))

        with pytest.raises(ValidationError):
            order.ship(" ", "DHL", day(2))
        with pytest.raises(ValidationError):
            order.ship("TRK-1", "DHL", day(2), estimated_delivery=day(1))

        assert order.status == OrderStatus.PAID

    def test_deliver_needs_shipment(self):
        order = place()
        order.mark_as_paid("CreditCard", day(1))
        with pytest.raises(InvalidTransitionError, match="Cannot deliver"):
            order.deliver(day(2))

    def test_shipped_order_cannot_be_cancelled(self):
        order = place()
        order.mark_as_paid("CreditCard", day(1))
        order.ship("TRK-1", "UPS", day(2))
        with pytest.raises(InvalidTransitionError):
            order.cancel(day(3))


class TestPaymentStrategies:
    """Test fee tables and preconditions."""

    @pytest.mark.parametrize(
        "strategy,amount,fee",
        [
            (CreditCardStrategy(), 10000, 320),
            (PayPalStrategy(), 10000, 375),
            (CryptoStrategy(), 10000, 100),
            (BankTransferStrategy(), 10000, 100),
            (CreditCardStrategy(), 2500, 103),
        ],
    )
    def test_fees(self, strategy, amount, fee):
        assert strategy.calculate_fee(Money.of(amount, "EUR")) == Money.of(fee, "EUR")

    def test_crypto_minimum(self):
        problems = CryptoStrategy().validate(Money.of(999, "EUR"), None)
        assert problems == ["Crypto requires at least 10.00 EUR"]
        assert CryptoStrategy().validate(Money.of(1000, "EUR"), None) == []

    def test_bank_transfer_minimum_and_email(self):
        problems = BankTransferStrategy().validate(Money.of(4999, "EUR"), None)
        assert len(problems) == 2

    def test_card_needs_email(self):
        assert CreditCardStrategy().validate(Money.of(100, "EUR"), None) == [
            "CreditCard requires a customer email"
        ]
        assert (
            CreditCardStrategy().validate(Money.of(100, "EUR"), Email.of("a@b.co")) == []
        )

    @pytest.mark.parametrize(
        "method,name",
        [
            ("creditcard", "CreditCard"),
            ("CreditCard", "CreditCard"),
            ("credit_card", "CreditCard"),
            ("PAYPAL", "PayPal"),
            ("bank-transfer", "BankTransfer"),
            ("crypto", "Crypto"),
        ],
    )
    def test_registry_resolves_case_insensitively(self, method, name):
        assert PaymentStrategyRegistry().resolve(method).name == name

    def test_registry_rejects_unknown_method(self):
        with pytest.raises(ValidationError, match="Unsupported payment method"):
            PaymentStrategyRegistry().resolve("cheque")

    def test_compare_fees_is_sorted(self):
        fees = PaymentStrategyRegistry().compare_fees(Money.of(10000, "EUR"))
        amounts = [fee.amount for fee in fees.values()]
        assert amounts == sorted(amounts)
        assert set(fees) == {"CreditCard", "PayPal", "Crypto", "BankTransfer"}


def product(stock: int = 20, threshold: int = 5) -> Product:
    return Product.add(
        ProductId.of("product-1"),
        Sku.of("abc-12345"),
        " Fountain pen ",
        Money.of(2500, "EUR"),
        DAY_0,
        initial_stock=stock,
        low_stock_threshold=threshold,
    )


class TestSku:
    def test_normalized(self):
        assert Sku.of(" abc-12345 ").value == "ABC-12345"

    @pytest.mark.parametrize("raw", ["AB-12345", "ABC-1234", "ABC12345", "123-ABCDE", ""])
    def test_invalid(self, raw):
        with pytest.raises(ValidationError):
            Sku.of(raw)


class TestProduct:
    def test_add(self):
        p = product()
        assert p.name == "Fountain pen"
        assert p.sku.value == "ABC-12345"
        events = p.pull_domain_events()
        assert [type(e) for e in events] == [ProductAdded]
        assert events[0].stock == 20

    def test_add_with_low_stock_raises_alert(self):
        p = product(stock=3)
        assert [type(e) for e in p.pull_domain_events()] == [ProductAdded, LowStockAlert]

    def test_increase_stock(self):
        p = product()
        p.pull_domain_events()
        p.increase_stock(Quantity.of(5), "delivery", day(1))
        assert p.stock == 25
        (event,) = p.pull_domain_events()
        assert isinstance(event, StockIncreased)
        assert (event.quantity, event.stock, event.reason) == (5, 25, "delivery")

    def test_decrease_into_low_stock_alerts_once(self):
        p = product(stock=10, threshold=5)
        p.pull_domain_events()

        p.decrease_stock(Quantity.of(5), "sale", day(1))
        p.decrease_stock(Quantity.of(2), "sale", day(2))

        assert p.stock == 3
        assert [type(e) for e in p.pull_domain_events()] == [
            StockDecreased,
            LowStockAlert,
            StockDecreased,
        ]

    def test_cannot_go_below_zero(self):
        p = product(stock=2)
        p.pull_domain_events()

        with pytest.raises(InsufficientStockError) as exc_info:
            p.decrease_stock(Quantity.of(3), "sale", day(1))

        assert exc_info.value.to_dict()["details"]["available"] == 2
        assert p.stock == 2
        assert not p.has_pending_events

    def test_adjustment_needs_reason(self):
        p = product()
        with pytest.raises(ValidationError):
            p.increase_stock(Quantity.of(1), "  ", day(1))

    def test_update_price(self):
        p = product()
        p.pull_domain_events()
        assert p.update_price(Money.of(2500, "EUR"), day(1)) is False
        assert p.update_price(Money.of(3000, "EUR"), day(1)) is True
        (event,) = p.pull_domain_events()
        assert isinstance(event, ProductPriceChanged)
        assert (event.previous_price, event.new_price) == (2500, 3000)
        with pytest.raises(ValidationError):
            p.update_price(Money.of(3000, "USD"), day(2))

    def test_low_stock_threshold(self):
        p = product(stock=8, threshold=5)
        assert not p.is_low_stock
        p.set_low_stock_threshold(8, day(1))
        assert p.is_low_stock
        with pytest.raises(ValidationError):
            p.set_low_stock_threshold(-1, day(1))
