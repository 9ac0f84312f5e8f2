"""Sales use cases: orders from placement to delivery, and product stock."""

from lifecycle.application.commands import (
    AddProductCommand,
    AdjustStockCommand,
    CancelOrderCommand,
    ComparePaymentFeesQuery,
    DeliverOrderCommand,
    GetOrderQuery,
    GetProductQuery,
    ListCustomerOrdersQuery,
    ListLowStockProductsQuery,
    PayOrderCommand,
    PlaceOrderCommand,
    ShipOrderCommand,
    UpdateProductPriceCommand,
)
from lifecycle.application.dtos import (
    FeeQuoteResponse,
    MoneyResponse,
    OrderResponse,
    PaymentResponse,
    ProductResponse,
)
from lifecycle.application.services.base import UseCase, correlated
from lifecycle.core.observability import monitor_use_case
from lifecycle.domain.sales.entities.order import Order
from lifecycle.domain.sales.entities.product import DEFAULT_LOW_STOCK_THRESHOLD, Product
from lifecycle.domain.sales.payments import PaymentGateway, PaymentStrategyRegistry
from lifecycle.domain.sales.repositories import OrderRepository, ProductRepository
from lifecycle.domain.sales.value_objects import OrderItem
from lifecycle.domain.shared.value_objects import (
    CustomerId,
    Email,
    Money,
    OrderId,
    ProductId,
    Quantity,
    Sku,
)

DEFAULT_CURRENCY = "EUR"


class PlaceOrder(UseCase):
    def __init__(
        self, orders: OrderRepository, default_currency: str = DEFAULT_CURRENCY, **deps
    ) -> None:
        super().__init__(**deps)
        self._orders = orders
        self._default_currency = default_currency

    @monitor_use_case("place_order")
    @correlated
    async def execute(self, command: PlaceOrderCommand) -> OrderResponse:
        currency = command.currency or self._default_currency
        items = [
            OrderItem(
                product_id=ProductId.of(item.product_id),
                product_name=item.product_name,
                quantity=Quantity.of(item.quantity),
                unit_price=Money.of(item.unit_price, currency),
            )
            for item in command.items
        ]
        order = Order.place(
            order_id=self._ids.new(OrderId),
            customer_id=CustomerId.of(command.customer_id),
            items=items,
            placed_at=self.now(),
            customer_email=Email.of(command.customer_email)
            if command.customer_email
            else None,
        )
        await self._commit(self._orders, order)
        self._logger.info(
            "order_placed",
            order_id=str(order.id),
            customer_id=str(order.customer_id),
            total=order.total().amount,
            currency=order.currency,
        )
        return OrderResponse.from_entity(order)


class PayOrder(UseCase):
    """
    Charge an order through the chosen payment strategy.

    An unknown method is rejected before anything changes. A payment the
    strategy refuses, or the gateway declines, moves the order to FAILED;
    an approved one moves it to PAID.
    """

    def __init__(
        self,
        orders: OrderRepository,
        gateway: PaymentGateway,
        strategies: PaymentStrategyRegistry | None = None,
        **deps,
    ) -> None:
        super().__init__(**deps)
        self._orders = orders
        self._gateway = gateway
        self._strategies = strategies or PaymentStrategyRegistry()

    @monitor_use_case("pay_order")
    @correlated
    async def execute(self, command: PayOrderCommand) -> PaymentResponse:
        strategy = self._strategies.resolve(command.payment_method)
        order_id = OrderId.of(command.order_id)

        async with self._locks.hold(self.lock_key("Order", order_id)):
            order = await self._load_or_fail(self._orders, order_id, "Order")
            order.ensure_payable()

            amount = order.total()
            fee = strategy.calculate_fee(amount)
            problems = strategy.validate(amount, order.customer_email)

            if problems:
                message = "; ".join(problems)
                order.mark_as_failed(message, self.now())
                success = False
            else:
                receipt = await self._gateway.charge(order.id, amount, strategy)
                if receipt.approved:
                    order.mark_as_paid(
                        strategy.name,
                        self.now(),
                        transaction_id=receipt.transaction_id,
                        fee=fee,
                    )
                    message = f"Payment processed successfully via {strategy.name}"
                    success = True
                else:
                    message = receipt.reason or "Payment declined"
                    order.mark_as_failed(message, self.now())
                    success = False

            await self._commit(self._orders, order)

        log = self._logger.info if success else self._logger.warning
        log(
            "order_payment_processed",
            order_id=str(order.id),
            method=strategy.name,
            success=success,
            fee=fee.amount,
        )
        return PaymentResponse(
            success=success,
            order=OrderResponse.from_entity(order),
            payment_method=strategy.name,
            fee=MoneyResponse.from_money(fee),
            message=message,
        )


class CancelOrder(UseCase):
    def __init__(self, orders: OrderRepository, **deps) -> None:
        super().__init__(**deps)
        self._orders = orders

    @monitor_use_case("cancel_order")
    @correlated
    async def execute(self, command: CancelOrderCommand) -> OrderResponse:
        order_id = OrderId.of(command.order_id)
        async with self._locks.hold(self.lock_key("Order", order_id)):
            order = await self._load_or_fail(self._orders, order_id, "Order")
            order.cancel(self.now(), command.reason)
            await self._commit(self._orders, order)
        self._logger.info("order_cancelled", order_id=str(order.id))
        return OrderResponse.from_entity(order)


class ShipOrder(UseCase):
    """Hand a paid order to a carrier; anything but PAID is rejected."""

    def __init__(self, orders: OrderRepository, **deps) -> None:
        super().__init__(**deps)
        self._orders = orders

    @monitor_use_case("ship_order")
    @correlated
    async def execute(self, command: ShipOrderCommand) -> OrderResponse:
        order_id = OrderId.of(command.order_id)
        async with self._locks.hold(self.lock_key("Order", order_id)):
            order = await self._load_or_fail(self._orders, order_id, "Order")
            order.ship(
                command.tracking_number,
                command.carrier,
                self.now(),
                estimated_delivery=command.estimated_delivery,
            )
            await self._commit(self._orders, order)
        self._logger.info(
            "order_shipped",
            order_id=str(order.id),
            carrier=order.carrier,
            tracking_number=order.tracking_number,
        )
        return OrderResponse.from_entity(order)


class DeliverOrder(UseCase):
    def __init__(self, orders: OrderRepository, **deps) -> None:
        super().__init__(**deps)
        self._orders = orders

    @monitor_use_case("deliver_order")
    @correlated
    async def execute(self, command: DeliverOrderCommand) -> OrderResponse:
        order_id = OrderId.of(command.order_id)
        async with self._locks.hold(self.lock_key("Order", order_id)):
            order = await self._load_or_fail(self._orders, order_id, "Order")
            order.deliver(self.now())
            await self._commit(self._orders, order)
        self._logger.info("order_delivered", order_id=str(order.id))
        return OrderResponse.from_entity(order)


class GetOrder(UseCase):
    def __init__(self, orders: OrderRepository, **deps) -> None:
        super().__init__(**deps)
        self._orders = orders

    async def execute(self, query: GetOrderQuery) -> OrderResponse:
        order = await self._load_or_fail(self._orders, OrderId.of(query.order_id), "Order")
        return OrderResponse.from_entity(order)


class ListCustomerOrders(UseCase):
    def __init__(self, orders: OrderRepository, **deps) -> None:
        super().__init__(**deps)
        self._orders = orders

    async def execute(self, query: ListCustomerOrdersQuery) -> list[OrderResponse]:
        orders = await self._orders.find_by_customer(CustomerId.of(query.customer_id))
        return [OrderResponse.from_entity(order) for order in orders]


class ComparePaymentFees(UseCase):
    def __init__(
        self,
        strategies: PaymentStrategyRegistry | None = None,
        default_currency: str = DEFAULT_CURRENCY,
        **deps,
    ) -> None:
        super().__init__(**deps)
        self._strategies = strategies or PaymentStrategyRegistry()
        self._default_currency = default_currency

    async def execute(self, query: ComparePaymentFeesQuery) -> list[FeeQuoteResponse]:
        amount = Money.of(query.amount, query.currency or self._default_currency)
        return [
            FeeQuoteResponse(method=method, fee=MoneyResponse.from_money(fee))
            for method, fee in self._strategies.compare_fees(amount).items()
        ]


class AddProduct(UseCase):
    def __init__(
        self,
        products: ProductRepository,
        default_currency: str = DEFAULT_CURRENCY,
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
        **deps,
    ) -> None:
        super().__init__(**deps)
        self._products = products
        self._default_currency = default_currency
        self._low_stock_threshold = low_stock_threshold

    @monitor_use_case("add_product")
    @correlated
    async def execute(self, command: AddProductCommand) -> ProductResponse:
        threshold = command.low_stock_threshold
        product = Product.add(
            product_id=self._ids.new(ProductId),
            sku=Sku.of(command.sku),
            name=command.name,
            price=Money.of(command.price, command.currency or self._default_currency),
            added_at=self.now(),
            initial_stock=command.initial_stock,
            description=command.description,
            low_stock_threshold=self._low_stock_threshold if threshold is None else threshold,
        )
        # SKU uniqueness is checked by the repository on save
        await self._commit(self._products, product)
        self._logger.info("product_added", product_id=str(product.id), sku=product.sku.value)
        return ProductResponse.from_entity(product)


class AdjustStock(UseCase):
    def __init__(self, products: ProductRepository, **deps) -> None:
        super().__init__(**deps)
        self._products = products

    @monitor_use_case("adjust_stock")
    @correlated
    async def execute(self, command: AdjustStockCommand) -> ProductResponse:
        product_id = ProductId.of(command.product_id)
        quantity = Quantity.of(abs(command.quantity))

        async with self._locks.hold(self.lock_key("Product", product_id)):
            product = await self._load_or_fail(self._products, product_id, "Product")
            if command.quantity > 0:
                product.increase_stock(quantity, command.reason, self.now())
            else:
                product.decrease_stock(quantity, command.reason, self.now())
            await self._commit(self._products, product)

        self._logger.info(
            "stock_adjusted",
            product_id=str(product.id),
            change=command.quantity,
            stock=product.stock,
        )
        return ProductResponse.from_entity(product)


class UpdateProductPrice(UseCase):
    def __init__(self, products: ProductRepository, **deps) -> None:
        super().__init__(**deps)
        self._products = products

    @monitor_use_case("update_product_price")
    @correlated
    async def execute(self, command: UpdateProductPriceCommand) -> ProductResponse:
        product_id = ProductId.of(command.product_id)
        async with self._locks.hold(self.lock_key("Product", product_id)):
            product = await self._load_or_fail(self._products, product_id, "Product")
            price = Money.of(command.price, product.price.currency)
            if product.update_price(price, self.now()):
                await self._commit(self._products, product)
        return ProductResponse.from_entity(product)


class GetProduct(UseCase):
    def __init__(self, products: ProductRepository, **deps) -> None:
        super().__init__(**deps)
        self._products = products

    async def execute(self, query: GetProductQuery) -> ProductResponse:
        product = await self._load_or_fail(
            self._products, ProductId.of(query.product_id), "Product"
        )
        return ProductResponse.from_entity(product)


class ListLowStockProducts(UseCase):
    def __init__(self, products: ProductRepository, **deps) -> None:
        super().__init__(**deps)
        self._products = products

    async def execute(self, query: ListLowStockProductsQuery) -> list[ProductResponse]:
        return [
            ProductResponse.from_entity(p) for p in await self._products.find_low_stock()
        ]
