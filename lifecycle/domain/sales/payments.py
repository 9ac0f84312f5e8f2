"""
Payment strategies.

Each strategy is a fee table plus a set of preconditions on the amount and
the customer. Fees are computed in minor units of the charged currency.
"""

from abc import ABC, abstractmethod
from decimal import Decimal

from ..shared.exceptions import ValidationError
from ..shared.value_objects import Email, Money, OrderId
from .value_objects import PaymentReceipt


class PaymentStrategy(ABC):
    """One way of paying for an order."""

    name: str
    key: str
    percentage_fee: Decimal = Decimal("0")
    fixed_fee: int = 0
    minimum_amount: int = 1
    requires_email: bool = True

    def validate(self, amount: Money, customer_email: Email | None) -> list[str]:
        """Return the reasons this payment cannot go ahead; empty when valid."""
        problems: list[str] = []
        if amount.amount < max(self.minimum_amount, 1):
            problems.append(
                f"{self.name} requires at least "
                f"{Money.of(max(self.minimum_amount, 1), amount.currency)}"
            )
        if self.requires_email and customer_email is None:
            problems.append(f"{self.name} requires a customer email")
        return problems

    def calculate_fee(self, amount: Money) -> Money:
        fee = amount.apply_rate(self.percentage_fee)
        return fee.add(Money.of(self.fixed_fee, amount.currency))

    @abstractmethod
    def transaction_prefix(self) -> str:
        """Prefix used by gateways when minting transaction ids."""


class CreditCardStrategy(PaymentStrategy):
    name = "CreditCard"
    key = "creditcard"
    percentage_fee = Decimal("0.029")
    fixed_fee = 30

    def transaction_prefix(self) -> str:
        return "CC"


class PayPalStrategy(PaymentStrategy):
    name = "PayPal"
    key = "paypal"
    percentage_fee = Decimal("0.034")
    fixed_fee = 35

    def transaction_prefix(self) -> str:
        return "PP"


class CryptoStrategy(PaymentStrategy):
    name = "Crypto"
    key = "crypto"
    percentage_fee = Decimal("0.01")
    minimum_amount = 1000
    requires_email = False

    def transaction_prefix(self) -> str:
        return "0x"


class BankTransferStrategy(PaymentStrategy):
    name = "BankTransfer"
    key = "banktransfer"
    fixed_fee = 100
    minimum_amount = 5000

    def transaction_prefix(self) -> str:
        return "BANK"


class PaymentStrategyRegistry:
    """Resolves a strategy from a case-insensitive method name."""

    def __init__(self, strategies: list[PaymentStrategy] | None = None) -> None:
        if strategies is None:
            strategies = [
                CreditCardStrategy(),
                PayPalStrategy(),
                CryptoStrategy(),
                BankTransferStrategy(),
            ]
        self._strategies = {s.key: s for s in strategies}

    def methods(self) -> list[str]:
        return list(self._strategies)

    def resolve(self, method: str) -> PaymentStrategy:
        key = method.replace("_", "").replace("-", "").replace(" ", "").lower()
        strategy = self._strategies.get(key)
        if strategy is None:
            raise ValidationError(
                "payment_method",
                method,
                f"Unsupported payment method. Choose one of: {', '.join(self.methods())}",
                "UNSUPPORTED_PAYMENT_METHOD",
            )
        return strategy

    def compare_fees(self, amount: Money) -> dict[str, Money]:
        """Fee each strategy would charge for ``amount``, cheapest first."""
        fees = {s.name: s.calculate_fee(amount) for s in self._strategies.values()}
        return dict(sorted(fees.items(), key=lambda item: item[1].amount))


class PaymentGateway(ABC):
    """Port to whatever actually moves the money."""

    @abstractmethod
    async def charge(
        self, order_id: OrderId, amount: Money, strategy: PaymentStrategy
    ) -> PaymentReceipt:
        """Attempt the charge and report the outcome."""
