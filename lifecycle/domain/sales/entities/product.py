"""Product aggregate: a stocked item identified by a unique SKU."""

from datetime import datetime

from pydantic import Field, field_validator

from ...shared.base import AggregateRoot
from ...shared.exceptions import InsufficientStockError, ValidationError
from ...shared.value_objects import Money, ProductId, Quantity, Sku
from ..events import (
    LowStockAlert,
    ProductAdded,
    ProductPriceChanged,
    StockDecreased,
    StockIncreased,
)

DEFAULT_LOW_STOCK_THRESHOLD = 10


def _clean_reason(reason: str) -> str:
    cleaned = reason.strip() if isinstance(reason, str) else ""
    if not cleaned:
        raise ValidationError("reason", reason, "A stock adjustment needs a reason")
    return cleaned


class Product(AggregateRoot):
    id: ProductId
    sku: Sku
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    stock: int = Field(default=0, ge=0)
    price: Money
    low_stock_threshold: int = Field(default=DEFAULT_LOW_STOCK_THRESHOLD, ge=0)

    @field_validator("name", "description", mode="before")
    @classmethod
    def strip_text(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v

    @classmethod
    def add(
        cls,
        product_id: ProductId,
        sku: Sku,
        name: str,
        price: Money,
        added_at: datetime,
        initial_stock: int = 0,
        description: str = "",
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
    ) -> "Product":
        """Add a product to the inventory; flags it at once if it starts low."""
        product = cls(
            id=product_id,
            sku=sku,
            name=name,
            description=description,
            stock=initial_stock,
            price=price,
            low_stock_threshold=low_stock_threshold,
            created_at=added_at,
        )
        product._record(
            ProductAdded(
                aggregate_id=str(product.id),
                occurred_at=added_at,
                sku=product.sku.value,
                product_name=product.name,
                stock=product.stock,
                price=product.price.amount,
                currency=product.price.currency,
            )
        )
        if product.is_low_stock:
            product._record_low_stock(added_at)
        return product

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.low_stock_threshold

    @property
    def is_out_of_stock(self) -> bool:
        return self.stock == 0

    def increase_stock(self, quantity: Quantity, reason: str, at: datetime) -> None:
        reason = _clean_reason(reason)
        self.stock += quantity.value
        self.mark_updated(at)
        self._record(
            StockIncreased(
                aggregate_id=str(self.id),
                occurred_at=at,
                quantity=quantity.value,
                stock=self.stock,
                reason=reason,
            )
        )

    def decrease_stock(self, quantity: Quantity, reason: str, at: datetime) -> None:
        """Remove stock; a product never goes below zero."""
        reason = _clean_reason(reason)
        if quantity.value > self.stock:
            raise InsufficientStockError(self.id, quantity.value, self.stock)

        was_low = self.is_low_stock
        self.stock -= quantity.value
        self.mark_updated(at)
        self._record(
            StockDecreased(
                aggregate_id=str(self.id),
                occurred_at=at,
                quantity=quantity.value,
                stock=self.stock,
                reason=reason,
            )
        )
        if not was_low and self.is_low_stock:
            self._record_low_stock(at)

    def update_price(self, price: Money, at: datetime) -> bool:
        if price.currency != self.price.currency:
            raise ValidationError(
                "currency",
                price.currency,
                f"Price must stay in {self.price.currency}",
            )
        if price == self.price:
            return False
        previous = self.price
        self.price = price
        self.mark_updated(at)
        self._record(
            ProductPriceChanged(
                aggregate_id=str(self.id),
                occurred_at=at,
                previous_price=previous.amount,
                new_price=price.amount,
                currency=price.currency,
            )
        )
        return True

    def set_low_stock_threshold(self, threshold: int, at: datetime) -> None:
        if threshold < 0:
            raise ValidationError(
                "low_stock_threshold", threshold, "Low stock threshold cannot be negative"
            )
        self.low_stock_threshold = threshold
        self.mark_updated(at)

    def _record_low_stock(self, at: datetime) -> None:
        self._record(
            LowStockAlert(
                aggregate_id=str(self.id),
                occurred_at=at,
                sku=self.sku.value,
                stock=self.stock,
                threshold=self.low_stock_threshold,
            )
        )
