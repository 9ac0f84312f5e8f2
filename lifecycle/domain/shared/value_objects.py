"""
Shared value objects.

All of them validate on construction and raise the domain ValidationError,
so an instance in hand is always well formed.
"""

import math
import re
import uuid
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from pydantic import field_validator, model_validator

from .base import ValueObject
from .exceptions import ValidationError

_DAY = timedelta(days=1)


class Identifier(ValueObject):
    """Opaque, non-empty identifier."""

    value: str

    @field_validator("value", mode="before")
    @classmethod
    def validate_value(cls, v: Any) -> str:
        if isinstance(v, uuid.UUID):
            v = str(v)
        if not isinstance(v, str) or not v.strip():
            raise ValueError("Identifier must be a non-empty string")
        return v.strip()

    @classmethod
    def of(cls, value: Any) -> "Identifier":
        if isinstance(value, cls):
            return value
        if isinstance(value, Identifier):
            value = value.value
        return cls(value=value)

    @classmethod
    def generate(cls) -> "Identifier":
        return cls(value=str(uuid.uuid4()))

    def __str__(self) -> str:
        return self.value


class BookId(Identifier):
    pass


class LoanId(Identifier):
    pass


class MemberId(Identifier):
    pass


class OrderId(Identifier):
    pass


class CustomerId(Identifier):
    pass


class ProductId(Identifier):
    pass


class TaskId(Identifier):
    pass


class TagId(Identifier):
    pass


class ProjectId(Identifier):
    pass


class Money(ValueObject):
    """Non-negative amount in integer minor units of a single currency."""

    amount: int
    currency: str

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v: Any) -> int:
        if isinstance(v, bool) or not isinstance(v, int):
            raise ValueError("Amount must be an integer number of minor units")
        if v < 0:
            raise ValueError("Amount cannot be negative")
        return v

    @field_validator("currency", mode="before")
    @classmethod
    def validate_currency(cls, v: Any) -> str:
        if not isinstance(v, str):
            raise ValueError("Currency must be a string")
        code = v.strip().upper()
        if not re.fullmatch(r"[A-Z]{3}", code):
            raise ValueError("Currency must be a three-letter code")
        return code

    @classmethod
    def of(cls, amount: int, currency: str) -> "Money":
        return cls(amount=amount, currency=currency)

    @classmethod
    def zero(cls, currency: str) -> "Money":
        return cls(amount=0, currency=currency)

    @classmethod
    def sum(cls, amounts: Iterable["Money"], currency: str) -> "Money":
        total = cls.zero(currency)
        for amount in amounts:
            total = total.add(amount)
        return total

    def _same_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise ValidationError(
                "currency",
                other.currency,
                f"Cannot combine {self.currency} with {other.currency}",
                "CURRENCY_MISMATCH",
            )

    def add(self, other: "Money") -> "Money":
        self._same_currency(other)
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def subtract(self, other: "Money") -> "Money":
        self._same_currency(other)
        if other.amount > self.amount:
            raise ValidationError(
                "amount",
                self.amount - other.amount,
                "Subtraction would produce a negative amount",
                "NEGATIVE_AMOUNT",
            )
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def multiply(self, factor: int) -> "Money":
        if isinstance(factor, bool) or not isinstance(factor, int) or factor < 0:
            raise ValidationError(
                "factor", factor, "Factor must be a non-negative integer"
            )
        return Money(amount=self.amount * factor, currency=self.currency)

    def apply_rate(self, rate: Decimal) -> "Money":
        """Multiply by a decimal rate, rounding half up to whole minor units."""
        rate = Decimal(rate)
        if rate < 0:
            raise ValidationError("rate", str(rate), "Rate cannot be negative")
        scaled = (Decimal(self.amount) * rate).quantize(Decimal(1), rounding=ROUND_HALF_UP)
        return Money(amount=int(scaled), currency=self.currency)

    def is_zero(self) -> bool:
        return self.amount == 0

    def __lt__(self, other: "Money") -> bool:
        self._same_currency(other)
        return self.amount < other.amount

    def __le__(self, other: "Money") -> bool:
        self._same_currency(other)
        return self.amount <= other.amount

    def __gt__(self, other: "Money") -> bool:
        self._same_currency(other)
        return self.amount > other.amount

    def __ge__(self, other: "Money") -> bool:
        self._same_currency(other)
        return self.amount >= other.amount

    def format(self) -> str:
        return f"{self.amount // 100}.{self.amount % 100:02d} {self.currency}"

    def __str__(self) -> str:
        return self.format()


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class DateRange(ValueObject):
    """Closed interval of instants with start <= end."""

    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def ensure_aware(cls, v: datetime) -> datetime:
        return _as_utc(v)

    @model_validator(mode="after")
    def check_order(self) -> "DateRange":
        if self.start > self.end:
            raise ValueError("Start date must be before or equal to end date")
        return self

    @classmethod
    def starting(cls, start: datetime, days: int) -> "DateRange":
        if days < 0:
            raise ValidationError("days", days, "Duration cannot be negative")
        start = _as_utc(start)
        return cls(start=start, end=start + timedelta(days=days))

    @property
    def duration_days(self) -> int:
        return math.ceil((self.end - self.start) / _DAY)

    def contains(self, instant: datetime) -> bool:
        instant = _as_utc(instant)
        return self.start <= instant <= self.end

    def is_expired(self, as_of: datetime) -> bool:
        return _as_utc(as_of) > self.end

    def days_overdue(self, as_of: datetime) -> int:
        """Whole days past ``end``, rounded up; 0 while not expired."""
        as_of = _as_utc(as_of)
        if as_of <= self.end:
            return 0
        return math.ceil((as_of - self.end) / _DAY)


_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class Email(ValueObject):
    value: str

    @field_validator("value", mode="before")
    @classmethod
    def validate_email(cls, v: Any) -> str:
        if not isinstance(v, str):
            raise ValueError("Email must be a string")
        normalized = v.strip().lower()
        if not _EMAIL_RE.match(normalized):
            raise ValueError(f"Invalid email format: {v}")
        return normalized

    @classmethod
    def of(cls, value: str) -> "Email":
        return cls(value=value)

    @property
    def domain(self) -> str:
        return self.value.split("@", 1)[1]

    def __str__(self) -> str:
        return self.value


class ISBN(ValueObject):
    """ISBN-10 or ISBN-13, stored without separators."""

    value: str

    @field_validator("value", mode="before")
    @classmethod
    def validate_isbn(cls, v: Any) -> str:
        if not isinstance(v, str):
            raise ValueError("ISBN must be a string")
        cleaned = re.sub(r"[-\s]", "", v).upper()
        if len(cleaned) == 10 and _valid_isbn10(cleaned):
            return cleaned
        if len(cleaned) == 13 and _valid_isbn13(cleaned):
            return cleaned
        raise ValueError(f"Invalid ISBN: {v}")

    @classmethod
    def of(cls, value: str) -> "ISBN":
        return cls(value=value)

    @property
    def is_isbn13(self) -> bool:
        return len(self.value) == 13

    def __str__(self) -> str:
        return self.value


def _valid_isbn10(isbn: str) -> bool:
    if not re.fullmatch(r"\d{9}[\dX]", isbn):
        return False
    total = 0
    for i, ch in enumerate(isbn):
        digit = 10 if ch == "X" else int(ch)
        total += digit * (10 - i)
    return total % 11 == 0


def _valid_isbn13(isbn: str) -> bool:
    if not isbn.isdigit():
        return False
    total = sum(int(ch) * (1 if i % 2 == 0 else 3) for i, ch in enumerate(isbn))
    return total % 10 == 0


class Quantity(ValueObject):
    value: int

    @field_validator("value", mode="before")
    @classmethod
    def validate_quantity(cls, v: Any) -> int:
        if isinstance(v, bool) or not isinstance(v, int):
            raise ValueError("Quantity must be an integer")
        if v < 1:
            raise ValueError("Quantity must be at least 1")
        return v

    @classmethod
    def of(cls, value: int) -> "Quantity":
        return cls(value=value)

    def __int__(self) -> int:
        return self.value


_SKU_RE = re.compile(r"^[A-Z]{3}-\d{5}$")


class Sku(ValueObject):
    """Stock keeping unit such as ABC-12345, stored upper case."""

    value: str

    @field_validator("value", mode="before")
    @classmethod
    def validate_sku(cls, v: Any) -> str:
        if not isinstance(v, str):
            raise ValueError("SKU must be a string")
        normalized = v.strip().upper()
        if not _SKU_RE.match(normalized):
            raise ValueError(f"Invalid SKU format: {v}. Expected format: ABC-12345")
        return normalized

    @classmethod
    def of(cls, value: str) -> "Sku":
        return cls(value=value)

    def __str__(self) -> str:
        return self.value


class Color(ValueObject):
    """Hex colour in #RRGGBB form."""

    value: str

    @field_validator("value", mode="before")
    @classmethod
    def validate_color(cls, v: Any) -> str:
        if not isinstance(v, str) or not re.fullmatch(r"#[0-9A-Fa-f]{6}", v.strip()):
            raise ValueError("Color must be a hex value like #RRGGBB")
        return v.strip().upper()

    @classmethod
    def of(cls, value: str) -> "Color":
        return cls(value=value)

    def __str__(self) -> str:
        return self.value
