"""
Command and query definitions.

Commands describe one requested state change in primitive fields; use
cases turn them into value objects. Queries are plain read requests.
"""

from datetime import datetime, timezone
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Command(BaseModel):
    """Base class for all commands."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    command_id: UUID = Field(default_factory=uuid4)
    issued_at: datetime = Field(default_factory=_utcnow)
    correlation_id: str | None = None


class Query(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


# Library


class RegisterBookCommand(Command):
    isbn: str
    title: str
    author: str


class RegisterMemberCommand(Command):
    email: str
    full_name: str


class LoanBookCommand(Command):
    book_id: str
    member_id: str
    loan_days: int | None = Field(default=None, ge=1, le=365)


class ReturnBookCommand(Command):
    loan_id: str


class GetMemberLoansQuery(Query):
    member_id: str
    active_only: bool = False


class GetMemberQuery(Query):
    member_id: str


class ListOverdueLoansQuery(Query):
    as_of: datetime | None = None


# Sales


class OrderItemInput(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    product_id: str
    product_name: str
    quantity: int
    unit_price: int


class PlaceOrderCommand(Command):
    customer_id: str
    customer_email: str | None = None
    currency: str | None = None
    items: list[OrderItemInput] = Field(min_length=1)


class PayOrderCommand(Command):
    order_id: str
    payment_method: str


class CancelOrderCommand(Command):
    order_id: str
    reason: str | None = None


class GetOrderQuery(Query):
    order_id: str


class ListCustomerOrdersQuery(Query):
    customer_id: str


class ComparePaymentFeesQuery(Query):
    amount: int = Field(ge=0)
    currency: str | None = None


class ShipOrderCommand(Command):
    order_id: str
    tracking_number: str
    carrier: str
    estimated_delivery: datetime | None = None


class DeliverOrderCommand(Command):
    order_id: str


class AddProductCommand(Command):
    sku: str
    name: str
    price: int
    currency: str | None = None
    description: str = ""
    initial_stock: int = Field(default=0, ge=0)
    low_stock_threshold: int | None = Field(default=None, ge=0)


class AdjustStockCommand(Command):
    """Positive ``quantity`` receives stock, negative removes it."""

    product_id: str
    quantity: int
    reason: str

    @field_validator("quantity")
    @classmethod
    def non_zero(cls, v: int) -> int:
        if v == 0:
            raise ValueError("Quantity must not be zero")
        return v


class UpdateProductPriceCommand(Command):
    product_id: str
    price: int


class GetProductQuery(Query):
    product_id: str


class ListLowStockProductsQuery(Query):
    pass


# Tasks


class CreateTaskCommand(Command):
    project_id: str
    title: str
    description: str = ""
    priority: str = "MEDIUM"
    due_date: datetime | None = None
    tag_ids: list[str] = Field(default_factory=list)


class ChangeTaskStatusCommand(Command):
    task_id: str
    status: str


class UpdateTaskDetailsCommand(Command):
    task_id: str
    title: str | None = None
    description: str | None = None
    priority: str | None = None
    due_date: datetime | None = None


class TagTaskCommand(Command):
    task_id: str
    tag_id: str


class GetTaskQuery(Query):
    task_id: str


class ListProjectTasksQuery(Query):
    project_id: str
    status: str | None = None


class CreateTagCommand(Command):
    name: str
    color: str | None = None


class RenameTagCommand(Command):
    tag_id: str
    name: str | None = None
    color: str | None = None


class DeleteTagCommand(Command):
    tag_id: str
