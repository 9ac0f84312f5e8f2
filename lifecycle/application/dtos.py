"""Response shapes returned by use cases."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from lifecycle.domain.library.entities.book import Book
from lifecycle.domain.library.entities.loan import Loan
from lifecycle.domain.library.entities.member import Member
from lifecycle.domain.sales.entities.order import Order
from lifecycle.domain.sales.entities.product import Product
from lifecycle.domain.shared.value_objects import Money
from lifecycle.domain.tasks.entities.tag import Tag
from lifecycle.domain.tasks.entities.task import Task


class Response(BaseModel):
    model_config = ConfigDict(frozen=True)


class MoneyResponse(Response):
    amount: int
    currency: str
    formatted: str

    @classmethod
    def from_money(cls, money: Money) -> "MoneyResponse":
        return cls(amount=money.amount, currency=money.currency, formatted=money.format())


class BookResponse(Response):
    id: str
    isbn: str
    title: str
    author: str
    status: str
    current_loan_id: str | None

    @classmethod
    def from_entity(cls, book: Book) -> "BookResponse":
        return cls(
            id=str(book.id),
            isbn=book.isbn.value,
            title=book.title,
            author=book.author,
            status=book.status.value,
            current_loan_id=str(book.current_loan_id) if book.current_loan_id else None,
        )


class PenaltyResponse(Response):
    loan_id: str
    days_overdue: int
    starts_at: datetime
    ends_at: datetime
    fine: MoneyResponse
    active: bool


class MemberResponse(Response):
    id: str
    email: str
    full_name: str
    active_loans: int
    remaining_capacity: int
    has_active_penalty: bool
    penalties: list[PenaltyResponse]

    @classmethod
    def from_entity(cls, member: Member, as_of: datetime, limit: int) -> "MemberResponse":
        return cls(
            id=str(member.id),
            email=member.email.value,
            full_name=member.full_name,
            active_loans=len(member.active_loans),
            remaining_capacity=member.remaining_capacity(limit),
            has_active_penalty=member.has_active_penalty(as_of),
            penalties=[
                PenaltyResponse(
                    loan_id=str(p.loan_id),
                    days_overdue=p.days_overdue,
                    starts_at=p.period.start,
                    ends_at=p.period.end,
                    fine=MoneyResponse.from_money(p.fine),
                    active=p.is_active(as_of),
                )
                for p in member.penalties
            ],
        )


class LoanResponse(Response):
    id: str
    book_id: str
    member_id: str
    borrowed_at: datetime
    due_date: datetime
    returned_at: datetime | None
    status: str
    days_overdue: int

    @classmethod
    def from_entity(cls, loan: Loan, as_of: datetime) -> "LoanResponse":
        return cls(
            id=str(loan.id),
            book_id=str(loan.book_id),
            member_id=str(loan.member_id),
            borrowed_at=loan.period.start,
            due_date=loan.due_date,
            returned_at=loan.returned_at,
            status=loan.observed_status(as_of),
            days_overdue=loan.days_overdue(as_of),
        )


class ReturnResponse(Response):
    loan: LoanResponse
    days_overdue: int
    penalty_applied: bool


class OrderItemResponse(Response):
    product_id: str
    product_name: str
    quantity: int
    unit_price: MoneyResponse
    subtotal: MoneyResponse


class OrderResponse(Response):
    id: str
    customer_id: str
    status: str
    items: list[OrderItemResponse]
    total: MoneyResponse
    payment_method: str | None
    transaction_id: str | None
    payment_attempts: int
    failure_reason: str | None
    created_at: datetime
    paid_at: datetime | None
    tracking_number: str | None = None
    carrier: str | None = None
    shipped_at: datetime | None = None
    estimated_delivery: datetime | None = None
    delivered_at: datetime | None = None

    @classmethod
    def from_entity(cls, order: Order) -> "OrderResponse":
        return cls(
            id=str(order.id),
            customer_id=str(order.customer_id),
            status=order.status.value,
            items=[
                OrderItemResponse(
                    product_id=str(item.product_id),
                    product_name=item.product_name,
                    quantity=item.quantity.value,
                    unit_price=MoneyResponse.from_money(item.unit_price),
                    subtotal=MoneyResponse.from_money(item.subtotal()),
                )
                for item in order.items
            ],
            total=MoneyResponse.from_money(order.total()),
            payment_method=order.payment_method,
            transaction_id=order.transaction_id,
            payment_attempts=order.payment_attempts,
            failure_reason=order.failure_reason,
            created_at=order.created_at,
            paid_at=order.paid_at,
            tracking_number=order.tracking_number,
            carrier=order.carrier,
            shipped_at=order.shipped_at,
            estimated_delivery=order.estimated_delivery,
            delivered_at=order.delivered_at,
        )


class ProductResponse(Response):
    id: str
    sku: str
    name: str
    description: str
    stock: int
    price: MoneyResponse
    low_stock_threshold: int
    low_stock: bool
    out_of_stock: bool

    @classmethod
    def from_entity(cls, product: Product) -> "ProductResponse":
        return cls(
            id=str(product.id),
            sku=product.sku.value,
            name=product.name,
            description=product.description,
            stock=product.stock,
            price=MoneyResponse.from_money(product.price),
            low_stock_threshold=product.low_stock_threshold,
            low_stock=product.is_low_stock,
            out_of_stock=product.is_out_of_stock,
        )


class PaymentResponse(Response):
    success: bool
    order: OrderResponse
    payment_method: str
    fee: MoneyResponse
    message: str


class FeeQuoteResponse(Response):
    method: str
    fee: MoneyResponse


class TaskResponse(Response):
    id: str
    project_id: str
    title: str
    description: str
    priority: str
    status: str
    tag_ids: list[str]
    due_date: datetime | None
    completed_at: datetime | None
    is_overdue: bool

    @classmethod
    def from_entity(cls, task: Task, as_of: datetime) -> "TaskResponse":
        return cls(
            id=str(task.id),
            project_id=str(task.project_id),
            title=task.title,
            description=task.description,
            priority=task.priority.value,
            status=task.status.value,
            tag_ids=[str(t) for t in task.tag_ids],
            due_date=task.due_date,
            completed_at=task.completed_at,
            is_overdue=task.is_overdue(as_of),
        )


class TagResponse(Response):
    id: str
    name: str
    color: str

    @classmethod
    def from_entity(cls, tag: Tag) -> "TagResponse":
        return cls(id=str(tag.id), name=tag.name, color=tag.color.value)
