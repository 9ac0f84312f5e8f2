"""Library domain events."""

from datetime import datetime

from ..shared.base import DomainEvent


class BookRegistered(DomainEvent):
    name = "book.registered"

    isbn: str
    title: str
    author: str


class BookBorrowed(DomainEvent):
    name = "book.borrowed"

    loan_id: str


class BookReleased(DomainEvent):
    name = "book.released"

    loan_id: str | None


class BookLoaned(DomainEvent):
    """A loan was opened; carries everything the other library aggregates need."""

    name = "book.loaned"

    book_id: str
    member_id: str
    borrowed_at: datetime
    due_date: datetime


class BookReturned(DomainEvent):
    name = "book.returned"

    book_id: str
    member_id: str
    returned_at: datetime
    days_overdue: int


class MemberRegistered(DomainEvent):
    name = "member.registered"

    email: str
    full_name: str


class MemberLoanOpened(DomainEvent):
    name = "member.loan_opened"

    loan_id: str
    book_id: str
    active_loans: int


class MemberLoanClosed(DomainEvent):
    name = "member.loan_closed"

    loan_id: str
    book_id: str
    active_loans: int


class PenaltyApplied(DomainEvent):
    name = "penalty.applied"

    loan_id: str
    days_overdue: int
    penalty_until: datetime
    fine_amount: int
    fine_currency: str


LibraryEvent = (
    BookRegistered
    | BookBorrowed
    | BookReleased
    | BookLoaned
    | BookReturned
    | MemberRegistered
    | MemberLoanOpened
    | MemberLoanClosed
    | PenaltyApplied
)
