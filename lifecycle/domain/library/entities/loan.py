"""
Loan aggregate.

A loan is ACTIVE from the day it is opened until the book comes back, then
RETURNED for good. Being overdue is observed against a reference instant
rather than stored, so a loan never needs a background job to flip it.
"""

from datetime import datetime

from ...shared.base import AggregateRoot
from ...shared.value_objects import BookId, DateRange, LoanId, MemberId
from ..events import BookLoaned, BookReturned
from ..value_objects import LOAN_TRANSITIONS, OVERDUE, LoanStatus

DEFAULT_LOAN_DAYS = 14


class Loan(AggregateRoot):
    id: LoanId
    book_id: BookId
    member_id: MemberId
    period: DateRange
    status: LoanStatus = LoanStatus.ACTIVE
    returned_at: datetime | None = None

    @classmethod
    def open(
        cls,
        loan_id: LoanId,
        book_id: BookId,
        member_id: MemberId,
        borrowed_at: datetime,
        loan_days: int = DEFAULT_LOAN_DAYS,
    ) -> "Loan":
        loan = cls(
            id=loan_id,
            book_id=book_id,
            member_id=member_id,
            period=DateRange.starting(borrowed_at, loan_days),
            created_at=borrowed_at,
        )
        loan._record(
            BookLoaned(
                aggregate_id=str(loan.id),
                occurred_at=borrowed_at,
                book_id=str(book_id),
                member_id=str(member_id),
                borrowed_at=loan.period.start,
                due_date=loan.period.end,
            )
        )
        return loan

    @property
    def due_date(self) -> datetime:
        return self.period.end

    @property
    def is_active(self) -> bool:
        return self.status == LoanStatus.ACTIVE

    def is_overdue(self, as_of: datetime) -> bool:
        return self.is_active and self.period.is_expired(as_of)

    def days_overdue(self, as_of: datetime) -> int:
        if not self.is_active:
            return 0
        return self.period.days_overdue(as_of)

    def observed_status(self, as_of: datetime) -> str:
        """Status as shown to readers: ACTIVE, OVERDUE or RETURNED."""
        if self.is_overdue(as_of):
            return OVERDUE
        return self.status.value

    def mark_as_returned(self, return_date: datetime) -> int:
        """Close the loan and return the number of overdue days."""
        days_overdue = self.days_overdue(return_date)
        self._transition(
            LOAN_TRANSITIONS, LoanStatus.RETURNED, action="return", at=return_date
        )
        self.returned_at = return_date
        self._record(
            BookReturned(
                aggregate_id=str(self.id),
                occurred_at=return_date,
                book_id=str(self.book_id),
                member_id=str(self.member_id),
                returned_at=return_date,
                days_overdue=days_overdue,
            )
        )
        return days_overdue
