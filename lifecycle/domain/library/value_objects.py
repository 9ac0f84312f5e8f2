"""Library statuses, transition tables and embedded value objects."""

from datetime import datetime
from enum import Enum

from pydantic import Field

from ..shared.base import ValueObject
from ..shared.state_machine import TransitionTable
from ..shared.value_objects import BookId, DateRange, LoanId, Money


class BookStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    BORROWED = "BORROWED"

    def can_transition_to(self, target_status: "BookStatus") -> bool:
        return BOOK_TRANSITIONS.can_transition(self, target_status)


class LoanStatus(str, Enum):
    """
    Persisted loan status.

    OVERDUE is not stored: an ACTIVE loan past its due date is reported as
    overdue by ``Loan.is_overdue`` and ``Loan.observed_status``.
    """

    ACTIVE = "ACTIVE"
    RETURNED = "RETURNED"

    @property
    def is_terminal(self) -> bool:
        return LOAN_TRANSITIONS.is_terminal(self)

    def can_transition_to(self, target_status: "LoanStatus") -> bool:
        return LOAN_TRANSITIONS.can_transition(self, target_status)


OVERDUE = "OVERDUE"

BOOK_TRANSITIONS: TransitionTable[BookStatus] = TransitionTable(
    {
        BookStatus.AVAILABLE: {BookStatus.BORROWED},
        BookStatus.BORROWED: {BookStatus.AVAILABLE},
    }
)

LOAN_TRANSITIONS: TransitionTable[LoanStatus] = TransitionTable(
    {
        LoanStatus.ACTIVE: {LoanStatus.RETURNED},
        LoanStatus.RETURNED: set(),  # Terminal state
    }
)


class ActiveLoan(ValueObject):
    """A member's reference to an open loan, by id only."""

    loan_id: LoanId
    book_id: BookId
    borrowed_at: datetime


class Penalty(ValueObject):
    """Borrowing ban and fine applied after a late return."""

    loan_id: LoanId
    period: DateRange
    days_overdue: int = Field(ge=1)
    fine: Money

    def is_active(self, as_of: datetime) -> bool:
        return self.period.contains(as_of)

    def days_remaining(self, as_of: datetime) -> int:
        if not self.is_active(as_of):
            return 0
        return DateRange(start=as_of, end=self.period.end).duration_days
