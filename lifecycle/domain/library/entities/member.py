"""Member aggregate: borrowing capacity and penalties of one library user."""

from datetime import datetime

from pydantic import Field, field_validator

from ...shared.base import AggregateRoot
from ...shared.exceptions import (
    InvalidTransitionError,
    LoanLimitExceededError,
    MemberHasPenaltyError,
    NotFoundError,
)
from ...shared.value_objects import BookId, Email, LoanId, MemberId, Money
from ..events import MemberLoanClosed, MemberLoanOpened, MemberRegistered, PenaltyApplied
from ..services import PenaltyCalculator
from ..value_objects import ActiveLoan, Penalty

MAX_ACTIVE_LOANS = 3


class Member(AggregateRoot):
    id: MemberId
    email: Email
    full_name: str = Field(min_length=1, max_length=120)
    active_loans: list[ActiveLoan] = Field(default_factory=list)
    penalties: list[Penalty] = Field(default_factory=list)

    @field_validator("full_name", mode="before")
    @classmethod
    def strip_name(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v

    @classmethod
    def register(
        cls,
        member_id: MemberId,
        email: Email,
        full_name: str,
        registered_at: datetime,
    ) -> "Member":
        member = cls(
            id=member_id, email=email, full_name=full_name, created_at=registered_at
        )
        member._record(
            MemberRegistered(
                aggregate_id=str(member.id),
                occurred_at=registered_at,
                email=member.email.value,
                full_name=member.full_name,
            )
        )
        return member

    def active_penalty(self, as_of: datetime) -> Penalty | None:
        active = [p for p in self.penalties if p.is_active(as_of)]
        if not active:
            return None
        return max(active, key=lambda p: p.period.end)

    def has_active_penalty(self, as_of: datetime) -> bool:
        return self.active_penalty(as_of) is not None

    def remaining_capacity(self, limit: int = MAX_ACTIVE_LOANS) -> int:
        return max(limit - len(self.active_loans), 0)

    def holds_book(self, book_id: BookId) -> bool:
        return any(loan.book_id == book_id for loan in self.active_loans)

    def total_fines(self, currency: str) -> Money:
        return Money.sum(
            (p.fine for p in self.penalties if p.fine.currency == currency), currency
        )

    def ensure_can_borrow(
        self, book_id: BookId, as_of: datetime, limit: int = MAX_ACTIVE_LOANS
    ) -> None:
        """Checked in order: penalty, loan limit, duplicate book."""
        penalty = self.active_penalty(as_of)
        if penalty is not None:
            raise MemberHasPenaltyError(self.id, penalty.period.end)
        if len(self.active_loans) >= limit:
            raise LoanLimitExceededError(self.id, len(self.active_loans), limit)
        if self.holds_book(book_id):
            raise InvalidTransitionError(
                "Member",
                self.id,
                "holding book",
                "borrow",
                message=f"Member {self.id} already has book {book_id} on loan",
                details={"book_id": str(book_id)},
            )

    def open_loan(
        self,
        loan_id: LoanId,
        book_id: BookId,
        as_of: datetime,
        limit: int = MAX_ACTIVE_LOANS,
    ) -> None:
        self.ensure_can_borrow(book_id, as_of, limit)
        self.active_loans = [
            *self.active_loans,
            ActiveLoan(loan_id=loan_id, book_id=book_id, borrowed_at=as_of),
        ]
        self.mark_updated(as_of)
        self._record(
            MemberLoanOpened(
                aggregate_id=str(self.id),
                occurred_at=as_of,
                loan_id=str(loan_id),
                book_id=str(book_id),
                active_loans=len(self.active_loans),
            )
        )

    def close_loan(
        self,
        loan_id: LoanId,
        days_overdue: int,
        as_of: datetime,
        calculator: PenaltyCalculator,
    ) -> Penalty | None:
        """Drop the loan from the member and apply a penalty if it came back late."""
        closing = next(
            (loan for loan in self.active_loans if loan.loan_id == loan_id), None
        )
        if closing is None:
            raise NotFoundError("ActiveLoan", loan_id)

        penalty = calculator.calculate(loan_id, days_overdue, as_of)

        self.active_loans = [
            loan for loan in self.active_loans if loan.loan_id != loan_id
        ]
        if penalty is not None:
            self.penalties = [*self.penalties, penalty]
        self.mark_updated(as_of)

        self._record(
            MemberLoanClosed(
                aggregate_id=str(self.id),
                occurred_at=as_of,
                loan_id=str(loan_id),
                book_id=str(closing.book_id),
                active_loans=len(self.active_loans),
            )
        )
        if penalty is not None:
            self._record(
                PenaltyApplied(
                    aggregate_id=str(self.id),
                    occurred_at=as_of,
                    loan_id=str(loan_id),
                    days_overdue=days_overdue,
                    penalty_until=penalty.period.end,
                    fine_amount=penalty.fine.amount,
                    fine_currency=penalty.fine.currency,
                )
            )
        return penalty
