"""Library domain services."""

from datetime import datetime

from ..shared.base import DomainService
from ..shared.value_objects import DateRange, LoanId, Money
from .value_objects import Penalty

PENALTY_DAYS_PER_OVERDUE_DAY = 2
FINE_PER_OVERDUE_DAY = 50


class PenaltyCalculator(DomainService):
    """
    Turns overdue days into a penalty.

    Each overdue day bans the member from borrowing for
    ``penalty_days_per_overdue_day`` days and adds ``fine_per_day`` minor
    units to the fine.
    """

    def __init__(
        self,
        penalty_days_per_overdue_day: int = PENALTY_DAYS_PER_OVERDUE_DAY,
        fine_per_day: int = FINE_PER_OVERDUE_DAY,
        currency: str = "EUR",
    ) -> None:
        self.penalty_days_per_overdue_day = penalty_days_per_overdue_day
        self.fine_per_day = fine_per_day
        self.currency = currency

    def fine_for(self, days_overdue: int) -> Money:
        return Money.of(self.fine_per_day, self.currency).multiply(max(days_overdue, 0))

    def calculate(
        self, loan_id: LoanId, days_overdue: int, as_of: datetime
    ) -> Penalty | None:
        if days_overdue <= 0:
            return None
        return Penalty(
            loan_id=loan_id,
            period=DateRange.starting(
                as_of, days_overdue * self.penalty_days_per_overdue_day
            ),
            days_overdue=days_overdue,
            fine=self.fine_for(days_overdue),
        )
