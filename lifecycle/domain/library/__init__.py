"""Library context: books, members and the loans between them."""

from .entities.book import Book
from .entities.loan import DEFAULT_LOAN_DAYS, Loan
from .entities.member import MAX_ACTIVE_LOANS, Member
from .services import PenaltyCalculator
from .value_objects import OVERDUE, ActiveLoan, BookStatus, LoanStatus, Penalty

__all__ = [
    "DEFAULT_LOAN_DAYS",
    "MAX_ACTIVE_LOANS",
    "OVERDUE",
    "ActiveLoan",
    "Book",
    "BookStatus",
    "Loan",
    "LoanStatus",
    "Member",
    "Penalty",
    "PenaltyCalculator",
]
