"""Library repository ports."""

from abc import abstractmethod
from datetime import datetime

from ..shared.base import Repository
from ..shared.value_objects import ISBN, BookId, Email, LoanId, MemberId
from .entities.book import Book
from .entities.loan import Loan
from .entities.member import Member


class BookRepository(Repository[Book, BookId]):
    @abstractmethod
    async def find_by_isbn(self, isbn: ISBN) -> Book | None:
        """Find a book by ISBN."""

    @abstractmethod
    async def find_available(self) -> list[Book]:
        """All books that can be lent right now."""


class LoanRepository(Repository[Loan, LoanId]):
    @abstractmethod
    async def find_by_member(self, member_id: MemberId) -> list[Loan]:
        """Every loan a member ever had, oldest first."""

    @abstractmethod
    async def find_active_by_member(self, member_id: MemberId) -> list[Loan]:
        """Loans the member has not returned yet."""

    @abstractmethod
    async def find_overdue(self, as_of: datetime) -> list[Loan]:
        """Active loans whose period expired before ``as_of``."""


class MemberRepository(Repository[Member, MemberId]):
    @abstractmethod
    async def find_by_email(self, email: Email) -> Member | None:
        """Find a member by email."""
