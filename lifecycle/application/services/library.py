"""
Library use cases and event policies.

Opening and closing a loan touches three aggregates. The use case changes
only the Loan; the Book and the Member follow through policies subscribed
to ``book.loaned`` and ``book.returned``. The policies run while the use
case still holds the locks of all three aggregates, so they do not lock.
"""

from lifecycle.application.commands import (
    GetMemberLoansQuery,
    GetMemberQuery,
    ListOverdueLoansQuery,
    LoanBookCommand,
    RegisterBookCommand,
    RegisterMemberCommand,
    ReturnBookCommand,
)
from lifecycle.application.dtos import (
    BookResponse,
    LoanResponse,
    MemberResponse,
    ReturnResponse,
)
from lifecycle.application.services.base import UseCase, correlated
from lifecycle.core.observability import monitor_use_case
from lifecycle.domain.library.entities.book import Book
from lifecycle.domain.library.entities.loan import DEFAULT_LOAN_DAYS, Loan
from lifecycle.domain.library.entities.member import MAX_ACTIVE_LOANS, Member
from lifecycle.domain.library.events import BookLoaned, BookReturned
from lifecycle.domain.library.repositories import (
    BookRepository,
    LoanRepository,
    MemberRepository,
)
from lifecycle.domain.library.services import PenaltyCalculator
from lifecycle.domain.shared.exceptions import NotFoundError
from lifecycle.domain.shared.value_objects import ISBN, BookId, Email, LoanId, MemberId


class RegisterBook(UseCase):
    def __init__(self, books: BookRepository, **deps) -> None:
        super().__init__(**deps)
        self._books = books

    @monitor_use_case("register_book")
    @correlated
    async def execute(self, command: RegisterBookCommand) -> BookResponse:
        book = Book.register(
            book_id=self._ids.new(BookId),
            isbn=ISBN.of(command.isbn),
            title=command.title,
            author=command.author,
            registered_at=self.now(),
        )
        await self._commit(self._books, book)
        self._logger.info("book_registered", book_id=str(book.id), isbn=book.isbn.value)
        return BookResponse.from_entity(book)


class RegisterMember(UseCase):
    def __init__(
        self, members: MemberRepository, max_active_loans: int = MAX_ACTIVE_LOANS, **deps
    ) -> None:
        super().__init__(**deps)
        self._members = members
        self._max_active_loans = max_active_loans

    @monitor_use_case("register_member")
    @correlated
    async def execute(self, command: RegisterMemberCommand) -> MemberResponse:
        now = self.now()
        member = Member.register(
            member_id=self._ids.new(MemberId),
            email=Email.of(command.email),
            full_name=command.full_name,
            registered_at=now,
        )
        await self._commit(self._members, member)
        self._logger.info("member_registered", member_id=str(member.id))
        return MemberResponse.from_entity(member, now, self._max_active_loans)


class LoanBook(UseCase):
    """Open a loan for an available book, within the member's limits."""

    def __init__(
        self,
        books: BookRepository,
        members: MemberRepository,
        loans: LoanRepository,
        loan_days: int = DEFAULT_LOAN_DAYS,
        max_active_loans: int = MAX_ACTIVE_LOANS,
        **deps,
    ) -> None:
        super().__init__(**deps)
        self._books = books
        self._members = members
        self._loans = loans
        self._loan_days = loan_days
        self._max_active_loans = max_active_loans

    @monitor_use_case("loan_book")
    @correlated
    async def execute(self, command: LoanBookCommand) -> LoanResponse:
        book_id = BookId.of(command.book_id)
        member_id = MemberId.of(command.member_id)

        async with self._locks.hold(
            self.lock_key("Book", book_id), self.lock_key("Member", member_id)
        ):
            book = await self._load_or_fail(self._books, book_id, "Book")
            member = await self._load_or_fail(self._members, member_id, "Member")
            now = self.now()

            member.ensure_can_borrow(book_id, now, self._max_active_loans)
            book.ensure_available()

            loan = Loan.open(
                loan_id=self._ids.new(LoanId),
                book_id=book_id,
                member_id=member_id,
                borrowed_at=now,
                loan_days=command.loan_days or self._loan_days,
            )
            await self._commit(self._loans, loan)

        self._logger.info(
            "book_loaned",
            loan_id=str(loan.id),
            book_id=str(book_id),
            member_id=str(member_id),
            due_date=loan.due_date.isoformat(),
        )
        return LoanResponse.from_entity(loan, now)


class ReturnBook(UseCase):
    def __init__(self, loans: LoanRepository, **deps) -> None:
        super().__init__(**deps)
        self._loans = loans

    @monitor_use_case("return_book")
    @correlated
    async def execute(self, command: ReturnBookCommand) -> ReturnResponse:
        loan_id = LoanId.of(command.loan_id)
        found = await self._load_or_fail(self._loans, loan_id, "Loan")

        async with self._locks.hold(
            self.lock_key("Loan", loan_id),
            self.lock_key("Book", found.book_id),
            self.lock_key("Member", found.member_id),
        ):
            loan = await self._load_or_fail(self._loans, loan_id, "Loan")
            now = self.now()
            days_overdue = loan.mark_as_returned(now)
            await self._commit(self._loans, loan)

        self._logger.info(
            "book_returned", loan_id=str(loan.id), days_overdue=days_overdue
        )
        return ReturnResponse(
            loan=LoanResponse.from_entity(loan, now),
            days_overdue=days_overdue,
            penalty_applied=days_overdue > 0,
        )


class GetMember(UseCase):
    def __init__(
        self, members: MemberRepository, max_active_loans: int = MAX_ACTIVE_LOANS, **deps
    ) -> None:
        super().__init__(**deps)
        self._members = members
        self._max_active_loans = max_active_loans

    async def execute(self, query: GetMemberQuery) -> MemberResponse:
        member = await self._load_or_fail(
            self._members, MemberId.of(query.member_id), "Member"
        )
        return MemberResponse.from_entity(member, self.now(), self._max_active_loans)


class GetMemberLoans(UseCase):
    def __init__(
        self, members: MemberRepository, loans: LoanRepository, **deps
    ) -> None:
        super().__init__(**deps)
        self._members = members
        self._loans = loans

    async def execute(self, query: GetMemberLoansQuery) -> list[LoanResponse]:
        member_id = MemberId.of(query.member_id)
        if not await self._members.exists(member_id):
            raise NotFoundError("Member", member_id)
        if query.active_only:
            loans = await self._loans.find_active_by_member(member_id)
        else:
            loans = await self._loans.find_by_member(member_id)
        now = self.now()
        return [LoanResponse.from_entity(loan, now) for loan in loans]


class ListOverdueLoans(UseCase):
    def __init__(self, loans: LoanRepository, **deps) -> None:
        super().__init__(**deps)
        self._loans = loans

    async def execute(self, query: ListOverdueLoansQuery) -> list[LoanResponse]:
        as_of = query.as_of or self.now()
        return [
            LoanResponse.from_entity(loan, as_of)
            for loan in await self._loans.find_overdue(as_of)
        ]


class MarkBookBorrowedOnLoan(UseCase):
    """book.loaned -> the book leaves the shelf."""

    def __init__(self, books: BookRepository, **deps) -> None:
        super().__init__(**deps)
        self._books = books

    async def __call__(self, event: BookLoaned) -> None:
        book = await self._load_or_fail(self._books, BookId.of(event.book_id), "Book")
        book.mark_as_borrowed(LoanId.of(event.aggregate_id), event.occurred_at)
        await self._commit(self._books, book)


class OpenMemberLoanOnLoan(UseCase):
    """book.loaned -> the member's capacity shrinks."""

    def __init__(
        self, members: MemberRepository, max_active_loans: int = MAX_ACTIVE_LOANS, **deps
    ) -> None:
        super().__init__(**deps)
        self._members = members
        self._max_active_loans = max_active_loans

    async def __call__(self, event: BookLoaned) -> None:
        member = await self._load_or_fail(
            self._members, MemberId.of(event.member_id), "Member"
        )
        member.open_loan(
            LoanId.of(event.aggregate_id),
            BookId.of(event.book_id),
            event.borrowed_at,
            self._max_active_loans,
        )
        await self._commit(self._members, member)


class ReleaseBookOnReturn(UseCase):
    """book.returned -> the book is available again."""

    def __init__(self, books: BookRepository, **deps) -> None:
        super().__init__(**deps)
        self._books = books

    async def __call__(self, event: BookReturned) -> None:
        book = await self._load_or_fail(self._books, BookId.of(event.book_id), "Book")
        book.mark_as_returned(event.returned_at)
        await self._commit(self._books, book)


class CloseMemberLoanOnReturn(UseCase):
    """book.returned -> the member gets the slot back, plus a penalty if late."""

    def __init__(
        self, members: MemberRepository, calculator: PenaltyCalculator, **deps
    ) -> None:
        super().__init__(**deps)
        self._members = members
        self._calculator = calculator

    async def __call__(self, event: BookReturned) -> None:
        member = await self._load_or_fail(
            self._members, MemberId.of(event.member_id), "Member"
        )
        penalty = member.close_loan(
            LoanId.of(event.aggregate_id),
            event.days_overdue,
            event.returned_at,
            self._calculator,
        )
        await self._commit(self._members, member)
        if penalty is not None:
            self._logger.info(
                "penalty_applied",
                member_id=str(member.id),
                days_overdue=penalty.days_overdue,
                until=penalty.period.end.isoformat(),
            )
