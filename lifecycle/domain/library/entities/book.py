"""Book aggregate: a physical copy that can be lent out."""

from datetime import datetime

from pydantic import Field, field_validator

from ...shared.base import AggregateRoot
from ...shared.exceptions import BookNotAvailableError
from ...shared.value_objects import ISBN, BookId, LoanId
from ..events import BookBorrowed, BookRegistered, BookReleased
from ..value_objects import BOOK_TRANSITIONS, BookStatus


class Book(AggregateRoot):
    id: BookId
    isbn: ISBN
    title: str = Field(min_length=1, max_length=300)
    author: str = Field(min_length=1, max_length=200)
    status: BookStatus = BookStatus.AVAILABLE
    current_loan_id: LoanId | None = None

    @field_validator("title", "author", mode="before")
    @classmethod
    def strip_text(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v

    @classmethod
    def register(
        cls,
        book_id: BookId,
        isbn: ISBN,
        title: str,
        author: str,
        registered_at: datetime,
    ) -> "Book":
        book = cls(
            id=book_id,
            isbn=isbn,
            title=title,
            author=author,
            created_at=registered_at,
        )
        book._record(
            BookRegistered(
                aggregate_id=str(book.id),
                occurred_at=registered_at,
                isbn=book.isbn.value,
                title=book.title,
                author=book.author,
            )
        )
        return book

    @property
    def is_available(self) -> bool:
        return self.status == BookStatus.AVAILABLE

    def ensure_available(self) -> None:
        if not self.is_available:
            raise BookNotAvailableError(self.id, self.status.value)

    def mark_as_borrowed(self, loan_id: LoanId, at: datetime) -> None:
        self.ensure_available()
        self._transition(BOOK_TRANSITIONS, BookStatus.BORROWED, action="borrow", at=at)
        self.current_loan_id = loan_id
        self._record(
            BookBorrowed(aggregate_id=str(self.id), occurred_at=at, loan_id=str(loan_id))
        )

    def mark_as_returned(self, at: datetime) -> None:
        self._transition(BOOK_TRANSITIONS, BookStatus.AVAILABLE, action="return", at=at)
        loan_id = self.current_loan_id
        self.current_loan_id = None
        self._record(
            BookReleased(
                aggregate_id=str(self.id),
                occurred_at=at,
                loan_id=str(loan_id) if loan_id else None,
            )
        )
