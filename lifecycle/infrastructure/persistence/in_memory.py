"""
In-memory repository adapters.

Aggregates are stored as deep-copied snapshots without their pending
events, so a caller mutating a loaded aggregate never changes the stored
state until it saves. ``save`` enforces optimistic versioning and the
unique business keys of each aggregate type.
"""

import logging
from datetime import datetime
from typing import Generic, TypeVar

from lifecycle.domain.library.entities.book import Book
from lifecycle.domain.library.entities.loan import Loan
from lifecycle.domain.library.entities.member import Member
from lifecycle.domain.library.repositories import (
    BookRepository,
    LoanRepository,
    MemberRepository,
)
from lifecycle.domain.library.value_objects import BookStatus
from lifecycle.domain.sales.entities.order import Order
from lifecycle.domain.sales.entities.product import Product
from lifecycle.domain.sales.repositories import OrderRepository, ProductRepository
from lifecycle.domain.sales.value_objects import OrderStatus
from lifecycle.domain.shared.base import AggregateRoot, Repository
from lifecycle.domain.shared.exceptions import ConcurrencyError, ConflictError
from lifecycle.domain.shared.value_objects import (
    ISBN,
    BookId,
    CustomerId,
    Email,
    LoanId,
    MemberId,
    OrderId,
    ProductId,
    ProjectId,
    Sku,
    TagId,
    TaskId,
)
from lifecycle.domain.tasks.entities.tag import Tag
from lifecycle.domain.tasks.entities.task import Task
from lifecycle.domain.tasks.repositories import TagRepository, TaskRepository
from lifecycle.domain.tasks.value_objects import TaskStatus

logger = logging.getLogger(__name__)

A = TypeVar("A", bound=AggregateRoot)
IdT = TypeVar("IdT")


class InMemoryRepository(Repository[A, IdT], Generic[A, IdT]):
    """Dictionary-backed repository keyed by the string form of the id."""

    entity_type = "Aggregate"

    def __init__(self) -> None:
        self._items: dict[str, A] = {}

    def unique_keys(self, aggregate: A) -> dict[str, object]:
        """Business keys that must not repeat across stored aggregates."""
        return {}

    @staticmethod
    def _snapshot(aggregate: A) -> A:
        snapshot = aggregate.model_copy(deep=True)
        snapshot.pull_domain_events()
        return snapshot

    def _check_unique(self, key: str, aggregate: A) -> None:
        candidate = self.unique_keys(aggregate)
        if not candidate:
            return
        for other_key, other in self._items.items():
            if other_key == key:
                continue
            existing = self.unique_keys(other)
            for field_name, value in candidate.items():
                if existing.get(field_name) == value:
                    raise ConflictError(self.entity_type, field_name, value)

    async def save(self, aggregate: A) -> A:
        key = str(aggregate.id)
        stored = self._items.get(key)

        if stored is None:
            if aggregate.version != 0:
                raise ConcurrencyError(self.entity_type, key, aggregate.version, 0)
        elif aggregate.version == 0:
            raise ConflictError(self.entity_type, "id", key)
        elif aggregate.version != stored.version:
            raise ConcurrencyError(
                self.entity_type, key, aggregate.version, stored.version
            )

        self._check_unique(key, aggregate)

        aggregate.version = aggregate.version + 1
        self._items[key] = self._snapshot(aggregate)
        logger.debug(f"Saved {self.entity_type} {key} at version {aggregate.version}")
        return aggregate

    async def find_by_id(self, aggregate_id: IdT) -> A | None:
        stored = self._items.get(str(aggregate_id))
        return stored.model_copy(deep=True) if stored is not None else None

    async def delete(self, aggregate_id: IdT) -> bool:
        return self._items.pop(str(aggregate_id), None) is not None

    async def list_all(self) -> list[A]:
        return [item.model_copy(deep=True) for item in self._items.values()]

    def _select(self, predicate) -> list[A]:
        return [
            item.model_copy(deep=True)
            for item in self._items.values()
            if predicate(item)
        ]

    def count(self) -> int:
        return len(self._items)


class InMemoryBookRepository(InMemoryRepository[Book, BookId], BookRepository):
    entity_type = "Book"

    def unique_keys(self, aggregate: Book) -> dict[str, object]:
        return {"isbn": aggregate.isbn.value}

    async def find_by_isbn(self, isbn: ISBN) -> Book | None:
        found = self._select(lambda b: b.isbn == isbn)
        return found[0] if found else None

    async def find_available(self) -> list[Book]:
        books = self._select(lambda b: b.status == BookStatus.AVAILABLE)
        return sorted(books, key=lambda b: b.title.casefold())


class InMemoryLoanRepository(InMemoryRepository[Loan, LoanId], LoanRepository):
    entity_type = "Loan"

    async def find_by_member(self, member_id: MemberId) -> list[Loan]:
        loans = self._select(lambda loan: loan.member_id == member_id)
        return sorted(loans, key=lambda loan: loan.period.start)

    async def find_active_by_member(self, member_id: MemberId) -> list[Loan]:
        return [loan for loan in await self.find_by_member(member_id) if loan.is_active]

    async def find_overdue(self, as_of: datetime) -> list[Loan]:
        loans = self._select(lambda loan: loan.is_overdue(as_of))
        return sorted(loans, key=lambda loan: loan.due_date)


class InMemoryMemberRepository(InMemoryRepository[Member, MemberId], MemberRepository):
    entity_type = "Member"

    def unique_keys(self, aggregate: Member) -> dict[str, object]:
        return {"email": aggregate.email.value}

    async def find_by_email(self, email: Email) -> Member | None:
        found = self._select(lambda m: m.email == email)
        return found[0] if found else None


class InMemoryOrderRepository(InMemoryRepository[Order, OrderId], OrderRepository):
    entity_type = "Order"

    async def find_by_customer(self, customer_id: CustomerId) -> list[Order]:
        orders = self._select(lambda o: o.customer_id == customer_id)
        return sorted(orders, key=lambda o: o.created_at)

    async def find_by_status(self, status: OrderStatus) -> list[Order]:
        orders = self._select(lambda o: o.status == status)
        return sorted(orders, key=lambda o: o.created_at)


class InMemoryProductRepository(InMemoryRepository[Product, ProductId], ProductRepository):
    entity_type = "Product"

    def unique_keys(self, aggregate: Product) -> dict[str, object]:
        return {"sku": aggregate.sku.value}

    async def find_by_sku(self, sku: Sku) -> Product | None:
        found = self._select(lambda p: p.sku == sku)
        return found[0] if found else None

    async def find_low_stock(self) -> list[Product]:
        products = self._select(lambda p: p.is_low_stock)
        return sorted(products, key=lambda p: (p.stock, p.sku.value))


class InMemoryTaskRepository(InMemoryRepository[Task, TaskId], TaskRepository):
    entity_type = "Task"

    @staticmethod
    def _order(tasks: list[Task]) -> list[Task]:
        return sorted(tasks, key=lambda t: (-t.priority.rank, t.created_at))

    async def find_by_project(self, project_id: ProjectId) -> list[Task]:
        return self._order(self._select(lambda t: t.project_id == project_id))

    async def find_by_status(self, status: TaskStatus) -> list[Task]:
        return self._order(self._select(lambda t: t.status == status))

    async def find_by_tag(self, tag_id: TagId) -> list[Task]:
        return self._order(self._select(lambda t: tag_id in t.tag_ids))


class InMemoryTagRepository(InMemoryRepository[Tag, TagId], TagRepository):
    entity_type = "Tag"

    def unique_keys(self, aggregate: Tag) -> dict[str, object]:
        return {"name": aggregate.unique_name}

    async def find_by_name(self, name: str) -> Tag | None:
        wanted = name.strip().casefold()
        found = self._select(lambda t: t.unique_name == wanted)
        return found[0] if found else None

    async def list_all(self) -> list[Tag]:
        return sorted(await super().list_all(), key=lambda t: t.unique_name)
