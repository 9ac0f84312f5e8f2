"""
Application wiring.

``build_container`` creates every adapter and use case once and subscribes
the event policies. Nothing here is a module-level singleton; callers keep
the container they built and pass it where it is needed.
"""

from dataclasses import dataclass, field
from typing import Any

from lifecycle.application.services import library, sales, tasks
from lifecycle.core.clock import Clock, SystemClock
from lifecycle.core.config import Settings
from lifecycle.domain.library.events import BookLoaned, BookReturned
from lifecycle.domain.library.services import PenaltyCalculator
from lifecycle.domain.sales.payments import PaymentStrategyRegistry
from lifecycle.domain.tasks.events import TagDeleted
from lifecycle.infrastructure.events.event_bus import InMemoryEventBus
from lifecycle.infrastructure.ids import IdGenerator, UuidIdGenerator
from lifecycle.infrastructure.locking import AggregateLocks
from lifecycle.infrastructure.payments import InMemoryPaymentGateway
from lifecycle.infrastructure.persistence.in_memory import (
    InMemoryBookRepository,
    InMemoryLoanRepository,
    InMemoryMemberRepository,
    InMemoryOrderRepository,
    InMemoryProductRepository,
    InMemoryTagRepository,
    InMemoryTaskRepository,
)


@dataclass
class Repositories:
    books: InMemoryBookRepository = field(default_factory=InMemoryBookRepository)
    loans: InMemoryLoanRepository = field(default_factory=InMemoryLoanRepository)
    members: InMemoryMemberRepository = field(default_factory=InMemoryMemberRepository)
    orders: InMemoryOrderRepository = field(default_factory=InMemoryOrderRepository)
    products: InMemoryProductRepository = field(default_factory=InMemoryProductRepository)
    tasks: InMemoryTaskRepository = field(default_factory=InMemoryTaskRepository)
    tags: InMemoryTagRepository = field(default_factory=InMemoryTagRepository)


class Container:
    """Holds the adapters and use cases of one running application."""

    def __init__(
        self,
        settings: Settings,
        clock: Clock | None = None,
        ids: IdGenerator | None = None,
        repositories: Repositories | None = None,
    ) -> None:
        self.settings = settings
        self.clock = clock or SystemClock()
        self.ids = ids or UuidIdGenerator()
        self.repositories = repositories or Repositories()
        self.event_bus = InMemoryEventBus(max_history_size=settings.EVENT_HISTORY_SIZE)
        self.locks = AggregateLocks()
        self.payment_gateway = InMemoryPaymentGateway()
        self.payment_strategies = PaymentStrategyRegistry()
        self.penalty_calculator = PenaltyCalculator(
            penalty_days_per_overdue_day=settings.PENALTY_DAYS_PER_OVERDUE_DAY,
            fine_per_day=settings.PENALTY_FINE_PER_DAY,
            currency=settings.PENALTY_CURRENCY,
        )

        deps: dict[str, Any] = {
            "event_bus": self.event_bus,
            "clock": self.clock,
            "locks": self.locks,
            "ids": self.ids,
        }
        repos = self.repositories
        limit = settings.MAX_ACTIVE_LOANS

        # Library
        self.register_book = library.RegisterBook(repos.books, **deps)
        self.register_member = library.RegisterMember(
            repos.members, max_active_loans=limit, **deps
        )
        self.loan_book = library.LoanBook(
            repos.books,
            repos.members,
            repos.loans,
            loan_days=settings.LOAN_PERIOD_DAYS,
            max_active_loans=limit,
            **deps,
        )
        self.return_book = library.ReturnBook(repos.loans, **deps)
        self.get_member = library.GetMember(repos.members, max_active_loans=limit, **deps)
        self.get_member_loans = library.GetMemberLoans(repos.members, repos.loans, **deps)
        self.list_overdue_loans = library.ListOverdueLoans(repos.loans, **deps)

        # Sales
        currency = settings.DEFAULT_CURRENCY
        self.place_order = sales.PlaceOrder(repos.orders, default_currency=currency, **deps)
        self.pay_order = sales.PayOrder(
            repos.orders,
            self.payment_gateway,
            strategies=self.payment_strategies,
            **deps,
        )
        self.cancel_order = sales.CancelOrder(repos.orders, **deps)
        self.ship_order = sales.ShipOrder(repos.orders, **deps)
        self.deliver_order = sales.DeliverOrder(repos.orders, **deps)
        self.get_order = sales.GetOrder(repos.orders, **deps)
        self.list_customer_orders = sales.ListCustomerOrders(repos.orders, **deps)
        self.compare_payment_fees = sales.ComparePaymentFees(
            strategies=self.payment_strategies, default_currency=currency, **deps
        )
        self.add_product = sales.AddProduct(
            repos.products,
            default_currency=currency,
            low_stock_threshold=settings.LOW_STOCK_THRESHOLD,
            **deps,
        )
        self.adjust_stock = sales.AdjustStock(repos.products, **deps)
        self.update_product_price = sales.UpdateProductPrice(repos.products, **deps)
        self.get_product = sales.GetProduct(repos.products, **deps)
        self.list_low_stock_products = sales.ListLowStockProducts(repos.products, **deps)

        # Tasks
        self.create_task = tasks.CreateTask(repos.tasks, repos.tags, **deps)
        self.change_task_status = tasks.ChangeTaskStatus(repos.tasks, **deps)
        self.update_task_details = tasks.UpdateTaskDetails(repos.tasks, **deps)
        self.add_tag_to_task = tasks.AddTagToTask(repos.tasks, repos.tags, **deps)
        self.remove_tag_from_task = tasks.RemoveTagFromTask(repos.tasks, **deps)
        self.get_task = tasks.GetTask(repos.tasks, **deps)
        self.list_project_tasks = tasks.ListProjectTasks(repos.tasks, **deps)
        self.create_tag = tasks.CreateTag(repos.tags, **deps)
        self.rename_tag = tasks.RenameTag(repos.tags, **deps)
        self.delete_tag = tasks.DeleteTag(repos.tags, **deps)
        self.list_tags = tasks.ListTags(repos.tags, **deps)

        self._subscribe_policies(deps)

    def _subscribe_policies(self, deps: dict[str, Any]) -> None:
        repos = self.repositories
        bus = self.event_bus

        bus.subscribe(BookLoaned, library.MarkBookBorrowedOnLoan(repos.books, **deps))
        bus.subscribe(
            BookLoaned,
            library.OpenMemberLoanOnLoan(
                repos.members, max_active_loans=self.settings.MAX_ACTIVE_LOANS, **deps
            ),
        )
        bus.subscribe(BookReturned, library.ReleaseBookOnReturn(repos.books, **deps))
        bus.subscribe(
            BookReturned,
            library.CloseMemberLoanOnReturn(
                repos.members, self.penalty_calculator, **deps
            ),
        )
        bus.subscribe(TagDeleted, tasks.RemoveDeletedTagFromTasks(repos.tasks, **deps))


def build_container(
    settings: Settings | None = None,
    clock: Clock | None = None,
    ids: IdGenerator | None = None,
) -> Container:
    return Container(settings or Settings(), clock=clock, ids=ids)
