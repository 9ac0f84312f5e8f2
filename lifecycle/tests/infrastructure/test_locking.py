import asyncio

import pytest

from lifecycle.application.commands import CancelOrderCommand
from lifecycle.domain.sales import CreditCardStrategy, CryptoStrategy
from lifecycle.domain.shared.exceptions import NotFoundError
from lifecycle.domain.shared.value_objects import BookId, Money, OrderId
from lifecycle.infrastructure.ids import SequentialIdGenerator, UuidIdGenerator
from lifecycle.infrastructure.locking import AggregateLocks
from lifecycle.infrastructure.payments import InMemoryPaymentGateway


class TestAggregateLocks:
    @pytest.mark.asyncio
    async def test_hold_serializes_same_key(self):
        locks = AggregateLocks()
        order: list[str] = []

        async def worker(name: str) -> None:
            async with locks.hold("Book:1"):
                order.append(f"{name}-in")
                await asyncio.sleep(0)
                order.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))

        assert order == ["a-in", "a-out", "b-in", "b-out"]

    @pytest.mark.asyncio
    async def test_opposite_acquisition_order_does_not_deadlock(self):
        locks = AggregateLocks()

        async def worker(*keys: str) -> str:
            async with locks.hold(*keys):
                await asyncio.sleep(0)
            return "done"

        results = await asyncio.wait_for(
            asyncio.gather(worker("Book:1", "Member:1"), worker("Member:1", "Book:1")),
            timeout=1,
        )
        assert results == ["done", "done"]

    @pytest.mark.asyncio
    async def test_released_after_error(self):
        locks = AggregateLocks()
        with pytest.raises(RuntimeError):
            async with locks.hold("Loan:1", None):
                assert locks.is_locked("Loan:1")
                raise RuntimeError("boom")
        assert not locks.is_locked("Loan:1")

    @pytest.mark.asyncio
    async def test_registry_is_empty_after_hold(self):
        locks = AggregateLocks()
        async with locks.hold("Book:1", "Member:1"):
            assert len(locks) == 2
        assert len(locks) == 0

        with pytest.raises(RuntimeError):
            async with locks.hold("Loan:1"):
                raise RuntimeError("boom")
        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_entry_survives_while_a_waiter_remains(self):
        locks = AggregateLocks()
        sizes: list[int] = []

        async def worker() -> None:
            async with locks.hold("Book:1"):
                await asyncio.sleep(0)
                sizes.append(len(locks))

        await asyncio.gather(worker(), worker(), worker())

        assert sizes == [1, 1, 1]
        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_cancelled_waiter_leaves_no_entry(self):
        locks = AggregateLocks()
        async with locks.hold("Book:1"):
            waiter = asyncio.ensure_future(locks.hold("Book:1").__aenter__())
            await asyncio.sleep(0)
            waiter.cancel()
            with pytest.raises(asyncio.CancelledError):
                await waiter
        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_not_found_commands_leave_no_locks(self, container):
        for n in range(50):
            with pytest.raises(NotFoundError):
                await container.cancel_order.execute(CancelOrderCommand(order_id=f"missing-{n}"))
        assert len(container.locks) == 0


class TestIdGenerators:
    def test_sequential(self):
        ids = SequentialIdGenerator()
        assert ids.new(BookId).value == "book-1"
        assert ids.new(BookId).value == "book-2"
        assert ids.new(OrderId).value == "order-1"

    def test_uuid(self):
        ids = UuidIdGenerator()
        assert ids.new(BookId) != ids.new(BookId)


class TestInMemoryPaymentGateway:
    @pytest.mark.asyncio
    async def test_approves_by_default(self):
        gateway = InMemoryPaymentGateway()
        receipt = await gateway.charge(
            OrderId.of("order-1"), Money.of(1000, "EUR"), CreditCardStrategy()
        )
        assert receipt.approved
        assert receipt.transaction_id.startswith(CreditCardStrategy().transaction_prefix())
        assert gateway.charges == [("order-1", Money.of(1000, "EUR"), "CreditCard")]

    @pytest.mark.asyncio
    async def test_declines_configured_method(self):
        gateway = InMemoryPaymentGateway()
        gateway.decline_method("crypto")
        receipt = await gateway.charge(
            OrderId.of("order-1"), Money.of(1000, "EUR"), CryptoStrategy()
        )
        assert not receipt.approved
        assert receipt.transaction_id is None
        assert "declined" in receipt.reason
