"""
Base use case.

Every mutating use case runs the same sequence: load the aggregate (or fail
with NotFoundError), call exactly one guarded behavior method, save, then
drain the aggregate's pending events and hand them to the bus. Events are
only published once the save has gone through.
"""

import functools
from abc import ABC
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any, TypeVar

from lifecycle.application.commands import Command
from lifecycle.core.clock import Clock
from lifecycle.core.observability import (
    correlation_scope,
    get_correlation_id,
    get_logger,
)
from lifecycle.domain.shared.base import AggregateRoot, Repository
from lifecycle.domain.shared.exceptions import NotFoundError
from lifecycle.infrastructure.events.event_bus import EventBus
from lifecycle.infrastructure.ids import IdGenerator, UuidIdGenerator
from lifecycle.infrastructure.locking import AggregateLocks

A = TypeVar("A", bound=AggregateRoot)


def correlated(
    func: Callable[..., Awaitable[Any]],
) -> Callable[..., Awaitable[Any]]:
    """Bind the command's correlation id while ``execute`` runs, then restore the previous one."""

    @functools.wraps(func)
    async def wrapper(self: "UseCase", command: Command, *args, **kwargs):
        with correlation_scope(self.correlation_id_for(command)):
            return await func(self, command, *args, **kwargs)

    return wrapper


class UseCase(ABC):
    """Shared collaborators and the load/save/publish helpers."""

    def __init__(
        self,
        event_bus: EventBus,
        clock: Clock,
        locks: AggregateLocks | None = None,
        ids: IdGenerator | None = None,
    ) -> None:
        self._event_bus = event_bus
        self._clock = clock
        self._locks = locks or AggregateLocks()
        self._ids = ids or UuidIdGenerator()
        self._logger = get_logger(type(self).__module__)

    def now(self) -> datetime:
        return self._clock.now()

    @staticmethod
    def lock_key(entity_type: str, aggregate_id: object) -> str:
        return f"{entity_type}:{aggregate_id}"

    @staticmethod
    def correlation_id_for(command: Command) -> str:
        """The caller's id wins, then one bound by an enclosing request, then the command's own."""
        return command.correlation_id or get_correlation_id() or str(command.command_id)

    async def _load_or_fail(
        self, repository: Repository[A, object], aggregate_id: object, entity_type: str
    ) -> A:
        aggregate = await repository.find_by_id(aggregate_id)
        if aggregate is None:
            raise NotFoundError(entity_type, aggregate_id)
        return aggregate

    async def _publish(self, aggregate: AggregateRoot) -> int:
        events = aggregate.pull_domain_events()
        if events:
            await self._event_bus.publish_all(events)
        return len(events)

    async def _commit(self, repository: Repository[A, object], aggregate: A) -> A:
        """Save, then drain and publish. A failed save publishes nothing."""
        saved = await repository.save(aggregate)
        published = await self._publish(aggregate)
        self._logger.debug(
            "aggregate_committed",
            aggregate_type=type(aggregate).__name__,
            aggregate_id=str(aggregate.id),
            version=aggregate.version,
            events=published,
        )
        return saved
