"""Base classes for value objects, entities, aggregates and domain events."""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ValidationError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_domain_error(owner: str, exc: PydanticValidationError) -> ValidationError:
    """Translate the first pydantic error into a domain ValidationError."""
    error = exc.errors()[0]
    loc = ".".join(str(part) for part in error.get("loc", ())) or owner
    message = error.get("msg", str(exc))
    # pydantic prefixes messages raised from validators
    if message.startswith("Value error, "):
        message = message[len("Value error, ") :]
    return ValidationError(loc, error.get("input"), message)


class ValueObject(BaseModel):
    """Base class for value objects (immutable, defined by their values)."""

    model_config = ConfigDict(frozen=True)

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except PydanticValidationError as e:
            raise to_domain_error(type(self).__name__, e) from e

    def equals(self, other: Any) -> bool:
        """Value objects are equal if all their attributes are equal."""
        return isinstance(other, self.__class__) and self == other


class DomainEvent(BaseModel):
    """
    Immutable record of something that happened to an aggregate.

    Concrete events set ``name`` to a namespaced identifier such as
    ``order.paid`` and declare their payload as primitive fields.
    """

    model_config = ConfigDict(frozen=True)

    name: ClassVar[str] = "domain.event"

    event_id: UUID = Field(default_factory=uuid4)
    occurred_at: datetime = Field(default_factory=_utcnow)
    aggregate_id: str

    def payload(self) -> dict[str, Any]:
        return self.model_dump(
            mode="json", exclude={"event_id", "occurred_at", "aggregate_id"}
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.event_id),
            "name": self.name,
            "occurred_at": self.occurred_at.isoformat(),
            "aggregate_id": self.aggregate_id,
            "payload": self.payload(),
        }


class Entity(BaseModel):
    """Base class for entities (have identity, can change over time)."""

    model_config = ConfigDict(validate_assignment=True)

    id: Any
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime | None = None

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except PydanticValidationError as e:
            raise to_domain_error(type(self).__name__, e) from e

    def __eq__(self, other: Any) -> bool:
        """Entities are equal if they have the same ID and type."""
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash((self.__class__.__name__, str(self.id)))

    def mark_updated(self, at: datetime) -> None:
        self.updated_at = at


class AggregateRoot(Entity):
    """
    Consistency boundary with a transient buffer of pending domain events.

    Behavior methods validate first, then mutate, then record events with
    ``_record``. Callers drain the buffer with ``pull_domain_events`` after
    a successful save; the buffer is never persisted.
    """

    version: int = 0

    _pending_events: list[DomainEvent] = PrivateAttr(default_factory=list)

    def _record(self, event: DomainEvent) -> None:
        self._pending_events.append(event)

    def pull_domain_events(self) -> list[DomainEvent]:
        """Return pending events in emission order and clear the buffer."""
        events = list(self._pending_events)
        self._pending_events.clear()
        return events

    def peek_domain_events(self) -> list[DomainEvent]:
        return list(self._pending_events)

    @property
    def has_pending_events(self) -> bool:
        return bool(self._pending_events)

    def _transition(
        self, table: Any, target: Enum, *, action: str, at: datetime
    ) -> Enum:
        """Move ``status`` to ``target`` if the table allows it; return the old status."""
        previous = self.status  # type: ignore[attr-defined]
        table.ensure(
            previous,
            target,
            entity_type=type(self).__name__,
            entity_id=self.id,
            action=action,
        )
        self.status = target  # type: ignore[attr-defined]
        self.mark_updated(at)
        return previous


AggregateT = TypeVar("AggregateT", bound=AggregateRoot)
IdT = TypeVar("IdT")


class Repository(ABC, Generic[AggregateT, IdT]):
    """Persistence port for one aggregate type."""

    @abstractmethod
    async def save(self, aggregate: AggregateT) -> AggregateT:
        """Persist the aggregate; raises ConflictError or ConcurrencyError."""

    @abstractmethod
    async def find_by_id(self, aggregate_id: IdT) -> AggregateT | None:
        """Find an aggregate by its id."""

    @abstractmethod
    async def delete(self, aggregate_id: IdT) -> bool:
        """Delete an aggregate by its id."""

    async def exists(self, aggregate_id: IdT) -> bool:
        return await self.find_by_id(aggregate_id) is not None


class DomainService(ABC):
    """Base class for domain services (logic that doesn't belong to a single aggregate)."""
