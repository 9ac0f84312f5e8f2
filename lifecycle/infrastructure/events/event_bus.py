"""
Event bus implementation for domain event publishing and subscription.

Handlers subscribe by event name (``"order.paid"``) or by event class, or
to ``"*"`` for every event. Events are dispatched in the order they are
published, and a failing handler never stops the remaining ones.
"""

import inspect
import logging
from abc import ABC, abstractmethod
from collections import defaultdict, deque
from collections.abc import Awaitable, Callable, Iterable

from lifecycle.core.observability import EVENT_HANDLER_FAILURES, EVENTS_PUBLISHED
from lifecycle.domain.shared.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None | Awaitable[None]]
EventKey = str | type[DomainEvent]

ALL_EVENTS = "*"


def _event_name(key: EventKey) -> str:
    if isinstance(key, str):
        return key
    return key.name


def handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", type(handler).__name__)


class EventBus(ABC):
    """Contract for publishing events and subscribing handlers to them."""

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        """
        Publish a domain event to all registered handlers.

        Args:
            event: Domain event to publish
        """

    async def publish_all(self, events: Iterable[DomainEvent]) -> None:
        """Publish events one by one, preserving their order."""
        for event in events:
            await self.publish(event)

    @abstractmethod
    def subscribe(self, event: EventKey, handler: EventHandler) -> None:
        """
        Subscribe a handler to an event name.

        Args:
            event: Event name, event class, or ``"*"`` for every event
            handler: Sync or async callable receiving the event
        """

    @abstractmethod
    def unsubscribe(self, event: EventKey, handler: EventHandler) -> None:
        """Remove a previously subscribed handler."""

    @abstractmethod
    def clear_handlers(self, event: EventKey | None = None) -> None:
        """Clear handlers for one event name, or all of them."""


class InMemoryEventBus(EventBus):
    """
    In-process event bus.

    Async handlers are awaited in subscription order. Every published event
    is kept in a bounded history for inspection.
    """

    def __init__(self, max_history_size: int = 1000) -> None:
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)
        self._event_history: deque[DomainEvent] = deque(maxlen=max_history_size)

    async def publish(self, event: DomainEvent) -> None:
        self._event_history.append(event)
        EVENTS_PUBLISHED.labels(event_name=event.name).inc()

        handlers = [*self._handlers.get(event.name, []), *self._handlers.get(ALL_EVENTS, [])]
        if not handlers:
            logger.debug(f"No handlers registered for event {event.name}")
            return

        logger.info(f"Publishing event {event.name} to {len(handlers)} handlers")

        for handler in handlers:
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
                logger.debug(f"Successfully handled event {event.name} with {handler}")
            except Exception as e:
                EVENT_HANDLER_FAILURES.labels(
                    event_name=event.name, handler=handler_name(handler)
                ).inc()
                logger.error(
                    f"Error handling event {event.name} with {handler}: {str(e)}",
                    exc_info=True,
                )
                # Continue with other handlers even if one fails

    def subscribe(self, event: EventKey, handler: EventHandler) -> None:
        name = _event_name(event)
        if handler not in self._handlers[name]:
            self._handlers[name].append(handler)
            logger.info(f"Subscribed handler {handler} to event {name}")
        else:
            logger.warning(f"Handler {handler} already subscribed to event {name}")

    def unsubscribe(self, event: EventKey, handler: EventHandler) -> None:
        name = _event_name(event)
        if handler in self._handlers.get(name, []):
            self._handlers[name].remove(handler)
            logger.info(f"Unsubscribed handler {handler} from event {name}")
        else:
            logger.warning(f"Handler {handler} not found for event {name}")

    def clear_handlers(self, event: EventKey | None = None) -> None:
        if event is None:
            self._handlers.clear()
            logger.info("Cleared all event handlers")
        else:
            name = _event_name(event)
            self._handlers.pop(name, None)
            logger.info(f"Cleared handlers for event {name}")

    def get_handler_count(self, event: EventKey) -> int:
        return len(self._handlers.get(_event_name(event), []))

    def get_event_history(self, event: EventKey | None = None) -> list[DomainEvent]:
        """Published events, oldest first, optionally filtered by name."""
        if event is None:
            return list(self._event_history)
        name = _event_name(event)
        return [e for e in self._event_history if e.name == name]

    def clear_history(self) -> None:
        self._event_history.clear()
