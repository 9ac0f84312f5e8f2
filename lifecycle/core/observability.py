"""
Observability Infrastructure

Structured logging with correlation tracking, plus Prometheus counters for
use case executions and published domain events.
"""

import contextlib
import contextvars
import functools
import logging
import sys
import time
import uuid
from collections.abc import Callable, Iterator
from typing import Any, TypeVar

import structlog
from prometheus_client import Counter, Histogram

from .config import Settings

# Context variables for correlation tracking
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)

F = TypeVar("F", bound=Callable[..., Any])

USE_CASE_EXECUTIONS = Counter(
    "lifecycle_use_case_executions_total",
    "Total use case executions",
    ["use_case", "status"],
)

USE_CASE_DURATION = Histogram(
    "lifecycle_use_case_duration_seconds",
    "Use case execution duration",
    ["use_case"],
)

EVENTS_PUBLISHED = Counter(
    "lifecycle_domain_events_published_total",
    "Domain events published on the bus",
    ["event_name"],
)

EVENT_HANDLER_FAILURES = Counter(
    "lifecycle_event_handler_failures_total",
    "Event handlers that raised while handling a published event",
    ["event_name", "handler"],
)


class CorrelationIdProcessor:
    """Structlog processor to add correlation ID to all log entries."""

    def __call__(
        self, logger: Any, name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        correlation_id = correlation_id_var.get("")
        if correlation_id:
            event_dict["correlation_id"] = correlation_id
        return event_dict


def setup_structured_logging(settings: Settings) -> None:
    """Configure structured logging with JSON or console output."""
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        CorrelationIdProcessor(),
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
    ]

    if settings.LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(colors=settings.ENVIRONMENT == "local")
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set correlation ID for request tracking."""
    if not correlation_id:
        correlation_id = str(uuid.uuid4())
    correlation_id_var.set(correlation_id)
    return correlation_id


def get_correlation_id() -> str:
    """Get current correlation ID."""
    return correlation_id_var.get("")


@contextlib.contextmanager
def correlation_scope(correlation_id: str) -> Iterator[str]:
    """Bind a correlation ID for the enclosed block, restoring the previous one on exit."""
    token = correlation_id_var.set(correlation_id)
    try:
        yield correlation_id
    finally:
        correlation_id_var.reset(token)


def monitor_use_case(use_case: str):
    """Decorator recording duration and outcome of an async use case call."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            start = time.perf_counter()
            status = "success"
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                status = type(e).__name__
                raise
            finally:
                USE_CASE_EXECUTIONS.labels(use_case=use_case, status=status).inc()
                USE_CASE_DURATION.labels(use_case=use_case).observe(
                    time.perf_counter() - start
                )

        return wrapper  # type: ignore[return-value]

    return decorator
