"""
Result types for parsing boundaries.

Raw input (HTTP bodies, CLI arguments) is turned into commands and value
objects through Result so callers can collect failures without try/except.
Inside the domain, errors are raised.

Examples:
    >>> result = attempt(Email.of, "reader@example.com")
    >>> if result.is_success():
    ...     print(result.value)
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from .exceptions import DomainError

T = TypeVar("T")
E = TypeVar("E", bound=DomainError)


class Result(Generic[T, E], ABC):
    """Success or failure of a parsing step."""

    @abstractmethod
    def is_success(self) -> bool:
        """Check if result represents success."""

    @abstractmethod
    def is_failure(self) -> bool:
        """Check if result represents failure."""

    @abstractmethod
    def unwrap(self) -> T:
        """Return the value or raise the carried error."""


class Success(Result[T, E]):
    """Success result containing a value."""

    def __init__(self, value: T) -> None:
        self.value = value

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def __repr__(self) -> str:
        return f"Success({self.value!r})"


class Failure(Result[T, E]):
    """Failure result containing an error."""

    def __init__(self, error: E) -> None:
        self.error = error

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def unwrap(self) -> T:
        raise self.error

    def __repr__(self) -> str:
        return f"Failure({self.error!r})"


def attempt(factory: Callable[..., T], *args: Any, **kwargs: Any) -> Result[T, DomainError]:
    """Run a factory, turning a raised DomainError into a Failure."""
    try:
        return Success(factory(*args, **kwargs))
    except DomainError as e:
        return Failure(e)
