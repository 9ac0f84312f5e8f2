"""
Transition tables.

Each aggregate declares its lifecycle as a static mapping from a status to
the statuses it may move to. Behavior methods consult the table before
touching any state, so an illegal request leaves the aggregate untouched.
"""

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Generic, TypeVar

from .exceptions import InvalidTransitionError

S = TypeVar("S", bound=Enum)


class TransitionTable(Generic[S]):
    """Allowed transitions for one status enum."""

    def __init__(self, transitions: Mapping[S, Iterable[S]]) -> None:
        table = {source: frozenset(targets) for source, targets in transitions.items()}
        for source, targets in table.items():
            unknown = targets - table.keys()
            if unknown:
                names = ", ".join(sorted(t.value for t in unknown))
                raise ValueError(
                    f"Transition table for {source!r} targets undeclared statuses: {names}"
                )
        self._table = table

    def statuses(self) -> frozenset[S]:
        return frozenset(self._table)

    def allowed_from(self, status: S) -> frozenset[S]:
        return self._table.get(status, frozenset())

    def can_transition(self, source: S, target: S) -> bool:
        return target in self.allowed_from(source)

    def is_terminal(self, status: S) -> bool:
        return not self.allowed_from(status)

    def ensure(
        self,
        source: S,
        target: S,
        *,
        entity_type: str,
        entity_id: object,
        action: str,
    ) -> None:
        """Raise InvalidTransitionError unless source -> target is declared."""
        if not self.can_transition(source, target):
            raise InvalidTransitionError(
                entity_type,
                entity_id,
                source.value,
                action,
                details={"target_status": target.value},
            )
