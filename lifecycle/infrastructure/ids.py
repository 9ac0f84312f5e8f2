import itertools
import uuid
from typing import Protocol, TypeVar

from lifecycle.domain.shared.value_objects import Identifier

IdT = TypeVar("IdT", bound=Identifier)


class IdGenerator(Protocol):
    def new(self, id_type: type[IdT]) -> IdT: ...


class UuidIdGenerator:
    def new(self, id_type: type[IdT]) -> IdT:
        return id_type(value=str(uuid.uuid4()))


class SequentialIdGenerator:
    """Readable, predictable ids such as ``loan-1``; handy in tests and demos."""

    def __init__(self) -> None:
        self._counters: dict[str, itertools.count] = {}

    def new(self, id_type: type[IdT]) -> IdT:
        prefix = id_type.__name__.removesuffix("Id").lower() or "id"
        counter = self._counters.setdefault(prefix, itertools.count(1))
        return id_type(value=f"{prefix}-{next(counter)}")
