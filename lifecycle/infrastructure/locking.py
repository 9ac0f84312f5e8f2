"""Per-aggregate serialization for use cases running on one event loop."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.users = 0


class AggregateLocks:
    """
    One asyncio.Lock per aggregate id.

    ``hold`` takes several ids at once and always acquires them in sorted
    order, so two use cases touching the same pair of aggregates cannot
    deadlock each other. An entry lives only while some ``hold`` is holding
    or waiting on it.
    """

    def __init__(self) -> None:
        self._locks: dict[str, _Entry] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def _checkout(self, key: str) -> _Entry:
        entry = self._locks.get(key)
        if entry is None:
            entry = self._locks[key] = _Entry()
        entry.users += 1
        return entry

    def _checkin(self, key: str, entry: _Entry) -> None:
        entry.users -= 1
        if entry.users == 0 and self._locks.get(key) is entry:
            del self._locks[key]

    @asynccontextmanager
    async def hold(self, *keys: object) -> AsyncIterator[None]:
        ordered = sorted({str(k) for k in keys if k is not None})
        checked_out: list[tuple[str, _Entry]] = []
        acquired: list[asyncio.Lock] = []
        try:
            for key in ordered:
                entry = self._checkout(key)
                checked_out.append((key, entry))
                await entry.lock.acquire()
                acquired.append(entry.lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            for key, entry in reversed(checked_out):
                self._checkin(key, entry)

    def is_locked(self, key: object) -> bool:
        entry = self._locks.get(str(key))
        return entry is not None and entry.lock.locked()
