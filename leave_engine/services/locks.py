"""In-process serialization of mutations that share a key.

Requests handled by one worker acquire a per-key asyncio.Lock for the whole
check-then-write unit. Cross-worker serialization is provided by the database
(row locks and conditional updates); this lock makes the same guarantee hold
on backends without row locking, such as SQLite.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager


class KeyedLock:
    """A family of asyncio locks, one per key, dropped when no longer held or awaited."""

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._waiters: dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


submission_locks = KeyedLock()
