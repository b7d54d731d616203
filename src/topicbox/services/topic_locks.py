"""Per-topic writer serialization for entry creation.

The uniqueness check reads existing entries and then writes the new one. Holding
the topic's lock across read, check, write and commit prevents two submissions
in this process from both passing the check. Duplicates racing from other
processes are rejected by the entries table's unique constraints.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Hashable


class TopicLocks:
    """Registry of asyncio locks keyed by topic id.

    Locks are created on demand and dropped once nobody holds or awaits them, so
    the registry does not grow with the number of topics ever seen.
    """

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._users: dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)
