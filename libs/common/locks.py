"""In-process keyed locks.

Serializes coroutines that touch the same logical resource (e.g. a product's
stock) within one worker process. Cross-process safety still has to come from
the database (row locks / conditional updates); these locks only stop two
requests in the same event loop from interleaving their read-then-write steps.

A key's lock lives only while some coroutine holds or waits on it, so the
registry stays bounded by in-flight requests rather than total keys seen.

Usage:
    from libs.common.locks import product_locks

    async with product_locks.hold([3, 1, 2]):
        ...
"""

import asyncio
from collections.abc import Hashable, Iterable
from contextlib import AsyncExitStack, asynccontextmanager


class KeyedLocks:
    """A registry of asyncio locks created on demand, one per key."""

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._users: dict[Hashable, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def _hold_one(self, key: Hashable):
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._users.get(key, 1) - 1
            if remaining:
                self._users[key] = remaining
            else:
                self._users.pop(key, None)
                self._locks.pop(key, None)

    @asynccontextmanager
    async def hold(self, keys: Iterable[Hashable]):
        """Acquire the locks for all keys, in sorted order to avoid deadlocks."""
        async with AsyncExitStack() as stack:
            for key in sorted(set(keys)):
                await stack.enter_async_context(self._hold_one(key))
            yield

    def clear(self) -> None:
        self._locks.clear()
        self._users.clear()


product_locks = KeyedLocks()
