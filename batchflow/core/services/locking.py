"""
In-process per-entity locks.

The database transaction is what guarantees atomicity; these locks keep
concurrent coroutines in one process from queueing on the SQLite write
lock for the same batch or purchase order.
"""

import asyncio
import weakref
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager


class KeyedLockRegistry:
    """asyncio.Lock per key, created on demand and dropped when unused."""

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    @asynccontextmanager
    async def hold(self, *keys: str) -> AsyncIterator[None]:
        """
        Hold the locks for every key.

        Keys are deduplicated and acquired in sorted order so two callers
        locking overlapping sets cannot deadlock.
        """
        async with AsyncExitStack() as stack:
            for key in sorted(set(keys)):
                await stack.enter_async_context(self._lock_for(key))
            yield

    def is_locked(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()


def batch_key(batch_id: str) -> str:
    return f"batch:{batch_id}"


def po_key(po_id: str) -> str:
    return f"po:{po_id}"
