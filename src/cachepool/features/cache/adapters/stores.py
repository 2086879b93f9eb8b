"""Process-wide stores shared by cache adapters.

``FrontCache`` is the in-process map placed in front of the filesystem
adapter. ``MemoryStore`` is the backing map of the memory adapter together
with its expiry sweep. One instance of each is created lazily per process and
injected into adapters that are not given their own. ``reset_stores`` empties
both, for tests.
"""

import asyncio
import logging
import time
from typing import Dict, Iterator, List, Optional

from ..entities.cache_item import CacheItem

logger = logging.getLogger(__name__)


class FrontCache:
    """Bounded in-process map of recently read or written items.

    When full, the oldest entries by insertion order are dropped in one
    batch; reads do not refresh an entry's position.
    """

    MAX_ITEMS = 1000
    TRIM_COUNT = 50

    def __init__(self, max_items: int = MAX_ITEMS, trim_count: int = TRIM_COUNT):
        self.max_items = max_items
        self.trim_count = trim_count
        self._items: Dict[str, CacheItem] = {}

    def get(self, key: str) -> Optional[CacheItem]:
        return self._items.get(key)

    def put(self, key: str, item: CacheItem) -> None:
        self._items.pop(key, None)
        self._reserve()
        self._items[key] = item

    def discard(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()

    def keys(self) -> List[str]:
        return list(self._items)

    def _reserve(self) -> None:
        if len(self._items) < self.max_items:
            return
        for key in list(self._items)[:self.trim_count]:
            del self._items[key]

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)


class MemoryStore:
    """Shared item map for memory pools, keyed by ``<namespace>:<key>``.

    A single background task sweeps expired entries every
    ``sweep_interval`` seconds while an event loop is running.
    """

    SWEEP_INTERVAL = 1.0

    def __init__(self, sweep_interval: float = SWEEP_INTERVAL):
        self.sweep_interval = sweep_interval
        self._items: Dict[str, CacheItem] = {}
        self._sweeper: Optional[asyncio.Task] = None

    def get(self, key: str) -> Optional[CacheItem]:
        return self._items.get(key)

    def set(self, key: str, item: CacheItem) -> None:
        self._items[key] = item

    def delete(self, key: str) -> bool:
        return self._items.pop(key, None) is not None

    def keys(self) -> List[str]:
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()

    def sweep_expired(self, now: Optional[float] = None) -> int:
        """Delete every expired entry and return how many were removed."""
        if not self._items:
            return 0
        now = time.time() if now is None else now
        expired = [key for key, item in self._items.items() if item.is_expired(now)]
        for key in expired:
            del self._items[key]
        if expired:
            logger.debug(f"Swept {len(expired)} expired memory cache entries")
        return len(expired)

    @property
    def sweeper_running(self) -> bool:
        return self._sweeper is not None and not self._sweeper.done()

    def start_sweeper(self) -> bool:
        """Arm the sweep task on the running loop unless one is already active.

        Returns False when called outside a running event loop.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return False
        if self.sweeper_running and self._sweeper.get_loop() is loop:
            return True
        self._drop_sweeper()
        self._sweeper = loop.create_task(self._sweep_forever())
        return True

    async def stop_sweeper(self) -> None:
        """Cancel the sweep task and wait for it on its own loop."""
        task = self._sweeper
        self._sweeper = None
        if task is None or task.done():
            return
        if task.get_loop() is not asyncio.get_running_loop():
            self._cancel(task)
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    def reset(self) -> None:
        """Drop all entries and the sweep task."""
        self._items.clear()
        self._drop_sweeper()

    def _drop_sweeper(self) -> None:
        if self._sweeper is not None:
            self._cancel(self._sweeper)
        self._sweeper = None

    @staticmethod
    def _cancel(task: asyncio.Task) -> None:
        if not task.done() and not task.get_loop().is_closed():
            task.cancel()

    async def _sweep_forever(self) -> None:
        while True:
            try:
                await asyncio.sleep(self.sweep_interval)
                self.sweep_expired()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in memory cache sweep: {e}")

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._items)


_front_cache: Optional[FrontCache] = None
_memory_store: Optional[MemoryStore] = None


def get_front_cache() -> FrontCache:
    """Get the process-wide filesystem front cache."""
    global _front_cache
    if _front_cache is None:
        _front_cache = FrontCache()
    return _front_cache


def get_memory_store() -> MemoryStore:
    """Get the process-wide memory adapter store."""
    global _memory_store
    if _memory_store is None:
        _memory_store = MemoryStore()
    return _memory_store


def reset_stores() -> None:
    """Empty both process-wide stores and stop the memory sweep."""
    get_front_cache().clear()
    get_memory_store().reset()
