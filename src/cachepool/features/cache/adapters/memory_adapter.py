"""Memory cache pool adapter for cachepool."""

import asyncio
import logging
from typing import Any, Dict, Optional

from .stores import MemoryStore, get_memory_store
from ..entities.cache_item import CacheItem
from ..entities.item_pool import CacheItemPool, DEFAULT_NAMESPACE
from ..entities.protocols import ErrorPolicy

logger = logging.getLogger(__name__)


class MemoryAdapter(CacheItemPool):
    """Just-in-time memory cache pool.

    All memory pools in a process share one ``MemoryStore``; entries are
    keyed ``<namespace>:<key>`` so namespaces stay apart. Expired entries are
    removed by the store sweep, or on access when the sweep has not caught
    them yet.
    """

    error_policies: Dict[str, ErrorPolicy] = {
        "get_item": ErrorPolicy.SWALLOW,
        "has_item": ErrorPolicy.SWALLOW,
        "save": ErrorPolicy.SWALLOW,
        "delete_item": ErrorPolicy.SWALLOW,
        "clear": ErrorPolicy.SWALLOW,
    }

    def __init__(
        self,
        namespace: Optional[str] = DEFAULT_NAMESPACE,
        default_lifetime: Any = None,
        store: Optional[MemoryStore] = None,
    ):
        super().__init__(namespace, default_lifetime)
        self._store = store if store is not None else get_memory_store()
        self._store.start_sweeper()

    @property
    def store(self) -> MemoryStore:
        return self._store

    def get_adapter_name(self) -> str:
        return "memory"

    def _store_key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def _touch(self) -> None:
        self._store.start_sweeper()
        await asyncio.sleep(0)

    async def get_item(self, key: Any) -> CacheItem:
        key = self._normalize_key(key)
        await self._touch()
        store_key = self._store_key(key)
        stored = self._store.get(store_key)
        if stored is None:
            logger.debug(f"Memory cache miss: {store_key}")
            return self.new_miss(key)
        if stored.is_expired():
            self._store.delete(store_key)
            logger.debug(f"Memory cache expired: {store_key}")
            return self.new_miss(key)
        return CacheItem.from_record(
            {"key": key, "value": stored.get(), "hit": True, "expiration": stored.expiration},
            self.default_lifetime,
        )

    async def has_item(self, key: Any) -> bool:
        key = self._normalize_key(key)
        await self._touch()
        store_key = self._store_key(key)
        stored = self._store.get(store_key)
        if stored is None:
            return False
        if stored.is_expired():
            self._store.delete(store_key)
            return False
        return True

    async def save(self, item: CacheItem) -> bool:
        if not isinstance(item, CacheItem):
            return False
        await self._touch()
        self._store.set(self._store_key(item.get_key()), CacheItem.from_record(item.to_record()))
        return True

    async def commit(self) -> bool:
        """Write deferred items straight into the shared store."""
        await self._touch()
        for key, item in self._deferred.items():
            self._store.set(self._store_key(key), CacheItem.from_record(item.to_record()))
        self._deferred.clear()
        return True

    async def delete_item(self, key: Any) -> bool:
        key = self._normalize_key(key)
        await self._touch()
        self._store.delete(self._store_key(key))
        self._deferred.pop(key, None)
        return True

    async def clear(self) -> bool:
        """Remove the namespace's entries, and any expired entry met on the way."""
        self._deferred.clear()
        await self._touch()
        prefix = f"{self.namespace}:"
        for store_key in self._store.keys():
            if store_key.startswith(prefix):
                self._store.delete(store_key)
                continue
            stored = self._store.get(store_key)
            if stored is not None and stored.is_expired():
                self._store.delete(store_key)
        return True
