"""Void cache pool adapter, used when caching is disabled."""

from typing import Any

from ..entities.cache_item import CacheItem
from ..entities.item_pool import CacheItemPool


class VoidAdapter(CacheItemPool):
    """Pool that stores nothing: writes succeed, reads miss."""

    def __init__(self):
        super().__init__("void")

    def get_adapter_name(self) -> str:
        return "void"

    async def get_item(self, key: Any) -> CacheItem:
        return CacheItem(self._normalize_key(key), None, False, None, None)

    async def has_item(self, key: Any) -> bool:
        return False

    async def save(self, item: CacheItem) -> bool:
        return isinstance(item, CacheItem)

    async def save_deferred(self, item: CacheItem) -> bool:
        return isinstance(item, CacheItem)

    async def commit(self) -> bool:
        return True

    async def delete_item(self, key: Any) -> bool:
        return True

    async def delete_items(self, keys: Any = None) -> bool:
        return True

    async def clear(self) -> bool:
        return True
