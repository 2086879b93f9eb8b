"""Cache manager facade.

``CacheManager`` owns one pool chosen from settings and forwards the pool
operations to it. Its ``get`` and ``save`` helpers are the lossy convenience
layer: they never raise backend errors and report failures as ``None``.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Mapping, Optional, Union

from .adapter_factory import create_cache_pool
from ..entities.cache_item import CacheItem, UNSET, is_number
from ..entities.config import CacheSettings
from ..entities.item_pool import CacheItemPool
from ....core.exceptions import CacheError, CacheInvalidArgumentError

logger = logging.getLogger(__name__)

AVAILABLE_ADAPTERS = ("file", "memory", "redis", "void")


class CacheManager:
    """Application entry point to the cache."""

    AVAILABLE_ADAPTERS = AVAILABLE_ADAPTERS

    def __init__(
        self,
        adapter: Optional[CacheItemPool] = None,
        settings: Optional[CacheSettings] = None,
        config: Optional[Mapping[str, Any]] = None,
    ):
        """Initialize the manager.

        Args:
            adapter: Pool to use as is; settings and config are ignored
            settings: Settings to build the pool from
            config: Application config mapping, ``{"cache": {...}}`` or the
                inner mapping, used when no settings are given

        Raises:
            CacheInvalidArgumentError: If the configured adapter is unknown
        """
        if adapter is None:
            if settings is None:
                settings = CacheSettings.from_mapping(config)
            adapter = create_cache_pool(settings)
        self._settings = settings
        self._adapter: Optional[CacheItemPool] = None
        self.set_adapter(adapter)

    @property
    def adapter(self) -> CacheItemPool:
        return self._adapter

    @property
    def adapter_name(self) -> str:
        return self._adapter.adapter_name

    @property
    def settings(self) -> Optional[CacheSettings]:
        return self._settings

    def set_adapter(self, adapter: CacheItemPool) -> "CacheManager":
        if not isinstance(adapter, CacheItemPool):
            raise CacheInvalidArgumentError(
                f"Adapter must be a CacheItemPool, {type(adapter).__name__} given.",
            )
        self._adapter = adapter
        logger.debug(f"Cache manager using {adapter!r}")
        return self

    async def has_item(self, key: Any) -> bool:
        return await self._adapter.has_item(key)

    async def get_item(self, key: Any) -> CacheItem:
        return await self._adapter.get_item(key)

    async def get_items(self, keys: Any = None) -> Dict[str, CacheItem]:
        return await self._adapter.get_items(keys)

    async def save_item(self, item: CacheItem) -> bool:
        return await self._adapter.save(item)

    async def save_deferred(self, item: CacheItem) -> bool:
        return await self._adapter.save_deferred(item)

    async def commit(self) -> bool:
        return await self._adapter.commit()

    async def delete_item(self, key: Any) -> bool:
        return await self._adapter.delete_item(key)

    async def delete_items(self, keys: Any = None) -> bool:
        return await self._adapter.delete_items(keys)

    async def clear_items(self) -> bool:
        return await self._adapter.clear()

    async def get(self, key: Any) -> Any:
        """Return the cached value, ``None`` on a miss or a backend failure.

        Raises:
            CacheInvalidArgumentError: If key is not a scalar
        """
        try:
            item = await self._adapter.get_item(key)
        except CacheInvalidArgumentError:
            raise
        except CacheError as e:
            logger.warning(f"Cache get failed for {key!r}: {e}")
            return None
        return item.get()

    async def save(
        self,
        key: Union[str, CacheItem],
        value: Any = None,
        expire_after: Any = UNSET,
    ) -> Optional[CacheItem]:
        """Store value under key and return the saved item, ``None`` on failure.

        Given an existing item, its value is only replaced when value is not
        None. ``expire_after`` accepts seconds, a ``timedelta`` or a
        ``datetime``; anything else leaves the expiration untouched.

        Raises:
            CacheInvalidArgumentError: If key is not a scalar or item
        """
        try:
            if isinstance(key, CacheItem):
                item = key
                if value is not None:
                    item.set_value(value)
            else:
                item = await self._adapter.get_item(key)
                item.set_value(value)

            if is_number(expire_after) or isinstance(expire_after, (datetime, timedelta)):
                item.expires_after(expire_after)

            saved = await self._adapter.save(item)
        except CacheInvalidArgumentError:
            raise
        except CacheError as e:
            logger.warning(f"Cache save failed for {key!r}: {e}")
            return None
        return item if saved else None

    async def aclose(self) -> None:
        """Release the pool's backend resources."""
        await self._adapter.aclose()

    def __repr__(self) -> str:
        return f"CacheManager(adapter={self._adapter!r})"
