"""Cache item pool contract.

Pools follow the PSR-6 item pool model: lookups always return a
``CacheItem`` (hit or miss), writes are either immediate (``save``) or
buffered until ``commit`` (``save_deferred``), and every pool is bound to one
namespace on one backend.

Backend failures are routed through ``_handle_backend_error`` so each adapter
states, per operation, whether a failure collapses into the fallback result
or reaches the caller. Key and namespace validation errors always reach the
caller.
"""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Optional, TypeVar

from .cache_item import CacheItem, MAX_FUTURE_DATE, is_scalar, _numeric_integer
from .protocols import ErrorPolicy
from ....core.exceptions import (
    CacheError,
    CacheInvalidArgumentError,
    CacheRuntimeError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

NAMESPACE_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")
NAMESPACE_MAX_LENGTH = 32
DEFAULT_NAMESPACE = "_"


class CacheItemPool(ABC):
    """Base class for all cache adapters."""

    # operation name -> policy; operations not listed are swallowed
    error_policies: Dict[str, ErrorPolicy] = {}

    def __init__(self, namespace: Optional[str] = DEFAULT_NAMESPACE, default_lifetime: Any = None):
        namespace = namespace or DEFAULT_NAMESPACE
        if not self.is_valid_namespace(namespace):
            raise CacheInvalidArgumentError(
                f"Invalid namespace: {namespace!r}. Namespace must be a string, 1 to "
                f"{NAMESPACE_MAX_LENGTH} characters in length and contain only "
                "alphanumeric characters and underscores.",
                details={"namespace": repr(namespace)},
            )
        self._namespace = namespace
        self._default_lifetime = self._normalize_lifetime(default_lifetime)
        self._deferred: Dict[str, CacheItem] = {}

    @staticmethod
    def _normalize_lifetime(default_lifetime: Any) -> int:
        default_lifetime = _numeric_integer(default_lifetime)
        if not isinstance(default_lifetime, int) or isinstance(default_lifetime, bool):
            return 0
        if default_lifetime < 0:
            return 0
        if default_lifetime > MAX_FUTURE_DATE:
            return default_lifetime // 1000
        return default_lifetime

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def default_lifetime(self) -> int:
        """Default item lifetime in seconds, 0 for none."""
        return self._default_lifetime

    @property
    def adapter_name(self) -> str:
        return self.get_adapter_name()

    @property
    def deferred(self) -> Dict[str, CacheItem]:
        """Items queued by ``save_deferred`` and not yet committed."""
        return dict(self._deferred)

    def get_adapter_name(self) -> str:
        """Adapter name derived from the class name, ``MemoryAdapter`` -> ``memory``."""
        name = type(self).__name__
        stripped = re.sub(r"adapters?$", "", name, flags=re.IGNORECASE)
        return stripped.lower() if stripped != name else name

    def is_valid_namespace(self, namespace: Any) -> bool:
        if not isinstance(namespace, str):
            return False
        if not 0 < len(namespace) <= NAMESPACE_MAX_LENGTH:
            return False
        return NAMESPACE_PATTERN.match(namespace) is not None

    def new_miss(self, key: str) -> CacheItem:
        """Create a miss item carrying the pool default lifetime."""
        return CacheItem(key, None, False, None, self.default_lifetime)

    # Abstract operations

    @abstractmethod
    async def has_item(self, key: Any) -> bool:
        """Confirm whether the pool holds a live item for key.

        May skip reading the value; use ``CacheItem.is_hit`` when the value is
        needed too.

        Raises:
            CacheInvalidArgumentError: If key is not a scalar
        """
        raise CacheRuntimeError("Method has_item must be implemented")

    @abstractmethod
    async def get_item(self, key: Any) -> CacheItem:
        """Return the item for key, a miss item when nothing live is stored.

        Expired entries found during the lookup are deleted.

        Raises:
            CacheInvalidArgumentError: If key is not a scalar
        """
        raise CacheRuntimeError("Method get_item must be implemented")

    @abstractmethod
    async def delete_item(self, key: Any) -> bool:
        """Remove key from the pool; removing an absent key succeeds."""
        raise CacheRuntimeError("Method delete_item must be implemented")

    @abstractmethod
    async def save(self, item: CacheItem) -> bool:
        """Persist item immediately."""
        raise CacheRuntimeError("Method save must be implemented")

    @abstractmethod
    async def clear(self) -> bool:
        """Remove every item in the namespace and drop deferred items."""
        raise CacheRuntimeError("Method clear must be implemented")

    # Shared operations

    async def get_items(self, keys: Any = None) -> Dict[str, CacheItem]:
        """Return one item per key, misses included.

        Args:
            keys: Iterable of keys, a single key, or a mapping whose values
                are keys

        Raises:
            CacheInvalidArgumentError: If any key is not a scalar
        """
        key_list = self._coerce_keys(keys)
        for key in key_list:
            if not is_scalar(key) or key == "":
                raise CacheInvalidArgumentError(f"Invalid key: {key!r}")

        items: Dict[str, CacheItem] = {}
        for key in key_list:
            key = str(key)
            try:
                items[key] = await self.get_item(key)
            except CacheInvalidArgumentError:
                raise
            except CacheError as e:
                logger.warning(f"Failed to get cache item {key!r} from {self.adapter_name}: {e}")
                items[key] = self.new_miss(key)
        return items

    async def delete_items(self, keys: Any = None) -> bool:
        """Remove several keys.

        Best effort: returns True when at least one deletion succeeded, not
        only when all of them did.

        Raises:
            CacheInvalidArgumentError: If any key is not a scalar or item
        """
        key_list = self._coerce_keys(keys)
        for key in key_list:
            if isinstance(key, CacheItem):
                continue
            if not is_scalar(key) or key == "":
                raise CacheInvalidArgumentError(f"Invalid key: {key!r}")
        if not key_list:
            return False

        results = await asyncio.gather(
            *(self.delete_item(key) for key in key_list),
            return_exceptions=True,
        )
        deleted = False
        for key, result in zip(key_list, results):
            if isinstance(result, BaseException):
                logger.warning(f"Failed to delete cache item {key!r} from {self.adapter_name}: {result}")
                continue
            deleted = deleted or bool(result)
        return deleted

    async def save_deferred(self, item: CacheItem) -> bool:
        """Queue item for the next ``commit``; the backend is not touched."""
        if not isinstance(item, CacheItem):
            return False
        self._deferred[item.get_key()] = item
        return True

    async def commit(self) -> bool:
        """Save every deferred item.

        The buffer is emptied even when some saves fail. Returns False if any
        save failed.
        """
        deferred = list(self._deferred.values())
        self._deferred.clear()

        saved = True
        for item in deferred:
            try:
                result = await self.save(item)
            except CacheError as e:
                logger.warning(f"Failed to commit cache item {item.key!r} to {self.adapter_name}: {e}")
                result = False
            saved = saved and bool(result)
        return saved

    async def aclose(self) -> None:
        """Release backend resources held by the pool."""
        return None

    # Helpers

    def _normalize_key(self, key: Any) -> str:
        """Return key as a string, accepting items and scalars.

        Raises:
            CacheInvalidArgumentError: If key is not a scalar
        """
        if isinstance(key, CacheItem):
            return key.get_key()
        if not is_scalar(key) or key == "":
            type_name = "null" if key is None else type(key).__name__
            raise CacheInvalidArgumentError(
                f"Key must be a string, {type_name} given.",
                details={"key": repr(key)},
            )
        return str(key)

    @staticmethod
    def _coerce_keys(keys: Any) -> List[Any]:
        if keys is None:
            return []
        if isinstance(keys, (str, CacheItem)) or is_scalar(keys):
            return [keys]
        if isinstance(keys, Mapping):
            return list(keys.values())
        if isinstance(keys, Iterable):
            return list(keys)
        raise CacheInvalidArgumentError(f"Invalid keys: {keys!r}")

    def _handle_backend_error(self, operation: str, error: Exception, fallback: T) -> T:
        """Apply the adapter error policy for a failed backend operation.

        Returns fallback when the operation swallows failures, otherwise
        raises a ``CacheError`` chained to the original error.
        """
        policy = self.error_policies.get(operation, ErrorPolicy.SWALLOW)
        if policy is ErrorPolicy.PROPAGATE:
            logger.error(f"Cache {self.adapter_name} {operation} failed: {error}")
            if isinstance(error, CacheError):
                raise error
            raise CacheRuntimeError(
                f"Cache {self.adapter_name} {operation} failed: {error}",
                details={"adapter": self.adapter_name, "operation": operation},
            ) from error
        logger.warning(f"Cache {self.adapter_name} {operation} failed, returning {fallback!r}: {error}")
        return fallback

    def __repr__(self) -> str:
        return f"{type(self).__name__}(namespace={self._namespace!r}, default_lifetime={self._default_lifetime})"
