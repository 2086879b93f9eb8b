"""Cache feature - PSR-6 style item pools over filesystem, memory and Redis."""

from .entities import (
    CacheItem,
    CacheItemPool,
    CacheSettings,
    AdapterKind,
    ErrorPolicy,
    MAX_FUTURE_DATE,
    UNSET,
)
from .adapters import (
    FileSystemAdapter,
    MemoryAdapter,
    RedisAdapter,
    VoidAdapter,
    reset_stores,
)
from .services import CacheManager, create_cache_pool

__all__ = [
    "CacheItem",
    "CacheItemPool",
    "CacheSettings",
    "AdapterKind",
    "ErrorPolicy",
    "MAX_FUTURE_DATE",
    "UNSET",
    "FileSystemAdapter",
    "MemoryAdapter",
    "RedisAdapter",
    "VoidAdapter",
    "reset_stores",
    "CacheManager",
    "create_cache_pool",
]
