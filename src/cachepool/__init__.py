"""cachepool - asynchronous PSR-6 style cache pools.

Items are read and written through pools bound to a namespace on one backend:
the filesystem, process memory, Redis, or a void pool that stores nothing.
"""

# Initialize logging configuration on import
from .config.logging_config import setup_logging
setup_logging()

from .__version__ import __version__

from .core.exceptions import (
    CachePoolError,
    CacheError,
    CacheInvalidArgumentError,
    CacheRuntimeError,
    CacheConnectionError,
    CacheSerializationError,
    create_error_response,
)

from .features.cache import (
    CacheItem,
    CacheItemPool,
    CacheSettings,
    AdapterKind,
    ErrorPolicy,
    MAX_FUTURE_DATE,
    UNSET,
    FileSystemAdapter,
    MemoryAdapter,
    RedisAdapter,
    VoidAdapter,
    reset_stores,
    CacheManager,
    create_cache_pool,
)

__all__ = [
    "__version__",
    "CachePoolError",
    "CacheError",
    "CacheInvalidArgumentError",
    "CacheRuntimeError",
    "CacheConnectionError",
    "CacheSerializationError",
    "create_error_response",
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
