"""Cache services - manager facade and adapter factory."""

from .adapter_factory import create_cache_pool, create_redis_client, resolve_cache_directory
from .cache_manager import CacheManager, AVAILABLE_ADAPTERS

__all__ = [
    "CacheManager",
    "AVAILABLE_ADAPTERS",
    "create_cache_pool",
    "create_redis_client",
    "resolve_cache_directory",
]
