"""Cache adapters - filesystem, memory, Redis and void pools."""

from .filesystem_adapter import FileSystemAdapter
from .memory_adapter import MemoryAdapter
from .redis_adapter import RedisAdapter
from .void_adapter import VoidAdapter
from .stores import (
    FrontCache,
    MemoryStore,
    get_front_cache,
    get_memory_store,
    reset_stores,
)

__all__ = [
    "FileSystemAdapter",
    "MemoryAdapter",
    "RedisAdapter",
    "VoidAdapter",
    "FrontCache",
    "MemoryStore",
    "get_front_cache",
    "get_memory_store",
    "reset_stores",
]
