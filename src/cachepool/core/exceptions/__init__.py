"""Exception hierarchy for cachepool."""

from .base import CachePoolError, create_error_response
from .infrastructure import (
    CacheError,
    CacheInvalidArgumentError,
    CacheRuntimeError,
    CacheConnectionError,
    CacheSerializationError,
)

__all__ = [
    "CachePoolError",
    "create_error_response",
    "CacheError",
    "CacheInvalidArgumentError",
    "CacheRuntimeError",
    "CacheConnectionError",
    "CacheSerializationError",
]
