"""Cache exceptions for cachepool.

Validation problems are raised as ``CacheInvalidArgumentError`` and always
reach the caller. Backend failures are raised as ``CacheRuntimeError`` or one
of its subclasses, and adapters decide per operation whether those surface or
collapse into a boolean result.
"""

from .base import CachePoolError


class CacheError(CachePoolError):
    """Base class for cache-related errors."""
    pass


class CacheInvalidArgumentError(CacheError, ValueError):
    """Raised when a key, namespace or adapter configuration is invalid."""
    pass


class CacheRuntimeError(CacheError, RuntimeError):
    """Raised when the cache contract is violated or a backend fails."""
    pass


class CacheConnectionError(CacheRuntimeError):
    """Raised when the cache backend cannot be reached."""
    pass


class CacheSerializationError(CacheError):
    """Raised when a cache record cannot be encoded or decoded."""
    pass
