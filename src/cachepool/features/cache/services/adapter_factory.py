"""Build a cache pool from settings."""

import logging
import os
from typing import Optional

from redis.asyncio import Redis

from ..adapters.filesystem_adapter import FileSystemAdapter
from ..adapters.memory_adapter import MemoryAdapter
from ..adapters.redis_adapter import RedisAdapter
from ..adapters.void_adapter import VoidAdapter
from ..entities.config import CacheSettings, RedisAdapterSettings
from ..entities.item_pool import CacheItemPool
from ..entities.protocols import AdapterKind
from ....config.settings import cache_directory

logger = logging.getLogger(__name__)


def create_redis_client(config: RedisAdapterSettings, client_name: Optional[str] = None) -> Redis:
    """Create a Redis client; no connection is made until the first command."""
    return Redis(
        host=config.host,
        port=config.port,
        db=config.database,
        password=config.password,
        socket_timeout=config.timeout or None,
        socket_connect_timeout=config.connection_timeout or None,
        client_name=client_name,
    )


def resolve_cache_directory(directory: Optional[str]) -> Optional[str]:
    """Return a usable cache directory, or None when none can be used.

    Falls back to the process cache directory when the configured one cannot
    be created, and requires read and write access to the result.
    """
    default_directory = cache_directory()
    directory = directory or default_directory
    if not os.path.isdir(directory):
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as e:
            logger.warning(f"Cannot create cache directory {directory}: {e}")
            if directory == default_directory:
                return None
            directory = default_directory
            try:
                os.makedirs(directory, exist_ok=True)
            except OSError as e:
                logger.warning(f"Cannot create default cache directory {directory}: {e}")
                return None
    if not os.access(directory, os.R_OK | os.W_OK):
        logger.warning(f"Cache directory {directory} is not readable and writable")
        return None
    return directory


def create_cache_pool(settings: CacheSettings) -> CacheItemPool:
    """Create the pool selected by settings.

    Raises:
        CacheInvalidArgumentError: If the adapter name or namespace is invalid
    """
    if not settings.enable:
        logger.info("Cache disabled, using void adapter")
        return VoidAdapter()

    kind = AdapterKind.parse(settings.adapter)
    if kind is AdapterKind.VOID:
        return VoidAdapter()

    if kind is AdapterKind.REDIS:
        redis_config = settings.adapters.redis
        client = create_redis_client(redis_config, client_name=settings.namespace)
        logger.info(f"Using redis cache adapter at {redis_config.host}:{redis_config.port}/{redis_config.database}")
        return RedisAdapter(settings.namespace, client, settings.default_lifetime, owns_client=True)

    if kind is AdapterKind.MEMORY:
        logger.info("Using memory cache adapter")
        return MemoryAdapter(settings.namespace, settings.default_lifetime)

    directory = resolve_cache_directory(settings.adapters.file.directory)
    if directory is None:
        logger.warning("No usable cache directory, falling back to void adapter")
        return VoidAdapter()
    logger.info(f"Using filesystem cache adapter in {directory}")
    return FileSystemAdapter(settings.namespace, directory, settings.default_lifetime)
