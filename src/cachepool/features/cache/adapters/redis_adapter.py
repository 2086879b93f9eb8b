"""Redis cache pool adapter for cachepool."""

import asyncio
import hashlib
import logging
import time
from typing import Any, Dict, Optional

from redis.asyncio import Redis
from redis.exceptions import (
    RedisError,
    ConnectionError as RedisConnectionError,
    TimeoutError as RedisTimeoutError,
)

from ..entities.cache_item import CacheItem
from ..entities.item_pool import CacheItemPool, DEFAULT_NAMESPACE
from ..entities.protocols import ErrorPolicy, RecordSerializer
from ..entities.serializer import default_serializer
from ....core.exceptions import (
    CacheError,
    CacheConnectionError,
    CacheInvalidArgumentError,
    CacheSerializationError,
)

logger = logging.getLogger(__name__)

# PTTL replies for a missing key and for a key without expiry
_PTTL_MISSING = -2
_PTTL_PERSISTENT = -1


class RedisAdapter(CacheItemPool):
    """Redis cache pool.

    Keys are stored as ``cache:<namespace>:<sha1(key)>`` with JSON-encoded
    values. Connection failures reach the caller from ``get_item``, ``save``
    and ``clear``; ``has_item`` and ``delete_item`` report them as False.
    """

    error_policies: Dict[str, ErrorPolicy] = {
        "get_item": ErrorPolicy.PROPAGATE,
        "save": ErrorPolicy.PROPAGATE,
        "clear": ErrorPolicy.PROPAGATE,
        "has_item": ErrorPolicy.SWALLOW,
        "delete_item": ErrorPolicy.SWALLOW,
    }

    def __init__(
        self,
        namespace: Optional[str] = DEFAULT_NAMESPACE,
        redis_client: Optional[Redis] = None,
        default_lifetime: Any = None,
        serializer: Optional[RecordSerializer] = None,
        owns_client: bool = False,
    ):
        super().__init__(namespace, default_lifetime)
        if not isinstance(redis_client, Redis):
            raise CacheInvalidArgumentError("Invalid redis client")
        self._redis = redis_client
        self._serializer = serializer or default_serializer
        self._owns_client = owns_client

    @property
    def redis_client(self) -> Redis:
        return self._redis

    def get_adapter_name(self) -> str:
        return "redis"

    def get_prefix(self) -> str:
        return f"cache:{self.namespace}"

    def gen_key(self, key: str) -> str:
        return f"{self.get_prefix()}:{hashlib.sha1(key.encode('utf-8')).hexdigest()}"

    async def get_redis(self) -> Redis:
        """Return the client once it answers, reconnecting once if it dropped.

        Raises:
            CacheConnectionError: If Redis cannot be reached
        """
        try:
            await self._redis.ping()
            return self._redis
        except (RedisConnectionError, RedisTimeoutError) as e:
            logger.warning(f"Redis connection lost, reconnecting: {e}")
        except RedisError as e:
            raise CacheConnectionError(f"Redis is not connected: {e}") from e

        try:
            await self._redis.connection_pool.disconnect()
            await self._redis.ping()
            logger.info("Reconnected to Redis")
            return self._redis
        except RedisError as e:
            raise CacheConnectionError(f"Redis is not connected: {e}") from e

    async def get_item(self, key: Any) -> CacheItem:
        key = self._normalize_key(key)
        redis_key = self.gen_key(key)
        try:
            redis = await self.get_redis()
            if await redis.exists(redis_key) <= 0:
                return self.new_miss(key)
            raw, ttl_ms = await asyncio.gather(
                redis.get(redis_key),
                self._read_pttl(redis, redis_key),
            )
        except (RedisError, CacheError) as e:
            return self._handle_backend_error("get_item", e, self.new_miss(key))

        if raw is None or ttl_ms == _PTTL_MISSING:
            return self.new_miss(key)
        try:
            value = self._serializer.decode(raw)
        except CacheSerializationError as e:
            logger.warning(f"Discarding undecodable Redis value for {redis_key}: {e}")
            return self.new_miss(key)

        if ttl_ms is None:
            item = CacheItem(key, value, True, None, self.default_lifetime)
        else:
            expiration = None if ttl_ms == _PTTL_PERSISTENT else time.time() + ttl_ms / 1000
            item = CacheItem.from_record(
                {"key": key, "value": value, "hit": True, "expiration": expiration},
                self.default_lifetime,
            )
        return item

    async def has_item(self, key: Any) -> bool:
        key = self._normalize_key(key)
        try:
            redis = await self.get_redis()
            return await redis.exists(self.gen_key(key)) > 0
        except (RedisError, CacheError) as e:
            return self._handle_backend_error("has_item", e, False)

    async def save(self, item: CacheItem) -> bool:
        """Store item; its expiration in seconds is sent as a PX millisecond TTL."""
        if not isinstance(item, CacheItem):
            return False
        try:
            payload = self._serializer.encode(item.get())
        except CacheSerializationError as e:
            logger.warning(f"Cannot save cache item {item.key!r} to redis: {e}")
            return False

        redis_key = self.gen_key(item.get_key())
        expiration = item.expiration
        try:
            redis = await self.get_redis()
            if not expiration:
                await redis.set(redis_key, payload)
                return True
            ttl_ms = int(round((expiration - time.time()) * 1000))
            if ttl_ms <= 0:
                await redis.delete(redis_key)
                return True
            await redis.set(redis_key, payload, px=ttl_ms)
            return True
        except (RedisError, CacheError) as e:
            return self._handle_backend_error("save", e, False)

    async def delete_item(self, key: Any) -> bool:
        key = self._normalize_key(key)
        self._deferred.pop(key, None)
        try:
            redis = await self.get_redis()
            await redis.delete(self.gen_key(key))
            return True
        except (RedisError, CacheError) as e:
            return self._handle_backend_error("delete_item", e, False)

    async def clear(self) -> bool:
        """Delete every key under the namespace prefix.

        Keys are scanned and deleted one by one, so writes made during the
        scan may survive.
        """
        self._deferred.clear()
        try:
            redis = await self.get_redis()
            async for redis_key in redis.scan_iter(match=f"{self.get_prefix()}:*"):
                try:
                    await redis.delete(redis_key)
                except RedisError as e:
                    logger.warning(f"Failed to delete Redis key {redis_key!r}: {e}")
        except (RedisError, CacheError) as e:
            return self._handle_backend_error("clear", e, False)
        return True

    async def aclose(self) -> None:
        """Close the client when this adapter created it."""
        if not self._owns_client:
            return
        try:
            await self._redis.aclose()
        except RedisError as e:
            logger.error(f"Error closing Redis connection: {e}")

    async def _read_pttl(self, redis: Redis, redis_key: str) -> Optional[int]:
        """Remaining TTL in milliseconds, None when it could not be read."""
        try:
            return int(await redis.pttl(redis_key))
        except (RedisError, TypeError, ValueError) as e:
            logger.warning(f"Failed to read TTL for {redis_key}, using default lifetime: {e}")
            return None
