"""Tests for the Redis cache adapter with a mocked client."""

import hashlib
import json
import pytest
from unittest.mock import AsyncMock, patch

from redis.exceptions import ConnectionError as RedisConnectionError, ResponseError

from cachepool.core.exceptions import (
    CacheConnectionError,
    CacheInvalidArgumentError,
    CacheRuntimeError,
)
from cachepool.features.cache.adapters.redis_adapter import RedisAdapter
from cachepool.features.cache.entities.cache_item import CacheItem

NOW = 1_700_000_000.0


def redis_key(namespace, key):
    return f"cache:{namespace}:{hashlib.sha1(key.encode('utf-8')).hexdigest()}"


@pytest.fixture
def adapter(mock_redis):
    """Redis adapter over the mock client."""
    return RedisAdapter("test", mock_redis)


def stored(mock_redis, value, pttl):
    """Make the mock client hold one value with the given PTTL."""
    mock_redis.exists.return_value = 1
    mock_redis.get.return_value = json.dumps(value).encode("utf-8")
    mock_redis.pttl.return_value = pttl


class TestRedisAdapterConstruction:
    """Test client validation and key layout."""
    
    def test_requires_redis_client(self):
        """Anything but an asyncio Redis client is rejected."""
        with pytest.raises(CacheInvalidArgumentError, match="Invalid redis client"):
            RedisAdapter("test", object())
        with pytest.raises(CacheInvalidArgumentError):
            RedisAdapter("test")
    
    def test_key_layout(self, adapter):
        """Keys are prefixed with the namespace and hashed with sha1."""
        assert adapter.get_prefix() == "cache:test"
        assert adapter.gen_key("greeting") == redis_key("test", "greeting")
        assert adapter.adapter_name == "redis"


class TestRedisAdapterReads:
    """Test get_item and has_item."""
    
    @pytest.mark.asyncio
    async def test_miss(self, adapter, mock_redis):
        """A key that does not exist is a miss."""
        item = await adapter.get_item("unknown")
        
        assert item.is_hit() is False
        assert item.get() is None
        assert item.key == "unknown"
        mock_redis.exists.assert_awaited_once_with(redis_key("test", "unknown"))
        mock_redis.get.assert_not_called()
    
    @pytest.mark.asyncio
    async def test_hit_reconstructs_expiration_in_seconds(self, adapter, mock_redis):
        """The millisecond TTL becomes an expiration two seconds away."""
        stored(mock_redis, {"a": 1}, 2000)
        
        with patch("time.time", return_value=NOW):
            item = await adapter.get_item("k")
        
        assert item.is_hit() is True
        assert item.get() == {"a": 1}
        assert item.expiration - NOW == pytest.approx(2)
    
    @pytest.mark.asyncio
    async def test_persistent_key_has_no_expiration(self, adapter, mock_redis):
        """A key without TTL never expires, even with a default lifetime."""
        adapter = RedisAdapter("test", mock_redis, default_lifetime=60)
        stored(mock_redis, "v", -1)
        
        item = await adapter.get_item("k")
        
        assert item.is_hit() is True
        assert item.expiration is None
    
    @pytest.mark.asyncio
    async def test_key_vanished_between_calls(self, adapter, mock_redis):
        """A key that expires between EXISTS and GET is a miss."""
        stored(mock_redis, "v", -2)
        mock_redis.get.return_value = None
        
        assert (await adapter.get_item("k")).is_hit() is False
    
    @pytest.mark.asyncio
    async def test_ttl_failure_uses_default_lifetime(self, mock_redis):
        """When the TTL cannot be read the pool default lifetime applies."""
        adapter = RedisAdapter("test", mock_redis, default_lifetime=30)
        stored(mock_redis, "v", 0)
        mock_redis.pttl.side_effect = ResponseError("WRONGTYPE")
        
        with patch("time.time", return_value=NOW):
            item = await adapter.get_item("k")
        
        assert item.is_hit() is True
        assert item.expiration == NOW + 30
    
    @pytest.mark.asyncio
    async def test_undecodable_value_is_a_miss(self, adapter, mock_redis):
        """Values that are not JSON are treated as misses."""
        stored(mock_redis, "v", 1000)
        mock_redis.get.return_value = b"\x80not json"
        
        assert (await adapter.get_item("k")).is_hit() is False
    
    @pytest.mark.asyncio
    async def test_has_item(self, adapter, mock_redis):
        """has_item checks key existence."""
        mock_redis.exists.return_value = 1
        assert await adapter.has_item("k") is True
        
        mock_redis.exists.return_value = 0
        assert await adapter.has_item("k") is False


class TestRedisAdapterWrites:
    """Test save, delete and clear."""
    
    @pytest.mark.asyncio
    async def test_save_with_lifetime_sets_px(self, adapter, mock_redis):
        """A two second lifetime is sent as PX 2000."""
        with patch("time.time", return_value=NOW):
            item = CacheItem("k", {"a": 1}).expires_after(2)
            assert await adapter.save(item) is True
        
        mock_redis.set.assert_awaited_once_with(redis_key("test", "k"), '{"a":1}', px=2000)
    
    @pytest.mark.asyncio
    async def test_save_without_expiration(self, adapter, mock_redis):
        """Items without expiration are stored without TTL."""
        assert await adapter.save(CacheItem("k", "v")) is True
        
        mock_redis.set.assert_awaited_once_with(redis_key("test", "k"), '"v"')
    
    @pytest.mark.asyncio
    async def test_save_already_expired_deletes(self, adapter, mock_redis):
        """Items whose expiration has passed are removed instead of stored."""
        item = CacheItem("k", "v").expires_at(NOW - 10)
        
        with patch("time.time", return_value=NOW):
            assert await adapter.save(item) is True
        
        mock_redis.set.assert_not_called()
        mock_redis.delete.assert_awaited_once_with(redis_key("test", "k"))
    
    @pytest.mark.asyncio
    async def test_save_rejects_non_items(self, adapter, mock_redis):
        """Only cache items are saved."""
        assert await adapter.save("k") is False
        mock_redis.set.assert_not_called()
    
    @pytest.mark.asyncio
    async def test_deferred_commit(self, adapter, mock_redis):
        """Deferred items are sent on commit only."""
        await adapter.save_deferred(CacheItem("k", "v"))
        mock_redis.set.assert_not_called()
        
        assert await adapter.commit() is True
        mock_redis.set.assert_awaited_once()
    
    @pytest.mark.asyncio
    async def test_delete_item(self, adapter, mock_redis):
        """Deleting succeeds whether or not the key exists."""
        mock_redis.delete.return_value = 0
        
        assert await adapter.delete_item("k") is True
        mock_redis.delete.assert_awaited_once_with(redis_key("test", "k"))
    
    @pytest.mark.asyncio
    async def test_clear_deletes_namespace_keys(self, adapter, mock_redis, scan_keys):
        """Clear scans the namespace prefix and deletes each key."""
        keys = [redis_key("test", "a"), redis_key("test", "b")]
        scan_iter = scan_keys(keys)
        
        assert await adapter.clear() is True
        
        scan_iter.assert_called_once_with(match="cache:test:*")
        assert mock_redis.delete.await_count == 2
    
    @pytest.mark.asyncio
    async def test_aclose_only_owned_client(self, mock_redis):
        """Clients passed in are left open; owned clients are closed."""
        await RedisAdapter("test", mock_redis).aclose()
        mock_redis.aclose.assert_not_called()
        
        await RedisAdapter("test", mock_redis, owns_client=True).aclose()
        mock_redis.aclose.assert_awaited_once()


class TestRedisAdapterConnectionErrors:
    """Test the propagate and swallow split for connection failures."""
    
    @pytest.fixture
    def down(self, mock_redis):
        """Make every ping fail, reconnects included."""
        mock_redis.ping.side_effect = RedisConnectionError("Connection refused")
        return mock_redis
    
    @pytest.mark.asyncio
    async def test_reconnects_once(self, adapter, mock_redis):
        """A dropped connection is reset and retried."""
        mock_redis.ping.side_effect = [RedisConnectionError("reset"), True]
        
        assert await adapter.get_redis() is mock_redis
        mock_redis.connection_pool.disconnect.assert_awaited_once()
    
    @pytest.mark.asyncio
    async def test_get_item_propagates(self, adapter, down):
        """get_item raises when Redis is unreachable."""
        with pytest.raises(CacheConnectionError):
            await adapter.get_item("k")
    
    @pytest.mark.asyncio
    async def test_save_propagates(self, adapter, down):
        """save raises when Redis is unreachable."""
        with pytest.raises(CacheConnectionError):
            await adapter.save(CacheItem("k", "v"))
    
    @pytest.mark.asyncio
    async def test_clear_propagates(self, adapter, down):
        """clear raises when Redis is unreachable."""
        with pytest.raises(CacheConnectionError):
            await adapter.clear()
    
    @pytest.mark.asyncio
    async def test_has_item_swallows(self, adapter, down):
        """has_item reports False when Redis is unreachable."""
        assert await adapter.has_item("k") is False
    
    @pytest.mark.asyncio
    async def test_delete_item_swallows(self, adapter, down):
        """delete_item reports False when Redis is unreachable."""
        assert await adapter.delete_item("k") is False
    
    @pytest.mark.asyncio
    async def test_command_failure_propagates_as_runtime_error(self, adapter, mock_redis):
        """Errors after a successful ping are wrapped and chained."""
        mock_redis.set = AsyncMock(side_effect=RedisConnectionError("broken pipe"))
        
        with pytest.raises(CacheRuntimeError) as exc_info:
            await adapter.save(CacheItem("k", "v"))
        
        assert isinstance(exc_info.value.__cause__, RedisConnectionError)
    
    @pytest.mark.asyncio
    async def test_get_items_collapses_failures(self, adapter, down):
        """Batch reads turn connection failures into misses."""
        items = await adapter.get_items(["a", "b"])
        
        assert all(not item.is_hit() for item in items.values())
