"""Pytest configuration and fixtures for cachepool tests."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from redis.asyncio import Redis

from cachepool.config.settings import cache_directory
from cachepool.features.cache.adapters import reset_stores


async def _async_iter(values):
    for value in values:
        yield value


@pytest.fixture(autouse=True)
def clean_stores():
    """Empty the process-wide front cache and memory store around each test."""
    reset_stores()
    yield
    reset_stores()


@pytest.fixture
def default_cache_dir(tmp_path, monkeypatch):
    """Point the process cache directory at a temporary path."""
    directory = tmp_path / "default-cache"
    monkeypatch.setenv("CACHEPOOL_CACHE_DIR", str(directory))
    cache_directory.cache_clear()
    yield directory
    cache_directory.cache_clear()


@pytest.fixture
def cache_dir(tmp_path):
    """Filesystem adapter root."""
    directory = tmp_path / "cache"
    directory.mkdir()
    return directory


@pytest.fixture
def mock_redis():
    """Mock asyncio Redis client answering like an empty server."""
    client = MagicMock(spec=Redis)
    client.ping = AsyncMock(return_value=True)
    client.exists = AsyncMock(return_value=0)
    client.get = AsyncMock(return_value=None)
    client.pttl = AsyncMock(return_value=-2)
    client.set = AsyncMock(return_value=True)
    client.delete = AsyncMock(return_value=1)
    client.aclose = AsyncMock()
    client.connection_pool = MagicMock()
    client.connection_pool.disconnect = AsyncMock()
    client.scan_iter = MagicMock(side_effect=lambda *args, **kwargs: _async_iter([]))
    return client


@pytest.fixture
def scan_keys(mock_redis):
    """Set the keys returned by ``scan_iter`` on the mock client."""
    def _set(keys):
        mock_redis.scan_iter = MagicMock(side_effect=lambda *args, **kwargs: _async_iter(keys))
        return mock_redis.scan_iter
    return _set
