"""Filesystem cache pool adapter for cachepool.

Each key is stored in its own file at
``<directory>/<namespace>/<shard>/<md5(key)>`` where the shard is the first
character of the base64 encoding of the hex digest, folded into
``A-Z``, ``_`` and ``+``. File contents are ``CacheItem.serialize`` records.
A process-wide ``FrontCache`` keeps recently used items in memory to avoid
repeated reads.
"""

import base64
import hashlib
import logging
import os
import re
import time
from typing import Any, Dict, Optional

import aiofiles
import aiofiles.os

from .stores import FrontCache, get_front_cache
from ..entities.cache_item import CacheItem, RECORD_FIELDS, is_number, normalize_timestamp
from ..entities.item_pool import CacheItemPool, DEFAULT_NAMESPACE
from ..entities.protocols import ErrorPolicy
from ..entities.serializer import unserialize
from ....config.settings import cache_directory
from ....core.exceptions import CacheSerializationError

logger = logging.getLogger(__name__)

CACHE_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ_+"

_NON_SHARD_CHARS = re.compile(r"[^A-Z_+]", re.IGNORECASE)


def generate_file_name(key: str) -> str:
    """Return ``<shard>/<md5(key)>`` for key."""
    digest = hashlib.md5(key.encode("utf-8")).hexdigest()
    encoded = base64.b64encode(digest.encode("ascii")).decode("ascii")
    shard = _NON_SHARD_CHARS.sub("_", encoded)[:1].upper()
    return f"{shard}/{digest}"


def generate_file_path(directory: str, key: str) -> str:
    """Return the absolute cache file path for key under directory."""
    return os.path.abspath(os.path.join(directory, *generate_file_name(key).split("/")))


def is_valid_record(record: Any, key: str) -> bool:
    """Check decoded file contents against the item record shape."""
    if not isinstance(record, dict):
        return False
    if any(field not in record for field in RECORD_FIELDS):
        return False
    if not isinstance(record["key"], str) or record["key"] != key:
        return False
    if not isinstance(record["hit"], bool):
        return False
    expiration = record["expiration"]
    return expiration is None or is_number(expiration)


class FileSystemAdapter(CacheItemPool):
    """Filesystem cache pool; local I/O failures are reported as False or a miss."""

    error_policies: Dict[str, ErrorPolicy] = {
        "get_item": ErrorPolicy.SWALLOW,
        "has_item": ErrorPolicy.SWALLOW,
        "save": ErrorPolicy.SWALLOW,
        "delete_item": ErrorPolicy.SWALLOW,
        "clear": ErrorPolicy.SWALLOW,
    }

    def __init__(
        self,
        namespace: Optional[str] = DEFAULT_NAMESPACE,
        directory: Optional[str] = None,
        default_lifetime: Any = None,
        front_cache: Optional[FrontCache] = None,
    ):
        super().__init__(namespace, default_lifetime)
        if not isinstance(directory, str) or not directory.strip():
            directory = cache_directory()
        self._cache_directory = os.path.abspath(os.path.join(directory, self.namespace))
        self._front_cache = front_cache if front_cache is not None else get_front_cache()

    @property
    def cache_directory(self) -> str:
        return self._cache_directory

    @property
    def front_cache(self) -> FrontCache:
        return self._front_cache

    def get_adapter_name(self) -> str:
        return "filesystem"

    def file_path(self, key: str) -> str:
        return generate_file_path(self._cache_directory, key)

    async def get_item(self, key: Any) -> CacheItem:
        key = self._normalize_key(key)
        path = self.file_path(key)

        cached = self._front_cache.get(path)
        if cached is not None and not cached.is_expired():
            return CacheItem.from_record(cached.to_record(), self.default_lifetime)
        try:
            if cached is not None:
                # expired in the front cache
                await self._unlink(path)
            if not await aiofiles.os.path.isfile(path):
                return self.new_miss(key)
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                payload = await f.read()
        except OSError as e:
            return self._handle_backend_error("get_item", e, self.new_miss(key))

        try:
            record = unserialize(payload)
        except CacheSerializationError as e:
            logger.warning(f"Discarding unreadable cache file {path}: {e}")
            record = None

        if not is_valid_record(record, key) or _record_expired(record):
            try:
                await self._unlink(path)
            except OSError as e:
                return self._handle_backend_error("get_item", e, self.new_miss(key))
            return self.new_miss(key)

        item = CacheItem.from_record({**record, "hit": True}, self.default_lifetime)
        if not record["hit"]:
            try:
                await self._write(path, item)
            except (CacheSerializationError, OSError) as e:
                logger.warning(f"Could not rewrite cache file {path} as a hit: {e}")
        self._front_cache.put(path, item)
        return CacheItem.from_record(item.to_record(), self.default_lifetime)

    async def has_item(self, key: Any) -> bool:
        key = self._normalize_key(key)
        path = self.file_path(key)
        cached = self._front_cache.get(path)
        if cached is not None and not cached.is_expired():
            return True
        try:
            if not await aiofiles.os.path.exists(path):
                return False
        except OSError as e:
            return self._handle_backend_error("has_item", e, False)
        await self.get_item(key)
        return path in self._front_cache

    async def save(self, item: CacheItem) -> bool:
        if not isinstance(item, CacheItem):
            return False
        path = self.file_path(item.get_key())
        self._front_cache.discard(path)

        try:
            await self._write(path, item)
        except (CacheSerializationError, OSError) as e:
            return self._handle_backend_error("save", e, False)

        self._front_cache.put(path, CacheItem.from_record({**item.to_record(), "hit": True}))
        return True

    async def delete_item(self, key: Any) -> bool:
        key = self._normalize_key(key)
        self._deferred.pop(key, None)
        try:
            await self._unlink(self.file_path(key))
        except OSError as e:
            return self._handle_backend_error("delete_item", e, False)
        return True

    async def _write(self, path: str, item: CacheItem) -> None:
        """Write the item record to path.

        Raises:
            CacheSerializationError: If the value cannot be encoded
            OSError: If the file cannot be written
        """
        payload = item.serialize()
        await aiofiles.os.makedirs(os.path.dirname(path), exist_ok=True)
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(payload)

    async def _unlink(self, path: str) -> None:
        """Remove the cache file and its front cache entry; deferred items are kept."""
        self._front_cache.discard(path)
        try:
            if await aiofiles.os.path.isfile(path):
                await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass

    async def clear(self) -> bool:
        """Delete every shard directory of the namespace.

        The front cache is emptied entirely, entries of other namespaces
        included.
        """
        self._deferred.clear()
        self._front_cache.clear()
        try:
            if not await aiofiles.os.path.isdir(self._cache_directory):
                return True
            for shard in CACHE_CHARS:
                await _remove_tree(os.path.join(self._cache_directory, shard))
        except OSError as e:
            return self._handle_backend_error("clear", e, False)
        return True


def _record_expired(record: Dict[str, Any]) -> bool:
    expiration = record["expiration"]
    return bool(expiration) and normalize_timestamp(expiration) < time.time()


async def _remove_tree(directory: str) -> None:
    if not await aiofiles.os.path.isdir(directory):
        return
    for name in await aiofiles.os.listdir(directory):
        path = os.path.join(directory, name)
        if await aiofiles.os.path.isdir(path):
            await _remove_tree(path)
            continue
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            continue
    try:
        await aiofiles.os.rmdir(directory)
    except OSError as e:
        # a concurrent writer may have recreated a file
        logger.debug(f"Could not remove cache directory {directory}: {e}")
