"""Cache entities - items, the pool contract, protocols and configuration."""

from .cache_item import CacheItem, MAX_FUTURE_DATE, UNSET
from .item_pool import CacheItemPool
from .protocols import AdapterKind, ErrorPolicy, RecordSerializer
from .config import (
    CacheSettings,
    AdaptersSettings,
    FileAdapterSettings,
    RedisAdapterSettings,
)
from .serializer import JSONRecordSerializer, serialize, unserialize

__all__ = [
    "CacheItem",
    "MAX_FUTURE_DATE",
    "UNSET",
    "CacheItemPool",
    "AdapterKind",
    "ErrorPolicy",
    "RecordSerializer",
    "CacheSettings",
    "AdaptersSettings",
    "FileAdapterSettings",
    "RedisAdapterSettings",
    "JSONRecordSerializer",
    "serialize",
    "unserialize",
]
