"""Cache item entity.

A ``CacheItem`` is one cache slot handed out by a pool: an immutable key, a
mutable value, the hit flag observed at retrieval time and an absolute
expiration timestamp in seconds. Pools build a fresh item on every lookup and
own durability; callers only change the value and the expiration before
handing the item back to ``save`` or ``save_deferred``.
"""

import time
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union

from .serializer import serialize, unserialize
from ....core.exceptions import (
    CacheInvalidArgumentError,
    CacheRuntimeError,
    CacheSerializationError,
)

# 2038-01-19T03:14:07Z; larger timestamps are taken to be milliseconds.
MAX_FUTURE_DATE = int(datetime(2038, 1, 19, 3, 14, 7, tzinfo=timezone.utc).timestamp())

RECORD_FIELDS = ("key", "value", "hit", "expiration")

Expiration = Optional[Union[int, float]]


class _Unset:
    """Marker for an argument that was not passed at all."""

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset()


def is_scalar(value: Any) -> bool:
    """Check if value can be used as a cache key."""
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def is_number(value: Any) -> bool:
    """Check if value is an int or float, excluding booleans."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _numeric_integer(value: Any) -> Any:
    """Convert integer-looking strings to int, leave anything else untouched."""
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.lstrip("-").isdigit():
            return int(stripped)
    return value


def normalize_timestamp(timestamp: Union[int, float]) -> Union[int, float]:
    """Normalize millisecond timestamps to seconds."""
    if timestamp > MAX_FUTURE_DATE:
        return timestamp / 1000
    return timestamp


class CacheItem:
    """One cached entry."""

    def __init__(
        self,
        key: Any,
        value: Any = None,
        is_hit: bool = False,
        expiration: Any = None,
        default_expiration: Optional[int] = None,
    ):
        if is_scalar(key):
            key = str(key)
        if not isinstance(key, str) or key == "":
            raise CacheInvalidArgumentError(
                "Key must be a non-empty string",
                details={"key": repr(key)},
            )
        if type(self).serialize is not CacheItem.serialize:
            raise CacheRuntimeError("Method serialize must not be overridden")

        self._key = key
        self._value = value
        self._is_hit = bool(is_hit)
        self._default_expiration = default_expiration if is_number(default_expiration) else None
        self._expiration: Expiration = None

        if isinstance(expiration, bool) or expiration == 0:
            expiration = None
        self.expires_at(expiration)

    @classmethod
    def from_record(
        cls,
        record: Dict[str, Any],
        default_expiration: Optional[int] = None,
    ) -> "CacheItem":
        """Rebuild an item from its record without applying the default expiration."""
        item = cls(record["key"], record["value"], record["hit"], None, default_expiration)
        expiration = record["expiration"]
        item._expiration = normalize_timestamp(expiration) if is_number(expiration) else None
        return item

    @classmethod
    def unserialize(cls, payload: Any, default_expiration: Optional[int] = None) -> "CacheItem":
        """Rebuild an item from the output of ``serialize``.

        Raises:
            CacheSerializationError: If the payload is not a cache record
        """
        record = unserialize(payload)
        if not isinstance(record, dict) or any(field not in record for field in RECORD_FIELDS):
            raise CacheSerializationError("Payload is not a cache item record")
        return cls.from_record(record, default_expiration)

    @property
    def key(self) -> str:
        return self._key

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, value: Any) -> None:
        self.set_value(value)

    @property
    def expiration(self) -> Expiration:
        """Absolute expiration timestamp in seconds, ``None`` for never."""
        return self._expiration

    @property
    def default_expiration(self) -> Optional[int]:
        """Fallback lifetime in seconds, relative to the time it is applied."""
        return self._default_expiration

    def get_key(self) -> str:
        return self._key

    def get_expiration(self) -> Expiration:
        return self._expiration

    def get(self) -> Any:
        """Return the value; ``None`` is a legitimate cached value, check ``is_hit``."""
        return self.get_value()

    def get_value(self) -> Any:
        return self._value

    def is_hit(self) -> bool:
        """Whether the lookup that produced this item found a live value."""
        return self._is_hit

    def set(self, value: Any) -> "CacheItem":
        return self.set_value(value)

    def set_value(self, value: Any) -> "CacheItem":
        self._value = value
        return self

    def is_expired(self, now: Optional[float] = None) -> bool:
        """Check if the expiration timestamp has passed."""
        if not self._expiration:
            return False
        return self._expiration < (time.time() if now is None else now)

    def expires_at(self, expiration: Any) -> "CacheItem":
        """Set the absolute expiration.

        Accepts a UNIX timestamp (seconds, or milliseconds past 2038) or a
        ``datetime``. ``None`` or anything else falls back to the default
        expiration.
        """
        expiration = _numeric_integer(expiration)
        if isinstance(expiration, datetime):
            expiration = expiration.timestamp()
        if not is_number(expiration):
            self._expiration = self._resolve_default()
            return self
        self._expiration = normalize_timestamp(expiration)
        return self

    def expires_after(self, lifetime: Any = UNSET) -> "CacheItem":
        """Set the expiration relative to now.

        ``0`` means never expire. ``None`` and datetimes are delegated to
        ``expires_at``. Calling without an argument leaves the expiration as
        it is.
        """
        if lifetime is UNSET:
            return self
        if lifetime is None or isinstance(lifetime, datetime):
            return self.expires_at(lifetime)
        if isinstance(lifetime, timedelta):
            lifetime = lifetime.total_seconds()
        if not is_number(lifetime):
            self._expiration = self._resolve_default()
            return self
        if lifetime == 0:
            self._expiration = None
            return self
        self._expiration = time.time() + lifetime
        return self

    def to_record(self) -> Dict[str, Any]:
        """Return the ``{key, value, hit, expiration}`` record."""
        return {
            "key": self.get_key(),
            "value": self.get(),
            "hit": self.is_hit(),
            "expiration": self.expiration,
        }

    def serialize(self) -> str:
        """Encode the item record as text."""
        return serialize(self.to_record())

    def _resolve_default(self) -> Expiration:
        if not self._default_expiration:
            return None
        return time.time() + self._default_expiration

    def __repr__(self) -> str:
        return (
            f"CacheItem(key={self._key!r}, hit={self._is_hit}, "
            f"expiration={self._expiration!r})"
        )
