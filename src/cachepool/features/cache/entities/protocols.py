"""Cache enums and protocols for cachepool."""

from enum import Enum
from typing import Any, Protocol, runtime_checkable

from ....core.exceptions import CacheInvalidArgumentError


class AdapterKind(str, Enum):
    """Supported cache pool backends."""
    FILE = "file"
    MEMORY = "memory"
    REDIS = "redis"
    VOID = "void"
    
    @classmethod
    def parse(cls, value: Any) -> "AdapterKind":
        """Resolve a configured adapter name.
        
        Matching is case-insensitive and ignores surrounding whitespace.
        ``filesystem`` is accepted for ``file``; ``null`` and ``none`` for
        ``void``. Anything else is rejected.
        
        Raises:
            CacheInvalidArgumentError: If the name is not recognized
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise CacheInvalidArgumentError(
                f"Invalid cache adapter: {value!r}",
                details={"adapter": repr(value)},
            )
        name = value.strip().lower()
        name = _ADAPTER_ALIASES.get(name, name)
        try:
            return cls(name)
        except ValueError:
            raise CacheInvalidArgumentError(
                f"Invalid cache adapter: {value!r}",
                details={"adapter": value, "available": [kind.value for kind in cls]},
            ) from None


_ADAPTER_ALIASES = {
    "filesystem": AdapterKind.FILE.value,
    "null": AdapterKind.VOID.value,
    "none": AdapterKind.VOID.value,
}


class ErrorPolicy(str, Enum):
    """How an adapter reports a backend failure for one operation.
    
    SWALLOW maps the failure to the operation's fallback result (``False`` or
    a miss item). PROPAGATE raises it to the caller as a ``CacheError``.
    """
    SWALLOW = "swallow"
    PROPAGATE = "propagate"


@runtime_checkable
class RecordSerializer(Protocol):
    """Protocol for encoding cache values and records as text."""
    
    def encode(self, value: Any) -> str:
        """Encode a value to text."""
        ...
    
    def decode(self, payload: Any) -> Any:
        """Decode text (or bytes) back to a value."""
        ...
