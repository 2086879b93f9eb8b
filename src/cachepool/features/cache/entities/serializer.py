"""JSON record serializer for cache items.

Encodes cache values with type preservation for the common Python types that
JSON cannot express natively. Used for filesystem records and Redis values.

Extended values are written as ``{"__cachepool_type__": <name>, "value": ...}``.
A user dict that itself has a ``__cachepool_type__`` key is written as a
tagged ``dict`` holding its items as pairs, so every tagged object on the wire
was produced by the encoder.
"""

import json
from datetime import datetime, date
from decimal import Decimal
from typing import Any, Dict
from uuid import UUID

from ....core.exceptions import CacheSerializationError

TYPE_KEY = "__cachepool_type__"
VALUE_KEY = "value"


def _tagged(type_name: str, value: Any) -> Dict[str, Any]:
    return {TYPE_KEY: type_name, VALUE_KEY: value}


class CustomJSONEncoder(json.JSONEncoder):
    """Custom JSON encoder for extended type support."""
    
    def default(self, obj: Any) -> Any:
        """Handle non-standard JSON types."""
        if isinstance(obj, datetime):
            return _tagged("datetime", obj.isoformat())
        elif isinstance(obj, date):
            return _tagged("date", obj.isoformat())
        elif isinstance(obj, Decimal):
            return _tagged("decimal", str(obj))
        elif isinstance(obj, UUID):
            return _tagged("uuid", str(obj))
        elif isinstance(obj, set):
            return _tagged("set", list(obj))
        elif isinstance(obj, frozenset):
            return _tagged("frozenset", list(obj))
        elif isinstance(obj, bytes):
            return _tagged("bytes", obj.hex())
        
        return super().default(obj)


def escape_mappings(value: Any) -> Any:
    """Wrap user dicts that carry the type key so they decode as dicts."""
    if isinstance(value, dict):
        escaped = {key: escape_mappings(item) for key, item in value.items()}
        if TYPE_KEY in value:
            return _tagged("dict", [[key, item] for key, item in escaped.items()])
        return escaped
    if isinstance(value, (list, tuple)):
        return [escape_mappings(item) for item in value]
    return value


_DECODERS = {
    "datetime": datetime.fromisoformat,
    "date": date.fromisoformat,
    "decimal": Decimal,
    "uuid": UUID,
    "set": set,
    "frozenset": frozenset,
    "bytes": bytes.fromhex,
    "dict": lambda pairs: {key: item for key, item in pairs},
}


def decode_json_object(obj: Dict[str, Any]) -> Any:
    """Decode tagged JSON objects back to Python types."""
    if TYPE_KEY not in obj:
        return obj
    decoder = _DECODERS.get(obj[TYPE_KEY])
    if decoder is None or set(obj) != {TYPE_KEY, VALUE_KEY}:
        raise ValueError(f"Unknown tagged object: {obj[TYPE_KEY]!r}")
    return decoder(obj[VALUE_KEY])


class JSONRecordSerializer:
    """Compact JSON serializer for cache values and records."""
    
    def __init__(self, ensure_ascii: bool = False, sort_keys: bool = False):
        self.ensure_ascii = ensure_ascii
        self.sort_keys = sort_keys
    
    def encode(self, value: Any) -> str:
        """Encode value to a JSON string.
        
        Raises:
            CacheSerializationError: If the value cannot be represented
        """
        try:
            return json.dumps(
                escape_mappings(value),
                cls=CustomJSONEncoder,
                ensure_ascii=self.ensure_ascii,
                sort_keys=self.sort_keys,
                separators=(",", ":"),
            )
        except (TypeError, ValueError) as e:
            raise CacheSerializationError(
                f"Failed to serialize cache value: {e}",
                details={"type": type(value).__name__},
            ) from e
    
    def decode(self, payload: Any) -> Any:
        """Decode a JSON string or bytes payload.
        
        Raises:
            CacheSerializationError: If the payload is not valid JSON
        """
        try:
            if isinstance(payload, (bytes, bytearray)):
                payload = payload.decode("utf-8")
            return json.loads(payload, object_hook=decode_json_object)
        except (TypeError, ValueError) as e:
            raise CacheSerializationError(f"Failed to deserialize cache value: {e}") from e


default_serializer = JSONRecordSerializer()


def serialize(value: Any) -> str:
    """Serialize value with the default record serializer."""
    return default_serializer.encode(value)


def unserialize(payload: Any) -> Any:
    """Unserialize payload with the default record serializer."""
    return default_serializer.decode(payload)
