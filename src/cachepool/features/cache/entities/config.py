"""Cache configuration for cachepool."""

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_REDIS_HOST = "127.0.0.1"
DEFAULT_REDIS_PORT = 6379

# camelCase names accepted from application config files
_KEY_ALIASES = {
    "defaultLifetime": "default_lifetime",
    "connectionTimeout": "connection_timeout",
    "db": "database",
}


class FileAdapterSettings(BaseModel):
    """Filesystem adapter settings."""

    directory: Optional[str] = Field(default=None, description="Cache root directory")

    @field_validator("directory", mode="before")
    @classmethod
    def blank_directory(cls, v: Any) -> Optional[str]:
        """Treat blank or non-string directories as unset."""
        if not isinstance(v, str) or not v.strip():
            return None
        return v.strip()


class RedisAdapterSettings(BaseModel):
    """Redis adapter settings.

    Out-of-range values fall back to their defaults instead of failing.
    """

    host: str = Field(default=DEFAULT_REDIS_HOST, description="Redis host")
    port: int = Field(default=DEFAULT_REDIS_PORT, description="Redis port")
    database: int = Field(default=0, description="Redis database number")
    password: Optional[str] = Field(default=None, description="Redis password")
    timeout: float = Field(default=0.0, description="Command timeout in seconds, 0 for none")
    connection_timeout: float = Field(default=0.0, description="Connect timeout in seconds, 0 for none")

    @field_validator("host", mode="before")
    @classmethod
    def default_host(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            return DEFAULT_REDIS_HOST
        return v.strip()

    @field_validator("port", mode="before")
    @classmethod
    def default_port(cls, v: Any) -> int:
        try:
            port = int(v)
        except (TypeError, ValueError):
            return DEFAULT_REDIS_PORT
        if port < 1 or port > 65534:
            return DEFAULT_REDIS_PORT
        return port

    @field_validator("database", mode="before")
    @classmethod
    def default_database(cls, v: Any) -> int:
        try:
            database = int(v)
        except (TypeError, ValueError):
            return 0
        return max(database, 0)

    @field_validator("password", mode="before")
    @classmethod
    def string_password(cls, v: Any) -> Optional[str]:
        return v if isinstance(v, str) else None

    @field_validator("timeout", "connection_timeout", mode="before")
    @classmethod
    def numeric_timeout(cls, v: Any) -> float:
        try:
            return max(float(v), 0.0)
        except (TypeError, ValueError):
            return 0.0


class AdaptersSettings(BaseModel):
    """Per-adapter settings."""

    file: FileAdapterSettings = Field(default_factory=FileAdapterSettings)
    redis: RedisAdapterSettings = Field(default_factory=RedisAdapterSettings)


class CacheSettings(BaseSettings):
    """Cache settings, read from ``CACHEPOOL_*`` environment variables.

    Nested values use ``__``, e.g. ``CACHEPOOL_ADAPTERS__REDIS__HOST``.
    """

    model_config = SettingsConfigDict(
        env_prefix="CACHEPOOL_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    enable: bool = Field(default=True, description="Disable to force the void adapter")
    adapter: str = Field(default="file", description="file, memory, redis or void")
    default_lifetime: int = Field(default=0, ge=0, description="Default TTL in seconds, 0 for none")
    namespace: str = Field(default="_", description="Pool namespace")
    adapters: AdaptersSettings = Field(default_factory=AdaptersSettings)

    @field_validator("namespace", mode="before")
    @classmethod
    def default_namespace(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            return "_"
        return v.strip()

    @field_validator("adapter", mode="before")
    @classmethod
    def default_adapter(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            return "file"
        return v

    @field_validator("default_lifetime", mode="before")
    @classmethod
    def numeric_lifetime(cls, v: Any) -> int:
        try:
            return max(int(v), 0)
        except (TypeError, ValueError):
            return 0

    @classmethod
    def from_mapping(cls, config: Optional[Mapping[str, Any]]) -> "CacheSettings":
        """Build settings from an application config mapping.

        Accepts ``{"cache": {...}}`` or the inner cache mapping itself.
        """
        if not config:
            return cls()
        if isinstance(config.get("cache"), Mapping):
            config = config["cache"]
        return cls(**_normalize_keys(config))


def _normalize_keys(mapping: Mapping[str, Any]) -> Dict[str, Any]:
    normalized = {}
    for key, value in mapping.items():
        key = _KEY_ALIASES.get(key, key)
        if isinstance(value, Mapping):
            value = _normalize_keys(value)
        normalized[key] = value
    return normalized
