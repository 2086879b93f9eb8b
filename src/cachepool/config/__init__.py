"""Configuration for cachepool: logging and process settings."""

from .logging_config import (
    LoggingConfig,
    LogLevel,
    LogVerbosity,
    LogFormat,
    setup_logging,
    get_logger,
)
from .settings import (
    cache_directory,
    get_environment,
)

__all__ = [
    "LoggingConfig",
    "LogLevel",
    "LogVerbosity",
    "LogFormat",
    "setup_logging",
    "get_logger",
    "cache_directory",
    "get_environment",
]
