"""Logging configuration for cachepool.

The ``cachepool`` logger tree is configured once from environment variables:

- ``LOG_LEVEL``: explicit level, wins over verbosity
- ``LOG_VERBOSITY``: QUIET, NORMAL, VERBOSE or DEBUG
- ``LOG_FORMAT``: simple, detailed or json
- ``ENABLE_CACHE_LOGGING``: let the per-key adapter loggers follow the
  package level instead of staying at WARNING
"""

import logging
import logging.config
import os
from typing import Dict, Any
from enum import Enum


class LogLevel(str, Enum):
    """Supported log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogVerbosity(str, Enum):
    """Log verbosity modes mapped to a package level."""
    QUIET = "QUIET"
    NORMAL = "NORMAL"
    VERBOSE = "VERBOSE"
    DEBUG = "DEBUG"


class LogFormat(str, Enum):
    """Log line layouts."""
    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"


VERBOSITY_LEVELS = {
    LogVerbosity.QUIET: LogLevel.ERROR,
    LogVerbosity.NORMAL: LogLevel.WARNING,
    LogVerbosity.VERBOSE: LogLevel.INFO,
    LogVerbosity.DEBUG: LogLevel.DEBUG,
}

FORMATS = {
    LogFormat.SIMPLE: "%(asctime)s - %(levelname)s - %(message)s",
    LogFormat.DETAILED: "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
    LogFormat.JSON: '{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
}


def get_log_level_from_verbosity(verbosity: str) -> str:
    """Map a verbosity name to a level name, WARNING when unknown."""
    try:
        return VERBOSITY_LEVELS[LogVerbosity(verbosity.strip().upper())].value
    except ValueError:
        return LogLevel.WARNING.value


class LoggingConfig:
    """Builds and applies the dictConfig for the cachepool logger tree."""

    ROOT_LOGGER = "cachepool"

    # Adapters that log every hit and miss
    PER_KEY_LOGGERS = [
        "cachepool.features.cache.adapters.filesystem_adapter",
        "cachepool.features.cache.adapters.memory_adapter",
    ]

    # Client libraries kept at ERROR
    LIBRARY_LOGGERS = [
        "asyncio",
        "redis",
    ]

    @staticmethod
    def resolve_level() -> str:
        """Return the effective package level from the environment."""
        level = os.getenv("LOG_LEVEL", "").strip().upper()
        if not level:
            level = get_log_level_from_verbosity(os.getenv("LOG_VERBOSITY", LogVerbosity.NORMAL.value))
        return level if level in LogLevel.__members__ else LogLevel.WARNING.value

    @staticmethod
    def resolve_format() -> str:
        """Return the log line format from the environment."""
        try:
            return FORMATS[LogFormat(os.getenv("LOG_FORMAT", LogFormat.SIMPLE.value).strip().lower())]
        except ValueError:
            return FORMATS[LogFormat.SIMPLE]

    @staticmethod
    def _logger_entry(level: str) -> Dict[str, Any]:
        return {"level": level, "handlers": ["console"], "propagate": False}

    @classmethod
    def build_config(cls) -> Dict[str, Any]:
        """Build the dictConfig mapping from environment variables."""
        level = cls.resolve_level()
        cache_logging = os.getenv("ENABLE_CACHE_LOGGING", "false").strip().lower() == "true"

        loggers = {cls.ROOT_LOGGER: cls._logger_entry(level)}
        if not cache_logging:
            per_key_level = LogLevel.DEBUG.value if level == LogLevel.DEBUG.value else LogLevel.WARNING.value
            for name in cls.PER_KEY_LOGGERS:
                loggers[name] = cls._logger_entry(per_key_level)
        for name in cls.LIBRARY_LOGGERS:
            loggers[name] = cls._logger_entry(LogLevel.ERROR.value)

        return {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": cls.resolve_format(), "datefmt": "%Y-%m-%d %H:%M:%S"},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": level,
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                },
            },
            "loggers": loggers,
        }

    @classmethod
    def configure(cls) -> None:
        """Apply the configuration built from the environment."""
        config = cls.build_config()
        logging.config.dictConfig(config)
        logging.getLogger(__name__).debug(f"cachepool logging configured at {config['handlers']['console']['level']}")

    @classmethod
    def set_module_level(cls, module_name: str, level: str) -> None:
        """Override the level of one logger."""
        logging.getLogger(module_name).setLevel(getattr(logging, level.upper()))

    @classmethod
    def silence_module(cls, module_name: str) -> None:
        """Only let critical records through for one logger."""
        cls.set_module_level(module_name, LogLevel.CRITICAL.value)


def setup_logging() -> None:
    """Configure cachepool logging from environment variables."""
    LoggingConfig.configure()


def get_logger(name: str) -> logging.Logger:
    """Get a logger, usually called with ``__name__``."""
    return logging.getLogger(name)
