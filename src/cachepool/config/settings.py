"""Process-level settings for cachepool.

Resolves the runtime environment and the default cache directory used by the
filesystem adapter when no directory is configured.
"""

import os
from functools import lru_cache
from pathlib import Path

CACHE_DIR_ENV = "CACHEPOOL_CACHE_DIR"
DEFAULT_ENVIRONMENT = "production"


def get_environment() -> str:
    """Get the current environment name."""
    environment = os.getenv("ENVIRONMENT", DEFAULT_ENVIRONMENT).strip().lower()
    return environment or DEFAULT_ENVIRONMENT


@lru_cache()
def cache_directory() -> str:
    """Get the process cache directory.

    ``CACHEPOOL_CACHE_DIR`` wins when set, otherwise caches live under
    ``storage/cache/<environment>`` relative to the working directory.
    """
    configured = os.getenv(CACHE_DIR_ENV, "").strip()
    if configured:
        return str(Path(configured).resolve())
    return str((Path.cwd() / "storage" / "cache" / get_environment()).resolve())
