"""Feature packages for cachepool."""
