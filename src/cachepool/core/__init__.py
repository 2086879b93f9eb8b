"""Core building blocks shared across cachepool features."""
