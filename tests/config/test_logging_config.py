"""Tests for logging configuration and process settings."""

import logging
from pathlib import Path

from cachepool.config import LoggingConfig, cache_directory, get_environment


class TestLoggingConfig:
    """Test the dictConfig built from environment variables."""
    
    def test_defaults(self, monkeypatch):
        """Normal verbosity logs warnings from the package logger."""
        for name in ("LOG_LEVEL", "LOG_VERBOSITY", "LOG_FORMAT", "ENABLE_CACHE_LOGGING"):
            monkeypatch.delenv(name, raising=False)
        
        config = LoggingConfig.build_config()
        
        assert config["loggers"]["cachepool"]["level"] == "WARNING"
        assert config["loggers"]["redis"]["level"] == "ERROR"
        assert "cachepool.features.cache.adapters.memory_adapter" in config["loggers"]
    
    def test_log_level_overrides_verbosity(self, monkeypatch):
        """An explicit LOG_LEVEL wins."""
        monkeypatch.setenv("LOG_VERBOSITY", "QUIET")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        
        config = LoggingConfig.build_config()
        
        assert config["handlers"]["console"]["level"] == "DEBUG"
    
    def test_invalid_level_falls_back(self, monkeypatch):
        """Unknown levels fall back to WARNING."""
        monkeypatch.setenv("LOG_LEVEL", "LOUD")
        
        assert LoggingConfig.build_config()["handlers"]["console"]["level"] == "WARNING"
    
    def test_cache_logging_enabled(self, monkeypatch):
        """ENABLE_CACHE_LOGGING keeps the per-key adapter loggers at package level."""
        monkeypatch.setenv("ENABLE_CACHE_LOGGING", "true")
        
        config = LoggingConfig.build_config()
        
        assert "cachepool.features.cache.adapters.memory_adapter" not in config["loggers"]
    
    def test_json_format(self, monkeypatch):
        """The json format emits one JSON object per record."""
        monkeypatch.setenv("LOG_FORMAT", "json")
        
        assert LoggingConfig.build_config()["formatters"]["default"]["format"].startswith('{"time"')
    
    def test_silence_module(self):
        """Silenced modules only log critical records."""
        LoggingConfig.silence_module("cachepool.tests.silenced")
        
        assert logging.getLogger("cachepool.tests.silenced").level == logging.CRITICAL


class TestProcessSettings:
    """Test environment and cache directory resolution."""
    
    def test_environment(self, monkeypatch):
        """ENVIRONMENT selects the environment, production by default."""
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        assert get_environment() == "production"
        
        monkeypatch.setenv("ENVIRONMENT", "Development")
        assert get_environment() == "development"
    
    def test_cache_directory_from_env(self, default_cache_dir):
        """CACHEPOOL_CACHE_DIR sets the cache directory."""
        assert cache_directory() == str(default_cache_dir.resolve())
    
    def test_cache_directory_per_environment(self, monkeypatch, tmp_path):
        """Without override, caches live in storage/cache/<environment>."""
        monkeypatch.delenv("CACHEPOOL_CACHE_DIR", raising=False)
        monkeypatch.setenv("ENVIRONMENT", "testing")
        monkeypatch.chdir(tmp_path)
        cache_directory.cache_clear()
        try:
            assert cache_directory() == str((Path(tmp_path) / "storage" / "cache" / "testing").resolve())
        finally:
            cache_directory.cache_clear()
