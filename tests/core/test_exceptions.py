"""Tests for the cachepool exception hierarchy."""

from cachepool.core.exceptions import (
    CachePoolError,
    CacheError,
    CacheInvalidArgumentError,
    CacheRuntimeError,
    CacheConnectionError,
    CacheSerializationError,
    create_error_response,
)


class TestExceptionHierarchy:
    """Test exception classes."""
    
    def test_hierarchy(self):
        """All cache errors share one base and match builtin categories."""
        assert issubclass(CacheError, CachePoolError)
        assert issubclass(CacheInvalidArgumentError, ValueError)
        assert issubclass(CacheRuntimeError, RuntimeError)
        assert issubclass(CacheConnectionError, CacheRuntimeError)
        assert issubclass(CacheSerializationError, CacheError)
    
    def test_error_code_defaults_to_class_name(self):
        """Errors without an explicit code use their class name."""
        error = CacheConnectionError("Redis is not connected")
        
        assert error.message == "Redis is not connected"
        assert error.error_code == "CacheConnectionError"
        assert error.details == {}
        assert str(error) == "Redis is not connected"
    
    def test_error_response(self):
        """Errors render to a standard response body."""
        error = CacheInvalidArgumentError("Invalid key", error_code="INVALID_KEY", details={"key": "None"})
        
        assert create_error_response(error) == {
            "error": {
                "code": "INVALID_KEY",
                "message": "Invalid key",
                "details": {"key": "None"},
                "type": "CacheInvalidArgumentError",
            }
        }
