"""Base exceptions for cachepool.

This module defines the root of the exception hierarchy. All exceptions carry
an error code and a details mapping so they can be rendered consistently by
callers that expose cache failures over an API.
"""

from typing import Any, Dict, Optional


class CachePoolError(Exception):
    """Base exception for all cachepool errors."""
    
    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        *args,
        **kwargs
    ):
        super().__init__(message, *args, **kwargs)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


def create_error_response(exception: CachePoolError) -> Dict[str, Any]:
    """Create standardized error response from exception.
    
    Args:
        exception: The cachepool exception
        
    Returns:
        Error response dictionary
    """
    return {
        "error": {
            "code": exception.error_code,
            "message": exception.message,
            "details": exception.details,
            "type": exception.__class__.__name__,
        }
    }
