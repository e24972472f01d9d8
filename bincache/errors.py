"""
bincache - Core Error Types

Defines the exception hierarchy for the bin cache.
All exceptions inherit from BinCacheError for consistent error handling.

Cache misses and failed writes are NOT exceptions; they are reported through
return values (None / False) so that caching stays an optional optimization.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """
    Standard error codes for structured error reporting.

    Used by callers that surface cache problems to a user or a log sink.
    """

    # Input validation errors
    INVALID_INPUT = "INVALID_INPUT"

    # Configuration errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Cache errors
    CACHE_FAILURE = "CACHE_FAILURE"
    CACHE_UNAVAILABLE = "CACHE_UNAVAILABLE"

    # Internal errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class BinCacheError(Exception):
    """Base exception for all bincache errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for diagnostics output."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(BinCacheError):
    """Raised when configuration is invalid or missing."""

    pass


class CacheError(BinCacheError):
    """Base exception for cache-related errors."""

    pass


class CacheConnectionError(CacheError):
    """Raised when a cache backend cannot reach its storage."""

    def __init__(self, backend: str, details: dict[str, Any] | None = None):
        message = f"Failed to connect to cache backend: {backend}"
        super().__init__(message, details)
        self.backend = backend


def extract_error_code(error: Exception) -> ErrorCode:
    """
    Extract appropriate ErrorCode from an exception.

    Args:
        error: Exception to categorize

    Returns:
        Appropriate ErrorCode for the exception
    """
    if isinstance(error, CacheConnectionError):
        return ErrorCode.CACHE_UNAVAILABLE

    if isinstance(error, CacheError):
        return ErrorCode.CACHE_FAILURE

    if isinstance(error, ConfigurationError):
        return ErrorCode.CONFIGURATION_ERROR

    if isinstance(error, ValueError):
        return ErrorCode.INVALID_INPUT

    return ErrorCode.INTERNAL_ERROR
