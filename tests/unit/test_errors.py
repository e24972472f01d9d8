"""
bincache - Error Type Tests
"""

from bincache.errors import (
    BinCacheError,
    CacheConnectionError,
    CacheError,
    ConfigurationError,
    ErrorCode,
    extract_error_code,
)


def test_to_dict() -> None:
    """Errors serialize with their class name and details."""
    error = CacheConnectionError("redis", details={"bin": "default"})

    assert error.to_dict() == {
        "error": "CacheConnectionError",
        "message": "Failed to connect to cache backend: redis",
        "details": {"bin": "default"},
    }
    assert error.backend == "redis"
    assert isinstance(error, CacheError)
    assert isinstance(error, BinCacheError)


def test_extract_error_code() -> None:
    """Each family maps to its code."""
    assert extract_error_code(CacheConnectionError("redis")) == ErrorCode.CACHE_UNAVAILABLE
    assert extract_error_code(CacheError("nope")) == ErrorCode.CACHE_FAILURE
    assert extract_error_code(ConfigurationError("bad")) == ErrorCode.CONFIGURATION_ERROR
    assert extract_error_code(ValueError("bad expire")) == ErrorCode.INVALID_INPUT
    assert extract_error_code(RuntimeError("?")) == ErrorCode.INTERNAL_ERROR


def test_errors_carry_message_and_details_only() -> None:
    """Errors hold a message and diagnostic details, nothing transport-specific."""
    error = ConfigurationError("bad", {"field": "redis_url"})

    assert error.message == "bad"
    assert error.details == {"field": "redis_url"}
    assert not hasattr(error, "status_code")
    assert ConfigurationError("bare").details == {}
