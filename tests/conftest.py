"""
bincache - Test Configuration and Shared Fixtures

Provides pytest configuration and shared fixtures for unit and integration tests.
"""

import os
import socket
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest

from bincache.cache.registry import CacheRegistry
from bincache.config import CacheBackend, CacheConfig

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "DEBUG"


def is_redis_available() -> bool:
    """Check if a Redis server is available for testing."""
    try:
        with socket.create_connection(("localhost", 6379), timeout=1):
            return True
    except OSError:
        return False


@pytest.fixture
def test_redis_url() -> str:
    """Get Redis URL for testing (database 15 for isolation)."""
    return os.environ.get("TEST_REDIS_URL", "redis://localhost:6379/15")


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    """Create a temporary cache root directory."""
    directory = tmp_path / "cache"
    directory.mkdir()
    return directory


@pytest.fixture
def memory_registry() -> Generator[CacheRegistry, None, None]:
    """Fresh registry whose bins all use the memory backend."""
    registry = CacheRegistry(CacheConfig(backend=CacheBackend.MEMORY))
    yield registry
    registry.close_all()


@pytest.fixture
def file_registry(cache_dir: Path) -> Generator[CacheRegistry, None, None]:
    """Fresh registry whose bins all use the file backend under a temp dir."""
    registry = CacheRegistry(CacheConfig(backend=CacheBackend.FILE, directory=str(cache_dir)))
    yield registry
    registry.close_all()


@pytest.fixture(params=["memory", "file"])
def registry(request: pytest.FixtureRequest, cache_dir: Path) -> Generator[CacheRegistry, None, None]:
    """Registry parametrized over the backends that need no server."""
    config = CacheConfig(backend=CacheBackend(request.param), directory=str(cache_dir))
    registry = CacheRegistry(config)
    yield registry
    registry.close_all()


@pytest.fixture
def mock_env_memory(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set environment variables for the memory backend."""
    monkeypatch.delenv("REDIS_URL", raising=False)
    monkeypatch.setenv("CACHE_BACKEND", "memory")
    monkeypatch.setenv("CACHE_NAMESPACE", "test")


@pytest.fixture
def mock_env_redis(monkeypatch: pytest.MonkeyPatch, test_redis_url: str) -> None:
    """Set environment variables for the Redis backend."""
    if not is_redis_available():
        pytest.skip("Redis not available")
    monkeypatch.setenv("CACHE_BACKEND", "redis")
    monkeypatch.setenv("REDIS_URL", test_redis_url)
    monkeypatch.setenv("REDIS_MAX_CONNECTIONS", "5")
    monkeypatch.setenv("REDIS_SOCKET_TIMEOUT", "2")
    monkeypatch.setenv("CACHE_NAMESPACE", "test")


@pytest.fixture
def sample_cache_data() -> dict[str, Any]:
    """Sample data for cache testing."""
    return {
        "simple_string": "hello",
        "simple_int": 42,
        "simple_float": 3.14,
        "simple_bool": True,
        "complex_dict": {
            "nested": {
                "key": "value",
                "number": 123,
                "list": [1, 2, 3],
            }
        },
        "complex_list": [
            {"id": 1, "name": "Alice"},
            {"id": 2, "name": "Bob"},
        ],
        "blob": b"\x00\x01binary\xff",
    }


@pytest.fixture(autouse=True)
def reset_config_singleton() -> Generator[None, None, None]:
    """Drop the loaded config after each test to prevent state leakage."""
    yield
    from bincache.config import loader

    loader._config_instance = None
