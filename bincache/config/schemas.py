"""
bincache - Configuration Schemas

Defines typed configuration models using Pydantic for validation and type safety.
All configuration is read from environment variables and validated at startup.
"""

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Environment(str, Enum):
    """Runtime environment."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TEST = "test"


class CacheBackend(str, Enum):
    """Supported bin backends."""

    MEMORY = "memory"
    FILE = "file"
    REDIS = "redis"  # Requires the redis client


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def _default_cache_directory() -> str:
    return str(Path.home() / ".cache" / "bincache")


class CacheConfig(BaseModel):
    """Cache configuration."""

    backend: CacheBackend = Field(default=CacheBackend.FILE, description="Default backend for every bin")
    bin_backends: dict[str, CacheBackend] = Field(
        default_factory=dict,
        description="Per-bin backend overrides (bin name -> backend)",
    )
    directory: str = Field(default_factory=_default_cache_directory, description="Root directory for the file backend")
    namespace: str = Field(default="bincache", description="Key prefix for the redis backend")

    # Redis-specific settings (only used when a bin uses redis)
    redis_url: str | None = Field(default=None, description="Redis connection URL")
    redis_max_connections: int = Field(default=10, ge=1, description="Redis connection pool size")
    redis_socket_timeout: int = Field(default=5, ge=1, description="Redis socket timeout in seconds")

    @field_validator("bin_backends")
    @classmethod
    def validate_bin_names(cls, v: dict[str, CacheBackend]) -> dict[str, CacheBackend]:
        """Bin names must be non-empty."""
        for name in v:
            if not name.strip():
                raise ValueError("bin_backends keys must be non-empty bin names")
        return v

    @model_validator(mode="after")
    def validate_redis_url(self) -> "CacheConfig":
        """Ensure redis_url is provided whenever any bin uses redis."""
        if self.uses_backend(CacheBackend.REDIS) and not self.redis_url:
            raise ValueError("redis_url is required when a cache backend is 'redis'")
        return self

    def uses_backend(self, backend: CacheBackend) -> bool:
        """True if the default or any per-bin override selects backend."""
        return self.backend == backend or backend in self.bin_backends.values()

    def backend_for(self, bin_name: str) -> CacheBackend:
        """Resolve the backend kind for a bin."""
        return self.bin_backends.get(bin_name, self.backend)


class BinCacheConfig(BaseModel):
    """Root configuration for bincache."""

    environment: Environment = Field(default=Environment.DEVELOPMENT, description="Runtime environment")
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")

    cache: CacheConfig = Field(default_factory=CacheConfig)

    model_config = ConfigDict(validate_assignment=True)

    def summary(self) -> dict[str, Any]:
        """Compact description for startup logging."""
        return {
            "environment": self.environment.value,
            "cache_backend": self.cache.backend.value,
            "bin_backends": {name: kind.value for name, kind in self.cache.bin_backends.items()},
        }
