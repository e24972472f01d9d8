"""
bincache - Configuration Module

Provides typed configuration loading and validation.
"""

from .loader import get_config, load_config, parse_bin_backends, reload_config
from .schemas import (
    BinCacheConfig,
    CacheBackend,
    CacheConfig,
    Environment,
    LogLevel,
)

__all__ = [
    # Loader functions
    "load_config",
    "get_config",
    "reload_config",
    "parse_bin_backends",
    # Main config
    "BinCacheConfig",
    # Enums
    "Environment",
    "CacheBackend",
    "LogLevel",
    # Config sections
    "CacheConfig",
]
