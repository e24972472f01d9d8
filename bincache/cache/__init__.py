"""
bincache - Cache Module

Bin-scoped caching with pluggable backends.

- registry.py: CacheRegistry, the per-run bin -> backend mapping
- facade.py: public operations (cache_get, cache_set, cache_clear_all, ...)
- interface.py: abstract interface all backends implement
- backends/: memory, file and redis backends

Usage:
    from bincache.cache import CacheRegistry, cache_get, cache_set

    registry = CacheRegistry()
    cache_set(registry, "key", {"value": 1}, "discovery")
    value = cache_get(registry, "key", "discovery")
"""

from .entry import CacheEntry
from .facade import (
    cache_clear_all,
    cache_get,
    cache_get_multiple,
    cache_is_empty,
    cache_list_bins,
    cache_set,
    make_cid,
)
from .interface import CacheInterface
from .registry import DEFAULT_BIN, BinProvider, CacheRegistry

__all__ = [
    # Facade operations
    "cache_get",
    "cache_get_multiple",
    "cache_set",
    "cache_clear_all",
    "cache_is_empty",
    "cache_list_bins",
    "make_cid",
    # Registry
    "CacheRegistry",
    "BinProvider",
    "DEFAULT_BIN",
    # Interface
    "CacheInterface",
    "CacheEntry",
]
