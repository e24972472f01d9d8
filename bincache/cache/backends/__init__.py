"""
bincache - Cache Backends

Exports the always-available bin backend implementations.

The Redis backend is lazy-loaded by the registry to avoid importing the
redis client when no bin is configured to use it.
"""

from .file import FileCacheBackend
from .memory import MemoryCacheBackend

__all__ = [
    "FileCacheBackend",
    "MemoryCacheBackend",
]
