"""
bincache - Bin-scoped cache for command-line tools

Lets a short-lived process keep expensive results (discovered commands,
remote metadata) between invocations, partitioned into named bins with
permanent, temporary and timestamped expiration.
"""

__version__ = "1.0.0"

from .cache import (  # noqa: E402
    DEFAULT_BIN,
    CacheInterface,
    CacheRegistry,
    cache_clear_all,
    cache_get,
    cache_get_multiple,
    cache_is_empty,
    cache_list_bins,
    cache_set,
    make_cid,
)
from .errors import BinCacheError, CacheConnectionError, CacheError, ConfigurationError  # noqa: E402
from .expire import PERMANENT, TEMPORARY, Expire, ExpiresAt, Permanent, Temporary, coerce_expire  # noqa: E402

__all__ = [
    "__version__",
    # Operations
    "cache_get",
    "cache_get_multiple",
    "cache_set",
    "cache_clear_all",
    "cache_is_empty",
    "cache_list_bins",
    "make_cid",
    # Registry
    "CacheRegistry",
    "CacheInterface",
    "DEFAULT_BIN",
    # Expiration
    "Expire",
    "Permanent",
    "Temporary",
    "ExpiresAt",
    "PERMANENT",
    "TEMPORARY",
    "coerce_expire",
    # Errors
    "BinCacheError",
    "CacheError",
    "CacheConnectionError",
    "ConfigurationError",
]
