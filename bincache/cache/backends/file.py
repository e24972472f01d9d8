"""
bincache - File Cache Backend

Persists each bin in its own ``diskcache.Cache`` directory so cached data
survives between invocations of a short-lived command-line process.

Layout:
    <directory>/<quoted bin>/   (diskcache's SQLite index and value files)

Values are stored as the JSON entry envelope keyed by cid. ExpiresAt entries
are also handed to diskcache as ``expire=`` so they disappear natively once
their instant passes; Temporary entries carry no expiry and are removed by
expirable-only clears.

Requires: diskcache>=5.6
"""

import logging
import sqlite3
import time
from pathlib import Path
from typing import Any
from urllib.parse import quote

from diskcache import Cache, Timeout
from diskcache.core import ENOVAL

from ...expire import PERMANENT, Expire, ExpiresAt
from ..entry import CacheEntry
from ..interface import CacheInterface
from ..serialization import dumps_entry, loads_entry

logger = logging.getLogger(__name__)


class FileCacheBackend(CacheInterface):
    """
    Directory-per-bin backend on top of diskcache.

    Notes:
    - The bin's cache is opened lazily; reads on a bin that was never written
      do not create its directory.
    - Unreadable (corrupt) values are treated as misses and deleted.
    - Storage errors on read propagate; write errors are logged and
      reported as a False return.
    """

    def __init__(self, bin_name: str = "default", directory: str | Path = "~/.cache/bincache"):
        """
        Initialize file backend.

        Args:
            bin_name: Bin this backend serves
            directory: Cache root; the bin gets its own subdirectory
        """
        self.bin_name = bin_name
        self.root = Path(directory).expanduser()
        # Leading dots are escaped so "." and ".." stay inside the root
        dir_name = quote(bin_name, safe="")
        if dir_name.startswith("."):
            dir_name = "%2E" + dir_name[1:]
        self.directory = self.root / dir_name

        self._cache: Cache | None = None

        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0

    # ------------ Helpers ------------

    def _open(self) -> Cache:
        """Return the bin's diskcache, creating its directory on first use."""
        if self._cache is None:
            # No size eviction, and expired rows stay until a sweep counts them
            self._cache = Cache(str(self.directory), eviction_policy="none", cull_limit=0)
        return self._cache

    def _existing(self) -> Cache | None:
        """Return the bin's diskcache, or None if nothing was ever written."""
        if self._cache is None and not self.directory.is_dir():
            return None
        return self._open()

    def _read(self, cache: Cache, cid: str) -> CacheEntry | None:
        """Load the entry stored under cid; None if missing, expired or corrupt."""
        raw = cache.get(cid, default=ENOVAL, retry=True)
        if raw is ENOVAL:
            return None

        try:
            return loads_entry(raw)
        except ValueError as e:
            logger.warning(
                f"Discarding unreadable cache value for cid '{cid}' in bin '{self.bin_name}': {e}",
                extra={"bin": self.bin_name, "cid": cid, "error": str(e)},
            )
            cache.delete(cid, retry=True)
            return None

    def _live_entry(self, cid: str, now: float) -> CacheEntry | None:
        cache = self._existing()
        if cache is None:
            return None

        entry = self._read(cache, cid)
        if entry is None:
            return None

        if not entry.is_live(now):
            cache.delete(cid, retry=True)
            return None

        return entry

    def _cids(self, cache: Cache) -> list[str]:
        """Snapshot of the cids currently stored in the bin."""
        return [key for key in cache if isinstance(key, str)]

    # ------------ Core Interface ------------

    def get(self, cid: str) -> Any | None:
        """Retrieve value from the bin."""
        if not cid:
            logger.warning("Attempted to get cache value with empty cid")
            return None

        entry = self._live_entry(cid, time.time())
        if entry is None:
            self._misses += 1
            return None

        self._hits += 1
        return entry.data

    def get_multiple(self, cids: list[str]) -> dict[str, Any]:
        """Retrieve multiple values, keeping stored None values as hits."""
        now = time.time()
        result: dict[str, Any] = {}

        for cid in cids:
            if not cid:
                continue

            entry = self._live_entry(cid, now)
            if entry is None:
                self._misses += 1
                continue

            result[cid] = entry.data
            self._hits += 1

        return result

    def set(self, cid: str, data: Any, expire: Expire = PERMANENT) -> bool:
        """Store value in the bin; ExpiresAt entries also get a diskcache expiry."""
        if not cid:
            logger.warning("Attempted to set cache value with empty cid")
            return False

        try:
            payload = dumps_entry(CacheEntry(cid=cid, data=data, expire=expire))
        except (TypeError, ValueError) as e:
            logger.error(
                f"Failed to serialize value for cid '{cid}': {e}",
                extra={"cid": cid, "bin": self.bin_name, "value_type": type(data).__name__, "error": str(e)},
                exc_info=True,
            )
            return False

        ttl = expire.at - time.time() if isinstance(expire, ExpiresAt) else None
        try:
            self._open().set(cid, payload, expire=ttl, retry=True)
        except (OSError, sqlite3.Error, Timeout) as e:
            logger.error(
                f"Failed to write cid '{cid}' to {self.directory}: {e}",
                extra={"cid": cid, "bin": self.bin_name, "directory": str(self.directory), "error": str(e)},
                exc_info=True,
            )
            return False

        self._sets += 1
        return True

    def clear(self, cid: str | None = None, wildcard: bool = False) -> int:
        """Remove entries from the bin."""
        cache = self._existing()
        removed = 0

        if cache is None:
            pass
        elif cid is not None and not wildcard:
            removed = int(cache.delete(cid, retry=True))
        elif cid == "*":
            removed = cache.clear(retry=True)
        elif cid is not None:
            for key in self._cids(cache):
                if self.matches(key, cid, wildcard) and cache.delete(key, retry=True):
                    removed += 1
        else:
            now = time.time()
            removed = cache.expire(now, retry=True)
            for key in self._cids(cache):
                entry = self._read(cache, key)
                if entry is not None and entry.is_sweepable(now) and cache.delete(key, retry=True):
                    removed += 1

        self._deletes += removed
        logger.debug(
            f"Cleared {removed} entries from file bin '{self.bin_name}'",
            extra={"bin": self.bin_name, "cid": cid, "wildcard": wildcard},
        )
        return removed

    def is_empty(self) -> bool:
        """Check whether any live entry remains."""
        cache = self._existing()
        if cache is None:
            return True

        now = time.time()
        for key in self._cids(cache):
            entry = self._read(cache, key)
            if entry is not None and entry.is_live(now):
                return False
        return True

    def get_stats(self) -> dict[str, Any]:
        """Get backend statistics."""
        total_requests = self._hits + self._misses
        hit_rate = (self._hits / total_requests * 100) if total_requests > 0 else 0.0
        cache = self._existing()

        return {
            "backend": "file",
            "bin": self.bin_name,
            "directory": str(self.directory),
            "size": len(cache) if cache is not None else 0,
            "volume_bytes": cache.volume() if cache is not None else 0,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(hit_rate, 2),
            "sets": self._sets,
            "deletes": self._deletes,
        }

    def close(self) -> None:
        """Close the bin's diskcache connection."""
        if self._cache is not None:
            self._cache.close()
            self._cache = None
        logger.debug(f"File cache backend closed for bin '{self.bin_name}'")
