"""
bincache - Memory Cache Backend

In-process bin backend. Entries live for the lifetime of the process, which
makes it the natural choice for tests and for bins that only need to be
shared within a single command invocation.
"""

import logging
import time
from typing import Any

from ...expire import PERMANENT, Expire
from ..entry import CacheEntry
from ..interface import CacheInterface
from ..serialization import dumps_value

logger = logging.getLogger(__name__)


class MemoryCacheBackend(CacheInterface):
    """
    In-memory bin backend.

    Features:
    - Lazy expiry (expired entries are dropped on read)
    - Prefix and whole-bin clears
    - O(1) get/set; clears are O(n) in the bin size
    """

    def __init__(self, bin_name: str = "default"):
        """
        Initialize memory backend.

        Args:
            bin_name: Bin this backend serves
        """
        self.bin_name = bin_name

        # Storage: cid -> entry
        self._entries: dict[str, CacheEntry] = {}

        # Stats
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0

    def _live_entry(self, cid: str, now: float) -> CacheEntry | None:
        """Return the entry for cid if live, dropping it if expired."""
        entry = self._entries.get(cid)
        if entry is None:
            return None

        if not entry.is_live(now):
            del self._entries[cid]
            return None

        return entry

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
        """Retrieve multiple values in a single pass."""
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
        """Store value in the bin."""
        if not cid:
            logger.warning("Attempted to set cache value with empty cid")
            return False

        # Same value domain as the persistent backends
        try:
            dumps_value(data)
        except (TypeError, ValueError) as e:
            logger.error(
                f"Refusing value for cid '{cid}': {e}",
                extra={"cid": cid, "bin": self.bin_name, "value_type": type(data).__name__, "error": str(e)},
            )
            return False

        self._entries[cid] = CacheEntry(cid=cid, data=data, expire=expire)
        self._sets += 1
        return True

    def clear(self, cid: str | None = None, wildcard: bool = False) -> int:
        """Remove entries from the bin."""
        if cid is None:
            now = time.time()
            doomed = [key for key, entry in self._entries.items() if entry.is_sweepable(now)]
        elif not wildcard:
            doomed = [cid] if cid in self._entries else []
        else:
            doomed = [key for key in self._entries if self.matches(key, cid, wildcard)]

        for key in doomed:
            del self._entries[key]

        self._deletes += len(doomed)
        logger.debug(
            f"Cleared {len(doomed)} entries from memory bin '{self.bin_name}'",
            extra={"bin": self.bin_name, "cid": cid, "wildcard": wildcard},
        )
        return len(doomed)

    def is_empty(self) -> bool:
        """Check whether any live entry remains."""
        now = time.time()
        return not any(entry.is_live(now) for entry in self._entries.values())

    def get_stats(self) -> dict[str, Any]:
        """Get backend statistics."""
        total_requests = self._hits + self._misses
        hit_rate = (self._hits / total_requests * 100) if total_requests > 0 else 0.0

        return {
            "backend": "memory",
            "bin": self.bin_name,
            "size": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(hit_rate, 2),
            "sets": self._sets,
            "deletes": self._deletes,
        }

    def close(self) -> None:
        """Nothing to release; entries are dropped with the process."""
        logger.debug(f"Memory cache backend closed for bin '{self.bin_name}'")
