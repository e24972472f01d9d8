"""
bincache - Redis Cache Backend

Redis bin backend with:
- JSON entry envelopes (payload, expiration policy, creation time)
- Key layout ``<namespace>:<bin>:<cid>`` so bins never collide
- Native key expiry for ExpiresAt entries (EXAT), backed by a read-time check
- Prefix clears using SCAN + DEL in batches

Requires: redis>=5.0

Example:
    cache = RedisCacheBackend(redis_url="redis://localhost:6379", bin_name="discovery")
    cache.set("commands", {"status": ["st", "status"]})
    val = cache.get("commands")
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from ...errors import CacheConnectionError
from ...expire import PERMANENT, Expire, ExpiresAt
from ..entry import CacheEntry
from ..interface import CacheInterface
from ..serialization import dumps_entry, loads_entry

logger = logging.getLogger(__name__)

try:
    from redis import Redis
    from redis.exceptions import ConnectionError as RedisConnectionError
    from redis.exceptions import RedisError
    from redis.exceptions import TimeoutError as RedisTimeoutError
except ImportError as e:  # pragma: no cover
    raise ImportError(
        "Redis client is required but not installed. "
        "Install with: pip install 'redis>=5.0.0' or add 'redis' to your dependencies."
    ) from e

_GLOB_SPECIALS = "\\*?[]"


def _escape_glob(text: str) -> str:
    """Escape Redis MATCH metacharacters so text is matched literally."""
    return "".join(f"\\{ch}" if ch in _GLOB_SPECIALS else ch for ch in text)


class RedisCacheBackend(CacheInterface):
    """
    Redis bin backend.

    Notes:
    - Values are stored as UTF-8 JSON envelopes.
    - Temporary entries carry no Redis TTL; they are removed by sweeps.
    - Connectivity failures on reads and clears raise CacheConnectionError;
      failed writes are logged and reported as False.
    """

    def __init__(
        self,
        redis_url: str,
        bin_name: str = "default",
        namespace: str = "bincache",
        max_connections: int = 10,
        socket_timeout: int = 5,
        client: Redis | None = None,
    ) -> None:
        """
        Initialize Redis backend.

        Args:
            redis_url: Connection URL, e.g. redis://localhost:6379/0 or rediss:// for TLS
            bin_name: Bin this backend serves
            namespace: Prefix for all keys
            max_connections: Connection pool size
            socket_timeout: Socket timeout in seconds
            client: Pre-built client (shares a pool between bins)
        """
        if not redis_url and client is None:
            raise ValueError("redis_url is required")

        self.bin_name = bin_name
        self.namespace = namespace.strip() or "bincache"
        self._prefix = f"{self.namespace}:{bin_name}:"
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0

        # Connects lazily on first command
        self._client = client or Redis.from_url(  # type: ignore[call-overload]
            url=redis_url,
            decode_responses=True,
            # Invalid UTF-8 then fails JSON decoding and reads as a corrupt entry
            encoding_errors="replace",
            max_connections=max_connections,
            socket_timeout=socket_timeout,
        )

    # ------------ Helpers ------------

    def _make_key(self, cid: str) -> str:
        """Create namespaced key."""
        return f"{self._prefix}{cid}"

    @contextmanager
    def _connection_guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise CacheConnectionError(
                "redis",
                details={"bin": self.bin_name, "operation": operation, "error": str(e)},
            ) from e

    def _decode(self, key: str, raw: str | bytes | None, now: float) -> CacheEntry | None:
        """Decode a stored envelope; None for misses, corrupt and expired data."""
        if raw is None:
            return None

        try:
            entry = loads_entry(raw)
        except ValueError as e:
            logger.warning(
                f"Discarding unreadable cache value at {key}: {e}",
                extra={"bin": self.bin_name, "key": key, "error": str(e)},
            )
            self._client.delete(key)
            return None

        if not entry.is_live(now):
            self._client.delete(key)
            return None

        return entry

    def _scan_keys(self, match: str) -> list[str]:
        return list(self._client.scan_iter(match=match, count=1000))

    def _delete_keys(self, keys: list[str]) -> int:
        """Delete keys in chunks; returns number removed."""
        deleted_total = 0
        chunk_size = 1000
        for i in range(0, len(keys), chunk_size):
            deleted_total += int(self._client.delete(*keys[i : i + chunk_size]))
        return deleted_total

    # ------------ Core Interface ------------

    def get(self, cid: str) -> Any | None:
        """Retrieve a value by cid."""
        if not cid:
            logger.warning("Attempted to get cache value with empty cid")
            return None

        key = self._make_key(cid)
        with self._connection_guard("get"):
            entry = self._decode(key, self._client.get(key), time.time())

        if entry is None:
            self._misses += 1
            return None

        self._hits += 1
        return entry.data

    def get_multiple(self, cids: list[str]) -> dict[str, Any]:
        """Retrieve multiple values in one round-trip using MGET."""
        if not cids:
            return {}

        keys = [self._make_key(cid) for cid in cids]
        now = time.time()
        result: dict[str, Any] = {}

        with self._connection_guard("get_multiple"):
            values = self._client.mget(keys)
            # mget preserves order
            for cid, key, raw in zip(cids, keys, values, strict=True):
                entry = self._decode(key, raw, now)
                if entry is None:
                    self._misses += 1
                    continue
                self._hits += 1
                result[cid] = entry.data

        return result

    def set(self, cid: str, data: Any, expire: Expire = PERMANENT) -> bool:
        """Store a value; ExpiresAt entries also get a Redis EXAT."""
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

        exat = int(math.ceil(expire.at)) if isinstance(expire, ExpiresAt) else None
        try:
            success = bool(self._client.set(name=self._make_key(cid), value=payload, exat=exat))
        except RedisError as e:
            logger.error(
                f"Failed to set cid '{cid}' in Redis: {e}",
                extra={"cid": cid, "bin": self.bin_name, "namespace": self.namespace, "error": str(e)},
                exc_info=True,
            )
            return False

        if success:
            self._sets += 1
        return success

    def clear(self, cid: str | None = None, wildcard: bool = False) -> int:
        """Remove entries from the bin."""
        with self._connection_guard("clear"):
            if cid is not None and not wildcard:
                removed = int(self._client.delete(self._make_key(cid)))
            elif cid is not None:
                pattern = "" if cid == "*" else _escape_glob(cid)
                keys = self._scan_keys(f"{_escape_glob(self._prefix)}{pattern}*")
                removed = self._delete_keys(keys)
            else:
                now = time.time()
                keys = self._scan_keys(f"{_escape_glob(self._prefix)}*")
                doomed = []
                for key in keys:
                    raw = self._client.get(key)
                    if raw is None:
                        continue
                    try:
                        entry = loads_entry(raw)
                    except ValueError:
                        doomed.append(key)
                        continue
                    if entry.is_sweepable(now):
                        doomed.append(key)
                removed = self._delete_keys(doomed)

        self._deletes += removed
        logger.debug(
            f"Cleared {removed} keys from redis bin '{self.bin_name}'",
            extra={"bin": self.bin_name, "cid": cid, "wildcard": wildcard},
        )
        return removed

    def is_empty(self) -> bool:
        """Check whether any live entry remains in the bin."""
        now = time.time()
        with self._connection_guard("is_empty"):
            for key in self._client.scan_iter(match=f"{_escape_glob(self._prefix)}*", count=1000):
                if self._decode(key, self._client.get(key), now) is not None:
                    return False
        return True

    def get_stats(self) -> dict[str, Any]:
        """Return backend statistics and connectivity."""
        stats: dict[str, Any] = {
            "backend": "redis",
            "bin": self.bin_name,
            "namespace": self.namespace,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": 0.0,
            "sets": self._sets,
            "deletes": self._deletes,
            "connected": False,
        }

        total_requests = self._hits + self._misses
        stats["hit_rate"] = round((self._hits / total_requests) * 100, 2) if total_requests else 0.0

        try:
            stats["connected"] = bool(self._client.ping())
        except RedisError as e:
            logger.warning(f"Failed to ping Redis: {e}", extra={"bin": self.bin_name, "error": str(e)})

        return stats

    def close(self) -> None:
        """Close the Redis client and release its pool."""
        try:
            self._client.close()
            logger.info(f"Closed Redis cache backend for bin '{self.bin_name}'")
        except RedisError as e:
            logger.error(
                f"Error closing Redis client: {e}", extra={"bin": self.bin_name, "error": str(e)}, exc_info=True
            )
