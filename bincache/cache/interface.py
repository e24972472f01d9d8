"""
bincache - Cache Interface

Defines the abstract interface that every bin backend must implement.
One backend instance serves exactly one bin.
"""

from abc import ABC, abstractmethod
from typing import Any

from ..expire import PERMANENT, Expire


class CacheInterface(ABC):
    """
    Abstract base class for bin backends.

    All backend implementations must implement this interface so the
    registry and facade behave identically on memory, file and redis storage.
    """

    #: Name of the bin this backend stores entries for
    bin_name: str

    @abstractmethod
    def get(self, cid: str) -> Any | None:
        """
        Retrieve a value from the bin.

        Args:
            cid: Cache identifier

        Returns:
            Cached value if found and live, None otherwise
        """
        pass

    @abstractmethod
    def set(self, cid: str, data: Any, expire: Expire = PERMANENT) -> bool:
        """
        Store a value in the bin, replacing any existing entry.

        Args:
            cid: Cache identifier
            data: Value to cache (must be serializable for persistent backends)
            expire: Expiration policy

        Returns:
            True if stored successfully, False otherwise
        """
        pass

    @abstractmethod
    def clear(self, cid: str | None = None, wildcard: bool = False) -> int:
        """
        Remove entries from the bin.

        - No cid: remove expirable entries only (temporary, or past their
          expiration instant). Permanent entries survive.
        - cid, no wildcard: remove exactly that entry.
        - cid with wildcard: remove every entry whose cid starts with ``cid``;
          ``"*"`` removes every entry in the bin.

        Returns:
            Number of entries removed
        """
        pass

    @abstractmethod
    def is_empty(self) -> bool:
        """
        Check whether the bin holds any live entries.

        Returns:
            True if no live entry exists
        """
        pass

    @abstractmethod
    def get_stats(self) -> dict[str, Any]:
        """
        Get backend statistics.

        Returns:
            Dictionary with statistics (hits, misses, size, etc.)
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """
        Release any resources held by the backend.
        """
        pass

    def get_multiple(self, cids: list[str]) -> dict[str, Any]:
        """
        Retrieve multiple values from the bin.

        Default implementation calls get() for each cid.
        Backends can override for better performance.

        Args:
            cids: List of cache identifiers

        Returns:
            Dictionary mapping cids to values (misses are omitted)
        """
        result = {}
        for cid in cids:
            value = self.get(cid)
            if value is not None:
                result[cid] = value
        return result

    @staticmethod
    def matches(cid: str, pattern: str, wildcard: bool) -> bool:
        """Apply clear() targeting rules to a single stored cid."""
        if not wildcard:
            return cid == pattern
        if pattern == "*":
            return True
        return cid.startswith(pattern)
