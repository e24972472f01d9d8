"""
bincache - Cache Entry

A single stored item: the payload plus the bookkeeping every backend needs
to decide whether the item is still live.
"""

import time
from dataclasses import dataclass, field
from typing import Any

from ..expire import PERMANENT, Expire, coerce_expire


@dataclass
class CacheEntry:
    """One cached value inside a bin."""

    cid: str
    data: Any
    expire: Expire = PERMANENT
    created: float = field(default_factory=time.time)

    def is_live(self, now: float | None = None) -> bool:
        """True if the entry may be returned by a read."""
        return self.expire.is_live(time.time() if now is None else now)

    def is_sweepable(self, now: float | None = None) -> bool:
        """True if a general (expirable-only) clear should remove the entry."""
        return self.expire.is_sweepable(time.time() if now is None else now)

    def to_record(self) -> dict[str, Any]:
        """Plain-dict form used by serializing backends."""
        return {
            "cid": self.cid,
            "data": self.data,
            "expire": self.expire.value,
            "created": self.created,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "CacheEntry":
        """Rebuild an entry from ``to_record`` output."""
        return cls(
            cid=record["cid"],
            data=record["data"],
            expire=coerce_expire(record["expire"]),
            created=float(record.get("created", 0.0)),
        )
