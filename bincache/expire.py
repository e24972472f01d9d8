"""
bincache - Expiration Policy

Every cache entry carries one of three expiration policies:

- Permanent: never expires; removed only by an explicit, targeted clear.
- Temporary: stays readable, but is removed by any general sweep of its bin.
- ExpiresAt(at): readable until the Unix timestamp ``at``; afterwards it reads
  as a miss and is removed by a sweep.

Integers are accepted at the API boundary for compatibility with the classic
encoding (0 = permanent, -1 = temporary, anything else = absolute timestamp),
but everything past ``coerce_expire`` works with the tagged variants.
"""

import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

PERMANENT_VALUE = 0
TEMPORARY_VALUE = -1


@dataclass(frozen=True)
class Permanent:
    """Entry never expires."""

    @property
    def value(self) -> int:
        return PERMANENT_VALUE

    def is_live(self, now: float) -> bool:
        return True

    def is_sweepable(self, now: float) -> bool:
        return False


@dataclass(frozen=True)
class Temporary:
    """Entry is live until the next general sweep of its bin."""

    @property
    def value(self) -> int:
        return TEMPORARY_VALUE

    def is_live(self, now: float) -> bool:
        return True

    def is_sweepable(self, now: float) -> bool:
        return True


@dataclass(frozen=True)
class ExpiresAt:
    """Entry is live until the absolute Unix timestamp ``at``."""

    at: float

    @property
    def value(self) -> float:
        return self.at

    def is_live(self, now: float) -> bool:
        return now < self.at

    def is_sweepable(self, now: float) -> bool:
        return not self.is_live(now)


Expire = Permanent | Temporary | ExpiresAt

PERMANENT = Permanent()
TEMPORARY = Temporary()


def coerce_expire(value: Any, now: float | None = None) -> Expire:
    """
    Normalize a caller-supplied expiration into a tagged policy.

    Args:
        value: An Expire instance, 0 / -1, an absolute Unix timestamp,
            a datetime (absolute) or a timedelta (relative to ``now``)
        now: Reference time for timedelta values (defaults to time.time())

    Returns:
        Permanent, Temporary or ExpiresAt

    Raises:
        ValueError: If the value cannot be interpreted as an expiration
    """
    if isinstance(value, (Permanent, Temporary, ExpiresAt)):
        return value

    if value is None:
        return PERMANENT

    if isinstance(value, timedelta):
        if now is None:
            now = time.time()
        return ExpiresAt(now + value.total_seconds())

    if isinstance(value, datetime):
        return ExpiresAt(value.timestamp())

    # bool is an int subclass; True/False are never meaningful here
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Invalid cache expiration: {value!r}")

    if value == PERMANENT_VALUE:
        return PERMANENT
    if value == TEMPORARY_VALUE:
        return TEMPORARY
    if value < 0:
        raise ValueError(f"Invalid cache expiration timestamp: {value!r}")
    return ExpiresAt(float(value))
