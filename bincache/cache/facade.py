"""
bincache - Cache Facade

Public cache operations. Each takes the run's CacheRegistry first, resolves
the bin's backend through it, and adds the policy shared by all backends:
default bin, expiration coercion, HIT/MISS/SET tracing and the three clear
modes.

Misses and failed writes are reported through return values, never raised,
so a broken cache can only make a command slower, not make it fail.
Exceptions raised by a backend propagate unchanged.

Usage:
    from bincache import CacheRegistry, TEMPORARY, cache_get, cache_set

    registry = CacheRegistry()
    commands = cache_get(registry, "commands", "discovery")
    if commands is None:
        commands = discover_commands()
        cache_set(registry, "commands", commands, "discovery", TEMPORARY)
"""

import hashlib
import logging
from collections.abc import Iterable
from typing import Any

from .. import __version__
from ..expire import PERMANENT, coerce_expire
from .registry import DEFAULT_BIN, CacheRegistry

logger = logging.getLogger(__name__)


def cache_get(registry: CacheRegistry, cid: str, bin_name: str = DEFAULT_BIN) -> Any | None:
    """
    Fetch a cached value.

    Args:
        registry: The run's cache registry
        cid: Cache identifier
        bin_name: Bin to read from

    Returns:
        The stored value, or None on a miss or expired entry
    """
    value = registry.resolve(bin_name).get(cid)

    if value is not None:
        logger.debug(f"Cache HIT cid: {cid}", extra={"cid": cid, "bin": bin_name})
    else:
        logger.debug(f"Cache MISS cid: {cid}", extra={"cid": cid, "bin": bin_name})

    return value


def cache_get_multiple(
    registry: CacheRegistry,
    cids: Iterable[str],
    bin_name: str = DEFAULT_BIN,
) -> tuple[dict[str, Any], list[str]]:
    """
    Fetch several cached values at once.

    Args:
        registry: The run's cache registry
        cids: Cache identifiers (not modified)
        bin_name: Bin to read from

    Returns:
        (found, remaining): found maps each satisfied cid to its value;
        remaining lists the unsatisfied cids in input order
    """
    requested = list(cids)
    if not requested:
        return {}, []

    found = registry.resolve(bin_name).get_multiple(requested)
    remaining = [cid for cid in requested if cid not in found]

    logger.debug(
        f"Cache multi-get: {len(found)} hit(s), {len(remaining)} miss(es)",
        extra={"bin": bin_name, "hits": list(found), "misses": remaining},
    )
    return found, remaining


def cache_set(
    registry: CacheRegistry,
    cid: str,
    data: Any,
    bin_name: str = DEFAULT_BIN,
    expire: Any = PERMANENT,
) -> bool:
    """
    Store a value, replacing any existing entry for the cid.

    Args:
        registry: The run's cache registry
        cid: Cache identifier
        data: Value to store
        bin_name: Bin to write to
        expire: PERMANENT, TEMPORARY, ExpiresAt, or anything coerce_expire accepts

    Returns:
        True if the backend stored the value

    Raises:
        ValueError: If expire cannot be interpreted
    """
    policy = coerce_expire(expire)

    if registry.resolve(bin_name).set(cid, data, policy):
        logger.debug(f"Cache SET cid: {cid}", extra={"cid": cid, "bin": bin_name, "expire": policy.value})
        return True

    return False


def cache_clear_all(
    registry: CacheRegistry,
    cid: str | None = None,
    bin_name: str | None = None,
    wildcard: bool = False,
) -> int:
    """
    Invalidate cached data.

    Modes, by argument shape:
    - no cid, no bin: wipe every bin from ``list_bins()`` entirely,
      permanent entries included
    - bin, no cid: remove the bin's expirable entries only
    - cid: remove that entry; with wildcard, every entry whose cid starts
      with it ("*" empties the bin)

    A cid must come with its bin; a cid without one targets the default bin.

    Returns:
        Number of entries removed
    """
    if cid is None and bin_name is None:
        removed = 0
        for name in registry.list_bins():
            removed += registry.resolve(name).clear("*", wildcard=True)
        logger.debug(f"Cache flushed all bins, {removed} entries removed", extra={"removed": removed})
        return removed

    if bin_name is None:
        logger.warning(
            f"Cache clear for cid '{cid}' without a bin; using '{DEFAULT_BIN}'",
            extra={"cid": cid, "bin": DEFAULT_BIN},
        )
        bin_name = DEFAULT_BIN

    backend = registry.resolve(bin_name)
    if cid is None:
        return backend.clear()
    return backend.clear(cid, wildcard=wildcard)


def cache_is_empty(registry: CacheRegistry, bin_name: str = DEFAULT_BIN) -> bool:
    """True if the bin holds no live entries."""
    return registry.resolve(bin_name).is_empty()


def cache_list_bins(registry: CacheRegistry) -> list[str]:
    """Every known bin, default first."""
    return registry.list_bins()


def make_cid(prefix: str, *parts: Any) -> str:
    """
    Build a cid from a readable prefix and the inputs that determine the data.

    The package version is mixed in, so entries written by an older release
    are never read back by a newer one.

    Example:
        >>> make_cid("commands", "/srv/site", ["core", "contrib"]).startswith("commands-")
        True
    """
    digest = hashlib.sha256()
    for part in (*parts, __version__):
        text = part if isinstance(part, str) else repr(part)
        digest.update(text.encode("utf-8"))
        digest.update(b"\0")
    return f"{prefix}-{digest.hexdigest()}"
