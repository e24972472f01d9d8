"""
Command Discovery Caching Example

Demonstrates how a command-line tool can use bincache to skip expensive work
on repeat invocations.

This example shows:
- Owning a CacheRegistry for the run
- Building cids from the inputs that determine the data
- Temporary vs permanent entries
- Batch lookups and prefix invalidation
"""

import logging
import time
from pathlib import Path

from bincache import (
    TEMPORARY,
    CacheRegistry,
    ExpiresAt,
    cache_clear_all,
    cache_get,
    cache_get_multiple,
    cache_set,
    make_cid,
)
from bincache.config import CacheBackend, CacheConfig
from bincache.observability import bind_run_id, setup_logging

logger = logging.getLogger(__name__)


def discover_commands(root: Path) -> dict[str, str]:
    """Stand-in for a slow filesystem scan."""
    time.sleep(0.5)
    return {path.stem: str(path) for path in sorted(root.glob("*.py"))}


def example_cached_discovery(registry: CacheRegistry, root: Path) -> None:
    """Example: Discovery results reused until the next sweep."""
    logger.info("=" * 60)
    logger.info("Example 1: Cached command discovery")
    logger.info("=" * 60)

    cid = make_cid("commands", str(root.resolve()))

    for attempt in (1, 2):
        started = time.perf_counter()
        commands = cache_get(registry, cid, "discovery")
        if commands is None:
            commands = discover_commands(root)
            cache_set(registry, cid, commands, "discovery", TEMPORARY)
        elapsed = time.perf_counter() - started
        logger.info("Attempt %d: %d commands in %.3fs", attempt, len(commands), elapsed)


def example_remote_metadata(registry: CacheRegistry) -> None:
    """Example: Timestamped entries, batch reads and prefix clears."""
    logger.info("=" * 60)
    logger.info("Example 2: Remote metadata with expiry")
    logger.info("=" * 60)

    one_hour = ExpiresAt(time.time() + 3600)
    cache_set(registry, "release:core", {"latest": "10.3.1"}, "remote", one_hour)
    cache_set(registry, "release:views", {"latest": "8.x-3.2"}, "remote", one_hour)

    found, remaining = cache_get_multiple(registry, ["release:core", "release:token", "release:views"], "remote")
    logger.info("Cached releases: %s", sorted(found))
    logger.info("Need to fetch: %s", remaining)

    removed = cache_clear_all(registry, "release:", "remote", wildcard=True)
    logger.info("Invalidated %d release entries", removed)


def main() -> None:
    setup_logging("INFO", json_format=False)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    bind_run_id()

    cache_root = Path.home() / ".cache" / "bincache-example"
    registry = CacheRegistry(
        CacheConfig(
            backend=CacheBackend.FILE,
            bin_backends={"remote": CacheBackend.MEMORY},
            directory=str(cache_root),
        )
    )
    registry.register_bin_provider(lambda: ["discovery", "remote"])

    try:
        example_cached_discovery(registry, Path(__file__).parent)
        example_remote_metadata(registry)
    finally:
        registry.close_all()


if __name__ == "__main__":
    main()
