"""
bincache - Cache Facade Integration Tests

Exercises the public operations end to end against the memory and file
backends: get/set round trips, multi-get partial hits, the clear modes and
HIT/MISS/SET tracing.
"""

import logging
import time
from typing import Any

import pytest

from bincache import (
    DEFAULT_BIN,
    PERMANENT,
    TEMPORARY,
    CacheRegistry,
    ExpiresAt,
    __version__,
    cache_clear_all,
    cache_get,
    cache_get_multiple,
    cache_is_empty,
    cache_list_bins,
    cache_set,
    make_cid,
)
from bincache.cache.backends.memory import MemoryCacheBackend


class TestGetSet:
    """Reads and writes through the facade."""

    def test_round_trip(self, registry: CacheRegistry, sample_cache_data: dict[str, Any]) -> None:
        """Permanent writes read back equal, in any bin."""
        for cid, data in sample_cache_data.items():
            assert cache_set(registry, cid, data, "roundtrip", PERMANENT) is True

        for cid, data in sample_cache_data.items():
            assert cache_get(registry, cid, "roundtrip") == data

    def test_default_bin(self, registry: CacheRegistry) -> None:
        """Omitting the bin uses the default bin."""
        cache_set(registry, "key", "value")

        assert cache_get(registry, "key") == "value"
        assert cache_get(registry, "key", DEFAULT_BIN) == "value"
        assert cache_get(registry, "key", "elsewhere") is None

    def test_never_set_is_miss(self, registry: CacheRegistry) -> None:
        """Unknown cids miss without raising."""
        assert cache_get(registry, "never-set", "empty") is None

    def test_overwrite(self, registry: CacheRegistry) -> None:
        """Set replaces the previous entry."""
        cache_set(registry, "key", 1)
        cache_set(registry, "key", 2)
        assert cache_get(registry, "key") == 2

    def test_expired_entry_misses(self, registry: CacheRegistry) -> None:
        """Entries past their instant behave as absent."""
        cache_set(registry, "stale", "value", expire=ExpiresAt(time.time() - 1))
        cache_set(registry, "fresh", "value", expire=time.time() + 3600)

        assert cache_get(registry, "stale") is None
        assert cache_get(registry, "fresh") == "value"

    @pytest.mark.parametrize(
        "data",
        [
            {"t": (1, 2), 3: "int-key"},
            {"__bytes__": "aGk="},
            {1, 2},
        ],
    )
    def test_reshaped_values_are_refused_everywhere(self, registry: CacheRegistry, data: Any) -> None:
        """Every backend refuses values that would not read back equal."""
        assert cache_set(registry, "k", data) is False
        assert cache_get(registry, "k") is None

    def test_legacy_expire_integers(self, registry: CacheRegistry) -> None:
        """0 and -1 still mean permanent and temporary."""
        cache_set(registry, "permanent", 1, "legacy", 0)
        cache_set(registry, "temporary", 2, "legacy", -1)

        cache_clear_all(registry, bin_name="legacy")
        assert cache_get(registry, "permanent", "legacy") == 1
        assert cache_get(registry, "temporary", "legacy") is None

    def test_invalid_expire_raises(self, registry: CacheRegistry) -> None:
        """Nonsense expirations are caller bugs, not cache failures."""
        with pytest.raises(ValueError):
            cache_set(registry, "key", "value", expire="tomorrow")

    def test_write_failure_is_falsy(self, registry: CacheRegistry) -> None:
        """A failed write returns False and is not traced as SET."""
        backend = registry.resolve("failing")
        backend.set = lambda cid, data, expire=PERMANENT: False  # type: ignore[method-assign]

        assert cache_set(registry, "key", "value", "failing") is False

    def test_backend_exceptions_propagate(self, memory_registry: CacheRegistry) -> None:
        """The facade adds no exception translation."""

        class BrokenBackend(MemoryCacheBackend):
            def get(self, cid: str) -> Any:
                raise PermissionError("cache directory not readable")

        memory_registry.register_backend("broken", BrokenBackend(bin_name="broken"))

        with pytest.raises(PermissionError):
            cache_get(memory_registry, "key", "broken")


class TestGetMultiple:
    """Batch reads with partial hits."""

    def test_partial_hits(self, registry: CacheRegistry) -> None:
        """Found values and remaining cids come back separately."""
        cache_set(registry, "a", "valueA", "batch")
        cache_set(registry, "c", "valueC", "batch")
        cids = ["a", "b", "c"]

        found, remaining = cache_get_multiple(registry, cids, "batch")

        assert found == {"a": "valueA", "c": "valueC"}
        assert remaining == ["b"]
        assert cids == ["a", "b", "c"]

    def test_all_miss(self, registry: CacheRegistry) -> None:
        """Total misses are a valid result."""
        found, remaining = cache_get_multiple(registry, ["x", "y"], "batch")

        assert found == {}
        assert remaining == ["x", "y"]

    def test_empty_request(self, registry: CacheRegistry) -> None:
        assert cache_get_multiple(registry, []) == ({}, [])

    def test_accepts_any_iterable(self, registry: CacheRegistry) -> None:
        """Generators are consumed once and order is kept."""
        cache_set(registry, "k2", 2)

        found, remaining = cache_get_multiple(registry, (f"k{i}" for i in range(4)))
        assert found == {"k2": 2}
        assert remaining == ["k0", "k1", "k3"]


class TestClearAll:
    """The three clear modes."""

    def test_bin_sweep_keeps_permanent(self, registry: CacheRegistry) -> None:
        """Bin-only clear removes temporary entries and keeps permanent ones."""
        cache_set(registry, "temp", "t", "sweep", TEMPORARY)
        cache_set(registry, "perm", "p", "sweep", PERMANENT)
        cache_set(registry, "later", "l", "sweep", ExpiresAt(time.time() + 3600))

        assert cache_clear_all(registry, bin_name="sweep") == 1

        assert cache_get(registry, "temp", "sweep") is None
        assert cache_get(registry, "perm", "sweep") == "p"
        assert cache_get(registry, "later", "sweep") == "l"

    def test_exact_cid(self, registry: CacheRegistry) -> None:
        """A cid without wildcard removes only that entry."""
        cache_set(registry, "foo", 1, "exact")
        cache_set(registry, "foo1", 2, "exact")

        assert cache_clear_all(registry, "foo", "exact") == 1
        assert cache_get(registry, "foo", "exact") is None
        assert cache_get(registry, "foo1", "exact") == 2

    def test_wildcard_prefix(self, registry: CacheRegistry) -> None:
        """Wildcard clear removes every cid with the prefix."""
        for cid in ("foo1", "foo2", "bar1"):
            cache_set(registry, cid, cid.upper(), "prefix")

        assert cache_clear_all(registry, "foo", "prefix", wildcard=True) == 2

        assert cache_get(registry, "foo1", "prefix") is None
        assert cache_get(registry, "foo2", "prefix") is None
        assert cache_get(registry, "bar1", "prefix") == "BAR1"

    def test_wildcard_star_empties_bin(self, registry: CacheRegistry) -> None:
        """'*' removes permanent entries too."""
        cache_set(registry, "perm", 1, "star", PERMANENT)
        cache_set(registry, "temp", 2, "star", TEMPORARY)
        assert cache_is_empty(registry, "star") is False

        cache_clear_all(registry, "*", "star", wildcard=True)

        assert cache_is_empty(registry, "star") is True

    def test_full_sweep_wipes_every_known_bin(self, registry: CacheRegistry) -> None:
        """No arguments wipes all listed bins, permanent entries included."""
        registry.register_bin_provider(lambda: ["discovery"])
        cache_set(registry, "perm", 1, DEFAULT_BIN, PERMANENT)
        cache_set(registry, "perm", 2, "discovery", PERMANENT)
        cache_set(registry, "temp", 3, "discovery", TEMPORARY)

        assert cache_clear_all(registry) == 3

        assert cache_is_empty(registry) is True
        assert cache_is_empty(registry, "discovery") is True

    def test_full_sweep_skips_unlisted_bins(self, registry: CacheRegistry) -> None:
        """Bins no provider reports are not part of the full sweep."""
        cache_set(registry, "perm", 1, "unlisted")

        cache_clear_all(registry)

        assert cache_get(registry, "perm", "unlisted") == 1

    def test_cid_without_bin_uses_default(
        self, registry: CacheRegistry, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A cid without its bin targets the default bin and warns."""
        cache_set(registry, "key", "value")

        with caplog.at_level(logging.WARNING, logger="bincache"):
            assert cache_clear_all(registry, "key") == 1

        assert cache_get(registry, "key") is None
        assert any("without a bin" in r.getMessage() for r in caplog.records)


class TestIsEmptyAndBins:
    """Emptiness checks and bin listing."""

    def test_is_empty(self, registry: CacheRegistry) -> None:
        assert cache_is_empty(registry, "fresh") is True

        cache_set(registry, "key", "value", "fresh")
        assert cache_is_empty(registry, "fresh") is False

    def test_expired_only_bin_is_empty(self, registry: CacheRegistry) -> None:
        cache_set(registry, "stale", "value", "stale", ExpiresAt(time.time() - 1))
        assert cache_is_empty(registry, "stale") is True

    def test_list_bins(self, registry: CacheRegistry) -> None:
        registry.register_bin_provider(lambda: ["discovery", DEFAULT_BIN])
        assert cache_list_bins(registry) == [DEFAULT_BIN, "discovery"]


class TestTracing:
    """HIT/MISS/SET debug traces."""

    def test_hit_miss_set(self, memory_registry: CacheRegistry, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="bincache.cache.facade"):
            cache_get(memory_registry, "key")
            cache_set(memory_registry, "key", "value")
            cache_get(memory_registry, "key")

        messages = [r.getMessage() for r in caplog.records if r.name == "bincache.cache.facade"]
        assert messages == ["Cache MISS cid: key", "Cache SET cid: key", "Cache HIT cid: key"]
        assert all(r.levelno == logging.DEBUG for r in caplog.records if r.name == "bincache.cache.facade")


class TestMakeCid:
    """Derived cache identifiers."""

    def test_stable_and_prefixed(self) -> None:
        first = make_cid("commands", "/srv/site", ["core"])
        assert first == make_cid("commands", "/srv/site", ["core"])
        assert first.startswith("commands-")

    def test_inputs_matter(self) -> None:
        assert make_cid("commands", "a", "bc") != make_cid("commands", "ab", "c")
        assert make_cid("commands", "a") != make_cid("remote", "a")

    def test_version_is_mixed_in(self, monkeypatch: pytest.MonkeyPatch) -> None:
        before = make_cid("commands", "x")
        monkeypatch.setattr("bincache.cache.facade.__version__", __version__ + ".post1")
        assert make_cid("commands", "x") != before
