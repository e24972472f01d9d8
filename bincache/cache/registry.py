"""
bincache - Cache Registry

Maps bin names to backend instances. The application owns one registry per
run and passes it to every cache operation; each bin gets exactly one
backend, created on first use and reused afterwards.

Backend selection:
- ``CacheConfig.backend`` is the default for every bin
- ``CacheConfig.bin_backends`` overrides it per bin
- ``register_backend`` installs a ready-made backend for a bin

Examples:
    from bincache.cache.registry import CacheRegistry
    from bincache.config import CacheBackend, CacheConfig

    registry = CacheRegistry(CacheConfig(backend=CacheBackend.MEMORY))
    backend = registry.resolve("discovery")
    assert registry.resolve("discovery") is backend
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from ..config import CacheBackend, CacheConfig, get_config
from ..errors import ConfigurationError
from .backends.file import FileCacheBackend
from .backends.memory import MemoryCacheBackend
from .interface import CacheInterface

logger = logging.getLogger(__name__)

DEFAULT_BIN = "default"

BinProvider = Callable[[], Iterable[str]]


class CacheRegistry:
    """
    Per-run registry of bin backends.

    Holds the bin -> backend mapping and the bin providers that contribute
    extra bin names to ``list_bins()``.
    """

    def __init__(self, config: CacheConfig | None = None):
        """
        Initialize the registry.

        Args:
            config: Cache configuration (uses global config if not provided)
        """
        self.config = config if config is not None else get_config().cache
        self._backends: dict[str, CacheInterface] = {}
        self._bin_providers: list[BinProvider] = []

    # ------------ Backend construction ------------

    def _create_memory_backend(self, bin_name: str) -> CacheInterface:
        return MemoryCacheBackend(bin_name=bin_name)

    def _create_file_backend(self, bin_name: str) -> CacheInterface:
        return FileCacheBackend(bin_name=bin_name, directory=self.config.directory)

    def _create_redis_backend(self, bin_name: str) -> CacheInterface:
        """Construct a redis backend with lazy import of the client."""
        if not self.config.redis_url:
            raise ConfigurationError(
                "REDIS_URL must be set when a bin uses the redis backend",
                details={"env": "REDIS_URL", "backend": "redis", "bin": bin_name},
            )

        # Lazy import to avoid hard dependency when redis is not selected
        try:
            from .backends.redis import RedisCacheBackend
        except ImportError as e:
            logger.error(
                "Redis backend selected but redis client is not installed",
                extra={"package": "redis>=5.0.0", "error": str(e)},
            )
            raise ConfigurationError(
                "Redis backend selected but redis client is unavailable. "
                "Install with: pip install 'redis>=5.0.0' or add to dependencies.",
                details={"package": "redis>=5.0.0", "error": str(e), "backend": "redis"},
            ) from e

        return RedisCacheBackend(
            redis_url=self.config.redis_url,
            bin_name=bin_name,
            namespace=self.config.namespace,
            max_connections=self.config.redis_max_connections,
            socket_timeout=self.config.redis_socket_timeout,
        )

    def _create_backend(self, bin_name: str) -> CacheInterface:
        backend = CacheBackend(self.config.backend_for(bin_name))

        if backend == CacheBackend.MEMORY:
            return self._create_memory_backend(bin_name)
        if backend == CacheBackend.FILE:
            return self._create_file_backend(bin_name)
        if backend == CacheBackend.REDIS:
            return self._create_redis_backend(bin_name)

        raise ConfigurationError(
            f"Unknown cache backend: {backend}",
            details={"backend": str(backend), "supported": [kind.value for kind in CacheBackend]},
        )

    # ------------ Resolution ------------

    def resolve(self, bin_name: str = DEFAULT_BIN) -> CacheInterface:
        """
        Return the backend for a bin, creating it on first use.

        Args:
            bin_name: Bin name

        Returns:
            The bin's backend; the same instance on every call

        Raises:
            ValueError: If bin_name is empty
            ConfigurationError: If the bin's backend is misconfigured
        """
        backend = self._backends.get(bin_name)
        if backend is not None:
            return backend

        if not bin_name:
            raise ValueError("Cache bin name must be a non-empty string")

        backend = self._create_backend(bin_name)
        self._backends[bin_name] = backend

        logger.debug(
            f"Created cache backend for bin '{bin_name}'",
            extra={"bin": bin_name, "backend": type(backend).__name__},
        )
        return backend

    def register_backend(self, bin_name: str, backend: CacheInterface) -> None:
        """
        Install a ready-made backend for a bin.

        Raises:
            ValueError: If the bin already has a backend
        """
        if bin_name in self._backends:
            raise ValueError(f"Cache bin '{bin_name}' already has a backend")
        self._backends[bin_name] = backend

    # ------------ Bin enumeration ------------

    def register_bin_provider(self, provider: BinProvider) -> None:
        """
        Add a callable that contributes bin names to ``list_bins()``.

        Providers are called on every ``list_bins()`` call so they can
        reflect bins that appear during the run.
        """
        self._bin_providers.append(provider)

    def list_bins(self) -> list[str]:
        """
        List every known bin: the default bin first, then provider bins.

        Duplicates and empty names are dropped; order is stable.
        """
        bins = [DEFAULT_BIN]
        seen = {DEFAULT_BIN}

        for provider in self._bin_providers:
            for bin_name in provider():
                if bin_name and bin_name not in seen:
                    seen.add(bin_name)
                    bins.append(bin_name)

        return bins

    def list_instances(self) -> list[str]:
        """List bins that currently have a backend."""
        return list(self._backends.keys())

    # ------------ Lifecycle ------------

    def close_all(self) -> None:
        """
        Close every backend and forget them.

        Optional: short-lived processes may simply exit.
        """
        if not self._backends:
            logger.debug("No cache backends to close")
            return

        for bin_name, backend in list(self._backends.items()):
            backend.close()
            logger.debug(f"Closed cache backend for bin '{bin_name}'")

        self._backends.clear()

    def reset(self) -> None:
        """
        Forget all backends without closing them.

        Does NOT call close(); use close_all() for proper cleanup.
        """
        count = len(self._backends)
        self._backends.clear()
        logger.debug(f"Reset cache registry, cleared {count} backend reference(s)")
