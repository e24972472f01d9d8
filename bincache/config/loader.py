"""
bincache - Configuration Loader

Loads and validates configuration from environment variables and .env files.
Provides a singleton configuration instance for the process.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from ..errors import ConfigurationError
from .schemas import BinCacheConfig

logger = logging.getLogger(__name__)

_config_instance: BinCacheConfig | None = None


def parse_bin_backends(raw: str | None) -> dict[str, str]:
    """
    Parse ``CACHE_BIN_BACKENDS`` ("bin=backend,bin=backend").

    Raises:
        ConfigurationError: If an item is not of the form bin=backend
    """
    result: dict[str, str] = {}
    if not raw:
        return result

    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        name, sep, backend = item.partition("=")
        if not sep or not name.strip() or not backend.strip():
            raise ConfigurationError(
                f"Invalid CACHE_BIN_BACKENDS item: '{item}' (expected bin=backend)",
                details={"env": "CACHE_BIN_BACKENDS", "item": item},
            )
        result[name.strip()] = backend.strip().lower()
    return result


def load_config(
    env_file: str | None = None,
    reload: bool = False,
) -> BinCacheConfig:
    """
    Load configuration from environment variables and .env file.

    Args:
        env_file: Path to .env file (default: .env in the working directory)
        reload: Force reload even if config already loaded

    Returns:
        Validated BinCacheConfig instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    global _config_instance

    if _config_instance is not None and not reload:
        return _config_instance

    if env_file:
        env_path = Path(env_file)
    else:
        env_path = Path.cwd() / ".env"

    if env_path.exists():
        logger.info(f"Loading environment from {env_path}")
        try:
            load_dotenv(env_path, override=True)
        except OSError as e:
            logger.error(
                f"Failed to load .env file from {env_path}: {e}",
                extra={"path": str(env_path), "error": str(e)},
                exc_info=True,
            )
            raise ConfigurationError(
                f"Failed to load environment file: {e}",
                details={"path": str(env_path), "error": str(e)},
            ) from e
    else:
        logger.debug("No .env file found, using environment variables only")

    # Auto-detect cache backend: redis if REDIS_URL is set, else file
    redis_url = os.getenv("REDIS_URL")
    cache_backend = "redis" if redis_url else "file"

    try:
        cache_dict = {
            "backend": os.getenv("CACHE_BACKEND", cache_backend).lower(),
            "bin_backends": parse_bin_backends(os.getenv("CACHE_BIN_BACKENDS")),
            "namespace": os.getenv("CACHE_NAMESPACE", "bincache"),
            "redis_url": redis_url,
            "redis_max_connections": int(os.getenv("REDIS_MAX_CONNECTIONS", "10")),
            "redis_socket_timeout": int(os.getenv("REDIS_SOCKET_TIMEOUT", "5")),
        }
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid numeric cache setting: {e}",
            details={"error": str(e)},
        ) from e

    if os.getenv("CACHE_DIRECTORY"):
        cache_dict["directory"] = os.environ["CACHE_DIRECTORY"]

    config_dict = {
        "environment": os.getenv("ENVIRONMENT", "development").lower(),
        "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
        "cache": cache_dict,
    }

    try:
        _config_instance = BinCacheConfig(**config_dict)  # type: ignore[arg-type]
    except ValidationError as e:
        logger.error(
            f"Configuration validation failed: {e}",
            extra={"validation_errors": e.errors(), "config_dict_keys": list(config_dict.keys())},
        )
        raise ConfigurationError(
            "Configuration validation failed. Check your environment variables and configuration.",
            details={"validation_errors": e.errors()},
        ) from e

    logger.info(
        f"Configuration loaded successfully (environment: {_config_instance.environment.value})",
        extra=_config_instance.summary(),
    )
    return _config_instance


def get_config() -> BinCacheConfig:
    """
    Get the current configuration instance, loading it on first access.

    Returns:
        Current BinCacheConfig instance
    """
    if _config_instance is None:
        return load_config()

    return _config_instance


def reload_config(env_file: str | None = None) -> BinCacheConfig:
    """
    Force reload configuration.

    Args:
        env_file: Optional path to .env file

    Returns:
        Reloaded BinCacheConfig instance
    """
    return load_config(env_file=env_file, reload=True)
