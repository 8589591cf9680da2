"""Centralized configuration using Pydantic Settings.

This module provides a single source of truth for all configuration
used by the CLI, the HTTP server and the dependency container.

Configuration can be overridden via environment variables (or a
``.env`` file in the working directory):
- NS_API_TOKEN=...
- NSTIMES_STATIONS_STRATEGY=fallback
- NSTIMES_CACHE_PATH=/var/lib/nstimes/prices.json
- NSTIMES_SERVER_PORT=8080
- etc.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENV_FILE = ".env"


class NSApiConfig(BaseSettings):
    """NS API gateway configuration.

    Environment variables prefixed with NS_.
    """

    model_config = SettingsConfigDict(
        env_prefix="NS_", env_file=_ENV_FILE, extra="ignore"
    )

    api_token: Optional[str] = None
    base_url: str = "https://gateway.apiportal.ns.nl"
    timeout_seconds: float = 10.0


class StationsConfig(BaseSettings):
    """Station resolution configuration.

    Environment variables prefixed with NSTIMES_STATIONS_.
    """

    model_config = SettingsConfigDict(
        env_prefix="NSTIMES_STATIONS_", env_file=_ENV_FILE, extra="ignore"
    )

    strategy: Literal["local", "remote", "fallback"] = "local"
    data_path: Path = Field(
        default_factory=lambda: Path(__file__).resolve().parent
        / "data"
        / "stations.csv"
    )
    suggestion_limit: int = 5


class CacheConfig(BaseSettings):
    """Price cache configuration.

    Environment variables prefixed with NSTIMES_CACHE_.
    """

    model_config = SettingsConfigDict(
        env_prefix="NSTIMES_CACHE_", env_file=_ENV_FILE, extra="ignore"
    )

    enabled: bool = True
    path: Optional[Path] = None  # None = in-memory only
    timezone: str = "Europe/Amsterdam"


class ServerConfig(BaseSettings):
    """HTTP server configuration.

    Environment variables prefixed with NSTIMES_SERVER_.
    """

    model_config = SettingsConfigDict(
        env_prefix="NSTIMES_SERVER_", env_file=_ENV_FILE, extra="ignore"
    )

    host: str = "0.0.0.0"
    port: int = 3000


class ObservabilityConfig(BaseSettings):
    """Logging and observability configuration.

    Environment variables prefixed with NSTIMES_LOG_.
    """

    model_config = SettingsConfigDict(
        env_prefix="NSTIMES_LOG_", env_file=_ENV_FILE, extra="ignore"
    )

    level: str = "WARNING"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = False  # Set True for JSON logging


class AppConfig(BaseSettings):
    """Main application configuration aggregating all sub-configs.

    Sub-configurations can be accessed via attributes:

        config = get_config()
        print(config.cache.path)
        print(config.stations.strategy)

    Environment variables prefixed with NSTIMES_.
    """

    model_config = SettingsConfigDict(
        env_prefix="NSTIMES_", env_file=_ENV_FILE, extra="ignore"
    )

    ns_api: NSApiConfig = Field(default_factory=NSApiConfig)
    stations: StationsConfig = Field(default_factory=StationsConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the singleton application configuration.

    Configuration is loaded once and cached. To reload configuration
    (e.g., in tests), use reset_config() first.

    Returns:
        The application configuration instance.
    """
    return AppConfig()


def reset_config() -> None:
    """Reset the configuration cache.

    Call this in tests to ensure a fresh configuration is loaded.
    """
    get_config.cache_clear()
