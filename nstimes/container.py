"""Dependency injection container.

This module provides a simple DI container without external frameworks.
It allows registering and resolving dependencies for the application.

Design principles:
1. No magic - explicit registration and resolution
2. Testable - easy to swap implementations
3. Lazy loading - adapters instantiated on first use
4. Thread-safe - one container serves every request handler
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, TypeVar

from .config import AppConfig, get_config

T = TypeVar("T")


@dataclass
class Container:
    """Dependency injection container.

    Usage:
        # Production
        container = Container.create_default()
        prices = container.resolve(PriceService)

        # Testing
        container = Container.create_default(config)
        container.register(NSApiPort, lambda: FakeNSApi())
        prices = container.resolve(PriceService)

    Attributes:
        config: Application configuration
    """

    config: AppConfig = field(default_factory=get_config)

    _factories: Dict[type[Any], Callable[[], Any]] = field(
        default_factory=dict, repr=False
    )
    _singletons: Dict[type[Any], Any] = field(default_factory=dict, repr=False)
    _singleton_types: set[type[Any]] = field(default_factory=set, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def register(
        self,
        port_type: type[Any],
        factory: Callable[[], Any],
        singleton: bool = True,
    ) -> None:
        """Register a factory for a port type.

        Registering a type again replaces its factory and drops any
        instance already built from the previous one.

        Args:
            port_type: The type (usually a Protocol) to register.
            factory: A callable that creates instances of the type.
            singleton: If True, only one instance is created.
        """
        with self._lock:
            self._factories[port_type] = factory
            self._singletons.pop(port_type, None)
            if singleton:
                self._singleton_types.add(port_type)
            else:
                self._singleton_types.discard(port_type)

    def resolve(self, port_type: type[T]) -> T:
        """Resolve an instance of a port type.

        Args:
            port_type: The type to resolve.

        Returns:
            An instance of the requested type.

        Raises:
            KeyError: If the type is not registered.
        """
        with self._lock:
            if port_type not in self._factories:
                raise KeyError(f"Type not registered: {port_type}")

            if port_type in self._singleton_types:
                if port_type not in self._singletons:
                    self._singletons[port_type] = self._factories[port_type]()
                return self._singletons[port_type]

            return self._factories[port_type]()

    def is_registered(self, port_type: type[Any]) -> bool:
        """Check if a type is registered."""
        return port_type in self._factories

    def clear_singletons(self) -> None:
        """Clear all cached singletons.

        Call this in tests to ensure fresh instances.
        """
        with self._lock:
            self._singletons.clear()

    def clear_all(self) -> None:
        """Clear all registrations and singletons."""
        with self._lock:
            self._factories.clear()
            self._singletons.clear()
            self._singleton_types.clear()

    @classmethod
    def create_default(cls, config: Optional[AppConfig] = None) -> Container:
        """Create a container with default production bindings.

        Adapters are built lazily, so a missing API token or an unreadable
        cache file only surfaces when a command actually needs them.

        Args:
            config: Optional configuration override.

        Returns:
            A configured Container instance.
        """
        from .adapters.cache import NullPriceCache, PriceCache
        from .adapters.ns_api import NSApiClient
        from .adapters.stations import (
            FallbackStationResolver,
            LocalStationResolver,
            RemoteStationResolver,
        )
        from .ports.cache import PriceCachePort
        from .ports.ns_api import NSApiPort
        from .ports.stations import StationResolverPort
        from .services import PriceService, StationService, TripService
        from .stations import StationDirectory, load_directory

        config = config or get_config()
        container = cls(config=config)

        # Station table
        container.register(
            StationDirectory,
            lambda: load_directory(config.stations.data_path),
        )

        # Upstream
        container.register(NSApiPort, lambda: NSApiClient(config.ns_api))

        # Station resolver based on config
        def create_station_resolver() -> StationResolverPort:
            strategy = config.stations.strategy
            if strategy == "remote":
                return RemoteStationResolver(container.resolve(NSApiPort))
            local = LocalStationResolver(container.resolve(StationDirectory))
            if strategy == "fallback":
                return FallbackStationResolver(
                    primary=local,
                    fallback=RemoteStationResolver(container.resolve(NSApiPort)),
                )
            return local

        container.register(StationResolverPort, create_station_resolver)

        # Price cache (shared across request handlers)
        def create_price_cache() -> PriceCachePort:
            if not config.cache.enabled:
                return NullPriceCache()
            return PriceCache.from_config(config.cache)

        container.register(PriceCachePort, create_price_cache)

        # Services
        container.register(
            StationService,
            lambda: StationService(
                resolver=container.resolve(StationResolverPort),
                directory=container.resolve(StationDirectory),
                suggestion_limit=config.stations.suggestion_limit,
            ),
        )
        container.register(
            TripService,
            lambda: TripService(
                stations=container.resolve(StationService),
                api=container.resolve(NSApiPort),
            ),
        )
        container.register(
            PriceService,
            lambda: PriceService(
                stations=container.resolve(StationService),
                api=container.resolve(NSApiPort),
                cache=container.resolve(PriceCachePort),
            ),
        )

        return container


# Global default container (lazy initialized)
_default_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get the default application container.

    Returns:
        The default Container instance (creates one if needed).
    """
    global _default_container
    if _default_container is None:
        with _container_lock:
            if _default_container is None:
                _default_container = Container.create_default()
    return _default_container


def reset_container() -> None:
    """Reset the default container.

    Call this in tests to ensure a fresh container.
    """
    global _default_container
    with _container_lock:
        if _default_container is not None:
            _default_container.clear_all()
        _default_container = None
