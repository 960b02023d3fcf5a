#!/usr/bin/env python3
"""
Dependency Injection Container

Wires configuration, the reliability engine and the feed fetcher together.
There is no global container: callers build one with build_container() and
pass it along, so tests and parallel runs get isolated engines.
"""

import logging
import threading
from typing import Any, Callable, Dict, Optional, Set, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Container:
    """Simple dependency injection container with lifecycle management."""

    def __init__(self):
        """Initialize empty container."""
        self._factories: Dict[str, Callable[[], Any]] = {}
        self._singleton_names: Set[str] = set()
        self._singletons: Dict[str, Any] = {}
        self._lock = threading.RLock()

    def register_singleton(self, service_name: str, factory: Callable[[], T]) -> None:
        """
        Register a service as singleton (created once, reused).

        Args:
            service_name: Unique name for the service
            factory: Function that creates the service instance
        """
        with self._lock:
            self._factories[service_name] = factory
            self._singleton_names.add(service_name)
            # Remove any existing instance to force recreation
            self._singletons.pop(service_name, None)

    def register_factory(self, service_name: str, factory: Callable[[], T]) -> None:
        """Register a service as factory (new instance each time)."""
        with self._lock:
            self._factories[service_name] = factory
            self._singleton_names.discard(service_name)

    def register_instance(self, service_name: str, instance: T) -> None:
        """Register an existing instance as singleton."""
        with self._lock:
            self._singletons[service_name] = instance
            self._singleton_names.add(service_name)

    def get(self, service_name: str) -> Any:
        """
        Get service instance by name.

        Raises:
            KeyError: If service is not registered
        """
        with self._lock:
            if service_name in self._singletons:
                return self._singletons[service_name]

            if service_name not in self._factories:
                raise KeyError(f"Service '{service_name}' not registered")

            instance = self._factories[service_name]()
            if service_name in self._singleton_names:
                self._singletons[service_name] = instance
                logger.debug(f"Created singleton instance for '{service_name}'")
            else:
                logger.debug(f"Created new instance for '{service_name}'")
            return instance

    def has(self, service_name: str) -> bool:
        """Check if service is registered."""
        return service_name in self._factories or service_name in self._singletons

    def reset_singleton(self, service_name: str) -> None:
        """Reset a singleton instance (will be recreated on next get())."""
        with self._lock:
            if self._singletons.pop(service_name, None) is not None:
                logger.debug(f"Reset singleton '{service_name}'")


def build_container(config=None) -> Container:
    """
    Create a container with the default services registered.

    Args:
        config: Pre-built Config; loaded from the environment if None
    """
    container = Container()

    def create_config():
        from .config import ConfigManager
        return ConfigManager().get_config()

    def create_engine():
        from .engine import ReliabilityEngine
        return ReliabilityEngine.from_config(container.get('config'))

    def create_feed_fetcher():
        from .feed_fetcher import FeedFetcher
        return FeedFetcher(container.get('engine'), container.get('config').fetch)

    if config is not None:
        container.register_instance('config', config)
    else:
        container.register_singleton('config', create_config)
    container.register_singleton('engine', create_engine)
    container.register_singleton('feed_fetcher', create_feed_fetcher)

    logger.debug("Default services registered in container")
    return container
