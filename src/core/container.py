#!/usr/bin/env python3
"""
Dependency Injection Container

Wires configuration, the database facade and the aggregator together so
commands never build them by hand. Supports singleton and factory services.
"""

import logging
import threading
from functools import wraps
from typing import Any, Callable, Dict, Optional, Set, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Container:
    """Simple dependency injection container with lifecycle management."""

    def __init__(self):
        """Initialize empty container."""
        self._factories: Dict[str, Callable] = {}
        self._singletons: Dict[str, Any] = {}
        self._singleton_names: Set[str] = set()
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
            self._singletons.pop(service_name, None)

    def register_factory(self, service_name: str, factory: Callable[[], T]) -> None:
        """Register a service as factory (new instance each time)."""
        with self._lock:
            self._factories[service_name] = factory
            self._singleton_names.discard(service_name)

    def register_instance(self, service_name: str, instance: T) -> None:
        """Register an existing instance (tests use this to inject fakes)."""
        with self._lock:
            self._singletons[service_name] = instance

    def get(self, service_name: str) -> Any:
        """
        Get service instance by name.

        Raises:
            KeyError: If service is not registered
        """
        if service_name in self._singletons:
            return self._singletons[service_name]

        if service_name not in self._factories:
            raise KeyError(f"Service '{service_name}' not registered")

        # Reentrant: singleton factories resolve their own dependencies through get()
        with self._lock:
            factory = self._factories[service_name]
            if service_name not in self._singleton_names and not getattr(factory, '_is_singleton', False):
                logger.debug(f"Creating new instance for '{service_name}'")
                return factory()

            if service_name not in self._singletons:
                self._singletons[service_name] = factory()
                logger.debug(f"Created singleton instance for '{service_name}'")
            return self._singletons[service_name]

    def has(self, service_name: str) -> bool:
        """Check if service is registered."""
        return service_name in self._factories or service_name in self._singletons

    def clear(self) -> None:
        """Close closable singletons and forget every registration."""
        with self._lock:
            for name, instance in self._singletons.items():
                close = getattr(instance, 'close', None)
                if callable(close):
                    logger.debug(f"Closing '{name}'")
                    close()
            self._factories.clear()
            self._singletons.clear()
            self._singleton_names.clear()

    def reset_singleton(self, service_name: str) -> None:
        """Reset a singleton instance (will be recreated on next get())."""
        with self._lock:
            if self._singletons.pop(service_name, None) is not None:
                logger.debug(f"Reset singleton '{service_name}'")


def singleton(factory_func: Callable[[], T]) -> Callable[[], T]:
    """
    Decorator to mark a factory function as singleton.

    Usage:
        @singleton
        def create_database():
            return NewsDatabase(get_config())
    """
    @wraps(factory_func)
    def wrapper():
        return factory_func()

    wrapper._is_singleton = True
    return wrapper


# Global container instance
_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get global container instance (thread-safe singleton)."""
    global _container
    if _container is None:
        with _container_lock:
            if _container is None:
                _container = Container()
                _setup_default_services(_container)
    return _container


def reset_container() -> None:
    """Reset global container (useful for testing)."""
    global _container
    with _container_lock:
        if _container:
            _container.clear()
        _container = None


def _setup_default_services(container: Container) -> None:
    """Set up default service registrations with configuration injection."""

    @singleton
    def create_config():
        from core.config import get_config_manager
        manager = get_config_manager()
        config = manager.get_config()
        manager.update_logging()
        return config

    @singleton
    def create_database():
        from core.database import NewsDatabase
        return NewsDatabase(container.get('config'))

    def create_aggregator():
        from core.aggregator import NewsAggregator
        return NewsAggregator.create_with_default_providers(container.get('config'), container.get('database'))

    container.register_singleton('config', create_config)
    container.register_singleton('database', create_database)

    # Non-singletons: each ingestion run gets fresh provider sessions
    container.register_factory('aggregator', create_aggregator)

    logger.debug("Default services registered in container")

