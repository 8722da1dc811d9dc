"""Dependency wiring for the CLI and the REST server."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from iptsdb.infrastructure.config import Config

T = TypeVar("T")


class Container:
    """
    Minimal dependency injection container.

    Singletons are registered ready-made; factories run on first resolve and
    their result is cached.
    """

    def __init__(self) -> None:
        self._instances: dict[type, Any] = {}
        self._factories: dict[type, Callable[[Container], Any]] = {}

    def register_singleton(self, interface: type[T], instance: T) -> None:
        """Register a ready-made instance."""
        self._instances[interface] = instance

    def register_factory(
        self,
        interface: type[T],
        factory: Callable[[Container], T],
    ) -> None:
        """
        Register a factory for lazy instantiation.

        Args:
            interface: The type to register
            factory: Called with the container; its result is cached
        """
        self._instances.pop(interface, None)
        self._factories[interface] = factory

    def resolve(self, interface: type[T]) -> T:
        """
        Resolve a dependency.

        Raises:
            KeyError: If no registration exists for the type
        """
        if interface in self._instances:
            return self._instances[interface]

        if interface in self._factories:
            instance = self._factories[interface](self)
            self._instances[interface] = instance
            return instance

        raise KeyError(f"No registration found for {interface}")

    def has(self, interface: type) -> bool:
        """Check if a type is registered."""
        return interface in self._instances or interface in self._factories

    def clear(self) -> None:
        """Clear all registrations and instances."""
        self._instances.clear()
        self._factories.clear()


def build_container(config: Config) -> Container:
    """
    Register the backends and the database facade for a configuration.

    The ``memory`` backend keeps all state in the process; the ``file``
    backend persists under ``config.storage.data_dir``.
    """
    from iptsdb.adapters.outbound import (
        FileContentStore,
        FileNamingService,
        InMemoryContentStore,
        InMemoryNamingService,
    )
    from iptsdb.application import TimeSeriesDatabase
    from iptsdb.domain.services import TableSettings
    from iptsdb.infrastructure.metrics import MetricsRegistry, get_metrics
    from iptsdb.ports.outbound import ContentStore, NamingService

    container = Container()
    container.register_singleton(Config, config)
    container.register_singleton(TableSettings, TableSettings.from_config(config))
    container.register_factory(MetricsRegistry, lambda _: get_metrics())

    if config.storage.backend == "memory":
        container.register_factory(ContentStore, lambda _: InMemoryContentStore())
        container.register_factory(NamingService, lambda _: InMemoryNamingService())
    else:
        config.ensure_directories()
        data_dir = config.storage.data_dir
        container.register_factory(ContentStore, lambda _: FileContentStore(data_dir))
        container.register_factory(NamingService, lambda _: FileNamingService(data_dir))

    container.register_factory(
        TimeSeriesDatabase,
        lambda c: TimeSeriesDatabase(
            c.resolve(ContentStore),
            c.resolve(NamingService),
            settings=c.resolve(TableSettings),
            metrics=c.resolve(MetricsRegistry),
        ),
    )
    return container
