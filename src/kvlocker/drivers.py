"""Driver registry: maps store driver names to adapter factories."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

from .adapters.memory import create_memory_store
from .adapters.redis import create_redis_store
from .primitives.exceptions import DriverRegistrationError, UnsupportedDriverError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .ports.store import ILockStore
    from .primitives.options import LockerSettings

logger = logging.getLogger("kvlocker.drivers")


class StoreFactory(Protocol):
    """Builds a store adapter from driver config and locker settings."""

    def __call__(
        self, config: Mapping[str, Any], settings: LockerSettings
    ) -> ILockStore: ...


class DriverRegistry:
    """Name → factory map used to build store adapters.

    **Conflict detection:** registering a second, different factory under an
    existing name raises :class:`DriverRegistrationError`. Re-registering the
    same factory is a no-op.
    """

    def __init__(self) -> None:
        self._factories: dict[str, StoreFactory] = {}

    def register(self, name: str, factory: StoreFactory) -> None:
        existing = self._factories.get(name)
        if existing is not None and existing is not factory:
            msg = f"Duplicate store driver {name!r}: a different factory is registered"
            raise DriverRegistrationError(msg)
        self._factories[name] = factory
        logger.debug("Registered store driver %s", name)

    def unregister(self, name: str) -> None:
        self._factories.pop(name, None)

    def names(self) -> list[str]:
        return sorted(self._factories)

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def get(self, name: str) -> StoreFactory:
        try:
            return self._factories[name]
        except KeyError:
            raise UnsupportedDriverError(name) from None

    def create(
        self, name: str, config: Mapping[str, Any], settings: LockerSettings
    ) -> ILockStore:
        """Resolve ``name`` and build the adapter.

        Raises:
            UnsupportedDriverError: Before any I/O if ``name`` is unknown.
        """
        return self.get(name)(config, settings)


def default_registry() -> DriverRegistry:
    """Return a fresh registry with the built-in ``redis`` and ``memory`` drivers."""
    registry = DriverRegistry()
    registry.register("redis", create_redis_store)
    registry.register("memory", create_memory_store)
    return registry
