"""Locker: acquire, retry and release leases against a shared store."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, cast

from .drivers import DriverRegistry, default_registry
from .handle import LockHandle
from .instrumentation import get_hook_registry
from .primitives.exceptions import LockerClosedError, ResourceLockedError
from .primitives.fingerprint import fingerprint
from .primitives.options import LockerSpec, LockOptions

if TYPE_CHECKING:
    from .ports.store import ILockStore
    from .primitives.options import LockerSettings

logger = logging.getLogger("kvlocker.engine")


class Locker:
    """
    Distributed mutual-exclusion locks on top of an :class:`ILockStore`.

    Every lock is a counter at ``prefix + fingerprint(resource_id)``. The
    caller whose increment returns 1 owns the lease; everyone else sees a
    larger value and is rejected, or polls again when ``retry`` is enabled.
    Mutual exclusion comes entirely from the store's atomic increment; the
    locker keeps no client-side lock state besides the handles it returns.

    Example:
        ```python
        locker = create_locker({
            "driver": "redis",
            "config": {"host": "localhost", "port": 6379, "db": 1},
            "settings": {"prefix": "lock:"},
        })

        handle = await locker.acquire("report:2024", {"expire": 30, "retry": True})
        try:
            ...
        finally:
            await handle.unlock()
        ```
    """

    def __init__(
        self,
        store: ILockStore,
        settings: LockerSettings,
        *,
        driver: str = "custom",
    ) -> None:
        self._store = store
        self._prefix = settings.prefix
        self._driver = driver
        self._closed = False

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def closed(self) -> bool:
        return self._closed

    def _store_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def _ensure_open(self) -> None:
        if self._closed:
            raise LockerClosedError("Locker is closed")

    async def acquire(
        self,
        resource_id: str,
        options: LockOptions | Mapping[str, Any] | None = None,
    ) -> LockHandle:
        """
        Acquire an exclusive lease on ``resource_id``.

        Args:
            resource_id: Non-empty name of the resource to protect.
            options: :class:`LockOptions` or a mapping of its fields
                (``expire``, ``retry``, ``max_retry_attempts``,
                ``retry_interval``). Never mutated.

        Returns:
            A held :class:`LockHandle`.

        Raises:
            InvalidArgumentError: If ``resource_id`` is empty or not a string.
            ResourceLockedError: If the resource stays contended (immediately
                without ``retry``, or once the retry budget is spent).
            UnexpectedStoreStateError: If the store contradicts itself.
        """
        self._ensure_open()
        resolved = LockOptions.coerce(options)
        key = fingerprint(resource_id)

        registry = get_hook_registry()
        return cast(
            "LockHandle",
            await registry.execute_all(
                f"locker.acquire.{self._driver}",
                {
                    "resource_id": resource_id,
                    "key": key,
                    "expire": resolved.expire,
                    "retry": resolved.retry,
                },
                lambda: self._acquire_internal(resource_id, key, resolved),
            ),
        )

    async def _acquire_internal(
        self, resource_id: str, key: str, options: LockOptions
    ) -> LockHandle:
        store_key = self._store_key(key)
        remaining = options.max_retry_attempts if options.retry else 0

        while True:
            # Store I/O errors propagate here and end the loop
            number_of_locks = await self._store.try_acquire(store_key, options.expire)
            if number_of_locks == 1:
                logger.debug("Lock acquired: %s (%s)", resource_id, store_key)
                return LockHandle(resource_id, key, self._release)

            if remaining <= 0:
                if options.retry:
                    logger.warning(
                        "Retry budget exhausted for %s after %d attempts (count=%d)",
                        resource_id,
                        options.max_retry_attempts + 1,
                        number_of_locks,
                    )
                raise ResourceLockedError(resource_id, number_of_locks)

            remaining -= 1
            logger.debug(
                "Resource %s locked (count=%d); retrying in %dms (%d left)",
                resource_id,
                number_of_locks,
                options.retry_interval,
                remaining,
            )
            await asyncio.sleep(options.retry_interval_seconds)

    async def _release(self, handle: LockHandle) -> None:
        self._ensure_open()
        registry = get_hook_registry()
        await registry.execute_all(
            f"locker.release.{self._driver}",
            {"resource_id": handle.resource_id, "key": handle.key},
            lambda: self._store.release(self._store_key(handle.key)),
        )
        logger.debug("Lock released: %s", handle.resource_id)

    async def is_locked(self, resource_id: str) -> bool:
        """Return whether a lease on ``resource_id`` currently exists."""
        self._ensure_open()
        return await self._store.exists(self._store_key(fingerprint(resource_id)))

    async def purge(self) -> None:
        """Delete every lock under this locker's prefix.

        Administrative: holders are not notified and their handles keep
        believing they hold the lease. Meant for tests and resets.
        """
        self._ensure_open()
        await self._store.purge_all(self._prefix)

    async def health_check(self) -> bool:
        """Return True if the backing store is reachable. Never raises."""
        if self._closed:
            return False
        try:
            return await self._store.ping()
        except Exception as exc:  # noqa: BLE001
            logger.error("Lock store health check failed: %s", exc)
            return False

    async def close(self) -> None:
        """Release store resources. Terminal: the locker cannot be reopened."""
        if self._closed:
            return
        self._closed = True
        await self._store.shutdown()
        logger.info("Locker closed (prefix=%r)", self._prefix)

    async def __aenter__(self) -> Locker:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


def create_locker(
    spec: LockerSpec | Mapping[str, Any],
    *,
    registry: DriverRegistry | None = None,
) -> Locker:
    """
    Build a :class:`Locker` from ``{"driver", "config", "settings"}``.

    No I/O happens here; the store connects lazily on first use.

    Raises:
        ConfigurationError: If ``spec`` is malformed or ``settings.prefix``
            is missing or empty.
        UnsupportedDriverError: If no driver is registered under ``driver``.
    """
    resolved = LockerSpec.coerce(spec)
    drivers = registry if registry is not None else default_registry()
    store = drivers.create(resolved.driver, resolved.config, resolved.settings)
    logger.info(
        "Created locker (driver=%s, prefix=%r)",
        resolved.driver,
        resolved.settings.prefix,
    )
    return Locker(store, resolved.settings, driver=resolved.driver)
