"""InMemoryLockStore: testing and single-process implementation of ILockStore."""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ...ports.store import TTL_KEY_ABSENT, TTL_NO_EXPIRY

if TYPE_CHECKING:
    from ...primitives.options import LockerSettings

logger = logging.getLogger("kvlocker.memory.store")


@dataclass
class _Counter:
    """A counter and its absolute expiry on the monotonic clock."""

    value: int = 0
    expires_at: float | None = None


class InMemoryLockStore:
    """
    In-memory implementation of ILockStore mirroring Redis counter semantics.

    Features:
    - Atomic increment under a single asyncio lock
    - Lazy expiry on the monotonic clock (checked on every access)
    - Same TTL repair rules as the Redis store
    - Useful for testing and single-process applications
    """

    def __init__(self, *, purge_batch_size: int = 500) -> None:
        self._counters: dict[str, _Counter] = {}
        self._lock = asyncio.Lock()
        self._purge_batch_size = purge_batch_size

    def _live(self, key: str) -> _Counter | None:
        counter = self._counters.get(key)
        if counter is None:
            return None
        if counter.expires_at is not None and counter.expires_at <= time.monotonic():
            # Expired: behave as if the store evicted it
            del self._counters[key]
            return None
        return counter

    def _ttl(self, key: str) -> int:
        counter = self._live(key)
        if counter is None:
            return TTL_KEY_ABSENT
        if counter.expires_at is None:
            return TTL_NO_EXPIRY
        return max(0, round(counter.expires_at - time.monotonic()))

    def _expire(self, key: str, ttl_seconds: int) -> None:
        counter = self._live(key)
        if counter is not None:
            counter.expires_at = time.monotonic() + ttl_seconds

    async def try_acquire(self, key: str, ttl_seconds: int) -> int:
        async with self._lock:
            counter = self._live(key)
            if counter is None:
                counter = _Counter()
                self._counters[key] = counter
            counter.value += 1
            number_of_locks = counter.value
            ttl = self._ttl(key)

            if number_of_locks == 1:
                self._expire(key, ttl_seconds)
            elif ttl == TTL_NO_EXPIRY:
                self._expire(key, ttl_seconds)
                logger.warning(
                    "Lock record %s had no expiry (count=%d); applied ttl=%ds",
                    key,
                    number_of_locks,
                    ttl_seconds,
                )

        logger.debug("Lock record %s incremented (count=%d)", key, number_of_locks)
        return number_of_locks

    async def release(self, key: str) -> None:
        async with self._lock:
            self._counters.pop(key, None)

    async def exists(self, key: str) -> bool:
        async with self._lock:
            return self._live(key) is not None

    async def purge_all(self, prefix: str) -> None:
        deleted = 0
        while True:
            async with self._lock:
                matching = (key for key in self._counters if key.startswith(prefix))
                batch = list(itertools.islice(matching, self._purge_batch_size))
                for key in batch:
                    del self._counters[key]
            deleted += len(batch)
            if len(batch) < self._purge_batch_size:
                break
            # Let other coroutines run between batches
            await asyncio.sleep(0)
        logger.debug("Purged %d lock records under prefix %r", deleted, prefix)

    async def ping(self) -> bool:
        return True

    async def shutdown(self) -> None:
        async with self._lock:
            self._counters.clear()

    def seed(self, key: str, value: int, ttl_seconds: int | None = None) -> None:
        """Write a raw counter, bypassing the lock protocol.

        Simulates records left behind by other writers (e.g. a process that
        crashed between increment and expiry).
        """
        expires_at = None if ttl_seconds is None else time.monotonic() + ttl_seconds
        self._counters[key] = _Counter(value=value, expires_at=expires_at)


def create_memory_store(
    config: Mapping[str, Any],
    settings: LockerSettings,  # noqa: ARG001
) -> InMemoryLockStore:
    """Driver factory for ``"memory"``; accepts ``purge_batch_size`` in config."""
    return InMemoryLockStore(
        purge_batch_size=int(config.get("purge_batch_size", 500)),
    )
