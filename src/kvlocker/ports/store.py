"""ILockStore: what the lock engine needs from a shared key-value store.

Any store with an atomic integer increment, per-key expiry and an incremental
key-space scan can back a locker. Keys passed to a store are already
namespaced (``prefix + fingerprint``); stores never hash or prefix.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

# Values reported by a TTL query, following Redis semantics.
TTL_NO_EXPIRY: int = -1
TTL_KEY_ABSENT: int = -2


@runtime_checkable
class ILockStore(Protocol):
    """
    Store adapter protocol for counter-based locking.

    Implementations: :class:`~kvlocker.adapters.redis.RedisLockStore` and
    :class:`~kvlocker.adapters.memory.InMemoryLockStore`.
    """

    async def try_acquire(self, key: str, ttl_seconds: int) -> int:
        """
        Atomically increment the counter at ``key`` and repair its TTL.

        The store creates a missing counter at 0 before incrementing, so the
        first acquirer observes 1 and every later one a distinct larger value.

        After incrementing, the remaining TTL is read:

        - result == 1: expiry is set to ``ttl_seconds``.
        - TTL is :data:`TTL_NO_EXPIRY`: the counter was left immortal (its
          creator crashed before setting a TTL); expiry is set now.
        - TTL is :data:`TTL_KEY_ABSENT`: raise
          :class:`~kvlocker.primitives.exceptions.UnexpectedStoreStateError`.
        - Otherwise the running expiry is left untouched.

        Returns:
            The counter value after the increment.
        """
        ...

    async def release(self, key: str) -> None:
        """Delete ``key`` unconditionally."""
        ...

    async def exists(self, key: str) -> bool:
        """Return whether ``key`` is currently present."""
        ...

    async def purge_all(self, prefix: str) -> None:
        """
        Delete every key starting with ``prefix``.

        Must walk the key space incrementally and delete batch by batch,
        never materialising all matching keys at once.
        """
        ...

    async def ping(self) -> bool:
        """Return True if the store answers a lightweight request."""
        ...

    async def shutdown(self) -> None:
        """Release connection resources held by the store."""
        ...
