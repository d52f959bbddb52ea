"""Lock and configuration exceptions for kvlocker."""

from __future__ import annotations


class KVLockerError(Exception):
    """Root exception for the entire kvlocker package."""


class InvalidArgumentError(KVLockerError, ValueError):
    """Raised when a value cannot be fingerprinted (empty or not a string)."""


class ConfigurationError(KVLockerError):
    """Raised when a locker, its options or its store config are invalid."""


class UnsupportedDriverError(ConfigurationError):
    """Raised when no store driver is registered under the requested name."""

    def __init__(self, driver: str) -> None:
        self.driver = driver
        super().__init__(f"Driver not supported: {driver!r}")


class DriverRegistrationError(ConfigurationError):
    """Raised when a second, different factory is registered under a name."""


class LockerClosedError(KVLockerError):
    """Raised when a closed locker is used."""


# ── Locking Exceptions ───────────────────────────────────────────────


class ResourceLockedError(KVLockerError):
    """The resource is held by someone else.

    ``number_of_locks`` is the counter value observed by the failed attempt
    (always >= 2).
    """

    def __init__(self, resource_id: str, number_of_locks: int) -> None:
        self.resource_id = resource_id
        self.number_of_locks = number_of_locks
        super().__init__("Resource locked")

    def __repr__(self) -> str:
        return (
            f"ResourceLockedError(resource_id={self.resource_id!r}, "
            f"number_of_locks={self.number_of_locks})"
        )


class LockNotHeldError(KVLockerError):
    """Raised when unlocking a handle that was already released."""

    def __init__(self, resource_id: str) -> None:
        self.resource_id = resource_id
        super().__init__("Not locked")


class UnexpectedStoreStateError(KVLockerError):
    """The store reported a state the lock protocol cannot explain.

    Raised when a key vanishes between the increment and the TTL read.
    """

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Unexpected store state for {key}: {reason}")
