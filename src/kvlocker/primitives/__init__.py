"""Primitives: fingerprints, options and the error taxonomy."""

from __future__ import annotations

from .exceptions import (
    ConfigurationError,
    DriverRegistrationError,
    InvalidArgumentError,
    KVLockerError,
    LockerClosedError,
    LockNotHeldError,
    ResourceLockedError,
    UnexpectedStoreStateError,
    UnsupportedDriverError,
)
from .fingerprint import fingerprint
from .options import LockerSettings, LockerSpec, LockOptions

__all__ = [
    "ConfigurationError",
    "DriverRegistrationError",
    "InvalidArgumentError",
    "KVLockerError",
    "LockNotHeldError",
    "LockOptions",
    "LockerClosedError",
    "LockerSettings",
    "LockerSpec",
    "ResourceLockedError",
    "UnexpectedStoreStateError",
    "UnsupportedDriverError",
    "fingerprint",
]
