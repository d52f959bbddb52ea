"""kvlocker: distributed mutual-exclusion locks on a shared key-value store."""

from __future__ import annotations

from .drivers import DriverRegistry, StoreFactory, default_registry
from .engine import Locker, create_locker
from .handle import LockHandle, LockState
from .instrumentation import (
    HookRegistry,
    InstrumentationHook,
    get_hook_registry,
    set_hook_registry,
)
from .ports import ILockStore
from .primitives import (
    ConfigurationError,
    DriverRegistrationError,
    InvalidArgumentError,
    KVLockerError,
    LockerClosedError,
    LockerSettings,
    LockerSpec,
    LockNotHeldError,
    LockOptions,
    ResourceLockedError,
    UnexpectedStoreStateError,
    UnsupportedDriverError,
    fingerprint,
)

__all__ = [
    # Engine
    "Locker",
    "create_locker",
    "LockHandle",
    "LockState",
    "fingerprint",
    # Configuration
    "LockOptions",
    "LockerSettings",
    "LockerSpec",
    # Drivers
    "DriverRegistry",
    "StoreFactory",
    "default_registry",
    "ILockStore",
    # Instrumentation
    "HookRegistry",
    "InstrumentationHook",
    "get_hook_registry",
    "set_hook_registry",
    # Errors
    "KVLockerError",
    "ConfigurationError",
    "DriverRegistrationError",
    "InvalidArgumentError",
    "LockNotHeldError",
    "LockerClosedError",
    "ResourceLockedError",
    "UnexpectedStoreStateError",
    "UnsupportedDriverError",
]
