import logging
from unittest.mock import MagicMock

import pytest

from kvlocker import (
    ConfigurationError,
    DriverRegistrationError,
    DriverRegistry,
    Locker,
    UnsupportedDriverError,
    create_locker,
    default_registry,
)
from kvlocker.adapters.memory import InMemoryLockStore, create_memory_store
from kvlocker.adapters.redis import RedisLockStore, create_redis_store


def test_default_registry_knows_builtin_drivers() -> None:
    registry = default_registry()
    assert registry.names() == ["memory", "redis"]
    assert "redis" in registry
    assert registry.get("redis") is create_redis_store
    assert registry.get("memory") is create_memory_store


def test_register_conflicts(caplog) -> None:
    caplog.set_level(logging.DEBUG)
    registry = DriverRegistry()

    registry.register("memory", create_memory_store)
    # Same factory again is fine
    registry.register("memory", create_memory_store)

    with pytest.raises(DriverRegistrationError, match="Duplicate store driver"):
        registry.register("memory", create_redis_store)

    assert "Registered store driver memory" in caplog.text


def test_unregister() -> None:
    registry = default_registry()
    registry.unregister("memory")
    registry.unregister("never-registered")
    assert registry.names() == ["redis"]


def test_unknown_driver_raises() -> None:
    registry = DriverRegistry()
    with pytest.raises(UnsupportedDriverError) as exc:
        registry.get("etcd")
    assert exc.value.driver == "etcd"
    assert isinstance(exc.value, ConfigurationError)


def test_custom_driver_is_used_by_create_locker() -> None:
    store = InMemoryLockStore()
    factory = MagicMock(return_value=store)
    registry = DriverRegistry()
    registry.register("custom", factory)

    locker = create_locker(
        {"driver": "custom", "config": {"x": 1}, "settings": {"prefix": "c:"}},
        registry=registry,
    )

    assert isinstance(locker, Locker)
    assert locker.prefix == "c:"
    config, settings = factory.call_args.args
    assert config == {"x": 1}
    assert settings.prefix == "c:"


class TestCreateLocker:
    def test_unknown_driver_fails_before_any_io(self) -> None:
        with pytest.raises(UnsupportedDriverError, match="Driver not supported"):
            create_locker({"driver": "etcd", "settings": {"prefix": "lock:"}})

    def test_missing_prefix_fails(self) -> None:
        with pytest.raises(ConfigurationError, match="prefix"):
            create_locker({"driver": "memory", "settings": {}})

    def test_redis_driver_with_client(self) -> None:
        client = MagicMock()
        locker = create_locker(
            {
                "driver": "redis",
                "config": {"client": client},
                "settings": {"prefix": "lock:"},
            }
        )
        assert isinstance(locker._store, RedisLockStore)
        assert locker._store._redis is client
