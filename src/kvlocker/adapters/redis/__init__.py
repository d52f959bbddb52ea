"""Redis store adapter."""

from __future__ import annotations

from .store import RedisConfig, RedisLockStore, create_redis_store

__all__ = ["RedisConfig", "RedisLockStore", "create_redis_store"]
