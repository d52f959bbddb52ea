"""Redis-backed lock store using INCR/EXPIRE counters."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from redis.asyncio import Redis

from ...ports.store import TTL_KEY_ABSENT, TTL_NO_EXPIRY
from ...primitives.exceptions import ConfigurationError, UnexpectedStoreStateError

if TYPE_CHECKING:
    from ...primitives.options import LockerSettings

logger = logging.getLogger("kvlocker.redis.store")


class RedisConfig(BaseModel):
    """
    Connection settings for :class:`RedisLockStore`.

    Either ``url`` or the discrete ``host``/``port``/``db`` fields are used;
    ``url`` wins when both are given. ``database`` is accepted as an alias
    of ``db``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    url: str | None = None
    host: str = "localhost"
    port: int = 6379
    db: int = Field(default=0, validation_alias=AliasChoices("db", "database"))
    password: str | None = None
    ssl: bool = False
    socket_timeout: float | None = None
    scan_count: int = Field(default=500, ge=1)

    def create_client(self) -> Redis:  # type: ignore[type-arg]
        if self.url:
            return Redis.from_url(self.url, socket_timeout=self.socket_timeout)
        return Redis(
            host=self.host,
            port=self.port,
            db=self.db,
            password=self.password,
            ssl=self.ssl,
            socket_timeout=self.socket_timeout,
        )


class RedisLockStore:
    """
    Counter-based lock store for a single Redis endpoint.

    The lock record is an integer at the namespaced key. INCR is atomic in
    Redis, so exactly one caller per lock generation observes 1. Expiry is
    applied with a separate EXPIRE after the increment; the window between
    the two is what the TTL repair in :meth:`try_acquire` heals.

    Example:
        ```python
        store = RedisLockStore(Redis.from_url("redis://localhost:6379/1"))
        if await store.try_acquire("lock:abc", 30) == 1:
            ...
            await store.release("lock:abc")
        await store.shutdown()
        ```
    """

    def __init__(
        self,
        redis: Redis,  # type: ignore[type-arg]
        *,
        scan_count: int = 500,
    ) -> None:
        """
        Initialize RedisLockStore.

        Args:
            redis: An initialized redis.asyncio.Redis client. Shared by every
                operation; the client's pool handles concurrent use.
            scan_count: COUNT hint for each SCAN step in :meth:`purge_all`.
        """
        self._redis = redis
        self._scan_count = scan_count

    async def try_acquire(self, key: str, ttl_seconds: int) -> int:
        number_of_locks = int(await self._redis.incr(key))
        ttl = int(await self._redis.ttl(key))

        if number_of_locks == 1:
            await self._redis.expire(key, ttl_seconds)
            logger.debug("Lock record created: %s (ttl=%ds)", key, ttl_seconds)
        elif ttl == TTL_NO_EXPIRY:
            await self._redis.expire(key, ttl_seconds)
            logger.warning(
                "Lock record %s had no expiry (count=%d); applied ttl=%ds",
                key,
                number_of_locks,
                ttl_seconds,
            )
        elif ttl == TTL_KEY_ABSENT:
            raise UnexpectedStoreStateError(
                key, f"key vanished after increment (count={number_of_locks})"
            )
        else:
            logger.debug(
                "Lock record %s contended (count=%d, ttl=%ds)",
                key,
                number_of_locks,
                ttl,
            )

        return number_of_locks

    async def release(self, key: str) -> None:
        await self._redis.delete(key)
        logger.debug("Lock record deleted: %s", key)

    async def exists(self, key: str) -> bool:
        return bool(await self._redis.exists(key))

    async def purge_all(self, prefix: str) -> None:
        """Caution: walks the key space with SCAN; meant for tests and resets."""
        cursor: int = 0
        deleted = 0
        while True:
            cursor, keys = await self._redis.scan(
                cursor, match=f"{prefix}*", count=self._scan_count
            )
            if keys:
                deleted += await self._redis.delete(*keys)
            if cursor == 0:
                break
        logger.info("Purged %d lock records under prefix %r", deleted, prefix)

    async def ping(self) -> bool:
        return bool(await self._redis.ping())

    async def shutdown(self) -> None:
        await self._redis.aclose()
        logger.info("RedisLockStore closed")


def create_redis_store(
    config: Mapping[str, Any],
    settings: LockerSettings,  # noqa: ARG001
) -> RedisLockStore:
    """Driver factory for ``"redis"``.

    ``config`` may carry a ready ``client`` (a redis.asyncio.Redis) instead of
    connection settings.
    """
    options = dict(config)
    client = options.pop("client", None)
    try:
        redis_config = RedisConfig.model_validate(options)
    except PydanticValidationError as exc:
        raise ConfigurationError(
            f"Invalid RedisConfig: {exc.errors(include_url=False)}"
        ) from exc

    if client is None:
        client = redis_config.create_client()
    logger.info(
        "Initialized RedisLockStore (%s)",
        "url" if redis_config.url else f"{redis_config.host}:{redis_config.port}",
    )
    return RedisLockStore(client, scan_count=redis_config.scan_count)
