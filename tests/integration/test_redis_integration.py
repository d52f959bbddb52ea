"""Integration tests against a real Redis (require testcontainers and Docker)."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

pytest.importorskip("testcontainers")

from redis.asyncio import Redis
from testcontainers.redis import RedisContainer

from kvlocker import (
    Locker,
    LockHandle,
    LockNotHeldError,
    ResourceLockedError,
    create_locker,
    fingerprint,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

pytestmark = pytest.mark.integration


@pytest.fixture(scope="module")
def redis_url() -> Iterator[str]:
    container = RedisContainer("redis:7-alpine")
    try:
        container.start()
    except Exception as exc:  # noqa: BLE001
        pytest.skip(f"Redis container unavailable: {exc}")
    try:
        host = container.get_container_host_ip()
        port = container.get_exposed_port(6379)
        yield f"redis://{host}:{port}/1"
    finally:
        container.stop()


def _make_locker(redis_url: str) -> Locker:
    return create_locker(
        {
            "driver": "redis",
            "config": {"url": redis_url},
            "settings": {"prefix": "lock:"},
        }
    )


@pytest.fixture
async def redis_locker(redis_url: str) -> AsyncIterator[Locker]:
    locker = _make_locker(redis_url)
    await locker.purge()
    yield locker
    await locker.close()


@pytest.fixture
async def raw_redis(redis_url: str) -> AsyncIterator[Redis]:
    client = Redis.from_url(redis_url)
    yield client
    await client.aclose()


async def test_acquire_returns_handle(redis_locker: Locker) -> None:
    handle = await redis_locker.acquire("resource")
    assert handle.resource_id == "resource"
    assert handle.key == fingerprint("resource")


async def test_locked_resource_rejected(redis_locker: Locker) -> None:
    await redis_locker.acquire("hello")
    with pytest.raises(ResourceLockedError) as exc:
        await redis_locker.acquire("hello")
    assert exc.value.number_of_locks >= 2


async def test_unlock(redis_locker: Locker) -> None:
    assert await redis_locker.is_locked("key") is False
    handle = await redis_locker.acquire("key")
    assert await redis_locker.is_locked("key") is True
    await handle.unlock()
    assert await redis_locker.is_locked("key") is False
    with pytest.raises(LockNotHeldError):
        await handle.unlock()


async def test_expire(redis_locker: Locker) -> None:
    await redis_locker.acquire("key", {"expire": 1})
    assert await redis_locker.is_locked("key") is True
    await asyncio.sleep(1.1)
    assert await redis_locker.is_locked("key") is False


async def test_retry_until_lease_expires(redis_locker: Locker) -> None:
    await redis_locker.acquire("key", {"expire": 1})
    handle = await redis_locker.acquire(
        "key", {"retry": True, "retry_interval": 100, "max_retry_attempts": 20}
    )
    assert handle.locked


async def test_heals_counter_without_ttl(
    redis_locker: Locker, raw_redis: Redis
) -> None:
    store_key = "lock:" + fingerprint("orphan")
    await raw_redis.set(store_key, 5)
    assert await raw_redis.ttl(store_key) == -1

    with pytest.raises(ResourceLockedError) as exc:
        await redis_locker.acquire("orphan", {"expire": 30})

    assert exc.value.number_of_locks == 6
    assert 0 < await raw_redis.ttl(store_key) <= 30


async def test_purge_many_locks(redis_locker: Locker, raw_redis: Redis) -> None:
    await raw_redis.set("other:keep", 1)
    await asyncio.gather(*(redis_locker.acquire(str(i)) for i in range(1000)))
    assert await redis_locker.is_locked("1") is True

    await redis_locker.purge()

    locked = await asyncio.gather(
        *(redis_locker.is_locked(str(i)) for i in range(1000))
    )
    assert not any(locked)
    assert await raw_redis.exists("other:keep") == 1
    await raw_redis.delete("other:keep")


async def test_independent_lockers_contend(redis_url: str, redis_locker: Locker) -> None:
    others = [_make_locker(redis_url) for _ in range(10)]
    try:
        results = await asyncio.gather(
            *(lk.acquire("shared") for lk in [redis_locker, *others]),
            return_exceptions=True,
        )
    finally:
        for lk in others:
            await lk.close()

    winners = [r for r in results if isinstance(r, LockHandle)]
    losers = [r for r in results if isinstance(r, ResourceLockedError)]
    assert len(winners) == 1
    assert len(losers) == 10
    assert sorted(err.number_of_locks for err in losers) == list(range(2, 12))


async def test_health_check(redis_locker: Locker) -> None:
    assert await redis_locker.health_check() is True
