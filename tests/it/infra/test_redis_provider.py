import os
import uuid

import pytest
import pytest_asyncio
from redis.asyncio import Redis

from stratacache.core.errors import StoreConnectionError
from stratacache.core.models.provider import KeyLayout, PerformanceMode
from stratacache.core.service.provider import StoreCacheProvider
from stratacache.infra.redis_store import RedisStore


REDIS_URL = os.environ.get("STRATA_TEST_REDIS_URL", "redis://127.0.0.1:6379/15")


@pytest_asyncio.fixture(params=list(KeyLayout), ids=str)
async def provider(request):
    client = Redis.from_url(REDIS_URL, decode_responses=True)
    provider = StoreCacheProvider(
        RedisStore(client),
        layout=request.param,
        prefix=f"it-{uuid.uuid4().hex[:8]}",
    )
    try:
        await provider.init()
    except StoreConnectionError as ex:
        await client.aclose()
        pytest.skip(f"redis not available at {REDIS_URL}: {ex}")

    yield provider

    async for name in client.scan_iter(f"{provider.prefix}:*"):
        await client.delete(name)
    await provider.close()


@pytest.mark.it
@pytest.mark.asyncio
@pytest.mark.parametrize("mode", list(PerformanceMode), ids=str)
async def test_partition_lifecycle(provider, mode):
    provider.performance_mode = mode
    for key, value in {"a": "1", "b": "2", "c": "3", "d": "4"}.items():
        await provider.set("guilds", "0", key, value)
    await provider.set("guilds", "1", "a", "other")

    assert await provider.size("guilds", "0") == 4
    assert await provider.get("guilds", "0", "b") == "2"
    assert await provider.count("guilds", "0", lambda value, key, view: int(value) % 2 == 0) == 2

    await provider.sweep("guilds", "0", lambda value, key, view: int(value) > 2)

    assert sorted(await provider.entries("guilds", "0")) == [("a", "1"), ("b", "2")]
    assert await provider.clear("guilds", "0") is True
    assert await provider.size("guilds", "0") == 0
    assert await provider.get("guilds", "1", "a") == "other"
