from unittest.mock import AsyncMock

import pytest
from redis.asyncio import RedisCluster
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisClusterException, ResponseError
from redis.exceptions import TimeoutError as RedisTimeoutError

from stratacache.core.errors import StoreConnectionError, StoreError
from stratacache.core.models.provider import KeyLayout
from stratacache.core.service.provider import StoreCacheProvider
from stratacache.infra.redis_store import RedisStore


@pytest.fixture
def client():
    return AsyncMock()


@pytest.fixture
def redis_store(client):
    return RedisStore(client, cluster=False)


@pytest.mark.ut
@pytest.mark.asyncio
async def test_connect_pings(redis_store, client):
    await redis_store.connect()

    client.ping.assert_awaited_once()
    client.initialize.assert_not_awaited()


@pytest.mark.ut
@pytest.mark.asyncio
async def test_connect_on_cluster_initializes_topology(client):
    redis_store = RedisStore(client, cluster=True)

    await redis_store.connect()

    client.initialize.assert_awaited_once()
    client.ping.assert_awaited_once()


@pytest.mark.ut
@pytest.mark.asyncio
async def test_unreachable_cluster_is_a_connection_error(client):
    cause = RedisClusterException(
        "Redis Cluster cannot be connected. Please provide at least one reachable node"
    )
    client.initialize.side_effect = cause
    provider = StoreCacheProvider(RedisStore(client, cluster=True))

    with pytest.raises(StoreConnectionError) as info:
        await provider.init()

    assert info.value.__cause__ is cause
    assert not provider.connected
    client.ping.assert_not_awaited()


@pytest.mark.ut
@pytest.mark.asyncio
async def test_cluster_failure_after_connect_is_a_store_error(client):
    redis_store = RedisStore(client, cluster=True)
    client.hkeys.side_effect = RedisClusterException("No way to dispatch this command")

    with pytest.raises(StoreError) as info:
        await redis_store.hkeys("ks:st")

    assert not isinstance(info.value, StoreConnectionError)


@pytest.mark.ut
@pytest.mark.asyncio
async def test_keys_on_cluster_collects_every_primary(client):
    shards = {
        "10.0.0.1:7000": ["ks:st:a", "ks:st:c"],
        "10.0.0.2:7001": ["ks:st:b"],
    }

    async def keys(pattern, target_nodes=None):
        # without explicit targets the client runs KEYS on its default node only
        if target_nodes == RedisCluster.PRIMARIES:
            return [name for names in shards.values() for name in names]
        return shards["10.0.0.1:7000"]

    client.keys.side_effect = keys
    redis_store = RedisStore(client, cluster=True)

    assert sorted(await redis_store.keys("ks:st:*")) == ["ks:st:a", "ks:st:b", "ks:st:c"]
    client.keys.assert_awaited_once_with("ks:st:*", target_nodes=RedisCluster.PRIMARIES)


@pytest.mark.ut
@pytest.mark.asyncio
async def test_flat_layout_on_cluster_sees_every_shard(client):
    client.keys.return_value = ["guilds:0:a", "guilds:0:b"]
    client.mget_nonatomic.return_value = ["1", "2"]
    provider = StoreCacheProvider(RedisStore(client, cluster=True), layout=KeyLayout.flat)
    await provider.init()

    assert await provider.entries("guilds", "0") == [("a", "1"), ("b", "2")]
    client.keys.assert_awaited_once_with("guilds:0:*", target_nodes=RedisCluster.PRIMARIES)


@pytest.mark.ut
@pytest.mark.asyncio
async def test_connect_failure_is_a_connection_error(redis_store, client):
    cause = RedisConnectionError("Connection refused")
    client.ping.side_effect = cause

    with pytest.raises(StoreConnectionError) as info:
        await redis_store.connect()

    assert info.value.__cause__ is cause


@pytest.mark.ut
@pytest.mark.asyncio
async def test_timeout_is_a_connection_error(redis_store, client):
    client.hkeys.side_effect = RedisTimeoutError("Timeout reading from socket")

    with pytest.raises(StoreConnectionError):
        await redis_store.hkeys("ks:st")


@pytest.mark.ut
@pytest.mark.asyncio
async def test_protocol_error_is_a_store_error(redis_store, client):
    cause = ResponseError("WRONGTYPE Operation against a key holding the wrong kind of value")
    client.hget.side_effect = cause

    with pytest.raises(StoreError) as info:
        await redis_store.hget("ks:st", "a")

    assert not isinstance(info.value, StoreConnectionError)
    assert info.value.__cause__ is cause


@pytest.mark.ut
@pytest.mark.asyncio
async def test_commands_pass_through(redis_store, client):
    client.get.return_value = "1"
    client.delete.return_value = 2
    client.exists.return_value = 1
    client.keys.return_value = ["ks:st:a", "ks:st:b"]
    client.hget.return_value = "v"
    client.hdel.return_value = 1
    client.hexists.return_value = False
    client.hkeys.return_value = ["a"]
    client.hmget.return_value = ["v", None]

    assert await redis_store.get("k") == "1"
    await redis_store.set("k", "1")
    assert await redis_store.delete("a", "b") == 2
    assert await redis_store.exists("k") is True
    assert await redis_store.keys("ks:st:*") == ["ks:st:a", "ks:st:b"]
    assert await redis_store.hget("ks:st", "a") == "v"
    await redis_store.hset("ks:st", "a", "v")
    assert await redis_store.hdel("ks:st", "a", "b") == 1
    assert await redis_store.hexists("ks:st", "a") is False
    assert await redis_store.hkeys("ks:st") == ["a"]
    assert await redis_store.hmget("ks:st", ("a", "b")) == ["v", None]

    client.set.assert_awaited_once_with("k", "1")
    client.delete.assert_awaited_once_with("a", "b")
    client.hset.assert_awaited_once_with("ks:st", "a", "v")
    client.hdel.assert_awaited_once_with("ks:st", "a", "b")
    client.hmget.assert_awaited_once_with("ks:st", ["a", "b"])


@pytest.mark.ut
@pytest.mark.asyncio
async def test_empty_batches_skip_the_round_trip(redis_store, client):
    assert await redis_store.delete() == 0
    assert await redis_store.hdel("ks:st") == 0
    assert await redis_store.mget([]) == []
    assert await redis_store.hmget("ks:st", []) == []

    client.delete.assert_not_awaited()
    client.hdel.assert_not_awaited()
    client.mget.assert_not_awaited()
    client.hmget.assert_not_awaited()


@pytest.mark.ut
@pytest.mark.asyncio
async def test_mget_standalone_is_atomic(redis_store, client):
    client.mget.return_value = ["1", None]

    assert await redis_store.mget(["a", "b"]) == ["1", None]
    client.mget.assert_awaited_once_with(["a", "b"])
    client.mget_nonatomic.assert_not_awaited()


@pytest.mark.ut
@pytest.mark.asyncio
async def test_mget_cluster_splits_across_slots(client):
    redis_store = RedisStore(client, cluster=True)
    client.mget_nonatomic.return_value = ["1", None]

    assert await redis_store.mget(["a", "b"]) == ["1", None]
    client.mget_nonatomic.assert_awaited_once_with(["a", "b"])
    client.mget.assert_not_awaited()


@pytest.mark.ut
@pytest.mark.asyncio
async def test_close(redis_store, client):
    await redis_store.close()

    client.aclose.assert_awaited_once()


@pytest.mark.ut
@pytest.mark.asyncio
async def test_provider_over_redis_hash_layout(client):
    client.hkeys.return_value = ["a", "b", "c"]
    client.hmget.return_value = ["1", None, "3"]
    client.hdel.return_value = 2

    provider = StoreCacheProvider(RedisStore(client, cluster=False), prefix="app")
    await provider.init()
    await provider.sweep("guilds", "0", lambda value, key, view: True)

    client.hkeys.assert_awaited_once_with("app:guilds:0")
    client.hmget.assert_awaited_once_with("app:guilds:0", ["a", "b", "c"])
    # "b" vanished between HKEYS and HMGET: not part of the sweep
    client.hdel.assert_awaited_once_with("app:guilds:0", "a", "c")


@pytest.mark.ut
@pytest.mark.asyncio
async def test_provider_over_redis_flat_layout(client):
    client.keys.return_value = ["guilds:0:a", "guilds:0:b"]
    client.mget.return_value = ["1", "2"]
    client.delete.return_value = 2

    provider = StoreCacheProvider(RedisStore(client, cluster=False), layout=KeyLayout.flat)
    await provider.init()

    assert await provider.clear("guilds", "0") is True
    client.keys.assert_awaited_once_with("guilds:0:*")
    client.delete.assert_awaited_once_with("guilds:0:a", "guilds:0:b")
    client.mget.assert_not_awaited()
