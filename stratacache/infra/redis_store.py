import contextlib
import logging
from typing import Iterator, Sequence

from redis.asyncio import Redis, RedisCluster
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisClusterException, RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from stratacache.core.errors import StoreConnectionError, StoreError


@contextlib.contextmanager
def translate_errors(command: str) -> Iterator[None]:
    try:
        yield
    except (RedisConnectionError, RedisTimeoutError) as ex:
        raise StoreConnectionError(f"{command} failed, store unreachable: {ex}") from ex
    except RedisError as ex:
        raise StoreError(f"{command} failed: {ex}") from ex
    except RedisClusterException as ex:
        # raised when no startup node answers, or the slot map is unusable
        if command == "CONNECT":
            raise StoreConnectionError(f"{command} failed, cluster unreachable: {ex}") from ex
        raise StoreError(f"{command} failed: {ex}") from ex


class RedisStore:
    """
    KeyValueStore implementation on top of redis-py's asyncio client.

    Works with a standalone `Redis` client or a `RedisCluster` client. The
    client must be created with ``decode_responses=True`` so that keys and
    values come back as text. Requests are issued on the client's own
    connection pool, so any number of operations may be in flight at once;
    no locking is added here.

    On a cluster, keys of a multi-key request may live on different slots.
    Multi-key reads then use the client's non-atomic multi-get, which
    splits the request per slot, and pattern enumeration is sent to every
    primary. Two-level layouts do not have this problem since a whole
    partition is one hash on one slot.
    """

    def __init__(
        self,
        client: Redis | RedisCluster,
        cluster: bool | None = None,
    ) -> None:
        self._client = client
        self._cluster = isinstance(client, RedisCluster) if cluster is None else cluster
        self._logger = logging.getLogger("infra.redis_store")

    @property
    def client(self) -> Redis | RedisCluster:
        return self._client

    @property
    def cluster(self) -> bool:
        return self._cluster

    async def connect(self) -> None:
        with translate_errors("CONNECT"):
            if self._cluster:
                await self._client.initialize()
            await self._client.ping()
        self._logger.debug(f"Connected to redis ({'cluster' if self._cluster else 'standalone'})")

    async def close(self) -> None:
        with translate_errors("CLOSE"):
            await self._client.aclose()

    async def get(self, name: str) -> str | None:
        with translate_errors("GET"):
            return await self._client.get(name)

    async def set(self, name: str, value: str) -> None:
        with translate_errors("SET"):
            await self._client.set(name, value)

    async def delete(self, *names: str) -> int:
        if not names:
            return 0
        with translate_errors("DEL"):
            return await self._client.delete(*names)

    async def exists(self, name: str) -> bool:
        with translate_errors("EXISTS"):
            return bool(await self._client.exists(name))

    async def keys(self, pattern: str) -> list[str]:
        with translate_errors("KEYS"):
            if self._cluster:
                # KEYS only sees the node it runs on, ask every shard
                return list(await self._client.keys(pattern, target_nodes=RedisCluster.PRIMARIES))
            return list(await self._client.keys(pattern))

    async def mget(self, names: Sequence[str]) -> list[str | None]:
        if not names:
            return []
        with translate_errors("MGET"):
            if self._cluster:
                return list(await self._client.mget_nonatomic(list(names)))
            return list(await self._client.mget(list(names)))

    async def hget(self, name: str, field: str) -> str | None:
        with translate_errors("HGET"):
            return await self._client.hget(name, field)

    async def hset(self, name: str, field: str, value: str) -> None:
        with translate_errors("HSET"):
            await self._client.hset(name, field, value)

    async def hdel(self, name: str, *fields: str) -> int:
        if not fields:
            return 0
        with translate_errors("HDEL"):
            return await self._client.hdel(name, *fields)

    async def hexists(self, name: str, field: str) -> bool:
        with translate_errors("HEXISTS"):
            return bool(await self._client.hexists(name, field))

    async def hkeys(self, name: str) -> list[str]:
        with translate_errors("HKEYS"):
            return list(await self._client.hkeys(name))

    async def hmget(self, name: str, fields: Sequence[str]) -> list[str | None]:
        if not fields:
            return []
        with translate_errors("HMGET"):
            return list(await self._client.hmget(name, list(fields)))
