import json
from functools import lru_cache

from pydantic import ValidationError
from redis.asyncio import Redis, RedisCluster
from redis.asyncio.cluster import ClusterNode

from stratacache.bootstrap.config.settings import RedisSettings, StrataConfig
from stratacache.core.models.provider import ConnectionType
from stratacache.core.service.provider import StoreCacheProvider
from stratacache.infra.redis_store import RedisStore


def create_redis_client(
    settings: RedisSettings,
    connection: ConnectionType,
) -> Redis | RedisCluster:
    # Clients connect lazily; StoreCacheProvider.init() forces the connection.
    common = dict(
        username=settings.username,
        password=settings.password,
        ssl=settings.ssl,
        socket_timeout=settings.socket_timeout,
        decode_responses=True,
    )

    if connection == ConnectionType.cluster:
        nodes = []
        for node in settings.nodes:
            host, _, port = node.rpartition(":")
            nodes.append(ClusterNode(host, int(port)))
        return RedisCluster(startup_nodes=nodes, **common)

    return Redis(host=settings.host, port=settings.port, db=settings.db, **common)


def create_provider(config: StrataConfig) -> StoreCacheProvider:
    client = create_redis_client(config.redis, config.provider.connection)
    return StoreCacheProvider(
        store=RedisStore(client),
        layout=config.provider.layout,
        prefix=config.provider.prefix,
        performance_mode=config.provider.performance_mode,
    )


@lru_cache
def get_provider() -> StoreCacheProvider:
    return create_provider(get_config())


@lru_cache
def get_config() -> StrataConfig:
    try:
        return StrataConfig()
    except FileNotFoundError as ex:
        raise SystemExit(f"Provide a correct configuration file path: {ex}")
    except ValidationError as ex:
        msg = ["Configuration validation failed:"]
        errs = json.loads(ex.json())
        for err in errs:
            msg.append(f"  {'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}")
        raise SystemExit("\n".join(msg))
