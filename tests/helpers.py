from stratacache.core.service.provider import StoreCacheProvider


async def seed(
    provider: StoreCacheProvider,
    keyspace: str,
    storage: str,
    records: dict[str, str],
) -> None:
    for key, value in records.items():
        await provider.set(keyspace, storage, key, value)


def is_even(value, key, view) -> bool:
    return int(value) % 2 == 0


def is_odd(value, key, view) -> bool:
    return int(value) % 2 == 1
