from typing import AsyncIterator, Protocol, Sequence

from stratacache.core.models.namespace import Triple
from stratacache.core.models.provider import PerformanceMode
from stratacache.core.storage.partition import PartitionStore


class ValueFetcher(Protocol):
    """
    Materializes the values of already enumerated keys.

    Records that vanished between enumeration and fetch are skipped: a scan
    only ever sees records present at the time their value was read.
    Pairs are yielded in the order of `keys`.
    """

    def fetch(
        self,
        keyspace: str,
        storage: str,
        keys: Sequence[str],
    ) -> AsyncIterator[tuple[str, str]]:
        ...


class BatchedFetcher:
    """
    One multi-get for every key of the scan. Fewest round-trips, but the
    whole partition is held in memory at once.
    """
    def __init__(self, partitions: PartitionStore) -> None:
        self._partitions = partitions

    async def fetch(
        self,
        keyspace: str,
        storage: str,
        keys: Sequence[str],
    ) -> AsyncIterator[tuple[str, str]]:
        values = await self._partitions.multi_get(keyspace, storage, keys)
        for key, value in zip(keys, values):
            if value is None:
                continue
            yield key, value


class SequentialFetcher:
    """
    One get per key, awaited one after the other. A consumer that stops
    iterating stops fetching.
    """
    def __init__(self, partitions: PartitionStore) -> None:
        self._partitions = partitions

    async def fetch(
        self,
        keyspace: str,
        storage: str,
        keys: Sequence[str],
    ) -> AsyncIterator[tuple[str, str]]:
        for key in keys:
            value = await self._partitions.get(Triple(keyspace, storage, key))
            if value is None:
                continue
            yield key, value


def create_fetcher(mode: PerformanceMode, partitions: PartitionStore) -> ValueFetcher:
    if mode == PerformanceMode.fast:
        return BatchedFetcher(partitions)
    if mode == PerformanceMode.saving:
        return SequentialFetcher(partitions)
    raise ValueError(f"Unknown performance mode: {mode}")
