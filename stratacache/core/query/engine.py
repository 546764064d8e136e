import logging
from contextlib import aclosing, asynccontextmanager
from typing import Any, AsyncIterator, Sequence

from stratacache.core.helpers.utils import resolve
from stratacache.core.models.namespace import Triple
from stratacache.core.models.provider import PerformanceMode
from stratacache.core.ports.provider import Callback
from stratacache.core.query.view import ScopedView
from stratacache.core.storage.fetch import ValueFetcher, create_fetcher
from stratacache.core.storage.partition import PartitionStore


class QueryEngine:
    """
    Bulk operations over a partition, synthesized from three primitives of
    the PartitionStore: key enumeration, value fetch and batched delete.

    Every scan first enumerates the partition. An empty partition returns
    the identity result right away, without any value round-trip. Values
    are then materialized by the fetcher matching the current performance
    mode and handed to the callback one record at a time, in enumeration
    order. Callbacks are awaited sequentially, never concurrently, which
    bounds the load a scan puts on the store.

    Enumeration and fetch are two separate requests. A record deleted in
    between is skipped, a record modified in between is seen with its new
    value. Callers get a result consistent with some interleaving of
    concurrent writers, never a snapshot.
    """

    def __init__(
        self,
        partitions: PartitionStore,
        mode: PerformanceMode = PerformanceMode.fast,
    ) -> None:
        self._partitions = partitions
        self._fetchers: dict[PerformanceMode, ValueFetcher] = {
            m: create_fetcher(m, partitions) for m in PerformanceMode
        }
        self._batched = self._fetchers[PerformanceMode.fast]
        self.mode = PerformanceMode(mode)
        self._logger = logging.getLogger("core.query.engine")

    @property
    def mode(self) -> PerformanceMode:
        return self._mode

    @mode.setter
    def mode(self, mode: PerformanceMode) -> None:
        self._mode = PerformanceMode(mode)

    async def get(self, keyspace: str, storage: str, key: str) -> str | None:
        return await self._partitions.get(Triple(keyspace, storage, key))

    async def has(self, keyspace: str, storage: str, key: str) -> bool:
        return await self._partitions.exists(Triple(keyspace, storage, key))

    async def size(self, keyspace: str, storage: str) -> int:
        return len(await self._partitions.enumerate_keys(keyspace, storage))

    async def keys(self, keyspace: str, storage: str) -> list[str]:
        return await self._partitions.enumerate_keys(keyspace, storage)

    async def values(self, keyspace: str, storage: str) -> list[str]:
        return [value for _, value in await self.entries(keyspace, storage)]

    async def entries(self, keyspace: str, storage: str) -> list[tuple[str, str]]:
        # always one batched fetch, whatever the performance mode
        keys = await self._partitions.enumerate_keys(keyspace, storage)
        if not keys:
            return []

        return [pair async for pair in self._batched.fetch(keyspace, storage, keys)]

    async def clear(self, keyspace: str, storage: str) -> bool:
        keys = await self._partitions.enumerate_keys(keyspace, storage)
        if not keys:
            return False

        triples = [Triple(keyspace, storage, key) for key in keys]
        deleted = await self._partitions.delete_many(triples)
        self._logger.debug(
            f"Cleared {keyspace}/{storage}: {deleted} of {len(keys)} keys deleted"
        )
        return True

    async def for_each(self, keyspace: str, storage: str, callback: Callback) -> None:
        async with self._scan(keyspace, storage) as (pairs, view):
            async for key, value in pairs:
                await resolve(callback(value, key, view))

    async def filter(
        self,
        keyspace: str,
        storage: str,
        predicate: Callback,
    ) -> list[tuple[str, str]]:
        matches = []
        async with self._scan(keyspace, storage) as (pairs, view):
            async for key, value in pairs:
                if await resolve(predicate(value, key, view)):
                    matches.append((key, value))
        return matches

    async def map(self, keyspace: str, storage: str, callback: Callback) -> list[Any]:
        results = []
        async with self._scan(keyspace, storage) as (pairs, view):
            async for key, value in pairs:
                results.append(await resolve(callback(value, key, view)))
        return results

    async def find(self, keyspace: str, storage: str, predicate: Callback) -> str | None:
        async with self._scan(keyspace, storage) as (pairs, view):
            async for key, value in pairs:
                if await resolve(predicate(value, key, view)):
                    return value
        return None

    async def count(self, keyspace: str, storage: str, predicate: Callback) -> int:
        total = 0
        async with self._scan(keyspace, storage) as (pairs, view):
            async for key, value in pairs:
                if await resolve(predicate(value, key, view)):
                    total += 1
        return total

    async def counts(
        self,
        keyspace: str,
        storage: str,
        predicates: Sequence[Callback],
    ) -> list[int]:
        """
        Count matches of several predicates over one enumeration and one
        fetch: every predicate sees exactly the same records and values.
        """
        totals = [0] * len(predicates)
        if not predicates:
            return totals

        async with self._scan(keyspace, storage) as (pairs, view):
            async for key, value in pairs:
                for i, predicate in enumerate(predicates):
                    if await resolve(predicate(value, key, view)):
                        totals[i] += 1
        return totals

    async def sweep(self, keyspace: str, storage: str, predicate: Callback) -> None:
        doomed = []
        async with self._scan(keyspace, storage) as (pairs, view):
            async for key, value in pairs:
                if await resolve(predicate(value, key, view)):
                    doomed.append(Triple(keyspace, storage, key))

        if not doomed:
            return

        deleted = await self._partitions.delete_many(doomed)
        self._logger.debug(
            f"Swept {keyspace}/{storage}: {deleted} of {len(doomed)} matches deleted"
        )

    @asynccontextmanager
    async def _scan(
        self,
        keyspace: str,
        storage: str,
    ) -> AsyncIterator[tuple[AsyncIterator[tuple[str, str]], ScopedView]]:
        view = ScopedView(self, keyspace, storage)
        try:
            async with aclosing(self._pairs(keyspace, storage)) as pairs:
                yield pairs, view
        finally:
            view.release()

    async def _pairs(self, keyspace: str, storage: str) -> AsyncIterator[tuple[str, str]]:
        keys = await self._partitions.enumerate_keys(keyspace, storage)
        if not keys:
            return

        mode = self._mode
        self._logger.debug(f"Scanning {len(keys)} keys of {keyspace}/{storage} ({mode})")

        async with aclosing(self._fetchers[mode].fetch(keyspace, storage, keys)) as fetched:
            async for pair in fetched:
                yield pair
