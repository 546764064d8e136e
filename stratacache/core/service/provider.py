import logging
from typing import Any, Self, Sequence

from stratacache.core.errors import StoreConnectionError
from stratacache.core.models.namespace import Triple
from stratacache.core.models.provider import (
    Capabilities,
    Compatibility,
    KeyLayout,
    PerformanceMode,
)
from stratacache.core.ports.provider import Callback
from stratacache.core.ports.store import KeyValueStore
from stratacache.core.query.engine import QueryEngine
from stratacache.core.storage.codec import KeyCodec, create_codec
from stratacache.core.storage.partition import PartitionStore, create_partition_store


class StoreCacheProvider:
    """
    CacheProvider backed by a remote KeyValueStore.

    The provider owns the store handle and nothing else: it holds no local
    copy of any record. It starts disconnected; `init()` connects it and
    every other operation refuses to run before that. There is no
    reconnection logic here, the store client is in charge of it.

    The key layout is fixed at construction. The performance mode can be
    changed at any time and applies to the scans started afterwards.
    """
    capabilities = Capabilities(
        compatible=Compatibility.text,
        shared_cache=True,
    )

    def __init__(
        self,
        store: KeyValueStore,
        layout: KeyLayout = KeyLayout.hash,
        prefix: str | None = None,
        performance_mode: PerformanceMode = PerformanceMode.fast,
    ) -> None:
        self._store = store
        self._codec: KeyCodec = create_codec(KeyLayout(layout), prefix)
        self._partitions: PartitionStore = create_partition_store(store, self._codec)
        self._engine = QueryEngine(self._partitions, performance_mode)
        self._layout = KeyLayout(layout)
        self._connected = False
        self._logger = logging.getLogger("core.service.provider")

    @property
    def compatible(self) -> Compatibility:
        return self.capabilities.compatible

    @property
    def shared_cache(self) -> bool:
        return self.capabilities.shared_cache

    @property
    def layout(self) -> KeyLayout:
        return self._layout

    @property
    def prefix(self) -> str | None:
        return self._codec.prefix

    @property
    def codec(self) -> KeyCodec:
        return self._codec

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def performance_mode(self) -> PerformanceMode:
        return self._engine.mode

    @performance_mode.setter
    def performance_mode(self, mode: PerformanceMode) -> None:
        self._engine.mode = mode
        self._logger.debug(f"Performance mode set to {self._engine.mode}")

    async def init(self) -> None:
        await self._store.connect()
        self._connected = True
        self._logger.info(
            f"Connected ({self._layout} layout, prefix={self.prefix!r}, "
            f"mode={self.performance_mode})"
        )

    async def close(self) -> None:
        self._connected = False
        await self._store.close()

    async def get(self, keyspace: str, storage: str, key: str) -> str | None:
        self._ensure_connected()
        return await self._partitions.get(Triple(keyspace, storage, key))

    async def set(self, keyspace: str, storage: str, key: str, value: str) -> Self:
        self._ensure_connected()
        await self._partitions.set(Triple(keyspace, storage, key), value)
        return self

    async def delete(
        self,
        keyspace: str,
        storage: str,
        key: str | Sequence[str],
    ) -> bool:
        self._ensure_connected()
        if isinstance(key, str):
            return await self._partitions.delete_one(Triple(keyspace, storage, key))

        triples = [Triple(keyspace, storage, k) for k in key]
        return bool(await self._partitions.delete_many(triples))

    async def has(self, keyspace: str, storage: str, key: str) -> bool:
        self._ensure_connected()
        return await self._partitions.exists(Triple(keyspace, storage, key))

    async def size(self, keyspace: str, storage: str) -> int:
        self._ensure_connected()
        return await self._engine.size(keyspace, storage)

    async def clear(self, keyspace: str, storage: str) -> bool:
        self._ensure_connected()
        return await self._engine.clear(keyspace, storage)

    async def keys(self, keyspace: str, storage: str) -> list[str]:
        self._ensure_connected()
        return await self._engine.keys(keyspace, storage)

    async def values(self, keyspace: str, storage: str) -> list[str]:
        self._ensure_connected()
        return await self._engine.values(keyspace, storage)

    async def entries(self, keyspace: str, storage: str) -> list[tuple[str, str]]:
        self._ensure_connected()
        return await self._engine.entries(keyspace, storage)

    async def for_each(self, keyspace: str, storage: str, callback: Callback) -> None:
        self._ensure_connected()
        await self._engine.for_each(keyspace, storage, callback)

    async def filter(
        self,
        keyspace: str,
        storage: str,
        predicate: Callback,
    ) -> list[tuple[str, str]]:
        self._ensure_connected()
        return await self._engine.filter(keyspace, storage, predicate)

    async def map(self, keyspace: str, storage: str, callback: Callback) -> list[Any]:
        self._ensure_connected()
        return await self._engine.map(keyspace, storage, callback)

    async def find(self, keyspace: str, storage: str, predicate: Callback) -> str | None:
        self._ensure_connected()
        return await self._engine.find(keyspace, storage, predicate)

    async def count(self, keyspace: str, storage: str, predicate: Callback) -> int:
        self._ensure_connected()
        return await self._engine.count(keyspace, storage, predicate)

    async def counts(
        self,
        keyspace: str,
        storage: str,
        predicates: Sequence[Callback],
    ) -> list[int]:
        self._ensure_connected()
        return await self._engine.counts(keyspace, storage, predicates)

    async def sweep(self, keyspace: str, storage: str, predicate: Callback) -> None:
        self._ensure_connected()
        await self._engine.sweep(keyspace, storage, predicate)

    def _ensure_connected(self) -> None:
        if not self._connected:
            raise StoreConnectionError(
                "Cache provider is not connected, await init() first"
            )
