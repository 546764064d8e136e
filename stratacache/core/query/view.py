from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stratacache.core.query.engine import QueryEngine


class ScopedView:
    """
    PartitionView handed to the callbacks of a single scan.

    It only exposes reads and is released by the engine once the scan is
    over, so a callback cannot keep a handle on the cache beyond the call
    it was given to.
    """

    def __init__(self, engine: "QueryEngine", keyspace: str, storage: str) -> None:
        self._engine: "QueryEngine | None" = engine
        self._keyspace = keyspace
        self._storage = storage

    @property
    def keyspace(self) -> str:
        return self._keyspace

    @property
    def storage(self) -> str:
        return self._storage

    @property
    def released(self) -> bool:
        return self._engine is None

    def release(self) -> None:
        self._engine = None

    async def get(self, keyspace: str, storage: str, key: str) -> str | None:
        return await self._checked().get(keyspace, storage, key)

    async def has(self, keyspace: str, storage: str, key: str) -> bool:
        return await self._checked().has(keyspace, storage, key)

    async def size(self, keyspace: str, storage: str) -> int:
        return await self._checked().size(keyspace, storage)

    async def keys(self, keyspace: str, storage: str) -> list[str]:
        return await self._checked().keys(keyspace, storage)

    async def values(self, keyspace: str, storage: str) -> list[str]:
        return await self._checked().values(keyspace, storage)

    async def entries(self, keyspace: str, storage: str) -> list[tuple[str, str]]:
        return await self._checked().entries(keyspace, storage)

    def _checked(self) -> "QueryEngine":
        if self._engine is None:
            raise RuntimeError(
                f"View on {self._keyspace}/{self._storage} used after its scan ended"
            )
        return self._engine
