from typing import Any, Awaitable, Callable, Protocol, Self, Sequence

from stratacache.core.models.provider import Capabilities, Compatibility, PerformanceMode


class PartitionView(Protocol):
    """
    Read-only access to the cache handed to scan callbacks.

    A view is only valid for the duration of the scan that created it;
    using it afterwards raises RuntimeError.
    """

    @property
    def keyspace(self) -> str:
        """Keyspace of the scan this view belongs to."""

    @property
    def storage(self) -> str:
        """Storage of the scan this view belongs to."""

    async def get(self, keyspace: str, storage: str, key: str) -> str | None: ...

    async def has(self, keyspace: str, storage: str, key: str) -> bool: ...

    async def size(self, keyspace: str, storage: str) -> int: ...

    async def keys(self, keyspace: str, storage: str) -> list[str]: ...

    async def values(self, keyspace: str, storage: str) -> list[str]: ...

    async def entries(self, keyspace: str, storage: str) -> list[tuple[str, str]]: ...


Callback = Callable[[str, str, PartitionView], Any | Awaitable[Any]]
"""
Scan callback invoked as ``callback(value, key, view)``. It may be a plain
function or a coroutine function. Predicates are tested for truthiness.
"""


class CacheProvider(Protocol):
    """
    Capability contract a cache provider offers to its host: a mapping of
    keyspace -> storage -> key -> value.

    Values are opaque text. The provider keeps nothing locally; every call
    goes to the backing store. No operation is atomic across keys, and a
    scan observes each record at the moment its value is read, which may
    differ from the moment the partition was enumerated.
    """

    capabilities: Capabilities

    @property
    def compatible(self) -> Compatibility:
        """Value encoding the provider round-trips faithfully."""

    @property
    def shared_cache(self) -> bool:
        """True when state is visible across processes."""

    @property
    def performance_mode(self) -> PerformanceMode:
        """Current fetch strategy of scan operations. Writable."""

    async def init(self) -> None:
        """
        Connect to the backing store. Must be awaited before any other
        operation and raises StoreConnectionError when the store cannot be
        reached.
        """

    async def get(self, keyspace: str, storage: str, key: str) -> str | None:
        """Return the value of a record, or None when it does not exist."""

    async def set(self, keyspace: str, storage: str, key: str, value: str) -> Self:
        """Create or replace a record and return the provider."""

    async def delete(
        self,
        keyspace: str,
        storage: str,
        key: str | Sequence[str],
    ) -> bool:
        """Remove one or several records; True if at least one existed."""

    async def has(self, keyspace: str, storage: str, key: str) -> bool:
        """Tell whether a record exists."""

    async def size(self, keyspace: str, storage: str) -> int:
        """Number of records in a partition."""

    async def clear(self, keyspace: str, storage: str) -> bool:
        """Remove every record of a partition; True if there was any."""

    async def keys(self, keyspace: str, storage: str) -> list[str]:
        """Keys of a partition, in store-defined order."""

    async def values(self, keyspace: str, storage: str) -> list[str]:
        """Values of a partition, fetched in one batched request."""

    async def entries(self, keyspace: str, storage: str) -> list[tuple[str, str]]:
        """(key, value) pairs of a partition, fetched in one batched request."""

    async def for_each(self, keyspace: str, storage: str, callback: Callback) -> None:
        """Invoke `callback` for every record, one at a time."""

    async def filter(
        self, keyspace: str, storage: str, predicate: Callback
    ) -> list[tuple[str, str]]:
        """(key, value) pairs for which `predicate` holds."""

    async def map(self, keyspace: str, storage: str, callback: Callback) -> list[Any]:
        """One projection per record."""

    async def find(self, keyspace: str, storage: str, predicate: Callback) -> str | None:
        """First value for which `predicate` holds; stops scanning there."""

    async def count(self, keyspace: str, storage: str, predicate: Callback) -> int:
        """Number of records for which `predicate` holds."""

    async def counts(
        self, keyspace: str, storage: str, predicates: Sequence[Callback]
    ) -> list[int]:
        """One match count per predicate, in the order of `predicates`."""

    async def sweep(self, keyspace: str, storage: str, predicate: Callback) -> None:
        """Remove every record for which `predicate` holds."""
