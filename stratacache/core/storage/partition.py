from typing import Protocol, Sequence

from stratacache.core.models.namespace import FlatKey, Triple
from stratacache.core.ports.store import KeyValueStore
from stratacache.core.storage.codec import FlatKeyCodec, HashKeyCodec, KeyCodec


class PartitionStore(Protocol):
    """
    Primitive record operations addressed by namespace triples.

    A partition is the set of records sharing a (keyspace, storage) pair.
    Implementations are thin pass-throughs to a KeyValueStore through a
    KeyCodec: they do not cache, retry, or hide store failures, and they
    give no atomicity across records.
    """

    @property
    def codec(self) -> KeyCodec:
        """The codec used to address records on the store."""

    async def get(self, triple: Triple) -> str | None:
        """Return the record value or None when absent."""

    async def set(self, triple: Triple, value: str) -> None:
        """Create or replace the record."""

    async def delete_one(self, triple: Triple) -> bool:
        """Remove the record and tell whether it existed."""

    async def delete_many(self, triples: Sequence[Triple]) -> int:
        """
        Remove several records in as few requests as the layout allows and
        return how many existed. An empty sequence costs no round-trip.
        """

    async def exists(self, triple: Triple) -> bool:
        """Tell whether the record exists."""

    async def enumerate_keys(self, keyspace: str, storage: str) -> list[str]:
        """
        Return the record keys of a partition, in store-defined order.
        Remote keys that do not decode to this partition are skipped.
        """

    async def multi_get(
        self,
        keyspace: str,
        storage: str,
        keys: Sequence[str],
    ) -> list[str | None]:
        """
        Fetch several records of one partition in one request, position by
        position, with None for absent records.
        """


class HashPartitionStore:
    """
    Two-level partition store: every partition is one hash on the store,
    so enumeration, batched reads and batched deletes are each a single
    hash command on a single remote key.
    """
    def __init__(self, store: KeyValueStore, codec: HashKeyCodec) -> None:
        self._store = store
        self._codec = codec

    @property
    def codec(self) -> KeyCodec:
        return self._codec

    async def get(self, triple: Triple) -> str | None:
        flat = self._encode(triple)
        return await self._store.hget(flat.name, flat.field)

    async def set(self, triple: Triple, value: str) -> None:
        flat = self._encode(triple)
        await self._store.hset(flat.name, flat.field, value)

    async def delete_one(self, triple: Triple) -> bool:
        flat = self._encode(triple)
        return bool(await self._store.hdel(flat.name, flat.field))

    async def delete_many(self, triples: Sequence[Triple]) -> int:
        # one HDEL per hash, preserving the order partitions first appear in
        grouped: dict[str, list[str]] = {}
        for triple in triples:
            flat = self._encode(triple)
            grouped.setdefault(flat.name, []).append(flat.field)

        deleted = 0
        for name, fields in grouped.items():
            deleted += await self._store.hdel(name, *fields)
        return deleted

    async def exists(self, triple: Triple) -> bool:
        flat = self._encode(triple)
        return bool(await self._store.hexists(flat.name, flat.field))

    async def enumerate_keys(self, keyspace: str, storage: str) -> list[str]:
        pattern = self._codec.encode(keyspace, storage)
        fields = await self._store.hkeys(pattern.name)

        keys = []
        for field in fields:
            triple = self._codec.parse(FlatKey(pattern.name, field))
            if triple is None:
                continue    # written by someone else
            keys.append(triple.key)
        return keys

    async def multi_get(
        self,
        keyspace: str,
        storage: str,
        keys: Sequence[str],
    ) -> list[str | None]:
        if not keys:
            return []

        pattern = self._codec.encode(keyspace, storage)
        fields = [self._codec.encode(keyspace, storage, key).field for key in keys]
        return await self._store.hmget(pattern.name, fields)

    def _encode(self, triple: Triple) -> FlatKey:
        return self._codec.encode(triple.keyspace, triple.storage, triple.key)


class FlatPartitionStore:
    """
    Three-level partition store: every record is its own remote key and a
    partition only exists as the set of keys matching its pattern.
    """
    def __init__(self, store: KeyValueStore, codec: FlatKeyCodec) -> None:
        self._store = store
        self._codec = codec

    @property
    def codec(self) -> KeyCodec:
        return self._codec

    async def get(self, triple: Triple) -> str | None:
        return await self._store.get(self._name(triple))

    async def set(self, triple: Triple, value: str) -> None:
        await self._store.set(self._name(triple), value)

    async def delete_one(self, triple: Triple) -> bool:
        return bool(await self._store.delete(self._name(triple)))

    async def delete_many(self, triples: Sequence[Triple]) -> int:
        if not triples:
            return 0

        names = [self._name(triple) for triple in triples]
        return await self._store.delete(*names)

    async def exists(self, triple: Triple) -> bool:
        return bool(await self._store.exists(self._name(triple)))

    async def enumerate_keys(self, keyspace: str, storage: str) -> list[str]:
        pattern = self._codec.encode(keyspace, storage)
        names = await self._store.keys(pattern.name)

        keys = []
        for name in names:
            triple = self._codec.parse(FlatKey(name))
            if triple is None:
                continue    # matches the pattern but not the layout
            if (triple.keyspace, triple.storage) != (keyspace, storage):
                continue
            keys.append(triple.key)
        return keys

    async def multi_get(
        self,
        keyspace: str,
        storage: str,
        keys: Sequence[str],
    ) -> list[str | None]:
        if not keys:
            return []

        names = [self._codec.encode(keyspace, storage, key).name for key in keys]
        return await self._store.mget(names)

    def _name(self, triple: Triple) -> str:
        return self._codec.encode(triple.keyspace, triple.storage, triple.key).name


def create_partition_store(store: KeyValueStore, codec: KeyCodec) -> PartitionStore:
    if isinstance(codec, HashKeyCodec):
        return HashPartitionStore(store, codec)
    if isinstance(codec, FlatKeyCodec):
        return FlatPartitionStore(store, codec)
    raise ValueError(f"No partition store for codec {type(codec).__name__}")
