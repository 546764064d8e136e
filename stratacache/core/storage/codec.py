from abc import ABC, abstractmethod
from typing import Protocol

from stratacache.core.errors import CodecError
from stratacache.core.models.namespace import FlatKey, Triple
from stratacache.core.models.provider import KeyLayout


SEPARATOR = ":"
WILDCARD = FlatKey.WILDCARD
GLOB_CHARS = frozenset("*?[]\\")


class KeyCodec(Protocol):
    """
    Deterministic, reversible mapping between namespace triples and the
    flat keys of the store.

    For every valid triple, decode(encode(ks, st, key)) == Triple(ks, st, key).
    Omitting `key` yields a pattern matching every key of the storage,
    omitting `storage` as well yields a pattern matching the whole keyspace.
    """

    @property
    def prefix(self) -> str | None:
        """Global prefix prepended to every remote key, if any."""

    def encode(
        self,
        keyspace: str,
        storage: str | None = None,
        key: str | None = None,
    ) -> FlatKey:
        """
        Encode a triple, or a pattern when trailing components are omitted.
        Raises CodecError when a component cannot be encoded.
        """

    def decode(self, flat: FlatKey) -> Triple:
        """
        Decode a flat key produced by `encode`. Raises CodecError when the
        flat key was not produced by this codec.
        """

    def parse(self, flat: FlatKey) -> Triple | None:
        """
        Same as `decode`, but returns None for foreign or malformed keys.
        """


class _SeparatedCodec(ABC):
    def __init__(self, prefix: str | None = None) -> None:
        if prefix is not None and GLOB_CHARS.intersection(prefix):
            raise CodecError(f"Prefix {prefix!r} contains a glob character")

        self._prefix = prefix or None
        self._head = f"{prefix}{SEPARATOR}" if prefix else ""

    @property
    def prefix(self) -> str | None:
        return self._prefix

    def parse(self, flat: FlatKey) -> Triple | None:
        try:
            return self.decode(flat)
        except CodecError:
            return None

    @abstractmethod
    def decode(self, flat: FlatKey) -> Triple:
        ...

    @staticmethod
    def check(component: str, role: str) -> str:
        if not isinstance(component, str):
            raise CodecError(
                f"{role} must be a string, got {type(component).__name__}"
            )
        if SEPARATOR in component:
            raise CodecError(
                f"{role} {component!r} contains the separator {SEPARATOR!r}"
            )
        if GLOB_CHARS.intersection(component):
            raise CodecError(f"{role} {component!r} contains a glob character")
        return component

    def _join(self, *parts: str) -> str:
        return self._head + SEPARATOR.join(parts)

    def _split(self, name: str, count: int) -> list[str]:
        if not name.startswith(self._head):
            raise CodecError(f"Key {name!r} does not start with prefix {self._head!r}")

        parts = name[len(self._head):].split(SEPARATOR)
        if len(parts) != count:
            raise CodecError(
                f"Key {name!r} has {len(parts)} segments, expected {count}"
            )

        for part in parts:
            if GLOB_CHARS.intersection(part):
                raise CodecError(f"Key {name!r} is a pattern, not a key")

        return parts


class HashKeyCodec(_SeparatedCodec):
    """
    Two-level layout: ``[prefix:]keyspace:storage`` names a hash on the
    store and the record key is a field of that hash. A whole storage is a
    single remote key, which keeps it on one cluster slot.
    """
    layout = KeyLayout.hash

    def encode(
        self,
        keyspace: str,
        storage: str | None = None,
        key: str | None = None,
    ) -> FlatKey:
        self.check(keyspace, "keyspace")

        if storage is None:
            if key is not None:
                raise CodecError("A key cannot be encoded without its storage")
            return FlatKey(self._join(keyspace, WILDCARD), WILDCARD)

        self.check(storage, "storage")
        if key is None:
            return FlatKey(self._join(keyspace, storage), WILDCARD)

        return FlatKey(self._join(keyspace, storage), self.check(key, "key"))

    def decode(self, flat: FlatKey) -> Triple:
        if flat.field is None:
            raise CodecError(f"Key {flat.name!r} has no field")
        if GLOB_CHARS.intersection(flat.field):
            raise CodecError(f"Field {flat.field!r} is a pattern, not a key")
        if SEPARATOR in flat.field:
            raise CodecError(f"Field {flat.field!r} contains the separator")

        keyspace, storage = self._split(flat.name, 2)
        return Triple(keyspace, storage, flat.field)


class FlatKeyCodec(_SeparatedCodec):
    """
    Three-level layout: ``[prefix:]keyspace:storage:key`` is a plain remote
    key. Enumerating a storage requires a pattern scan of the key space.
    """
    layout = KeyLayout.flat

    def encode(
        self,
        keyspace: str,
        storage: str | None = None,
        key: str | None = None,
    ) -> FlatKey:
        self.check(keyspace, "keyspace")

        if storage is None:
            if key is not None:
                raise CodecError("A key cannot be encoded without its storage")
            return FlatKey(self._join(keyspace, WILDCARD))

        self.check(storage, "storage")
        if key is None:
            return FlatKey(self._join(keyspace, storage, WILDCARD))

        return FlatKey(self._join(keyspace, storage, self.check(key, "key")))

    def decode(self, flat: FlatKey) -> Triple:
        if flat.field is not None:
            raise CodecError(f"Key {flat.name!r} carries a field")

        keyspace, storage, key = self._split(flat.name, 3)
        return Triple(keyspace, storage, key)


def create_codec(layout: KeyLayout, prefix: str | None = None) -> KeyCodec:
    if layout == KeyLayout.hash:
        return HashKeyCodec(prefix)
    if layout == KeyLayout.flat:
        return FlatKeyCodec(prefix)
    raise ValueError(f"Unknown key layout: {layout}")
