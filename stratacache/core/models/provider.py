from dataclasses import dataclass
from enum import StrEnum


class PerformanceMode(StrEnum):
    """
    Trade-off between round-trips and memory for scan operations.
    Single record operations are never affected.
    """
    fast = "fast"       # one batched multi-get per scan
    saving = "saving"   # one get per record, awaited one at a time


class KeyLayout(StrEnum):
    """
    How a (keyspace, storage, key) triple is folded into the flat key
    space of the store.
    """
    hash = "hash"   # keyspace:storage is a hash, key is a field of it
    flat = "flat"   # keyspace:storage:key is a plain key


class ConnectionType(StrEnum):
    standalone = "standalone"
    cluster = "cluster"


class Compatibility(StrEnum):
    """
    Value encoding a provider round-trips faithfully.
    """
    classes = "classes"
    json = "json"
    text = "text"
    buffer = "buffer"


@dataclass(frozen=True)
class Capabilities:
    """
    Static description of what a cache provider type offers to its host.
    """
    compatible: Compatibility
    """
    The richest value encoding the provider stores without loss. The host
    is responsible for serializing anything richer before handing it over.
    """

    shared_cache: bool
    """
    True when the cached state lives outside the process and is therefore
    visible to every process pointed at the same store.
    """
