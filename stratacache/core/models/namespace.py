from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Triple:
    """
    Address of one record: a key inside a storage inside a keyspace.
    """
    keyspace: str
    storage: str
    key: str

    def __str__(self) -> str:
        return f"{self.keyspace}/{self.storage}/{self.key}"


@dataclass(frozen=True, slots=True)
class FlatKey:
    """
    What the store actually indexes by.

    ``name`` is the remote key. ``field`` is the secondary field inside the
    hash stored at ``name`` for the two-level layout, and None for the
    three-level layout where the whole triple is folded into ``name``.
    """
    name: str
    field: str | None = None

    WILDCARD = "*"

    @property
    def is_pattern(self) -> bool:
        return self.name.endswith(self.WILDCARD) or self.field == self.WILDCARD
