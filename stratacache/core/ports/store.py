from typing import Protocol, Sequence


class KeyValueStore(Protocol):
    """
    Minimal asynchronous interface to a remote key-value store with a flat
    key space of text keys and text values.

    Every method is atomic for a single key only. Nothing here offers
    atomicity across several keys, and callers must not assume that two
    consecutive calls observe the same state of the store.

    Failures are reported as StoreError (or StoreConnectionError when the
    store cannot be reached). Implementations must not retry.
    """

    async def connect(self) -> None:
        """
        Establish the connection and verify the store answers. Must raise
        StoreConnectionError rather than return when it does not.
        """

    async def close(self) -> None:
        """
        Release the connection. The instance must not be used afterwards.
        """

    async def get(self, name: str) -> str | None:
        """
        Return the value stored at `name`, or None if the key does not exist.
        """

    async def set(self, name: str, value: str) -> None:
        """
        Store `value` at `name`, replacing any previous value.
        """

    async def delete(self, *names: str) -> int:
        """
        Remove every given key in one request and return how many of them
        existed. Missing keys are ignored.
        """

    async def exists(self, name: str) -> bool:
        """
        Tell whether `name` holds a value.
        """

    async def keys(self, pattern: str) -> list[str]:
        """
        Return every key matching the glob-style `pattern`. The order is
        defined by the store and must not be relied upon.
        """

    async def mget(self, names: Sequence[str]) -> list[str | None]:
        """
        Fetch several keys in one request. The result corresponds position
        by position to `names`; a missing key yields None in its slot.
        """

    async def hget(self, name: str, field: str) -> str | None:
        """
        Return the value of `field` inside the hash stored at `name`.
        """

    async def hset(self, name: str, field: str, value: str) -> None:
        """
        Store `value` in `field` of the hash at `name`, creating the hash
        when needed.
        """

    async def hdel(self, name: str, *fields: str) -> int:
        """
        Remove fields from the hash at `name` and return how many existed.
        """

    async def hexists(self, name: str, field: str) -> bool:
        """
        Tell whether `field` exists inside the hash at `name`.
        """

    async def hkeys(self, name: str) -> list[str]:
        """
        Return every field name of the hash at `name`, empty when the hash
        does not exist.
        """

    async def hmget(self, name: str, fields: Sequence[str]) -> list[str | None]:
        """
        Fetch several fields of one hash in one request, positionally, with
        None for missing fields.
        """
