class CacheError(Exception):
    """Root of every error raised by stratacache."""


class CodecError(CacheError, ValueError):
    """
    A namespace component cannot be encoded unambiguously, or a flat key
    does not decode back to a (keyspace, storage, key) triple.
    """


class StoreError(CacheError, RuntimeError):
    """
    The key-value store rejected or failed a request. The original client
    exception is always available as ``__cause__``.
    """


class StoreConnectionError(StoreError, ConnectionError):
    """
    The store is unreachable, or the provider was used before ``init()``.
    """
