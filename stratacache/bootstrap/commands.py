import argparse
from typing import Any

from stratacache.core.dispatcher import CommandDispatcher
from stratacache.core.ports.provider import CacheProvider

dispatcher = CommandDispatcher()


def _partition(namespace: argparse.Namespace) -> dict[str, Any]:
    return {"keyspace": namespace.keyspace, "storage": namespace.storage}


@dispatcher.command("get")
async def get(provider: CacheProvider, namespace: argparse.Namespace) -> dict[str, Any]:
    value = await provider.get(namespace.keyspace, namespace.storage, namespace.key)
    return {**_partition(namespace), "key": namespace.key, "value": value}


@dispatcher.command("set")
async def set_(provider: CacheProvider, namespace: argparse.Namespace) -> dict[str, Any]:
    await provider.set(namespace.keyspace, namespace.storage, namespace.key, namespace.value)
    return {**_partition(namespace), "key": namespace.key}


@dispatcher.command("delete")
async def delete(provider: CacheProvider, namespace: argparse.Namespace) -> dict[str, Any]:
    keys = namespace.keys
    deleted = await provider.delete(
        namespace.keyspace,
        namespace.storage,
        keys[0] if len(keys) == 1 else keys,
    )
    return {**_partition(namespace), "keys": keys, "deleted": deleted}


@dispatcher.command("has")
async def has(provider: CacheProvider, namespace: argparse.Namespace) -> dict[str, Any]:
    exists = await provider.has(namespace.keyspace, namespace.storage, namespace.key)
    return {**_partition(namespace), "key": namespace.key, "exists": exists}


@dispatcher.command("size")
async def size(provider: CacheProvider, namespace: argparse.Namespace) -> dict[str, Any]:
    return {
        **_partition(namespace),
        "size": await provider.size(namespace.keyspace, namespace.storage),
    }


@dispatcher.command("keys")
async def keys(provider: CacheProvider, namespace: argparse.Namespace) -> dict[str, Any]:
    found = await provider.keys(namespace.keyspace, namespace.storage)
    return {**_partition(namespace), "keys": sorted(found)}


@dispatcher.command("values")
async def values(provider: CacheProvider, namespace: argparse.Namespace) -> dict[str, Any]:
    found = await provider.values(namespace.keyspace, namespace.storage)
    return {**_partition(namespace), "values": found}


@dispatcher.command("entries")
async def entries(provider: CacheProvider, namespace: argparse.Namespace) -> dict[str, Any]:
    found = await provider.entries(namespace.keyspace, namespace.storage)
    return {**_partition(namespace), "entries": dict(sorted(found))}


@dispatcher.command("grep")
async def grep(provider: CacheProvider, namespace: argparse.Namespace) -> dict[str, Any]:
    text = namespace.text
    found = await provider.filter(
        namespace.keyspace,
        namespace.storage,
        lambda value, key, view: text in value,
    )
    return {**_partition(namespace), "text": text, "entries": dict(sorted(found))}


@dispatcher.command("clear")
async def clear(provider: CacheProvider, namespace: argparse.Namespace) -> dict[str, Any]:
    cleared = await provider.clear(namespace.keyspace, namespace.storage)
    return {**_partition(namespace), "cleared": cleared}
