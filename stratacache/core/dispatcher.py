import argparse
import functools
from typing import Any, Awaitable, Protocol

from stratacache.core.ports.provider import CacheProvider


class CommandHandler(Protocol):
    def __call__(
        self,
        provider: CacheProvider,
        namespace: argparse.Namespace,
    ) -> Awaitable[dict[str, Any]]:
        ...


class CommandDispatcher:
    def __init__(self) -> None:
        self._commands: dict[str, CommandHandler] = {}

    @property
    def commands(self) -> list[str]:
        return list(self._commands)

    async def dispatch(
        self,
        name: str,
        provider: CacheProvider,
        namespace: argparse.Namespace,
    ) -> dict[str, Any]:
        command = self._commands.get(name)
        if command is None:
            raise RuntimeError(f"Unknown '{name}' command")
        return await command(provider, namespace)

    def command(self, name: str):
        def decorator(func: CommandHandler):

            @functools.wraps(func)
            async def wrapper(
                provider: CacheProvider,
                namespace: argparse.Namespace,
            ) -> dict[str, Any]:
                return await func(provider, namespace)

            self._commands[name] = wrapper

            return wrapper

        return decorator
