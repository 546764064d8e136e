import inspect
import logging
from typing import Any


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)-8s [%(name)s:%(funcName)s] : %(message)s',
    )


async def resolve(result: Any) -> Any:
    """
    Await `result` when a callback returned an awaitable, so plain and
    coroutine callbacks can be mixed freely.
    """
    if inspect.isawaitable(result):
        return await result
    return result
