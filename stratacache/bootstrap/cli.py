import argparse
import asyncio
import logging
import os
import sys
from typing import Any, Sequence

from stratacache.bootstrap.commands import dispatcher
from stratacache.bootstrap.config.loader import CONFIG_ENV
from stratacache.bootstrap.deps import get_provider
from stratacache.core.errors import CacheError
from stratacache.core.helpers.utils import setup_logging
from stratacache.core.service.provider import StoreCacheProvider
from stratacache.infra.format_renderer import JsonRenderer, YamlRenderer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stratactl",
        description=(
            "Inspect and edit a stratacache partition.\n\n"
            "Records are addressed by KEYSPACE and STORAGE, exactly as the cache\n"
            "provider of the host application addresses them."
        ),
        formatter_class=argparse.RawTextHelpFormatter
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        help=f"Path to a stratacache configuration file (default: ${CONFIG_ENV} or ./strata.yaml)"
    )

    parser.add_argument(
        "-l", "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity (default: WARNING)."
    )

    parser.add_argument(
        "-o", "--output",
        type=str,
        default="json",
        choices=["json", "yaml"],
        help="Output format (default: json)."
    )

    parser.add_argument("keyspace")
    parser.add_argument("storage")

    sub = parser.add_subparsers(required=True, dest="command")

    get = sub.add_parser("get", help="Print the value of a record.")
    get.add_argument("key")

    set_ = sub.add_parser("set", help="Create or replace a record.")
    set_.add_argument("key")
    set_.add_argument("value")

    delete = sub.add_parser("delete", help="Remove one or several records.")
    delete.add_argument("keys", nargs="+")

    has = sub.add_parser("has", help="Tell whether a record exists.")
    has.add_argument("key")

    grep = sub.add_parser("grep", help="Print the records whose value contains TEXT.")
    grep.add_argument("text")

    sub.add_parser("size", help="Print the number of records.")
    sub.add_parser("keys", help="Print every key.")
    sub.add_parser("values", help="Print every value.")
    sub.add_parser("entries", help="Print every record.")
    sub.add_parser("clear", help="Remove every record.")

    return parser


async def run(provider: StoreCacheProvider, namespace: argparse.Namespace) -> dict[str, Any]:
    try:
        await provider.init()
        return await dispatcher.dispatch(namespace.command, provider, namespace)
    finally:
        await provider.close()


def main(argv: Sequence[str] | None = None) -> int:
    namespace = build_parser().parse_args(argv)
    setup_logging(namespace.log_level)

    if namespace.config:
        os.environ[CONFIG_ENV] = namespace.config

    renderer = YamlRenderer() if namespace.output == "yaml" else JsonRenderer()
    provider = get_provider()

    try:
        result = asyncio.run(run(provider, namespace))
    except CacheError as ex:
        logging.getLogger("stratactl").debug("Command failed", exc_info=ex)
        print(f"error: {ex}", file=sys.stderr)
        return 1

    print(renderer.render(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
