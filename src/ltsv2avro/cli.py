"""Command line entrypoint.

Reads LTSV lines from a file or stdin and writes an Avro container file to a
file or stdout:

    ltsv2avro access.ltsv -o access.avro
    cat access.ltsv | ENV_SCHEMA_FILENAME=log.avsc ltsv2avro > access.avro
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import signal
import sys
from collections.abc import Sequence
from contextlib import ExitStack
from pathlib import Path

from ltsv2avro.core.config import Config, load_config
from ltsv2avro.core.errors import ConfigError, Ltsv2AvroError, PipelineCancelled
from ltsv2avro.core.schema import parse_schema
from ltsv2avro.core.service import convert_file, load_schema

LOGGER = logging.getLogger(__name__)

_CODECS = ("null", "none", "deflate", "snappy", "zstandard", "bzip2", "xz")


def _configure_logging() -> None:
    """Configure logging on stderr; stdout may carry the Avro output."""
    level_name = os.getenv("LTSV2AVRO_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _positive_int(s: str) -> int:
    try:
        value = int(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"not an integer: {s!r}") from e
    if value < 1:
        raise argparse.ArgumentTypeError("must be >= 1")
    return value


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Convert LTSV log lines into an Avro container file.")
    p.add_argument("input", nargs="?", default="-", help="LTSV input file (.gz supported); '-' for stdin")
    p.add_argument("-o", "--output", default="-", help="Avro output file; '-' for stdout")
    p.add_argument("--schema", default=None, help="Avro schema file (overrides ENV_SCHEMA_FILENAME)")
    p.add_argument("--codec", choices=_CODECS, default=None, help="Block compression codec")
    p.add_argument("--block-length", type=_positive_int, default=None, help="Records per block")
    p.add_argument(
        "--no-flush-per-record",
        dest="flush_per_record",
        action="store_false",
        help="Flush every --block-length records instead of after each record",
    )
    p.set_defaults(flush_per_record=True)
    return p


def _apply_args(cfg: Config, args: argparse.Namespace) -> Config:
    """Return the configuration with command line overrides applied."""
    encode: dict[str, object] = {"flush_per_record": args.flush_per_record}
    if args.codec is not None:
        encode["codec"] = "null" if args.codec == "none" else args.codec
    if args.block_length is not None:
        encode["block_length"] = args.block_length

    update: dict[str, object] = {"encode": cfg.encode.model_copy(update=encode)}
    if args.schema is not None:
        update["schema_path"] = Path(args.schema)
    return cfg.model_copy(update=update)


def _install_signal_handlers(cancel: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, cancel.set)
        except (NotImplementedError, RuntimeError):
            LOGGER.debug("Signal handler for %s not available", sig)


async def run(args: argparse.Namespace, cfg: Config) -> int:
    """Run one conversion and return the process exit code."""
    cancel = asyncio.Event()
    _install_signal_handlers(cancel)

    source = None if args.input == "-" else Path(args.input)
    if source is not None and not source.is_file():
        LOGGER.error("Input file not found: %s", source)
        return 2

    try:
        # Parse up front so that schema errors are reported before any output.
        schema = parse_schema(await load_schema(cfg))
    except ConfigError as e:
        LOGGER.error("%s", e)
        return 2

    with ExitStack() as stack:
        if args.output == "-":
            fo = sys.stdout.buffer
        else:
            fo = stack.enter_context(open(args.output, "wb"))

        try:
            count = await convert_file(source, fo, config=cfg, cancel=cancel, schema=schema)
        except PipelineCancelled as e:
            LOGGER.error("%s", e)
            return 1
        except (Ltsv2AvroError, OSError, ValueError, TypeError) as e:
            LOGGER.error("Conversion failed: %s", e)
            return 1

    LOGGER.info("Converted %s records", count)
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    _configure_logging()
    args = _build_parser().parse_args(argv)

    try:
        cfg = _apply_args(load_config(), args)
    except ConfigError as e:
        LOGGER.error("%s", e)
        raise SystemExit(2)

    raise SystemExit(asyncio.run(run(args, cfg)))


if __name__ == "__main__":
    main()
