"""Conversion service.

This module is the main integration point: it wires the line source, the
LTSV pipeline and the Avro writer for one run.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable
from pathlib import Path
from typing import Any, BinaryIO

from .avro_writer import write_records
from .classify import RecordClassifier
from .config import Config
from .formats import LtsvTokenizer
from .line_source import iter_lines
from .pipeline import iter_ltsv_records
from .schema import default_record_schema, read_schema_text

logger = logging.getLogger(__name__)


def build_tokenizer(cfg: Config) -> LtsvTokenizer:
    return LtsvTokenizer(
        field_separator=cfg.ltsv.field_separator,
        pair_separator=cfg.ltsv.pair_separator,
    )


async def load_schema(cfg: Config) -> str | dict[str, Any]:
    """Return the configured schema text, or the default record schema."""
    if cfg.schema_path is None:
        logger.info("No schema file configured, using the default record schema")
        return default_record_schema(cfg.ltsv.labels)
    return await read_schema_text(cfg.schema_path, limit=cfg.schema_size_max)


async def convert(
    lines: AsyncIterable[str],
    fo: BinaryIO,
    *,
    schema: str | dict[str, Any],
    config: Config | None = None,
    cancel: asyncio.Event | None = None,
) -> int:
    """Convert LTSV lines into an Avro container written to `fo`.

    Returns the number of records written. The first error stops the run.
    """
    config = config or Config()
    records = iter_ltsv_records(
        lines,
        tokenizer=build_tokenizer(config),
        classifier=RecordClassifier.from_config(config.ltsv),
        cancel=cancel,
    )
    try:
        return await write_records(records, fo, schema, config.encode, cancel=cancel)
    finally:
        await records.aclose()


async def convert_file(
    source: str | Path | None,
    fo: BinaryIO,
    *,
    schema: str | dict[str, Any] | None = None,
    config: Config | None = None,
    cancel: asyncio.Event | None = None,
) -> int:
    """Read `source` (None or "-" for stdin) and convert it into `fo`.

    Without an explicit `schema`, the configured schema file (or the default
    record schema) is used.
    """
    config = config or Config()
    if schema is None:
        schema = await load_schema(config)
    lines = iter_lines(
        source,
        encoding=config.decode.encoding,
        decode_errors=config.decode.decode_errors,
        max_line_size=config.decode.max_line_size,
    )
    try:
        return await convert(lines, fo, schema=schema, config=config, cancel=cancel)
    finally:
        await lines.aclose()
