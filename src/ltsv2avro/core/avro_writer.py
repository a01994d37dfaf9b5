"""Avro object container file (OCF) writer."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable
from typing import Any, BinaryIO

from fastavro.write import Writer

from .config import EncodeConfig
from .errors import PipelineCancelled
from .models import Record
from .schema import parse_schema

logger = logging.getLogger(__name__)

SUPPORTED_CODECS = frozenset(("null", "deflate", "snappy", "zstandard"))


def fastavro_codec(codec: str) -> str:
    """Map a configured codec to the one actually used (bzip2/xz -> null)."""
    if codec in SUPPORTED_CODECS:
        return codec
    logger.warning("Codec %r is not supported, writing uncompressed blocks", codec)
    return "null"


async def write_records(
    records: AsyncIterable[Record],
    fo: BinaryIO,
    schema: str | dict[str, Any],
    cfg: EncodeConfig | None = None,
    *,
    cancel: asyncio.Event | None = None,
) -> int:
    """Encode records into `fo` and return how many were written.

    Each record is serialized before the next one is pulled, so the reused
    record buffers of the pipeline are safe to pass in directly. A record that
    fails to encode is logged and its error re-raised; it is never flushed.
    If `cancel` is set when the error surfaces, `PipelineCancelled` is raised
    from it instead, as in the record stage.
    """
    cfg = cfg or EncodeConfig()
    parsed = parse_schema(schema)
    writer = Writer(fo, parsed, codec=fastavro_codec(cfg.codec))

    count = 0
    pending = 0
    try:
        async for record in records:
            try:
                writer.write(record)
            except Exception:
                logger.error("Failed to encode record: %r", record)
                raise
            count += 1
            pending += 1

            if cfg.flush_per_record or pending >= cfg.block_length:
                writer.flush()
                pending = 0

        writer.flush()
    except PipelineCancelled:
        raise
    except Exception as exc:
        if cancel is not None and cancel.is_set():
            raise PipelineCancelled() from exc
        raise
    finally:
        fo.flush()

    logger.debug("Wrote %s records (codec=%s)", count, cfg.codec)
    return count
