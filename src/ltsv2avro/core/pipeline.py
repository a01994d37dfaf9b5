"""Lazy, pull-based composition of the conversion stages.

lines -> rows -> records. Each stage reuses its scratch buffers, so a yielded
row or record is only valid until the next one is requested. Copy it
(`copy.deepcopy`) if it has to outlive that.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

from .classify import RecordClassifier
from .errors import PipelineCancelled
from .formats import LtsvTokenizer
from .models import LabeledField, Record

logger = logging.getLogger(__name__)


def _check_cancelled(cancel: asyncio.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise PipelineCancelled()


async def iter_rows(
    lines: AsyncIterable[str],
    tokenizer: LtsvTokenizer | None = None,
) -> AsyncIterator[list[LabeledField]]:
    """Yield tokenized rows, one per input line.

    Errors from the line source and tokenization errors end the stream.
    """
    tokenizer = tokenizer or LtsvTokenizer()
    buf: list[LabeledField] = []

    async for line in lines:
        yield tokenizer.tokenize(line, buf)


async def iter_records(
    rows: AsyncIterable[list[LabeledField]],
    classifier: RecordClassifier | None = None,
    *,
    cancel: asyncio.Event | None = None,
) -> AsyncIterator[Record]:
    """Yield classified records, one per row.

    The cancellation event is checked before every element. Once it is set,
    `PipelineCancelled` is raised, also in place of an error that surfaced
    while it was set.
    """
    classifier = classifier or RecordClassifier()
    buf: Record = {}
    attrs: dict[str, Any] = {}

    try:
        _check_cancelled(cancel)
        async for row in rows:
            _check_cancelled(cancel)
            buf.clear()
            attrs.clear()
            try:
                classifier.classify(row, buf, attrs)
            except Exception:
                logger.error("Rejected row: %r", row)
                raise
            yield buf
            _check_cancelled(cancel)
    except PipelineCancelled:
        raise
    except Exception as exc:
        if cancel is not None and cancel.is_set():
            raise PipelineCancelled() from exc
        raise


async def iter_ltsv_records(
    lines: AsyncIterable[str],
    *,
    tokenizer: LtsvTokenizer | None = None,
    classifier: RecordClassifier | None = None,
    cancel: asyncio.Event | None = None,
) -> AsyncIterator[Record]:
    """Chain `iter_rows` and `iter_records` over raw lines."""
    rows = iter_rows(lines, tokenizer)
    try:
        async for record in iter_records(rows, classifier, cancel=cancel):
            yield record
    finally:
        await rows.aclose()
