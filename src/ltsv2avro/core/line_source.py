"""Line source: read text lines from a file, a gzip file or stdin."""

from __future__ import annotations

import gzip
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiofiles
from aiofiles.threadpool import wrap

from .config import BLOB_SIZE_MAX_DEFAULT
from .errors import LineTooLong

STDIN_PATH = "-"


def _strip_newline(line: str) -> str:
    """Drop one trailing LF, then one trailing CR."""
    line = line.removesuffix("\n")
    return line.removesuffix("\r")


@asynccontextmanager
async def _open_text(path: Path | None, *, encoding: str, decode_errors: str):
    """Open an input for async text reading (stdin, plain or gzip)."""
    if path is None:
        stdin = open(
            sys.stdin.fileno(),
            mode="r",
            encoding=encoding,
            errors=decode_errors,
            newline="\n",
            closefd=False,
        )
        af = wrap(stdin)
        try:
            yield af
        finally:
            await af.close()
    elif path.suffix.lower() == ".gz":
        f = gzip.open(path, mode="rt", encoding=encoding, errors=decode_errors, newline="\n")
        af = wrap(f)
        try:
            yield af
        finally:
            await af.close()
    else:
        async with aiofiles.open(path, encoding=encoding, errors=decode_errors, newline="\n") as f:
            yield f


async def iter_lines(
    source: str | Path | None = None,
    *,
    encoding: str = "utf-8",
    decode_errors: str = "strict",
    max_line_size: int = BLOB_SIZE_MAX_DEFAULT,
) -> AsyncIterator[str]:
    """Yield lines without their trailing newline.

    `None` or "-" reads standard input. Raises `LineTooLong` for a line longer
    than `max_line_size` characters; nothing is yielded after an error.
    """
    if max_line_size < 1:
        raise ValueError("max_line_size must be >= 1")

    path: Path | None = None
    if source is not None and str(source) != STDIN_PATH:
        path = Path(source)
        if not path.is_file():
            raise FileNotFoundError(f"Input file not found: {path}")

    async with _open_text(path, encoding=encoding, decode_errors=decode_errors) as f:
        line_no = 0
        async for line in f:
            line_no += 1
            line = _strip_newline(line)
            if len(line) > max_line_size:
                raise LineTooLong(line_no, len(line), max_line_size)
            yield line
