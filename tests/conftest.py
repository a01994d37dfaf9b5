from __future__ import annotations

import io
from collections.abc import AsyncIterator, Callable, Iterable
from pathlib import Path
from typing import Any

import fastavro
import pytest

from ltsv2avro.core.config import (
    BLOB_SIZE_ENV_KEY,
    BLOCK_LENGTH_ENV_KEY,
    CODEC_ENV_KEY,
    LABEL_ENV_KEYS,
    SCHEMA_ENV_KEY,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    keys = [*LABEL_ENV_KEYS.values(), SCHEMA_ENV_KEY, CODEC_ENV_KEY, BLOCK_LENGTH_ENV_KEY, BLOB_SIZE_ENV_KEY]
    for key in keys:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def least_line() -> str:
    return "severity:info\tbody:hello, world\ttimestamp:2025-01-22T14:42:11.012345+09:00"


@pytest.fixture
def aiter_of() -> Callable[[Iterable[str]], AsyncIterator[str]]:
    async def _aiter(items: Iterable[str]) -> AsyncIterator[str]:
        for item in items:
            yield item

    return _aiter


@pytest.fixture
def read_avro() -> Callable[[bytes], list[dict[str, Any]]]:
    def _read(data: bytes) -> list[dict[str, Any]]:
        return list(fastavro.reader(io.BytesIO(data)))

    return _read


@pytest.fixture
def write_ltsv() -> Callable[[Path, list[str]], None]:
    def _write(path: Path, lines: list[str]) -> None:
        path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")

    return _write
