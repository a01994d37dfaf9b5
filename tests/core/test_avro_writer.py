from __future__ import annotations

import asyncio
import io
import json
from datetime import UTC, datetime

import fastavro
import pytest

from ltsv2avro.core.avro_writer import fastavro_codec, write_records
from ltsv2avro.core.config import EncodeConfig
from ltsv2avro.core.errors import PipelineCancelled
from ltsv2avro.core.pipeline import iter_ltsv_records
from ltsv2avro.core.schema import default_record_schema


def _lines(n: int) -> list[str]:
    return [
        f"timestamp:2025-01-22T14:42:{i:02d}Z\tseverity:info\tbody:msg {i}\thost:web-{i}"
        for i in range(n)
    ]


def _block_sizes(data: bytes) -> list[int]:
    return [block.num_records for block in fastavro.block_reader(io.BytesIO(data))]


@pytest.mark.asyncio
async def test_write_records_round_trip(aiter_of, read_avro, least_line) -> None:
    buf = io.BytesIO()
    lines = [least_line, least_line + "\ttag:a\ttag:b\tzone:jp"]
    count = await write_records(iter_ltsv_records(aiter_of(lines)), buf, default_record_schema())

    assert count == 2
    first, second = read_avro(buf.getvalue())
    assert first["timestamp"] == datetime(2025, 1, 22, 5, 42, 11, 12345, tzinfo=UTC)
    assert first["severity"] == "LEVEL_INFO"
    assert first["body"] == "hello, world"
    assert first["attributes"] == {}
    assert first["tags"] == []
    assert second["tags"] == ["a", "b"]
    assert second["attributes"] == {"zone": "jp"}


@pytest.mark.asyncio
async def test_write_records_empty_stream_writes_header(aiter_of, read_avro) -> None:
    buf = io.BytesIO()
    count = await write_records(iter_ltsv_records(aiter_of([])), buf, default_record_schema())
    assert count == 0
    assert buf.getvalue().startswith(b"Obj\x01")
    assert read_avro(buf.getvalue()) == []


@pytest.mark.asyncio
async def test_write_records_accepts_schema_text(aiter_of, read_avro, least_line) -> None:
    buf = io.BytesIO()
    schema = json.dumps(default_record_schema())
    await write_records(iter_ltsv_records(aiter_of([least_line])), buf, schema)
    assert len(read_avro(buf.getvalue())) == 1


@pytest.mark.asyncio
async def test_write_records_flushes_every_record_by_default(aiter_of) -> None:
    buf = io.BytesIO()
    await write_records(iter_ltsv_records(aiter_of(_lines(3))), buf, default_record_schema())
    assert _block_sizes(buf.getvalue()) == [1, 1, 1]


@pytest.mark.asyncio
async def test_write_records_block_length_when_not_flushing_per_record(aiter_of) -> None:
    buf = io.BytesIO()
    cfg = EncodeConfig(block_length=2, flush_per_record=False)
    await write_records(iter_ltsv_records(aiter_of(_lines(5))), buf, default_record_schema(), cfg)
    assert _block_sizes(buf.getvalue()) == [2, 2, 1]


@pytest.mark.asyncio
async def test_write_records_deflate(aiter_of, read_avro) -> None:
    buf = io.BytesIO()
    cfg = EncodeConfig(codec="deflate")
    await write_records(iter_ltsv_records(aiter_of(_lines(4))), buf, default_record_schema(), cfg)

    reader = fastavro.reader(io.BytesIO(buf.getvalue()))
    assert reader.codec == "deflate"
    assert [r["body"] for r in reader] == ["msg 0", "msg 1", "msg 2", "msg 3"]


@pytest.mark.asyncio
@pytest.mark.parametrize("codec", ["bzip2", "xz"])
async def test_write_records_unsupported_codec_falls_back_to_null(aiter_of, codec, caplog) -> None:
    buf = io.BytesIO()
    cfg = EncodeConfig(codec=codec)
    await write_records(iter_ltsv_records(aiter_of(_lines(1))), buf, default_record_schema(), cfg)

    reader = fastavro.reader(io.BytesIO(buf.getvalue()))
    assert reader.codec == "null"
    assert "not supported" in caplog.text


def test_fastavro_codec_mapping() -> None:
    assert fastavro_codec("null") == "null"
    assert fastavro_codec("snappy") == "snappy"
    assert fastavro_codec("zstandard") == "zstandard"
    assert fastavro_codec("xz") == "null"


@pytest.mark.asyncio
async def test_write_records_encode_error_is_logged(aiter_of, caplog, least_line) -> None:
    schema = default_record_schema()
    schema["fields"].append({"name": "host", "type": "string"})
    buf = io.BytesIO()

    with pytest.raises((ValueError, TypeError, KeyError)):
        await write_records(iter_ltsv_records(aiter_of([least_line])), buf, schema)
    assert "Failed to encode record" in caplog.text


@pytest.mark.asyncio
async def test_write_records_encode_error_while_cancelled(aiter_of, least_line) -> None:
    schema = default_record_schema()
    schema["fields"].append({"name": "host", "type": "string"})
    cancel = asyncio.Event()

    async def cancelled_after_pull():
        async for record in iter_ltsv_records(aiter_of([least_line])):
            cancel.set()
            yield record

    with pytest.raises(PipelineCancelled) as exc_info:
        await write_records(cancelled_after_pull(), io.BytesIO(), schema, cancel=cancel)
    assert isinstance(exc_info.value.__cause__, (ValueError, TypeError, KeyError))


@pytest.mark.asyncio
async def test_write_records_encode_error_without_cancel_is_not_wrapped(aiter_of, least_line) -> None:
    schema = default_record_schema()
    schema["fields"].append({"name": "host", "type": "string"})

    with pytest.raises((ValueError, TypeError, KeyError)) as exc_info:
        await write_records(iter_ltsv_records(aiter_of([least_line])), io.BytesIO(), schema, cancel=asyncio.Event())
    assert not isinstance(exc_info.value, PipelineCancelled)
