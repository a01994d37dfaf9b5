"""Avro schema loading and the default record schema."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import aiofiles
from fastavro import parse_schema as _fastavro_parse_schema
from fastavro.schema import SchemaParseException

from .config import SCHEMA_FILE_SIZE_MAX_DEFAULT, LabelConfig
from .errors import ConfigError
from .models import Level


async def read_schema_text(path: str | Path, *, limit: int = SCHEMA_FILE_SIZE_MAX_DEFAULT) -> str:
    """Read a schema file of at most `limit` bytes."""
    path = Path(path)
    try:
        async with aiofiles.open(path, mode="rb") as f:
            data = await f.read(limit + 1)
    except OSError as exc:
        raise ConfigError(f"cannot read schema file {path}: {exc}") from exc

    if len(data) > limit:
        raise ConfigError(f"schema file {path} exceeds {limit} bytes")
    return data.decode("utf-8")


def _check_record_fields(obj: Any) -> None:
    """Every record (or error) type must declare a list of fields."""
    if isinstance(obj, list):
        for item in obj:
            _check_record_fields(item)
        return
    if not isinstance(obj, dict):
        return
    if obj.get("type") in ("record", "error"):
        if not isinstance(obj.get("fields"), list):
            raise ConfigError(f"invalid avro schema: record {obj.get('name')!r} has no fields list")
    for value in obj.values():
        _check_record_fields(value)


def parse_schema(schema: str | dict[str, Any]) -> dict[str, Any]:
    """Parse a JSON schema text (or dict) into a fastavro schema.

    Raises
    ------
    ConfigError
        If the text is not JSON, a record has no fields, or fastavro rejects it.
    """
    try:
        obj = json.loads(schema) if isinstance(schema, str) else schema
    except ValueError as exc:
        raise ConfigError(f"invalid avro schema: {exc}") from exc

    _check_record_fields(obj)
    try:
        return _fastavro_parse_schema(obj)
    except (ValueError, SchemaParseException, KeyError, TypeError) as exc:
        raise ConfigError(f"invalid avro schema: {exc}") from exc


def default_record_schema(labels: LabelConfig | None = None) -> dict[str, Any]:
    """Record schema matching the output of the classifier for `labels`."""
    labels = labels or LabelConfig()
    return {
        "type": "record",
        "name": "LogRecord",
        "namespace": "ltsv2avro",
        "fields": [
            {
                "name": labels.timestamp,
                "type": {"type": "long", "logicalType": "timestamp-micros"},
            },
            {
                "name": labels.severity,
                "type": {
                    "type": "enum",
                    "name": "Level",
                    "symbols": [level.value for level in Level],
                },
                "default": Level.UNSPECIFIED.value,
            },
            {"name": labels.body, "type": "string"},
            {
                "name": labels.attributes,
                "type": {"type": "map", "values": "string"},
                "default": {},
            },
            {
                "name": labels.tags_key,
                "type": {"type": "array", "items": "string"},
                "default": [],
            },
        ],
    }
