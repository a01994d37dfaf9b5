"""Configuration models and environment loading.

All models are immutable and built once at start-up. Overrides come from
environment variables; an absent or empty variable keeps the default.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PositiveInt,
    ValidationError,
    field_validator,
    model_validator,
)

from .errors import ConfigError

logger = logging.getLogger(__name__)

Codec = Literal["null", "deflate", "snappy", "zstandard", "bzip2", "xz"]

BLOCK_LENGTH_DEFAULT = 100
BLOB_SIZE_MAX_DEFAULT = 1048576
SCHEMA_FILE_SIZE_MAX_DEFAULT = 1048576

LABEL_ENV_KEYS: Mapping[str, str] = {
    "timestamp": "ENV_LABEL_TIMESTAMP",
    "severity": "ENV_LABEL_SEVERITY",
    "body": "ENV_LABEL_BODY",
    "attributes": "ENV_LABEL_ATTR",
    "tag": "ENV_LABEL_TAG",
}
SCHEMA_ENV_KEY = "ENV_SCHEMA_FILENAME"
CODEC_ENV_KEY = "ENV_AVRO_CODEC"
BLOCK_LENGTH_ENV_KEY = "ENV_AVRO_BLOCK_LENGTH"
BLOB_SIZE_ENV_KEY = "ENV_BLOB_SIZE_MAX"


class LabelConfig(BaseModel):
    """The five distinguished label names."""

    model_config = ConfigDict(frozen=True)

    timestamp: str = Field(default="timestamp", min_length=1)
    severity: str = Field(default="severity", min_length=1)
    body: str = Field(default="body", min_length=1)
    attributes: str = Field(default="attributes", min_length=1)
    tag: str = Field(default="tag", min_length=1)

    @property
    def tags_key(self) -> str:
        """Record key holding the list of tag values."""
        return f"{self.tag}s"

    @property
    def reserved(self) -> frozenset[str]:
        """Labels that never appear in the attributes mapping."""
        return frozenset((self.timestamp, self.severity, self.body, self.attributes, self.tag))

    @model_validator(mode="after")
    def _check_distinct(self) -> LabelConfig:
        names = [self.timestamp, self.severity, self.body, self.attributes, self.tag, self.tags_key]
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise ValueError(f"distinguished labels must be distinct, got duplicates: {dupes}")
        return self


class LtsvConfig(BaseModel):
    """How lines are split and which labels are distinguished."""

    model_config = ConfigDict(frozen=True)

    labels: LabelConfig = Field(default_factory=LabelConfig)
    field_separator: str = Field(default="\t", min_length=1)
    pair_separator: str = Field(default=":", min_length=1)


class DecodeConfig(BaseModel):
    """Input decoding options."""

    model_config = ConfigDict(frozen=True)

    max_line_size: PositiveInt = BLOB_SIZE_MAX_DEFAULT
    encoding: str = "utf-8"
    decode_errors: str = "strict"


class EncodeConfig(BaseModel):
    """Avro container options."""

    model_config = ConfigDict(frozen=True)

    codec: Codec = "null"
    block_length: PositiveInt = BLOCK_LENGTH_DEFAULT
    # When false, blocks are flushed every `block_length` records instead.
    flush_per_record: bool = True

    @field_validator("codec", mode="before")
    @classmethod
    def _normalize_codec(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().lower()
            if value == "none":
                return "null"
        return value


class Config(BaseModel):
    """Top-level configuration for one conversion run."""

    model_config = ConfigDict(frozen=True)

    ltsv: LtsvConfig = Field(default_factory=LtsvConfig)
    decode: DecodeConfig = Field(default_factory=DecodeConfig)
    encode: EncodeConfig = Field(default_factory=EncodeConfig)
    schema_path: Path | None = None
    schema_size_max: PositiveInt = SCHEMA_FILE_SIZE_MAX_DEFAULT


def _env(environ: Mapping[str, str], key: str) -> str | None:
    value = environ.get(key)
    return value if value else None


def _lenient_overrides(
    model: type[BaseModel],
    environ: Mapping[str, str],
    keys: Mapping[str, str],
) -> dict[str, str]:
    """Collect overrides that validate on their own; warn about the rest."""
    out: dict[str, str] = {}
    for field_name, key in keys.items():
        raw = _env(environ, key)
        if raw is None:
            continue
        try:
            model.model_validate({field_name: raw})
        except ValidationError:
            logger.warning("Ignoring invalid %s=%r, using default", key, raw)
            continue
        out[field_name] = raw
    return out


def load_label_config(environ: Mapping[str, str] | None = None) -> LabelConfig:
    """Build the label configuration from ENV_LABEL_* overrides."""
    environ = os.environ if environ is None else environ
    overrides: dict[str, str] = {}
    for field_name, key in LABEL_ENV_KEYS.items():
        value = _env(environ, key)
        if value is not None:
            overrides[field_name] = value

    try:
        return LabelConfig(**overrides)
    except ValidationError as exc:
        raise ConfigError(f"invalid label configuration: {exc}") from exc


def load_config(environ: Mapping[str, str] | None = None) -> Config:
    """Return the run configuration with environment overrides applied."""
    environ = os.environ if environ is None else environ

    labels = load_label_config(environ)
    encode = EncodeConfig(
        **_lenient_overrides(
            EncodeConfig,
            environ,
            {"codec": CODEC_ENV_KEY, "block_length": BLOCK_LENGTH_ENV_KEY},
        )
    )
    decode = DecodeConfig(
        **_lenient_overrides(DecodeConfig, environ, {"max_line_size": BLOB_SIZE_ENV_KEY})
    )

    schema = _env(environ, SCHEMA_ENV_KEY)
    return Config(
        ltsv=LtsvConfig(labels=labels),
        decode=decode,
        encode=encode,
        schema_path=Path(schema) if schema else None,
    )
