"""LTSV tokenizing and field normalization strategies."""

from __future__ import annotations

from .ltsv import FIELD_SEPARATOR_DEFAULT, PAIR_SEPARATOR_DEFAULT, LtsvTokenizer
from .severity import DEFAULT_SEVERITY_MAPPER, LEVELS_BY_NAME, SeverityMapper
from .timestamp import (
    DEFAULT_TIMESTAMP_PARSER,
    TimestampParser,
    TimestampStrategy,
    parse_datetime,
    parse_rfc3339,
)

__all__ = [
    "DEFAULT_SEVERITY_MAPPER",
    "DEFAULT_TIMESTAMP_PARSER",
    "FIELD_SEPARATOR_DEFAULT",
    "LEVELS_BY_NAME",
    "LtsvTokenizer",
    "PAIR_SEPARATOR_DEFAULT",
    "SeverityMapper",
    "TimestampParser",
    "TimestampStrategy",
    "parse_datetime",
    "parse_rfc3339",
]
