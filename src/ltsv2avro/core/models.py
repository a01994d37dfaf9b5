"""Core data models for the LTSV to Avro pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Level(str, Enum):
    """Normalized severity levels written to the severity field."""

    UNSPECIFIED = "LEVEL_UNSPECIFIED"
    TRACE = "LEVEL_TRACE"
    DEBUG = "LEVEL_DEBUG"
    INFO = "LEVEL_INFO"
    WARN = "LEVEL_WARN"
    ERROR = "LEVEL_ERROR"
    FATAL = "LEVEL_FATAL"


@dataclass(frozen=True, slots=True)
class LabeledField:
    """One `label:value` pair of an LTSV line."""

    label: str
    value: str


# One tokenized line. The pipeline reuses the same list for every line.
Row = list[LabeledField]

# Classified output unit; keys are the configured label names.
Record = dict[str, Any]
