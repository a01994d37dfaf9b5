"""Severity mapping."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from ..models import Level

LEVELS_BY_NAME: Mapping[str, Level] = MappingProxyType(
    {
        "TRACE": Level.TRACE,
        "DEBUG": Level.DEBUG,
        "INFO": Level.INFO,
        "WARN": Level.WARN,
        "ERROR": Level.ERROR,
        "FATAL": Level.FATAL,
    }
)


@dataclass(frozen=True, slots=True)
class SeverityMapper:
    """Case-insensitive lookup of severity names. Never fails."""

    table: Mapping[str, Level] = field(default_factory=lambda: LEVELS_BY_NAME)

    def map(self, value: object) -> Level:
        """Map a raw field value to a Level (UNSPECIFIED on miss)."""
        if not isinstance(value, str):
            return Level.UNSPECIFIED
        return self.table.get(value.upper(), Level.UNSPECIFIED)


DEFAULT_SEVERITY_MAPPER = SeverityMapper()
