"""Error types raised by the conversion pipeline."""

from __future__ import annotations

from typing import Any


class Ltsv2AvroError(Exception):
    """Base class for all pipeline errors."""


class InvalidLtsvLine(Ltsv2AvroError, ValueError):
    """A fragment of the line is not a `label<sep>value` pair."""

    def __init__(self, fragment: str, line: str) -> None:
        self.fragment = fragment
        self.length = len(fragment)
        self.line = line
        super().__init__(
            f"invalid ltsv: raw={fragment!r}, rawlen={self.length}, line={line!r}"
        )


class InvalidTimestamp(Ltsv2AvroError, ValueError):
    """The timestamp field is missing, not a string, or unparsable."""

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"invalid timestamp: {value!r}")


class InvalidBody(Ltsv2AvroError, ValueError):
    """The body field is missing or not a string."""

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"invalid body: {value!r}")


class InvalidTagType(Ltsv2AvroError, TypeError):
    """The tag list slot of a record already holds a non-list value."""

    def __init__(self, key: str, value: Any) -> None:
        self.key = key
        self.value = value
        super().__init__(f"invalid tag type: {key}={value!r}")


class LineTooLong(Ltsv2AvroError, ValueError):
    """An input line exceeds the configured maximum size."""

    def __init__(self, line_no: int, size: int, limit: int) -> None:
        self.line_no = line_no
        self.size = size
        self.limit = limit
        super().__init__(f"line {line_no} too long: {size} > {limit}")


class PipelineCancelled(Ltsv2AvroError):
    """The conversion was cancelled before the stream was exhausted."""

    def __init__(self) -> None:
        super().__init__("conversion cancelled")


class ConfigError(Ltsv2AvroError, ValueError):
    """Invalid configuration or schema."""
