"""Timestamp parsing strategies.

A strategy is a plain callable `str -> datetime` that raises `ValueError` when
the value does not match. `TimestampParser` tries its strategies in order.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta, timezone

from ..errors import InvalidTimestamp

TimestampStrategy = Callable[[str], datetime]

_RFC3339_RE = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})[Tt]"
    r"(?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d+))?"
    r"(?P<offset>[Zz]|[+-]\d{2}:\d{2})$"
)

_DATETIME_RE = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2}) "
    r"(?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d+))?$"
)

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def _micros(frac: str | None) -> int:
    return int((frac or "")[:6].ljust(6, "0"))


def _parse_offset(offset: str) -> timezone:
    if offset in ("Z", "z"):
        return UTC
    sign = -1 if offset[0] == "-" else 1
    hours, minutes = int(offset[1:3]), int(offset[4:6])
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC 3339 date-time with optional fraction and a required offset.

    Fractions longer than microseconds are truncated.
    """
    m = _RFC3339_RE.match(value)
    if m is None:
        raise ValueError(f"not an RFC 3339 timestamp: {value!r}")

    base = datetime.strptime(f"{m['date']}T{m['time']}", "%Y-%m-%dT%H:%M:%S")
    return base.replace(microsecond=_micros(m["frac"]), tzinfo=_parse_offset(m["offset"]))


def parse_datetime(value: str) -> datetime:
    """Parse `YYYY-MM-DD HH:MM:SS[.fraction]` (no offset) as UTC.

    Fractions longer than microseconds are truncated.
    """
    m = _DATETIME_RE.match(value)
    if m is None:
        raise ValueError(f"not a date-time: {value!r}")

    base = datetime.strptime(f"{m['date']} {m['time']}", DATETIME_FORMAT)
    return base.replace(microsecond=_micros(m["frac"]), tzinfo=UTC)


@dataclass(frozen=True, slots=True)
class TimestampParser:
    """Try strategies in order and return the first successful parse."""

    strategies: Sequence[TimestampStrategy] = (parse_rfc3339, parse_datetime)

    def parse(self, value: object) -> datetime:
        """Parse a raw field value into a timezone-aware datetime.

        Raises
        ------
        InvalidTimestamp
            If the value is not a string or no strategy accepts it.
        """
        if not isinstance(value, str):
            raise InvalidTimestamp(value)

        last_err: ValueError | None = None
        for strategy in self.strategies:
            try:
                return strategy(value)
            except ValueError as e:
                last_err = e
        raise InvalidTimestamp(value) from last_err


DEFAULT_TIMESTAMP_PARSER = TimestampParser()
