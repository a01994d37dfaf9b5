"""Row classification: turn tokenized LTSV fields into a structured record."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .config import LabelConfig, LtsvConfig
from .errors import InvalidBody, InvalidTagType
from .formats import (
    DEFAULT_SEVERITY_MAPPER,
    DEFAULT_TIMESTAMP_PARSER,
    SeverityMapper,
    TimestampParser,
)
from .models import LabeledField, Record


def _body_string(value: Any) -> str:
    if not isinstance(value, str):
        raise InvalidBody(value)
    return value


@dataclass(frozen=True, slots=True)
class RecordClassifier:
    """Classify labeled fields into timestamp, severity, body, tags and attributes."""

    labels: LabelConfig = field(default_factory=LabelConfig)
    timestamp_parser: TimestampParser = DEFAULT_TIMESTAMP_PARSER
    severity_mapper: SeverityMapper = DEFAULT_SEVERITY_MAPPER

    @classmethod
    def from_config(cls, cfg: LtsvConfig) -> RecordClassifier:
        return cls(labels=cfg.labels)

    def add_tag(self, tag: str, out: Record) -> None:
        """Append a tag value to the record's tag list."""
        key = self.labels.tags_key
        prev = out.get(key)
        if prev is None:
            out[key] = [tag]
        elif isinstance(prev, list):
            prev.append(tag)
        else:
            raise InvalidTagType(key, prev)

    def classify(
        self,
        row: Iterable[LabeledField],
        out: Record,
        attrs: dict[str, Any],
    ) -> None:
        """Fill `out` from `row`, using `attrs` as the attribute bucket.

        On error `out` may be partially populated and must be discarded.

        Raises
        ------
        InvalidTagType
            If the tag list slot of `out` holds a non-list value.
        InvalidTimestamp
            If the timestamp field is missing or unparsable.
        InvalidBody
            If the body field is missing.
        """
        labels = self.labels
        for item in row:
            if item.label == labels.tag:
                self.add_tag(item.value, out)
                continue
            attrs[item.label] = item.value

        out[labels.timestamp] = self.timestamp_parser.parse(attrs.get(labels.timestamp))
        out[labels.severity] = self.severity_mapper.map(attrs.get(labels.severity)).value
        out[labels.body] = _body_string(attrs.get(labels.body))

        for key in labels.reserved:
            attrs.pop(key, None)
        out[labels.attributes] = attrs

    def to_record(self, row: Iterable[LabeledField]) -> Record:
        """Classify a row into a freshly allocated record."""
        out: Record = {}
        self.classify(row, out, {})
        return out
