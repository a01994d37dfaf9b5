"""LTSV tokenizer."""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import InvalidLtsvLine
from ..models import LabeledField

FIELD_SEPARATOR_DEFAULT = "\t"
PAIR_SEPARATOR_DEFAULT = ":"


@dataclass(frozen=True, slots=True)
class LtsvTokenizer:
    """Split Labeled Tab-Separated Values (LTSV) lines into labeled fields."""

    field_separator: str = FIELD_SEPARATOR_DEFAULT
    pair_separator: str = PAIR_SEPARATOR_DEFAULT

    def tokenize(
        self, line: str, scratch: list[LabeledField] | None = None
    ) -> list[LabeledField]:
        """Tokenize a line into `scratch` (cleared first) and return it.

        Empty fragments are skipped. Each fragment is split at the first pair
        separator only, so values may contain the separator themselves.

        Raises
        ------
        InvalidLtsvLine
            If a fragment has no pair separator.
        """
        out = [] if scratch is None else scratch
        out.clear()
        for raw in line.split(self.field_separator):
            if not raw:
                continue
            label, sep, value = raw.partition(self.pair_separator)
            if not sep:
                out.clear()
                raise InvalidLtsvLine(raw, line)
            out.append(LabeledField(label=label, value=value))
        return out
