"""Convert LTSV log lines into Avro object container files."""

from __future__ import annotations

__version__ = "0.1.0"
