"""Module entrypoint.

Allows:
    python -m ltsv2avro
"""

from __future__ import annotations

from ltsv2avro.cli import main

if __name__ == "__main__":
    main()
