"""Ejecuta la CLI desde el checkout sin instalar: `python main.py list`."""

from __future__ import annotations

import sys
from pathlib import Path

if __name__ == "__main__":
    sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

    from cli.main import run  # noqa: PLC0415

    run()
