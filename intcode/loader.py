"""
loader: Intcode program text → initial cell list.

Program text is one line of comma-separated signed decimal integers.
Whitespace around each element is ignored; empty elements are not.
"""

from __future__ import annotations

import re
from pathlib import Path

from .memory import fits_cell


INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def parse_program(text: str) -> list[int]:
    """Parse program text. Raises ValueError naming the bad position."""
    body = text.strip("\r\n")
    if not body.strip():
        raise ValueError("Program is empty")

    cells = []
    for i, field in enumerate(body.split(",")):
        s = field.strip()
        if not s:
            raise ValueError(f"Empty field at position {i}")
        if not INTEGER_RE.fullmatch(s):
            raise ValueError(f"Could not interpret {s!r} at position {i} as i32")
        val = int(s)
        if not fits_cell(val):
            raise ValueError(
                f"Value {val} at position {i} does not fit in a 32-bit cell")
        cells.append(val)
    return cells


def load_program_file(path: str | Path) -> list[int]:
    """Read and parse a program file."""
    return parse_program(Path(path).read_text())
