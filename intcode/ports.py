"""
Host I/O adapters for the INPUT and OUTPUT opcodes.

An adapter provides read_integer() and write_integer(val). read_integer()
raises a Fault of kind InvalidInput when it cannot produce a value.
"""

from __future__ import annotations

import collections
import sys

from .faults import invalid_input
from .loader import INTEGER_RE
from .memory import fits_cell


IDENT = "EXEC!INPUT"


def parse_cell(text: str) -> int:
    """Parse one signed decimal cell value, or raise InvalidInput."""
    s = text.strip()
    if not INTEGER_RE.fullmatch(s):
        raise invalid_input(IDENT, f"could not parse {s!r} as i32")
    val = int(s)
    if not fits_cell(val):
        raise invalid_input(IDENT, f"{s} does not fit in a 32-bit cell")
    return val


class ConsoleIO:
    """Prompt on stdout, read one line per INPUT, print one line per OUTPUT."""

    def __init__(self, stdin=None, stdout=None, prompt: str = "Input value: "):
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.prompt = prompt

    def read_integer(self) -> int:
        self.stdout.write(self.prompt)
        self.stdout.flush()
        try:
            line = self.stdin.readline()
        except OSError as e:
            raise invalid_input(IDENT, f"could not read input ({e})") from e
        if not line:
            raise invalid_input(IDENT, "could not read input (end of stream)")
        return parse_cell(line)

    def write_integer(self, val: int):
        print(val, file=self.stdout, flush=True)


class QueueIO:
    """Scripted adapter: INPUT pops from a preloaded queue, OUTPUT collects."""

    def __init__(self, inputs=()):
        self.inputs: collections.deque[int] = collections.deque(inputs)
        self.outputs: list[int] = []

    def read_integer(self) -> int:
        if not self.inputs:
            raise invalid_input(IDENT, "input queue is empty")
        val = self.inputs.popleft()
        if not fits_cell(val):
            raise invalid_input(IDENT, f"{val} does not fit in a 32-bit cell")
        return val

    def write_integer(self, val: int):
        self.outputs.append(val)

    def send(self, values):
        """Queue more values for later INPUT instructions."""
        self.inputs.extend(values)

    def recv(self) -> list[int]:
        """Drain everything OUTPUT has produced so far."""
        out = self.outputs
        self.outputs = []
        return out

    def __len__(self) -> int:
        return len(self.inputs)
