"""
Cell store for the Intcode machine.

One flat array of signed 32-bit cells holds both the program and its data.
The length is fixed when the store is built; there is no growth.
"""

from __future__ import annotations

from .faults import out_of_bounds


CELL_BITS = 32
CELL_MIN  = -(1 << (CELL_BITS - 1))
CELL_MAX  = (1 << (CELL_BITS - 1)) - 1


def wrap_cell(val: int) -> int:
    """Reduce an arbitrary int to the signed 32-bit cell range."""
    val &= (1 << CELL_BITS) - 1
    if val > CELL_MAX:
        val -= 1 << CELL_BITS
    return val


def fits_cell(val: int) -> bool:
    return CELL_MIN <= val <= CELL_MAX


class CellStore:
    """Fixed-length random-access cell array. Out-of-range access faults."""

    def __init__(self, cells):
        self.data: list[int] = [wrap_cell(v) for v in cells]

    def __len__(self) -> int:
        return len(self.data)

    def in_bounds(self, addr: int) -> bool:
        return 0 <= addr < len(self.data)

    def read(self, addr: int, ident: str = "READ") -> int:
        if not self.in_bounds(addr):
            raise out_of_bounds(ident, addr)
        return self.data[addr]

    def write(self, addr: int, val: int, ident: str = "WRITE"):
        if not self.in_bounds(addr):
            raise out_of_bounds(ident, addr)
        self.data[addr] = wrap_cell(val)

    def snapshot(self) -> tuple[int, ...]:
        """Read-only copy of every cell."""
        return tuple(self.data)
