"""
Fault model for the Intcode machine.

A Fault carries a machine-readable kind and a context string naming the
pipeline stage, mnemonic and operand slot, e.g.

    EXEC!ADD.src2: pos 37 is outside program bounds

Fetch and execute raise Faults; IntcodeMachine.step() turns them into
return values so hosts can log and move on.
"""

from __future__ import annotations


INVALID_OPCODE  = "InvalidOpcode"
INVALID_OPERAND = "InvalidOperand"
INVALID_INPUT   = "InvalidInput"
OUT_OF_BOUNDS   = "OutOfBounds"

FAULT_KINDS = (INVALID_OPCODE, INVALID_OPERAND, INVALID_INPUT, OUT_OF_BOUNDS)


class Fault(Exception):
    """A machine fault: (kind, context)."""

    def __init__(self, kind: str, context: str):
        if kind not in FAULT_KINDS:
            raise ValueError(f"Unknown fault kind: {kind!r}")
        super().__init__(f"{kind}: {context}")
        self.kind = kind
        self.context = context

    def __repr__(self) -> str:
        return f"Fault({self.kind!r}, {self.context!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Fault):
            return NotImplemented
        return self.kind == other.kind and self.context == other.context

    def __hash__(self) -> int:
        return hash((self.kind, self.context))


def out_of_bounds(ident: str, pos: int) -> Fault:
    return Fault(OUT_OF_BOUNDS, f"{ident}: pos {pos} is outside program bounds")


def invalid_opcode(ident: str, opcode: int) -> Fault:
    return Fault(INVALID_OPCODE, f"{ident}: invalid opcode {opcode}")


def invalid_operand(ident: str, mode: str) -> Fault:
    return Fault(INVALID_OPERAND, f"{ident}: invalid operand mode {mode}")


def invalid_input(ident: str, detail: str) -> Fault:
    return Fault(INVALID_INPUT, f"{ident}: {detail}")
