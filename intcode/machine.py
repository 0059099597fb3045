"""
Intcode machine: position-addressed register machine with self-modifying memory.

Models the fetch/decode/execute pipeline: a cell store shared by code and
data, a program counter, parameter-mode decoding, conditional branches and
a synchronous host I/O port.
"""

from __future__ import annotations

from dataclasses import dataclass

from .faults import Fault, out_of_bounds, invalid_opcode, invalid_operand
from .memory import CellStore
from .ports import ConsoleIO


# ---------------------------------------------------------------------------
# Instruction word format: five decimal digits, ABCDE
#   DE  = opcode
#   C   = mode of operand 1, B = operand 2, A = operand 3
# ---------------------------------------------------------------------------

OPCODE_DIGITS = 2
MODE_DIGITS   = 3
MAX_OPCODE_WORD = 10 ** (OPCODE_DIGITS + MODE_DIGITS) - 1   # 99999

# Opcodes
OP_ADD   = 1
OP_MUL   = 2
OP_INPUT = 3
OP_OUT   = 4
OP_JNZ   = 5
OP_JZ    = 6
OP_LT    = 7
OP_EQ    = 8
OP_HALT  = 99

# Parameter modes
MODE_POSITION  = "0"
MODE_IMMEDIATE = "1"

# opcode -> (mnemonic, source slots, destination slot)
# Source slots come first in the instruction, the destination (if any) last.
INSTRUCTIONS = {
    OP_ADD:   ("ADD",    ("src1", "src2"), "dst"),
    OP_MUL:   ("MUL",    ("src1", "src2"), "dst"),
    OP_INPUT: ("INPUT",  (),               "dst"),
    OP_OUT:   ("OUTPUT", ("src",),         None),
    OP_JNZ:   ("JNZ",    ("cmp", "to"),    None),
    OP_JZ:    ("JZ",     ("cmp", "to"),    None),
    OP_LT:    ("LT",     ("cmp1", "cmp2"), "dst"),
    OP_EQ:    ("EQ",     ("cmp1", "cmp2"), "dst"),
    OP_HALT:  ("HALT",   (),               None),
}

UNDEFINED = "UNDEF"

# Machine states
S_RUNNING = 0
S_HALTED  = 1
S_FAULTED = 2

STATE_NAMES = {
    S_RUNNING: "Running",
    S_HALTED:  "Halted",
    S_FAULTED: "Faulted",
}

# Puzzle-domain names for the cells a loader patches before the first step
CELL_OUTPUT = 0
CELL_NOUN   = 1
CELL_VERB   = 2


# ---------------------------------------------------------------------------
# Decoded values
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Operand:
    mode: str       # MODE_POSITION | MODE_IMMEDIATE
    value: int      # cell index for position mode, literal for immediate

    @property
    def is_position(self) -> bool:
        return self.mode == MODE_POSITION

    def __str__(self) -> str:
        return f"[{self.value}]" if self.is_position else str(self.value)


def decode_operand(mode: str, raw: int, ident: str = "DECODE") -> Operand:
    """Tag a raw operand cell with its parameter mode. Never touches memory."""
    if mode == MODE_POSITION or mode == MODE_IMMEDIATE:
        return Operand(mode, raw)
    raise invalid_operand(ident, mode)


def split_opcode_word(word: int) -> tuple[int, str]:
    """Split an instruction word into (opcode, modes).

    modes[i] is the mode digit of operand i+1; absent digits read as '0'.
    """
    mode_num, opcode = divmod(word, 10 ** OPCODE_DIGITS)
    modes = f"{mode_num:0{MODE_DIGITS}d}"[::-1]
    return opcode, modes


@dataclass(frozen=True)
class Instruction:
    opcode: int
    addr: int                           # PC the instruction was fetched from
    operands: tuple[Operand, ...] = ()  # source operands, in slot order
    dst: int | None = None              # destination cell index

    @property
    def defined(self) -> bool:
        return self.opcode in INSTRUCTIONS

    @property
    def mnemonic(self) -> str:
        return INSTRUCTIONS[self.opcode][0] if self.defined else UNDEFINED

    @property
    def width(self) -> int:
        """Number of cells the instruction occupies."""
        if not self.defined:
            return 1
        _, srcs, dst = INSTRUCTIONS[self.opcode]
        return 1 + len(srcs) + (1 if dst else 0)

    @property
    def advance(self) -> int:
        """PC advance on fall-through. HALT and undefined opcodes stay put."""
        if self.opcode == OP_HALT or not self.defined:
            return 0
        return self.width

    def describe(self) -> str:
        """Assembly-style text, e.g. 'ADD [9], [10] -> [3]'."""
        if not self.defined:
            return f"{UNDEFINED} {self.opcode}"
        text = self.mnemonic
        if self.operands:
            text += " " + ", ".join(str(o) for o in self.operands)
        if self.dst is not None:
            text += f" -> [{self.dst}]"
        return text


# ---------------------------------------------------------------------------
# Machine
# ---------------------------------------------------------------------------

class IntcodeMachine:
    """Fetch/decode/execute interpreter over a single owned cell store."""

    def __init__(self, program, io=None):
        self.cells = CellStore(program)
        self.io = io if io is not None else ConsoleIO()
        self._pc = 0
        self._state = S_RUNNING
        self.fault: Fault | None = None

        # --- Counters ---
        self.steps = 0
        self.cell_reads = 0
        self.cell_writes = 0
        self.io_ops = 0

    # -------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------

    @property
    def pc(self) -> int:
        return self._pc

    @property
    def state(self) -> int:
        return self._state

    @property
    def running(self) -> bool:
        return self._state == S_RUNNING

    @property
    def halted(self) -> bool:
        return self._state == S_HALTED

    def get(self, addr: int) -> int | None:
        """Cell value at addr, or None outside the program."""
        if self.cells.in_bounds(addr):
            return self.cells.data[addr]
        return None

    def snapshot(self) -> tuple[int, ...]:
        return self.cells.snapshot()

    def output(self) -> int:
        return self.cells.read(CELL_OUTPUT, "OUTPUT")

    def noun(self) -> int:
        return self.cells.read(CELL_NOUN, "NOUN")

    def verb(self) -> int:
        return self.cells.read(CELL_VERB, "VERB")

    # -------------------------------------------------------------------
    # Memory helpers
    # -------------------------------------------------------------------

    def cell_read(self, addr: int, ident: str) -> int:
        self.cell_reads += 1
        return self.cells.read(addr, ident)

    def cell_write(self, addr: int, val: int, ident: str):
        self.cell_writes += 1
        self.cells.write(addr, val, ident)

    def resolve(self, operand: Operand, ident: str) -> int:
        if operand.is_position:
            return self.cell_read(operand.value, ident)
        return operand.value

    # -------------------------------------------------------------------
    # Fetch / decode
    # -------------------------------------------------------------------

    def fetch(self) -> Instruction:
        """Decode the instruction at PC. Raises Fault."""
        pc = self._pc
        word = self.cell_read(pc, "FETCH!OP")
        if word < 0 or word > MAX_OPCODE_WORD:
            raise invalid_opcode("FETCH!OP", word)

        opcode, modes = split_opcode_word(word)
        if opcode not in INSTRUCTIONS:
            return Instruction(opcode, pc)

        name, srcs, dst_slot = INSTRUCTIONS[opcode]
        raw = [self.cell_read(pc + 1 + i, f"FETCH!{name}.{slot}")
               for i, slot in enumerate(srcs)]
        dst = None
        if dst_slot:
            # Destinations are positions whatever their mode digit says
            dst = self.cell_read(pc + 1 + len(srcs), f"FETCH!{name}.{dst_slot}")

        operands = tuple(
            decode_operand(modes[i], value, f"FETCH!{name}.{srcs[i]}")
            for i, value in enumerate(raw)
        )
        return Instruction(opcode, pc, operands, dst)

    def peek(self) -> Instruction | Fault:
        """Decode the instruction at PC without stepping or counting reads."""
        reads = self.cell_reads
        try:
            return self.fetch()
        except Fault as f:
            return f
        finally:
            self.cell_reads = reads

    # -------------------------------------------------------------------
    # Execute
    # -------------------------------------------------------------------

    def execute(self, ins: Instruction):
        """Apply one decoded instruction. Raises Fault, leaving PC unchanged."""
        op = ins.opcode
        name = ins.mnemonic

        if op == OP_ADD or op == OP_MUL:
            a = self.resolve(ins.operands[0], f"EXEC!{name}.src1")
            b = self.resolve(ins.operands[1], f"EXEC!{name}.src2")
            self.cell_write(ins.dst, a + b if op == OP_ADD else a * b,
                            f"EXEC!{name}.dst")

        elif op == OP_LT or op == OP_EQ:
            a = self.resolve(ins.operands[0], f"EXEC!{name}.cmp1")
            b = self.resolve(ins.operands[1], f"EXEC!{name}.cmp2")
            holds = a < b if op == OP_LT else a == b
            self.cell_write(ins.dst, 1 if holds else 0, f"EXEC!{name}.dst")

        elif op == OP_INPUT:
            if not self.cells.in_bounds(ins.dst):
                raise out_of_bounds("EXEC!INPUT.dst", ins.dst)
            val = self.io.read_integer()
            self.io_ops += 1
            self.cell_write(ins.dst, val, "EXEC!INPUT.dst")

        elif op == OP_OUT:
            val = self.resolve(ins.operands[0], "EXEC!OUTPUT.src")
            self.io.write_integer(val)
            self.io_ops += 1

        elif op == OP_JNZ or op == OP_JZ:
            cmp = self.resolve(ins.operands[0], f"EXEC!{name}.cmp")
            to = self.resolve(ins.operands[1], f"EXEC!{name}.to")
            taken = cmp != 0 if op == OP_JNZ else cmp == 0
            if taken:
                if not self.cells.in_bounds(to):
                    raise out_of_bounds(f"EXEC!{name}.to", to)
                self._pc = to
                return

        elif op == OP_HALT:
            self._state = S_HALTED
            return

        else:
            raise invalid_opcode(f"EXEC!{UNDEFINED}", op)

        self._pc += ins.advance

    # -------------------------------------------------------------------
    # Driver loop
    # -------------------------------------------------------------------

    def step(self) -> int | Fault:
        """One fetch/decode/execute cycle. Returns the new state or a Fault.

        A halted machine stays halted; a faulted machine is frozen and
        keeps returning the fault that stopped it.
        """
        if self._state == S_HALTED:
            return S_HALTED
        if self._state == S_FAULTED:
            return self.fault

        try:
            self.execute(self.fetch())
        except Fault as f:
            self.fault = f
            self._state = S_FAULTED
            return f

        self.steps += 1
        return self._state

    def run(self) -> Fault | None:
        """Step until halted. Returns None on halt, else the first Fault."""
        while True:
            result = self.step()
            if isinstance(result, Fault):
                return result
            if result == S_HALTED:
                return None

    # -------------------------------------------------------------------
    # Counters
    # -------------------------------------------------------------------

    def reset_counters(self):
        self.steps = 0
        self.cell_reads = 0
        self.cell_writes = 0
        self.io_ops = 0

    def stats(self) -> dict:
        return {
            "steps": self.steps,
            "cell_reads": self.cell_reads,
            "cell_writes": self.cell_writes,
            "io_ops": self.io_ops,
            "cells": len(self.cells),
        }

    def stats_summary(self) -> str:
        s = self.stats()
        return (
            f"Steps: {s['steps']}\n"
            f"Cells: {s['cell_reads']}R/{s['cell_writes']}W "
            f"({s['cells']} cells)\n"
            f"IO: {s['io_ops']} operations"
        )
