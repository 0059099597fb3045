"""
IntcodeHost: high-level interface to the Intcode machine.

Keeps a pristine copy of the loaded program, builds a fresh machine for
each run, patches the noun/verb cells and collects results.
"""

from __future__ import annotations

import sys
from pathlib import Path

from .faults import Fault
from .loader import parse_program, load_program_file
from .machine import IntcodeMachine, CELL_NOUN, CELL_VERB, STATE_NAMES
from .ports import QueueIO


class IntcodeHost:
    """Owns the initial cells; every run gets its own machine and copy."""

    def __init__(self, program):
        self.program: tuple[int, ...] = tuple(program)

    @classmethod
    def from_text(cls, text: str) -> IntcodeHost:
        return cls(parse_program(text))

    @classmethod
    def from_file(cls, path: str | Path) -> IntcodeHost:
        return cls(load_program_file(path))

    # -------------------------------------------------------------------
    # Machine construction
    # -------------------------------------------------------------------

    def machine(self, io=None) -> IntcodeMachine:
        return IntcodeMachine(list(self.program), io)

    def with_inputs(self, noun: int | None, verb: int | None,
                    io=None) -> IntcodeMachine:
        """Fresh machine with cells 1 and 2 patched. None keeps the cell."""
        if len(self.program) <= CELL_VERB:
            raise ValueError(
                f"Program has {len(self.program)} cells, too short for noun/verb")
        cells = list(self.program)
        if noun is not None:
            cells[CELL_NOUN] = noun
        if verb is not None:
            cells[CELL_VERB] = verb
        return IntcodeMachine(cells, io)

    # -------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------

    def eval(self, inputs=(), noun: int | None = None,
             verb: int | None = None) -> dict:
        """
        Run a fresh machine to completion against scripted input.

        Returns dict with the final cells, produced output, fault and stats.
        """
        io = QueueIO(inputs)
        if noun is None and verb is None:
            m = self.machine(io)
        else:
            m = self.with_inputs(noun, verb, io)
        fault = m.run()
        return {
            "ok": fault is None,
            "state": STATE_NAMES[m.state],
            "fault": fault,
            "pc": m.pc,
            "cells": m.snapshot(),
            "output": list(io.outputs),
            "stats": m.stats(),
        }

    def search(self, target: int, noun_range=range(100),
               verb_range=range(100)) -> tuple[int, int] | None:
        """First (noun, verb) whose run leaves target in cell 0, else None.

        Faulting pairs are reported on stderr and skipped.
        """
        for noun in noun_range:
            for verb in verb_range:
                m = self.with_inputs(noun, verb, QueueIO())
                fault = m.run()
                if fault is not None:
                    report_fault(fault, m, noun, verb)
                    continue
                if m.output() == target:
                    return noun, verb
        return None


def report_fault(fault: Fault, machine: IntcodeMachine, noun: int, verb: int):
    print(f"WARNING: {fault.kind} ({fault.context}) at position {machine.pc} "
          f"while running with inputs (noun = {noun}, verb = {verb}). Skipping",
          file=sys.stderr)
