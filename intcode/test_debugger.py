"""
Checks for the debugger's panel text and machine setup.
"""

from __future__ import annotations

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from intcode.debugger import (
    build_machine, render_memory, render_state, render_instruction, render_io,
)
from intcode.machine import S_HALTED


def test_render_memory_marks_pc():
    m, _ = build_machine([1, 9, 10, 3, 2, 3, 11, 0, 99, 30, 40, 50])
    text = render_memory(m, width=4)
    lines = text.splitlines()
    assert len(lines) == 3
    assert lines[0].startswith("00000│")
    assert lines[1].startswith("00004│")
    assert "[bold reverse]      1[/bold reverse]" in lines[0]

    m.step()
    assert "[bold reverse]      2[/bold reverse]" in render_memory(m, width=4).splitlines()[1]


def test_render_memory_window():
    m, _ = build_machine([1105, 1, 90] + [0] * 87 + [99])
    m.step()
    assert m.pc == 90
    lines = render_memory(m, rows=4, width=8).splitlines()
    # Window starts two rows above PC's row and stops at the last cell
    assert len(lines) == 3
    assert lines[0].startswith("00072│")
    assert "[bold reverse]     99[/bold reverse]" in lines[-1]


def test_render_state():
    m, _ = build_machine([1, 0, 0, 50, 99])
    assert "Running" in render_state(m)
    m.step()
    text = render_state(m)
    assert "Faulted" in text
    assert "Fault:" in text
    assert "EXEC!ADD.dst" in text


def test_render_instruction():
    m, _ = build_machine([1, 9, 10, 3, 2, 3, 11, 0, 99, 30, 40, 50])
    text = render_instruction(m)
    assert text.startswith("00000: ADD \\[9], \\[10] -> \\[3]")
    assert "(1, 9, 10, 3)" in text
    reads = m.cell_reads
    render_instruction(m)
    assert m.cell_reads == reads

    m.run()
    assert m.state == S_HALTED
    assert render_instruction(m) == "(halted)"

    m, _ = build_machine([201, 0, 0, 0, 99])
    assert "InvalidOperand" in render_instruction(m)


def test_build_machine_patches_and_io():
    m, io = build_machine([1, 0, 0, 0, 99], inputs=[4, 5], noun=3, verb=4)
    assert m.snapshot() == (1, 3, 4, 0, 99)
    assert "4 5" in render_io(io)

    m, io = build_machine([3, 0, 4, 0, 99], inputs=[8])
    m.run()
    assert io.outputs == [8]
    assert "(empty)" in render_io(io)


def main():
    tests = [obj for name, obj in sorted(globals().items())
             if name.startswith("test_") and callable(obj)]
    for test in tests:
        test()
    print(f"Debugger panels: {len(tests)}/{len(tests)} correct")


if __name__ == "__main__":
    main()
