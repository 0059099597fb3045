"""
Textual TUI debugger for the Intcode machine.

Instruction-stepping viewer that loads a program file, runs it on the
machine with scripted input, and displays machine state at every step.

Usage:
    python -m intcode.debugger input/day05/input --input 1
    python -m intcode.debugger input/day02/input --noun 12 --verb 2
    python -m intcode.debugger --run input/day05/input --input 5
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import ScrollableContainer
from textual.widgets import Static, RichLog, Footer
from textual import work

from intcode.faults import Fault
from intcode.host import IntcodeHost
from intcode.loader import parse_program
from intcode.machine import IntcodeMachine, STATE_NAMES, S_RUNNING
from intcode.ports import QueueIO


MEMORY_ROWS = 16
ROW_WIDTH = 8

# Refresh the panels every this many steps while running in the background
RUN_REFRESH_STEPS = 500


def _esc(text: str) -> str:
    """Escape Rich markup characters in text."""
    return text.replace("[", "\\[")


# ---------------------------------------------------------------------------
# Panel text
# ---------------------------------------------------------------------------

def render_memory(m: IntcodeMachine, rows: int = MEMORY_ROWS,
                  width: int = ROW_WIDTH) -> str:
    """Rows of cells around PC, the cell at PC highlighted."""
    cells = m.snapshot()
    if not cells:
        return "(empty)"
    pc_row = max(0, min(m.pc, len(cells) - 1)) // width
    first = max(0, pc_row - rows // 2) * width
    last = min(len(cells), first + rows * width)

    lines = []
    for base in range(first, last, width):
        parts = []
        for addr in range(base, min(base + width, last)):
            cell = f"{cells[addr]:>7d}"
            if addr == m.pc:
                cell = f"[bold reverse]{cell}[/bold reverse]"
            parts.append(cell)
        lines.append(f"{base:05d}│" + " ".join(parts))
    return "\n".join(lines)


def render_state(m: IntcodeMachine) -> str:
    state_name = STATE_NAMES.get(m.state, f"?({m.state})")
    text = (
        f"[bold]State:[/bold] {state_name}    [bold]Steps:[/bold] {m.steps}\n"
        f"[bold]PC:[/bold] {m.pc}  [bold]Cells:[/bold] {len(m.cells)}\n"
        f"[bold]Memory:[/bold] {m.cell_reads}R/{m.cell_writes}W  "
        f"[bold]IO:[/bold] {m.io_ops}"
    )
    if m.fault is not None:
        text += f"\n[bold red]Fault:[/bold red] {_esc(str(m.fault))}"
    return text


def render_instruction(m: IntcodeMachine) -> str:
    """The instruction the next step will execute."""
    if m.state != S_RUNNING:
        return f"({STATE_NAMES[m.state].lower()})"
    ins = m.peek()
    if isinstance(ins, Fault):
        return f"[red]{_esc(str(ins))}[/red]"
    raw = ", ".join(str(m.get(a)) for a in range(ins.addr, ins.addr + ins.width))
    return f"{ins.addr:05d}: {_esc(ins.describe())}\n       ({raw})"


def render_io(io: QueueIO) -> str:
    pending = " ".join(str(v) for v in io.inputs) or "(empty)"
    return f"[bold]Pending input:[/bold] {pending}"


# ---------------------------------------------------------------------------
# CSS
# ---------------------------------------------------------------------------

DEBUGGER_CSS = """
Screen {
    layout: grid;
    grid-size: 2 3;
    grid-columns: 2fr 1fr;
    grid-rows: 1fr 1fr auto;
}

.panel {
    border: solid $accent;
    border-title-align: left;
    overflow-y: auto;
    height: 100%;
}

#memory-panel { row-span: 2; }

Footer {
    column-span: 2;
}
"""


# ---------------------------------------------------------------------------
# Panel widgets
# ---------------------------------------------------------------------------

class MemoryPanel(ScrollableContainer):
    """Cell window around PC."""
    BORDER_TITLE = "Memory"

    def compose(self) -> ComposeResult:
        yield Static("", id="memory-content")


class StatePanel(ScrollableContainer):
    """Machine state, counters and the next instruction."""
    BORDER_TITLE = "Machine State"

    def compose(self) -> ComposeResult:
        yield Static("", id="state-content")
        yield Static("", id="instruction-content")
        yield Static("", id="io-content")


class OutputPanel(ScrollableContainer):
    """Values produced by OUTPUT."""
    BORDER_TITLE = "Output"

    def compose(self) -> ComposeResult:
        yield RichLog(id="output-log", markup=True, wrap=True)


# ---------------------------------------------------------------------------
# Main debugger app
# ---------------------------------------------------------------------------

class IntcodeDebugger(App):
    """Textual TUI debugger for the Intcode machine."""

    CSS = DEBUGGER_CSS
    TITLE = "Intcode Debugger"

    BINDINGS = [
        Binding("s", "step_1", "Step"),
        Binding("space", "step_1", "Step", show=False),
        Binding("n", "step_10", "x10"),
        Binding("r", "run_to_end", "Run"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, machine: IntcodeMachine, io: QueueIO,
                 auto_run: bool = False):
        super().__init__()
        self.machine = machine
        self.io = io
        self.auto_run = auto_run
        self._output_count = 0
        self._running = False

    def compose(self) -> ComposeResult:
        yield MemoryPanel(id="memory-panel", classes="panel")
        yield StatePanel(id="state-panel", classes="panel")
        yield OutputPanel(id="output-panel", classes="panel")
        yield Footer()

    def on_mount(self) -> None:
        self.refresh_panels()
        if self.auto_run:
            self.action_run_to_end()

    # -------------------------------------------------------------------
    # Panel refresh
    # -------------------------------------------------------------------

    def refresh_panels(self) -> None:
        m = self.machine
        self.query_one("#memory-content", Static).update(render_memory(m))
        self.query_one("#state-content", Static).update(render_state(m))
        self.query_one("#instruction-content", Static).update(
            "\n[bold]Next:[/bold] " + render_instruction(m))
        self.query_one("#io-content", Static).update("\n" + render_io(self.io))

        log = self.query_one("#output-log", RichLog)
        while self._output_count < len(self.io.outputs):
            log.write(str(self.io.outputs[self._output_count]))
            self._output_count += 1

    # -------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------

    def _do_steps(self, count: int) -> None:
        if self._running:
            return
        for _ in range(count):
            if not self.machine.running:
                break
            self.machine.step()
        self.refresh_panels()

    def action_step_1(self) -> None:
        self._do_steps(1)

    def action_step_10(self) -> None:
        self._do_steps(10)

    @work(thread=True, exclusive=True)
    def action_run_to_end(self) -> None:
        """Run until halt or fault in a background thread."""
        if self._running:
            return
        self._running = True
        steps = 0
        try:
            while self.machine.running:
                self.machine.step()
                steps += 1
                if steps % RUN_REFRESH_STEPS == 0:
                    self.call_from_thread(self.refresh_panels)
        finally:
            self._running = False
        self.call_from_thread(self.refresh_panels)


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def build_machine(program, inputs=(), noun: int | None = None,
                  verb: int | None = None) -> tuple[IntcodeMachine, QueueIO]:
    """Machine over scripted I/O, with noun/verb patched when given."""
    io = QueueIO(inputs)
    host = IntcodeHost(program)
    if noun is None and verb is None:
        return host.machine(io), io
    return host.with_inputs(noun, verb, io), io


def main():
    parser = argparse.ArgumentParser(
        description="Intcode machine TUI debugger",
        prog="python -m intcode.debugger",
    )
    parser.add_argument("file", help="Path to a comma-separated program file")
    parser.add_argument("-i", "--input", default="",
                        help="Comma-separated values fed to INPUT, in order")
    parser.add_argument("--noun", type=int, help="Value patched into cell 1")
    parser.add_argument("--verb", type=int, help="Value patched into cell 2")
    parser.add_argument("--run", action="store_true",
                        help="Run to completion immediately (auto-run mode)")
    args = parser.parse_args()

    path = Path(args.file)
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        sys.exit(1)

    try:
        program = parse_program(path.read_text())
        inputs = parse_program(args.input) if args.input.strip() else []
        machine, io = build_machine(program, inputs, args.noun, args.verb)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    app = IntcodeDebugger(machine, io, auto_run=args.run)
    app.run()


if __name__ == "__main__":
    main()
