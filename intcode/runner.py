"""
runner: puzzle driver programs on top of the Intcode machine.

Usage:
    python -m intcode.runner part1 [-p input/day02/input]
    python -m intcode.runner part2 [-p input/day02/input] [--target N]
    python -m intcode.runner diagnostic [-p input/day05/input]

Exit status: 0 on success, 1 on usage errors, unreadable programs and
faults, 2 when the part2 search finds no answer.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .host import IntcodeHost
from .ports import ConsoleIO


PART1_NOUN = 12
PART1_VERB = 2

PART2_NOUN_RANGE = range(0, 100)
PART2_VERB_RANGE = range(0, 100)
PART2_TARGET_OUTPUT = 19690720

DEFAULT_PROGRAMS = {
    "part1": Path("input/day02/input"),
    "part2": Path("input/day02/input"),
    "diagnostic": Path("input/day05/input"),
}

EXIT_USAGE = 1
EXIT_NOT_FOUND = 2


class _UsageParser(argparse.ArgumentParser):
    """argparse exits 2 on bad usage; 2 means 'no answer' here."""

    def error(self, message):
        self.print_usage(sys.stderr)
        print(f"{self.prog}: error: {message}", file=sys.stderr)
        sys.exit(EXIT_USAGE)


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------

def part1(host: IntcodeHost) -> int:
    m = host.with_inputs(PART1_NOUN, PART1_VERB)
    fault = m.run()
    if fault is not None:
        print(f"Error: {fault} at position {m.pc}", file=sys.stderr)
        return EXIT_USAGE
    print(f"Value at position 0: {m.output()}")
    return 0


def part2(host: IntcodeHost, target: int = PART2_TARGET_OUTPUT) -> int:
    found = host.search(target, PART2_NOUN_RANGE, PART2_VERB_RANGE)
    if found is None:
        print("ERROR: Could not find suitable answer in solution space.")
        return EXIT_NOT_FOUND
    noun, verb = found
    print(f"Solution found (noun = {noun}, verb = {verb}). "
          f"Answer is {100 * noun + verb}")
    return 0


def diagnostic(host: IntcodeHost) -> int:
    m = host.machine(ConsoleIO())
    fault = m.run()
    if fault is not None:
        print(f"Error: {fault} at position {m.pc}", file=sys.stderr)
        return EXIT_USAGE
    print("Program finished")
    return 0


SCENARIOS = {
    "part1": part1,
    "part2": part2,
    "diagnostic": diagnostic,
}


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def main(argv=None) -> int:
    parser = _UsageParser(
        description="Run an Intcode puzzle scenario",
        prog="python -m intcode.runner",
    )
    parser.add_argument("scenario", nargs="?",
                        help="one of: " + ", ".join(SCENARIOS))
    parser.add_argument("-p", "--program",
                        help="Path to the comma-separated program file")
    parser.add_argument("--target", type=int, default=PART2_TARGET_OUTPUT,
                        help="Cell 0 value the part2 search looks for")
    args = parser.parse_args(argv)

    if args.scenario not in SCENARIOS:
        parser.print_usage(sys.stderr)
        return EXIT_USAGE

    path = Path(args.program) if args.program else DEFAULT_PROGRAMS[args.scenario]
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        return EXIT_USAGE
    try:
        host = IntcodeHost.from_file(path)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    scenario = SCENARIOS[args.scenario]
    try:
        if scenario is part2:
            return part2(host, args.target)
        return scenario(host)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
