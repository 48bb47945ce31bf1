"""Command-line entry point that loads a program and runs it."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from nvm.machine import Machine

STEPS = 20


def main(argv=None) -> int:
    """Load the program file named on the command line and run a fixed number of steps."""
    parser = argparse.ArgumentParser(prog="nvm", description="Run a program on the virtual machine.")
    parser.add_argument("file", type=Path, help="program image to load")
    args = parser.parse_args(argv)

    machine = Machine()
    try:
        with args.file.open("rb") as stream:
            machine.load_program(stream)
        for _ in range(STEPS):
            instruction = machine.step()
            print(f"Running instruction: {instruction!r}")
    except FileNotFoundError:
        print(f"nvm: File not found: {args.file}", file=sys.stderr)
        return 1
    except (ValueError, IndexError) as exc:
        print(f"nvm: {exc}", file=sys.stderr)
        return 1
    return 0