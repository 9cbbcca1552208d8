#!/usr/bin/env python3
"""
icrun - Intcode program runner

Usage:
    python icrun.py <program.txt> [--input N ...] [--set ADDR=VALUE ...]
                                  [--dump] [--trace] [--verbose]

The program file holds comma-separated integers. Each --input value is fed
to the program's IN instructions in order; every OUT value is printed on
its own line.

Examples:
    python icrun.py day02.txt --set 1=12 --set 2=2 --dump
    python icrun.py day05.txt --input 1
    python icrun.py prog.txt --trace -v

Exit codes:
    0  program halted
    1  machine fault, unreadable program, or bad arguments
    2  internal error
"""

import argparse
import logging
import sys

from intcode import __version__
from intcode.errors import MachineFault
from intcode.loader import load_program
from intcode.log_setup import setup_logging
from intcode.machine import Machine
from intcode.periph.ports import CollectOutput, QueueInput


def parse_assignment(value: str) -> tuple:
    """Parse ADDR=VALUE into a pair of ints."""
    addr, sep, cell = value.partition('=')
    if not sep:
        raise argparse.ArgumentTypeError(f"expected ADDR=VALUE, got {value!r}")
    try:
        return int(addr), int(cell)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected integers in {value!r}") from None


class _Parser(argparse.ArgumentParser):
    """argparse with usage errors mapped to exit code 1."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="icrun",
        description="Run an Intcode program",
    )
    parser.add_argument("program", help="Program file (comma-separated integers)")
    parser.add_argument("--input", "-i", type=int, action="append", default=[],
                        metavar="N", help="Value for the next IN instruction (repeatable)")
    parser.add_argument("--set", "-s", type=parse_assignment, action="append",
                        default=[], metavar="ADDR=VALUE", dest="assignments",
                        help="Patch a tape cell before running (repeatable)")
    parser.add_argument("--dump", "-d", action="store_true",
                        help="Print the final tape after the program halts")
    parser.add_argument("--trace", "-t", action="store_true",
                        help="Print an instruction trace to stderr")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Increase log verbosity (-v, -vv)")
    parser.add_argument("--log-file", help="Write a DEBUG log to this file")
    parser.add_argument("--version", action="version",
                        version=f"icrun {__version__}")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose >= 2:
        level = logging.DEBUG
    elif args.verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logger = setup_logging(console_level=level, log_file=args.log_file)

    try:
        program = load_program(args.program)
    except FileNotFoundError:
        print(f"Error: File not found: {args.program}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"Error reading {args.program}: {e}", file=sys.stderr)
        return 1

    output = CollectOutput()
    machine = Machine(program, QueueInput(args.input), output)
    machine.enable_trace(args.trace)
    logger.info("Loaded %d cells from %s", len(program), args.program)

    try:
        for addr, value in args.assignments:
            machine.poke(addr, value)
        machine.run()
    except MachineFault as e:
        print(f"Machine fault: {e}", file=sys.stderr)
        if args.dump:
            print(f"Memory: {machine.dump_memory()}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Internal error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 2
    finally:
        for value in output.values:
            print(value)
        if args.trace:
            print(machine.get_trace(), file=sys.stderr)

    if args.dump:
        print(machine.dump_memory())
    return 0


if __name__ == "__main__":
    sys.exit(main())
