#!/usr/bin/env python3
"""
cpu4kit - 4-bit CPU Emulator Toolkit
====================================

One CLI for the emulator:
    cpu4kit run      - Load a program and run it to HLT or the step budget
    cpu4kit demo     - Run the built-in example programs with traces
    cpu4kit list     - List the built-in example programs
    cpu4kit dump     - Load a program and print the 16-cell memory image

Program input:
    .bin (or any other extension)  raw bytes
    .hex / .txt                    hex text, e.g. "15 23 50 B0 F0"
    --hex                          the argument itself is hex text

Usage:
    python cpu4kit.py <command> [options]
    python cpu4kit.py <command> --help

Examples:
    python cpu4kit.py run add.bin
    python cpu4kit.py run --hex "15 B0 D0 81 71 F0" --max-steps 20 --trace
    python cpu4kit.py run loop.hex --break 4
    python cpu4kit.py demo countdown
    python cpu4kit.py dump --hex "1A 3F 10 B0 AF B0 F0"

Exit codes: 0 = halted, 1 = error, 2 = step budget exhausted or breakpoint.
"""

import argparse
import logging
import sys
from pathlib import Path

from cpu4_emulator import __version__
from cpu4_emulator.config import DEFAULT_MAX_STEPS
from cpu4_emulator.emu import CPU4Emulator, StopReason
from cpu4_emulator.log_setup import setup_logging
from cpu4_emulator.programs import (
    EXAMPLE_PROGRAMS,
    EXAMPLES_BY_NAME,
    ProgramFormatError,
    parse_program,
)
from cpu4_emulator.trace import format_event, format_output, format_state

log = logging.getLogger("cpu4_emulator.cli")

TEXT_SUFFIXES = (".hex", ".txt")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_STOPPED = 2


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="cpu4kit",
        description="4-bit CPU emulator toolkit - run, trace and inspect programs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""commands:
  run        Run a program to HLT or the step budget
  demo       Run the built-in example programs
  list       List the built-in example programs
  dump       Print the memory image of a loaded program
""",
    )
    parser.add_argument("--version", action="version", version=f"cpu4kit {__version__}")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Increase log verbosity (-v info, -vv debug)")
    parser.add_argument("--log-file", default=None, help="Also write a DEBUG log here")
    sub = parser.add_subparsers(dest="command", metavar="command")

    # ── run ──────────────────────────────────────────────────────────────
    p_run = sub.add_parser("run", help="Run a program to HLT or the step budget")
    p_run.add_argument("program", help="Program file, or hex text with --hex")
    p_run.add_argument("--hex", action="store_true",
                       help="Treat PROGRAM as hex text instead of a file name")
    p_run.add_argument("--max-steps", type=int, default=DEFAULT_MAX_STEPS,
                       help=f"Step budget (default: {DEFAULT_MAX_STEPS})")
    p_run.add_argument("--break", dest="breakpoints", action="append", default=[],
                       metavar="ADDR", help="Breakpoint address (hex), repeatable")
    p_run.add_argument("--trace", action="store_true", help="Print every executed step")

    # ── demo ─────────────────────────────────────────────────────────────
    p_demo = sub.add_parser("demo", help="Run the built-in example programs")
    p_demo.add_argument("name", nargs="?", choices=list(EXAMPLES_BY_NAME),
                        help="Run only this example")

    # ── list ─────────────────────────────────────────────────────────────
    sub.add_parser("list", help="List the built-in example programs")

    # ── dump ─────────────────────────────────────────────────────────────
    p_dump = sub.add_parser("dump", help="Print the memory image of a loaded program")
    p_dump.add_argument("program", help="Program file, or hex text with --hex")
    p_dump.add_argument("--hex", action="store_true",
                        help="Treat PROGRAM as hex text instead of a file name")

    # ── Parse and dispatch ───────────────────────────────────────────────
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return EXIT_OK

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    setup_logging(console_level=level, log_file=args.log_file)

    handler = COMMANDS[args.command]
    try:
        return handler(args)
    except ProgramFormatError as e:
        log.error("Bad program text: %s", e)
        return EXIT_ERROR
    except OSError as e:
        log.error("Cannot read program: %s", e)
        return EXIT_ERROR


# ═════════════════════════════════════════════════════════════════════════════
# COMMAND IMPLEMENTATIONS
# ═════════════════════════════════════════════════════════════════════════════

def _parse_hex(s):
    """Parse hex string with optional 0x or $ prefix."""
    s = s.strip()
    if s.startswith("$"):
        s = s[1:]
    return int(s, 16)


def _read_program(args) -> bytes:
    if args.hex:
        return parse_program(args.program)
    path = Path(args.program)
    if path.suffix.lower() in TEXT_SUFFIXES:
        return parse_program(path.read_text(encoding="utf-8"))
    return path.read_bytes()


def _execute(emu, max_steps, trace):
    """Run emu, printing each step (when tracing) and every OUT value."""
    def show(event):
        if trace:
            print(format_event(event))
        elif event.output is not None:
            print(f"OUT {format_output(event)}")

    emu.on_event = show
    try:
        result = emu.run(max_steps)
    finally:
        emu.on_event = None

    if result.reason is StopReason.TIMEOUT:
        print("Max steps reached!")
    elif result.reason is StopReason.BREAK:
        print(f"Breakpoint at PC={emu.regs.PC:x}")
    return result


# ── run ──────────────────────────────────────────────────────────────────
def cmd_run(args):
    program = _read_program(args)
    try:
        breakpoints = [_parse_hex(b) for b in args.breakpoints]
    except ValueError as e:
        log.error("Bad breakpoint address: %s", e)
        return EXIT_ERROR
    if args.max_steps < 0:
        log.error("--max-steps must be >= 0")
        return EXIT_ERROR

    emu = CPU4Emulator()
    emu.load_program(program)
    for addr in breakpoints:
        emu.add_breakpoint(addr)

    result = _execute(emu, args.max_steps, args.trace)
    print()
    print(format_state(emu.snapshot()))
    return EXIT_OK if result.halted else EXIT_STOPPED


# ── demo ─────────────────────────────────────────────────────────────────
def cmd_demo(args):
    if args.name:
        examples = [EXAMPLES_BY_NAME[args.name]]
    else:
        examples = EXAMPLE_PROGRAMS

    emu = CPU4Emulator()
    print("===== 4-Bit CPU Simulator =====")
    for example in examples:
        print(f"\n=== {example.title} ===")
        emu.reset()
        emu.load_program(example.code)
        _execute(emu, example.max_steps, trace=True)
        print()
        print(format_state(emu.snapshot()))
    return EXIT_OK


# ── list ─────────────────────────────────────────────────────────────────
def cmd_list(args):
    for example in EXAMPLE_PROGRAMS:
        code = ' '.join(f"{b:02X}" for b in example.code)
        print(f"{example.name:10s} {example.title:18s} steps={example.max_steps:<4d} {code}")
    return EXIT_OK


# ── dump ─────────────────────────────────────────────────────────────────
def cmd_dump(args):
    program = _read_program(args)
    emu = CPU4Emulator()
    count = emu.load_program(program)
    print(f"Loaded {count} of {len(program)} bytes")
    print(emu.mem.hexdump())
    return EXIT_OK


# ═════════════════════════════════════════════════════════════════════════════
# COMMAND DISPATCH TABLE
# ═════════════════════════════════════════════════════════════════════════════

COMMANDS = {
    "run": cmd_run,
    "demo": cmd_demo,
    "list": cmd_list,
    "dump": cmd_dump,
}


if __name__ == "__main__":
    sys.exit(main())
