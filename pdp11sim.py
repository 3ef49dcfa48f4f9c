#!/usr/bin/env python3
"""
pdp11sim — PDP-11 subset simulator CLI

Usage:
    python pdp11sim.py [-t | -v] [program.oct] [--memory-words N]
                       [--dump-words N] [--log-level LEVEL] [--log-file PATH]

The program image is whitespace-separated octal words, read from the
named file or from stdin:

    python pdp11sim.py -t < loop.oct
    python pdp11sim.py -v loop.oct
    echo "010001 000000" | python pdp11sim.py

Exit status is 0 when the program halts, 1 on a bad instruction, a
memory or address fault, or an unreadable program image.
"""

import argparse
import logging
import sys

from pdp11_emulator import __version__
from pdp11_emulator.config import DUMP_WORDS, RunConfig
from pdp11_emulator.emu import PDP11Emulator, StopReason
from pdp11_emulator.errors import MemoryFault
from pdp11_emulator.loader import LoaderError, read_program
from pdp11_emulator.logsetup import setup_logging
from pdp11_emulator.mem.memory import MEMORY_WORDS
from pdp11_emulator.trace import TraceRenderer

log = logging.getLogger('pdp11.cli')

LOG_LEVELS = ['debug', 'info', 'warning', 'error', 'critical']


def positive_int(value: str) -> int:
    """argparse type: integer > 0 (decimal, or 0o/0x prefixed)."""
    try:
        n = int(value, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}")
    if n <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value!r}")
    return n


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdp11sim",
        description="PDP-11 instruction subset simulator",
        epilog="Instructions: MOV CMP ADD SUB ASL ASR BR BEQ BNE SOB HALT",
    )
    parser.add_argument("program", nargs="?", default=None,
                        help="Octal program image (default: stdin)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("-t", "--trace", action="store_true",
                      help="Print an instruction trace")
    mode.add_argument("-v", "--verbose", action="store_true",
                      help="Trace plus registers, operands, flags and a memory dump")
    parser.add_argument("--memory-words", type=positive_int, default=MEMORY_WORDS,
                        help=f"Memory size in 16-bit words (default: {MEMORY_WORDS})")
    parser.add_argument("--dump-words", type=positive_int, default=DUMP_WORDS,
                        help=f"Words shown in the verbose memory dump (default: {DUMP_WORDS})")
    parser.add_argument("--log-level", choices=LOG_LEVELS, default="warning",
                        help="Console log level (default: warning)")
    parser.add_argument("--log-file", default=None,
                        help="Also write a DEBUG log to this file")
    parser.add_argument("--no-rich", action="store_true",
                        help="Plain stderr logging instead of rich")
    parser.add_argument("--version", action="version",
                        version=f"pdp11sim {__version__}")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = RunConfig.from_args(args)
    setup_logging(console_level=config.log_level, log_file=config.log_file,
                  rich_console=config.rich_console)

    try:
        text = read_program(config.program)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error reading {config.program}: {e}", file=sys.stderr)
        return 1

    emu = PDP11Emulator(config.memory_words)
    renderer = TraceRenderer(config.trace_mode)

    try:
        count = emu.load_text(text)
    except (LoaderError, MemoryFault) as e:
        print(f"Error loading program: {e}", file=sys.stderr)
        return 1
    log.info("Loaded %d words from %s", count, config.program or "stdin")

    renderer.loaded(emu.mem.snapshot(count), str(config.program or "stdin"))
    renderer.begin()
    emu.add_trace_sink(renderer)

    reason = emu.run()
    if reason is not StopReason.HALT:
        renderer.failure(emu.fault)
        return 1

    renderer.finish(emu.stats, emu.mem.snapshot(config.dump_words))
    return 0


if __name__ == "__main__":
    sys.exit(main())
