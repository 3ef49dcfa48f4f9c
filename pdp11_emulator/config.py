"""
PDP-11 Emulator — Run Configuration

Settings that shape a simulator run from the command line. None of them
change execution semantics: trace mode and the dump size only affect
output, the log settings only affect diagnostics, and memory size only
moves the MemoryFault boundary.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .mem.memory import MEMORY_WORDS
from .trace import TraceMode

DUMP_WORDS = 20                   # words shown after halt in verbose mode
CONSOLE_LOG_LEVEL = logging.WARNING


@dataclass
class RunConfig:
    program: Optional[Path] = None    # None → stdin
    trace_mode: TraceMode = TraceMode.OFF
    memory_words: int = MEMORY_WORDS
    dump_words: int = DUMP_WORDS
    log_level: int = CONSOLE_LOG_LEVEL
    log_file: Optional[Path] = None
    rich_console: bool = True

    @classmethod
    def from_args(cls, args) -> 'RunConfig':
        """Build from an argparse namespace produced by pdp11sim."""
        if args.verbose:
            mode = TraceMode.VERBOSE
        elif args.trace:
            mode = TraceMode.TRACE
        else:
            mode = TraceMode.OFF
        return cls(
            program=Path(args.program) if args.program not in (None, '-') else None,
            trace_mode=mode,
            memory_words=args.memory_words,
            dump_words=args.dump_words,
            log_level=logging.getLevelName(args.log_level.upper()),
            log_file=Path(args.log_file) if args.log_file else None,
            rich_console=not args.no_rich,
        )
