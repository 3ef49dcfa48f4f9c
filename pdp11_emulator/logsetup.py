"""
PDP-11 Emulator — Logging Setup

Console output goes through rich's RichHandler (WARNING+ by default) so
it stays out of the way of the trace, which is written to stdout. An
optional log file captures everything at DEBUG.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(
    name: str = "pdp11",
    console_level: int = logging.WARNING,
    log_file: Optional[Path] = None,
    rich_console: bool = True,
) -> logging.Logger:
    """Configure the `pdp11` logger tree. Safe to call more than once."""
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # ── File handler: everything ──
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_file), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-7s | %(name)-14s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        logger.addHandler(fh)

    # ── Console handler: stderr, only important stuff by default ──
    if rich_console:
        ch = RichHandler(
            level=console_level,
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
    else:
        ch = logging.StreamHandler(sys.stderr)
        ch.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-7s | %(message)s", datefmt="%H:%M:%S",
        ))
    ch.setLevel(console_level)
    logger.addHandler(ch)

    logger.debug("Logger initialized: %s (console %s, file %s)",
                 name, logging.getLevelName(console_level), log_file)
    return logger
