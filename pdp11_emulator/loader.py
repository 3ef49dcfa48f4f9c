"""
PDP-11 Emulator — Octal Program Loader

Program images are whitespace-separated octal numbers, one word each,
stored from word 0:

    012700 000005 000000

Words above 0177777 are kept as-is. They only matter if execution
reaches them: as instructions they fail to decode, and through
autoincrement addressing they raise AddressRangeViolation.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional, Union

from .mem.memory import Memory

log = logging.getLogger('pdp11.loader')


class LoaderError(ValueError):
    """Raised for a token that is not a non-negative octal number."""

    def __init__(self, token: str, position: int):
        super().__init__(f"Bad octal word {token!r} at position {position}")
        self.token = token
        self.position = position


def parse_octal_words(text: str) -> List[int]:
    """Parse whitespace-separated octal tokens into word values."""
    words = []
    for position, token in enumerate(text.split()):
        try:
            word = int(token, 8)
        except ValueError:
            raise LoaderError(token, position) from None
        if word < 0:
            raise LoaderError(token, position)
        if word > 0o177777:
            log.warning("Word %d (%s) is wider than 16 bits", position, token)
        words.append(word)
    return words


def load_program(memory: Memory, text: str) -> int:
    """Parse `text` and store it from word 0. Returns the word count.

    Raises LoaderError for bad tokens and MemoryFault if the image does
    not fit.
    """
    words = parse_octal_words(text)
    count = memory.load(words)
    log.debug("Loaded %d words (%d bytes)", count, count * 2)
    return count


def read_program(path: Optional[Union[str, Path]] = None) -> str:
    """Read program text from `path`, or stdin when path is None or '-'."""
    if path is None or str(path) == '-':
        return sys.stdin.read()
    return Path(path).read_text(encoding='utf-8')
