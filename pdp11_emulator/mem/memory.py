"""
PDP-11 Emulator — Word Memory

Flat store of 16-bit words, byte addressed. Every address is masked to
16 bits and shifted right by one to form the word index, so odd
addresses alias the even word below them.

Default sizing is 16K words (32KB). With a 16-bit address space that
leaves 040000-0177777 unbacked; touching it raises MemoryFault rather
than silently wrapping.
"""

from typing import Iterable, List, Tuple

from ..errors import MemoryFault

MEMORY_WORDS = 16 * 1024


class Memory:
    """Word-addressed memory with byte addresses.

    Loaded words are stored verbatim. Words written during execution are
    always masked to 16 bits.
    """

    def __init__(self, size: int = MEMORY_WORDS):
        if size <= 0:
            raise ValueError(f"Memory size must be positive, got {size}")
        self.size = size
        self._words: List[int] = [0] * size

    def __len__(self) -> int:
        return self.size

    def _index(self, addr: int) -> int:
        addr &= 0xFFFF
        index = addr >> 1
        if index >= self.size:
            raise MemoryFault(addr, self.size)
        return index

    # --- Core read/write ---

    def read(self, addr: int) -> int:
        """Read the word containing byte address `addr`."""
        return self._words[self._index(addr)]

    def write(self, addr: int, value: int):
        """Write a 16-bit word at byte address `addr`."""
        self._words[self._index(addr)] = value & 0xFFFF

    # --- Bulk load ---

    def load(self, words: Iterable[int], base_index: int = 0) -> int:
        """Store `words` consecutively from word `base_index`.

        Bypasses the 16-bit mask: the image is kept exactly as given.
        Returns the number of words stored.
        """
        words = list(words)
        if base_index < 0 or base_index + len(words) > self.size:
            raise MemoryFault((base_index + len(words)) * 2, self.size)
        for i, word in enumerate(words):
            if word < 0:
                raise ValueError(f"Negative word {word} at index {base_index + i}")
            self._words[base_index + i] = word
        return len(words)

    def snapshot(self, count: int, start_index: int = 0) -> Tuple[int, ...]:
        """Copy of `count` words from `start_index`, clipped to memory."""
        end = min(start_index + count, self.size)
        return tuple(self._words[start_index:end])

    def clear(self):
        self._words = [0] * self.size
