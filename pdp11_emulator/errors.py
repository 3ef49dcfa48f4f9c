"""
PDP-11 Emulator — Fatal Run Errors

Every condition that stops a run abnormally is an EmulatorError. The
engine catches the family in step() and turns it into the run's single
terminal StopReason, so nothing below the loop needs to know how a fault
is reported.

  InvalidOpcode          — fetched word matches no decode layout
  AddressRangeViolation  — autoincrement operand outside 16-bit range
  MemoryFault            — word index outside the allocated memory
"""

from typing import Optional


class EmulatorError(Exception):
    """Base class for fatal run errors.

    `pc` is the address the failing instruction was fetched from. It is
    filled in by the engine when the raising code does not know it.
    """

    def __init__(self, message: str, pc: Optional[int] = None):
        super().__init__(message)
        self.pc = pc


class InvalidOpcode(EmulatorError):
    """Raised when a word matches none of the three decode layouts."""

    def __init__(self, word: int, pc: Optional[int] = None):
        super().__init__(f"Invalid instruction 0{word:06o}", pc)
        self.word = word


class AddressRangeViolation(EmulatorError):
    """Raised when an autoincrement address or value exceeds 0177777."""

    def __init__(self, what: str, value: int, pc: Optional[int] = None):
        super().__init__(f"Autoincrement {what} 0{value:o} out of range", pc)
        self.what = what
        self.value = value


class MemoryFault(EmulatorError):
    """Raised when a byte address maps past the end of memory."""

    def __init__(self, address: int, size: int, pc: Optional[int] = None):
        super().__init__(
            f"Address 0{address:06o} outside memory (0-0{size * 2 - 2:06o})",
            pc)
        self.address = address
        self.size = size
