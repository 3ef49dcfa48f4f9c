"""
PDP-11 Emulator — Register File + Condition Codes

Register model:
  R0–R5  — general registers (16-bit)
  R6     — SP, stack pointer by convention
  R7     — PC, program counter
  CC     — condition codes, laid out as the low nibble of the PSW:
           bit 3: N (Negative — bit 15 of result)
           bit 2: Z (Zero — result is zero)
           bit 1: V (Overflow — signed overflow)
           bit 0: C (Carry — carry/borrow out of bit 15)

Every register update wraps modulo 65536.
"""

from typing import List, Tuple

# CC bit masks
CC_N = 0x08
CC_Z = 0x04
CC_V = 0x02
CC_C = 0x01

SP = 6
PC = 7


class Registers:
    """PDP-11 register file.

    Registers are indexed 0–7 (`regs[7]`); `SP`/`PC` are aliases for
    R6/R7. Writes are masked to 16 bits.
    """

    __slots__ = ('R', 'CC')

    def __init__(self):
        self.R: List[int] = [0] * 8
        self.CC: int = 0

    def __getitem__(self, index: int) -> int:
        return self.R[index]

    def __setitem__(self, index: int, value: int):
        self.R[index] = value & 0xFFFF

    @property
    def PC(self) -> int:
        return self.R[PC]

    @PC.setter
    def PC(self, value: int):
        self.R[PC] = value & 0xFFFF

    @property
    def SP(self) -> int:
        return self.R[SP]

    @SP.setter
    def SP(self, value: int):
        self.R[SP] = value & 0xFFFF

    def add(self, index: int, delta: int) -> int:
        """Add `delta` to a register with wraparound; return the new value."""
        self.R[index] = (self.R[index] + delta) & 0xFFFF
        return self.R[index]

    # --- CC flag access ---

    def set_NZVC(self, flags: int):
        """Set N, Z, V, C flags."""
        self.CC = flags & 0x0F

    def set_NZV(self, flags: int):
        """Set N, Z, V flags. Preserves C."""
        self.CC = (self.CC & CC_C) | (flags & 0x0E)

    @property
    def negative(self) -> bool:
        return bool(self.CC & CC_N)

    @property
    def zero(self) -> bool:
        return bool(self.CC & CC_Z)

    @property
    def overflow(self) -> bool:
        return bool(self.CC & CC_V)

    @property
    def carry(self) -> bool:
        return bool(self.CC & CC_C)

    def nzvc(self) -> Tuple[int, int, int, int]:
        """Flags as a 0/1 tuple in N, Z, V, C order."""
        return (int(self.negative), int(self.zero),
                int(self.overflow), int(self.carry))

    def snapshot(self) -> Tuple[int, ...]:
        return tuple(self.R)

    # --- Display ---

    def display(self) -> str:
        """One-line register state for log messages."""
        regs = ' '.join(f"R{i}={v:06o}" for i, v in enumerate(self.R))
        cc = ''.join(c if self.CC & (0x08 >> i) else '.'
                     for i, c in enumerate('NZVC'))
        return f"{regs} [{cc}]"

    def reset(self):
        """Zero all registers and flags."""
        self.R = [0] * 8
        self.CC = 0
