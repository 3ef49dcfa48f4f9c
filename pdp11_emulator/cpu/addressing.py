"""
PDP-11 Emulator — Operand Addressing Modes

resolve_operand() turns a (mode, register) pair into an OperandPhrase,
applying the mode's side effects to the register file and the
statistics counters:

  mode  name                     address          register    counters
  ────  ───────────────────────  ───────────────  ──────────  ──────────────
  0     Register                 —                —           —
  1     Register deferred        R                —           read +1
  2     Autoincrement            R                R += 2      fetch +1 if PC
  3     Autoincrement deferred   M[R]             R += 2      read +1
  4     Autodecrement            R - 2            R -= 2      read +1
  5     Autodecrement deferred   M[R - 2]         R -= 2      read +1
  6     Index                    R + M[PC]        PC += 2     fetch +1, read +3
  7     Index deferred           M[R + M[PC]]     PC += 2     fetch +1, read +3

Mode 2 on the PC is the immediate-operand idiom, which is why it counts
as an instruction word fetched rather than a data word read. Modes 6/7
count three data words for the displacement fetch plus operand access.
"""

from dataclasses import dataclass
from typing import Optional

from .decoder import AddressMode
from .regs import PC, Registers
from ..errors import AddressRangeViolation
from ..mem.memory import Memory
from ..stats import Statistics

ADDRESS_LIMIT = 0o200000


@dataclass(frozen=True)
class OperandPhrase:
    """One resolved operand. `address` is None for register mode."""
    mode: AddressMode
    reg: int
    address: Optional[int]
    value: int


def _register(regs, mem, stats, reg):
    return None, regs[reg]


def _register_deferred(regs, mem, stats, reg):
    addr = regs[reg]
    stats.data_words_read += 1
    return addr, mem.read(addr)


def _autoincrement(regs, mem, stats, reg):
    if reg == PC:
        stats.instruction_words_fetched += 1
    addr = regs[reg]
    if addr >= ADDRESS_LIMIT:
        raise AddressRangeViolation('address', addr)
    value = mem.read(addr)
    if value >= ADDRESS_LIMIT:
        raise AddressRangeViolation('value', value)
    regs.add(reg, 2)
    return addr, value


def _autoincrement_deferred(regs, mem, stats, reg):
    stats.data_words_read += 1
    addr = mem.read(regs[reg]) & 0xFFFF
    value = mem.read(addr)
    regs.add(reg, 2)
    return addr, value


def _autodecrement(regs, mem, stats, reg):
    stats.data_words_read += 1
    addr = regs.add(reg, -2)
    return addr, mem.read(addr)


def _autodecrement_deferred(regs, mem, stats, reg):
    stats.data_words_read += 1
    addr = mem.read(regs.add(reg, -2)) & 0xFFFF
    return addr, mem.read(addr)


def _index_address(regs, mem, stats, reg):
    stats.instruction_words_fetched += 1
    stats.data_words_read += 3
    displacement = mem.read(regs.PC)
    addr = (regs[reg] + displacement) & 0xFFFF
    regs.add(PC, 2)
    return addr


def _index(regs, mem, stats, reg):
    addr = _index_address(regs, mem, stats, reg)
    return addr, mem.read(addr)


def _index_deferred(regs, mem, stats, reg):
    addr = mem.read(_index_address(regs, mem, stats, reg)) & 0xFFFF
    return addr, mem.read(addr)


_MODE_HANDLERS = {
    AddressMode.REGISTER: _register,
    AddressMode.REGISTER_DEFERRED: _register_deferred,
    AddressMode.AUTOINCREMENT: _autoincrement,
    AddressMode.AUTOINCREMENT_DEFERRED: _autoincrement_deferred,
    AddressMode.AUTODECREMENT: _autodecrement,
    AddressMode.AUTODECREMENT_DEFERRED: _autodecrement_deferred,
    AddressMode.INDEX: _index,
    AddressMode.INDEX_DEFERRED: _index_deferred,
}


def resolve_operand(mode: int, reg: int, regs: Registers, mem: Memory,
                    stats: Statistics) -> OperandPhrase:
    """Resolve one operand, applying the mode's side effects.

    Raises AddressRangeViolation (mode 2) or MemoryFault (any memory
    mode).
    """
    mode = AddressMode(mode)
    addr, value = _MODE_HANDLERS[mode](regs, mem, stats, reg)
    return OperandPhrase(mode, reg, addr, value)
