"""
PDP-11 Emulator — Instruction Decoder

The opcode space is not uniformly partitioned, so a word is matched
against three field layouts in a fixed order. The first layout whose
opcode table contains the word's opcode field wins.

  Layout            opcode bits   recognised (octal opcode)
  ───────────────   ───────────   ───────────────────────────────────
  DOUBLE_OPERAND    15–12         MOV 01, CMP 02, ADD 06, SUB 16
  BYTE_OFFSET       15–6          BR 004, BEQ 014, ASR 062, ASL 063
  SOB_BNE           15–9          SOB 077, BNE 001

Word 0 is HALT and is checked before any layout.

Branch offsets overlap the opcode bits of the narrower layouts. This is
not smoothed over: a BEQ whose offset has bit 6 or 7 set falls out of
BYTE_OFFSET and is picked up by SOB_BNE as BNE, and a BR with such an
offset matches nothing at all.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional

from .alu import sign_extend
from ..errors import InvalidOpcode


class AddressMode(IntEnum):
    REGISTER = 0
    REGISTER_DEFERRED = 1
    AUTOINCREMENT = 2
    AUTOINCREMENT_DEFERRED = 3
    AUTODECREMENT = 4
    AUTODECREMENT_DEFERRED = 5
    INDEX = 6
    INDEX_DEFERRED = 7


class Layout(Enum):
    HALT = 'HALT'
    DOUBLE_OPERAND = 'DOUBLE_OPERAND'
    BYTE_OFFSET = 'BYTE_OFFSET'
    SOB_BNE = 'SOB_BNE'


class Opcode(Enum):
    HALT = 'HALT'
    MOV = 'MOV'
    CMP = 'CMP'
    ADD = 'ADD'
    SUB = 'SUB'
    BR = 'BR'
    BEQ = 'BEQ'
    BNE = 'BNE'
    SOB = 'SOB'
    ASL = 'ASL'
    ASR = 'ASR'


# word >> 12
DOUBLE_OPERAND_OPCODES = {
    0o01: Opcode.MOV,
    0o02: Opcode.CMP,
    0o06: Opcode.ADD,
    0o16: Opcode.SUB,
}

# word >> 6
BYTE_OFFSET_OPCODES = {
    0o004: Opcode.BR,
    0o014: Opcode.BEQ,
    0o062: Opcode.ASR,
    0o063: Opcode.ASL,
}

# word >> 9
SOB_BNE_OPCODES = {
    0o077: Opcode.SOB,
    0o001: Opcode.BNE,
}

BRANCHES = frozenset({Opcode.BR, Opcode.BEQ, Opcode.BNE, Opcode.SOB})


@dataclass(frozen=True)
class Instruction:
    """Decoded view of one instruction word.

    The four mode/register fields are always cut from the full word;
    which of them an opcode uses is up to its handler (ASL/ASR use the
    destination pair, SOB uses the source register). `offset` is the
    branch displacement in words (sign-extended, except SOB whose
    6-bit field is an unsigned backward distance), `raw_offset` the field
    as encoded.
    """
    word: int
    opcode: Opcode
    layout: Layout
    src_mode: AddressMode
    src_reg: int
    dst_mode: AddressMode
    dst_reg: int
    offset: Optional[int] = None
    raw_offset: Optional[int] = None

    @property
    def is_branch(self) -> bool:
        return self.opcode in BRANCHES


def _instruction(word: int, opcode: Opcode, layout: Layout,
                 raw_offset: Optional[int] = None,
                 signed: bool = True) -> Instruction:
    offset = raw_offset
    if raw_offset is not None and signed:
        offset = sign_extend(raw_offset, 8)
    return Instruction(
        word=word,
        opcode=opcode,
        layout=layout,
        src_mode=AddressMode((word >> 9) & 0o7),
        src_reg=(word >> 6) & 0o7,
        dst_mode=AddressMode((word >> 3) & 0o7),
        dst_reg=word & 0o7,
        offset=offset,
        raw_offset=raw_offset,
    )


def decode(word: int) -> Instruction:
    """Decode a 16-bit instruction word.

    Raises InvalidOpcode if no layout matches. A loaded word wider than
    16 bits has an opcode field outside every table, so it is invalid.
    """
    if word == 0:
        return _instruction(word, Opcode.HALT, Layout.HALT)

    opcode = DOUBLE_OPERAND_OPCODES.get(word >> 12)
    if opcode is not None:
        return _instruction(word, opcode, Layout.DOUBLE_OPERAND)

    opcode = BYTE_OFFSET_OPCODES.get(word >> 6)
    if opcode is not None:
        if opcode in BRANCHES:
            return _instruction(word, opcode, Layout.BYTE_OFFSET,
                                raw_offset=word & 0o377)
        return _instruction(word, opcode, Layout.BYTE_OFFSET)

    opcode = SOB_BNE_OPCODES.get(word >> 9)
    if opcode is Opcode.SOB:
        return _instruction(word, opcode, Layout.SOB_BNE,
                            raw_offset=word & 0o77, signed=False)
    if opcode is Opcode.BNE:
        return _instruction(word, opcode, Layout.SOB_BNE,
                            raw_offset=word & 0o377)

    raise InvalidOpcode(word)
