"""
Decoder tests — field extraction and the three-layout priority.

Words are hand-assembled in octal; the layout each one should land in
is noted next to it.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from pdp11_emulator.cpu.decoder import AddressMode, Layout, Opcode, decode
from pdp11_emulator.errors import InvalidOpcode


class TestHalt:
    def test_zero_is_halt(self):
        instr = decode(0)
        assert instr.opcode is Opcode.HALT
        assert instr.layout is Layout.HALT
        assert not instr.is_branch


class TestDoubleOperand:
    @pytest.mark.parametrize("word, opcode", [
        (0o010001, Opcode.MOV),
        (0o020001, Opcode.CMP),
        (0o060001, Opcode.ADD),
        (0o160001, Opcode.SUB),
    ])
    def test_opcodes(self, word, opcode):
        instr = decode(word)
        assert instr.opcode is opcode
        assert instr.layout is Layout.DOUBLE_OPERAND
        assert instr.offset is None

    def test_fields(self):
        """MOV @(R3)+, -(R5): sm 3, sr 3, dm 4, dr 5"""
        instr = decode(0o013345)
        assert instr.src_mode is AddressMode.AUTOINCREMENT_DEFERRED
        assert instr.src_reg == 3
        assert instr.dst_mode is AddressMode.AUTODECREMENT
        assert instr.dst_reg == 5

    def test_immediate_source(self):
        """MOV #n, R1 → source is (PC)+"""
        instr = decode(0o012701)
        assert instr.src_mode is AddressMode.AUTOINCREMENT
        assert instr.src_reg == 7
        assert instr.dst_mode is AddressMode.REGISTER
        assert instr.dst_reg == 1


class TestByteOffset:
    def test_br(self):
        instr = decode(0o000405)      # BR .+5 words
        assert instr.opcode is Opcode.BR
        assert instr.layout is Layout.BYTE_OFFSET
        assert instr.offset == 5
        assert instr.raw_offset == 0o5
        assert instr.is_branch

    def test_beq(self):
        instr = decode(0o001403)
        assert instr.opcode is Opcode.BEQ
        assert instr.offset == 3

    def test_asl(self):
        instr = decode(0o006301)      # ASL R1
        assert instr.opcode is Opcode.ASL
        assert instr.dst_mode is AddressMode.REGISTER
        assert instr.dst_reg == 1
        assert instr.offset is None

    def test_asr_deferred(self):
        instr = decode(0o006211)      # ASR (R1)
        assert instr.opcode is Opcode.ASR
        assert instr.dst_mode is AddressMode.REGISTER_DEFERRED
        assert instr.dst_reg == 1


class TestSobBne:
    def test_sob(self):
        instr = decode(0o077201)      # SOB R2, 1
        assert instr.opcode is Opcode.SOB
        assert instr.layout is Layout.SOB_BNE
        assert instr.src_reg == 2
        assert instr.offset == 1

    def test_sob_offset_is_unsigned(self):
        instr = decode(0o077277)
        assert instr.raw_offset == 0o77
        assert instr.offset == 0o77

    def test_sob_offset_high_half(self):
        assert decode(0o077241).offset == 0o41

    def test_bne_forward(self):
        instr = decode(0o001003)
        assert instr.opcode is Opcode.BNE
        assert instr.offset == 3

    def test_bne_backward(self):
        instr = decode(0o001375)      # BNE .-3 words
        assert instr.opcode is Opcode.BNE
        assert instr.raw_offset == 0o375
        assert instr.offset == -3


class TestLayoutOverlap:
    """Offset bits 6-7 belong to the opcode field of the byte-offset layout."""

    def test_beq_with_high_offset_decodes_as_bne(self):
        instr = decode(0o001500)
        assert instr.opcode is Opcode.BNE
        assert instr.raw_offset == 0o100

    def test_br_with_high_offset_is_invalid(self):
        with pytest.raises(InvalidOpcode):
            decode(0o000500)

    def test_br_backward_is_invalid(self):
        with pytest.raises(InvalidOpcode):
            decode(0o000777)


class TestInvalid:
    @pytest.mark.parametrize("word", [
        0o000001,   # nothing in any table
        0o050000,   # double-operand opcode 05
        0o170000,   # double-operand opcode 17
        0o006400,   # byte-offset opcode 064
        0o076000,   # SOB/BNE opcode 076
        0o200000,   # wider than 16 bits
    ])
    def test_raises(self, word):
        with pytest.raises(InvalidOpcode) as exc:
            decode(word)
        assert exc.value.word == word
