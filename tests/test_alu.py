"""
Condition code tests for the ALU functions.

Boundary operands: 0, 0100000 (sign bit only), 0177777 (all ones) and
0077777 (largest positive). Expected flags are written out by hand
from the N/Z/V/C rules of each opcode.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from pdp11_emulator.cpu import alu
from pdp11_emulator.cpu.regs import CC_N, CC_Z, CC_V, CC_C

BOUNDARY = [0, 0o100000, 0o177777, 0o077777]


def _nzvc(flags: int) -> tuple:
    return (int(bool(flags & CC_N)), int(bool(flags & CC_Z)),
            int(bool(flags & CC_V)), int(bool(flags & CC_C)))


class TestSignExtend:
    def test_positive_8bit(self):
        assert alu.sign_extend(0o177, 8) == 0o177

    def test_negative_8bit(self):
        assert alu.sign_extend(0o377, 8) == -1
        assert alu.sign_extend(0o200, 8) == -128

    def test_6bit(self):
        assert alu.sign_extend(0o37, 6) == 31
        assert alu.sign_extend(0o77, 6) == -1
        assert alu.sign_extend(0o40, 6) == -32

    def test_ignores_higher_bits(self):
        assert alu.sign_extend(0o1001, 8) == 1


class TestMov:
    @pytest.mark.parametrize("src, expected", [
        (0,        (0, 1, 0, 0)),
        (0o100000, (1, 0, 0, 0)),
        (0o177777, (1, 0, 0, 0)),
        (0o077777, (0, 0, 0, 0)),
    ])
    def test_flags(self, src, expected):
        result, flags = alu.mov16(src)
        assert result == src
        assert _nzvc(flags) == expected

    def test_never_reports_carry(self):
        for src in BOUNDARY:
            _, flags = alu.mov16(src)
            assert not flags & CC_C


class TestAdd:
    @pytest.mark.parametrize("src, dst, result, expected", [
        (0,        0,        0,        (0, 1, 0, 0)),
        (0o077777, 1,        0o100000, (1, 0, 1, 0)),
        (0o177777, 1,        0,        (0, 1, 0, 1)),
        (0o100000, 0o100000, 0,        (0, 1, 1, 1)),
        (0o177777, 0o177777, 0o177776, (1, 0, 0, 1)),
        (0o077777, 0o077777, 0o177776, (1, 0, 1, 0)),
        (0o100000, 0o077777, 0o177777, (1, 0, 0, 0)),
    ])
    def test_flags(self, src, dst, result, expected):
        r, flags = alu.add16(src, dst)
        assert r == result
        assert _nzvc(flags) == expected

    def test_result_wraps(self):
        for src in BOUNDARY:
            for dst in BOUNDARY:
                r, _ = alu.add16(src, dst)
                assert 0 <= r <= 0o177777
                assert r == (src + dst) % 0o200000


class TestCmp:
    @pytest.mark.parametrize("src, dst, result, expected", [
        (0,        0,        0,        (0, 1, 0, 0)),
        (0,        1,        0o177777, (1, 0, 0, 1)),
        (0o177777, 1,        0o177776, (1, 0, 1, 0)),
        (1,        0o177777, 2,        (0, 0, 1, 1)),
        (0o100000, 1,        0o077777, (0, 0, 0, 0)),
        (0o077777, 0o177777, 0o100000, (1, 0, 0, 1)),
        (0o100000, 0o100000, 0,        (0, 1, 0, 0)),
    ])
    def test_flags(self, src, dst, result, expected):
        r, flags = alu.cmp16(src, dst)
        assert r == result
        assert _nzvc(flags) == expected


class TestSub:
    @pytest.mark.parametrize("src, dst, result, expected", [
        (1,        0,        0o177777, (1, 0, 0, 1)),
        (1,        0o100000, 0o077777, (0, 0, 1, 0)),
        (0o100000, 0,        0o100000, (1, 0, 1, 1)),
        (0o077777, 0o077777, 0,        (0, 1, 0, 0)),
        (3,        5,        2,        (0, 0, 0, 0)),
    ])
    def test_flags(self, src, dst, result, expected):
        r, flags = alu.sub16(src, dst)
        assert r == result
        assert _nzvc(flags) == expected

    def test_is_cmp_with_operands_swapped_for_result(self):
        for src in BOUNDARY:
            for dst in BOUNDARY:
                assert alu.sub16(src, dst)[0] == alu.cmp16(dst, src)[0]


class TestShifts:
    def test_operand_defaults_to_value(self):
        assert alu.asl16(0o100001, None) == alu.asl16(0o100001)
        assert alu.asr16(0o100001, None) == alu.asr16(0o100001)

    def test_carry_from_operand(self):
        r, flags = alu.asl16(0o102, operand=0o100000)
        assert r == 0o204
        assert _nzvc(flags) == (0, 0, 1, 1)

    @pytest.mark.parametrize("val, result, expected", [
        (0,        0,        (0, 1, 0, 0)),
        (0o077777, 0o177776, (1, 0, 1, 0)),
        (0o100000, 0,        (0, 1, 1, 1)),
        (0o177777, 0o177776, (1, 0, 0, 1)),
    ])
    def test_asl(self, val, result, expected):
        r, flags = alu.asl16(val)
        assert r == result
        assert _nzvc(flags) == expected

    @pytest.mark.parametrize("val, result, expected", [
        (0,        0,        (0, 1, 0, 0)),
        (1,        0,        (0, 1, 1, 1)),
        (0o100000, 0o140000, (1, 0, 1, 0)),
        (0o177777, 0o177777, (1, 0, 0, 1)),
        (0o077777, 0o037777, (0, 0, 1, 1)),
    ])
    def test_asr(self, val, result, expected):
        r, flags = alu.asr16(val)
        assert r == result
        assert _nzvc(flags) == expected

    def test_asl_carry_from_operand(self):
        """C comes from the resolved operand, the result from the register."""
        r, flags = alu.asl16(1, operand=0o100000)
        assert r == 2
        assert _nzvc(flags) == (0, 0, 1, 1)

    def test_asr_carry_from_operand(self):
        r, flags = alu.asr16(4, operand=1)
        assert r == 2
        assert _nzvc(flags) == (0, 0, 1, 1)

    def test_v_is_n_xor_c(self):
        for val in BOUNDARY:
            for fn in (alu.asl16, alu.asr16):
                n, _, v, c = _nzvc(fn(val)[1])
                assert v == n ^ c
