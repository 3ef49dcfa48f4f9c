"""
PDP-11 Emulator — Condition Code Computation

Each function takes resolved operand values and returns
(result_word, ccr_flag_bits). The caller decides which flag group to
apply: MOV goes through set_NZV (C untouched), everything else sets
all four flags.

Overflow formulas (bit 15 is the sign bit):
  add: V = src, dst same sign AND result sign differs
  sub: V = src, dst signs differ AND sign(src) == sign(result)
The subtract rule is applied as written for both CMP (src - dst) and
SUB (dst - src).
"""

from typing import Optional

from .regs import CC_N, CC_Z, CC_V, CC_C

SIGN = 0o100000
WORD = 0o177777


def sign_extend(val: int, bits: int) -> int:
    """Interpret the low `bits` of `val` as a two's complement number."""
    val &= (1 << bits) - 1
    if val & (1 << (bits - 1)):
        return val - (1 << bits)
    return val


def test_nz16(val: int) -> int:
    """N and Z flags for a 16-bit value."""
    flags = 0
    if val & SIGN:
        flags |= CC_N
    if not (val & WORD):
        flags |= CC_Z
    return flags


def _sub_overflow(src: int, dst: int, result: int) -> int:
    if (src & SIGN) != (dst & SIGN) and (src & SIGN) == (result & SIGN):
        return CC_V
    return 0


def mov16(src: int) -> tuple:
    """MOV. Sets N, Z from the source. Clears V."""
    flags = 0
    if src & SIGN:
        flags |= CC_N
    if src == 0:
        flags |= CC_Z
    return (src & WORD, flags)


def cmp16(src: int, dst: int) -> tuple:
    """CMP: src - dst. Sets N, Z, V, C. C is bit 16 of the raw difference."""
    raw = src - dst
    result = raw & WORD
    flags = test_nz16(result) | _sub_overflow(src, dst, result)
    if raw & 0o200000:
        flags |= CC_C
    return (result, flags)


def add16(src: int, dst: int) -> tuple:
    """ADD: src + dst. Sets N, Z, V, C."""
    raw = src + dst
    result = raw & WORD
    flags = test_nz16(result)
    if (src & SIGN) == (dst & SIGN) and (src & SIGN) != (result & SIGN):
        flags |= CC_V
    if result < raw:
        flags |= CC_C
    return (result, flags)


def sub16(src: int, dst: int) -> tuple:
    """SUB: dst - src. Sets N, Z, V, C."""
    raw = dst - src
    result = raw & WORD
    flags = test_nz16(result) | _sub_overflow(src, dst, result)
    if raw & 0o200000:
        flags |= CC_C
    return (result, flags)


def asl16(val: int, operand: Optional[int] = None) -> tuple:
    """Arithmetic shift left of `val`. Sets N, Z, V, C.

    C comes from bit 15 of `operand` (the resolved operand value),
    which defaults to `val`. V = N xor C.
    """
    if operand is None:
        operand = val
    result = (val << 1) & WORD
    flags = test_nz16(result)
    n = 1 if flags & CC_N else 0
    c = 1 if operand & SIGN else 0
    if c:
        flags |= CC_C
    if n ^ c:
        flags |= CC_V
    return (result, flags)


def asr16(val: int, operand: Optional[int] = None) -> tuple:
    """Arithmetic shift right of `val`, sign preserved. Sets N, Z, V, C.

    C comes from bit 0 of `operand`, which defaults to `val`.
    """
    if operand is None:
        operand = val
    result = (sign_extend(val, 16) >> 1) & WORD
    flags = test_nz16(result)
    n = 1 if flags & CC_N else 0
    c = operand & 1
    if c:
        flags |= CC_C
    if n ^ c:
        flags |= CC_V
    return (result, flags)
