"""
CPU4 Emulator - 4-bit ALU Operations

Every function takes nibble operands and returns a tuple:
  (result_nibble, zero)
where zero is True when the masked result equals 0. The caller decides
whether the flag is applied; all of these are flag-affecting in the
instruction set.

There is no carry flag. Bits shifted out by SHL/SHR are dropped, and
ADD/SUB simply wrap mod 16.
"""

from ..config import NIBBLE_MASK, NIBBLE_MSB, NIBBLE_LSB


def _result(value: int) -> tuple:
    value &= NIBBLE_MASK
    return (value, value == 0)


# ══════════════════════════════════════════════
# Arithmetic
# ══════════════════════════════════════════════

def add4(a: int, b: int) -> tuple:
    """A + B, wraps past 15."""
    return _result(a + b)


def sub4(a: int, b: int) -> tuple:
    """A - B, wraps on borrow (0 - 1 = 15)."""
    return _result(a - b)


def inc4(val: int) -> tuple:
    return _result(val + 1)


def dec4(val: int) -> tuple:
    return _result(val - 1)


# ══════════════════════════════════════════════
# Logic
# ══════════════════════════════════════════════

def and4(a: int, b: int) -> tuple:
    return _result(a & b)


def or4(a: int, b: int) -> tuple:
    return _result(a | b)


def xor4(a: int, b: int) -> tuple:
    return _result(a ^ b)


def not4(a: int, b: int = 0) -> tuple:
    """One's complement of the 4-bit value. B is ignored."""
    return _result(~a)


# ══════════════════════════════════════════════
# Shift / Rotate
# ══════════════════════════════════════════════
# Unary on A. The b parameter keeps the signature uniform with the
# binary ops so the executor can dispatch them from one table.

def shl4(a: int, b: int = 0) -> tuple:
    """Logical shift left. Bit 3 falls off the top."""
    return _result(a << 1)


def shr4(a: int, b: int = 0) -> tuple:
    """Logical shift right. Bit 0 falls off the bottom."""
    return _result((a & NIBBLE_MASK) >> 1)


def rol4(a: int, b: int = 0) -> tuple:
    """Rotate left: bit 3 re-enters at bit 0."""
    a &= NIBBLE_MASK
    return _result((a << 1) | (1 if a & NIBBLE_MSB else 0))


def ror4(a: int, b: int = 0) -> tuple:
    """Rotate right: bit 0 re-enters at bit 3."""
    a &= NIBBLE_MASK
    return _result((a >> 1) | (NIBBLE_MSB if a & NIBBLE_LSB else 0))
