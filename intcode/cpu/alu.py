"""
Intcode Machine - Word Arithmetic

All arithmetic runs on 64-bit signed words. Python integers are unbounded,
so every result is folded back into range with two's complement wrap:

  wrap64(2**63)      == -2**63
  wrap64(-2**63 - 1) ==  2**63 - 1

Wrapping (rather than faulting) matches how a fixed-width register
machine behaves and keeps overflow out of the fault taxonomy.
"""

WORD_BITS = 64
WORD_MASK = (1 << WORD_BITS) - 1
WORD_SIGN = 1 << (WORD_BITS - 1)
WORD_MIN = -WORD_SIGN
WORD_MAX = WORD_SIGN - 1


def wrap64(value: int) -> int:
    """Fold an arbitrary integer into the signed 64-bit range."""
    value &= WORD_MASK
    if value & WORD_SIGN:
        return value - (1 << WORD_BITS)
    return value


def add(a: int, b: int) -> int:
    return wrap64(a + b)


def mul(a: int, b: int) -> int:
    return wrap64(a * b)
