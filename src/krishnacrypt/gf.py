"""
Galois Field arithmetic for the column-mixing step.

GF(2^8) with the reduction polynomial x^8 + x^4 + x^3 + x + 1 (0x11B).
Reduction is applied as shift-and-reduce with feedback constant 0x1B.
"""

REDUCTION_FEEDBACK = 0x1B


def xtime(a: int) -> int:
    """Multiply by x in GF(2^8)."""
    return ((a << 1) ^ REDUCTION_FEEDBACK) & 0xFF if a & 0x80 else (a << 1) & 0xFF


def gf_mult(a: int, b: int) -> int:
    """
    Multiply two bytes in GF(2^8).

    Args:
        a: First operand (0..255)
        b: Second operand (0..255)

    Returns:
        Product reduced modulo 0x11B
    """
    a &= 0xFF
    b &= 0xFF
    result = 0
    for _ in range(8):
        if b & 1:
            result ^= a
        a = xtime(a)
        b >>= 1
    return result


def gf_dot(row: tuple[int, ...], column: list[int]) -> int:
    """XOR-accumulate the field products of a matrix row and a state column."""
    value = 0
    for coeff, byte in zip(row, column):
        value ^= gf_mult(coeff, byte)
    return value
