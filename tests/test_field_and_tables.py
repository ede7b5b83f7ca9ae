"""Tests for GF(2^8) arithmetic and the fixed substitution/mix tables."""

import pytest

from krishnacrypt.gf import gf_mult, gf_dot, xtime
from krishnacrypt.tables import SBOX, INV_SBOX, MIX_MATRIX, INV_MIX_MATRIX


class TestXtime:
    """Tests for multiplication by x."""

    @pytest.mark.parametrize("a,expected", [
        (0x57, 0xae),
        (0xae, 0x47),
        (0x47, 0x8e),
        (0x8e, 0x07),
        (0x00, 0x00),
        (0x80, 0x1b),
    ])
    def test_known_values(self, a: int, expected: int) -> None:
        """FIPS-197 section 4.2.1 xtime chain."""
        assert xtime(a) == expected

    def test_result_is_a_byte(self) -> None:
        for a in range(256):
            assert 0 <= xtime(a) <= 0xff


class TestGfMult:
    """Tests for full GF(2^8) multiplication."""

    def test_fips_197_examples(self) -> None:
        """{57} * {83} = {c1} and {57} * {13} = {fe}."""
        assert gf_mult(0x57, 0x83) == 0xc1
        assert gf_mult(0x57, 0x13) == 0xfe

    def test_identity_and_zero(self) -> None:
        for a in range(256):
            assert gf_mult(a, 1) == a
            assert gf_mult(1, a) == a
            assert gf_mult(a, 0) == 0

    def test_multiply_by_two_is_xtime(self) -> None:
        for a in range(256):
            assert gf_mult(a, 2) == xtime(a)

    def test_commutative(self) -> None:
        for a in range(0, 256, 7):
            for b in range(0, 256, 11):
                assert gf_mult(a, b) == gf_mult(b, a)

    def test_distributive_over_xor(self) -> None:
        for a in (0x03, 0x57, 0xca):
            for b in range(0, 256, 13):
                for c in (0x01, 0x1b, 0xf0):
                    assert gf_mult(a, b ^ c) == gf_mult(a, b) ^ gf_mult(a, c)

    def test_nonzero_product_of_nonzero_operands(self) -> None:
        """GF(2^8) has no zero divisors."""
        for a in range(1, 256):
            for b in (0x02, 0x03, 0x09, 0x0b, 0x0d, 0x0e):
                assert gf_mult(a, b) != 0

    def test_dot_product(self) -> None:
        assert gf_dot((0x02, 0x03, 0x01, 0x01), [0xdb, 0x13, 0x53, 0x45]) == 0x8e


class TestSubstitutionTables:
    """Tests for SBOX and INV_SBOX."""

    def test_sizes(self) -> None:
        assert len(SBOX) == 256
        assert len(INV_SBOX) == 256

    def test_sbox_is_permutation(self) -> None:
        assert len(set(SBOX)) == 256

    def test_inverse_undoes_forward(self) -> None:
        for x in range(256):
            assert INV_SBOX[SBOX[x]] == x
            assert SBOX[INV_SBOX[x]] == x

    @pytest.mark.parametrize("x,expected", [(0x00, 0x63), (0x53, 0xed), (0xff, 0x16)])
    def test_known_entries(self, x: int, expected: int) -> None:
        assert SBOX[x] == expected

    def test_tables_are_immutable(self) -> None:
        with pytest.raises(TypeError):
            SBOX[0] = 0  # type: ignore[index]


class TestMixMatrices:
    """The inverse mix matrix must invert the forward one over GF(2^8)."""

    def test_product_is_identity(self) -> None:
        for i in range(4):
            for j in range(4):
                value = 0
                for k in range(4):
                    value ^= gf_mult(MIX_MATRIX[i][k], INV_MIX_MATRIX[k][j])
                assert value == (1 if i == j else 0)

    def test_rows_are_rotations(self) -> None:
        for matrix in (MIX_MATRIX, INV_MIX_MATRIX):
            first = matrix[0]
            for r in range(1, 4):
                assert matrix[r] == first[-r:] + first[:-r]
