"""Tests for PrimeField."""

import pytest

from primitives.errors import DivisionByZeroError
from primitives.field import BN254_PRIME, GOLDILOCKS_PRIME, PrimeField


class TestPrimeField:
    """Scalar arithmetic modulo p."""

    def test_named_primes(self) -> None:
        """Named constructors use the published primes."""
        assert PrimeField.bn254().p == BN254_PRIME
        assert PrimeField.goldilocks().p == GOLDILOCKS_PRIME

    def test_arithmetic_reduces(self, small_field) -> None:
        """Results are canonical representatives."""
        f = small_field
        assert f.add(90, 10) == 3
        assert f.sub(3, 10) == 90
        assert f.mul(50, 2) == 3
        assert f.neg(1) == 96
        assert f.reduce(-1) == 96

    def test_inverse(self, small_field) -> None:
        """Every nonzero element of GF(97) has an inverse."""
        f = small_field
        for a in range(1, 97):
            assert f.mul(f.inv(a), a) == 1
        assert f.div(1, 2) == 49

    def test_inverse_of_zero(self, small_field) -> None:
        """Zero and its aliases have no inverse."""
        with pytest.raises(DivisionByZeroError):
            small_field.inv(0)
        with pytest.raises(DivisionByZeroError):
            small_field.inv(97)

    def test_division_by_zero_is_zero_division_error(self, small_field) -> None:
        """Field division by zero is also a ZeroDivisionError."""
        with pytest.raises(ZeroDivisionError):
            small_field.div(5, 0)

    def test_bn254_inverse(self, bn254) -> None:
        """Inverses in the BN254 scalar field."""
        assert bn254.mul(bn254.inv(12345), 12345) == 1
        assert bn254.mul(bn254.inv(BN254_PRIME - 1), BN254_PRIME - 1) == 1

    def test_to_signed(self, small_field) -> None:
        """Upper half maps to negatives."""
        assert small_field.to_signed(96) == -1
        assert small_field.to_signed(48) == 48
        assert small_field.to_signed(49) == -48

    def test_canonical(self, small_field) -> None:
        """Canonical means 0 <= a < p."""
        assert small_field.is_canonical(0)
        assert small_field.is_canonical(96)
        assert not small_field.is_canonical(97)
        assert not small_field.is_canonical(-1)

    def test_element_is_galois_scalar(self, small_field) -> None:
        """Host computations get field semantics for division."""
        e = small_field.element(3)
        assert int(e ** -1) == small_field.inv(3)
        assert int(small_field.element(-1)) == 96

    def test_array(self, small_field) -> None:
        """Arrays are galois FieldArrays with reduced entries."""
        arr = small_field.array([1, 98, -1])
        assert isinstance(arr, small_field.GF)
        assert [int(x) for x in arr] == [1, 1, 96]

    def test_equality_by_prime(self) -> None:
        """Fields compare and hash by prime."""
        assert PrimeField(97) == PrimeField(97)
        assert hash(PrimeField(97)) == hash(PrimeField(97))
        assert PrimeField(97) != PrimeField(101)

    def test_rejects_tiny_prime(self) -> None:
        """Moduli below 2 are refused."""
        with pytest.raises(ValueError):
            PrimeField(1)
