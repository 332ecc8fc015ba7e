"""Tests for MulInv, Sum and Square."""

import pytest

from circuits import MulInv, Square, Sum
from compiler.compile import compile_circuit
from primitives.errors import DivisionByZeroError, EvaluationError
from primitives.field import BN254_PRIME
from witness import WitnessEvaluator


@pytest.fixture(scope="module")
def mul_inv():
    return WitnessEvaluator(compile_circuit(MulInv()))


class TestMulInv:
    """Division by a signal: hint the quotient, constrain the product."""

    @pytest.mark.parametrize("x", [1, 2, 3, 12345, BN254_PRIME - 1])
    def test_inverse(self, mul_inv, x) -> None:
        """Output times input is one for nonzero inputs."""
        out = mul_inv.evaluate({'in': x})['out']
        assert out * x % BN254_PRIME == 1

    def test_zero_fails(self, mul_inv) -> None:
        """Zero has no inverse; evaluation fails rather than returning 0."""
        with pytest.raises(DivisionByZeroError):
            mul_inv.evaluate({'in': 0})

    def test_zero_failure_types(self, mul_inv) -> None:
        """The error is an evaluation error and a ZeroDivisionError."""
        with pytest.raises(EvaluationError):
            mul_inv.evaluate({'in': 0})
        with pytest.raises(ZeroDivisionError):
            mul_inv.evaluate({'in': 0})

    def test_single_constraint(self) -> None:
        """One row binds out * in to 1."""
        assert compile_circuit(MulInv()).r1cs.n_constraints == 1


class TestSum:
    def test_empty(self) -> None:
        """An empty array sums to zero."""
        w = WitnessEvaluator(compile_circuit(Sum(0))).evaluate({})
        assert w['sum'] == 0

    def test_large(self) -> None:
        """The whole accumulator becomes a single linear row."""
        compiled = compile_circuit(Sum(64))
        assert compiled.r1cs.n_constraints == 1
        w = WitnessEvaluator(compiled).evaluate({'in': list(range(64))})
        assert w['sum'] == sum(range(64))


class TestSquare:
    def test_square(self) -> None:
        """Square of a small value."""
        w = WitnessEvaluator(compile_circuit(Square())).evaluate({'in': 9})
        assert w['out'] == 81
