"""Tests for the N-way branch."""

import pytest

from circuits import Branch
from compiler.compile import compile_circuit
from primitives.errors import ConstraintUnsatisfied, OverlappingBranchError
from primitives.field import BN254_PRIME
from witness import WitnessEvaluator

VALUES = [10, 20, 30, 40]


@pytest.fixture(scope="module")
def branch():
    return WitnessEvaluator(compile_circuit(Branch((1, 2, 3))))


class TestBranch:
    """Indicator-weighted inner product over every branch."""

    @pytest.mark.parametrize("x, expected", [
        (1, 10),
        (2, 20),
        (3, 30),
        (0, 40),
        (4, 40),
        (BN254_PRIME - 1, 40),
    ])
    def test_selects(self, branch, x, expected) -> None:
        """Each constant picks its own value; anything else picks the last."""
        assert branch.evaluate({'x': x, 'values': VALUES})['out'] == expected

    def test_negative_constant(self) -> None:
        """Negative constants are reduced into the field."""
        evaluator = WitnessEvaluator(compile_circuit(Branch((-1,))))
        assert evaluator.evaluate({'x': BN254_PRIME - 1, 'values': [7, 8]})['out'] == 7
        assert evaluator.evaluate({'x': 1, 'values': [7, 8]})['out'] == 8

    def test_only_otherwise(self) -> None:
        """With no conditions the otherwise value is always taken."""
        evaluator = WitnessEvaluator(compile_circuit(Branch(())))
        assert evaluator.evaluate({'x': 5, 'values': [9]})['out'] == 9

    @pytest.mark.parametrize("constants", [
        (1, 1),
        (1, 2, 1),
        (1, BN254_PRIME + 1),
        (-1, BN254_PRIME - 1),
    ])
    def test_overlapping_conditions(self, constants) -> None:
        """Constants equal modulo p are rejected at compile time."""
        with pytest.raises(OverlappingBranchError):
            compile_circuit(Branch(constants))

    def test_forged_indicator(self, branch) -> None:
        """Claiming a condition that does not hold breaks its IsEqual rows."""
        with pytest.raises(ConstraintUnsatisfied):
            branch.evaluate({'x': 9, 'values': VALUES}, overrides={'main.eqs[0].out': 1})

    def test_forged_otherwise(self, branch) -> None:
        """Claiming the otherwise branch for a matched input fails."""
        with pytest.raises(ConstraintUnsatisfied):
            branch.evaluate({'x': 1, 'values': VALUES}, overrides={'otherwise.out': 1})

    def test_no_dangling_outputs(self, strict_config) -> None:
        """Every child output feeds a constraint."""
        compile_circuit(Branch((1, 2, 3)), strict_config)
