"""Tests for the expression algebra."""

import pytest

from primitives.errors import (
    DegreeError,
    DivisionByZeroError,
    DivisionError,
    StaticityViolation,
    UnsupportedOnSignalError,
)
from primitives.expression import Expression, Signal, SignalKind, as_expression, combine
from primitives.field import PrimeField


@pytest.fixture
def xyz(small_field):
    return [
        Signal(i, f"main.{name}", SignalKind.INPUT, small_field, "main")
        for i, name in enumerate("xyz", start=1)
    ]


class TestDegree:
    """Structural degree tracking."""

    def test_linear(self, xyz) -> None:
        """Scaled sums stay linear."""
        x, y, _ = xyz
        assert (3 * x + y).degree == 1
        assert (x - 1).degree == 1

    def test_quadratic(self, xyz) -> None:
        """One product gives degree two."""
        x, y, z = xyz
        assert (x * y).degree == 2
        assert (x * y + z).degree == 2
        assert (2 * (x * y)).degree == 2
        assert (x ** 2).degree == 2

    def test_constant(self, small_field) -> None:
        """Plain values are degree zero."""
        e = as_expression(5, small_field)
        assert e.degree == 0
        assert e.is_constant
        assert e.constant_value == 5

    def test_cubic_rejected(self, xyz) -> None:
        """A third factor is refused."""
        x, y, z = xyz
        with pytest.raises(DegreeError):
            x * y * z
        with pytest.raises(DegreeError):
            (x * y) * (z + 1)
        with pytest.raises(DegreeError):
            x ** 3

    def test_sum_and_scalar_never_raise(self, xyz) -> None:
        """Addition and scaling never raise the degree."""
        x, y, z = xyz
        e = x * y
        for k in range(10):
            e = e + k * (x * y) + z
        assert e.degree == 2


class TestDivision:
    """Division by constants only."""

    def test_by_constant(self, small_field, xyz) -> None:
        """Division by a constant multiplies by its inverse."""
        x, _, _ = xyz
        e = x / 2
        assert e.linear[x] == small_field.inv(2)

    def test_by_signal(self, xyz) -> None:
        """Division by a signal is refused."""
        x, y, _ = xyz
        with pytest.raises(DivisionError):
            x / y
        with pytest.raises(DivisionError):
            1 / (y + 1)

    def test_by_zero(self, xyz) -> None:
        """Division by constant zero is refused."""
        x, _, _ = xyz
        with pytest.raises(DivisionByZeroError):
            x / 0
        with pytest.raises(DivisionByZeroError):
            x / 97


class TestHostOnlyOperations:
    """Comparisons and bit operations are refused on symbolic values."""

    @pytest.mark.parametrize("op", [
        lambda s: s < 3,
        lambda s: s >= 3,
        lambda s: s % 2,
        lambda s: s // 2,
        lambda s: s >> 1,
        lambda s: 1 << s,
        lambda s: s & 1,
        lambda s: s | 1,
        lambda s: s ^ 1,
        lambda s: (s + 1) == 2,
        lambda s: (s + 1) != 2,
        lambda s: ~s,
    ])
    def test_unsupported(self, xyz, op) -> None:
        """Comparison, modulo and bit operators are host-only."""
        x, _, _ = xyz
        with pytest.raises(UnsupportedOnSignalError):
            op(x)

    def test_signal_equality(self, xyz) -> None:
        """Signals compare equal only to themselves."""
        x, y, _ = xyz
        assert x == x
        with pytest.raises(UnsupportedOnSignalError):
            x == y

    def test_constants_stay_host_values(self, small_field) -> None:
        """Constant expressions still compare like numbers."""
        e = as_expression(5, small_field)
        assert e < 6
        assert e % 3 == 2
        assert list(range(e)) == [0, 1, 2, 3, 4]
        assert e


class TestStaticity:
    """Signals cannot steer compile-time control flow."""

    def test_truth_value(self, xyz) -> None:
        """A signal has no truth value."""
        x, _, _ = xyz
        with pytest.raises(StaticityViolation):
            if x:
                pass
        with pytest.raises(StaticityViolation):
            bool(x * 2)

    def test_loop_bound(self, xyz) -> None:
        """A signal cannot bound a loop."""
        x, _, _ = xyz
        with pytest.raises(StaticityViolation):
            range(x)

    def test_index(self, xyz) -> None:
        """A signal cannot index a list."""
        x, _, _ = xyz
        with pytest.raises(StaticityViolation):
            [1, 2, 3][x + 1]
        with pytest.raises(StaticityViolation):
            int(x)


class TestCanonicalForm:
    """Expressions reduce to at most one product per row."""

    def test_quadratic_split(self, xyz) -> None:
        """x*y - z splits into A, B and C."""
        x, y, z = xyz
        a, b, c = (x * y - z).quadratic_split()
        assert a.linear == {x: 1}
        assert b.linear == {y: 1}
        assert c.linear == {z: 1}

    def test_linear_split(self, xyz) -> None:
        """A linear expression has empty A and B."""
        x, y, _ = xyz
        a, b, c = (x + 2 * y - 3).quadratic_split()
        assert a.is_zero() and b.is_zero()
        assert c.const == 3

    def test_shared_factor_folds(self, xyz) -> None:
        """x*y + x*z is one product x*(y + z)."""
        x, y, z = xyz
        e = x * y + x * z
        assert len(e.quad) == 1
        a, b, _ = e.quadratic_split()
        assert a.linear == {x: 1}
        assert b.linear == {y: 1, z: 1}

    def test_independent_products(self, xyz) -> None:
        """x*y + z*z has no single-row form."""
        x, y, z = xyz
        with pytest.raises(DegreeError):
            (x * y + z * z).quadratic_split()

    def test_coefficients_reduced(self, xyz) -> None:
        """Coefficients are kept modulo p."""
        x, _, _ = xyz
        e = 100 * x + 98
        assert e.linear[x] == 3
        assert e.const == 1

    def test_signals(self, xyz) -> None:
        """All referenced signals are reported."""
        x, y, z = xyz
        assert (x * y + 3 * z).signals == {x, y, z}

    def test_evaluate(self, xyz) -> None:
        """Evaluation against a value vector."""
        x, y, z = xyz
        for i, s in enumerate(xyz, start=1):
            s.bind_index(i)
        assert (3 * x + y * z + 1).evaluate([1, 2, 3, 4]) == 19
        assert (x - y).evaluate([1, 2, 3, 4]) == 96

    def test_index_bound_once(self, xyz) -> None:
        """A signal gets its witness index once."""
        x, _, _ = xyz
        with pytest.raises(RuntimeError):
            x.index
        x.bind_index(1)
        with pytest.raises(RuntimeError):
            x.bind_index(2)


class TestCombine:
    """combine() mirrors the operators."""

    def test_ops(self, xyz) -> None:
        """combine dispatches on the operator name."""
        x, y, _ = xyz
        assert combine("sum", (x, 2, y)).linear == {x: 1, y: 1}
        assert combine("scalar", (3, x)).linear == {x: 3}
        assert combine("neg", (x,)).linear == {x: 96}
        assert combine("product", (x, y)).degree == 2

    def test_unknown_op(self, xyz) -> None:
        """Unknown operator names raise ValueError."""
        x, _, _ = xyz
        with pytest.raises(ValueError):
            combine("pow", (x, 2))

    def test_mixed_fields(self, xyz) -> None:
        """Signals over different primes do not mix."""
        x, _, _ = xyz
        other = Signal(9, "main.w", SignalKind.INPUT, PrimeField(101), "main")
        with pytest.raises(ValueError):
            x + other

    def test_non_field_operand(self, xyz) -> None:
        """Non-numeric operands are a TypeError."""
        x, _, _ = xyz
        with pytest.raises(TypeError):
            x + 1.5
        assert isinstance(as_expression(x), Expression)
