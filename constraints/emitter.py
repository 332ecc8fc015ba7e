"""Constraint emission.

The emitter owns the append-only list of R1CS rows and the per-signal
computation rules. Three operations feed it, matching the three ways a
template can relate a signal to other values:

    emit_constrain_and_assign(s, e)   row s == e, and e computes s   (circom <==)
    emit_constrain_only(a, b)         row a == b, computes nothing   (circom ===)
    emit_hint(s, fn, *deps)           fn computes s, no row          (circom <--)

Signals are single-assignment: a second assign or hint targeting the same
signal raises AlreadyAssignedError. Rows are never removed or reordered, so
a row's position is its identity for symbol tooling downstream.

Rows are kept in terms of Signal objects until compilation finishes and
witness indices are bound (see compiler.r1cs).
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from primitives.errors import AlreadyAssignedError, DegreeError, UnsatisfiableConstraintError
from primitives.expression import MAX_DEGREE, Expression, Signal, as_expression
from primitives.field import PrimeField

logger = logging.getLogger(__name__)


class RuleKind(Enum):
    ASSIGN = "assign"
    HINT = "hint"


@dataclass(frozen=True, eq=False)
class ComputationRule:
    """How the witness evaluator computes one signal.

    Attributes:
        target: Signal the rule produces
        kind: ASSIGN (field expression, also constrained) or HINT (host callable)
        expression: Expression for ASSIGN rules
        fn: Host callable for HINT rules; receives one galois field element
            per dependency and returns an int or field element
        deps: Dependency expressions evaluated and passed to fn
        origin: Path of the component that declared the rule
    """
    target: Signal
    kind: RuleKind
    expression: Optional[Expression] = None
    fn: Optional[Callable] = None
    deps: Tuple[Expression, ...] = ()
    origin: str = ""

    @property
    def reads(self) -> frozenset:
        """Signals whose values the rule needs."""
        if self.kind is RuleKind.ASSIGN:
            return self.expression.signals
        found = set()
        for d in self.deps:
            found.update(d.signals)
        return frozenset(found)


@dataclass(frozen=True, eq=False)
class EmittedRow:
    """R1CS row A * B = C over signals, before witness indices exist."""
    a: Expression
    b: Expression
    c: Expression
    origin: str = ""

    @property
    def signals(self) -> frozenset:
        return self.a.signals | self.b.signals | self.c.signals


class ConstraintEmitter:
    """Append-only sink for constraint rows and computation rules."""

    def __init__(self, field: PrimeField):
        self.field = field
        self.rows: List[EmittedRow] = []
        self.rules: Dict[Signal, ComputationRule] = {}

    def rule_for(self, signal: Signal) -> Optional[ComputationRule]:
        return self.rules.get(signal)

    def is_assigned(self, signal: Signal) -> bool:
        return signal in self.rules

    def _check_unassigned(self, signal: Signal, how: str) -> None:
        existing = self.rules.get(signal)
        if existing is not None:
            raise AlreadyAssignedError(
                f"signal {signal.path} already has a {existing.kind.value} rule "
                f"(from {existing.origin or 'main'}); cannot {how} it again"
            )

    def _check_degree(self, expr: Expression) -> None:
        if expr.degree > MAX_DEGREE:
            raise DegreeError(f"{expr!r} has degree {expr.degree} > {MAX_DEGREE}")

    def _append(self, diff: Expression, origin: str) -> int:
        a, b, c = diff.quadratic_split()
        self.rows.append(EmittedRow(a, b, c, origin))
        return len(self.rows) - 1

    def emit_constrain_and_assign(self, lhs: Signal, expr, origin: str = "") -> int:
        """Constrain ``lhs == expr`` and use ``expr`` to compute ``lhs``.

        Returns:
            Index of the appended row

        Raises:
            AlreadyAssignedError: lhs already has a computation rule
            DegreeError: expr is not expressible as a single quadratic row
        """
        expr = as_expression(expr, self.field)
        self._check_degree(expr)
        self._check_unassigned(lhs, "assign")
        row = self._append(expr - lhs, origin)
        self.rules[lhs] = ComputationRule(lhs, RuleKind.ASSIGN, expression=expr, origin=origin)
        logger.debug("row %d: %s <== %r", row, lhs.path, expr)
        return row

    def emit_constrain_only(self, expr_a, expr_b, origin: str = "") -> Optional[int]:
        """Constrain ``expr_a == expr_b`` without computing anything.

        Returns:
            Index of the appended row, or None when both sides are equal
            constants

        Raises:
            DegreeError: a side exceeds degree 2, or a - b needs more than one row
            UnsatisfiableConstraintError: both sides are constants that differ
        """
        ea = as_expression(expr_a, self.field)
        eb = as_expression(expr_b, self.field)
        self._check_degree(ea)
        self._check_degree(eb)
        diff = ea - eb
        if diff.is_constant:
            if diff.const != 0:
                raise UnsatisfiableConstraintError(f"constant equality {ea!r} === {eb!r} never holds")
            return None
        row = self._append(diff, origin)
        logger.debug("row %d: %r === %r", row, ea, eb)
        return row

    def emit_hint(self, signal: Signal, fn: Callable, deps: Sequence = (), origin: str = "") -> None:
        """Record a host computation for ``signal`` with no constraint.

        Raises:
            AlreadyAssignedError: signal already has a computation rule
        """
        self._check_unassigned(signal, "hint")
        dep_exprs = tuple(as_expression(d, self.field) for d in deps)
        self.rules[signal] = ComputationRule(signal, RuleKind.HINT, fn=fn, deps=dep_exprs, origin=origin)
        logger.debug("hint: %s <-- %s(%s)", signal.path, getattr(fn, "__name__", "fn"), ", ".join(map(repr, dep_exprs)))
