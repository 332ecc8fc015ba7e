"""Expression algebra over signals.

Every quantity computed from signals is an Expression in canonical quadratic
form:

    const + sum(c_i * s_i) + sum(A_k * B_k)

where A_k and B_k are expressions of degree <= 1. Degree is tracked
structurally from the operations that built the expression:

    constant            0
    signal reference    1
    sum(a, b)           max(deg a, deg b)
    scalar(c, a)        deg a  (0 when c == 0)
    product(a, b)       deg a + deg b, rejected above 2

A Python variable bound to an Expression (or a Signal) is a symbolic
variable. Host-only operations (ordering comparisons, modulo, shifts, bitwise
ops, truth-testing, use as an index or loop bound) are refused on it, so
circuit topology can only depend on compile-time ints.

Example:
    x, y = ctx.input('x'), ctx.input('y')
    e = 3 * x + y          # degree 1
    q = e * (x - 1)        # degree 2
    q * y                  # DegreeError
    if x: ...              # StaticityViolation
"""

import operator
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from primitives.errors import (
    DegreeError,
    DivisionByZeroError,
    DivisionError,
    StaticityViolation,
    UnsupportedOnSignalError,
)
from primitives.field import PrimeField

MAX_DEGREE = 2


class SignalKind(Enum):
    """Role of a signal inside its component."""
    ONE = "one"
    INPUT = "input"
    OUTPUT = "output"
    INTERMEDIATE = "intermediate"


class ExpressionOps:
    """Operator overloads shared by Signal and Expression."""

    __slots__ = ()

    # --- Arithmetic (always available) ---

    def __add__(self, other):
        return _binary("sum", self, other)

    def __radd__(self, other):
        return _binary("sum", other, self)

    def __sub__(self, other):
        return _binary("sub", self, other)

    def __rsub__(self, other):
        return _binary("sub", other, self)

    def __mul__(self, other):
        return _binary("product", self, other)

    def __rmul__(self, other):
        return _binary("product", other, self)

    def __truediv__(self, other):
        return _binary("div", self, other)

    def __rtruediv__(self, other):
        return _binary("div", other, self)

    def __neg__(self):
        return combine("neg", (self,))

    def __pos__(self):
        return as_expression(self)

    def __pow__(self, exponent):
        if isinstance(exponent, ExpressionOps):
            exponent = _host_operand(exponent, "**")
        if not isinstance(exponent, int) or exponent < 0:
            return NotImplemented
        result = as_expression(1, _field_of(self))
        for _ in range(exponent):
            result = combine("product", (result, self))
        return result

    # --- Host-only operations ---

    def __lt__(self, other):
        return _host_binary(operator.lt, "<", self, other)

    def __le__(self, other):
        return _host_binary(operator.le, "<=", self, other)

    def __gt__(self, other):
        return _host_binary(operator.gt, ">", self, other)

    def __ge__(self, other):
        return _host_binary(operator.ge, ">=", self, other)

    def __mod__(self, other):
        return _host_binary(operator.mod, "%", self, other)

    def __rmod__(self, other):
        return _host_binary(operator.mod, "%", other, self)

    def __floordiv__(self, other):
        return _host_binary(operator.floordiv, "//", self, other)

    def __rfloordiv__(self, other):
        return _host_binary(operator.floordiv, "//", other, self)

    def __lshift__(self, other):
        return _host_binary(operator.lshift, "<<", self, other)

    def __rlshift__(self, other):
        return _host_binary(operator.lshift, "<<", other, self)

    def __rshift__(self, other):
        return _host_binary(operator.rshift, ">>", self, other)

    def __rrshift__(self, other):
        return _host_binary(operator.rshift, ">>", other, self)

    def __and__(self, other):
        return _host_binary(operator.and_, "&", self, other)

    def __rand__(self, other):
        return _host_binary(operator.and_, "&", other, self)

    def __or__(self, other):
        return _host_binary(operator.or_, "|", self, other)

    def __ror__(self, other):
        return _host_binary(operator.or_, "|", other, self)

    def __xor__(self, other):
        return _host_binary(operator.xor, "^", self, other)

    def __rxor__(self, other):
        return _host_binary(operator.xor, "^", other, self)

    def __invert__(self):
        return ~_host_operand(self, "~")

    def __bool__(self):
        return bool(_static_value(self, "truth value"))

    def __index__(self):
        return _static_value(self, "integer value")

    def __int__(self):
        return _static_value(self, "integer value")


class Signal(ExpressionOps):
    """Immutable slot in the witness vector.

    Signals are created by the template engine. The witness index is bound
    once, when compilation finishes, and never changes afterwards.

    Attributes:
        uid: Declaration order within the compilation
        path: Human-readable path, e.g. 'main.eqs[2].out'
        kind: SignalKind
        field: PrimeField of the owning compilation
        component: Path of the owning component instance
    """

    __slots__ = ("uid", "path", "kind", "field", "component", "_index")

    def __init__(self, uid: int, path: str, kind: SignalKind, field: PrimeField, component: str = ""):
        self.uid = uid
        self.path = path
        self.kind = kind
        self.field = field
        self.component = component
        self._index: Optional[int] = None

    @property
    def index(self) -> int:
        if self._index is None:
            raise RuntimeError(f"Signal {self.path} has no witness index before compilation finishes")
        return self._index

    def bind_index(self, index: int) -> None:
        if self._index is not None:
            raise RuntimeError(f"Signal {self.path} already bound to index {self._index}")
        self._index = index

    @property
    def degree(self) -> int:
        return 1

    def __hash__(self) -> int:
        return hash(self.uid)

    def __eq__(self, other):
        if other is self:
            return True
        raise UnsupportedOnSignalError(
            f"'==' on signal {self.path}; use IsEqual for an in-circuit comparison"
        )

    def __ne__(self, other):
        return not self.__eq__(other)

    def __repr__(self) -> str:
        return self.path


class Expression(ExpressionOps):
    """Quadratic-form combination of field constants and signals.

    Attributes:
        field: PrimeField the coefficients live in
        const: Constant term
        linear: Signal -> nonzero coefficient
        quad: Product terms (A, B), each factor of degree <= 1
        degree: Structural degree (0, 1 or 2)
    """

    __slots__ = ("field", "const", "linear", "quad", "degree")

    def __init__(
        self,
        field: PrimeField,
        const: int = 0,
        linear: Optional[Dict[Signal, int]] = None,
        quad: Tuple[Tuple["Expression", "Expression"], ...] = (),
        degree: Optional[int] = None,
    ):
        self.field = field
        self.const = const % field.p
        self.linear = {s: c % field.p for s, c in (linear or {}).items() if c % field.p}
        self.quad = tuple(quad)
        if degree is None:
            degree = 2 if self.quad else (1 if self.linear else 0)
        self.degree = degree

    @property
    def is_constant(self) -> bool:
        return self.degree == 0

    @property
    def constant_value(self) -> int:
        if not self.is_constant:
            raise StaticityViolation(f"{self!r} is not a compile-time constant")
        return self.const

    def is_zero(self) -> bool:
        return self.const == 0 and not self.linear and not self.quad

    @property
    def signals(self) -> frozenset:
        """Every signal the expression references."""
        found = set(self.linear)
        for a, b in self.quad:
            found.update(a.linear)
            found.update(b.linear)
        return frozenset(found)

    def evaluate(self, values: Sequence[int]) -> int:
        """Evaluate against a witness vector indexed by signal index."""
        p = self.field.p
        acc = self.const
        for s, c in self.linear.items():
            acc += c * values[s.index]
        for a, b in self.quad:
            acc += a.evaluate(values) * b.evaluate(values)
        return acc % p

    def linear_part(self) -> "Expression":
        return Expression(self.field, self.const, self.linear, degree=min(self.degree, 1))

    def quadratic_split(self) -> Tuple["Expression", "Expression", "Expression"]:
        """Rewrite ``self == 0`` as ``A * B = C`` with A, B, C linear.

        Returns:
            (A, B, C); A and B are zero for a linear equality.

        Raises:
            DegreeError: If more than one independent product term remains
        """
        zero = Expression(self.field)
        terms = [(a, b) for a, b in self.quad if not a.is_zero() and not b.is_zero()]
        if len(terms) > 1:
            raise DegreeError(
                f"{self!r} has {len(terms)} independent products; "
                f"an R1CS row holds one. Split it with intermediate signals"
            )
        c = _scale(self.linear_part(), -1)
        if not terms:
            return zero, zero, c
        a, b = terms[0]
        return a, b, c

    def __eq__(self, other):
        return _host_binary(operator.eq, "==", self, other)

    def __ne__(self, other):
        return _host_binary(operator.ne, "!=", self, other)

    __hash__ = None

    def __repr__(self) -> str:
        parts = []
        for a, b in self.quad:
            parts.append(f"({a!r})*({b!r})")
        for s, c in sorted(self.linear.items(), key=lambda kv: kv[0].uid):
            parts.append(s.path if c == 1 else f"{self.field.to_signed(c)}*{s.path}")
        if self.const or not parts:
            parts.append(str(self.field.to_signed(self.const)))
        return " + ".join(parts)


# --- Construction ---

def _field_of(*operands) -> Optional[PrimeField]:
    field = None
    for x in operands:
        if isinstance(x, (Signal, Expression)):
            if field is not None and x.field != field:
                raise ValueError(f"operands from different fields: {field} and {x.field}")
            field = x.field
    return field


def as_expression(value, field: Optional[PrimeField] = None) -> Expression:
    """Coerce an int, Signal or Expression to an Expression."""
    if isinstance(value, Expression):
        return value
    if isinstance(value, Signal):
        return Expression(value.field, linear={value: 1}, degree=1)
    if isinstance(value, int):
        if field is None:
            raise TypeError("a bare constant needs a field to become an Expression")
        return Expression(field, const=value)
    raise TypeError(f"cannot use {type(value).__name__} in a circuit expression")


def _sum(a: Expression, b: Expression) -> Expression:
    linear = dict(a.linear)
    for s, c in b.linear.items():
        linear[s] = linear.get(s, 0) + c
    terms = list(a.quad)
    for x, y in b.quad:
        _merge_product(terms, x, y)
    return Expression(a.field, a.const + b.const, linear, terms, max(a.degree, b.degree))


def _scale(a: Expression, k: int) -> Expression:
    k %= a.field.p
    if k == 0:
        return Expression(a.field)
    if k == 1:
        return a
    return Expression(
        a.field,
        a.const * k,
        {s: c * k for s, c in a.linear.items()},
        [(_scale(x, k), y) for x, y in a.quad],
        a.degree,
    )


def _product(a: Expression, b: Expression) -> Expression:
    if a.degree == 0:
        return _scale(b, a.const)
    if b.degree == 0:
        return _scale(a, b.const)
    if a.degree + b.degree > MAX_DEGREE:
        raise DegreeError(
            f"product of degree {a.degree} and degree {b.degree} expressions "
            f"exceeds degree {MAX_DEGREE}: ({a!r}) * ({b!r})"
        )
    return Expression(a.field, quad=[(a, b)], degree=a.degree + b.degree)


def _ratio(x: Expression, y: Expression) -> Optional[int]:
    """k with x == k * y for degree <= 1 expressions, else None."""
    if x.linear.keys() != y.linear.keys() or bool(x.const) != bool(y.const):
        return None
    if y.const:
        k = x.field.div(x.const, y.const)
    elif y.linear:
        s = next(iter(y.linear))
        k = x.field.div(x.linear[s], y.linear[s])
    else:
        return None
    p = x.field.p
    if any((k * c - x.linear[s]) % p for s, c in y.linear.items()):
        return None
    if (k * y.const - x.const) % p:
        return None
    return k


def _merge_product(terms: List[Tuple[Expression, Expression]], a: Expression, b: Expression) -> None:
    """Append a * b, folding it into an existing term that shares a factor."""
    for i, (x, y) in enumerate(terms):
        for shared, other, new_shared, new_other in ((x, y, a, b), (y, x, a, b), (x, y, b, a), (y, x, b, a)):
            k = _ratio(new_shared, shared)
            if k is not None:
                terms[i] = (shared, _sum(other, _scale(new_other, k)))
                return
    terms.append((a, b))


def combine(op: str, operands: Sequence) -> Expression:
    """Combine operands into a new Expression.

    Args:
        op: One of 'sum', 'sub', 'neg', 'scalar', 'product', 'div'
        operands: ints, Signals or Expressions ('scalar' takes (int, operand))

    Raises:
        DegreeError: product of total degree > 2
        DivisionError: divisor references a signal
        DivisionByZeroError: divisor is the constant zero
    """
    field = _field_of(*operands)
    if field is None:
        raise TypeError(f"'{op}' needs at least one signal or expression operand")
    exprs = [as_expression(x, field) for x in operands]

    if op == "sum":
        result = exprs[0]
        for e in exprs[1:]:
            result = _sum(result, e)
        return result
    if op == "sub":
        a, b = exprs
        return _sum(a, _scale(b, -1))
    if op == "neg":
        return _scale(exprs[0], -1)
    if op == "scalar":
        k, a = exprs
        return _scale(a, k.constant_value)
    if op == "product":
        result = exprs[0]
        for e in exprs[1:]:
            result = _product(result, e)
        return result
    if op == "div":
        a, b = exprs
        if b.degree > 0:
            raise DivisionError(
                f"division by {b!r}, which references signals; "
                f"compute the quotient with a hint and constrain q * divisor === dividend"
            )
        if b.const == 0:
            raise DivisionByZeroError(f"division of {a!r} by the constant zero")
        return _scale(a, field.inv(b.const))
    raise ValueError(f"Invalid operation: {op}")


def _binary(op: str, a, b):
    if not isinstance(a, (int, Signal, Expression)) or not isinstance(b, (int, Signal, Expression)):
        return NotImplemented
    return combine(op, (a, b))


# --- Host-only operations ---

def _host_operand(x, op: str) -> int:
    if isinstance(x, Signal):
        raise UnsupportedOnSignalError(f"'{op}' on signal {x.path} is not an arithmetic operation")
    if isinstance(x, Expression):
        if x.degree > 0:
            raise UnsupportedOnSignalError(
                f"'{op}' on symbolic value {x!r} (degree {x.degree}) is not an arithmetic operation"
            )
        return x.const
    return x


def _host_binary(fn: Callable, op: str, a, b):
    for x in (a, b):
        if not isinstance(x, (int, Signal, Expression)):
            return NotImplemented
    return fn(_host_operand(a, op), _host_operand(b, op))


def _static_value(x, what: str) -> int:
    if isinstance(x, Signal) or x.degree > 0:
        raise StaticityViolation(
            f"{what} of {x!r} depends on a signal; circuit structure must be "
            f"decidable at compile time (use an indicator or QuinSelector)"
        )
    return x.const
