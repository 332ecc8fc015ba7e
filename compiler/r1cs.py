"""Rank-1 Constraint System.

Each row encodes (A . w) * (B . w) = (C . w) for the witness vector w, with
w[0] = 1 carrying constant terms. Linear rows have empty A and B.

Witness layout (circom-compatible):

    [1, main outputs, main public inputs, main private inputs, everything else]

The R1CS is frozen once compilation finishes; nothing mutates it afterwards,
so one instance can back any number of concurrent witness evaluations.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from primitives.expression import Expression
from primitives.field import PrimeField


@dataclass(frozen=True)
class LinearCombination:
    """Sparse linear combination over witness indices.

    Attributes:
        terms: (witness index, coefficient) pairs sorted by index, no zeros
    """
    terms: Tuple[Tuple[int, int], ...] = ()

    @classmethod
    def from_expression(cls, expr: Expression) -> "LinearCombination":
        """Lower a degree <= 1 expression once witness indices are bound."""
        if expr.quad:
            raise ValueError(f"{expr!r} is not linear")
        acc = {}
        if expr.const:
            acc[0] = expr.const
        for s, c in expr.linear.items():
            acc[s.index] = (acc.get(s.index, 0) + c) % expr.field.p
        return cls(tuple(sorted((i, c) for i, c in acc.items() if c)))

    @property
    def indices(self) -> Tuple[int, ...]:
        return tuple(i for i, _ in self.terms)

    def is_empty(self) -> bool:
        return not self.terms

    def evaluate(self, w: Sequence[int], p: int) -> int:
        return sum(c * w[i] for i, c in self.terms) % p


@dataclass(frozen=True)
class Constraint:
    """One R1CS row.

    Attributes:
        a, b, c: Linear combinations with (a . w) * (b . w) = (c . w)
        origin: Path of the component that emitted the row
    """
    a: LinearCombination
    b: LinearCombination
    c: LinearCombination
    origin: str = ""

    @property
    def is_linear(self) -> bool:
        return self.a.is_empty() or self.b.is_empty()

    @property
    def indices(self) -> frozenset:
        return frozenset(self.a.indices) | frozenset(self.b.indices) | frozenset(self.c.indices)

    def is_satisfied(self, w: Sequence[int], p: int) -> bool:
        lhs = self.a.evaluate(w, p) * self.b.evaluate(w, p)
        return (lhs - self.c.evaluate(w, p)) % p == 0


@dataclass(frozen=True)
class R1CS:
    """Compiled constraint system.

    Attributes:
        prime: Field prime
        n_signals: Witness length, including the constant at index 0
        n_outputs: Main-component outputs (indices 1..n_outputs)
        n_public_inputs: Public main inputs, after the outputs
        n_private_inputs: Private main inputs, after the public ones
        constraints: Rows in emission order
    """
    prime: int
    n_signals: int
    n_outputs: int
    n_public_inputs: int
    n_private_inputs: int
    constraints: Tuple[Constraint, ...]

    @property
    def n_constraints(self) -> int:
        return len(self.constraints)

    @property
    def n_public(self) -> int:
        """Public values besides the constant: outputs and public inputs."""
        return self.n_outputs + self.n_public_inputs

    def unsatisfied_rows(self, w: Sequence[int]) -> List[int]:
        """Indices of rows the witness violates."""
        if len(w) != self.n_signals:
            raise ValueError(f"witness has {len(w)} entries, expected {self.n_signals}")
        return [i for i, row in enumerate(self.constraints) if not row.is_satisfied(w, self.prime)]

    def is_satisfied(self, w: Sequence[int]) -> bool:
        return not self.unsatisfied_rows(w)

    def to_matrices(self, field: PrimeField = None):
        """Dense (A, B, C) as galois FieldArrays of shape (n_constraints, n_signals)."""
        field = field or PrimeField(self.prime)
        if field.p != self.prime:
            raise ValueError(f"field prime {field.p} does not match R1CS prime {self.prime}")
        shape = (self.n_constraints, self.n_signals)
        mats = (field.GF.Zeros(shape), field.GF.Zeros(shape), field.GF.Zeros(shape))
        for r, row in enumerate(self.constraints):
            for mat, lc in zip(mats, (row.a, row.b, row.c)):
                for i, c in lc.terms:
                    mat[r, i] = c
        return mats
