"""N-way branch without control flow.

``Branch(constants)`` computes

    out = values[i]      if x == constants[i]
    out = values[n - 1]  otherwise

by building one equality indicator per constant, an "otherwise" indicator
that is 1 iff none of them fired, and the inner product of indicators with
the branch values. Every branch value is computed and constrained whichever
branch is taken.

The construction is sound only while at most one indicator can be 1, so the
constants must be distinct field elements.
"""

from circuits.comparators import IsEqual, IsZero
from compiler.template import Template
from primitives.errors import OverlappingBranchError


class Branch(Template):
    """Select values[i] for the first matching constant, values[-1] otherwise.

    Inputs:
        x: Value tested against the constants
        values: len(constants) + 1 branch results; the last is the default
    """

    def build(self, ctx, constants):
        seen = {}
        for c in constants:
            key = ctx.field.reduce(c)
            if key in seen:
                raise OverlappingBranchError(
                    f"{ctx.path}: branch conditions {seen[key]} and {c} are the same field "
                    f"element, so both indicators can fire at once"
                )
            seen[key] = c

        n = len(constants) + 1
        x = ctx.input('x')
        values = ctx.input('values', n)
        out = ctx.output('out')
        terms = ctx.signal('terms', n)
        eqs = ctx.components('eqs', n - 1)

        fired = 0
        acc = 0
        for i, c in enumerate(constants):
            eqs[i] = IsEqual()
            ctx.assign(eqs[i]['in'], [x, c])
            ctx.assign(terms[i], values[i] * eqs[i].out)
            fired = fired + eqs[i].out
            acc = acc + terms[i]

        otherwise = ctx.component('otherwise', IsZero())
        ctx.assign(otherwise['in'], fired)
        ctx.assign(terms[n - 1], values[n - 1] * otherwise.out)
        ctx.assign(out, acc + terms[n - 1])
        ctx.log("%d-way branch on %s", n, x)
