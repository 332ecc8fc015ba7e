"""Arithmetic templates and the host functions their hints use.

Hint functions receive galois field elements, so ``v ** -1`` is the field
inverse and comparisons against ints work directly.
"""

from compiler.template import Template


def inverse(v):
    """Field inverse; zero has none."""
    if v == 0:
        raise ZeroDivisionError("inverse of zero")
    return v ** -1


def inverse_or_zero(v):
    """Field inverse, or 0 for 0 (the IsZero advice value)."""
    return 0 if v == 0 else v ** -1


class MulInv(Template):
    """out = 1 / in, computed by hint and checked with out * in === 1.

    Evaluation fails for in == 0: no value of out satisfies the constraint, and
    the hint refuses to invent one.
    """

    def build(self, ctx):
        inp = ctx.input('in')
        out = ctx.output('out')
        ctx.hint(out, inverse, inp)
        ctx.constrain(out * inp, 1)


class Sum(Template):
    """sum = in[0] + ... + in[n-1], accumulated in a symbolic variable."""

    def build(self, ctx, n):
        inp = ctx.input('in', n)
        out = ctx.output('sum')
        acc = 0
        for i in range(n):
            acc = acc + inp[i]
        ctx.assign(out, acc)


class Square(Template):
    def build(self, ctx):
        inp = ctx.input('in')
        out = ctx.output('out')
        ctx.assign(out, inp * inp)
