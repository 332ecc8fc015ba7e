"""Iterative functions of an index known only at proof time.

The loop length cannot depend on a signal, so each template computes the
whole sequence up to a compile-time bound, constrains every step, and picks
the requested entry with a QuinSelector (which also range-checks the index
against the bound). Cost is linear in the bound whatever index is requested.
"""

from circuits.selectors import QuinSelector, check_bound
from compiler.template import Template


def select(ctx, seq, index, bound):
    """Constrain and return a QuinSelector output equal to seq[index]."""
    sel = ctx.component('sel', QuinSelector(bound))
    ctx.assign(sel['in'], list(seq))
    ctx.assign(sel['index'], index)
    return sel.out


class Factorial(Template):
    """out = n! for 0 <= n < bound."""

    def build(self, ctx, bound):
        check_bound(ctx, bound)
        n = ctx.input('n')
        out = ctx.output('out')
        seq = ctx.signal('seq', bound)
        ctx.assign(seq[0], 1)
        for i in range(1, bound):
            ctx.assign(seq[i], seq[i - 1] * i)
        ctx.assign(out, select(ctx, seq, n, bound))


class Fibonacci(Template):
    """out = F(n) with F(0) = 0, F(1) = 1, for 0 <= n < bound."""

    def build(self, ctx, bound):
        check_bound(ctx, bound, 2)
        n = ctx.input('n')
        out = ctx.output('out')
        seq = ctx.signal('seq', bound)
        ctx.assign(seq[0], 0)
        ctx.assign(seq[1], 1)
        for i in range(2, bound):
            ctx.assign(seq[i], seq[i - 1] + seq[i - 2])
        ctx.assign(out, select(ctx, seq, n, bound))


class Power(Template):
    """out = base ** n for 0 <= n < bound."""

    def build(self, ctx, bound):
        check_bound(ctx, bound)
        base = ctx.input('base')
        n = ctx.input('n')
        out = ctx.output('out')
        seq = ctx.signal('seq', bound)
        ctx.assign(seq[0], 1)
        for i in range(1, bound):
            ctx.assign(seq[i], seq[i - 1] * base)
        ctx.assign(out, select(ctx, seq, n, bound))
