"""Equality indicators, bit decomposition and range comparators.

IsZero/IsEqual produce a boolean indicator with one hint and exactly two
constraints:

    inv <-- (x != 0) ? 1 / x : 0
    out <== 1 - x * inv
    out * x === 0

If x != 0 the second row forces out = 0 and the first then forces inv = 1/x.
If x == 0 the first row forces out = 1 whatever inv is. Dropping either row
lets a prover choose out freely.

LessThan(n) follows circomlib: decompose in[0] + 2^n - in[1] into n + 1 bits;
the top bit is set exactly when in[0] >= in[1]. Both inputs must already be
known to fit in n bits.
"""

from circuits.arithmetic import inverse_or_zero
from compiler.template import Template
from primitives.errors import CompilationError


def _bit(k):
    def bit(v):
        return (int(v) >> k) & 1
    bit.__name__ = f"bit{k}"
    return bit


def decompose(ctx, bits, value, n):
    """Constrain ``bits`` (n signals) to be the little-endian binary form of ``value``."""
    lc = 0
    e2 = 1
    for i in range(n):
        ctx.hint(bits[i], _bit(i), value)
        ctx.constrain(bits[i] * (bits[i] - 1), 0)
        lc = lc + bits[i] * e2
        e2 = e2 + e2
    ctx.constrain(lc, value)


def _check_width(ctx, n):
    # n + 1 bits must not wrap around the field
    if n < 1 or n + 1 >= ctx.field.p.bit_length():
        raise CompilationError(f"{ctx.path}: comparator width {n} out of range for {ctx.field}")


class IsZero(Template):
    def build(self, ctx):
        x = ctx.input('in')
        out = ctx.output('out')
        inv = ctx.signal('inv')
        ctx.hint(inv, inverse_or_zero, x)
        ctx.assign(out, 1 - x * inv)
        ctx.constrain(out * x, 0)


class IsEqual(Template):
    """out = (in[0] == in[1]) as an IsZero of the difference, inlined."""

    def build(self, ctx):
        inp = ctx.input('in', 2)
        out = ctx.output('out')
        inv = ctx.signal('inv')
        diff = inp[1] - inp[0]
        ctx.hint(inv, inverse_or_zero, diff)
        ctx.assign(out, 1 - diff * inv)
        ctx.constrain(out * diff, 0)


class Num2Bits(Template):
    def build(self, ctx, n):
        inp = ctx.input('in')
        out = ctx.output('out', n)
        decompose(ctx, out, inp, n)


class LessThan(Template):
    """out = (in[0] < in[1]) for n-bit inputs."""

    def build(self, ctx, n):
        _check_width(ctx, n)
        inp = ctx.input('in', 2)
        out = ctx.output('out')
        bits = ctx.signal('bits', n + 1)
        decompose(ctx, bits, inp[0] + (1 << n) - inp[1], n + 1)
        ctx.assign(out, 1 - bits[n])


class LessEqThan(Template):
    def build(self, ctx, n):
        inp = ctx.input('in', 2)
        out = ctx.output('out')
        lt = ctx.component('lt', LessThan(n))
        ctx.assign(lt['in'], [inp[0], inp[1] + 1])
        ctx.assign(out, lt.out)


class GreaterThan(Template):
    def build(self, ctx, n):
        inp = ctx.input('in', 2)
        out = ctx.output('out')
        lt = ctx.component('lt', LessThan(n))
        ctx.assign(lt['in'], [inp[1], inp[0]])
        ctx.assign(out, lt.out)


class AssertBool(Template):
    def build(self, ctx):
        inp = ctx.input('in')
        ctx.constrain(inp * (inp - 1), 0)
