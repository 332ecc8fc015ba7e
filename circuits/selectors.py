"""Selection by a runtime index.

A signal cannot index a Python list, so every "arr[idx]" becomes an inner
product with one indicator per position:

    sel[i] = (i == idx)          IsEqual per position
    out    = sum(arr[i] * sel[i])

The indicators alone do not bound idx. For idx >= n every sel[i] is 0 and out
is 0 with all rows satisfied, so QuinSelector range-checks idx with LessThan
and constrains sum(sel) === 1 unless built with safe=False.
"""

from circuits.comparators import IsEqual, LessThan
from compiler.template import Template
from primitives.errors import CompilationError


def check_bound(ctx, bound, minimum=1):
    """Reject a compile-time size below minimum."""
    if bound < minimum:
        raise CompilationError(f"{ctx.path}: bound must be at least {minimum}, got {bound}")


class QuinSelector(Template):
    """out = in[index] for 0 <= index < n.

    Args:
        n: Number of candidates
        safe: Range-check index and require exactly one active indicator.
            safe=False leaves index unbounded and exists to demonstrate the
            exploit; do not use it in real circuits.
    """

    def __init__(self, n, safe=True):
        super().__init__(n, safe)

    def build(self, ctx, n, safe):
        check_bound(ctx, n)
        inp = ctx.input('in', n)
        index = ctx.input('index')
        out = ctx.output('out')
        terms = ctx.signal('terms', n)
        eqs = ctx.components('eqs', n)

        acc = 0
        active = 0
        for i in range(n):
            eqs[i] = IsEqual()
            ctx.assign(eqs[i]['in'], [i, index])
            ctx.assign(terms[i], inp[i] * eqs[i].out)
            acc = acc + terms[i]
            active = active + eqs[i].out
        ctx.assign(out, acc)

        if safe:
            lt = ctx.component('lt', LessThan(max(1, n.bit_length())))
            ctx.assign(lt['in'], [index, n])
            ctx.constrain(lt.out, 1)
            ctx.constrain(active, 1)


def _is_position(i):
    def is_position(v):
        return 1 if int(v) == i else 0
    is_position.__name__ = f"is_position{i}"
    return is_position


class Decoder(Template):
    """One-hot encoding of inp over w positions; success = 1 iff inp < w."""

    def build(self, ctx, w):
        inp = ctx.input('inp')
        out = ctx.output('out', w)
        success = ctx.output('success')
        lc = 0
        for i in range(w):
            ctx.hint(out[i], _is_position(i), inp)
            ctx.constrain(out[i] * (inp - i), 0)
            lc = lc + out[i]
        ctx.assign(success, lc)
        ctx.constrain(success * (success - 1), 0)


class EscalarProduct(Template):
    def build(self, ctx, w):
        in1 = ctx.input('in1', w)
        in2 = ctx.input('in2', w)
        out = ctx.output('out')
        aux = ctx.signal('aux', w)
        lc = 0
        for i in range(w):
            ctx.assign(aux[i], in1[i] * in2[i])
            lc = lc + aux[i]
        ctx.assign(out, lc)


class Multiplexer(Template):
    """out[j] = inp[sel][j] for w-wide rows over n choices (circomlib layout)."""

    def build(self, ctx, w, n):
        inp = ctx.input('inp', n, w)
        sel = ctx.input('sel')
        out = ctx.output('out', w)

        dec = ctx.component('dec', Decoder(n))
        ctx.assign(dec.inp, sel)
        ep = ctx.components('ep', w)
        for j in range(w):
            ep[j] = EscalarProduct(n)
            for k in range(n):
                ctx.assign(ep[j].in1[k], inp[k][j])
                ctx.assign(ep[j].in2[k], dec.out[k])
            ctx.assign(out[j], ep[j].out)
        ctx.constrain(dec.success, 1)
