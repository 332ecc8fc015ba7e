"""Array updates at runtime positions.

Signals are write-once, so "swap arr[s] and arr[t]" builds a new array in
which every element is a three-way branch:

    at s      -> old[t]
    at t      -> old[s]
    elsewhere -> old[i]

    out[i] = (1 - (s == t)) * branchS[i] + branchT[i] + branchOther[i]

The (1 - (s == t)) factor drops the s-branch when both positions coincide,
otherwise that element would receive old[s] + old[t]. The same rebuild
applies to any simulated mutable memory.
"""

from circuits.comparators import IsEqual
from circuits.selectors import QuinSelector, check_bound
from compiler.template import Template


class Swap(Template):
    def build(self, ctx, n):
        check_bound(ctx, n)
        arr = ctx.input('arr', n)
        s = ctx.input('s')
        t = ctx.input('t')
        out = ctx.output('out', n)

        # Values at the runtime positions; the selectors range-check s and t
        at_s = ctx.component('atS', QuinSelector(n))
        ctx.assign(at_s['in'], list(arr))
        ctx.assign(at_s['index'], s)
        at_t = ctx.component('atT', QuinSelector(n))
        ctx.assign(at_t['in'], list(arr))
        ctx.assign(at_t['index'], t)

        same = ctx.component('sEqT', IsEqual())
        ctx.assign(same['in'], [s, t])

        is_s = ctx.components('isS', n)
        is_t = ctx.components('isT', n)
        branch_s = ctx.signal('branchS', n)
        branch_t = ctx.signal('branchT', n)
        not_st = ctx.signal('notST', n)
        branch_other = ctx.signal('branchOther', n)

        for i in range(n):
            is_s[i] = IsEqual()
            ctx.assign(is_s[i]['in'], [i, s])
            is_t[i] = IsEqual()
            ctx.assign(is_t[i]['in'], [i, t])

            ctx.assign(branch_s[i], is_s[i].out * at_t.out)
            ctx.assign(branch_t[i], is_t[i].out * at_s.out)
            ctx.assign(not_st[i], (1 - is_s[i].out) * (1 - is_t[i].out))
            ctx.assign(branch_other[i], not_st[i] * arr[i])
            ctx.assign(out[i], (1 - same.out) * branch_s[i] + branch_t[i] + branch_other[i])
