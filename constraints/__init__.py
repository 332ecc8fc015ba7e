"""Constraint emission: R1CS rows and per-signal computation rules."""

from .emitter import ComputationRule, ConstraintEmitter, EmittedRow, RuleKind

__all__ = [
    "ConstraintEmitter",
    "ComputationRule",
    "EmittedRow",
    "RuleKind",
]
