"""Witness evaluation.

Computes the full witness vector of a compiled circuit from its main inputs
and checks it against every R1CS row.
"""

from .evaluator import Witness, WitnessEvaluator, check, evaluate

__all__ = [
    'Witness',
    'WitnessEvaluator',
    'evaluate',
    'check',
]
