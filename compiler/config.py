"""Compiler configuration."""

from dataclasses import dataclass
from typing import Optional

from primitives.field import BN254_PRIME, PrimeField

INPUT_POLICIES = ("reject", "reduce")
DANGLING_POLICIES = ("warn", "error")


@dataclass(frozen=True)
class CompilerConfig:
    """Compilation and evaluation settings.

    Attributes:
        prime: Field prime (default: BN254 scalar field, the circom default)
        primitive_element: Multiplicative generator handed to galois; known
            for the named primes, searched for otherwise
        input_policy: 'reject' refuses input values outside [0, p);
            'reduce' reduces them modulo p (negatives included)
        dangling_outputs: 'warn' issues DanglingOutputWarning for a child
            output no constraint reads; 'error' raises DanglingOutputError
    """
    prime: int = BN254_PRIME
    primitive_element: Optional[int] = None
    input_policy: str = "reject"
    dangling_outputs: str = "warn"

    def __post_init__(self):
        if self.input_policy not in INPUT_POLICIES:
            raise ValueError(f"input_policy must be one of {INPUT_POLICIES}, got {self.input_policy!r}")
        if self.dangling_outputs not in DANGLING_POLICIES:
            raise ValueError(f"dangling_outputs must be one of {DANGLING_POLICIES}, got {self.dangling_outputs!r}")

    def field(self) -> PrimeField:
        return PrimeField(self.prime, self.primitive_element)
