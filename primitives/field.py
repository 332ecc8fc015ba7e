"""Prime field GF(p) for signal values.

Uses galois for field construction and for the field elements handed to hint
computations. Bulk arithmetic inside the compiler and the evaluator works on
plain Python ints reduced modulo p, which is what galois itself does for
primes wider than 64 bits.

The prime is configuration: every compiled circuit carries its own
PrimeField and nothing in the algebra reads a module-level modulus.
"""

from functools import lru_cache
from typing import Iterable, Optional

import galois

from primitives.errors import DivisionByZeroError

# --- Named primes ---

# Scalar field of BN254 (alt_bn128), the circom default.
BN254_PRIME = 21888242871839275222246405745257275088548364400416034343698204186575808495617

# Goldilocks prime: p = 2^64 - 2^32 + 1
GOLDILOCKS_PRIME = 0xFFFFFFFF00000001

# Multiplicative generators for the named primes. Supplying them skips the
# factorisation of p - 1 that galois needs to find a primitive root.
KNOWN_GENERATORS = {
    BN254_PRIME: 5,
    GOLDILOCKS_PRIME: 7,
}


@lru_cache(maxsize=None)
def _galois_field(prime: int, primitive_element: Optional[int]):
    if primitive_element is None:
        return galois.GF(prime)
    return galois.GF(prime, primitive_element=primitive_element, verify=False)


class PrimeField:
    """Arithmetic modulo a configurable prime.

    Attributes:
        p: The field prime
        GF: galois FieldArray class for GF(p)
    """

    def __init__(self, prime: int, primitive_element: Optional[int] = None):
        if prime < 2:
            raise ValueError(f"prime must be >= 2, got {prime}")
        if primitive_element is None:
            primitive_element = KNOWN_GENERATORS.get(prime)
        self.p = prime
        self.GF = _galois_field(prime, primitive_element)

    @classmethod
    def bn254(cls) -> "PrimeField":
        return cls(BN254_PRIME)

    @classmethod
    def goldilocks(cls) -> "PrimeField":
        return cls(GOLDILOCKS_PRIME)

    def __repr__(self) -> str:
        return f"PrimeField(p={self.p})"

    def __eq__(self, other) -> bool:
        return isinstance(other, PrimeField) and other.p == self.p

    def __hash__(self) -> int:
        return hash(self.p)

    # --- Scalar operations on canonical ints ---

    def reduce(self, x: int) -> int:
        return int(x) % self.p

    def is_canonical(self, x: int) -> bool:
        return 0 <= x < self.p

    def neg(self, a: int) -> int:
        return (-a) % self.p

    def add(self, a: int, b: int) -> int:
        return (a + b) % self.p

    def sub(self, a: int, b: int) -> int:
        return (a - b) % self.p

    def mul(self, a: int, b: int) -> int:
        return (a * b) % self.p

    def inv(self, a: int) -> int:
        """Multiplicative inverse.

        Raises:
            DivisionByZeroError: If a is zero modulo p
        """
        a = a % self.p
        if a == 0:
            raise DivisionByZeroError("inverse of zero does not exist")
        return int(self.GF(a) ** -1)

    def div(self, a: int, b: int) -> int:
        return self.mul(a, self.inv(b))

    def to_signed(self, x: int) -> int:
        """Map x to the symmetric range (-p/2, p/2], e.g. p - 1 -> -1."""
        x = x % self.p
        return x - self.p if x > self.p // 2 else x

    # --- galois views ---

    def element(self, x: int):
        """Field element for host computations (supports field division)."""
        return self.GF(x % self.p)

    def array(self, values: Iterable[int]):
        """galois FieldArray of reduced values."""
        return self.GF([v % self.p for v in values])
