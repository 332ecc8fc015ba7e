"""Primitives - field arithmetic, the expression algebra and the error taxonomy."""

from primitives.errors import (
    AlreadyAssignedError,
    CircuitError,
    CompilationError,
    ConstraintUnsatisfied,
    CyclicDependencyError,
    DanglingOutputError,
    DanglingOutputWarning,
    DegreeError,
    DivisionByZeroError,
    DivisionError,
    DuplicateDeclarationError,
    EvaluationError,
    InputError,
    OverlappingBranchError,
    SignalDirectionError,
    StaticityViolation,
    UnassignedSignalError,
    UnsatisfiableConstraintError,
    UnsupportedOnSignalError,
)
from primitives.expression import (
    MAX_DEGREE,
    Expression,
    ExpressionOps,
    Signal,
    SignalKind,
    as_expression,
    combine,
)
from primitives.field import (
    BN254_PRIME,
    GOLDILOCKS_PRIME,
    KNOWN_GENERATORS,
    PrimeField,
)

__all__ = [
    # Field
    "PrimeField",
    "BN254_PRIME",
    "GOLDILOCKS_PRIME",
    "KNOWN_GENERATORS",
    # Expressions
    "Signal",
    "SignalKind",
    "Expression",
    "ExpressionOps",
    "MAX_DEGREE",
    "as_expression",
    "combine",
    # Errors
    "CircuitError",
    "CompilationError",
    "EvaluationError",
    "DegreeError",
    "DivisionError",
    "DivisionByZeroError",
    "UnsupportedOnSignalError",
    "StaticityViolation",
    "DuplicateDeclarationError",
    "SignalDirectionError",
    "UnassignedSignalError",
    "CyclicDependencyError",
    "OverlappingBranchError",
    "AlreadyAssignedError",
    "UnsatisfiableConstraintError",
    "DanglingOutputError",
    "DanglingOutputWarning",
    "InputError",
    "ConstraintUnsatisfied",
]
