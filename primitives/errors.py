"""Error taxonomy for circuit compilation and witness evaluation.

Compile-time errors derive from CompilationError and abort compilation with no
partial artifact. Evaluation-time errors derive from EvaluationError and abort
a single witness evaluation; they never touch the compiled circuit.

DanglingOutputWarning is the one non-fatal condition. It is issued through the
warnings module so test suites can escalate it with ``pytest.warns`` or a
``-W error`` filter.
"""


class CircuitError(Exception):
    """Base exception for circuit compilation and evaluation."""
    pass


class CompilationError(CircuitError):
    """Template instantiation or constraint emission failed."""
    pass


class EvaluationError(CircuitError):
    """Witness evaluation failed."""
    pass


# --- Expression algebra ---

class DegreeError(CompilationError):
    """Signal product of degree > 2, or an equality not expressible as one R1CS row."""
    pass


class DivisionError(CompilationError):
    """Division by an expression that references signals."""
    pass


class DivisionByZeroError(DivisionError, EvaluationError, ZeroDivisionError):
    """Division by the field zero.

    Raised at compile time for a constant zero divisor and at evaluation time
    when a hint divides by a signal whose value is zero.
    """
    pass


class UnsupportedOnSignalError(CompilationError):
    """Comparison, modulo or bit operation applied to a symbolic value."""
    pass


# --- Template instantiation ---

class StaticityViolation(CompilationError):
    """Control flow, array size or template parameter depends on a signal."""
    pass


class DuplicateDeclarationError(CompilationError):
    """Name declared twice in one component scope."""
    pass


class SignalDirectionError(CompilationError):
    """Assignment to a signal the current scope does not own."""
    pass


class UnassignedSignalError(CompilationError):
    """Non-input signal left without a computation rule."""
    pass


class CyclicDependencyError(CompilationError):
    """Computation rules reference each other in a cycle."""
    pass


class OverlappingBranchError(CompilationError):
    """Branch conditions are not mutually exclusive."""
    pass


class DanglingOutputError(CompilationError):
    """Child output never referenced by a constraint (strict mode)."""
    pass


class DanglingOutputWarning(UserWarning):
    """Child output never referenced by a constraint of its instantiator.

    The output is computed but nothing binds it, so a prover may substitute
    any value for it.
    """
    pass


# --- Constraint emission ---

class AlreadyAssignedError(CompilationError):
    """Second computation rule for a single-assignment signal."""
    pass


class UnsatisfiableConstraintError(CompilationError):
    """Equality between two differing constants; no witness can satisfy it."""
    pass


# --- Witness evaluation ---

class InputError(EvaluationError):
    """Missing, unknown, malformed or out-of-field input value."""
    pass


class ConstraintUnsatisfied(EvaluationError):
    """Witness fails an R1CS row.

    Attributes:
        row: Index of the failing constraint
        signals: Paths of the signals the row references
    """

    def __init__(self, message: str, row: int, signals=()):
        super().__init__(message)
        self.row = row
        self.signals = tuple(signals)
