"""Witness evaluation.

Given a CompiledCircuit and concrete main-input values, computes every signal
and self-checks the result against the R1CS:

1. Validate inputs against the declared main inputs (InputError on anything
   missing, unknown, malformed or outside the field under the configured policy).
2. Run the computation rules in the precomputed topological order. ASSIGN
   rules are pure field expressions; HINT rules call their host function with
   galois field elements.
3. Check every R1CS row. A failing row raises ConstraintUnsatisfied; the
   evaluator performs no other validation (no implicit range checks).

The compiled circuit is only read, so independent evaluations may share it
across threads (evaluate_many).
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from compiler.compile import CompiledCircuit
from compiler.r1cs import R1CS
from compiler.template import SignalArray
from constraints.emitter import ComputationRule, RuleKind
from primitives.errors import (
    CircuitError,
    ConstraintUnsatisfied,
    DivisionByZeroError,
    EvaluationError,
    InputError,
)
from primitives.expression import SignalKind

logger = logging.getLogger(__name__)

InputValue = Union[int, Sequence["InputValue"]]


class Witness:
    """Witness vector for one proof instance.

    Attributes:
        values: Field values by witness index; values[0] == 1
    """

    def __init__(self, compiled: CompiledCircuit, values: Sequence[int]):
        self._compiled = compiled
        self.values: Tuple[int, ...] = tuple(values)

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, key: Union[int, str]) -> int:
        """Value by witness index or by signal path ('sum', 'main.eqs[0].out')."""
        if isinstance(key, str):
            return self.values[self._compiled.signal(key).index]
        return self.values[key]

    def value(self, name: str):
        """Main-component signal value; arrays come back as nested lists."""
        decl = self._compiled.main.declarations.get(name)
        if decl is None:
            return self[name]
        return self._collect(decl)

    def _collect(self, decl):
        if isinstance(decl, SignalArray):
            return [self._collect(item) for item in decl]
        return self.values[decl.index]

    def outputs(self) -> Dict[str, InputValue]:
        return {n: self._collect(d) for n, d in self._compiled.main_outputs.items()}

    def public_values(self) -> List[int]:
        """Outputs then public inputs, the values a verifier sees."""
        return list(self.values[1:1 + self._compiled.r1cs.n_public])

    def as_array(self):
        """Witness as a galois FieldArray."""
        return self._compiled.field.array(self.values)

    def __repr__(self) -> str:
        return f"Witness({self._compiled.template!r}, n={len(self.values)})"


def check(r1cs: R1CS, witness: Union[Witness, Sequence[int]]) -> List[int]:
    """Indices of R1CS rows the witness violates."""
    values = witness.values if isinstance(witness, Witness) else witness
    return r1cs.unsatisfied_rows(values)


def _flatten(name: str, value, out: Dict[str, object]) -> None:
    if isinstance(value, np.ndarray) and value.ndim > 0:
        value = value.tolist()
    if isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            _flatten(f"{name}[{i}]", item, out)
    else:
        out[name] = value


class WitnessEvaluator:
    """Computes witnesses for one compiled circuit."""

    def __init__(self, compiled: CompiledCircuit):
        self.compiled = compiled
        self.field = compiled.field
        self._input_signals = [
            s for decl in compiled.main_inputs.values()
            for s in (decl.flat() if isinstance(decl, SignalArray) else [decl])
        ]

    # --- Input boundary ---

    def _coerce(self, path: str, raw) -> int:
        if isinstance(raw, (bool, np.bool_)):
            raise InputError(f"{path}: boolean {raw!r} is not a field element")
        if isinstance(raw, np.ndarray) and raw.ndim == 0:
            raw = raw.item()
        if not isinstance(raw, (int, np.integer)):
            raise InputError(f"{path}: {type(raw).__name__} {raw!r} is not an integer")
        value = int(raw)
        if self.compiled.config.input_policy == "reduce":
            return value % self.field.p
        if not self.field.is_canonical(value):
            raise InputError(f"{path}: {value} is outside the field [0, p)")
        return value

    def _load_inputs(self, inputs: Mapping[str, InputValue], values: List[Optional[int]]) -> None:
        provided: Dict[str, object] = {}
        for name, value in inputs.items():
            _flatten(name[5:] if name.startswith("main.") else name, value, provided)
        missing = []
        for s in self._input_signals:
            rel = s.path[len("main."):]
            if rel not in provided:
                missing.append(rel)
                continue
            values[s.index] = self._coerce(rel, provided.pop(rel))
        if missing:
            raise InputError(f"missing input value(s): {', '.join(missing)}")
        if provided:
            raise InputError(f"unknown input(s): {', '.join(sorted(provided))}")

    def _resolve_overrides(self, overrides: Mapping[str, int]) -> Dict[int, int]:
        resolved = {}
        for path, raw in overrides.items():
            try:
                s = self.compiled.signal(path)
            except KeyError as e:
                raise InputError(str(e)) from None
            if s.kind in (SignalKind.ONE, SignalKind.INPUT) and s.component in ("", "main"):
                raise InputError(f"cannot override {s.path}; supply main inputs through inputs")
            resolved[s.index] = self._coerce(path, raw)
        return resolved

    # --- Rule execution ---

    def _run_rule(self, rule: ComputationRule, values: List[Optional[int]]) -> int:
        if rule.kind is RuleKind.ASSIGN:
            return rule.expression.evaluate(values)
        args = [self.field.element(d.evaluate(values)) for d in rule.deps]
        try:
            result = rule.fn(*args)
        except CircuitError:
            raise
        except ZeroDivisionError as e:
            raise DivisionByZeroError(f"hint for {rule.target.path} divided by zero") from e
        except Exception as e:
            raise EvaluationError(f"hint for {rule.target.path} failed: {e}") from e
        if isinstance(result, np.ndarray):
            result = result.item() if result.ndim == 0 else result
        if isinstance(result, bool) or not isinstance(result, (int, np.integer)):
            raise EvaluationError(f"hint for {rule.target.path} returned {result!r}, not a field element")
        return int(result) % self.field.p

    def _verify(self, values: Sequence[int]) -> None:
        r1cs = self.compiled.r1cs
        failing = r1cs.unsatisfied_rows(values)
        if not failing:
            return
        row = failing[0]
        constraint = r1cs.constraints[row]
        signals = [self.compiled.signals[i] for i in sorted(constraint.indices) if i != 0]
        detail = ", ".join(f"{s.path}={self.field.to_signed(values[s.index])}" for s in signals)
        raise ConstraintUnsatisfied(
            f"constraint {row} from {constraint.origin or 'main'} is not satisfied "
            f"({len(failing)} failing row(s)); {detail}",
            row=row,
            signals=[s.path for s in signals],
        )

    def evaluate(self, inputs: Mapping[str, InputValue],
                 overrides: Optional[Mapping[str, int]] = None) -> Witness:
        """Compute and self-check the witness for one set of inputs.

        Args:
            inputs: Main input name -> value (int or nested list); flattened
                keys like 'in[2]' are accepted too
            overrides: Signal path -> value replacing what the signal's rule
                would compute, to model a dishonest prover

        Raises:
            InputError: Bad inputs or overrides; nothing is evaluated
            DivisionByZeroError: A hint divided by zero
            EvaluationError: A hint raised or returned a non-integer
            ConstraintUnsatisfied: The completed witness fails a row
        """
        values: List[Optional[int]] = [None] * self.compiled.r1cs.n_signals
        values[0] = 1
        self._load_inputs(inputs, values)
        forced = self._resolve_overrides(overrides or {})

        for rule in self.compiled.rules:
            index = rule.target.index
            if index in forced:
                values[index] = forced[index]
            else:
                values[index] = self._run_rule(rule, values)

        self._verify(values)
        logger.debug("witness for %r: %d values", self.compiled.template, len(values))
        return Witness(self.compiled, values)

    def evaluate_many(self, batch: Iterable[Mapping[str, InputValue]],
                      max_workers: Optional[int] = None) -> List[Witness]:
        """Evaluate independent input sets concurrently; the first error propagates."""
        batch = list(batch)
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            witnesses = list(pool.map(self.evaluate, batch))
        logger.info("evaluated %d witnesses for %r", len(witnesses), self.compiled.template)
        return witnesses


def evaluate(compiled: CompiledCircuit, inputs: Mapping[str, InputValue],
             overrides: Optional[Mapping[str, int]] = None) -> Witness:
    """Functional form of WitnessEvaluator(compiled).evaluate(inputs)."""
    return WitnessEvaluator(compiled).evaluate(inputs, overrides)
