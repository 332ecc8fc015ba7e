"""Compilation driver.

compile_circuit expands a template tree, checks that every signal has exactly
one computation rule, orders the rules for evaluation, binds witness indices
and freezes the result into a CompiledCircuit:

    compiled = compile_circuit(Sum(4))
    compiled.r1cs.n_constraints      # 1
    compiled.symbols()['main.sum']   # 1

Compilation is single-pass and synchronous. Any CompilationError aborts it;
no partially compiled artifact is returned.
"""

import logging
from dataclasses import dataclass, field as dc_field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import networkx as nx

from compiler.config import CompilerConfig
from compiler.r1cs import R1CS, Constraint, LinearCombination
from compiler.template import ComponentInstance, SignalArray, Template, instantiate_component
from constraints.emitter import ComputationRule, ConstraintEmitter
from primitives.errors import CompilationError, CyclicDependencyError, UnassignedSignalError
from primitives.expression import Signal, SignalKind
from primitives.field import PrimeField

logger = logging.getLogger(__name__)

# Number of offending paths quoted in error messages
_MAX_LISTED = 10


class Compilation:
    """Mutable state shared by every TemplateContext of one compilation."""

    def __init__(self, config: CompilerConfig):
        self.config = config
        self.field = config.field()
        self.emitter = ConstraintEmitter(self.field)
        self.signals: List[Signal] = []
        self.dangling: List[str] = []
        self.one = self.new_signal("one", SignalKind.ONE, "")

    def new_signal(self, path: str, kind: SignalKind, component: str) -> Signal:
        s = Signal(len(self.signals), path, kind, self.field, component)
        self.signals.append(s)
        return s


@dataclass(frozen=True)
class SignalInfo:
    """Symbol-table entry for one witness position."""
    index: int
    path: str
    kind: SignalKind
    component: str


@dataclass(frozen=True, eq=False)
class CompiledCircuit:
    """Read-only result of compiling a template.

    Attributes:
        template: The main template
        config: Configuration used
        field: PrimeField of the circuit
        r1cs: Constraint system
        rules: Computation rules in evaluation order
        signals: Every signal, by witness index
        main: Root of the component-instance tree
        public_inputs: Names of main inputs declared public
        dangling_outputs: Paths reported as dangling during compilation
    """
    template: Template
    config: CompilerConfig
    field: PrimeField
    r1cs: R1CS
    rules: Tuple[ComputationRule, ...]
    signals: Tuple[Signal, ...]
    main: ComponentInstance
    public_inputs: Tuple[str, ...] = ()
    dangling_outputs: Tuple[str, ...] = ()
    _by_path: Dict[str, Signal] = dc_field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        self._by_path.update({s.path: s for s in self.signals})

    @property
    def main_inputs(self) -> Dict[str, Union[Signal, SignalArray]]:
        return self.main.inputs

    @property
    def main_outputs(self) -> Dict[str, Union[Signal, SignalArray]]:
        return self.main.outputs

    def signal(self, path: str) -> Signal:
        """Look up a signal by full path ('main.eqs[2].out') or main-relative path ('sum')."""
        s = self._by_path.get(path)
        if s is None:
            s = self._by_path.get(f"main.{path}")
        if s is None:
            raise KeyError(f"no signal '{path}' in {self.template!r}")
        return s

    def symbols(self) -> Dict[str, int]:
        """Signal path -> witness index, for symbol files and debugging."""
        return {s.path: s.index for s in self.signals}

    def signal_info(self) -> List[SignalInfo]:
        return [SignalInfo(s.index, s.path, s.kind, s.component) for s in self.signals]


def _flat(value) -> List[Signal]:
    return value.flat() if isinstance(value, SignalArray) else [value]


def _is_main_input(s: Signal) -> bool:
    return s.kind is SignalKind.INPUT and s.component == "main"


def _check_assigned(compilation: Compilation) -> None:
    rules = compilation.emitter.rules
    missing = [
        s.path for s in compilation.signals
        if s.kind is not SignalKind.ONE and not _is_main_input(s) and s not in rules
    ]
    if missing:
        listed = ", ".join(missing[:_MAX_LISTED])
        more = f" and {len(missing) - _MAX_LISTED} more" if len(missing) > _MAX_LISTED else ""
        raise UnassignedSignalError(f"{len(missing)} signal(s) have no computation rule: {listed}{more}")


def _evaluation_order(compilation: Compilation) -> Tuple[ComputationRule, ...]:
    """Topologically order rules so every rule runs after the signals it reads."""
    rules = compilation.emitter.rules
    graph = nx.DiGraph()
    for target, rule in rules.items():
        graph.add_node(target.uid)
        for dep in rule.reads:
            if dep in rules:
                graph.add_edge(dep.uid, target.uid)
    try:
        order = list(nx.lexicographical_topological_sort(graph))
    except nx.NetworkXUnfeasible:
        cycle = nx.find_cycle(graph)
        paths = " -> ".join(compilation.signals[u].path for u, _ in cycle)
        raise CyclicDependencyError(f"computation rules form a cycle: {paths}") from None
    by_uid = {s.uid: r for s, r in rules.items()}
    return tuple(by_uid[u] for u in order)


def _bind_indices(compilation: Compilation, main: ComponentInstance, public: Sequence[str]) -> Tuple[int, int, int]:
    """Assign witness indices; returns (n_outputs, n_public_inputs, n_private_inputs)."""
    outputs = [s for v in main.outputs.values() for s in _flat(v)]
    public_inputs = [s for n in public for s in _flat(main.inputs[n])]
    private_inputs = [s for n, v in main.inputs.items() if n not in public for s in _flat(v)]
    head = [compilation.one] + outputs + public_inputs + private_inputs
    placed = {s.uid for s in head}
    rest = [s for s in compilation.signals if s.uid not in placed]
    for index, s in enumerate(head + rest):
        s.bind_index(index)
    return len(outputs), len(public_inputs), len(private_inputs)


def compile_circuit(template: Union[Template, type], config: Optional[CompilerConfig] = None,
                    public: Iterable[str] = ()) -> CompiledCircuit:
    """Compile a template into an R1CS and its computation rules.

    Args:
        template: Applied template (``Sum(4)``); a parameterless template
            class is applied automatically
        config: CompilerConfig, defaults to BN254 with permissive dangling outputs
        public: Names of main inputs that are public

    Raises:
        CompilationError: Any compile-time failure; see primitives.errors
    """
    if isinstance(template, type):
        template = template()
    config = config or CompilerConfig()
    public = tuple(public)

    compilation = Compilation(config)
    main = instantiate_component(compilation, template, "main")

    for name in public:
        if name not in main.inputs:
            raise CompilationError(f"public signal '{name}' is not an input of {template!r}")

    _check_assigned(compilation)
    rules = _evaluation_order(compilation)
    n_out, n_pub, n_prv = _bind_indices(compilation, main, public)

    constraints = tuple(
        Constraint(
            LinearCombination.from_expression(row.a),
            LinearCombination.from_expression(row.b),
            LinearCombination.from_expression(row.c),
            row.origin,
        )
        for row in compilation.emitter.rows
    )
    signals = tuple(sorted(compilation.signals, key=lambda s: s.index))
    r1cs = R1CS(
        prime=compilation.field.p,
        n_signals=len(signals),
        n_outputs=n_out,
        n_public_inputs=n_pub,
        n_private_inputs=n_prv,
        constraints=constraints,
    )
    logger.info(
        "compiled %r: %d constraints, %d signals (%d outputs, %d public inputs, %d private inputs)",
        template, r1cs.n_constraints, r1cs.n_signals, n_out, n_pub, n_prv,
    )
    return CompiledCircuit(
        template=template,
        config=config,
        field=compilation.field,
        r1cs=r1cs,
        rules=rules,
        signals=signals,
        main=main,
        public_inputs=public,
        dangling_outputs=tuple(compilation.dangling),
    )


def instantiate(template: Union[Template, type], params: Sequence = (),
                config: Optional[CompilerConfig] = None) -> ComponentInstance:
    """Instantiate ``template`` with compile-time ``params`` as the main component.

    Returns the root ComponentInstance of the fully expanded tree.
    """
    if isinstance(template, type):
        template = template(*params)
    elif params:
        raise TypeError(f"{template!r} is already applied; pass params to the template class instead")
    return compile_circuit(template, config).main
