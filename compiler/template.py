"""Template instantiation.

A template is a Python class whose ``build`` method declares signals,
constraints, hints and child components through a TemplateContext:

    class Sum(Template):
        def build(self, ctx, n):
            inp = ctx.input('in', n)
            out = ctx.output('sum')
            acc = 0
            for i in range(n):
                acc = acc + inp[i]
            ctx.assign(out, acc)

Applying the class to compile-time arguments (``Sum(4)``) gives an
unexpanded template; the engine expands it eagerly. Loops and conditionals
in ``build`` are ordinary Python over compile-time ints, so they are fully
unrolled before the next statement runs. Any attempt to branch, loop, size an
array or index with a signal-derived value raises StaticityViolation (see
primitives.expression).

Components inside loops go through a pre-declared slot array:

    eqs = ctx.components('eqs', n)
    for i in range(n):
        eqs[i] = IsEqual()

A bare ``ctx.component('eq', ...)`` inside a loop collides with itself on the
second iteration (DuplicateDeclarationError).
"""

import logging
import operator
import warnings
from abc import ABC, abstractmethod
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

from primitives.errors import (
    CompilationError,
    DanglingOutputError,
    DanglingOutputWarning,
    DuplicateDeclarationError,
    SignalDirectionError,
    StaticityViolation,
)
from primitives.expression import Expression, Signal, SignalKind

logger = logging.getLogger(__name__)


def _static_param(value):
    """Validate a compile-time template argument."""
    if isinstance(value, Signal):
        raise StaticityViolation(f"template parameter {value.path} is a signal")
    if isinstance(value, Expression):
        if value.degree > 0:
            raise StaticityViolation(f"template parameter {value!r} depends on signals")
        return value.const
    if isinstance(value, (list, tuple)):
        return tuple(_static_param(v) for v in value)
    return value


class Template(ABC):
    """Parameterised circuit template.

    Subclasses implement ``build(ctx, *args)``. Constructing the class only
    records the compile-time arguments; expansion happens when the template is
    compiled or placed as a component.
    """

    def __init__(self, *args):
        self.args = tuple(_static_param(a) for a in args)

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def build(self, ctx: "TemplateContext", *args) -> None:
        """Declare the template's signals, constraints and components."""
        pass

    def __repr__(self) -> str:
        return f"{self.name}({', '.join(map(repr, self.args))})"


class SignalArray:
    """Fixed-shape, read-only array of signals.

    Indexing needs a compile-time int; a signal index raises
    StaticityViolation through Signal.__index__.
    """

    def __init__(self, items: list, shape: Tuple[int, ...]):
        self._items = items
        self.shape = shape

    def __getitem__(self, i):
        return self._items[i]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator:
        return iter(self._items)

    def flat(self) -> List[Signal]:
        out = []
        for item in self._items:
            if isinstance(item, SignalArray):
                out.extend(item.flat())
            else:
                out.append(item)
        return out

    def __repr__(self) -> str:
        return f"SignalArray({self._items!r})"


class ComponentInstance:
    """Fully parameterised instantiation of a template.

    A parent sees only the child's declared inputs and outputs, through
    ``child['name']`` or ``child.name``.

    Attributes:
        name: Local name in the parent ('eqs[2]'), 'main' for the root
        path: Dotted path from the root ('main.eqs[2]')
        template: The applied Template
        parent: Instantiating component, None for the root
        children: Child instances in creation order
        rows: Indices of constraint rows emitted by this scope
    """

    def __init__(self, name: str, template: Template, parent: Optional["ComponentInstance"] = None):
        self.name = name
        self.template = template
        self.parent = parent
        self.path = name if parent is None else f"{parent.path}.{name}"
        self.declarations: Dict[str, Union[Signal, SignalArray]] = {}
        self.kinds: Dict[str, SignalKind] = {}
        self.children: Dict[str, "ComponentInstance"] = {}
        self.rows: List[int] = []
        self.referenced: set = set()
        self._names: set = set()

    def _exposed(self, kind: SignalKind) -> Dict[str, Union[Signal, SignalArray]]:
        return {n: s for n, s in self.declarations.items() if self.kinds[n] is kind}

    @property
    def inputs(self) -> Dict[str, Union[Signal, SignalArray]]:
        return self._exposed(SignalKind.INPUT)

    @property
    def outputs(self) -> Dict[str, Union[Signal, SignalArray]]:
        return self._exposed(SignalKind.OUTPUT)

    def __getitem__(self, name: str) -> Union[Signal, SignalArray]:
        if name not in self.declarations or self.kinds[name] is SignalKind.INTERMEDIATE:
            raise KeyError(
                f"{self.path} ({self.template.name}) exposes no input or output '{name}'. "
                f"Available: {sorted(n for n, k in self.kinds.items() if k is not SignalKind.INTERMEDIATE)}"
            )
        return self.declarations[name]

    def __getattr__(self, name: str):
        if name.startswith("_") or name in ("declarations", "kinds"):
            raise AttributeError(name)
        try:
            return self[name]
        except KeyError as e:
            raise AttributeError(str(e)) from None

    def walk(self) -> Iterator["ComponentInstance"]:
        """This instance and all descendants, depth first."""
        yield self
        for child in self.children.values():
            yield from child.walk()

    def __repr__(self) -> str:
        return f"<ComponentInstance {self.path}: {self.template!r}>"


class ComponentArray:
    """Pre-declared array of component slots.

    Each slot receives its template during unrolling; slots may hold
    different templates. A slot can be filled once.
    """

    def __init__(self, ctx: "TemplateContext", name: str, shape: Tuple[int, ...]):
        self._ctx = ctx
        self._name = name
        self.shape = shape
        self._slots: list = [None] * shape[0]
        if len(shape) > 1:
            self._slots = [ComponentArray(ctx, f"{name}[{i}]", shape[1:]) for i in range(shape[0])]

    def __len__(self) -> int:
        return self.shape[0]

    def __setitem__(self, i, template: Template) -> None:
        i = operator.index(i)
        if len(self.shape) > 1:
            raise CompilationError(f"{self._name}[{i}] is a sub-array; index every dimension")
        if self._slots[i] is not None:
            raise DuplicateDeclarationError(f"component slot {self._ctx.path}.{self._name}[{i}] already filled")
        self._slots[i] = self._ctx._instantiate_child(f"{self._name}[{i}]", template)

    def __getitem__(self, i):
        slot = self._slots[i]
        if slot is None:
            raise CompilationError(f"component slot {self._ctx.path}.{self._name}[{i}] was never filled")
        return slot

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]


class TemplateContext:
    """Declaration interface handed to Template.build.

    Wraps one ComponentInstance and the shared compilation state. Every
    emitted row is recorded against this scope so dangling child outputs can
    be reported when the template finishes.
    """

    def __init__(self, compilation, instance: ComponentInstance):
        self._compilation = compilation
        self.instance = instance

    @property
    def field(self):
        return self._compilation.field

    @property
    def path(self) -> str:
        return self.instance.path

    # --- Declarations ---

    def _reserve(self, name: str) -> None:
        if name in self.instance._names:
            raise DuplicateDeclarationError(f"'{name}' declared twice in {self.path} ({self.instance.template.name})")
        self.instance._names.add(name)

    def _declare(self, name: str, kind: SignalKind, shape: Tuple) -> Union[Signal, SignalArray]:
        self._reserve(name)
        dims = tuple(operator.index(d) for d in shape)
        if any(d < 0 for d in dims):
            raise ValueError(f"negative dimension in {self.path}.{name}{list(dims)}")
        signal = self._make(f"{self.path}.{name}", kind, dims)
        self.instance.declarations[name] = signal
        self.instance.kinds[name] = kind
        return signal

    def _make(self, path: str, kind: SignalKind, dims: Tuple[int, ...]):
        if not dims:
            return self._compilation.new_signal(path, kind, self.path)
        items = [self._make(f"{path}[{i}]", kind, dims[1:]) for i in range(dims[0])]
        return SignalArray(items, dims)

    def input(self, name: str, *shape) -> Union[Signal, SignalArray]:
        return self._declare(name, SignalKind.INPUT, shape)

    def output(self, name: str, *shape) -> Union[Signal, SignalArray]:
        return self._declare(name, SignalKind.OUTPUT, shape)

    def signal(self, name: str, *shape) -> Union[Signal, SignalArray]:
        """Declare an intermediate signal."""
        return self._declare(name, SignalKind.INTERMEDIATE, shape)

    def component(self, name: str, template: Template) -> ComponentInstance:
        self._reserve(name)
        return self._instantiate_child(name, template)

    def components(self, name: str, *shape) -> ComponentArray:
        """Declare an array of component slots sized at compile time."""
        self._reserve(name)
        dims = tuple(operator.index(d) for d in shape)
        if not dims:
            raise ValueError("components() needs at least one dimension")
        return ComponentArray(self, name, dims)

    def _instantiate_child(self, name: str, template: Template) -> ComponentInstance:
        if not isinstance(template, Template):
            raise TypeError(f"component {self.path}.{name} needs an applied Template, got {template!r}")
        child = instantiate_component(self._compilation, template, name, self.instance)
        self.instance.children[name] = child
        return child

    # --- Statements ---

    def _writable(self, target) -> Signal:
        if not isinstance(target, Signal):
            raise TypeError(f"assignment target must be a signal, got {target!r}")
        own = target.component == self.path
        if own and target.kind in (SignalKind.OUTPUT, SignalKind.INTERMEDIATE):
            return target
        if not own and target.kind is SignalKind.INPUT and self._is_child_signal(target):
            return target
        if own and target.kind is SignalKind.INPUT:
            raise SignalDirectionError(f"{target.path} is an input of {self.path}; its instantiator assigns it")
        raise SignalDirectionError(f"{self.path} cannot assign {target.kind.value} signal {target.path}")

    def _is_child_signal(self, target: Signal) -> bool:
        prefix = self.path + "."
        rest = target.component[len(prefix):] if target.component.startswith(prefix) else None
        return rest is not None and rest in self.instance.children

    def _record(self, row: Optional[int]) -> None:
        if row is None:
            return
        self.instance.rows.append(row)
        self.instance.referenced.update(self._compilation.emitter.rows[row].signals)

    def assign(self, target, expr) -> None:
        """Constrain target == expr and compute target from expr (circom ``<==``).

        A SignalArray target takes a sequence of expressions of the same length.
        """
        if isinstance(target, SignalArray):
            values = list(expr)
            if len(values) != len(target):
                raise CompilationError(f"assigning {len(values)} values to {len(target)} signals")
            for t, v in zip(target, values):
                self.assign(t, v)
            return
        target = self._writable(target)
        row = self._compilation.emitter.emit_constrain_and_assign(target, expr, self.path)
        self._record(row)

    def constrain(self, lhs, rhs=0) -> None:
        """Constrain lhs == rhs without computing anything (circom ``===``)."""
        row = self._compilation.emitter.emit_constrain_only(lhs, rhs, self.path)
        self._record(row)

    def hint(self, target, fn: Callable, *deps) -> None:
        """Compute target with a host function and no constraint (circom ``<--``).

        ``fn`` receives one galois field element per entry of ``deps``. The
        value is unconstrained until a later ``constrain`` binds it.
        """
        target = self._writable(target)
        self._compilation.emitter.emit_hint(target, fn, deps, self.path)

    def log(self, message: str, *args) -> None:
        """Compile-time debug message tagged with the component path."""
        logger.debug("[%s] " + message, self.path, *args)


def _flat(value) -> List[Signal]:
    return value.flat() if isinstance(value, SignalArray) else [value]


def check_dangling_outputs(instance: ComponentInstance, policy: str) -> List[str]:
    """Report child outputs no constraint of ``instance`` references."""
    dangling = []
    for child in instance.children.values():
        for value in child.outputs.values():
            for s in _flat(value):
                if s not in instance.referenced:
                    dangling.append(s.path)
    for path in dangling:
        message = (
            f"output {path} is never constrained by {instance.path} "
            f"({instance.template.name}); a prover may set it freely"
        )
        if policy == "error":
            raise DanglingOutputError(message)
        logger.warning(message)
        warnings.warn(message, DanglingOutputWarning, stacklevel=2)
    return dangling


def instantiate_component(compilation, template: Template, name: str,
                          parent: Optional[ComponentInstance] = None) -> ComponentInstance:
    """Expand ``template`` into a ComponentInstance, children first-come."""
    instance = ComponentInstance(name, template, parent)
    ctx = TemplateContext(compilation, instance)
    logger.debug("instantiating %s as %s", template, instance.path)
    template.build(ctx, *template.args)
    compilation.dangling.extend(check_dangling_outputs(instance, compilation.config.dangling_outputs))
    return instance
