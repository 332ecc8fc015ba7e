"""Template instantiation and compilation to R1CS."""

from compiler.compile import (
    CompiledCircuit,
    SignalInfo,
    compile_circuit,
    instantiate,
)
from compiler.config import CompilerConfig
from compiler.r1cs import R1CS, Constraint, LinearCombination
from compiler.template import (
    ComponentArray,
    ComponentInstance,
    SignalArray,
    Template,
    TemplateContext,
)

__all__ = [
    "CompilerConfig",
    "Template",
    "TemplateContext",
    "SignalArray",
    "ComponentInstance",
    "ComponentArray",
    "R1CS",
    "Constraint",
    "LinearCombination",
    "CompiledCircuit",
    "SignalInfo",
    "compile_circuit",
    "instantiate",
]
