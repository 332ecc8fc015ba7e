"""Reusable circuit templates.

Comparators and arithmetic helpers, plus the selection and branch library:
indexing, branching, bounded iteration and array updates expressed without
signal-dependent control flow.
"""

from compiler.template import Template

from .arithmetic import MulInv, Square, Sum
from .arrays import Swap
from .branching import Branch
from .comparators import (
    AssertBool,
    GreaterThan,
    IsEqual,
    IsZero,
    LessEqThan,
    LessThan,
    Num2Bits,
)
from .selectors import Decoder, EscalarProduct, Multiplexer, QuinSelector
from .sequences import Factorial, Fibonacci, Power

# Registry mapping template names to template classes
TEMPLATE_REGISTRY: dict[str, type[Template]] = {
    cls.__name__: cls
    for cls in (
        IsZero, IsEqual, Num2Bits, LessThan, LessEqThan, GreaterThan, AssertBool,
        MulInv, Sum, Square,
        QuinSelector, Decoder, EscalarProduct, Multiplexer,
        Branch, Factorial, Fibonacci, Power, Swap,
    )
}


def get_template(name: str, *args) -> Template:
    """Apply a registered template to compile-time arguments.

    Args:
        name: Template class name (e.g., 'IsEqual', 'QuinSelector')
        *args: Compile-time parameters

    Raises:
        KeyError: If no template is registered under name
    """
    if name in TEMPLATE_REGISTRY:
        return TEMPLATE_REGISTRY[name](*args)
    raise KeyError(
        f"No template '{name}'. "
        f"Available: {list(TEMPLATE_REGISTRY.keys())}"
    )


__all__ = [
    "IsZero",
    "IsEqual",
    "Num2Bits",
    "LessThan",
    "LessEqThan",
    "GreaterThan",
    "AssertBool",
    "MulInv",
    "Sum",
    "Square",
    "QuinSelector",
    "Decoder",
    "EscalarProduct",
    "Multiplexer",
    "Branch",
    "Factorial",
    "Fibonacci",
    "Power",
    "Swap",
    "TEMPLATE_REGISTRY",
    "get_template",
]
