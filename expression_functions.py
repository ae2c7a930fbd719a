"""Fixed function and constant tables for compiled expressions.

All implementations are NumPy ufuncs (or thin wrappers around them) so the
same table serves scalar evaluation and vectorized column sampling.
Out-of-domain arguments follow IEEE-754: ``sqrt(-1)`` is NaN and ``ln(0)`` is
``-inf``. Callers are expected to evaluate inside ``np.errstate(all="ignore")``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable

import numpy as np

__all__ = [
    "FunctionSpec",
    "FUNCTIONS",
    "CONSTANTS",
    "BINARY_OPERATORS",
    "DIVISION_EPSILON",
    "is_known_name",
]

# Divisors with a smaller magnitude are reported as division by zero.
DIVISION_EPSILON = 1e-10


@dataclass(frozen=True)
class FunctionSpec:
    """Arity and NumPy implementation of one named function."""

    name: str
    arity: int
    impl: Callable[..., Any]


def _round_half_up(value: Any) -> Any:
    return np.floor(np.add(value, 0.5))


def _spec(name: str, impl: Callable[..., Any], arity: int = 1) -> tuple[str, FunctionSpec]:
    return name, FunctionSpec(name=name, arity=arity, impl=impl)


FUNCTIONS: dict[str, FunctionSpec] = dict(
    [
        _spec("sin", np.sin),
        _spec("cos", np.cos),
        _spec("tan", np.tan),
        _spec("asin", np.arcsin),
        _spec("acos", np.arccos),
        _spec("atan", np.arctan),
        _spec("sinh", np.sinh),
        _spec("cosh", np.cosh),
        _spec("tanh", np.tanh),
        _spec("sqrt", np.sqrt),
        _spec("cbrt", np.cbrt),
        _spec("log", np.log10),
        _spec("log10", np.log10),
        _spec("log2", np.log2),
        _spec("ln", np.log),
        _spec("exp", np.exp),
        _spec("abs", np.abs),
        _spec("floor", np.floor),
        _spec("ceil", np.ceil),
        _spec("ceiling", np.ceil),
        _spec("round", _round_half_up),
        _spec("degrees", np.degrees),
        _spec("deg", np.degrees),
        _spec("radians", np.radians),
        _spec("rad", np.radians),
        _spec("max", np.maximum, arity=2),
        _spec("min", np.minimum, arity=2),
        _spec("pow", np.power, arity=2),
        _spec("atan2", np.arctan2, arity=2),
    ]
)

CONSTANTS: dict[str, float] = {
    "pi": math.pi,
    "e": math.e,
    "phi": (1.0 + math.sqrt(5.0)) / 2.0,
    "golden": (1.0 + math.sqrt(5.0)) / 2.0,
    "sqrt2": math.sqrt(2.0),
    "sqrt3": math.sqrt(3.0),
    "inf": math.inf,
    "infinity": math.inf,
    "nan": math.nan,
}

# Division is handled by the evaluator because of the near-zero check.
BINARY_OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    "+": np.add,
    "-": np.subtract,
    "*": np.multiply,
    "^": np.power,
}


def is_known_name(name: str) -> bool:
    """Return True when ``name`` is a function or constant name."""
    return name in FUNCTIONS or name in CONSTANTS
