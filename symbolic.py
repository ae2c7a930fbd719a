"""SymPy mirrors of compiled expressions, used for display labels.

The conversion is structural and runs under ``sympy.evaluate(False)`` so the
result reads like the formula the user typed (``x/x`` stays ``x/x``). It is a
presentation aid only; nothing in the engine evaluates or simplifies the
SymPy objects.
"""

from __future__ import annotations

from typing import Any, Callable

import sympy as sp

from .expression_nodes import BinaryOp, Call, Constant, Negate, Node, Number, Variable

__all__ = ["to_sympy", "to_latex"]


def _log_base(base: int) -> Callable[[Any], Any]:
    return lambda arg: sp.log(arg, base)


def _degrees(arg: Any) -> Any:
    return sp.Mul(arg, sp.Integer(180), sp.Pow(sp.pi, -1))


def _radians(arg: Any) -> Any:
    return sp.Mul(arg, sp.pi, sp.Pow(sp.Integer(180), -1))


_ROUND = sp.Function("round")

_SYMPY_FUNCTIONS: dict[str, Callable[..., Any]] = {
    "sin": sp.sin,
    "cos": sp.cos,
    "tan": sp.tan,
    "asin": sp.asin,
    "acos": sp.acos,
    "atan": sp.atan,
    "sinh": sp.sinh,
    "cosh": sp.cosh,
    "tanh": sp.tanh,
    "sqrt": sp.sqrt,
    "cbrt": sp.cbrt,
    "log": _log_base(10),
    "log10": _log_base(10),
    "log2": _log_base(2),
    "ln": sp.log,
    "exp": sp.exp,
    "abs": sp.Abs,
    "floor": sp.floor,
    "ceil": sp.ceiling,
    "ceiling": sp.ceiling,
    "round": _ROUND,
    "degrees": _degrees,
    "deg": _degrees,
    "radians": _radians,
    "rad": _radians,
    "max": sp.Max,
    "min": sp.Min,
    "pow": sp.Pow,
    "atan2": sp.atan2,
}

_SYMPY_CONSTANTS: dict[str, Callable[[], Any]] = {
    "pi": lambda: sp.pi,
    "e": lambda: sp.E,
    "phi": lambda: sp.GoldenRatio,
    "golden": lambda: sp.GoldenRatio,
    "sqrt2": lambda: sp.sqrt(2),
    "sqrt3": lambda: sp.sqrt(3),
    "inf": lambda: sp.oo,
    "infinity": lambda: sp.oo,
    "nan": lambda: sp.nan,
}


def _number(value: float) -> Any:
    if value.is_integer():
        return sp.Integer(int(value))
    return sp.Float(value)


def _convert(node: Node) -> Any:
    if isinstance(node, Number):
        return _number(node.value)
    if isinstance(node, Variable):
        return sp.Symbol(node.name, real=True)
    if isinstance(node, Constant):
        return _SYMPY_CONSTANTS[node.name]()
    if isinstance(node, Negate):
        return sp.Mul(sp.Integer(-1), _convert(node.operand))
    if isinstance(node, BinaryOp):
        left = _convert(node.left)
        right = _convert(node.right)
        if node.op == "+":
            return sp.Add(left, right)
        if node.op == "-":
            return sp.Add(left, sp.Mul(sp.Integer(-1), right))
        if node.op == "*":
            return sp.Mul(left, right)
        if node.op == "/":
            return sp.Mul(left, sp.Pow(right, -1))
        if node.op == "^":
            return sp.Pow(left, right)
        raise ValueError(f"Unknown operator {node.op!r}")
    if isinstance(node, Call):
        return _SYMPY_FUNCTIONS[node.name](*(_convert(arg) for arg in node.args))
    raise TypeError(f"Unsupported expression node: {type(node).__name__}")


def to_sympy(node: Node) -> Any:
    """Convert a syntax tree into an unevaluated SymPy expression."""
    with sp.evaluate(False):
        return _convert(node)


def to_latex(node: Node) -> str:
    """Return the LaTeX string for a syntax tree."""
    return sp.latex(to_sympy(node))
