"""Compiled, immutable formula objects.

Purpose
-------
``compile_expression`` parses a formula once into an :class:`Expression`.
The expression can then be evaluated any number of times, either at a single
point (:meth:`Expression.evaluate`) or over NumPy arrays
(:meth:`Expression.sample`), which is what the rasterizer and the
intersection scan use.

Error semantics
---------------
- Parsing problems raise :class:`~funcplot.plot_errors.ParseError` from
  ``compile_expression``.
- A divisor with magnitude below ``1e-10`` raises
  :class:`~funcplot.plot_errors.EvaluationError` from ``evaluate``. In
  vectorized sampling the same condition marks the sample as failed and
  stores NaN instead.
- NaN and infinities are ordinary results. ``sqrt(-1)``, ``ln(0)`` and
  ``(-8)^(1/3)`` follow IEEE-754 and never raise.

Examples
--------
>>> from funcplot.expression import compile_expression
>>> compile_expression("2x+1").evaluate(5)
11.0
>>> compile_expression("x^2+y", variables=("x", "y")).evaluate(3, 1)
10.0
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from .expression_functions import (
    BINARY_OPERATORS,
    CONSTANTS,
    DIVISION_EPSILON,
    FUNCTIONS,
    is_known_name,
)
from .expression_nodes import BinaryOp, Call, Constant, Negate, Node, Number, Variable, free_variables
from .expression_parser import parse
from .plot_errors import EvaluationError

__all__ = ["Expression", "Sample", "compile_expression", "SINGLE_VARIABLE", "TWO_VARIABLES"]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

SINGLE_VARIABLE: tuple[str, ...] = ("x",)
TWO_VARIABLES: tuple[str, ...] = ("x", "y")


@dataclass(frozen=True)
class Sample:
    """Result of vectorized evaluation.

    Parameters
    ----------
    values : numpy.ndarray
        Evaluated values; NaN wherever ``failed`` is set.
    failed : numpy.ndarray
        Boolean mask of samples that hit a division by zero.
    """

    values: np.ndarray
    failed: np.ndarray

    @property
    def valid(self) -> np.ndarray:
        """Mask of samples that neither failed nor produced NaN/inf."""
        return ~self.failed & np.isfinite(self.values)


class _Evaluation:
    """One pass over a tree with a fixed set of bindings.

    With ``strict=True`` a near-zero divisor raises; otherwise it is
    recorded in ``failed`` and the quotient becomes NaN.
    """

    __slots__ = ("bindings", "strict", "failed")

    def __init__(self, bindings: dict[str, Any], *, strict: bool) -> None:
        self.bindings = bindings
        self.strict = strict
        self.failed: Any = False

    def visit(self, node: Node) -> Any:
        if isinstance(node, Number):
            return node.value
        if isinstance(node, Variable):
            return self.bindings[node.name]
        if isinstance(node, Constant):
            return CONSTANTS[node.name]
        if isinstance(node, Negate):
            return np.negative(self.visit(node.operand))
        if isinstance(node, BinaryOp):
            left = self.visit(node.left)
            right = self.visit(node.right)
            if node.op == "/":
                return self._divide(left, right)
            return BINARY_OPERATORS[node.op](left, right)
        if isinstance(node, Call):
            args = [self.visit(arg) for arg in node.args]
            return FUNCTIONS[node.name].impl(*args)
        raise TypeError(f"Unsupported expression node: {type(node).__name__}")

    def _divide(self, left: Any, right: Any) -> Any:
        near_zero = np.abs(right) < DIVISION_EPSILON
        if self.strict:
            if near_zero:
                raise EvaluationError("division by zero")
            return np.divide(left, right)
        if not np.any(near_zero):
            return np.divide(left, right)
        self.failed = np.logical_or(self.failed, near_zero)
        safe = np.where(near_zero, 1.0, right)
        return np.where(near_zero, np.nan, np.divide(left, safe))


@dataclass(frozen=True)
class Expression:
    """Immutable compiled formula.

    Parameters
    ----------
    text : str
        The formula as the user typed it.
    root : Node
        Root of the parsed syntax tree.
    variables : tuple[str, ...]
        Names that may be bound at evaluation time, in positional order.
    """

    text: str
    root: Node = field(repr=False)
    variables: tuple[str, ...] = SINGLE_VARIABLE

    @property
    def free_variables(self) -> frozenset[str]:
        """Variables the formula actually references."""
        return free_variables(self.root)

    @property
    def is_constant(self) -> bool:
        """True when the formula references no variable."""
        return not self.free_variables

    def _bindings(self, x: Any, y: Any) -> dict[str, Any]:
        bindings: dict[str, Any] = {}
        if "x" in self.variables:
            bindings["x"] = x
        if "y" in self.variables:
            if y is None:
                if "y" in self.free_variables:
                    raise TypeError(f"Expression {self.text!r} needs a value for y")
                y = 0.0
            bindings["y"] = y
        return bindings

    def evaluate(self, x: float = 0.0, y: float | None = None) -> float:
        """Evaluate at one point.

        Parameters
        ----------
        x : float
            Value bound to ``x``.
        y : float, optional
            Value bound to ``y``; required only for two-variable formulas
            that reference ``y``.

        Returns
        -------
        float
            The result. NaN and infinities are valid results.

        Raises
        ------
        EvaluationError
            If a divisor is smaller than ``1e-10`` in magnitude.
        """
        bindings = self._bindings(np.float64(x), None if y is None else np.float64(y))
        with np.errstate(all="ignore"):
            value = _Evaluation(bindings, strict=True).visit(self.root)
        return float(value)

    __call__ = evaluate

    def sample(self, x: Any, y: Any = None) -> Sample:
        """Evaluate over arrays, recording failed samples instead of raising.

        ``x`` and ``y`` may be scalars or arrays; they are broadcast together
        and the result always has the broadcast shape.
        """
        xs = np.asarray(x, dtype=float)
        ys = None if y is None else np.asarray(y, dtype=float)
        shape = xs.shape if ys is None else np.broadcast_shapes(xs.shape, ys.shape)
        evaluation = _Evaluation(self._bindings(xs, ys), strict=False)
        with np.errstate(all="ignore"):
            raw = evaluation.visit(self.root)
        values = np.array(np.broadcast_to(np.asarray(raw, dtype=float), shape))
        failed = np.array(np.broadcast_to(np.asarray(evaluation.failed, dtype=bool), shape))
        return Sample(values=values, failed=failed)

    def evaluate_array(self, x: Any, y: Any = None) -> np.ndarray:
        """Vectorized evaluation returning values only (NaN where failed)."""
        return self.sample(x, y).values

    def to_sympy(self) -> Any:
        """Return an unevaluated SymPy expression mirroring this formula."""
        from .symbolic import to_sympy

        return to_sympy(self.root)

    def latex(self) -> str:
        """Return a LaTeX rendering of the formula."""
        from .symbolic import to_latex

        return to_latex(self.root)

    def __str__(self) -> str:
        return self.text


def _validate_variables(variables: Sequence[str]) -> tuple[str, ...]:
    names = tuple(variables)
    for name in names:
        if not (isinstance(name, str) and name.isalpha() and name.islower()):
            raise ValueError(f"Variable names must be lowercase letters, got {name!r}")
        if is_known_name(name):
            raise ValueError(f"Variable name {name!r} collides with a function or constant")
    if len(set(names)) != len(names):
        raise ValueError(f"Duplicate variable names: {names!r}")
    return names


def compile_expression(text: str, variables: Sequence[str] = SINGLE_VARIABLE) -> Expression:
    """Parse ``text`` once and return an immutable :class:`Expression`.

    Parameters
    ----------
    text : str
        Formula such as ``"2x(x+1)sin(x)"``.
    variables : sequence of str, optional
        Variable names accepted by the formula. Defaults to ``("x",)``; use
        :data:`TWO_VARIABLES` for surfaces and ``()`` for pure constants.

    Raises
    ------
    ParseError
        If ``text`` does not match the grammar.
    TypeError
        If ``text`` is not a string.
    """
    if not isinstance(text, str):
        raise TypeError(f"compile_expression expects a string, got {type(text).__name__}")
    names = _validate_variables(variables)
    root = parse(text, names)
    expression = Expression(text=text, root=root, variables=names)
    logger.debug("compiled %r with variables %s", text, names)
    return expression
