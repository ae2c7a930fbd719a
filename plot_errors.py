"""Exception types raised by the plotting engine.

Three failure families exist and callers are expected to treat them
differently:

- ``ParseError`` is fatal to one ``compile_expression`` call and should be
  reported to the user. Previously compiled expressions are unaffected.
- ``EvaluationError`` is recoverable per sample. The rasterizer turns it into
  a gap in the curve and the intersection locator skips the sample.
- ``ViewError`` signals invalid view bounds or a coordinate conversion that
  was requested while the drawing surface had no usable size.
"""

from __future__ import annotations

__all__ = ["PlotterError", "ParseError", "EvaluationError", "ViewError"]


class PlotterError(Exception):
    """Base class for all errors raised by ``funcplot``."""


class ParseError(PlotterError, ValueError):
    """Raised when expression text does not match the grammar.

    Parameters
    ----------
    reason : str
        Short machine-friendly category such as ``"unexpected character"``
        or ``"unknown identifier"``.
    text : str
        The normalized text that was being parsed.
    position : int
        Zero-based index into ``text`` where parsing stopped.
    detail : str, optional
        Extra human-readable context (offending character or name).
    """

    UNEXPECTED_CHARACTER = "unexpected character"
    UNKNOWN_IDENTIFIER = "unknown identifier"
    UNMATCHED_PARENTHESIS = "unmatched parenthesis"
    TRAILING_INPUT = "trailing input"
    UNEXPECTED_END = "unexpected end of input"
    MALFORMED_NUMBER = "malformed number"
    WRONG_ARITY = "wrong number of arguments"

    def __init__(self, reason: str, text: str, position: int, detail: str = "") -> None:
        self.reason = reason
        self.text = text
        self.position = position
        self.detail = detail
        message = f"{reason} at position {position} in {text!r}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class EvaluationError(PlotterError, ArithmeticError):
    """Raised when a compiled expression cannot be evaluated at a point."""


class ViewError(PlotterError, ValueError):
    """Raised for degenerate view bounds or an unsized drawing surface."""
