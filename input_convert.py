"""Coerce user-supplied coordinates to real floats.

Used wherever the session accepts a number that may arrive as text from an
input field (``center_at("pi", "-e/2")``, snapshot ranges). Strings are
first tried as plain floats and otherwise compiled as constant formulas with
the same grammar as plotted functions.
"""

from __future__ import annotations

import math
from typing import Any

from .expression import compile_expression
from .plot_errors import EvaluationError, ParseError

__all__ = ["input_convert", "convert_pair"]


def input_convert(obj: Any, *, allow_infinite: bool = False) -> float:
    """Convert ``obj`` to a real ``float``.

    Rules:
    - Numbers (but not ``bool``) are cast via ``float(obj)``.
    - Strings are stripped, then tried with ``float(s)``; if that fails they
      are compiled as a formula with no variables and evaluated.

    Parameters
    ----------
    obj : Any
        Number or formula text such as ``"2pi"`` or ``"sqrt(2)/2"``.
    allow_infinite : bool, optional
        Accept infinities. NaN is always rejected.

    Raises
    ------
    ValueError
        If the value cannot be converted or is not finite.
    """
    if isinstance(obj, bool):
        raise ValueError(f"Could not convert {obj!r} to float: booleans are not coordinates.")

    if isinstance(obj, str):
        s = obj.strip()
        if s == "":
            raise ValueError("Cannot convert empty string to float.")
        try:
            value = float(s)
        except ValueError:
            try:
                value = compile_expression(s, variables=()).evaluate()
            except (ParseError, EvaluationError) as e:
                raise ValueError(f"Could not convert {obj!r} to float: {e}") from e
    else:
        try:
            value = float(obj)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Could not convert {obj!r} to float.") from e

    if math.isnan(value) or (math.isinf(value) and not allow_infinite):
        raise ValueError(f"Could not convert {obj!r} to a finite float (got {value}).")
    return value


def convert_pair(pair: Any, *, name: str = "range") -> tuple[float, float]:
    """Convert a 2-item sequence to ``(low, high)`` floats with ``low < high``."""
    try:
        low, high = pair
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must be a pair (min, max), got {pair!r}") from e
    low_f = input_convert(low)
    high_f = input_convert(high)
    if not high_f > low_f:
        raise ValueError(f"{name} must satisfy min < max, got ({low_f}, {high_f})")
    return low_f, high_f
