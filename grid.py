"""Grid spacing, tick placement and axis positions for a view window.

The layout is pure data computed from a :class:`~funcplot.plot_view.ViewWindow`;
:mod:`funcplot.plotly_render` turns it into traces and annotations.
Both axes share one spacing, chosen for roughly ten lines across the y range.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .plot_errors import ViewError
from .plot_view import ViewWindow, axis_decimals, format_axis_value

__all__ = ["AxisTick", "AxisLayout", "grid_spacing", "tick_values", "axis_layout", "TICK_LENGTH"]

TICK_LENGTH = 5
_ZERO_LABEL_EPS = 1e-10


def grid_spacing(span: float) -> float:
    """Round ``span / 10`` to 1, 2, 5 or 10 times a power of ten.

    >>> grid_spacing(20.0)
    2.0
    >>> grid_spacing(0.7)
    0.05
    """
    if not (span > 0 and math.isfinite(span)):
        raise ValueError(f"span must be a positive finite number, got {span!r}")
    raw = span / 10.0
    exponent = math.floor(math.log10(raw))
    power = 10.0**exponent
    mantissa = raw / power
    if mantissa < 1.5:
        step = 1.0
    elif mantissa < 3.5:
        step = 2.0
    elif mantissa < 7.5:
        step = 5.0
    else:
        step = 10.0
    return step * power


def tick_values(low: float, high: float, spacing: float) -> np.ndarray:
    """Multiples of ``spacing`` within ``[low, high]``.

    Values are computed from integer indices so long ranges do not
    accumulate floating-point drift.
    """
    first = math.ceil(low / spacing)
    last = math.floor(high / spacing)
    if last < first:
        return np.empty(0)
    return np.arange(first, last + 1, dtype=float) * spacing


@dataclass(frozen=True)
class AxisTick:
    """One labelled tick: world value, pixel position along its axis, text."""

    value: float
    pixel: int
    label: str


@dataclass(frozen=True)
class AxisLayout:
    """Everything needed to draw grid lines, axes and tick labels.

    Parameters
    ----------
    spacing : float
        World distance between neighbouring grid lines (both axes).
    x_ticks, y_ticks : tuple[AxisTick, ...]
        Ticks inside the drawable area. Zero carries an empty label.
    x_axis_row : int
        Screen row of the x axis (``y = 0``), clamped into the drawable area.
    y_axis_column : int
        Screen column of the y axis (``x = 0``), clamped likewise.
    origin_visible : bool
        True when both axes pass through the drawable area unclamped.
    decimals : int
        Label precision used for the ticks.
    """

    spacing: float
    x_ticks: tuple[AxisTick, ...]
    y_ticks: tuple[AxisTick, ...]
    x_axis_row: int
    y_axis_column: int
    origin_visible: bool
    decimals: int


def _label(value: float, decimals: int) -> str:
    if abs(value) <= _ZERO_LABEL_EPS:
        return ""
    return format_axis_value(value, decimals)


def axis_layout(window: ViewWindow) -> AxisLayout:
    """Compute grid and axis geometry for ``window``.

    Raises
    ------
    ViewError
        If the window has no drawable area.
    """
    if not window.has_surface:
        raise ViewError("Cannot lay out axes without a drawable area.")

    spacing = grid_spacing(window.height)
    decimals = axis_decimals(window)
    left = window.x_offset
    right = window.x_offset + window.drawable_width
    top = window.top
    bottom = window.bottom

    x_ticks = []
    for value in tick_values(window.x_min, window.x_max, spacing):
        pixel = window.screen_x(value)
        if left <= pixel <= right:
            x_ticks.append(AxisTick(float(value), pixel, _label(value, decimals)))

    y_ticks = []
    for value in tick_values(window.y_min, window.y_max, spacing):
        pixel = window.screen_y(value)
        if top <= pixel <= bottom:
            y_ticks.append(AxisTick(float(value), pixel, _label(value, decimals)))

    raw_row = window.screen_y(0.0)
    raw_column = window.screen_x(0.0)
    row = min(max(raw_row, top), bottom)
    column = min(max(raw_column, left), right)

    return AxisLayout(
        spacing=spacing,
        x_ticks=tuple(x_ticks),
        y_ticks=tuple(y_ticks),
        x_axis_row=row,
        y_axis_column=column,
        origin_visible=(row == raw_row and column == raw_column),
        decimals=decimals,
    )
