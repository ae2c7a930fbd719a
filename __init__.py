"""Top-level public API for the ``funcplot`` package.

This module re-exports the plotting engine so users can import from a single
namespace, for example:

>>> from funcplot import PlotSession, compile_expression  # doctest: +SKIP

It exposes both the session-level surface (``PlotSession`` and the Plotly
painter) and the lower-level building blocks (expressions, the coordinate
transformer, the rasterizer and the intersection locator) for integrations
that drive their own canvas.
"""

from .coordinate_transformer import CoordinateTransformer
from .expression import SINGLE_VARIABLE, TWO_VARIABLES, Expression, Sample, compile_expression
from .grid import AxisLayout, AxisTick, axis_layout, grid_spacing
from .input_convert import input_convert
from .intersections import IntersectionPoint, find_intersections, find_pairwise_intersections
from .plot_config import DEFAULT_CONFIG, PlotterConfig
from .plot_errors import EvaluationError, ParseError, PlotterError, ViewError
from .plot_session import (
    DEFAULT_EXAMPLES,
    CurveFrame,
    HoverPoint,
    PlotSession,
    PlottedFunction,
    SessionEvent,
    SessionFrame,
)
from .plot_snapshot import FunctionSnapshot, SessionSnapshot
from .plot_view import ViewWindow
from .plotly_render import figure_from_session, frame_to_figure
from .rasterizer import PathSegment, rasterize

__all__ = [
    "AxisLayout",
    "AxisTick",
    "CoordinateTransformer",
    "CurveFrame",
    "DEFAULT_CONFIG",
    "DEFAULT_EXAMPLES",
    "EvaluationError",
    "Expression",
    "FunctionSnapshot",
    "HoverPoint",
    "IntersectionPoint",
    "ParseError",
    "PathSegment",
    "PlotSession",
    "PlottedFunction",
    "PlotterConfig",
    "PlotterError",
    "SINGLE_VARIABLE",
    "Sample",
    "SessionEvent",
    "SessionFrame",
    "SessionSnapshot",
    "TWO_VARIABLES",
    "ViewError",
    "ViewWindow",
    "axis_layout",
    "compile_expression",
    "figure_from_session",
    "find_intersections",
    "find_pairwise_intersections",
    "frame_to_figure",
    "grid_spacing",
    "input_convert",
    "rasterize",
]
