"""Plot session: the function list, the view and everything derived from them.

Purpose
-------
``PlotSession`` is the object a UI talks to. It owns

- the ordered list of :class:`PlottedFunction` (compiled expression, color,
  visibility),
- one :class:`~funcplot.coordinate_transformer.CoordinateTransformer`,
- the cached intersection points, recomputed lazily and invalidated by every
  call that changes the view or the function set,
- selection and hover lookup,
- change listeners notified with :class:`SessionEvent`.

:meth:`PlotSession.render` produces a :class:`SessionFrame`, a plain-data
description of one repaint (segments per function, axis layout, intersection
markers) that a painter such as :mod:`funcplot.plotly_render` draws.

Notes
-----
A failed compile raises :class:`~funcplot.plot_errors.ParseError` before any
state is touched. Listener failures are reported with ``warnings.warn`` and
never interrupt the remaining listeners.

Examples
--------
>>> from funcplot.plot_session import PlotSession
>>> s = PlotSession(640, 480)
>>> f = s.add_function("x^2")
>>> g = s.add_function("4")
>>> s.show_intersections(True)
>>> [(round(p.x, 4), round(p.y, 4)) for p in s.intersections()]
[(-2.0, 4.0), (2.0, 4.0)]
"""

from __future__ import annotations

import logging
import math
import time
import warnings
from collections.abc import Hashable
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator

import numpy as np
import plotly.colors

from .coordinate_transformer import CoordinateTransformer
from .expression import Expression, compile_expression
from .grid import AxisLayout, axis_layout
from .intersections import IntersectionPoint, find_pairwise_intersections
from .plot_config import DEFAULT_CONFIG, PlotterConfig
from .plot_snapshot import FunctionSnapshot, SessionSnapshot
from .plot_view import ViewWindow, format_axis_value
from .rasterizer import PathSegment, sample_columns, trace_segments

__all__ = [
    "PlotSession",
    "PlottedFunction",
    "SessionEvent",
    "SessionFrame",
    "CurveFrame",
    "HoverPoint",
    "DEFAULT_EXAMPLES",
    "DEFAULT_COLORS",
]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

DEFAULT_COLORS: tuple[str, ...] = tuple(plotly.colors.qualitative.Plotly)

# Formulas offered by the example picker.
DEFAULT_EXAMPLES: tuple[str, ...] = (
    "x^2",
    "sin(x)",
    "cos(x)",
    "tan(x)",
    "x^3-3*x",
    "sqrt(x)",
    "log(x)",
    "ln(x)",
    "abs(x)",
    "exp(x)",
    "sin(x)+cos(x)",
    "e^(0.05*x)*sin(x)",
)

_TOOLTIP_DECIMALS = 8
_HOVER_STEPS = 3
_HOVER_DIVISIONS = 100


@dataclass
class PlottedFunction:
    """A compiled expression with its display state.

    Parameters
    ----------
    id : str
        Stable identifier, unique within the session.
    expression : Expression
        Compiled single-variable formula.
    color : str
        Display color (any Plotly color string).
    visible : bool
        Whether the function is drawn and takes part in intersections.
    """

    id: str
    expression: Expression
    color: str
    visible: bool = True
    _label: str | None = field(default=None, repr=False, compare=False)

    @property
    def text(self) -> str:
        return self.expression.text

    @property
    def label(self) -> str:
        """LaTeX rendering of the expression (cached)."""
        if self._label is None:
            self._label = self.expression.latex()
        return self._label

    def snapshot(self) -> FunctionSnapshot:
        return FunctionSnapshot(id=self.id, text=self.text, color=self.color, visible=self.visible)


@dataclass(frozen=True)
class SessionEvent:
    """Change notification delivered to session listeners.

    Parameters
    ----------
    kind : str
        One of ``"function_added"``, ``"function_removed"``,
        ``"function_updated"``, ``"functions_cleared"``,
        ``"visibility_changed"``, ``"selection_changed"``,
        ``"view_changed"`` or ``"intersections_updated"``.
    old, new : Any
        Previous and current value of whatever changed (``None`` when not
        applicable).
    function_id : str or None
        Function concerned, for per-function events.
    """

    kind: str
    old: Any
    new: Any
    function_id: str | None = None


@dataclass(frozen=True)
class HoverPoint:
    """Curve point closest to the mouse."""

    function_id: str
    x: float
    y: float
    screen_x: int
    screen_y: int
    distance: float


@dataclass(frozen=True)
class CurveFrame:
    """Drawable state of one function in one frame."""

    id: str
    color: str
    width: float
    selected: bool
    segments: tuple[PathSegment, ...]


@dataclass(frozen=True)
class SessionFrame:
    """Everything needed to paint one repaint of the session.

    Parameters
    ----------
    window : ViewWindow
        View the frame was computed for.
    axes : AxisLayout or None
        Grid and axis geometry; ``None`` when the grid is hidden or the
        surface has no drawable area.
    curves : tuple[CurveFrame, ...]
        Visible functions in paint order (selected function last).
    intersections : tuple[IntersectionPoint, ...]
        Intersection markers inside the window, empty unless enabled.
    failures : dict[str, str]
        Function id to message for functions that failed at every column.
    """

    window: ViewWindow
    axes: AxisLayout | None
    curves: tuple[CurveFrame, ...]
    intersections: tuple[IntersectionPoint, ...]
    failures: dict[str, str]


def _same_points(old: list[IntersectionPoint], new: list[IntersectionPoint], tol: float) -> bool:
    if len(old) != len(new):
        return False
    return all(abs(a.x - b.x) <= tol and abs(a.y - b.y) <= tol for a, b in zip(old, new))


class PlotSession:
    """Function list, view state and derived caches for one plot surface.

    Parameters
    ----------
    width, height : int, optional
        Surface size in pixels; may be zero until the UI knows its size.
    config : PlotterConfig, optional
        Tunables shared with the transformer and intersection search.
    """

    def __init__(self, width: int = 0, height: int = 0, *, config: PlotterConfig | None = None) -> None:
        self._config = config if config is not None else DEFAULT_CONFIG
        self._transformer = CoordinateTransformer(width, height, config=self._config)
        self._functions: dict[str, PlottedFunction] = {}
        self._selected_id: str | None = None
        self._show_intersections = False
        self._show_grid = True
        self._intersections: list[IntersectionPoint] | None = None
        self._last_intersections: list[IntersectionPoint] = []
        self._listeners: dict[Hashable, Callable[[SessionEvent], Any]] = {}
        self._listener_counter = 0
        self._id_counter = 0
        self._warned_failures: set[tuple[str, str]] = set()
        self._render_info_last_log_t = 0.0
        self._render_debug_last_log_t = 0.0

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> PlotterConfig:
        return self._config

    @property
    def transformer(self) -> CoordinateTransformer:
        return self._transformer

    @property
    def window(self) -> ViewWindow:
        return self._transformer.window

    @property
    def functions(self) -> dict[str, PlottedFunction]:
        """Read-only view of the functions in display order."""
        return dict(self._functions)

    @property
    def selected_id(self) -> str | None:
        return self._selected_id

    @property
    def showing_intersections(self) -> bool:
        return self._show_intersections

    @property
    def show_grid(self) -> bool:
        return self._show_grid

    @show_grid.setter
    def show_grid(self, value: bool) -> None:
        self._show_grid = bool(value)

    def __len__(self) -> int:
        return len(self._functions)

    def __iter__(self) -> Iterator[PlottedFunction]:
        return iter(list(self._functions.values()))

    def __contains__(self, function_id: object) -> bool:
        return function_id in self._functions

    def __getitem__(self, function_id: str) -> PlottedFunction:
        return self._get(function_id)

    def _get(self, function_id: str) -> PlottedFunction:
        try:
            return self._functions[function_id]
        except KeyError:
            raise KeyError(f"Unknown function id: {function_id!r}") from None

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, callback: Callable[[SessionEvent], Any], listener_id: Hashable | None = None) -> Hashable:
        """Register ``callback`` for every :class:`SessionEvent`.

        Returns
        -------
        hashable
            Identifier for :meth:`remove_listener`.
        """
        if not callable(callback):
            raise TypeError(f"Listener must be callable, got {type(callback).__name__}")
        if listener_id is None:
            self._listener_counter += 1
            listener_id = f"listener:{self._listener_counter}"
        self._listeners[listener_id] = callback
        return listener_id

    def remove_listener(self, listener_id: Hashable) -> None:
        """Unregister a listener; unknown ids raise ``KeyError``."""
        del self._listeners[listener_id]

    def _emit(self, kind: str, old: Any = None, new: Any = None, function_id: str | None = None) -> None:
        event = SessionEvent(kind=kind, old=old, new=new, function_id=function_id)
        for l_id, callback in list(self._listeners.items()):
            try:
                callback(event)
            except Exception as e:
                warnings.warn(f"Listener {l_id} failed: {e}")

    # ------------------------------------------------------------------
    # Function list
    # ------------------------------------------------------------------

    def _next_id(self) -> str:
        while True:
            self._id_counter += 1
            candidate = f"f{self._id_counter}"
            if candidate not in self._functions:
                return candidate

    def _next_color(self) -> str:
        used = {f.color for f in self._functions.values()}
        for color in DEFAULT_COLORS:
            if color not in used:
                return color
        return DEFAULT_COLORS[len(self._functions) % len(DEFAULT_COLORS)]

    @staticmethod
    def _compile(source: str | Expression) -> Expression:
        if isinstance(source, Expression):
            if source.variables != ("x",):
                raise ValueError(f"Plotted expressions must use the single variable x, got {source.variables!r}")
            return source
        return compile_expression(source)

    def _functions_changed(self) -> None:
        self._intersections = None

    def add_function(
        self,
        text: str | Expression,
        color: str | None = None,
        *,
        visible: bool = True,
        id: str | None = None,
    ) -> PlottedFunction:
        """Compile ``text`` and append it to the function list.

        Parameters
        ----------
        text : str or Expression
            Formula in ``x``; already compiled expressions are accepted.
        color : str, optional
            Display color; defaults to the first palette color not in use.
        visible : bool, optional
            Initial visibility.
        id : str, optional
            Explicit identifier; generated as ``f1``, ``f2``, ... otherwise.

        Raises
        ------
        ParseError
            If ``text`` does not compile. The session is left unchanged.
        ValueError
            If ``id`` is already taken.
        """
        expression = self._compile(text)
        if id is not None and id in self._functions:
            raise ValueError(f"Function id {id!r} already exists")
        function_id = id if id is not None else self._next_id()
        function = PlottedFunction(
            id=function_id,
            expression=expression,
            color=color if color is not None else self._next_color(),
            visible=bool(visible),
        )
        self._functions[function_id] = function
        self._functions_changed()
        logger.debug("added %s = %r", function_id, expression.text)
        self._emit("function_added", None, function.text, function_id)
        return function

    def update_function(
        self,
        function_id: str,
        text: str | Expression | None = None,
        *,
        color: str | None = None,
    ) -> PlottedFunction:
        """Edit a function in place, keeping its list position.

        The color only changes when ``color`` is given.

        Raises
        ------
        KeyError
            If ``function_id`` is unknown.
        ParseError
            If ``text`` does not compile; the function keeps its old formula.
        """
        function = self._get(function_id)
        expression = self._compile(text) if text is not None else None
        old = function.text
        if expression is not None:
            function.expression = expression
            function._label = None
            self._warned_failures = {w for w in self._warned_failures if w[0] != function_id}
        if color is not None:
            function.color = color
        self._functions_changed()
        self._emit("function_updated", old, function.text, function_id)
        return function

    def remove_function(self, function_id: str) -> PlottedFunction:
        """Remove and return a function."""
        function = self._get(function_id)
        del self._functions[function_id]
        if self._selected_id == function_id:
            self._selected_id = None
        self._functions_changed()
        self._emit("function_removed", function.text, None, function_id)
        return function

    def clear_functions(self) -> None:
        """Remove every function."""
        old = [f.text for f in self._functions.values()]
        self._functions.clear()
        self._selected_id = None
        self._functions_changed()
        self._emit("functions_cleared", old, [])

    def set_visible(self, function_id: str, visible: bool = True) -> None:
        function = self._get(function_id)
        old = function.visible
        function.visible = bool(visible)
        if old != function.visible:
            self._functions_changed()
            self._emit("visibility_changed", old, function.visible, function_id)

    def select(self, function_id: str | None) -> None:
        """Highlight one function (``None`` clears the selection)."""
        if function_id is not None:
            self._get(function_id)
        old = self._selected_id
        self._selected_id = function_id
        if old != function_id:
            self._emit("selection_changed", old, function_id)

    def visible_functions(self) -> list[PlottedFunction]:
        return [f for f in self._functions.values() if f.visible]

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------

    def _view_changed(self, old: ViewWindow) -> ViewWindow:
        new = self._transformer.window
        self._intersections = None
        self._emit("view_changed", old, new)
        return new

    def resize(self, width: int, height: int) -> ViewWindow:
        """Tell the session its surface size; the view is re-fitted."""
        old = self.window
        self._transformer.resize(width, height)
        return self._view_changed(old)

    def reset_view(self) -> ViewWindow:
        old = self.window
        self._transformer.reset_view()
        return self._view_changed(old)

    def center_at(self, x: Any, y: Any) -> ViewWindow:
        old = self.window
        self._transformer.center_at(x, y)
        return self._view_changed(old)

    def set_bounds(self, x_range: Any, y_range: Any) -> ViewWindow:
        old = self.window
        self._transformer.set_bounds(x_range, y_range)
        return self._view_changed(old)

    def _surface_center(self) -> tuple[float, float]:
        w = self.window
        return (w.x_offset + w.drawable_width / 2.0, w.y_offset + w.drawable_height / 2.0)

    def zoom(self, factor: float, anchor: tuple[float, float] | None = None) -> ViewWindow:
        """Zoom about ``anchor`` (defaults to the middle of the drawable area)."""
        old = self.window
        self._transformer.zoom(factor, anchor if anchor is not None else self._surface_center())
        return self._view_changed(old)

    def zoom_in(self, anchor: tuple[float, float] | None = None) -> ViewWindow:
        return self.zoom(1.0 / self._config.zoom_step, anchor)

    def zoom_out(self, anchor: tuple[float, float] | None = None) -> ViewWindow:
        return self.zoom(self._config.zoom_step, anchor)

    def pan(self, dx: float, dy: float) -> ViewWindow:
        old = self.window
        self._transformer.pan(dx, dy)
        return self._view_changed(old)

    # ------------------------------------------------------------------
    # Intersections
    # ------------------------------------------------------------------

    def show_intersections(self, show: bool = True) -> None:
        """Enable or disable intersection search and display."""
        self._show_intersections = bool(show)
        if not self._show_intersections:
            self._intersections = None
            if self._last_intersections:
                old = self._last_intersections
                self._last_intersections = []
                self._emit("intersections_updated", old, [])

    def intersections(self) -> list[IntersectionPoint]:
        """Intersection points of all visible function pairs in the x-range.

        Computed lazily and cached until the view or the function set
        changes. Empty while intersection display is off.
        """
        if not self._show_intersections:
            return []
        if self._intersections is None:
            w = self.window
            pairs = [(f.id, f.expression) for f in self.visible_functions()]
            points = find_pairwise_intersections(pairs, w.x_min, w.x_max, config=self._config)
            self._intersections = points
            old = self._last_intersections
            self._last_intersections = points
            if not _same_points(old, points, self._config.intersection_precision):
                logger.debug("intersections updated: %d -> %d points", len(old), len(points))
                self._emit("intersections_updated", old, list(points))
        return list(self._intersections)

    # ------------------------------------------------------------------
    # Hover
    # ------------------------------------------------------------------

    def nearest_point(self, screen_x: float, screen_y: float) -> HoverPoint | None:
        """Closest visible curve point within ``hover_radius`` pixels.

        Each visible function is sampled at a few world x-values around the
        mouse column (steps of 1/100 of the x-range).
        """
        w = self.window
        if not w.has_surface or not self._functions:
            return None
        mouse_x = self._transformer.screen_to_world_x(screen_x)
        step = w.width / _HOVER_DIVISIONS
        xs = mouse_x + np.arange(-_HOVER_STEPS, _HOVER_STEPS + 1) * step
        xs = xs[(xs >= w.x_min) & (xs <= w.x_max)]
        if xs.size == 0:
            return None

        best: HoverPoint | None = None
        best_distance = self._config.hover_radius
        for function in self.visible_functions():
            sample = function.expression.sample(xs)
            for x, y, ok in zip(xs.tolist(), sample.values.tolist(), sample.valid.tolist()):
                if not ok or not w.contains_y(y):
                    continue
                sx, sy = w.screen_x(x), w.screen_y(y)
                distance = math.hypot(screen_x - sx, screen_y - sy)
                if distance < best_distance:
                    best_distance = distance
                    best = HoverPoint(function.id, x, y, sx, sy, distance)
        return best

    def intersection_near(self, screen_x: float, screen_y: float) -> IntersectionPoint | None:
        """Intersection marker within ``intersection_hit_radius`` pixels."""
        w = self.window
        if not self._show_intersections or not w.has_surface:
            return None
        best: IntersectionPoint | None = None
        best_distance = self._config.intersection_hit_radius
        for point in self.intersections():
            if not w.contains(point.x, point.y):
                continue
            distance = math.hypot(screen_x - w.screen_x(point.x), screen_y - w.screen_y(point.y))
            if distance < best_distance:
                best_distance = distance
                best = point
        return best

    def tooltip(self, screen_x: float, screen_y: float) -> str | None:
        """Hover text for the given pixel, or ``None`` when nothing is near."""
        point = self.intersection_near(screen_x, screen_y)
        if point is not None:
            return (
                f"Intersection\nx = {format_axis_value(point.x, _TOOLTIP_DECIMALS)}\n"
                f"y = {format_axis_value(point.y, _TOOLTIP_DECIMALS)}\n"
                f"between {point.first}(x) and {point.second}(x)"
            )
        hover = self.nearest_point(screen_x, screen_y)
        if hover is not None:
            return (
                f"x = {format_axis_value(hover.x, _TOOLTIP_DECIMALS)}\n"
                f"y = {format_axis_value(hover.y, _TOOLTIP_DECIMALS)}\n"
                f"{hover.function_id}(x) = {self._functions[hover.function_id].text}"
            )
        return None

    def click(self, screen_x: float, screen_y: float) -> str | None:
        """Select the curve under the pixel, or clear the selection."""
        hover = self.nearest_point(screen_x, screen_y)
        self.select(hover.function_id if hover is not None else None)
        return self._selected_id

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, reason: str = "manual") -> SessionFrame:
        """Rasterize every visible function for the current view.

        Parameters
        ----------
        reason : str, optional
            Why the frame is being produced; used for logging only.

        Returns
        -------
        SessionFrame
        """
        self._log_render(reason)
        w = self.window
        cfg = self._config
        curves: list[CurveFrame] = []
        selected: CurveFrame | None = None
        failures: dict[str, str] = {}

        for function in self.visible_functions():
            samples = sample_columns(function.expression, w)
            if samples.all_failed:
                message = f"{function.id}(x) = {function.text!r} cannot be evaluated anywhere in view (division by zero)"
                failures[function.id] = message
                key = (function.id, function.text)
                if key not in self._warned_failures:
                    self._warned_failures.add(key)
                    logger.warning(message)
            is_selected = function.id == self._selected_id
            curve = CurveFrame(
                id=function.id,
                color=function.color,
                width=cfg.selected_line_width if is_selected else cfg.line_width,
                selected=is_selected,
                segments=tuple(trace_segments(samples)),
            )
            if is_selected:
                selected = curve
            else:
                curves.append(curve)
        if selected is not None:
            curves.append(selected)

        axes = axis_layout(w) if (self._show_grid and w.has_surface) else None
        markers = tuple(p for p in self.intersections() if w.contains(p.x, p.y))
        return SessionFrame(window=w, axes=axes, curves=tuple(curves), intersections=markers, failures=failures)

    def _log_render(self, reason: str) -> None:
        """Log render information with rate-limiting."""
        now = time.monotonic()
        if logger.isEnabledFor(logging.INFO) and (now - self._render_info_last_log_t) > 1.0:
            self._render_info_last_log_t = now
            logger.info("render(reason=%s) functions=%d", reason, len(self._functions))

        if logger.isEnabledFor(logging.DEBUG) and (now - self._render_debug_last_log_t) > 0.5:
            self._render_debug_last_log_t = now
            logger.debug("ranges x=%s y=%s", self.window.x_range, self.window.y_range)

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def snapshot(self) -> SessionSnapshot:
        """Return an immutable snapshot of the session state."""
        w = self.window
        return SessionSnapshot(
            functions=tuple(f.snapshot() for f in self._functions.values()),
            x_range=w.x_range,
            y_range=w.y_range,
            show_intersections=self._show_intersections,
            selected_id=self._selected_id,
        )

    @classmethod
    def from_snapshot(
        cls,
        snapshot: SessionSnapshot,
        width: int = 0,
        height: int = 0,
        *,
        config: PlotterConfig | None = None,
    ) -> "PlotSession":
        """Rebuild a session from :meth:`snapshot` output.

        Bounds are restored verbatim; call :meth:`resize` afterwards to fit
        them to a different surface.
        """
        session = cls(width, height, config=config)
        for item in snapshot.functions:
            session.add_function(item.text, item.color, visible=item.visible, id=item.id)
        session.set_bounds(snapshot.x_range, snapshot.y_range)
        session.show_intersections(snapshot.show_intersections)
        if snapshot.selected_id is not None:
            session.select(snapshot.selected_id)
        return session

    def __repr__(self) -> str:
        w = self.window
        return f"PlotSession(functions={len(self._functions)}, x_range={w.x_range}, y_range={w.y_range})"
