"""Per-column curve rasterization with band clipping.

Purpose
-------
Turn a compiled single-variable :class:`~funcplot.expression.Expression` into
screen-space polylines for the current view. Every pixel column of the
drawable area is sampled once; the walk over the samples splits the curve at
gaps (NaN, infinities, failed evaluations) and clips it against the visible
vertical band so each segment starts and ends exactly on the band edge
instead of at the first or last in-band pixel.

Notes
-----
Sampling is vectorized (:func:`sample_columns`) and the walk is a plain loop
(:func:`trace_segments`). :func:`rasterize` chains the two. Keeping the
samples around lets callers tell a curve that is merely off-screen apart from
one that failed at every column.

Boundary crossings are linearly interpolated between neighbouring samples,
which are exactly one pixel apart in world x, so the crossing error is bounded
by one pixel step.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from .plot_view import ViewWindow

if TYPE_CHECKING:
    from .coordinate_transformer import CoordinateTransformer
    from .expression import Expression

__all__ = ["PathSegment", "ColumnSamples", "sample_columns", "trace_segments", "rasterize"]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class PathSegment:
    """One continuous visible stretch of a curve.

    Parameters
    ----------
    points : tuple[tuple[int, int], ...]
        Screen points in drawing order (at least two for crossings, at least
        one otherwise).
    is_crossing : bool
        True for a standalone two-point segment emitted when the curve jumps
        from one side of the band to the other between adjacent columns.
    """

    points: tuple[tuple[int, int], ...]
    is_crossing: bool = False

    def __len__(self) -> int:
        return len(self.points)

    @property
    def xs(self) -> list[int]:
        return [p[0] for p in self.points]

    @property
    def ys(self) -> list[int]:
        return [p[1] for p in self.points]


@dataclass(frozen=True)
class ColumnSamples:
    """World samples for every drawable pixel column.

    Parameters
    ----------
    window : ViewWindow
        View the samples were taken for.
    columns : numpy.ndarray
        Integer screen columns, left to right.
    xs, ys : numpy.ndarray
        World x per column and the evaluated world y.
    failed : numpy.ndarray
        Columns whose evaluation raised (division by zero).
    """

    window: ViewWindow
    columns: np.ndarray
    xs: np.ndarray
    ys: np.ndarray
    failed: np.ndarray

    @property
    def valid(self) -> np.ndarray:
        """Columns with a finite, successfully evaluated y."""
        return ~self.failed & np.isfinite(self.ys)

    @property
    def all_failed(self) -> bool:
        """True when every column raised during evaluation."""
        return bool(self.failed.size) and bool(np.all(self.failed))

    @property
    def all_invalid(self) -> bool:
        """True when no column produced a finite value."""
        return bool(self.ys.size) and not bool(np.any(self.valid))


def sample_columns(expression: "Expression", window: ViewWindow) -> ColumnSamples:
    """Evaluate ``expression`` once per drawable column of ``window``.

    Columns run from ``x_offset`` to ``x_offset + drawable_width`` inclusive.
    A window without drawable area yields empty arrays.
    """
    if not window.has_surface:
        empty = np.empty(0)
        return ColumnSamples(window, empty.astype(int), empty, empty, empty.astype(bool))
    columns = np.arange(window.x_offset, window.x_offset + window.drawable_width + 1)
    xs = window.x_min + (columns - window.x_offset) / window.x_scale
    sample = expression.sample(xs)
    return ColumnSamples(window, columns, xs, sample.values, sample.failed)


class _Tracer:
    """Scalar walk over column samples, accumulating segments."""

    def __init__(self, window: ViewWindow) -> None:
        self.window = window
        self.segments: list[PathSegment] = []
        self.current: list[tuple[int, int]] | None = None
        # Previous sample: world x, world y, screen x, screen y.
        self.last: tuple[float, float, int, int] | None = None

    def close(self) -> None:
        if self.current is not None:
            self.segments.append(PathSegment(tuple(self.current)))
            self.current = None

    def gap(self) -> None:
        self.close()
        self.last = None

    def _crossing(self, boundary: float, x: float, y: float) -> int:
        lx, ly, _, _ = self.last  # type: ignore[misc]
        t = (boundary - ly) / (y - ly)
        return self.window.screen_x(lx + t * (x - lx))

    def outside(self, column: int, x: float, y: float) -> None:
        w = self.window
        below = y < w.y_min
        edge_row = w.bottom if below else w.top

        if self.last is not None:
            ly = self.last[1]
            if w.contains_y(ly):
                if self.current is None:
                    self.current = [(self.last[2], self.last[3])]
                boundary = w.y_min if below else w.y_max
                self.current.append((self._crossing(boundary, x, y), edge_row))
                self.close()
            elif (ly < w.y_min and y > w.y_max) or (ly > w.y_max and y < w.y_min):
                came_from_below = ly < w.y_min
                first = w.y_min if came_from_below else w.y_max
                second = w.y_max if came_from_below else w.y_min
                entry = (self._crossing(first, x, y), w.bottom if came_from_below else w.top)
                exit_ = (self._crossing(second, x, y), w.top if came_from_below else w.bottom)
                self.segments.append(PathSegment((entry, exit_), is_crossing=True))

        self.last = (x, y, column, edge_row)

    def inside(self, column: int, x: float, y: float) -> None:
        w = self.window
        row = w.screen_y(y)
        if self.last is not None and not w.contains_y(self.last[1]):
            ly = self.last[1]
            boundary = w.y_min if ly < w.y_min else w.y_max
            entry_row = w.bottom if ly < w.y_min else w.top
            self.current = [(self._crossing(boundary, x, y), entry_row), (column, row)]
        elif self.current is None:
            self.current = [(column, row)]
        else:
            self.current.append((column, row))
        self.last = (x, y, column, row)


def trace_segments(samples: ColumnSamples) -> list[PathSegment]:
    """Split sampled columns into band-clipped path segments."""
    window = samples.window
    tracer = _Tracer(window)
    valid = samples.valid
    for column, x, y, ok in zip(samples.columns.tolist(), samples.xs.tolist(), samples.ys.tolist(), valid.tolist()):
        if not ok:
            tracer.gap()
        elif window.contains_y(y):
            tracer.inside(column, x, y)
        else:
            tracer.outside(column, x, y)
    tracer.close()
    return tracer.segments


def rasterize(expression: "Expression", transformer: "CoordinateTransformer") -> list[PathSegment]:
    """Rasterize ``expression`` for the transformer's current view.

    Returns
    -------
    list[PathSegment]
        Segments ready for direct line drawing; empty when the surface has no
        drawable area or nothing is visible.
    """
    samples = sample_columns(expression, transformer.window)
    segments = trace_segments(samples)
    logger.debug(
        "rasterized %r: %d columns, %d segments, %d failed",
        expression.text,
        samples.columns.size,
        len(segments),
        int(np.count_nonzero(samples.failed)),
    )
    return segments
