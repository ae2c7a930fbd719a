"""Numeric intersection search between plotted functions.

Purpose
-------
Locate x-values where two single-variable expressions agree inside a world
x-range. The difference ``d(x) = a(x) - b(x)`` is sampled on a fixed grid;
every pair of neighbouring valid samples whose signs differ (or where one is
exactly zero) brackets a root that is refined by bisection.

Notes
-----
- Samples that fail (division by zero) or are not finite are skipped and
  break adjacency, so a bracket never spans a gap.
- Pairs whose values agree within ``coincidence_tolerance`` at every
  conclusive check sample are treated as the same curve and yield no points.
- A bracket straddling a pole (``tan(x) = 0`` at ``pi/2``) also changes
  sign. Bisection converges onto it, but the difference at the final
  midpoint is then larger than at both bracket ends, and such points are
  rejected.
- Within one pair, points closer than ``intersection_precision`` in x are
  duplicates. :func:`find_pairwise_intersections` additionally drops points
  from different pairs that coincide in both x and y.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Hashable, Iterator, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from .plot_config import DEFAULT_CONFIG, PlotterConfig
from .plot_errors import EvaluationError

if TYPE_CHECKING:
    from .expression import Expression

__all__ = [
    "IntersectionPoint",
    "are_coincident",
    "find_intersections",
    "find_pairwise_intersections",
    "scan_step",
]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

# Scan samples evaluated per vectorized call.
_SCAN_CHUNK = 100_000


@dataclass(frozen=True)
class IntersectionPoint:
    """World point shared by two functions.

    Parameters
    ----------
    x, y : float
        Location; ``y`` is the first function's value at ``x``.
    first, second : Hashable
        Identifiers of the two functions (list order, ``first`` earlier).
    first_index, second_index : int
        Positions of the two functions in the list that was searched.
    """

    x: float
    y: float
    first: Hashable
    second: Hashable
    first_index: int
    second_index: int

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)


def _difference(a: "Expression", b: "Expression", x: float) -> float:
    try:
        return a.evaluate(x) - b.evaluate(x)
    except EvaluationError:
        return math.nan


def _sign_changed(y0: float, y1: float) -> bool:
    return (y0 < 0 < y1) or (y0 > 0 > y1) or y0 == 0 or y1 == 0


def scan_step(x_min: float, x_max: float, config: PlotterConfig = DEFAULT_CONFIG) -> float:
    """Sampling step: ``min(intersection_step, range / 1000)``."""
    return min(config.intersection_step, (x_max - x_min) / 1000.0)


def are_coincident(
    a: "Expression",
    b: "Expression",
    x_min: float,
    x_max: float,
    config: PlotterConfig = DEFAULT_CONFIG,
) -> bool:
    """Return True when ``a`` and ``b`` look identical on ``[x_min, x_max]``.

    Check samples are evenly spaced. A sample where either side fails or is not
    finite is inconclusive and ignored; a pair with no conclusive sample at
    all counts as coincident. A failed sample does not make the pair distinct:
    ``1/x`` against itself fails at ``x = 0`` on both sides, and scanning
    identical curves would report every sample as a root.
    """
    xs = np.linspace(x_min, x_max, config.coincidence_samples)
    sa = a.sample(xs)
    sb = b.sample(xs)
    conclusive = sa.valid & sb.valid
    if not np.any(conclusive):
        return True
    diff = np.abs(sa.values[conclusive] - sb.values[conclusive])
    return bool(np.all(diff < config.coincidence_tolerance))


def _refine(
    a: "Expression",
    b: "Expression",
    left: float,
    right: float,
    config: PlotterConfig,
) -> tuple[float, float] | None:
    """Bisect ``[left, right]``; return ``(x, a(x))`` or None."""
    d_left = _difference(a, b, left)
    d_right = _difference(a, b, right)
    # A sample sitting on the root is exact; both neighbouring brackets report it.
    for x, d in ((left, d_left), (right, d_right)):
        if d == 0:
            return (x, a.evaluate(x))
    bound = max(abs(d_left), abs(d_right))
    lo, hi = left, right
    for _ in range(config.intersection_max_iterations):
        mid = (lo + hi) / 2.0
        value = _difference(a, b, mid)
        if abs(hi - lo) < config.intersection_precision or abs(value) < config.intersection_precision:
            if not math.isfinite(value) or abs(value) > bound:
                logger.debug("rejected bracket [%g, %g]: discontinuity near %g", left, right, mid)
                return None
            try:
                y = a.evaluate(mid)
            except EvaluationError:
                return None
            return (mid, y)
        if _sign_changed(_difference(a, b, lo), value):
            hi = mid
        else:
            lo = mid
    return None


def find_intersections(
    a: "Expression",
    b: "Expression",
    x_min: float,
    x_max: float,
    *,
    config: PlotterConfig | None = None,
) -> list[tuple[float, float]]:
    """Find points where ``a`` and ``b`` intersect inside ``[x_min, x_max]``.

    Parameters
    ----------
    a, b : Expression
        Single-variable expressions.
    x_min, x_max : float
        Search interval in world units.
    config : PlotterConfig, optional
        Step, precision, iteration cap and coincidence settings.

    Returns
    -------
    list[tuple[float, float]]
        ``(x, a(x))`` pairs in ascending x. Empty for coincident functions or
        an empty interval.
    """
    cfg = config if config is not None else DEFAULT_CONFIG
    x_min = float(x_min)
    x_max = float(x_max)
    if not (x_max > x_min) or not (math.isfinite(x_min) and math.isfinite(x_max)):
        return []
    if are_coincident(a, b, x_min, x_max, cfg):
        logger.debug("skipping coincident pair %r / %r", a.text, b.text)
        return []

    step = scan_step(x_min, x_max, cfg)
    count = int(math.floor((x_max - x_min) / step + 1e-9)) + 1

    found: list[tuple[float, float]] = []
    brackets = 0
    for left, right in _scan_brackets(a, b, x_min, step, count):
        brackets += 1
        point = _refine(a, b, left, right, cfg)
        if point is None:
            continue
        if any(abs(point[0] - seen[0]) < cfg.intersection_precision for seen in found):
            continue
        found.append(point)

    logger.debug("%r vs %r on [%g, %g]: %d brackets, %d points", a.text, b.text, x_min, x_max, brackets, len(found))
    return found


def _scan_brackets(
    a: "Expression",
    b: "Expression",
    x_min: float,
    step: float,
    count: int,
) -> Iterator[tuple[float, float]]:
    """Yield neighbouring scan samples whose differences change sign.

    The grid ``x_min + i * step`` for ``i < count`` is sampled ``_SCAN_CHUNK``
    points at a time. The last sample of each chunk is carried into the next
    so a bracket straddling a chunk boundary is still found.
    """
    carry: tuple[float, float, bool] | None = None
    for start in range(0, count, _SCAN_CHUNK):
        xs = x_min + np.arange(start, min(start + _SCAN_CHUNK, count)) * step
        sa = a.sample(xs)
        sb = b.sample(xs)
        diff = sa.values - sb.values
        valid = sa.valid & sb.valid & np.isfinite(diff)
        if carry is not None:
            xs = np.concatenate(([carry[0]], xs))
            diff = np.concatenate(([carry[1]], diff))
            valid = np.concatenate(([carry[2]], valid))
        carry = (float(xs[-1]), float(diff[-1]), bool(valid[-1]))

        d0, d1 = diff[:-1], diff[1:]
        with np.errstate(invalid="ignore"):
            crosses = (d0 < 0) & (d1 > 0) | (d0 > 0) & (d1 < 0) | (d0 == 0) | (d1 == 0)
        for i in np.flatnonzero(valid[:-1] & valid[1:] & crosses).tolist():
            yield float(xs[i]), float(xs[i + 1])


def find_pairwise_intersections(
    functions: Sequence[tuple[Hashable, "Expression"]],
    x_min: float,
    x_max: float,
    *,
    config: PlotterConfig | None = None,
) -> list[IntersectionPoint]:
    """Intersect every unordered pair of ``(id, expression)`` entries.

    Points found by different pairs that agree in both x and y within
    ``intersection_precision`` are reported once, attributed to the first
    pair that found them.
    """
    cfg = config if config is not None else DEFAULT_CONFIG
    tol = cfg.intersection_precision
    points: list[IntersectionPoint] = []
    for i in range(len(functions) - 1):
        first_id, first = functions[i]
        for j in range(i + 1, len(functions)):
            second_id, second = functions[j]
            for x, y in find_intersections(first, second, x_min, x_max, config=cfg):
                if any(abs(p.x - x) < tol and abs(p.y - y) < tol for p in points):
                    continue
                points.append(IntersectionPoint(x, y, first_id, second_id, i, j))
    return points
