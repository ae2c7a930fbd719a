"""World/screen coordinate mapping with zoom, pan and aspect correction.

Purpose
-------
``CoordinateTransformer`` owns the visible world rectangle of one drawing
surface. It derives pixel-per-unit scales from the bounds and the surface
size, converts between world and screen coordinates, and implements the
interactive view operations (reset, center, zoom about a pixel, pan).

Notes
-----
- The drawable area is the surface minus ``config.axis_margin`` pixels on
  every side. Scales are always recomputed from the bounds and the drawable
  size; they are never adjusted independently.
- Screen y grows downward while world y grows upward, so ``y_max`` maps to
  the top edge of the drawable area.
- While the surface is too small to have a drawable area, bound-adjusting
  operations keep the current bounds and conversions raise
  :class:`~funcplot.plot_errors.ViewError`.
- Every mutating method returns the new :class:`~funcplot.plot_view.ViewWindow`.

Examples
--------
>>> from funcplot.coordinate_transformer import CoordinateTransformer
>>> t = CoordinateTransformer(640, 480)
>>> t.window.x_range
(-10.0, 10.0)
>>> t.world_to_screen_x(0.0)
320
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np

from .input_convert import convert_pair, input_convert
from .plot_config import DEFAULT_CONFIG, PlotterConfig
from .plot_errors import ViewError
from .plot_view import ViewWindow, axis_decimals, format_axis_value

__all__ = ["CoordinateTransformer"]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

_FALLBACK_HALF_RANGE = 10.0
# Densities this close to the minimum count as readable (rounding slack).
_DENSITY_RTOL = 1e-9


class CoordinateTransformer:
    """Mutable view state for one drawing surface.

    Parameters
    ----------
    width, height : int, optional
        Surface size in pixels. A zero-sized surface is allowed; the view then
        falls back to ``[-10, 10]`` on both axes until :meth:`resize` is called.
    config : PlotterConfig, optional
        Tunables (margin, minimum density, default range, tolerance).
    """

    def __init__(self, width: int = 0, height: int = 0, *, config: PlotterConfig | None = None) -> None:
        self._config = config if config is not None else DEFAULT_CONFIG
        self._surface = (int(width), int(height))
        self._center = (0.0, 0.0)
        self._window = ViewWindow(
            -_FALLBACK_HALF_RANGE, _FALLBACK_HALF_RANGE, -_FALLBACK_HALF_RANGE, _FALLBACK_HALF_RANGE
        )
        self.reset_view()

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def config(self) -> PlotterConfig:
        return self._config

    @property
    def window(self) -> ViewWindow:
        """Current bounds and derived scales (immutable snapshot)."""
        return self._window

    @property
    def surface_size(self) -> tuple[int, int]:
        return self._surface

    @property
    def center(self) -> tuple[float, float]:
        """Stored view center used when the range has to be shrunk."""
        return self._center

    @property
    def drawable_size(self) -> tuple[int, int]:
        """Surface size minus the axis margins (may be zero or negative)."""
        margin = self._config.axis_margin
        return (self._surface[0] - 2 * margin, self._surface[1] - 2 * margin)

    @property
    def has_surface(self) -> bool:
        width, height = self.drawable_size
        return width > 0 and height > 0

    def axis_decimals(self) -> int:
        """Decimals used for axis labels at the current zoom level."""
        return axis_decimals(self._window)

    def format_axis_value(self, value: float) -> str:
        """Format ``value`` for an axis label at the current zoom level."""
        return format_axis_value(value, self.axis_decimals())

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------

    def _require_surface(self) -> ViewWindow:
        if not self._window.has_surface:
            width, height = self._surface
            raise ViewError(
                f"Surface {width}x{height} has no drawable area "
                f"(margin {self._config.axis_margin}px); resize it first."
            )
        return self._window

    def world_to_screen_x(self, world_x: float) -> int:
        """Map a world x to an integer pixel column (truncated)."""
        return self._require_surface().screen_x(world_x)

    def world_to_screen_y(self, world_y: float) -> int:
        """Map a world y to an integer pixel row (truncated)."""
        return self._require_surface().screen_y(world_y)

    def screen_to_world_x(self, screen_x: Any) -> Any:
        """Map pixel column(s) to world x. Accepts scalars or NumPy arrays."""
        w = self._require_surface()
        if np.ndim(screen_x):
            return w.x_min + (np.asarray(screen_x, dtype=float) - w.x_offset) / w.x_scale
        return w.x_min + (float(screen_x) - w.x_offset) / w.x_scale

    def screen_to_world_y(self, screen_y: Any) -> Any:
        """Map pixel row(s) to world y. Accepts scalars or NumPy arrays."""
        w = self._require_surface()
        if np.ndim(screen_y):
            return w.y_max - (np.asarray(screen_y, dtype=float) - w.y_offset) / w.y_scale
        return w.y_max - (float(screen_y) - w.y_offset) / w.y_scale

    # ------------------------------------------------------------------
    # Bound updates
    # ------------------------------------------------------------------

    def _apply(self, x_min: float, x_max: float, y_min: float, y_max: float) -> ViewWindow:
        """Store new bounds and recompute scales from the drawable size."""
        width, height = self.drawable_size
        margin = self._config.axis_margin
        if width > 0 and height > 0:
            self._window = ViewWindow(
                x_min=x_min,
                x_max=x_max,
                y_min=y_min,
                y_max=y_max,
                x_scale=width / (x_max - x_min),
                y_scale=height / (y_max - y_min),
                x_offset=margin,
                y_offset=margin,
                drawable_width=width,
                drawable_height=height,
            )
        else:
            self._window = ViewWindow(x_min, x_max, y_min, y_max, x_offset=margin, y_offset=margin)
        return self._window

    def _update_center(self) -> None:
        self._center = self._window.center

    def resize(self, width: int, height: int) -> ViewWindow:
        """Record a new surface size and re-fit the bounds to its aspect."""
        return self.adjust_to_aspect_ratio(width, height)

    def adjust_to_aspect_ratio(self, width: int | None = None, height: int | None = None) -> ViewWindow:
        """Keep the view readable and matched to the surface aspect ratio.

        Parameters
        ----------
        width, height : int, optional
            New surface size. Omitted values keep the current size.

        Notes
        -----
        If either axis falls below ``min_pixels_per_unit``, the unit range is
        shrunk symmetrically about the stored center to the widest readable
        range with the surface's aspect. Otherwise the narrower axis is grown
        symmetrically about its midpoint when the aspect is off by more than
        ``aspect_tolerance``, and the stored center follows. A surface with no
        drawable area leaves the bounds unchanged.
        """
        if width is not None or height is not None:
            self._surface = (
                self._surface[0] if width is None else int(width),
                self._surface[1] if height is None else int(height),
            )
        draw_w, draw_h = self.drawable_size
        if draw_w <= 0 or draw_h <= 0:
            logger.debug("adjust skipped: drawable area %sx%s", draw_w, draw_h)
            return self._apply(*self._bounds())

        cfg = self._config
        aspect = draw_w / draw_h
        w = self._window
        x_min, x_max, y_min, y_max = self._bounds()

        readable = cfg.min_pixels_per_unit * (1.0 - _DENSITY_RTOL)
        if draw_w / w.width < readable or draw_h / w.height < readable:
            max_units_x = draw_w / cfg.min_pixels_per_unit
            max_units_y = draw_h / cfg.min_pixels_per_unit
            if max_units_x / max_units_y < aspect:
                max_units_y = max_units_x / aspect
            else:
                max_units_x = max_units_y * aspect
            cx, cy = self._center
            x_min, x_max = cx - max_units_x / 2.0, cx + max_units_x / 2.0
            y_min, y_max = cy - max_units_y / 2.0, cy + max_units_y / 2.0
            self._apply(x_min, x_max, y_min, y_max)
        else:
            x_range = x_max - x_min
            y_range = y_max - y_min
            current = x_range / y_range
            if abs(current - aspect) > cfg.aspect_tolerance:
                if current < aspect:
                    half_delta = (y_range * aspect - x_range) / 2.0
                    x_min, x_max = x_min - half_delta, x_max + half_delta
                else:
                    half_delta = (x_range / aspect - y_range) / 2.0
                    y_min, y_max = y_min - half_delta, y_max + half_delta
                self._apply(x_min, x_max, y_min, y_max)
                self._update_center()
            else:
                self._apply(x_min, x_max, y_min, y_max)
        return self._window

    def _bounds(self) -> tuple[float, float, float, float]:
        w = self._window
        return (w.x_min, w.x_max, w.y_min, w.y_max)

    def reset_view(self) -> ViewWindow:
        """Center on the origin with the default range, then fit the aspect."""
        self._center = (0.0, 0.0)
        draw_w, draw_h = self.drawable_size
        if draw_w <= 0 or draw_h <= 0:
            half_x = half_y = _FALLBACK_HALF_RANGE
        else:
            cfg = self._config
            half_x = min(draw_w / cfg.min_pixels_per_unit, cfg.default_view_range) / 2.0
            half_y = min(draw_h / cfg.min_pixels_per_unit, cfg.default_view_range) / 2.0
            aspect = draw_w / draw_h
            if half_x / half_y < aspect:
                half_y = half_x / aspect
            else:
                half_x = half_y * aspect
        self._apply(-half_x, half_x, -half_y, half_y)
        return self.adjust_to_aspect_ratio()

    def center_at(self, x: Any, y: Any) -> ViewWindow:
        """Move the view so ``(x, y)`` is centered, keeping both ranges.

        ``x`` and ``y`` may be numbers or constant formulas like ``"pi"``.
        """
        cx = input_convert(x)
        cy = input_convert(y)
        w = self._window
        self._center = (cx, cy)
        half_x = w.width / 2.0
        half_y = w.height / 2.0
        return self._apply(cx - half_x, cx + half_x, cy - half_y, cy + half_y)

    def zoom(self, factor: float, anchor: tuple[float, float]) -> ViewWindow:
        """Scale both ranges by ``factor`` keeping ``anchor`` pixel-stable.

        Parameters
        ----------
        factor : float
            Range multiplier; values below 1 zoom in.
        anchor : tuple[float, float]
            Screen pixel whose world point must stay under it.

        Raises
        ------
        ValueError
            If ``factor`` is not a positive finite number.
        """
        factor = float(factor)
        if not (factor > 0 and np.isfinite(factor)):
            raise ValueError(f"zoom factor must be a positive finite number, got {factor!r}")
        if not self._window.has_surface:
            return self._window

        w = self._window
        anchor_x = self.screen_to_world_x(anchor[0])
        anchor_y = self.screen_to_world_y(anchor[1])
        new_x_range = w.width * factor
        new_y_range = w.height * factor
        rel_x = (anchor_x - w.x_min) / w.width
        rel_y = (anchor_y - w.y_min) / w.height
        x_min = anchor_x - rel_x * new_x_range
        y_min = anchor_y - rel_y * new_y_range
        self._apply(x_min, x_min + new_x_range, y_min, y_min + new_y_range)
        self._update_center()
        logger.debug("zoom x%.4g at %s -> x %s y %s", factor, anchor, self._window.x_range, self._window.y_range)
        return self._window

    def pan(self, dx: float, dy: float) -> ViewWindow:
        """Shift the view by a pixel delta (dragging right moves the world right)."""
        w = self._window
        if not w.has_surface:
            return w
        world_dx = dx / w.x_scale
        world_dy = dy / w.y_scale
        self._apply(w.x_min - world_dx, w.x_max - world_dx, w.y_min + world_dy, w.y_max + world_dy)
        self._update_center()
        return self._window

    def set_bounds(self, x_range: Any, y_range: Any) -> ViewWindow:
        """Set explicit world bounds without aspect correction.

        Raises
        ------
        ViewError
            If either range is empty, inverted or not finite.
        """
        try:
            x_min, x_max = convert_pair(x_range, name="x_range")
            y_min, y_max = convert_pair(y_range, name="y_range")
        except ValueError as e:
            raise ViewError(str(e)) from e
        self._apply(x_min, x_max, y_min, y_max)
        self._update_center()
        return self._window

    def __repr__(self) -> str:
        w = self._window
        return (
            f"CoordinateTransformer(surface={self._surface[0]}x{self._surface[1]}, "
            f"x_range={w.x_range}, y_range={w.y_range})"
        )
