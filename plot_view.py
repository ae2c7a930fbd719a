"""View-window state model.

``ViewWindow`` is the single value that rasterization, intersection search
and axis labelling read. It is an immutable snapshot: the
:class:`~funcplot.coordinate_transformer.CoordinateTransformer` replaces it
on every bounds-mutating call, so a window handed to a caller never changes
under it.
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["ViewWindow", "axis_decimals", "format_axis_value"]


@dataclass(frozen=True)
class ViewWindow:
    """World bounds plus the derived pixel mapping.

    Parameters
    ----------
    x_min, x_max, y_min, y_max : float
        Visible world rectangle. ``x_max > x_min`` and ``y_max > y_min``.
    x_scale, y_scale : float
        Pixels per world unit. ``0.0`` while the surface has no drawable area.
    x_offset, y_offset : int
        Pixel position of the drawable area's top-left corner.
    drawable_width, drawable_height : int
        Size of the drawable area in pixels (surface minus axis margins).
    """

    x_min: float
    x_max: float
    y_min: float
    y_max: float
    x_scale: float = 0.0
    y_scale: float = 0.0
    x_offset: int = 0
    y_offset: int = 0
    drawable_width: int = 0
    drawable_height: int = 0

    @property
    def x_range(self) -> tuple[float, float]:
        return (self.x_min, self.x_max)

    @property
    def y_range(self) -> tuple[float, float]:
        return (self.y_min, self.y_max)

    @property
    def width(self) -> float:
        """World width of the window."""
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        """World height of the window."""
        return self.y_max - self.y_min

    @property
    def center(self) -> tuple[float, float]:
        return ((self.x_min + self.x_max) / 2.0, (self.y_min + self.y_max) / 2.0)

    @property
    def has_surface(self) -> bool:
        """True when the drawable area is non-empty and scales are defined."""
        return self.drawable_width > 0 and self.drawable_height > 0

    @property
    def top(self) -> int:
        """Screen y of the upper band edge (``y_max``)."""
        return self.y_offset

    @property
    def bottom(self) -> int:
        """Screen y of the lower band edge (``y_min``)."""
        return self.y_offset + self.drawable_height

    def screen_x(self, world_x: float) -> int:
        """Pixel column of ``world_x`` (truncated toward zero)."""
        return int(self.x_offset + (world_x - self.x_min) * self.x_scale)

    def screen_y(self, world_y: float) -> int:
        """Pixel row of ``world_y`` (truncated toward zero)."""
        return int(self.y_offset + (self.y_max - world_y) * self.y_scale)

    def contains(self, x: float, y: float) -> bool:
        """Return True when world point ``(x, y)`` is inside the window."""
        return self.x_min <= x <= self.x_max and self.y_min <= y <= self.y_max

    def contains_y(self, y: float) -> bool:
        """Return True when ``y`` lies within the visible vertical band."""
        return self.y_min <= y <= self.y_max


def axis_decimals(window: ViewWindow) -> int:
    """Number of decimals for axis labels at the current zoom level.

    Uses the smaller of the two world ranges: 2 decimals from 10 units up,
    3 from 1, 4 from 0.1 and 5 below that.
    """
    span = min(window.width, window.height)
    if span < 0.1:
        return 5
    if span < 1:
        return 4
    if span < 10:
        return 3
    return 2


def format_axis_value(value: float, decimals: int) -> str:
    """Format ``value`` with at most ``decimals`` decimals, dropping trailing zeros."""
    text = f"{value:.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text
