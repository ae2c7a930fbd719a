"""Tunable constants shared by the transformer, rasterizer and session.

All knobs live in one frozen dataclass so a session can be configured
explicitly and tests can lock the defaults in one place.

Examples
--------
>>> from funcplot.plot_config import DEFAULT_CONFIG
>>> DEFAULT_CONFIG.axis_margin
40
>>> DEFAULT_CONFIG.replace(axis_margin=0).axis_margin
0
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

__all__ = ["PlotterConfig", "DEFAULT_CONFIG", "PLOTTER_CONFIG_OPTIONS"]


PLOTTER_CONFIG_OPTIONS: dict[str, str] = {
    "axis_margin": "Pixels reserved on every side of the surface for axis labels.",
    "min_pixels_per_unit": "Lowest readable density; the view shrinks its range to keep at least this many px per unit.",
    "default_view_range": "World units shown per axis after reset_view() when the surface is large enough.",
    "aspect_tolerance": "Allowed difference between view and surface aspect ratios before the view is corrected.",
    "zoom_step": "Factor applied by zoom_out(); zoom_in() uses its reciprocal.",
    "intersection_step": "Upper bound on the sign-change scan step in world units.",
    "intersection_precision": "Bisection stops once the bracket or the difference is below this value.",
    "intersection_max_iterations": "Hard cap on bisection iterations per bracket.",
    "coincidence_samples": "Samples used to detect that two functions are identical.",
    "coincidence_tolerance": "Largest difference still considered equal when checking coincidence.",
    "hover_radius": "Pixel distance within which a curve point counts as hovered.",
    "intersection_hit_radius": "Pixel distance within which an intersection marker counts as hovered.",
    "line_width": "Stroke width of unselected curves.",
    "selected_line_width": "Stroke width of the selected curve.",
}


@dataclass(frozen=True)
class PlotterConfig:
    """Immutable bundle of plotting tunables (see ``PLOTTER_CONFIG_OPTIONS``)."""

    axis_margin: int = 40
    min_pixels_per_unit: float = 10.0
    default_view_range: float = 20.0
    aspect_tolerance: float = 0.01
    zoom_step: float = 1.2
    intersection_step: float = 0.1
    intersection_precision: float = 1e-6
    intersection_max_iterations: int = 50
    coincidence_samples: int = 10
    coincidence_tolerance: float = 1e-10
    hover_radius: float = 5.0
    intersection_hit_radius: float = 10.0
    line_width: float = 2.0
    selected_line_width: float = 4.0

    def __post_init__(self) -> None:
        if self.axis_margin < 0:
            raise ValueError("axis_margin must be >= 0")
        if self.min_pixels_per_unit <= 0:
            raise ValueError("min_pixels_per_unit must be > 0")
        if self.default_view_range <= 0:
            raise ValueError("default_view_range must be > 0")
        if self.zoom_step <= 1.0:
            raise ValueError("zoom_step must be > 1")
        if self.intersection_step <= 0 or self.intersection_precision <= 0:
            raise ValueError("intersection_step and intersection_precision must be > 0")
        if self.intersection_max_iterations < 1 or self.coincidence_samples < 2:
            raise ValueError("intersection_max_iterations must be >= 1 and coincidence_samples >= 2")

    def replace(self, **changes: Any) -> "PlotterConfig":
        """Return a copy with ``changes`` applied."""
        return replace(self, **changes)


DEFAULT_CONFIG = PlotterConfig()
