from __future__ import annotations

import math

import numpy as np
import pytest

from funcplot.coordinate_transformer import CoordinateTransformer
from funcplot.plot_config import PlotterConfig
from funcplot.plot_errors import ViewError
from funcplot.plot_view import ViewWindow, axis_decimals, format_axis_value


def _bounds(window: ViewWindow) -> tuple[float, float, float, float]:
    return (window.x_min, window.x_max, window.y_min, window.y_max)


def test_reset_view_fits_default_range_to_surface_aspect(transformer: CoordinateTransformer) -> None:
    w = transformer.window
    assert w.x_range == (-10.0, 10.0)
    assert w.y_min == pytest.approx(-50 / 7)
    assert w.y_max == pytest.approx(50 / 7)
    assert (w.drawable_width, w.drawable_height) == (560, 400)
    assert (w.x_offset, w.y_offset) == (40, 40)
    assert w.x_scale == pytest.approx(28.0)
    assert w.y_scale == pytest.approx(28.0)
    assert transformer.center == (0.0, 0.0)


def test_world_to_screen_and_back(transformer: CoordinateTransformer) -> None:
    assert transformer.world_to_screen_x(0.0) == 320
    assert abs(transformer.world_to_screen_y(0.0) - 240) <= 1
    assert transformer.world_to_screen_x(-10.0) == 40
    assert transformer.world_to_screen_x(10.0) == 600
    assert transformer.screen_to_world_x(40) == pytest.approx(-10.0)
    assert transformer.screen_to_world_y(40) == pytest.approx(transformer.window.y_max)
    assert transformer.screen_to_world_y(440) == pytest.approx(transformer.window.y_min)


def test_world_to_screen_truncates_to_int(transformer: CoordinateTransformer) -> None:
    px = transformer.world_to_screen_x(0.03)
    assert isinstance(px, int)
    assert px == 320


def test_screen_to_world_accepts_arrays(transformer: CoordinateTransformer) -> None:
    xs = transformer.screen_to_world_x(np.array([40, 320, 600]))
    assert xs.tolist() == pytest.approx([-10.0, 0.0, 10.0])
    ys = transformer.screen_to_world_y([240])
    assert ys.tolist() == pytest.approx([0.0], abs=1e-12)


def test_round_trip_within_one_pixel(transformer: CoordinateTransformer) -> None:
    w = transformer.window
    for wx in np.linspace(w.x_min, w.x_max, 37):
        back = transformer.screen_to_world_x(transformer.world_to_screen_x(wx))
        assert abs(back - wx) <= 1.0 / w.x_scale + 1e-12


def test_zoom_keeps_anchor_fixed(transformer: CoordinateTransformer) -> None:
    anchor = (180, 120)
    before_x = transformer.screen_to_world_x(anchor[0])
    before_y = transformer.screen_to_world_y(anchor[1])
    w = transformer.zoom(0.5, anchor)
    assert w.width == pytest.approx(10.0)
    assert w.height == pytest.approx(50 / 7)
    assert transformer.screen_to_world_x(anchor[0]) == pytest.approx(before_x)
    assert transformer.screen_to_world_y(anchor[1]) == pytest.approx(before_y)


def test_zoom_preserves_relative_anchor_position(transformer: CoordinateTransformer) -> None:
    old = transformer.window
    anchor = (460, 300)
    ax = transformer.screen_to_world_x(anchor[0])
    ay = transformer.screen_to_world_y(anchor[1])
    new = transformer.zoom(1.7, anchor)
    assert (ax - new.x_min) / new.width == pytest.approx((ax - old.x_min) / old.width)
    assert (ay - new.y_min) / new.height == pytest.approx((ay - old.y_min) / old.height)


def test_zoom_in_then_out_restores_bounds(transformer: CoordinateTransformer) -> None:
    before = _bounds(transformer.window)
    transformer.zoom(0.5, (123, 321))
    transformer.zoom(2.0, (123, 321))
    assert _bounds(transformer.window) == pytest.approx(before, rel=1e-12, abs=1e-12)


def test_zoom_updates_center(transformer: CoordinateTransformer) -> None:
    transformer.zoom(0.5, (40, 40))
    assert transformer.center == pytest.approx(transformer.window.center)


@pytest.mark.parametrize("factor", [0.0, -1.0, math.inf, math.nan])
def test_zoom_rejects_invalid_factor(transformer: CoordinateTransformer, factor: float) -> None:
    with pytest.raises(ValueError):
        transformer.zoom(factor, (320, 240))


def test_pan_moves_world_with_the_drag(transformer: CoordinateTransformer) -> None:
    w = transformer.pan(28, 0)
    assert w.x_range == pytest.approx((-11.0, 9.0))
    w = transformer.pan(0, 28)
    assert w.y_min == pytest.approx(-50 / 7 + 1.0)
    assert w.y_max == pytest.approx(50 / 7 + 1.0)
    assert transformer.center == pytest.approx((-1.0, 1.0))


def test_center_at_keeps_ranges_and_accepts_text(transformer: CoordinateTransformer) -> None:
    w = transformer.center_at(3, "pi")
    assert w.x_range == pytest.approx((-7.0, 13.0))
    assert w.center[1] == pytest.approx(math.pi)
    assert w.height == pytest.approx(100 / 7)
    assert transformer.center == pytest.approx((3.0, math.pi))


def test_adjust_grows_narrower_axis_about_midpoint(transformer: CoordinateTransformer) -> None:
    transformer.set_bounds((-10, 10), (-10, 10))
    w = transformer.adjust_to_aspect_ratio()
    assert w.x_range == pytest.approx((-14.0, 14.0))
    assert w.y_range == pytest.approx((-10.0, 10.0))
    assert w.width / w.height == pytest.approx(560 / 400)


def test_adjust_grows_y_when_view_is_too_wide(transformer: CoordinateTransformer) -> None:
    transformer.set_bounds((0, 20), (0, 5))
    w = transformer.adjust_to_aspect_ratio()
    assert w.x_range == pytest.approx((0.0, 20.0))
    assert w.y_range == pytest.approx((2.5 - 50 / 7, 2.5 + 50 / 7))
    assert transformer.center == pytest.approx((10.0, 2.5))


def test_adjust_shrinks_unreadable_range_about_stored_center(transformer: CoordinateTransformer) -> None:
    transformer.set_bounds((-100, 100), (-100, 100))
    w = transformer.adjust_to_aspect_ratio()
    assert w.x_range == pytest.approx((-28.0, 28.0))
    assert w.y_range == pytest.approx((-20.0, 20.0))
    assert w.x_scale == pytest.approx(10.0)
    assert w.y_scale == pytest.approx(10.0)


def test_adjust_is_idempotent(transformer: CoordinateTransformer) -> None:
    transformer.set_bounds((-3, 50), (1, 2))
    first = transformer.adjust_to_aspect_ratio(800, 300)
    second = transformer.adjust_to_aspect_ratio(800, 300)
    assert first == second


def test_resize_refits_aspect() -> None:
    t = CoordinateTransformer(640, 480)
    w = t.resize(1040, 480)
    assert (w.drawable_width, w.drawable_height) == (960, 400)
    assert abs(w.width / w.height - 960 / 400) <= 0.01


def test_small_surface_keeps_minimum_density() -> None:
    t = CoordinateTransformer(200, 150)
    w = t.window
    assert w.x_scale >= 10.0 - 1e-9
    assert w.y_scale >= 10.0 - 1e-9
    assert w.x_range == pytest.approx((-6.0, 6.0))
    assert w.y_range == pytest.approx((-3.5, 3.5))


def test_degenerate_surface_falls_back_and_no_ops() -> None:
    t = CoordinateTransformer(0, 0)
    w = t.window
    assert _bounds(w) == (-10.0, 10.0, -10.0, 10.0)
    assert not w.has_surface
    assert t.zoom(0.5, (0, 0)) == w
    assert t.pan(10, 10) == w
    assert t.adjust_to_aspect_ratio() == w
    with pytest.raises(ViewError):
        t.world_to_screen_x(0.0)
    with pytest.raises(ViewError):
        t.screen_to_world_y(0)


def test_surface_smaller_than_margins_is_degenerate() -> None:
    t = CoordinateTransformer(80, 300)
    assert not t.has_surface
    assert t.drawable_size == (0, 220)
    t.resize(400, 300)
    assert t.has_surface


def test_set_bounds_rejects_degenerate_ranges(transformer: CoordinateTransformer) -> None:
    with pytest.raises(ViewError):
        transformer.set_bounds((5, 5), (0, 1))
    with pytest.raises(ViewError):
        transformer.set_bounds((0, 1), (2, -2))
    with pytest.raises(ViewError):
        transformer.set_bounds((0, "nonsense"), (0, 1))


def test_set_bounds_accepts_formula_strings(transformer: CoordinateTransformer) -> None:
    w = transformer.set_bounds(("-pi", "pi"), (-1, "1"))
    assert w.x_range == pytest.approx((-math.pi, math.pi))
    assert w.x_scale == pytest.approx(560 / (2 * math.pi))


def test_custom_margin_from_config() -> None:
    t = CoordinateTransformer(400, 400, config=PlotterConfig(axis_margin=0))
    assert t.window.drawable_width == 400
    assert t.world_to_screen_x(t.window.x_min) == 0


@pytest.mark.parametrize(
    "x_range, y_range, expected",
    [
        ((-10, 10), (-10, 10), 2),
        ((0, 5), (0, 50), 3),
        ((0, 0.5), (0, 0.5), 4),
        ((0, 0.05), (0, 1), 5),
    ],
)
def test_axis_decimals_breakpoints(x_range, y_range, expected) -> None:
    window = ViewWindow(x_range[0], x_range[1], y_range[0], y_range[1])
    assert axis_decimals(window) == expected


def test_axis_decimals_follow_zoom(transformer: CoordinateTransformer) -> None:
    assert transformer.axis_decimals() == 2
    transformer.zoom(0.1, (320, 240))
    assert transformer.axis_decimals() == 3
    assert transformer.format_axis_value(1.23456) == "1.235"


@pytest.mark.parametrize(
    "value, decimals, text",
    [(2.5, 2, "2.5"), (3.0, 2, "3"), (-0.0001, 2, "0"), (1234.5678, 3, "1234.568"), (-1.5, 5, "-1.5")],
)
def test_format_axis_value(value: float, decimals: int, text: str) -> None:
    assert format_axis_value(value, decimals) == text
