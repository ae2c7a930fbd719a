"""Property-based checks for expression evaluation and view mapping.

These tests exercise arithmetic identities and the transformer's round-trip
guarantees over generated inputs to catch edge cases example tests miss.
"""

from __future__ import annotations

import math

import pytest

from funcplot.coordinate_transformer import CoordinateTransformer
from funcplot.expression import compile_expression

try:
    from hypothesis import assume, given
    from hypothesis import strategies as st
except ModuleNotFoundError:  # pragma: no cover - environment-specific fallback
    pytest.skip("hypothesis is required for property-based tests", allow_module_level=True)


MODERATE_FLOATS = st.floats(min_value=-1e6, max_value=1e6, allow_nan=False, allow_infinity=False, width=64)
SMALL_INTS = st.integers(min_value=-50, max_value=50)
SURFACE_SIZES = st.integers(min_value=100, max_value=2000)


@given(value=MODERATE_FLOATS)
def test_polynomial_matches_python_arithmetic(value: float) -> None:
    expr = compile_expression("3x^2-2x+1")
    expected = 3 * value**2 - 2 * value + 1
    assert expr.evaluate(value) == pytest.approx(expected, rel=1e-9, abs=1e-9)


@given(a=SMALL_INTS, b=SMALL_INTS)
def test_implicit_product_of_literal_and_group(a: int, b: int) -> None:
    assert compile_expression(f"{abs(a)}({b}+x)").evaluate(1.0) == abs(a) * (b + 1.0)


@given(value=MODERATE_FLOATS)
def test_division_by_nonzero_never_raises(value: float) -> None:
    assume(abs(value) >= 1e-10)
    assert compile_expression("1/x").evaluate(value) == pytest.approx(1.0 / value, rel=1e-12)


@given(value=st.floats(min_value=-100, max_value=100, allow_nan=False))
def test_pythagorean_identity(value: float) -> None:
    assert compile_expression("sin(x)^2+cos(x)^2").evaluate(value) == pytest.approx(1.0, rel=1e-12)


@given(width=SURFACE_SIZES, height=SURFACE_SIZES, world=st.floats(min_value=-1.0, max_value=1.0))
def test_screen_world_round_trip_within_one_pixel(width: int, height: int, world: float) -> None:
    t = CoordinateTransformer(width, height)
    w = t.window
    wx = w.x_min + (world + 1.0) / 2.0 * w.width
    wy = w.y_min + (world + 1.0) / 2.0 * w.height
    assert abs(t.screen_to_world_x(t.world_to_screen_x(wx)) - wx) <= 1.0 / w.x_scale + 1e-9
    assert abs(t.screen_to_world_y(t.world_to_screen_y(wy)) - wy) <= 1.0 / w.y_scale + 1e-9


@given(
    width=SURFACE_SIZES,
    height=SURFACE_SIZES,
    factor=st.floats(min_value=0.05, max_value=20.0),
    ax=st.floats(min_value=0.0, max_value=1.0),
    ay=st.floats(min_value=0.0, max_value=1.0),
)
def test_zoom_round_trip_restores_bounds(width: int, height: int, factor: float, ax: float, ay: float) -> None:
    t = CoordinateTransformer(width, height)
    before = t.window
    anchor = (40 + ax * (width - 80), 40 + ay * (height - 80))
    t.zoom(factor, anchor)
    t.zoom(1.0 / factor, anchor)
    after = t.window
    for a, b in zip(
        (before.x_min, before.x_max, before.y_min, before.y_max),
        (after.x_min, after.x_max, after.y_min, after.y_max),
    ):
        assert math.isclose(a, b, rel_tol=1e-9, abs_tol=1e-9)


@given(width=SURFACE_SIZES, height=SURFACE_SIZES, new_width=SURFACE_SIZES, new_height=SURFACE_SIZES)
def test_adjust_to_aspect_ratio_is_idempotent(width: int, height: int, new_width: int, new_height: int) -> None:
    t = CoordinateTransformer(width, height)
    first = t.adjust_to_aspect_ratio(new_width, new_height)
    second = t.adjust_to_aspect_ratio(new_width, new_height)
    assert first == second
