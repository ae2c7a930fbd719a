from __future__ import annotations

import math

import pytest

from funcplot.input_convert import convert_pair, input_convert


@pytest.mark.parametrize(
    "value, expected",
    [
        (2, 2.0),
        (2.5, 2.5),
        ("3.5", 3.5),
        ("  -1e3 ", -1000.0),
        (" pi ", math.pi),
        ("2pi", 2 * math.pi),
        ("sqrt(2)/2", math.sqrt(2) / 2),
        ("-e/2", -math.e / 2),
    ],
)
def test_input_convert_accepts_numbers_and_constant_formulas(value, expected: float) -> None:
    assert input_convert(value) == pytest.approx(expected)


@pytest.mark.parametrize("value", [True, None, "", "   ", "x", "2+", "1/0", "nan", "inf", math.inf, [1]])
def test_input_convert_rejects(value) -> None:
    with pytest.raises(ValueError):
        input_convert(value)


def test_infinity_can_be_allowed() -> None:
    assert input_convert("inf", allow_infinite=True) == math.inf
    with pytest.raises(ValueError):
        input_convert("nan", allow_infinite=True)


def test_convert_pair() -> None:
    assert convert_pair((1, "2")) == (1.0, 2.0)
    with pytest.raises(ValueError, match="x_range must satisfy min < max"):
        convert_pair((2, 1), name="x_range")
    with pytest.raises(ValueError, match="must be a pair"):
        convert_pair(3)
    with pytest.raises(ValueError):
        convert_pair((1, 2, 3))
