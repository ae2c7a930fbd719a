from __future__ import annotations

from dataclasses import FrozenInstanceError, fields

import pytest

from funcplot.plot_config import DEFAULT_CONFIG, PLOTTER_CONFIG_OPTIONS, PlotterConfig


def test_defaults() -> None:
    cfg = DEFAULT_CONFIG
    assert cfg.axis_margin == 40
    assert cfg.min_pixels_per_unit == 10.0
    assert cfg.zoom_step == 1.2
    assert cfg.intersection_precision == 1e-6
    assert cfg.intersection_max_iterations == 50
    assert (cfg.hover_radius, cfg.intersection_hit_radius) == (5.0, 10.0)


def test_every_option_is_documented() -> None:
    assert set(PLOTTER_CONFIG_OPTIONS) == {f.name for f in fields(PlotterConfig)}


def test_replace_returns_new_instance() -> None:
    cfg = DEFAULT_CONFIG.replace(zoom_step=2.0)
    assert cfg.zoom_step == 2.0
    assert DEFAULT_CONFIG.zoom_step == 1.2
    with pytest.raises(FrozenInstanceError):
        cfg.zoom_step = 3.0  # type: ignore[misc]


@pytest.mark.parametrize(
    "changes",
    [
        {"axis_margin": -1},
        {"min_pixels_per_unit": 0},
        {"default_view_range": -5},
        {"zoom_step": 1.0},
        {"intersection_step": 0},
        {"intersection_precision": -1e-6},
        {"intersection_max_iterations": 0},
        {"coincidence_samples": 1},
    ],
)
def test_invalid_values_raise(changes: dict) -> None:
    with pytest.raises(ValueError):
        PlotterConfig(**changes)
