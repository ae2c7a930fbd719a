from __future__ import annotations

import pytest

from funcplot.coordinate_transformer import CoordinateTransformer
from funcplot.plot_session import PlotSession


@pytest.fixture
def transformer() -> CoordinateTransformer:
    """640x480 surface: drawable 560x400, x in [-10, 10], y in [-50/7, 50/7]."""
    return CoordinateTransformer(640, 480)


@pytest.fixture
def session() -> PlotSession:
    return PlotSession(640, 480)
