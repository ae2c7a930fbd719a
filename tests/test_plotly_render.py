from __future__ import annotations

import plotly.graph_objects as go

from funcplot.plot_session import PlotSession
from funcplot.plotly_render import default_figure_layout, figure_from_session, frame_to_figure


def test_figure_uses_pixel_space(session: PlotSession) -> None:
    session.add_function("x")
    fig = figure_from_session(session)
    assert isinstance(fig, go.Figure)
    assert list(fig.layout.yaxis.range) == [480, 0]
    assert list(fig.layout.xaxis.range) == [0, 640]
    assert fig.layout.width == 640


def test_one_trace_per_curve_after_grid(session: PlotSession) -> None:
    session.add_function("x^2")
    session.add_function("sin(x)")
    fig = figure_from_session(session)
    names = [trace.name for trace in fig.data]
    assert names == ["grid", "axes", "$x^{2}$", r"$\sin{\left(x \right)}$"]
    assert fig.data[2].line.color == session["f1"].color


def test_gaps_are_none_separated(session: PlotSession) -> None:
    session.add_function("1/x")
    fig = frame_to_figure(session.render(), surface_size=(640, 480))
    curve = fig.data[-1]
    assert curve.name == "f1"
    assert None in curve.x
    assert curve.connectgaps is False


def test_selected_curve_is_wider(session: PlotSession) -> None:
    f = session.add_function("x")
    session.select(f.id)
    fig = frame_to_figure(session.render(), surface_size=(640, 480))
    assert fig.data[-1].line.width == session.config.selected_line_width


def test_intersection_markers(session: PlotSession) -> None:
    session.add_function("x^2")
    session.add_function("4")
    session.show_intersections(True)
    fig = frame_to_figure(session.render(), surface_size=(640, 480))
    markers = fig.data[-1]
    assert markers.mode == "markers+text"
    assert list(markers.text) == ["(-2, 4)", "(2, 4)"]
    t = session.transformer
    assert list(markers.x) == [t.world_to_screen_x(-2.0), t.world_to_screen_x(2.0)]


def test_tick_labels_and_axis_names(session: PlotSession) -> None:
    fig = frame_to_figure(session.render(), surface_size=(640, 480))
    texts = [a.text for a in fig.layout.annotations]
    assert "<b>x</b>" in texts and "<b>y</b>" in texts
    assert "0" in texts
    assert "5" in texts
    rotated = [a for a in fig.layout.annotations if a.textangle == 90]
    assert len(rotated) == 20


def test_hidden_grid_has_no_grid_traces(session: PlotSession) -> None:
    session.show_grid = False
    session.add_function("x")
    fig = frame_to_figure(session.render(), surface_size=(640, 480))
    assert [trace.name for trace in fig.data] == ["f1"]
    assert len(fig.layout.annotations) == 0


def test_layout_without_surface_size() -> None:
    layout = default_figure_layout(0, 0)
    assert layout["width"] is None and layout["height"] is None
