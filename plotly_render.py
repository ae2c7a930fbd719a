"""Paint a :class:`~funcplot.plot_session.SessionFrame` as a Plotly figure.

Purpose
-------
The engine produces screen-space geometry; this module draws it. The figure
uses pixel coordinates directly (x to the right, y downward) so segments from
the rasterizer are plotted unchanged and the picture matches what a canvas
painter would produce.

Notes
-----
- Each function becomes one ``go.Scatter`` line trace; its segments are
  concatenated with ``None`` separators so gaps stay gaps.
- The selected function is drawn last and thicker.
- Grid, axes and ticks are line traces without hover; tick labels are
  layout annotations formatted with the zoom-dependent precision.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import plotly.graph_objects as go

from .grid import TICK_LENGTH, AxisLayout
from .plot_view import ViewWindow, format_axis_value

if TYPE_CHECKING:
    from .plot_session import PlotSession, SessionFrame

__all__ = ["frame_to_figure", "figure_from_session", "default_figure_layout"]

GRID_COLOR = "#f0f0f0"
AXIS_COLOR = "#000000"
MARKER_COLOR = "#000000"
MARKER_SIZE = 8


def default_figure_layout(width: int, height: int) -> dict[str, Any]:
    """Layout for a pixel-space figure of the given surface size."""
    hidden_axis = dict(visible=False, showgrid=False, zeroline=False, fixedrange=True)
    return dict(
        width=width if width > 0 else None,
        height=height if height > 0 else None,
        template="plotly_white",
        showlegend=True,
        margin=dict(l=0, r=0, t=0, b=0),
        paper_bgcolor="#ffffff",
        plot_bgcolor="#ffffff",
        legend=dict(
            bgcolor="rgba(255,255,255,0.7)",
            bordercolor="rgba(15,23,42,0.08)",
            borderwidth=1,
        ),
        xaxis=dict(hidden_axis, range=[0, max(width, 1)]),
        yaxis=dict(hidden_axis, range=[max(height, 1), 0]),
    )


def _join(segments: Any) -> tuple[list[Any], list[Any]]:
    xs: list[Any] = []
    ys: list[Any] = []
    for segment in segments:
        if xs:
            xs.append(None)
            ys.append(None)
        xs.extend(segment.xs)
        ys.extend(segment.ys)
    return xs, ys


def _grid_traces(window: ViewWindow, axes: AxisLayout) -> list[go.Scatter]:
    left = window.x_offset
    right = window.x_offset + window.drawable_width
    gx: list[Any] = []
    gy: list[Any] = []
    for tick in axes.x_ticks:
        gx += [tick.pixel, tick.pixel, None]
        gy += [window.top, window.bottom, None]
    for tick in axes.y_ticks:
        gx += [left, right, None]
        gy += [tick.pixel, tick.pixel, None]

    row, col = axes.x_axis_row, axes.y_axis_column
    ax: list[Any] = [left, right, None, col, col, None]
    ay: list[Any] = [row, row, None, window.top, window.bottom, None]
    for tick in axes.x_ticks:
        ax += [tick.pixel, tick.pixel, None]
        ay += [row - TICK_LENGTH, row + TICK_LENGTH, None]
    for tick in axes.y_ticks:
        ax += [col - TICK_LENGTH, col + TICK_LENGTH, None]
        ay += [tick.pixel, tick.pixel, None]

    common = dict(mode="lines", hoverinfo="skip", showlegend=False)
    return [
        go.Scatter(x=gx, y=gy, name="grid", line=dict(color=GRID_COLOR, width=0.5), **common),
        go.Scatter(x=ax, y=ay, name="axes", line=dict(color=AXIS_COLOR, width=1.5), **common),
    ]


def _tick_annotations(window: ViewWindow, axes: AxisLayout) -> list[dict[str, Any]]:
    notes: list[dict[str, Any]] = []
    base = dict(showarrow=False, font=dict(size=10), xref="x", yref="y")
    for tick in axes.x_ticks:
        if tick.label:
            notes.append(
                dict(base, x=tick.pixel, y=axes.x_axis_row + TICK_LENGTH + 5, text=tick.label, textangle=90, yanchor="top")
            )
    for tick in axes.y_ticks:
        if tick.label:
            notes.append(dict(base, x=axes.y_axis_column - TICK_LENGTH - 5, y=tick.pixel, text=tick.label, xanchor="right"))
    if axes.origin_visible:
        notes.append(dict(base, x=axes.y_axis_column + 4, y=axes.x_axis_row + 4, text="0", xanchor="left", yanchor="top"))
    right = window.x_offset + window.drawable_width
    bold = dict(base, font=dict(size=12))
    notes.append(dict(bold, x=right + 10, y=axes.x_axis_row, text="<b>x</b>", xanchor="left"))
    notes.append(dict(bold, x=axes.y_axis_column, y=window.top - 10, text="<b>y</b>", yanchor="bottom"))
    return notes


def frame_to_figure(
    frame: "SessionFrame",
    *,
    surface_size: tuple[int, int],
    labels: Mapping[str, str] | None = None,
) -> go.Figure:
    """Build a Plotly figure from a rendered frame.

    Parameters
    ----------
    frame : SessionFrame
        Output of :meth:`PlotSession.render`.
    surface_size : tuple[int, int]
        Pixel size of the drawing surface.
    labels : mapping, optional
        Legend text per function id (defaults to the id).
    """
    width, height = surface_size
    window = frame.window
    fig = go.Figure()
    fig.update_layout(**default_figure_layout(width, height))

    if frame.axes is not None:
        for trace in _grid_traces(window, frame.axes):
            fig.add_trace(trace)
        fig.update_layout(annotations=_tick_annotations(window, frame.axes))

    for curve in frame.curves:
        xs, ys = _join(curve.segments)
        name = labels.get(curve.id, curve.id) if labels is not None else curve.id
        fig.add_scatter(
            x=xs,
            y=ys,
            mode="lines",
            name=name,
            line=dict(color=curve.color, width=curve.width),
            connectgaps=False,
            hoverinfo="name",
        )

    if frame.intersections:
        decimals = frame.axes.decimals if frame.axes is not None else 2
        fig.add_scatter(
            x=[window.screen_x(p.x) for p in frame.intersections],
            y=[window.screen_y(p.y) for p in frame.intersections],
            mode="markers+text",
            name="intersections",
            marker=dict(color=MARKER_COLOR, size=MARKER_SIZE),
            text=[
                f"({format_axis_value(p.x, decimals)}, {format_axis_value(p.y, decimals)})"
                for p in frame.intersections
            ],
            textposition="middle right",
            showlegend=False,
        )
    return fig


def figure_from_session(session: "PlotSession", reason: str = "manual") -> go.Figure:
    """Render ``session`` and paint the result.

    Legend entries show each function's LaTeX label.
    """
    frame = session.render(reason)
    labels = {f.id: f"${f.label}$" for f in session}
    return frame_to_figure(frame, surface_size=session.transformer.surface_size, labels=labels)
