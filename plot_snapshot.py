"""Immutable snapshots of a plot session's reproducible state.

A ``SessionSnapshot`` captures exactly what is needed to rebuild a session:
the expression text, color and visibility of every function in list order,
the view bounds and the intersection toggle. Compiled expressions are not
stored; they are recompiled from text on restore.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class FunctionSnapshot:
    """Immutable record of one plotted function.

    Parameters
    ----------
    id : str
        Function identifier (key in ``PlotSession.functions``).
    text : str
        Expression text as typed.
    color : str
        Display color.
    visible : bool
        Whether the function is drawn.
    """

    id: str
    text: str
    color: str
    visible: bool

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text, "color": self.color, "visible": self.visible}


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable record of a whole session.

    Parameters
    ----------
    functions : tuple[FunctionSnapshot, ...]
        Functions in display order.
    x_range, y_range : tuple[float, float]
        View bounds at capture time.
    show_intersections : bool
        Intersection display toggle.
    selected_id : str or None
        Selected function, if any.
    """

    functions: tuple[FunctionSnapshot, ...]
    x_range: tuple[float, float]
    y_range: tuple[float, float]
    show_intersections: bool = False
    selected_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Plain-data form suitable for JSON."""
        return {
            "functions": [f.to_dict() for f in self.functions],
            "x_range": list(self.x_range),
            "y_range": list(self.y_range),
            "show_intersections": self.show_intersections,
            "selected_id": self.selected_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionSnapshot":
        """Inverse of :meth:`to_dict`.

        Raises
        ------
        KeyError
            If a required key is missing.
        """
        functions = tuple(
            FunctionSnapshot(
                id=str(item["id"]),
                text=str(item["text"]),
                color=str(item["color"]),
                visible=bool(item.get("visible", True)),
            )
            for item in data["functions"]
        )
        x_min, x_max = data["x_range"]
        y_min, y_max = data["y_range"]
        selected = data.get("selected_id")
        return cls(
            functions=functions,
            x_range=(float(x_min), float(x_max)),
            y_range=(float(y_min), float(y_max)),
            show_intersections=bool(data.get("show_intersections", False)),
            selected_id=None if selected is None else str(selected),
        )

    def __repr__(self) -> str:
        return (
            f"SessionSnapshot(functions={len(self.functions)}, x_range={self.x_range}, "
            f"y_range={self.y_range}, show_intersections={self.show_intersections})"
        )
