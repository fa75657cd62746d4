"""XY plot: one curve whose points carry their own parameter ``t``."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from serialscope.export import format_number
from serialscope.formatting import UnitOfMeasure, float_to_nice_string
from serialscope.plotcore import Plot, Range


@dataclass(frozen=True)
class CurvePoint:
    """One point of the curve; points are ordered by ``t``."""

    t: float
    key: float
    value: float


def _to_point(item: CurvePoint | tuple[float, float, float]) -> CurvePoint:
    if isinstance(item, CurvePoint):
        return item
    t, key, value = item
    return CurvePoint(t, key, value)


class XYPlot(Plot):
    """Plot of a parametric curve with per-theme colours."""

    def __init__(self, max_zoom_out: float = float("inf")):
        super().__init__(max_zoom_out)
        self.points: list[CurvePoint] = []
        self.t_unit = UnitOfMeasure.parse("s")
        self.color1: object = None
        self.color2: object = None
        self.pen: object = None
        self.range_unknown = True
        self.x_range = Range(-100.0, 100.0)
        self.y_range = Range(-100.0, 100.0)
        self.set_grid_hint_x(-3)
        self.set_grid_hint_y(-3)

    def new_data(self, data: Iterable[CurvePoint | tuple[float, float, float]]) -> None:
        """Replace the curve; points are given as ``CurvePoint`` or ``(t, x, y)``."""
        self.points = sorted((_to_point(item) for item in data), key=lambda point: point.t)

    def clear(self) -> None:
        self.points = []
        self.range_unknown = True
        self.set_max_zoom_x(Range(-10.0, 10.0), True)
        self.set_max_zoom_y(Range(-10.0, 10.0), True)

    def set_color(self, color: object, theme: int) -> None:
        """Store the colour of a theme (1 or 2); the pen follows the active theme."""
        if theme == 1:
            self.color1 = color
        if theme == 2:
            self.color2 = color
        if theme == self.color_theme:
            self.pen = color

    def set_theme(self, theme: int) -> None:
        self.color_theme = theme
        self.pen = self.color1 if theme == 1 else self.color2

    def export_csv(self, separator: str, decimal: str, precision: int) -> bytes:
        """Export the curve as ``X`` and ``Y`` columns; empty output without points."""
        if not self.points:
            return b""
        lines = [f"X{separator}Y\n"]
        lines.extend(
            f"{format_number(point.key, precision, decimal)}{separator}"
            f"{format_number(point.value, precision, decimal)}\n"
            for point in self.points
        )
        return "".join(lines).encode("utf-8")

    def tracer_text(self, index: int) -> str:
        """Text shown next to the tracer placed on point ``index``."""
        point = self.points[index]
        return (
            "X: "
            + float_to_nice_string(point.key, 4, True, False, False, self.x_unit)
            + "\nY: "
            + float_to_nice_string(point.value, 4, True, False, False, self.y_unit)
            + "\nt: "
            + float_to_nice_string(point.t, 4, True, False, False, self.t_unit)
        )