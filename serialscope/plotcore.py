"""Shared plot state: ranges, sorted data series, zoom limits, grid and units."""

from __future__ import annotations

import bisect
import enum
import math
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from serialscope.formatting import UnitOfMeasure, _fuzzy_compare, ceil_to_nice_value
from serialscope.ticker import UnitAxisTicker


@dataclass(frozen=True)
class Range:
    """Closed interval of axis coordinates."""

    lower: float
    upper: float

    @property
    def size(self) -> float:
        return self.upper - self.lower

    @property
    def center(self) -> float:
        return (self.lower + self.upper) * 0.5

    def _normalized(self) -> Range:
        if self.lower > self.upper:
            return Range(self.upper, self.lower)
        return self


class Series:
    """Data points kept sorted by key."""

    def __init__(self, points=()):
        self._keys: list[float] = []
        self._values: list[float] = []
        for key, value in points:
            self.add(key, value)

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[tuple[float, float]]:
        return zip(self._keys, self._values)

    def __getitem__(self, index: int) -> tuple[float, float]:
        return self._keys[index], self._values[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Series):
            return NotImplemented
        return self._keys == other._keys and self._values == other._values

    @property
    def keys(self) -> list[float]:
        return list(self._keys)

    @property
    def values(self) -> list[float]:
        return list(self._values)

    def add(self, key: float, value: float) -> None:
        """Insert a point after any points with the same key."""
        index = bisect.bisect_right(self._keys, key)
        self._keys.insert(index, key)
        self._values.insert(index, value)

    def clear(self) -> None:
        self._keys.clear()
        self._values.clear()

    def find_begin(self, key: float) -> int:
        """Index of the first point whose key is not below ``key``."""
        return bisect.bisect_left(self._keys, key)

    def find_end(self, key: float) -> int:
        """Index one past the last point whose key is not above ``key``."""
        return bisect.bisect_right(self._keys, key)

    def key_range(self) -> Range | None:
        if not self._keys:
            return None
        return Range(self._keys[0], self._keys[-1])

    def value_range(self) -> Range | None:
        finite = [value for value in self._values if not math.isnan(value)]
        if not finite:
            return None
        return Range(min(finite), max(finite))


class TracerTextPos(enum.Enum):
    """Corner of the tracer at which its text box is placed."""

    TR = "top_right"
    TL = "top_left"
    BR = "bottom_right"
    BL = "bottom_left"


def clip_range(new_range: Range, limits: Range) -> Range:
    """Fit ``new_range`` into ``limits``, shifting it or replacing it with the limits."""
    if new_range.size > limits.size:
        return limits
    if new_range.lower < limits.lower:
        diff = new_range.lower - limits.lower
        return Range(new_range.lower - diff, new_range.upper - diff)
    if new_range.upper > limits.upper:
        diff = new_range.upper - limits.upper
        return Range(new_range.lower - diff, new_range.upper - diff)
    return new_range


def key_to_nearest_sample(series: Series, key: float) -> int:
    """Index of the sample whose key is closest to ``key``."""
    count = len(series)
    if count == 0:
        raise ValueError("series is empty")
    index = series.find_begin(key)
    if index > 0:
        index -= 1
    if index == count - 1:
        return count - 1
    previous_key = series[index][0]
    next_key = series[index + 1][0]
    if key < (previous_key + next_key) * 0.5:
        return index
    return index + 1


def choose_tracer_text_position(
    current: TracerTextPos,
    text_size: tuple[float, float],
    tracer_pixel: tuple[float, float],
    plot_size: tuple[float, float],
) -> TracerTextPos:
    """Pick a corner where the tracer text fits inside the plot, preferring top right."""
    text_w, text_h = text_size
    x, y = tracer_pixel
    width, height = plot_size

    top_ok = text_h <= y
    right_ok = text_w <= width - x
    if top_ok and right_ok:
        return TracerTextPos.TR

    bottom_ok = text_h <= height - y
    left_ok = text_w <= x
    if bottom_ok and left_ok:
        return TracerTextPos.BL
    if bottom_ok and right_ok:
        return TracerTextPos.BR
    if top_ok and left_ok:
        return TracerTextPos.TL
    return current


def _as_unit(unit: UnitOfMeasure | str) -> UnitOfMeasure:
    return UnitOfMeasure.parse(unit) if isinstance(unit, str) else unit


class Plot:
    """Axis ranges limited by maximum zoom, with unit-aware grid steps."""

    def __init__(self, max_zoom_out: float = math.inf):
        self._x_range = Range(0.0, 5.0)
        self._y_range = Range(0.0, 5.0)
        self.max_zoom_x = Range(-max_zoom_out, max_zoom_out)
        self.max_zoom_y = Range(-max_zoom_out, max_zoom_out)
        self.ticker_x = UnitAxisTicker()
        self.ticker_y = UnitAxisTicker()
        self.x_unit = UnitOfMeasure()
        self.y_unit = UnitOfMeasure()
        self.x_grid_hint = -3
        self.y_grid_hint = -3
        self.last_grid_x = 0.0
        self.last_grid_y = 0.0
        self.color_theme = 1
        self.tracer_text_pos = TracerTextPos.TR
        self.grid_changed_listeners: list[Callable[[], None]] = []

    @property
    def x_range(self) -> Range:
        return self._x_range

    @x_range.setter
    def x_range(self, new_range: Range) -> None:
        old = self._x_range
        self._x_range = new_range._normalized()
        self.on_x_range_changed(self._x_range, old)

    @property
    def y_range(self) -> Range:
        return self._y_range

    @y_range.setter
    def y_range(self, new_range: Range) -> None:
        old = self._y_range
        self._y_range = new_range._normalized()
        self.on_y_range_changed(self._y_range, old)

    @property
    def h_div(self) -> float:
        return self.ticker_x.tick_step

    @property
    def v_div(self) -> float:
        return self.ticker_y.tick_step

    def set_max_zoom_x(self, new_range: Range, reset: bool = False) -> None:
        self.max_zoom_x = new_range
        if reset:
            self.x_range = new_range
        else:
            clipped = clip_range(self._x_range, new_range)
            if clipped != self._x_range:
                self.x_range = clipped

    def set_max_zoom_y(self, new_range: Range, reset: bool = False) -> None:
        self.max_zoom_y = new_range
        if reset:
            self.y_range = new_range
        else:
            clipped = clip_range(self._y_range, new_range)
            if clipped != self._y_range:
                self.y_range = clipped

    @staticmethod
    def _same_range(a: Range, b: Range) -> bool:
        return _fuzzy_compare(a.upper, b.upper) and _fuzzy_compare(a.lower, b.lower)

    def on_x_range_changed(self, new_range: Range, old_range: Range) -> None:
        if self._same_range(new_range, old_range):
            return
        clipped = clip_range(new_range, self.max_zoom_x)
        if clipped != new_range:
            self.x_range = clipped
        self._update_grid_x()

    def on_y_range_changed(self, new_range: Range, old_range: Range) -> None:
        if self._same_range(new_range, old_range):
            return
        clipped = clip_range(new_range, self.max_zoom_y)
        if clipped != new_range:
            self.y_range = clipped
        self._update_grid_y()

    def _notify_grid_changed(self) -> None:
        for listener in self.grid_changed_listeners:
            listener()

    def _update_grid_x(self) -> None:
        new_grid = ceil_to_nice_value(self._x_range.size * 2.0**self.x_grid_hint)
        if new_grid != self.last_grid_x:
            self.last_grid_x = new_grid
            self.ticker_x.set_tick_step(new_grid)
            self._notify_grid_changed()

    def _update_grid_y(self) -> None:
        new_grid = ceil_to_nice_value(self._y_range.size * 2.0**self.y_grid_hint)
        if new_grid != self.last_grid_y:
            self.last_grid_y = new_grid
            self.ticker_y.set_tick_step(new_grid)
            self._notify_grid_changed()

    def set_grid_hint_x(self, hint: int) -> None:
        self.x_grid_hint = hint
        self._update_grid_x()

    def set_grid_hint_y(self, hint: int) -> None:
        self.y_grid_hint = hint
        self._update_grid_y()

    def set_x_unit(self, unit: UnitOfMeasure | str) -> None:
        self.x_unit = _as_unit(unit)
        self.ticker_x.unit = self.x_unit

    def set_y_unit(self, unit: UnitOfMeasure | str) -> None:
        self.y_unit = _as_unit(unit)
        self.ticker_y.unit = self.y_unit