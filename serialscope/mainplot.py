"""Main time-domain plot: analog, math and logic channels with pause and rolling view."""

from __future__ import annotations

import enum
import math
from collections import defaultdict
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from serialscope.export import export_channel_csv, export_logic_csv, export_merged_csv
from serialscope.formatting import (
    ChannelLayout,
    _c_round,
    _fuzzy_compare,
    _fuzzy_is_null,
    ceil_to_nice_value,
    floor_to_nice_value,
)
from serialscope.plotcore import Plot, Range, Series


@dataclass
class ChannelSettings:
    """Display settings of one analog channel or one logic group."""

    color1: str = "black"
    color2: str = "white"
    style: int = 0
    offset: float = 0.0
    scale: float = 1.0
    inverted: bool = False
    visible: bool = True
    interpolate: bool = False

    def color(self, theme: int) -> str:
        return self.color1 if theme == 1 else self.color2


class RollingMode(enum.Enum):
    """How the horizontal view follows incoming data."""

    FREE = "free"
    GROWING = "growing"
    ROLLING = "rolling"
    EMPTY = "empty"
    FREE_LOCKED = "free_locked"


def _abs_ratio(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return math.nan if numerator == 0 else math.inf
    return numerator / denominator


def _as_series(data: Series | Iterable[tuple[float, float]]) -> Series:
    return data if isinstance(data, Series) else Series(data)


class MainPlot(Plot):
    """Plot of all channels sharing one time axis.

    Events are delivered to callables stored in ``listeners[name]``.
    """

    def __init__(self, layout: ChannelLayout, max_zoom_out: float = math.inf):
        super().__init__(max_zoom_out)
        self.layout = layout
        self.max_zoom_out = max_zoom_out
        self.listeners: defaultdict[str, list[Callable[..., None]]] = defaultdict(list)

        analog = layout.analog_count + layout.math_count
        self._analog = analog
        self.all_count = analog + layout.logic_groups * layout.logic_bits
        self.series: list[Series] = [Series() for _ in range(self.all_count)]
        self.interpolation: list[Series] = [Series() for _ in range(analog)]
        self.data_to_be_interpolated: list[Series | None] = [None] * analog
        self.channel_settings = [ChannelSettings() for _ in range(analog)]
        self.logic_settings = [ChannelSettings() for _ in range(layout.logic_groups)]

        self._pause_buffer: list[Series] | None = None
        self.new_data = True
        self.min_t = 0.0
        self.max_t = 1.0
        self.x_range_unknown = False
        self.rolling_step = 0
        self.rolling_mode = True
        self.mode = RollingMode.EMPTY
        self.last_signal_end = 0.0
        self._last_data_type_was_point = False
        self.auto_v_range = False
        self.trigger_channel = 0
        self.trigger_value = 0.0

        self.y_range = Range(-5.0, 5.0)

    # events -------------------------------------------------------------

    def _emit(self, name: str, *args) -> None:
        for listener in self.listeners[name]:
            listener(*args)

    @property
    def paused(self) -> bool:
        return self._pause_buffer is not None

    @property
    def last_data_type_was_point(self) -> bool:
        return self._last_data_type_was_point

    def _set_last_data_type_was_point(self, value: bool) -> None:
        if self._last_data_type_was_point == value:
            return
        self._last_data_type_was_point = value
        self._emit("last_data_type_was_point_changed", value)

    # channel geometry ---------------------------------------------------

    def _is_used(self, ch_id: int) -> bool:
        return len(self.series[ch_id]) > 0

    def _is_visible(self, ch_id: int) -> bool:
        if ch_id < self._analog:
            return self.channel_settings[ch_id].visible
        return self.logic_settings[self.layout.logic_group_of(ch_id)].visible

    @staticmethod
    def _axis_range(y: Range, settings: ChannelSettings) -> Range:
        center = (y.center - settings.offset) / settings.scale
        if settings.inverted:
            center = -center
        size = y.size / settings.scale
        return Range(center - size / 2, center + size / 2)

    def channel_axis_range(self, ch_id: int) -> Range:
        """Value-axis range of an analog or math channel after offset, scale and inversion."""
        return self._axis_range(self.y_range, self.channel_settings[ch_id])

    def _logic_axis_range(self, group: int) -> Range:
        return self._axis_range(self.y_range, self.logic_settings[group])

    def _to_main_coord(self, ch_id: int, value: float) -> float:
        if ch_id < self._analog:
            settings = self.channel_settings[ch_id]
            axis = self.channel_axis_range(ch_id)
        else:
            group = self.layout.logic_group_of(ch_id)
            settings = self.logic_settings[group]
            axis = self._logic_axis_range(group)
        fraction = (value - axis.lower) / axis.size
        y = self.y_range
        if settings.inverted:
            return y.upper - fraction * y.size
        return y.lower + fraction * y.size

    # range handling -----------------------------------------------------

    def on_x_range_changed(self, new_range: Range, old_range: Range) -> None:
        super().on_x_range_changed(new_range, old_range)
        # In rolling mode only a change of length is reported.
        if not self.rolling_mode or not _fuzzy_compare(new_range.size, old_range.size):
            self._emit("h_range_changed", self.x_range)

    def on_y_range_changed(self, new_range: Range, old_range: Range) -> None:
        super().on_y_range_changed(new_range, old_range)
        self._emit("v_range_changed", self.y_range)

    def _update_min_max_times(self) -> None:
        firsts: list[float] = []
        lasts: list[float] = []
        for ch_id in range(self._analog):
            if self._is_used(ch_id) and self.channel_settings[ch_id].visible:
                firsts.append(self.series[ch_id][0][0])
                lasts.append(self.series[ch_id][-1][0])
        for group in range(self.layout.logic_groups):
            ch_id = self.layout.logic_channel_id(group, 0)
            if self._is_used(ch_id) and self.logic_settings[group].visible:
                firsts.append(self.series[ch_id][0][0])
                lasts.append(self.series[ch_id][-1][0])

        if not firsts:
            self.min_t, self.max_t = 0.0, 10.0
            self.set_max_zoom_x(Range(self.min_t, self.max_zoom_out), False)
            self.x_range = Range(self.min_t, self.max_t)
            self.x_range_unknown = True
            self.mode = RollingMode.EMPTY
            return

        self.min_t = min(firsts)
        self.max_t = max(lasts)
        zoom = self.max_zoom_x
        if self.rolling_mode:
            reset = self.x_range_unknown or self.max_t > zoom.upper or self.min_t < zoom.lower
            self.set_max_zoom_x(Range(self.min_t, self.max_t + self.x_range.size), reset)
            self._update_rolling_state(self.max_t)
        else:
            diff = _abs_ratio(abs(self.max_t - zoom.upper), zoom.upper) + _abs_ratio(
                abs(self.min_t - zoom.lower), zoom.lower
            )
            self.set_max_zoom_x(Range(self.min_t, self.max_t), self.x_range_unknown or diff > 0.1)
            if not _fuzzy_is_null(diff):
                self._emit("h_range_max_changed", self.max_zoom_x)
        if self.x_range_unknown:
            self._emit("last_data_type_was_point_changed", self._last_data_type_was_point)
            self.x_range_unknown = False

    def _update_rolling_state(self, x_max: float) -> None:
        x = self.x_range
        if self.mode is RollingMode.EMPTY:
            self.mode = RollingMode.GROWING
        elif self.mode is RollingMode.GROWING:
            if x_max > x.upper:
                if self.rolling_step:
                    new_end = self.max_t + self.rolling_step / 100.0 * x.size
                    self.x_range = Range(new_end - x.size, new_end)
                else:
                    self.mode = RollingMode.ROLLING
                    self.x_range = Range(x_max - x.size, x_max)
        elif self.mode is RollingMode.FREE:
            if x_max < x.upper:
                self.mode = RollingMode.GROWING
        elif self.mode is RollingMode.FREE_LOCKED:
            self.mode = RollingMode.FREE
        elif self.mode is RollingMode.ROLLING:
            if not _fuzzy_compare(x.upper, self.last_signal_end):
                self.mode = RollingMode.FREE_LOCKED
            else:
                self.x_range = Range(x_max - x.size, x_max)
        self.last_signal_end = x_max

    def _redraw(self) -> None:
        self._emit("request_cursor_update")

    def update(self) -> None:
        """Recompute time limits and redraw if new data arrived since the last call."""
        if self.new_data:
            self.new_data = False
            self._update_min_max_times()
            self._redraw()

    # data ---------------------------------------------------------------

    def new_data_point(self, ch_id: int, time: float, value: float, append: bool) -> None:
        """Add one point; without ``append`` the channel is cleared first."""
        if not self.paused:
            if not append:
                self.series[ch_id].clear()
                if ch_id < self._analog:
                    self.interpolation[ch_id].clear()
            self.series[ch_id].add(time, value)
            self.new_data = True
        else:
            buffer = self._pause_buffer[ch_id]
            if not append:
                buffer.clear()
            buffer.add(time, value)

        if self.auto_v_range:
            absolute = self._to_main_coord(ch_id, value)
            zoom = self.max_zoom_y
            at_limits = _fuzzy_compare(self.y_range.lower, zoom.lower) and _fuzzy_compare(
                self.y_range.upper, zoom.upper
            )
            if absolute > zoom.upper:
                self.set_max_zoom_y(Range(zoom.lower, ceil_to_nice_value(absolute)), at_limits)
                self._emit("v_range_max_changed", self.max_zoom_y)
            elif absolute < zoom.lower:
                self.set_max_zoom_y(Range(floor_to_nice_value(absolute), zoom.upper), at_limits)
                self._emit("v_range_max_changed", self.max_zoom_y)
        self._set_last_data_type_was_point(True)

    def new_data_vector(
        self,
        ch_id: int,
        data: Series | Iterable[tuple[float, float]],
        ignore_pause: bool = False,
    ) -> None:
        """Replace a channel's data; a single point is added as a point instead."""
        data = _as_series(data)
        if len(data) == 1:
            key, value = data[0]
            current = self.series[ch_id]
            append = len(current) == 0 or key > current[-1][0]
            self.new_data_point(ch_id, key, value, append)
            return
        if not self.paused or ignore_pause:
            if not self.layout.is_logic(ch_id) and self.channel_settings[ch_id].interpolate:
                self.data_to_be_interpolated[ch_id] = data
                return
            self.series[ch_id] = data
            self.new_data = True
        self._set_last_data_type_was_point(False)

    def _pause(self) -> None:
        self._pause_buffer = [Series(series) for series in self.series]
        self._emit("plot_status_changed", True)

    def _resume(self) -> None:
        buffers = self._pause_buffer or []
        self._pause_buffer = None
        self._emit("plot_status_changed", False)
        for ch_id, buffer in enumerate(buffers):
            if len(buffer):
                self.series[ch_id] = buffer
        self.new_data = True

    def toggle_pause(self) -> None:
        if self.paused:
            self._resume()
        else:
            self._pause()

    def clear_channel(self, ch_id: int) -> None:
        self.series[ch_id].clear()
        if ch_id < self._analog:
            self.interpolation[ch_id].clear()
        if self.paused:
            self._pause_buffer[ch_id].clear()
        self.new_data = True

    def clear_logic_group(self, group: int, from_bit: int) -> None:
        """Clear bits of a logic group from ``from_bit`` upwards, if that bit holds data."""
        if self._is_used(self.layout.logic_channel_id(group, from_bit)):
            for bit in range(from_bit, self.layout.logic_bits):
                self.clear_channel(self.layout.logic_channel_id(group, bit))
            self.new_data = True

    def reset_channels(self) -> None:
        for ch_id in range(self.all_count):
            self.clear_channel(ch_id)
        self.trigger_channel = 0
        self.trigger_value = 0.0
        self._update_min_max_times()
        self._redraw()

    # view ---------------------------------------------------------------

    def set_h_len(self, length: float) -> None:
        """Set the visible time span."""
        if self.rolling_mode:
            if self.mode is RollingMode.ROLLING:
                self.x_range = Range(self.max_t - length, self.max_t)
            elif self.max_t - self.min_t > length:
                self.mode = RollingMode.ROLLING
                self.x_range = Range(self.max_t - length, self.max_t)
            else:
                self.mode = RollingMode.GROWING
                self.set_max_zoom_x(Range(self.min_t, self.min_t + length), True)
            self._update_rolling_state(self.max_t)
        else:
            center = self.x_range.center
            self.x_range = Range(center - length / 2, center + length / 2)

    def set_h_pos(self, mid: float) -> None:
        size = self.x_range.size
        self.x_range = Range(mid - size / 2, mid + size / 2)
        if self.rolling_mode:
            self._update_rolling_state(self.max_t)

    def set_v_pos(self, mid: float) -> None:
        size = self.y_range.size
        self.y_range = Range(mid - size / 2, mid + size / 2)

    def set_rolling_mode(self, enabled: bool) -> None:
        if self.rolling_mode == enabled:
            return
        self.rolling_mode = enabled
        if not enabled:
            self.mode = RollingMode.FREE
        self._update_min_max_times()
        self._emit("rolling_mode_changed")
        self._emit("h_range_changed", self.x_range)
        self._emit("v_range_changed", self.y_range)

    def set_shift_step(self, step: int) -> None:
        """Step, in percent of the view length, by which a rolling view jumps ahead."""
        self.rolling_step = step
        if self.rolling_mode and self.mode is RollingMode.ROLLING:
            self.mode = RollingMode.GROWING

    def logic_bits_used(self, group: int) -> int:
        for bit in range(self.layout.logic_bits):
            if not self._is_used(self.layout.logic_channel_id(group, bit)):
                return bit
        return self.layout.logic_bits

    def visible_samples_range(self, ch_id: int) -> tuple[int, int]:
        """First and last sample index inside the visible time range."""
        series = self.series[ch_id]
        if len(series) == 0:
            return 0, 0
        return series.find_begin(self.x_range.lower), series.find_end(self.x_range.upper) - 1

    # channel settings ---------------------------------------------------

    def set_channel_offset(self, ch_id: int, offset: float) -> None:
        self.channel_settings[ch_id].offset = offset
        self._emit("request_cursor_update")

    def set_channel_scale(self, ch_id: int, scale: float) -> None:
        self.channel_settings[ch_id].scale = scale
        self._emit("request_cursor_update")

    def set_channel_invert(self, ch_id: int, inverted: bool) -> None:
        self.channel_settings[ch_id].inverted = inverted

    def set_channel_visible(self, ch_id: int, visible: bool) -> None:
        self.channel_settings[ch_id].visible = visible

    def set_channel_interpolate(self, ch_id: int, enabled: bool) -> None:
        self.channel_settings[ch_id].interpolate = enabled

    # export -------------------------------------------------------------

    def _view(self, only_in_view: bool) -> Range | None:
        return self.x_range if only_in_view else None

    def _data_vector(self, ch_id: int, only_in_view: bool) -> list[tuple[float, float]]:
        view = self._view(only_in_view)
        logic = self.layout.is_logic(ch_id)
        points = []
        for key, value in self.series[ch_id]:
            if view is None or view.lower <= key <= view.upper:
                if logic:
                    value = float(math.fmod(int(_c_round(value)), 3))
                points.append((key, value))
        return points

    def export_channel_csv(self, separator, decimal, ch_id, precision, only_in_view) -> bytes:
        return export_channel_csv(
            self.series[ch_id],
            self.layout.channel_name(ch_id),
            separator,
            decimal,
            precision,
            self._view(only_in_view),
        )

    def export_logic_csv(self, separator, decimal, group, precision, only_in_view) -> bytes:
        bits = [
            self.series[self.layout.logic_channel_id(group, bit)]
            for bit in range(self.logic_bits_used(group))
        ]
        return export_logic_csv(bits, separator, decimal, precision, self._view(only_in_view))

    def export_all_csv(self, separator, decimal, precision, only_in_view, include_hidden) -> bytes:
        channels = [
            (self.layout.channel_name(ch_id), self._data_vector(ch_id, only_in_view))
            for ch_id in range(self.all_count)
            if self._is_used(ch_id) and (self._is_visible(ch_id) or include_hidden)
        ]
        return export_merged_csv(channels, "time", separator, decimal, precision)