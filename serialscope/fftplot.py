"""Frequency-domain plot of up to two spectra."""

from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Callable, Iterable

from serialscope.export import export_merged_csv
from serialscope.formatting import ChannelLayout, ceil_to_nice_value, float_to_nice_string
from serialscope.plotcore import Plot, Range, Series


def _to_series(data: Series | Iterable[tuple[float, float]]) -> Series:
    return data if isinstance(data, Series) else Series(data)


class FFTPlot(Plot):
    """Two spectra sharing a frequency axis.

    Events are delivered to callables stored in ``listeners[name]``;
    ``new_peak_values`` receives the channel and the peak frequency.
    """

    def __init__(self, layout: ChannelLayout, max_zoom_out: float = math.inf):
        super().__init__(max_zoom_out)
        self.layout = layout
        self.listeners: defaultdict[str, list[Callable[..., None]]] = defaultdict(list)
        self.series: list[Series] = [Series(), Series()]
        self.source_channels: list[int] = [0, 1]
        self.source_colors: list[object] = [None, None]
        self.hold_max: list[bool] = [False, False]
        self.first_autoset = True
        self.output_peak_value = False
        self.autoset()
        self.set_grid_hint_x(-3)
        self.set_grid_hint_y(-3)

    def _emit(self, name: str, *args) -> None:
        for listener in self.listeners[name]:
            listener(*args)

    def new_data(self, ch_id: int, data: Series | Iterable[tuple[float, float]]) -> None:
        """Replace a spectrum, keeping per-bin maxima when hold-max is on."""
        data = _to_series(data)
        current = self.series[ch_id]
        count = len(data)
        if (
            count == len(current)
            and count > 0
            and self.hold_max[ch_id]
            and data[-1][0] == current[-1][0]
        ):
            self.series[ch_id] = Series(
                (key, max(value, old_value))
                for (key, value), (_, old_value) in zip(data, current)
            )
        else:
            self.series[ch_id] = data

        self.autoset()

        if self.output_peak_value:
            series = self.series[ch_id]
            peak_amp = -math.inf
            peak_freq = 0.0
            begin = series.find_begin(self.x_range.lower)
            end = series.find_end(self.x_range.upper) - 1
            for index in range(begin, end):
                key, value = series[index]
                if value > peak_amp:
                    peak_amp, peak_freq = value, key
            self._emit("new_peak_values", ch_id, peak_freq)

    def clear_channel(self, ch_id: int) -> None:
        self.series[ch_id].clear()

    def clear(self) -> None:
        for series in self.series:
            series.clear()
        self.first_autoset = True

    def set_hold_max(self, ch_id: int, enabled: bool) -> None:
        self.hold_max[ch_id] = enabled

    def set_source(self, ch: int, source_channel: int, color) -> bool:
        """Assign the source of channel ``ch`` (from 1); True when its colour changed."""
        self.source_channels[ch - 1] = source_channel
        if self.source_colors[ch - 1] != color:
            self.source_colors[ch - 1] = color
            return True
        return False

    def autoset(self) -> None:
        """Fit the zoom limits to the data, or show a default view without data."""
        y_maxs: list[int] = []
        x_mins: list[int] = []
        x_maxs: list[int] = []
        for series in self.series:
            value_range = series.value_range()
            key_range = series.key_range()
            if value_range is not None and key_range is not None:
                y_maxs.append(int(value_range.upper))
                x_mins.append(int(key_range.lower))
                x_maxs.append(int(key_range.upper))

        if not x_maxs:
            self.x_range = Range(0.0, 1000.0)
            self.y_range = Range(0.0, 100.0)
            self.set_max_zoom_x(self.x_range)
            self.set_max_zoom_y(self.y_range)
            return

        y_max = float(max(y_maxs))
        x_max = float(max(x_maxs))
        x_min = float(max(x_mins))

        if self.y_unit.is_decibel():
            y_max = math.ceil(y_max / 10.0) * 10.0 + 20
            y_min = y_max - 120
        else:
            y_max = ceil_to_nice_value(1.5 * y_max)
            y_min = 0.0

        zoom = self.max_zoom_x
        reset_x = self.first_autoset or x_max > zoom.upper or x_min < -zoom.lower
        self.set_max_zoom_x(Range(x_min, x_max), reset_x)
        self.set_max_zoom_y(Range(y_min, y_max), self.first_autoset)
        self.first_autoset = False

    def export_csv(self, separator: str, decimal: str, precision: int) -> bytes:
        """Export the non-empty spectra on a shared frequency column."""
        channels = [
            (self.layout.channel_name(self.source_channels[index]), list(series))
            for index, series in enumerate(self.series)
            if len(series)
        ]
        return export_merged_csv(channels, "frequency", separator, decimal, precision)

    def tracer_text(self, index: int, key: float, value: float) -> str:
        """Text shown next to the tracer on spectrum ``index``."""
        return (
            self.layout.channel_name(self.source_channels[index])
            + "\n"
            + float_to_nice_string(value, 4, True, False, False, self.y_unit)
            + "\n"
            + float_to_nice_string(key, 4, True, False, False, self.x_unit)
        )