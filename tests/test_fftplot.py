import math

from serialscope.fftplot import FFTPlot
from serialscope.formatting import ChannelLayout
from serialscope.plotcore import Range, Series


def make_plot():
    return FFTPlot(ChannelLayout(analog_count=2, math_count=1, logic_groups=1, logic_bits=8))


def test_empty_plot_default_view():
    plot = make_plot()
    assert plot.x_range == Range(0.0, 1000.0)
    assert plot.y_range == Range(0.0, 100.0)


def test_new_data_replaces_series():
    plot = make_plot()
    data = [(0.0, 1.0), (1.0, 2.0), (2.0, 3.0)]
    plot.new_data(0, data)
    assert plot.series[0] == Series(data)
    plot.new_data(0, [(0.0, 5.0), (1.0, 0.0), (2.0, 1.0)])
    assert plot.series[0].values == [5.0, 0.0, 1.0]


def test_hold_max_keeps_maxima():
    plot = make_plot()
    plot.set_hold_max(0, True)
    plot.new_data(0, [(0.0, 1.0), (1.0, 8.0), (2.0, 3.0)])
    plot.new_data(0, [(0.0, 4.0), (1.0, 2.0), (2.0, 6.0)])
    assert plot.series[0].values == [4.0, 8.0, 6.0]
    assert plot.series[0].keys == [0.0, 1.0, 2.0]


def test_hold_max_ignored_when_size_changes():
    plot = make_plot()
    plot.set_hold_max(0, True)
    plot.new_data(0, [(0.0, 9.0), (1.0, 9.0)])
    plot.new_data(0, [(0.0, 1.0), (1.0, 1.0), (2.0, 1.0)])
    assert plot.series[0].values == [1.0, 1.0, 1.0]


def test_autoset_linear_range_covers_data():
    plot = make_plot()
    plot.new_data(0, [(0.0, 2.0), (10.0, 7.0)])
    assert plot.y_range.lower == 0.0
    assert plot.y_range.upper >= 1.5 * 7.0
    assert plot.x_range == Range(0.0, 10.0)


def test_autoset_decibel_range_spans_120():
    plot = make_plot()
    plot.set_y_unit("dB")
    plot.new_data(0, [(0.0, -30.0), (1.0, -10.0)])
    assert math.isclose(plot.y_range.size, 120.0)
    assert plot.y_range.upper % 10 == 0
    assert plot.y_range.upper > -10.0


def test_peak_value_excludes_last_visible_sample():
    plot = make_plot()
    peaks = []
    plot.listeners["new_peak_values"].append(lambda ch, freq: peaks.append((ch, freq)))
    plot.output_peak_value = True
    plot.new_data(1, [(0.0, 1.0), (1.0, 5.0), (2.0, 3.0), (3.0, 9.0)])
    assert peaks == [(1, 1.0)]


def test_no_peak_event_when_disabled():
    plot = make_plot()
    peaks = []
    plot.listeners["new_peak_values"].append(lambda ch, freq: peaks.append(freq))
    plot.new_data(0, [(0.0, 1.0), (1.0, 5.0)])
    assert peaks == []


def test_clear_empties_both():
    plot = make_plot()
    plot.new_data(0, [(0.0, 1.0), (1.0, 2.0)])
    plot.new_data(1, [(0.0, 1.0), (1.0, 2.0)])
    plot.clear()
    assert len(plot.series[0]) == 0 and len(plot.series[1]) == 0
    assert plot.first_autoset is True


def test_clear_channel_only_one():
    plot = make_plot()
    plot.new_data(0, [(0.0, 1.0), (1.0, 2.0)])
    plot.new_data(1, [(0.0, 1.0), (1.0, 2.0)])
    plot.clear_channel(0)
    assert len(plot.series[0]) == 0
    assert len(plot.series[1]) == 2


def test_set_source_reports_color_change():
    plot = make_plot()
    assert plot.set_source(1, 2, "red") is True
    assert plot.set_source(1, 2, "red") is False
    assert plot.source_channels[0] == 2


def test_export_csv_header_and_rows():
    plot = make_plot()
    plot.set_source(1, 0, "red")
    plot.new_data(0, [(1.0, 2.0), (2.0, 3.0)])
    text = plot.export_csv(",", ".", 1).decode()
    lines = text.split("\n")
    assert lines[0] == "frequency,Ch 1"
    assert lines[1:] == ["1.0,2.0", "2.0,3.0"]


def test_export_csv_empty():
    assert make_plot().export_csv(",", ".", 2) == b""


def test_tracer_text_starts_with_channel_name():
    plot = make_plot()
    plot.set_source(2, 2, "blue")
    lines = plot.tracer_text(1, 100.0, 1.0).split("\n")
    assert lines[0] == "Math 1"
    assert len(lines) == 3