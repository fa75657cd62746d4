import pytest

from serialscope.formatting import UnitMode, UnitOfMeasure, int_log10
from serialscope.ticker import UnitAxisTicker

VOLTS = UnitOfMeasure.parse("-V")
TIME = UnitOfMeasure.parse("time")


def _ticker(unit, step):
    ticker = UnitAxisTicker(unit=unit)
    ticker.set_tick_step(step)
    return ticker


def test_set_tick_step_records_order():
    ticker = UnitAxisTicker()
    ticker.set_tick_step(1000.0)
    assert ticker.tick_step == 1000.0
    assert ticker.tick_step_order == int_log10(1000.0)


def test_plain_label_without_unit():
    label = UnitAxisTicker().tick_label(1.5, "f", 2)
    assert float(label) == 1.5
    assert len(label.split(".")[1]) == 2


def test_plain_label_with_unit():
    label = UnitAxisTicker(unit=UnitOfMeasure.parse("!V")).tick_label(1.5, "f", 2)
    assert label.endswith(" V")
    assert float(label[:-2]) == 1.5


def test_index_labels():
    ticker = UnitAxisTicker(unit=UnitOfMeasure.parse("index"))
    assert ticker.tick_label(3.0, "f", 2) == "3"
    assert ticker.tick_label(0.0, "f", 2) == "0"
    assert ticker.tick_label(3.5, "f", 2) == ""


def test_time_labels():
    ticker = _ticker(TIME, 10.0)
    assert ticker.tick_label(90.0, "f", 0) == "01:30"
    assert ticker.tick_label(3725.0, "f", 0) == "01:02:05"


@pytest.mark.parametrize("tick", [60.0, 61.0, 599.0, 3600.0, 7322.0, 86399.0])
def test_time_labels_round_trip(tick):
    parts = [int(p) for p in _ticker(TIME, 10.0).tick_label(tick, "f", 0).split(":")]
    total = 0
    for part in parts:
        total = total * 60 + part
    assert total == tick


def test_short_time_uses_prefix():
    label = _ticker(TIME, 1.0).tick_label(5.0, "f", 0)
    assert ":" not in label
    assert label.endswith(" s")


def test_time_with_special_uses_prefix():
    unit = UnitOfMeasure(UnitMode.TIME, "s", "hh")
    assert ":" not in _ticker(unit, 10.0).tick_label(90.0, "f", 0)


@pytest.mark.parametrize(
    "step, tick, suffix, scale",
    [
        (100.0, 1500.0, " kV", 1e3),
        (1e5, 2e6, " MV", 1e6),
        (1e-4, 0.0025, " mV", 1e-3),
        (1e-7, 3e-6, " \u00b5V", 1e-6),
        (1e-10, 4e-9, " nV", 1e-9),
        (1.0, 5.0, " V", 1.0),
    ],
)
def test_prefixed_labels(step, tick, suffix, scale):
    label = _ticker(VOLTS, step).tick_label(tick, "f", 0)
    assert label.endswith(suffix)
    assert float(label[: -len(suffix)]) == pytest.approx(tick / scale, abs=0.05)


def test_tenths_shown_only_below_multiple_of_three():
    assert "." in _ticker(VOLTS, 100.0).tick_label(1500.0, "f", 0)
    assert "." not in _ticker(VOLTS, 1000.0).tick_label(2000.0, "f", 0)


def test_zero_label():
    label = _ticker(VOLTS, 100.0).tick_label(0.0, "f", 0)
    assert label.endswith(" V")
    assert float(label[:-2]) == 0


@pytest.mark.parametrize("step, tick", [(1e21, 5e21), (1e-20, 3e-20)])
def test_out_of_prefix_range_falls_back(step, tick):
    label = _ticker(VOLTS, step).tick_label(tick, "g", 6)
    assert label.endswith(" V")
    assert float(label[:-2]) == pytest.approx(tick)