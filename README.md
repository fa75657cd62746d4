# serialscope

Headless plot models and helpers for data streamed from a serial device:
SI-prefixed number formatting, axis tick labels, a main time-domain plot
with rolling view and pause, an FFT plot, an XY plot, CSV export, a
message list and a terminal interface that encodes values into bytes.

The package has no dependencies outside the standard library.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Formatting values

```python
from serialscope.formatting import UnitOfMeasure, float_to_nice_string, to_significant_digits

to_significant_digits(3.14159, 3, False)                      # "3.14"
unit = UnitOfMeasure.parse("V")
float_to_nice_string(0.0123, 3, False, False, False, unit)    # "12.3 mV"
```

Other helpers in `serialscope.formatting`:

- `ceil_to_nice_value` and `floor_to_nice_value` round to the 1-2-5 series.
- `int_log10` gives the decimal order of a number, `next_pow2` the next
  power of two, `ceil_to_multiple_of` rounds up to a multiple.
- `UnitOfMeasure.parse` reads a unit description: a leading `-` forces SI
  prefixes, a leading `!` forbids them, `index` and `time` select special
  modes. `reciprocal()` and `is_decibel()` are available on a unit.
- `read_value_prefix` decodes binary value type prefixes such as `u2`,
  `I4` or `mF4` and returns a `ValueType` together with the prefix length;
  `value_type_to_string` describes a `ValueType` in words.
- `ChannelLayout` maps analog, math and logic channel numbers to ids and
  display names (`Ch 1`, `Math 1`, `Logic 1 bit 0`, ...).

## Axis labels

`serialscope.ticker.UnitAxisTicker` produces tick labels with SI prefixes
chosen from the tick step (`set_tick_step`), integer labels for index
units, and `MM:SS` labels (with hours when needed) for time units from
60 seconds upwards.

## Plots

- `serialscope.plotcore` – `Range`, the key-sorted `Series`, `clip_range`,
  `key_to_nearest_sample`, `choose_tracer_text_position` and the shared
  `Plot` base with zoom limits, grid steps and units.
- `serialscope.mainplot.MainPlot` – analog, math and logic channels,
  rolling mode, pause buffering, per-channel offset, scale and inversion,
  and CSV export of one channel, one logic group or all channels.
- `serialscope.fftplot.FFTPlot` – two spectrum channels with hold-max,
  automatic zoom limits (decibel-aware) and peak reporting.
- `serialscope.xyplot.XYPlot` – a parametric XY curve of `CurvePoint`s.
- `serialscope.tracer.nearest_point_index` – picks the point nearest to a
  pixel position, measured on both axes.
- `serialscope.export` – the CSV writers used by the plots.

Plots report events by calling the callables stored in their
`listeners[name]` lists (for example `h_range_changed` or
`new_peak_values`).

## Messages and terminal

`serialscope.messages.MessageModel` keeps a list of timestamped messages
and answers `data(row, role)` queries by `MessageRole`.

`serialscope.terminal.encode_values` turns a value or a list of values
into bytes: `s` for text, or `u8`…`u64`, `i8`…`i64`, `f`/`float`,
`d`/`double` for little-endian binary, big-endian when the format starts
with a capital letter. Values that cannot be encoded raise
`EncodingError`. `TerminalInterface` passes encoded data, parser input
and received data on to its listeners.

## What this package does not do

It draws nothing to a screen and handles no mouse input; the classes hold
data, ranges and state for a front end to render. It does not open serial
ports or parse the incoming stream, and it provides no command-line
program.