"""CSV export of plotted channels."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Sequence

from serialscope.formatting import _c_round
from serialscope.plotcore import Range, Series


def format_number(value: float, precision: int, decimal: str) -> str:
    """Fixed-point text of ``value`` with ``decimal`` as the decimal separator."""
    return format(value, f".{precision}f").replace(".", decimal)


def _in_view(key: float, view: Range | None) -> bool:
    return view is None or view.lower <= key <= view.upper


def _logic_level(value: float) -> str:
    # Logic traces are drawn at offsets of three per bit; the remainder is the level.
    return "1" if int(_c_round(value)) % 3 else "0"


def export_channel_csv(
    series: Series,
    name: str,
    separator: str,
    decimal: str,
    precision: int,
    view: Range | None = None,
) -> bytes:
    """Export one channel as ``time`` and value columns.

    With ``view`` only points whose key lies inside it are written.
    An empty series gives empty output.
    """
    if len(series) == 0:
        return b""
    lines = [f"time{separator}{name}\n"]
    lines.extend(
        f"{format_number(key, precision, decimal)}{separator}{format_number(value, precision, decimal)}\n"
        for key, value in series
        if _in_view(key, view)
    )
    return "".join(lines).encode("utf-8")


def export_logic_csv(
    bit_series: Sequence[Series],
    separator: str,
    decimal: str,
    precision: int,
    view: Range | None = None,
) -> bytes:
    """Export the used bits of a logic group, one ``0``/``1`` column per bit.

    Times follow the first bit; they are written with a dot as decimal point.
    With no bits the output is empty.
    """
    if not bit_series:
        return b""
    header = "time" + "".join(f"{separator}bit {bit}" for bit in range(len(bit_series)))
    lines = [header + "\n"]
    for index, (time, _) in enumerate(bit_series[0]):
        if not _in_view(time, view):
            continue
        cells = [format(time, f".{precision}f")]
        cells.extend(_logic_level(bits[index][1]) for bits in bit_series)
        lines.append(separator.join(cells) + "\n")
    return "".join(lines).encode("utf-8")


def export_merged_csv(
    channels: Iterable[tuple[str, Iterable[tuple[float, float]]]],
    key_title: str,
    separator: str,
    decimal: str,
    precision: int,
) -> bytes:
    """Export several channels on a shared, sorted key column.

    Every channel given gets a column; a cell stays empty where the channel
    has no point at that key. Without channels the output is empty.
    """
    names: list[str] = []
    queues: list[deque[tuple[float, float]]] = []
    for name, points in channels:
        names.append(name)
        queues.append(deque(points))
    if not names:
        return b""

    keys = sorted({key for queue in queues for key, _ in queue})
    parts = [key_title + "".join(separator + name for name in names)]
    for key in keys:
        row = [format_number(key, precision, decimal)]
        for queue in queues:
            if queue and queue[0][0] == key:
                row.append(format_number(queue.popleft()[1], precision, decimal))
            else:
                row.append("")
        parts.append(separator.join(row))
    return "\n".join(parts).encode("utf-8")