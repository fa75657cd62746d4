"""Axis tick labels that show values with SI unit prefixes."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from serialscope.formatting import (
    UnitMode,
    UnitOfMeasure,
    _c_round,
    _fuzzy_compare,
    _fuzzy_is_null,
    int_log10,
)

_TICK_PREFIXES = (
    (18, " E", 1e18),
    (15, " P", 1e15),
    (12, " T", 1e12),
    (9, " G", 1e9),
    (6, " M", 1e6),
    (3, " k", 1e3),
    (0, " ", 1.0),
    (-3, " m", 1e-3),
    (-6, " \u00b5", 1e-6),
    (-9, " n", 1e-9),
    (-12, " p", 1e-12),
    (-15, " f", 1e-15),
    (-18, " a", 1e-18),
)


def _format_number(value: float, format_char: str, precision: int) -> str:
    return format(value, f".{precision}{format_char}")


@dataclass
class UnitAxisTicker:
    """Fixed-step axis ticker whose labels carry a unit with SI prefixes."""

    unit: UnitOfMeasure = field(default_factory=UnitOfMeasure)
    tick_step: float = 1.0
    tick_step_order: int = 0

    def set_tick_step(self, value: float) -> None:
        self.tick_step_order = int_log10(value)
        self.tick_step = value

    def _plain_label(self, tick: float, format_char: str, precision: int) -> str:
        number = _format_number(tick, format_char, precision)
        return f"{number} {self.unit.text}" if self.unit.text else number

    def _clock_label(self, tick: float, format_char: str, precision: int) -> str:
        rounded = float(math.floor(tick + 0.5))
        if _fuzzy_compare(rounded, tick):
            minutes = int(rounded / 60)
        else:
            minutes = int(math.floor(tick) / 60)
        seconds = tick - minutes * 60.0
        hours, minutes = divmod(minutes, 60)
        hh = f"{hours:02d}:" if hours else ""
        ss = _format_number(seconds, format_char, precision)
        if len(ss) < 2 or ss[1] == ".":
            ss = "0" + ss
        return f"{hh}{minutes:02d}:{ss}"

    def tick_label(self, tick: float, format_char: str, precision: int) -> str:
        """Label for one tick; ``format_char`` and ``precision`` apply when no prefix is used."""
        mode = self.unit.mode
        if mode is UnitMode.NO_PREFIX:
            return self._plain_label(tick, format_char, precision)

        if mode is UnitMode.INDEX:
            if _fuzzy_compare(_c_round(tick), tick):
                return str(int(tick))
            return ""

        if mode is UnitMode.TIME and not self.unit.special:
            if tick > 60.0 or _fuzzy_compare(tick, 60.0):
                return self._clock_label(tick, format_char, precision)

        # The prefix follows the order one above the grid step, so 100 shows as 0.1 k.
        unit_order = self.tick_step_order + 1
        # Tenths are needed only when the step is one order below a multiple of three.
        decimals = 1 if self.tick_step_order % 3 == 2 else 0

        if _fuzzy_is_null(tick):
            tick, postfix = 0.0, " "
        elif unit_order >= 21 or unit_order < -18:
            return self._plain_label(tick, format_char, precision)
        else:
            for threshold, postfix, scale in _TICK_PREFIXES:
                if unit_order >= threshold:
                    tick /= scale
                    break
        return f"{tick:.{decimals}f}{postfix}{self.unit.text}"