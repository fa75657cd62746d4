"""Number formatting, units of measure, binary value prefixes and channel numbering."""

from __future__ import annotations

import enum
import math
import re
import string
from dataclasses import dataclass

_FUZZY_FACTOR = 1e12
_NULL_LIMIT = 1e-12


def _fuzzy_compare(a: float, b: float) -> bool:
    """Relative comparison that treats nearly equal doubles as equal."""
    return abs(a - b) * _FUZZY_FACTOR <= min(abs(a), abs(b))


def _fuzzy_is_null(x: float) -> bool:
    return abs(x) <= _NULL_LIMIT


def _c_round(x: float) -> float:
    """Round half away from zero."""
    return math.copysign(math.floor(abs(x) + 0.5), x)


class ChannelType(enum.Enum):
    ANALOG = "analog"
    MATH = "math"
    LOGIC = "logic"


class UnitMode(enum.Enum):
    USE_PREFIX = "use_prefix"
    NO_PREFIX = "no_prefix"
    INDEX = "index"
    TIME = "time"


_PREFIX_CHARS = "munkMG"
_TIME_SPECIAL = re.compile(r"\(([^)]+)\)")


@dataclass(frozen=True)
class UnitOfMeasure:
    """A unit of measure and how values in it are displayed."""

    mode: UnitMode = UnitMode.NO_PREFIX
    text: str = ""
    special: str = ""

    @classmethod
    def parse(cls, raw_unit: str) -> UnitOfMeasure:
        """Build a unit from its textual description.

        A leading ``-`` forces SI prefixes, a leading ``!`` forbids them.
        """
        if not raw_unit:
            return cls(UnitMode.NO_PREFIX)
        if raw_unit.startswith("-"):
            return cls(UnitMode.USE_PREFIX, raw_unit[1:])
        if raw_unit.startswith("!"):
            return cls(UnitMode.NO_PREFIX, raw_unit[1:])
        if raw_unit == "index":
            return cls(UnitMode.INDEX)
        if raw_unit.strip().lower() == "time":
            match = _TIME_SPECIAL.search(raw_unit)
            return cls(UnitMode.TIME, "s", match.group(1) if match else "")
        if len(raw_unit) >= 2 and (raw_unit.startswith("dB") or raw_unit[0] in _PREFIX_CHARS):
            return cls(UnitMode.NO_PREFIX, raw_unit)
        return cls(UnitMode.USE_PREFIX, raw_unit)

    def reciprocal(self) -> UnitOfMeasure:
        if self.text == "s":
            return UnitOfMeasure.parse("-Hz")
        return UnitOfMeasure.parse("!/" + self.text)

    def is_decibel(self) -> bool:
        return self.text[:2] == "dB"


class ValueKind(enum.Enum):
    UNSIGNED_INT = "unsigned_int"
    INTEGER = "integer"
    FLOATING_POINT = "floating_point"
    INVALID = "invalid"
    INCOMPLETE = "incomplete"


@dataclass
class ValueType:
    """Description of how a received value is encoded."""

    is_binary: bool = True
    kind: ValueKind = ValueKind.INCOMPLETE
    big_endian: bool = False
    bytes: int = 0
    multiplier: float = 1.0


@dataclass(frozen=True)
class ChannelLayout:
    """Numbering of analog, math and logic channels."""

    analog_count: int
    math_count: int
    logic_groups: int
    logic_bits: int

    @property
    def _first_logic(self) -> int:
        return self.analog_count + self.math_count

    def analog_channel_id(self, number: int, channel_type: ChannelType) -> int:
        """Channel id of an analog or math channel numbered from 1."""
        if channel_type is ChannelType.ANALOG:
            return number - 1
        if channel_type is ChannelType.MATH:
            return number + self.analog_count - 1
        return 0

    def logic_channel_id(self, group: int, bit: int) -> int:
        """Channel id of a logic bit; group and bit are numbered from 0."""
        return self._first_logic + group * self.logic_bits + bit

    def _logic_position(self, chid: int) -> tuple[int, int]:
        if chid < self._first_logic:
            raise ValueError(f"channel {chid} is not a logic channel")
        return divmod(chid - self._first_logic, self.logic_bits)

    def logic_group_of(self, chid: int) -> int:
        return self._logic_position(chid)[0]

    def logic_bit_of(self, chid: int) -> int:
        return self._logic_position(chid)[1]

    def is_logic(self, chid: int) -> bool:
        return self._first_logic <= chid < self._first_logic + self.logic_groups * self.logic_bits

    def channel_name(self, chid: int) -> str:
        """Human readable name of a channel id counted from 0."""
        if chid >= self._first_logic:
            group, bit = self._logic_position(chid)
            if group == self.logic_groups - 1:
                return f"Logic bit {bit}"
            return f"Logic {group + 1} bit {bit}"
        if chid >= self.analog_count:
            return f"Math {chid - self.analog_count + 1}"
        return f"Ch {chid + 1}"


def floor_to_nice_value(value: float) -> float:
    """Largest value of the form 1, 2 or 5 times a power of ten not above ``value``."""
    if value > 0:
        one = 10.0 ** math.floor(math.log10(value))
        if _fuzzy_compare(value, 10.0 * one):
            return 10.0 * one
        for factor in (5.0, 2.0):
            nice = factor * one
            if value > nice or _fuzzy_compare(value, nice):
                return nice
        return one
    if value < 0:
        return -floor_to_nice_value(-value)
    return 0.0


def ceil_to_nice_value(value: float) -> float:
    """Smallest value of the form 1, 2 or 5 times a power of ten not below ``value``."""
    if value > 0:
        one = 10.0 ** math.floor(math.log10(value))
        if _fuzzy_compare(value, one):
            return one
        for factor in (2.0, 5.0):
            nice = factor * one
            if value < nice or _fuzzy_compare(value, nice):
                return nice
        return 10.0 * one
    if value < 0:
        return -ceil_to_nice_value(-value)
    return 0.0


def ceil_to_multiple_of(value: float, multiple_of: float) -> float:
    return math.ceil(value / multiple_of) * multiple_of


def int_log10(x: float) -> int:
    """Decimal order of magnitude of ``x``, robust against rounding of exact powers."""
    if _fuzzy_is_null(x):
        return -1000
    if math.isinf(x):
        return 100
    if math.isnan(x):
        return 0
    result = math.log10(abs(x))
    rounded = _c_round(result)
    if _fuzzy_compare(rounded, result):
        return int(rounded)
    return math.floor(result)


def to_significant_digits(x: float, prec: int, trim_zeroes: bool = False) -> str:
    """Format ``x`` with ``prec`` significant digits.

    With ``trim_zeroes`` trailing zeros of the fraction are removed (1.200 becomes 1.2).
    """
    if prec <= 0:
        raise ValueError("precision must be positive")

    if _fuzzy_is_null(x):
        if trim_zeroes or prec == 1:
            return "0"
        return "0." + "0" * (prec - 1)

    order = int_log10(x)
    if order >= prec - 1:
        return str(int(_c_round(x)))

    digits = str(int(_c_round(x * 10.0 ** (prec - order - 1))))
    point = len(digits) - prec + order + 1
    if point > 0:
        fraction = "." + digits[point:]
        if trim_zeroes:
            fraction = fraction.rstrip("0.")
        return digits[:point] + fraction
    return "0." + "0" * (-point) + digits


_LARGE_PREFIXES = (
    (18, " E", 1e18),
    (15, " P", 1e15),
    (12, " T", 1e12),
    (9, " G", 1e9),
    (6, " M", 1e6),
    (3, " k", 1e3),
)
_SMALL_PREFIXES = (
    (-3, " m", 1e-3),
    (-6, " \u00b5", 1e-6),
    (-9, " n", 1e-9),
    (-12, " p", 1e-12),
    (-15, " f", 1e-15),
)


def _nice_text(d, significant_digits, justify, justify_unit, no_decimals_if_integer, unit):
    if math.isinf(d):
        return "\u221e  " if justify_unit else "\u221e "
    if math.isnan(d):
        return "---  " if justify_unit else "--- "

    def plain() -> str:
        text = to_significant_digits(d, significant_digits, no_decimals_if_integer)
        return text + ("  " if justify_unit else " ")

    if unit.mode is UnitMode.NO_PREFIX:
        return plain()
    if unit.mode is UnitMode.INDEX:
        return format(math.floor(d), ".0f")

    order = int_log10(d)
    if _fuzzy_is_null(d):
        text = to_significant_digits(0.0, significant_digits, no_decimals_if_integer)
        return text + ("  " if justify else " ")
    if order >= 21 or 0 <= order < 3 or order < -15:
        return plain()
    for threshold, postfix, scale in _LARGE_PREFIXES + _SMALL_PREFIXES:
        if order >= threshold:
            return to_significant_digits(d / scale, significant_digits, no_decimals_if_integer) + postfix
    return plain()


def float_to_nice_string(
    d: float,
    significant_digits: int,
    justify: bool,
    justify_unit: bool,
    no_decimals_if_integer: bool = False,
    unit: UnitOfMeasure | None = None,
) -> str:
    """Format a value with an SI prefix and unit, optionally right-justified."""
    if unit is None:
        unit = UnitOfMeasure.parse("")
    text = _nice_text(d, significant_digits, justify, justify_unit, no_decimals_if_integer, unit)
    if justify:
        width = significant_digits + (3 if text.endswith(" ") and not justify_unit else 4)
        return text.rjust(width) + unit.text
    return text + unit.text


def value_type_to_string(val: ValueType) -> str:
    if not val.is_binary:
        return "Decimal"
    if val.kind is ValueKind.INVALID:
        return "Invalid data"
    if val.kind is ValueKind.INCOMPLETE:
        return "Incomplete data"
    names = {
        ValueKind.INTEGER: "signed integer",
        ValueKind.UNSIGNED_INT: "unsigned integer",
        ValueKind.FLOATING_POINT: "floating point",
    }
    endian = " (big endian)" if val.big_endian else " (little endian)"
    return f"{val.bytes * 8}-bit {names[val.kind]}{endian}"


_MULTIPLIERS = {
    "T": 1e12,
    "G": 1e9,
    "M": 1e6,
    "k": 1e3,
    "h": 1e2,
    "D": 1e1,
    "d": 1e-1,
    "c": 1e-2,
    "m": 1e-3,
    "u": 1e-6,
    "n": 1e-9,
    "p": 1e-12,
    "f": 1e-15,
    "a": 1e-18,
}

_KINDS = {
    "u": (ValueKind.UNSIGNED_INT, {1, 2, 3, 4}),
    "i": (ValueKind.INTEGER, {1, 2, 4}),
    "f": (ValueKind.FLOATING_POINT, {4, 8}),
}


def read_value_prefix(buffer: bytes | bytearray | str) -> tuple[ValueType, int]:
    """Decode a binary value prefix such as ``u4``, ``I2`` or ``kf4``.

    Returns the value type and the prefix length; the length is 0 when the
    buffer is too short to tell.
    """
    text = buffer if isinstance(buffer, str) else bytes(buffer).decode("latin-1")
    value_type = ValueType()
    if len(text) < 2:
        return value_type, 0

    if text[1] not in string.digits:
        length = 3
        if len(text) < 3:
            return value_type, length
        multiplier = _MULTIPLIERS.get(text[0])
        if multiplier is None:
            value_type.kind = ValueKind.INVALID
            return value_type, length
        value_type.multiplier = multiplier
    else:
        length = 2

    type_char = text[length - 2]
    size_char = text[length - 1]
    entry = _KINDS.get(type_char.lower())
    if entry is None:
        value_type.kind = ValueKind.INVALID
        return value_type, length

    kind, sizes = entry
    value_type.bytes = ord(size_char) - ord("0")
    value_type.kind = kind if value_type.bytes in sizes else ValueKind.INVALID
    value_type.big_endian = type_char == type_char.upper()
    return value_type, length


def next_pow2(number: int) -> int:
    """Nearest power of two that is greater than or equal to ``number``."""
    power = 1
    while power < number:
        power *= 2
    return power