"""Interface through which a scripted terminal sends and receives data."""

from __future__ import annotations

import struct
from collections import defaultdict
from collections.abc import Callable, Iterator

from serialscope.formatting import _c_round


class EncodingError(ValueError):
    """A value cannot be encoded in the requested format."""


_UNSIGNED = {"uint8": 1, "u8": 1, "uint16": 2, "u16": 2, "uint24": 3, "u24": 3,
             "uint32": 4, "u32": 4, "uint64": 8, "u64": 8}
_SIGNED = {"int8": 1, "i8": 1, "int16": 2, "i16": 2, "int24": 3, "i24": 3,
           "int32": 4, "i32": 4, "int64": 8, "i64": 8}
_FLOATS = {"float": "<f", "f": "<f", "double": "<d", "d": "<d"}


def _to_bytes(element) -> bytes:
    if isinstance(element, (bytes, bytearray)):
        return bytes(element)
    if isinstance(element, bool):
        return b"true" if element else b"false"
    if isinstance(element, (list, tuple)):
        return b""
    return str(element).encode("utf-8")


def _to_int(element) -> int:
    if isinstance(element, bool):
        return int(element)
    if isinstance(element, int):
        return element
    if isinstance(element, float):
        return int(_c_round(element))
    if isinstance(element, (bytes, bytearray)):
        element = bytes(element).decode("latin-1")
    if isinstance(element, str):
        try:
            return int(element.strip(), 10)
        except ValueError:
            raise EncodingError(f"cannot convert {element!r} to an integer") from None
    raise EncodingError(f"cannot convert {element!r} to an integer")


def _to_float(element) -> float:
    if isinstance(element, (bytes, bytearray)):
        element = bytes(element).decode("latin-1")
    try:
        return float(element)
    except (TypeError, ValueError):
        raise EncodingError(f"cannot convert {element!r} to a number") from None


def _encode_one(element, kind: str) -> bytes:
    if kind in _UNSIGNED:
        value = _to_int(element)
        if not 0 <= value < 2**32:
            raise EncodingError(f"{value} is out of range for an unsigned value")
        width = _UNSIGNED[kind]
    elif kind in _SIGNED:
        value = _to_int(element)
        if not -(2**31) <= value < 2**31:
            raise EncodingError(f"{value} is out of range for a signed value")
        width = _SIGNED[kind]
    else:
        return struct.pack(_FLOATS[kind], _to_float(element))
    # Values wider than the target are truncated, as a narrowing cast would do.
    return (value & ((1 << (8 * width)) - 1)).to_bytes(width, "little")


def _iter_encoded(data, type_name: str) -> Iterator[bytes]:
    elements = list(data) if isinstance(data, (list, tuple)) and data else [data]
    if not type_name:
        raise EncodingError("empty format")
    if type_name[0] == "s":
        for element in elements:
            yield _to_bytes(element)
        return

    big_endian = type_name[0].isupper()
    kind = type_name.lower()
    if kind not in _UNSIGNED and kind not in _SIGNED and kind not in _FLOATS:
        raise EncodingError(f"invalid format {type_name!r}")
    for element in elements:
        chunk = _encode_one(element, kind)
        yield chunk[::-1] if big_endian else chunk


def encode_values(data, type_name: str = "s") -> list[bytes]:
    """Encode a value or a list of values, one chunk of bytes per value.

    Formats starting with ``s`` send text; otherwise names such as ``u16``,
    ``int32``, ``f`` or ``double`` select a little-endian binary encoding,
    which becomes big-endian when the name starts with a capital letter.
    """
    return list(_iter_encoded(data, type_name))


class TerminalInterface:
    """Connects a terminal script with the serial line and the data parser.

    Events are delivered to callables stored in ``listeners[name]``:
    ``data_transmitted``, ``data_sent_to_parser``, ``received_from_serial``,
    ``dark_theme_used_changed`` and ``tab_background_changed``.
    """

    def __init__(self) -> None:
        self.listeners: defaultdict[str, list[Callable[..., None]]] = defaultdict(list)
        self._dark_theme_used = False
        self._tab_background = ""

    def _emit(self, name: str, *args) -> None:
        for listener in self.listeners[name]:
            listener(*args)

    def transmit_to_serial(self, data, type_name: str = "s") -> None:
        """Send values to the serial line; stops at the first value that fails to encode."""
        for chunk in _iter_encoded(data, type_name):
            self._emit("data_transmitted", chunk)

    def send_to_parser(self, data) -> None:
        self._emit("data_sent_to_parser", _to_bytes(data))

    def direct_input(self, data: bytes) -> None:
        self._emit("received_from_serial", bytes(data))

    @property
    def dark_theme_used(self) -> bool:
        return self._dark_theme_used

    @dark_theme_used.setter
    def dark_theme_used(self, value: bool) -> None:
        if self._dark_theme_used == value:
            return
        self._dark_theme_used = value
        self._emit("dark_theme_used_changed")

    @property
    def tab_background(self) -> str:
        return self._tab_background

    @tab_background.setter
    def tab_background(self, value: str) -> None:
        if self._tab_background == value:
            return
        self._tab_background = value
        self._emit("tab_background_changed")