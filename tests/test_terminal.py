import struct

import pytest

from serialscope.terminal import EncodingError, TerminalInterface, encode_values


def test_string_values():
    assert encode_values(["ab", "c"], "s") == [b"ab", b"c"]
    assert encode_values("hello") == [b"hello"]


@pytest.mark.parametrize("name,width", [("u8", 1), ("uint16", 2), ("u24", 3), ("u32", 4), ("uint64", 8)])
def test_unsigned_round_trip(name, width):
    (chunk,) = encode_values(200, name)
    assert len(chunk) == width
    assert int.from_bytes(chunk, "little") == 200


@pytest.mark.parametrize("name,width", [("i8", 1), ("int16", 2), ("i24", 3), ("int32", 4), ("i64", 8)])
def test_signed_round_trip(name, width):
    (chunk,) = encode_values(-5, name)
    assert len(chunk) == width
    assert int.from_bytes(chunk, "little", signed=True) == -5


def test_capital_letter_means_big_endian():
    little = encode_values(258, "u16")[0]
    big = encode_values(258, "U16")[0]
    assert big == little[::-1]
    assert int.from_bytes(big, "big") == 258


def test_float_and_double():
    assert encode_values(1.0, "f") == [b"\x00\x00\x80\x3f"]
    (chunk,) = encode_values(0.1, "double")
    assert struct.unpack("<d", chunk)[0] == 0.1
    (big,) = encode_values(0.1, "D")
    assert struct.unpack(">d", big)[0] == 0.1


def test_list_gives_one_chunk_per_value():
    chunks = encode_values([1, "2", 3], "u8")
    assert [int.from_bytes(chunk, "little") for chunk in chunks] == [1, 2, 3]


def test_narrowing_truncates():
    (chunk,) = encode_values(300, "u8")
    assert chunk[0] == 300 % 256


@pytest.mark.parametrize("name", ["x16", "S", "uint128", ""])
def test_invalid_format(name):
    with pytest.raises(EncodingError):
        encode_values(1, name)


@pytest.mark.parametrize("value,name", [("abc", "u8"), (-1, "u16"), ("x", "float")])
def test_conversion_errors(value, name):
    with pytest.raises(EncodingError):
        encode_values(value, name)


def test_transmit_stops_at_first_bad_value():
    terminal = TerminalInterface()
    sent = []
    terminal.listeners["data_transmitted"].append(sent.append)
    with pytest.raises(EncodingError):
        terminal.transmit_to_serial([7, "bad", 9], "u8")
    assert len(sent) == 1
    assert int.from_bytes(sent[0], "little") == 7


def test_parser_and_direct_input():
    terminal = TerminalInterface()
    parsed, received = [], []
    terminal.listeners["data_sent_to_parser"].append(parsed.append)
    terminal.listeners["received_from_serial"].append(received.append)
    terminal.send_to_parser("cmd")
    terminal.direct_input(b"\x01\x02")
    assert parsed == [b"cmd"]
    assert received == [b"\x01\x02"]


def test_properties_notify_only_on_change():
    terminal = TerminalInterface()
    events = []
    terminal.listeners["dark_theme_used_changed"].append(lambda: events.append("dark"))
    terminal.listeners["tab_background_changed"].append(lambda: events.append("tab"))
    terminal.dark_theme_used = True
    terminal.dark_theme_used = True
    terminal.tab_background = "grey"
    terminal.tab_background = "grey"
    assert events == ["dark", "tab"]
    assert terminal.dark_theme_used is True
    assert terminal.tab_background == "grey"