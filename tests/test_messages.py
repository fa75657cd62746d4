import datetime

import pytest

from serialscope.messages import MessageModel, MessageRole


def _fixed_clock():
    return datetime.time(12, 34, 56)


def test_new_model_is_empty():
    model = MessageModel()
    assert model.empty is True
    assert model.row_count() == 0


def test_add_message_and_read_roles():
    model = MessageModel(clock=_fixed_clock)
    model.add_message("hello", "w")
    assert model.row_count() == 1
    assert model.data(0, MessageRole.MESSAGE) == "hello"
    assert model.data(0, MessageRole.TYPE) == "w"
    assert model.data(0, MessageRole.TIME) == "12:34:56"


def test_messages_keep_insertion_order():
    model = MessageModel(clock=_fixed_clock)
    for text in ("a", "b", "c"):
        model.add_message(text, "i")
    assert [model.data(row, MessageRole.MESSAGE) for row in range(model.row_count())] == ["a", "b", "c"]
    assert [message.message for message in model] == ["a", "b", "c"]


def test_invalid_row_or_role_gives_none():
    model = MessageModel(clock=_fixed_clock)
    model.add_message("x", "e")
    assert model.data(1, MessageRole.MESSAGE) is None
    assert model.data(-1, MessageRole.MESSAGE) is None
    assert model.data(0, 0) is None


def test_empty_changed_notifications():
    model = MessageModel(clock=_fixed_clock)
    events = []
    model.empty_changed_listeners.append(events.append)
    model.add_message("x", "e")
    model.clear()
    assert events == [False, True]
    assert model.empty is True
    assert model.row_count() == 0


def test_kind_must_be_one_character():
    with pytest.raises(ValueError):
        MessageModel().add_message("x", "error")


def test_role_names():
    names = MessageModel.role_names()
    assert names[MessageRole.TIME] == "time"
    assert names[MessageRole.MESSAGE] == "message"
    assert names[MessageRole.TYPE] == "type"