"""List of timestamped messages shown to the user."""

from __future__ import annotations

import datetime
import enum
from collections.abc import Callable
from dataclasses import dataclass

_USER_ROLE = 0x0100


class MessageRole(enum.IntEnum):
    TIME = _USER_ROLE + 1
    MESSAGE = _USER_ROLE + 2
    TYPE = _USER_ROLE + 3

    @property
    def role_name(self) -> str:
        return {"TIME": "time", "MESSAGE": "message", "TYPE": "type"}[self.name]


@dataclass(frozen=True)
class Message:
    message: str
    time: datetime.time
    kind: str


def _now() -> datetime.time:
    return datetime.datetime.now().time()


class MessageModel:
    """Messages with the time they were added.

    Callables in ``empty_changed_listeners`` receive the new emptiness state
    after each change.
    """

    def __init__(self, clock: Callable[[], datetime.time] = _now):
        self._clock = clock
        self._messages: list[Message] = []
        self.empty_changed_listeners: list[Callable[[bool], None]] = []

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(self._messages)

    @property
    def empty(self) -> bool:
        return not self._messages

    @staticmethod
    def role_names() -> dict[int, str]:
        return {role.value: role.role_name for role in MessageRole}

    def _notify(self) -> None:
        for listener in self.empty_changed_listeners:
            listener(self.empty)

    def add_message(self, message: str, kind: str) -> None:
        """Append a message; ``kind`` is a single character."""
        if len(kind) != 1:
            raise ValueError("message kind must be a single character")
        self._messages.append(Message(message, self._clock(), kind))
        self._notify()

    def clear(self) -> None:
        self._messages.clear()
        self._notify()

    def row_count(self) -> int:
        return len(self._messages)

    def data(self, row: int, role: int):
        """Value of ``role`` for the message in ``row``; None for an invalid row or role."""
        if not 0 <= row < len(self._messages):
            return None
        message = self._messages[row]
        if role == MessageRole.TIME:
            return message.time.strftime("%H:%M:%S")
        if role == MessageRole.MESSAGE:
            return message.message
        if role == MessageRole.TYPE:
            return message.kind
        return None