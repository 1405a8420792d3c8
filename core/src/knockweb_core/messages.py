from __future__ import annotations

from dataclasses import dataclass
from enum import Flag, auto


class MessageKind(Flag):
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    ALL = ERROR | WARNING | INFO


@dataclass(frozen=True)
class Message:
    kind: MessageKind
    text: str


class MessageLog:
    """Flash messages collected while handling one request."""

    def __init__(self) -> None:
        self._items: list[Message] = []

    def add(self, kind: MessageKind, text: str) -> None:
        self._items.append(Message(kind=kind, text=text))

    def add_error(self, text: str) -> None:
        self.add(MessageKind.ERROR, text)

    def add_warning(self, text: str) -> None:
        self.add(MessageKind.WARNING, text)

    def add_message(self, text: str) -> None:
        self.add(MessageKind.INFO, text)

    def get(self, kinds: MessageKind = MessageKind.ALL) -> list[Message]:
        return [m for m in self._items if m.kind & kinds]

    def errors(self) -> list[str]:
        return [m.text for m in self.get(MessageKind.ERROR)]

    def warnings(self) -> list[str]:
        return [m.text for m in self.get(MessageKind.WARNING)]

    def messages(self) -> list[str]:
        return [m.text for m in self.get(MessageKind.INFO)]

    def has_errors(self) -> bool:
        return bool(self.get(MessageKind.ERROR))

    def has_warnings(self) -> bool:
        return bool(self.get(MessageKind.WARNING))

    def has_messages(self) -> bool:
        return bool(self.get(MessageKind.INFO))

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)
