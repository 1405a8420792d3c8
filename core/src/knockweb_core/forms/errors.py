from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Validation failures recorded on a form element (never raised)."""

    EMPTY_VALUE = "empty_value"
    INVALID_FORMAT = "invalid_format"
    MIN_EXCEEDED = "min_exceeded"
    MAX_EXCEEDED = "max_exceeded"
    REGEXP_MISMATCH = "regexp_mismatch"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.EMPTY_VALUE: "A value is required.",
    ErrorKind.INVALID_FORMAT: "Invalid format.",
    ErrorKind.MIN_EXCEEDED: "Value is too small.",
    ErrorKind.MAX_EXCEEDED: "Value is too large.",
    ErrorKind.REGEXP_MISMATCH: "Invalid value.",
}


class FormError(Exception):
    """Structural form misconfiguration (a programming error, not user input)."""


class UnknownElementType(FormError, LookupError):
    def __init__(self, type_tag: object) -> None:
        super().__init__(f'Element of type "{type_tag}" does not exist')
        self.type_tag = type_tag
