from __future__ import annotations

import re
from typing import Any

from knockweb_core.forms.element import FormElement
from knockweb_core.forms.errors import ErrorKind

INTEGER_RE = re.compile(r"^[-+]?[0-9]+$")
_LEADING_NUMBER_RE = re.compile(r"^\s*[-+]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][-+]?[0-9]+)?")


def leading_number(text: str) -> float:
    """Numeric prefix of ``text``; 0.0 when there is none ("12abc" -> 12.0)."""

    m = _LEADING_NUMBER_RE.match(text)
    if m is None:
        return 0.0
    return float(m.group(0))


class IntegerElement(FormElement):
    """Whole-number input with optional inclusive bounds."""

    def __init__(
        self,
        name: str,
        label: str = "",
        *,
        minimum: int | None = None,
        maximum: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(name, label, **kwargs)
        self.minimum = minimum
        self.maximum = maximum

    def _text(self) -> str:
        v = self.value()
        return "" if v is None else str(v).strip()

    def is_empty(self) -> bool:
        return self._text() == ""

    def validate(self) -> bool:
        self.clear_errors()
        text = self._text()
        self._value = text

        # Empty values skip format and range checks entirely.
        if text == "":
            if self.not_null:
                self.set_error(ErrorKind.EMPTY_VALUE)
            self._value = None
            self._validated = True
            return not self.error

        if INTEGER_RE.match(text) is None:
            self.set_error(ErrorKind.INVALID_FORMAT)

        number = leading_number(text)
        if self.minimum is not None and number < self.minimum:
            self.set_error(ErrorKind.MIN_EXCEEDED)
        if self.maximum is not None and number > self.maximum:
            self.set_error(ErrorKind.MAX_EXCEEDED)

        self._validated = True
        return not self.error
