from __future__ import annotations

import re
from typing import Any

from knockweb_core.forms.element import FormElement
from knockweb_core.forms.errors import ErrorKind

Pattern = str | re.Pattern[str]


def compile_pattern(pattern: Pattern | None) -> re.Pattern[str] | None:
    if pattern is None:
        return None
    if isinstance(pattern, re.Pattern):
        return pattern
    if pattern == "":
        return None
    return re.compile(pattern)


class TextElement(FormElement):
    """Single-line text input with an optional validation pattern."""

    def __init__(
        self, name: str, label: str = "", *, pattern: Pattern | None = None, **kwargs: Any
    ) -> None:
        super().__init__(name, label, **kwargs)
        self._pattern = compile_pattern(pattern)

    @property
    def pattern(self) -> re.Pattern[str] | None:
        return self._pattern

    @pattern.setter
    def pattern(self, pattern: Pattern | None) -> None:
        self._pattern = compile_pattern(pattern)

    def validate(self) -> bool:
        super().validate()

        # Blank values are the business of not_null, not of the pattern.
        text = "" if self.value() is None else str(self.value()).strip()
        if text and self._pattern is not None:
            if self._pattern.search(text) is None:
                self.set_error(ErrorKind.REGEXP_MISMATCH)

        return not self.error
