from __future__ import annotations

import re
from typing import Any

from markupsafe import Markup

from knockweb_core.forms.element import FormElement
from knockweb_core.forms.text import Pattern, compile_pattern


class PasswordElement(FormElement):
    """Password input. The submitted value is never echoed back into the page.

    ``pattern`` is kept for callers that want to check the secret themselves;
    ``validate()`` only applies the not-null rule.
    """

    input_type = "password"

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

    def render_input(self) -> Markup:
        return Markup('<input type="password" name="{}" value="" autocomplete="off" />').format(
            self.field_name
        )
