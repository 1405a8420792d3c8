from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from markupsafe import Markup

from knockweb_core.forms.element import FormElement, first_row_value
from knockweb_core.forms.errors import ErrorKind

DEFAULT_MAXIMUM_SIZE = 5


def _as_text(value: Any) -> str | None:
    return None if value is None else str(value)


class DropdownElement(FormElement):
    """Select box over an ordered ``key -> label`` option map.

    With ``maximum_size`` set the box grows with the number of options, up to
    that ceiling. Selected keys are compared as exact strings so that a key
    like ``"0"`` is never mistaken for "nothing selected".
    """

    def __init__(
        self,
        name: str,
        label: str = "",
        options: Mapping[Any, Any] | None = None,
        *,
        is_multiple: bool = False,
        size: int = 1,
        maximum_size: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(name, label, **kwargs)
        self._options: dict[str, str] = {}
        self._size = 1
        self._maximum_size: int | None = None
        self._is_multiple = False

        self.options = options or {}
        self.size = size
        if maximum_size is not None:
            self.maximum_size = maximum_size
        self.is_multiple = is_multiple

    # -- options --------------------------------------------------------

    @property
    def options(self) -> dict[str, str]:
        return dict(self._options)

    @options.setter
    def options(self, options: Mapping[Any, Any]) -> None:
        self._options = {str(k): str(v) for k, v in options.items()}

    def option(self, key: Any) -> str | None:
        return self._options.get(str(key))

    # -- sizing ---------------------------------------------------------

    @property
    def is_multiple(self) -> bool:
        return self._is_multiple

    @is_multiple.setter
    def is_multiple(self, flag: bool) -> None:
        self._is_multiple = bool(flag)
        if self._is_multiple and self._size == 1:
            self.maximum_size = DEFAULT_MAXIMUM_SIZE

    @property
    def size(self) -> int:
        return self._size

    @size.setter
    def size(self, n: int) -> None:
        self._size = max(1, abs(int(n)))
        if self._size == 1:
            self._is_multiple = False
            self._maximum_size = None

    @property
    def maximum_size(self) -> int | None:
        return self._maximum_size

    @maximum_size.setter
    def maximum_size(self, n: int | None) -> None:
        if n is not None and int(n) > 1:
            self._maximum_size = int(n)
            self._size = int(n)
        else:
            self._maximum_size = None

    def effective_size(self) -> int:
        if self._maximum_size is None:
            return self._size
        return max(1, min(self._maximum_size, len(self._options)))

    # -- values ---------------------------------------------------------

    def set_value(self, raw: Any) -> None:
        if isinstance(raw, (list, tuple)) and raw and isinstance(raw[0], Mapping):
            self._value = _as_text(first_row_value(raw, self.name))
        elif isinstance(raw, (list, tuple)):
            self._value = [str(v) for v in raw if v is not None]
        else:
            self._value = _as_text(raw)
        self._validated = False

    def set_db_value(self, raw: Any) -> None:
        if isinstance(raw, Mapping):
            self._value = list(raw.values())
        elif isinstance(raw, (list, tuple)):
            if raw and isinstance(raw[0], Mapping):
                # Joined result set: one row per selected option.
                if first_row_value(raw, self.name) is None:
                    self._value = []
                else:
                    self._value = [row.get(self.name) for row in raw if isinstance(row, Mapping)]
            else:
                self._value = list(raw)
        else:
            self._value = raw

    def db_value(self) -> Any:
        v = self._value
        if not self._is_multiple:
            return v
        if v is None:
            return []
        if isinstance(v, list):
            return list(v)
        return [v]

    def is_empty(self) -> bool:
        v = self._value
        if isinstance(v, list):
            return len(v) == 0
        if v is None:
            return True
        return len(str(v)) == 0

    def selected_keys(self, value: Any = None) -> list[str]:
        v = self._value if value is None else value
        if v is None:
            return []
        if isinstance(v, (list, tuple)):
            return [str(x) for x in v if x is not None]
        return [str(v)]

    def is_selected(self, key: Any, value: Any = None) -> bool:
        return str(key) in self.selected_keys(value)

    # -- validation -----------------------------------------------------

    def validate(self) -> bool:
        self.clear_errors()

        # A leading "" entry stands for "nothing selected" in the submitted list.
        if isinstance(self._value, list):
            if "" in self._value:
                values = list(self._value)
                values.remove("")
                self._value = values
        elif self._value == "":
            self._value = None

        if self.not_null and self.is_empty():
            self.set_error(ErrorKind.EMPTY_VALUE)

        self._validated = True
        return not self.error

    # -- rendering ------------------------------------------------------

    def render_input(self) -> Markup:
        shown = self.display_value()

        field_name = self.field_name + ("[]" if self._is_multiple else "")
        parts = [
            Markup('<select name="{}" size="{}"{}>').format(
                field_name,
                self.effective_size(),
                Markup(" multiple") if self._is_multiple else "",
            )
        ]
        for key, label in self._options.items():
            parts.append(
                Markup('<option value="{}"{}>{}</option>').format(
                    key,
                    Markup(" selected") if self.is_selected(key, shown) else "",
                    label,
                )
            )
        parts.append(Markup("</select>"))
        return Markup("\n").join(parts)
