from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from markupsafe import Markup

from knockweb_core.forms.context import RequestContext
from knockweb_core.forms.errors import ErrorKind

FIELD_NAMESPACE = "data"


@dataclass(frozen=True)
class FormRow:
    """One layout unit handed to the page template."""

    name: str
    label: str
    hint: str
    input_html: Markup
    error_message: str | None = None
    hidden: bool = False


def _is_row_list(raw: Any) -> bool:
    return isinstance(raw, (list, tuple, Mapping))


def first_row_value(raw: Any, name: str) -> Any | None:
    """Pick ``name`` out of the first record of a joined result set."""

    if not isinstance(raw, (list, tuple)) or not raw:
        return None
    first = raw[0]
    if not isinstance(first, Mapping):
        return None
    return first.get(name)


class FormElement:
    """Base form field: holds a value, fetches it, validates it and renders a row.

    The value has two readings: ``value()`` is what was submitted (input
    representation), ``db_value()`` is the normalized storage representation.
    The base class treats both identically.
    """

    input_type = "text"

    def __init__(
        self,
        name: str,
        label: str = "",
        *,
        hint: str = "",
        not_null: bool = False,
        default: Any = None,
    ) -> None:
        self._name = name.strip()
        self.label = label
        self.hint = hint
        self.not_null = not_null
        self.default = default
        self._value: Any = None
        self._errors: set[ErrorKind] = set()
        self._validated = True

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, value={self._value!r})"

    # -- identity -------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, new_name: str) -> None:
        # Renaming after fetch() leaves the fetched value in place.
        self._name = new_name.strip()

    @property
    def field_name(self) -> str:
        return f"{FIELD_NAMESPACE}[{self._name}]"

    # -- fetching -------------------------------------------------------

    def fetch(self, ctx: RequestContext) -> None:
        if ctx.from_request(self._name) is not None:
            self.fetch_request(ctx)
        elif ctx.from_ambient(self._name) is not None:
            self.fetch_global(ctx)
        else:
            self._value = None

    def fetch_request(self, ctx: RequestContext) -> None:
        # Submitted values have not been checked yet.
        self._validated = False
        self.set_value(ctx.from_request(self._name))

    def fetch_global(self, ctx: RequestContext) -> None:
        self.set_db_value(ctx.from_ambient(self._name))
        self._validated = True

    # -- values ---------------------------------------------------------

    def value(self) -> Any:
        return self._value

    def set_value(self, raw: Any) -> None:
        if not _is_row_list(raw):
            self._value = raw
        else:
            self._value = first_row_value(raw, self._name)
        self._validated = False

    def db_value(self) -> Any:
        return self._value

    def set_db_value(self, raw: Any) -> None:
        if not _is_row_list(raw):
            self._value = raw
            return

        picked = first_row_value(raw, self._name)
        self._value = picked if picked is not None else []

    def is_empty(self) -> bool:
        v = self._value
        if v is None:
            return True
        if isinstance(v, str):
            return len(v) == 0
        if isinstance(v, (list, tuple, Mapping, set)):
            return len(v) == 0
        return False

    def display_value(self) -> Any:
        """Value to show in an interactive form (default applied when empty)."""

        if self.is_empty() and self.default is not None:
            return self.default
        return self._value

    # -- validation -----------------------------------------------------

    @property
    def error(self) -> bool:
        return bool(self._errors)

    @property
    def errors(self) -> frozenset[ErrorKind]:
        return frozenset(self._errors)

    @property
    def validated(self) -> bool:
        return self._validated

    def set_error(self, kind: ErrorKind) -> None:
        self._errors.add(kind)

    def clear_errors(self) -> None:
        self._errors.clear()

    def validate(self) -> bool:
        self.clear_errors()
        if self.not_null and self.is_empty():
            self.set_error(ErrorKind.EMPTY_VALUE)
        self._validated = True
        return not self.error

    def error_message(self) -> str | None:
        if not self._errors:
            return None
        # Report the most basic failure first.
        for kind in ErrorKind:
            if kind in self._errors:
                return kind.message
        return None

    # -- rendering ------------------------------------------------------

    def render_input(self) -> Markup:
        shown = self.display_value()
        return Markup('<input type="{}" name="{}" value="{}" />').format(
            self.input_type,
            self.field_name,
            "" if shown is None else str(shown),
        )

    def render_row(self) -> FormRow:
        return FormRow(
            name=self._name,
            label=self.label,
            hint=self.hint,
            input_html=self.render_input(),
            error_message=self.error_message(),
            hidden=False,
        )
