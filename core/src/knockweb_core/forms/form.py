from __future__ import annotations

import logging
from collections.abc import Iterator
from enum import Enum
from typing import Any

from knockweb_core.forms.context import RequestContext
from knockweb_core.forms.dropdown import DropdownElement
from knockweb_core.forms.element import FormElement, FormRow
from knockweb_core.forms.errors import UnknownElementType
from knockweb_core.forms.hidden import HiddenElement
from knockweb_core.forms.integer import IntegerElement
from knockweb_core.forms.password import PasswordElement
from knockweb_core.forms.text import TextElement

logger = logging.getLogger(__name__)


class ElementType(Enum):
    TEXT = "Text"
    INTEGER = "Integer"
    PASSWORD = "Password"
    HIDDEN = "Hidden"
    DROPDOWN = "Dropdown"


_ELEMENT_CLASSES: dict[ElementType, type[FormElement]] = {
    ElementType.TEXT: TextElement,
    ElementType.INTEGER: IntegerElement,
    ElementType.PASSWORD: PasswordElement,
    ElementType.HIDDEN: HiddenElement,
    ElementType.DROPDOWN: DropdownElement,
}


def resolve_element_type(type_tag: ElementType | str) -> ElementType:
    if isinstance(type_tag, ElementType):
        return type_tag
    if isinstance(type_tag, str):
        wanted = type_tag.strip().casefold()
        for et in ElementType:
            if et.value.casefold() == wanted or et.name.casefold() == wanted:
                return et
    raise UnknownElementType(type_tag)


class Form:
    """Ordered collection of named form elements.

    One instance serves one request: build it, ``fetch()`` the submitted data,
    ``validate()`` it, then read ``db_values()`` or render it back with errors.
    """

    def __init__(self, name: str, *, action: str = "", method: str = "post") -> None:
        self._name = name
        self._elements: dict[str, FormElement] = {}
        self._attributes: dict[str, str] = {}
        self._invalid: list[str] = []

        self.set_attribute("name", name)
        self.set_attribute("action", action)
        self.set_attribute("method", method)

    @property
    def name(self) -> str:
        return self._name

    # -- attributes -----------------------------------------------------

    def attribute(self, key: str) -> str | None:
        return self._attributes.get(key.lower())

    def attributes(self) -> dict[str, str]:
        return dict(self._attributes)

    def set_attribute(self, key: str, value: str) -> None:
        self._attributes[key.lower()] = value

    # -- elements -------------------------------------------------------

    def add_element(
        self, type_tag: ElementType | str, name: str, *args: Any, **kwargs: Any
    ) -> FormElement:
        element_type = resolve_element_type(type_tag)
        element = _ELEMENT_CLASSES[element_type](name, *args, **kwargs)
        self._elements[element.name] = element
        return element

    def element(self, name: str) -> FormElement | None:
        return self._elements.get(name)

    def elements(self) -> list[FormElement]:
        return list(self._elements.values())

    def __contains__(self, name: object) -> bool:
        return name in self._elements

    def __iter__(self) -> Iterator[FormElement]:
        return iter(list(self._elements.values()))

    def __len__(self) -> int:
        return len(self._elements)

    # -- lifecycle ------------------------------------------------------

    def fetch(self, ctx: RequestContext) -> None:
        for element in self._elements.values():
            element.fetch(ctx)

    def fetch_global(self, ctx: RequestContext) -> None:
        for element in self._elements.values():
            element.fetch_global(ctx)

    def validate(self) -> bool:
        """Validate every element (no short-circuit) and remember the failures."""

        self._invalid = []
        for element in self._elements.values():
            if not element.validate():
                self._invalid.append(element.name)

        if self._invalid:
            logger.info(f"Form {self._name!r} invalid fields: {', '.join(self._invalid)}")
        return not self._invalid

    def invalid_names(self) -> list[str]:
        return list(self._invalid)

    def db_values(self) -> dict[str, Any]:
        return {name: element.db_value() for name, element in self._elements.items()}

    def render_body(self) -> list[FormRow]:
        """Rows for the page: every hidden field first, then the visible ones."""

        rows = [e.render_row() for e in self._elements.values()]
        return [r for r in rows if r.hidden] + [r for r in rows if not r.hidden]
