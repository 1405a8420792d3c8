from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

_FIELD_KEY_RE = re.compile(r"^(?P<ns>[^\[\]]+)\[(?P<name>[^\[\]]*)\](?P<multi>\[\])?$")


@dataclass(frozen=True)
class RequestContext:
    """Input sources consulted by ``FormElement.fetch``.

    ``request`` holds the values submitted with the current request and wins over
    ``ambient``, a lower-priority fallback (values that were already stored or
    computed elsewhere). Both are keyed by element name and are only read.
    """

    request: Mapping[str, Any] = field(default_factory=dict)
    ambient: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> RequestContext:
        return cls()

    def from_request(self, name: str) -> Any | None:
        return self.request.get(name)

    def from_ambient(self, name: str) -> Any | None:
        return self.ambient.get(name)


def parse_namespaced_fields(
    items: Iterable[tuple[str, Any]], *, namespace: str = "data"
) -> dict[str, Any]:
    """Collect ``data[name]`` / ``data[name][]`` form pairs into a dict.

    Keys outside ``namespace`` are ignored. A key submitted with the ``[]`` suffix
    always yields a list, even with a single value.
    """

    out: dict[str, Any] = {}
    for key, value in items:
        m = _FIELD_KEY_RE.match(key)
        if m is None or m.group("ns") != namespace:
            continue
        name = m.group("name")
        if not name:
            continue

        if m.group("multi"):
            current = out.get(name)
            if not isinstance(current, list):
                current = []
                out[name] = current
            current.append(value)
        else:
            out[name] = value
    return out
