from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Button:
    name: str
    label: str
    title: str = ""


@dataclass
class ButtonBar:
    """Submit buttons rendered below the form body."""

    buttons: list[Button] = field(default_factory=list)

    def add_button(self, name: str, label: str, title: str = "") -> Button:
        button = Button(name=name, label=label, title=title)
        self.buttons.append(button)
        return button

    def __iter__(self):
        return iter(self.buttons)

    def __len__(self) -> int:
        return len(self.buttons)
