from __future__ import annotations

from knockweb_core.forms.element import FormElement, FormRow


class HiddenElement(FormElement):
    input_type = "hidden"

    def render_row(self) -> FormRow:
        return FormRow(
            name=self.name,
            label=self.label,
            hint=self.hint,
            input_html=self.render_input(),
            hidden=True,
        )
