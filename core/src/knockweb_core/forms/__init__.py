from knockweb_core.forms.context import RequestContext, parse_namespaced_fields
from knockweb_core.forms.dropdown import DropdownElement
from knockweb_core.forms.element import FIELD_NAMESPACE, FormElement, FormRow
from knockweb_core.forms.errors import ErrorKind, FormError, UnknownElementType
from knockweb_core.forms.form import ElementType, Form
from knockweb_core.forms.hidden import HiddenElement
from knockweb_core.forms.integer import IntegerElement
from knockweb_core.forms.password import PasswordElement
from knockweb_core.forms.text import TextElement

__all__ = [
    "FIELD_NAMESPACE",
    "DropdownElement",
    "ElementType",
    "ErrorKind",
    "Form",
    "FormElement",
    "FormError",
    "FormRow",
    "HiddenElement",
    "IntegerElement",
    "PasswordElement",
    "RequestContext",
    "TextElement",
    "UnknownElementType",
    "parse_namespaced_fields",
]
