"""
Shared styling utilities for the record form.

Field error state is expressed through the ``hasError`` dynamic property so
the stylesheet, not the code, decides how an invalid field looks.
"""

from typing import Any, Protocol

ERROR_PROPERTY = "hasError"


class AccessiblePalette:
    """Colors used by the form (WCAG AA contrast on white)."""

    BORDER_DEFAULT = "#dee2e6"
    BORDER_FOCUS = "#0d6efd"
    BORDER_ERROR = "#dc3545"

    TEXT_PRIMARY = "#212529"
    TEXT_ERROR = "#b02a37"
    TEXT_SERVER_ERROR = "#842029"

    BUTTON_PRIMARY_BG = "#0d6efd"
    BUTTON_PRIMARY_TEXT = "#ffffff"


class StyleableWidget(Protocol):
    """Protocol for widgets that can carry the error marker."""

    def setProperty(self, name: str, value: Any) -> bool: ...
    def property(self, name: str) -> Any: ...
    def style(self) -> Any: ...


FORM_STYLESHEET = f"""
QLineEdit {{
    border: 1px solid {AccessiblePalette.BORDER_DEFAULT};
    border-radius: 4px;
    padding: 4px 6px;
}}
QLineEdit:focus {{
    border: 1px solid {AccessiblePalette.BORDER_FOCUS};
}}
QLineEdit[{ERROR_PROPERTY}="true"] {{
    border: 2px solid {AccessiblePalette.BORDER_ERROR};
}}
QLabel[errorSlot="client"] {{
    color: {AccessiblePalette.TEXT_ERROR};
    font-size: 11px;
}}
QLabel[errorSlot="server"] {{
    color: {AccessiblePalette.TEXT_SERVER_ERROR};
    font-size: 11px;
}}
QLabel#formTitle {{
    color: {AccessiblePalette.TEXT_PRIMARY};
    font-size: 16px;
    font-weight: bold;
}}
QPushButton#submitButton {{
    background-color: {AccessiblePalette.BUTTON_PRIMARY_BG};
    color: {AccessiblePalette.BUTTON_PRIMARY_TEXT};
    padding: 6px 14px;
}}
"""


def set_error_marker(widget: StyleableWidget, has_error: bool) -> None:
    """Apply or remove the error marker and refresh the widget style."""
    widget.setProperty(ERROR_PROPERTY, has_error)
    style = widget.style()
    style.unpolish(widget)
    style.polish(widget)


def has_error_marker(widget: StyleableWidget) -> bool:
    return bool(widget.property(ERROR_PROPERTY))
