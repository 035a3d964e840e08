"""
Widgets belonging to one declared form field.
"""

from __future__ import annotations

from dataclasses import dataclass

from PySide6.QtWidgets import QLabel, QLineEdit

from formcore.fields import FieldDeclaration
from formgui.masking.mask_registry import MaskRegistry


@dataclass
class FormField:
    """
    A declared field with its input and its two error slots.

    The client slot shows errors found by the form itself; the server slot
    shows errors reported back after a submission.
    """

    declaration: FieldDeclaration
    widget: QLineEdit
    client_error: QLabel
    server_error: QLabel
    masks: MaskRegistry

    @property
    def name(self) -> str:
        return self.declaration.name

    @property
    def required(self) -> bool:
        return self.declaration.required

    def value(self) -> str:
        """Current value; a masked field with nothing typed is empty."""
        mask = self.masks.get(self.name)
        if mask is not None:
            return mask.value()
        return self.widget.text()

    def set_value(self, value: str) -> None:
        """Assign a value programmatically and re-render the mask."""
        self.widget.setText(value)
        self.masks.resynchronize(self.name, value)

    def clear(self) -> None:
        self.widget.clear()
