"""
Live input masks for the record form.

Masks are rendered by QLineEdit's input-mask engine. A MaskInstance binds
one line edit to a compiled MaskSpec and adds what Qt does not do on its
own: choosing between the variants of a progressive mask, and re-rendering
after the value was replaced programmatically.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from PySide6.QtCore import QEvent, QObject
from PySide6.QtGui import QKeyEvent
from PySide6.QtWidgets import QLineEdit

from formcore.patterns import MaskSpec, MaskVariant, accepts, is_placeholder

logger = logging.getLogger(__name__)


class MaskInstance(QObject):
    """Mask bound to a single line edit."""

    def __init__(self, widget: QLineEdit, spec: MaskSpec, blank_char: str = "_") -> None:
        super().__init__(widget)
        self.widget = widget
        self.spec = spec
        self._blank_char = blank_char
        self._variant = spec.variants[0]

        widget.setInputMask(self._variant.qt_mask(blank_char))
        widget.installEventFilter(self)
        widget.textEdited.connect(self._on_text_edited)

    @property
    def variant(self) -> MaskVariant:
        """The variant currently applied to the widget."""
        return self._variant

    def raw_value(self) -> str:
        """Characters typed into placeholder positions, without literals or blanks."""
        display = self.widget.displayText()
        return "".join(
            ch
            for mask_char, ch in zip(self._variant.pattern, display, strict=False)
            if is_placeholder(mask_char) and ch != self._blank_char
        )

    def value(self) -> str:
        """Formatted value, or an empty string when nothing was typed."""
        if not self.raw_value():
            return ""
        return self.widget.text()

    def resynchronize(self, value: str | None = None) -> None:
        """
        Re-derive the masked display from the field's raw value.

        Args:
            value: New raw or formatted value; when omitted the widget's
                current content is re-read.
        """
        source = self.widget.displayText() if value is None else value
        characters = self.spec.extract_input(source, self._blank_char)

        self._apply_variant(self.spec.select_variant(len(characters)))
        self.widget.setText(characters)

    def _apply_variant(self, variant: MaskVariant) -> None:
        if variant == self._variant:
            return
        logger.debug(f"Mask for '{self.widget.objectName()}' switched to {variant.pattern}")
        self._variant = variant
        self.widget.setInputMask(variant.qt_mask(self._blank_char))

    def _on_text_edited(self, _text: str) -> None:
        """Shrink a progressive mask back when the user deletes characters."""
        if not self.spec.is_progressive:
            return
        raw = self.raw_value()
        if self.spec.select_variant(len(raw)) != self._variant:
            self.resynchronize(raw)
            self.widget.setCursorPosition(len(self.widget.displayText()))

    def _grow_with(self, ch: str) -> bool:
        """Switch to the next larger variant when the current one is full."""
        raw = self.raw_value()
        if len(raw) < self._variant.capacity:
            return False

        larger = self.spec.next_variant(self._variant)
        if larger is None or not accepts(larger.placeholders[len(raw)], ch):
            return False

        self.resynchronize(raw + ch)
        self.widget.setCursorPosition(len(self.widget.displayText()))
        self.widget.textEdited.emit(self.widget.text())
        return True

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:
        if (
            watched is self.widget
            and self.spec.is_progressive
            and event.type() == QEvent.Type.KeyPress
            and isinstance(event, QKeyEvent)
            and len(event.text()) == 1
            and self._grow_with(event.text())
        ):
            return True
        return super().eventFilter(watched, event)

    def detach(self) -> None:
        """Remove the mask from its widget."""
        self.widget.removeEventFilter(self)
        self.widget.textEdited.disconnect(self._on_text_edited)
        self.widget.setInputMask("")
        self.deleteLater()


class MaskRegistry:
    """Owns the active mask instances, at most one per field name."""

    def __init__(self, blank_char: str = "_") -> None:
        self._blank_char = blank_char
        self._instances: dict[str, MaskInstance] = {}

    def initialize(self, widgets: Mapping[str, QLineEdit], specs: Mapping[str, MaskSpec]) -> None:
        """
        Create one mask instance per field that has a compiled spec.

        Previously held instances are discarded first.
        """
        for instance in self._instances.values():
            instance.detach()
        self._instances = {}

        for name, spec in specs.items():
            widget = widgets.get(name)
            if widget is None:
                logger.warning(f"No input widget for masked field '{name}'")
                continue
            self._instances[name] = MaskInstance(widget, spec, self._blank_char)

        logger.debug(f"Initialized {len(self._instances)} input masks")

    def __contains__(self, name: str) -> bool:
        return name in self._instances

    def __len__(self) -> int:
        return len(self._instances)

    def get(self, name: str) -> MaskInstance | None:
        return self._instances.get(name)

    def resynchronize(self, name: str, value: str | None = None) -> None:
        """Re-render the mask of ``name``; a field without mask is a no-op."""
        instance = self._instances.get(name)
        if instance is not None:
            instance.resynchronize(value)

    def resynchronize_all(self) -> None:
        for instance in self._instances.values():
            instance.resynchronize()
