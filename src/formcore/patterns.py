"""
Declarative mask patterns and their compilation to Qt input masks.

Patterns use three placeholder characters:

    9   exactly one decimal digit
    #   exactly one letter
    *   any character

Every other character is a literal kept as-is in the displayed value, e.g.
``999.999.999-99`` or ``(99) 99999-9999``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from .fields import FieldDeclaration

logger = logging.getLogger(__name__)

DIGIT_PLACEHOLDER = "9"
LETTER_PLACEHOLDER = "#"
ANY_PLACEHOLDER = "*"
PLACEHOLDERS = (DIGIT_PLACEHOLDER, LETTER_PLACEHOLDER, ANY_PLACEHOLDER)

# Qt input mask equivalents of the declarative placeholders (all required)
_QT_PLACEHOLDERS = {
    DIGIT_PLACEHOLDER: "9",
    LETTER_PLACEHOLDER: "A",
    ANY_PLACEHOLDER: "X",
}

# Characters with a meaning in Qt input masks that must be escaped as literals
_QT_META = set("AaNnXx90Dd#HhBb><!{}[]\\;")

# Variable-length local numbers: an area code followed by 8 or 9 digits
PROGRESSIVE_PREFIX = "(99) 9"
PROGRESSIVE_VARIANTS = ("(99) 9999-9999", "(99) 99999-9999")

# Characters stripped from masked values before they are submitted
CLEAN_CHARACTERS = (".", "-", "(", ")", "/", " ", "_")


def is_placeholder(ch: str) -> bool:
    return ch in PLACEHOLDERS


def accepts(placeholder: str, ch: str) -> bool:
    """Return True if ``ch`` may fill a position declared with ``placeholder``."""
    if placeholder == DIGIT_PLACEHOLDER:
        return "0" <= ch <= "9"
    if placeholder == LETTER_PLACEHOLDER:
        return ch.isascii() and ch.isalpha()
    if placeholder == ANY_PLACEHOLDER:
        return ch.isprintable() and not ch.isspace()
    return False


@dataclass(frozen=True)
class MaskVariant:
    """One fixed-length alternative of a compiled mask."""

    pattern: str

    @property
    def capacity(self) -> int:
        """Number of characters the user can type into this variant."""
        return sum(1 for ch in self.pattern if is_placeholder(ch))

    @property
    def placeholders(self) -> tuple[str, ...]:
        """Placeholder characters in display order."""
        return tuple(ch for ch in self.pattern if is_placeholder(ch))

    def qt_mask(self, blank_char: str = "_") -> str:
        """Return the QLineEdit input mask string for this variant."""
        parts = []
        for ch in self.pattern:
            if is_placeholder(ch):
                parts.append(_QT_PLACEHOLDERS[ch])
            elif ch in _QT_META:
                parts.append("\\" + ch)
            else:
                parts.append(ch)
        return "".join(parts) + ";" + blank_char


@dataclass(frozen=True)
class MaskSpec:
    """
    Compiled mask for one field: one or more variants ordered by capacity.

    Single-variant specs are plain fixed masks; multi-variant specs are
    progressive and the active variant follows the typed character count.
    """

    pattern: str
    variants: tuple[MaskVariant, ...]

    @property
    def is_progressive(self) -> bool:
        return len(self.variants) > 1

    @property
    def literals(self) -> frozenset[str]:
        """All literal characters appearing in any variant."""
        return frozenset(ch for v in self.variants for ch in v.pattern if not is_placeholder(ch))

    def select_variant(self, count: int) -> MaskVariant:
        """Return the smallest variant able to hold ``count`` characters (else the largest)."""
        for variant in self.variants:
            if count <= variant.capacity:
                return variant
        return self.variants[-1]

    def next_variant(self, variant: MaskVariant) -> MaskVariant | None:
        """Return the next larger variant, or None when ``variant`` is the largest."""
        index = self.variants.index(variant)
        if index + 1 < len(self.variants):
            return self.variants[index + 1]
        return None

    def extract_input(self, value: str, blank_char: str = "_") -> str:
        """
        Strip literal and blank characters from a value.

        Works for both raw values ("11987654321") and values already
        formatted with any variant ("(11) 98765-4321").
        """
        literals = self.literals
        return "".join(ch for ch in value if ch not in literals and ch != blank_char)


def compile_pattern(pattern: str) -> MaskSpec:
    """
    Compile a declarative pattern into a mask specification.

    Phone-like patterns (an area code in parentheses followed by a digit)
    become progressive masks with an 8-digit and a 9-digit local number.

    Raises:
        ValueError: If the pattern is empty or has no placeholder
    """
    if not pattern:
        raise ValueError("Mask pattern must not be empty")
    if not any(is_placeholder(ch) for ch in pattern):
        raise ValueError(f"Mask pattern {pattern!r} has no placeholder characters")

    if PROGRESSIVE_PREFIX in pattern:
        variants = tuple(MaskVariant(p) for p in PROGRESSIVE_VARIANTS)
    else:
        variants = (MaskVariant(pattern),)

    return MaskSpec(pattern=pattern, variants=tuple(sorted(variants, key=lambda v: v.capacity)))


def compile_masks(fields: Iterable[FieldDeclaration]) -> dict[str, MaskSpec]:
    """
    Compile the mask patterns of all declared fields.

    Returns:
        Mapping from field name to compiled spec; fields without a pattern
        are absent from the mapping.
    """
    compiled: dict[str, MaskSpec] = {}
    for declaration in fields:
        if not declaration.mask_pattern:
            continue
        compiled[declaration.name] = compile_pattern(declaration.mask_pattern)
        logger.debug(f"Compiled mask for '{declaration.name}': {declaration.mask_pattern}")
    return compiled


def format_value_by_mask(pattern: str, value: str) -> str:
    """
    Format a raw value with a declarative pattern.

    Placeholders consume one input character when it fits their class and
    formatting stops at the first character that does not. Literals are
    emitted as-is and consume the input character only when it is equal.
    """
    if not pattern:
        return value

    result: list[str] = []
    mask_index = 0
    input_index = 0
    while mask_index < len(pattern) and input_index < len(value):
        mask_char = pattern[mask_index]
        input_char = value[input_index]

        if is_placeholder(mask_char):
            if not accepts(mask_char, input_char):
                break
            result.append(input_char)
            input_index += 1
        else:
            result.append(mask_char)
            if input_char == mask_char:
                input_index += 1

        mask_index += 1

    return "".join(result)


def clean_value_by_mask(pattern: str, value: str) -> str:
    """Remove formatting characters from the value of a masked field."""
    if not pattern:
        return value

    for ch in CLEAN_CHARACTERS:
        value = value.replace(ch, "")
    return value
