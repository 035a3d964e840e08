"""
Format validators for the supported field kinds.

Every validator is a pure predicate ``(raw_value, required) -> bool``. An
empty value on an optional field is always valid: emptiness is reported by
the separate required check, never by a format validator.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence

from .fields import FieldKind

Validator = Callable[[str, bool], bool]

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

# Weights for the 14-digit entity identifier check digits
ENTITY_FIRST_WEIGHTS = (5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2)
ENTITY_SECOND_WEIGHTS = (6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2)

REQUIRED_MESSAGE = "This field is required"


def digits_only(value: str) -> str:
    """Return only the decimal digits of a string."""
    return "".join(ch for ch in value if "0" <= ch <= "9")


def _all_same(digits: str) -> bool:
    return len(set(digits)) == 1


def is_valid_email(value: str, required: bool) -> bool:
    """Check an e-mail address against the local@domain.tld shape."""
    if not value.strip() and not required:
        return True
    return EMAIL_PATTERN.match(value) is not None


def _person_check_digit(digits: str, first_weight: int) -> int:
    total = sum(int(d) * weight for d, weight in zip(digits, range(first_weight, 1, -1), strict=True))
    rest = (total * 10) % 11
    return 0 if rest in (10, 11) else rest


def is_valid_national_id_person(value: str, required: bool) -> bool:
    """
    Validate an 11-digit personal identifier (CPF).

    Both trailing check digits are recomputed from the preceding digits;
    sequences of one repeated digit are rejected before the checksum runs.
    """
    if not value.strip() and not required:
        return True
    digits = digits_only(value)
    if len(digits) != 11 or _all_same(digits):
        return False

    if _person_check_digit(digits[:9], 10) != int(digits[9]):
        return False
    return _person_check_digit(digits[:10], 11) == int(digits[10])


def _entity_check_digit(digits: str, weights: Sequence[int]) -> int:
    total = sum(int(d) * weight for d, weight in zip(digits, weights, strict=True))
    digit = 11 - (total % 11)
    return 0 if digit in (10, 11) else digit


def is_valid_national_id_entity(value: str, required: bool) -> bool:
    """
    Validate a 14-digit entity identifier (CNPJ).

    The first check digit weighs digits 1-12, the second weighs digits 1-13
    (including the first check digit).
    """
    if not value.strip() and not required:
        return True
    digits = digits_only(value)
    if len(digits) != 14 or _all_same(digits):
        return False

    first = _entity_check_digit(digits[:12], ENTITY_FIRST_WEIGHTS)
    second = _entity_check_digit(digits[:12] + str(first), ENTITY_SECOND_WEIGHTS)
    return int(digits[12]) == first and int(digits[13]) == second


def is_valid_phone(value: str, required: bool) -> bool:
    """Area code plus an 8 or 9 digit local number."""
    if not value.strip() and not required:
        return True
    digits = digits_only(value)
    return len(digits) in (10, 11)


def is_valid_postal_code(value: str, required: bool) -> bool:
    """Postal codes (CEP) have exactly 8 digits."""
    if not value.strip() and not required:
        return True
    digits = digits_only(value)
    return len(digits) == 8


def _always_valid(value: str, required: bool) -> bool:
    return True


VALIDATORS: dict[FieldKind, Validator] = {
    FieldKind.NONE: _always_valid,
    FieldKind.EMAIL: is_valid_email,
    FieldKind.NATIONAL_ID_PERSON: is_valid_national_id_person,
    FieldKind.NATIONAL_ID_ENTITY: is_valid_national_id_entity,
    FieldKind.PHONE: is_valid_phone,
    FieldKind.POSTAL_CODE: is_valid_postal_code,
}

FORMAT_MESSAGES: dict[FieldKind, str] = {
    FieldKind.NONE: "Invalid value",
    FieldKind.EMAIL: "Invalid email",
    FieldKind.NATIONAL_ID_PERSON: "Invalid CPF",
    FieldKind.NATIONAL_ID_ENTITY: "Invalid CNPJ",
    FieldKind.PHONE: "Invalid phone number",
    FieldKind.POSTAL_CODE: "Invalid postal code",
}


def validate_value(kind: FieldKind, value: str, required: bool) -> bool:
    """Dispatch to the validator registered for the given kind."""
    return VALIDATORS[kind](value, required)
