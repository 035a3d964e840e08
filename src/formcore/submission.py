"""
Submission payload produced once the whole form validates.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from .fields import FormSchema
from .form_session import FormSession
from .patterns import clean_value_by_mask

DEFAULT_ID_FIELD = "id"


@dataclass(frozen=True)
class Submission:
    """Destination and values of a validated form."""

    target: str
    values: dict[str, str] = field(default_factory=dict)


def id_field_name(schema: FormSchema) -> str:
    """Name under which the hidden record identifier is submitted."""
    primary_key = schema.primary_key
    return primary_key.name if primary_key else DEFAULT_ID_FIELD


def build_submission(schema: FormSchema, session: FormSession, values: Mapping[str, str]) -> Submission:
    """
    Build the submission for the current session.

    Masked values are stripped of their formatting characters and the
    hidden identifier is always included (empty in Create mode).
    """
    payload: dict[str, str] = {id_field_name(schema): session.record_id}
    for declaration in schema.visible_fields:
        value = values.get(declaration.name, "")
        payload[declaration.name] = clean_value_by_mask(declaration.mask_pattern, value)
    return Submission(target=session.submit_target, values=payload)
