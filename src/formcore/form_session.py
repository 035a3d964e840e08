"""
Create/edit session state for the record form.

The session holds the form-wide mode and the texts captured from the form
in its initial Create state, so cancelling an edit restores them exactly.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, auto

from .config import FormConfig


class FormMode(Enum):
    """Purpose of the form: creating a new record or editing an existing one."""

    CREATE = auto()
    EDIT = auto()


EDIT_TITLE_TEMPLATE = "Editing record #{record_id}"
EDIT_SUBMIT_TEXT = "Update"


@dataclass(frozen=True)
class FormSession:
    """
    Form-wide state.

    In Create mode ``record_id`` is empty and ``submit_target`` equals the
    original action; in Edit mode both encode the active record identifier.
    """

    mode: FormMode
    record_id: str
    submit_target: str
    title_text: str
    submit_text: str
    original_target: str
    original_title: str
    original_submit_text: str

    @classmethod
    def initial(cls, config: FormConfig, title_text: str, submit_text: str) -> FormSession:
        """Create the initial session, capturing the Create-mode texts."""
        return cls(
            mode=FormMode.CREATE,
            record_id="",
            submit_target=config.create_action,
            title_text=title_text,
            submit_text=submit_text,
            original_target=config.create_action,
            original_title=title_text,
            original_submit_text=submit_text,
        )

    @property
    def is_editing(self) -> bool:
        return self.mode is FormMode.EDIT


def enter_edit(session: FormSession, record_id: str, config: FormConfig) -> FormSession:
    """Return the session switched to editing ``record_id``."""
    return replace(
        session,
        mode=FormMode.EDIT,
        record_id=record_id,
        submit_target=config.update_action(record_id),
        title_text=EDIT_TITLE_TEMPLATE.format(record_id=record_id),
        submit_text=EDIT_SUBMIT_TEXT,
    )


def reset(session: FormSession) -> FormSession:
    """Return the session back in Create mode with the captured texts."""
    return replace(
        session,
        mode=FormMode.CREATE,
        record_id="",
        submit_target=session.original_target,
        title_text=session.original_title,
        submit_text=session.original_submit_text,
    )
