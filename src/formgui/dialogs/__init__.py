"""
Dialog windows for the record form application.
"""

from .error_dialogs import ErrorDialogManager

__all__ = ["ErrorDialogManager"]
