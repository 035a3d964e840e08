"""
GUI-specific utilities for the record form.
"""

from .styling import FORM_STYLESHEET, has_error_marker, set_error_marker

__all__ = ["FORM_STYLESHEET", "has_error_marker", "set_error_marker"]
