"""
Field validation for the record form.

Validates fields on blur, clears errors on input and folds validation over
the whole form before submission.
"""

from .field_validation import FieldValidationController, ValidationOutcome, ValidationState

__all__ = ["FieldValidationController", "ValidationOutcome", "ValidationState"]
