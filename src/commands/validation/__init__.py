"""
Field-level validation rules and the per-field error collection.
"""

from .rules import (
    ContentTypeRule,
    ExistsRule,
    FieldRule,
    FormatRule,
    IntegerRule,
    LengthRule,
    PresenceRule,
    UniqueRule,
    UriRule,
    evaluate_rules,
)
from .validation_errors import FieldError, ValidationErrors

__all__ = [
    "ContentTypeRule",
    "ExistsRule",
    "FieldError",
    "FieldRule",
    "FormatRule",
    "IntegerRule",
    "LengthRule",
    "PresenceRule",
    "UniqueRule",
    "UriRule",
    "ValidationErrors",
    "evaluate_rules",
]
