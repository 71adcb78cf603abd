"""
Schemas Package

JSON Schema definitions and validation utilities.
"""

from .validator import (
    validate_subject,
    validate_template,
    validate_export_payload,
    ValidationError,
)

__all__ = [
    "validate_subject",
    "validate_template",
    "validate_export_payload",
    "ValidationError",
]
