"""
Schema Validation Utilities

Validates JSON data against the bundled JSON Schema files:

- subject.schema.json: one class+subject question bank file
- template.schema.json: one paper template from the catalog
- export_payload.schema.json: the request body sent to the export service

Subject validation only checks the file skeleton (chapters and their
question lists). Individual question records are checked when they are
parsed so one bad record can be skipped without rejecting the file.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema


SUBJECT_SCHEMA = "subject"
TEMPLATE_SCHEMA = "template"
EXPORT_PAYLOAD_SCHEMA = "export_payload"

# Load schemas lazily
_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ValidationError(Exception):
    """Raised when data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def _validate(data: Any, schema_name: str) -> None:
    """
    Validate data against a named schema, collecting every violation.

    Raises:
        ValidationError: With the first violation as message and all
            violations in .errors
    """
    schema = _load_schema(schema_name)
    validator = jsonschema.Draft7Validator(schema)
    violations = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path])
    if not violations:
        return

    first = violations[0]
    path = ".".join(str(p) for p in first.absolute_path)
    raise ValidationError(
        f"{schema_name} schema validation failed at '{path or '<root>'}': {first.message}",
        path=path,
        errors=[
            f"{'.'.join(str(p) for p in v.absolute_path) or '<root>'}: {v.message}"
            for v in violations
        ],
    )


def validate_subject(data: Any) -> None:
    """
    Validate a subject bank file.

    Args:
        data: Parsed JSON content of <class>/<subject>.json

    Raises:
        ValidationError: If the chapter skeleton is invalid
    """
    _validate(data, SUBJECT_SCHEMA)


def validate_template(data: Any) -> None:
    """
    Validate a template record from the catalog.

    The schema cannot express attemptCount <= totalQuestions across two
    fields, so that rule is checked here.

    Raises:
        ValidationError: If the template is invalid
    """
    _validate(data, TEMPLATE_SCHEMA)
    for index, section in enumerate(data["sections"]):
        attempt = section.get("attemptCount")
        total = section["totalQuestions"]
        if attempt is not None and attempt > total:
            raise ValidationError(
                f"Section {index}: attemptCount ({attempt}) exceeds totalQuestions ({total})",
                path=f"sections.{index}.attemptCount",
            )


def validate_export_payload(data: Any) -> None:
    """
    Validate an export service request body.

    Raises:
        ValidationError: If the payload is invalid
    """
    _validate(data, EXPORT_PAYLOAD_SCHEMA)
