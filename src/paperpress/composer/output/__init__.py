"""
Module: composer.output

Purpose:
    Everything that turns a Selection into documents: custom question
    merge, totals and the export payload / paper record.

Key Functions:
    - resolve_question(): Bank record + user edit, or custom question
    - compute_totals(): Question count and total marks
    - build_export_payload(): Export service request body
    - build_paper_record(): Persisted paper record
"""

from .merge import (
    CUSTOM_ID_PREFIX,
    DEFAULT_MCQ_OPTIONS,
    apply_override,
    is_custom_id,
    merge_edit,
    new_custom_id,
    resolve_question,
    resolve_questions,
    synthesize_question,
)
from .totals import (
    MarksBreakdown,
    MarksValidation,
    PaperTotals,
    TypeBreakdown,
    compute_marks_breakdown,
    compute_totals,
    validate_marks,
)
from .payload import (
    build_export_payload,
    build_paper_record,
    empty_question_order,
    reconcile_order,
    selection_from_record,
)

__all__ = [
    # Merge
    "CUSTOM_ID_PREFIX",
    "DEFAULT_MCQ_OPTIONS",
    "apply_override",
    "is_custom_id",
    "merge_edit",
    "new_custom_id",
    "resolve_question",
    "resolve_questions",
    "synthesize_question",
    # Totals
    "MarksBreakdown",
    "MarksValidation",
    "PaperTotals",
    "TypeBreakdown",
    "compute_marks_breakdown",
    "compute_totals",
    "validate_marks",
    # Payload
    "build_export_payload",
    "build_paper_record",
    "empty_question_order",
    "reconcile_order",
    "selection_from_record",
]
