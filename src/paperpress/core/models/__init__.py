"""
Core Models Package

Immutable, validated data models shared by the bank, the composition
engine and the export layer. All models are frozen dataclasses, so a
Selection or Question handed to a caller can never be changed behind
its back; edits always produce a new instance.
"""

from .chapters import Chapter
from .questions import CHAPTER_ID_SEGMENTS, Difficulty, Question, QuestionType, derive_chapter_id
from .selection import (
    DEFAULT_MARKS,
    MarksPerType,
    SectionTargets,
    Selection,
    coerce_marks,
)
from .templates import Template, TemplateCategory, TemplateSection

__all__ = [
    "Chapter",
    "CHAPTER_ID_SEGMENTS",
    "Difficulty",
    "Question",
    "QuestionType",
    "derive_chapter_id",
    "DEFAULT_MARKS",
    "MarksPerType",
    "SectionTargets",
    "Selection",
    "coerce_marks",
    "Template",
    "TemplateCategory",
    "TemplateSection",
]
