"""
PaperPress Core Package

Shared data models and schema validation used by every part of the
composer, plus the JSON file helpers in core.utils.
"""

from .models import (
    Chapter,
    Difficulty,
    MarksPerType,
    Question,
    QuestionType,
    SectionTargets,
    Selection,
    Template,
    TemplateCategory,
    TemplateSection,
)

__all__ = [
    "Chapter",
    "Difficulty",
    "MarksPerType",
    "Question",
    "QuestionType",
    "SectionTargets",
    "Selection",
    "Template",
    "TemplateCategory",
    "TemplateSection",
]
