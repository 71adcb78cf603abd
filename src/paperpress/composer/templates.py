"""
Module: composer.templates

Purpose:
    Template catalog helpers: load templates from JSON, derive the four
    predefined templates from a board pattern, split a chapter list into
    halves and format "attempt any N" instructions.

Key Functions:
    - load_template_catalog(): Read and validate a catalog file
    - derive_predefined_templates(): full / half / chapter-wise / multi-chapter
    - split_half_chapters(): First or second half of a chapter list
    - attempt_instruction(): Print-only section instruction text

Dependencies:
    - paperpress.core.models: Template, TemplateSection
    - paperpress.core.schemas: Template validation

Used By:
    - composer.controller: Template-driven builds
    - scripts/compose_paper.py
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, TypeVar, Union

from paperpress.core.models import Template, TemplateCategory, TemplateSection
from paperpress.core.models.selection import Number
from paperpress.core.schemas import ValidationError, validate_template
from paperpress.core.utils import load_json


logger = logging.getLogger(__name__)

T = TypeVar("T")

FIRST_HALF = "first"
SECOND_HALF = "second"

_CATEGORY_NAMES = {
    TemplateCategory.FULL_BOOK: "Full Book Paper",
    TemplateCategory.HALF_BOOK: "Half Book Paper",
    TemplateCategory.CHAPTER_WISE: "Chapter Wise Test",
    TemplateCategory.MULTI_CHAPTER: "Multi Chapters Test",
}


# ─────────────────────────────────────────────────────────────────────────────
# Catalog
# ─────────────────────────────────────────────────────────────────────────────

def parse_templates(data: Any, *, validate: bool = True) -> List[Template]:
    """
    Parse a list of template records, skipping invalid ones.

    Args:
        data: A list of records, or {"templates": [...]}
        validate: Check each record against the template schema

    Returns:
        Templates in catalog order
    """
    records = data.get("templates", []) if isinstance(data, Mapping) else data
    if not isinstance(records, list):
        logger.warning("Template catalog is not a list, ignoring it")
        return []

    templates = []
    for index, record in enumerate(records):
        try:
            if validate:
                validate_template(record)
            templates.append(Template.from_dict(record))
        except (ValidationError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping template {index}: {e}")
    return templates


def load_template_catalog(path: Path, *, validate: bool = True) -> List[Template]:
    """
    Load templates from a JSON catalog file.

    Raises:
        OSError: If the file cannot be read
        json.JSONDecodeError: If the file is not valid JSON
    """
    templates = parse_templates(load_json(path), validate=validate)
    logger.info(f"Loaded {len(templates)} templates from {path}")
    return templates


def find_template(templates: Sequence[Template], template_id: str) -> Optional[Template]:
    for template in templates:
        if template.id == template_id:
            return template
    return None


# ─────────────────────────────────────────────────────────────────────────────
# Predefined Templates
# ─────────────────────────────────────────────────────────────────────────────

def _scale_sections(sections: Sequence[TemplateSection], divisor: int) -> tuple[TemplateSection, ...]:
    return tuple(
        replace(
            section,
            total_questions=math.ceil(section.total_questions / divisor),
            attempt_count=math.ceil(section.attempt_count / divisor),
        )
        for section in sections
    )


def _numbered(sections: Sequence[TemplateSection]) -> tuple[TemplateSection, ...]:
    return tuple(
        section if section.id else replace(section, id=f"section_{index}")
        for index, section in enumerate(sections)
    )


def derive_predefined_templates(
    pattern: Union[Template, Mapping[str, Any]],
    class_id: str,
    subject: str,
) -> List[Template]:
    """
    Build the four catalog templates from a full-book board pattern.

    - Full book: the pattern as is
    - Half book: half of every section (rounded up), half the marks
      (rounded down)
    - Chapter wise: a quarter of every section (rounded up), a quarter
      of the marks (rounded down), 30 minutes
    - Multi chapter: full sections, half the marks, 1 hour

    Args:
        pattern: Full-book Template or its catalog dict
        class_id: Class the templates belong to
        subject: Subject the templates belong to

    Returns:
        Templates in the order listed above
    """
    if not isinstance(pattern, Template):
        pattern = Template.from_dict(pattern)

    key = f"{class_id}_{subject.lower()}"
    sections = _numbered(pattern.sections)
    total = pattern.total_marks

    variants = [
        (TemplateCategory.FULL_BOOK, sections, total, pattern.time_allowed),
        (TemplateCategory.HALF_BOOK, _scale_sections(sections, 2), math.floor(total / 2), pattern.time_allowed),
        (TemplateCategory.CHAPTER_WISE, _scale_sections(sections, 4), math.floor(total / 4), "30 Minutes"),
        (TemplateCategory.MULTI_CHAPTER, sections, math.floor(total / 2), "1 Hour"),
    ]
    return [
        Template(
            id=f"{key}_{category.value}",
            name=_CATEGORY_NAMES[category],
            category=category,
            sections=variant_sections,
            total_marks=marks,
            time_allowed=time_allowed,
            class_id=class_id,
            subject=subject,
        )
        for category, variant_sections, marks, time_allowed in variants
    ]


# ─────────────────────────────────────────────────────────────────────────────
# Chapters and Instructions
# ─────────────────────────────────────────────────────────────────────────────

def split_half_chapters(chapters: Sequence[T], half: str) -> List[T]:
    """
    Return the first or second half of a chapter list.

    The first half gets the extra chapter when the count is odd.

    Example:
        >>> split_half_chapters([1, 2, 3, 4, 5], "first")
        [1, 2, 3]

    Raises:
        ValueError: If half is not "first" or "second"
    """
    split = math.ceil(len(chapters) / 2)
    if half == FIRST_HALF:
        return list(chapters[:split])
    if half == SECOND_HALF:
        return list(chapters[split:])
    raise ValueError(f"half must be {FIRST_HALF!r} or {SECOND_HALF!r}: {half!r}")


def attempt_instruction(attempt_count: int, total_questions: int, marks_per_question: Number) -> str:
    """
    Section instruction printed above a question group.

    Example:
        >>> attempt_instruction(5, 8, 2)
        'Attempt any 5 questions. (5 x 2 = 10 Marks)'
    """
    if attempt_count >= total_questions:
        count = total_questions
        lead = "Attempt all questions."
    else:
        count = attempt_count
        lead = f"Attempt any {attempt_count} questions."
    return f"{lead} ({count} x {marks_per_question} = {count * marks_per_question} Marks)"
