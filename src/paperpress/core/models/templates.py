"""
Module: templates

Purpose:
    Paper template data: which sections a paper has, how many questions
    each section draws, how many the student must attempt and what each
    question is worth. Templates are plain data supplied by the catalog.

Key Classes:
    - TemplateCategory: full_book / half_book / chapter_wise / multi_chapter
    - TemplateSection: One section of a paper
    - Template: A complete paper layout

Sampling Target:
    total_questions is how many questions a section draws from the bank.
    attempt_count is only the "attempt any N" instruction printed on the
    paper and never drives sampling.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from .questions import QuestionType
from .selection import DEFAULT_MARKS, MarksPerType, SectionTargets


class TemplateCategory(str, Enum):
    FULL_BOOK = "full_book"
    HALF_BOOK = "half_book"
    CHAPTER_WISE = "chapter_wise"
    MULTI_CHAPTER = "multi_chapter"


@dataclass(frozen=True)
class TemplateSection:
    """
    One section of a paper template (immutable).

    Attributes:
        type: "mcq", "short", "long" or a non-bank type such as "essay"
        total_questions: Questions printed in the section
        attempt_count: Questions the student must answer
        marks_per_question: Marks per question
        title: Section heading
        instruction: Section instruction text
        id: Section id within the template

    Invariants:
        - 0 <= attempt_count <= total_questions
    """

    type: str
    total_questions: int
    attempt_count: int
    marks_per_question: float
    title: str = ""
    instruction: str = ""
    id: str = ""

    def __post_init__(self) -> None:
        """Validate section on construction."""
        if self.total_questions < 0:
            raise ValueError(f"total_questions must be non-negative: {self.total_questions}")
        if self.attempt_count < 0:
            raise ValueError(f"attempt_count must be non-negative: {self.attempt_count}")
        if self.attempt_count > self.total_questions:
            raise ValueError(
                f"attempt_count ({self.attempt_count}) must be <= "
                f"total_questions ({self.total_questions})"
            )

    @property
    def question_type(self) -> Optional[QuestionType]:
        """Bank question type of this section, None for non-bank types."""
        try:
            return QuestionType(self.type)
        except ValueError:
            return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "instruction": self.instruction,
            "totalQuestions": self.total_questions,
            "attemptCount": self.attempt_count,
            "marksPerQuestion": self.marks_per_question,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TemplateSection:
        section_type = str(data["type"])
        marks = data.get("marksPerQuestion")
        if marks is None:
            # Unset marks fall back to the bank type default, 0 for other types
            try:
                marks = DEFAULT_MARKS.for_type(QuestionType(section_type))
            except ValueError:
                marks = 0
        return cls(
            type=section_type,
            total_questions=int(data["totalQuestions"]),
            attempt_count=int(data.get("attemptCount", data["totalQuestions"])),
            marks_per_question=marks,
            title=data.get("title", ""),
            instruction=data.get("instruction", ""),
            id=data.get("id", ""),
        )


@dataclass(frozen=True)
class Template:
    """
    A paper template (immutable).

    Attributes:
        id: Template id
        name: Display name
        category: Template category
        sections: Sections in print order
        total_marks: Marks printed in the paper header
        time_allowed: Time printed in the paper header, e.g. "2 Hours"
        class_id: Class the template belongs to
        subject: Subject the template belongs to

    Example:
        >>> t = Template(
        ...     id="9th_chemistry_full_book",
        ...     name="Full Book Paper",
        ...     category=TemplateCategory.FULL_BOOK,
        ...     sections=(
        ...         TemplateSection("mcq", 12, 12, 1),
        ...         TemplateSection("short", 8, 5, 2),
        ...         TemplateSection("short", 8, 5, 2),
        ...     ),
        ...     total_marks=32,
        ...     time_allowed="2 Hours",
        ... )
        >>> t.targets.short
        16
    """

    id: str
    name: str
    category: TemplateCategory
    sections: tuple[TemplateSection, ...]
    total_marks: float
    time_allowed: str
    class_id: str = ""
    subject: str = ""

    @property
    def targets(self) -> SectionTargets:
        """Questions to draw per bank type, summed over sections."""
        counts = {question_type.value: 0 for question_type in QuestionType}
        for section in self.sections:
            question_type = section.question_type
            if question_type is not None:
                counts[question_type.value] += section.total_questions
        return SectionTargets(**counts)

    @property
    def marks_per_type(self) -> MarksPerType:
        """
        Marks per question from the first section of each type.

        Types with no section use DEFAULT_MARKS. An explicit 0 on a
        section is kept.
        """
        values = {}
        for question_type in QuestionType:
            section = self.first_section(question_type)
            if section is None:
                values[question_type.value] = DEFAULT_MARKS.for_type(question_type)
            else:
                values[question_type.value] = section.marks_per_question
        return MarksPerType(**values)

    def first_section(self, question_type: QuestionType) -> Optional[TemplateSection]:
        for section in self.sections:
            if section.question_type is question_type:
                return section
        return None

    @property
    def question_count(self) -> int:
        return sum(section.total_questions for section in self.sections)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "classId": self.class_id,
            "subject": self.subject,
            "totalMarks": self.total_marks,
            "timeAllowed": self.time_allowed,
            "sections": [section.to_dict() for section in self.sections],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Template:
        """
        Deserialize from catalog data.

        Raises:
            KeyError: If a required key is missing
            ValueError: If category is unknown or a section is invalid
        """
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            category=TemplateCategory(data["category"]),
            sections=tuple(TemplateSection.from_dict(s) for s in data["sections"]),
            total_marks=data.get("totalMarks", 0),
            time_allowed=data.get("timeAllowed", ""),
            class_id=data.get("classId", ""),
            subject=data.get("subject", ""),
        )
