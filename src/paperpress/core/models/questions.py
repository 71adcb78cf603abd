"""
Module: questions

Purpose:
    Provides the Question dataclass - the record passed from the question
    bank through selection to export. One class covers the three question
    types; MCQ-only fields are empty for short and long questions.

Key Functions:
    - Question.from_dict() / Question.to_dict(): camelCase bank/export format
    - Question.with_overrides(): Shallow field-by-field merge of an edit
    - derive_chapter_id(): Degraded chapter lookup for untagged records

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - composer.bank: Tags questions with their chapter at ingestion
    - composer.selection: Difficulty filter and sampler
    - composer.output: Custom question merge and export payload

Chapter Membership:
    Bank questions carry an explicit chapter_id set when the bank file is
    parsed. derive_chapter_id() only exists for external data that lacks
    it (persisted papers, hand-written records).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

from .chapters import Chapter


class QuestionType(str, Enum):
    """The three bank question types."""

    MCQ = "mcq"
    SHORT = "short"
    LONG = "long"

    @property
    def plural(self) -> str:
        """Key used for this type in export payloads ("mcqs", "shorts", "longs")."""
        return f"{self.value}s"


class Difficulty(str, Enum):
    """Difficulty class of a single question."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


# Number of leading id segments that name the owning chapter,
# e.g. "9_chem_ch1_mcq_3" -> "9_chem_ch1"
CHAPTER_ID_SEGMENTS = 3


@dataclass(frozen=True)
class Question:
    """
    A single bank or custom question (immutable).

    Attributes:
        id: Unique id within a class+subject, e.g. "9_chem_ch1_mcq_3"
        question_type: MCQ, SHORT or LONG
        question_text: Text shown on the paper
        difficulty: EASY, MEDIUM or HARD
        chapter_id: Owning chapter id, tagged at ingestion
        chapter_number: Owning chapter number
        chapter_name: Owning chapter name
        marks: Marks stored on the raw record (advisory, settings win)
        options: MCQ answer options (empty for short/long)
        correct_option: Index into options (None for short/long)
        topic: Optional topic label ("Exercise", "Additional", ...)

    Invariants:
        - MCQs have at least two options
        - correct_option indexes into options when set

    Example:
        >>> q = Question(
        ...     id="9_chem_ch1_short_1",
        ...     question_type=QuestionType.SHORT,
        ...     question_text="Define mole.",
        ...     difficulty=Difficulty.EASY,
        ... )
        >>> q.is_mcq
        False
    """

    id: str
    question_type: QuestionType
    question_text: str
    difficulty: Difficulty
    chapter_id: Optional[str] = None
    chapter_number: Optional[int] = None
    chapter_name: Optional[str] = None
    marks: Optional[float] = None
    options: tuple[str, ...] = ()
    correct_option: Optional[int] = None
    topic: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate question on construction."""
        if not self.id:
            raise ValueError("question id must be non-empty")
        # Plain strings are accepted and stored as enum members
        if not isinstance(self.question_type, QuestionType):
            object.__setattr__(
                self, "question_type", QuestionType(str(self.question_type).lower())
            )
        if not isinstance(self.difficulty, Difficulty):
            object.__setattr__(self, "difficulty", Difficulty(str(self.difficulty).lower()))
        if self.question_type is QuestionType.MCQ:
            if len(self.options) < 2:
                raise ValueError(
                    f"MCQ {self.id!r} needs at least 2 options, got {len(self.options)}"
                )
            if self.correct_option is not None and not (
                0 <= self.correct_option < len(self.options)
            ):
                raise ValueError(
                    f"correct_option {self.correct_option} out of range for {self.id!r}"
                )

    @property
    def is_mcq(self) -> bool:
        return self.question_type is QuestionType.MCQ

    # ─────────────────────────────────────────────────────────────────────────
    # Editing
    # ─────────────────────────────────────────────────────────────────────────

    def with_overrides(self, **changes: Any) -> Question:
        """
        Return a copy with the given fields replaced.

        Fields that are not passed keep their current value, so an
        override only touches what the user actually edited.
        """
        if not changes:
            return self
        return replace(self, **changes)

    # ─────────────────────────────────────────────────────────────────────────
    # Serialization
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> dict:
        """
        Serialize to the camelCase dict consumed by the export service.

        MCQ-only keys are written for MCQs only.
        """
        d: dict[str, Any] = {
            "id": self.id,
            "type": self.question_type.value,
            "questionText": self.question_text,
            "difficulty": self.difficulty.value,
        }
        if self.chapter_id is not None:
            d["chapterId"] = self.chapter_id
        if self.chapter_number is not None:
            d["chapterNumber"] = self.chapter_number
        if self.chapter_name is not None:
            d["chapterName"] = self.chapter_name
        if self.marks is not None:
            d["marks"] = self.marks
        if self.topic is not None:
            d["topic"] = self.topic
        if self.is_mcq:
            d["options"] = list(self.options)
            d["correctOption"] = self.correct_option if self.correct_option is not None else 0
        return d

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        question_type: Optional[QuestionType] = None,
    ) -> Question:
        """
        Deserialize from a camelCase bank or export record.

        Args:
            data: Record with at least id, questionText, difficulty
            question_type: Type of the list the record came from; falls
                back to the record's own "type" key

        Raises:
            KeyError: If a required key is missing
            ValueError: If type or difficulty is not recognised
        """
        qtype = question_type or QuestionType(data["type"])
        return cls(
            id=str(data["id"]),
            question_type=qtype,
            question_text=str(data["questionText"]),
            difficulty=Difficulty(data["difficulty"]),
            chapter_id=data.get("chapterId"),
            chapter_number=data.get("chapterNumber"),
            chapter_name=data.get("chapterName"),
            marks=data.get("marks"),
            options=tuple(str(o) for o in data.get("options") or ()),
            correct_option=data.get("correctOption"),
            topic=data.get("topic"),
        )

    def __repr__(self) -> str:
        """Concise representation for debugging."""
        return (
            f"Question({self.id!r}, type={self.question_type.value}, "
            f"difficulty={self.difficulty.value}, chapter={self.chapter_id!r})"
        )


def derive_chapter_id(
    question_id: str,
    chapter_number: Optional[int] = None,
    chapters: Iterable[Chapter] = (),
) -> Optional[str]:
    """
    Work out which chapter a question belongs to from its id.

    This is the degraded path for records that were not tagged at
    ingestion. Ids of the form "<class>_<subject>_<chapter>_<rest...>"
    yield their first three segments. Otherwise the chapter whose
    number equals chapter_number is used.

    Args:
        question_id: Question id to parse
        chapter_number: Fallback chapter number from the record
        chapters: Chapters to match chapter_number against

    Returns:
        Chapter id, or None if neither path resolves

    Example:
        >>> derive_chapter_id("9_chem_ch1_mcq_3")
        '9_chem_ch1'
    """
    segments = question_id.split("_")
    if len(segments) > CHAPTER_ID_SEGMENTS:
        return "_".join(segments[:CHAPTER_ID_SEGMENTS])

    if chapter_number is not None:
        for chapter in chapters:
            if chapter.number == chapter_number:
                return chapter.id
    return None
