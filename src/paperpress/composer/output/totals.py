"""
Module: composer.output.totals

Purpose:
    Question counts and marks for a Selection. Marks per question come
    from paper settings, never from the individual bank records.

Key Functions:
    - compute_totals(): questionCount and totalMarks
    - compute_marks_breakdown(): Per-type counts, marks and attempt totals
    - validate_marks(): Compare a header total with the computed one

Key Classes:
    - PaperTotals, MarksBreakdown, TypeBreakdown, MarksValidation

Numeric Guard:
    Every marks value passes through coerce_marks(), so missing or
    non-numeric marks count as 0 and totals are never NaN.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from paperpress.core.models import MarksPerType, QuestionType, Selection, coerce_marks
from paperpress.core.models.selection import Number


MarksLike = Union[MarksPerType, Mapping[str, Any], None]


def _as_marks(marks: MarksLike) -> MarksPerType:
    """Coerce any marks input to a MarksPerType of finite numbers."""
    if isinstance(marks, MarksPerType):
        return MarksPerType(
            mcq=coerce_marks(marks.mcq),
            short=coerce_marks(marks.short),
            long=coerce_marks(marks.long),
        )
    return MarksPerType.from_dict(marks)


@dataclass(frozen=True)
class PaperTotals:
    """
    Totals for a selection (immutable).

    Attributes:
        question_count: Questions across all three lists
        total_marks: Sum of count x marks per type
        mcq_count / short_count / long_count: Per-type counts
    """

    question_count: int
    total_marks: Number
    mcq_count: int = 0
    short_count: int = 0
    long_count: int = 0

    def to_dict(self) -> dict:
        return {
            "questionCount": self.question_count,
            "totalMarks": self.total_marks,
            "mcqCount": self.mcq_count,
            "shortCount": self.short_count,
            "longCount": self.long_count,
        }


def compute_totals(selection: Selection, marks: MarksLike) -> PaperTotals:
    """
    Count questions and marks.

    Args:
        selection: Selected ids
        marks: Marks per question of each type; missing or invalid
            values count as 0

    Returns:
        PaperTotals

    Example:
        >>> totals = compute_totals(Selection(mcq_ids=("a", "b")), MarksPerType(1, 2, 5))
        >>> totals.total_marks
        2
    """
    per_type = _as_marks(marks)
    counts = {t: len(selection.ids_for(t)) for t in QuestionType}
    total = sum(counts[t] * per_type.for_type(t) for t in QuestionType)
    return PaperTotals(
        question_count=sum(counts.values()),
        total_marks=total,
        mcq_count=counts[QuestionType.MCQ],
        short_count=counts[QuestionType.SHORT],
        long_count=counts[QuestionType.LONG],
    )


# ─────────────────────────────────────────────────────────────────────────────
# Breakdown
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TypeBreakdown:
    count: int
    marks_per_question: Number
    total: Number
    attempt_count: int
    attempted_marks: Number

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "marksPerQuestion": self.marks_per_question,
            "total": self.total,
            "attemptCount": self.attempt_count,
            "attemptedMarks": self.attempted_marks,
        }


@dataclass(frozen=True)
class MarksBreakdown:
    """
    Per-type marks with attempt rules applied (immutable).

    Attributes:
        mcq / short / long: Per-type breakdown
        total: Marks for every printed question
        attempt_total: Marks a student can actually earn
    """

    mcq: TypeBreakdown
    short: TypeBreakdown
    long: TypeBreakdown
    total: Number
    attempt_total: Number

    def for_type(self, question_type: QuestionType) -> TypeBreakdown:
        return getattr(self, question_type.value)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {t.value: self.for_type(t).to_dict() for t in QuestionType}
        d["total"] = self.total
        d["attemptTotal"] = self.attempt_total
        return d

    def format_display(self) -> str:
        """One-line summary, e.g. "MCQ: 12 x 1 = 12 | Total: 12 marks"."""
        labels = {QuestionType.MCQ: "MCQ", QuestionType.SHORT: "Short", QuestionType.LONG: "Long"}
        parts = []
        for question_type in QuestionType:
            row = self.for_type(question_type)
            if row.count > 0:
                parts.append(
                    f"{labels[question_type]}: {row.count} x {row.marks_per_question} = {row.total}"
                )
        parts.append(f"Total: {self.total} marks")
        return " | ".join(parts)


def _attempt_for(
    attempt_counts: Optional[Mapping[Any, Any]],
    question_type: QuestionType,
    count: int,
) -> int:
    if not attempt_counts:
        return count
    raw = attempt_counts.get(question_type, attempt_counts.get(question_type.value))
    if raw is None:
        return count
    return min(max(int(coerce_marks(raw)), 0), count)


def compute_marks_breakdown(
    selection: Selection,
    marks: MarksLike,
    attempt_counts: Optional[Mapping[Any, Any]] = None,
) -> MarksBreakdown:
    """
    Marks per type including "attempt any N" rules.

    Args:
        selection: Selected ids
        marks: Marks per question of each type
        attempt_counts: Questions to attempt, keyed by QuestionType or
            its value; missing types attempt every selected question.
            Values are clamped to [0, selected count].

    Returns:
        MarksBreakdown
    """
    per_type = _as_marks(marks)
    rows = {}
    for question_type in QuestionType:
        count = len(selection.ids_for(question_type))
        each = per_type.for_type(question_type)
        attempt = _attempt_for(attempt_counts, question_type, count)
        rows[question_type.value] = TypeBreakdown(
            count=count,
            marks_per_question=each,
            total=count * each,
            attempt_count=attempt,
            attempted_marks=attempt * each,
        )
    return MarksBreakdown(
        **rows,
        total=sum(row.total for row in rows.values()),
        attempt_total=sum(row.attempted_marks for row in rows.values()),
    )


# ─────────────────────────────────────────────────────────────────────────────
# Validation
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class MarksValidation:
    valid: bool
    header_total: Number
    calculated_total: Number
    mismatch: Number
    error: Optional[str] = None


def validate_marks(header_total: Any, selection: Selection, marks: MarksLike) -> MarksValidation:
    """
    Check that the total printed in the paper header matches the selection.

    Returns:
        MarksValidation with valid=False and an error message on mismatch
    """
    header = coerce_marks(header_total)
    calculated = compute_totals(selection, marks).total_marks
    mismatch = abs(header - calculated)
    if mismatch == 0:
        return MarksValidation(True, header, calculated, 0)
    return MarksValidation(
        valid=False,
        header_total=header,
        calculated_total=calculated,
        mismatch=mismatch,
        error=(
            f"Total marks mismatch: header shows {header}, "
            f"but calculated total is {calculated}"
        ),
    )
