"""
Module: selection

Purpose:
    Provides the Selection dataclass (the three ordered id lists that
    make up a paper) plus the small per-type value objects that travel
    with it: SectionTargets (how many to draw) and MarksPerType (how
    much each question is worth).

Key Functions:
    - Selection.ids_for(type): Id list for one question type
    - Selection.with_ids(type, ids): Whole-list replacement
    - MarksPerType.from_dict(): Tolerant parsing of persisted marks
    - coerce_marks(): Numeric guard used by the totals calculator

Dependencies:
    - dataclasses (std)
    - math (std)
    - .questions.QuestionType

Used By:
    - composer.selection.engine: Produces Selection
    - composer.output.totals: Counts and marks
    - composer.output.payload: questionOrder and persisted record

Ordering:
    Id order is print order. Nothing in this module sorts ids; the only
    way to change a list is to replace it whole via with_ids().
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping, Union

from .questions import QuestionType


Number = Union[int, float]


def coerce_marks(value: Any) -> Number:
    """
    Coerce a marks value to a finite number, 0 when it cannot be used.

    Accepts ints, floats and numeric strings. Booleans, None, NaN,
    infinities and anything else become 0 so totals never turn into NaN.

    Example:
        >>> coerce_marks("2")
        2
        >>> coerce_marks(None)
        0
    """
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0
    else:
        return 0
    if not math.isfinite(number):
        return 0
    return int(number) if number.is_integer() else number


@dataclass(frozen=True)
class SectionTargets:
    """
    Number of questions to draw per type (immutable).

    Negative or zero targets are allowed and simply draw nothing.
    """

    mcq: int = 0
    short: int = 0
    long: int = 0

    def for_type(self, question_type: QuestionType) -> int:
        return getattr(self, question_type.value)

    @property
    def total(self) -> int:
        return max(self.mcq, 0) + max(self.short, 0) + max(self.long, 0)

    def to_dict(self) -> dict:
        return {"mcq": self.mcq, "short": self.short, "long": self.long}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SectionTargets:
        return cls(
            mcq=int(coerce_marks(data.get("mcq"))),
            short=int(coerce_marks(data.get("short"))),
            long=int(coerce_marks(data.get("long"))),
        )


@dataclass(frozen=True)
class MarksPerType:
    """
    Marks awarded per question of each type (immutable).

    Attributes:
        mcq: Marks per MCQ
        short: Marks per short question
        long: Marks per long question
    """

    mcq: Number = 1
    short: Number = 2
    long: Number = 5

    def for_type(self, question_type: QuestionType) -> Number:
        return getattr(self, question_type.value)

    def to_dict(self) -> dict:
        return {"mcq": self.mcq, "short": self.short, "long": self.long}

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any] | None,
        *,
        fill_defaults: bool = False,
    ) -> MarksPerType:
        """
        Parse marks from a persisted mapping without ever raising.

        Args:
            data: Mapping with optional mcq/short/long keys
            fill_defaults: Use DEFAULT_MARKS for missing keys instead of 0

        Returns:
            MarksPerType with every value a finite number
        """
        data = data if isinstance(data, Mapping) else {}
        values = {}
        for question_type in QuestionType:
            key = question_type.value
            if key not in data and fill_defaults:
                values[key] = DEFAULT_MARKS.for_type(question_type)
            else:
                values[key] = coerce_marks(data.get(key))
        return cls(**values)


DEFAULT_MARKS = MarksPerType()


@dataclass(frozen=True)
class Selection:
    """
    The questions chosen for a paper, as three ordered id lists (immutable).

    Attributes:
        mcq_ids: MCQ ids in print order
        short_ids: Short question ids in print order
        long_ids: Long question ids in print order

    Invariants:
        - No id repeats within a list
        - Order is preserved exactly as given

    Example:
        >>> sel = Selection(mcq_ids=("q1", "q2"))
        >>> sel.question_count
        2
        >>> sel.with_ids(QuestionType.LONG, ["l1"]).long_ids
        ('l1',)
    """

    mcq_ids: tuple[str, ...] = ()
    short_ids: tuple[str, ...] = ()
    long_ids: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Validate selection on construction."""
        for question_type in QuestionType:
            ids = self.ids_for(question_type)
            if len(ids) != len(set(ids)):
                raise ValueError(f"Duplicate ids in {question_type.value} selection: {ids}")

    @classmethod
    def empty(cls) -> Selection:
        return cls()

    def ids_for(self, question_type: QuestionType) -> tuple[str, ...]:
        return getattr(self, f"{question_type.value}_ids")

    def with_ids(self, question_type: QuestionType, ids: Iterable[str]) -> Selection:
        """
        Return a new Selection with one list swapped out whole.

        Args:
            question_type: List to replace
            ids: New ids in order

        Returns:
            New Selection; self is unchanged
        """
        return replace(self, **{f"{question_type.value}_ids": tuple(ids)})

    @property
    def question_count(self) -> int:
        return len(self.mcq_ids) + len(self.short_ids) + len(self.long_ids)

    @property
    def all_ids(self) -> tuple[str, ...]:
        return self.mcq_ids + self.short_ids + self.long_ids

    def to_dict(self) -> dict:
        return {
            "mcqIds": list(self.mcq_ids),
            "shortIds": list(self.short_ids),
            "longIds": list(self.long_ids),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Selection:
        """
        Deserialize from a persisted paper or wizard state.

        Raises:
            ValueError: If a list contains duplicate ids
        """
        return cls(
            mcq_ids=tuple(str(i) for i in data.get("mcqIds") or ()),
            short_ids=tuple(str(i) for i in data.get("shortIds") or ()),
            long_ids=tuple(str(i) for i in data.get("longIds") or ()),
        )

    def __repr__(self) -> str:
        """Concise representation for debugging."""
        return (
            f"Selection(mcq={len(self.mcq_ids)}, short={len(self.short_ids)}, "
            f"long={len(self.long_ids)})"
        )
