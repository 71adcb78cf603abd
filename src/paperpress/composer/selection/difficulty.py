"""
Module: composer.selection.difficulty

Purpose:
    Difficulty filter applied to a pool before sampling.

Key Functions:
    - normalise_difficulty(): Map a stored preference to a Difficulty or None
    - filter_by_difficulty(): Strict equality filter, no-op for "all"

Fail-Open:
    "all", "mixed", None and any unrecognised value mean no filtering.
    Stale preferences from older saves must not break composition.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Union

from paperpress.core.models import Difficulty, Question


logger = logging.getLogger(__name__)

DifficultyLike = Union[str, Difficulty, None]

# Values that explicitly mean "no filtering"
ANY_DIFFICULTY = frozenset({"all", "mixed", ""})


def normalise_difficulty(value: DifficultyLike) -> Optional[Difficulty]:
    """
    Turn a difficulty preference into a Difficulty, or None for "any".

    Example:
        >>> normalise_difficulty("Easy")
        <Difficulty.EASY: 'easy'>
        >>> normalise_difficulty("mixed") is None
        True
    """
    if value is None or isinstance(value, Difficulty):
        return value
    key = str(value).strip().lower()
    if key in ANY_DIFFICULTY:
        return None
    try:
        return Difficulty(key)
    except ValueError:
        logger.warning(f"Unknown difficulty {value!r}, not filtering")
        return None


def filter_by_difficulty(
    questions: Iterable[Question],
    difficulty: DifficultyLike,
) -> List[Question]:
    """
    Keep the questions whose difficulty equals the requested one.

    Args:
        questions: Pool to filter (never modified)
        difficulty: "easy", "medium", "hard", a Difficulty, or "all"

    Returns:
        New list in pool order. May be empty; there is no fallback to
        other difficulties.
    """
    wanted = normalise_difficulty(difficulty)
    if wanted is None:
        return list(questions)
    return [q for q in questions if q.difficulty == wanted]
