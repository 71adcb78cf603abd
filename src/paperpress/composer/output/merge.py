"""
Module: composer.output.merge

Purpose:
    Overlay user edits onto questions at export time. Bank questions get
    a shallow field-by-field override; custom questions (reserved id
    prefix) are built from their override plus per-type defaults.

Key Functions:
    - resolve_question(): Base record + override, or synthesized custom
    - resolve_questions(): Resolve an id list, dropping unknown ids
    - apply_override(): Field-by-field merge onto a Question
    - merge_edit(): Accumulate edits for one id in an edits map
    - new_custom_id(): Fresh id carrying the custom prefix

Override Keys:
    questionText (alias newText), options (alias newOptions),
    correctOption, difficulty, marks (alias newMarks), topic. Invalid
    values are ignored with a warning so one bad field never loses the
    rest of the edit.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from paperpress.core.models import Difficulty, Question, QuestionType, coerce_marks


logger = logging.getLogger(__name__)

CUSTOM_ID_PREFIX = "custom"

DEFAULT_MCQ_OPTIONS = ("Option A", "Option B", "Option C", "Option D")
DEFAULT_CORRECT_OPTION = 0
DEFAULT_DIFFICULTY = Difficulty.MEDIUM
PLACEHOLDER_TEXT = "Enter question text"

# Used when neither the override nor the caller names a type
DEFAULT_CUSTOM_TYPE = QuestionType.SHORT

_ALIASES = {
    "newText": "questionText",
    "newOptions": "options",
    "newMarks": "marks",
}

BaseLookup = Union[Mapping[str, Question], Callable[[str], Optional[Question]]]
EditedQuestions = Mapping[str, Mapping[str, Any]]


def is_custom_id(question_id: str) -> bool:
    return question_id.startswith(CUSTOM_ID_PREFIX)


def new_custom_id() -> str:
    """
    Generate an id for a user-authored question.

    Example:
        >>> new_custom_id().startswith("custom_")
        True
    """
    return f"{CUSTOM_ID_PREFIX}_{uuid.uuid4().hex[:12]}"


def merge_edit(
    edited_questions: EditedQuestions,
    question_id: str,
    updates: Mapping[str, Any],
) -> Dict[str, Dict[str, Any]]:
    """
    Return a new edits map with updates merged into question_id's entry.

    Earlier edits to other fields of the same question are kept.
    """
    merged = {qid: dict(fields) for qid, fields in edited_questions.items()}
    merged[question_id] = {**merged.get(question_id, {}), **updates}
    return merged


def _normalise_override(override: Mapping[str, Any]) -> Dict[str, Any]:
    normalised: Dict[str, Any] = {}
    for key, value in override.items():
        canonical = _ALIASES.get(key, key)
        # The canonical key wins over its alias when both are present
        if canonical in normalised and key != canonical:
            continue
        normalised[canonical] = value
    return normalised


def apply_override(question: Question, override: Mapping[str, Any]) -> Question:
    """
    Shallow-merge an override onto a question, override winning per field.

    Args:
        question: Base question
        override: camelCase partial question

    Returns:
        New Question, or question itself when nothing applies
    """
    fields = _normalise_override(override)
    changes: Dict[str, Any] = {}

    if "questionText" in fields:
        text = fields["questionText"]
        if isinstance(text, str):
            changes["question_text"] = text
        else:
            logger.warning(f"{question.id}: ignoring non-string questionText")

    if "difficulty" in fields:
        raw = fields["difficulty"]
        try:
            changes["difficulty"] = raw if isinstance(raw, Difficulty) else Difficulty(str(raw).lower())
        except ValueError:
            logger.warning(f"{question.id}: ignoring unknown difficulty {fields['difficulty']!r}")

    if "marks" in fields and fields["marks"] is not None:
        changes["marks"] = coerce_marks(fields["marks"])

    if "topic" in fields and isinstance(fields["topic"], str):
        changes["topic"] = fields["topic"]

    if question.is_mcq:
        options = question.options
        if "options" in fields:
            raw = fields["options"]
            if isinstance(raw, (list, tuple)) and len(raw) >= 2:
                options = tuple(str(o) for o in raw)
                changes["options"] = options
            else:
                logger.warning(f"{question.id}: ignoring options override, need a list of 2+")

        correct = question.correct_option
        if "correctOption" in fields:
            raw = fields["correctOption"]
            if isinstance(raw, int) and not isinstance(raw, bool) and 0 <= raw < len(options):
                correct = raw
            else:
                logger.warning(f"{question.id}: ignoring correctOption {raw!r}")
        if correct is not None and correct >= len(options):
            correct = DEFAULT_CORRECT_OPTION
        if correct != question.correct_option:
            changes["correct_option"] = correct
    elif "options" in fields or "correctOption" in fields:
        logger.debug(f"{question.id}: options ignored for {question.question_type.value} question")

    return question.with_overrides(**changes)


def _lookup(base_lookup: BaseLookup, question_id: str) -> Optional[Question]:
    if isinstance(base_lookup, Mapping):
        return base_lookup.get(question_id)
    return base_lookup(question_id)


def _override_type(override: Mapping[str, Any]) -> Optional[QuestionType]:
    raw = override.get("type")
    if raw is None:
        return None
    try:
        return QuestionType(str(raw).lower())
    except ValueError:
        return None


def synthesize_question(
    question_id: str,
    override: Mapping[str, Any],
    question_type: Optional[QuestionType] = None,
) -> Question:
    """
    Build a complete Question from a possibly incomplete custom override.

    Type comes from the caller, then the override's "type" key, then
    DEFAULT_CUSTOM_TYPE. Missing fields take documented defaults: MCQs
    get four generic options with the first marked correct; every type
    gets placeholder text and medium difficulty.
    """
    qtype = question_type or _override_type(override) or DEFAULT_CUSTOM_TYPE
    base = Question(
        id=question_id,
        question_type=qtype,
        question_text=PLACEHOLDER_TEXT,
        difficulty=DEFAULT_DIFFICULTY,
        options=DEFAULT_MCQ_OPTIONS if qtype is QuestionType.MCQ else (),
        correct_option=DEFAULT_CORRECT_OPTION if qtype is QuestionType.MCQ else None,
    )
    return apply_override(base, override)


def resolve_question(
    question_id: str,
    base_lookup: BaseLookup,
    edited_questions: Optional[EditedQuestions] = None,
    question_type: Optional[QuestionType] = None,
) -> Optional[Question]:
    """
    Produce the final Question for an id.

    Args:
        question_id: Bank or custom id
        base_lookup: Mapping or function from id to bank Question
        edited_questions: Overrides keyed by id
        question_type: Type of the list the id sits in

    Returns:
        - Bank record unchanged when there is no override
        - Bank record with the override merged on top
        - Synthesized question for custom ids, or for unknown ids that
          carry an override
        - None for an unknown non-custom id without an override

    Example:
        >>> q = resolve_question(
        ...     "custom_abc123", {}, {"custom_abc123": {"questionText": "What is X?"}},
        ...     QuestionType.MCQ,
        ... )
        >>> q.options
        ('Option A', 'Option B', 'Option C', 'Option D')
    """
    raw_override = (edited_questions or {}).get(question_id)
    if raw_override is not None and not isinstance(raw_override, Mapping):
        logger.warning(f"Ignoring malformed edit for {question_id}")
        raw_override = None

    base = _lookup(base_lookup, question_id)
    if base is not None:
        if question_type is not None and base.question_type is not question_type:
            logger.warning(
                f"{question_id} is a {base.question_type.value} question, "
                f"listed under {question_type.value}"
            )
        return apply_override(base, raw_override) if raw_override else base

    if is_custom_id(question_id) or raw_override is not None:
        return synthesize_question(question_id, raw_override or {}, question_type)

    logger.warning(f"Question {question_id} not found in bank, dropping")
    return None


def resolve_questions(
    question_ids: Iterable[str],
    base_lookup: BaseLookup,
    edited_questions: Optional[EditedQuestions] = None,
    question_type: Optional[QuestionType] = None,
) -> List[Question]:
    """Resolve ids in order; ids that cannot be resolved are left out."""
    resolved = []
    for question_id in question_ids:
        question = resolve_question(question_id, base_lookup, edited_questions, question_type)
        if question is not None:
            resolved.append(question)
    return resolved
