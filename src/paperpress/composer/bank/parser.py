"""
Module: composer.bank.parser

Purpose:
    Turn the JSON content of one subject bank file into immutable
    SubjectData. Every question is tagged with the id, number and name of
    the chapter that owns it, so nothing downstream has to parse ids to
    find a question's chapter.

Key Functions:
    - parse_subject(): Parse a whole subject file
    - parse_question(): Parse one question record and tag its chapter

Key Classes:
    - SubjectData: All chapters of one class+subject
    - ChapterPools: One chapter with its three question lists
    - ParseError: A single record could not be parsed

Dependencies:
    - paperpress.core.models: Question, Chapter
    - paperpress.core.schemas: Subject file skeleton validation

Used By:
    - composer.bank.loader: QuestionBank
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from functools import cached_property
from typing import Any, Dict, List, Mapping, Optional

from paperpress.core.models import Chapter, Question, QuestionType
from paperpress.core.schemas import validate_subject

logger = logging.getLogger(__name__)


# Key of each question list inside a chapter record
QUESTION_LIST_KEYS: Dict[QuestionType, str] = {
    QuestionType.MCQ: "mcqs",
    QuestionType.SHORT: "shortQuestions",
    QuestionType.LONG: "longQuestions",
}


class ParseError(Exception):
    """Error parsing a bank record."""
    pass


@dataclass(frozen=True)
class ChapterPools:
    """
    One chapter and its questions in bank order (immutable).

    Attributes:
        chapter: Chapter summary with counts taken at parse time
        mcqs: MCQs in bank order
        shorts: Short questions in bank order
        longs: Long questions in bank order
    """

    chapter: Chapter
    mcqs: tuple[Question, ...] = ()
    shorts: tuple[Question, ...] = ()
    longs: tuple[Question, ...] = ()

    def pool(self, question_type: QuestionType) -> tuple[Question, ...]:
        if question_type is QuestionType.MCQ:
            return self.mcqs
        if question_type is QuestionType.SHORT:
            return self.shorts
        return self.longs


@dataclass(frozen=True)
class SubjectData:
    """
    All chapters of one class+subject (immutable).

    Attributes:
        class_id: Class identifier, e.g. "9th"
        subject_id: Subject identifier, e.g. "chemistry"
        chapters: Chapters in file order
    """

    class_id: str
    subject_id: str
    chapters: tuple[ChapterPools, ...] = ()

    @cached_property
    def question_index(self) -> Dict[str, Question]:
        """Every question of every type keyed by id."""
        index: Dict[str, Question] = {}
        for pools in self.chapters:
            for question_type in QuestionType:
                for question in pools.pool(question_type):
                    index[question.id] = question
        return index

    def chapter_summaries(self) -> List[Chapter]:
        return [pools.chapter for pools in self.chapters]

    def get_chapter(self, chapter_id: str) -> Optional[ChapterPools]:
        for pools in self.chapters:
            if pools.chapter.id == chapter_id:
                return pools
        return None


def parse_question(
    record: Mapping[str, Any],
    question_type: QuestionType,
    chapter: Chapter,
) -> Question:
    """
    Parse one bank record and tag it with its owning chapter.

    Args:
        record: Raw question record from the bank file
        question_type: Type of the list the record sits in
        chapter: Owning chapter

    Returns:
        Question with chapter_id, chapter_number and chapter_name set

    Raises:
        ParseError: If the record is missing fields or has invalid values
    """
    if not isinstance(record, Mapping):
        raise ParseError(f"Question record must be an object, got {type(record).__name__}")
    try:
        question = Question.from_dict(record, question_type)
    except KeyError as e:
        raise ParseError(f"Missing field {e} in record {record.get('id', '?')!r}") from e
    except (TypeError, ValueError) as e:
        raise ParseError(f"Invalid record {record.get('id', '?')!r}: {e}") from e

    return replace(
        question,
        chapter_id=chapter.id,
        chapter_number=chapter.number,
        chapter_name=chapter.name,
    )


def parse_subject(
    data: Mapping[str, Any],
    class_id: str,
    subject_id: str,
    *,
    validate: bool = True,
    source: str = "",
) -> SubjectData:
    """
    Parse a subject bank file.

    Malformed question records and repeated ids are skipped with a
    warning; the rest of the file still loads.

    Args:
        data: Parsed JSON content
        class_id: Class the file belongs to
        subject_id: Subject the file belongs to
        validate: Check the file skeleton against the subject schema
        source: File name used in log messages

    Returns:
        SubjectData with tagged questions

    Raises:
        ValidationError: If validate=True and the skeleton is invalid
    """
    if validate:
        validate_subject(data)

    label = source or f"{class_id}/{subject_id}"
    seen_ids: set[str] = set()
    chapters: List[ChapterPools] = []
    skipped = 0

    for raw_chapter in data["chapters"]:
        raw_lists = {
            question_type: raw_chapter.get(key) or []
            for question_type, key in QUESTION_LIST_KEYS.items()
        }
        chapter = Chapter(
            id=str(raw_chapter["id"]),
            number=int(raw_chapter["number"]),
            name=str(raw_chapter["name"]),
        )

        parsed: Dict[QuestionType, List[Question]] = {t: [] for t in QuestionType}
        for question_type, records in raw_lists.items():
            for record in records:
                try:
                    question = parse_question(record, question_type, chapter)
                except ParseError as e:
                    logger.warning(f"Skipping record in {label} chapter {chapter.id}: {e}")
                    skipped += 1
                    continue
                if question.id in seen_ids:
                    logger.warning(f"Skipping duplicate question id {question.id!r} in {label}")
                    skipped += 1
                    continue
                seen_ids.add(question.id)
                parsed[question_type].append(question)

        chapter = replace(
            chapter,
            mcq_count=len(parsed[QuestionType.MCQ]),
            short_count=len(parsed[QuestionType.SHORT]),
            long_count=len(parsed[QuestionType.LONG]),
        )
        chapters.append(
            ChapterPools(
                chapter=chapter,
                mcqs=tuple(parsed[QuestionType.MCQ]),
                shorts=tuple(parsed[QuestionType.SHORT]),
                longs=tuple(parsed[QuestionType.LONG]),
            )
        )

    if skipped:
        logger.warning(f"{label}: skipped {skipped} malformed or duplicate records")
    logger.debug(f"Parsed {len(seen_ids)} questions in {len(chapters)} chapters from {label}")
    return SubjectData(class_id=class_id, subject_id=subject_id, chapters=tuple(chapters))
