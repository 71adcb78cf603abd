"""
Module: composer.bank.loader

Purpose:
    Read-only access to the question bank. Subject files live at
    <bank_path>/<class_id>/<subject_id lowercased>.json and are loaded
    lazily on first use, then cached for the life of the bank.

Key Classes:
    - QuestionBank: Lazy, thread-safe pool accessor
    - PoolAccessor: Protocol the composition engine depends on
    - BankError: A subject file exists but cannot be read

Dependencies:
    - json, pathlib, threading (std)
    - paperpress.core.utils: load_json
    - composer.bank.parser: SubjectData

Used By:
    - composer.selection.engine: Pool fetching
    - composer.controller: Custom question merge lookups

Empty Results:
    Unknown class, subject or chapter ids never raise; they produce an
    empty list. A file that exists but is not valid JSON or fails the
    subject schema raises BankError.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Protocol, Tuple

from paperpress.core.models import Chapter, Difficulty, Question, QuestionType
from paperpress.core.schemas import ValidationError
from paperpress.core.utils import load_json

from .parser import SubjectData, parse_subject


logger = logging.getLogger(__name__)

SubjectKey = Tuple[str, str]


class BankError(Exception):
    """Error reading a subject bank file."""
    pass


class PoolAccessor(Protocol):
    """Anything that can return a question pool for a set of chapters."""

    def list_questions(
        self,
        class_id: str,
        subject_id: str,
        chapter_ids: Iterable[str],
        question_type: QuestionType,
    ) -> List[Question]:
        ...


def _is_safe_segment(name: str) -> bool:
    """Reject ids that would escape the bank directory."""
    return bool(name) and name not in (".", "..") and "/" not in name and "\\" not in name


class QuestionBank:
    """
    Question bank backed by per-subject JSON files.

    Each subject is parsed once; concurrent callers share the cached
    SubjectData. The cache holds misses too, so an absent subject does
    not hit the disk again.

    Example:
        >>> bank = QuestionBank(Path("data/bank"))
        >>> pool = bank.list_questions("9th", "chemistry", ["9_chem_ch1"], QuestionType.MCQ)
    """

    def __init__(self, bank_path: Optional[Path] = None, *, validate: bool = True) -> None:
        self.bank_path = Path(bank_path) if bank_path is not None else None
        self.validate = validate
        self._cache: Dict[SubjectKey, Optional[SubjectData]] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_subjects(
        cls,
        subjects: Mapping[SubjectKey, Mapping[str, Any]],
        *,
        validate: bool = True,
    ) -> QuestionBank:
        """
        Build an in-memory bank from already-parsed subject files.

        Args:
            subjects: {(class_id, subject_id): subject file content}
            validate: Check each subject against the schema

        Raises:
            BankError: If a subject fails validation
        """
        bank = cls(None, validate=validate)
        for (class_id, subject_id), data in subjects.items():
            key = (class_id, subject_id.lower())
            bank._cache[key] = bank._parse(data, class_id, subject_id, f"{class_id}/{subject_id}")
        return bank

    # ─────────────────────────────────────────────────────────────────────────
    # Loading
    # ─────────────────────────────────────────────────────────────────────────

    def subject_path(self, class_id: str, subject_id: str) -> Optional[Path]:
        """Location of a subject file, None when no bank directory is set."""
        if self.bank_path is None:
            return None
        return self.bank_path / class_id / f"{subject_id.lower()}.json"

    def get_subject_data(self, class_id: str, subject_id: str) -> Optional[SubjectData]:
        """
        Load (or fetch from cache) one class+subject.

        Returns:
            SubjectData, or None when the class or subject is unknown

        Raises:
            BankError: If the file exists but cannot be parsed
        """
        if not (_is_safe_segment(class_id) and _is_safe_segment(subject_id)):
            logger.warning(f"Rejected bank lookup for {class_id!r}/{subject_id!r}")
            return None

        key = (class_id, subject_id.lower())
        with self._lock:
            if key in self._cache:
                return self._cache[key]
            data = self._load(class_id, subject_id)
            self._cache[key] = data
            return data

    def _load(self, class_id: str, subject_id: str) -> Optional[SubjectData]:
        path = self.subject_path(class_id, subject_id)
        if path is None or not path.is_file():
            logger.debug(f"No bank file for {class_id}/{subject_id}")
            return None

        try:
            raw = load_json(path)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise BankError(f"Invalid JSON in {path}: {e}") from e
        except OSError as e:
            raise BankError(f"Cannot read {path}: {e}") from e

        subject = self._parse(raw, class_id, subject_id, str(path))
        logger.info(
            f"Loaded {len(subject.question_index)} questions for {class_id}/{subject_id}"
        )
        return subject

    def _parse(
        self, raw: Any, class_id: str, subject_id: str, source: str
    ) -> SubjectData:
        try:
            return parse_subject(
                raw, class_id, subject_id.lower(), validate=self.validate, source=source
            )
        except ValidationError as e:
            raise BankError(f"{source}: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            raise BankError(f"{source}: malformed subject file: {e}") from e

    # ─────────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────────

    def list_chapters(self, class_id: str, subject_id: str) -> List[Chapter]:
        subject = self.get_subject_data(class_id, subject_id)
        return subject.chapter_summaries() if subject else []

    def list_questions(
        self,
        class_id: str,
        subject_id: str,
        chapter_ids: Iterable[str],
        question_type: QuestionType,
    ) -> List[Question]:
        """
        Return every question of one type in the given chapters.

        Questions come out in chapter_ids order, then bank order within
        each chapter. Unknown chapter ids contribute nothing and repeated
        chapter ids are only read once.

        Returns:
            New list; empty for empty chapter_ids or an unknown subject
        """
        wanted = list(dict.fromkeys(chapter_ids))
        if not wanted:
            return []
        subject = self.get_subject_data(class_id, subject_id)
        if subject is None:
            return []

        pool: List[Question] = []
        for chapter_id in wanted:
            chapter = subject.get_chapter(chapter_id)
            if chapter is None:
                logger.debug(f"Unknown chapter {chapter_id!r} in {class_id}/{subject_id}")
                continue
            pool.extend(chapter.pool(question_type))
        return pool

    def get_question(
        self, class_id: str, subject_id: str, question_id: str
    ) -> Optional[Question]:
        subject = self.get_subject_data(class_id, subject_id)
        if subject is None:
            return None
        return subject.question_index.get(question_id)

    def get_questions(
        self, class_id: str, subject_id: str, question_ids: Iterable[str]
    ) -> List[Question]:
        """Resolve ids in order, skipping ids the bank does not know."""
        subject = self.get_subject_data(class_id, subject_id)
        if subject is None:
            return []
        index = subject.question_index
        return [index[qid] for qid in question_ids if qid in index]

    def lookup(self, class_id: str, subject_id: str) -> Callable[[str], Optional[Question]]:
        """Id -> Question function scoped to one class+subject."""
        def _lookup(question_id: str) -> Optional[Question]:
            return self.get_question(class_id, subject_id, question_id)
        return _lookup

    def available_counts(
        self, class_id: str, subject_id: str, chapter_ids: Iterable[str]
    ) -> Dict[QuestionType, int]:
        """Pool size per type for the given chapters."""
        chapter_ids = list(chapter_ids)
        return {
            question_type: len(self.list_questions(class_id, subject_id, chapter_ids, question_type))
            for question_type in QuestionType
        }

    def search_questions(
        self,
        class_id: str,
        subject_id: str,
        chapter_ids: Iterable[str],
        query: str,
        question_type: Optional[QuestionType] = None,
        difficulty: Optional[Difficulty] = None,
    ) -> List[Question]:
        """
        Case-insensitive substring search over question text.

        Args:
            query: Text to look for; a blank query matches nothing
            question_type: Restrict to one type (all types when None)
            difficulty: Restrict to one difficulty (all when None)

        Returns:
            Matches in type order (mcq, short, long), then pool order
        """
        needle = query.strip().lower()
        if not needle:
            return []
        chapter_ids = list(chapter_ids)
        types = [question_type] if question_type else list(QuestionType)

        matches: List[Question] = []
        for qtype in types:
            for question in self.list_questions(class_id, subject_id, chapter_ids, qtype):
                if difficulty is not None and question.difficulty != difficulty:
                    continue
                if needle not in question.question_text.lower():
                    continue
                matches.append(question)
        return matches

    def clear_cache(self) -> None:
        """Forget loaded subjects so the next access re-reads the files."""
        if self.bank_path is None:
            return
        with self._lock:
            self._cache.clear()

    def __repr__(self) -> str:
        return f"QuestionBank({str(self.bank_path) if self.bank_path else '<memory>'}, cached={len(self._cache)})"
