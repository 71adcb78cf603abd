"""
Module: composer.selection.engine

Purpose:
    Composition engine. For each question type independently: fetch the
    pool, filter by difficulty, sample the target count and keep the ids.
    Also extends an existing list to a larger target (top-up).

Key Functions:
    - compose(): Functional entry point for a single composition
    - top_up(): Functional entry point for extending one id list
    - shortfalls(): Requested minus supplied, per type

Key Classes:
    - CompositionEngine: Holds the pool accessor and random source

Dependencies:
    - concurrent.futures (std): Pool fetches run on worker threads
    - composer.selection.difficulty / sampler

Used By:
    - composer.controller: build_paper()

Determinism:
    Pools may be fetched concurrently but sampling always runs in the
    fixed order mcq -> short -> long on the calling thread, so the same
    seed yields the same Selection.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional, Union

from paperpress.core.models import (
    Difficulty,
    Question,
    QuestionType,
    SectionTargets,
    Selection,
)

from ..bank import PoolAccessor
from .config import CompositionRequest
from .difficulty import filter_by_difficulty
from .sampler import RandomSource, SeededRandomSource, sample


logger = logging.getLogger(__name__)

Pools = Dict[QuestionType, List[Question]]


class CompositionEngine:
    """
    Draws Selections from a pool accessor.

    Never raises for empty pools or under-supply; the result is simply
    shorter than requested and shortfalls() reports by how much.

    Attributes:
        bank: Pool accessor (usually a QuestionBank)
        source: Random source used when a request carries no seed
        max_workers: Threads for pool fetching; 1 fetches sequentially

    Example:
        >>> engine = CompositionEngine(bank, SeededRandomSource(42))
        >>> selection = engine.compose(request)
    """

    def __init__(
        self,
        bank: PoolAccessor,
        source: Optional[RandomSource] = None,
        *,
        max_workers: int = 3,
    ) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1: {max_workers}")
        self.bank = bank
        self.source = source if source is not None else SeededRandomSource()
        self.max_workers = max_workers

    # ─────────────────────────────────────────────────────────────────────────
    # Pools
    # ─────────────────────────────────────────────────────────────────────────

    def fetch_pools(
        self,
        class_id: str,
        subject_id: str,
        chapter_ids: Iterable[str],
        difficulty: Union[str, Difficulty, None] = "all",
        types: Iterable[QuestionType] = tuple(QuestionType),
    ) -> Pools:
        """
        Fetch and difficulty-filter the pool of each requested type.

        Returns:
            {type: filtered pool} for every type in types
        """
        chapter_ids = tuple(chapter_ids)
        types = list(types)

        def _fetch(question_type: QuestionType) -> List[Question]:
            pool = self.bank.list_questions(class_id, subject_id, chapter_ids, question_type)
            filtered = filter_by_difficulty(pool, difficulty)
            logger.debug(
                f"{question_type.value} pool: {len(pool)} questions, "
                f"{len(filtered)} after difficulty filter"
            )
            return filtered

        if self.max_workers == 1 or len(types) <= 1:
            return {question_type: _fetch(question_type) for question_type in types}

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(types))) as executor:
            futures = {question_type: executor.submit(_fetch, question_type) for question_type in types}
            # Joined in type order; result() re-raises a worker's exception
            return {question_type: futures[question_type].result() for question_type in types}

    # ─────────────────────────────────────────────────────────────────────────
    # Composition
    # ─────────────────────────────────────────────────────────────────────────

    def _source_for(self, seed: Optional[int]) -> RandomSource:
        return SeededRandomSource(seed) if seed is not None else self.source

    def compose(self, request: CompositionRequest) -> Selection:
        """
        Compose a Selection for the request.

        Args:
            request: Class, subject, chapters, targets and difficulty

        Returns:
            Selection with at most targets[type] ids per type
        """
        if not request.chapter_ids:
            logger.debug("No chapters selected, returning empty selection")
            return Selection.empty()
        if not request.class_id or not request.subject_id:
            logger.debug("No class or subject given, returning empty selection")
            return Selection.empty()

        source = self._source_for(request.seed)
        wanted = [t for t in QuestionType if request.targets.for_type(t) > 0]
        pools = self.fetch_pools(
            request.class_id,
            request.subject_id,
            request.chapter_ids,
            request.difficulty,
            types=wanted,
        )

        selection = Selection.empty()
        for question_type in wanted:
            target = request.targets.for_type(question_type)
            picked = sample(pools[question_type], target, source)
            if len(picked) < target:
                logger.warning(
                    f"Only {len(picked)} of {target} {question_type.value} questions available"
                )
            selection = selection.with_ids(question_type, [q.id for q in picked])

        logger.debug(f"Composed {selection!r}")
        return selection

    def top_up(
        self,
        existing_ids: Iterable[str],
        class_id: str,
        subject_id: str,
        chapter_ids: Iterable[str],
        additional_count: int,
        difficulty: Union[str, Difficulty, None],
        question_type: QuestionType,
        *,
        seed: Optional[int] = None,
    ) -> List[str]:
        """
        Extend an id list with new questions, keeping existing picks.

        Existing ids are excluded from the pool before sampling. A
        repeated existing id is kept at its first position only.

        Args:
            existing_ids: Ids already chosen, in order
            additional_count: Number of new ids wanted
            question_type: Type of the list being extended

        Returns:
            Existing ids in their original order, then up to
            additional_count new ids in sampler order
        """
        return self._top_up(
            existing_ids,
            class_id,
            subject_id,
            chapter_ids,
            additional_count,
            difficulty,
            question_type,
            self._source_for(seed),
        )

    def _top_up(
        self,
        existing_ids: Iterable[str],
        class_id: str,
        subject_id: str,
        chapter_ids: Iterable[str],
        additional_count: int,
        difficulty: Union[str, Difficulty, None],
        question_type: QuestionType,
        source: RandomSource,
    ) -> List[str]:
        existing = list(dict.fromkeys(existing_ids))
        if additional_count <= 0:
            return existing

        excluded = set(existing)
        pool = self.fetch_pools(
            class_id, subject_id, chapter_ids, difficulty, types=[question_type]
        )[question_type]
        candidates = [q for q in pool if q.id not in excluded]

        picked = sample(candidates, additional_count, source)
        if len(picked) < additional_count:
            logger.warning(
                f"Top-up found {len(picked)} of {additional_count} extra "
                f"{question_type.value} questions"
            )
        return existing + [q.id for q in picked]

    def top_up_selection(self, selection: Selection, request: CompositionRequest) -> Selection:
        """
        Bring every list of selection up to the request's targets.

        Lists already at or above their target are left untouched.
        """
        source = self._source_for(request.seed)
        result = selection
        for question_type in QuestionType:
            current = selection.ids_for(question_type)
            missing = request.targets.for_type(question_type) - len(current)
            if missing <= 0:
                continue
            ids = self._top_up(
                current,
                request.class_id,
                request.subject_id,
                request.chapter_ids,
                missing,
                request.difficulty,
                question_type,
                source,
            )
            result = result.with_ids(question_type, ids)
        return result


def compose(
    bank: PoolAccessor,
    class_id: str,
    subject_id: str,
    chapter_ids: Iterable[str],
    targets: SectionTargets,
    difficulty: Union[str, Difficulty, None] = "all",
    source: Optional[RandomSource] = None,
) -> Selection:
    """
    Compose a Selection without building a CompositionEngine by hand.

    Example:
        >>> compose(bank, "9th", "chemistry", ["9_chem_ch1"], SectionTargets(mcq=10))
        Selection(mcq=10, short=0, long=0)
    """
    request = CompositionRequest(
        class_id=class_id,
        subject_id=subject_id,
        chapter_ids=tuple(chapter_ids),
        targets=targets,
        difficulty=difficulty if difficulty is not None else "all",
    )
    return CompositionEngine(bank, source, max_workers=1).compose(request)


def top_up(
    bank: PoolAccessor,
    existing_ids: Iterable[str],
    class_id: str,
    subject_id: str,
    chapter_ids: Iterable[str],
    additional_count: int,
    difficulty: Union[str, Difficulty, None],
    question_type: QuestionType,
    source: Optional[RandomSource] = None,
) -> List[str]:
    """Functional form of CompositionEngine.top_up()."""
    engine = CompositionEngine(bank, source, max_workers=1)
    return engine.top_up(
        existing_ids,
        class_id,
        subject_id,
        chapter_ids,
        additional_count,
        difficulty,
        question_type,
    )


def shortfalls(selection: Selection, targets: SectionTargets) -> Dict[QuestionType, int]:
    """
    Count how many requested questions could not be supplied.

    Returns:
        {type: missing} for types that came up short; empty when the
        selection meets every target
    """
    missing = {}
    for question_type in QuestionType:
        gap = targets.for_type(question_type) - len(selection.ids_for(question_type))
        if gap > 0:
            missing[question_type] = gap
    return missing
