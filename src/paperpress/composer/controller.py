"""
Module: composer.controller

Purpose:
    Orchestrate a complete paper build.
    Load bank -> Compose (or top up) -> Totals -> Export payload -> Record

Key Functions:
    - build_paper(): Main entry point for building a paper
    - settings_for_template(): Paper settings seeded from a template

Key Classes:
    - PaperBuildResult: Complete build result
    - BuildError: Exception for build failures

Dependencies:
    - composer.bank: Question bank
    - composer.selection: Composition engine
    - composer.output: Merge, totals, payload

Used By:
    - scripts/compose_paper.py
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from paperpress.core.models import QuestionType, Selection, Template
from paperpress.core.schemas import ValidationError
from paperpress.core.utils import save_json

from .bank import BankError, PoolAccessor, QuestionBank
from .config import ComposerConfig, PaperSettings
from .output import (
    PaperTotals,
    build_export_payload,
    build_paper_record,
    compute_totals,
    validate_marks,
)
from .selection import CompositionEngine, CompositionRequest, SeededRandomSource, shortfalls

logger = logging.getLogger(__name__)


class BuildError(Exception):
    """Error during paper build."""
    pass


@dataclass(frozen=True)
class PaperBuildResult:
    """
    Complete build result (immutable).

    Attributes:
        selection: Selected ids per type
        totals: Question count and total marks
        payload: Export service request body
        record: Persisted paper record
        warnings: Shortfall and marks notices for the user
        payload_path: Where the payload was written, if anywhere
        record_path: Where the record was written, if anywhere
        shortfalls: Missing questions per type; empty when every
            target was met

    Example:
        >>> result = build_paper(config, request)
        >>> print(f"{result.totals.question_count} questions, {result.totals.total_marks} marks")
    """

    selection: Selection
    totals: PaperTotals
    payload: Dict[str, Any]
    record: Dict[str, Any]
    warnings: tuple[str, ...] = ()
    payload_path: Optional[Path] = None
    record_path: Optional[Path] = None
    shortfalls: Dict[QuestionType, int] = field(default_factory=dict)

    @property
    def is_complete(self) -> bool:
        """True when every requested question was supplied."""
        return not self.shortfalls


def settings_for_template(
    template: Template,
    base: Optional[PaperSettings] = None,
) -> PaperSettings:
    """
    Fill time allowed, total marks and marks per type from a template.

    Fields the user already set on base (non-empty time, non-zero
    total) are kept; marks per type always follow the template.
    """
    if base is None:
        return PaperSettings(
            time_allowed=template.time_allowed,
            total_marks=template.total_marks,
            custom_marks=template.marks_per_type,
        )
    return replace(
        base,
        time_allowed=base.time_allowed or template.time_allowed,
        total_marks=base.total_marks or template.total_marks,
        custom_marks=template.marks_per_type,
    )


def build_paper(
    config: ComposerConfig,
    request: CompositionRequest,
    settings: Optional[PaperSettings] = None,
    *,
    existing: Optional[Selection] = None,
    edited_questions: Optional[Mapping[str, Mapping[str, Any]]] = None,
    question_order: Optional[Mapping[str, List[str]]] = None,
    bank: Optional[PoolAccessor] = None,
    output_dir: Optional[Path] = None,
    paper_id: Optional[str] = None,
) -> PaperBuildResult:
    """
    Build a paper from start to finish.

    Pipeline:
    1. Open the question bank
    2. Compose a Selection, or top up existing to the request targets
    3. Compute totals from the settings' marks per type
    4. Build the export payload and the paper record
    5. (Optional) Write both as JSON to output_dir

    Args:
        config: Composer configuration
        request: What to compose
        settings: Paper settings; defaults when None
        existing: Selection to extend instead of composing from scratch
        edited_questions: User edits and custom questions keyed by id
        question_order: Stored print order per type
        bank: Pool accessor to use instead of opening config.bank_path
        output_dir: Directory for payload.json and paper.json
        paper_id: Id for the paper record

    Returns:
        PaperBuildResult

    Raises:
        BuildError: If the bank cannot be read, the payload fails
            validation, or the output cannot be written
    """
    warnings: List[str] = []
    start_time = time.perf_counter()
    settings = settings or PaperSettings()

    logger.info(
        f"Starting build for {request.class_id}/{request.subject_id} "
        f"({len(request.chapter_ids)} chapters, {request.total_requested} questions requested)"
    )

    # 1. Bank
    if bank is None:
        bank = QuestionBank(config.bank_path, validate=config.validate_schema)
    source = SeededRandomSource(config.seed)
    engine = CompositionEngine(bank, source, max_workers=config.max_workers)

    # 2. Compose
    try:
        if existing is not None:
            selection = engine.top_up_selection(existing, request)
        else:
            selection = engine.compose(request)
    except BankError as e:
        raise BuildError(f"Failed to load question bank: {e}") from e

    missing_by_type = shortfalls(selection, request.targets)
    for question_type, missing in missing_by_type.items():
        message = (
            f"Shortfall: {missing} {question_type.value} question(s) fewer than requested "
            f"({request.targets.for_type(question_type)})"
        )
        warnings.append(message)
        logger.warning(message)

    # 3. Totals
    totals = compute_totals(selection, settings.custom_marks)
    if settings.total_marks:
        check = validate_marks(settings.total_marks, selection, settings.custom_marks)
        if not check.valid:
            warnings.append(check.error)
            logger.warning(check.error)

    # 4. Payload and record
    lookup = _lookup_for(bank, request)
    try:
        payload = build_export_payload(
            selection,
            settings,
            lookup,
            class_id=request.class_id,
            subject_id=request.subject_id,
            edited_questions=edited_questions,
            question_order=question_order,
            validate=config.validate_schema,
        )
    except ValidationError as e:
        raise BuildError(f"Export payload failed validation: {e}") from e
    except BankError as e:
        raise BuildError(f"Failed to load question bank: {e}") from e

    record = build_paper_record(
        selection,
        settings,
        class_id=request.class_id,
        subject_id=request.subject_id,
        edited_questions=edited_questions,
        question_order=question_order,
        paper_id=paper_id,
    )

    # 5. Output
    payload_path = record_path = None
    if output_dir is not None:
        payload_path = output_dir / "payload.json"
        record_path = output_dir / "paper.json"
        try:
            save_json(payload, payload_path)
            save_json(record, record_path)
        except OSError as e:
            raise BuildError(f"Failed to write output: {e}") from e
        logger.info(f"Wrote export payload to {payload_path}")

    elapsed = time.perf_counter() - start_time
    logger.info(
        f"Paper built in {elapsed:.2f}s: {totals.question_count} questions, "
        f"{totals.total_marks} marks"
    )

    return PaperBuildResult(
        selection=selection,
        totals=totals,
        payload=payload,
        record=record,
        warnings=tuple(warnings),
        payload_path=payload_path,
        record_path=record_path,
        shortfalls=missing_by_type,
    )


def _lookup_for(bank: PoolAccessor, request: CompositionRequest):
    """Id lookup scoped to the request's class+subject."""
    if isinstance(bank, QuestionBank):
        return bank.lookup(request.class_id, request.subject_id)

    # Any other accessor: index the pools of the requested chapters
    index = {}
    for pool in CompositionEngine(bank, max_workers=1).fetch_pools(
        request.class_id, request.subject_id, request.chapter_ids
    ).values():
        for question in pool:
            index[question.id] = question
    return index
