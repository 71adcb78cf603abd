"""
Module: composer.output.payload

Purpose:
    Build the JSON documents that leave the composer: the request body
    for the export service and the persisted paper record.

Key Functions:
    - reconcile_order(): Merge a stored print order with the current ids
    - build_export_payload(): settings + resolved questions + order
    - build_paper_record(): Durable record with totals
    - selection_from_record(): Read a Selection back from a record

Dependencies:
    - composer.output.merge: Custom question merge
    - composer.output.totals: Totals calculator
    - paperpress.core.schemas: Export payload schema

Ordering:
    The mcqs/shorts/longs arrays are emitted in exactly the order given
    by the emitted questionOrder. Ids that cannot be resolved are left
    out of both.
"""

from __future__ import annotations

import datetime
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from paperpress.core.models import QuestionType, Selection
from paperpress.core.schemas import validate_export_payload

from ..config import PaperSettings
from .merge import BaseLookup, EditedQuestions, resolve_questions
from .totals import compute_totals


logger = logging.getLogger(__name__)

QuestionOrder = Mapping[str, Iterable[str]]
SettingsLike = Union[PaperSettings, Mapping[str, Any], None]


def reconcile_order(order: Optional[Iterable[str]], selected_ids: Iterable[str]) -> List[str]:
    """
    Apply a stored print order to the currently selected ids.

    Ids in order that are still selected keep their stored positions;
    selected ids missing from order follow in selection order.

    Example:
        >>> reconcile_order(["b", "x", "a"], ["a", "b", "c"])
        ['b', 'a', 'c']
    """
    selected = list(dict.fromkeys(selected_ids))
    selected_set = set(selected)
    ordered = [qid for qid in dict.fromkeys(order or ()) if qid in selected_set]
    placed = set(ordered)
    return ordered + [qid for qid in selected if qid not in placed]


def empty_question_order() -> Dict[str, List[str]]:
    return {question_type.plural: [] for question_type in QuestionType}


def _as_settings(settings: SettingsLike) -> PaperSettings:
    if isinstance(settings, PaperSettings):
        return settings
    return PaperSettings.from_dict(settings)


def _order_for(question_order: Optional[QuestionOrder], question_type: QuestionType) -> List[str]:
    if not question_order:
        return []
    # Accept singular keys as well ("mcq" as well as "mcqs")
    raw = question_order.get(question_type.plural, question_order.get(question_type.value))
    return [str(qid) for qid in raw or ()]


def build_export_payload(
    selection: Selection,
    settings: SettingsLike,
    base_lookup: BaseLookup,
    *,
    class_id: str,
    subject_id: str,
    edited_questions: Optional[EditedQuestions] = None,
    question_order: Optional[QuestionOrder] = None,
    validate: bool = False,
) -> Dict[str, Any]:
    """
    Build the export service request body.

    Args:
        selection: Selected ids
        settings: PaperSettings or its persisted dict form
        base_lookup: Id -> bank Question (mapping or function)
        class_id: Class printed in the settings block
        subject_id: Subject printed in the settings block
        edited_questions: Overrides keyed by id
        question_order: Stored print order per type
        validate: Check the result against the export payload schema

    Returns:
        JSON-serializable dict with settings, mcqs, shorts, longs,
        editedQuestions and questionOrder

    Raises:
        ValidationError: If validate=True and the payload is invalid
    """
    paper_settings = _as_settings(settings)
    edited = dict(edited_questions or {})

    payload: Dict[str, Any] = {}
    settings_block = paper_settings.to_dict()
    settings_block["classId"] = class_id
    settings_block["subject"] = subject_id
    payload["settings"] = settings_block

    emitted_order = empty_question_order()
    for question_type in QuestionType:
        order = reconcile_order(
            _order_for(question_order, question_type),
            selection.ids_for(question_type),
        )
        questions = resolve_questions(order, base_lookup, edited, question_type)
        payload[question_type.plural] = [q.to_dict() for q in questions]
        emitted_order[question_type.plural] = [q.id for q in questions]

    emitted_ids = {qid for ids in emitted_order.values() for qid in ids}
    payload["editedQuestions"] = {
        qid: dict(fields) for qid, fields in edited.items()
        if qid in emitted_ids and isinstance(fields, Mapping)
    }
    payload["questionOrder"] = emitted_order

    if validate:
        validate_export_payload(payload)

    logger.debug(
        f"Export payload: {len(payload['mcqs'])} mcqs, {len(payload['shorts'])} shorts, "
        f"{len(payload['longs'])} longs"
    )
    return payload


def build_paper_record(
    selection: Selection,
    settings: SettingsLike,
    *,
    class_id: str,
    subject_id: str,
    edited_questions: Optional[EditedQuestions] = None,
    question_order: Optional[QuestionOrder] = None,
    paper_id: Optional[str] = None,
    created_at: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build the record persisted for a generated paper.

    Totals are computed from the selection and settings.custom_marks at
    build time. questionOrder is reconciled with the selection so it
    never lists ids that are no longer selected.

    Returns:
        JSON-serializable dict
    """
    paper_settings = _as_settings(settings)
    totals = compute_totals(selection, paper_settings.custom_marks)
    now = datetime.datetime.now(datetime.timezone.utc).isoformat()

    order = {
        question_type.plural: reconcile_order(
            _order_for(question_order, question_type),
            selection.ids_for(question_type),
        )
        for question_type in QuestionType
    }

    record: Dict[str, Any] = {
        "id": paper_id or f"paper_{int(datetime.datetime.now().timestamp() * 1000)}",
        "classId": class_id,
        "subject": subject_id,
        "title": paper_settings.title or f"{class_id} {subject_id} Paper",
        "date": paper_settings.date,
        "timeAllowed": paper_settings.time_allowed,
        "instituteName": paper_settings.institute_name,
        **selection.to_dict(),
        **totals.to_dict(),
        "customMarks": paper_settings.custom_marks.to_dict(),
        "settings": paper_settings.to_dict(),
        "editedQuestions": {
            qid: dict(fields) for qid, fields in (edited_questions or {}).items()
            if isinstance(fields, Mapping)
        },
        "questionOrder": order,
        "createdAt": created_at or now,
        "updatedAt": now,
    }
    return record


def selection_from_record(record: Mapping[str, Any]) -> Selection:
    """
    Read the Selection back from a persisted record.

    The stored questionOrder, when present, decides the order of each
    list.

    Raises:
        ValueError: If a stored list repeats an id
    """
    stored = Selection.from_dict(record)
    question_order = record.get("questionOrder")
    if not isinstance(question_order, Mapping):
        return stored

    selection = stored
    for question_type in QuestionType:
        ordered = reconcile_order(
            _order_for(question_order, question_type),
            stored.ids_for(question_type),
        )
        selection = selection.with_ids(question_type, ordered)
    return selection
