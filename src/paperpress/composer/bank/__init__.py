"""
Module: composer.bank

Purpose:
    Question bank access. Loads per-subject JSON files, tags every
    question with its chapter and answers pool queries.

Key Classes:
    - QuestionBank: Lazy, cached pool accessor
    - PoolAccessor: Protocol used by the composition engine
    - SubjectData: Parsed content of one subject file

Used By:
    - composer.selection.engine
    - composer.controller
"""

from .loader import QuestionBank, PoolAccessor, BankError
from .parser import (
    parse_subject,
    parse_question,
    SubjectData,
    ChapterPools,
    ParseError,
    QUESTION_LIST_KEYS,
)

__all__ = [
    "QuestionBank",
    "PoolAccessor",
    "BankError",
    "parse_subject",
    "parse_question",
    "SubjectData",
    "ChapterPools",
    "ParseError",
    "QUESTION_LIST_KEYS",
]
