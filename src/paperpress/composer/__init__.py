"""
Module: composer

Purpose:
    Paper composition pipeline. Reads the question bank, draws a
    Selection per CompositionRequest, and turns it into the export
    payload and persisted paper record.

Key Functions:
    - build_paper(): End-to-end build
    - compose(): One-shot composition
    - top_up(): Extend an id list to a larger target

Key Classes:
    - ComposerConfig: Configuration for building
    - CompositionRequest: What to compose
    - QuestionBank: Pool accessor
    - PaperSettings: Header fields and marks per type

Dependencies:
    - jsonschema (via paperpress.core.schemas)

Used By:
    - scripts/compose_paper.py
"""

from .config import ComposerConfig, PaperSettings
from .bank import QuestionBank, BankError
from .selection import CompositionEngine, CompositionRequest, compose, top_up
from .controller import build_paper, settings_for_template, PaperBuildResult, BuildError

__all__ = [
    # Config
    "ComposerConfig",
    "PaperSettings",
    "CompositionRequest",
    # Bank
    "QuestionBank",
    "BankError",
    # Selection
    "CompositionEngine",
    "compose",
    "top_up",
    # Controller
    "build_paper",
    "settings_for_template",
    "PaperBuildResult",
    "BuildError",
]
