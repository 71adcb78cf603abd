"""
Module: composer.config

Purpose:
    Configuration dataclasses for paper composition. Immutable values
    with validation on construction.

Key Classes:
    - ComposerConfig: Where the bank lives and how composition runs
    - PaperSettings: Header fields, toggles and marks per type

Dependencies:
    - dataclasses (std)
    - pathlib (std)

Used By:
    - composer.controller: build_paper()
    - composer.output.payload: Export settings block
    - scripts/compose_paper.py
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional

from paperpress.core.models import DEFAULT_MARKS, MarksPerType, coerce_marks


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComposerConfig:
    """
    Configuration for composing papers (immutable).

    Attributes:
        bank_path: Root of the question bank (<class>/<subject>.json)
        seed: Seed for reproducible composition; None draws a fresh
            system-seeded sequence per build
        max_workers: Threads used to fetch the three pools
        validate_schema: Validate bank files and export payloads

    Example:
        >>> config = ComposerConfig(bank_path=Path("data/bank"), seed=7)
    """

    bank_path: Path
    seed: Optional[int] = None
    max_workers: int = 3
    validate_schema: bool = True

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if not isinstance(self.bank_path, Path):
            object.__setattr__(self, "bank_path", Path(self.bank_path))
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1: {self.max_workers}")


def _today() -> str:
    return datetime.date.today().isoformat()


@dataclass(frozen=True)
class PaperSettings:
    """
    Paper header settings and layout toggles (immutable).

    Only custom_marks feeds the totals calculator; the rest is handed to
    the export service as-is.

    Attributes:
        title: Paper title
        exam_type: e.g. "Monthly Test"
        date: ISO date printed on the paper
        time_allowed: e.g. "2 Hours"
        total_marks: Total printed in the header
        institute_name: School name
        institute_logo: Logo as a data URL, or None
        custom_header / custom_sub_header: Extra header lines
        include_instructions: Print the general instructions block
        show_logo / show_watermark / include_bubble_sheet: Layout toggles
        custom_marks: Marks per question of each type
    """

    title: str = ""
    exam_type: str = ""
    date: str = field(default_factory=_today)
    time_allowed: str = "2 Hours"
    total_marks: float = 0
    institute_name: str = ""
    institute_logo: Optional[str] = None
    custom_header: str = ""
    custom_sub_header: str = ""
    include_instructions: bool = True
    show_logo: bool = True
    show_watermark: bool = False
    include_bubble_sheet: bool = False
    custom_marks: MarksPerType = DEFAULT_MARKS

    # ─────────────────────────────────────────────────────────────────────────
    # Serialization
    # ─────────────────────────────────────────────────────────────────────────

    _KEYS = {
        "title": "title",
        "exam_type": "examType",
        "date": "date",
        "time_allowed": "timeAllowed",
        "total_marks": "totalMarks",
        "institute_name": "instituteName",
        "institute_logo": "instituteLogo",
        "custom_header": "customHeader",
        "custom_sub_header": "customSubHeader",
        "include_instructions": "includeInstructions",
        "show_logo": "showLogo",
        "show_watermark": "showWatermark",
        "include_bubble_sheet": "includeBubbleSheet",
        "custom_marks": "customMarks",
    }

    def to_dict(self) -> dict:
        d = {key: getattr(self, name) for name, key in self._KEYS.items()}
        d["customMarks"] = self.custom_marks.to_dict()
        return d

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> PaperSettings:
        """
        Parse persisted settings, falling back to defaults per field.

        Never raises: a field with the wrong type is logged and replaced
        by its default, and missing custom marks take DEFAULT_MARKS.
        """
        settings = cls()
        if not isinstance(data, Mapping):
            if data is not None:
                logger.warning(f"Ignoring malformed paper settings: {type(data).__name__}")
            return settings

        changes: dict[str, Any] = {}
        defaults = {f.name: getattr(settings, f.name) for f in fields(cls)}
        for name, key in cls._KEYS.items():
            if key not in data or name == "custom_marks":
                continue
            value = data[key]
            default = defaults[name]
            if name == "total_marks":
                changes[name] = coerce_marks(value)
            elif name == "institute_logo":
                if value is None or isinstance(value, str):
                    changes[name] = value
                else:
                    logger.warning(f"Ignoring settings field {key}: expected a string")
            elif isinstance(default, bool):
                if isinstance(value, bool):
                    changes[name] = value
                else:
                    logger.warning(f"Ignoring settings field {key}: expected a boolean")
            elif isinstance(value, str):
                changes[name] = value
            else:
                logger.warning(f"Ignoring settings field {key}: expected a string")

        changes["custom_marks"] = MarksPerType.from_dict(data.get("customMarks"), fill_defaults=True)
        return replace(settings, **changes)
