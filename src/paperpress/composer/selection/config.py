"""
Module: composer.selection.config

Purpose:
    CompositionRequest: everything one composition needs, passed in as
    an explicit value instead of being read from wizard state.

Key Classes:
    - CompositionRequest: Immutable request validated on construction

Dependencies:
    - dataclasses (std)
    - paperpress.core.models: SectionTargets, Template

Used By:
    - composer.selection.engine: CompositionEngine.compose()
    - composer.controller: build_paper()
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Optional, Union

from paperpress.core.models import Difficulty, SectionTargets, Template

from .difficulty import normalise_difficulty


@dataclass(frozen=True)
class CompositionRequest:
    """
    Request to compose a paper (immutable).

    Attributes:
        class_id: Class identifier, e.g. "9th"; empty ids compose nothing
        subject_id: Subject identifier, e.g. "chemistry"
        chapter_ids: Chapters to draw from, in pool order
        targets: Questions to draw per type
        difficulty: "easy", "medium", "hard" or "all"; unknown values
            are treated as "all"
        seed: Seed for this composition; None uses the engine's source

    Example:
        >>> request = CompositionRequest(
        ...     class_id="9th",
        ...     subject_id="chemistry",
        ...     chapter_ids=("9_chem_ch1",),
        ...     targets=SectionTargets(mcq=12, short=8, long=3),
        ... )
        >>> request.total_requested
        23
    """

    class_id: str
    subject_id: str
    chapter_ids: tuple[str, ...] = ()
    targets: SectionTargets = SectionTargets()
    difficulty: Union[str, Difficulty] = "all"
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        """Normalise request on construction."""
        # Accept any iterable but store a tuple so the request stays hashable
        if not isinstance(self.chapter_ids, tuple):
            object.__setattr__(self, "chapter_ids", tuple(self.chapter_ids))

    @property
    def difficulty_filter(self) -> Optional[Difficulty]:
        """Normalised difficulty, None meaning no filtering."""
        return normalise_difficulty(self.difficulty)

    @property
    def total_requested(self) -> int:
        return self.targets.total

    def with_targets(self, targets: SectionTargets) -> CompositionRequest:
        return replace(self, targets=targets)

    @classmethod
    def from_template(
        cls,
        template: Template,
        class_id: str,
        subject_id: str,
        chapter_ids: Iterable[str],
        difficulty: Union[str, Difficulty] = "all",
        seed: Optional[int] = None,
    ) -> CompositionRequest:
        """
        Build a request that draws each section's total_questions.

        attempt_count on the template is print-only and is ignored here.
        """
        return cls(
            class_id=class_id,
            subject_id=subject_id,
            chapter_ids=tuple(chapter_ids),
            targets=template.targets,
            difficulty=difficulty,
            seed=seed,
        )
