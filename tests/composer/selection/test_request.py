"""
Unit tests for CompositionRequest.
"""

import pytest

from paperpress.composer.selection import CompositionRequest
from paperpress.core.models import (
    Difficulty,
    SectionTargets,
    Template,
    TemplateCategory,
    TemplateSection,
)


class TestCompositionRequest:
    """Tests for CompositionRequest dataclass."""

    def test_init_when_valid_params_then_creates_request(self):
        # Act
        request = CompositionRequest(
            class_id="9th",
            subject_id="chemistry",
            chapter_ids=["9_chem_ch1"],
            targets=SectionTargets(mcq=12, short=8, long=3),
        )

        # Assert
        assert request.chapter_ids == ("9_chem_ch1",)
        assert request.total_requested == 23
        assert request.difficulty_filter is None

    @pytest.mark.parametrize("class_id,subject_id", [("", "chemistry"), ("9th", "")])
    def test_init_when_class_or_subject_empty_then_accepted(self, class_id, subject_id):
        """Empty ids are not an error; they simply compose nothing."""
        request = CompositionRequest(class_id=class_id, subject_id=subject_id)
        assert request.chapter_ids == ()

    def test_difficulty_filter_when_stale_value_then_none(self):
        request = CompositionRequest("9th", "chemistry", difficulty="very hard")
        assert request.difficulty_filter is None

    def test_difficulty_filter_when_valid_then_enum(self):
        request = CompositionRequest("9th", "chemistry", difficulty="Medium")
        assert request.difficulty_filter is Difficulty.MEDIUM

    def test_from_template_when_attempt_lower_than_total_then_targets_use_total(self):
        # Arrange
        template = Template(
            id="t",
            name="Half Book Paper",
            category=TemplateCategory.HALF_BOOK,
            sections=(
                TemplateSection("mcq", 6, 6, 1),
                TemplateSection("short", 4, 3, 2),
                TemplateSection("long", 2, 1, 5),
            ),
            total_marks=30,
            time_allowed="2 Hours",
        )

        # Act
        request = CompositionRequest.from_template(
            template, "9th", "chemistry", ["9_chem_ch1"], "easy", seed=5
        )

        # Assert
        assert request.targets == SectionTargets(mcq=6, short=4, long=2)
        assert request.seed == 5
        assert request.difficulty == "easy"

    def test_with_targets_when_called_then_new_request(self):
        request = CompositionRequest("9th", "chemistry")
        updated = request.with_targets(SectionTargets(long=2))
        assert updated.targets.long == 2
        assert request.targets.long == 0
