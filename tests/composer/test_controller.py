"""
Tests for the paper build pipeline.
"""

import json

import pytest

from paperpress.composer import (
    BuildError,
    ComposerConfig,
    CompositionRequest,
    PaperSettings,
    build_paper,
    settings_for_template,
)
from paperpress.core.models import (
    MarksPerType,
    QuestionType,
    SectionTargets,
    Selection,
    Template,
    TemplateCategory,
    TemplateSection,
)


BOTH_CHAPTERS = ("9_chem_ch1", "9_chem_ch2")


@pytest.fixture
def config(bank_dir):
    return ComposerConfig(bank_path=bank_dir, seed=21)


@pytest.fixture
def request_():
    return CompositionRequest(
        class_id="9th",
        subject_id="chemistry",
        chapter_ids=BOTH_CHAPTERS,
        targets=SectionTargets(mcq=5, short=3, long=2),
    )


class TestBuildPaper:
    """Tests for build_paper()."""

    def test_build_when_bank_on_disk_then_complete_result(self, config, request_):
        """A bank on disk builds a full paper with matching totals."""
        # Act
        result = build_paper(config, request_, paper_id="paper_42")

        # Assert
        assert result.is_complete
        assert result.totals.question_count == 10
        assert result.totals.total_marks == 5 + 6 + 10
        assert result.record["id"] == "paper_42"
        assert len(result.payload["mcqs"]) == 5

    def test_build_when_same_seed_then_same_selection(self, config, request_):
        """A fixed seed gives a repeatable paper."""
        assert build_paper(config, request_).selection == build_paper(config, request_).selection

    def test_build_when_in_memory_bank_given_then_used(self, tmp_path, bank, request_):
        """A passed-in accessor replaces the bank path."""
        config = ComposerConfig(bank_path=tmp_path / "unused", seed=1)
        result = build_paper(config, request_, bank=bank)
        assert result.totals.question_count == 10

    def test_build_when_under_supplied_then_shortfall_warning(self, config, request_):
        """Missing questions are kept per type and reported once."""
        # Act
        result = build_paper(config, request_.with_targets(SectionTargets(long=6)))

        # Assert
        assert not result.is_complete
        assert result.shortfalls == {QuestionType.LONG: 3}
        assert result.warnings == ("Shortfall: 3 long question(s) fewer than requested (6)",)
        assert len(result.selection.long_ids) == 3

    def test_build_when_header_total_wrong_then_mismatch_warning(self, config, request_):
        """Completeness follows the shortfalls, not the warning list."""
        result = build_paper(config, request_, PaperSettings(total_marks=99))
        assert result.is_complete
        assert result.shortfalls == {}
        assert any("Total marks mismatch" in w for w in result.warnings)

    def test_build_when_existing_selection_then_topped_up(self, config, request_):
        """An existing selection keeps its order and custom questions."""
        # Arrange
        existing = Selection(mcq_ids=("9_chem_ch2_mcq_4", "custom_a"))

        # Act
        result = build_paper(
            config, request_, existing=existing,
            edited_questions={"custom_a": {"questionText": "Mine"}},
        )

        # Assert
        assert result.selection.mcq_ids[:2] == ("9_chem_ch2_mcq_4", "custom_a")
        assert len(result.selection.mcq_ids) == 5
        assert result.payload["mcqs"][1]["questionText"] == "Mine"

    def test_build_when_output_dir_given_then_files_written(self, config, request_, tmp_path):
        """Payload and record are written as JSON."""
        # Act
        result = build_paper(config, request_, output_dir=tmp_path / "out")

        # Assert
        assert json.loads(result.payload_path.read_text(encoding="utf-8")) == result.payload
        assert json.loads(result.record_path.read_text(encoding="utf-8"))["questionCount"] == 10

    def test_build_when_bank_file_corrupt_then_build_error(self, bank_dir, request_):
        """Unreadable bank files surface as BuildError."""
        (bank_dir / "9th" / "chemistry.json").write_text("{", encoding="utf-8")
        with pytest.raises(BuildError, match="question bank"):
            build_paper(ComposerConfig(bank_path=bank_dir), request_)

    def test_build_when_subject_missing_then_empty_paper(self, config):
        """An unknown subject builds an empty, incomplete paper."""
        request = CompositionRequest("9th", "biology", ("bio_ch1",), SectionTargets(mcq=2))
        result = build_paper(config, request)
        assert result.totals.question_count == 0
        assert not result.is_complete


class TestSettingsForTemplate:
    """Tests for settings_for_template()."""

    @pytest.fixture
    def template(self):
        return Template(
            id="9th_chemistry_chapter_wise",
            name="Chapter Wise Test",
            category=TemplateCategory.CHAPTER_WISE,
            sections=(TemplateSection("mcq", 3, 3, 1), TemplateSection("long", 1, 1, 4)),
            total_marks=7,
            time_allowed="30 Minutes",
        )

    def test_settings_when_no_base_then_from_template(self, template):
        """Without base settings every field comes from the template."""
        settings = settings_for_template(template)
        assert settings.time_allowed == "30 Minutes"
        assert settings.total_marks == 7
        assert settings.custom_marks == MarksPerType(mcq=1, short=2, long=4)

    def test_settings_when_base_given_then_user_fields_kept(self, template):
        """User-set fields win over the template."""
        base = PaperSettings(time_allowed="45 Minutes", institute_name="City School")
        settings = settings_for_template(template, base)
        assert settings.time_allowed == "45 Minutes"
        assert settings.total_marks == 7
        assert settings.institute_name == "City School"
