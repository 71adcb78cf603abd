"""
Unit tests for ComposerConfig and PaperSettings.
"""

import datetime
import logging
from pathlib import Path

import pytest

from paperpress.composer import ComposerConfig, PaperSettings
from paperpress.core.models import DEFAULT_MARKS, MarksPerType


class TestComposerConfig:
    """Tests for ComposerConfig dataclass."""

    def test_init_when_path_is_string_then_coerced(self):
        config = ComposerConfig(bank_path="data/bank")
        assert config.bank_path == Path("data/bank")
        assert config.max_workers == 3
        assert config.validate_schema is True

    def test_init_when_workers_zero_then_raises_error(self, tmp_path):
        with pytest.raises(ValueError, match="max_workers"):
            ComposerConfig(bank_path=tmp_path, max_workers=0)


class TestPaperSettings:
    """Tests for PaperSettings dataclass."""

    def test_init_when_defaults_then_today_and_default_marks(self):
        settings = PaperSettings()
        assert settings.date == datetime.date.today().isoformat()
        assert settings.custom_marks == DEFAULT_MARKS

    def test_to_dict_when_called_then_camel_case_keys(self):
        # Act
        d = PaperSettings(institute_name="City School", show_watermark=True).to_dict()

        # Assert
        assert d["instituteName"] == "City School"
        assert d["showWatermark"] is True
        assert d["customMarks"] == {"mcq": 1, "short": 2, "long": 5}

    def test_from_dict_when_round_tripped_then_equal(self):
        settings = PaperSettings(title="Final", date="2024-05-01", custom_marks=MarksPerType(2, 3, 6))
        assert PaperSettings.from_dict(settings.to_dict()) == settings

    def test_from_dict_when_field_has_wrong_type_then_default_kept(self, caplog):
        # Act
        with caplog.at_level(logging.WARNING):
            settings = PaperSettings.from_dict(
                {"title": 5, "showLogo": "yes", "timeAllowed": "90 Minutes"}
            )

        # Assert
        assert settings.title == ""
        assert settings.show_logo is True
        assert settings.time_allowed == "90 Minutes"
        assert "showLogo" in caplog.text

    def test_from_dict_when_marks_partial_then_defaults_fill(self):
        settings = PaperSettings.from_dict({"customMarks": {"long": "10", "short": None}})
        assert settings.custom_marks == MarksPerType(mcq=1, short=0, long=10)

    @pytest.mark.parametrize("data", [None, [], "settings"])
    def test_from_dict_when_not_mapping_then_defaults(self, data):
        assert PaperSettings.from_dict(data).time_allowed == "2 Hours"
