"""
Unit Tests for Schema Validation

Tests for the validator module.
"""

import pytest

from paperpress.core.schemas.validator import (
    ValidationError,
    validate_export_payload,
    validate_subject,
    validate_template,
)


class TestValidateSubject:
    """Tests for validate_subject function."""

    def test_validate_when_valid_then_passes(self, subject_data):
        validate_subject(subject_data)

    def test_validate_when_chapters_missing_then_raises_error(self):
        with pytest.raises(ValidationError):
            validate_subject({"mcqs": []})

    def test_validate_when_chapter_lacks_id_then_reports_path(self, subject_data):
        # Arrange
        del subject_data["chapters"][1]["id"]

        # Act
        with pytest.raises(ValidationError) as exc_info:
            validate_subject(subject_data)

        # Assert
        assert exc_info.value.path == "chapters.1"
        assert exc_info.value.errors


class TestValidateTemplate:
    @pytest.fixture
    def template_data(self) -> dict:
        return {
            "id": "9th_chemistry_full_book",
            "name": "Full Book Paper",
            "category": "full_book",
            "totalMarks": 60,
            "timeAllowed": "2 Hours",
            "sections": [
                {"type": "mcq", "totalQuestions": 12, "attemptCount": 12, "marksPerQuestion": 1},
                {"type": "short", "totalQuestions": 8, "attemptCount": 5, "marksPerQuestion": 2},
            ],
        }

    def test_validate_when_valid_then_passes(self, template_data):
        validate_template(template_data)

    def test_validate_when_attempt_exceeds_total_then_raises_error(self, template_data):
        template_data["sections"][1]["attemptCount"] = 9
        with pytest.raises(ValidationError, match="attemptCount"):
            validate_template(template_data)

    def test_validate_when_category_unknown_then_raises_error(self, template_data):
        template_data["category"] = "weekly"
        with pytest.raises(ValidationError):
            validate_template(template_data)


class TestValidateExportPayload:
    @pytest.fixture
    def payload(self) -> dict:
        return {
            "settings": {
                "instituteName": "City School",
                "date": "2026-03-01",
                "timeAllowed": "2 Hours",
                "classId": "9th",
                "subject": "chemistry",
                "customMarks": {"mcq": 1, "short": 2, "long": 5},
            },
            "mcqs": [{
                "id": "9_chem_ch1_mcq_1", "type": "mcq", "questionText": "?",
                "difficulty": "easy", "options": ["a", "b"], "correctOption": 0,
            }],
            "shorts": [],
            "longs": [],
            "editedQuestions": {},
            "questionOrder": {"mcqs": ["9_chem_ch1_mcq_1"], "shorts": [], "longs": []},
        }

    def test_validate_when_valid_then_passes(self, payload):
        validate_export_payload(payload)

    def test_validate_when_order_repeats_id_then_raises_error(self, payload):
        payload["questionOrder"]["mcqs"] = ["a", "a"]
        with pytest.raises(ValidationError):
            validate_export_payload(payload)

    def test_validate_when_custom_marks_missing_then_raises_error(self, payload):
        del payload["settings"]["customMarks"]
        with pytest.raises(ValidationError, match="customMarks"):
            validate_export_payload(payload)
