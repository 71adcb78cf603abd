"""
Unit tests for the composition engine and top-up.
"""

import logging

import pytest

from paperpress.composer.bank import QuestionBank
from paperpress.composer.selection import (
    CompositionEngine,
    CompositionRequest,
    SeededRandomSource,
    compose,
    shortfalls,
    top_up,
)
from paperpress.core.models import Difficulty, QuestionType, SectionTargets, Selection


BOTH_CHAPTERS = ("9_chem_ch1", "9_chem_ch2")


def _request(**overrides) -> CompositionRequest:
    fields = dict(
        class_id="9th",
        subject_id="chemistry",
        chapter_ids=BOTH_CHAPTERS,
        targets=SectionTargets(mcq=4, short=3, long=2),
    )
    fields.update(overrides)
    return CompositionRequest(**fields)


@pytest.fixture
def twelve_bank() -> QuestionBank:
    """One chapter with twelve short questions q1..q12."""
    records = [
        {"id": f"q{i}", "questionText": f"Question {i}", "difficulty": "medium"}
        for i in range(1, 13)
    ]
    return QuestionBank.from_subjects({
        ("10th", "physics"): {
            "chapters": [{"id": "ph1", "number": 1, "name": "Motion", "shortQuestions": records}]
        }
    })


class TestCompose:
    """Tests for CompositionEngine.compose."""

    def test_compose_when_enough_questions_then_meets_targets(self, bank):
        """Each type gets exactly its target when the pools are large enough."""
        # Act
        selection = CompositionEngine(bank, SeededRandomSource(1)).compose(_request())

        # Assert
        assert (len(selection.mcq_ids), len(selection.short_ids), len(selection.long_ids)) == (4, 3, 2)

    def test_compose_when_ids_returned_then_no_duplicates_and_from_pool(self, bank):
        """Every drawn id is unique and comes from the requested chapters."""
        # Act
        selection = CompositionEngine(bank, SeededRandomSource(9)).compose(
            _request(targets=SectionTargets(mcq=10, short=7, long=3))
        )

        # Assert
        pool = {q.id for q in bank.list_questions("9th", "chemistry", BOTH_CHAPTERS, QuestionType.MCQ)}
        assert set(selection.mcq_ids) == pool
        assert len(set(selection.short_ids)) == 7

    def test_compose_when_easy_mcqs_under_supplied_then_returns_all_five(self, bank):
        """Five easy MCQs in the pool, ten requested."""
        # Act
        selection = CompositionEngine(bank, SeededRandomSource(3)).compose(
            _request(targets=SectionTargets(mcq=10), difficulty="easy")
        )

        # Assert
        assert len(selection.mcq_ids) == 5
        assert len(set(selection.mcq_ids)) == 5
        for question_id in selection.mcq_ids:
            assert bank.get_question("9th", "chemistry", question_id).difficulty is Difficulty.EASY

    def test_compose_when_chapter_ids_empty_then_empty_selection(self, bank):
        """No chapters means nothing to draw from."""
        selection = CompositionEngine(bank).compose(_request(chapter_ids=()))
        assert selection == Selection(mcq_ids=(), short_ids=(), long_ids=())

    def test_compose_when_class_unknown_then_empty_selection(self, bank):
        """An unknown class yields empty pools, not an error."""
        selection = CompositionEngine(bank).compose(_request(class_id="12th"))
        assert selection == Selection.empty()

    @pytest.mark.parametrize("class_id,subject_id", [("", "chemistry"), ("9th", "")])
    def test_compose_when_class_or_subject_empty_then_empty_selection(
        self, bank, class_id, subject_id
    ):
        """Empty ids never raise; compose and top-up agree."""
        # Act
        selection = compose(
            bank, class_id, subject_id, ["9_chem_ch1"], SectionTargets(mcq=2)
        )
        ids = top_up(
            bank, ["x"], class_id, subject_id, ["9_chem_ch1"], 2, "all", QuestionType.MCQ
        )

        # Assert
        assert selection == Selection.empty()
        assert ids == ["x"]

    def test_compose_when_mcqs_short_then_other_types_unaffected(self, bank):
        """A shortage of one type never borrows from another."""
        # Act
        selection = CompositionEngine(bank, SeededRandomSource(2)).compose(
            _request(targets=SectionTargets(mcq=50, short=2, long=1))
        )

        # Assert
        assert len(selection.mcq_ids) == 10
        assert len(selection.short_ids) == 2
        assert len(selection.long_ids) == 1

    def test_compose_when_same_seed_then_same_selection(self, bank):
        """The seed fixes the draw regardless of worker count."""
        first = CompositionEngine(bank, max_workers=3).compose(_request(seed=77))
        second = CompositionEngine(bank, max_workers=1).compose(_request(seed=77))
        assert first == second

    def test_compose_when_under_supplied_then_logs_warning(self, bank, caplog):
        """A short pool is reported in the log."""
        with caplog.at_level(logging.WARNING):
            CompositionEngine(bank).compose(_request(targets=SectionTargets(long=9)))
        assert "Only 3 of 9 long" in caplog.text

    def test_compose_when_zero_targets_then_nothing_fetched(self, scripted_source):
        """Pools are only read for types with a non-zero target."""
        class RecordingBank:
            def __init__(self):
                self.calls = []

            def list_questions(self, class_id, subject_id, chapter_ids, question_type):
                self.calls.append(question_type)
                return []

        recorder = RecordingBank()
        CompositionEngine(recorder, scripted_source([0.5])).compose(
            _request(targets=SectionTargets(short=2))
        )
        assert recorder.calls == [QuestionType.SHORT]

    def test_init_when_zero_workers_then_raises_error(self, bank):
        """The worker pool needs at least one thread."""
        with pytest.raises(ValueError, match="max_workers"):
            CompositionEngine(bank, max_workers=0)

    def test_compose_function_when_called_then_matches_engine(self, bank):
        """The module-level compose() draws the same ids as the engine."""
        # Act
        selection = compose(
            bank, "9th", "chemistry", BOTH_CHAPTERS, SectionTargets(short=2),
            "all", SeededRandomSource(4),
        )

        # Assert
        expected = CompositionEngine(bank, SeededRandomSource(4)).compose(
            _request(targets=SectionTargets(short=2))
        )
        assert selection == expected


class TestTopUp:
    """Tests for top-up mode."""

    def test_top_up_when_pool_has_ten_more_then_prefix_kept_and_three_added(self, twelve_bank):
        """Existing ids stay first and only new ids are appended."""
        # Act
        ids = top_up(
            twelve_bank, ["q1", "q2"], "10th", "physics", ["ph1"], 3, "all",
            QuestionType.SHORT, SeededRandomSource(8),
        )

        # Assert
        assert len(ids) == 5
        assert ids[:2] == ["q1", "q2"]
        assert len(set(ids[2:])) == 3
        assert not set(ids[2:]) & {"q1", "q2"}

    @pytest.mark.parametrize("seed", range(5))
    def test_top_up_when_any_seed_then_no_duplicates(self, twelve_bank, seed):
        """Asking for more than the pool holds yields the whole pool once."""
        existing = ["q12", "q3", "q7"]
        ids = CompositionEngine(twelve_bank).top_up(
            existing, "10th", "physics", ["ph1"], 20, "all", QuestionType.SHORT, seed=seed
        )
        assert ids[:3] == existing
        assert len(ids) == len(set(ids)) == 12

    def test_top_up_when_existing_has_duplicates_then_first_occurrence_kept(self, twelve_bank):
        """Repeated existing ids collapse to their first position."""
        ids = CompositionEngine(twelve_bank, SeededRandomSource(1)).top_up(
            ["q2", "q1", "q2"], "10th", "physics", ["ph1"], 1, "all", QuestionType.SHORT
        )
        assert ids[:2] == ["q2", "q1"]
        assert len(ids) == 3

    def test_top_up_when_count_zero_then_existing_unchanged(self, twelve_bank):
        """A zero count leaves the list as it was."""
        ids = CompositionEngine(twelve_bank).top_up(
            ["q5"], "10th", "physics", ["ph1"], 0, "all", QuestionType.SHORT
        )
        assert ids == ["q5"]

    def test_top_up_when_existing_id_not_in_pool_then_still_kept(self, twelve_bank):
        """Custom ids outside the bank survive a top-up."""
        ids = CompositionEngine(twelve_bank, SeededRandomSource(1)).top_up(
            ["custom_x"], "10th", "physics", ["ph1"], 2, "all", QuestionType.SHORT
        )
        assert ids[0] == "custom_x"
        assert len(ids) == 3

    def test_top_up_selection_when_lists_partial_then_filled_to_targets(self, bank):
        """Each type list is topped up to its own target."""
        # Arrange
        existing = Selection(mcq_ids=("9_chem_ch1_mcq_3",), long_ids=("9_chem_ch1_long_1",))
        request = _request(targets=SectionTargets(mcq=3, short=2, long=1), seed=11)

        # Act
        result = CompositionEngine(bank).top_up_selection(existing, request)

        # Assert
        assert result.mcq_ids[0] == "9_chem_ch1_mcq_3"
        assert len(result.mcq_ids) == 3
        assert len(result.short_ids) == 2
        assert result.long_ids == ("9_chem_ch1_long_1",)


class TestShortfalls:
    """Tests for shortfalls()."""

    def test_shortfalls_when_targets_met_then_empty(self):
        """No entry when a type is fully supplied."""
        selection = Selection(mcq_ids=("a", "b"))
        assert shortfalls(selection, SectionTargets(mcq=2)) == {}

    def test_shortfalls_when_under_supplied_then_reports_gap(self):
        """Only the types below target are reported, with the gap."""
        selection = Selection(mcq_ids=("a",), long_ids=("l",))
        gaps = shortfalls(selection, SectionTargets(mcq=5, short=2, long=1))
        assert gaps == {QuestionType.MCQ: 4, QuestionType.SHORT: 2}
