import pytest
import sys
from pathlib import Path

# Add src to sys.path so we can import paperpress
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from paperpress.composer.bank import QuestionBank


CLASS_ID = "9th"
SUBJECT_ID = "chemistry"

# (chapter id, number, name, mcq difficulties, short difficulties, long difficulties)
CHAPTER_LAYOUT = [
    (
        "9_chem_ch1", 1, "Fundamentals of Chemistry",
        ["easy", "easy", "medium", "medium", "hard", "easy"],
        ["easy", "medium", "hard", "medium"],
        ["medium", "hard"],
    ),
    (
        "9_chem_ch2", 2, "Structure of Atoms",
        ["easy", "hard", "medium", "easy"],
        ["medium", "easy", "hard"],
        ["easy"],
    ),
]


def make_mcq(question_id: str, difficulty: str = "easy", text: str = "") -> dict:
    return {
        "id": question_id,
        "questionText": text or f"MCQ {question_id}?",
        "options": ["Alpha", "Beta", "Gamma", "Delta"],
        "correctOption": 1,
        "difficulty": difficulty,
    }


def make_written(question_id: str, difficulty: str = "easy", text: str = "") -> dict:
    return {
        "id": question_id,
        "questionText": text or f"Explain {question_id}.",
        "difficulty": difficulty,
        "marks": 2,
    }


def make_subject() -> dict:
    """Two-chapter chemistry bank with five easy MCQs in total."""
    chapters = []
    for chapter_id, number, name, mcqs, shorts, longs in CHAPTER_LAYOUT:
        chapters.append({
            "id": chapter_id,
            "number": number,
            "name": name,
            "mcqs": [make_mcq(f"{chapter_id}_mcq_{i}", d) for i, d in enumerate(mcqs, 1)],
            "shortQuestions": [
                make_written(f"{chapter_id}_short_{i}", d) for i, d in enumerate(shorts, 1)
            ],
            "longQuestions": [
                make_written(f"{chapter_id}_long_{i}", d) for i, d in enumerate(longs, 1)
            ],
        })
    return {"chapters": chapters}


class ScriptedRandomSource:
    """Random source that replays fixed values, cycling when exhausted."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def next(self) -> float:
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value


# Common test fixtures
@pytest.fixture
def subject_data() -> dict:
    """Raw content of 9th/chemistry.json."""
    return make_subject()


@pytest.fixture
def bank(subject_data) -> QuestionBank:
    """In-memory bank holding the 9th/chemistry subject."""
    return QuestionBank.from_subjects({(CLASS_ID, SUBJECT_ID): subject_data})


@pytest.fixture
def bank_dir(tmp_path: Path, subject_data) -> Path:
    """On-disk bank root with 9th/chemistry.json."""
    import json

    root = tmp_path / "bank"
    (root / CLASS_ID).mkdir(parents=True)
    (root / CLASS_ID / f"{SUBJECT_ID}.json").write_text(
        json.dumps(subject_data), encoding="utf-8"
    )
    return root


@pytest.fixture
def scripted_source():
    """Factory for ScriptedRandomSource."""
    return ScriptedRandomSource
