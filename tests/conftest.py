import pytest
import sys
from pathlib import Path

# Add src to sys.path so we can import marksheet_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from marksheet_toolkit.engine import ExamSheet


# Common test fixtures
@pytest.fixture
def empty_sheet() -> ExamSheet:
    """Return a sheet with no roster and no questions."""
    return ExamSheet()


@pytest.fixture
def q1_sheet() -> ExamSheet:
    """
    Sheet with Q1 = A, B, C, D (max 5 each) and students 101-103.

    Student 101 has A=5, B=4, C=3, D=2. No rule is applied.
    """
    sheet = ExamSheet()
    sheet.generate_roster(101, 103)
    sheet.add_main_question("Q1", sub_count=4, max_marks=5)
    for sub_label, raw in zip("ABCD", ["5", "4", "3", "2"]):
        sheet.set_mark(101, "Q1", sub_label, raw)
    return sheet


@pytest.fixture
def sample_payload() -> dict:
    """Flattened payload as exchanged with the surrounding API."""
    return {
        "questions": [
            {"label": "Q1.A", "max_marks": 5},
            {"label": "Q1.B", "max_marks": 5},
            {"label": "Q1.C", "max_marks": 5},
            {"label": "Q2.A", "max_marks": 10},
        ],
        "students": [
            {"roll_no": 101, "absent": False, "marks": {"Q1.A": 5, "Q1.B": 4, "Q1.C": 1, "Q2.A": 7}},
            {"roll_no": 102, "absent": True, "marks": {"Q1.A": 3, "Q1.B": None, "Q1.C": None, "Q2.A": None}},
            {"roll_no": 103, "absent": False, "marks": {"Q1.A": None, "Q1.B": 2, "Q1.C": None, "Q2.A": 9.5}},
        ],
        "question_rules": {"Q1": {"mainLabel": "Q1", "minToCount": 2, "outOf": 3}},
        "is_locked": False,
        "max_total_override": None,
    }
