"""
Unit tests for ExamSheet roster, question schema and lock operations.
"""

import logging

import pytest

from marksheet_toolkit.core.models import MainQuestion, Student, SubQuestion
from marksheet_toolkit.engine import ExamSheet, SheetConfig, SheetError, SheetLockedError


class TestRoster:
    """Tests for roster operations."""

    def test_generate_when_valid_range_then_inclusive_present_students(self, empty_sheet):
        # Act
        empty_sheet.generate_roster(101, 105)

        # Assert
        assert [s.roll_no for s in empty_sheet.students] == [101, 102, 103, 104, 105]
        assert not any(s.absent for s in empty_sheet.students)

    def test_generate_when_single_roll_then_one_student(self, empty_sheet):
        empty_sheet.generate_roster(7, 7)
        assert empty_sheet.students == (Student(7),)

    def test_generate_when_start_after_end_then_raises_error(self, empty_sheet):
        with pytest.raises(SheetError, match="greater than"):
            empty_sheet.generate_roster(10, 5)

    def test_generate_when_not_integer_then_raises_error(self, empty_sheet):
        with pytest.raises(SheetError, match="must be integers"):
            empty_sheet.generate_roster(1.5, 5)  # type: ignore

    def test_generate_when_large_range_then_warns(self, caplog):
        sheet = ExamSheet(SheetConfig(roster_warn_size=3))
        with caplog.at_level(logging.WARNING, logger="marksheet_toolkit.engine.sheet"):
            sheet.generate_roster(1, 4)
        assert len(sheet.students) == 4
        assert "Generating 4 roster rows" in caplog.text

    def test_generate_when_replacing_then_drops_marks_of_removed_rolls(self, q1_sheet):
        """Marks of roll numbers that leave the roster are dropped."""
        q1_sheet.generate_roster(102, 104)
        q1_sheet.add_student(101)
        assert q1_sheet.get_mark(101, "Q1", "A") is None

    def test_generate_when_overlapping_then_keeps_marks_of_staying_rolls(self, q1_sheet):
        q1_sheet.generate_roster(100, 101)
        assert q1_sheet.get_mark(101, "Q1", "A") == 5

    def test_add_student_when_new_then_sorted_into_roster(self, q1_sheet):
        q1_sheet.add_student(50)
        assert [s.roll_no for s in q1_sheet.students] == [50, 101, 102, 103]

    def test_add_student_when_duplicate_then_raises_error(self, q1_sheet):
        with pytest.raises(SheetError, match="already exists"):
            q1_sheet.add_student(101)

    def test_add_student_when_not_integer_then_raises_error(self, q1_sheet):
        with pytest.raises(SheetError, match="must be an integer"):
            q1_sheet.add_student("104")  # type: ignore

    def test_remove_student_when_present_then_marks_dropped(self, q1_sheet):
        q1_sheet.remove_student(101)
        assert q1_sheet.get_student(101) is None
        assert q1_sheet.get_mark(101, "Q1", "A") is None

    def test_remove_student_when_missing_then_raises_error(self, q1_sheet):
        with pytest.raises(SheetError, match="not on the roster"):
            q1_sheet.remove_student(999)

    def test_toggle_absent_when_called_twice_then_restored(self, q1_sheet):
        assert q1_sheet.toggle_absent(101).absent is True
        assert q1_sheet.toggle_absent(101).absent is False

    def test_toggle_absent_when_absent_then_marks_retained(self, q1_sheet):
        """Absence suppresses contributions without deleting values."""
        q1_sheet.toggle_absent(101)
        assert q1_sheet.get_mark(101, "Q1", "A") == 5
        q1_sheet.toggle_absent(101)
        assert q1_sheet.main_total(101, "Q1") == 14

    def test_toggle_absent_when_unknown_roll_then_raises_error(self, q1_sheet):
        with pytest.raises(SheetError, match="not on the roster"):
            q1_sheet.toggle_absent(999)


class TestQuestionSchema:
    """Tests for main and sub-question authoring."""

    def test_add_main_when_lowercase_label_then_normalized(self, empty_sheet):
        question = empty_sheet.add_main_question("  q1 ", sub_count=3)
        assert question.label == "Q1"
        assert question.labels == ("A", "B", "C")
        assert question.max_marks == (2, 2, 2)

    def test_add_main_when_duplicate_then_raises_error(self, q1_sheet):
        """Duplicate main labels are rejected before reaching the engine."""
        with pytest.raises(SheetError, match="already exists"):
            q1_sheet.add_main_question("q1")

    def test_add_main_when_empty_label_then_raises_error(self, empty_sheet):
        with pytest.raises(SheetError, match="cannot be empty"):
            empty_sheet.add_main_question("   ")

    @pytest.mark.parametrize("label", ["Q1.1", "q.2", "."])
    def test_add_main_when_label_has_dot_then_raises_error(self, empty_sheet, label):
        """"." separates main and sub labels in stored sheets."""
        with pytest.raises(SheetError, match="cannot contain"):
            empty_sheet.add_main_question(label)

    @pytest.mark.parametrize("sub_count, expected", [(0, 1), (-3, 1), (4, 4), (40, 10)])
    def test_add_main_when_sub_count_out_of_range_then_limited(self, empty_sheet, sub_count, expected):
        question = empty_sheet.add_main_question("Q1", sub_count=sub_count)
        assert question.sub_count == expected

    def test_add_main_when_bad_max_then_raises_error(self, empty_sheet):
        with pytest.raises(SheetError, match="must be positive"):
            empty_sheet.add_main_question("Q1", max_marks=0)

    def test_add_main_when_added_then_keeps_sheet_order(self, q1_sheet):
        q1_sheet.add_main_question("Q3")
        q1_sheet.add_main_question("Q2")
        assert [q.label for q in q1_sheet.questions] == ["Q1", "Q3", "Q2"]

    def test_add_sub_when_called_then_next_letter_and_last_max(self, q1_sheet):
        sub = q1_sheet.add_sub_question("Q1")
        assert sub == SubQuestion("E", 5)
        assert q1_sheet.get_question("Q1").labels == ("A", "B", "C", "D", "E")

    def test_add_sub_when_last_max_fractional_then_rounded_whole(self, empty_sheet):
        empty_sheet.add_main_question("Q1", max_marks=2.6)
        assert empty_sheet.add_sub_question("Q1").max_marks == 3

    def test_add_sub_when_last_max_below_one_then_one(self, empty_sheet):
        empty_sheet.add_main_question("Q1", max_marks=0.4)
        assert empty_sheet.add_sub_question("Q1").max_marks == 1

    def test_add_sub_when_explicit_max_then_used(self, q1_sheet):
        assert q1_sheet.add_sub_question("Q1", max_marks=2.5).max_marks == 2.5

    def test_add_sub_when_z_reached_then_raises_error(self, empty_sheet):
        """At most 26 sub-questions (A-Z) per main question."""
        empty_sheet.add_main_question("Q1", sub_count=10)
        for _ in range(16):
            empty_sheet.add_sub_question("Q1")
        assert empty_sheet.get_question("Q1").labels[-1] == "Z"

        with pytest.raises(SheetError, match="limit reached"):
            empty_sheet.add_sub_question("Q1")

    def test_add_sub_when_unknown_question_then_raises_error(self, q1_sheet):
        with pytest.raises(SheetError, match="Unknown main question"):
            q1_sheet.add_sub_question("Q9")

    def test_set_sub_max_when_lowered_then_marks_clamped(self, q1_sheet):
        q1_sheet.set_sub_question_max("Q1", "A", 3)
        assert q1_sheet.get_mark(101, "Q1", "A") == 3
        assert q1_sheet.get_mark(101, "Q1", "D") == 2
        assert q1_sheet.max_total() == 18

    def test_set_sub_max_when_unknown_then_raises_error(self, q1_sheet):
        with pytest.raises(SheetError, match="Unknown sub-question"):
            q1_sheet.set_sub_question_max("Q1", "Z", 3)

    def test_remove_main_when_present_then_marks_and_rule_dropped(self, q1_sheet):
        q1_sheet.apply_rule("Q1", 2, 4)
        q1_sheet.remove_main_question("Q1")
        assert q1_sheet.questions == ()
        assert q1_sheet.rules == {}
        assert q1_sheet.get_mark(101, "Q1", "A") is None


class TestLock:
    """Tests for finalizing a sheet."""

    def test_lock_when_called_then_is_locked(self, q1_sheet):
        q1_sheet.lock()
        assert q1_sheet.is_locked is True

    @pytest.mark.parametrize("edit", [
        lambda s: s.generate_roster(1, 2),
        lambda s: s.add_student(200),
        lambda s: s.remove_student(101),
        lambda s: s.toggle_absent(101),
        lambda s: s.add_main_question("Q2"),
        lambda s: s.add_sub_question("Q1"),
        lambda s: s.set_sub_question_max("Q1", "A", 2),
        lambda s: s.remove_main_question("Q1"),
        lambda s: s.load_mark(101, "Q1", "A", 4),
        lambda s: s.restore_student(Student(200, absent=True)),
        lambda s: s.restore_question(MainQuestion("Q2", (SubQuestion("A", 3),))),
    ])
    def test_edit_when_locked_then_raises_locked_error(self, q1_sheet, edit):
        q1_sheet.lock()
        with pytest.raises(SheetLockedError, match="locked"):
            edit(q1_sheet)

    def test_load_mark_when_locked_then_stored_mark_unchanged(self, q1_sheet):
        """Saved-mark loading cannot bypass the lock."""
        q1_sheet.lock()
        with pytest.raises(SheetLockedError):
            q1_sheet.load_mark(101, "Q1", "A", 1)
        assert q1_sheet.get_mark(101, "Q1", "A") == 5

    def test_lock_when_locked_then_reads_still_work(self, q1_sheet):
        q1_sheet.lock()
        assert q1_sheet.grand_total(101) == 14
        assert q1_sheet.max_total() == 20
