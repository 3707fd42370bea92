"""
Unit Tests for Student and SelectionRule Models
"""

import pytest

from marksheet_toolkit.core.models.rules import SelectionRule
from marksheet_toolkit.core.models.students import Student


class TestStudent:
    """Tests for Student dataclass."""

    def test_present_when_called_then_not_absent(self):
        assert Student.present(101).absent is False

    def test_with_absent_when_called_then_copy_changed(self):
        student = Student.present(101)
        assert student.with_absent(True).absent is True
        assert student.absent is False

    def test_sort_when_unordered_then_ascending_roll(self):
        roster = sorted([Student(103), Student(101, absent=True), Student(102)])
        assert [s.roll_no for s in roster] == [101, 102, 103]

    @pytest.mark.parametrize("roll_no", ["101", 101.0, True])
    def test_init_when_not_integer_then_raises_error(self, roll_no):
        with pytest.raises(ValueError, match="must be an integer"):
            Student(roll_no)  # type: ignore


class TestSelectionRule:
    """Tests for SelectionRule dataclass."""

    def test_pick_when_more_values_than_n_then_top_n(self):
        rule = SelectionRule("Q1", min_to_count=3, out_of=4)
        assert rule.pick([5, 4, 3, 2]) == [5, 4, 3]

    def test_pick_when_fewer_values_than_n_then_all_without_padding(self):
        """N larger than the available values never pads with zeros."""
        rule = SelectionRule("Q1", min_to_count=3, out_of=3)
        assert rule.pick([2, 7]) == [7, 2]

    def test_pick_when_no_values_then_empty(self):
        assert SelectionRule("Q1", 2, 3).pick([]) == []

    def test_pick_when_unsorted_then_order_independent(self):
        rule = SelectionRule("Q1", 2, 4)
        assert sum(rule.pick([1, 9, 4, 6])) == sum(rule.pick([6, 4, 9, 1])) == 15

    def test_exceeds_when_n_larger_than_count_then_true(self):
        assert SelectionRule("Q1", 3, 3).exceeds(2) is True

    def test_exceeds_when_only_k_larger_then_true(self):
        assert SelectionRule("Q1", 1, 5).exceeds(4) is True

    def test_exceeds_when_within_count_then_false(self):
        assert SelectionRule("Q1", 2, 4).exceeds(4) is False

    def test_description_when_called_then_best_n_of_k(self):
        assert SelectionRule("Q1", 3, 5).description == "best 3 of 5"

    @pytest.mark.parametrize("n", [0, -1, 1.5, True])
    def test_init_when_invalid_n_then_raises_error(self, n):
        with pytest.raises(ValueError, match="min_to_count"):
            SelectionRule("Q1", n, 3)  # type: ignore

    def test_init_when_invalid_k_then_raises_error(self):
        with pytest.raises(ValueError, match="out_of"):
            SelectionRule("Q1", 1, 0)
