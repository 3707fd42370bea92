"""
Unit tests for SheetConfig.
"""

import pytest

from marksheet_toolkit.engine import ExamSheet, SheetConfig


class TestSheetConfig:
    """Tests for SheetConfig defaults and validation."""

    def test_defaults_when_constructed_then_documented_values(self):
        config = SheetConfig()
        assert config.default_sub_max_marks == 2
        assert config.max_initial_sub_questions == 10
        assert config.max_sub_questions == 26
        assert config.mark_decimals == 2
        assert config.absent_marker == "AB"

    def test_config_when_assigned_then_frozen(self):
        config = SheetConfig()
        with pytest.raises(AttributeError):
            config.mark_decimals = 3  # type: ignore

    @pytest.mark.parametrize("kwargs, message", [
        ({"default_sub_max_marks": 0}, "default_sub_max_marks"),
        ({"max_sub_questions": 27}, "max_sub_questions"),
        ({"max_initial_sub_questions": 0}, "max_initial_sub_questions"),
        ({"max_sub_questions": 5, "max_initial_sub_questions": 6}, "max_initial_sub_questions"),
        ({"roster_warn_size": 0}, "roster_warn_size"),
        ({"mark_decimals": -1}, "mark_decimals"),
        ({"absent_marker": ""}, "absent_marker"),
    ])
    def test_config_when_invalid_then_raises_value_error(self, kwargs, message):
        with pytest.raises(ValueError, match=message):
            SheetConfig(**kwargs)

    def test_sheet_when_custom_defaults_then_used_for_new_questions(self):
        """New main questions use the configured default maximum."""
        sheet = ExamSheet(SheetConfig(default_sub_max_marks=4, max_initial_sub_questions=3))
        question = sheet.add_main_question("Q1", sub_count=8)
        assert question.max_marks == (4, 4, 4)

    def test_sheet_when_sub_limit_lowered_then_add_sub_stops_early(self):
        sheet = ExamSheet(SheetConfig(max_sub_questions=2, max_initial_sub_questions=2))
        sheet.add_main_question("Q1", sub_count=2)
        with pytest.raises(Exception, match="limit reached"):
            sheet.add_sub_question("Q1")

    def test_sheet_when_one_decimal_then_marks_rounded_to_one(self):
        sheet = ExamSheet(SheetConfig(mark_decimals=1))
        sheet.add_student(1)
        sheet.add_main_question("Q1", max_marks=5)
        sheet.set_mark(1, "Q1", "A", "2.34")
        assert sheet.get_mark(1, "Q1", "A") == 2.3
