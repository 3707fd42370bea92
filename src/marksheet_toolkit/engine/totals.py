"""
Module: engine.totals

Purpose:
    Per-student totals. A main-question total sums the student's set marks
    for that question, or only the best N of them when a selection rule
    exists. The grand total sums main-question totals in sheet order.

Key Functions:
    - main_total(): Total of one student for one main question
    - grand_total(): Total of one student across all main questions

Design Notes:
    Absence is NOT handled here. Callers substitute the absent marker
    instead of calling these functions for absent students (see
    engine.report). If called anyway they return a number computed from
    whatever marks are stored.

Used By:
    - engine.sheet.ExamSheet (delegating methods)
    - engine.report.build_report
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from marksheet_toolkit.core.models import MainQuestion

if TYPE_CHECKING:
    from .sheet import ExamSheet


def main_total(sheet: ExamSheet, roll_no: int, main_question: MainQuestion) -> float:
    """
    Total of one student for one main question.

    Unset cells are excluded, not counted as zero. With a rule of N the
    values are sorted descending and the first min(N, count) are summed;
    without a rule every set value is summed.

    Args:
        sheet: Sheet holding marks and rules
        roll_no: Student roll number
        main_question: Question to total

    Returns:
        Plain float sum (0.0 when nothing is set)

    Example:
        >>> # Q1 has A-D, rule best 3, marks 5/4/3/2
        >>> main_total(sheet, 101, sheet.get_question("Q1"))
        12.0
    """
    values = sheet.set_values(roll_no, main_question)
    rule = sheet.get_rule(main_question.label)
    if rule is not None:
        values = rule.pick(values)
    return float(sum(values))


def grand_total(sheet: ExamSheet, roll_no: int) -> float:
    """
    Sum of main_total over all main questions in sheet order.

    Rules apply strictly within their own question. Precondition: the
    student is not absent; absent students have no grand total.

    Args:
        sheet: Sheet holding questions, marks and rules
        roll_no: Student roll number

    Returns:
        Grand total as a float
    """
    return float(sum(main_total(sheet, roll_no, question) for question in sheet.questions))
