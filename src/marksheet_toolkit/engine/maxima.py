"""
Module: engine.maxima

Purpose:
    Sheet-wide ceilings, independent of the marks entered:

    - max_total(): nominal maximum, every sub-question at full marks,
      selection rules ignored
    - computed_grand_max(): rule-adjusted maximum, the best N sub-question
      maxima for ruled questions
    - displayed_max(): rule-adjusted maximum, optionally tightened by an
      operator-supplied override (it can never loosen the ceiling)

    computed_grand_max() <= max_total() always holds.

Used By:
    - engine.sheet.ExamSheet (delegating methods)
    - engine.report.build_report
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from marksheet_toolkit.core.models import MainQuestion

if TYPE_CHECKING:
    from .sheet import ExamSheet


def question_max(sheet: ExamSheet, main_question: MainQuestion) -> float:
    """
    Rule-adjusted ceiling of one main question.

    With a rule of N, sums the top min(N, count) sub-question maxima;
    otherwise sums them all. N larger than the sub-question count simply
    sums everything available.
    """
    maxes = list(main_question.max_marks)
    rule = sheet.get_rule(main_question.label)
    if rule is not None:
        maxes = rule.pick(maxes)
    return float(sum(maxes))


def max_total(sheet: ExamSheet) -> float:
    """Nominal maximum: sum of every sub-question maximum, rules ignored."""
    return float(sum(question.total_max_marks for question in sheet.questions))


def computed_grand_max(sheet: ExamSheet) -> float:
    """Rule-adjusted maximum summed across main questions."""
    return float(sum(question_max(sheet, question) for question in sheet.questions))


def displayed_max(sheet: ExamSheet, override: Optional[float] = None) -> float:
    """
    Maximum to show next to grand totals.

    Args:
        sheet: Sheet to measure
        override: Optional operator cap

    Returns:
        min(computed_grand_max, override) when override is given,
        else computed_grand_max
    """
    computed = computed_grand_max(sheet)
    if override is None:
        return computed
    return float(min(computed, override))
