"""
Module: engine.report

Purpose:
    Build per-student results for a whole sheet. This is where absence is
    handled: absent students get the configured marker ("AB") in place of
    every total, and the aggregation functions are never called for them.

Key Functions:
    - build_report(): Results for every student plus sheet maxima
    - format_report(): Plain-text table of a report

Key Classes:
    - StudentResult: Totals (or absent markers) for one student
    - SheetReport: All results with the three maxima
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Dict, Optional, Tuple, Union

from .sheet import ExamSheet
from .totals import grand_total, main_total

Score = Union[float, str]


@dataclass(frozen=True)
class StudentResult:
    """
    Totals of one student (immutable).

    Attributes:
        roll_no: Student roll number
        absent: Whether the student was absent
        main_totals: Main question label -> total, or absent marker
        grand_total: Grand total, or absent marker
    """

    roll_no: int
    absent: bool
    main_totals: Dict[str, Score]
    grand_total: Score


@dataclass(frozen=True)
class SheetReport:
    """
    Result of aggregating a sheet (immutable).

    Attributes:
        question_labels: Main question labels in sheet order
        results: One StudentResult per student, ascending roll number
        max_total: Nominal maximum
        computed_max: Rule-adjusted maximum
        displayed_max: Rule-adjusted maximum after the optional override
        rule_descriptions: Main question label -> "best N of K"

    Invariants:
        - computed_max <= max_total
        - displayed_max <= computed_max
    """

    question_labels: Tuple[str, ...]
    results: Tuple[StudentResult, ...]
    max_total: float
    computed_max: float
    displayed_max: float
    rule_descriptions: Dict[str, str]

    @cached_property
    def absent_count(self) -> int:
        return sum(1 for result in self.results if result.absent)

    @cached_property
    def class_average(self) -> Optional[float]:
        """Mean grand total of present students, None if nobody was present."""
        present = [result.grand_total for result in self.results if not result.absent]
        if not present:
            return None
        return sum(present) / len(present)

    def get_result(self, roll_no: int) -> Optional[StudentResult]:
        for result in self.results:
            if result.roll_no == roll_no:
                return result
        return None


def build_report(sheet: ExamSheet, override: Optional[float] = None) -> SheetReport:
    """
    Aggregate every student of a sheet.

    Args:
        sheet: Sheet to report on
        override: Optional operator cap for the displayed maximum

    Returns:
        SheetReport with totals and maxima
    """
    marker = sheet.config.absent_marker
    questions = sheet.questions
    results = []
    for student in sheet.students:
        if student.absent:
            results.append(StudentResult(
                roll_no=student.roll_no,
                absent=True,
                main_totals={question.label: marker for question in questions},
                grand_total=marker,
            ))
            continue
        results.append(StudentResult(
            roll_no=student.roll_no,
            absent=False,
            main_totals={
                question.label: main_total(sheet, student.roll_no, question)
                for question in questions
            },
            grand_total=grand_total(sheet, student.roll_no),
        ))

    return SheetReport(
        question_labels=tuple(question.label for question in questions),
        results=tuple(results),
        max_total=sheet.max_total(),
        computed_max=sheet.computed_grand_max(),
        displayed_max=sheet.displayed_max(override),
        rule_descriptions={label: rule.description for label, rule in sheet.rules.items()},
    )


def _cell(value: Score) -> str:
    if isinstance(value, str):
        return value
    return f"{value:g}"


def format_report(report: SheetReport) -> str:
    """
    Render a report as a fixed-width text table.

    Columns are the roll number, one column per main question (with its
    rule in the header when one applies) and the grand total.
    """
    headers = ["Roll"]
    for label in report.question_labels:
        rule = report.rule_descriptions.get(label)
        headers.append(f"{label} ({rule})" if rule else label)
    headers.append(f"Total /{_cell(report.displayed_max)}")

    rows = [
        [str(result.roll_no)]
        + [_cell(result.main_totals[label]) for label in report.question_labels]
        + [_cell(result.grand_total)]
        for result in report.results
    ]

    widths = [len(header) for header in headers]
    for row in rows:
        widths = [max(width, len(cell)) for width, cell in zip(widths, row)]

    lines = ["  ".join(cell.rjust(width) for cell, width in zip(headers, widths))]
    lines.append("  ".join("-" * width for width in widths))
    for row in rows:
        lines.append("  ".join(cell.rjust(width) for cell, width in zip(row, widths)))

    average = report.class_average
    lines.append("")
    lines.append(
        f"Nominal max: {_cell(report.max_total)}  "
        f"Rule-adjusted max: {_cell(report.computed_max)}  "
        f"Displayed max: {_cell(report.displayed_max)}"
    )
    lines.append(
        f"Students: {len(report.results)}  Absent: {report.absent_count}  "
        f"Average: {'-' if average is None else f'{average:.2f}'}"
    )
    return "\n".join(lines)
