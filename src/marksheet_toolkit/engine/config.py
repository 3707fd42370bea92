"""
Module: engine.config

Purpose:
    Configuration dataclass for exam sheets. Immutable configuration with
    validation on construction.

Key Classes:
    - SheetConfig: Defaults and limits used by sheet editing and reporting

Dependencies:
    - dataclasses (std)

Used By:
    - engine.sheet.ExamSheet
    - engine.report.build_report
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SheetConfig:
    """
    Configuration for an exam sheet (immutable).

    Attributes:
        default_sub_max_marks: Maximum marks given to sub-questions created
            with a new main question when none is specified
        max_initial_sub_questions: Cap on sub-questions created together
            with a main question
        max_sub_questions: Hard cap of sub-questions per main question (A-Z)
        roster_warn_size: Roster size above which generate_roster warns
        mark_decimals: Decimal places kept on stored marks
        absent_marker: Sentinel shown instead of totals for absent students

    Invariants:
        - default_sub_max_marks > 0
        - 1 <= max_initial_sub_questions <= max_sub_questions <= 26
        - mark_decimals >= 0

    Example:
        >>> config = SheetConfig(default_sub_max_marks=5)
        >>> config.absent_marker
        'AB'
    """

    # Question authoring
    default_sub_max_marks: float = 2
    max_initial_sub_questions: int = 10
    max_sub_questions: int = 26

    # Roster generation
    roster_warn_size: int = 500

    # Mark entry
    mark_decimals: int = 2

    # Reporting
    absent_marker: str = "AB"

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.default_sub_max_marks <= 0:
            raise ValueError(f"default_sub_max_marks must be positive: {self.default_sub_max_marks}")
        if not (1 <= self.max_sub_questions <= 26):
            raise ValueError(f"max_sub_questions must be 1-26: {self.max_sub_questions}")
        if not (1 <= self.max_initial_sub_questions <= self.max_sub_questions):
            raise ValueError(
                f"max_initial_sub_questions ({self.max_initial_sub_questions}) must be "
                f"between 1 and max_sub_questions ({self.max_sub_questions})"
            )
        if self.roster_warn_size < 1:
            raise ValueError(f"roster_warn_size must be positive: {self.roster_warn_size}")
        if self.mark_decimals < 0:
            raise ValueError(f"mark_decimals must be non-negative: {self.mark_decimals}")
        if not self.absent_marker:
            raise ValueError("absent_marker cannot be empty")
