"""
Module: questions

Purpose:
    Provides the two-level question schema of an exam sheet: MainQuestion
    (e.g. "Q1") owning an ordered, append-only tuple of SubQuestion
    (e.g. "A", "B") each with its own maximum marks.

Key Functions:
    - MainQuestion.total_max_marks: Nominal maximum, always calculated
    - MainQuestion.find(label): Find a sub-question by letter
    - MainQuestion.append(sub): New MainQuestion with one more sub-question
    - next_sub_label(labels): Next letter after the highest one in use

Dependencies:
    - dataclasses (std)
    - string (std)

Used By:
    - engine.sheet.ExamSheet
    - engine.totals / engine.maxima
    - engine.payload
"""

from __future__ import annotations

import string
from dataclasses import dataclass, replace
from typing import Iterable, Iterator, Optional, Tuple


SUB_LABELS = string.ascii_uppercase


def next_sub_label(labels: Iterable[str]) -> Optional[str]:
    """
    Pick the label for a newly appended sub-question.

    Takes the letter after the highest letter already in use, skipping
    any label that is taken. Returns None once 'Z' has been passed.

    Args:
        labels: Existing sub-question labels of one main question

    Returns:
        Next free letter, or None when the A-Z range is exhausted

    Example:
        >>> next_sub_label(["A", "B"])
        'C'
        >>> next_sub_label([])
        'A'
        >>> next_sub_label(["Z"]) is None
        True
    """
    taken = set(labels)
    letters = [label for label in taken if label in SUB_LABELS and len(label) == 1]
    index = SUB_LABELS.index(max(letters)) + 1 if letters else 0
    while index < len(SUB_LABELS) and SUB_LABELS[index] in taken:
        index += 1
    if index >= len(SUB_LABELS):
        return None
    return SUB_LABELS[index]


@dataclass(frozen=True, slots=True)
class SubQuestion:
    """
    Lettered component of a main question (immutable).

    Attributes:
        label: Single uppercase letter "A".."Z"
        max_marks: Positive maximum score

    Invariants:
        - label is one letter A-Z
        - max_marks > 0
    """

    label: str
    max_marks: float

    def __post_init__(self) -> None:
        """Validate label and maximum on construction."""
        if len(self.label) != 1 or self.label not in SUB_LABELS:
            raise ValueError(f"Sub-question label must be a letter A-Z: {self.label!r}")
        if isinstance(self.max_marks, bool) or not self.max_marks > 0:
            raise ValueError(f"max_marks must be positive: {self.max_marks!r}")

    def __repr__(self) -> str:
        return f"SubQuestion({self.label!r}, max={self.max_marks})"


@dataclass(frozen=True, slots=True)
class MainQuestion:
    """
    Top-level exam question (immutable).

    Sub-questions keep insertion order. Adding one creates a new
    MainQuestion via append(); the sheet swaps it in.

    Attributes:
        label: Identifier like "Q1", unique within a sheet
        sub_questions: Ordered tuple of SubQuestion

    Invariants:
        - label is non-empty
        - sub-question labels are unique

    Example:
        >>> q = MainQuestion("Q1", (SubQuestion("A", 5), SubQuestion("B", 5)))
        >>> q.total_max_marks
        10
        >>> q.append(SubQuestion("C", 2)).labels
        ('A', 'B', 'C')
    """

    label: str
    sub_questions: Tuple[SubQuestion, ...] = ()

    def __post_init__(self) -> None:
        """Validate label and sub-question uniqueness on construction."""
        if not self.label or not self.label.strip():
            raise ValueError("Main question label cannot be empty")
        labels = [sub.label for sub in self.sub_questions]
        if len(labels) != len(set(labels)):
            raise ValueError(f"Duplicate sub-question labels in {self.label}: {labels}")

    # ─────────────────────────────────────────────────────────────────────────
    # Calculated Properties (NEVER stored)
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def labels(self) -> Tuple[str, ...]:
        """Sub-question labels in order."""
        return tuple(sub.label for sub in self.sub_questions)

    @property
    def max_marks(self) -> Tuple[float, ...]:
        """Sub-question maxima in order."""
        return tuple(sub.max_marks for sub in self.sub_questions)

    @property
    def total_max_marks(self) -> float:
        """Sum of all sub-question maxima, ignoring any selection rule."""
        return sum(self.max_marks)

    @property
    def sub_count(self) -> int:
        """Number of sub-questions."""
        return len(self.sub_questions)

    # ─────────────────────────────────────────────────────────────────────────
    # Query Methods
    # ─────────────────────────────────────────────────────────────────────────

    def find(self, sub_label: str) -> Optional[SubQuestion]:
        """
        Find a sub-question by letter.

        Args:
            sub_label: Letter like "B"

        Returns:
            Matching SubQuestion or None
        """
        for sub in self.sub_questions:
            if sub.label == sub_label:
                return sub
        return None

    def __iter__(self) -> Iterator[SubQuestion]:
        return iter(self.sub_questions)

    # ─────────────────────────────────────────────────────────────────────────
    # Copy-on-write Updates
    # ─────────────────────────────────────────────────────────────────────────

    def append(self, sub: SubQuestion) -> MainQuestion:
        """Return a copy with ``sub`` appended (validation re-runs)."""
        return replace(self, sub_questions=self.sub_questions + (sub,))

    def with_max(self, sub_label: str, max_marks: float) -> MainQuestion:
        """
        Return a copy with one sub-question's maximum changed.

        Raises:
            KeyError: If sub_label is not a sub-question of this question
        """
        if self.find(sub_label) is None:
            raise KeyError(sub_label)
        subs = tuple(
            SubQuestion(sub.label, max_marks) if sub.label == sub_label else sub
            for sub in self.sub_questions
        )
        return replace(self, sub_questions=subs)

    def __repr__(self) -> str:
        return f"MainQuestion({self.label!r}, subs={''.join(self.labels)}, max={self.total_max_marks})"
