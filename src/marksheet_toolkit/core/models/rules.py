"""
Module: rules

Purpose:
    Provides SelectionRule - the "best N of K" policy attached to one main
    question. Only the highest N values count towards the question total.
    K is stored for display and never enforced.

Key Functions:
    - SelectionRule.pick(values): Highest min(N, len(values)) values
    - SelectionRule.exceeds(count): Whether N or K is larger than count

Used By:
    - engine.sheet.ExamSheet (apply/remove transitions)
    - engine.totals.main_total
    - engine.maxima.computed_grand_max
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List


def _is_positive_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


@dataclass(frozen=True, slots=True)
class SelectionRule:
    """
    Best-N-of-K rule for one main question (immutable).

    Attributes:
        main_label: Main question the rule belongs to
        min_to_count: N, number of highest values that count
        out_of: K, informational count of attempted sub-questions

    Invariants:
        - min_to_count >= 1 and out_of >= 1
        - N and K may exceed the actual number of sub-questions

    Example:
        >>> rule = SelectionRule("Q1", min_to_count=3, out_of=4)
        >>> rule.pick([2, 5, 3, 4])
        [5, 4, 3]
        >>> rule.pick([7])
        [7]
    """

    main_label: str
    min_to_count: int
    out_of: int

    def __post_init__(self) -> None:
        """Validate N and K on construction."""
        if not self.main_label:
            raise ValueError("Selection rule needs a main question label")
        if not _is_positive_int(self.min_to_count):
            raise ValueError(f"min_to_count must be a positive integer: {self.min_to_count!r}")
        if not _is_positive_int(self.out_of):
            raise ValueError(f"out_of must be a positive integer: {self.out_of!r}")

    def pick(self, values: Iterable[float]) -> List[float]:
        """
        Select the values that count under this rule.

        Sorts descending and keeps the first min(N, len(values)). Never
        pads with zeros when fewer than N values are available.

        Args:
            values: Candidate values (marks or maxima)

        Returns:
            Counted values, highest first
        """
        ordered = sorted(values, reverse=True)
        return ordered[: self.min_to_count]

    def exceeds(self, count: int) -> bool:
        """True when N or K is larger than ``count`` sub-questions."""
        return self.min_to_count > count or self.out_of > count

    @property
    def description(self) -> str:
        """Human-readable form like "best 3 of 4"."""
        return f"best {self.min_to_count} of {self.out_of}"

    def __repr__(self) -> str:
        return f"SelectionRule({self.main_label!r}, {self.description})"
