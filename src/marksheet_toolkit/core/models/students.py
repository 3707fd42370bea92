"""
Module: students

Purpose:
    Provides the Student dataclass - one row of the exam sheet roster,
    identified by roll number. Absence is a flag on the row; marks stored
    for an absent student are retained but never counted.

Key Functions:
    - Student.present(roll_no): Create a present student
    - Student.with_absent(flag): Copy with a new absence flag

Used By:
    - engine.sheet.ExamSheet
    - engine.report.build_report
"""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True, order=True)
class Student:
    """
    Roster entry (immutable).

    Ordering compares roll_no first, so a sorted roster is in ascending
    roll-number order.

    Attributes:
        roll_no: Integer roll number, unique within a sheet
        absent: Whether the student was absent for the exam

    Example:
        >>> s = Student.present(101)
        >>> s.with_absent(True).absent
        True
    """

    roll_no: int
    absent: bool = False

    def __post_init__(self) -> None:
        """Validate roll number type."""
        if isinstance(self.roll_no, bool) or not isinstance(self.roll_no, int):
            raise ValueError(f"roll_no must be an integer: {self.roll_no!r}")

    @classmethod
    def present(cls, roll_no: int) -> Student:
        """Create a student who is not absent."""
        return cls(roll_no=roll_no, absent=False)

    def with_absent(self, absent: bool) -> Student:
        """Return a copy with the absence flag set to ``absent``."""
        return replace(self, absent=bool(absent))

    def __repr__(self) -> str:
        flag = ", absent" if self.absent else ""
        return f"Student({self.roll_no}{flag})"
