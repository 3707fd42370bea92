"""
Core Models Package

Immutable, validated data models for one exam sheet.

All models in this package are frozen dataclasses; the mutable state of a
sheet lives in engine.sheet.ExamSheet, which swaps model instances in and
out. Totals and maxima are never stored on a model, only calculated.

| Model | Role |
|-------|------|
| `Student` | Roster row, roll number + absence flag |
| `SubQuestion` | Lettered part with its own maximum |
| `MainQuestion` | Ordered, append-only group of sub-questions |
| `SelectionRule` | Best-N-of-K policy for one main question |
| `MarkKey` | Composite key of the marks matrix |
| `MarkInput` | Parsed, clamped mark-cell entry |
"""

from .marks import MarkKey, MarkInput, clamp_mark, round_mark
from .students import Student
from .questions import SubQuestion, MainQuestion, next_sub_label
from .rules import SelectionRule

__all__ = [
    "MarkKey",
    "MarkInput",
    "clamp_mark",
    "round_mark",
    "Student",
    "SubQuestion",
    "MainQuestion",
    "next_sub_label",
    "SelectionRule",
]
