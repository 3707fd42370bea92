"""
Marksheet Toolkit Core Package

Shared data models and payload validation. These models are the single
source of truth for the engine package.

1. **Immutable Data Models**
   - Frozen dataclasses; the sheet swaps in new instances for any change

2. **Calculated Totals (Never Stored)**
   - Question totals, grand totals and maxima are always derived from
     the marks matrix and the question schema

3. **Structured Keys**
   - The marks matrix is keyed by `MarkKey(roll_no, main_label, sub_label)`;
     the flattened "Q1.A" form only exists in the payload format
"""

from .models import (
    MarkKey,
    MarkInput,
    Student,
    SubQuestion,
    MainQuestion,
    SelectionRule,
)

__all__ = [
    "MarkKey",
    "MarkInput",
    "Student",
    "SubQuestion",
    "MainQuestion",
    "SelectionRule",
]
