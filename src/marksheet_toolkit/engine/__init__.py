"""
Module: engine

Purpose:
    Marks aggregation engine. Holds one exam sheet in memory (roster,
    question schema, marks matrix, selection rules) and derives totals and
    maxima from it on every read.

Key Functions:
    - main_total() / grand_total(): Per-student totals
    - max_total() / computed_grand_max() / displayed_max(): Sheet ceilings
    - build_report(): Totals for every student, absent markers included
    - sheet_from_payload() / sheet_to_payload(): API payload adapter

Key Classes:
    - ExamSheet: The sheet and its editing operations
    - SheetConfig: Defaults and limits
    - SheetError / SheetLockedError: Editing errors

Dependencies:
    - marksheet_toolkit.core.models: Student, MainQuestion, SubQuestion, SelectionRule
    - marksheet_toolkit.core.schemas.validator: Payload validation

Used By:
    - marksheet_toolkit.cli: Report command
"""

from .config import SheetConfig
from .errors import SheetError, SheetLockedError
from .sheet import ExamSheet
from .totals import main_total, grand_total
from .maxima import max_total, computed_grand_max, displayed_max, question_max
from .report import StudentResult, SheetReport, build_report, format_report
from .payload import (
    sheet_to_payload,
    sheet_from_payload,
    read_payload,
    load_sheet_json,
    save_sheet_json,
)

__all__ = [
    # Config
    "SheetConfig",
    # Errors
    "SheetError",
    "SheetLockedError",
    # Sheet
    "ExamSheet",
    # Calculations
    "main_total",
    "grand_total",
    "max_total",
    "computed_grand_max",
    "displayed_max",
    "question_max",
    # Reporting
    "StudentResult",
    "SheetReport",
    "build_report",
    "format_report",
    # Payload
    "sheet_to_payload",
    "sheet_from_payload",
    "read_payload",
    "load_sheet_json",
    "save_sheet_json",
]
