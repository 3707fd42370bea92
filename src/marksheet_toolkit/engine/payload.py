"""
Module: engine.payload

Purpose:
    Convert between an ExamSheet and the flattened payload exchanged with
    the surrounding API:

        {
          "questions": [{"label": "Q1.A", "max_marks": 5}, ...],
          "students": [{"roll_no": 101, "absent": false,
                        "marks": {"Q1.A": 4, "Q1.B": null}}, ...],
          "question_rules": {"Q1": {"mainLabel": "Q1", "minToCount": 3, "outOf": 4}},
          "is_locked": false,
          "max_total_override": null
        }

    Clean separation: `sheet_to_payload` / `sheet_from_payload`, plus
    file helpers. Calculated values (totals, maxima) are never stored.

Key Functions:
    - sheet_to_payload(): Serialize a sheet
    - sheet_from_payload(): Validate and deserialize a sheet
    - read_payload() / load_sheet_json() / save_sheet_json(): JSON files
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from marksheet_toolkit.core.models import MainQuestion, MarkKey, Student, SubQuestion
from marksheet_toolkit.core.schemas.validator import (
    ValidationError,
    decode_rules,
    validate_payload,
)

from .config import SheetConfig
from .errors import SheetError
from .sheet import ExamSheet

logger = logging.getLogger(__name__)

# Sub-question used when a stored label has no ".<letter>" part
DEFAULT_SUB_LABEL = "A"


def split_label(label: str) -> Tuple[str, str]:
    """
    Split a flattened question label.

    Example:
        >>> split_label("Q1.B")
        ('Q1', 'B')
        >>> split_label("Q2")
        ('Q2', 'A')
        >>> split_label("Q1.1.A")
        ('Q1.1', 'A')
    """
    if "." not in label:
        return label, DEFAULT_SUB_LABEL
    main_label, sub_label = label.rsplit(".", 1)
    return main_label, sub_label


# ─────────────────────────────────────────────────────────────────────────────
# Serialization
# ─────────────────────────────────────────────────────────────────────────────

def sheet_to_payload(sheet: ExamSheet, override: Optional[float] = None) -> Dict[str, Any]:
    """
    Serialize a sheet to the flattened payload.

    Every cell appears in each student's marks map; unset cells are null.

    Args:
        sheet: Sheet to serialize
        override: Optional displayed-maximum cap to store with the sheet

    Returns:
        Dictionary suitable for JSON serialization
    """
    questions = [
        {"label": f"{question.label}.{sub.label}", "max_marks": sub.max_marks}
        for question in sheet.questions
        for sub in question.sub_questions
    ]

    students = []
    for student in sheet.students:
        marks: Dict[str, Optional[float]] = {}
        for question in sheet.questions:
            for sub in question.sub_questions:
                key = MarkKey(student.roll_no, question.label, sub.label)
                marks[key.label] = sheet.get_mark(key.roll_no, key.main_label, key.sub_label)
        students.append({
            "roll_no": student.roll_no,
            "absent": student.absent,
            "marks": marks,
        })

    rules = {
        label: {"mainLabel": label, "minToCount": rule.min_to_count, "outOf": rule.out_of}
        for label, rule in sheet.rules.items()
    }

    return {
        "questions": questions,
        "students": students,
        "question_rules": rules,
        "is_locked": sheet.is_locked,
        "max_total_override": override,
    }


def sheet_from_payload(
    data: Dict[str, Any],
    *,
    validate: bool = True,
    strict: bool = False,
    config: Optional[SheetConfig] = None,
) -> ExamSheet:
    """
    Deserialize a sheet from the flattened payload.

    Labels without a "." become a main question with a single
    sub-question "A". Stored marks pass through the usual clamp and
    rounding rules. Marks or rules naming unknown questions are skipped
    with a warning.

    Args:
        data: Dictionary from JSON
        validate: Whether to run validate_payload first
        strict: Passed to validate_payload (jsonschema check)
        config: Sheet configuration (defaults if None)

    Returns:
        ExamSheet, locked when the payload says so

    Raises:
        ValidationError: If the payload is invalid
    """
    if validate:
        validate_payload(data, strict=strict)

    sheet = ExamSheet(config)
    try:
        for question in _group_questions(data.get("questions", [])):
            sheet.restore_question(question)

        for entry in data.get("students", []):
            sheet.restore_student(
                Student(roll_no=entry["roll_no"], absent=bool(entry.get("absent", False)))
            )
            for label, value in (entry.get("marks") or {}).items():
                main_label, sub_label = split_label(label)
                question = sheet.get_question(main_label)
                if question is None or question.find(sub_label) is None:
                    logger.warning(f"Skipping mark for unknown question {label!r} (roll {entry['roll_no']})")
                    continue
                sheet.load_mark(entry["roll_no"], main_label, sub_label, value)

        for label, rule in decode_rules(data.get("question_rules")).items():
            if sheet.get_question(label) is None:
                logger.warning(f"Skipping rule for unknown main question {label!r}")
                continue
            min_to_count = rule["minToCount"]
            sheet.apply_rule(label, min_to_count, rule.get("outOf", min_to_count))
    except (SheetError, ValueError, KeyError, TypeError) as e:
        raise ValidationError(f"Cannot build sheet from payload: {e}", errors=[str(e)]) from e

    if data.get("is_locked"):
        sheet.lock()

    logger.info(
        f"Loaded sheet with {len(sheet.students)} students and {len(sheet.questions)} main questions"
    )
    return sheet


def _group_questions(entries: List[Dict[str, Any]]) -> List[MainQuestion]:
    """Group flattened "Q1.A" entries into main questions, first-seen order."""
    grouped: Dict[str, List[SubQuestion]] = {}
    for entry in entries:
        main_label, sub_label = split_label(entry["label"])
        subs = grouped.setdefault(main_label, [])
        if "." not in entry["label"] and subs:
            continue
        subs.append(SubQuestion(sub_label, entry["max_marks"]))
    return [MainQuestion(label, tuple(subs)) for label, subs in grouped.items()]


# ─────────────────────────────────────────────────────────────────────────────
# JSON Files
# ─────────────────────────────────────────────────────────────────────────────

def read_payload(path: Path) -> Dict[str, Any]:
    """
    Read a payload dictionary from a JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the file is not valid JSON
    """
    if not path.exists():
        raise FileNotFoundError(f"Sheet file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON: {e}", path=str(path), errors=[str(e)])


def load_sheet_json(path: Path, *, strict: bool = False, config: Optional[SheetConfig] = None) -> ExamSheet:
    """
    Load a sheet from a JSON file.

    Args:
        path: Path to the sheet JSON
        strict: Run full jsonschema validation
        config: Sheet configuration

    Returns:
        ExamSheet instance
    """
    return sheet_from_payload(read_payload(path), strict=strict, config=config)


def save_sheet_json(sheet: ExamSheet, path: Path, override: Optional[float] = None) -> None:
    """
    Save a sheet to a JSON file.

    Args:
        sheet: Sheet to save
        path: Output path
        override: Optional displayed-maximum cap stored with the sheet
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    data = sheet_to_payload(sheet, override)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
