"""
Schema Validation Utilities

Validates exam sheet payloads (the flattened format exchanged with the
surrounding API) before they are turned into an ExamSheet.

- `validate_payload()` runs fast structural checks and, with
  ``strict=True``, full JSON Schema validation via jsonschema
- Fail fast with a ValidationError naming the offending path
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema


# Load schemas lazily
_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ValidationError(Exception):
    """Raised when data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def decode_rules(raw: Any) -> dict[str, Any]:
    """
    Normalize the question_rules field.

    The API may send rules as an object or as a JSON-encoded string.

    Raises:
        ValidationError: If a string does not decode to an object
    """
    if raw is None or raw == "":
        return {}
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValidationError(
                f"question_rules is not valid JSON: {e}",
                path="question_rules"
            )
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValidationError(
            "question_rules must be an object",
            path="question_rules"
        )
    return raw


def validate_payload(data: Any, *, strict: bool = False) -> None:
    """
    Validate an exam sheet payload.

    Args:
        data: Payload dictionary to validate
        strict: If True, also validate against sheet.schema.json

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("Payload must be an object")

    missing = [f for f in ("questions", "students") if f not in data]
    if missing:
        raise ValidationError(
            f"Missing required fields: {missing}",
            path="",
            errors=[f"Missing field: {f}" for f in missing]
        )

    _validate_questions(data["questions"])
    _validate_students(data["students"])
    _validate_rules(decode_rules(data.get("question_rules")))

    if "is_locked" in data and not isinstance(data["is_locked"], bool):
        raise ValidationError("is_locked must be a boolean", path="is_locked")

    override = data.get("max_total_override")
    if override is not None and not _is_number(override):
        raise ValidationError(
            f"Invalid max_total_override: {override!r} (must be a number)",
            path="max_total_override"
        )

    # Full schema validation in strict mode
    if strict:
        schema = _load_schema("sheet")
        try:
            jsonschema.validate(data, schema)
        except jsonschema.ValidationError as e:
            raise ValidationError(
                f"Schema validation failed: {e.message}",
                path=".".join(str(p) for p in e.absolute_path),
                errors=[e.message]
            )


def _validate_questions(questions: Any) -> None:
    if not isinstance(questions, list):
        raise ValidationError("questions must be a list", path="questions")

    seen: set[str] = set()
    for i, question in enumerate(questions):
        path = f"questions[{i}]"
        if not isinstance(question, dict):
            raise ValidationError("question must be an object", path=path)
        label = question.get("label")
        if not isinstance(label, str) or not label.strip():
            raise ValidationError(f"Invalid question label: {label!r}", path=f"{path}.label")
        if label in seen:
            raise ValidationError(f"Duplicate question label: {label!r}", path=f"{path}.label")
        seen.add(label)
        max_marks = question.get("max_marks")
        if not _is_number(max_marks) or max_marks <= 0:
            raise ValidationError(
                f"Invalid max_marks: {max_marks!r} (must be a positive number)",
                path=f"{path}.max_marks"
            )


def _validate_students(students: Any) -> None:
    if not isinstance(students, list):
        raise ValidationError("students must be a list", path="students")

    seen: set[int] = set()
    for i, student in enumerate(students):
        path = f"students[{i}]"
        if not isinstance(student, dict):
            raise ValidationError("student must be an object", path=path)
        roll_no = student.get("roll_no")
        if not _is_int(roll_no):
            raise ValidationError(
                f"Invalid roll_no: {roll_no!r} (must be an integer)",
                path=f"{path}.roll_no"
            )
        if roll_no in seen:
            raise ValidationError(f"Duplicate roll_no: {roll_no}", path=f"{path}.roll_no")
        seen.add(roll_no)
        if "absent" in student and not isinstance(student["absent"], bool):
            raise ValidationError("absent must be a boolean", path=f"{path}.absent")

        marks = student.get("marks", {})
        if not isinstance(marks, dict):
            raise ValidationError("marks must be an object", path=f"{path}.marks")
        for label, value in marks.items():
            if value is not None and not _is_number(value):
                raise ValidationError(
                    f"Invalid mark for {label}: {value!r}",
                    path=f"{path}.marks.{label}"
                )


def _validate_rules(rules: dict[str, Any]) -> None:
    for label, rule in rules.items():
        path = f"question_rules.{label}"
        if not isinstance(rule, dict):
            raise ValidationError("rule must be an object", path=path)
        min_to_count = rule.get("minToCount")
        if not _is_int(min_to_count) or min_to_count < 1:
            raise ValidationError(
                f"Invalid minToCount: {min_to_count!r} (must be a positive integer)",
                path=f"{path}.minToCount"
            )
        out_of = rule.get("outOf", min_to_count)
        if not _is_int(out_of) or out_of < 1:
            raise ValidationError(
                f"Invalid outOf: {out_of!r} (must be a positive integer)",
                path=f"{path}.outOf"
            )
