"""
Module: engine.sheet

Purpose:
    The ExamSheet - one explicit, cohesive container for everything the
    aggregation engine reads: the roster, the question schema, the sparse
    marks matrix and the per-question selection rules. All edits go through
    the methods below and are visible to the next read; totals are never
    cached, only calculated on demand.

Key Classes:
    - ExamSheet: Mutable sheet with editing operations

Key Functions:
    - ExamSheet.set_mark(): Mark entry (silent on invalid input)
    - ExamSheet.apply_rule() / remove_rule(): Rule state transitions
    - ExamSheet.generate_roster() / add_student() / toggle_absent()
    - ExamSheet.add_main_question() / add_sub_question()
    - ExamSheet.lock(): Finalize the sheet

Dependencies:
    - core.models: Student, MainQuestion, SubQuestion, SelectionRule, MarkKey, MarkInput
    - engine.config.SheetConfig
    - engine.totals / engine.maxima: Read-side calculations

Used By:
    - engine.payload: Loading/saving sheets
    - engine.report: Per-student results
    - marksheet_toolkit.cli
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple, Union

from marksheet_toolkit.core.models import (
    MainQuestion,
    MarkInput,
    MarkKey,
    SelectionRule,
    Student,
    SubQuestion,
    next_sub_label,
)

from . import maxima, totals
from .config import SheetConfig
from .errors import SheetError, SheetLockedError

logger = logging.getLogger(__name__)


class ExamSheet:
    """
    In-memory exam sheet.

    The sheet assumes a single writer; it holds no locks and callers
    serialize edits (one edit per user interaction).

    Attributes:
        config: Defaults and limits for editing and reporting

    Example:
        >>> sheet = ExamSheet()
        >>> sheet.generate_roster(101, 103)
        >>> _ = sheet.add_main_question("q1", sub_count=2, max_marks=5)
        >>> sheet.set_mark(101, "Q1", "A", "4")
        >>> sheet.set_mark(101, "Q1", "B", "9")   # clamped to 5
        >>> sheet.main_total(101, "Q1")
        9.0
    """

    def __init__(self, config: Optional[SheetConfig] = None):
        self.config = config or SheetConfig()
        self._students: Dict[int, Student] = {}
        self._questions: Dict[str, MainQuestion] = {}
        self._marks: Dict[MarkKey, float] = {}
        self._rules: Dict[str, SelectionRule] = {}
        self._locked = False

    # ─────────────────────────────────────────────────────────────────────────
    # Read Access
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def students(self) -> Tuple[Student, ...]:
        """Roster in ascending roll-number order."""
        return tuple(sorted(self._students.values()))

    @property
    def questions(self) -> Tuple[MainQuestion, ...]:
        """Main questions in sheet order."""
        return tuple(self._questions.values())

    @property
    def rules(self) -> Dict[str, SelectionRule]:
        """Copy of the rule map keyed by main question label."""
        return dict(self._rules)

    @property
    def is_locked(self) -> bool:
        return self._locked

    def get_student(self, roll_no: int) -> Optional[Student]:
        return self._students.get(roll_no)

    def get_question(self, main_label: str) -> Optional[MainQuestion]:
        return self._questions.get(main_label)

    def get_rule(self, main_label: str) -> Optional[SelectionRule]:
        return self._rules.get(main_label)

    def get_mark(self, roll_no: int, main_label: str, sub_label: str) -> Optional[float]:
        """
        Stored mark for one cell.

        Returns:
            The mark, or None when the cell is unset
        """
        return self._marks.get(MarkKey(roll_no, main_label, sub_label))

    def set_values(self, roll_no: int, main_question: MainQuestion) -> List[float]:
        """
        Set (non-unset) marks of one student for one main question.

        Unset cells are skipped entirely, never read as zero.

        Args:
            roll_no: Student roll number
            main_question: Question whose sub-questions are read

        Returns:
            Stored values in sub-question order
        """
        values = []
        for sub in main_question.sub_questions:
            value = self._marks.get(MarkKey(roll_no, main_question.label, sub.label))
            if value is not None:
                values.append(value)
        return values

    def _resolve(self, main_question: Union[MainQuestion, str]) -> MainQuestion:
        if isinstance(main_question, MainQuestion):
            return main_question
        question = self._questions.get(main_question)
        if question is None:
            raise KeyError(f"Unknown main question: {main_question!r}")
        return question

    # ─────────────────────────────────────────────────────────────────────────
    # Calculations (delegated, never cached)
    # ─────────────────────────────────────────────────────────────────────────

    def main_total(self, roll_no: int, main_question: Union[MainQuestion, str]) -> float:
        """See engine.totals.main_total."""
        return totals.main_total(self, roll_no, self._resolve(main_question))

    def grand_total(self, roll_no: int) -> float:
        """See engine.totals.grand_total."""
        return totals.grand_total(self, roll_no)

    def max_total(self) -> float:
        """See engine.maxima.max_total."""
        return maxima.max_total(self)

    def computed_grand_max(self) -> float:
        """See engine.maxima.computed_grand_max."""
        return maxima.computed_grand_max(self)

    def displayed_max(self, override: Optional[float] = None) -> float:
        """See engine.maxima.displayed_max."""
        return maxima.displayed_max(self, override)

    # ─────────────────────────────────────────────────────────────────────────
    # Mark Entry
    # ─────────────────────────────────────────────────────────────────────────

    def set_mark(self, roll_no: int, main_label: str, sub_label: str, raw: str) -> None:
        """
        Apply a raw mark-cell entry.

        Never raises. The entry is silently ignored when the sheet is
        locked, the student is absent or unknown, the cell does not exist,
        or the text is not numeric. Numeric input is clamped into
        [0, max_marks] and rounded; "" resets the cell to unset.

        Args:
            roll_no: Student roll number
            main_label: Main question label
            sub_label: Sub-question letter
            raw: Text typed into the cell
        """
        if self._locked:
            logger.debug(f"Ignoring mark for {roll_no}: sheet locked")
            return
        student = self._students.get(roll_no)
        if student is None or student.absent:
            logger.debug(f"Ignoring mark for {roll_no}: student absent or not on roster")
            return
        sub = self._find_sub(main_label, sub_label)
        if sub is None:
            logger.debug(f"Ignoring mark for unknown cell {main_label}.{sub_label}")
            return

        entry = MarkInput.parse(raw, sub.max_marks, self.config.mark_decimals)
        self._write(MarkKey(roll_no, main_label, sub_label), entry)

    def load_mark(self, roll_no: int, main_label: str, sub_label: str, value: Optional[float]) -> None:
        """
        Store a mark from a saved sheet.

        Unlike set_mark this ignores absence (stored values of absent
        students are retained) but still clamps and rounds.

        Raises:
            SheetLockedError: If the sheet is locked
            SheetError: If the student or the cell does not exist
        """
        self._ensure_unlocked()
        if roll_no not in self._students:
            raise SheetError(f"Mark for unknown roll number {roll_no}")
        sub = self._find_sub(main_label, sub_label)
        if sub is None:
            raise SheetError(f"Mark for unknown question {main_label}.{sub_label}")
        if value is None:
            entry = MarkInput.clear()
        else:
            entry = MarkInput.of(float(value), sub.max_marks, self.config.mark_decimals)
        self._write(MarkKey(roll_no, main_label, sub_label), entry)

    def _write(self, key: MarkKey, entry: MarkInput) -> None:
        if not entry.changes_cell:
            logger.debug(f"Ignoring non-numeric mark for {key.roll_no} {key.label}")
            return
        if entry.kind == "set":
            self._marks[key] = entry.value
        else:
            self._marks.pop(key, None)

    def _find_sub(self, main_label: str, sub_label: str) -> Optional[SubQuestion]:
        question = self._questions.get(main_label)
        return question.find(sub_label) if question is not None else None

    # ─────────────────────────────────────────────────────────────────────────
    # Selection Rules
    # ─────────────────────────────────────────────────────────────────────────

    def apply_rule(self, main_label: str, min_to_count: int, out_of: int) -> SelectionRule:
        """
        Move a main question to the Ruled state (best N of K).

        Replaces any previous rule for the same question. N or K larger
        than the current sub-question count is accepted with a warning so
        rules set before all sub-questions exist still take effect.

        Args:
            main_label: Main question label
            min_to_count: N, highest values that count
            out_of: K, informational only

        Returns:
            The stored rule

        Raises:
            SheetLockedError: If the sheet is locked
            SheetError: If the main question does not exist or N/K invalid
        """
        self._ensure_unlocked()
        question = self._questions.get(main_label)
        if question is None:
            raise SheetError(f"Cannot apply rule: unknown main question {main_label!r}")
        try:
            rule = SelectionRule(main_label, min_to_count, out_of)
        except ValueError as e:
            raise SheetError(f"Invalid rule for {main_label}: {e}") from e

        if rule.exceeds(question.sub_count):
            logger.warning(
                f"Rule {rule.description} for {main_label} exceeds its "
                f"{question.sub_count} sub-question(s); applying anyway"
            )
        previous = self._rules.get(main_label)
        self._rules[main_label] = rule
        if previous is not None:
            logger.info(f"Replaced rule for {main_label}: {previous.description} -> {rule.description}")
        else:
            logger.info(f"Applied rule for {main_label}: {rule.description}")
        return rule

    def remove_rule(self, main_label: str) -> Optional[SelectionRule]:
        """
        Move a main question back to the Unruled state (sum all).

        Returns:
            The removed rule, or None if the question had none

        Raises:
            SheetLockedError: If the sheet is locked
        """
        self._ensure_unlocked()
        removed = self._rules.pop(main_label, None)
        if removed is not None:
            logger.info(f"Removed rule for {main_label}")
        return removed

    # ─────────────────────────────────────────────────────────────────────────
    # Roster
    # ─────────────────────────────────────────────────────────────────────────

    def generate_roster(self, start: int, end: int) -> None:
        """
        Replace the roster with roll numbers start..end inclusive.

        Marks of roll numbers that leave the roster are dropped.

        Raises:
            SheetLockedError: If the sheet is locked
            SheetError: If bounds are not integers or start > end
        """
        self._ensure_unlocked()
        for bound in (start, end):
            if isinstance(bound, bool) or not isinstance(bound, int):
                raise SheetError(f"Roll numbers must be integers: {bound!r}")
        if start > end:
            raise SheetError(f"Starting roll number {start} is greater than ending roll number {end}")

        count = end - start + 1
        if count > self.config.roster_warn_size:
            logger.warning(f"Generating {count} roster rows (more than {self.config.roster_warn_size})")

        self._students = {roll: Student.present(roll) for roll in range(start, end + 1)}
        self._drop_marks(lambda key: key.roll_no not in self._students)
        logger.info(f"Generated roster {start}-{end} ({count} students)")

    def add_student(self, roll_no: int) -> Student:
        """
        Add one present student.

        Raises:
            SheetLockedError: If the sheet is locked
            SheetError: If roll_no is not an integer or already on the roster
        """
        self._ensure_unlocked()
        if isinstance(roll_no, bool) or not isinstance(roll_no, int):
            raise SheetError(f"Roll number must be an integer: {roll_no!r}")
        if roll_no in self._students:
            raise SheetError(f"Roll number {roll_no} already exists")
        student = Student.present(roll_no)
        self._students[roll_no] = student
        return student

    def remove_student(self, roll_no: int) -> None:
        """
        Remove a student together with their marks.

        Raises:
            SheetLockedError: If the sheet is locked
            SheetError: If roll_no is not on the roster
        """
        self._ensure_unlocked()
        if self._students.pop(roll_no, None) is None:
            raise SheetError(f"Roll number {roll_no} is not on the roster")
        self._drop_marks(lambda key: key.roll_no == roll_no)

    def set_absent(self, roll_no: int, absent: bool) -> Student:
        """
        Set a student's absence flag. Stored marks are kept.

        Raises:
            SheetLockedError: If the sheet is locked
            SheetError: If roll_no is not on the roster
        """
        self._ensure_unlocked()
        student = self._students.get(roll_no)
        if student is None:
            raise SheetError(f"Roll number {roll_no} is not on the roster")
        updated = student.with_absent(absent)
        self._students[roll_no] = updated
        return updated

    def toggle_absent(self, roll_no: int) -> Student:
        """Flip a student's absence flag; see set_absent."""
        student = self._students.get(roll_no)
        current = student.absent if student is not None else False
        return self.set_absent(roll_no, not current)

    def restore_student(self, student: Student) -> None:
        """Insert a saved roster row as-is (absence flag kept)."""
        self._ensure_unlocked()
        if student.roll_no in self._students:
            raise SheetError(f"Roll number {student.roll_no} already exists")
        self._students[student.roll_no] = student

    # ─────────────────────────────────────────────────────────────────────────
    # Question Schema
    # ─────────────────────────────────────────────────────────────────────────

    def add_main_question(
        self,
        label: str,
        sub_count: int = 1,
        max_marks: Optional[float] = None,
    ) -> MainQuestion:
        """
        Append a main question with sub-questions A, B, ...

        The label is trimmed and upper-cased and may not contain "." (the
        separator of stored "Q1.A" labels). sub_count is limited to
        1..config.max_initial_sub_questions.

        Args:
            label: Main question label like "q1"
            sub_count: Number of sub-questions to create
            max_marks: Maximum per sub-question (config default if None)

        Returns:
            The created MainQuestion

        Raises:
            SheetLockedError: If the sheet is locked
            SheetError: If the label is empty, dotted or already used
        """
        self._ensure_unlocked()
        normalized = label.strip().upper()
        if not normalized:
            raise SheetError("Main question label cannot be empty")
        if "." in normalized:
            raise SheetError(f"Main question label cannot contain '.': {normalized}")
        if normalized in self._questions:
            raise SheetError(f"Main question {normalized} already exists")

        count = max(1, min(self.config.max_initial_sub_questions, sub_count))
        per_sub = self.config.default_sub_max_marks if max_marks is None else max_marks
        try:
            question = MainQuestion(
                normalized,
                tuple(SubQuestion(next_label, per_sub) for next_label in _letters(count)),
            )
        except ValueError as e:
            raise SheetError(str(e)) from e

        self._questions[normalized] = question
        logger.info(f"Added main question {normalized} with {count} sub-question(s)")
        return question

    def add_sub_question(self, main_label: str, max_marks: Optional[float] = None) -> SubQuestion:
        """
        Append the next lettered sub-question to a main question.

        The label follows the highest existing letter. Without an explicit
        maximum, the last sub-question's maximum is reused (or the config
        default when there is none), rounded to a whole number of at least 1.

        Raises:
            SheetLockedError: If the sheet is locked
            SheetError: If the question is unknown or the A-Z limit is reached
        """
        self._ensure_unlocked()
        question = self._questions.get(main_label)
        if question is None:
            raise SheetError(f"Unknown main question {main_label!r}")

        label = next_sub_label(question.labels)
        if label is None or question.sub_count >= self.config.max_sub_questions:
            raise SheetError(f"Cannot add more sub-questions to {main_label} (limit reached)")

        if max_marks is None:
            proposed = question.sub_questions[-1].max_marks if question.sub_questions else self.config.default_sub_max_marks
            max_marks = max(1, round(proposed))
        try:
            sub = SubQuestion(label, max_marks)
        except ValueError as e:
            raise SheetError(str(e)) from e

        self._questions[main_label] = question.append(sub)
        return sub

    def set_sub_question_max(self, main_label: str, sub_label: str, max_marks: float) -> SubQuestion:
        """
        Change a sub-question's maximum; stored marks above it are clamped.

        Raises:
            SheetLockedError: If the sheet is locked
            SheetError: If the cell is unknown or max_marks is not positive
        """
        self._ensure_unlocked()
        question = self._questions.get(main_label)
        if question is None or question.find(sub_label) is None:
            raise SheetError(f"Unknown sub-question {main_label}.{sub_label}")
        try:
            updated = question.with_max(sub_label, max_marks)
        except ValueError as e:
            raise SheetError(str(e)) from e

        self._questions[main_label] = updated
        for key, value in list(self._marks.items()):
            if key.main_label == main_label and key.sub_label == sub_label:
                entry = MarkInput.of(value, max_marks, self.config.mark_decimals)
                self._write(key, entry)
        return updated.find(sub_label)

    def remove_main_question(self, main_label: str) -> None:
        """
        Remove a main question with its marks and rule.

        Raises:
            SheetLockedError: If the sheet is locked
            SheetError: If the question is unknown
        """
        self._ensure_unlocked()
        if self._questions.pop(main_label, None) is None:
            raise SheetError(f"Unknown main question {main_label!r}")
        self._rules.pop(main_label, None)
        self._drop_marks(lambda key: key.main_label == main_label)
        logger.info(f"Removed main question {main_label}")

    def restore_question(self, question: MainQuestion) -> None:
        """Insert a saved main question as-is (label not normalized)."""
        self._ensure_unlocked()
        if question.label in self._questions:
            raise SheetError(f"Main question {question.label} already exists")
        self._questions[question.label] = question

    # ─────────────────────────────────────────────────────────────────────────
    # Finalization
    # ─────────────────────────────────────────────────────────────────────────

    def lock(self) -> None:
        """
        Finalize the sheet. One-way: marks, roster, questions and rules
        can no longer change.
        """
        if not self._locked:
            self._locked = True
            logger.info("Sheet locked")

    def _ensure_unlocked(self) -> None:
        if self._locked:
            raise SheetLockedError("Sheet is locked; edits are not allowed")

    def _drop_marks(self, predicate) -> None:
        for key in [key for key in self._marks if predicate(key)]:
            del self._marks[key]

    def __repr__(self) -> str:
        state = ", locked" if self._locked else ""
        return (
            f"ExamSheet(students={len(self._students)}, "
            f"questions={len(self._questions)}, rules={len(self._rules)}{state})"
        )


def _letters(count: int) -> List[str]:
    labels: List[str] = []
    for _ in range(count):
        labels.append(next_sub_label(labels))
    return labels
