"""
Module: marks

Purpose:
    Provides the mark-entry primitives: MarkKey, the structured composite
    key of the marks matrix, and MarkInput, the parsed form of a raw string
    typed into a mark cell. Parsing never raises; invalid input becomes an
    "ignored" MarkInput so rapid data entry is never interrupted.

Key Functions:
    - MarkInput.parse(raw, max_marks): Parse, clamp and round a raw entry
    - MarkInput.clear(): Entry that resets a cell to unset
    - MarkInput.ignored(): Entry that leaves a cell unchanged
    - clamp_mark(value, max_marks): Clamp a number into [0, max_marks]
    - round_mark(value, decimals): Half-up rounding of stored marks

Dependencies:
    - dataclasses (std)
    - decimal (std)
    - math (std)
    - re (std)

Used By:
    - engine.sheet.ExamSheet.set_mark
    - engine.payload (loading stored marks)
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Literal, Optional


InputKind = Literal["set", "clear", "ignored"]

# Leading decimal number, read the same way a browser's parseFloat reads it
_NUMERIC_PREFIX = re.compile(r"[+-]?(?:Infinity|(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")


@dataclass(frozen=True, slots=True)
class MarkKey:
    """
    Composite key of one cell in the marks matrix.

    Attributes:
        roll_no: Student roll number
        main_label: Main question label like "Q1"
        sub_label: Sub-question letter like "A"

    Example:
        >>> key = MarkKey(101, "Q1", "A")
        >>> key.label
        'Q1.A'
    """

    roll_no: int
    main_label: str
    sub_label: str

    @property
    def label(self) -> str:
        """Flattened question label used by the stored payload format."""
        return f"{self.main_label}.{self.sub_label}"

    def __repr__(self) -> str:
        return f"MarkKey({self.roll_no}, {self.label!r})"


def clamp_mark(value: float, max_marks: float) -> float:
    """
    Clamp a mark into the closed range [0, max_marks].

    Args:
        value: Raw numeric mark
        max_marks: Upper bound for the cell

    Returns:
        value limited to [0, max_marks]
    """
    if value < 0:
        return 0.0
    if value > max_marks:
        return float(max_marks)
    return float(value)


def round_mark(value: float, decimals: int = 2) -> float:
    """
    Round a finite mark half-up to ``decimals`` places.

    Works on the shortest decimal form of the float, so "0.125" rounds
    to 0.13 rather than to the nearest even digit.

    Example:
        >>> round_mark(0.125)
        0.13
    """
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


@dataclass(frozen=True, slots=True)
class MarkInput:
    """
    Result of parsing one raw mark-cell entry.

    Attributes:
        kind: What the entry does to the cell
            - "set": store value
            - "clear": reset the cell to unset (distinct from 0)
            - "ignored": leave the cell unchanged (non-numeric input)
        value: Clamped, rounded mark when kind == "set", else None

    Invariants:
        - value is not None if and only if kind == "set"

    Example:
        >>> MarkInput.parse("12", max_marks=5).value
        5.0
        >>> MarkInput.parse("", max_marks=5).kind
        'clear'
        >>> MarkInput.parse("abc", max_marks=5).kind
        'ignored'
    """

    kind: InputKind
    value: Optional[float] = None

    def __post_init__(self) -> None:
        """Validate the kind/value pairing."""
        if self.kind not in ("set", "clear", "ignored"):
            raise ValueError(f"Invalid mark input kind: {self.kind}")
        if (self.kind == "set") != (self.value is not None):
            raise ValueError(f"Mark input {self.kind!r} cannot carry value {self.value!r}")

    # ─────────────────────────────────────────────────────────────────────────
    # Factory Methods
    # ─────────────────────────────────────────────────────────────────────────

    @classmethod
    def clear(cls) -> MarkInput:
        """Entry that resets the cell to unset."""
        return cls(kind="clear")

    @classmethod
    def ignored(cls) -> MarkInput:
        """Entry that leaves the cell as it is."""
        return cls(kind="ignored")

    @classmethod
    def of(cls, value: float, max_marks: float, decimals: int = 2) -> MarkInput:
        """
        Entry storing an already numeric value.

        The value is clamped into [0, max_marks] and rounded to
        ``decimals`` places, so repeated edits cannot accumulate drift.

        Args:
            value: Numeric mark
            max_marks: Maximum marks of the target sub-question
            decimals: Rounding precision

        Returns:
            MarkInput with kind="set", or ignored for NaN
        """
        if math.isnan(value):
            return cls.ignored()
        stored = round_mark(clamp_mark(value, max_marks), decimals)
        # -0.0 passes the clamp unchanged
        return cls(kind="set", value=stored + 0.0)

    @classmethod
    def parse(cls, raw: str, max_marks: float, decimals: int = 2) -> MarkInput:
        """
        Parse a raw cell entry.

        Rules:
            - "" clears the cell
            - a leading number is read ("7.5", " 3 ", "4abc" -> 4)
            - overflowing or "Infinity" input clamps like any other number
            - anything else is ignored without error

        Args:
            raw: Text typed into the cell
            max_marks: Maximum marks of the target sub-question
            decimals: Rounding precision

        Returns:
            Parsed MarkInput
        """
        if raw == "":
            return cls.clear()
        match = _NUMERIC_PREFIX.match(raw.strip())
        if match is None:
            return cls.ignored()
        return cls.of(float(match.group(0)), max_marks, decimals)

    @property
    def changes_cell(self) -> bool:
        """True unless the entry is ignored."""
        return self.kind != "ignored"

    def __repr__(self) -> str:
        if self.kind == "set":
            return f"MarkInput(set, {self.value})"
        return f"MarkInput({self.kind})"
