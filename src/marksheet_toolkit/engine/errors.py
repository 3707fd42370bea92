"""
Exceptions raised by sheet editing operations.

Mark entry and the aggregation functions never raise for documented input;
these cover operator mistakes such as duplicate labels or a locked sheet.
"""


class SheetError(Exception):
    """Invalid edit of an exam sheet."""
    pass


class SheetLockedError(SheetError):
    """Edit attempted after the sheet was finalized."""
    pass
