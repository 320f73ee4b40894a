from __future__ import annotations

from enum import Enum

"""Structural failures raised by the spreadsheet pipeline.

Row-level problems never raise: they end up in ImportSummary.invalid_records.
Anything here aborts the whole run before (or instead of) row processing.
"""

__all__ = [
    "DocumentLoadError",
    "StructuralError",
    "StructuralErrorKind",
]


class StructuralErrorKind(Enum):
    """Machine-checkable classification of a structural failure."""
    UNKNOWN_TYPE = "unknown_type"
    NO_COLUMNS = "no_columns"
    MISSING_COLUMNS = "missing_columns"
    MISSING_HEADERS = "missing_headers"


class StructuralError(Exception):
    """Raised when the document shape (or the requested type) cannot be processed.

    Attributes:
        kind: StructuralErrorKind of the failure
        columns: offending column names (missing ones for MISSING_COLUMNS)
    """

    def __init__(self, kind: StructuralErrorKind, message: str, columns: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.kind = kind
        self.columns = columns

    @property
    def error_type(self) -> str:
        """UPPER_SNAKE label used in the JSON Lines error log."""
        return self.kind.name


class DocumentLoadError(Exception):
    """Raised when a spreadsheet file cannot be opened as a workbook."""
