from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from ..models.row_data import FIRST_DATA_ROW
from .document import Document
from .errors import StructuralError, StructuralErrorKind
from .header import header_map, validate_header_names

"""Schema-agnostic worksheet parser for non-observation document types.

No coercion and no record validation: row 1 gives the headers, every other
non-blank row is captured as {header: raw cell value}. Unlike run_import(), the
expected-header check runs after the scan.
"""

__all__ = [
    "WorksheetParseResult",
    "parse_workbook",
    "parse_worksheet",
]


@dataclass(frozen=True)
class WorksheetParseResult:
    headers: list[str]
    rows: list[dict[str, Any]] = field(default_factory=list)
    row_count: int = 0  # シート行数 - ヘッダ


def parse_worksheet(document: Document, expected_headers: Sequence[str], sheet_index: int = 0) -> WorksheetParseResult:
    last_row = document.row_count(sheet_index)
    columns = header_map(document, sheet_index)
    if not columns:
        raise StructuralError(
            StructuralErrorKind.MISSING_HEADERS,
            "Column headers are missed: parsing stopped",
        )

    rows: list[dict[str, Any]] = []
    for row_number in range(FIRST_DATA_ROW, last_row + 1):
        cells = document.populated_cells(row_number, sheet_index)
        if not cells:
            continue
        rows.append({columns[col]: value for col, value in cells.items() if col in columns})

    headers = list(columns.values())
    validate_header_names(headers, expected_headers)
    return WorksheetParseResult(headers=headers, rows=rows, row_count=max(last_row - 1, 0))


def parse_workbook(document: Document, expected_headers: Sequence[str]) -> list[WorksheetParseResult]:
    """Parse the workbook; only the first sheet is read for now (result index 0).

    TODO: parse every worksheet once callers can address sheets by name.
    """
    return [parse_worksheet(document, expected_headers, 0)]
