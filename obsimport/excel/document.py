from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Any
from zipfile import BadZipFile

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from .errors import DocumentLoadError

"""In-memory spreadsheet handle shared by the import and export paths.

Document wraps an openpyxl Workbook and exposes only what the pipeline needs:
sheet count, per-sheet row count and populated cells per row. The write path
(template builder) works directly on the wrapped worksheet.

A Document is owned by a single run; it is not safe for concurrent access.
"""

__all__ = [
    "Document",
    "is_blank",
]


def is_blank(value: Any) -> bool:
    """A cell counts as blank when it holds nothing or an empty string."""
    return value is None or (isinstance(value, str) and value == "")


class Document:
    def __init__(self, workbook: Workbook, name: str = "<memory>") -> None:
        self.workbook = workbook
        self.name = name

    @classmethod
    def load(cls, path: Path) -> Document:
        """Open an .xlsx file (cached values only, formulas are not evaluated)."""
        try:
            wb = openpyxl.load_workbook(path, data_only=True)
        except (InvalidFileException, BadZipFile, KeyError, OSError) as e:
            raise DocumentLoadError(f"cannot open workbook '{path}': {e}") from e
        return cls(wb, name=Path(path).name)

    @classmethod
    def from_bytes(cls, data: bytes, name: str = "<memory>") -> Document:
        try:
            wb = openpyxl.load_workbook(BytesIO(data), data_only=True)
        except (InvalidFileException, BadZipFile, KeyError, OSError) as e:
            raise DocumentLoadError(f"cannot open workbook '{name}': {e}") from e
        return cls(wb, name=name)

    @classmethod
    def from_rows(cls, rows: list[list[Any]], sheet_name: str = "Sheet1") -> Document:
        """Build a single-sheet document from row lists (None = blank cell)."""
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = sheet_name
        for r_idx, values in enumerate(rows, start=1):
            for c_idx, value in enumerate(values, start=1):
                if value is not None:
                    ws.cell(row=r_idx, column=c_idx, value=value)
        return cls(wb)

    @property
    def sheet_count(self) -> int:
        return len(self.workbook.worksheets)

    def sheet(self, index: int = 0) -> Worksheet | None:
        """Worksheet by 0-based position, None when the workbook has fewer sheets."""
        sheets = self.workbook.worksheets
        if index >= len(sheets):
            return None
        return sheets[index]

    def row_count(self, index: int = 0) -> int:
        """Number of rows of the sheet (last used row), 0 for a missing or blank sheet."""
        ws = self.sheet(index)
        if ws is None:
            return 0
        # 空シートでも openpyxl は max_row=1 を返すため A1 の有無で判定
        if ws.max_row == 1 and ws.max_column == 1 and is_blank(ws.cell(row=1, column=1).value):
            return 0
        return ws.max_row

    def populated_cells(self, row_number: int, index: int = 0) -> dict[int, Any]:
        """Return {1-based column index: raw value} for non-blank cells of a row."""
        ws = self.sheet(index)
        if ws is None or row_number > ws.max_row:
            return {}
        cells: dict[int, Any] = {}
        for cell in ws[row_number]:
            if not is_blank(cell.value):
                cells[cell.column] = cell.value
        return cells

    def to_bytes(self) -> bytes:
        buf = BytesIO()
        self.workbook.save(buf)
        return buf.getvalue()

    def save(self, path: Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.workbook.save(path)
        return path
