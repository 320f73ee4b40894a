from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Any

from ..models.row_data import EMPTY_ROW, FIRST_DATA_ROW, RawRecord, RawRecordBuilder, EmptyRow
from .coercion import COERCION_RULES, RESERVED_DEFAULTS, coerce_text
from .document import Document
from .header import header_map

"""Row extraction: data rows -> RawRecord (or EMPTY_ROW) in sheet order."""

__all__ = [
    "ExtractedRow",
    "RowExtractor",
]

ExtractedRow = tuple[int, RawRecord | EmptyRow]


class RowExtractor:
    """Walks the data rows of one sheet and coerces populated cells by column name.

    The column index -> name map is fixed at construction (from the header row
    unless given explicitly) and reused for every row. rows() may be called
    again to restart from the first data row.
    """

    def __init__(
        self,
        document: Document,
        columns: Mapping[int, str] | None = None,
        *,
        sheet_index: int = 0,
        rules: Mapping[str, Callable[[Any], Any]] | None = None,
    ) -> None:
        self.document = document
        self.sheet_index = sheet_index
        self.columns: dict[int, str] = dict(columns) if columns is not None else header_map(document, sheet_index)
        self.rules = COERCION_RULES if rules is None else rules
        names = set(self.columns.values())
        self._defaults = {k: v for k, v in RESERVED_DEFAULTS.items() if k in names}

    def rows(self) -> Iterator[ExtractedRow]:
        last_row = self.document.row_count(self.sheet_index)
        for row_number in range(FIRST_DATA_ROW, last_row + 1):
            cells = self.document.populated_cells(row_number, self.sheet_index)
            if not cells:
                yield row_number, EMPTY_ROW
                continue
            yield row_number, self.build_record(cells)

    def __iter__(self) -> Iterator[ExtractedRow]:
        return self.rows()

    def build_record(self, cells: Mapping[int, Any]) -> RawRecord:
        """Coerce one row's populated cells ({column index: raw value})."""
        builder = RawRecordBuilder(self._defaults)
        for col, value in cells.items():
            name = self.columns.get(col)
            if name is None:
                # ヘッダの無い列は無視
                continue
            rule = self.rules.get(name, coerce_text)
            builder.set(name, rule(value))
        return builder.build()
