from __future__ import annotations

import logging

import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from ..models.config_models import ColumnSchemaRegistry, DocumentStyleConfig, HeaderStyle
from ..models.row_data import HEADER_ROW
from .document import Document
from .errors import StructuralError, StructuralErrorKind

"""Blank template workbooks for a record type (export path).

The header row is written from the same ColumnSchemaRegistry the import
header gate reads, so a template filled in by a user always passes the gate.
"""

__all__ = [
    "build_workbook",
    "style_header_row",
]

logger = logging.getLogger(__name__)


def _header_font(style: HeaderStyle) -> Font:
    return Font(bold=style.bold, color=style.font_color)


def _header_fill(style: HeaderStyle) -> PatternFill | None:
    if not style.fill_color:
        return None
    return PatternFill("solid", fgColor=style.fill_color)


def _header_border(style: HeaderStyle) -> Border | None:
    if not style.border:
        return None
    side = Side(style=style.border)
    return Border(left=side, right=side, top=side, bottom=side)


def style_header_row(ws: Worksheet, column_count: int, style: HeaderStyle) -> None:
    """Apply the header cell style to every header cell."""
    font = _header_font(style)
    fill = _header_fill(style)
    border = _header_border(style)
    alignment = Alignment(horizontal=style.horizontal, vertical=style.vertical)
    for col in range(1, column_count + 1):
        cell = ws.cell(row=HEADER_ROW, column=col)
        cell.font = font
        cell.alignment = alignment
        if fill is not None:
            cell.fill = fill
        if border is not None:
            cell.border = border


def build_workbook(
    record_type: str,
    registry: ColumnSchemaRegistry,
    style: DocumentStyleConfig | None = None,
) -> Document:
    """Build a single-sheet template whose header row is the type's columns.

    Raises:
        StructuralError: UNKNOWN_TYPE for an unconfigured type, NO_COLUMNS when
            the type has an empty column list
    """
    style = style or DocumentStyleConfig()
    columns = registry.columns_for(record_type)
    if not columns:
        raise StructuralError(
            StructuralErrorKind.NO_COLUMNS,
            f"No columns configured for record type: {record_type}",
        )

    wb = openpyxl.Workbook()
    wb.properties.creator = style.creator
    ws = wb.active
    ws.title = style.sheet_name

    for col, name in enumerate(columns, start=1):
        ws.cell(row=HEADER_ROW, column=col, value=name)
        ws.column_dimensions[get_column_letter(col)].width = style.column_width
    style_header_row(ws, len(columns), style.header)

    if style.auto_filter:
        ws.auto_filter.ref = f"A{HEADER_ROW}:{get_column_letter(len(columns))}{HEADER_ROW}"
    if style.freeze_header:
        ws.freeze_panes = f"A{HEADER_ROW + 1}"
    ws.sheet_view.zoomScale = style.zoom
    ws.sheet_view.showGridLines = style.show_gridlines

    logger.info(f"template built type={record_type} columns={len(columns)}")
    return Document(wb, name=f"{record_type}.xlsx")
