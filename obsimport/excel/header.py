from __future__ import annotations

import logging
from collections.abc import Sequence

from ..models.row_data import HEADER_ROW
from .document import Document
from .errors import StructuralError, StructuralErrorKind

"""Header row handling: column index map and expected-column gate.

The gate is exact-match, case-sensitive and order-independent. Extra columns in
the document are ignored. A failure lists the *missing* names.
"""

__all__ = [
    "header_map",
    "missing_columns",
    "read_header_names",
    "validate_header_names",
]

logger = logging.getLogger(__name__)


def header_map(document: Document, sheet_index: int = 0) -> dict[int, str]:
    """Ordered {1-based column index: header name} for the non-blank header cells."""
    return {
        col: str(value)
        for col, value in sorted(document.populated_cells(HEADER_ROW, sheet_index).items())
    }


def read_header_names(document: Document, sheet_index: int = 0) -> list[str]:
    """Header names of row 1 in column order."""
    return list(header_map(document, sheet_index).values())


def missing_columns(header_names: Sequence[str], expected: Sequence[str]) -> list[str]:
    present = set(header_names)
    return [name for name in expected if name not in present]


def validate_header_names(header_names: Sequence[str], expected: Sequence[str]) -> None:
    """Raise StructuralError(MISSING_COLUMNS) when any expected name is absent.

    Args:
        header_names: names found in the document's header row
        expected: configured column names for the record type
    """
    missing = missing_columns(header_names, expected)
    if missing:
        logger.warning(f"header check failed: missing={missing} found={list(header_names)}")
        raise StructuralError(
            StructuralErrorKind.MISSING_COLUMNS,
            f"Missed column titles: {', '.join(missing)}",
            columns=tuple(missing),
        )
