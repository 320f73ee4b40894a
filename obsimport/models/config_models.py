from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from ..excel.errors import StructuralError, StructuralErrorKind

"""Configuration dataclasses for the observation import tool.

This module defines the read-only configuration objects shared by the import
and the template export paths:

- ColumnSchemaRegistry: record type -> ordered column names
- DocumentStyleConfig / HeaderStyle: presentation settings for templates
- ImportSettings: knobs for the import run itself
- AppConfig: root object produced by config.loader.load_config()

Every object here is frozen and built once at startup.
"""

__all__ = [
    "AppConfig",
    "ColumnSchemaRegistry",
    "DocumentStyleConfig",
    "HeaderStyle",
    "ImportSettings",
]


class ColumnSchemaRegistry(Mapping[str, tuple[str, ...]]):
    """Immutable mapping of record type to its ordered column names.

    The same registry feeds header validation on import and the header row of
    generated templates, so both sides always agree on names and order.
    """

    def __init__(self, schemas: Mapping[str, Any]) -> None:
        self._schemas: Mapping[str, tuple[str, ...]] = MappingProxyType(
            {str(k): tuple(str(c) for c in v) for k, v in schemas.items()}
        )

    def __getitem__(self, record_type: str) -> tuple[str, ...]:
        return self._schemas[record_type]

    def __iter__(self) -> Iterator[str]:
        return iter(self._schemas)

    def __len__(self) -> int:
        return len(self._schemas)

    def __repr__(self) -> str:  # pragma: no cover (debug only)
        return f"ColumnSchemaRegistry({dict(self._schemas)!r})"

    def columns_for(self, record_type: str) -> tuple[str, ...]:
        """Return the expected columns for ``record_type``.

        Raises:
            StructuralError: kind UNKNOWN_TYPE when the type is not configured
        """
        try:
            return self._schemas[record_type]
        except KeyError:
            raise StructuralError(
                StructuralErrorKind.UNKNOWN_TYPE,
                f"Unknown record type: {record_type}",
            ) from None


@dataclass(frozen=True)
class HeaderStyle:
    """Cell style applied to every header cell of a generated template."""
    bold: bool = True
    font_color: str = "FFFFFF"
    fill_color: str | None = "305496"
    horizontal: str = "center"
    vertical: str = "center"
    border: str | None = "thin"  # openpyxl Side style 名 (None で枠線なし)


@dataclass(frozen=True)
class DocumentStyleConfig:
    """Template sheet presentation: header style plus view/filter settings."""
    sheet_name: str = "Observations"
    creator: str = "obsimport"
    column_width: float = 20.0
    freeze_header: bool = True
    zoom: int = 100
    show_gridlines: bool = True
    auto_filter: bool = True
    header: HeaderStyle = field(default_factory=HeaderStyle)


@dataclass(frozen=True)
class ImportSettings:
    max_workers: int = 1  # >1 で行バリデーションをスレッドプールへ分配
    source_directory: str = "./data"


@dataclass(frozen=True)
class AppConfig:
    """Root configuration object for import and export runs."""
    registry: ColumnSchemaRegistry
    record_schemas: Mapping[str, Mapping[str, Any]]  # record type -> JSON Schema (任意)
    style: DocumentStyleConfig
    settings: ImportSettings
