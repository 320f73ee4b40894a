from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .row_data import InvalidRow, ValidRow

"""Result models for the observation import tool.

ImportSummary is the per-document DTO handed back to callers. FileStat and
BatchResult aggregate several documents for the CLI / batch orchestrator.
"""

__all__ = [
    "BatchResult",
    "FileStat",
    "ImportSummary",
]


@dataclass(frozen=True)
class ImportSummary:
    """Partitioned outcome of importing one document.

    Invariant: len(valid_records) + len(invalid_records) + empty_row_count == row_count
    """
    row_count: int  # シート行数 - ヘッダ 1 行
    empty_row_count: int
    possible_clones: int  # 重複検出は未実装 (常に 0)
    imported_count: int  # 永続化しないため常に 0
    valid_records: tuple[ValidRow, ...] = ()
    invalid_records: tuple[InvalidRow, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Structured response form (camelCase keys, NaN -> None)."""
        return {
            "rowCount": self.row_count,
            "emptyRowCount": self.empty_row_count,
            "possibleClones": self.possible_clones,
            "importedCount": self.imported_count,
            "validRecords": [r.to_dict() for r in self.valid_records],
            "invalidRecords": [r.to_dict() for r in self.invalid_records],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)


@dataclass(frozen=True)
class FileStat:
    """Per-file statistics of a batch import."""
    file_name: str
    status: str  # success/failed
    row_count: int
    valid_rows: int
    invalid_rows: int
    empty_rows: int
    elapsed_seconds: float
    error: str | None = None  # 失敗理由 (StructuralError / 読込失敗)


@dataclass(frozen=True)
class BatchResult:
    """Aggregated results of importing several documents of one record type."""
    record_type: str
    success_files: int
    failed_files: int
    total_rows: int
    valid_rows: int
    invalid_rows: int
    empty_rows: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] = field(default_factory=list)
    summaries: dict[str, ImportSummary] = field(default_factory=dict)  # file name -> summary
