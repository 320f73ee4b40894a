from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for error logging.

Structured record written to the JSON Lines error log. row=-1 is the sentinel
for file-level failures (unreadable workbook, missing columns) where no single
row is to blame; field is None in that case.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: spreadsheet filename being processed
        record_type: configured record type of the import
        row: Row number (1-based). Use -1 for file-level errors
        error_type: Error classification in UPPER_SNAKE_CASE format
        field: offending field for row-level errors, None otherwise
        message: human readable description
    """
    timestamp: str  # ISO8601 UTC
    file: str
    record_type: str
    row: int  # 行番号。ファイル単位エラーは -1
    error_type: str  # UPPER_SNAKE
    field: str | None
    message: str

    @staticmethod
    def create(
        file: str,
        record_type: str,
        row: int,
        error_type: str,
        message: str,
        field: str | None = None,
    ) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            record_type=record_type,
            row=row,
            error_type=error_type,
            field=field,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize to a single JSON line (fixed key set)."""
        return json.dumps(asdict(self), ensure_ascii=False)
