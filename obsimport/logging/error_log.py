from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord
from ..models.processing_result import ImportSummary

"""Error log buffering (JSON Lines).

- fixed record schema (see ErrorRecord), one JSON object per line
- one file per run: logs/errors-YYYYMMDD-HHMMSS.log (UTC), created on first flush
- records are buffered in memory and appended on flush()
"""

__all__ = [
    "ErrorLogBuffer",
    "ErrorRecord",
    "records_from_summary",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


def records_from_summary(file: str, record_type: str, summary: ImportSummary) -> Iterable[ErrorRecord]:
    """One FIELD_VALIDATION record per (invalid row, field, message)."""
    for row in summary.invalid_records:
        for field, messages in row.field_errors.items():
            for message in messages:
                yield ErrorRecord.create(
                    file=file,
                    record_type=record_type,
                    row=row.row_number,
                    error_type="FIELD_VALIDATION",
                    message=message,
                    field=field,
                )


class ErrorLogBuffer:
    """In-memory buffer for error records. flush() appends them as JSON Lines.

    Not thread safe: the orchestrator appends from a single thread.
    """

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir or LOGS_DIR

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def extend(self, records: Iterable[ErrorRecord]) -> None:
        self._records.extend(records)

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records; returns the log path, None when nothing was written."""
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
