from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from ..excel.document import Document
from ..excel.errors import DocumentLoadError, StructuralError
from ..logging.error_log import ErrorLogBuffer, ErrorRecord, records_from_summary
from ..models.config_models import AppConfig
from ..models.processing_result import BatchResult, FileStat, ImportSummary
from ..validation.record_validator import JsonSchemaRecordValidator, RecordValidator
from .importer import run_import
from .progress import ProgressTracker

"""Batch import orchestration.

Imports several spreadsheet files of one record type:
1. Resolve the record type once (unknown type is fatal for the batch)
2. Load + import each file; a file that cannot be opened or fails the header
   gate is counted as failed and the batch continues
3. Buffer error records (file level + per field) and flush them once
4. Return BatchResult with per-file stats and summaries
"""

__all__ = [
    "ProcessingError",
    "import_files",
    "resolve_paths",
    "scan_excel_files",
]

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Fatal batch-level error (missing directory, unreadable directory)."""


def scan_excel_files(directory: Path) -> list[Path]:
    """Return the .xlsx files of ``directory`` (non-recursive, sorted by name).

    Raises:
        ProcessingError: If directory doesn't exist or can't be read
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")

    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")

    try:
        return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix == ".xlsx")
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def resolve_paths(paths: Sequence[Path]) -> list[Path]:
    """Expand directories to their .xlsx files; plain files are kept as given."""
    resolved: list[Path] = []
    for p in paths:
        if p.is_dir():
            resolved.extend(scan_excel_files(p))
        elif p.exists():
            resolved.append(p)
        else:
            raise ProcessingError(f"File not found: {p}")
    return resolved


def _file_failed(path: Path, record_type: str, error_type: str, message: str, error_log: ErrorLogBuffer) -> FileStat:
    logger.error(f"{path.name}: {message}")
    error_log.append(
        ErrorRecord.create(file=path.name, record_type=record_type, row=-1, error_type=error_type, message=message)
    )
    return FileStat(
        file_name=path.name,
        status="failed",
        row_count=0,
        valid_rows=0,
        invalid_rows=0,
        empty_rows=0,
        elapsed_seconds=0.0,
        error=message,
    )


def import_files(
    paths: Sequence[Path],
    record_type: str,
    config: AppConfig,
    validator: RecordValidator | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> BatchResult:
    """Import every file in ``paths`` as ``record_type``.

    Raises:
        StructuralError: unknown record type (nothing is imported)
    """
    start_time = datetime.now(UTC)
    config.registry.columns_for(record_type)
    if validator is None:
        validator = JsonSchemaRecordValidator.for_type(config.record_schemas, record_type)
    if error_log is None:
        error_log = ErrorLogBuffer()

    file_stats: list[FileStat] = []
    summaries: dict[str, ImportSummary] = {}
    success = failed = 0

    with ProgressTracker(len(paths), record_type=record_type) as progress:
        for path in paths:
            progress.start_file(path)
            file_start = datetime.now(UTC)
            try:
                document = Document.load(path)
                summary = run_import(
                    document,
                    record_type,
                    config.registry,
                    validator,
                    max_workers=config.settings.max_workers,
                )
            except DocumentLoadError as e:
                failed += 1
                stat = _file_failed(path, record_type, "DOCUMENT_LOAD_ERROR", str(e), error_log)
            except StructuralError as e:
                failed += 1
                stat = _file_failed(path, record_type, e.error_type, str(e), error_log)
            else:
                success += 1
                summaries[path.name] = summary
                error_log.extend(records_from_summary(path.name, record_type, summary))
                stat = FileStat(
                    file_name=path.name,
                    status="success",
                    row_count=summary.row_count,
                    valid_rows=len(summary.valid_records),
                    invalid_rows=len(summary.invalid_records),
                    empty_rows=summary.empty_row_count,
                    elapsed_seconds=(datetime.now(UTC) - file_start).total_seconds(),
                )
            file_stats.append(stat)
            progress.finish_file(stat)

    try:
        log_path = error_log.flush()
    except OSError as e:
        # エラーログ書き込み失敗で処理全体は失敗させない
        logger.warning(f"error log flush failed: {e}")
    else:
        if log_path is not None:
            logger.info(f"error log written: {log_path}")

    end_time = datetime.now(UTC)
    ok_stats = [s for s in file_stats if s.status == "success"]
    return BatchResult(
        record_type=record_type,
        success_files=success,
        failed_files=failed,
        total_rows=sum(s.row_count for s in ok_stats),
        valid_rows=sum(s.valid_rows for s in ok_stats),
        invalid_rows=sum(s.invalid_rows for s in ok_stats),
        empty_rows=sum(s.empty_rows for s in ok_stats),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
        summaries=summaries,
    )
