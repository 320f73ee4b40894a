from __future__ import annotations

from ..models.processing_result import BatchResult

"""SUMMARY line rendering for batch imports.

Format:
SUMMARY files={total}/{total} success={success} failed={failed} rows={rows}
valid={valid} invalid={invalid} empty={empty} elapsed_sec={elapsed}
"""


def _format_seconds(seconds: float) -> str:
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # Format very small numbers to avoid scientific notation
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(total_files: int, result: BatchResult) -> str:
    """Render the SUMMARY line for a batch result.

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = BatchResult(
        ...     record_type="ringing", success_files=1, failed_files=0, total_rows=10,
        ...     valid_rows=8, invalid_rows=1, empty_rows=1, start_time=start, end_time=end,
        ...     elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(1, result)
        'SUMMARY files=1/1 success=1 failed=0 rows=10 valid=8 invalid=1 empty=1 elapsed_sec=2'
    """
    return (
        f"SUMMARY files={total_files}/{total_files} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"rows={result.total_rows} "
        f"valid={result.valid_rows} "
        f"invalid={result.invalid_rows} "
        f"empty={result.empty_rows} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
