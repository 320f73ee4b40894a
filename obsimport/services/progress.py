from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

from ..models.processing_result import FileStat

"""File progress for batch imports (tqdm, TTY only).

One bar per batch, one tick per file. The postfix carries running counts
(files ok / failed, rows valid / invalid) so a long batch can be followed
without the log. Off a TTY no bar is created at all.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    def __init__(self, total_files: int, *, record_type: str | None = None) -> None:
        self.total_files = total_files
        self.label = f"Importing {record_type}" if record_type else "Importing"
        self.current_file = 0
        self.counts = {"ok": 0, "failed": 0, "valid": 0, "invalid": 0}

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None = None
        if self.enabled:
            self.pbar = tqdm(total=total_files, desc=self.label, unit="file", leave=True, ncols=80, ascii=True)

    def start_file(self, file_path: Path) -> None:
        self.current_file += 1
        if self.pbar is not None:
            self.pbar.set_description(f"{self.label} [{self.current_file}/{self.total_files}] {file_path.name}")

    def finish_file(self, stat: FileStat) -> None:
        """Fold one file's outcome into the running counts and advance the bar."""
        if stat.status == "success":
            self.counts["ok"] += 1
        else:
            self.counts["failed"] += 1
        self.counts["valid"] += stat.valid_rows
        self.counts["invalid"] += stat.invalid_rows
        if self.pbar is not None:
            self.pbar.set_postfix(dict(self.counts))
            self.pbar.update(1)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.set_description(self.label)
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
