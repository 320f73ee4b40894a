from __future__ import annotations

import json
from pathlib import Path
from types import MappingProxyType

from obsimport.logging.error_log import ErrorLogBuffer, records_from_summary
from obsimport.models.error_record import ErrorRecord
from obsimport.models.processing_result import ImportSummary
from obsimport.models.row_data import InvalidRow


def test_flush_writes_json_lines(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "logs")
    buf.append(ErrorRecord.create("a.xlsx", "ringing", -1, "DOCUMENT_LOAD_ERROR", "bad zip"))
    buf.append(ErrorRecord.create("a.xlsx", "ringing", 3, "FIELD_VALIDATION", "bad", field="date"))
    assert len(buf) == 2

    path = buf.flush()
    assert path is not None and path.name.startswith("errors-") and path.suffix == ".log"
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["row"] for line in lines] == [-1, 3]
    assert len(buf) == 0


def test_flush_without_records_writes_nothing(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()


def test_records_from_summary_one_per_message():
    summary = ImportSummary(
        row_count=2,
        empty_row_count=0,
        possible_clones=0,
        imported_count=0,
        invalid_records=(
            InvalidRow(2, MappingProxyType({"date": ("too short", "not a date"), "latitude": ("nan",)})),
        ),
    )
    records = list(records_from_summary("f.xlsx", "ringing", summary))
    assert [(r.row, r.field) for r in records] == [(2, "date"), (2, "date"), (2, "latitude")]
    assert {r.error_type for r in records} == {"FIELD_VALIDATION"}
