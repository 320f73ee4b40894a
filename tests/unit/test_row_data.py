from __future__ import annotations

import math
from types import MappingProxyType

import pytest

from obsimport.models.processing_result import ImportSummary
from obsimport.models.row_data import EMPTY_ROW, EmptyRow, InvalidRow, RawRecord, RawRecordBuilder, ValidRow


def test_builder_finalizes_into_read_only_record():
    builder = RawRecordBuilder({"date": ""})
    record = builder.set("species", "Parus major").build()
    assert dict(record) == {"date": "", "species": "Parus major"}
    with pytest.raises(TypeError):
        record["species"] = "x"  # type: ignore[index]
    with pytest.raises(RuntimeError):
        builder.set("sexCode", "M")


def test_builder_defaults_are_copied():
    defaults = {"date": ""}
    RawRecordBuilder(defaults).set("date", "2020-01-01").build()
    assert defaults == {"date": ""}


def test_record_to_dict_replaces_nan():
    record = RawRecord({"latitude": math.nan, "longitude": 1.5})
    assert record.to_dict() == {"latitude": None, "longitude": 1.5}


def test_empty_row_marker_is_singleton():
    assert EmptyRow() is EMPTY_ROW


def test_outcomes_are_frozen():
    row = ValidRow(2, RawRecord({"species": "x"}))
    with pytest.raises(AttributeError):
        row.row_number = 3  # type: ignore[misc]


def test_summary_to_dict_contract():
    summary = ImportSummary(
        row_count=3,
        empty_row_count=1,
        possible_clones=0,
        imported_count=0,
        valid_records=(ValidRow(4, RawRecord({"latitude": 51.5})),),
        invalid_records=(InvalidRow(2, MappingProxyType({"date": ("bad",)})),),
    )
    assert summary.to_dict() == {
        "rowCount": 3,
        "emptyRowCount": 1,
        "possibleClones": 0,
        "importedCount": 0,
        "validRecords": [{"rowNumber": 4, "data": {"latitude": 51.5}}],
        "invalidRecords": [{"rowNumber": 2, "fieldErrors": {"date": ["bad"]}}],
    }
