from __future__ import annotations

import asyncio
import time
from unittest.mock import MagicMock

import pytest

from obsimport.excel.document import Document
from obsimport.excel.errors import StructuralError, StructuralErrorKind
from obsimport.models.row_data import InvalidRow, ValidRow
from obsimport.services.importer import classify_record, is_async_validator, run_import
from obsimport.validation.record_validator import JsonSchemaRecordValidator

HEADER = ["species", "sexCode", "date", "latitude", "longitude"]


@pytest.fixture()
def validator(ringing_schema):
    return JsonSchemaRecordValidator(ringing_schema)


def _scenario_document() -> Document:
    return Document.from_rows(
        [
            HEADER,
            ["Parus major", "M", "2020-13-45", "51.5", "-0.12"],  # row 2: bad date
            [None, None, None, None, None],  # row 3: empty
            ["Parus major", "F", "2020-05-01", "51.5", "-0.12"],  # row 4: valid
        ]
    )


def test_scenario_partitions_rows(registry, validator):
    summary = run_import(_scenario_document(), "ringing", registry, validator)

    assert summary.row_count == 3
    assert summary.empty_row_count == 1
    assert summary.possible_clones == 0
    assert summary.imported_count == 0

    assert [r.row_number for r in summary.valid_records] == [4]
    assert summary.valid_records[0].data["latitude"] == 51.5
    assert summary.valid_records[0].data["longitude"] == -0.12

    assert [r.row_number for r in summary.invalid_records] == [2]
    bad = summary.invalid_records[0]
    assert "date" in bad.field_errors
    assert all(isinstance(m, str) for m in bad.field_errors["date"])


def test_counts_add_up_to_row_count(registry, validator):
    doc = Document.from_rows(
        [
            HEADER,
            ["Parus major", "M", "2020-05-01", "51.5", "-0.12"],
            [None],
            ["Parus major", "X", "2020-05-01", "51.5", "-0.12"],
            [None],
            ["Parus major", "F", "2020-05-02", "north", "0"],
            ["Erithacus rubecula", "U", "2021-01-01", "10", "10"],
        ]
    )
    s = run_import(doc, "ringing", registry, validator)
    assert len(s.valid_records) + len(s.invalid_records) + s.empty_row_count == s.row_count
    assert s.row_count == 6
    assert s.empty_row_count == 2


def test_nan_latitude_is_rejected_by_validation(registry, validator):
    doc = Document.from_rows([HEADER, ["Parus major", "F", "2020-05-02", "north", "0"]])
    s = run_import(doc, "ringing", registry, validator)
    (row,) = s.invalid_records
    assert row.row_number == 2
    assert list(row.field_errors) == ["latitude"]


def test_empty_row_never_in_outputs(registry, validator):
    doc = Document.from_rows([HEADER, [None], ["Parus major", "F", "2020-05-01", "1", "1"]])
    s = run_import(doc, "ringing", registry, validator)
    all_rows = [r.row_number for r in s.valid_records] + [r.row_number for r in s.invalid_records]
    assert 2 not in all_rows
    assert s.empty_row_count == 1


def test_unknown_type_fails_before_reading(registry, validator):
    with pytest.raises(StructuralError) as e:
        run_import(_scenario_document(), "nesting", registry, validator)
    assert e.value.kind is StructuralErrorKind.UNKNOWN_TYPE


def test_missing_header_is_fatal_and_no_row_is_validated(registry):
    doc = Document.from_rows(
        [["sexCode", "date", "latitude", "longitude"], ["M", "2020-05-01", "1", "1"]]
    )
    mock_validator = MagicMock(return_value=None)
    with pytest.raises(StructuralError) as e:
        run_import(doc, "ringing", registry, mock_validator)
    assert e.value.kind is StructuralErrorKind.MISSING_COLUMNS
    assert e.value.columns == ("species",)
    mock_validator.assert_not_called()


def test_header_only_document_has_no_rows(registry, validator):
    s = run_import(Document.from_rows([HEADER]), "ringing", registry, validator)
    assert s.row_count == 0
    assert s.valid_records == () and s.invalid_records == ()


def test_output_sorted_when_validations_run_concurrently(registry):
    rows = [[f"sp{i}", "M", "2020-05-01", str(i), "0"] for i in range(12)]
    doc = Document.from_rows([HEADER, *rows])

    def slow_validator(record):
        lat = record["latitude"]
        # 先に投入した行ほど遅く終わる
        time.sleep(0.002 * (12 - lat))
        return {"latitude": ["odd"]} if int(lat) % 2 else None

    s = run_import(doc, "ringing", registry, slow_validator, max_workers=4)
    valid_numbers = [r.row_number for r in s.valid_records]
    invalid_numbers = [r.row_number for r in s.invalid_records]
    assert valid_numbers == sorted(valid_numbers) == [2, 4, 6, 8, 10, 12]
    assert invalid_numbers == sorted(invalid_numbers) == [3, 5, 7, 9, 11, 13]


def test_classify_record_wraps_validator_result():
    valid = classify_record(lambda r: None, 5, MagicMock())
    assert isinstance(valid, ValidRow) and valid.row_number == 5

    invalid = classify_record(lambda r: {"date": ["required"]}, 6, MagicMock())
    assert isinstance(invalid, InvalidRow)
    assert invalid.field_errors["date"] == ("required",)

    assert isinstance(classify_record(lambda r: {}, 7, MagicMock()), ValidRow)


@pytest.mark.parametrize("max_workers", [1, 4])
def test_async_validator_is_awaited_and_output_sorted(registry, max_workers):
    rows = [[f"sp{i}", "M", "2020-05-01", str(i), "0"] for i in range(10)]
    doc = Document.from_rows([HEADER, *rows])
    seen = []

    async def remote_validator(record):
        lat = int(record["latitude"])
        # 先の行ほど遅く返る
        await asyncio.sleep(0.002 * (10 - lat))
        seen.append(lat)
        return {"latitude": ["odd"]} if lat % 2 else None

    s = run_import(doc, "ringing", registry, remote_validator, max_workers=max_workers)
    assert sorted(seen) == list(range(10))
    assert [r.row_number for r in s.valid_records] == [2, 4, 6, 8, 10]
    assert [r.row_number for r in s.invalid_records] == [3, 5, 7, 9, 11]
    assert s.invalid_records[0].field_errors == {"latitude": ("odd",)}


def test_async_callable_object_is_detected():
    class RemoteValidator:
        async def __call__(self, record):
            return None

    assert is_async_validator(RemoteValidator())
    assert not is_async_validator(lambda r: None)


def test_classify_record_resolves_awaitable_result():
    async def check(record):
        return {"date": ["missing"]}

    outcome = classify_record(lambda r: check(r), 4, MagicMock())
    assert isinstance(outcome, InvalidRow)
    assert outcome.field_errors["date"] == ("missing",)


def test_relative_date_word_is_not_accepted_as_a_date(registry, validator):
    doc = Document.from_rows([HEADER, ["Parus major", "M", "today", "51.5", "-0.12"]])
    s = run_import(doc, "ringing", registry, validator)
    assert s.valid_records == ()
    assert s.invalid_records[0].row_number == 2
    assert "date" in s.invalid_records[0].field_errors
