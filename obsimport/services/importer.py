from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Iterable
from concurrent.futures import ThreadPoolExecutor
from types import MappingProxyType

from ..excel.document import Document
from ..excel.extractor import RowExtractor
from ..excel.header import header_map, validate_header_names
from ..models.config_models import ColumnSchemaRegistry
from ..models.processing_result import ImportSummary
from ..models.row_data import EMPTY_ROW, InvalidRow, RawRecord, RowOutcome, ValidRow
from ..validation.record_validator import FieldErrors, RecordValidator, accept_all

"""Import aggregation for a single document.

run_import() drives: record type lookup -> header gate -> row extraction ->
record validation, and folds the outcomes into an ImportSummary. Validators may
be plain callables (optionally run on a thread pool) or coroutine functions
(awaited concurrently, at most max_workers at a time).

Header / type problems raise StructuralError before any row is read; nothing
row-related ever raises out of here (validator exceptions aside).
"""

__all__ = [
    "classify_record",
    "classify_record_async",
    "is_async_validator",
    "run_import",
]

logger = logging.getLogger(__name__)


def _outcome(row_number: int, record: RawRecord, errors: FieldErrors | None) -> RowOutcome:
    if not errors:
        return ValidRow(row_number=row_number, data=record)
    return InvalidRow(
        row_number=row_number,
        field_errors=MappingProxyType({field: tuple(messages) for field, messages in errors.items()}),
    )


async def _resolve(pending: Awaitable[FieldErrors | None]) -> FieldErrors | None:
    return await pending


def classify_record(validator: RecordValidator, row_number: int, record: RawRecord) -> RowOutcome:
    """Run the validator on one record and wrap the result as Valid/Invalid row.

    An awaitable result is driven to completion on a fresh event loop, so this
    must not be called from inside a running loop with an async validator.
    """
    errors = validator(record)
    if inspect.isawaitable(errors):
        errors = asyncio.run(_resolve(errors))
    return _outcome(row_number, record, errors)


async def classify_record_async(validator: RecordValidator, row_number: int, record: RawRecord) -> RowOutcome:
    errors = validator(record)
    if inspect.isawaitable(errors):
        errors = await errors
    return _outcome(row_number, record, errors)


def is_async_validator(validator: RecordValidator) -> bool:
    return inspect.iscoroutinefunction(validator) or inspect.iscoroutinefunction(
        getattr(validator, "__call__", None)
    )


async def _classify_all_async(
    records: list[tuple[int, RawRecord]],
    validator: RecordValidator,
    max_workers: int,
) -> list[RowOutcome]:
    # 同時実行数は max_workers で制限。gather は投入順で結果を返す
    limit = asyncio.Semaphore(max(max_workers, 1))

    async def run_one(row_number: int, record: RawRecord) -> RowOutcome:
        async with limit:
            return await classify_record_async(validator, row_number, record)

    return list(await asyncio.gather(*(run_one(n, r) for n, r in records)))


def _classify_all(
    records: list[tuple[int, RawRecord]],
    validator: RecordValidator,
    max_workers: int,
) -> Iterable[RowOutcome]:
    if is_async_validator(validator):
        return asyncio.run(_classify_all_async(records, validator, max_workers))
    row_numbers = [n for n, _ in records]
    payload = [r for _, r in records]
    if max_workers <= 1 or len(records) <= 1:
        return [classify_record(validator, n, r) for n, r in records]
    # Executor.map は投入順で結果を返すので行番号順は保たれる
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(lambda n, r: classify_record(validator, n, r), row_numbers, payload))


def run_import(
    document: Document,
    record_type: str,
    registry: ColumnSchemaRegistry,
    validator: RecordValidator = accept_all,
    *,
    max_workers: int = 1,
) -> ImportSummary:
    """Import the first sheet of ``document`` as records of ``record_type``.

    Args:
        document: loaded spreadsheet, exclusively owned by this call
        record_type: key into the column schema registry
        registry: configured column schemas
        validator: record validation capability
        max_workers: >1 dispatches sync validation to a thread pool; bounds
            concurrent awaits for an async validator

    Returns:
        ImportSummary with valid / invalid rows in ascending row order

    Raises:
        StructuralError: unknown record type or missing header columns
    """
    expected = registry.columns_for(record_type)
    columns = header_map(document)
    validate_header_names(list(columns.values()), expected)

    row_count = max(document.row_count() - 1, 0)
    empty_row_count = 0
    records: list[tuple[int, RawRecord]] = []
    for row_number, record in RowExtractor(document, columns).rows():
        if record is EMPTY_ROW:
            empty_row_count += 1
            continue
        records.append((row_number, record))

    valid: list[ValidRow] = []
    invalid: list[InvalidRow] = []
    for outcome in _classify_all(records, validator, max_workers):
        if isinstance(outcome, ValidRow):
            valid.append(outcome)
        else:
            invalid.append(outcome)
        logger.debug(f"row={outcome.row_number} valid={isinstance(outcome, ValidRow)}")

    summary = ImportSummary(
        row_count=row_count,
        empty_row_count=empty_row_count,
        possible_clones=0,
        imported_count=0,
        valid_records=tuple(sorted(valid, key=lambda o: o.row_number)),
        invalid_records=tuple(sorted(invalid, key=lambda o: o.row_number)),
    )
    logger.info(
        f"import {document.name} type={record_type} rows={row_count} valid={len(valid)} "
        f"invalid={len(invalid)} empty={empty_row_count}"
    )
    return summary
