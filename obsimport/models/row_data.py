from __future__ import annotations

import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Union

"""Row level models for the observation import pipeline.

RawRecord is the coerced content of one non-empty data row. It is assembled
with RawRecordBuilder and frozen by build(); nothing mutates it afterwards.
ValidRow / InvalidRow are the two outcomes a row can have after validation.
"""

__all__ = [
    "EMPTY_ROW",
    "EmptyRow",
    "FIRST_DATA_ROW",
    "HEADER_ROW",
    "InvalidRow",
    "RawRecord",
    "RawRecordBuilder",
    "RowOutcome",
    "ValidRow",
]

HEADER_ROW = 1
FIRST_DATA_ROW = 2  # 1 行目ヘッダ、2 行目以降がデータ行


class EmptyRow:
    """Marker yielded by the extractor for rows with zero populated cells."""

    _instance: EmptyRow | None = None

    def __new__(cls) -> EmptyRow:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "EMPTY_ROW"


EMPTY_ROW = EmptyRow()


class RawRecord(Mapping[str, Any]):
    """Read-only mapping of column name -> coerced value (str, float or "")."""

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Any]) -> None:
        self._values: Mapping[str, Any] = MappingProxyType(dict(values))

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            return dict(self._values) == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"RawRecord({dict(self._values)!r})"

    def to_dict(self) -> dict[str, Any]:
        """Plain dict copy with NaN replaced by None (JSON friendly)."""
        return {k: (None if isinstance(v, float) and math.isnan(v) else v) for k, v in self._values.items()}


class RawRecordBuilder:
    """Accumulates the fields of one row, then freezes them into a RawRecord."""

    def __init__(self, defaults: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(defaults) if defaults else {}
        self._built = False

    def set(self, name: str, value: Any) -> RawRecordBuilder:
        if self._built:
            raise RuntimeError("RawRecordBuilder already finalized")
        self._values[name] = value
        return self

    def build(self) -> RawRecord:
        self._built = True
        return RawRecord(self._values)


@dataclass(frozen=True)
class ValidRow:
    """Row that passed field validation."""
    row_number: int  # 元シート上の行番号 (ヘッダ = 1)
    data: RawRecord

    def to_dict(self) -> dict[str, Any]:
        return {"rowNumber": self.row_number, "data": self.data.to_dict()}


@dataclass(frozen=True)
class InvalidRow:
    """Row rejected by field validation, with messages grouped by field path."""
    row_number: int
    field_errors: Mapping[str, tuple[str, ...]]

    def to_dict(self) -> dict[str, Any]:
        return {
            "rowNumber": self.row_number,
            "fieldErrors": {k: list(v) for k, v in self.field_errors.items()},
        }


RowOutcome = Union[ValidRow, InvalidRow]
