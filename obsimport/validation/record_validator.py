from __future__ import annotations

import math
from collections.abc import Awaitable, Iterator, Mapping, Sequence
from typing import Any, Protocol

from jsonschema import Draft7Validator, validators
from jsonschema.exceptions import ValidationError

from ..models.row_data import RawRecord

"""Record (row) validation capability.

The import pipeline only depends on the RecordValidator protocol: a callable
taking a RawRecord and returning {field path: [messages]} (empty / None when the
record is valid), or an awaitable of that (async validators, e.g. ones backed
by a remote lookup). JsonSchemaRecordValidator is the bundled implementation,
driven by the per-type ``record_schema`` entries of the configuration.
"""

__all__ = [
    "FieldErrors",
    "JsonSchemaRecordValidator",
    "ObservationValidator",
    "RecordValidator",
    "ROOT_FIELD",
    "accept_all",
]

FieldErrors = Mapping[str, Sequence[str]]

ROOT_FIELD = "<record>"


class RecordValidator(Protocol):
    def __call__(self, record: RawRecord) -> FieldErrors | None | Awaitable[FieldErrors | None]: ...


def accept_all(record: RawRecord) -> FieldErrors | None:
    """Validator that accepts every record."""
    return None


def _finite(validator: Any, finite: bool, instance: Any, schema: Mapping[str, Any]) -> Iterator[ValidationError]:
    # NaN / inf は "number" 型を通過してしまうため独自キーワードで弾く
    if finite and isinstance(instance, float) and not math.isfinite(instance):
        yield ValidationError(f"{instance!r} is not a finite number")


ObservationValidator = validators.extend(Draft7Validator, {"finite": _finite})


def _field_errors(errors: Iterator[ValidationError]) -> dict[str, list[str]]:
    result: dict[str, list[str]] = {}
    for error in errors:
        if error.validator == "required" and isinstance(error.instance, Mapping):
            fields = [name for name in error.validator_value if name not in error.instance]
            for name in fields:
                message = f"'{name}' is a required property"
                messages = result.setdefault(name, [])
                if message not in messages:
                    messages.append(message)
            continue
        path = ".".join(str(p) for p in error.absolute_path) or ROOT_FIELD
        result.setdefault(path, []).append(error.message)
    return result


class JsonSchemaRecordValidator:
    """Validates RawRecords of one record type against a JSON Schema.

    NaN / infinite numbers can be rejected with the extra ``"finite": true``
    keyword; ``"format": "date"`` is checked.
    """

    def __init__(self, schema: Mapping[str, Any]) -> None:
        ObservationValidator.check_schema(schema)
        self.schema = schema
        self._validator = ObservationValidator(schema, format_checker=Draft7Validator.FORMAT_CHECKER)

    @classmethod
    def for_type(cls, record_schemas: Mapping[str, Mapping[str, Any]], record_type: str) -> RecordValidator:
        """Validator for ``record_type``; types without a schema accept everything."""
        schema = record_schemas.get(record_type)
        if schema is None:
            return accept_all
        return cls(schema)

    def __call__(self, record: RawRecord) -> FieldErrors | None:
        errors = _field_errors(self._validator.iter_errors(dict(record)))
        if not errors:
            return None
        return {k: tuple(v) for k, v in errors.items()}
