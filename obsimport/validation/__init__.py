"""Record validation capability consumed by the import pipeline."""

from .record_validator import FieldErrors, JsonSchemaRecordValidator, RecordValidator, accept_all

__all__ = [
    "FieldErrors",
    "JsonSchemaRecordValidator",
    "RecordValidator",
    "accept_all",
]
