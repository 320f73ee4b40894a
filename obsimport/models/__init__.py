"""Domain models for the observation spreadsheet import tool.

Configuration objects, row level records/outcomes and aggregated results.
"""

from .config_models import AppConfig, ColumnSchemaRegistry, DocumentStyleConfig, HeaderStyle, ImportSettings
from .error_record import ErrorRecord
from .processing_result import BatchResult, FileStat, ImportSummary
from .row_data import EMPTY_ROW, FIRST_DATA_ROW, InvalidRow, RawRecord, RawRecordBuilder, ValidRow

__all__ = [
    # Configuration models
    "AppConfig",
    "ColumnSchemaRegistry",
    "DocumentStyleConfig",
    "HeaderStyle",
    "ImportSettings",
    # Row models
    "EMPTY_ROW",
    "FIRST_DATA_ROW",
    "InvalidRow",
    "RawRecord",
    "RawRecordBuilder",
    "ValidRow",
    # Results
    "BatchResult",
    "ErrorRecord",
    "FileStat",
    "ImportSummary",
]
