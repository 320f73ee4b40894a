from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from datetime import date, datetime
from typing import Any

import pandas as pd
from openpyxl.utils.datetime import from_excel

from .document import is_blank

"""Per-column coercion rules applied while extracting rows.

Rules never raise. A value that cannot be coerced degrades to "" (date) or NaN
(latitude / longitude) and is left for record validation to reject, so the
row stays visible in the import summary.
"""

__all__ = [
    "COERCION_RULES",
    "RESERVED_DEFAULTS",
    "coerce_date",
    "coerce_number",
    "coerce_text",
]

# pandas はこれらを実行時の日付として解釈してしまう
RELATIVE_DATE_WORDS = frozenset({"now", "today"})


def coerce_date(value: Any) -> str:
    """Return the calendar date of ``value`` as ISO-8601 (YYYY-MM-DD), "" if unparsable.

    Text must be ISO-8601; relative words ("today", "now") and free-form text
    such as a bare month name are rejected.
    """
    # 時刻部分は意図的に落とす (日付のみ保持)
    if is_blank(value) or isinstance(value, bool):
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    try:
        if isinstance(value, (int, float)):
            # Excel シリアル値 (1 未満は時刻のみなので日付扱いしない)
            if not math.isfinite(value) or value < 1:
                return ""
            return from_excel(value).date().isoformat()
        if not isinstance(value, str):
            return ""
        text = value.strip()
        if text.lower() in RELATIVE_DATE_WORDS:
            return ""
        parsed = pd.to_datetime(text, format="ISO8601", errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return ""
    if pd.isna(parsed):
        return ""
    return parsed.date().isoformat()


def coerce_number(value: Any) -> float:
    """Force numeric coercion; non-numeric and non-finite values become NaN."""
    if is_blank(value):
        return math.nan
    if isinstance(value, str):
        value = value.strip()
    try:
        number = float(pd.to_numeric(value, errors="coerce"))
    except (ValueError, TypeError):
        return math.nan
    return number if math.isfinite(number) else math.nan


def coerce_text(value: Any) -> str:
    return str(value)


COERCION_RULES: Mapping[str, Callable[[Any], Any]] = {
    "date": coerce_date,
    "latitude": coerce_number,
    "longitude": coerce_number,
}

# Reserved fields are present on every non-empty row, even when the cell is blank.
RESERVED_DEFAULTS: Mapping[str, Any] = {
    "date": "",
    "latitude": math.nan,
    "longitude": math.nan,
}
