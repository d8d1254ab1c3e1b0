from __future__ import annotations

import math
import re
from datetime import date, datetime, time
from typing import Any

import pandas as pd

"""Field transforms applied by column mappings.

Every transform is total: unparseable input is passed through (as text for
the date/time transforms) so that validation, not mapping, reports it.
"""

__all__ = [
    "to_compact_date",
    "to_hhmm",
    "to_number",
]

_HHMM = re.compile(r"^\d{2}:\d{2}$")
_TIME_IN_TEXT = re.compile(r"(\d{1,2}):(\d{2})")
# pandas resolves these against the clock; they are not dates
_RELATIVE_DATE_WORDS = frozenset({"now", "today"})


def to_compact_date(value: Any) -> str:
    """Normalize a date to ``YYYYMMDD``.

    >>> to_compact_date("2025-03-05")
    '20250305'
    >>> to_compact_date("not a date")
    'not a date'
    """
    if value is None or value == "":
        return ""
    if isinstance(value, (datetime, date)):
        if pd.isna(value):
            return ""
        return f"{value.year:04d}{value.month:02d}{value.day:02d}"
    text = str(value)
    if text.strip().lower() in _RELATIVE_DATE_WORDS:
        return text
    try:
        parsed = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        parsed = pd.NaT
    if not pd.isna(parsed):
        return f"{parsed.year:04d}{parsed.month:02d}{parsed.day:02d}"
    # 8-digit text that is not a calendar date (e.g. 20251399) and anything
    # else unparseable is left for the validators to report
    return text


def to_hhmm(value: Any) -> str:
    """Normalize a time of day to zero-padded ``HH:MM``."""
    if value is None or value == "":
        return ""
    if isinstance(value, (datetime, time)):
        if pd.isna(value):
            return ""
        return value.strftime("%H:%M")
    text = str(value)
    if _HHMM.match(text):
        return text
    match = _TIME_IN_TEXT.search(text)
    if match:
        return f"{match.group(1).zfill(2)}:{match.group(2)}"
    return text


def to_number(value: Any) -> Any:
    """Coerce to int/float; non-numeric input is returned unchanged."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return value
        return int(value) if value.is_integer() else value
    if not isinstance(value, str):
        return value
    text = value.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return value
    if not math.isfinite(number):
        return value
    return int(number) if number.is_integer() else number
