# Docstring for coaching_recon/core/normalizers module
"""
normalizers.py

Shared normalization helpers for spreadsheet cell values.

Spreadsheet exports hand us free text, locale-formatted currency strings
("1,234,000원"), spreadsheet serial dates (45000.0) and real datetimes
depending on how each cell was formatted. Every engine goes through these
helpers so the same cell always normalizes the same way.

Design goals
------------
- Never raise on bad cell content: fall back to "", 0.0 or the original value.
- One notion of "blank": None, pandas missing values (NaN/NA/NaT) and
  whitespace-only strings are all blank.
- Dates follow the spreadsheet serial convention exactly (day 0 = 1899-12-30).

Public API
----------
- is_blank(value) -> bool
- clean_text(value) -> str
- parse_amount(value) -> float
- parse_spreadsheet_date(value) -> str | Any
- format_spreadsheet_datetime(value) -> str | Any
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta
from numbers import Real
from typing import Any

import pandas as pd


# Serial day 25569 is 1970-01-01 in the 1900 date system
SPREADSHEET_UNIX_EPOCH_OFFSET = 25569
_UNIX_EPOCH = datetime(1970, 1, 1)

# Characters kept from an amount string before parsing
_NON_NUMERIC = re.compile(r"[^\d.\-]")

# Leading float literal, same prefix rule as JavaScript parseFloat
_LEADING_FLOAT = re.compile(r"^-?(?:\d+\.?\d*|\.\d+)")

# YYYY-MM-DD / YYYY.MM.DD with an optional time part
_DATE_STRING = re.compile(
    r"^(\d{4})[.-](\d{1,2})[.-](\d{1,2})(?:\s+\d{1,2}:\d{1,2}(?::\d{1,2})?)?$"
)


def is_blank(value: Any) -> bool:
    """True for None, pandas missing values and whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    # pd.isna on list-likes returns an array; those are never blank cells
    if not pd.api.types.is_scalar(value):
        return False
    return bool(pd.isna(value))


def clean_text(value: Any) -> str:
    """Trimmed string form of a cell; blank cells become ""."""
    if is_blank(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        # Phone numbers and IDs typed as numbers come back as 1012345678.0
        return str(int(value))
    return str(value).strip()


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def parse_amount(value: Any) -> float:
    """
    Parse a currency cell into a float.

    Numbers pass through. Strings keep only digits, "." and "-" and the
    leading float literal is parsed, so "1,234,000원" -> 1234000.0.
    Anything missing or unparseable is 0.0.
    """
    if _is_number(value):
        number = float(value)
        return number if math.isfinite(number) else 0.0

    if not isinstance(value, str):
        return 0.0

    cleaned = _NON_NUMERIC.sub("", value)
    match = _LEADING_FLOAT.match(cleaned)
    if not match:
        return 0.0
    return float(match.group(0))


def _serial_to_datetime(serial: float) -> datetime | None:
    """Convert a spreadsheet serial day count to a naive UTC datetime."""
    if not math.isfinite(serial):
        return None
    try:
        return _UNIX_EPOCH + timedelta(days=serial - SPREADSHEET_UNIX_EPOCH_OFFSET)
    except OverflowError:
        return None


def parse_spreadsheet_date(value: Any) -> Any:
    """
    Normalize a date cell to "YYYY.MM.DD".

    - Numbers are spreadsheet serial dates (day 0 = 1899-12-30).
    - datetime / date / pandas.Timestamp values are formatted directly.
    - "YYYY-MM-DD", "YYYY.MM.DD" and either with a " HH:MM[:SS]" suffix are
      zero-padded and truncated to the date.
    - Blank cells become "".

    Anything else is returned unchanged.
    """
    if is_blank(value):
        return ""

    if isinstance(value, (datetime, date)):
        return value.strftime("%Y.%m.%d")

    if _is_number(value):
        converted = _serial_to_datetime(float(value))
        if converted is None:
            return value
        return converted.strftime("%Y.%m.%d")

    if isinstance(value, str):
        match = _DATE_STRING.match(value.strip())
        if match:
            year, month, day = match.groups()
            return f"{year}.{int(month):02d}.{int(day):02d}"

    return value


def format_spreadsheet_datetime(value: Any) -> Any:
    """
    Format a timestamp cell as "YYYY-MM-DD HH:MM:SS" for export.

    Serial numbers and datetimes are converted; strings are kept as typed.
    Blank cells become "".
    """
    if is_blank(value):
        return ""

    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d 00:00:00")

    if _is_number(value):
        converted = _serial_to_datetime(float(value))
        if converted is None:
            return str(value)
        return converted.strftime("%Y-%m-%d %H:%M:%S")

    if isinstance(value, str):
        return value
    return str(value)
