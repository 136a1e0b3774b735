# Docstring for coaching_recon/load_data module
"""
load_data.py

Input loader utilities for the order export (ledger) and the coaching
registry export.

This module provides thin, predictable I/O functions that read the Excel
exports into pandas DataFrames and hand the engine plain row dicts. All
matching logic lives in coaching_recon.engines; nothing here renames, trims
or parses cell values.

Design goals
------------
- Separation of concerns: file I/O stays apart from reconciliation logic.
- Fail early on unusable files: a missing file or a missing name column
  raises; missing optional columns only warn, because the engine falls back
  to placeholders for them.
- Faithful rows: cell values are passed on as read; empty cells become None.

Inputs
------
- 주문전체내역 (order export): one row per payment.
- 매물코칭DB (coaching registry): one row per enrollment.

Public API
----------
- load_ledger_excel(path=None, use_sample_if_none=True, sheet_name=0) -> pd.DataFrame
- load_registry_excel(path=None, use_sample_if_none=True, sheet_name=0) -> pd.DataFrame
- dataframe_to_rows(df) -> list[dict]
- load_ledger_rows(...) / load_registry_rows(...) -> list[dict]

Privacy note
------------
Real exports hold names and phone numbers; keep them under data/raw/ and out
of source control. The repository ships synthetic samples only.
"""


import warnings
from pathlib import Path
from typing import Any, Mapping, Optional

import pandas as pd

from .config import (
    LEDGER_COLUMN_MAP,
    LEDGER_REQUIRED_COLUMNS,
    REGISTRY_COLUMN_MAP,
    REGISTRY_REQUIRED_COLUMNS,
    SAMPLE_DIR,
)


LEDGER_SAMPLE_FILENAME = "ledger_sample.xlsx"
REGISTRY_SAMPLE_FILENAME = "registry_sample.xlsx"

# Canonical fields the engine reads; missing ones only trigger a warning
LEDGER_OPTIONAL_FIELDS = ("phone", "nickname", "amount_gross", "payment_timestamp")
REGISTRY_OPTIONAL_FIELDS = ("phone", "nickname", "coach", "session_date", "cancellation_status")


def _canonical_columns(df: pd.DataFrame, column_map: Mapping[str, str]) -> set[str]:
    return {column_map[str(col).strip()] for col in df.columns if str(col).strip() in column_map}


def _validate_columns(
    df: pd.DataFrame,
    required_cols,
    column_map: Mapping[str, str],
    source_name: str,
) -> None:

    """

    Ensure the DataFrame has every required column.

    A required column counts as present under its raw export header or its
    canonical name.

    Raises:
        ValueError: if any required column is missing.

    """

    present = _canonical_columns(df, column_map)
    missing = [col for col in required_cols if column_map[col] not in present]
    if missing:
        raise ValueError(
            f"{source_name}: missing required columns: {missing}. "
            f"Present columns: {list(df.columns)}"
        )


def _warn_missing_optional(
    df: pd.DataFrame,
    optional_fields,
    column_map: Mapping[str, str],
    source_name: str,
) -> None:
    present = _canonical_columns(df, column_map)
    missing = [field for field in optional_fields if field not in present]
    if missing:
        warnings.warn(
            f"{source_name}: optional columns not found, placeholders will be used: {missing}",
            UserWarning,
            stacklevel=3,
        )


def _resolve_path(
    path: Optional[Path],
    use_sample_if_none: bool,
    sample_filename: str,
    source_name: str,
) -> Path:
    if path is None:
        if not use_sample_if_none:
            raise ValueError("No path provided and use_sample_if_none=False.")
        path = SAMPLE_DIR / sample_filename

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"{source_name} Excel file not found at: {path}")
    return path


def load_ledger_excel(
        path: Optional[Path] = None,
        use_sample_if_none: bool = True,
        sheet_name: str | int = 0,
) -> pd.DataFrame:

    """

    Load the order export (주문전체내역) from an Excel file.

    Args:
        path:
            Path to the Excel file. If None and use_sample_if_none is True,
            defaults to SAMPLE_DIR / 'ledger_sample.xlsx'.
        use_sample_if_none:
            If True and path is None, load from the sample directory.
        sheet_name:
            Sheet name or index to read (defaults to first sheet).

    Returns:
        pandas.DataFrame with the raw order rows.

    """

    path = _resolve_path(path, use_sample_if_none, LEDGER_SAMPLE_FILENAME, "Ledger")
    df = pd.read_excel(path, sheet_name=sheet_name)

    _validate_columns(df, LEDGER_REQUIRED_COLUMNS, LEDGER_COLUMN_MAP, source_name="Ledger")
    _warn_missing_optional(df, LEDGER_OPTIONAL_FIELDS, LEDGER_COLUMN_MAP, source_name="Ledger")

    return df


def load_registry_excel(
        path: Optional[Path] = None,
        use_sample_if_none: bool = True,
        sheet_name: str | int = 0,
) -> pd.DataFrame:

    """

    Load the coaching registry export (매물코칭DB) from an Excel file.

    Args:
        path:
            Path to the Excel file. If None and use_sample_if_none is True,
            defaults to SAMPLE_DIR / 'registry_sample.xlsx'.
        use_sample_if_none:
            If True and path is None, load from the sample directory.
        sheet_name:
            Sheet name or index to read (defaults to first sheet).

    Returns:
        pandas.DataFrame with the raw enrollment rows.

    """

    path = _resolve_path(path, use_sample_if_none, REGISTRY_SAMPLE_FILENAME, "Registry")
    df = pd.read_excel(path, sheet_name=sheet_name)

    _validate_columns(df, REGISTRY_REQUIRED_COLUMNS, REGISTRY_COLUMN_MAP, source_name="Registry")
    _warn_missing_optional(df, REGISTRY_OPTIONAL_FIELDS, REGISTRY_COLUMN_MAP, source_name="Registry")

    return df


def dataframe_to_rows(df: pd.DataFrame) -> list[dict[str, Any]]:
    """One dict per row (header -> cell value); empty cells become None."""
    cleaned = df.astype(object).where(df.notna(), None)
    return cleaned.to_dict(orient="records")


def load_ledger_rows(
        path: Optional[Path] = None,
        use_sample_if_none: bool = True,
        sheet_name: str | int = 0,
) -> list[dict[str, Any]]:
    return dataframe_to_rows(load_ledger_excel(path, use_sample_if_none, sheet_name))


def load_registry_rows(
        path: Optional[Path] = None,
        use_sample_if_none: bool = True,
        sheet_name: str | int = 0,
) -> list[dict[str, Any]]:
    return dataframe_to_rows(load_registry_excel(path, use_sample_if_none, sheet_name))
