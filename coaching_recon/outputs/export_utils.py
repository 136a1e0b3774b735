# Docstring for coaching_recon/outputs/export_utils module
"""
export_utils.py

Write settlement DataFrames to Excel workbooks.

Design goals
------------
- Low friction: single-sheet, multi-sheet, named settlement and combined
  settlement entrypoints.
- Safe output: parent directories exist before anything is written.
- Consistent engine: always openpyxl for .xlsx output.
- Predictable names: settlement workbooks follow the YYMM_매물코칭_... scheme;
  ad-hoc exports get a timestamped filename.

Public API
----------
- write_df_excel(df, output_path=None, *, report=None, filename_prefix="export",
  sheet_name="data", index=False) -> Path
- write_multi_sheet_excel(sheets, output_path, *, index=False) -> Path
- write_settlement_workbook(df, kind, *, year, month, output_dir=None) -> Path
- write_settlement_bundle(frames, *, year, month, output_dir=None) -> Path
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pandas as pd

from .. import config
from .settlement import settlement_file_stem, settlement_sheet_name


EXCEL_SHEETNAME_LIMIT = 31

# Export kind -> report folder under reports/outputs
REPORT_FOR_KIND = {
    "settlement": "settlement",
    "mismatch": "mismatch",
    "settlement_mismatch": "mismatch",
    "suspected": "suspected",
    "duplicates": "duplicates",
}


def _ensure_parent_dir(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _timestamped_filename(prefix: str) -> str:
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{stamp}.xlsx"


def _truncate_sheet_name(name: str) -> str:
    return name[:EXCEL_SHEETNAME_LIMIT]


def _dedupe_sheet_names(names: list[str]) -> list[str]:
    """Unique sheet names after truncation; a clash gets _1, _2, ... within the limit."""
    taken: set[str] = set()
    result: list[str] = []
    for raw_name in names:
        candidate = _truncate_sheet_name(raw_name)
        attempt = 0
        while candidate in taken:
            attempt += 1
            suffix = f"_{attempt}"
            candidate = _truncate_sheet_name(raw_name)[: EXCEL_SHEETNAME_LIMIT - len(suffix)] + suffix
        taken.add(candidate)
        result.append(candidate)
    return result


def write_df_excel(
    df: pd.DataFrame,
    output_path: Path | str | None = None,
    *,
    report: str | None = None,
    filename_prefix: str = "export",
    sheet_name: str = "data",
    index: bool = False,
) -> Path:
    """
    Write a DataFrame to a single-sheet Excel file and return the output path.

    If output_path is None, a timestamped file is created in the report's
    outputs folder (reports/outputs/<report>), or reports/outputs when no
    report is given.
    """
    if output_path is None:
        out_dir = config.get_report_outputs_dir(report) if report is not None else config.REPORTS_OUTPUTS_DIR
        output_path = Path(out_dir) / _timestamped_filename(filename_prefix)
    path = Path(output_path)
    _ensure_parent_dir(path)
    df.to_excel(path, engine="openpyxl", sheet_name=_truncate_sheet_name(sheet_name), index=index)
    return path


def write_multi_sheet_excel(
    sheets: dict[str, pd.DataFrame],
    output_path: Path | str,
    *,
    index: bool = False,
) -> Path:
    """
    Write several DataFrames to one workbook and return the path.

    Each dict key becomes a sheet name (truncated to Excel's 31-character limit).
    """
    path = Path(output_path)
    _ensure_parent_dir(path)
    sheet_names = _dedupe_sheet_names(list(sheets.keys()))
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for name, sheet_name in zip(sheets.keys(), sheet_names):
            sheets[name].to_excel(writer, sheet_name=sheet_name, index=index)
    return path


def write_settlement_workbook(
    df: pd.DataFrame,
    kind: str,
    *,
    year: int,
    month: int,
    output_dir: Path | str | None = None,
) -> Path:
    """
    Write one settlement export as <YYMM>_매물코칭_<suffix>.xlsx.

    Empty frames still produce a header-only sheet.
    """
    stem = settlement_file_stem(kind, year, month)
    if output_dir is None:
        output_dir = config.get_report_outputs_dir(REPORT_FOR_KIND[kind])
    path = Path(output_dir) / f"{stem}.xlsx"
    return write_df_excel(
        df,
        path,
        sheet_name=settlement_sheet_name(kind, year, month),
    )


def write_settlement_bundle(
    frames: dict[str, pd.DataFrame],
    *,
    year: int,
    month: int,
    output_dir: Path | str | None = None,
) -> Path:
    """
    Write every settlement export into one <YYMM>_매물코칭_결산_전체.xlsx workbook.

    frames maps export kind -> DataFrame; each kind becomes its own named sheet.
    """
    stem = settlement_file_stem("combined", year, month)
    if output_dir is None:
        output_dir = config.get_report_outputs_dir("settlement")
    sheets = {settlement_sheet_name(kind, year, month): frame for kind, frame in frames.items()}
    return write_multi_sheet_excel(sheets, Path(output_dir) / f"{stem}.xlsx")
