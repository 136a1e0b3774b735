# Docstring for coaching_recon/pipeline module
"""
pipeline.py

End-to-end monthly settlement run.

    raw rows -> reconcile -> find_duplicates / apply_duplicates
             -> split_residuals -> find_suspected_matches -> remaining_unmatched
             -> compute_stats

`reconcile_batches` is the pure in-memory entrypoint. `run_workbook_reconciliation`
wraps it with the Excel loaders and writers and returns the written paths.

Public API
----------
- ReconciliationResult
- reconcile_batches(ledger_rows, registry_rows, cfg=RECONCILIATION_CONFIG) -> ReconciliationResult
- build_report_frames(result) -> dict[str, pd.DataFrame]
- run_workbook_reconciliation(ledger_path, registry_path, *, year, month, output_dir=None,
  ledger_sheet=0, registry_sheet=0, combined=False) -> dict[str, Path]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

import pandas as pd

from .config import RECONCILIATION_CONFIG, ReconciliationConfig
from .core.records import (
    LedgerRecord,
    ReconciliationItem,
    RegistryRecord,
    SuspectedMatchPair,
    as_ledger_records,
    as_registry_records,
)
from .engines.duplicates import apply_duplicates, find_duplicates
from .engines.reconcile import reconcile
from .engines.stats import ReconciliationStats, compute_stats
from .engines.suspected_matches import find_suspected_matches, remaining_unmatched, split_residuals
from .load_data import load_ledger_rows, load_registry_rows
from .outputs.export_utils import write_settlement_bundle, write_settlement_workbook
from .outputs.settlement import (
    build_duplicates_dataframe,
    build_matched_dataframe,
    build_settlement_mismatch_dataframe,
    build_suspected_matches_dataframe,
    build_unmatched_dataframe,
)


@dataclass(frozen=True)
class ReconciliationResult:
    items: list[ReconciliationItem]
    duplicates: list[ReconciliationItem]
    suspected_matches: list[SuspectedMatchPair]
    stats: ReconciliationStats
    # residuals left after removing suspected-pair members
    unmatched_ledger: list[ReconciliationItem] = field(default_factory=list)
    unmatched_registry: list[ReconciliationItem] = field(default_factory=list)


def reconcile_batches(
    ledger_rows: Iterable[LedgerRecord | dict[str, Any]],
    registry_rows: Iterable[RegistryRecord | dict[str, Any]],
    cfg: ReconciliationConfig = RECONCILIATION_CONFIG,
) -> ReconciliationResult:
    """Run every engine stage over two in-memory batches."""
    ledger = as_ledger_records(ledger_rows)
    registry = as_registry_records(registry_rows)

    items = reconcile(ledger, registry, cfg)
    duplicates = find_duplicates(ledger, registry, cfg)
    items = apply_duplicates(items, duplicates)

    ledger_only, registry_only = split_residuals(items, cfg)
    suspected = find_suspected_matches(ledger_only, registry_only, cfg)
    unmatched_ledger, unmatched_registry = remaining_unmatched(ledger_only, registry_only, suspected)

    stats = compute_stats(items, ledger, registry, cfg)
    return ReconciliationResult(
        items=items,
        duplicates=duplicates,
        suspected_matches=suspected,
        stats=stats,
        unmatched_ledger=unmatched_ledger,
        unmatched_registry=unmatched_registry,
    )


def build_report_frames(
    result: ReconciliationResult,
    cfg: ReconciliationConfig = RECONCILIATION_CONFIG,
) -> dict[str, pd.DataFrame]:
    """Export kind -> settlement DataFrame."""
    return {
        "settlement": build_matched_dataframe(result.items),
        "mismatch": build_unmatched_dataframe(result.items, cfg),
        "settlement_mismatch": build_settlement_mismatch_dataframe(result.items, cfg),
        "suspected": build_suspected_matches_dataframe(result.suspected_matches),
        "duplicates": build_duplicates_dataframe(result.duplicates),
    }


def run_workbook_reconciliation(
    ledger_path: Path | str,
    registry_path: Path | str,
    *,
    year: int,
    month: int,
    output_dir: Path | str | None = None,
    ledger_sheet: str | int = 0,
    registry_sheet: str | int = 0,
    combined: bool = False,
    cfg: ReconciliationConfig = RECONCILIATION_CONFIG,
) -> dict[str, Path]:

    """

    Load both exports, reconcile them and write the settlement workbooks.

    Args:
        ledger_path / registry_path:
            Excel exports to reconcile.
        year / month:
            Settlement month, used for YYMM file and sheet names.
        output_dir:
            Folder for every workbook. When None each workbook goes to its
            report folder under reports/outputs.
        combined:
            Also write every sheet into one workbook, returned under "combined".

    Returns:
        Export kind -> written workbook path.

    """

    ledger_rows = load_ledger_rows(Path(ledger_path), use_sample_if_none=False, sheet_name=ledger_sheet)
    registry_rows = load_registry_rows(Path(registry_path), use_sample_if_none=False, sheet_name=registry_sheet)

    result = reconcile_batches(ledger_rows, registry_rows, cfg)

    frames = build_report_frames(result, cfg)
    paths = {
        kind: write_settlement_workbook(frame, kind, year=year, month=month, output_dir=output_dir)
        for kind, frame in frames.items()
    }
    if combined:
        paths["combined"] = write_settlement_bundle(frames, year=year, month=month, output_dir=output_dir)
    return paths
