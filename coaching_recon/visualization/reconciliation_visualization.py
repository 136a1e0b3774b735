"""
reconciliation_visualization.py

Helpers for summarizing and visualizing reconciliation output.
"""

from __future__ import annotations

from typing import Iterable, Tuple

import matplotlib.pyplot as plt
import pandas as pd

from ..config import RECONCILIATION_CONFIG, ReconciliationConfig
from ..core.normalizers import clean_text, parse_amount
from ..core.records import Classification, ReconciliationItem


CLASSIFICATION_GROUPS = [
    ("matched", Classification.MATCHED.value),
    ("ledger_only", Classification.LEDGER_ONLY.value),
    ("registry_only", Classification.REGISTRY_ONLY.value),
    ("duplicate", Classification.DUPLICATE.value),
]

ITEM_FRAME_COLUMNS = [
    "key",
    "classification",
    "name",
    "coach",
    "amount_gross",
    "is_valid",
    "is_cancelled",
]


def _validate_required_columns(df: pd.DataFrame, required_cols: list[str]) -> None:
    missing = [col for col in required_cols if col not in df.columns]
    if missing:
        missing_list = ", ".join(missing)
        raise ValueError(f"Missing required columns: {missing_list}")


def items_to_frame(
    items: Iterable[ReconciliationItem],
    cfg: ReconciliationConfig = RECONCILIATION_CONFIG,
) -> pd.DataFrame:
    """One row per item with the fields the summaries need."""
    rows = []
    for item in items:
        rows.append(
            {
                "key": item.key,
                "classification": item.classification.value,
                "name": item.display_name,
                "coach": clean_text(item.registry.coach) if item.registry is not None else "",
                "amount_gross": parse_amount(item.ledger.amount_gross) if item.ledger is not None else 0.0,
                "is_valid": item.is_valid,
                "is_cancelled": item.is_cancelled(cfg),
            }
        )
    return pd.DataFrame(rows, columns=ITEM_FRAME_COLUMNS)


def build_classification_summary(df: pd.DataFrame) -> pd.DataFrame:
    """
    Count items per classification, valid and non-cancelled rows only.

    Required columns:
      - classification
      - is_valid
      - is_cancelled
    """

    _validate_required_columns(df, ["classification", "is_valid", "is_cancelled"])

    columns = ["classification_group", "count", "percent"]
    if df.empty:
        return pd.DataFrame(columns=columns)

    counted = df[df["is_valid"].astype(bool) & ~df["is_cancelled"].astype(bool)]
    total = int(counted.shape[0])
    rows = []
    for group_label, value in CLASSIFICATION_GROUPS:
        count = int((counted["classification"] == value).sum())
        percent = count / total if total else 0.0
        rows.append(
            {
                "classification_group": group_label,
                "count": count,
                "percent": percent,
            }
        )

    return pd.DataFrame(rows, columns=columns)


def plot_classification_summary(
    summary_df: pd.DataFrame,
) -> Tuple[plt.Figure, plt.Axes]:
    """
    Plot classification counts as percent of counted items.
    """

    _validate_required_columns(summary_df, ["classification_group", "count", "percent"])

    fig, ax = plt.subplots(figsize=(8, 4))
    if summary_df.empty:
        ax.text(0.5, 0.5, "No data available", ha="center", va="center")
        ax.set_axis_off()
        return fig, ax

    order = [group_label for group_label, _ in CLASSIFICATION_GROUPS]
    data = summary_df.set_index("classification_group").reindex(order).fillna(0)
    counts = data["count"].astype(int)
    percents = data["percent"] * 100

    ax.barh(order, percents, color="#72B7B2")
    ax.set_xlabel("Percent of Records")
    ax.set_title("Reconciliation Classification Summary")

    max_pct = float(percents.max() if len(percents) else 0)
    ax.set_xlim(0, max(10.0, max_pct * 1.15))

    for idx, (pct, count) in enumerate(zip(percents, counts)):
        ax.text(
            pct + 0.5,
            idx,
            f"{pct:.1f}% ({count})",
            va="center",
        )

    return fig, ax


def build_coach_sales_summary(
    df: pd.DataFrame,
    cfg: ReconciliationConfig = RECONCILIATION_CONFIG,
) -> pd.DataFrame:
    """
    Gross sales and matched count per coach, highest sales first.

    Blank coaches are grouped under the unassigned label.

    Required columns:
      - classification
      - coach
      - amount_gross
      - is_valid
    """

    _validate_required_columns(df, ["classification", "coach", "amount_gross", "is_valid"])

    columns = ["coach", "sales", "matched_count"]
    matched = df[
        (df["classification"] == Classification.MATCHED.value) & df["is_valid"].astype(bool)
    ]
    if matched.empty:
        return pd.DataFrame(columns=columns)

    coach = matched["coach"].fillna("").astype(str).str.strip()
    coach = coach.where(coach != "", cfg.unassigned_coach_label)

    summary = (
        matched.assign(coach=coach)
        .groupby("coach", sort=False)
        .agg(sales=("amount_gross", "sum"), matched_count=("amount_gross", "size"))
        .reset_index()
        .sort_values(["sales", "coach"], ascending=[False, True], kind="mergesort")
        .reset_index(drop=True)
    )
    summary["sales"] = summary["sales"].astype(float)
    summary["matched_count"] = summary["matched_count"].astype(int)
    return summary[columns]


def plot_coach_sales(
    summary_df: pd.DataFrame,
) -> Tuple[plt.Figure, plt.Axes]:
    """
    Plot gross sales per coach.
    """

    _validate_required_columns(summary_df, ["coach", "sales", "matched_count"])

    fig, ax = plt.subplots(figsize=(8, 4))
    if summary_df.empty:
        ax.text(0.5, 0.5, "No data available", ha="center", va="center")
        ax.set_axis_off()
        return fig, ax

    coaches = summary_df["coach"].astype(str).tolist()
    sales = summary_df["sales"].astype(float)
    counts = summary_df["matched_count"].astype(int)

    ax.bar(coaches, sales, color="#F58518")
    ax.set_ylabel("Gross Sales (KRW)")
    ax.set_title("Matched Sales by Coach")

    max_sales = float(sales.max() if len(sales) else 0)
    ax.set_ylim(0, max(1.0, max_sales * 1.2))

    for idx, (amount, count) in enumerate(zip(sales, counts)):
        ax.text(
            idx,
            amount + max(0.5, max_sales * 0.03),
            f"{amount:,.0f} ({count})",
            ha="center",
            va="bottom",
        )

    return fig, ax
