# Docstring for coaching_recon/engines/stats module
"""
stats.py

Settlement statistics over a finalized reconciliation.

Counting rules
--------------
- Only valid records count (non-blank name on every present side).
- Cancelled/refunded registry records are excluded from matched, registry-only
  and coach counts, but every cancelled row (blank name or not) is counted in
  cancelled_count.
- registry_total includes cancelled rows; registry_total_without_cancelled
  does not.
- Date ranges use values that parse to YYYY.MM.DD; anything else is ignored.

Everything is recomputed from the inputs on each call. Inputs are not modified.

Public API
----------
- ReconciliationStats
- compute_stats(items, ledger_records, registry_records, cfg=RECONCILIATION_CONFIG)
    -> ReconciliationStats
- format_date_range(values, cfg=RECONCILIATION_CONFIG) -> str
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from typing import Any, Iterable, Mapping

from ..config import RECONCILIATION_CONFIG, ReconciliationConfig
from ..core.keys import is_cancelled
from ..core.normalizers import clean_text, parse_amount, parse_spreadsheet_date
from ..core.records import (
    Classification,
    LedgerRecord,
    ReconciliationItem,
    RegistryRecord,
    as_ledger_records,
    as_registry_records,
)


_PARSED_DATE = re.compile(r"^\d{4}\.\d{2}\.\d{2}$")


@dataclass(frozen=True)
class ReconciliationStats:
    total: int
    matched: int
    only_in_ledger: int
    only_in_registry: int
    duplicate_count: int
    ledger_total: int
    ledger_total_amount: float
    ledger_date_range: str
    registry_total: int
    registry_total_without_cancelled: int
    cancelled_count: int
    unique_coaches: int
    registry_date_range: str
    coach_sales: Mapping[str, float] = field(default_factory=dict)
    matching_rate: float = 0.0

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["coach_sales"] = dict(self.coach_sales)
        return data


def format_date_range(
    values: Iterable[Any],
    cfg: ReconciliationConfig = RECONCILIATION_CONFIG,
) -> str:
    """'min ~ max' over the values that parse to a date, else the no-data label."""
    dates = sorted(
        parsed
        for parsed in (parse_spreadsheet_date(value) for value in values)
        if isinstance(parsed, str) and _PARSED_DATE.match(parsed)
    )
    if not dates:
        return cfg.no_data_label
    return f"{dates[0]}{cfg.date_range_separator}{dates[-1]}"


def _count(items: list[ReconciliationItem], classification: Classification, cfg: ReconciliationConfig) -> int:
    return sum(
        1
        for item in items
        if item.classification == classification and item.is_valid and not item.is_cancelled(cfg)
    )


def _coach_sales(items: list[ReconciliationItem], cfg: ReconciliationConfig) -> dict[str, float]:
    sales: dict[str, float] = {}
    for item in items:
        if item.classification != Classification.MATCHED or not item.is_valid:
            continue
        coach = clean_text(item.registry.coach) or cfg.unassigned_coach_label
        sales[coach] = sales.get(coach, 0.0) + parse_amount(item.ledger.amount_gross)
    return sales


def compute_stats(
    items: Iterable[ReconciliationItem],
    ledger_records: Iterable[LedgerRecord | dict[str, Any]],
    registry_records: Iterable[RegistryRecord | dict[str, Any]],
    cfg: ReconciliationConfig = RECONCILIATION_CONFIG,
) -> ReconciliationStats:

    """

    Summarize a reconciliation for display and reporting.

    Args:
        items:
            Final classified items (after duplicates were applied).
        ledger_records / registry_records:
            The raw batches the items were built from.

    Returns:
        ReconciliationStats

    """

    items = list(items)
    ledger = as_ledger_records(ledger_records)
    registry = as_registry_records(registry_records)

    valid_ledger = [order for order in ledger if order.has_name]
    active_registry = [
        coaching for coaching in registry
        if coaching.has_name and not is_cancelled(coaching, cfg)
    ]
    cancelled_count = sum(1 for coaching in registry if is_cancelled(coaching, cfg))

    matched = _count(items, Classification.MATCHED, cfg)
    only_in_ledger = _count(items, Classification.LEDGER_ONLY, cfg)
    only_in_registry = _count(items, Classification.REGISTRY_ONLY, cfg)
    duplicate_count = _count(items, Classification.DUPLICATE, cfg)

    coaches = {clean_text(coaching.coach) for coaching in active_registry} - {""}

    ledger_total = len(valid_ledger)
    return ReconciliationStats(
        total=matched + only_in_ledger + only_in_registry,
        matched=matched,
        only_in_ledger=only_in_ledger,
        only_in_registry=only_in_registry,
        duplicate_count=duplicate_count,
        ledger_total=ledger_total,
        ledger_total_amount=float(sum(parse_amount(order.amount_gross) for order in valid_ledger)),
        ledger_date_range=format_date_range((order.payment_timestamp for order in valid_ledger), cfg),
        registry_total=only_in_registry + matched + cancelled_count,
        registry_total_without_cancelled=only_in_registry + matched,
        cancelled_count=cancelled_count,
        unique_coaches=len(coaches),
        registry_date_range=format_date_range((coaching.session_date for coaching in active_registry), cfg),
        coach_sales=_coach_sales(items, cfg),
        matching_rate=matched / ledger_total if ledger_total else 0.0,
    )
