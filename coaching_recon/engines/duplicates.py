# Docstring for coaching_recon/engines/duplicates module
"""
duplicates.py

Repeat-enrollment detection for the coaching registry.

A person is a duplicate case when the registry holds two or more active
(non-cancelled) enrollments under their key while the ledger holds at most
one payment for that key. The first active enrollment is the one the core
reconciler already used; every later one is surfaced as a DUPLICATE item so
the settlement team can decide whether it should be billed or removed.

Duplicate items are additive: Matched and RegistryOnly items are left alone,
and LedgerOnly items for a duplicate key are dropped so the same person is
not reported in two buckets.

Public API
----------
- find_duplicates(ledger_records, registry_records, cfg=RECONCILIATION_CONFIG)
    -> list[ReconciliationItem]
- apply_duplicates(items, duplicates) -> list[ReconciliationItem]
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Iterable

from ..config import RECONCILIATION_CONFIG, ReconciliationConfig
from ..core.keys import is_cancelled, ledger_key, registry_key
from ..core.records import (
    Classification,
    LedgerRecord,
    ReconciliationItem,
    RegistryRecord,
    as_ledger_records,
    as_registry_records,
)


def find_duplicates(
    ledger_records: Iterable[LedgerRecord | dict[str, Any]],
    registry_records: Iterable[RegistryRecord | dict[str, Any]],
    cfg: ReconciliationConfig = RECONCILIATION_CONFIG,
) -> list[ReconciliationItem]:
    """
    Return DUPLICATE items for repeat enrollments, in registry input order.

    Each item carries the extra registry record and, when the person paid
    once, that single ledger record. Blank keys never form a duplicate case.
    """
    ledger = as_ledger_records(ledger_records)
    registry = as_registry_records(registry_records)

    payments_per_key = Counter(ledger_key(order) for order in ledger)
    first_payment: dict[str, LedgerRecord] = {}
    for order in ledger:
        first_payment.setdefault(ledger_key(order), order)

    active = [record for record in registry if not is_cancelled(record, cfg)]
    enrollments_per_key = Counter(registry_key(record) for record in active)

    duplicates: list[ReconciliationItem] = []
    seen_keys: set[str] = set()
    for coaching in active:
        key = registry_key(coaching)
        if key == "":
            continue
        if key not in seen_keys:
            # first active enrollment is the primary one
            seen_keys.add(key)
            continue
        if enrollments_per_key[key] < 2 or payments_per_key[key] > 1:
            continue
        duplicates.append(
            ReconciliationItem(
                key,
                Classification.DUPLICATE,
                ledger=first_payment.get(key),
                registry=coaching,
            )
        )

    return duplicates


def duplicate_keys(duplicates: Iterable[ReconciliationItem]) -> set[str]:
    return {item.key for item in duplicates}


def apply_duplicates(
    items: Iterable[ReconciliationItem],
    duplicates: Iterable[ReconciliationItem],
) -> list[ReconciliationItem]:
    """New list: LedgerOnly items for duplicate keys dropped, duplicates appended."""
    duplicates = list(duplicates)
    keys = duplicate_keys(duplicates)

    kept = [
        item
        for item in items
        if not (item.classification == Classification.LEDGER_ONLY and item.key in keys)
    ]
    return kept + duplicates
