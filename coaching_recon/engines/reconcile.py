# Docstring for coaching_recon/engines/reconcile module
"""
reconcile.py

Core reconciliation engine: order ledger vs coaching registry.

This module performs record-level reconciliation between two independent
spreadsheet exports:

- Ledger: order/payment export (who paid, how much, when)
- Registry: coaching enrollment export (who enrolled, with which coach, when)

The matching goal is to classify every record as:
- matched: a ledger record whose identity key exists among active registry records
- onlyInA (ledger-only): paid, but no active enrollment under that key
- onlyInB (registry-only): enrolled (or cancelled), no payment under that key

Design goals
------------
- Deterministic matching: single-field natural key (trimmed name), exact
  equality, first-seen registry record wins for a key.
- Cancellation exclusion: cancelled/refunded enrollments never match and are
  always reported individually as registry-only.
- Immutability: input records are never modified; a new list of
  ReconciliationItem objects is returned.

Core matching logic
-------------------
1) Partition registry records into cancelled and active.
2) Index active records by key, keeping the first record seen per key.
3) Each ledger record (input order) -> matched or onlyInA; matched keys are
   marked consumed.
4) Registry records (input order):
   - cancelled -> onlyInB, every record, no de-duplication
   - active with an unconsumed key -> onlyInB once per key (the first record)

Repeat enrollments hidden behind step 2 are surfaced by engines/duplicates.py.

Public API
----------
- reconcile(ledger_records, registry_records, cfg=RECONCILIATION_CONFIG)
    -> list[ReconciliationItem]
"""

from __future__ import annotations

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


def _index_active_registry(
    registry: list[RegistryRecord],
    cfg: ReconciliationConfig,
) -> dict[str, RegistryRecord]:
    """First active registry record per key, in input order."""
    primary: dict[str, RegistryRecord] = {}
    for record in registry:
        if is_cancelled(record, cfg):
            continue
        primary.setdefault(registry_key(record), record)
    return primary


def reconcile(
        ledger_records: Iterable[LedgerRecord | dict[str, Any]],
        registry_records: Iterable[RegistryRecord | dict[str, Any]],
        cfg: ReconciliationConfig = RECONCILIATION_CONFIG,
) -> list[ReconciliationItem]:

    """

    Classify every ledger and registry record.

    Args:
        ledger_records:
            LedgerRecord objects or raw order rows (header -> cell value).
        registry_records:
            RegistryRecord objects or raw coaching rows.
        cfg:
            Reconciliation settings (cancelled status vocabulary).

    Returns:
        A new list of ReconciliationItem. Ledger-derived items come first
        (input order), then registry-derived items (input order).

    """

    ledger = as_ledger_records(ledger_records)
    registry = as_registry_records(registry_records)

    primary_by_key = _index_active_registry(registry, cfg)

    items: list[ReconciliationItem] = []
    consumed_keys: set[str] = set()

    for order in ledger:
        key = ledger_key(order)
        coaching = primary_by_key.get(key)
        if coaching is not None:
            items.append(
                ReconciliationItem(key, Classification.MATCHED, ledger=order, registry=coaching)
            )
            consumed_keys.add(key)
        else:
            items.append(ReconciliationItem(key, Classification.LEDGER_ONLY, ledger=order))

    # Registry side: cancelled rows are always reported, active rows once per unconsumed key
    reported_keys: set[str] = set()
    for coaching in registry:
        key = registry_key(coaching)
        if is_cancelled(coaching, cfg):
            items.append(ReconciliationItem(key, Classification.REGISTRY_ONLY, registry=coaching))
            continue
        if key in consumed_keys or key in reported_keys:
            continue
        reported_keys.add(key)
        items.append(
            ReconciliationItem(key, Classification.REGISTRY_ONLY, registry=primary_by_key[key])
        )

    return items
