"""
keys.py

Identity key derivation for ledger and registry records.

The join key is the trimmed name and nothing else. Two different people with
the same name share a key and are treated as one identity; phone and nickname
only come into play for the residual unmatched records
(see engines/suspected_matches.py).
"""

from __future__ import annotations

from typing import Any

from ..config import RECONCILIATION_CONFIG, ReconciliationConfig
from .normalizers import clean_text
from .records import LedgerRecord, RegistryRecord


def make_key(name: Any) -> str:
    """Trimmed name, used verbatim as the join key."""
    return clean_text(name)


def ledger_key(record: LedgerRecord) -> str:
    return make_key(record.name)


def registry_key(record: RegistryRecord) -> str:
    return make_key(record.name)


def is_cancelled(
    record: RegistryRecord,
    cfg: ReconciliationConfig = RECONCILIATION_CONFIG,
) -> bool:
    """Cancellation status, trimmed and lowercased, is in the cancelled vocabulary."""
    return record.is_cancelled(cfg)
