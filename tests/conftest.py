from __future__ import annotations

import sys
from pathlib import Path

import pytest

# tests/ is one level under the repo root
PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from coaching_recon.core.records import (  # noqa: E402
    Classification,
    LedgerRecord,
    ReconciliationItem,
    RegistryRecord,
)


@pytest.fixture
def ledger_only_item():
    """Build a LEDGER_ONLY item from ledger field values."""
    def _make(name: str, **fields) -> ReconciliationItem:
        record = LedgerRecord(name=name, **fields)
        return ReconciliationItem(name.strip(), Classification.LEDGER_ONLY, ledger=record)
    return _make


@pytest.fixture
def registry_only_item():
    """Build a REGISTRY_ONLY item from registry field values."""
    def _make(name: str, **fields) -> ReconciliationItem:
        record = RegistryRecord(name=name, **fields)
        return ReconciliationItem(name.strip(), Classification.REGISTRY_ONLY, registry=record)
    return _make
