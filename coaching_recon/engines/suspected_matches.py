# Docstring for coaching_recon/engines/suspected_matches module
"""
suspected_matches.py

Secondary identity linking for residual unmatched records.

After name-key reconciliation some people still show up twice: once as a
payment without coaching (LedgerOnly) and once as coaching without payment
(RegistryOnly), because the name was typed differently in one export. This
module pairs those residuals when another identity field agrees exactly.

Matching rules
--------------
For each ledger-only item, in input order, the tiers are tried in priority
order and the first tier with a hit ends the search:

1) phone     (ledger 휴대폰번호 vs registry 번호)
2) nickname
3) name

A tier only runs when the ledger value is non-blank. Values are compared as
trimmed strings with exact equality. Each registry-only item can be claimed
once per run (greedy, first claim wins; no global optimisation).

A pair is emitted under the key "<basis>_<value>". If that key was already
emitted the hit is dropped, the candidate stays unclaimed and the ledger item
is not tried against lower tiers.

Pairs are for reporting only; they never change the primary classification.

Public API
----------
- split_residuals(items, cfg=RECONCILIATION_CONFIG) -> (ledger_only, registry_only)
- find_suspected_matches(ledger_only_items, registry_only_items, cfg=...) -> list[SuspectedMatchPair]
- remaining_unmatched(ledger_only_items, registry_only_items, pairs) -> (ledger_only, registry_only)
"""

from __future__ import annotations

from functools import reduce
from typing import Callable, Iterable, NamedTuple, Optional

from ..config import RECONCILIATION_CONFIG, ReconciliationConfig
from ..core.normalizers import clean_text
from ..core.records import (
    Classification,
    LedgerRecord,
    MatchBasis,
    ReconciliationItem,
    RegistryRecord,
    SuspectedMatchPair,
)


# Priority order of the secondary identity fields
MATCH_TIERS: tuple[tuple[MatchBasis, Callable[[LedgerRecord], object], Callable[[RegistryRecord], object]], ...] = (
    (MatchBasis.PHONE, lambda order: order.phone, lambda coaching: coaching.phone),
    (MatchBasis.NICKNAME, lambda order: order.nickname, lambda coaching: coaching.nickname),
    (MatchBasis.NAME, lambda order: order.name, lambda coaching: coaching.name),
)


class _LinkState(NamedTuple):
    """Accumulator carried through the linking fold."""
    used: frozenset          # positions of claimed registry-only items
    emitted: frozenset       # dedupe keys already emitted
    pairs: tuple             # SuspectedMatchPair, in emission order


_EMPTY_STATE = _LinkState(frozenset(), frozenset(), ())


def split_residuals(
    items: Iterable[ReconciliationItem],
    cfg: ReconciliationConfig = RECONCILIATION_CONFIG,
) -> tuple[list[ReconciliationItem], list[ReconciliationItem]]:
    """Valid LedgerOnly items and valid, non-cancelled RegistryOnly items, in order."""
    ledger_only: list[ReconciliationItem] = []
    registry_only: list[ReconciliationItem] = []
    for item in items:
        if not item.is_valid:
            continue
        if item.classification == Classification.LEDGER_ONLY:
            ledger_only.append(item)
        elif item.classification == Classification.REGISTRY_ONLY and not item.is_cancelled(cfg):
            registry_only.append(item)
    return ledger_only, registry_only


def _find_candidate(
    value: str,
    registry_value: Callable[[RegistryRecord], object],
    registry_only: list[ReconciliationItem],
    used: frozenset,
) -> Optional[int]:
    for position, candidate in enumerate(registry_only):
        if position in used:
            continue
        if clean_text(registry_value(candidate.registry)) == value:
            return position
    return None


def _link_one(
    registry_only: list[ReconciliationItem],
) -> Callable[[_LinkState, ReconciliationItem], _LinkState]:

    def step(state: _LinkState, ledger_item: ReconciliationItem) -> _LinkState:
        for basis, ledger_value, registry_value in MATCH_TIERS:
            value = clean_text(ledger_value(ledger_item.ledger))
            if value == "":
                continue

            position = _find_candidate(value, registry_value, registry_only, state.used)
            if position is None:
                continue

            pair = SuspectedMatchPair(ledger_item, registry_only[position], basis, value)
            if pair.dedupe_key in state.emitted:
                # hit already reported under this key; stop for this ledger item
                return state
            return _LinkState(
                used=state.used | {position},
                emitted=state.emitted | {pair.dedupe_key},
                pairs=state.pairs + (pair,),
            )
        return state

    return step


def find_suspected_matches(
    ledger_only_items: Iterable[ReconciliationItem],
    registry_only_items: Iterable[ReconciliationItem],
    cfg: ReconciliationConfig = RECONCILIATION_CONFIG,
) -> list[SuspectedMatchPair]:
    """
    Pair residual ledger-only and registry-only items that look like one person.

    Invalid (blank-name) items and cancelled registry items are ignored, so
    the raw residual buckets can be passed directly.
    """
    ledger_only = [
        item
        for item in ledger_only_items
        if item.classification == Classification.LEDGER_ONLY and item.is_valid
    ]
    registry_only = [
        item
        for item in registry_only_items
        if item.classification == Classification.REGISTRY_ONLY
        and item.is_valid
        and not item.is_cancelled(cfg)
    ]

    final_state = reduce(_link_one(registry_only), ledger_only, _EMPTY_STATE)
    return list(final_state.pairs)


def remaining_unmatched(
    ledger_only_items: Iterable[ReconciliationItem],
    registry_only_items: Iterable[ReconciliationItem],
    pairs: Iterable[SuspectedMatchPair],
) -> tuple[list[ReconciliationItem], list[ReconciliationItem]]:
    """Residual lists with every suspected-pair member removed."""
    pairs = list(pairs)
    linked_ledger = {id(pair.ledger_item) for pair in pairs}
    linked_registry = {id(pair.registry_item) for pair in pairs}

    ledger_only = [item for item in ledger_only_items if id(item) not in linked_ledger]
    registry_only = [item for item in registry_only_items if id(item) not in linked_registry]
    return ledger_only, registry_only
