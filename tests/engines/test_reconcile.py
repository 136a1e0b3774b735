from __future__ import annotations

import copy

from coaching_recon.core.records import Classification, LedgerRecord, RegistryRecord
from coaching_recon.engines.reconcile import reconcile


def _by_class(items, classification):
    return [item for item in items if item.classification == classification]


def test_single_matched_pair() -> None:
    ledger = [{"name": "Kim", "phone": "010-1111-2222", "amount": 50000}]
    registry = [{"name": "Kim", "phone": "010-1111-2222", "coach": "A"}]

    items = reconcile(ledger, registry)

    assert len(items) == 1
    item = items[0]
    assert item.classification == Classification.MATCHED
    assert item.key == "Kim"
    assert item.ledger.amount_gross == 50000
    assert item.registry.coach == "A"


def test_keys_are_compared_after_trimming() -> None:
    items = reconcile([{"이름": " 김민수"}], [{"이름": "김민수  ", "코치": "이코치"}])

    assert [item.classification for item in items] == [Classification.MATCHED]


def test_unmatched_sides_and_ordering() -> None:
    ledger = [{"name": "Kim"}, {"name": "Lee"}]
    registry = [{"name": "Park"}, {"name": "Kim"}]

    items = reconcile(ledger, registry)

    assert [(item.key, item.classification) for item in items] == [
        ("Kim", Classification.MATCHED),
        ("Lee", Classification.LEDGER_ONLY),
        ("Park", Classification.REGISTRY_ONLY),
    ]


def test_first_active_registry_record_is_primary() -> None:
    registry = [
        {"name": "Park", "coach": "A"},
        {"name": "Park", "coach": "B"},
    ]

    matched = reconcile([{"name": "Park"}], registry)
    unpaid = reconcile([], registry)

    assert [item.registry.coach for item in matched] == ["A"]
    assert len(unpaid) == 1
    assert unpaid[0].classification == Classification.REGISTRY_ONLY
    assert unpaid[0].registry.coach == "A"


def test_cancelled_records_never_match() -> None:
    ledger = [{"name": "Lee"}]
    registry = [{"name": "Lee", "cancellation_status": "취소"}]

    items = reconcile(ledger, registry)

    assert [(item.key, item.classification) for item in items] == [
        ("Lee", Classification.LEDGER_ONLY),
        ("Lee", Classification.REGISTRY_ONLY),
    ]
    assert _by_class(items, Classification.MATCHED) == []


def test_cancelled_record_skipped_in_favour_of_active_one() -> None:
    registry = [
        {"name": "Lee", "coach": "A", "cancellation_status": "환불"},
        {"name": "Lee", "coach": "B"},
    ]

    items = reconcile([{"name": "Lee"}], registry)

    matched = _by_class(items, Classification.MATCHED)
    assert len(matched) == 1
    assert matched[0].registry.coach == "B"
    assert len(_by_class(items, Classification.REGISTRY_ONLY)) == 1


def test_every_cancelled_record_reported_individually() -> None:
    registry = [
        {"name": "Lee", "cancellation_status": "취소"},
        {"name": "Lee", "cancellation_status": "refunded"},
    ]

    items = reconcile([], registry)

    assert len(items) == 2
    assert all(item.classification == Classification.REGISTRY_ONLY for item in items)
    assert all(item.is_cancelled() for item in items)


def test_every_ledger_record_classified() -> None:
    ledger = [{"name": "Kim"}, {"name": "Kim"}, {"name": "Choi"}]
    registry = [{"name": "Kim"}]

    items = reconcile(ledger, registry)

    ledger_side = [item for item in items if item.ledger is not None]
    assert len(ledger_side) == 3
    assert [item.classification for item in ledger_side] == [
        Classification.MATCHED,
        Classification.MATCHED,
        Classification.LEDGER_ONLY,
    ]


def test_empty_batches() -> None:
    assert reconcile([], []) == []
    only_ledger = reconcile([{"name": "Kim"}], [])
    assert [item.classification for item in only_ledger] == [Classification.LEDGER_ONLY]


def test_blank_names_flow_through_with_empty_key() -> None:
    items = reconcile([{"name": "   "}], [])

    assert items[0].key == ""
    assert items[0].is_valid is False


def test_inputs_not_mutated_and_runs_are_repeatable() -> None:
    ledger = [{"이름": "Kim", "판매액(원)": "1,000"}, {"이름": "Lee"}]
    registry = [{"이름": "Kim", "코치": "A"}, {"이름": "Park", "취소 및 환불": "취소"}]
    ledger_before = copy.deepcopy(ledger)
    registry_before = copy.deepcopy(registry)

    first = reconcile(ledger, registry)
    second = reconcile(ledger, registry)

    assert ledger == ledger_before
    assert registry == registry_before
    assert first == second


def test_accepts_record_objects() -> None:
    items = reconcile([LedgerRecord(name="Kim")], [RegistryRecord(name="Kim")])

    assert items[0].classification == Classification.MATCHED
