from __future__ import annotations

from coaching_recon.core.records import Classification, LedgerRecord, MatchBasis, ReconciliationItem
from coaching_recon.engines.reconcile import reconcile
from coaching_recon.engines.suspected_matches import (
    find_suspected_matches,
    remaining_unmatched,
    split_residuals,
)


def test_phone_match_wins_over_nickname(ledger_only_item, registry_only_item) -> None:
    order = ledger_only_item("김민수", phone="010-1111-2222", nickname="minsu")
    by_phone = registry_only_item("김민수A", phone="010-1111-2222")
    by_nickname = registry_only_item("김민수B", nickname="minsu")

    pairs = find_suspected_matches([order], [by_nickname, by_phone])

    assert len(pairs) == 1
    assert pairs[0].registry_item is by_phone
    assert pairs[0].match_basis == MatchBasis.PHONE
    assert pairs[0].matched_value == "010-1111-2222"

    ledger_left, registry_left = remaining_unmatched([order], [by_nickname, by_phone], pairs)
    assert ledger_left == []
    assert registry_left == [by_nickname]


def test_falls_through_to_nickname_then_name(ledger_only_item, registry_only_item) -> None:
    nick_order = ledger_only_item("Kim", phone="010-0000-0000", nickname=" kimmy ")
    name_order = ledger_only_item("Lee")
    nick_coaching = registry_only_item("Kim Jr", nickname="kimmy")
    name_coaching = registry_only_item(" Lee ", phone="010-9999-9999")

    pairs = find_suspected_matches([nick_order, name_order], [name_coaching, nick_coaching])

    assert [(pair.match_basis, pair.matched_value) for pair in pairs] == [
        (MatchBasis.NICKNAME, "kimmy"),
        (MatchBasis.NAME, "Lee"),
    ]


def test_registry_item_claimed_once(ledger_only_item, registry_only_item) -> None:
    first = ledger_only_item("A", nickname="shared")
    second = ledger_only_item("B", nickname="shared")
    coaching = registry_only_item("C", nickname="shared")

    pairs = find_suspected_matches([first, second], [coaching])

    assert len(pairs) == 1
    assert pairs[0].ledger_item is first


def test_repeated_value_emits_once_and_stops_search(ledger_only_item, registry_only_item) -> None:
    first = ledger_only_item("A", phone="010-5555-5555")
    second = ledger_only_item("B", phone="010-5555-5555", nickname="bee")
    phone_one = registry_only_item("C", phone="010-5555-5555")
    phone_two = registry_only_item("D", phone="010-5555-5555")
    nickname_match = registry_only_item("E", nickname="bee")

    pairs = find_suspected_matches([first, second], [phone_one, phone_two, nickname_match])

    # second ledger item hits phone_two on an already emitted key; it does not try nickname
    assert len(pairs) == 1
    assert pairs[0].ledger_item is first
    assert pairs[0].registry_item is phone_one

    _, registry_left = remaining_unmatched([first, second], [phone_one, phone_two, nickname_match], pairs)
    assert registry_left == [phone_two, nickname_match]


def test_blank_values_do_not_link(ledger_only_item, registry_only_item) -> None:
    order = ledger_only_item("Kim", phone="  ", nickname=None)
    coaching = registry_only_item("Park", phone="", nickname="")

    assert find_suspected_matches([order], [coaching]) == []


def test_invalid_and_cancelled_items_are_ignored(ledger_only_item, registry_only_item) -> None:
    blank = ReconciliationItem("", Classification.LEDGER_ONLY, ledger=LedgerRecord(name="", phone="010-1"))
    order = ledger_only_item("Kim", phone="010-2")
    cancelled = registry_only_item("Kim2", phone="010-2", cancellation_status="취소")
    blank_coaching = registry_only_item("", phone="010-1")

    assert find_suspected_matches([blank, order], [cancelled, blank_coaching]) == []


def test_split_residuals_from_reconciled_items() -> None:
    ledger = [{"name": "Kim"}, {"name": "Lee", "phone": "010-7"}, {"name": ""}]
    registry = [
        {"name": "Kim"},
        {"name": "Lee Jr", "phone": "010-7"},
        {"name": "Choi", "cancellation_status": "환불"},
    ]

    items = reconcile(ledger, registry)
    ledger_only, registry_only = split_residuals(items)

    assert [item.key for item in ledger_only] == ["Lee"]
    assert [item.key for item in registry_only] == ["Lee Jr"]

    pairs = find_suspected_matches(ledger_only, registry_only)
    assert [(pair.ledger_item.key, pair.registry_item.key, pair.match_basis) for pair in pairs] == [
        ("Lee", "Lee Jr", MatchBasis.PHONE)
    ]
    # primary classification is unchanged
    assert [item.classification for item in items if item.key == "Lee"] == [Classification.LEDGER_ONLY]


def test_empty_inputs() -> None:
    assert find_suspected_matches([], []) == []
    assert remaining_unmatched([], [], []) == ([], [])
