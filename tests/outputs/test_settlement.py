from __future__ import annotations

import pandas as pd
import pytest

from coaching_recon.core.records import (
    Classification,
    LedgerRecord,
    MatchBasis,
    ReconciliationItem,
    RegistryRecord,
    SuspectedMatchPair,
)
from coaching_recon.engines.reconcile import reconcile
from coaching_recon.outputs.settlement import (
    COACHING_DETAIL_COLUMNS,
    DUPLICATE_DETAIL_COLUMNS,
    SETTLEMENT_COLUMNS,
    build_duplicates_dataframe,
    build_matched_dataframe,
    build_settlement_mismatch_dataframe,
    build_suspected_matches_dataframe,
    build_unmatched_dataframe,
    mismatch_group_key,
    settlement_file_stem,
    settlement_sheet_name,
)


def _matched_item(ledger_row: dict, registry_row: dict) -> ReconciliationItem:
    ledger = LedgerRecord.from_row(ledger_row)
    registry = RegistryRecord.from_row(registry_row)
    return ReconciliationItem(ledger.name, Classification.MATCHED, ledger=ledger, registry=registry)


def _no_none(df) -> bool:
    return not any(value is None for value in df.to_numpy().ravel())


def test_matched_dataframe_defaults_and_extras() -> None:
    item = _matched_item(
        {
            "이름": "김민수",
            "휴대폰번호": "010-1234-5678",
            "판매액(원)": "990,000",
            "PG 결제액(원)": 900000,
            "결제일시": 45000.5,
            "메모": "VIP",
        },
        {"이름": "김민수", "코치": "이코치", "코칭진행일": 45001, "만족도": 5},
    )

    df = build_matched_dataframe([item])

    assert list(df.columns[: len(SETTLEMENT_COLUMNS)]) == SETTLEMENT_COLUMNS
    assert list(df.columns[len(SETTLEMENT_COLUMNS):]) == ["메모", "코칭_만족도"]
    row = df.iloc[0]
    assert row["전시상품명"] == "투자코칭_25년 8월"
    assert row["옵션정보"] == "월부멘토 1:1 투자코칭"
    assert row["판매액(원)"] == pytest.approx(990000.0)
    assert row["PG 결제액(원)"] == pytest.approx(900000.0)
    assert row["쿠폰할인"] == 0.0
    assert row["상태"] == "결제완료"
    assert row["결제일시"] == "2023-03-15 12:00:00"
    assert row["대기신청일"] == "2023-03-16 00:00:00"
    assert row["코치"] == "이코치"
    assert row["마케팅수신동의"] == "Y"
    assert row["메모"] == "VIP"
    assert row["코칭_만족도"] == 5


def test_matched_dataframe_keeps_cancellation_note() -> None:
    noted = _matched_item({"이름": "Kim"}, {"이름": "Kim", "취소 및 환불": "보류"})
    plain = _matched_item({"이름": "Lee"}, {"이름": "Lee"})

    df = build_matched_dataframe([plain, noted])

    assert list(df.columns[len(SETTLEMENT_COLUMNS):]) == ["코칭_취소 및 환불"]
    assert df.iloc[1]["코칭_취소 및 환불"] == "보류"
    assert pd.isna(df.iloc[0]["코칭_취소 및 환불"])


def test_matched_dataframe_skips_other_classes_and_handles_empty() -> None:
    items = reconcile([{"name": "Kim"}], [{"name": "Lee"}])

    df = build_matched_dataframe(items)

    assert df.empty is True
    assert list(df.columns) == SETTLEMENT_COLUMNS


def test_unmatched_dataframe_placeholders() -> None:
    items = reconcile(
        [{"이름": "Kim", "판매액(원)": "550,000"}],
        [
            {"이름": "Lee", "번호": "010-2222-3333", "코치": "박코치", "비고2": "x"},
            {"이름": "Choi", "취소 및 환불": "취소"},
        ],
    )

    df = build_unmatched_dataframe(items)

    assert list(df["이름"]) == ["Kim", "Lee"]
    assert list(df["상태"]) == ["결제완료(코칭없음)", "코칭신청(결제없음)"]
    assert _no_none(df[SETTLEMENT_COLUMNS])

    ledger_row, registry_row = df.iloc[0], df.iloc[1]
    assert ledger_row["판매액(원)"] == pytest.approx(550000.0)
    assert ledger_row["코치"] == "-"
    assert ledger_row["전시상품명"] == "-"
    assert registry_row["전시상품명"] == "코칭신청"
    assert registry_row["옵션정보"] == "코칭서비스"
    assert registry_row["휴대폰번호"] == "010-2222-3333"
    assert registry_row["주문번호"] == "-"
    assert registry_row["판매액(원)"] == 0.0
    assert registry_row["코치"] == "박코치"
    assert registry_row["코칭_비고2"] == "x"


def test_settlement_mismatch_groups_and_markers(ledger_only_item, registry_only_item) -> None:
    items = [
        registry_only_item("김철수", phone="010-1111-1111", session_date=45000),
        ledger_only_item("Ahn", phone="010-2222-2222", amount_gross="1,000"),
        ledger_only_item("김철", phone="010-1111-1111"),
        ledger_only_item("", phone="010-9999-9999"),
    ]

    df = build_settlement_mismatch_dataframe(items)

    assert list(df.columns) == SETTLEMENT_COLUMNS + COACHING_DETAIL_COLUMNS
    assert list(df["이름"]) == ["김철", "김철수", "Ahn"]
    assert list(df["전시상품명"]) == ["🔴 -", "🔴 코칭신청", "-"]
    assert df.iloc[1]["코칭진행일"] == "2023.03.15"
    assert df.iloc[1]["코칭_신청일"] == "2023.03.15"
    assert df.iloc[2]["판매액(원)"] == pytest.approx(1000.0)
    assert df.iloc[0]["판매액(원)"] == "-"
    assert _no_none(df)


def test_mismatch_group_key_priority(ledger_only_item, registry_only_item) -> None:
    assert mismatch_group_key(ledger_only_item("Kim", phone=" 010 ", nickname="k")) == "phone_010"
    assert mismatch_group_key(registry_only_item("Kim", nickname="k")) == "nickname_k"
    assert mismatch_group_key(registry_only_item("Kim")) == "name_Kim"


def test_suspected_matches_dataframe(ledger_only_item, registry_only_item) -> None:
    pair = SuspectedMatchPair(
        ledger_only_item("김민수", phone="010-1", order_id="ORD1"),
        registry_only_item("김민수님", phone="010-1", coach="최코치", first_choice_region="강남구"),
        MatchBasis.PHONE,
        "010-1",
    )

    df = build_suspected_matches_dataframe([pair])

    assert list(df.columns) == SETTLEMENT_COLUMNS + COACHING_DETAIL_COLUMNS + ["매칭기준"]
    row = df.iloc[0]
    assert row["이름"] == "김민수"
    assert row["주문번호"] == "ORD1"
    assert row["코치"] == "최코치"
    assert row["상태"] == "결제완료(코칭있음)"
    assert row["코칭_지역"] == "강남구"
    assert row["매칭기준"] == "전화번호"
    assert _no_none(df)


def test_duplicates_dataframe() -> None:
    paid = ReconciliationItem(
        "Park",
        Classification.DUPLICATE,
        ledger=LedgerRecord(name="Park", amount_gross="990,000", order_id="ORD9"),
        registry=RegistryRecord(name="Park", coach="B", school="Y"),
    )
    unpaid = ReconciliationItem(
        "Jung",
        Classification.DUPLICATE,
        registry=RegistryRecord(name="Jung", coach="A"),
    )

    df = build_duplicates_dataframe([paid, unpaid])

    assert list(df.columns) == SETTLEMENT_COLUMNS + list(DUPLICATE_DETAIL_COLUMNS)
    assert list(df["상태"]) == ["중복 건", "중복 건"]
    assert df.iloc[0]["판매액(원)"] == pytest.approx(990000.0)
    assert df.iloc[0]["월부학교"] == "Y"
    assert df.iloc[1]["주문번호"] == "-"
    assert df.iloc[1]["판매액(원)"] == 0.0
    assert df.iloc[1]["취소 및 환불"] == "-"
    assert _no_none(df)


def test_empty_exports_keep_headers() -> None:
    assert list(build_suspected_matches_dataframe([]).columns)[-1] == "매칭기준"
    assert build_duplicates_dataframe([]).empty is True
    assert build_unmatched_dataframe([]).empty is True


def test_settlement_names() -> None:
    assert settlement_file_stem("settlement", 2025, 8) == "2508_매물코칭_결산"
    assert settlement_file_stem("mismatch", 2025, 12) == "2512_매물코칭_결산_불일치"
    assert settlement_file_stem("duplicates", 2026, 1) == "2601_매물코칭_중복건"
    assert settlement_sheet_name("settlement_mismatch", 2025, 8) == "2508_매물코칭_불일치_결산스타일"

    with pytest.raises(ValueError, match="Unknown export kind"):
        settlement_file_stem("summary", 2025, 8)
    with pytest.raises(ValueError, match="month"):
        settlement_file_stem("settlement", 2025, 13)
