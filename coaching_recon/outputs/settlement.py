# Docstring for coaching_recon/outputs/settlement module
"""
settlement.py

Shape classified reconciliation items into flat settlement rows.

Every export uses the same leading column order as the monthly settlement
workbook (SETTLEMENT_COLUMNS). Each builder fills the side that is missing
with an explicit placeholder ("-" for text, 0 for amounts) so no cell is ever
None, and sets 상태 from the classification instead of copying the order
export's own status.

Sheets
------
- matched                matched pairs (settlement main sheet)
- unmatched              ledger-only / registry-only rows, flat
- settlement mismatch    same rows grouped by phone > nickname > name, with a
                         rotating marker on groups that hold more than one row
- suspected              one combined row per suspected same-person pair
- duplicates             repeat enrollments

Public API
----------
- build_matched_row(item) / build_matched_dataframe(items)
- build_unmatched_row(item) / build_unmatched_dataframe(items)
- build_settlement_mismatch_rows(items) / build_settlement_mismatch_dataframe(items)
- build_suspected_match_row(pair) / build_suspected_matches_dataframe(pairs)
- build_duplicate_row(item) / build_duplicates_dataframe(items)
- settlement_file_stem(kind, year, month) / settlement_sheet_name(kind, year, month)
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

import pandas as pd

from ..config import (
    MATCH_BASIS_LABELS,
    RECONCILIATION_CONFIG,
    SETTLEMENT_LABELS,
    ReconciliationConfig,
)
from ..core.normalizers import (
    clean_text,
    format_spreadsheet_datetime,
    is_blank,
    parse_amount,
    parse_spreadsheet_date,
)
from ..core.records import (
    Classification,
    LedgerRecord,
    ReconciliationItem,
    RegistryRecord,
    SuspectedMatchPair,
)


LABELS = SETTLEMENT_LABELS

# Settlement sheet column order: header -> ledger field
LEDGER_TEXT_COLUMNS = {
    "전시상품명": "product_name",
    "이름": "name",
    "휴대폰번호": "phone",
    "주문번호": "order_id",
    "ID": "external_id",
    "닉네임": "nickname",
    "옵션정보": "option_info",
}

AMOUNT_COLUMNS = {
    "판매액(원)": "amount_gross",
    "PG 결제액(원)": "amount_paid",
    "인앱 결제액(원)": "amount_in_app",
    "포인트사용": "points_used",
    "베네피아포인트": "benepia_points",
    "상품권 사용": "gift_card_used",
    "쿠폰할인": "coupon_discount",
}

ADMIN_COLUMNS = {
    "결제수단": "payment_method",
    "결제요청": "payment_request",
    "결제플랫폼": "payment_platform",
}

SETTLEMENT_COLUMNS = [
    *LEDGER_TEXT_COLUMNS,
    *AMOUNT_COLUMNS,
    "상태",
    "결제일시",
    "대기신청일",
    *ADMIN_COLUMNS,
    "마케팅수신동의",
    "예전아이디",
    "코치",
    "코칭진행일",
]

# Coaching detail block of the settlement-style sheets
COACHING_DETAIL_COLUMNS = [
    "코칭_신청일",
    "코칭_만족도문자",
    "코칭_지역",
    "코칭_단지명",
    "코칭_평형",
    "코칭_매매가",
    "코칭_전세가",
    "코칭_투자금",
    "코칭_O/X",
    "코칭_상세",
    "코칭_코칭완료여부",
    "코칭_매수추천여부",
    "코칭_중개추천여부",
    "코칭_구글폼 번호",
]

MATCH_BASIS_COLUMN = "매칭기준"

# Registry columns appended to the duplicates sheet
DUPLICATE_DETAIL_COLUMNS = {
    "진행여부 / 비고": "progress_note",
    "월부학교": "school",
    "1순위(구, 관심지역)": "first_choice_region",
    "2순위": "second_choice",
    "중개문자발송여부": "broker_message_sent",
    "중개서비스진행여부": "broker_service_status",
    "취소 및 환불": "cancellation_status",
}

# Prefixed to the product name of multi-row groups in the settlement mismatch sheet
GROUP_MARKERS = ("🔴", "🔵", "🟢", "🟠", "🟣", "🟡", "🔷", "🩷")

FILE_SUFFIXES = {
    "settlement": "결산",
    "mismatch": "결산_불일치",
    "settlement_mismatch": "결산_불일치_결산스타일",
    "suspected": "동일인추측_결산스타일",
    "duplicates": "중복건",
    "combined": "결산_전체",
}

SHEET_SUFFIXES = {
    "settlement": "결산",
    "mismatch": "결산_불일치",
    "settlement_mismatch": "불일치_결산스타일",
    "suspected": "동일인추측_결산스타일",
    "duplicates": "중복건",
}


# --- Cell helpers ----------------------------------------------------------------------

def _first(*values: Any, default: Any = "") -> Any:
    """First non-blank value, kept as read; default when every value is blank."""
    for value in values:
        if not is_blank(value):
            return value
    return default


def _field(record: Optional[object], name: str) -> Any:
    return getattr(record, name) if record is not None else None


def _amount(ledger: Optional[LedgerRecord], name: str) -> float:
    return parse_amount(_field(ledger, name))


def _amount_or_placeholder(ledger: Optional[LedgerRecord], name: str) -> Any:
    value = _field(ledger, name)
    return LABELS.placeholder if is_blank(value) else parse_amount(value)


def _datetime(value: Any) -> str:
    return format_spreadsheet_datetime(value)


def _date(value: Any) -> Any:
    return parse_spreadsheet_date(value)


def _prefixed_extras(registry: Optional[RegistryRecord]) -> dict[str, Any]:
    if registry is None:
        return {}
    return {f"{LABELS.coaching_prefix}{header}": value for header, value in registry.extras.items()}


def _merge_extras(row: dict[str, Any], ledger: Optional[LedgerRecord], registry: Optional[RegistryRecord]) -> dict[str, Any]:
    if ledger is not None:
        for header, value in ledger.extras.items():
            row.setdefault(header, value)
    for header, value in _prefixed_extras(registry).items():
        row.setdefault(header, value)
    return row


def _frame(rows: list[dict[str, Any]], base_columns: list[str]) -> pd.DataFrame:
    """DataFrame with base columns first, then extra columns in first-seen order."""
    columns = list(base_columns)
    for row in rows:
        for header in row:
            if header not in columns:
                columns.append(header)
    return pd.DataFrame(rows, columns=columns)


def _coaching_details(registry: Optional[RegistryRecord]) -> dict[str, Any]:
    placeholder = LABELS.placeholder
    details = dict.fromkeys(COACHING_DETAIL_COLUMNS, placeholder)
    if registry is None:
        return details
    details.update(
        {
            "코칭_신청일": _first(_date(registry.session_date), default=placeholder),
            "코칭_만족도문자": _first(registry.progress_note, default=placeholder),
            "코칭_지역": _first(registry.first_choice_region, default=placeholder),
            "코칭_단지명": _first(registry.second_choice, default=placeholder),
            "코칭_코칭완료여부": _first(registry.progress_note, default=placeholder),
            "코칭_중개추천여부": _first(registry.broker_service_status, default=placeholder),
        }
    )
    return details


# --- Matched sheet ---------------------------------------------------------------------

def build_matched_row(item: ReconciliationItem) -> dict[str, Any]:
    """Settlement row for a matched pair; blank order cells get settlement defaults."""
    order, coaching = item.ledger, item.registry

    row: dict[str, Any] = {
        "전시상품명": _first(order.product_name, default=LABELS.default_product_name),
        "이름": _first(order.name, coaching.name),
        "휴대폰번호": _first(order.phone, coaching.phone),
        "주문번호": _first(order.order_id),
        "ID": _first(order.external_id),
        "닉네임": _first(order.nickname, coaching.nickname),
        "옵션정보": _first(order.option_info, default=LABELS.default_option_info),
    }
    row.update({header: _amount(order, name) for header, name in AMOUNT_COLUMNS.items()})
    row.update(
        {
            "상태": _first(order.payment_status, default=LABELS.matched_default_status),
            "결제일시": _datetime(order.payment_timestamp),
            "대기신청일": _first(_datetime(order.waitlist_date), _datetime(coaching.session_date)),
        }
    )
    row.update({header: _first(getattr(order, name)) for header, name in ADMIN_COLUMNS.items()})
    row.update(
        {
            "마케팅수신동의": _first(order.marketing_consent, default=LABELS.default_marketing_consent),
            "예전아이디": _first(order.legacy_id),
            "코치": _first(coaching.coach),
            "코칭진행일": _datetime(coaching.session_date),
        }
    )
    row = _merge_extras(row, order, coaching)
    # 취소 및 환불 is a mapped field, so it never reaches extras
    if not is_blank(coaching.cancellation_status):
        row.setdefault(f"{LABELS.coaching_prefix}취소 및 환불", coaching.cancellation_status)
    return row


def build_matched_dataframe(items: Iterable[ReconciliationItem]) -> pd.DataFrame:
    rows = [build_matched_row(item) for item in items if item.classification == Classification.MATCHED]
    return _frame(rows, SETTLEMENT_COLUMNS)


# --- Unmatched sheet -------------------------------------------------------------------

def _unmatched_status(item: ReconciliationItem) -> str:
    if item.classification == Classification.LEDGER_ONLY:
        return LABELS.ledger_only_status
    return LABELS.registry_only_status


def _one_sided_identity(item: ReconciliationItem) -> dict[str, Any]:
    """Identity and product columns shared by the one-sided settlement sheets."""
    order, coaching = item.ledger, item.registry
    placeholder = LABELS.placeholder
    source = order if order is not None else coaching
    return {
        "전시상품명": _first(
            _field(order, "product_name"),
            default=LABELS.registry_product_name if coaching is not None else placeholder,
        ),
        "이름": _first(source.name, default=placeholder),
        "휴대폰번호": _first(_field(order, "phone"), _field(coaching, "phone"), default=placeholder),
        "주문번호": _first(_field(order, "order_id"), default=placeholder),
        "ID": _first(_field(order, "external_id"), default=placeholder),
        "닉네임": _first(source.nickname, default=placeholder),
        "옵션정보": _first(
            _field(order, "option_info"),
            default=LABELS.registry_option_info if coaching is not None else placeholder,
        ),
    }


def _one_sided_tail(
    order: Optional[LedgerRecord],
    coaching: Optional[RegistryRecord],
    fmt,
) -> dict[str, Any]:
    """결제일시 .. 코칭진행일 for the one-sided sheets, dates rendered with fmt."""
    placeholder = LABELS.placeholder
    tail: dict[str, Any] = {
        "결제일시": _first(fmt(_field(order, "payment_timestamp")), default=placeholder),
        "대기신청일": _first(
            fmt(_field(order, "waitlist_date")),
            fmt(_field(coaching, "session_date")),
            default=placeholder,
        ),
    }
    tail.update(
        {header: _first(_field(order, name), default=placeholder) for header, name in ADMIN_COLUMNS.items()}
    )
    tail.update(
        {
            "마케팅수신동의": _first(_field(order, "marketing_consent"), default=LABELS.default_marketing_consent),
            "예전아이디": _first(_field(order, "legacy_id"), default=placeholder),
            "코치": _first(_field(coaching, "coach"), default=placeholder),
            "코칭진행일": _first(fmt(_field(coaching, "session_date")), default=placeholder),
        }
    )
    return tail


def build_unmatched_row(item: ReconciliationItem) -> dict[str, Any]:
    """Flat row for a ledger-only or registry-only item; missing side is placeholder-filled."""
    order, coaching = item.ledger, item.registry
    row = _one_sided_identity(item)
    row.update({header: _amount(order, name) for header, name in AMOUNT_COLUMNS.items()})
    row["상태"] = _unmatched_status(item)
    row.update(_one_sided_tail(order, coaching, _datetime))
    return _merge_extras(row, order, coaching)


def _is_reportable_mismatch(item: ReconciliationItem, cfg: ReconciliationConfig) -> bool:
    return (
        item.classification in (Classification.LEDGER_ONLY, Classification.REGISTRY_ONLY)
        and not item.is_cancelled(cfg)
    )


def build_unmatched_dataframe(
    items: Iterable[ReconciliationItem],
    cfg: ReconciliationConfig = RECONCILIATION_CONFIG,
) -> pd.DataFrame:
    rows = [build_unmatched_row(item) for item in items if _is_reportable_mismatch(item, cfg)]
    return _frame(rows, SETTLEMENT_COLUMNS)


# --- Settlement-style mismatch sheet ---------------------------------------------------

def _settlement_style_row(
    order: Optional[LedgerRecord],
    coaching: Optional[RegistryRecord],
    identity: dict[str, Any],
    status: str,
) -> dict[str, Any]:
    row = dict(identity)
    row.update({header: _amount_or_placeholder(order, name) for header, name in AMOUNT_COLUMNS.items()})
    row["상태"] = status
    row.update(_one_sided_tail(order, coaching, _date))
    row.update(_coaching_details(coaching))
    return row


def mismatch_group_key(item: ReconciliationItem) -> str:
    """Group key by priority: phone, then nickname, then name."""
    order, coaching = item.ledger, item.registry
    phone = clean_text(_first(_field(order, "phone"), _field(coaching, "phone")))
    nickname = clean_text(_first(_field(order, "nickname"), _field(coaching, "nickname")))
    name = clean_text(_first(_field(order, "name"), _field(coaching, "name")))
    if phone:
        return f"phone_{phone}"
    if nickname:
        return f"nickname_{nickname}"
    if name:
        return f"name_{name}"
    return ""


def _group_mismatches(items: list[ReconciliationItem]) -> list[list[ReconciliationItem]]:
    groups: dict[str, list[ReconciliationItem]] = {}
    for index, item in enumerate(items):
        key = mismatch_group_key(item) or f"ungrouped_{index}"
        groups.setdefault(key, []).append(item)

    ordered = []
    for key in sorted(groups):
        group = sorted(
            groups[key],
            key=lambda entry: (
                entry.classification != Classification.LEDGER_ONLY,
                entry.display_name,
            ),
        )
        ordered.append(group)
    return ordered


def build_settlement_mismatch_rows(
    items: Iterable[ReconciliationItem],
    cfg: ReconciliationConfig = RECONCILIATION_CONFIG,
) -> list[dict[str, Any]]:
    candidates = [item for item in items if _is_reportable_mismatch(item, cfg) and item.is_valid]

    rows: list[dict[str, Any]] = []
    marker_index = 0
    for group in _group_mismatches(candidates):
        marker = None
        if len(group) > 1:
            marker = GROUP_MARKERS[marker_index % len(GROUP_MARKERS)]
            marker_index += 1
        for item in group:
            row = _settlement_style_row(
                item.ledger, item.registry, _one_sided_identity(item), _unmatched_status(item)
            )
            if marker is not None:
                row["전시상품명"] = f"{marker} {row['전시상품명']}"
            rows.append(row)
    return rows


def build_settlement_mismatch_dataframe(
    items: Iterable[ReconciliationItem],
    cfg: ReconciliationConfig = RECONCILIATION_CONFIG,
) -> pd.DataFrame:
    rows = build_settlement_mismatch_rows(items, cfg)
    return pd.DataFrame(rows, columns=SETTLEMENT_COLUMNS + COACHING_DETAIL_COLUMNS)


# --- Suspected matches sheet -----------------------------------------------------------

def build_suspected_match_row(pair: SuspectedMatchPair) -> dict[str, Any]:
    """One combined row per pair: order cells first, coaching cells where the order is blank."""
    order = pair.ledger_item.ledger
    coaching = pair.registry_item.registry
    placeholder = LABELS.placeholder

    identity = {
        "전시상품명": _first(order.product_name, default=LABELS.registry_product_name),
        "이름": _first(order.name, coaching.name, default=placeholder),
        "휴대폰번호": _first(order.phone, coaching.phone, default=placeholder),
        "주문번호": _first(order.order_id, default=placeholder),
        "ID": _first(order.external_id, default=placeholder),
        "닉네임": _first(order.nickname, coaching.nickname, default=placeholder),
        "옵션정보": _first(order.option_info, default=LABELS.registry_option_info),
    }
    row = _settlement_style_row(order, coaching, identity, LABELS.suspected_status)
    row[MATCH_BASIS_COLUMN] = MATCH_BASIS_LABELS[pair.match_basis.value]
    return row


def build_suspected_matches_dataframe(pairs: Iterable[SuspectedMatchPair]) -> pd.DataFrame:
    rows = [build_suspected_match_row(pair) for pair in pairs]
    return pd.DataFrame(
        rows,
        columns=SETTLEMENT_COLUMNS + COACHING_DETAIL_COLUMNS + [MATCH_BASIS_COLUMN],
    )


# --- Duplicates sheet ------------------------------------------------------------------

def build_duplicate_row(item: ReconciliationItem) -> dict[str, Any]:
    order, coaching = item.ledger, item.registry
    placeholder = LABELS.placeholder

    row = _one_sided_identity(item)
    row["전시상품명"] = _first(_field(order, "product_name"), default=placeholder)
    row.update({header: _amount(order, name) for header, name in AMOUNT_COLUMNS.items()})
    row["상태"] = LABELS.duplicate_status
    row.update(_one_sided_tail(order, coaching, _date))
    row.update(
        {
            header: _first(getattr(coaching, name), default=placeholder)
            for header, name in DUPLICATE_DETAIL_COLUMNS.items()
        }
    )
    return row


def build_duplicates_dataframe(items: Iterable[ReconciliationItem]) -> pd.DataFrame:
    rows = [build_duplicate_row(item) for item in items if item.classification == Classification.DUPLICATE]
    return pd.DataFrame(rows, columns=SETTLEMENT_COLUMNS + list(DUPLICATE_DETAIL_COLUMNS))


# --- File / sheet naming ---------------------------------------------------------------

def _year_month(year: int, month: int) -> str:
    if not 1 <= int(month) <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}")
    return f"{int(year) % 100:02d}{int(month):02d}"


def _named(kind: str, year: int, month: int, suffixes: dict[str, str]) -> str:
    if kind not in suffixes:
        raise ValueError(
            f"Unknown export kind '{kind}'. Expected one of: {', '.join(suffixes)}"
        )
    return f"{_year_month(year, month)}_{LABELS.coaching_type_label}_{suffixes[kind]}"


def settlement_file_stem(kind: str, year: int, month: int) -> str:
    """File name without extension, e.g. 2508_매물코칭_결산."""
    return _named(kind, year, month, FILE_SUFFIXES)


def settlement_sheet_name(kind: str, year: int, month: int) -> str:
    return _named(kind, year, month, SHEET_SUFFIXES)
