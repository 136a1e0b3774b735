#Docstring for coaching_recon/config module
"""
config.py

Central configuration for the coaching settlement reconciliation pipeline.

This module defines canonical column mappings, cancellation vocabulary,
settlement labels, and output locations used across the project.

It is intentionally the single source of truth for:
- Column standardization (raw export headers -> canonical names)
- Which registry rows count as cancelled/refunded
- Labels and placeholders written into settlement exports
- Where reports and sample workbooks are written

Contents
--------
1) Paths and project defaults
   - Default data/sample folders
   - Report output folders (one sub-folder per report kind)

2) Column mappings
   - LEDGER_COLUMN_MAP: raw order-export header -> canonical field name
   - REGISTRY_COLUMN_MAP: raw coaching-DB header -> canonical field name
   Canonical names map to themselves so callers may pass either form.

3) Reconciliation configuration
   - ReconciliationConfig / RECONCILIATION_CONFIG
       cancelled statuses, unassigned coach label, date range formatting

4) Settlement labels
   - SettlementLabels / SETTLEMENT_LABELS
       status text per classification, placeholders, defaults

Usage
-----
All other modules import configuration from here. Example:

    from coaching_recon.config import LEDGER_COLUMN_MAP, RECONCILIATION_CONFIG

Privacy note
------------
Order and coaching exports contain names and phone numbers. The repository
only ships synthetic samples; real exports belong under data/raw/, which is
never committed.
"""


from dataclasses import dataclass #create simple classes for configuration
from pathlib import Path #object-oriented filesystem paths instead of strings



# --- Base paths ----------------------------------------------------------------

# coaching_recon/ -> project root
BASE_DIR = Path(__file__).resolve().parents[1]

DATA_DIR = BASE_DIR / "data"
SAMPLE_DIR = DATA_DIR / "sample"
RAW_DATA_DIR = DATA_DIR / "raw"

REPORTS_DIR = BASE_DIR / "reports"
REPORTS_FIGURES_DIR = REPORTS_DIR / "figures"
REPORTS_OUTPUTS_DIR = REPORTS_DIR / "outputs"

# Report kinds that get their own folder under REPORTS_OUTPUTS_DIR
REPORT_KINDS = (
    "settlement",
    "mismatch",
    "suspected",
    "duplicates",
)


def get_report_outputs_dir(report: str) -> Path:
    """Return (and create) the outputs folder for a report kind."""
    if report not in REPORT_KINDS:
        raise ValueError(
            f"Unknown report '{report}'. Expected one of: {', '.join(REPORT_KINDS)}"
        )
    path = REPORTS_OUTPUTS_DIR / report
    path.mkdir(parents=True, exist_ok=True)
    return path



# --- Column name mapping (raw -> canonical) --------------------------------------------

# IMPORTANT:
# Left side keys MUST match the header names in the actual Excel exports.
# Several raw headers may point at one canonical name (older exports used
# "판매액" / "결제금액" instead of "판매액(원)"); the first non-blank one wins.

# Order export (주문전체내역)

LEDGER_COLUMN_MAP = {
    # Raw column name       # Canonical name
    "전시상품명":            "product_name",
    "이름":                  "name",
    "휴대폰번호":            "phone",
    "주문번호":              "order_id",
    "ID":                    "external_id",
    "닉네임":                "nickname",
    "옵션정보":              "option_info",
    "판매액(원)":            "amount_gross",
    "판매액":                "amount_gross",
    "결제금액":              "amount_gross",
    "PG 결제액(원)":         "amount_paid",
    "PG결제액":              "amount_paid",
    "인앱 결제액(원)":       "amount_in_app",
    "포인트사용":            "points_used",
    "베네피아포인트":        "benepia_points",
    "상품권 사용":           "gift_card_used",
    "쿠폰할인":              "coupon_discount",
    "상태":                  "payment_status",
    "결제일시":              "payment_timestamp",
    "대기신청일":            "waitlist_date",
    "결제수단":              "payment_method",
    "결제요청":              "payment_request",
    "결제플랫폼":            "payment_platform",
    "마케팅수신동의":        "marketing_consent",
    "예전아이디":            "legacy_id",
    "amount":                "amount_gross",
}

# Coaching registry export (매물코칭DB)
# Note: the phone column is "번호" here, not "휴대폰번호" as in the order export.

REGISTRY_COLUMN_MAP = {
    # Raw column name          # Canonical name
    "닉네임":                   "nickname",
    "이름":                     "name",
    "번호":                     "phone",
    "코칭진행일":               "session_date",
    "코치":                     "coach",
    "진행여부 / 비고":          "progress_note",
    "월부학교":                 "school",
    "1순위(구, 관심지역)":      "first_choice_region",
    "2순위":                    "second_choice",
    "중개문자발송여부":         "broker_message_sent",
    "중개서비스진행여부":       "broker_service_status",
    "취소 및 환불":             "cancellation_status",
}

LEDGER_FIELDS = (
    "product_name",
    "name",
    "phone",
    "order_id",
    "external_id",
    "nickname",
    "option_info",
    "amount_gross",
    "amount_paid",
    "amount_in_app",
    "points_used",
    "benepia_points",
    "gift_card_used",
    "coupon_discount",
    "payment_status",
    "payment_timestamp",
    "waitlist_date",
    "payment_method",
    "payment_request",
    "payment_platform",
    "marketing_consent",
    "legacy_id",
)

REGISTRY_FIELDS = (
    "nickname",
    "name",
    "phone",
    "session_date",
    "coach",
    "progress_note",
    "school",
    "first_choice_region",
    "second_choice",
    "broker_message_sent",
    "broker_service_status",
    "cancellation_status",
)

# Canonical names are accepted as input headers as well
LEDGER_COLUMN_MAP.update({field: field for field in LEDGER_FIELDS})
REGISTRY_COLUMN_MAP.update({field: field for field in REGISTRY_FIELDS})

# The only column the engine cannot work without
LEDGER_REQUIRED_COLUMNS = ("이름",)
REGISTRY_REQUIRED_COLUMNS = ("이름",)



# --- Reconciliation configuration ------------------------------------------------------

@dataclass(frozen=True)
class ReconciliationConfig:

    """

    Configuration for matching and statistics.

    cancelled_statuses:
        Trimmed, lowercased values of the registry cancellation column that
        exclude a row from matching ("취소" = cancelled, "환불" = refunded).
    unassigned_coach_label:
        Bucket used in per-coach sales when the matched coach cell is blank.
    no_data_label:
        Date range text when no parseable dates exist.

    """

    cancelled_statuses: frozenset = frozenset({"취소", "환불", "cancelled", "refunded"})
    unassigned_coach_label: str = "미지정"
    no_data_label: str = "데이터 없음"
    date_range_separator: str = " ~ "


RECONCILIATION_CONFIG = ReconciliationConfig()



# --- Settlement export labels ----------------------------------------------------------

@dataclass(frozen=True)
class SettlementLabels:

    """

    Text written into settlement exports.

    Status labels replace the order export's own 상태 value for unmatched,
    suspected and duplicate rows so the sheet says why a row is there.

    """

    ledger_only_status: str = "결제완료(코칭없음)"      # paid, no coaching
    registry_only_status: str = "코칭신청(결제없음)"    # enrolled, not paid
    suspected_status: str = "결제완료(코칭있음)"        # paid, coaching found by secondary match
    duplicate_status: str = "중복 건"                   # repeat enrollment
    matched_default_status: str = "결제완료"
    default_product_name: str = "투자코칭_25년 8월"
    default_option_info: str = "월부멘토 1:1 투자코칭"
    registry_product_name: str = "코칭신청"
    registry_option_info: str = "코칭서비스"
    default_marketing_consent: str = "Y"
    placeholder: str = "-"
    coaching_prefix: str = "코칭_"
    coaching_type_label: str = "매물코칭"


SETTLEMENT_LABELS = SettlementLabels()


# Match basis labels for the suspected-match export
MATCH_BASIS_LABELS = {
    "phone": "전화번호",
    "nickname": "닉네임",
    "name": "이름",
}
