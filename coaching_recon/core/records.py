"""
records.py

Typed records flowing through the reconciliation engines.

Raw spreadsheet rows are open-ended field bags. Each side is turned into a
frozen record holding the columns the engines know about, plus an immutable
`extras` mapping with every other column exactly as it was read. Extras are
only merged back when rows are shaped for export.

Public API
----------
- Classification, MatchBasis (enums)
- LedgerRecord.from_row(row) / RegistryRecord.from_row(row)
- ReconciliationItem
- SuspectedMatchPair
- as_ledger_records(rows) / as_registry_records(rows)
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from ..config import (
    LEDGER_COLUMN_MAP,
    RECONCILIATION_CONFIG,
    REGISTRY_COLUMN_MAP,
    ReconciliationConfig,
)
from .normalizers import clean_text, is_blank


class Classification(str, Enum):
    """Bucket a reconciliation item falls into."""
    MATCHED = "matched"
    LEDGER_ONLY = "onlyInA"
    REGISTRY_ONLY = "onlyInB"
    DUPLICATE = "duplicate"


class MatchBasis(str, Enum):
    """Field that linked a suspected same-person pair."""
    PHONE = "phone"
    NICKNAME = "nickname"
    NAME = "name"


def _empty_extras() -> Mapping[str, Any]:
    return MappingProxyType({})


def _split_row(
    row: Mapping[str, Any],
    column_map: Mapping[str, str],
    known_fields: Iterable[str],
) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Split a raw row into known field values and pass-through extras.

    When several raw headers map to the same field the first non-blank
    value (in header order) wins.
    """
    known = set(known_fields)
    values: dict[str, Any] = {}
    extras: dict[str, Any] = {}

    for header, value in row.items():
        canonical = column_map.get(str(header).strip())
        if canonical is None or canonical not in known:
            extras[header] = value
            continue
        if canonical not in values or (is_blank(values[canonical]) and not is_blank(value)):
            values[canonical] = value

    return values, extras


@dataclass(frozen=True)
class LedgerRecord:
    """One row of the order/payment export."""

    name: Any = None
    phone: Any = None
    nickname: Any = None
    order_id: Any = None
    external_id: Any = None
    product_name: Any = None
    option_info: Any = None
    amount_gross: Any = None
    amount_paid: Any = None
    amount_in_app: Any = None
    points_used: Any = None
    benepia_points: Any = None
    gift_card_used: Any = None
    coupon_discount: Any = None
    payment_status: Any = None
    payment_timestamp: Any = None
    waitlist_date: Any = None
    payment_method: Any = None
    payment_request: Any = None
    payment_platform: Any = None
    marketing_consent: Any = None
    legacy_id: Any = None
    extras: Mapping[str, Any] = field(default_factory=_empty_extras, compare=False)

    @classmethod
    def from_row(
        cls,
        row: Mapping[str, Any],
        column_map: Mapping[str, str] = LEDGER_COLUMN_MAP,
    ) -> "LedgerRecord":
        values, extras = _split_row(row, column_map, _field_names(cls))
        return cls(**values, extras=MappingProxyType(extras))

    @property
    def has_name(self) -> bool:
        return clean_text(self.name) != ""

    def as_row(self) -> dict[str, Any]:
        """New dict of canonical fields with extras merged in."""
        return _as_row(self)


@dataclass(frozen=True)
class RegistryRecord:
    """One row of the coaching enrollment export."""

    name: Any = None
    phone: Any = None
    nickname: Any = None
    coach: Any = None
    session_date: Any = None
    cancellation_status: Any = None
    progress_note: Any = None
    school: Any = None
    first_choice_region: Any = None
    second_choice: Any = None
    broker_message_sent: Any = None
    broker_service_status: Any = None
    extras: Mapping[str, Any] = field(default_factory=_empty_extras, compare=False)

    @classmethod
    def from_row(
        cls,
        row: Mapping[str, Any],
        column_map: Mapping[str, str] = REGISTRY_COLUMN_MAP,
    ) -> "RegistryRecord":
        values, extras = _split_row(row, column_map, _field_names(cls))
        return cls(**values, extras=MappingProxyType(extras))

    @property
    def has_name(self) -> bool:
        return clean_text(self.name) != ""

    def is_cancelled(self, cfg: ReconciliationConfig = RECONCILIATION_CONFIG) -> bool:
        """Cancelled or refunded enrollments are excluded from matching."""
        return clean_text(self.cancellation_status).lower() in cfg.cancelled_statuses

    def as_row(self) -> dict[str, Any]:
        """New dict of canonical fields with extras merged in."""
        return _as_row(self)


def _field_names(cls) -> list[str]:
    return [f.name for f in fields(cls) if f.name != "extras"]


def _as_row(record) -> dict[str, Any]:
    row = {name: getattr(record, name) for name in _field_names(type(record))}
    for header, value in record.extras.items():
        row.setdefault(header, value)
    return row


def as_ledger_records(rows: Iterable[Any]) -> list[LedgerRecord]:
    """Accept LedgerRecord objects or raw row mappings."""
    return [row if isinstance(row, LedgerRecord) else LedgerRecord.from_row(row) for row in rows]


def as_registry_records(rows: Iterable[Any]) -> list[RegistryRecord]:
    """Accept RegistryRecord objects or raw row mappings."""
    return [row if isinstance(row, RegistryRecord) else RegistryRecord.from_row(row) for row in rows]


# Which sides each classification carries: (ledger, registry)
# None means the side may or may not be present.
_SIDE_RULES = {
    Classification.MATCHED: (True, True),
    Classification.LEDGER_ONLY: (True, False),
    Classification.REGISTRY_ONLY: (False, True),
    Classification.DUPLICATE: (None, True),
}


@dataclass(frozen=True)
class ReconciliationItem:

    """

    A classified record (or pair of records) sharing one identity key.

    Items are never edited after creation; moving a record to another
    bucket means building a new item.

    """

    key: str
    classification: Classification
    ledger: Optional[LedgerRecord] = None
    registry: Optional[RegistryRecord] = None

    def __post_init__(self) -> None:
        wants_ledger, wants_registry = _SIDE_RULES[self.classification]
        has_ledger = self.ledger is not None
        has_registry = self.registry is not None
        if wants_ledger is not None and has_ledger != wants_ledger:
            raise ValueError(
                f"{self.classification.name} item for '{self.key}' "
                f"{'requires' if wants_ledger else 'cannot have'} a ledger record"
            )
        if has_registry != wants_registry:
            raise ValueError(
                f"{self.classification.name} item for '{self.key}' "
                f"{'requires' if wants_registry else 'cannot have'} a registry record"
            )

    @property
    def is_valid(self) -> bool:
        """Every present side has a non-blank name."""
        if self.ledger is not None and not self.ledger.has_name:
            return False
        if self.registry is not None and not self.registry.has_name:
            return False
        return True

    def is_cancelled(self, cfg: ReconciliationConfig = RECONCILIATION_CONFIG) -> bool:
        return self.registry is not None and self.registry.is_cancelled(cfg)

    @property
    def display_name(self) -> str:
        source = self.ledger if self.ledger is not None else self.registry
        return clean_text(source.name)


@dataclass(frozen=True)
class SuspectedMatchPair:
    """A residual ledger-only item and registry-only item that look like one person."""

    ledger_item: ReconciliationItem
    registry_item: ReconciliationItem
    match_basis: MatchBasis
    matched_value: str

    @property
    def dedupe_key(self) -> str:
        return f"{self.match_basis.value}_{self.matched_value}"
