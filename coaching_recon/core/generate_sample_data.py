"""
generate_sample_data.py

Seeded generator for synthetic order-export and coaching-registry samples.

This script writes two Excel files into data/sample/ using the raw Korean
headers from the column maps in coaching_recon/config.py, so load_data.py
validation passes. Output is deterministic for a given seed and mixes regular
matched rows with the edge cases the engines care about: cancelled and
refunded enrollments, a repeat enrollment, a name typo that only the phone
number links, a nickname-only link, a blank row and a currency string amount.
"""

from __future__ import annotations

import argparse
import random
from datetime import datetime, timedelta
from pathlib import Path

import pandas as pd
from faker import Faker

from ..config import LEDGER_COLUMN_MAP, REGISTRY_COLUMN_MAP, SAMPLE_DIR


DEFAULT_SEED = 20250801
DEFAULT_YEAR = 2025
DEFAULT_MONTH = 8

COACHES = ["김코치", "이코치", "박코치", "최코치"]
PRICE_OPTIONS = [550000, 770000, 990000]
PAYMENT_METHODS = ["카드", "계좌이체", "카카오페이"]
REGIONS = ["강남구", "송파구", "마포구", "성동구", "수원시 영통구"]

LEDGER_HEADERS = [
    "전시상품명", "이름", "휴대폰번호", "주문번호", "ID", "닉네임", "옵션정보",
    "판매액(원)", "PG 결제액(원)", "인앱 결제액(원)", "포인트사용", "베네피아포인트",
    "상품권 사용", "쿠폰할인", "상태", "결제일시", "대기신청일", "결제수단",
    "결제요청", "결제플랫폼", "마케팅수신동의", "예전아이디",
]

REGISTRY_HEADERS = [
    "닉네임", "이름", "번호", "코칭진행일", "코치", "진행여부 / 비고", "월부학교",
    "1순위(구, 관심지역)", "2순위", "중개문자발송여부", "중개서비스진행여부", "취소 및 환불",
]


def _phone(rng: random.Random) -> str:
    return f"010-{rng.randint(1000, 9999)}-{rng.randint(1000, 9999)}"


def _person(rng: random.Random, faker: Faker) -> dict[str, str]:
    return {
        "name": faker.unique.name(),
        "phone": _phone(rng),
        "nickname": faker.unique.user_name(),
    }


def _payment_time(rng: random.Random, year: int, month: int) -> datetime:
    start = datetime(year, month, 1, 9, 0, 0)
    return start + timedelta(days=rng.randint(0, 27), minutes=rng.randint(0, 12 * 60))


def _order_row(
    person: dict[str, str],
    rng: random.Random,
    order_no: int,
    year: int,
    month: int,
    amount: object = None,
) -> dict[str, object]:
    price = amount if amount is not None else rng.choice(PRICE_OPTIONS)
    paid_at = _payment_time(rng, year, month)
    return {
        "전시상품명": f"투자코칭_{year % 100}년 {month}월",
        "이름": person["name"],
        "휴대폰번호": person["phone"],
        "주문번호": f"ORD{year % 100}{month:02d}{order_no:05d}",
        "ID": f"user{order_no:05d}",
        "닉네임": person["nickname"],
        "옵션정보": "월부멘토 1:1 투자코칭",
        "판매액(원)": price,
        "PG 결제액(원)": price,
        "인앱 결제액(원)": 0,
        "포인트사용": 0,
        "베네피아포인트": 0,
        "상품권 사용": 0,
        "쿠폰할인": 0,
        "상태": "결제완료",
        "결제일시": paid_at,
        "대기신청일": None,
        "결제수단": rng.choice(PAYMENT_METHODS),
        "결제요청": "일반",
        "결제플랫폼": rng.choice(["PC", "MOBILE", "APP"]),
        "마케팅수신동의": rng.choice(["Y", "N"]),
        "예전아이디": None,
    }


def _registry_row(
    person: dict[str, str],
    rng: random.Random,
    year: int,
    month: int,
    cancellation: str | None = None,
) -> dict[str, object]:
    session = datetime(year, month, 1) + timedelta(days=rng.randint(0, 27))
    return {
        "닉네임": person["nickname"],
        "이름": person["name"],
        "번호": person["phone"],
        "코칭진행일": session.strftime("%Y.%m.%d"),
        "코치": rng.choice(COACHES),
        "진행여부 / 비고": rng.choice(["진행완료", "진행예정"]),
        "월부학교": rng.choice(["Y", "N"]),
        "1순위(구, 관심지역)": rng.choice(REGIONS),
        "2순위": rng.choice(REGIONS),
        "중개문자발송여부": rng.choice(["Y", "N"]),
        "중개서비스진행여부": rng.choice(["진행", "미진행"]),
        "취소 및 환불": cancellation,
    }


def build_sample_batches(
    seed: int = DEFAULT_SEED,
    *,
    year: int = DEFAULT_YEAR,
    month: int = DEFAULT_MONTH,
    matched_count: int = 20,
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Return (ledger_df, registry_df) with raw export headers."""
    rng = random.Random(seed)
    faker = Faker("ko_KR")
    faker.seed_instance(seed)

    ledger: list[dict[str, object]] = []
    registry: list[dict[str, object]] = []

    def add_order(person: dict[str, str], amount: object = None) -> None:
        ledger.append(_order_row(person, rng, len(ledger) + 1, year, month, amount))

    # Regular paid and enrolled people
    for _ in range(matched_count):
        person = _person(rng, faker)
        add_order(person)
        registry.append(_registry_row(person, rng, year, month))

    # Paid, no enrollment
    for _ in range(3):
        add_order(_person(rng, faker))

    # Enrolled, not paid
    for _ in range(3):
        registry.append(_registry_row(_person(rng, faker), rng, year, month))

    # Cancelled and refunded enrollments; the refunded person still paid
    registry.append(_registry_row(_person(rng, faker), rng, year, month, cancellation="취소"))
    refunded = _person(rng, faker)
    add_order(refunded)
    registry.append(_registry_row(refunded, rng, year, month, cancellation="환불"))

    # Repeat enrollment for a single payment
    repeat = _person(rng, faker)
    add_order(repeat)
    registry.append(_registry_row(repeat, rng, year, month))
    registry.append(_registry_row(repeat, rng, year, month))

    # Name typed differently; phone still links the two rows
    typo = _person(rng, faker)
    add_order(typo)
    registry.append(_registry_row({**typo, "name": f"{typo['name']}님"}, rng, year, month))

    # Different name and phone, same nickname
    nick = _person(rng, faker)
    add_order(nick)
    registry.append(
        _registry_row({**nick, "name": faker.unique.name(), "phone": _phone(rng)}, rng, year, month)
    )

    # Amount typed as a currency string
    add_order(_person(rng, faker), amount="1,100,000원")

    # Row with no name left at the bottom of the export
    blank = dict.fromkeys(LEDGER_HEADERS)
    blank["상태"] = "결제완료"
    ledger.append(blank)

    ledger_df = pd.DataFrame(ledger, columns=LEDGER_HEADERS)
    registry_df = pd.DataFrame(registry, columns=REGISTRY_HEADERS)
    _validate_sample_headers(ledger_df, registry_df)
    return ledger_df, registry_df


def _validate_sample_headers(ledger_df: pd.DataFrame, registry_df: pd.DataFrame) -> None:
    unknown_ledger = [col for col in ledger_df.columns if col not in LEDGER_COLUMN_MAP]
    unknown_registry = [col for col in registry_df.columns if col not in REGISTRY_COLUMN_MAP]
    if unknown_ledger or unknown_registry:
        raise ValueError(
            f"Sample headers missing from column maps: {unknown_ledger + unknown_registry}"
        )


def generate_sample_data(output_dir: Path = SAMPLE_DIR, seed: int = DEFAULT_SEED) -> dict[str, Path]:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    ledger_df, registry_df = build_sample_batches(seed)

    outputs = {
        "ledger": output_dir / "ledger_sample.xlsx",
        "registry": output_dir / "registry_sample.xlsx",
    }
    ledger_df.to_excel(outputs["ledger"], index=False)
    registry_df.to_excel(outputs["registry"], index=False)

    return outputs


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate seeded synthetic order-export and coaching-registry samples."
    )
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Deterministic RNG seed")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=SAMPLE_DIR,
        help="Destination directory for sample Excel files",
    )
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    outputs = generate_sample_data(output_dir=args.output_dir, seed=args.seed)
    for label, path in outputs.items():
        print(f"Wrote {label} sample to: {path}")


if __name__ == "__main__":
    main()
