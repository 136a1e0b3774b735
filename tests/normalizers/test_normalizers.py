from __future__ import annotations

from datetime import date, datetime

import pandas as pd
import pytest

from coaching_recon.core.normalizers import (
    clean_text,
    format_spreadsheet_datetime,
    is_blank,
    parse_amount,
    parse_spreadsheet_date,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("1,234,000원", 1234000.0),
        (50000, 50000.0),
        (12.5, 12.5),
        ("-1,500", -1500.0),
        ("10-20", 10.0),
        ("₩ 990,000", 990000.0),
        (".5", 0.5),
    ],
)
def test_parse_amount_values(value, expected) -> None:
    assert parse_amount(value) == pytest.approx(expected)


@pytest.mark.parametrize("value", [None, "", "abc", "-", float("nan"), float("inf"), True, ["1"]])
def test_parse_amount_falls_back_to_zero(value) -> None:
    assert parse_amount(value) == 0.0


def test_parse_spreadsheet_date_serial() -> None:
    assert parse_spreadsheet_date(45000) == "2023.03.15"
    assert parse_spreadsheet_date(45000.75) == "2023.03.15"
    assert parse_spreadsheet_date(25569) == "1970.01.01"


def test_parse_spreadsheet_date_strings() -> None:
    assert parse_spreadsheet_date("2024-01-15 10:30:00") == "2024.01.15"
    assert parse_spreadsheet_date("2024.1.5") == "2024.01.05"
    assert parse_spreadsheet_date("2024-01-15") == "2024.01.15"
    assert parse_spreadsheet_date(" 2024.01.15 09:00 ") == "2024.01.15"


def test_parse_spreadsheet_date_datetimes() -> None:
    assert parse_spreadsheet_date(datetime(2024, 2, 3, 4, 5)) == "2024.02.03"
    assert parse_spreadsheet_date(date(2024, 2, 3)) == "2024.02.03"
    assert parse_spreadsheet_date(pd.Timestamp("2024-02-03 23:59:59")) == "2024.02.03"


def test_parse_spreadsheet_date_unparseable_returned_unchanged() -> None:
    assert parse_spreadsheet_date("다음주 화요일") == "다음주 화요일"
    assert parse_spreadsheet_date(None) == ""
    assert parse_spreadsheet_date("   ") == ""
    assert parse_spreadsheet_date(float("nan")) == ""
    assert parse_spreadsheet_date(1e12) == 1e12


def test_format_spreadsheet_datetime() -> None:
    assert format_spreadsheet_datetime(45000.5) == "2023-03-15 12:00:00"
    assert format_spreadsheet_datetime(datetime(2025, 8, 1, 9, 30)) == "2025-08-01 09:30:00"
    assert format_spreadsheet_datetime(date(2025, 8, 1)) == "2025-08-01 00:00:00"
    assert format_spreadsheet_datetime("2025-08-01 오전 9:30") == "2025-08-01 오전 9:30"
    assert format_spreadsheet_datetime(None) == ""


def test_clean_text_and_is_blank() -> None:
    assert clean_text("  김민수 ") == "김민수"
    assert clean_text(None) == ""
    assert clean_text(float("nan")) == ""
    assert clean_text(pd.NaT) == ""
    assert clean_text(1012345678.0) == "1012345678"
    assert clean_text(12) == "12"

    assert is_blank("   ") is True
    assert is_blank(pd.NA) is True
    assert is_blank(0) is False
    assert is_blank(["a"]) is False
