# tests/test_helpers_validators.py
from decimal import Decimal

import pytest

from fish_ledger.utils.helpers import (
    fmt_money,
    fmt_weight,
    money,
    money_from_db,
    money_to_db,
    pct_to_db,
    to_decimal,
    weight,
    weight_from_db,
    weight_to_db,
)
from fish_ledger.utils.validators import (
    is_iso_date,
    is_non_negative_number,
    is_strictly_positive_number,
    is_valid_range,
    non_empty,
    try_parse_decimal,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, Decimal("0")),
        ("", Decimal("0")),
        (0.1, Decimal("0.1")),
        (" 12.50 ", Decimal("12.50")),
        (7, Decimal("7")),
    ],
)
def test_to_decimal(raw, expected):
    assert to_decimal(raw) == expected


def test_to_decimal_rejects_garbage():
    with pytest.raises(ValueError):
        to_decimal("twelve")


@pytest.mark.parametrize("raw", ["NaN", "Infinity", "-inf", float("nan"), float("inf"), Decimal("NaN")])
def test_to_decimal_rejects_non_finite(raw):
    with pytest.raises(ValueError):
        to_decimal(raw)
    assert try_parse_decimal(raw) == (False, None)
    assert not is_non_negative_number(raw)
    assert not is_strictly_positive_number(raw)
    assert fmt_money(raw, sentinel="-") == "-"


def test_rounding_is_half_up():
    assert money("2.345") == Decimal("2.35")
    assert money("2.344") == Decimal("2.34")
    assert weight("1.0005") == Decimal("1.001")


def test_storage_conversions():
    assert money_to_db("1234.56") == 123456
    assert money_from_db(123456) == Decimal("1234.56")
    assert money_from_db(None) == Decimal("0.00")
    assert weight_to_db("12.345") == 12345
    assert weight_from_db(12345) == Decimal("12.345")
    assert pct_to_db("5") == 500


def test_formatting():
    assert fmt_money(1234567.891) == "1,234,567.89"
    assert fmt_weight("1250.5") == "1,250.500"
    assert fmt_money("n/a") == "n/a"
    assert fmt_money("n/a", sentinel="-") == "-"
    with pytest.raises(ValueError):
        fmt_money("n/a", strict=True)


def test_number_validators():
    assert try_parse_decimal("3.5") == (True, Decimal("3.5"))
    assert try_parse_decimal("x") == (False, None)
    assert is_non_negative_number("0")
    assert not is_non_negative_number("-0.01")
    assert is_strictly_positive_number("0.01")
    assert not is_strictly_positive_number(0)
    assert non_empty("  a ")
    assert not non_empty("   ")


def test_date_validators():
    assert is_iso_date("2024-02-29")
    assert not is_iso_date("2023-02-29")
    assert not is_iso_date("2024-3-1")
    assert not is_iso_date(None)
    assert not is_iso_date("2024-W01-1")
    assert not is_iso_date("20240301")
    assert is_valid_range("2024-03-01", "2024-03-01")
    assert not is_valid_range("2024-03-02", "2024-03-01")


def test_get_logger_attaches_one_handler():
    from fish_ledger.utils.loggers import get_logger

    first = get_logger("fish_ledger.test_once")
    second = get_logger("fish_ledger.test_once")
    assert first is second
    assert len(second.handlers) == 1
