"""Tests for column letters, cell lookup and currency normalization."""

from decimal import Decimal

import pytest

from pricelist.application.use_cases.price_imports.columns import (
    column_index,
    column_letter,
    from_minor_units,
    is_column_letter,
    parse_currency,
    parse_money,
    resolve_cell,
    resolve_text,
    to_minor_units,
)
from pricelist.domain.exceptions import RowError


@pytest.mark.parametrize(
    ("index", "letter"),
    [(0, "A"), (25, "Z"), (26, "AA"), (51, "AZ"), (52, "BA"), (701, "ZZ"), (702, "AAA")],
)
def test_column_letters(index: int, letter: str) -> None:
    assert column_letter(index) == letter
    assert column_index(letter) == index


def test_letter_index_round_trip() -> None:
    for index in range(0, 2000):
        assert column_index(column_letter(index)) == index


def test_invalid_letters() -> None:
    assert column_index("") == -1
    assert column_index("A1") == -1
    assert column_index(None) == -1
    assert is_column_letter("ab") is True
    assert is_column_letter("ABCD") is False
    assert is_column_letter("1") is False


def test_resolve_cell_trims_and_handles_missing_columns() -> None:
    row = ["A1", "  Widget  "]

    assert resolve_cell(row, "B") == "Widget"
    assert resolve_cell(row, "b") == "Widget"
    assert resolve_cell(row, "C") is None
    assert resolve_cell(row, None) is None


def test_resolve_text_rejects_overlong_values() -> None:
    with pytest.raises(RowError):
        resolve_text(["X" * 101], "A", label="SKU", max_length=100)
    assert resolve_text(["   "], "A", label="SKU") is None


@pytest.mark.parametrize(
    ("raw", "convention", "expected"),
    [
        ("$1,234.56", "dollars", 123456),
        ("10", "dollars", 1000),
        (" 9.99 ", "dollars", 999),
        ("12.345", "dollars", 1235),
        ("-5", "dollars", -500),
        ("1099", "cents", 1099),
        ("10.6", "cents", 11),
        ("€7.10", "dollars", 710),
        ("", "dollars", None),
        ("   ", "dollars", None),
        ("n/a", "dollars", None),
        ("NaN", "dollars", None),
        (None, "cents", None),
        ("1e30", "dollars", None),
        ("99999999999999999999", "cents", None),
        ("9e999999", "dollars", None),
        ("1.5e2", "dollars", 15000),
    ],
)
def test_parse_currency(raw, convention: str, expected) -> None:
    assert parse_currency(raw, convention) == expected


def test_minor_unit_conversion() -> None:
    assert from_minor_units(1250) == Decimal("12.50")
    assert from_minor_units(None) is None
    assert to_minor_units(Decimal("8.00")) == 800
    assert to_minor_units(Decimal("8.005")) == 801
    assert to_minor_units(None) is None


@pytest.mark.parametrize("raw", ["1e30", "-99999999999999999999", "10000000000000.01"])
def test_parse_money_reports_amounts_too_large_to_store(raw: str) -> None:
    with pytest.raises(RowError, match="Cost is out of range"):
        parse_money(raw, "dollars", label="Cost")


def test_parse_money_accepts_the_largest_storable_amount() -> None:
    assert parse_money("10,000,000,000,000.00", "dollars", label="Cost") == 10**15
    assert parse_money("abc", "dollars", label="Cost") is None
