"""Tests for decoding uploaded price-list files."""

from __future__ import annotations

import pytest

pytest.importorskip("pandas")

from pricelist.application.use_cases.price_imports.tabular import (
    parse_tabular_bytes,
    parse_tabular_file,
)
from pricelist.domain.exceptions import ParseError


def test_csv_headers_rows_and_letters(make_csv) -> None:
    path = make_csv(["SKU,Description,Cost", "A1,Widget,$10.00", "B2,Gadget,12.50"])

    table = parse_tabular_file(path)

    assert table.headers == ["SKU", "Description", "Cost"]
    assert table.column_letters == ["A", "B", "C"]
    assert table.rows == [["A1", "Widget", "$10.00"], ["B2", "Gadget", "12.50"]]
    assert table.row_numbers == [2, 3]
    assert table.total_rows == 2


def test_blank_rows_are_dropped_but_numbering_follows_the_file(make_csv) -> None:
    path = make_csv(["SKU,Cost", "A1,1", ",", "B2,2"])

    table = parse_tabular_file(path)

    assert table.rows == [["A1", "1"], ["B2", "2"]]
    assert table.row_numbers == [2, 4]


def test_byte_order_mark_is_ignored() -> None:
    payload = "\ufeffSKU,Cost\nA1,5\n".encode("utf-8")

    table = parse_tabular_bytes(payload, ".csv")

    assert table.headers == ["SKU", "Cost"]


def test_trailing_empty_columns_are_trimmed(make_csv) -> None:
    path = make_csv(["SKU,Cost,,", "A1,5,,"])

    table = parse_tabular_file(path)

    assert table.column_letters == ["A", "B"]
    assert table.rows == [["A1", "5"]]


def test_narrow_title_line_and_quoted_commas() -> None:
    payload = (
        b"Acme price list\n"
        b'SKU,Description,Cost\n'
        b'A1,"Widget, large",NA\n'
        b'00123,"Two\nlines","$1,250.00"\n'
    )

    table = parse_tabular_bytes(payload, ".csv")

    assert table.headers == ["Acme price list", "", ""]
    assert table.rows == [
        ["SKU", "Description", "Cost"],
        ["A1", "Widget, large", "NA"],
        ["00123", "Two\nlines", "$1,250.00"],
    ]
    assert table.column_letters == ["A", "B", "C"]


def test_latin1_files_are_decoded() -> None:
    payload = "SKU,Description\nA1,Café crème\n".encode("latin-1")

    table = parse_tabular_bytes(payload, ".csv")

    assert table.rows == [["A1", "Café crème"]]


def test_header_only_file_is_rejected(make_csv) -> None:
    path = make_csv(["SKU,Cost"])

    with pytest.raises(ParseError):
        parse_tabular_file(path)


def test_empty_file_is_rejected() -> None:
    with pytest.raises(ParseError):
        parse_tabular_bytes(b"", ".csv")


def test_unsupported_extension_is_rejected(tmp_path) -> None:
    path = tmp_path / "prices.txt"
    path.write_text("SKU,Cost\nA1,5\n", encoding="utf-8")

    with pytest.raises(ParseError):
        parse_tabular_file(path)


def test_records_honour_skip_rows(make_csv) -> None:
    table = parse_tabular_file(make_csv(["SKU,Cost", "A1,1", "B2,2"]))

    assert table.records(1) == [(2, ["A1", "1"]), (3, ["B2", "2"])]
    assert table.records(2) == [(3, ["B2", "2"])]
    assert table.records(0)[0] == (1, ["SKU", "Cost"])


def test_sample_rows_are_keyed_by_letter(make_csv) -> None:
    table = parse_tabular_file(make_csv(["SKU,Cost", "A1,1", "B2,2", "C3,3"]))

    assert table.sample(2) == [(2, {"A": "A1", "B": "1"}), (3, {"A": "B2", "B": "2"})]


def test_spreadsheet_cells_become_text(tmp_path) -> None:
    openpyxl = pytest.importorskip("openpyxl")
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.append(["SKU", "Cost", "MSRP", "Note"])
    sheet.append(["A1", 12, 19.99, None])
    sheet.append([1001, 7.5, None, "promo"])
    path = tmp_path / "prices.xlsx"
    workbook.save(path)

    table = parse_tabular_file(path)

    assert table.headers == ["SKU", "Cost", "MSRP", "Note"]
    assert table.rows == [["A1", "12", "19.99", ""], ["1001", "7.5", "", "promo"]]
    assert table.row_numbers == [2, 3]
