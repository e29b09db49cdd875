"""Column letter arithmetic and cell value normalization."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Sequence

from pricelist.domain.entities import DECIMAL_FORMAT_CENTS
from pricelist.domain.exceptions import RowError

_COLUMN_LETTER_PATTERN = re.compile(r"^[A-Z]{1,3}$")
_CURRENCY_NOISE_PATTERN = re.compile(r"[\s$€£¥,]")
_ONE = Decimal(1)
_CENT = Decimal("0.01")
_HUNDRED = Decimal(100)
# Keeps row deltas and import-wide sums inside 64-bit integer columns.
_MAX_MINOR_UNITS = Decimal(10**15)
_MAX_MAJOR_UNITS = _MAX_MINOR_UNITS / _HUNDRED


def column_letter(index: int) -> str:
    """Return the spreadsheet letter for zero-based ``index`` (0 -> A, 26 -> AA)."""

    if index < 0:
        raise ValueError("Column index must be non-negative")
    letters = ""
    remaining = index
    while remaining >= 0:
        remaining, offset = divmod(remaining, 26)
        letters = chr(ord("A") + offset) + letters
        remaining -= 1
    return letters


def column_index(letter: str | None) -> int:
    """Return the zero-based index for ``letter``, or ``-1`` when it is not a letter."""

    if not letter:
        return -1
    normalized = letter.strip().upper()
    if not normalized.isascii() or not normalized.isalpha():
        return -1
    index = 0
    for char in normalized:
        index = index * 26 + (ord(char) - ord("A") + 1)
    return index - 1


def is_column_letter(value: str | None) -> bool:
    return bool(value) and bool(_COLUMN_LETTER_PATTERN.match(value.strip().upper()))


def resolve_cell(row: Sequence[str], letter: str | None) -> str | None:
    """Return the trimmed text under ``letter`` in ``row``, or ``None`` if absent."""

    index = column_index(letter)
    if index < 0 or index >= len(row):
        return None
    value = row[index]
    if value is None:
        return None
    return str(value).strip()


def resolve_text(
    row: Sequence[str],
    letter: str | None,
    *,
    label: str,
    max_length: int | None = None,
) -> str | None:
    """Return the non-empty text under ``letter`` or ``None``.

    Raises :class:`RowError` when the value does not fit ``max_length``.
    """

    value = resolve_cell(row, letter)
    if not value:
        return None
    if max_length is not None and len(value) > max_length:
        raise RowError(f"{label} exceeds {max_length} characters")
    return value


def parse_currency(raw: str | None, convention: str) -> int | None:
    """Convert a currency cell to integer minor units.

    Currency symbols, thousands separators and whitespace are ignored. Under
    the ``cents`` convention the number is already in minor units; otherwise it
    is treated as major units and multiplied by 100. Halves round away from
    zero. Empty, non-numeric or out-of-range input yields ``None``.
    """

    try:
        return parse_money(raw, convention, label="Amount")
    except RowError:
        return None


def parse_money(raw: str | None, convention: str, *, label: str) -> int | None:
    """Like :func:`parse_currency`, but an amount too large to store is a row error."""

    if raw is None:
        return None
    cleaned = _CURRENCY_NOISE_PATTERN.sub("", str(raw))
    if not cleaned:
        return None
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None

    cents = convention == DECIMAL_FORMAT_CENTS
    if abs(amount) > (_MAX_MINOR_UNITS if cents else _MAX_MAJOR_UNITS):
        raise RowError(f"{label} is out of range")
    if not cents:
        amount = amount * _HUNDRED
    try:
        minor_units = int(amount.quantize(_ONE, rounding=ROUND_HALF_UP))
    except InvalidOperation as exc:
        raise RowError(f"{label} is out of range") from exc
    if abs(minor_units) > _MAX_MINOR_UNITS:
        raise RowError(f"{label} is out of range")
    return minor_units


def to_minor_units(amount: Decimal | None) -> int | None:
    """Express a catalog amount (major units) as integer minor units."""

    if amount is None:
        return None
    return int((Decimal(amount) * _HUNDRED).quantize(_ONE, rounding=ROUND_HALF_UP))


def from_minor_units(cents: int | None) -> Decimal | None:
    """Express integer minor units as a two-decimal catalog amount."""

    if cents is None:
        return None
    return (Decimal(cents) / _HUNDRED).quantize(_CENT)


__all__ = [
    "column_index",
    "column_letter",
    "from_minor_units",
    "is_column_letter",
    "parse_currency",
    "parse_money",
    "resolve_cell",
    "resolve_text",
    "to_minor_units",
]
