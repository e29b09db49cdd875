"""Business checks applied to mappings and to each parsed row."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from pricelist.domain.entities import (
    DECIMAL_FORMATS,
    MAPPING_FIELDS,
    REQUIRED_MAPPING_FIELDS,
    ROW_STATUS_ERROR,
    ROW_STATUS_VALID,
    ROW_STATUS_WARNING,
    ColumnMapping,
)
from pricelist.domain.exceptions import ValidationInputError

from .columns import column_index, is_column_letter

SKU_REQUIRED = "SKU is required"
COST_REQUIRED = "Valid cost is required"
MSRP_BELOW_COST = "MSRP is less than cost"
PROMO_ABOVE_MSRP = "Promo price is higher than MSRP"
NEW_PRODUCT_SKIPPED = "New product - manual creation required"


@dataclass(frozen=True)
class ParsedRowValues:
    sku: str | None = None
    description: str | None = None
    cost: int | None = None
    msrp: int | None = None
    promo_price: int | None = None


@dataclass(frozen=True)
class RowValidation:
    status: str
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


def validate_row(values: ParsedRowValues) -> RowValidation:
    """Classify ``values`` as valid, warning or error.

    Errors block the row from being committed; warnings only flag it.
    """

    errors: list[str] = []
    warnings: list[str] = []

    if not values.sku:
        errors.append(SKU_REQUIRED)
    if values.cost is None or values.cost <= 0:
        errors.append(COST_REQUIRED)

    if values.msrp is not None and values.cost is not None and values.msrp < values.cost:
        warnings.append(MSRP_BELOW_COST)
    if (
        values.promo_price is not None
        and values.msrp is not None
        and values.promo_price > values.msrp
    ):
        warnings.append(PROMO_ABOVE_MSRP)

    if errors:
        status = ROW_STATUS_ERROR
    elif warnings:
        status = ROW_STATUS_WARNING
    else:
        status = ROW_STATUS_VALID
    return RowValidation(status=status, errors=tuple(errors), warnings=tuple(warnings))


def build_column_mapping(
    fields: Mapping[str, Any] | None,
    *,
    decimal_format: str | None,
    skip_rows: Any,
    column_count: int | None = None,
) -> ColumnMapping:
    """Validate operator input and return a :class:`ColumnMapping`.

    Raises :class:`ValidationInputError` describing the first problem found.
    """

    if not fields:
        raise ValidationInputError("column_mapping is required")

    unknown = sorted(set(fields) - set(MAPPING_FIELDS))
    if unknown:
        raise ValidationInputError(
            "Unknown mapping field(s): " + ", ".join(f"'{name}'" for name in unknown)
        )

    normalized: dict[str, str] = {}
    for field_name in MAPPING_FIELDS:
        raw = fields.get(field_name)
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            continue
        if not isinstance(raw, str) or not is_column_letter(raw):
            raise ValidationInputError(
                f"Invalid column letter for '{field_name}': {raw!r}"
            )
        letter = raw.strip().upper()
        if column_count is not None and column_index(letter) >= column_count:
            raise ValidationInputError(
                f"Column '{letter}' for '{field_name}' is outside the file's "
                f"{column_count} columns"
            )
        normalized[field_name] = letter

    for field_name in REQUIRED_MAPPING_FIELDS:
        if field_name not in normalized:
            raise ValidationInputError(
                f"column_mapping.{field_name} is required"
            )

    convention = decimal_format or DECIMAL_FORMATS[0]
    if convention not in DECIMAL_FORMATS:
        raise ValidationInputError("decimal_format must be 'dollars' or 'cents'")

    if skip_rows is None:
        skip_rows = 1
    if isinstance(skip_rows, bool) or not isinstance(skip_rows, int) or skip_rows < 0:
        raise ValidationInputError("skip_rows must be a non-negative integer")

    return ColumnMapping(fields=normalized, decimal_format=convention, skip_rows=skip_rows)


__all__ = [
    "COST_REQUIRED",
    "MSRP_BELOW_COST",
    "NEW_PRODUCT_SKIPPED",
    "PROMO_ABOVE_MSRP",
    "ParsedRowValues",
    "RowValidation",
    "SKU_REQUIRED",
    "build_column_mapping",
    "validate_row",
]
