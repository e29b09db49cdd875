"""Domain entity representing a single line of an uploaded price list."""

from dataclasses import dataclass, field

ROW_STATUS_VALID = "valid"
ROW_STATUS_WARNING = "warning"
ROW_STATUS_ERROR = "error"
ROW_STATUS_SKIPPED = "skipped"
ROW_STATUS_IMPORTED = "imported"

ROW_STATUSES = (
    ROW_STATUS_VALID,
    ROW_STATUS_WARNING,
    ROW_STATUS_ERROR,
    ROW_STATUS_SKIPPED,
    ROW_STATUS_IMPORTED,
)
COMMITTABLE_ROW_STATUSES = (ROW_STATUS_VALID, ROW_STATUS_WARNING)

MATCH_EXACT_SKU = "exact_sku"
MATCH_EXACT_MODEL = "exact_model"
MATCH_NEW = "new"

MATCH_TYPES = (MATCH_EXACT_SKU, MATCH_EXACT_MODEL, MATCH_NEW)


@dataclass
class PriceImportRow:
    """Parsed, matched and validated content of one source row.

    Monetary values are integer minor units (cents).
    """

    id: int | None
    import_id: int
    row_number: int
    raw_data: dict[str, str]
    parsed_sku: str | None
    parsed_description: str | None
    parsed_cost: int | None
    parsed_msrp: int | None
    parsed_promo_price: int | None
    matched_product_id: int | None
    match_type: str
    status: str
    validation_errors: list[str] = field(default_factory=list)
    validation_warnings: list[str] = field(default_factory=list)
    previous_cost: int | None = None
    previous_msrp: int | None = None
    cost_change: int | None = None
    msrp_change: int | None = None
    matched_product_name: str | None = None


__all__ = [
    "COMMITTABLE_ROW_STATUSES",
    "MATCH_EXACT_MODEL",
    "MATCH_EXACT_SKU",
    "MATCH_NEW",
    "MATCH_TYPES",
    "PriceImportRow",
    "ROW_STATUSES",
    "ROW_STATUS_ERROR",
    "ROW_STATUS_IMPORTED",
    "ROW_STATUS_SKIPPED",
    "ROW_STATUS_VALID",
    "ROW_STATUS_WARNING",
]
