"""Domain entity representing one uploaded vendor price list."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping

IMPORT_STATUS_PENDING = "pending"
IMPORT_STATUS_MAPPING = "mapping"
IMPORT_STATUS_VALIDATING = "validating"
IMPORT_STATUS_PREVIEW = "preview"
IMPORT_STATUS_IMPORTING = "importing"
IMPORT_STATUS_COMPLETED = "completed"
IMPORT_STATUS_FAILED = "failed"
IMPORT_STATUS_CANCELLED = "cancelled"

IMPORT_STATUSES = (
    IMPORT_STATUS_PENDING,
    IMPORT_STATUS_MAPPING,
    IMPORT_STATUS_VALIDATING,
    IMPORT_STATUS_PREVIEW,
    IMPORT_STATUS_IMPORTING,
    IMPORT_STATUS_COMPLETED,
    IMPORT_STATUS_FAILED,
    IMPORT_STATUS_CANCELLED,
)
TERMINAL_IMPORT_STATUSES = frozenset(
    {IMPORT_STATUS_COMPLETED, IMPORT_STATUS_FAILED, IMPORT_STATUS_CANCELLED}
)

DECIMAL_FORMAT_DOLLARS = "dollars"
DECIMAL_FORMAT_CENTS = "cents"
DECIMAL_FORMATS = (DECIMAL_FORMAT_DOLLARS, DECIMAL_FORMAT_CENTS)

MAPPING_FIELDS = ("sku", "description", "cost", "msrp", "promo_price")
REQUIRED_MAPPING_FIELDS = ("sku", "cost")


@dataclass(frozen=True)
class ColumnMapping:
    """Semantic field to column letter assignment chosen by the operator."""

    fields: Mapping[str, str]
    decimal_format: str = DECIMAL_FORMAT_DOLLARS
    skip_rows: int = 1

    def column_for(self, field_name: str) -> str | None:
        return self.fields.get(field_name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "fields": dict(self.fields),
            "decimal_format": self.decimal_format,
            "skip_rows": self.skip_rows,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any] | None) -> "ColumnMapping | None":
        if not payload:
            return None
        return cls(
            fields=dict(payload.get("fields") or {}),
            decimal_format=payload.get("decimal_format") or DECIMAL_FORMAT_DOLLARS,
            skip_rows=int(payload.get("skip_rows", 1)),
        )


@dataclass
class PriceImport:
    """Lifecycle record of a vendor price-list upload."""

    id: int | None
    vendor_id: int | None
    filename: str
    file_path: str
    file_size: int
    status: str
    total_rows: int
    column_headers: list[str] = field(default_factory=list)
    column_mapping: ColumnMapping | None = None
    rows_processed: int = 0
    rows_updated: int = 0
    rows_created: int = 0
    rows_skipped: int = 0
    rows_errored: int = 0
    effective_from: date | None = None
    effective_to: date | None = None
    uploaded_by: int | None = None
    approved_by: int | None = None
    cancel_requested: bool = False
    error_message: str | None = None
    created_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_IMPORT_STATUSES

    @property
    def percent_complete(self) -> int:
        if self.status == IMPORT_STATUS_COMPLETED:
            return 100
        total = self.total_rows or 1
        return min(100, round(self.rows_processed / total * 100))


__all__ = [
    "ColumnMapping",
    "DECIMAL_FORMATS",
    "DECIMAL_FORMAT_CENTS",
    "DECIMAL_FORMAT_DOLLARS",
    "IMPORT_STATUSES",
    "IMPORT_STATUS_CANCELLED",
    "IMPORT_STATUS_COMPLETED",
    "IMPORT_STATUS_FAILED",
    "IMPORT_STATUS_IMPORTING",
    "IMPORT_STATUS_MAPPING",
    "IMPORT_STATUS_PENDING",
    "IMPORT_STATUS_PREVIEW",
    "IMPORT_STATUS_VALIDATING",
    "MAPPING_FIELDS",
    "PriceImport",
    "REQUIRED_MAPPING_FIELDS",
    "TERMINAL_IMPORT_STATUSES",
]
