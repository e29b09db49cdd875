"""Domain entities exposed by the application."""

from .actor import Actor
from .price_history import PRICE_SOURCE_IMPORT, PriceHistoryEntry
from .price_import import (
    DECIMAL_FORMAT_CENTS,
    DECIMAL_FORMAT_DOLLARS,
    DECIMAL_FORMATS,
    IMPORT_STATUS_CANCELLED,
    IMPORT_STATUS_COMPLETED,
    IMPORT_STATUS_FAILED,
    IMPORT_STATUS_IMPORTING,
    IMPORT_STATUS_MAPPING,
    IMPORT_STATUS_PENDING,
    IMPORT_STATUS_PREVIEW,
    IMPORT_STATUS_VALIDATING,
    IMPORT_STATUSES,
    MAPPING_FIELDS,
    REQUIRED_MAPPING_FIELDS,
    TERMINAL_IMPORT_STATUSES,
    ColumnMapping,
    PriceImport,
)
from .price_import_row import (
    COMMITTABLE_ROW_STATUSES,
    MATCH_EXACT_MODEL,
    MATCH_EXACT_SKU,
    MATCH_NEW,
    MATCH_TYPES,
    ROW_STATUS_ERROR,
    ROW_STATUS_IMPORTED,
    ROW_STATUS_SKIPPED,
    ROW_STATUS_VALID,
    ROW_STATUS_WARNING,
    ROW_STATUSES,
    PriceImportRow,
)
from .product import Product
from .vendor import Vendor

__all__ = [
    "Actor",
    "COMMITTABLE_ROW_STATUSES",
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
    "MATCH_EXACT_MODEL",
    "MATCH_EXACT_SKU",
    "MATCH_NEW",
    "MATCH_TYPES",
    "PRICE_SOURCE_IMPORT",
    "PriceHistoryEntry",
    "PriceImport",
    "PriceImportRow",
    "Product",
    "REQUIRED_MAPPING_FIELDS",
    "ROW_STATUSES",
    "ROW_STATUS_ERROR",
    "ROW_STATUS_IMPORTED",
    "ROW_STATUS_SKIPPED",
    "ROW_STATUS_VALID",
    "ROW_STATUS_WARNING",
    "TERMINAL_IMPORT_STATUSES",
    "Vendor",
]
