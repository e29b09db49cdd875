"""Use cases for the vendor price-list import pipeline."""

from .cancel import (
    CANCELLATION_PENDING,
    CancellationResult,
    cancel_price_import,
    recover_interrupted_imports,
)
from .commit import run_price_import_commit, start_price_import_commit
from .mapping import reopen_price_import, submit_column_mapping
from .queries import (
    LIST_DEFAULT_LIMIT,
    LIST_MAX_LIMIT,
    PREVIEW_DEFAULT_LIMIT,
    PREVIEW_MAX_LIMIT,
    Page,
    PriceImportDetail,
    PriceImportListing,
    PriceImportPreview,
    PriceImportRowListing,
    get_price_import,
    get_price_import_detail,
    get_price_import_preview,
    get_price_import_progress,
    list_price_import_rows,
    list_price_imports,
)
from .simulation import SimulationResult, simulate_price_import
from .upload import UploadResult, upload_price_import
from .validation import run_price_import_validation

__all__ = [
    "CANCELLATION_PENDING",
    "CancellationResult",
    "LIST_DEFAULT_LIMIT",
    "LIST_MAX_LIMIT",
    "PREVIEW_DEFAULT_LIMIT",
    "PREVIEW_MAX_LIMIT",
    "Page",
    "PriceImportDetail",
    "PriceImportListing",
    "PriceImportPreview",
    "PriceImportRowListing",
    "SimulationResult",
    "UploadResult",
    "cancel_price_import",
    "get_price_import",
    "get_price_import_detail",
    "get_price_import_preview",
    "get_price_import_progress",
    "list_price_import_rows",
    "list_price_imports",
    "recover_interrupted_imports",
    "reopen_price_import",
    "run_price_import_commit",
    "run_price_import_validation",
    "simulate_price_import",
    "start_price_import_commit",
    "submit_column_mapping",
    "upload_price_import",
]
