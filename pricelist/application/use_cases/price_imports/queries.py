"""Read-side use cases for vendor price-list imports."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Sequence

from sqlalchemy.orm import Session

from pricelist.domain.entities import (
    IMPORT_STATUS_COMPLETED,
    IMPORT_STATUS_IMPORTING,
    IMPORT_STATUS_PREVIEW,
    IMPORT_STATUSES,
    MATCH_TYPES,
    ROW_STATUSES,
    PriceImport,
    PriceImportRow,
    Vendor,
)
from pricelist.domain.exceptions import (
    ConflictError,
    PriceImportNotFoundError,
    ValidationInputError,
)
from pricelist.infrastructure.repositories import (
    PriceImportRepository,
    PriceImportRowRepository,
)

LIST_DEFAULT_LIMIT = 25
LIST_MAX_LIMIT = 100
PREVIEW_DEFAULT_LIMIT = 50
PREVIEW_MAX_LIMIT = 200

REVIEWABLE_STATUSES = (
    IMPORT_STATUS_PREVIEW,
    IMPORT_STATUS_IMPORTING,
    IMPORT_STATUS_COMPLETED,
)


@dataclass(frozen=True)
class Page:
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return -(-self.total // self.limit) if self.limit else 0


@dataclass
class PriceImportDetail:
    price_import: PriceImport
    vendor: Vendor | None
    row_stats: dict[str, int] = field(default_factory=dict)


@dataclass
class PriceImportListing:
    items: list[tuple[PriceImport, Vendor | None]]
    page: Page


@dataclass
class PriceImportPreview:
    price_import: PriceImport
    vendor: Vendor | None
    summary: dict[str, int]
    rows: list[PriceImportRow]
    page: Page


@dataclass
class PriceImportRowListing:
    rows: list[PriceImportRow]
    page: Page


def get_price_import(session: Session, *, import_id: int) -> PriceImport:
    price_import = PriceImportRepository(session).get(import_id)
    if price_import is None:
        raise PriceImportNotFoundError("Import not found")
    return price_import


def get_price_import_detail(session: Session, *, import_id: int) -> PriceImportDetail:
    """Return an import, its vendor and how many rows sit in each row status."""

    found = PriceImportRepository(session).get_with_vendor(import_id)
    if found is None:
        raise PriceImportNotFoundError("Import not found")
    price_import, vendor = found
    stats = PriceImportRowRepository(session).count_by_status(import_id)
    return PriceImportDetail(
        price_import=price_import,
        vendor=vendor,
        row_stats={status: stats.get(status, 0) for status in ROW_STATUSES},
    )


def list_price_imports(
    session: Session,
    *,
    status: str | None = None,
    vendor_id: int | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    page: int = 1,
    limit: int = LIST_DEFAULT_LIMIT,
) -> PriceImportListing:
    if status is not None and status not in IMPORT_STATUSES:
        raise ValidationInputError(f"Unknown import status '{status}'")
    if date_from is not None and date_to is not None and date_from > date_to:
        raise ValidationInputError("date_from must not be after date_to")

    page_number, page_size = _normalize_paging(page, limit, LIST_MAX_LIMIT)
    items, total = PriceImportRepository(session).list(
        status=status,
        vendor_id=vendor_id,
        date_from=date_from,
        date_to=date_to,
        skip=(page_number - 1) * page_size,
        limit=page_size,
    )
    return PriceImportListing(
        items=list(items), page=Page(page=page_number, limit=page_size, total=total)
    )


def get_price_import_preview(
    session: Session,
    *,
    import_id: int,
    status_filter: str | None = None,
    page: int = 1,
    limit: int = PREVIEW_DEFAULT_LIMIT,
) -> PriceImportPreview:
    """Return the aggregate summary and a page of validated rows.

    Only available once validation has produced a ``preview``.
    """

    found = PriceImportRepository(session).get_with_vendor(import_id)
    if found is None:
        raise PriceImportNotFoundError("Import not found")
    price_import, vendor = found
    ensure_reviewable(price_import, "Preview")
    _check_choice("status", status_filter, ROW_STATUSES)

    page_number, page_size = _normalize_paging(page, limit, PREVIEW_MAX_LIMIT)
    row_repo = PriceImportRowRepository(session)
    rows, total = row_repo.list(
        import_id,
        status=status_filter,
        skip=(page_number - 1) * page_size,
        limit=page_size,
    )
    return PriceImportPreview(
        price_import=price_import,
        vendor=vendor,
        summary=row_repo.preview_summary(import_id),
        rows=rows,
        page=Page(page=page_number, limit=page_size, total=total),
    )


def list_price_import_rows(
    session: Session,
    *,
    import_id: int,
    status: str | None = None,
    match_type: str | None = None,
    page: int = 1,
    limit: int = PREVIEW_DEFAULT_LIMIT,
) -> PriceImportRowListing:
    get_price_import(session, import_id=import_id)
    _check_choice("status", status, ROW_STATUSES)
    _check_choice("match_type", match_type, MATCH_TYPES)

    page_number, page_size = _normalize_paging(page, limit, PREVIEW_MAX_LIMIT)
    rows, total = PriceImportRowRepository(session).list(
        import_id,
        status=status,
        match_type=match_type,
        skip=(page_number - 1) * page_size,
        limit=page_size,
    )
    return PriceImportRowListing(
        rows=rows, page=Page(page=page_number, limit=page_size, total=total)
    )


def get_price_import_progress(session: Session, *, import_id: int) -> PriceImport:
    """Return the import for progress polling; readable in every phase."""

    return get_price_import(session, import_id=import_id)


def ensure_reviewable(price_import: PriceImport, label: str) -> None:
    if price_import.status not in REVIEWABLE_STATUSES:
        raise ConflictError(
            f"{label} not available. Import status is '{price_import.status}'. "
            "Validation must complete first."
        )


def _check_choice(name: str, value: str | None, allowed: Sequence[str]) -> None:
    if value is not None and value not in allowed:
        raise ValidationInputError(
            f"{name} must be one of: " + ", ".join(allowed)
        )


def _normalize_paging(page: int, limit: int, max_limit: int) -> tuple[int, int]:
    return max(int(page or 1), 1), min(max(int(limit or 1), 1), max_limit)


__all__ = [
    "LIST_DEFAULT_LIMIT",
    "LIST_MAX_LIMIT",
    "PREVIEW_DEFAULT_LIMIT",
    "PREVIEW_MAX_LIMIT",
    "Page",
    "PriceImportDetail",
    "PriceImportListing",
    "PriceImportPreview",
    "PriceImportRowListing",
    "REVIEWABLE_STATUSES",
    "ensure_reviewable",
    "get_price_import",
    "get_price_import_detail",
    "get_price_import_preview",
    "get_price_import_progress",
    "list_price_import_rows",
    "list_price_imports",
]
