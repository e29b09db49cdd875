"""Accept an uploaded vendor price list and register a pending import."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from sqlalchemy.orm import Session

from pricelist.config import get_settings
from pricelist.domain.entities import IMPORT_STATUS_PENDING, PriceImport
from pricelist.domain.exceptions import (
    FileTooLargeError,
    ParseError,
    ValidationInputError,
)
from pricelist.infrastructure.repositories import (
    PriceImportRepository,
    VendorRepository,
)
from pricelist.infrastructure.storage import delete_upload, store_upload
from pricelist.utils import now_in_app_timezone

from .tabular import (
    SUPPORTED_EXTENSIONS,
    TabularData,
    parse_tabular_file,
    supported_extension,
)

logger = logging.getLogger(__name__)


@dataclass
class UploadResult:
    price_import: PriceImport
    column_letters: list[str]
    headers: list[str]
    sample_rows: list[tuple[int, dict[str, str]]] = field(default_factory=list)


def upload_price_import(
    session: Session,
    *,
    filename: str,
    file_bytes: bytes,
    uploaded_by: int | None,
    vendor_id: int | None = None,
    effective_from: date | None = None,
    effective_to: date | None = None,
) -> UploadResult:
    """Store ``file_bytes``, decode it and create a ``pending`` import.

    Nothing is persisted when the file is rejected.
    """

    settings = get_settings()

    if not filename:
        raise ValidationInputError("No file uploaded")
    if supported_extension(filename) is None:
        raise ValidationInputError(
            f"Invalid file type. Allowed: {', '.join(SUPPORTED_EXTENSIONS)}"
        )
    if len(file_bytes) > settings.max_upload_bytes:
        raise FileTooLargeError(
            f"File exceeds the {settings.max_upload_bytes // (1024 * 1024)}MB limit"
        )
    if not file_bytes:
        raise ParseError("File is empty or contains only headers")
    if effective_from and effective_to and effective_from > effective_to:
        raise ValidationInputError("effective_from must not be after effective_to")
    if vendor_id is not None:
        vendor = VendorRepository(session).get(vendor_id)
        if vendor is None or not vendor.is_active:
            raise ValidationInputError("Vendor not found or inactive")

    stored_path = store_upload(filename, file_bytes)
    try:
        table = parse_tabular_file(stored_path)
        price_import = PriceImportRepository(session).create(
            _build_import(
                table,
                filename=filename,
                stored_path=stored_path,
                file_size=len(file_bytes),
                uploaded_by=uploaded_by,
                vendor_id=vendor_id,
                effective_from=effective_from,
                effective_to=effective_to,
            )
        )
    except Exception:
        delete_upload(stored_path)
        raise

    logger.info(
        "Price import %s created from %s with %s data rows",
        price_import.id,
        filename,
        table.total_rows,
    )
    return UploadResult(
        price_import=price_import,
        column_letters=table.column_letters,
        headers=table.headers,
        sample_rows=table.sample(settings.sample_row_count),
    )


def _build_import(
    table: TabularData,
    *,
    filename: str,
    stored_path: Path,
    file_size: int,
    uploaded_by: int | None,
    vendor_id: int | None,
    effective_from: date | None,
    effective_to: date | None,
) -> PriceImport:
    return PriceImport(
        id=None,
        vendor_id=vendor_id,
        filename=Path(filename).name,
        file_path=str(stored_path),
        file_size=file_size,
        status=IMPORT_STATUS_PENDING,
        total_rows=table.total_rows,
        column_headers=table.headers,
        effective_from=effective_from,
        effective_to=effective_to,
        uploaded_by=uploaded_by,
        created_at=now_in_app_timezone(),
    )


__all__ = ["UploadResult", "upload_price_import"]
