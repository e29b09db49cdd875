"""Column mapping submission and retry of finished imports."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlalchemy.orm import Session

from pricelist.domain.entities import (
    DECIMAL_FORMAT_DOLLARS,
    IMPORT_STATUS_CANCELLED,
    IMPORT_STATUS_FAILED,
    IMPORT_STATUS_MAPPING,
    IMPORT_STATUS_PENDING,
    IMPORT_STATUS_PREVIEW,
    IMPORT_STATUS_VALIDATING,
    PriceImport,
)
from pricelist.domain.exceptions import ConflictError
from pricelist.infrastructure.repositories import PriceImportRepository
from pricelist.utils import now_in_app_timezone

from .queries import get_price_import
from .validators import build_column_mapping

logger = logging.getLogger(__name__)

MAPPABLE_STATUSES = (IMPORT_STATUS_PENDING, IMPORT_STATUS_MAPPING, IMPORT_STATUS_PREVIEW)
REOPENABLE_STATUSES = (IMPORT_STATUS_FAILED, IMPORT_STATUS_CANCELLED)

_RESET_COUNTERS = {
    "rows_processed": 0,
    "rows_updated": 0,
    "rows_created": 0,
    "rows_skipped": 0,
    "rows_errored": 0,
}


def submit_column_mapping(
    session: Session,
    *,
    import_id: int,
    fields: Mapping[str, Any] | None,
    decimal_format: str | None = DECIMAL_FORMAT_DOLLARS,
    skip_rows: Any = 1,
) -> PriceImport:
    """Persist a column mapping and move the import to ``validating``.

    The caller schedules :func:`run_price_import_validation` afterwards.
    """

    price_import = get_price_import(session, import_id=import_id)
    if price_import.status not in MAPPABLE_STATUSES:
        raise ConflictError(
            f"Cannot set mapping when import status is '{price_import.status}'. "
            f"Must be one of: {', '.join(MAPPABLE_STATUSES)}."
        )

    mapping = build_column_mapping(
        fields,
        decimal_format=decimal_format,
        skip_rows=skip_rows,
        column_count=len(price_import.column_headers) or None,
    )

    repository = PriceImportRepository(session)
    moved = repository.transition(
        import_id,
        from_statuses=MAPPABLE_STATUSES,
        to_status=IMPORT_STATUS_VALIDATING,
        column_mapping=mapping,
        cancel_requested=False,
        error_message=None,
        started_at=now_in_app_timezone(),
        completed_at=None,
        **_RESET_COUNTERS,
    )
    if not moved:
        raise ConflictError("Import changed state while the mapping was being saved")

    logger.info("Price import %s mapped: %s", import_id, mapping.to_dict())
    return get_price_import(session, import_id=import_id)


def reopen_price_import(session: Session, *, import_id: int) -> PriceImport:
    """Return a failed or cancelled import to ``mapping`` so it can be retried."""

    price_import = get_price_import(session, import_id=import_id)
    if price_import.status not in REOPENABLE_STATUSES:
        raise ConflictError(
            f"Cannot reopen import with status '{price_import.status}'. "
            "Only failed or cancelled imports can be retried."
        )

    moved = PriceImportRepository(session).transition(
        import_id,
        from_statuses=REOPENABLE_STATUSES,
        to_status=IMPORT_STATUS_MAPPING,
        cancel_requested=False,
        error_message=None,
        started_at=None,
        completed_at=None,
        **_RESET_COUNTERS,
    )
    if not moved:
        raise ConflictError("Import changed state while being reopened")

    logger.info("Price import %s reopened for mapping", import_id)
    return get_price_import(session, import_id=import_id)


__all__ = [
    "MAPPABLE_STATUSES",
    "REOPENABLE_STATUSES",
    "reopen_price_import",
    "submit_column_mapping",
]
