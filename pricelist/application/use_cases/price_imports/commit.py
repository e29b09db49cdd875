"""Commit engine: apply validated rows of an import to the catalog."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, time
from typing import Callable

from sqlalchemy.orm import Session

from pricelist.config import get_settings
from pricelist.domain.entities import (
    IMPORT_STATUS_CANCELLED,
    IMPORT_STATUS_COMPLETED,
    IMPORT_STATUS_FAILED,
    IMPORT_STATUS_IMPORTING,
    IMPORT_STATUS_PREVIEW,
    MATCH_NEW,
    PRICE_SOURCE_IMPORT,
    ROW_STATUS_IMPORTED,
    ROW_STATUS_SKIPPED,
    PriceHistoryEntry,
    PriceImport,
    PriceImportRow,
)
from pricelist.domain.exceptions import (
    ConflictError,
    ErrorRowsPresentError,
    PipelineError,
)
from pricelist.infrastructure.repositories import (
    PriceHistoryRepository,
    PriceImportRepository,
    PriceImportRowRepository,
    ProductRepository,
)
from pricelist.utils import get_app_timezone, now_in_app_timezone

from .columns import from_minor_units
from .queries import get_price_import
from .validators import NEW_PRODUCT_SKIPPED

logger = logging.getLogger(__name__)

CANCELLED_BY_USER = "Cancelled by user"


@dataclass
class _CommitTally:
    processed: int = 0
    updated: int = 0
    skipped: int = 0


def start_price_import_commit(
    session: Session,
    *,
    import_id: int,
    skip_errors: bool = False,
) -> PriceImport:
    """Move a previewed import to ``importing``.

    Refused unless the import is in ``preview``. Error rows block the commit
    unless ``skip_errors`` is set. The transition is a guarded update so only
    one caller can start a commit pass. The caller schedules
    :func:`run_price_import_commit` afterwards.
    """

    price_import = get_price_import(session, import_id=import_id)
    if price_import.status != IMPORT_STATUS_PREVIEW:
        raise ConflictError(
            f"Cannot commit import with status '{price_import.status}'. "
            f"Must be '{IMPORT_STATUS_PREVIEW}'."
        )

    if not skip_errors:
        error_count = PriceImportRowRepository(session).count_errors(import_id)
        if error_count:
            raise ErrorRowsPresentError(error_count)

    moved = PriceImportRepository(session).transition(
        import_id,
        from_statuses=(IMPORT_STATUS_PREVIEW,),
        to_status=IMPORT_STATUS_IMPORTING,
        rows_processed=0,
        rows_updated=0,
        rows_created=0,
        rows_skipped=0,
        cancel_requested=False,
        error_message=None,
        started_at=now_in_app_timezone(),
        completed_at=None,
    )
    if not moved:
        raise ConflictError("Import is already being committed or has changed state")

    logger.info(
        "Price import %s commit started (skip_errors=%s)", import_id, skip_errors
    )
    return get_price_import(session, import_id=import_id)


def run_price_import_commit(
    session_factory: Callable[[], Session],
    *,
    import_id: int,
    actor_id: int | None,
    apply_effective_date: bool = True,
) -> PriceImport:
    """Apply every committable row inside one transaction.

    Catalog updates, history entries and row statuses are staged on a
    unit-of-work session and flushed only by the final commit. Progress and
    the cancellation flag go through a second session so they stay visible
    while the pass runs. A cancellation or any error rolls the unit of work
    back, leaving the catalog untouched.
    """

    unit_of_work = session_factory()
    control = session_factory()
    try:
        return _run_commit(
            unit_of_work,
            control,
            import_id=import_id,
            actor_id=actor_id,
            apply_effective_date=apply_effective_date,
        )
    finally:
        unit_of_work.close()
        control.close()


def _run_commit(
    unit_of_work: Session,
    control: Session,
    *,
    import_id: int,
    actor_id: int | None,
    apply_effective_date: bool,
) -> PriceImport:
    imports = PriceImportRepository(control)
    price_import = get_price_import(control, import_id=import_id)
    if price_import.status != IMPORT_STATUS_IMPORTING:
        logger.warning(
            "Skipping commit of price import %s in status %s",
            import_id,
            price_import.status,
        )
        return price_import

    interval = get_settings().commit_progress_interval
    applied_at = now_in_app_timezone()
    effective_from = _effective_from(price_import, apply_effective_date, applied_at)
    rows = PriceImportRowRepository(unit_of_work)
    products = ProductRepository(unit_of_work)
    history = PriceHistoryRepository(unit_of_work)
    tally = _CommitTally()

    try:
        for row in rows.list_committable(import_id):
            if _cancellation_requested(imports, import_id):
                return _finish_cancelled(unit_of_work, imports, import_id, tally)

            if row.matched_product_id is not None:
                _apply_row(
                    row,
                    products=products,
                    history=history,
                    actor_id=actor_id,
                    applied_at=applied_at,
                    effective_from=effective_from,
                )
                rows.mark_status(row.id, ROW_STATUS_IMPORTED)
                tally.updated += 1
            elif row.match_type == MATCH_NEW and row.parsed_sku:
                rows.mark_status(
                    row.id, ROW_STATUS_SKIPPED, extra_warning=NEW_PRODUCT_SKIPPED
                )
                tally.skipped += 1
            else:
                rows.mark_status(row.id, ROW_STATUS_SKIPPED)
                tally.skipped += 1

            tally.processed += 1
            if tally.processed % interval == 0:
                imports.update_counters(import_id, rows_processed=tally.processed)

        if _cancellation_requested(imports, import_id):
            return _finish_cancelled(unit_of_work, imports, import_id, tally)
        unit_of_work.commit()
    except Exception as exc:
        unit_of_work.rollback()
        message = f"Commit failed: {exc}"
        logger.exception("Commit of price import %s failed", import_id)
        imports.transition(
            import_id,
            from_statuses=(IMPORT_STATUS_IMPORTING,),
            to_status=IMPORT_STATUS_FAILED,
            error_message=message,
            cancel_requested=False,
            rows_processed=0,
            rows_updated=0,
            rows_skipped=0,
            completed_at=now_in_app_timezone(),
        )
        raise PipelineError(message) from exc

    imports.transition(
        import_id,
        from_statuses=(IMPORT_STATUS_IMPORTING,),
        to_status=IMPORT_STATUS_COMPLETED,
        rows_processed=tally.processed,
        rows_updated=tally.updated,
        rows_created=0,
        rows_skipped=tally.skipped,
        rows_errored=PriceImportRowRepository(control).count_errors(import_id),
        approved_by=actor_id,
        cancel_requested=False,
        completed_at=now_in_app_timezone(),
    )
    logger.info(
        "Price import %s committed: %s products updated, %s rows skipped",
        import_id,
        tally.updated,
        tally.skipped,
    )
    return get_price_import(control, import_id=import_id)


def _apply_row(
    row: PriceImportRow,
    *,
    products: ProductRepository,
    history: PriceHistoryRepository,
    actor_id: int | None,
    applied_at: datetime,
    effective_from: datetime,
) -> None:
    new_cost = from_minor_units(row.parsed_cost)
    new_price = from_minor_units(row.parsed_msrp)
    before, _ = products.stage_price_update(
        row.matched_product_id,
        cost=new_cost,
        price=new_price,
        updated_by=actor_id,
        import_id=row.import_id,
        updated_at=applied_at,
    )
    history.stage(
        PriceHistoryEntry(
            id=None,
            product_id=row.matched_product_id,
            previous_cost=before.cost,
            new_cost=new_cost,
            previous_price=before.price,
            new_price=new_price,
            cost_cents=row.parsed_cost,
            retail_price_cents=row.parsed_msrp,
            promo_price_cents=row.parsed_promo_price,
            source=PRICE_SOURCE_IMPORT,
            source_id=row.import_id,
            effective_from=effective_from,
            created_by=actor_id,
            created_at=applied_at,
        )
    )


def _cancellation_requested(imports: PriceImportRepository, import_id: int) -> bool:
    return imports.is_cancel_requested(import_id)


def _finish_cancelled(
    unit_of_work: Session,
    imports: PriceImportRepository,
    import_id: int,
    tally: _CommitTally,
) -> PriceImport:
    unit_of_work.rollback()
    imports.transition(
        import_id,
        from_statuses=(IMPORT_STATUS_IMPORTING,),
        to_status=IMPORT_STATUS_CANCELLED,
        error_message=CANCELLED_BY_USER,
        cancel_requested=False,
        rows_processed=0,
        rows_updated=0,
        rows_skipped=0,
        completed_at=now_in_app_timezone(),
    )
    logger.info(
        "Price import %s cancelled after %s rows; changes rolled back",
        import_id,
        tally.processed,
    )
    return get_price_import(imports.session, import_id=import_id)


def _effective_from(
    price_import: PriceImport, apply_effective_date: bool, applied_at: datetime
) -> datetime:
    if apply_effective_date and price_import.effective_from is not None:
        return datetime.combine(
            price_import.effective_from, time.min, tzinfo=get_app_timezone()
        )
    return applied_at


__all__ = [
    "CANCELLED_BY_USER",
    "run_price_import_commit",
    "start_price_import_commit",
]
