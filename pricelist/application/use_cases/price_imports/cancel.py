"""Cancellation of in-flight imports and recovery after a restart."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from pricelist.domain.entities import (
    IMPORT_STATUS_CANCELLED,
    IMPORT_STATUS_FAILED,
    IMPORT_STATUS_IMPORTING,
    IMPORT_STATUS_MAPPING,
    IMPORT_STATUS_PENDING,
    IMPORT_STATUS_PREVIEW,
    IMPORT_STATUS_VALIDATING,
)
from pricelist.domain.exceptions import ConflictError
from pricelist.infrastructure.repositories import PriceImportRepository
from pricelist.utils import now_in_app_timezone

from .commit import CANCELLED_BY_USER
from .queries import get_price_import

logger = logging.getLogger(__name__)

CANCELLATION_PENDING = "cancelling"
INTERRUPTED_MESSAGE = "Interrupted before completion"

IMMEDIATELY_CANCELLABLE_STATUSES = (
    IMPORT_STATUS_PENDING,
    IMPORT_STATUS_MAPPING,
    IMPORT_STATUS_VALIDATING,
    IMPORT_STATUS_PREVIEW,
)


@dataclass(frozen=True)
class CancellationResult:
    import_id: int
    status: str
    message: str


def cancel_price_import(session: Session, *, import_id: int) -> CancellationResult:
    """Cancel an import, or ask a running commit pass to roll back.

    Imports outside ``importing`` are cancelled immediately. A running commit
    only gets its cancellation flag raised; the pass observes it before the
    next row and rolls back.
    """

    repository = PriceImportRepository(session)
    price_import = get_price_import(session, import_id=import_id)
    status = price_import.status

    if status == IMPORT_STATUS_CANCELLED:
        return CancellationResult(
            import_id, IMPORT_STATUS_CANCELLED, "Import is already cancelled"
        )
    if price_import.is_terminal:
        raise ConflictError(f"Cannot cancel a {status} import")

    if status == IMPORT_STATUS_IMPORTING:
        if repository.request_cancellation(
            import_id, while_status=IMPORT_STATUS_IMPORTING
        ):
            logger.info("Cancellation requested for price import %s", import_id)
            return CancellationResult(
                import_id,
                CANCELLATION_PENDING,
                "Cancellation requested. In-progress changes will be rolled back.",
            )
    elif repository.transition(
        import_id,
        from_statuses=IMMEDIATELY_CANCELLABLE_STATUSES,
        to_status=IMPORT_STATUS_CANCELLED,
        error_message=CANCELLED_BY_USER,
        completed_at=now_in_app_timezone(),
    ):
        logger.info("Price import %s cancelled in status %s", import_id, status)
        return CancellationResult(import_id, IMPORT_STATUS_CANCELLED, "Import cancelled")

    current = repository.get_status(import_id)
    raise ConflictError(
        f"Import changed state to '{current}' while being cancelled. Try again."
    )


def recover_interrupted_imports(session: Session) -> int:
    """Close out imports a previous process left ``validating`` or ``importing``.

    Background passes do not survive a restart, so such imports would
    otherwise never leave those phases. Returns how many imports were closed.
    """

    repository = PriceImportRepository(session)
    recovered = 0
    for price_import in repository.list_by_status(
        (IMPORT_STATUS_VALIDATING, IMPORT_STATUS_IMPORTING)
    ):
        if price_import.cancel_requested:
            target, message = IMPORT_STATUS_CANCELLED, CANCELLED_BY_USER
        else:
            target, message = IMPORT_STATUS_FAILED, INTERRUPTED_MESSAGE
        if repository.transition(
            price_import.id,
            from_statuses=(price_import.status,),
            to_status=target,
            error_message=message,
            cancel_requested=False,
            completed_at=now_in_app_timezone(),
        ):
            recovered += 1
            logger.warning(
                "Price import %s was left %s; marked %s",
                price_import.id,
                price_import.status,
                target,
            )
    return recovered


__all__ = [
    "CANCELLATION_PENDING",
    "CancellationResult",
    "INTERRUPTED_MESSAGE",
    "cancel_price_import",
    "recover_interrupted_imports",
]
