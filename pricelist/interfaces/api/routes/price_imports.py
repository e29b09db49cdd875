"""API routes for vendor price-list imports."""

import logging
from datetime import date

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    File,
    Form,
    HTTPException,
    Query,
    UploadFile,
    status,
)
from sqlalchemy.orm import Session

from pricelist.application.use_cases.price_imports import (
    LIST_DEFAULT_LIMIT,
    PREVIEW_DEFAULT_LIMIT,
    Page,
    cancel_price_import as cancel_price_import_uc,
    get_price_import_detail as get_price_import_detail_uc,
    get_price_import_preview as get_price_import_preview_uc,
    get_price_import_progress as get_price_import_progress_uc,
    list_price_import_rows as list_price_import_rows_uc,
    list_price_imports as list_price_imports_uc,
    reopen_price_import as reopen_price_import_uc,
    run_price_import_commit as run_price_import_commit_uc,
    run_price_import_validation as run_price_import_validation_uc,
    simulate_price_import as simulate_price_import_uc,
    start_price_import_commit as start_price_import_commit_uc,
    submit_column_mapping as submit_column_mapping_uc,
    upload_price_import as upload_price_import_uc,
)
from pricelist.config import get_settings
from pricelist.domain.entities import Actor, PriceImport, Vendor
from pricelist.domain.exceptions import (
    ConflictError,
    ErrorRowsPresentError,
    FileTooLargeError,
    PriceImportError,
    PriceImportNotFoundError,
)
from pricelist.infrastructure.database import SessionLocal, get_db
from pricelist.interfaces.api.dependencies import require_import_permission
from pricelist.interfaces.api.schemas import (
    ColumnMappingRequest,
    CommitRequest,
    ImportStatusResponse,
    PaginationRead,
    PreviewSummaryRead,
    PriceImportDetailRead,
    PriceImportListResponse,
    PriceImportPreviewResponse,
    PriceImportRead,
    PriceImportRowListResponse,
    PriceImportRowRead,
    PriceImportSummaryRead,
    PriceImportUploadResponse,
    ProgressRead,
    SampleRowRead,
    SimulationRead,
    VendorSummaryRead,
)

router = APIRouter(prefix="/price-imports", tags=["price-imports"])
logger = logging.getLogger(__name__)


def _to_http_exception(exc: PriceImportError) -> HTTPException:
    if isinstance(exc, PriceImportNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, ErrorRowsPresentError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": str(exc), "error_count": exc.error_count},
        )
    if isinstance(exc, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, FileTooLargeError):
        return HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(exc)
        )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _vendor_read(vendor: Vendor | None) -> VendorSummaryRead | None:
    return VendorSummaryRead.model_validate(vendor) if vendor is not None else None


def _pagination_read(page: Page) -> PaginationRead:
    return PaginationRead.model_validate(page)


def _import_fields(price_import: PriceImport) -> dict:
    return PriceImportRead.model_validate(price_import).model_dump()


@router.post(
    "/upload",
    response_model=PriceImportUploadResponse,
    status_code=status.HTTP_201_CREATED,
)
def upload_price_import(
    file: UploadFile = File(...),
    vendor_id: int | None = Form(default=None),
    effective_from: date | None = Form(default=None),
    effective_to: date | None = Form(default=None),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_import_permission),
) -> PriceImportUploadResponse:
    """Store a vendor price list and return its detected columns."""

    # One byte past the ceiling is enough to reject an oversized file.
    try:
        file_bytes = file.file.read(get_settings().max_upload_bytes + 1)
    finally:
        file.file.seek(0)

    try:
        result = upload_price_import_uc(
            db,
            filename=file.filename or "",
            file_bytes=file_bytes,
            uploaded_by=actor.id,
            vendor_id=vendor_id,
            effective_from=effective_from,
            effective_to=effective_to,
        )
    except PriceImportError as exc:
        raise _to_http_exception(exc) from exc

    price_import = result.price_import
    return PriceImportUploadResponse(
        import_id=price_import.id,
        filename=price_import.filename,
        status=price_import.status,
        total_rows=price_import.total_rows,
        columns=result.column_letters,
        headers=result.headers,
        sample_rows=[
            SampleRowRead(row_number=row_number, data=data)
            for row_number, data in result.sample_rows
        ],
        vendor_id=price_import.vendor_id,
        effective_from=price_import.effective_from,
        effective_to=price_import.effective_to,
    )


@router.get("", response_model=PriceImportListResponse)
def list_price_imports(
    status_: str | None = Query(default=None, alias="status"),
    vendor_id: int | None = Query(default=None, ge=1),
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    page: int = Query(1, ge=1),
    limit: int = Query(LIST_DEFAULT_LIMIT, ge=1),
    db: Session = Depends(get_db),
    _: Actor = Depends(require_import_permission),
) -> PriceImportListResponse:
    """List imports newest first."""

    try:
        listing = list_price_imports_uc(
            db,
            status=status_,
            vendor_id=vendor_id,
            date_from=date_from,
            date_to=date_to,
            page=page,
            limit=limit,
        )
    except PriceImportError as exc:
        raise _to_http_exception(exc) from exc

    return PriceImportListResponse(
        imports=[
            PriceImportSummaryRead(**_import_fields(item), vendor=_vendor_read(vendor))
            for item, vendor in listing.items
        ],
        pagination=_pagination_read(listing.page),
    )


@router.get("/{import_id}", response_model=PriceImportDetailRead)
def read_price_import(
    import_id: int,
    db: Session = Depends(get_db),
    _: Actor = Depends(require_import_permission),
) -> PriceImportDetailRead:
    try:
        detail = get_price_import_detail_uc(db, import_id=import_id)
    except PriceImportError as exc:
        raise _to_http_exception(exc) from exc

    return PriceImportDetailRead(
        **_import_fields(detail.price_import),
        vendor=_vendor_read(detail.vendor),
        row_stats=detail.row_stats,
    )


@router.post(
    "/{import_id}/mapping",
    response_model=ImportStatusResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def submit_column_mapping(
    import_id: int,
    payload: ColumnMappingRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    _: Actor = Depends(require_import_permission),
) -> ImportStatusResponse:
    """Save the column mapping and validate the rows in the background."""

    try:
        price_import = submit_column_mapping_uc(
            db,
            import_id=import_id,
            fields=payload.column_mapping,
            decimal_format=payload.decimal_format,
            skip_rows=payload.skip_rows,
        )
    except PriceImportError as exc:
        raise _to_http_exception(exc) from exc

    background_tasks.add_task(_validate_in_background, import_id=import_id)
    return ImportStatusResponse(
        import_id=import_id,
        status=price_import.status,
        message="Mapping saved, validation in progress",
    )


@router.get("/{import_id}/preview", response_model=PriceImportPreviewResponse)
def preview_price_import(
    import_id: int,
    status_filter: str | None = Query(default=None),
    page: int = Query(1, ge=1),
    limit: int = Query(PREVIEW_DEFAULT_LIMIT, ge=1),
    db: Session = Depends(get_db),
    _: Actor = Depends(require_import_permission),
) -> PriceImportPreviewResponse:
    try:
        preview = get_price_import_preview_uc(
            db,
            import_id=import_id,
            status_filter=status_filter,
            page=page,
            limit=limit,
        )
    except PriceImportError as exc:
        raise _to_http_exception(exc) from exc

    return PriceImportPreviewResponse(
        import_id=import_id,
        status=preview.price_import.status,
        filename=preview.price_import.filename,
        vendor=_vendor_read(preview.vendor),
        summary=PreviewSummaryRead(**preview.summary),
        rows=[PriceImportRowRead.model_validate(row) for row in preview.rows],
        pagination=_pagination_read(preview.page),
    )


@router.get("/{import_id}/rows", response_model=PriceImportRowListResponse)
def list_price_import_rows(
    import_id: int,
    status_: str | None = Query(default=None, alias="status"),
    match_type: str | None = Query(default=None),
    page: int = Query(1, ge=1),
    limit: int = Query(PREVIEW_DEFAULT_LIMIT, ge=1),
    db: Session = Depends(get_db),
    _: Actor = Depends(require_import_permission),
) -> PriceImportRowListResponse:
    try:
        listing = list_price_import_rows_uc(
            db,
            import_id=import_id,
            status=status_,
            match_type=match_type,
            page=page,
            limit=limit,
        )
    except PriceImportError as exc:
        raise _to_http_exception(exc) from exc

    return PriceImportRowListResponse(
        rows=[PriceImportRowRead.model_validate(row) for row in listing.rows],
        pagination=_pagination_read(listing.page),
    )


@router.get("/{import_id}/simulation", response_model=SimulationRead)
def simulate_price_import(
    import_id: int,
    db: Session = Depends(get_db),
    _: Actor = Depends(require_import_permission),
) -> SimulationRead:
    """Report what committing the import would change, without changing it."""

    try:
        result = simulate_price_import_uc(db, import_id=import_id)
    except PriceImportError as exc:
        raise _to_http_exception(exc) from exc
    return SimulationRead.model_validate(result)


@router.get("/{import_id}/progress", response_model=ProgressRead)
def read_price_import_progress(
    import_id: int,
    db: Session = Depends(get_db),
    _: Actor = Depends(require_import_permission),
) -> ProgressRead:
    try:
        price_import = get_price_import_progress_uc(db, import_id=import_id)
    except PriceImportError as exc:
        raise _to_http_exception(exc) from exc

    return ProgressRead(
        import_id=price_import.id,
        status=price_import.status,
        total_rows=price_import.total_rows,
        rows_processed=price_import.rows_processed,
        rows_updated=price_import.rows_updated,
        rows_created=price_import.rows_created,
        rows_skipped=price_import.rows_skipped,
        rows_errored=price_import.rows_errored,
        percent_complete=price_import.percent_complete,
        cancel_requested=price_import.cancel_requested,
        error_message=price_import.error_message,
        started_at=price_import.started_at,
        completed_at=price_import.completed_at,
    )


@router.post(
    "/{import_id}/commit",
    response_model=ImportStatusResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def commit_price_import(
    import_id: int,
    background_tasks: BackgroundTasks,
    payload: CommitRequest | None = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_import_permission),
) -> ImportStatusResponse:
    """Apply the validated rows to the catalog in the background."""

    options = payload or CommitRequest()
    try:
        price_import = start_price_import_commit_uc(
            db, import_id=import_id, skip_errors=options.skip_errors
        )
    except PriceImportError as exc:
        raise _to_http_exception(exc) from exc

    background_tasks.add_task(
        _commit_in_background,
        import_id=import_id,
        actor_id=actor.id,
        apply_effective_date=options.apply_to_effective_date,
    )
    return ImportStatusResponse(
        import_id=import_id,
        status=price_import.status,
        message="Import started",
    )


@router.post("/{import_id}/cancel", response_model=ImportStatusResponse)
def cancel_price_import(
    import_id: int,
    db: Session = Depends(get_db),
    _: Actor = Depends(require_import_permission),
) -> ImportStatusResponse:
    try:
        result = cancel_price_import_uc(db, import_id=import_id)
    except PriceImportError as exc:
        raise _to_http_exception(exc) from exc
    return ImportStatusResponse(
        import_id=result.import_id, status=result.status, message=result.message
    )


@router.post("/{import_id}/reopen", response_model=ImportStatusResponse)
def reopen_price_import(
    import_id: int,
    db: Session = Depends(get_db),
    _: Actor = Depends(require_import_permission),
) -> ImportStatusResponse:
    """Send a failed or cancelled import back to column mapping."""

    try:
        price_import = reopen_price_import_uc(db, import_id=import_id)
    except PriceImportError as exc:
        raise _to_http_exception(exc) from exc
    return ImportStatusResponse(
        import_id=import_id,
        status=price_import.status,
        message="Import reopened for mapping",
    )


def _validate_in_background(*, import_id: int) -> None:
    """Run the validation pass with its own database session."""

    session = SessionLocal()
    try:
        run_price_import_validation_uc(session, import_id=import_id)
    except PriceImportError as exc:
        logger.warning("Validation of price import %s ended with: %s", import_id, exc)
    except Exception as exc:  # pragma: no cover - background processing guard
        logger.exception("Error validating price import %s: %s", import_id, exc)
    finally:
        session.close()


def _commit_in_background(
    *, import_id: int, actor_id: int, apply_effective_date: bool
) -> None:
    """Run the commit pass; it opens the sessions it needs."""

    try:
        run_price_import_commit_uc(
            SessionLocal,
            import_id=import_id,
            actor_id=actor_id,
            apply_effective_date=apply_effective_date,
        )
    except PriceImportError as exc:
        logger.warning("Commit of price import %s ended with: %s", import_id, exc)
    except Exception as exc:  # pragma: no cover - background processing guard
        logger.exception("Error committing price import %s: %s", import_id, exc)
