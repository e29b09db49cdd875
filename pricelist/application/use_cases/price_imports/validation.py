"""Background validation pass for a mapped price-list import."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Sequence

from sqlalchemy.orm import Session

from pricelist.config import get_settings
from pricelist.domain.entities import (
    IMPORT_STATUS_FAILED,
    IMPORT_STATUS_PREVIEW,
    IMPORT_STATUS_VALIDATING,
    MATCH_NEW,
    ROW_STATUS_ERROR,
    ColumnMapping,
    PriceImport,
    PriceImportRow,
)
from pricelist.domain.exceptions import ParseError, PipelineError, RowError
from pricelist.infrastructure.repositories import (
    PriceImportRepository,
    PriceImportRowRepository,
    ProductRepository,
)
from pricelist.utils import now_in_app_timezone

from .columns import parse_money, resolve_text, to_minor_units
from .matching import ProductMatcher
from .queries import get_price_import
from .tabular import parse_tabular_file
from .validators import ParsedRowValues, validate_row

logger = logging.getLogger(__name__)

SKU_MAX_LENGTH = 100


def run_price_import_validation(session: Session, *, import_id: int) -> PriceImport:
    """Re-parse the stored file and persist one validated row per data row.

    Rows are written in batches and the processed counter advances after each
    batch. The pass stops early if the import leaves ``validating`` (for
    example when cancelled). Unexpected failures move the import to
    ``failed`` and are re-raised as :class:`PipelineError`.
    """

    repository = PriceImportRepository(session)
    price_import = get_price_import(session, import_id=import_id)
    if price_import.status != IMPORT_STATUS_VALIDATING:
        logger.warning(
            "Skipping validation of price import %s in status %s",
            import_id,
            price_import.status,
        )
        return price_import

    try:
        return _validate(session, price_import)
    except Exception as exc:
        session.rollback()
        message = (
            str(exc) if isinstance(exc, ParseError) else f"Validation failed: {exc}"
        )
        logger.exception("Validation of price import %s failed", import_id)
        repository.transition(
            import_id,
            from_statuses=(IMPORT_STATUS_VALIDATING,),
            to_status=IMPORT_STATUS_FAILED,
            error_message=message,
            completed_at=now_in_app_timezone(),
        )
        raise PipelineError(message) from exc


def _validate(session: Session, price_import: PriceImport) -> PriceImport:
    import_id = price_import.id
    mapping = price_import.column_mapping
    if mapping is None:
        raise PipelineError("Import has no column mapping")

    repository = PriceImportRepository(session)
    row_repo = PriceImportRowRepository(session)
    matcher = ProductMatcher(ProductRepository(session))
    batch_size = get_settings().validation_batch_size

    table = parse_tabular_file(price_import.file_path)
    records = table.records(mapping.skip_rows)

    row_repo.replace_for_import(import_id)
    repository.update_counters(
        import_id,
        total_rows=len(records),
        rows_processed=0,
        rows_updated=0,
        rows_created=0,
        rows_skipped=0,
        rows_errored=0,
    )

    tally: Counter[str] = Counter()
    for start in range(0, len(records), batch_size):
        if repository.get_status(import_id) != IMPORT_STATUS_VALIDATING:
            logger.info("Validation of price import %s interrupted", import_id)
            return get_price_import(session, import_id=import_id)

        batch = [
            _build_row(
                import_id, row_number, cells, table.column_letters, mapping, matcher
            )
            for row_number, cells in records[start : start + batch_size]
        ]
        row_repo.add_batch(batch)
        for row in batch:
            tally[row.status] += 1
            if row.matched_product_id is not None:
                tally["matched"] += 1
            elif row.parsed_sku:
                tally["new"] += 1
        repository.update_counters(import_id, rows_processed=start + len(batch))

    moved = repository.transition(
        import_id,
        from_statuses=(IMPORT_STATUS_VALIDATING,),
        to_status=IMPORT_STATUS_PREVIEW,
        rows_processed=len(records),
        rows_updated=tally["matched"],
        rows_created=tally["new"],
        rows_errored=tally[ROW_STATUS_ERROR],
        completed_at=now_in_app_timezone(),
    )
    if moved:
        logger.info(
            "Price import %s validated: %s rows, %s matched, %s new, %s errors",
            import_id,
            len(records),
            tally["matched"],
            tally["new"],
            tally[ROW_STATUS_ERROR],
        )
    return get_price_import(session, import_id=import_id)


def _build_row(
    import_id: int,
    row_number: int,
    cells: Sequence[str],
    column_letters: Sequence[str],
    mapping: ColumnMapping,
    matcher: ProductMatcher,
) -> PriceImportRow:
    raw_data = dict(zip(column_letters, cells))
    row = PriceImportRow(
        id=None,
        import_id=import_id,
        row_number=row_number,
        raw_data=raw_data,
        parsed_sku=None,
        parsed_description=None,
        parsed_cost=None,
        parsed_msrp=None,
        parsed_promo_price=None,
        matched_product_id=None,
        match_type=MATCH_NEW,
        status=ROW_STATUS_ERROR,
    )
    try:
        values = _parse_values(cells, mapping)
    except RowError as exc:
        row.validation_errors = [str(exc)]
        return row

    row.parsed_sku = values.sku
    row.parsed_description = values.description
    row.parsed_cost = values.cost
    row.parsed_msrp = values.msrp
    row.parsed_promo_price = values.promo_price

    match = matcher.match(values.sku)
    if match is not None:
        product = match.product
        row.matched_product_id = product.id
        row.matched_product_name = product.name
        row.match_type = match.match_type
        row.previous_cost = to_minor_units(product.cost)
        row.previous_msrp = to_minor_units(product.price)
        if values.cost is not None and row.previous_cost is not None:
            row.cost_change = values.cost - row.previous_cost
        if values.msrp is not None and row.previous_msrp is not None:
            row.msrp_change = values.msrp - row.previous_msrp

    outcome = validate_row(values)
    row.status = outcome.status
    row.validation_errors = list(outcome.errors)
    row.validation_warnings = list(outcome.warnings)
    return row


def _parse_values(cells: Sequence[str], mapping: ColumnMapping) -> ParsedRowValues:
    convention = mapping.decimal_format

    def money(field_name: str, label: str) -> int | None:
        raw = resolve_text(cells, mapping.column_for(field_name), label=label)
        return parse_money(raw, convention, label=label)

    return ParsedRowValues(
        sku=resolve_text(
            cells, mapping.column_for("sku"), label="SKU", max_length=SKU_MAX_LENGTH
        ),
        description=resolve_text(
            cells, mapping.column_for("description"), label="Description"
        ),
        cost=money("cost", "Cost"),
        msrp=money("msrp", "MSRP"),
        promo_price=money("promo_price", "Promo price"),
    )


__all__ = ["run_price_import_validation"]
