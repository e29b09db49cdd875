"""Persistence layer for the rows of a vendor price-list import."""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Sequence

from sqlalchemy import case, delete, func
from sqlalchemy.orm import Session

from pricelist.domain.entities import (
    COMMITTABLE_ROW_STATUSES,
    MATCH_EXACT_MODEL,
    MATCH_EXACT_SKU,
    MATCH_NEW,
    ROW_STATUS_ERROR,
    ROW_STATUS_IMPORTED,
    ROW_STATUS_SKIPPED,
    ROW_STATUS_VALID,
    ROW_STATUS_WARNING,
    PriceImportRow,
)
from pricelist.infrastructure.models import PriceImportRowModel


def _count_where(condition):
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


def _sum_where(condition, column):
    return func.coalesce(func.sum(case((condition, column), else_=0)), 0)


class PriceImportRowRepository:
    """Store and aggregate :class:`PriceImportRow` records."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def replace_for_import(self, import_id: int) -> int:
        """Delete every row previously stored for ``import_id``."""

        result = self.session.execute(
            delete(PriceImportRowModel)
            .where(PriceImportRowModel.import_id == import_id)
            .execution_options(synchronize_session=False)
        )
        self.session.commit()
        return result.rowcount or 0

    def add_batch(self, rows: Sequence[PriceImportRow]) -> None:
        models = []
        for row in rows:
            model = PriceImportRowModel()
            self._apply_entity_to_model(model, row)
            models.append(model)
        self.session.add_all(models)
        self.session.commit()

    def list(
        self,
        import_id: int,
        *,
        status: str | None = None,
        match_type: str | None = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> tuple[list[PriceImportRow], int]:
        """Return a page of rows in row-number order plus the filtered total."""

        query = self.session.query(PriceImportRowModel).filter(
            PriceImportRowModel.import_id == import_id
        )
        if status is not None:
            query = query.filter(PriceImportRowModel.status == status)
        if match_type is not None:
            query = query.filter(PriceImportRowModel.match_type == match_type)

        total = query.order_by(None).count()
        query = query.order_by(PriceImportRowModel.row_number, PriceImportRowModel.id)
        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()], int(total)

    def list_committable(self, import_id: int) -> list[PriceImportRow]:
        """Return the rows a commit pass may apply, ascending by row number."""

        models = (
            self.session.query(PriceImportRowModel)
            .filter(
                PriceImportRowModel.import_id == import_id,
                PriceImportRowModel.status.in_(COMMITTABLE_ROW_STATUSES),
            )
            .order_by(PriceImportRowModel.row_number, PriceImportRowModel.id)
            .all()
        )
        return [self._to_entity(model) for model in models]

    def mark_status(
        self,
        row_id: int,
        status: str,
        *,
        extra_warning: str | None = None,
    ) -> None:
        """Set the status of ``row_id``, leaving the change pending in the session.

        The caller owns the surrounding transaction.
        """

        model = self.session.get(PriceImportRowModel, row_id)
        if model is None:
            msg = f"Price import row with id {row_id} not found"
            raise ValueError(msg)
        model.status = status
        if extra_warning:
            model.validation_warnings = [*(model.validation_warnings or []), extra_warning]

    def count_by_status(self, import_id: int) -> dict[str, int]:
        results = (
            self.session.query(PriceImportRowModel.status, func.count(PriceImportRowModel.id))
            .filter(PriceImportRowModel.import_id == import_id)
            .group_by(PriceImportRowModel.status)
            .all()
        )
        return {status: int(count) for status, count in results}

    def count_errors(self, import_id: int) -> int:
        return self.count_by_status(import_id).get(ROW_STATUS_ERROR, 0)

    def preview_summary(self, import_id: int) -> dict[str, int]:
        """Aggregate counters by status, match kind and cost direction."""

        row = PriceImportRowModel
        matched = row.matched_product_id.isnot(None)
        new_product = (row.match_type == MATCH_NEW) & row.parsed_sku.isnot(None)
        result = (
            self.session.query(
                func.count(row.id),
                _count_where(row.status == ROW_STATUS_VALID),
                _count_where(row.status == ROW_STATUS_WARNING),
                _count_where(row.status == ROW_STATUS_ERROR),
                _count_where(row.status == ROW_STATUS_SKIPPED),
                _count_where(row.status == ROW_STATUS_IMPORTED),
                _count_where(row.match_type == MATCH_EXACT_SKU),
                _count_where(row.match_type == MATCH_EXACT_MODEL),
                _count_where(new_product),
                _count_where(row.cost_change > 0),
                _count_where(row.cost_change < 0),
                _count_where((row.cost_change == 0) & matched),
            )
            .filter(row.import_id == import_id)
            .one()
        )
        keys = (
            "total_rows",
            "valid",
            "warnings",
            "errors",
            "skipped",
            "imported",
            "exact_sku",
            "exact_model",
            "new_products",
            "price_increases",
            "price_decreases",
            "no_change",
        )
        return {key: int(value or 0) for key, value in zip(keys, result)}

    def change_totals(self, import_id: int, statuses: Iterable[str]) -> dict[str, int]:
        """Count and sum cost/MSRP deltas over rows in ``statuses``."""

        row = PriceImportRowModel
        matched = row.matched_product_id.isnot(None)
        new_product = (row.match_type == MATCH_NEW) & row.parsed_sku.isnot(None)
        result = (
            self.session.query(
                _count_where(matched),
                _count_where(new_product),
                _count_where(row.cost_change > 0),
                _sum_where(row.cost_change > 0, row.cost_change),
                _count_where(row.cost_change < 0),
                _sum_where(row.cost_change < 0, row.cost_change),
                _count_where((row.cost_change == 0) & matched),
                _count_where(row.msrp_change > 0),
                _sum_where(row.msrp_change > 0, row.msrp_change),
                _count_where(row.msrp_change < 0),
                _sum_where(row.msrp_change < 0, row.msrp_change),
                _count_where(
                    (row.msrp_change == 0) & matched & row.parsed_msrp.isnot(None)
                ),
            )
            .filter(row.import_id == import_id, row.status.in_(tuple(statuses)))
            .one()
        )
        keys = (
            "products_affected",
            "new_products",
            "cost_increases_count",
            "cost_increases_total",
            "cost_decreases_count",
            "cost_decreases_total",
            "cost_no_change",
            "msrp_increases_count",
            "msrp_increases_total",
            "msrp_decreases_count",
            "msrp_decreases_total",
            "msrp_no_change",
        )
        return {key: int(value or 0) for key, value in zip(keys, result)}

    def margin_candidates(
        self, import_id: int, statuses: Iterable[str]
    ) -> list[tuple[int, int, int, int]]:
        """Return ``(new_msrp, new_cost, previous_msrp, previous_cost)`` tuples.

        Only matched rows with all four values are included.
        """

        row = PriceImportRowModel
        results = (
            self.session.query(
                row.parsed_msrp, row.parsed_cost, row.previous_msrp, row.previous_cost
            )
            .filter(
                row.import_id == import_id,
                row.status.in_(tuple(statuses)),
                row.matched_product_id.isnot(None),
                row.parsed_msrp.isnot(None),
                row.parsed_cost.isnot(None),
                row.previous_msrp.isnot(None),
                row.previous_cost.isnot(None),
            )
            .all()
        )
        return [tuple(int(value) for value in result) for result in results]

    def largest_cost_changes(
        self, import_id: int, statuses: Iterable[str], *, limit: int = 10
    ) -> list[PriceImportRow]:
        models = (
            self.session.query(PriceImportRowModel)
            .filter(
                PriceImportRowModel.import_id == import_id,
                PriceImportRowModel.status.in_(tuple(statuses)),
                PriceImportRowModel.cost_change.isnot(None),
                PriceImportRowModel.cost_change != 0,
            )
            .order_by(
                func.abs(PriceImportRowModel.cost_change).desc(),
                PriceImportRowModel.row_number,
            )
            .limit(limit)
            .all()
        )
        return [self._to_entity(model) for model in models]

    def message_counts(self, import_id: int) -> tuple[Counter[str], Counter[str]]:
        """Count each distinct warning and error message across the import."""

        warnings: Counter[str] = Counter()
        errors: Counter[str] = Counter()
        query = (
            self.session.query(
                PriceImportRowModel.validation_warnings,
                PriceImportRowModel.validation_errors,
            )
            .filter(PriceImportRowModel.import_id == import_id)
            .yield_per(500)
        )
        for row_warnings, row_errors in query:
            warnings.update(row_warnings or [])
            errors.update(row_errors or [])
        return warnings, errors

    @staticmethod
    def _to_entity(model: PriceImportRowModel) -> PriceImportRow:
        product = model.matched_product
        return PriceImportRow(
            id=model.id,
            import_id=model.import_id,
            row_number=model.row_number,
            raw_data=dict(model.raw_data or {}),
            parsed_sku=model.parsed_sku,
            parsed_description=model.parsed_description,
            parsed_cost=model.parsed_cost,
            parsed_msrp=model.parsed_msrp,
            parsed_promo_price=model.parsed_promo_price,
            matched_product_id=model.matched_product_id,
            match_type=model.match_type,
            status=model.status,
            validation_errors=list(model.validation_errors or []),
            validation_warnings=list(model.validation_warnings or []),
            previous_cost=model.previous_cost,
            previous_msrp=model.previous_msrp,
            cost_change=model.cost_change,
            msrp_change=model.msrp_change,
            matched_product_name=product.name if product is not None else None,
        )

    @staticmethod
    def _apply_entity_to_model(model: PriceImportRowModel, row: PriceImportRow) -> None:
        model.import_id = row.import_id
        model.row_number = row.row_number
        model.raw_data = dict(row.raw_data)
        model.parsed_sku = row.parsed_sku
        model.parsed_description = row.parsed_description
        model.parsed_cost = row.parsed_cost
        model.parsed_msrp = row.parsed_msrp
        model.parsed_promo_price = row.parsed_promo_price
        model.matched_product_id = row.matched_product_id
        model.match_type = row.match_type
        model.status = row.status
        model.validation_errors = list(row.validation_errors) or None
        model.validation_warnings = list(row.validation_warnings) or None
        model.previous_cost = row.previous_cost
        model.previous_msrp = row.previous_msrp
        model.cost_change = row.cost_change
        model.msrp_change = row.msrp_change


__all__ = ["PriceImportRowRepository"]
