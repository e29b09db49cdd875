"""Persistence layer for vendor price-list import records."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Any, Iterable, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from pricelist.domain.entities import ColumnMapping, PriceImport, Vendor
from pricelist.infrastructure.models import PriceImportModel
from pricelist.infrastructure.repositories.vendor_repository import VendorRepository
from pricelist.utils import ensure_app_timezone, get_app_timezone, now_in_app_timezone


class PriceImportRepository:
    """Provide CRUD and guarded state transitions for :class:`PriceImport`."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, import_id: int) -> PriceImport | None:
        model = self.session.get(PriceImportModel, import_id)
        return self._to_entity(model) if model else None

    def get_with_vendor(self, import_id: int) -> tuple[PriceImport, Vendor | None] | None:
        model = self.session.get(PriceImportModel, import_id)
        if model is None:
            return None
        vendor = VendorRepository._to_entity(model.vendor) if model.vendor else None
        return self._to_entity(model), vendor

    def list(
        self,
        *,
        status: str | None = None,
        vendor_id: int | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> tuple[Sequence[tuple[PriceImport, Vendor | None]], int]:
        """Return a page of imports, newest first, plus the unpaged total."""

        query = self.session.query(PriceImportModel)
        if status is not None:
            query = query.filter(PriceImportModel.status == status)
        if vendor_id is not None:
            query = query.filter(PriceImportModel.vendor_id == vendor_id)
        if date_from is not None:
            query = query.filter(
                PriceImportModel.created_at >= self._start_of_day(date_from)
            )
        if date_to is not None:
            query = query.filter(
                PriceImportModel.created_at
                < self._start_of_day(date_to + timedelta(days=1))
            )

        total = query.order_by(None).count()
        query = query.order_by(
            PriceImportModel.created_at.desc(), PriceImportModel.id.desc()
        )
        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)

        items = [
            (
                self._to_entity(model),
                VendorRepository._to_entity(model.vendor) if model.vendor else None,
            )
            for model in query.all()
        ]
        return items, int(total)

    def list_by_status(self, statuses: Iterable[str]) -> list[PriceImport]:
        models = (
            self.session.query(PriceImportModel)
            .filter(PriceImportModel.status.in_(tuple(statuses)))
            .order_by(PriceImportModel.id)
            .all()
        )
        return [self._to_entity(model) for model in models]

    def create(self, price_import: PriceImport) -> PriceImport:
        model = PriceImportModel()
        self._apply_entity_to_model(model, price_import)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def transition(
        self,
        import_id: int,
        *,
        from_statuses: Iterable[str],
        to_status: str,
        **values: Any,
    ) -> bool:
        """Move ``import_id`` to ``to_status`` only if it is in ``from_statuses``.

        The check and the write are a single conditional ``UPDATE`` so two
        callers racing on the same import cannot both succeed. Returns whether
        the transition happened.
        """

        if "column_mapping" in values and isinstance(values["column_mapping"], ColumnMapping):
            values["column_mapping"] = values["column_mapping"].to_dict()
        statement = (
            update(PriceImportModel)
            .where(
                PriceImportModel.id == import_id,
                PriceImportModel.status.in_(tuple(from_statuses)),
            )
            .values(status=to_status, **values)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(statement)
        self.session.commit()
        return result.rowcount == 1

    def request_cancellation(self, import_id: int, *, while_status: str) -> bool:
        """Raise the cancellation flag if ``import_id`` is still in ``while_status``."""

        statement = (
            update(PriceImportModel)
            .where(
                PriceImportModel.id == import_id,
                PriceImportModel.status == while_status,
            )
            .values(cancel_requested=True)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(statement)
        self.session.commit()
        return result.rowcount == 1

    def update_counters(self, import_id: int, **counters: int) -> None:
        """Persist progress counters without touching the lifecycle status."""

        statement = (
            update(PriceImportModel)
            .where(PriceImportModel.id == import_id)
            .values(**counters)
            .execution_options(synchronize_session=False)
        )
        self.session.execute(statement)
        self.session.commit()

    def get_status(self, import_id: int) -> str | None:
        return self.session.execute(
            select(PriceImportModel.status).where(PriceImportModel.id == import_id)
        ).scalar_one_or_none()

    def is_cancel_requested(self, import_id: int) -> bool:
        flag = self.session.execute(
            select(PriceImportModel.cancel_requested).where(
                PriceImportModel.id == import_id
            )
        ).scalar_one_or_none()
        return bool(flag)

    def count(self) -> int:
        return int(self.session.query(func.count(PriceImportModel.id)).scalar() or 0)

    @staticmethod
    def _start_of_day(value: date) -> datetime:
        return datetime.combine(value, time.min, tzinfo=get_app_timezone())

    @staticmethod
    def _to_entity(model: PriceImportModel) -> PriceImport:
        return PriceImport(
            id=model.id,
            vendor_id=model.vendor_id,
            filename=model.filename,
            file_path=model.file_path,
            file_size=model.file_size,
            status=model.status,
            total_rows=model.total_rows,
            column_headers=list(model.column_headers or []),
            column_mapping=ColumnMapping.from_dict(model.column_mapping),
            rows_processed=model.rows_processed,
            rows_updated=model.rows_updated,
            rows_created=model.rows_created,
            rows_skipped=model.rows_skipped,
            rows_errored=model.rows_errored,
            effective_from=model.effective_from,
            effective_to=model.effective_to,
            uploaded_by=model.uploaded_by,
            approved_by=model.approved_by,
            cancel_requested=bool(model.cancel_requested),
            error_message=model.error_message,
            created_at=ensure_app_timezone(model.created_at),
            started_at=ensure_app_timezone(model.started_at),
            completed_at=ensure_app_timezone(model.completed_at),
        )

    @staticmethod
    def _apply_entity_to_model(
        model: PriceImportModel,
        price_import: PriceImport,
    ) -> None:
        model.vendor_id = price_import.vendor_id
        model.filename = price_import.filename
        model.file_path = price_import.file_path
        model.file_size = price_import.file_size
        model.status = price_import.status
        model.total_rows = price_import.total_rows
        model.column_headers = list(price_import.column_headers)
        model.column_mapping = (
            price_import.column_mapping.to_dict()
            if price_import.column_mapping is not None
            else None
        )
        model.rows_processed = price_import.rows_processed
        model.rows_updated = price_import.rows_updated
        model.rows_created = price_import.rows_created
        model.rows_skipped = price_import.rows_skipped
        model.rows_errored = price_import.rows_errored
        model.effective_from = price_import.effective_from
        model.effective_to = price_import.effective_to
        model.uploaded_by = price_import.uploaded_by
        model.approved_by = price_import.approved_by
        model.cancel_requested = price_import.cancel_requested
        model.error_message = price_import.error_message
        model.created_at = (
            ensure_app_timezone(price_import.created_at) or now_in_app_timezone()
        )
        model.started_at = ensure_app_timezone(price_import.started_at)
        model.completed_at = ensure_app_timezone(price_import.completed_at)


__all__ = ["PriceImportRepository"]
