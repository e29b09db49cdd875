"""Persistence layer for the append-only product price history."""

from sqlalchemy import func
from sqlalchemy.orm import Session

from pricelist.domain.entities import PriceHistoryEntry
from pricelist.infrastructure.models import ProductPriceHistoryModel
from pricelist.utils import ensure_app_timezone, now_in_app_timezone


class PriceHistoryRepository:
    """Append and read :class:`PriceHistoryEntry` records.

    Entries are never updated or deleted once written.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def stage(self, entry: PriceHistoryEntry) -> None:
        """Add ``entry`` to the session; the caller owns the transaction."""

        model = ProductPriceHistoryModel(
            product_id=entry.product_id,
            previous_cost=entry.previous_cost,
            new_cost=entry.new_cost,
            previous_price=entry.previous_price,
            new_price=entry.new_price,
            cost_cents=entry.cost_cents,
            retail_price_cents=entry.retail_price_cents,
            promo_price_cents=entry.promo_price_cents,
            source=entry.source,
            source_id=entry.source_id,
            effective_from=entry.effective_from,
            created_by=entry.created_by,
            created_at=entry.created_at or now_in_app_timezone(),
        )
        self.session.add(model)

    def list_for_product(self, product_id: int) -> list[PriceHistoryEntry]:
        models = (
            self.session.query(ProductPriceHistoryModel)
            .filter(ProductPriceHistoryModel.product_id == product_id)
            .order_by(ProductPriceHistoryModel.id)
            .all()
        )
        return [self._to_entity(model) for model in models]

    def list_for_source(self, source: str, source_id: int) -> list[PriceHistoryEntry]:
        models = (
            self.session.query(ProductPriceHistoryModel)
            .filter(
                ProductPriceHistoryModel.source == source,
                ProductPriceHistoryModel.source_id == source_id,
            )
            .order_by(ProductPriceHistoryModel.id)
            .all()
        )
        return [self._to_entity(model) for model in models]

    def count(self) -> int:
        return int(
            self.session.query(func.count(ProductPriceHistoryModel.id)).scalar() or 0
        )

    @staticmethod
    def _to_entity(model: ProductPriceHistoryModel) -> PriceHistoryEntry:
        return PriceHistoryEntry(
            id=model.id,
            product_id=model.product_id,
            previous_cost=model.previous_cost,
            new_cost=model.new_cost,
            previous_price=model.previous_price,
            new_price=model.new_price,
            cost_cents=model.cost_cents,
            retail_price_cents=model.retail_price_cents,
            promo_price_cents=model.promo_price_cents,
            source=model.source,
            source_id=model.source_id,
            effective_from=ensure_app_timezone(model.effective_from),
            created_by=model.created_by,
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["PriceHistoryRepository"]
