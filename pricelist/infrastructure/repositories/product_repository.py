"""Catalog access used by the price-list import pipeline."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from pricelist.domain.entities import Product
from pricelist.infrastructure.models import ProductModel


class ProductRepository:
    """Look up products and stage cost/price updates on them."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_sku(self, sku: str) -> Product | None:
        """Return the first product whose SKU equals ``sku`` ignoring case."""

        model = (
            self.session.query(ProductModel)
            .filter(func.lower(ProductModel.sku) == sku.lower())
            .order_by(ProductModel.id)
            .first()
        )
        return self._to_entity(model) if model else None

    def find_by_model(self, model_number: str) -> Product | None:
        """Return the first product whose model equals ``model_number`` ignoring case."""

        model = (
            self.session.query(ProductModel)
            .filter(func.lower(ProductModel.model) == model_number.lower())
            .order_by(ProductModel.id)
            .first()
        )
        return self._to_entity(model) if model else None

    def stage_price_update(
        self,
        product_id: int,
        *,
        cost: Decimal | None,
        price: Decimal | None,
        updated_by: int | None,
        import_id: int,
        updated_at: datetime,
    ) -> tuple[Product, Product]:
        """Apply new cost/price to ``product_id`` without committing.

        ``None`` leaves the corresponding field untouched. Returns the product
        as it was before and after the change; the caller commits or rolls back.
        """

        model = self.session.get(ProductModel, product_id)
        if model is None:
            msg = f"Product with id {product_id} not found"
            raise ValueError(msg)

        before = self._to_entity(model)
        if cost is not None:
            model.cost = cost
        if price is not None:
            model.price = price
        model.cost_updated_at = updated_at
        model.cost_updated_by = updated_by
        model.last_price_import_id = import_id
        return before, self._to_entity(model)

    @staticmethod
    def _to_entity(model: ProductModel) -> Product:
        return Product(
            id=model.id,
            sku=model.sku,
            model=model.model,
            name=model.name,
            cost=Decimal(model.cost) if model.cost is not None else None,
            price=Decimal(model.price) if model.price is not None else None,
        )


__all__ = ["ProductRepository"]
