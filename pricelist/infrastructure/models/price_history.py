"""SQLAlchemy model for the product price-history ledger."""

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, Numeric, String

from pricelist.infrastructure.database import Base
from pricelist.utils import now_in_app_timezone


class ProductPriceHistoryModel(Base):
    """Append-only record of a product cost/price change."""

    __tablename__ = "product_price_history"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(
        Integer,
        ForeignKey("product.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    previous_cost = Column(Numeric(12, 2), nullable=True)
    new_cost = Column(Numeric(12, 2), nullable=True)
    previous_price = Column(Numeric(12, 2), nullable=True)
    new_price = Column(Numeric(12, 2), nullable=True)
    cost_cents = Column(BigInteger, nullable=True)
    retail_price_cents = Column(BigInteger, nullable=True)
    promo_price_cents = Column(BigInteger, nullable=True)
    source = Column(String(20), nullable=False)
    source_id = Column(Integer, nullable=True, index=True)
    effective_from = Column(DateTime(timezone=True), nullable=False)
    created_by = Column(Integer, nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=now_in_app_timezone
    )


__all__ = ["ProductPriceHistoryModel"]
