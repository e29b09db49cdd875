"""SQLAlchemy model for catalog products touched by price imports."""

from sqlalchemy import Column, DateTime, Integer, Numeric, String

from pricelist.infrastructure.database import Base
from pricelist.utils import now_in_app_timezone


class ProductModel(Base):
    """Catalog product.

    ``version`` is SQLAlchemy's optimistic concurrency counter: an update that
    races another writer fails with ``StaleDataError``.
    """

    __tablename__ = "product"

    id = Column(Integer, primary_key=True, index=True)
    sku = Column(String(100), nullable=True, index=True)
    model = Column(String(100), nullable=True, index=True)
    name = Column(String(255), nullable=True)
    cost = Column(Numeric(12, 2), nullable=True)
    price = Column(Numeric(12, 2), nullable=True)
    cost_updated_at = Column(DateTime(timezone=True), nullable=True)
    cost_updated_by = Column(Integer, nullable=True)
    last_price_import_id = Column(Integer, nullable=True)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        default=now_in_app_timezone,
        onupdate=now_in_app_timezone,
    )
    version = Column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}


__all__ = ["ProductModel"]
