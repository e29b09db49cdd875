"""SQLAlchemy model for the rows of a vendor price-list import."""

from sqlalchemy import BigInteger, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from sqlalchemy.types import JSON

from pricelist.infrastructure.database import Base

_row_json_type = JSON().with_variant(JSONB(), "postgresql")


class PriceImportRowModel(Base):
    """Database representation of one validated source row."""

    __tablename__ = "price_list_import_row"
    __table_args__ = (
        Index("ix_price_list_import_row_import_row", "import_id", "row_number"),
        Index("ix_price_list_import_row_import_status", "import_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    import_id = Column(
        Integer,
        ForeignKey("price_list_import.id", ondelete="CASCADE"),
        nullable=False,
    )
    row_number = Column(Integer, nullable=False)
    raw_data = Column(_row_json_type, nullable=False)
    parsed_sku = Column(String(100), nullable=True)
    parsed_description = Column(Text, nullable=True)
    parsed_cost = Column(BigInteger, nullable=True)
    parsed_msrp = Column(BigInteger, nullable=True)
    parsed_promo_price = Column(BigInteger, nullable=True)
    matched_product_id = Column(
        Integer,
        ForeignKey("product.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    match_type = Column(String(20), nullable=False, default="new")
    status = Column(String(20), nullable=False)
    validation_errors = Column(_row_json_type, nullable=True)
    validation_warnings = Column(_row_json_type, nullable=True)
    previous_cost = Column(BigInteger, nullable=True)
    previous_msrp = Column(BigInteger, nullable=True)
    cost_change = Column(BigInteger, nullable=True)
    msrp_change = Column(BigInteger, nullable=True)

    matched_product = relationship("ProductModel", lazy="joined")


__all__ = ["PriceImportRowModel"]
