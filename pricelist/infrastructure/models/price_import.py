"""SQLAlchemy model for vendor price-list imports."""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from sqlalchemy.types import JSON

from pricelist.infrastructure.database import Base
from pricelist.utils import now_in_app_timezone

_import_json_type = JSON().with_variant(JSONB(), "postgresql")


class PriceImportModel(Base):
    """Database representation of one uploaded vendor price list."""

    __tablename__ = "price_list_import"

    id = Column(Integer, primary_key=True, index=True)
    vendor_id = Column(
        Integer,
        ForeignKey("vendor.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    filename = Column(String(255), nullable=False)
    file_path = Column(String(500), nullable=False)
    file_size = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="pending", index=True)
    total_rows = Column(Integer, nullable=False, default=0)
    column_headers = Column(_import_json_type, nullable=True)
    column_mapping = Column(_import_json_type, nullable=True)
    rows_processed = Column(Integer, nullable=False, default=0)
    rows_updated = Column(Integer, nullable=False, default=0)
    rows_created = Column(Integer, nullable=False, default=0)
    rows_skipped = Column(Integer, nullable=False, default=0)
    rows_errored = Column(Integer, nullable=False, default=0)
    effective_from = Column(Date, nullable=True)
    effective_to = Column(Date, nullable=True)
    uploaded_by = Column(Integer, nullable=True, index=True)
    approved_by = Column(Integer, nullable=True)
    cancel_requested = Column(Boolean, nullable=False, default=False)
    error_message = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=now_in_app_timezone
    )
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    vendor = relationship("VendorModel", lazy="joined")


__all__ = ["PriceImportModel"]
