"""SQLAlchemy model for the vendor directory."""

from sqlalchemy import Boolean, Column, Integer, String

from pricelist.infrastructure.database import Base


class VendorModel(Base):
    __tablename__ = "vendor"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    code = Column(String(50), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)


__all__ = ["VendorModel"]
