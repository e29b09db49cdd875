"""Read-only access to the vendor directory."""

from sqlalchemy.orm import Session

from pricelist.domain.entities import Vendor
from pricelist.infrastructure.models import VendorModel


class VendorRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, vendor_id: int) -> Vendor | None:
        model = self.session.get(VendorModel, vendor_id)
        return self._to_entity(model) if model else None

    @staticmethod
    def _to_entity(model: VendorModel) -> Vendor:
        return Vendor(
            id=model.id,
            name=model.name,
            code=model.code,
            is_active=bool(model.is_active),
        )


__all__ = ["VendorRepository"]
