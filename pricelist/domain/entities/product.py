"""Domain entity for catalog products referenced by price imports."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass
class Product:
    """Catalog item as seen by the import pipeline.

    ``cost`` and ``price`` are stored in major currency units.
    """

    id: int | None
    sku: str | None
    model: str | None
    name: str | None
    cost: Decimal | None
    price: Decimal | None


__all__ = ["Product"]
