"""Domain entity representing an append-only product price change."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

PRICE_SOURCE_IMPORT = "import"


@dataclass
class PriceHistoryEntry:
    """Ledger row written for every catalog price change."""

    id: int | None
    product_id: int
    previous_cost: Decimal | None
    new_cost: Decimal | None
    previous_price: Decimal | None
    new_price: Decimal | None
    cost_cents: int | None
    retail_price_cents: int | None
    promo_price_cents: int | None
    source: str
    source_id: int | None
    effective_from: datetime
    created_by: int | None
    created_at: datetime | None


__all__ = ["PRICE_SOURCE_IMPORT", "PriceHistoryEntry"]
