"""Link price-list SKUs to catalog products."""

from __future__ import annotations

from dataclasses import dataclass

from pricelist.domain.entities import MATCH_EXACT_MODEL, MATCH_EXACT_SKU, Product
from pricelist.infrastructure.repositories import ProductRepository


@dataclass(frozen=True)
class ProductMatch:
    product: Product
    match_type: str


class ProductMatcher:
    """Resolve a vendor SKU to a product by exact SKU, then by model number.

    Comparisons ignore case. Results are memoized for the lifetime of the
    matcher, which is one validation pass.
    """

    def __init__(self, repository: ProductRepository) -> None:
        self._repository = repository
        self._cache: dict[str, ProductMatch | None] = {}

    def match(self, sku: str | None) -> ProductMatch | None:
        if sku is None or not sku.strip():
            return None
        normalized = sku.strip()
        key = normalized.lower()
        if key in self._cache:
            return self._cache[key]

        result: ProductMatch | None = None
        product = self._repository.find_by_sku(normalized)
        if product is not None:
            result = ProductMatch(product=product, match_type=MATCH_EXACT_SKU)
        else:
            product = self._repository.find_by_model(normalized)
            if product is not None:
                result = ProductMatch(product=product, match_type=MATCH_EXACT_MODEL)
        self._cache[key] = result
        return result


__all__ = ["ProductMatch", "ProductMatcher"]
