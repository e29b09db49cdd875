"""Repository implementations for infrastructure layer."""

from .price_history_repository import PriceHistoryRepository
from .price_import_repository import PriceImportRepository
from .price_import_row_repository import PriceImportRowRepository
from .product_repository import ProductRepository
from .vendor_repository import VendorRepository

__all__ = [
    "PriceHistoryRepository",
    "PriceImportRepository",
    "PriceImportRowRepository",
    "ProductRepository",
    "VendorRepository",
]
