"""ORM models used by the application infrastructure."""

from .price_history import ProductPriceHistoryModel
from .price_import import PriceImportModel
from .price_import_row import PriceImportRowModel
from .product import ProductModel
from .vendor import VendorModel

__all__ = [
    "PriceImportModel",
    "PriceImportRowModel",
    "ProductModel",
    "ProductPriceHistoryModel",
    "VendorModel",
]
