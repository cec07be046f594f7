"""Inventory services: catalogue orchestration and sale recording."""

from .inventory import LIVESTOCK_CATEGORIES, InventoryService
from .sales import SaleReceipt, SaleRecorder

__all__ = [
    "LIVESTOCK_CATEGORIES",
    "InventoryService",
    "SaleReceipt",
    "SaleRecorder",
]
