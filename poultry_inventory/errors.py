"""
Inventory Errors

Exception taxonomy shared by source readers, pricing and the orchestrator.
"""

from typing import Optional


class InventoryError(Exception):
    """Base class for inventory engine errors."""


class SourceUnavailable(InventoryError):
    """A source reader could not reach the persistence layer."""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class MalformedRecord(InventoryError):
    """A single batch or production document is missing required data."""

    def __init__(self, message: str, record_id: Optional[str] = None, field: Optional[str] = None):
        super().__init__(message)
        self.record_id = record_id
        self.field = field


class ConfigurationMissing(InventoryError):
    """The price configuration has no value for a required key."""

    def __init__(self, key: str):
        super().__init__(f"Price configuration is missing '{key}'")
        self.key = key


class InvalidSale(InventoryError):
    """A sale request cannot be applied to the product."""
