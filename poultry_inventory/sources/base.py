"""
Source Reader Interfaces

Readers are thin pass-throughs to the farm's persistence layer. They apply
the active-status filter where the backend allows it, never cache, and
never retry: transport or persistence failures surface as SourceUnavailable.

Writers are the sale side channel; the engine itself never calls them.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence

from poultry_inventory.models.batches import BirdCategory


class InventorySource(ABC):
    """Read access to batches and egg production."""

    name: str = "source"

    @abstractmethod
    async def fetch_active_batches(self, category: BirdCategory) -> List[Dict[str, Any]]:
        """Raw documents of the category's active batches."""
        pass

    @abstractmethod
    async def fetch_production_rows(self, batch_id: str) -> List[Dict[str, Any]]:
        """Raw production documents of one laying batch not yet consumed by sales."""
        pass


class InventoryWriter(ABC):
    """Decrement operations applied when a product is sold."""

    @abstractmethod
    async def mark_batch_sold(self, batch_id: str) -> None:
        """Take the whole batch out of the active inventory."""
        pass

    @abstractmethod
    async def reduce_head_count(self, batch_id: str, quantity: int) -> int:
        """Remove sold birds. Returns the remaining head count."""
        pass

    @abstractmethod
    async def consume_eggs(self, record_ids: Sequence[str], eggs: int) -> List[str]:
        """
        Take eggs from the given records, oldest first.

        Returns the ids of records that became fully consumed.
        """
        pass
