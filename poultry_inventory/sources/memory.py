"""
In-Memory Source

Document store kept in process memory. Used for local development, the
snapshot script and tests. Implements both the reader and the writer side.
"""

import asyncio
import logging
from collections import Counter
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from poultry_inventory.errors import InvalidSale
from poultry_inventory.models.batches import BatchStatus, BirdCategory, ProductionRecord, is_consumed
from poultry_inventory.sources.base import InventorySource, InventoryWriter


logger = logging.getLogger(__name__)


class InMemorySource(InventorySource, InventoryWriter):
    """
    Batches and production documents held in dictionaries.

    Args:
        batches: Raw batch documents per category
        production: Raw production documents per batch id
        delay: Simulated latency (seconds) for every read

    Set `fail_with` to an exception instance to make every read raise it.
    """

    name = "memory"

    def __init__(
        self,
        batches: Optional[Mapping[BirdCategory, Iterable[Mapping[str, Any]]]] = None,
        production: Optional[Mapping[str, Iterable[Mapping[str, Any]]]] = None,
        delay: float = 0.0,
    ):
        self._batches: Dict[BirdCategory, List[Dict[str, Any]]] = {
            category: [] for category in BirdCategory
        }
        self._production: Dict[str, List[Dict[str, Any]]] = {}
        self.delay = delay
        self.fail_with: Optional[Exception] = None
        self.calls: Counter = Counter()

        for category, documents in (batches or {}).items():
            for document in documents:
                self.add_batch(BirdCategory(category), document)
        for batch_id, documents in (production or {}).items():
            for document in documents:
                self.add_production(batch_id, document)

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def add_batch(self, category: BirdCategory, document: Mapping[str, Any]) -> None:
        self._batches[category].append(dict(document))

    def add_production(self, batch_id: str, document: Mapping[str, Any]) -> None:
        self._production.setdefault(batch_id, []).append({"batch_id": batch_id, **document})

    def update_batch(self, batch_id: str, **changes: Any) -> None:
        self._find_batch(batch_id).update(changes)

    # -------------------------------------------------------------------------
    # Reader
    # -------------------------------------------------------------------------

    async def _simulate_latency(self) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with

    async def fetch_active_batches(self, category: BirdCategory) -> List[Dict[str, Any]]:
        self.calls[f"batches:{category.value}"] += 1
        await self._simulate_latency()
        return [
            dict(document)
            for document in self._batches[category]
            if str(document.get("status", "")).lower() == BatchStatus.ACTIVE.value
        ]

    async def fetch_production_rows(self, batch_id: str) -> List[Dict[str, Any]]:
        self.calls[f"production:{batch_id}"] += 1
        await self._simulate_latency()
        return [
            dict(document)
            for document in self._production.get(batch_id, [])
            if not is_consumed(document)
        ]

    # -------------------------------------------------------------------------
    # Writer
    # -------------------------------------------------------------------------

    def _find_batch(self, batch_id: str) -> Dict[str, Any]:
        for documents in self._batches.values():
            for document in documents:
                if str(document.get("id")) == batch_id:
                    return document
        raise KeyError(f"Batch not found: {batch_id}")

    async def mark_batch_sold(self, batch_id: str) -> None:
        self._find_batch(batch_id)["status"] = BatchStatus.SOLD.value
        logger.info(f"Batch {batch_id} marked as sold")

    async def reduce_head_count(self, batch_id: str, quantity: int) -> int:
        document = self._find_batch(batch_id)
        current = int(document.get("head_count") or 0)
        if quantity > current:
            raise InvalidSale(f"Batch {batch_id} has only {current} birds, cannot sell {quantity}")
        document["head_count"] = current - quantity
        logger.info(f"Batch {batch_id} head count reduced by {quantity} to {current - quantity}")
        return current - quantity

    async def consume_eggs(self, record_ids: Sequence[str], eggs: int) -> List[str]:
        by_id = {
            str(document.get("id")): document
            for documents in self._production.values()
            for document in documents
        }
        remaining = eggs
        plan = []
        for record_id in record_ids:
            if remaining <= 0:
                break
            document = by_id.get(record_id)
            if document is None:
                raise KeyError(f"Production record not found: {record_id}")
            taken = min(remaining, ProductionRecord.from_dict(document).available)
            if taken > 0:
                plan.append((document, taken))
                remaining -= taken
        if remaining > 0:
            raise InvalidSale(f"Only {eggs - remaining} eggs available, cannot sell {eggs}")

        consumed = []
        for document, taken in plan:
            document["sold"] = int(document.get("sold") or 0) + taken
            if ProductionRecord.from_dict(document).available == 0:
                document["consumed"] = True
                consumed.append(str(document["id"]))
        logger.info(f"Consumed {eggs} eggs across {len(plan)} production records")
        return consumed
