"""
Cache Invalidation Service

Event-driven cache invalidation with minimal scope.
Principle: Invalidate as narrowly as possible.

Events trigger targeted invalidation:
- BATCH_* / MORTALITY / WEIGHT: the batch's category slot
  (laying batches also stale the egg slot)
- PRODUCTION_RECORDED: the egg slot
- SALE_RECORDED: the egg slot for eggs, otherwise as for a batch event
- PRICES_UPDATED / MANUAL_INVALIDATE_ALL: every slot

The combined slot is staled by any of the above and rebuilt on next read.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from poultry_inventory.cache.config import ALL, CATEGORY_SLOTS, CacheSlotName
from poultry_inventory.cache.slots import InventoryCache
from poultry_inventory.models.batches import BirdCategory
from poultry_inventory.models.products import Product, ProductKind, product_kind_of


logger = logging.getLogger(__name__)


class InventoryEvent(Enum):
    """Farm events that change the catalogue."""

    # Batch lifecycle
    BATCH_CREATED = "batch_created"
    BATCH_UPDATED = "batch_updated"
    BATCH_CLOSED = "batch_closed"

    # Daily records
    MORTALITY_RECORDED = "mortality_recorded"
    WEIGHT_RECORDED = "weight_recorded"
    PRODUCTION_RECORDED = "production_recorded"

    # Sales
    SALE_RECORDED = "sale_recorded"

    # Configuration
    PRICES_UPDATED = "prices_updated"

    # Manual invalidation
    MANUAL_INVALIDATE_ALL = "manual_invalidate_all"


BATCH_EVENTS = (
    InventoryEvent.BATCH_CREATED,
    InventoryEvent.BATCH_UPDATED,
    InventoryEvent.BATCH_CLOSED,
    InventoryEvent.MORTALITY_RECORDED,
    InventoryEvent.WEIGHT_RECORDED,
)


@dataclass
class InvalidationResult:
    """Result of a cache invalidation operation."""
    event: InventoryEvent
    slots: List[CacheSlotName]
    duration_ms: float


class CacheInvalidator:
    """
    Maps inventory events to cache slots.

    Each event type has a specific invalidation scope.
    """

    def __init__(self, cache: InventoryCache):
        self._cache = cache

    def _slots_for_batch(self, category: BirdCategory) -> List[CacheSlotName]:
        slots = [CATEGORY_SLOTS[category]]
        if category == BirdCategory.LAYING:
            # Closing or emptying a laying batch removes its eggs too
            slots.append(CacheSlotName.EGGS)
        return slots

    def _slots_for_sale(self, product: Product) -> List[CacheSlotName]:
        kind = product_kind_of(product)
        if kind == ProductKind.EGG:
            return [CacheSlotName.EGGS]
        return self._slots_for_batch(product.category)

    async def handle_event(
        self,
        event: InventoryEvent,
        category: Optional[BirdCategory] = None,
        product: Optional[Product] = None,
    ) -> InvalidationResult:
        """
        Handle cache invalidation for an event.

        Raises:
            ValueError: if the event needs a category or product that was not given
        """
        start_time = time.perf_counter()

        logger.info(
            f"Cache invalidation event: {event.value}, "
            f"category={category.value if category else None}, "
            f"product={product.id if product is not None else None}"
        )

        if event in BATCH_EVENTS:
            if category is None:
                raise ValueError(f"{event.value} requires a category")
            targets = self._slots_for_batch(category)

        elif event == InventoryEvent.PRODUCTION_RECORDED:
            targets = [CacheSlotName.EGGS]

        elif event == InventoryEvent.SALE_RECORDED:
            if product is None:
                raise ValueError(f"{event.value} requires a product")
            targets = self._slots_for_sale(product)

        elif event in (InventoryEvent.PRICES_UPDATED, InventoryEvent.MANUAL_INVALIDATE_ALL):
            targets = [ALL]

        else:
            raise ValueError(f"Unhandled inventory event: {event}")

        slots: List[CacheSlotName] = []
        for target in targets:
            for slot in self._cache.invalidate(target):
                if slot not in slots:
                    slots.append(slot)

        duration = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"Invalidation complete: {', '.join(s.value for s in slots)}, "
            f"duration: {duration:.2f}ms"
        )

        return InvalidationResult(event=event, slots=slots, duration_ms=duration)
