"""
Cache Warming Service

Fills cache slots ahead of the first user-visible request.

preload() schedules the laying and egg fetches on the running loop and
returns immediately. Warming is best-effort: failures are logged and
swallowed, never raised to the caller.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Dict, Iterable, Optional, Set

from poultry_inventory.cache.config import CacheSlotName
from poultry_inventory.models.batches import BirdCategory

if TYPE_CHECKING:
    from poultry_inventory.services.inventory import InventoryService


logger = logging.getLogger(__name__)


PRELOAD_SLOTS = (CacheSlotName.LAYING, CacheSlotName.EGGS)


class CacheWarmer:
    """
    Proactive cache warming for an InventoryService.

    Features:
    - Fire-and-forget preload of the most requested slots
    - Awaitable warm() for startup hooks
    - Tracks scheduled tasks so they can be awaited or cancelled
    """

    def __init__(self, service: "InventoryService"):
        self.service = service
        self._tasks: Set[asyncio.Task] = set()

    async def _warm_slot(self, slot: CacheSlotName) -> None:
        if slot == CacheSlotName.EGGS:
            await self.service.get_egg_products()
        elif slot == CacheSlotName.COMBINED:
            await self.service.get_products()
        else:
            await self.service.get_category_products(BirdCategory(slot.value))

    async def warm(self, slots: Iterable[CacheSlotName] = PRELOAD_SLOTS) -> Dict[str, bool]:
        """
        Warm the given slots concurrently.

        Returns:
            Dict of slot -> success status
        """
        slots = list(slots)
        outcomes = await asyncio.gather(
            *(self._warm_slot(slot) for slot in slots),
            return_exceptions=True,
        )

        results = {}
        for slot, outcome in zip(slots, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, Exception):
                logger.warning(f"Cache warming failed for {slot.value}: {outcome}")
                results[slot.value] = False
            else:
                results[slot.value] = True

        success_count = sum(1 for v in results.values() if v)
        logger.info(f"Cache warming complete: {success_count}/{len(results)} slots")
        return results

    def preload(self, slots: Iterable[CacheSlotName] = PRELOAD_SLOTS) -> Optional[asyncio.Task]:
        """
        Schedule warm() without awaiting it.

        Returns the scheduled task, or None when no event loop is running.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("Cache preload skipped: no running event loop")
            return None

        task = loop.create_task(self.warm(slots))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.debug(f"Cache preload scheduled: {', '.join(s.value for s in slots)}")
        return task

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def stop(self) -> None:
        """Cancel scheduled preloads."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        logger.info("Cache warmer stopped")
