"""
Inventory Cache

Five independent slots (laying, growing, fattening, eggs, combined), each
holding the last computed product list with its timestamp and validity
flag. Writes replace the whole slot entry; invalidation flips the flag
and keeps the data.

Each slot also carries a generation counter, bumped on every
invalidation. A writer that captured the generation before fetching
passes it back to put(); if an invalidation landed in between, the fresh
data is stored already invalid.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

from poultry_inventory.cache.config import (
    ALL,
    CacheSlotName,
    CacheTTL,
    resolve_slot,
)
from poultry_inventory.models.batches import BirdCategory
from poultry_inventory.models.products import Product
from poultry_inventory.utils.dates import utc_now


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheSlot:
    """One cached product list."""
    data: Tuple[Product, ...]
    timestamp: datetime
    is_valid: bool = True


@dataclass
class CacheStats:
    """Cache operation statistics."""
    hits: int = 0
    misses: int = 0
    writes: int = 0
    stale_writes: int = 0  # Writes that lost a race with an invalidation
    invalidations: int = 0
    last_invalidated: Optional[datetime] = None
    per_slot: Dict[str, Dict[str, int]] = field(default_factory=dict)

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def record(self, slot: CacheSlotName, outcome: str):
        counters = self.per_slot.setdefault(slot.value, {"hits": 0, "misses": 0})
        counters[outcome] += 1
        if outcome == "hits":
            self.hits += 1
        else:
            self.misses += 1


SlotTarget = Union[str, CacheSlotName, BirdCategory]


class InventoryCache:
    """
    Tiered TTL cache for generated products.

    Usage:
        cache = InventoryCache()
        cache.put(CacheSlotName.EGGS, products)
        products = cache.get_valid(CacheSlotName.EGGS)  # None on miss
        cache.invalidate(BirdCategory.LAYING)           # laying + combined
        cache.invalidate("all")
    """

    def __init__(
        self,
        ttls: Optional[CacheTTL] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.ttls = ttls or CacheTTL()
        self._clock = clock
        self._slots: Dict[CacheSlotName, CacheSlot] = {}
        self._generations: Dict[CacheSlotName, int] = {slot: 0 for slot in CacheSlotName}
        self._stats = CacheStats()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, slot: SlotTarget) -> Optional[CacheSlot]:
        """Raw slot entry, valid or not."""
        return self._slots.get(resolve_slot(slot))

    def is_valid(self, entry: Optional[CacheSlot], ttl: timedelta) -> bool:
        """False if absent, flagged invalid, or at least `ttl` old."""
        if entry is None or not entry.is_valid:
            return False
        return self._clock() - entry.timestamp < ttl

    def is_slot_valid(self, slot: SlotTarget) -> bool:
        slot = resolve_slot(slot)
        return self.is_valid(self._slots.get(slot), self.ttls.for_slot(slot))

    def get_valid(self, slot: SlotTarget) -> Optional[Tuple[Product, ...]]:
        """Cached products if the slot is valid, otherwise None."""
        slot = resolve_slot(slot)
        entry = self._slots.get(slot)
        if self.is_valid(entry, self.ttls.for_slot(slot)):
            self._stats.record(slot, "hits")
            logger.debug(f"Cache HIT: {slot.value} ({len(entry.data)} products)")
            return entry.data
        self._stats.record(slot, "misses")
        logger.debug(f"Cache MISS: {slot.value}")
        return None

    def remaining_ttl(self, slot: SlotTarget) -> Optional[timedelta]:
        """Time until the slot expires; None if it is not valid."""
        slot = resolve_slot(slot)
        entry = self._slots.get(slot)
        ttl = self.ttls.for_slot(slot)
        if not self.is_valid(entry, ttl):
            return None
        return ttl - (self._clock() - entry.timestamp)

    def generation(self, slot: SlotTarget) -> int:
        return self._generations[resolve_slot(slot)]

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def put(
        self,
        slot: SlotTarget,
        data: Iterable[Product],
        generation: Optional[int] = None,
    ) -> CacheSlot:
        """
        Replace a slot's entry.

        If `generation` is given and the slot was invalidated since it was
        read, the entry is stored with is_valid=False.
        """
        slot = resolve_slot(slot)
        valid = generation is None or generation == self._generations[slot]
        entry = CacheSlot(data=tuple(data), timestamp=self._clock(), is_valid=valid)
        self._slots[slot] = entry
        self._stats.writes += 1
        if not valid:
            self._stats.stale_writes += 1
            logger.debug(f"Cache slot {slot.value} invalidated during fetch, stored as stale")
        return entry

    def invalidate(self, target: SlotTarget = ALL) -> List[CacheSlotName]:
        """
        Flip validity flags without deleting data.

        "all" flips every slot. A single slot also stales the combined slot.
        Returns the slots that were targeted.
        """
        if isinstance(target, str) and target.lower() == ALL:
            targets = list(CacheSlotName)
        else:
            slot = resolve_slot(target)
            targets = [slot]
            if slot != CacheSlotName.COMBINED:
                targets.append(CacheSlotName.COMBINED)

        for slot in targets:
            self._generations[slot] += 1
            entry = self._slots.get(slot)
            if entry is not None and entry.is_valid:
                self._slots[slot] = replace(entry, is_valid=False)

        self._stats.invalidations += 1
        self._stats.last_invalidated = self._clock()
        logger.debug(f"Cache invalidated: {', '.join(s.value for s in targets)}")
        return targets

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    def get_stats(self) -> CacheStats:
        return self._stats

    def snapshot(self) -> Dict[str, Dict[str, Any]]:
        """State of every slot for monitoring endpoints."""
        result = {}
        for slot in CacheSlotName:
            entry = self._slots.get(slot)
            remaining = self.remaining_ttl(slot)
            result[slot.value] = {
                "populated": entry is not None,
                "valid": self.is_slot_valid(slot),
                "products": len(entry.data) if entry else 0,
                "timestamp": entry.timestamp.isoformat() if entry else None,
                "ttl_seconds": self.ttls.for_slot(slot).total_seconds(),
                "remaining_seconds": remaining.total_seconds() if remaining is not None else None,
                "generation": self._generations[slot],
            }
        return result
