"""
Cache Configuration

Slot names and TTLs for the inventory cache.

Livestock batches change rarely, so their slots (and the combined slot)
live for minutes. Egg production is logged daily and has to reflect
same-day entries quickly, so the egg slot uses a shorter TTL.
"""

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Optional, Union

from poultry_inventory.models.batches import BirdCategory
from poultry_inventory.utils.config import Settings, get_settings


class CacheSlotName(str, Enum):
    """The five independent cache slots."""
    LAYING = "laying"
    GROWING = "growing"
    FATTENING = "fattening"
    EGGS = "eggs"
    COMBINED = "combined"


LIVESTOCK_SLOTS = (CacheSlotName.LAYING, CacheSlotName.GROWING, CacheSlotName.FATTENING)

CATEGORY_SLOTS = {
    BirdCategory.LAYING: CacheSlotName.LAYING,
    BirdCategory.GROWING: CacheSlotName.GROWING,
    BirdCategory.FATTENING: CacheSlotName.FATTENING,
}

ALL = "all"


def resolve_slot(target: Union[str, CacheSlotName, BirdCategory]) -> CacheSlotName:
    """Map a category, slot or slot name to a CacheSlotName."""
    if isinstance(target, CacheSlotName):
        return target
    if isinstance(target, BirdCategory):
        return CATEGORY_SLOTS[target]
    try:
        return CacheSlotName(str(target).lower())
    except ValueError:
        raise ValueError(f"Unknown cache slot: {target}")


@dataclass(frozen=True)
class CacheTTL:
    """TTL per slot."""

    LIVESTOCK: timedelta = timedelta(minutes=5)
    EGGS: timedelta = timedelta(minutes=2)
    COMBINED: timedelta = timedelta(minutes=5)

    def for_slot(self, slot: Union[str, CacheSlotName, BirdCategory]) -> timedelta:
        """Get TTL for a slot."""
        slot = resolve_slot(slot)
        if slot == CacheSlotName.EGGS:
            return self.EGGS
        if slot == CacheSlotName.COMBINED:
            return self.COMBINED
        return self.LIVESTOCK


def cache_ttls_from_settings(settings: Optional[Settings] = None) -> CacheTTL:
    """
    Build TTLs from LIVESTOCK_CACHE_TTL_SECONDS / EGG_CACHE_TTL_SECONDS.

    The combined slot follows the livestock TTL.
    """
    settings = settings or get_settings()
    livestock = timedelta(seconds=settings.LIVESTOCK_CACHE_TTL_SECONDS)
    return CacheTTL(
        LIVESTOCK=livestock,
        EGGS=timedelta(seconds=settings.EGG_CACHE_TTL_SECONDS),
        COMBINED=livestock,
    )
