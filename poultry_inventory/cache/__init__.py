"""
Inventory Cache Module

Five-slot TTL cache for generated products, with event-driven
invalidation and best-effort warming.

Usage:
    from poultry_inventory.cache import InventoryCache, CacheInvalidator, InventoryEvent

    cache = InventoryCache(ttls=cache_ttls_from_settings())
    invalidator = CacheInvalidator(cache)
    await invalidator.handle_event(InventoryEvent.PRODUCTION_RECORDED)
"""

from .config import (
    ALL,
    CATEGORY_SLOTS,
    LIVESTOCK_SLOTS,
    CacheSlotName,
    CacheTTL,
    cache_ttls_from_settings,
    resolve_slot,
)
from .slots import CacheSlot, CacheStats, InventoryCache
from .invalidation import CacheInvalidator, InvalidationResult, InventoryEvent
from .warming import CacheWarmer, PRELOAD_SLOTS

__all__ = [
    # Config
    "ALL",
    "CATEGORY_SLOTS",
    "LIVESTOCK_SLOTS",
    "CacheSlotName",
    "CacheTTL",
    "cache_ttls_from_settings",
    "resolve_slot",
    # Store
    "CacheSlot",
    "CacheStats",
    "InventoryCache",
    # Invalidation
    "CacheInvalidator",
    "InvalidationResult",
    "InventoryEvent",
    # Warming
    "CacheWarmer",
    "PRELOAD_SLOTS",
]
