"""
Inventory Service

The single entry point for the product catalogue. Decides per request
whether to serve a cache slot, regenerate one category, or regenerate
everything concurrently.

Slots:
- laying / growing / fattening: livestock products per category
- eggs: egg products of every sellable laying batch
- combined: all of the above, in that order

Concurrent callers that miss the same slot share one in-flight fetch.
"""

import asyncio
import logging
import time
from datetime import datetime
from typing import Awaitable, Callable, Dict, List, Optional, Tuple, Union

from poultry_inventory.cache import (
    CATEGORY_SLOTS,
    LIVESTOCK_SLOTS,
    CacheInvalidator,
    CacheSlotName,
    CacheWarmer,
    InventoryCache,
)
from poultry_inventory.catalog import ProductSynthesizer, summarize
from poultry_inventory.models.batches import BirdCategory
from poultry_inventory.models.products import Product
from poultry_inventory.pricing import PriceConfig, PricingCalculator, get_price_config
from poultry_inventory.sources.base import InventorySource
from poultry_inventory.utils.dates import utc_now


logger = logging.getLogger(__name__)


LIVESTOCK_CATEGORIES = (BirdCategory.LAYING, BirdCategory.GROWING, BirdCategory.FATTENING)

Loader = Callable[[], Awaitable[List[Product]]]


class InventoryService:
    """
    Generates and caches sellable products.

    Usage:
        service = InventoryService(source, cache=InventoryCache())

        products = await service.get_products()
        eggs = await service.get_egg_products(force_refresh=True)
        service.invalidate(BirdCategory.LAYING)
        service.preload()
    """

    def __init__(
        self,
        source: InventorySource,
        cache: Optional[InventoryCache] = None,
        price_config_provider: Callable[[], PriceConfig] = get_price_config,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Args:
            source: Reader for batches and production records
            cache: Cache instance (a private one is created if omitted)
            price_config_provider: Returns the current price configuration
            clock: UTC clock used for ages and cache timestamps
        """
        self.source = source
        self.cache = cache or InventoryCache(clock=clock)
        self.invalidator = CacheInvalidator(self.cache)
        self.warmer = CacheWarmer(self)
        self._price_config_provider = price_config_provider
        self._clock = clock
        # slot -> (generation at start, in-flight fetch)
        self._pending: Dict[CacheSlotName, Tuple[int, asyncio.Future]] = {}

    def _synthesizer(self) -> ProductSynthesizer:
        # Read the config per generation so price changes apply on the next miss
        pricing = PricingCalculator(self._price_config_provider())
        return ProductSynthesizer(pricing, clock=self._clock)

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def get_products(self, force_refresh: bool = False) -> List[Product]:
        """
        Every sellable product.

        Serves the combined slot when valid. Otherwise the three livestock
        categories and eggs are fetched concurrently; if any of them fails
        the whole call fails and nothing is written to the combined slot.
        """
        if not force_refresh:
            cached = self.cache.get_valid(CacheSlotName.COMBINED)
            if cached is not None:
                return list(cached)

        async def load_all() -> List[Product]:
            results = await asyncio.gather(
                *(self.get_category_products(c, force_refresh) for c in LIVESTOCK_CATEGORIES),
                self.get_egg_products(force_refresh),
            )
            return [product for group in results for product in group]

        return list(await self._load(CacheSlotName.COMBINED, load_all, force_refresh=True))

    async def get_livestock_products(self, force_refresh: bool = False) -> List[Product]:
        """
        Products of the three livestock categories.

        Served from cache only when all three slots are valid; any miss
        refreshes all three concurrently.
        """
        if not force_refresh and all(self.cache.is_slot_valid(s) for s in LIVESTOCK_SLOTS):
            products: List[Product] = []
            for slot in LIVESTOCK_SLOTS:
                products.extend(self.cache.get_valid(slot) or ())
            logger.debug(f"Serving {len(products)} livestock products from cache")
            return products

        results = await asyncio.gather(
            *(self.get_category_products(c, force_refresh=True) for c in LIVESTOCK_CATEGORIES)
        )
        return [product for group in results for product in group]

    async def get_category_products(
        self,
        category: BirdCategory,
        force_refresh: bool = False,
    ) -> List[Product]:
        """Products of one livestock category."""

        async def load() -> List[Product]:
            documents = await self.source.fetch_active_batches(category)
            return self._synthesizer().livestock_products(documents, category)

        return list(await self._load(CATEGORY_SLOTS[category], load, force_refresh))

    async def get_egg_products(self, force_refresh: bool = False) -> List[Product]:
        """Egg products of every sellable laying batch, one group per collection day."""
        return list(await self._load(CacheSlotName.EGGS, self._generate_egg_products, force_refresh))

    def invalidate(self, target: Union[str, CacheSlotName, BirdCategory] = "all") -> List[CacheSlotName]:
        """Mark slots stale. A single category also stales the combined slot."""
        slots = self.cache.invalidate(target)
        logger.info(f"Inventory cache invalidated: {', '.join(s.value for s in slots)}")
        return slots

    def preload(self) -> Optional[asyncio.Task]:
        """Start warming the laying and egg slots without waiting. Never raises."""
        try:
            return self.warmer.preload()
        except Exception as e:
            logger.warning(f"Cache preload could not start: {e}")
            return None

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    async def _generate_egg_products(self) -> List[Product]:
        synthesizer = self._synthesizer()
        documents = await self.source.fetch_active_batches(BirdCategory.LAYING)
        batches = [
            batch for batch in synthesizer.parse_batches(documents, BirdCategory.LAYING)
            if batch.is_sellable
        ]
        if not batches:
            return []

        production = await asyncio.gather(
            *(self.source.fetch_production_rows(batch.id) for batch in batches)
        )

        products: List[Product] = []
        for batch, rows in zip(batches, production):
            products.extend(synthesizer.egg_products(batch, rows))
        return products

    async def _load(
        self,
        slot: CacheSlotName,
        loader: Loader,
        force_refresh: bool = False,
    ) -> Tuple[Product, ...]:
        """
        Serve a slot from cache or through a shared in-flight fetch.

        A pending fetch is joined only if the slot has not been invalidated
        since it started.
        """
        if not force_refresh:
            cached = self.cache.get_valid(slot)
            if cached is not None:
                return cached

        generation = self.cache.generation(slot)
        pending = self._pending.get(slot)
        if pending is not None and pending[0] == generation and not pending[1].done():
            logger.debug(f"Joining in-flight fetch for {slot.value}")
            future = pending[1]
        else:
            future = asyncio.ensure_future(self._fetch(slot, loader, generation))
            self._pending[slot] = (generation, future)
            future.add_done_callback(lambda f, slot=slot: self._fetch_done(slot, f))

        return await asyncio.shield(future)

    def _fetch_done(self, slot: CacheSlotName, future: asyncio.Future) -> None:
        pending = self._pending.get(slot)
        if pending is not None and pending[1] is future:
            del self._pending[slot]
        if not future.cancelled():
            # Mark the exception retrieved; awaiting callers re-raise it themselves
            future.exception()

    async def _fetch(
        self,
        slot: CacheSlotName,
        loader: Loader,
        generation: int,
    ) -> Tuple[Product, ...]:
        logger.info(f"Generating {slot.value} products...")
        start_time = time.perf_counter()

        try:
            products = await loader()
        except Exception as e:
            logger.error(f"Failed to generate {slot.value} products: {e}")
            raise

        entry = self.cache.put(slot, products, generation=generation)
        duration = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"Generated {len(entry.data)} {slot.value} products in {duration:.0f}ms "
            f"{summarize(entry.data)}"
        )
        return entry.data

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    @property
    def pending_fetches(self) -> List[str]:
        return [slot.value for slot in self._pending]

    async def close(self) -> None:
        """Cancel background warming and close the source if it supports it."""
        await self.warmer.stop()
        close = getattr(self.source, "close", None)
        if close is not None:
            await close()
