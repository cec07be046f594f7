"""
Inventory API

Endpoints for browsing the product catalogue, recording sales and
operating the inventory cache.

Endpoints:
- Product listings (all, livestock, eggs) with optional force refresh
- Search and lookup by product id
- Sale recording
- Cache invalidation and statistics
"""

import logging
import time
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, Field

from poultry_inventory.catalog import (
    filter_by_category,
    filter_by_kind,
    find_product,
    search_products,
    summarize,
)
from poultry_inventory.errors import ConfigurationMissing, InvalidSale, SourceUnavailable
from poultry_inventory.models import BirdCategory, Product, ProductKind
from poultry_inventory.services import InventoryService, SaleRecorder
from poultry_inventory.sources import InventoryWriter


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/inventory", tags=["Inventory"])


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class ProductResponse(BaseModel):
    """One sellable product."""
    id: str
    product_kind: ProductKind
    name: str
    description: str
    category: BirdCategory
    unit_price: Decimal
    unit_label: str
    available: int
    batch_id: str

    # Livestock products
    age_days: Optional[int] = None
    head_count: Optional[int] = None
    breed: Optional[str] = None
    start_date: Optional[date] = None
    average_weight: Optional[Decimal] = None

    # Egg products
    collection_day: Optional[date] = None
    sale_unit: Optional[str] = None
    units_per_case: Optional[int] = None
    size: Optional[str] = None
    quality: Optional[str] = None
    record_ids: List[str] = []


class ProductListResponse(BaseModel):
    """A list of products with a per-kind breakdown."""
    count: int
    summary: Dict[str, int]
    products: List[ProductResponse]


class InvalidationResponse(BaseModel):
    """Cache invalidation response."""
    success: bool
    slots: List[str]
    duration_ms: float


class CacheStatsResponse(BaseModel):
    """Cache statistics response."""
    hits: int
    misses: int
    writes: int
    stale_writes: int
    invalidations: int
    hit_rate_percent: float
    last_invalidated: Optional[datetime] = None
    pending_fetches: List[str]
    slots: Dict[str, Dict]


class SaleRequest(BaseModel):
    """Request to sell a product."""
    product_id: str
    quantity: int = Field(..., ge=1, description="Items to sell (batches, birds, eggs or cases)")


class SaleResponse(BaseModel):
    """Recorded sale."""
    product_id: str
    product_kind: ProductKind
    quantity: int
    unit_price: Decimal
    total: Decimal
    recorded_at: datetime
    remaining_head_count: Optional[int] = None
    eggs_consumed: int = 0
    consumed_record_ids: List[str] = []
    invalidated_slots: List[str] = []


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_inventory_service(request: Request) -> InventoryService:
    """The service owned by the app (see api.main.create_app)."""
    service = getattr(request.app.state, "inventory_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Inventory service not configured")
    return service


def _to_response(products: List[Product]) -> ProductListResponse:
    return ProductListResponse(
        count=len(products),
        summary=summarize(products),
        products=[ProductResponse(**p.to_dict()) for p in products],
    )


async def _guarded(awaitable):
    """Map engine errors to HTTP errors."""
    try:
        return await awaitable
    except SourceUnavailable as e:
        logger.error(f"Inventory source unavailable: {e}")
        raise HTTPException(status_code=503, detail=str(e))
    except ConfigurationMissing as e:
        logger.error(f"Inventory configuration error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


# =============================================================================
# CATALOGUE ENDPOINTS
# =============================================================================

@router.get("/products", response_model=ProductListResponse)
async def list_products(
    force_refresh: bool = Query(False, description="Bypass the cache"),
    kind: Optional[ProductKind] = Query(None, description="Filter by product kind"),
    category: Optional[BirdCategory] = Query(None, description="Filter by bird category"),
    service: InventoryService = Depends(get_inventory_service),
):
    """Every sellable product, optionally filtered."""
    products = await _guarded(service.get_products(force_refresh=force_refresh))
    if kind is not None:
        products = filter_by_kind(products, kind)
    if category is not None:
        products = filter_by_category(products, category)
    return _to_response(products)


@router.get("/livestock", response_model=ProductListResponse)
async def list_livestock(
    force_refresh: bool = Query(False),
    service: InventoryService = Depends(get_inventory_service),
):
    """Whole-batch and per-unit products of all livestock categories."""
    return _to_response(await _guarded(service.get_livestock_products(force_refresh=force_refresh)))


@router.get("/eggs", response_model=ProductListResponse)
async def list_eggs(
    force_refresh: bool = Query(False),
    service: InventoryService = Depends(get_inventory_service),
):
    """Egg products, one unit and case product per collection day."""
    return _to_response(await _guarded(service.get_egg_products(force_refresh=force_refresh)))


@router.get("/search", response_model=ProductListResponse)
async def search(
    q: str = Query("", description="Case-insensitive name/description match"),
    service: InventoryService = Depends(get_inventory_service),
):
    """Search products by name or description."""
    products = await _guarded(service.get_products())
    return _to_response(search_products(products, q))


@router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str,
    service: InventoryService = Depends(get_inventory_service),
):
    """Look up one product by id."""
    product = find_product(await _guarded(service.get_products()), product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return ProductResponse(**product.to_dict())


# =============================================================================
# SALES
# =============================================================================

@router.post("/sales", response_model=SaleResponse)
async def record_sale(
    sale: SaleRequest,
    service: InventoryService = Depends(get_inventory_service),
):
    """
    Sell a product.

    Decrements the source and invalidates the affected cache slots.
    """
    if not isinstance(service.source, InventoryWriter):
        raise HTTPException(status_code=501, detail="Inventory source is read-only")

    product = find_product(await _guarded(service.get_products()), sale.product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")

    recorder = SaleRecorder(service.source, service.invalidator)
    try:
        receipt = await _guarded(recorder.record_sale(product, sale.quantity))
    except InvalidSale as e:
        raise HTTPException(status_code=400, detail=str(e))

    return SaleResponse(**receipt.to_dict())


# =============================================================================
# CACHE MANAGEMENT
# =============================================================================

@router.post("/invalidate/{target}", response_model=InvalidationResponse)
def invalidate_cache(
    target: str,
    service: InventoryService = Depends(get_inventory_service),
):
    """
    Invalidate a cache slot (laying, growing, fattening, eggs, combined) or "all".

    A single slot also stales the combined slot.
    """
    start = time.perf_counter()
    try:
        slots = service.invalidate(target)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    elapsed = (time.perf_counter() - start) * 1000

    return InvalidationResponse(
        success=True,
        slots=[s.value for s in slots],
        duration_ms=elapsed,
    )


@router.get("/cache/stats", response_model=CacheStatsResponse)
def get_cache_stats(service: InventoryService = Depends(get_inventory_service)):
    """
    Current cache statistics and slot state.

    Note: Stats are reset on application restart.
    """
    stats = service.cache.get_stats()
    return CacheStatsResponse(
        hits=stats.hits,
        misses=stats.misses,
        writes=stats.writes,
        stale_writes=stats.stale_writes,
        invalidations=stats.invalidations,
        hit_rate_percent=round(stats.hit_rate * 100, 2),
        last_invalidated=stats.last_invalidated,
        pending_fetches=service.pending_fetches,
        slots=service.cache.snapshot(),
    )
