"""
Pytest Configuration and Shared Fixtures

Provides common fixtures and configuration for all test modules.
"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List

from poultry_inventory.cache import InventoryCache
from poultry_inventory.models import BirdCategory
from poultry_inventory.pricing import PriceConfig
from poultry_inventory.services import InventoryService
from poultry_inventory.sources import InMemorySource


# ============================================================================
# Clock
# ============================================================================

class FakeClock:
    """Controllable UTC clock."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    """Clock frozen at 2026-10-18 12:00 UTC."""
    return FakeClock(datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc))


# ============================================================================
# Price Configuration
# ============================================================================

@pytest.fixture
def price_config() -> PriceConfig:
    """Prices from the reference scenario: 10.00 a hen, 0.20 an egg, 30 per case."""
    return PriceConfig(
        laying_unit_price=Decimal("10.00"),
        egg_unit_price=Decimal("0.20"),
        fattening_price_per_pound=Decimal("2.50"),
        fattening_target_weight=Decimal("4.5"),
        units_per_case=30,
    )


# ============================================================================
# Mock Data Fixtures
# ============================================================================

def make_batch(batch_id: str, **overrides) -> Dict[str, Any]:
    """Raw batch document."""
    document = {
        "id": batch_id,
        "name": f"Batch {batch_id}",
        "status": "active",
        "head_count": 50,
        "breed": "Isa Brown",
        "start_date": "2026-09-18",
        "birth_date": "2026-08-19",
    }
    document.update(overrides)
    return document


def make_production(record_id: str, collected_at: str, **tiers) -> Dict[str, Any]:
    """Raw production document; tiers default to zero."""
    return {"id": record_id, "collected_at": collected_at, **tiers}


@pytest.fixture
def farm_documents() -> Dict[str, Any]:
    """One batch per category plus one day of eggs (45) for the laying batch."""
    return {
        "batches": {
            BirdCategory.LAYING: [make_batch("L1", name="Laying House A")],
            BirdCategory.GROWING: [make_batch("G1", name="Growing Pen", head_count=120)],
            BirdCategory.FATTENING: [
                make_batch("F1", name="Broiler Shed", head_count=200, average_weight="5.0")
            ],
        },
        "production": {
            "L1": [
                make_production("P1", "2026-10-17T07:00:00Z", medium=20, large=10),
                make_production("P2", "2026-10-17T16:30:00Z", large=15),
            ],
        },
    }


@pytest.fixture
def source(farm_documents) -> InMemorySource:
    return InMemorySource(
        batches=farm_documents["batches"],
        production=farm_documents["production"],
    )


@pytest.fixture
def cache(clock) -> InventoryCache:
    return InventoryCache(clock=clock)


@pytest.fixture
def service(source, cache, price_config, clock) -> InventoryService:
    return InventoryService(
        source,
        cache=cache,
        price_config_provider=lambda: price_config,
        clock=clock,
    )


def product_ids(products: List[Any]) -> List[str]:
    return [p.id for p in products]
