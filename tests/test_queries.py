"""
Tests for catalogue queries.
"""

import pytest

from poultry_inventory.catalog import (
    filter_by_category,
    filter_by_kind,
    find_product,
    search_products,
    summarize,
)
from poultry_inventory.models import BirdCategory, ProductKind


class TestQueries:
    """Test search, filters and lookup."""

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive(self, service):
        products = await service.get_products()
        found = search_products(products, "BROILER")
        assert [p.id for p in found] == ["batch-F1", "units-F1"]

    @pytest.mark.asyncio
    async def test_search_matches_description(self, service):
        products = await service.get_products()
        found = search_products(products, "collected 2026-10-17")
        assert {p.id for p in found} == {"eggs-units-L1-2026-10-17", "eggs-cases-L1-2026-10-17"}

    @pytest.mark.asyncio
    async def test_blank_search_returns_everything(self, service):
        products = await service.get_products()
        assert search_products(products, "   ") == products

    @pytest.mark.asyncio
    async def test_filters(self, service):
        products = await service.get_products()
        assert len(filter_by_kind(products, ProductKind.EGG)) == 2
        assert len(filter_by_kind(products, ProductKind.WHOLE_BATCH)) == 3
        # Egg products belong to the laying category
        assert len(filter_by_category(products, BirdCategory.LAYING)) == 4

    @pytest.mark.asyncio
    async def test_find_product(self, service):
        products = await service.get_products()
        assert find_product(products, "units-G1").available == 120
        assert find_product(products, "units-X9") is None

    @pytest.mark.asyncio
    async def test_summarize(self, service):
        summary = summarize(await service.get_products())
        assert summary == {"whole_batch": 3, "per_unit": 3, "egg": 2, "total": 8}
