"""
Tests for the inventory API.

Uses FastAPI's TestClient against an app built around an in-memory source.
"""

import pytest
from decimal import Decimal

from fastapi.testclient import TestClient

from api.main import create_app
from poultry_inventory.errors import SourceUnavailable
from poultry_inventory.services import InventoryService
from poultry_inventory.sources import HTTPSource


@pytest.fixture
def client(service):
    return TestClient(create_app(service=service))


# =============================================================================
# CATALOGUE ENDPOINTS
# =============================================================================

class TestCatalogueEndpoints:
    """Test product listings."""

    def test_list_products(self, client):
        response = client.get("/api/inventory/products")
        assert response.status_code == 200

        data = response.json()
        assert data["count"] == 8
        assert data["summary"]["egg"] == 2

        by_id = {p["id"]: p for p in data["products"]}
        assert Decimal(str(by_id["batch-L1"]["unit_price"])) == Decimal("475")
        assert by_id["batch-L1"]["product_kind"] == "whole_batch"
        assert by_id["eggs-cases-L1-2026-10-17"]["collection_day"] == "2026-10-17"
        assert by_id["eggs-cases-L1-2026-10-17"]["record_ids"] == ["P1", "P2"]

    def test_filter_by_kind_and_category(self, client):
        response = client.get("/api/inventory/products", params={"kind": "per_unit", "category": "growing"})
        assert [p["id"] for p in response.json()["products"]] == ["units-G1"]

    def test_force_refresh(self, client, source):
        client.get("/api/inventory/products")
        client.get("/api/inventory/products", params={"force_refresh": "true"})
        assert source.calls["batches:growing"] == 2

    def test_livestock_and_eggs(self, client):
        assert client.get("/api/inventory/livestock").json()["count"] == 6
        assert client.get("/api/inventory/eggs").json()["count"] == 2

    def test_search(self, client):
        response = client.get("/api/inventory/search", params={"q": "laying house"})
        assert [p["id"] for p in response.json()["products"]] == [
            "batch-L1",
            "units-L1",
            "eggs-units-L1-2026-10-17",
            "eggs-cases-L1-2026-10-17",
        ]

    def test_search_by_description(self, client):
        response = client.get("/api/inventory/search", params={"q": "broilers"})
        assert [p["id"] for p in response.json()["products"]] == ["batch-F1", "units-F1"]

    def test_get_product(self, client):
        response = client.get("/api/inventory/products/units-F1")
        assert response.status_code == 200
        assert response.json()["available"] == 200

    def test_get_missing_product(self, client):
        assert client.get("/api/inventory/products/units-nope").status_code == 404

    def test_source_failure_returns_503(self, client, source):
        source.fail_with = SourceUnavailable("database offline")
        response = client.get("/api/inventory/products")
        assert response.status_code == 503


# =============================================================================
# SALES
# =============================================================================

class TestSalesEndpoint:
    """Test sale recording."""

    def test_record_sale(self, client):
        response = client.post("/api/inventory/sales", json={"product_id": "units-L1", "quantity": 5})
        assert response.status_code == 200

        data = response.json()
        assert data["remaining_head_count"] == 45
        assert Decimal(str(data["total"])) == Decimal("50")
        assert data["invalidated_slots"] == ["laying", "combined", "eggs"]

        product = client.get("/api/inventory/products/units-L1").json()
        assert product["available"] == 45

    def test_sale_exceeding_availability(self, client):
        response = client.post("/api/inventory/sales", json={"product_id": "units-L1", "quantity": 500})
        assert response.status_code == 400

    def test_sale_of_unknown_product(self, client):
        response = client.post("/api/inventory/sales", json={"product_id": "batch-X", "quantity": 1})
        assert response.status_code == 404

    def test_sale_quantity_validated(self, client):
        response = client.post("/api/inventory/sales", json={"product_id": "units-L1", "quantity": 0})
        assert response.status_code == 422

    def test_read_only_source(self, price_config):
        service = InventoryService(
            HTTPSource("https://farm.test"), price_config_provider=lambda: price_config
        )
        client = TestClient(create_app(service=service))
        response = client.post("/api/inventory/sales", json={"product_id": "units-L1", "quantity": 1})
        assert response.status_code == 501


# =============================================================================
# CACHE MANAGEMENT
# =============================================================================

class TestCacheEndpoints:
    """Test invalidation and stats."""

    def test_invalidate_category(self, client, service):
        client.get("/api/inventory/products")
        response = client.post("/api/inventory/invalidate/growing")

        assert response.status_code == 200
        assert response.json()["slots"] == ["growing", "combined"]
        assert not service.cache.is_slot_valid("growing")
        assert service.cache.is_slot_valid("laying")

    def test_invalidate_all(self, client):
        response = client.post("/api/inventory/invalidate/all")
        assert len(response.json()["slots"]) == 5

    def test_invalidate_unknown_slot(self, client):
        assert client.post("/api/inventory/invalidate/ducks").status_code == 400

    def test_cache_stats(self, client):
        client.get("/api/inventory/products")
        client.get("/api/inventory/products")

        data = client.get("/api/inventory/cache/stats").json()
        assert data["hits"] >= 1
        assert data["slots"]["combined"]["valid"] is True
        assert data["pending_fetches"] == []

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "ok"
