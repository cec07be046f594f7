"""
Tests for product synthesis.

These tests verify:
- Whole-batch and per-unit products per active batch
- Egg grouping by UTC day and the case threshold
- Idempotence of generated products
- Malformed records skipped without aborting the category
"""

import logging
import pytest
from decimal import Decimal

from poultry_inventory.catalog import ProductSynthesizer, group_by_day
from poultry_inventory.models import (
    Batch,
    BirdCategory,
    EggSaleUnit,
    PerUnitProduct,
    ProductionRecord,
    WholeBatchProduct,
)
from poultry_inventory.pricing import PricingCalculator
from poultry_inventory.utils.dates import CalendarDay

from conftest import make_batch, make_production


@pytest.fixture
def synthesizer(price_config, clock):
    return ProductSynthesizer(PricingCalculator(price_config), clock=clock)


def _laying_batch(**overrides) -> Batch:
    return Batch.from_dict(make_batch("L1", name="Laying House A", **overrides), BirdCategory.LAYING)


# =============================================================================
# LIVESTOCK TESTS
# =============================================================================

class TestLivestockProducts:
    """Test batch products."""

    def test_active_batch_yields_two_products(self, synthesizer):
        whole, per_unit = synthesizer.batch_products(_laying_batch())

        assert isinstance(whole, WholeBatchProduct)
        assert whole.id == "batch-L1"
        assert whole.available == 1
        assert whole.unit_price == Decimal("475.00")
        assert whole.unit_label == "batch"

        assert isinstance(per_unit, PerUnitProduct)
        assert per_unit.id == "units-L1"
        assert per_unit.available == 50
        assert per_unit.unit_price == Decimal("10.00")

    def test_age_computed_from_birth_date(self, synthesizer):
        # Clock is 2026-10-18; born 2026-08-19
        whole, _ = synthesizer.batch_products(_laying_batch())
        assert whole.age_days == 60

    @pytest.mark.parametrize("overrides", [
        {"status": "finished"},
        {"status": "sold"},
        {"status": "cancelled"},
        {"head_count": 0},
    ])
    def test_inactive_or_empty_batch_excluded(self, synthesizer, overrides):
        assert synthesizer.batch_products(_laying_batch(**overrides)) == []

    def test_malformed_batch_skipped(self, synthesizer, caplog):
        documents = [
            make_batch("G1"),
            {"id": "G2", "name": "No head count", "status": "active", "start_date": "2026-09-01"},
            make_batch("G3"),
        ]
        with caplog.at_level(logging.WARNING):
            products = synthesizer.livestock_products(documents, BirdCategory.GROWING)

        assert [p.id for p in products] == ["batch-G1", "units-G1", "batch-G3", "units-G3"]
        assert "G2" in caplog.text

    def test_out_of_range_numbers_skip_only_that_batch(self, synthesizer):
        documents = [
            make_batch("F1", average_weight=float("nan")),
            make_batch("F2", head_count=float("inf")),
            make_batch("F3", average_weight="5.0"),
        ]
        products = synthesizer.livestock_products(documents, BirdCategory.FATTENING)
        assert [p.id for p in products] == ["batch-F3", "units-F3"]

    def test_idempotent(self, synthesizer, farm_documents):
        documents = farm_documents["batches"][BirdCategory.FATTENING]
        first = synthesizer.livestock_products(documents, BirdCategory.FATTENING)
        second = synthesizer.livestock_products(documents, BirdCategory.FATTENING)
        assert first == second


# =============================================================================
# EGG TESTS
# =============================================================================

class TestEggProducts:
    """Test egg products."""

    def test_reference_scenario(self, synthesizer, farm_documents):
        """45 eggs in one day -> 45 units at 0.20 and one case at 6.00."""
        rows = farm_documents["production"]["L1"]
        units, cases = synthesizer.egg_products(_laying_batch(), rows)

        assert units.sale_unit == EggSaleUnit.UNITS
        assert units.id == "eggs-units-L1-2026-10-17"
        assert units.available == 45
        assert units.unit_price == Decimal("0.20")
        assert units.record_ids == ("P1", "P2")
        assert units.quality == "fresh"

        assert cases.sale_unit == EggSaleUnit.CASES
        assert cases.id == "eggs-cases-L1-2026-10-17"
        assert cases.available == 1
        assert cases.unit_price == Decimal("6.00")
        assert cases.units_per_case == 30
        assert cases.unit_label == "case"

    def test_case_price_comes_from_calculator(self, price_config, clock, farm_documents):
        class CaseDealCalculator(PricingCalculator):
            def egg_case_price(self):
                return Decimal("5.50")

        synthesizer = ProductSynthesizer(CaseDealCalculator(price_config), clock=clock)
        _, cases = synthesizer.egg_products(_laying_batch(), farm_documents["production"]["L1"])
        assert cases.unit_price == Decimal("5.50")

    def test_below_case_size_yields_units_only(self, synthesizer):
        rows = [make_production("P1", "2026-10-17T07:00:00Z", large=29)]
        products = synthesizer.egg_products(_laying_batch(), rows)
        assert [p.sale_unit for p in products] == [EggSaleUnit.UNITS]

    def test_exact_case_size_yields_one_case(self, synthesizer):
        rows = [make_production("P1", "2026-10-17T07:00:00Z", large=30)]
        units, cases = synthesizer.egg_products(_laying_batch(), rows)
        assert units.available == 30
        assert cases.available == 1

    def test_zero_eggs_emit_nothing(self, synthesizer):
        rows = [make_production("P1", "2026-10-17T07:00:00Z")]
        assert synthesizer.egg_products(_laying_batch(), rows) == []

    def test_one_product_group_per_day(self, synthesizer):
        rows = [
            make_production("P3", "2026-10-17T08:00:00Z", large=5),
            make_production("P1", "2026-10-16T08:00:00Z", large=5),
            make_production("P2", "2026-10-16T18:00:00Z", large=5),
        ]
        products = synthesizer.egg_products(_laying_batch(), rows)
        assert [p.collection_day for p in products] == [
            CalendarDay(2026, 10, 16),
            CalendarDay(2026, 10, 17),
        ]
        assert products[0].available == 10
        assert products[0].record_ids == ("P1", "P2")

    def test_sold_eggs_not_offered_again(self, synthesizer):
        rows = [make_production("P1", "2026-10-17T07:00:00Z", large=40, sold=15)]
        products = synthesizer.egg_products(_laying_batch(), rows)
        assert [p.available for p in products] == [25]

    def test_malformed_production_skipped(self, synthesizer):
        rows = [
            make_production("P1", "2026-10-17T07:00:00Z", large=10),
            {"id": "P2", "collected_at": "yesterday", "large": 50},
        ]
        products = synthesizer.egg_products(_laying_batch(), rows)
        assert [p.available for p in products] == [10]


class TestGroupByDay:
    """Test day bucketing."""

    def test_groups_by_utc_day(self):
        records = [
            ProductionRecord.from_dict(make_production("A", "2026-10-17T23:30:00-05:00", large=3)),
            ProductionRecord.from_dict(make_production("B", "2026-10-18T01:00:00Z", large=4)),
        ]
        groups = group_by_day(records)
        assert list(groups) == [CalendarDay(2026, 10, 18)]
        assert groups[CalendarDay(2026, 10, 18)].total == 7

    def test_empty_records_skipped(self):
        records = [ProductionRecord.from_dict(make_production("A", "2026-10-17T08:00:00Z"))]
        assert group_by_day(records) == {}
