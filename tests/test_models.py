"""
Tests for batch, production and product models.
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from poultry_inventory.errors import MalformedRecord
from poultry_inventory.models import (
    Batch,
    BatchStatus,
    BirdCategory,
    EggProduct,
    EggSaleUnit,
    ProductionRecord,
    ProductKind,
    egg_product_id,
    product_kind_of,
)
from poultry_inventory.utils.dates import CalendarDay, age_in_days, parse_date

from conftest import make_batch, make_production


# =============================================================================
# CALENDAR DAY TESTS
# =============================================================================

class TestCalendarDay:
    """Test UTC day bucketing."""

    def test_aware_datetime_converted_to_utc(self):
        # 23:30 at UTC-5 is already the next day in UTC
        value = datetime.fromisoformat("2026-10-17T23:30:00-05:00")
        assert CalendarDay.from_datetime(value) == CalendarDay(2026, 10, 18)

    def test_naive_datetime_taken_as_utc(self):
        assert CalendarDay.from_datetime(datetime(2026, 10, 17, 23, 59)) == CalendarDay(2026, 10, 17)

    def test_isoformat_and_ordering(self):
        assert CalendarDay(2026, 1, 5).isoformat() == "2026-01-05"
        assert CalendarDay(2026, 1, 5) < CalendarDay(2026, 2, 1)

    def test_age_never_negative(self):
        assert age_in_days(date(2026, 10, 1), date(2026, 10, 18)) == 17
        assert age_in_days(date(2026, 10, 20), date(2026, 10, 18)) == 0

    def test_parse_date_accepts_iso_strings(self):
        assert parse_date("2026-09-18") == date(2026, 9, 18)
        assert parse_date("2026-09-18T22:00:00Z") == date(2026, 9, 18)
        assert parse_date("not a date") is None


# =============================================================================
# BATCH PARSING TESTS
# =============================================================================

class TestBatchParsing:
    """Test strict batch document parsing."""

    def test_parses_complete_document(self):
        batch = Batch.from_dict(make_batch("L1", average_weight="4.2"), BirdCategory.LAYING)
        assert batch.id == "L1"
        assert batch.status == BatchStatus.ACTIVE
        assert batch.head_count == 50
        assert batch.initial_count == 50
        assert batch.birth_date == date(2026, 8, 19)
        assert batch.average_weight == Decimal("4.2")
        assert batch.is_sellable

    def test_missing_head_count_is_malformed(self):
        document = make_batch("L1")
        del document["head_count"]
        with pytest.raises(MalformedRecord) as exc_info:
            Batch.from_dict(document, BirdCategory.LAYING)
        assert exc_info.value.field == "head_count"
        assert exc_info.value.record_id == "L1"

    def test_unknown_status_is_malformed(self):
        with pytest.raises(MalformedRecord):
            Batch.from_dict(make_batch("L1", status="sleeping"), BirdCategory.LAYING)

    def test_status_is_case_insensitive(self):
        batch = Batch.from_dict(make_batch("L1", status="ACTIVE"), BirdCategory.LAYING)
        assert batch.status == BatchStatus.ACTIVE

    def test_birth_date_defaults_to_start_date(self):
        document = make_batch("L1")
        del document["birth_date"]
        batch = Batch.from_dict(document, BirdCategory.LAYING)
        assert batch.birth_date == batch.start_date

    def test_zero_weight_means_unweighed(self):
        batch = Batch.from_dict(make_batch("F1", average_weight=0), BirdCategory.FATTENING)
        assert batch.average_weight is None

    def test_empty_batch_not_sellable(self):
        batch = Batch.from_dict(make_batch("L1", head_count=0), BirdCategory.LAYING)
        assert not batch.is_sellable

    @pytest.mark.parametrize("head_count", [float("inf"), float("nan"), "1e400"])
    def test_out_of_range_head_count_is_malformed(self, head_count):
        with pytest.raises(MalformedRecord):
            Batch.from_dict(make_batch("G1", head_count=head_count), BirdCategory.GROWING)

    @pytest.mark.parametrize("weight", [float("nan"), float("inf"), "-Infinity"])
    def test_non_finite_weight_is_malformed(self, weight):
        with pytest.raises(MalformedRecord):
            Batch.from_dict(make_batch("F1", average_weight=weight), BirdCategory.FATTENING)


# =============================================================================
# PRODUCTION RECORD TESTS
# =============================================================================

class TestProductionRecord:
    """Test production totals and availability."""

    def test_total_sums_size_tiers(self):
        record = ProductionRecord.from_dict(
            make_production("P1", "2026-10-17T07:00:00Z", small=1, medium=2, large=3, extra_large=4),
            batch_id="L1",
        )
        assert record.total == 10
        assert record.available == 10
        assert record.batch_id == "L1"
        assert record.day == CalendarDay(2026, 10, 17)

    def test_sold_eggs_reduce_availability(self):
        record = ProductionRecord.from_dict(
            make_production("P1", "2026-10-17T07:00:00Z", large=30, sold=12)
        )
        assert record.available == 18

    def test_consumed_record_has_nothing_available(self):
        record = ProductionRecord.from_dict(
            {**make_production("P1", "2026-10-17T07:00:00Z", large=30), "consumed": True}
        )
        assert record.available == 0

    def test_missing_collection_time_is_malformed(self):
        with pytest.raises(MalformedRecord):
            ProductionRecord.from_dict({"id": "P1", "large": 3})

    def test_negative_tier_is_malformed(self):
        with pytest.raises(MalformedRecord):
            ProductionRecord.from_dict(make_production("P1", "2026-10-17T07:00:00Z", large=-3))

    @pytest.mark.parametrize("flag,expected", [
        ("false", 30), ("0", 30), (0, 30), (None, 30),
        ("true", 0), ("Yes", 0), (1, 0),
    ])
    def test_consumed_flag_parsed_from_strings(self, flag, expected):
        record = ProductionRecord.from_dict(
            {**make_production("P1", "2026-10-17T07:00:00Z", large=30), "consumed": flag}
        )
        assert record.available == expected

    def test_unreadable_consumed_flag_is_malformed(self):
        with pytest.raises(MalformedRecord):
            ProductionRecord.from_dict(
                {**make_production("P1", "2026-10-17T07:00:00Z", large=30), "consumed": "maybe"}
            )


# =============================================================================
# PRODUCT TESTS
# =============================================================================

class TestProducts:
    """Test product ids and kind dispatch."""

    def test_egg_product_id_is_deterministic(self):
        day = CalendarDay(2026, 10, 17)
        assert egg_product_id("L1", EggSaleUnit.CASES, day) == "eggs-cases-L1-2026-10-17"

    def test_eggs_per_item(self):
        common = dict(
            id="x", name="Eggs", description="", unit_price=Decimal("6"), available=1,
            batch_id="L1", collection_day=CalendarDay(2026, 10, 17), record_ids=("P1",),
        )
        assert EggProduct(sale_unit=EggSaleUnit.UNITS, **common).eggs_per_item == 1
        cases = EggProduct(sale_unit=EggSaleUnit.CASES, units_per_case=30, **common)
        assert cases.eggs_per_item == 30
        assert product_kind_of(cases) == ProductKind.EGG

    def test_unknown_product_type_rejected(self):
        with pytest.raises(TypeError):
            product_kind_of(object())
