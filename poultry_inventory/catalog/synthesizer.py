"""
Product Synthesizer

Converts raw batch and production documents into catalogue products.

Every product id is derived from the source record id, the product kind and,
for eggs, the collection day, so running the synthesizer twice over the same
documents (on the same day) yields equal product lists.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Callable, Dict, Iterable, List, Mapping, Any

from poultry_inventory.errors import MalformedRecord
from poultry_inventory.models.batches import Batch, BirdCategory, ProductionRecord
from poultry_inventory.models.products import (
    CATEGORY_LABELS,
    EggProduct,
    EggSaleUnit,
    PerUnitProduct,
    Product,
    WholeBatchProduct,
    egg_product_id,
    per_unit_product_id,
    whole_batch_product_id,
)
from poultry_inventory.pricing.calculator import PricingCalculator
from poultry_inventory.utils.dates import CalendarDay, age_in_days, utc_now


logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class DayGroup:
    """Production records of one batch collected on the same day."""
    day: CalendarDay
    total: int = 0
    record_ids: List[str] = field(default_factory=list)


def group_by_day(records: Iterable[ProductionRecord]) -> "OrderedDict[CalendarDay, DayGroup]":
    """
    Bucket production records by UTC calendar day.

    Records are ordered by (collected_at, id) first so record ids inside a
    group, and the groups themselves, come out in a stable order.
    """
    ordered = sorted(records, key=lambda r: (_as_utc(r.collected_at), r.id))
    groups: Dict[CalendarDay, DayGroup] = {}
    for record in ordered:
        available = record.available
        if available <= 0:
            continue
        group = groups.setdefault(record.day, DayGroup(day=record.day))
        group.total += available
        group.record_ids.append(record.id)
    return OrderedDict(sorted(groups.items()))


class ProductSynthesizer:
    """
    Builds products from batches and production records.

    Malformed documents are logged and skipped one at a time; they never
    abort the rest of the category.
    """

    def __init__(
        self,
        pricing: PricingCalculator,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.pricing = pricing
        self._clock = clock

    def _today(self) -> date:
        return CalendarDay.from_datetime(self._clock()).to_date()

    # -------------------------------------------------------------------------
    # Parsing
    # -------------------------------------------------------------------------

    def parse_batches(
        self,
        documents: Iterable[Mapping[str, Any]],
        category: BirdCategory,
    ) -> List[Batch]:
        """Parse batch documents, skipping malformed ones."""
        batches = []
        for document in documents:
            try:
                batches.append(Batch.from_dict(document, category))
            except MalformedRecord as e:
                logger.warning(f"Skipping malformed {category.value} batch: {e}")
        return batches

    def parse_production(
        self,
        documents: Iterable[Mapping[str, Any]],
        batch_id: str,
    ) -> List[ProductionRecord]:
        """Parse production documents, skipping malformed ones."""
        records = []
        for document in documents:
            try:
                records.append(ProductionRecord.from_dict(document, batch_id=batch_id))
            except MalformedRecord as e:
                logger.warning(f"Skipping malformed production record for batch {batch_id}: {e}")
        return records

    # -------------------------------------------------------------------------
    # Livestock
    # -------------------------------------------------------------------------

    def batch_products(self, batch: Batch) -> List[Product]:
        """Whole-batch and per-unit products for one batch, or nothing."""
        if not batch.is_sellable:
            logger.debug(
                f"Batch {batch.id} excluded (status={batch.status.value}, "
                f"head_count={batch.head_count})"
            )
            return []

        pricing = self.pricing.price_batch(batch)
        age = age_in_days(batch.birth_date, self._today())
        label = CATEGORY_LABELS[batch.category]

        whole_batch = WholeBatchProduct(
            id=whole_batch_product_id(batch.id),
            name=f"{batch.name} (whole batch)",
            description=f"Whole batch of {batch.head_count} {label}, {batch.breed} ({age} days)",
            category=batch.category,
            unit_price=pricing.whole_batch_price,
            batch_id=batch.id,
            age_days=age,
            head_count=batch.head_count,
            breed=batch.breed,
            start_date=batch.start_date,
            average_weight=batch.average_weight,
        )
        per_unit = PerUnitProduct(
            id=per_unit_product_id(batch.id),
            name=f"{batch.name} (units)",
            description=f"Individual {label}, {batch.breed} ({age} days)",
            category=batch.category,
            unit_price=pricing.unit_price,
            available=batch.head_count,
            batch_id=batch.id,
            age_days=age,
            head_count=batch.head_count,
            breed=batch.breed,
            start_date=batch.start_date,
            average_weight=batch.average_weight,
        )
        return [whole_batch, per_unit]

    def livestock_products(
        self,
        documents: Iterable[Mapping[str, Any]],
        category: BirdCategory,
    ) -> List[Product]:
        """All products for one livestock category."""
        products: List[Product] = []
        for batch in self.parse_batches(documents, category):
            products.extend(self.batch_products(batch))
        return products

    # -------------------------------------------------------------------------
    # Eggs
    # -------------------------------------------------------------------------

    def egg_products(
        self,
        batch: Batch,
        documents: Iterable[Mapping[str, Any]],
    ) -> List[EggProduct]:
        """Unit and case egg products for each collection day of a batch."""
        records = self.parse_production(documents, batch.id)
        groups = group_by_day(records)
        if not groups:
            return []

        price_per_egg = self.pricing.egg_unit_price()
        units_per_case = self.pricing.units_per_case()
        case_price = self.pricing.egg_case_price()

        products: List[EggProduct] = []
        for day, group in groups.items():
            record_ids = tuple(group.record_ids)
            products.append(EggProduct(
                id=egg_product_id(batch.id, EggSaleUnit.UNITS, day),
                name=f"Eggs - {batch.name}",
                description=f"{group.total} eggs collected {day.isoformat()}",
                unit_price=price_per_egg,
                available=group.total,
                batch_id=batch.id,
                collection_day=day,
                sale_unit=EggSaleUnit.UNITS,
                record_ids=record_ids,
            ))

            cases = group.total // units_per_case
            if cases > 0:
                products.append(EggProduct(
                    id=egg_product_id(batch.id, EggSaleUnit.CASES, day),
                    name=f"Egg cases - {batch.name}",
                    description=(
                        f"{cases} cases ({units_per_case} eggs/case) "
                        f"collected {day.isoformat()}"
                    ),
                    unit_price=case_price,
                    available=cases,
                    batch_id=batch.id,
                    collection_day=day,
                    sale_unit=EggSaleUnit.CASES,
                    record_ids=record_ids,
                    units_per_case=units_per_case,
                    unit_label="case",
                ))

        return products
