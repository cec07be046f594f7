"""
Pricing Calculator

Turns a batch and the price configuration into sale prices:
- Per-unit price by category (flat, 80% of flat, or weight x price per pound)
- Whole-batch price with a volume discount
- Per-egg and per-case prices

No rounding is applied; amounts stay Decimal until presentation.
"""

from dataclasses import dataclass
from decimal import Decimal

from poultry_inventory.models.batches import Batch, BirdCategory
from poultry_inventory.pricing.config import PriceConfig


GROWING_PRICE_FACTOR = Decimal("0.8")


@dataclass(frozen=True)
class BatchPricing:
    """Prices for the two products a batch yields."""
    unit_price: Decimal
    whole_batch_price: Decimal
    volume_discount: Decimal


class PricingCalculator:
    """Applies the price configuration to batches and eggs."""

    def __init__(self, config: PriceConfig):
        self.config = config

    def unit_price(self, batch: Batch) -> Decimal:
        """Base price of one bird in the batch."""
        category = batch.category
        if category == BirdCategory.LAYING:
            return self.config.require("laying_unit_price")
        if category == BirdCategory.GROWING:
            return self.config.require("laying_unit_price") * GROWING_PRICE_FACTOR
        if category == BirdCategory.FATTENING:
            weight = batch.average_weight or self.config.require("fattening_target_weight")
            return weight * self.config.require("fattening_price_per_pound")
        raise TypeError(f"Unknown bird category: {category!r}")

    def volume_discount(self, head_count: int) -> Decimal:
        """Discount rate for buying the whole batch."""
        if head_count > self.config.volume_discount_threshold:
            return self.config.large_volume_discount
        return self.config.small_volume_discount

    def whole_batch_price(self, batch: Batch) -> Decimal:
        discount = self.volume_discount(batch.head_count)
        return self.unit_price(batch) * batch.head_count * (1 - discount)

    def price_batch(self, batch: Batch) -> BatchPricing:
        return BatchPricing(
            unit_price=self.unit_price(batch),
            whole_batch_price=self.whole_batch_price(batch),
            volume_discount=self.volume_discount(batch.head_count),
        )

    def egg_unit_price(self) -> Decimal:
        return self.config.require("egg_unit_price")

    def units_per_case(self) -> int:
        return self.config.require("units_per_case")

    def egg_case_price(self) -> Decimal:
        """A case is priced as its eggs; there is no case discount."""
        return self.egg_unit_price() * self.units_per_case()
