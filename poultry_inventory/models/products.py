"""
Product Models

Sellable catalogue entries. A Product is one of three immutable variants,
discriminated by product_kind:
- WholeBatchProduct: the entire batch sold as a single unit
- PerUnitProduct: individual birds from a batch
- EggProduct: one day's eggs from a laying batch, by unit or by case
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from poultry_inventory.models.batches import BirdCategory
from poultry_inventory.utils.dates import CalendarDay


class ProductKind(str, Enum):
    """Discriminator for the product variants."""
    WHOLE_BATCH = "whole_batch"
    PER_UNIT = "per_unit"
    EGG = "egg"


class EggSaleUnit(str, Enum):
    """How an egg product is sold."""
    UNITS = "units"
    CASES = "cases"


CATEGORY_LABELS = {
    BirdCategory.LAYING: "laying hens",
    BirdCategory.GROWING: "growing birds",
    BirdCategory.FATTENING: "broilers",
}


def whole_batch_product_id(batch_id: str) -> str:
    return f"batch-{batch_id}"


def per_unit_product_id(batch_id: str) -> str:
    return f"units-{batch_id}"


def egg_product_id(batch_id: str, sale_unit: EggSaleUnit, day: CalendarDay) -> str:
    return f"eggs-{sale_unit.value}-{batch_id}-{day.isoformat()}"


@dataclass(frozen=True)
class WholeBatchProduct:
    """An entire active batch offered as one item."""
    id: str
    name: str
    description: str
    category: BirdCategory
    unit_price: Decimal
    batch_id: str
    age_days: int
    head_count: int
    breed: str
    start_date: date
    average_weight: Optional[Decimal] = None
    unit_label: str = "batch"
    available: int = 1
    product_kind: ProductKind = field(default=ProductKind.WHOLE_BATCH, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "product_kind": self.product_kind.value,
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "unit_price": self.unit_price,
            "unit_label": self.unit_label,
            "available": self.available,
            "batch_id": self.batch_id,
            "age_days": self.age_days,
            "head_count": self.head_count,
            "breed": self.breed,
            "start_date": self.start_date.isoformat(),
            "average_weight": self.average_weight,
        }


@dataclass(frozen=True)
class PerUnitProduct:
    """Single birds from a batch; available equals the live head count."""
    id: str
    name: str
    description: str
    category: BirdCategory
    unit_price: Decimal
    available: int
    batch_id: str
    age_days: int
    head_count: int
    breed: str
    start_date: date
    average_weight: Optional[Decimal] = None
    unit_label: str = "unit"
    product_kind: ProductKind = field(default=ProductKind.PER_UNIT, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "product_kind": self.product_kind.value,
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "unit_price": self.unit_price,
            "unit_label": self.unit_label,
            "available": self.available,
            "batch_id": self.batch_id,
            "age_days": self.age_days,
            "head_count": self.head_count,
            "breed": self.breed,
            "start_date": self.start_date.isoformat(),
            "average_weight": self.average_weight,
        }


@dataclass(frozen=True)
class EggProduct:
    """One day's eggs from a laying batch."""
    id: str
    name: str
    description: str
    unit_price: Decimal
    available: int
    batch_id: str
    collection_day: CalendarDay
    sale_unit: EggSaleUnit
    record_ids: Tuple[str, ...]
    units_per_case: Optional[int] = None
    size: str = "mixed"
    quality: str = "fresh"
    unit_label: str = "unit"
    category: BirdCategory = BirdCategory.LAYING
    product_kind: ProductKind = field(default=ProductKind.EGG, init=False)

    @property
    def eggs_per_item(self) -> int:
        """Eggs consumed by selling one item of this product."""
        if self.sale_unit == EggSaleUnit.CASES:
            return self.units_per_case or 1
        return 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "product_kind": self.product_kind.value,
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "unit_price": self.unit_price,
            "unit_label": self.unit_label,
            "available": self.available,
            "batch_id": self.batch_id,
            "collection_day": self.collection_day.isoformat(),
            "sale_unit": self.sale_unit.value,
            "units_per_case": self.units_per_case,
            "size": self.size,
            "quality": self.quality,
            "record_ids": list(self.record_ids),
        }


Product = Union[WholeBatchProduct, PerUnitProduct, EggProduct]


def product_kind_of(product: Product) -> ProductKind:
    """Exhaustive dispatch over the product variants."""
    if isinstance(product, WholeBatchProduct):
        return ProductKind.WHOLE_BATCH
    if isinstance(product, PerUnitProduct):
        return ProductKind.PER_UNIT
    if isinstance(product, EggProduct):
        return ProductKind.EGG
    raise TypeError(f"Unknown product type: {type(product).__name__}")
