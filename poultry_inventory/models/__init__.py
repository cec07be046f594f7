"""
Poultry Inventory - Data Models

Batches and production records read from the farm database, and the
sellable products synthesized from them.
"""

from .batches import (
    Batch,
    BatchStatus,
    BirdCategory,
    ProductionRecord,
    SIZE_TIERS,
    is_consumed,
    parse_flag,
)
from .products import (
    CATEGORY_LABELS,
    EggProduct,
    EggSaleUnit,
    PerUnitProduct,
    Product,
    ProductKind,
    WholeBatchProduct,
    egg_product_id,
    per_unit_product_id,
    product_kind_of,
    whole_batch_product_id,
)

__all__ = [
    # Source records
    "Batch",
    "BatchStatus",
    "BirdCategory",
    "ProductionRecord",
    "SIZE_TIERS",
    "is_consumed",
    "parse_flag",
    # Products
    "CATEGORY_LABELS",
    "EggProduct",
    "EggSaleUnit",
    "PerUnitProduct",
    "Product",
    "ProductKind",
    "WholeBatchProduct",
    "egg_product_id",
    "per_unit_product_id",
    "product_kind_of",
    "whole_batch_product_id",
]
