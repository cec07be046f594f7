"""
Sale Recorder

Applies a sale to the persistence layer and invalidates the cache slots
it affects. The catalogue itself never decrements inventory; it only
regenerates from the source on the next miss.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional

from poultry_inventory.cache import CacheInvalidator, CacheSlotName, InventoryEvent
from poultry_inventory.errors import InvalidSale
from poultry_inventory.models.products import (
    EggProduct,
    PerUnitProduct,
    Product,
    ProductKind,
    WholeBatchProduct,
    product_kind_of,
)
from poultry_inventory.sources.base import InventoryWriter
from poultry_inventory.utils.dates import utc_now


logger = logging.getLogger(__name__)


@dataclass
class SaleReceipt:
    """Outcome of a recorded sale."""
    product_id: str
    product_kind: ProductKind
    quantity: int
    unit_price: Decimal
    total: Decimal
    recorded_at: datetime
    remaining_head_count: Optional[int] = None
    eggs_consumed: int = 0
    consumed_record_ids: List[str] = field(default_factory=list)
    invalidated_slots: List[CacheSlotName] = field(default_factory=list)

    def to_dict(self):
        return {
            "product_id": self.product_id,
            "product_kind": self.product_kind.value,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "total": self.total,
            "recorded_at": self.recorded_at.isoformat(),
            "remaining_head_count": self.remaining_head_count,
            "eggs_consumed": self.eggs_consumed,
            "consumed_record_ids": list(self.consumed_record_ids),
            "invalidated_slots": [s.value for s in self.invalidated_slots],
        }


class SaleRecorder:
    """
    Records sales against an InventoryWriter.

    - Whole batch: the batch is marked sold (quantity must be 1)
    - Per unit: the batch head count is reduced
    - Eggs: eggs are taken from the product's records, oldest first
    """

    def __init__(
        self,
        writer: InventoryWriter,
        invalidator: CacheInvalidator,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.writer = writer
        self.invalidator = invalidator
        self._clock = clock

    async def record_sale(self, product: Product, quantity: int) -> SaleReceipt:
        """
        Apply a sale and invalidate the affected slots.

        Raises:
            InvalidSale: quantity outside 1..available
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise InvalidSale(f"Quantity must be an integer, got {quantity!r}")
        if quantity < 1 or quantity > product.available:
            raise InvalidSale(
                f"Cannot sell {quantity} of {product.id}: {product.available} available"
            )

        kind = product_kind_of(product)
        receipt = SaleReceipt(
            product_id=product.id,
            product_kind=kind,
            quantity=quantity,
            unit_price=product.unit_price,
            total=product.unit_price * quantity,
            recorded_at=self._clock(),
        )

        if isinstance(product, WholeBatchProduct):
            await self.writer.mark_batch_sold(product.batch_id)
            receipt.remaining_head_count = 0

        elif isinstance(product, PerUnitProduct):
            receipt.remaining_head_count = await self.writer.reduce_head_count(
                product.batch_id, quantity
            )

        elif isinstance(product, EggProduct):
            eggs = quantity * product.eggs_per_item
            receipt.consumed_record_ids = await self.writer.consume_eggs(
                list(product.record_ids), eggs
            )
            receipt.eggs_consumed = eggs

        result = await self.invalidator.handle_event(
            InventoryEvent.SALE_RECORDED, category=product.category, product=product
        )
        receipt.invalidated_slots = result.slots

        logger.info(
            f"Sale recorded: {quantity} x {product.id} ({kind.value}) "
            f"total={receipt.total}"
        )
        return receipt
