"""
SQL Source

Reads batches and production records through SQLAlchemy. Queries are
blocking, so each call runs in a worker thread with its own session.
"""

import asyncio
import logging
from typing import Any, Dict, List, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from poultry_inventory.database.models import BatchRow, ProductionRow
from poultry_inventory.database.session import session_scope
from poultry_inventory.errors import InvalidSale, SourceUnavailable
from poultry_inventory.models.batches import BatchStatus, BirdCategory, ProductionRecord
from poultry_inventory.sources.base import InventorySource, InventoryWriter


logger = logging.getLogger(__name__)


class SQLSource(InventorySource, InventoryWriter):
    """Reader and writer backed by the batches/production_records tables."""

    name = "sql"

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    async def _run(self, operation: str, func, *args):
        try:
            return await asyncio.to_thread(func, *args)
        except SQLAlchemyError as e:
            logger.error(f"SQL {operation} failed: {e}")
            raise SourceUnavailable(f"SQL {operation} failed: {e}", source=self.name) from e

    # -------------------------------------------------------------------------
    # Reader
    # -------------------------------------------------------------------------

    def _query_batches(self, category: BirdCategory) -> List[Dict[str, Any]]:
        with session_scope(self.session_factory) as db:
            rows = db.execute(
                select(BatchRow)
                .where(
                    BatchRow.category == category.value,
                    BatchRow.status == BatchStatus.ACTIVE.value,
                )
                .order_by(BatchRow.start_date, BatchRow.id)
            ).scalars().all()
            return [row.to_dict() for row in rows]

    def _query_production(self, batch_id: str) -> List[Dict[str, Any]]:
        with session_scope(self.session_factory) as db:
            rows = db.execute(
                select(ProductionRow)
                .where(
                    ProductionRow.batch_id == batch_id,
                    ProductionRow.consumed.is_(False),
                )
                .order_by(ProductionRow.collected_at, ProductionRow.id)
            ).scalars().all()
            return [row.to_dict() for row in rows]

    async def fetch_active_batches(self, category: BirdCategory) -> List[Dict[str, Any]]:
        return await self._run(f"batch query ({category.value})", self._query_batches, category)

    async def fetch_production_rows(self, batch_id: str) -> List[Dict[str, Any]]:
        return await self._run(f"production query ({batch_id})", self._query_production, batch_id)

    # -------------------------------------------------------------------------
    # Writer
    # -------------------------------------------------------------------------

    def _get_batch(self, db, batch_id: str) -> BatchRow:
        row = db.get(BatchRow, batch_id)
        if row is None:
            raise KeyError(f"Batch not found: {batch_id}")
        return row

    def _mark_sold(self, batch_id: str) -> None:
        with session_scope(self.session_factory) as db:
            self._get_batch(db, batch_id).status = BatchStatus.SOLD.value

    def _reduce(self, batch_id: str, quantity: int) -> int:
        with session_scope(self.session_factory) as db:
            row = self._get_batch(db, batch_id)
            current = row.head_count or 0
            if quantity > current:
                raise InvalidSale(
                    f"Batch {batch_id} has only {current} birds, cannot sell {quantity}"
                )
            row.head_count = current - quantity
            return row.head_count

    def _consume(self, record_ids: Sequence[str], eggs: int) -> List[str]:
        with session_scope(self.session_factory) as db:
            rows = {
                row.id: row
                for row in db.execute(
                    select(ProductionRow).where(ProductionRow.id.in_(list(record_ids)))
                ).scalars()
            }
            remaining = eggs
            consumed = []
            for record_id in record_ids:
                if remaining <= 0:
                    break
                row = rows.get(record_id)
                if row is None:
                    raise KeyError(f"Production record not found: {record_id}")
                taken = min(remaining, ProductionRecord.from_dict(row.to_dict()).available)
                if taken <= 0:
                    continue
                row.sold = (row.sold or 0) + taken
                remaining -= taken
                if ProductionRecord.from_dict(row.to_dict()).available == 0:
                    row.consumed = True
                    consumed.append(row.id)
            if remaining > 0:
                # Raising rolls the session back
                raise InvalidSale(f"Only {eggs - remaining} eggs available, cannot sell {eggs}")
            return consumed

    async def mark_batch_sold(self, batch_id: str) -> None:
        await self._run("mark batch sold", self._mark_sold, batch_id)
        logger.info(f"Batch {batch_id} marked as sold")

    async def reduce_head_count(self, batch_id: str, quantity: int) -> int:
        remaining = await self._run("head count update", self._reduce, batch_id, quantity)
        logger.info(f"Batch {batch_id} head count reduced by {quantity} to {remaining}")
        return remaining

    async def consume_eggs(self, record_ids: Sequence[str], eggs: int) -> List[str]:
        consumed = await self._run("egg consumption", self._consume, record_ids, eggs)
        logger.info(f"Consumed {eggs} eggs, {len(consumed)} production records exhausted")
        return consumed
