"""
Source Readers

Usage:
    from poultry_inventory.sources import create_source

    source = create_source(get_settings())
    batches = await source.fetch_active_batches(BirdCategory.LAYING)
"""

import logging
from typing import Optional

from poultry_inventory.utils.config import Settings, get_settings
from .base import InventorySource, InventoryWriter
from .http import HTTPSource
from .memory import InMemorySource
from .sql import SQLSource

logger = logging.getLogger(__name__)


def create_source(settings: Optional[Settings] = None) -> InventorySource:
    """
    Build the source reader selected by INVENTORY_SOURCE.

    - memory: empty InMemorySource
    - sql: SQLSource on DATABASE_URL (SQLite fallback), tables created if missing
    - http: HTTPSource on INVENTORY_API_URL
    """
    settings = settings or get_settings()
    kind = settings.INVENTORY_SOURCE.lower()

    if kind == "memory":
        return InMemorySource()

    if kind == "sql":
        from poultry_inventory.database import (
            create_db_engine, create_session_factory, get_database_url, init_db,
        )
        engine = create_db_engine(get_database_url(settings))
        init_db(engine)
        return SQLSource(create_session_factory(engine))

    if kind == "http":
        if not settings.INVENTORY_API_URL:
            raise ValueError("INVENTORY_API_URL is required when INVENTORY_SOURCE=http")
        return HTTPSource(
            settings.INVENTORY_API_URL,
            api_token=settings.INVENTORY_API_TOKEN,
            timeout=settings.API_TIMEOUT,
        )

    raise ValueError(f"Unknown INVENTORY_SOURCE: {settings.INVENTORY_SOURCE}")


__all__ = [
    "InventorySource",
    "InventoryWriter",
    "InMemorySource",
    "SQLSource",
    "HTTPSource",
    "create_source",
]
