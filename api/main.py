"""
Inventory API Application

FastAPI app serving the poultry product catalogue.

Run with:
    uvicorn api.main:app --reload
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from poultry_inventory import __version__
from poultry_inventory.cache import InventoryCache, cache_ttls_from_settings
from poultry_inventory.services import InventoryService
from poultry_inventory.sources import create_source
from poultry_inventory.utils.config import Settings, get_settings

from api.inventory import router as inventory_router


logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Log to stdout; quiet down chatty HTTP loggers."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
        force=True,  # Override any existing config
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def build_service(settings: Optional[Settings] = None) -> InventoryService:
    """InventoryService wired from settings (source reader and cache TTLs)."""
    settings = settings or get_settings()
    source = create_source(settings)
    cache = InventoryCache(ttls=cache_ttls_from_settings(settings))
    logger.info(f"Inventory service using {source.name} source")
    return InventoryService(source, cache=cache)


def create_app(
    service: Optional[InventoryService] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Create the FastAPI app.

    Args:
        service: Pre-built service (tests); built from settings if omitted
        settings: Settings override
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Warm laying and egg slots in the background
        app.state.inventory_service.preload()
        yield
        await app.state.inventory_service.close()

    app = FastAPI(
        title="Poultry Inventory",
        description="Sellable products generated from farm batches and egg production",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.inventory_service = service or build_service(settings)
    app.include_router(inventory_router)

    @app.get("/health")
    def health():
        return {"status": "ok", "version": __version__}

    return app


def _create_default_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    return create_app(settings=settings)


app = _create_default_app()
