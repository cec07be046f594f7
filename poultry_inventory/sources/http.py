"""
HTTP Source

Async reader for a farm document API.

Endpoints:
    GET /batches?category=<category>&status=active
    GET /batches/{batch_id}/production

Both accept either a bare JSON list or an object with an "items" list.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from poultry_inventory.errors import SourceUnavailable
from poultry_inventory.models.batches import BatchStatus, BirdCategory, is_consumed
from poultry_inventory.sources.base import InventorySource


logger = logging.getLogger(__name__)


def extract_items(payload: Any) -> List[Dict[str, Any]]:
    """Pull the document list out of a response payload."""
    if isinstance(payload, dict):
        payload = payload.get("items")
    if not isinstance(payload, list):
        raise SourceUnavailable("Unexpected response payload: no document list", source="http")
    return [item for item in payload if isinstance(item, dict)]


class HTTPSource(InventorySource):
    """
    Read-only source backed by a REST document API.

    Usage:
        async with HTTPSource("https://farm.example.com/api", api_token="...") as source:
            batches = await source.fetch_active_batches(BirdCategory.LAYING)
    """

    name = "http"

    def __init__(
        self,
        base_url: str,
        api_token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: Root URL of the document API
            api_token: Bearer token (optional)
            timeout: Request timeout in seconds
            transport: Custom transport (tests use httpx.MockTransport)
        """
        headers = {"Accept": "application/json"}
        if api_token:
            headers["Authorization"] = f"Bearer {api_token}"

        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def _get(self, url: str, params: Optional[Dict[str, str]] = None) -> List[Dict[str, Any]]:
        logger.debug(f"GET {url} {params or ''}")
        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            raise SourceUnavailable(f"GET {url} failed: {e}", source=self.name) from e
        except ValueError as e:
            raise SourceUnavailable(f"GET {url} returned invalid JSON: {e}", source=self.name) from e
        return extract_items(payload)

    async def fetch_active_batches(self, category: BirdCategory) -> List[Dict[str, Any]]:
        return await self._get(
            "/batches",
            params={"category": category.value, "status": BatchStatus.ACTIVE.value},
        )

    async def fetch_production_rows(self, batch_id: str) -> List[Dict[str, Any]]:
        rows = await self._get(f"/batches/{batch_id}/production")
        return [row for row in rows if not is_consumed(row)]

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
