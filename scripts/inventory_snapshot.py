#!/usr/bin/env python3
"""
Inventory Snapshot

Load batches and production records from a JSON fixture, generate the
catalogue and print a summary.

Fixture format:
    {
        "batches": {"laying": [...], "growing": [...], "fattening": [...]},
        "production": {"<batch id>": [...]},
        "prices": {"egg_unit_price": "8", ...}     (optional)
    }

Usage:
    python scripts/inventory_snapshot.py scripts/fixtures/farm.json
    python scripts/inventory_snapshot.py farm.json --search eggs --output catalogue.json
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from poultry_inventory.catalog import search_products, summarize
from poultry_inventory.errors import InventoryError
from poultry_inventory.models import BirdCategory
from poultry_inventory.pricing import PriceConfig, get_price_config
from poultry_inventory.services import InventoryService
from poultry_inventory.sources import InMemorySource


logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def load_fixture(path: Path) -> Dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def source_from_fixture(fixture: Dict[str, Any]) -> InMemorySource:
    """InMemorySource holding the fixture's batches and production records."""
    batches = {
        BirdCategory(category): documents
        for category, documents in (fixture.get("batches") or {}).items()
    }
    return InMemorySource(batches=batches, production=fixture.get("production") or {})


def prices_from_fixture(fixture: Dict[str, Any]) -> PriceConfig:
    """Farm reference prices overridden by the fixture's "prices" block."""
    return PriceConfig.with_farm_defaults(**(fixture.get("prices") or {}))


async def build_snapshot(
    fixture: Dict[str, Any],
    search: Optional[str] = None,
    env_prices: bool = False,
) -> Dict[str, Any]:
    """
    Generate the catalogue for a fixture.

    Returns:
        Dict with summary counts and product dicts
    """
    config = get_price_config() if env_prices else prices_from_fixture(fixture)
    service = InventoryService(source_from_fixture(fixture), price_config_provider=lambda: config)

    products = await service.get_products()
    if search:
        products = search_products(products, search)

    return {
        "summary": summarize(products),
        "products": [p.to_dict() for p in products],
    }


def print_snapshot(snapshot: Dict[str, Any]):
    """Human-readable catalogue listing."""
    products: List[Dict[str, Any]] = snapshot["products"]

    print(f"\n{'='*60}")
    print("INVENTORY SNAPSHOT")
    print(f"{'='*60}")
    for product in products:
        print(
            f"  {product['id']:<45} {product['available']:>6} x "
            f"{product['unit_price']} / {product['unit_label']}"
        )
    print(f"{'-'*60}")
    for kind, count in snapshot["summary"].items():
        print(f"  {kind:<15} {count}")
    print(f"{'='*60}\n")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Generate the product catalogue from a JSON fixture"
    )
    parser.add_argument(
        "fixture",
        help="Path to the JSON fixture"
    )
    parser.add_argument(
        "--search", "-s",
        help="Only list products matching this term"
    )
    parser.add_argument(
        "--env-prices",
        action="store_true",
        help="Read prices from PRICE_* environment variables instead of the fixture"
    )
    parser.add_argument(
        "--output", "-o",
        help="Save the snapshot to a JSON file"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging"
    )

    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    try:
        snapshot = asyncio.run(build_snapshot(
            load_fixture(Path(args.fixture)),
            search=args.search,
            env_prices=args.env_prices,
        ))
    except (OSError, ValueError, InventoryError) as e:
        logger.error(f"Snapshot failed: {e}")
        return 1

    print_snapshot(snapshot)

    if args.output:
        output_path = Path(args.output)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(snapshot, f, indent=2, default=str)
        print(f"Snapshot saved to: {output_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
