"""
Catalogue Queries

Read-side helpers over a product list: search, filtering, lookup and a
breakdown summary for logs and dashboards.
"""

from collections import Counter
from typing import Dict, Iterable, List, Optional

from poultry_inventory.models.batches import BirdCategory
from poultry_inventory.models.products import Product, ProductKind, product_kind_of


def search_products(products: Iterable[Product], term: str) -> List[Product]:
    """Case-insensitive match on name or description. Blank term returns all."""
    products = list(products)
    needle = term.strip().lower()
    if not needle:
        return products
    return [
        p for p in products
        if needle in p.name.lower() or needle in (p.description or "").lower()
    ]


def filter_by_kind(products: Iterable[Product], kind: ProductKind) -> List[Product]:
    return [p for p in products if product_kind_of(p) == kind]


def filter_by_category(products: Iterable[Product], category: BirdCategory) -> List[Product]:
    return [p for p in products if p.category == category]


def find_product(products: Iterable[Product], product_id: str) -> Optional[Product]:
    for product in products:
        if product.id == product_id:
            return product
    return None


def summarize(products: Iterable[Product]) -> Dict[str, int]:
    """Product counts per kind plus a total."""
    counts = Counter(product_kind_of(p).value for p in products)
    summary = {kind.value: counts.get(kind.value, 0) for kind in ProductKind}
    summary["total"] = sum(counts.values())
    return summary
