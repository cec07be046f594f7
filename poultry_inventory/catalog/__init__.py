"""Catalogue synthesis and read-side queries."""

from .synthesizer import DayGroup, ProductSynthesizer, group_by_day
from .queries import (
    filter_by_category,
    filter_by_kind,
    find_product,
    search_products,
    summarize,
)

__all__ = [
    "DayGroup",
    "ProductSynthesizer",
    "group_by_day",
    "filter_by_category",
    "filter_by_kind",
    "find_product",
    "search_products",
    "summarize",
]
