"""Pricing rules for batches and eggs."""

from .config import FARM_DEFAULT_PRICES, PriceConfig, get_price_config
from .calculator import BatchPricing, GROWING_PRICE_FACTOR, PricingCalculator

__all__ = [
    "FARM_DEFAULT_PRICES",
    "PriceConfig",
    "get_price_config",
    "BatchPricing",
    "GROWING_PRICE_FACTOR",
    "PricingCalculator",
]
