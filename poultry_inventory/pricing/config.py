"""
Price Configuration

Loaded once from the environment (PRICE_* variables) or built in code.
Every price is optional at load time; the calculator asks for the keys it
needs through require(), which raises ConfigurationMissing.
"""

from decimal import Decimal
from functools import lru_cache
from typing import Any, Optional

from pydantic import Field
from pydantic_settings import BaseSettings

from poultry_inventory.errors import ConfigurationMissing


# Reference prices used by the farm before any were configured
FARM_DEFAULT_PRICES = {
    "laying_unit_price": Decimal("150"),
    "egg_unit_price": Decimal("8"),
    "fattening_price_per_pound": Decimal("65"),
    "fattening_target_weight": Decimal("4.5"),
    "units_per_case": 30,
}


class PriceConfig(BaseSettings):
    """Prices and sale rules shared by every category."""

    # Flat price of one laying hen; growing birds are priced from it
    laying_unit_price: Optional[Decimal] = Field(default=None, gt=0)
    egg_unit_price: Optional[Decimal] = Field(default=None, gt=0)

    # Fattening birds are sold by weight (pounds)
    fattening_price_per_pound: Optional[Decimal] = Field(default=None, gt=0)
    fattening_target_weight: Optional[Decimal] = Field(default=None, gt=0)

    units_per_case: Optional[int] = Field(default=None, gt=0)

    # Whole-batch volume discount; the threshold is exclusive
    volume_discount_threshold: int = Field(default=100, ge=0)
    small_volume_discount: Decimal = Field(default=Decimal("0.05"), ge=0, lt=1)
    large_volume_discount: Decimal = Field(default=Decimal("0.10"), ge=0, lt=1)

    class Config:
        env_prefix = "PRICE_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    def require(self, key: str) -> Any:
        """Return a configured value or raise ConfigurationMissing."""
        value = getattr(self, key, None)
        if value is None:
            raise ConfigurationMissing(key)
        return value

    @classmethod
    def with_farm_defaults(cls, **overrides: Any) -> "PriceConfig":
        """Config pre-filled with the farm's reference prices."""
        return cls(**{**FARM_DEFAULT_PRICES, **overrides})


@lru_cache(maxsize=1)
def get_price_config() -> PriceConfig:
    """Get singleton price configuration."""
    return PriceConfig()
