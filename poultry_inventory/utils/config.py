"""
Configuration Management

Uses Pydantic Settings for environment-based configuration.
Loads from .env file automatically.
"""

from typing import Optional
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Application Settings
    LOG_LEVEL: str = "INFO"

    # Source reader selection: memory, sql or http
    INVENTORY_SOURCE: str = "memory"

    # SQL reader
    DATABASE_URL: Optional[str] = None
    SQLITE_PATH: str = "poultry_inventory.db"

    # HTTP document API reader
    INVENTORY_API_URL: Optional[str] = None
    INVENTORY_API_TOKEN: Optional[str] = None
    API_TIMEOUT: int = 30

    # Cache TTLs
    LIVESTOCK_CACHE_TTL_SECONDS: int = 300
    EGG_CACHE_TTL_SECONDS: int = 120

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra fields in .env file
        case_sensitive = False  # Allow both UPPERCASE and lowercase


@lru_cache
def get_settings() -> Settings:
    """Get or create cached settings instance."""
    return Settings()
