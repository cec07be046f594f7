"""Utility modules for the poultry inventory engine."""

from .config import Settings, get_settings
from .dates import CalendarDay, age_in_days, parse_date, parse_datetime, utc_now

__all__ = [
    "Settings",
    "get_settings",
    # Dates
    "CalendarDay",
    "age_in_days",
    "parse_date",
    "parse_datetime",
    "utc_now",
]
