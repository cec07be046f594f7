"""
Date Helpers

Calendar-day bucketing for production records and age calculation for batches.
All day arithmetic is done in UTC.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Optional


@dataclass(frozen=True, order=True)
class CalendarDay:
    """A UTC calendar day, usable as a dict key."""
    year: int
    month: int
    day: int

    @classmethod
    def from_datetime(cls, value: datetime) -> "CalendarDay":
        """Truncate a datetime to its UTC day. Naive datetimes are taken as UTC."""
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return cls(value.year, value.month, value.day)

    @classmethod
    def from_date(cls, value: date) -> "CalendarDay":
        return cls(value.year, value.month, value.day)

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)

    def isoformat(self) -> str:
        return self.to_date().isoformat()

    def __str__(self) -> str:
        return self.isoformat()


def utc_now() -> datetime:
    """Timezone-aware current time, the default clock everywhere."""
    return datetime.now(timezone.utc)


def age_in_days(birth_date: date, today: date) -> int:
    """Whole days between midnights, never negative."""
    return max(0, (today - birth_date).days)


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse a datetime, date or ISO string. Returns None when unparseable."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def parse_date(value: Any) -> Optional[date]:
    """Parse a date from a date, datetime or ISO string."""
    if isinstance(value, datetime):
        return CalendarDay.from_datetime(value).to_date()
    if isinstance(value, date):
        return value
    parsed = parse_datetime(value)
    if parsed is None:
        return None
    return CalendarDay.from_datetime(parsed).to_date()
