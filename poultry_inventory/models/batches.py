"""
Batch and Production Models

Typed views over the raw documents returned by source readers.
Parsing is strict: a document missing required data raises MalformedRecord
so the caller can skip that single record.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from poultry_inventory.errors import MalformedRecord
from poultry_inventory.utils.dates import CalendarDay, parse_date, parse_datetime


# =============================================================================
# ENUMS
# =============================================================================


class BirdCategory(str, Enum):
    """Livestock category a batch belongs to."""
    LAYING = "laying"  # Egg-laying hens
    GROWING = "growing"  # Young birds being raised
    FATTENING = "fattening"  # Broilers sold by weight


class BatchStatus(str, Enum):
    """Lifecycle status of a batch."""
    ACTIVE = "active"
    FINISHED = "finished"
    CANCELLED = "cancelled"
    SOLD = "sold"
    TRANSFERRED = "transferred"  # Growing birds moved into a laying batch


UNKNOWN_BREED = "Unspecified"


# =============================================================================
# FIELD HELPERS
# =============================================================================


def _require(data: Mapping[str, Any], key: str, record_id: Optional[str]) -> Any:
    value = data.get(key)
    if value is None or value == "":
        raise MalformedRecord(
            f"Record {record_id or '?'} is missing '{key}'",
            record_id=record_id,
            field=key,
        )
    return value


def _as_int(value: Any, key: str, record_id: Optional[str]) -> int:
    if isinstance(value, bool):
        raise MalformedRecord(f"Record {record_id} has non-numeric '{key}'", record_id, key)
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        raise MalformedRecord(f"Record {record_id} has non-numeric '{key}'", record_id, key)
    if number < 0:
        raise MalformedRecord(f"Record {record_id} has negative '{key}'", record_id, key)
    return number


def _as_decimal(value: Any, key: str, record_id: Optional[str]) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise MalformedRecord(f"Record {record_id} has non-numeric '{key}'", record_id, key)
    if not number.is_finite():
        raise MalformedRecord(f"Record {record_id} has non-finite '{key}'", record_id, key)
    # Zero means "not weighed yet"
    return number if number > 0 else None


TRUE_FLAGS = ("true", "t", "yes", "y", "1")
FALSE_FLAGS = ("false", "f", "no", "n", "0", "")


def parse_flag(value: Any) -> bool:
    """
    Read a boolean that may arrive as a JSON string or number.

    Raises ValueError for anything that is not recognisably true or false.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in TRUE_FLAGS:
            return True
        if text in FALSE_FLAGS:
            return False
    raise ValueError(f"Not a boolean flag: {value!r}")


def is_consumed(document: Mapping[str, Any]) -> bool:
    """Source-side filter; rows with an unreadable flag are kept for the parser to reject."""
    try:
        return parse_flag(document.get("consumed"))
    except ValueError:
        return False


# =============================================================================
# BATCH
# =============================================================================


@dataclass(frozen=True)
class Batch:
    """A cohort of birds tracked as one unit."""
    id: str
    name: str
    category: BirdCategory
    status: BatchStatus
    head_count: int
    initial_count: int
    breed: str
    start_date: date
    birth_date: date
    average_weight: Optional[Decimal] = None

    @property
    def is_sellable(self) -> bool:
        """Only active, non-empty batches appear in the catalogue."""
        return self.status == BatchStatus.ACTIVE and self.head_count > 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], category: BirdCategory) -> "Batch":
        """Parse a raw batch document. Raises MalformedRecord."""
        record_id = data.get("id")
        if record_id is None or record_id == "":
            raise MalformedRecord("Batch document has no id", field="id")
        record_id = str(record_id)

        raw_status = _require(data, "status", record_id)
        try:
            status = BatchStatus(str(raw_status).lower())
        except ValueError:
            raise MalformedRecord(
                f"Batch {record_id} has unknown status '{raw_status}'", record_id, "status"
            )

        head_count = _as_int(_require(data, "head_count", record_id), "head_count", record_id)
        initial_count = data.get("initial_count")
        initial_count = (
            _as_int(initial_count, "initial_count", record_id)
            if initial_count is not None
            else head_count
        )

        start_date = parse_date(data.get("start_date") or data.get("created_at"))
        if start_date is None:
            raise MalformedRecord(
                f"Batch {record_id} has no usable start_date", record_id, "start_date"
            )
        birth_date = parse_date(data.get("birth_date")) or start_date

        return cls(
            id=record_id,
            name=str(_require(data, "name", record_id)),
            category=category,
            status=status,
            head_count=head_count,
            initial_count=initial_count,
            breed=str(data.get("breed") or UNKNOWN_BREED),
            start_date=start_date,
            birth_date=birth_date,
            average_weight=_as_decimal(data.get("average_weight"), "average_weight", record_id),
        )


# =============================================================================
# PRODUCTION RECORD
# =============================================================================


SIZE_TIERS = ("small", "medium", "large", "extra_large")


@dataclass(frozen=True)
class ProductionRecord:
    """One egg-collection entry for a laying batch."""
    id: str
    batch_id: str
    collected_at: datetime
    small: int = 0
    medium: int = 0
    large: int = 0
    extra_large: int = 0
    sold: int = 0
    consumed: bool = False

    @property
    def total(self) -> int:
        return self.small + self.medium + self.large + self.extra_large

    @property
    def available(self) -> int:
        """Eggs still sellable from this record."""
        if self.consumed:
            return 0
        return max(0, self.total - self.sold)

    @property
    def day(self) -> CalendarDay:
        return CalendarDay.from_datetime(self.collected_at)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], batch_id: Optional[str] = None) -> "ProductionRecord":
        """Parse a raw production document. Raises MalformedRecord."""
        record_id = data.get("id")
        if record_id is None or record_id == "":
            raise MalformedRecord("Production document has no id", field="id")
        record_id = str(record_id)

        collected_at = parse_datetime(_require(data, "collected_at", record_id))
        if collected_at is None:
            raise MalformedRecord(
                f"Production record {record_id} has unparseable 'collected_at'",
                record_id,
                "collected_at",
            )

        tiers: Dict[str, int] = {
            tier: _as_int(data.get(tier) or 0, tier, record_id) for tier in SIZE_TIERS
        }

        try:
            consumed = parse_flag(data.get("consumed"))
        except ValueError:
            raise MalformedRecord(
                f"Production record {record_id} has invalid 'consumed'", record_id, "consumed"
            )

        return cls(
            id=record_id,
            batch_id=str(data.get("batch_id") or batch_id or ""),
            collected_at=collected_at,
            sold=_as_int(data.get("sold") or 0, "sold", record_id),
            consumed=consumed,
            **tiers,
        )
