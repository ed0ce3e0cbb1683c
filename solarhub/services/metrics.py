"""
Production metrics service.
Windowed aggregation of daily production records (generation, consumption,
savings, efficiency). Recomputed from the full record set on every call.
"""
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Tuple

import structlog

from ..config import settings
from ..errors import InvalidWindow
from ..models.models import ProductionRecord
from .clock import Clock, resolve_clock

logger = structlog.get_logger(__name__)

DAYS_PER_MONTH = 30


@dataclass
class ProductionSummary:
    window_days: int
    record_count: int = 0
    total_generation: float = 0.0
    total_consumption: float = 0.0
    total_savings: float = 0.0  # measured, summed from records
    avg_daily_generation: float = 0.0
    avg_daily_consumption: float = 0.0
    estimated_monthly_savings: float = 0.0  # projection, not measured
    efficiency_percent: float = 0.0
    records: List[ProductionRecord] = field(default_factory=list)

    def to_dict(self, include_records: bool = False) -> dict:
        data = {
            "window_days": self.window_days,
            "record_count": self.record_count,
            "total_generation": self.total_generation,
            "total_consumption": self.total_consumption,
            "total_savings": self.total_savings,
            "avg_daily_generation": self.avg_daily_generation,
            "avg_daily_consumption": self.avg_daily_consumption,
            "estimated_monthly_savings": self.estimated_monthly_savings,
            "efficiency_percent": self.efficiency_percent,
        }
        if include_records:
            data["records"] = [record_to_dict(r) for r in self.records]
        return data


def record_to_dict(record: ProductionRecord) -> dict:
    status = record.system_status
    return {
        "id": record.id,
        "project_id": record.project_id,
        "date": record.date.isoformat() if record.date else None,
        "generation_kwh": record.generation_kwh,
        "consumption_kwh": record.consumption_kwh,
        "savings": record.savings,
        "system_status": getattr(status, "value", status),
    }


def validate_window(window_days: int, choices: Optional[Iterable[int]] = None) -> int:
    """
    Check window_days against the configured window choices.

    Raises:
        InvalidWindow: If window_days is not one of the choices
    """
    allowed = sorted(choices if choices is not None else settings.aggregation_windows)
    try:
        days = int(window_days)
    except (TypeError, ValueError):
        raise InvalidWindow(f"Invalid window '{window_days}'. Must be one of: {allowed}")
    if days not in allowed:
        raise InvalidWindow(f"Invalid window '{window_days}'. Must be one of: {allowed}")
    return days


def _as_instant(value) -> datetime:
    # A bare date is taken as midnight of that day
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    return datetime.fromisoformat(str(value))


def window_cutoff(window_days: int, now: datetime) -> datetime:
    """Earliest instant kept by a window: now minus window_days days."""
    return now - timedelta(days=window_days)


def filter_window(records: Iterable[ProductionRecord], window_days: int, *, now: datetime) -> List[ProductionRecord]:
    """
    Keep records dated on or after now - window_days.

    There is no upper bound: future-dated records are kept. Duplicates
    are kept as-is.
    """
    cutoff = window_cutoff(window_days, now)
    return [r for r in records if _as_instant(r.date) >= cutoff]


def sort_recent_first(records: Iterable[ProductionRecord]) -> List[ProductionRecord]:
    """Date descending; records sharing a date keep their relative order."""
    return sorted(records, key=lambda r: _as_instant(r.date), reverse=True)


def find_duplicate_dates(records: Iterable[ProductionRecord]) -> Dict[Tuple[Optional[str], date], int]:
    """(project_id, date) pairs that appear more than once, with their counts."""
    counts = Counter((r.project_id, r.date) for r in records)
    return {key: n for key, n in counts.items() if n > 1}


def efficiency_percent(total_generation: float, total_consumption: float) -> float:
    """
    Generation as a percentage of consumption.

    Zero consumption is floored to 1 so the result stays finite; with no
    consumption data the value is generation x 100 and carries no meaning.
    """
    return (total_generation / (total_consumption or 1)) * 100


def aggregate(
    records: Iterable[ProductionRecord],
    window_days: int,
    *,
    clock: Optional[Clock] = None,
    unit_price: Optional[float] = None,
    validate: bool = True,
) -> ProductionSummary:
    """
    Summarize production over a trailing window.

    Args:
        records: Full production record set for the scope being viewed
        window_days: Trailing window (one of settings.aggregation_windows)
        clock: Source of "now" for the cutoff
        unit_price: Currency per kWh for the monthly projection
            (default settings.unit_price_per_kwh)
        validate: Reject windows outside the configured choices

    Returns:
        ProductionSummary; its records are the filtered set, most recent first

    Raises:
        InvalidWindow: If validate and window_days is not an allowed choice
    """
    if validate:
        window_days = validate_window(window_days)
    if unit_price is None:
        unit_price = settings.unit_price_per_kwh

    now = resolve_clock(clock).now()
    kept = sort_recent_first(filter_window(records, window_days, now=now))

    duplicates = find_duplicate_dates(kept)
    if duplicates:
        logger.warning(
            "duplicate_production_dates",
            window_days=window_days,
            pairs=len(duplicates),
            extra_records=sum(n - 1 for n in duplicates.values()),
        )

    count = len(kept)
    total_generation = sum(r.generation_kwh or 0.0 for r in kept)
    total_consumption = sum(r.consumption_kwh or 0.0 for r in kept)
    total_savings = sum(r.savings or 0.0 for r in kept)
    avg_generation = total_generation / count if count else 0.0
    avg_consumption = total_consumption / count if count else 0.0

    return ProductionSummary(
        window_days=window_days,
        record_count=count,
        total_generation=total_generation,
        total_consumption=total_consumption,
        total_savings=total_savings,
        avg_daily_generation=avg_generation,
        avg_daily_consumption=avg_consumption,
        estimated_monthly_savings=avg_generation * DAYS_PER_MONTH * unit_price,
        efficiency_percent=efficiency_percent(total_generation, total_consumption),
        records=kept,
    )
