from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Callable, Optional

from ..core.exceptions import ValidationError

Clock = Callable[[], datetime]


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")


def parse_iso_datetime(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid datetime (ISO 8601): {value!r}")


def parse_hhmm(value: str) -> time:
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except (AttributeError, ValueError):
        raise ValidationError(f"Invalid time (HH:MM): {value!r}")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so services can take it as an injectable clock.
    """
    return datetime.now()


def year_bounds(year: int) -> tuple[datetime, datetime]:
    """Half-open window [Jan 1 year, Jan 1 year+1)."""
    return datetime(year, 1, 1), datetime(year + 1, 1, 1)


def day_bounds(start: date, end: date) -> tuple[datetime, datetime]:
    """Inclusive date range turned into a half-open datetime window."""
    return datetime.combine(start, time.min), datetime.combine(end + timedelta(days=1), time.min)


def ranges_intersect(a: date, b: date, c: date, d: date) -> bool:
    """Inclusive intersection of [a, b] and [c, d]."""
    return a <= d and c <= b


def hours_between(start: datetime, end: Optional[datetime]) -> float:
    if end is None:
        return 0.0
    return max((end - start).total_seconds(), 0.0) / 3600.0
