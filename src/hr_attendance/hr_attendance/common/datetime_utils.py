from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterator, Optional, Protocol

from ..core.exceptions import ValidationError


class Clock(Protocol):
    def now(self) -> datetime:
        raise NotImplementedError

    def today(self) -> date:
        raise NotImplementedError


class SystemClock:
    """Local wall clock, whole seconds to match the DATETIME columns."""

    def now(self) -> datetime:
        return datetime.now().replace(microsecond=0)

    def today(self) -> date:
        return self.now().date()


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date {value!r} (expected YYYY-MM-DD)")


def parse_optional_date(value: Optional[str], default: Optional[date] = None) -> Optional[date]:
    v = (value or "").strip()
    if not v:
        return default
    return parse_iso_date(v)


def parse_iso_datetime(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid timestamp {value!r} (expected ISO 8601)")


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every calendar day in [start, end]; nothing when start > end."""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def days_in_range(start: date, end: date) -> int:
    return (end - start).days + 1


def format_hours_minutes(total_minutes: int) -> str:
    return f"{total_minutes // 60}h {total_minutes % 60}m"
