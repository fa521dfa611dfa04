from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterator


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end (rounded), never negative."""
    seconds = (end - start).total_seconds()
    return max(int(round(seconds / 60)), 0)


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Inclusive day-by-day iteration."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def format_hhmm(value: datetime | time | None) -> str:
    if value is None:
        return "-"
    return value.strftime("%H:%M")
