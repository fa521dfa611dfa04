from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import FrozenSet, Optional


@dataclass(frozen=True)
class Holiday:
    holiday_id: int
    holiday_date: date
    name: str
    is_active: bool = True


@dataclass(frozen=True)
class WorkingRule:
    """Organization-wide weekend rule; weekend_days are Python weekdays (Monday=0)."""

    rule_id: int
    rule_name: str
    weekend_days: FrozenSet[int]
    effective_from: date
    effective_to: Optional[date] = None

    def covers(self, day: date) -> bool:
        if day < self.effective_from:
            return False
        return self.effective_to is None or day <= self.effective_to

    def is_working_day(self, day: date) -> bool:
        return day.weekday() not in self.weekend_days


def parse_weekend_days(value: str | None) -> FrozenSet[int]:
    """Parse "5,6" into {5, 6}; blanks are ignored."""
    days = set()
    for part in (value or "").split(","):
        part = part.strip()
        if not part:
            continue
        day = int(part)
        if not 0 <= day <= 6:
            raise ValueError(f"Invalid weekday number: {day}")
        days.add(day)
    return frozenset(days)
