from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from ..core.constants import DEFAULT_FULL_DAY_HOURS, DEFAULT_GRACE_MINUTES, DEFAULT_HALF_DAY_HOURS


@dataclass(frozen=True)
class Shift:
    """Shift policy assigned to an employee. Read-only to the attendance engine."""

    shift_id: int
    shift_name: str
    start_time: time
    end_time: time
    grace_minutes: int = DEFAULT_GRACE_MINUTES
    full_day_hours: float = DEFAULT_FULL_DAY_HOURS
    half_day_hours: float = DEFAULT_HALF_DAY_HOURS
    overtime_enabled: bool = False
    overtime_threshold_minutes: int = 0
    max_break_minutes: int = 60

    @property
    def is_overnight(self) -> bool:
        return self.end_time <= self.start_time

    def starts_at(self, work_date: date) -> datetime:
        return datetime.combine(work_date, self.start_time)

    def ends_at(self, work_date: date) -> datetime:
        """Shift end on work_date; overnight shifts end on the following day."""
        end = datetime.combine(work_date, self.end_time)
        if self.is_overnight:
            end += timedelta(days=1)
        return end

    @property
    def full_day_minutes(self) -> int:
        return int(round(float(self.full_day_hours) * 60))

    @property
    def half_day_minutes(self) -> int:
        return int(round(float(self.half_day_hours) * 60))
