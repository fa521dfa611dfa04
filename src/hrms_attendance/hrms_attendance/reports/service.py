from __future__ import annotations

import calendar as _calendar
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..users.repository import UserRepository


def _hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass
class MonthlySummary:
    user_id: int
    year: int
    month: int
    status_counts: Dict[AttendanceStatus, int] = field(default_factory=lambda: {s: 0 for s in AttendanceStatus})
    late_days: int = 0
    early_departures: int = 0
    worked_minutes: int = 0
    late_minutes: int = 0
    early_exit_minutes: int = 0
    overtime_minutes: int = 0

    def add(self, record: AttendanceRecord) -> None:
        self.status_counts[record.status] += 1
        if record.is_late:
            self.late_days += 1
        if record.is_early_departure:
            self.early_departures += 1
        self.worked_minutes += int(record.worked_minutes or 0)
        self.late_minutes += int(record.late_minutes or 0)
        self.early_exit_minutes += int(record.early_exit_minutes or 0)
        self.overtime_minutes += int(record.overtime_minutes or 0)

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "year": self.year,
            "month": self.month,
            **{status.value: count for status, count in self.status_counts.items()},
            "late_days": self.late_days,
            "early_departures": self.early_departures,
            "worked_minutes": self.worked_minutes,
            "worked_hours": _hhmm(self.worked_minutes),
            "late_minutes": self.late_minutes,
            "early_exit_minutes": self.early_exit_minutes,
            "overtime_minutes": self.overtime_minutes,
        }


def month_bounds(year: int, month: int) -> tuple[date, date]:
    if not 1 <= int(month) <= 12:
        raise ValidationError("Month must be between 1 and 12")
    last_day = _calendar.monthrange(int(year), int(month))[1]
    return date(int(year), int(month), 1), date(int(year), int(month), last_day)


def summarize_records(user_id: int, year: int, month: int, records: Iterable[AttendanceRecord]) -> MonthlySummary:
    summary = MonthlySummary(user_id=int(user_id), year=int(year), month=int(month))
    for r in records:
        summary.add(r)
    return summary


class AttendanceReportService:
    """Per-employee monthly counts of statuses and minute totals."""

    def __init__(self, attendance: AttendanceRepository, users: UserRepository):
        self._attendance = attendance
        self._users = users

    def monthly_summary(self, *, user_id: int, year: int, month: int) -> MonthlySummary:
        start, end = month_bounds(year, month)
        records = self._attendance.list_for_user(int(user_id), start=start, end=end)
        return summarize_records(user_id, year, month, records)

    def monthly_summaries(self, *, year: int, month: int) -> List[MonthlySummary]:
        out = [self.monthly_summary(user_id=uid, year=year, month=month) for uid in self._users.list_active_employee_ids()]
        out.sort(key=lambda s: s.worked_minutes, reverse=True)
        return out
