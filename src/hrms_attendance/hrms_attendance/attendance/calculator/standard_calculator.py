from __future__ import annotations

from datetime import date, datetime, timedelta

from ...common.datetime_utils import minutes_between
from ...shifts.model import Shift
from ..model import AttendanceRecord
from .base import TimingMetrics, WorkedTimeCalculator


class StandardWorkedTimeCalculator(WorkedTimeCalculator):
    """Standard rule: (out - in) - break_minutes, not below 0.

    Lateness counts from the end of the grace window. Early exit and overtime
    compare the day's last check-out against shift end.
    """

    def session_worked_minutes(self, *, check_in: datetime, check_out: datetime, break_minutes: int) -> int:
        minutes = minutes_between(check_in, check_out)
        minutes -= int(break_minutes or 0)
        return max(minutes, 0)

    def record_worked_minutes(self, record: AttendanceRecord) -> int:
        return sum(int(s.worked_minutes or 0) for s in record.completed_sessions)

    def record_break_minutes(self, record: AttendanceRecord) -> int:
        return sum(int(s.total_break_minutes or 0) for s in record.sessions)

    def timing(self, record: AttendanceRecord, shift: Shift, work_date: date) -> TimingMetrics:
        late = 0
        first_in = record.first_check_in
        if first_in is not None:
            late_after = shift.starts_at(work_date) + timedelta(minutes=int(shift.grace_minutes or 0))
            if first_in > late_after:
                late = minutes_between(late_after, first_in)

        early = 0
        overtime = 0
        last_out = record.last_check_out
        if last_out is not None:
            shift_end = shift.ends_at(work_date)
            if last_out < shift_end:
                early = minutes_between(last_out, shift_end)
            elif last_out > shift_end and shift.overtime_enabled:
                excess = minutes_between(shift_end, last_out)
                if excess >= int(shift.overtime_threshold_minutes or 0):
                    overtime = excess

        return TimingMetrics(late_minutes=late, early_exit_minutes=early, overtime_minutes=overtime)
