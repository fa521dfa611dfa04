from __future__ import annotations

from datetime import date
from typing import Optional

from ...core.enums import AttendanceStatus
from ...shifts.model import Shift
from ..model import AttendanceRecord
from .base import AttendanceStrategy, StatusDecision


class WorkedDayStrategy(AttendanceStrategy):
    """Full-day threshold decides present; any other recorded work is half-day.

    Only chosen once a shift is resolved.
    """

    def decide(
        self,
        *,
        record: Optional[AttendanceRecord],
        shift: Optional[Shift],
        work_date: date,
        worked_minutes: int,
    ) -> StatusDecision:
        if worked_minutes >= shift.full_day_minutes:
            return StatusDecision(status=AttendanceStatus.PRESENT)

        # Below half-day still counts as half-day, never silently absent.
        if worked_minutes < shift.half_day_minutes:
            return StatusDecision(status=AttendanceStatus.HALF_DAY, reason="Worked below half-day threshold")
        return StatusDecision(status=AttendanceStatus.HALF_DAY)
