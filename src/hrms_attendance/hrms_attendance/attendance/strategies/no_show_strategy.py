from __future__ import annotations

from datetime import date
from typing import Optional

from ...core.enums import AttendanceStatus
from ...shifts.model import Shift
from ..model import AttendanceRecord
from .base import AttendanceStrategy, StatusDecision


class NoShowStrategy(AttendanceStrategy):
    """No clock-in, or sessions that add up to no work at all."""

    def decide(
        self,
        *,
        record: Optional[AttendanceRecord],
        shift: Optional[Shift],
        work_date: date,
        worked_minutes: int,
    ) -> StatusDecision:
        if record is None or not record.sessions:
            return StatusDecision(status=AttendanceStatus.ABSENT, reason="No clock-in recorded")
        return StatusDecision(status=AttendanceStatus.ABSENT, reason="No worked time recorded")
