from __future__ import annotations

from datetime import date
from typing import Optional

from ...core.enums import AttendanceStatus
from ...shifts.model import Shift
from ..model import AttendanceRecord
from .base import AttendanceStrategy, StatusDecision


class MissingShiftStrategy(AttendanceStrategy):
    """No shift could be resolved: coverage still gets an absent record."""

    def decide(
        self,
        *,
        record: Optional[AttendanceRecord],
        shift: Optional[Shift],
        work_date: date,
        worked_minutes: int,
    ) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.ABSENT,
            reason=f"No shift assignment for {work_date.isoformat()}",
        )
