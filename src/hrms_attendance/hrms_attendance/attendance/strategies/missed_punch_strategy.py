from __future__ import annotations

from datetime import date
from typing import Optional

from ...common.datetime_utils import format_hhmm
from ...core.enums import AttendanceStatus
from ...shifts.model import Shift
from ..model import AttendanceRecord
from .base import AttendanceStrategy, StatusDecision


class MissedPunchStrategy(AttendanceStrategy):
    """Day ended with a session still open: never present, HR has to review."""

    def decide(
        self,
        *,
        record: Optional[AttendanceRecord],
        shift: Optional[Shift],
        work_date: date,
        worked_minutes: int,
    ) -> StatusDecision:
        since = None
        if record is not None and record.active_session is not None:
            since = record.active_session.check_in
        return StatusDecision(
            status=AttendanceStatus.PENDING_CORRECTION,
            reason=f"Missed clock-out (clocked in at {format_hhmm(since)})",
            correction_requested=True,
        )
