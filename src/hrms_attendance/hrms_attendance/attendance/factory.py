from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..shifts.model import Shift
from .model import AttendanceRecord
from .strategies.base import AttendanceStrategy
from .strategies.missed_punch_strategy import MissedPunchStrategy
from .strategies.missing_shift_strategy import MissingShiftStrategy
from .strategies.no_show_strategy import NoShowStrategy
from .strategies.worked_day_strategy import WorkedDayStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules.

    Order matters: an open session always needs review, even without a shift.
    """

    def for_day(
        self,
        *,
        record: Optional[AttendanceRecord],
        shift: Optional[Shift],
        worked_minutes: int,
    ) -> AttendanceStrategy:
        if record is not None and record.has_open_session:
            return MissedPunchStrategy()
        if not shift:
            return MissingShiftStrategy()
        if record is None or not record.sessions or worked_minutes <= 0:
            return NoShowStrategy()
        return WorkedDayStrategy()
