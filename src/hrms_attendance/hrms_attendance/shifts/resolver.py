from __future__ import annotations

from datetime import date
from typing import Optional

from ..schedules.repository import ScheduleRepository
from ..users.repository import UserRepository
from .model import Shift
from .repository import ShiftRepository


class ShiftResolver:
    """Answers "which shift applies to this employee on this date".

    A per-date schedule assignment wins over the employee's default shift.
    Nothing is cached: every call reads the current assignment.
    """

    def __init__(self, shifts: ShiftRepository, users: UserRepository, schedules: ScheduleRepository | None = None):
        self._shifts = shifts
        self._users = users
        self._schedules = schedules

    def get_active_shift_for_employee(self, user_id: int, work_date: date) -> Optional[Shift]:
        if self._schedules:
            sc = self._schedules.get_for_user_and_date(user_id=user_id, work_date=work_date)
            if sc:
                return self._shifts.get_by_id(sc.shift_id)

        user = self._users.get_by_id(user_id)
        if user and user.shift_id:
            return self._shifts.get_by_id(user.shift_id)
        return None
