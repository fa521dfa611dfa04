from datetime import date, datetime, time

from src.hrms_attendance.hrms_attendance.schedules.model import Schedule
from src.hrms_attendance.hrms_attendance.shifts.model import Shift
from src.hrms_attendance.hrms_attendance.shifts.resolver import ShiftResolver

NIGHT = Shift(shift_id=2, shift_name="Night", start_time=time(22, 0), end_time=time(6, 0))


def test_default_shift_comes_from_employee(shifts_repo, users_repo, schedules_repo):
    resolver = ShiftResolver(shifts_repo, users_repo, schedules_repo)

    shift = resolver.get_active_shift_for_employee(1, date(2026, 1, 27))

    assert shift.shift_name == "Day"


def test_schedule_for_the_date_wins(shifts_repo, users_repo, schedules_repo):
    shifts_repo.add(NIGHT)
    schedules_repo.assign(Schedule(schedule_id=1, user_id=1, work_date=date(2026, 1, 27), shift_id=2))
    resolver = ShiftResolver(shifts_repo, users_repo, schedules_repo)

    assert resolver.get_active_shift_for_employee(1, date(2026, 1, 27)).shift_id == 2
    assert resolver.get_active_shift_for_employee(1, date(2026, 1, 28)).shift_id == 1


def test_unknown_employee_has_no_shift(shifts_repo, users_repo):
    resolver = ShiftResolver(shifts_repo, users_repo)

    assert resolver.get_active_shift_for_employee(404, date(2026, 1, 27)) is None


def test_overnight_shift_ends_next_day():
    assert NIGHT.is_overnight is True
    assert NIGHT.ends_at(date(2026, 1, 27)) == datetime(2026, 1, 28, 6, 0)
    assert NIGHT.full_day_minutes == 480
