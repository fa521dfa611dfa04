from __future__ import annotations

from datetime import date, datetime

import pytest

from src.hrms_attendance.hrms_attendance.attendance.finalizer import DailyFinalizer
from src.hrms_attendance.hrms_attendance.attendance.model import AttendanceRecord, WorkSession
from src.hrms_attendance.hrms_attendance.attendance.service import AttendanceService
from src.hrms_attendance.hrms_attendance.core.enums import (
    AttendanceStatus,
    RecordSource,
    SessionStatus,
    WorkLocation,
)
from src.hrms_attendance.hrms_attendance.core.exceptions import ValidationError
from src.hrms_attendance.hrms_attendance.finalization.job import UNKNOWN_DAY_TYPE, CalendarFinalizationJob
from src.hrms_attendance.hrms_attendance.finalization.scheduler import JOB_ID, build_scheduler, finalize_recent_days
from src.hrms_attendance.hrms_attendance.requests.service import CorrectionService, LeaveLookup
from src.hrms_attendance.hrms_attendance.shifts.resolver import ShiftResolver
from src.hrms_attendance.hrms_attendance.work_calendar.model import Holiday
from src.hrms_attendance.hrms_attendance.work_calendar.service import CalendarService

REPUBLIC_DAY = date(2026, 1, 26)  # Monday
TUESDAY = date(2026, 1, 27)
SATURDAY = date(2026, 1, 24)
AFTER_TUESDAY = datetime(2026, 1, 28, 0, 0)


class _Env:
    def __init__(self, job, attendance, corrections, notifier, sleeps):
        self.job = job
        self.attendance = attendance
        self.corrections = corrections
        self.notifier = notifier
        self.sleeps = sleeps


@pytest.fixture
def env(
    attendance_repo,
    users_repo,
    shifts_repo,
    schedules_repo,
    holidays_repo,
    working_rules_repo,
    leave_repo,
    corrections_repo,
    notifier,
):
    sleeps: list[float] = []
    finalizer = DailyFinalizer(
        attendance_repo,
        ShiftResolver(shifts_repo, users_repo, schedules_repo),
        CorrectionService(corrections_repo),
    )
    job = CalendarFinalizationJob(
        attendance_repo,
        users_repo,
        CalendarService(holidays_repo, working_rules_repo, default_weekend_days=(5, 6)),
        LeaveLookup(leave_repo),
        finalizer,
        notifier=notifier,
        buffer_minutes=30,
        bulk_delay_seconds=0.1,
        sleep=sleeps.append,
        clock=lambda: AFTER_TUESDAY,
    )
    return _Env(job, attendance_repo, corrections_repo, notifier, sleeps)


def _session(sid, check_in, check_out=None):
    done = check_out is not None
    return WorkSession(
        session_id=sid,
        attendance_id=0,
        check_in=check_in,
        check_out=check_out,
        work_location=WorkLocation.OFFICE,
        status=SessionStatus.COMPLETED if done else SessionStatus.ACTIVE,
        worked_minutes=int((check_out - check_in).total_seconds() // 60) if done else 0,
    )


def _seed_day(attendance):
    attendance.seed(
        AttendanceRecord(
            attendance_id=10,
            user_id=1,
            work_date=TUESDAY,
            sessions=(_session("a", datetime(2026, 1, 27, 9, 0), datetime(2026, 1, 27, 17, 0)),),
        )
    )
    attendance.seed(
        AttendanceRecord(
            attendance_id=11,
            user_id=2,
            work_date=TUESDAY,
            sessions=(_session("b", datetime(2026, 1, 27, 9, 0)),),
        )
    )


def test_holiday_creates_one_record_per_employee(env):
    summary = env.job.run_for_date(REPUBLIC_DAY, now=datetime(2026, 1, 26, 8, 0))

    assert summary.day_type == "HOLIDAY"
    assert (summary.processed, summary.created, summary.errors) == (5, 5, 0)
    for user_id in range(1, 6):
        record = env.attendance.get_for_user_and_date(user_id, REPUBLIC_DAY)
        assert record.status == AttendanceStatus.HOLIDAY
        assert "Republic Day" in record.status_reason
        assert record.source == RecordSource.SYSTEM


def test_holiday_wins_over_weekend(env, holidays_repo):
    founders_day = date(2026, 1, 31)  # Saturday
    holidays_repo.add(Holiday(holiday_id=2, holiday_date=founders_day, name="Founders Day"))

    summary = env.job.run_for_date(founders_day)

    assert summary.day_type == "HOLIDAY"
    assert env.attendance.get_for_user_and_date(1, founders_day).status_reason == "Holiday: Founders Day"


def test_weekend_records_name_the_day(env):
    summary = env.job.run_for_date(SATURDAY)

    assert summary.day_type == "WEEKEND"
    assert summary.created == 5
    record = env.attendance.get_for_user_and_date(3, SATURDAY)
    assert record.status == AttendanceStatus.WEEKEND
    assert record.status_reason == "Weekend: Saturday"


def test_work_logged_after_weekend_records_is_still_finalized(env):
    tracker = AttendanceService(env.attendance)
    env.job.run_for_date(SATURDAY, now=datetime(2026, 1, 24, 0, 5))

    tracker.start_session(1, "office", now=datetime(2026, 1, 24, 10, 0))
    tracker.start_session(2, "office", now=datetime(2026, 1, 24, 9, 0))
    tracker.end_session(2, now=datetime(2026, 1, 24, 17, 0))

    assert env.job.get_status(1, SATURDAY, now=datetime(2026, 1, 24, 12, 0)).finalized is False
    evening = env.job.run_for_date(SATURDAY, now=datetime(2026, 1, 24, 17, 29))
    assert evening.skipped == 5
    assert env.attendance.get_for_user_and_date(1, SATURDAY).status == AttendanceStatus.WEEKEND

    summary = env.job.run_for_date(SATURDAY, now=datetime(2026, 1, 25, 2, 0))

    assert (summary.finalized, summary.skipped, summary.errors) == (2, 3, 0)
    missed = env.attendance.get_for_user_and_date(1, SATURDAY)
    assert missed.status == AttendanceStatus.PENDING_CORRECTION
    assert missed.correction_requested is True
    assert env.attendance.get_for_user_and_date(2, SATURDAY).status == AttendanceStatus.PRESENT
    assert env.attendance.get_for_user_and_date(3, SATURDAY).status == AttendanceStatus.WEEKEND
    assert [c.user_id for c in env.corrections.items.values()] == [1]

    rerun = env.job.run_for_date(SATURDAY, now=datetime(2026, 1, 25, 2, 15))

    assert (rerun.finalized, rerun.skipped) == (0, 5)
    assert len(env.corrections.items) == 1


def test_holiday_clock_in_before_the_first_run_is_finalized(env):
    tracker = AttendanceService(env.attendance)
    tracker.start_session(1, "remote", now=datetime(2026, 1, 26, 8, 0))
    tracker.start_session(2, "office", now=datetime(2026, 1, 26, 9, 0))
    tracker.end_session(2, now=datetime(2026, 1, 26, 13, 0))

    morning = env.job.run_for_date(REPUBLIC_DAY, now=datetime(2026, 1, 26, 13, 5))

    assert (morning.created, morning.skipped) == (3, 2)
    assert env.attendance.get_for_user_and_date(1, REPUBLIC_DAY).status == AttendanceStatus.INCOMPLETE

    summary = env.job.run_for_date(REPUBLIC_DAY, now=datetime(2026, 1, 27, 0, 0))

    assert summary.finalized == 2
    assert env.attendance.get_for_user_and_date(1, REPUBLIC_DAY).status == AttendanceStatus.PENDING_CORRECTION
    assert env.attendance.get_for_user_and_date(2, REPUBLIC_DAY).status == AttendanceStatus.HALF_DAY
    assert env.attendance.get_for_user_and_date(4, REPUBLIC_DAY).status == AttendanceStatus.HOLIDAY
    assert len(env.corrections.items) == 1


def test_working_day_finalizes_everyone_and_rerun_is_a_noop(env):
    _seed_day(env.attendance)

    first = env.job.run_for_date(TUESDAY)

    assert first.day_type == "WORKING_DAY"
    assert (first.processed, first.created, first.finalized, first.skipped, first.errors) == (5, 3, 2, 0, 0)
    assert env.attendance.get_for_user_and_date(1, TUESDAY).status == AttendanceStatus.PRESENT
    assert env.attendance.get_for_user_and_date(2, TUESDAY).status == AttendanceStatus.PENDING_CORRECTION
    for user_id in (3, 4, 5):
        assert env.attendance.get_for_user_and_date(user_id, TUESDAY).status == AttendanceStatus.ABSENT
    assert len(env.corrections.items) == 1
    subjects = [e[2] for e in env.notifier.events]
    assert subjects.count("Marked absent") == 3
    assert subjects.count("Missed clock-out") == 1

    second = env.job.run_for_date(TUESDAY)

    assert (second.created, second.finalized, second.skipped) == (0, 0, 5)
    assert len(env.corrections.items) == 1
    assert len(env.attendance.records) == 5


def test_day_is_left_open_until_shift_end_plus_buffer(env):
    _seed_day(env.attendance)

    early = env.job.run_for_date(TUESDAY, now=datetime(2026, 1, 27, 17, 29))
    assert (early.created, early.finalized, early.skipped) == (0, 0, 5)
    assert env.attendance.get_for_user_and_date(1, TUESDAY).status == AttendanceStatus.INCOMPLETE

    on_time = env.job.run_for_date(TUESDAY, now=datetime(2026, 1, 27, 17, 30))
    assert on_time.finalized == 2


def test_approved_leave_is_left_to_the_leave_module(env, leave_repo):
    leave_repo.approve(3, TUESDAY)

    summary = env.job.run_for_date(TUESDAY)

    assert summary.skipped == 1
    assert env.attendance.get_for_user_and_date(3, TUESDAY) is None


def test_one_failing_employee_does_not_stop_the_run(env, monkeypatch):
    original = env.attendance.get_for_user_and_date

    def flaky(user_id, work_date):
        if user_id == 4:
            raise RuntimeError("deadlock found")
        return original(user_id, work_date)

    monkeypatch.setattr(env.attendance, "get_for_user_and_date", flaky)

    summary = env.job.run_for_date(TUESDAY)

    assert summary.errors == 1
    assert summary.created == 4
    assert env.attendance.records.get((4, TUESDAY)) is None


def test_unclassifiable_date_is_reported_not_raised(env, monkeypatch, holidays_repo):
    def broken(day):
        raise RuntimeError("calendar table missing")

    monkeypatch.setattr(holidays_repo, "get_active_for_date", broken)

    summary = env.job.run_for_date(TUESDAY)

    assert summary.day_type == UNKNOWN_DAY_TYPE
    assert summary.errors == 1
    assert summary.processed == 0
    assert env.attendance.records == {}


def test_bulk_range_runs_in_date_order_with_pauses(env):
    summaries = env.job.run_for_range(SATURDAY, TUESDAY)

    assert [s.date for s in summaries] == [date(2026, 1, d) for d in (24, 25, 26, 27)]
    assert [s.day_type for s in summaries] == ["WEEKEND", "WEEKEND", "HOLIDAY", "WORKING_DAY"]
    assert env.sleeps == [0.1, 0.1, 0.1]


def test_bulk_range_rejects_inverted_dates(env):
    with pytest.raises(ValidationError):
        env.job.run_for_range(TUESDAY, SATURDAY)


def test_status_queries(env):
    _seed_day(env.attendance)

    before = env.job.get_date_status(TUESDAY)
    assert before["needs_finalization"] is True
    assert before["counts"]["incomplete"] == 2

    employee = env.job.get_status(1, TUESDAY, now=datetime(2026, 1, 27, 12, 0))
    assert employee.finalized is False
    assert employee.day_over is False
    assert employee.finalizes_after == datetime(2026, 1, 27, 17, 30)

    env.job.run_for_date(TUESDAY)

    after = env.job.get_date_status(TUESDAY)
    assert after["day_type"] == "WORKING_DAY"
    assert after["needs_finalization"] is False
    assert after["counts"]["absent"] == 3
    assert env.job.get_status(1, TUESDAY).to_dict()["status"] == "present"


def test_scheduler_tick_covers_yesterday_then_today(env):
    summaries = finalize_recent_days(env.job, clock=lambda: datetime(2026, 1, 27, 8, 0))

    assert [s.date for s in summaries] == [REPUBLIC_DAY, TUESDAY]
    assert summaries[0].created == 5
    # today's shift has not ended yet
    assert summaries[1].skipped == 5


def test_build_scheduler_registers_one_interval_job(env):
    scheduler = build_scheduler(env.job, interval_minutes=15)

    assert [job.id for job in scheduler.get_jobs()] == [JOB_ID]
