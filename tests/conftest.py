from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime, time

import pytest

from src.hrms_attendance.hrms_attendance.attendance.model import AttendanceRecord, BreakInterval, LiveSession
from src.hrms_attendance.hrms_attendance.core.enums import (
    AttendanceStatus,
    RecordSource,
    RequestStatus,
    Role,
    SessionStatus,
)
from src.hrms_attendance.hrms_attendance.core.exceptions import (
    AlreadyClockedInError,
    AlreadyOnBreakError,
    NoActiveSessionError,
)
from src.hrms_attendance.hrms_attendance.requests.model import CorrectionRequest
from src.hrms_attendance.hrms_attendance.shifts.model import Shift
from src.hrms_attendance.hrms_attendance.users.model import User
from src.hrms_attendance.hrms_attendance.work_calendar.model import Holiday


class FakeAttendanceRepo:
    """In-memory store enforcing the same uniqueness rules as the MySQL schema."""

    def __init__(self):
        self._lock = threading.Lock()
        self._next_id = 1
        self.records: dict[tuple[int, date], AttendanceRecord] = {}

    def _key_for(self, attendance_id: int) -> tuple[int, date]:
        for key, rec in self.records.items():
            if rec.attendance_id == int(attendance_id):
                return key
        raise KeyError(attendance_id)

    def _find_session(self, session_id: str):
        for key, rec in self.records.items():
            for i, s in enumerate(rec.sessions):
                if s.session_id == session_id:
                    return key, i, s
        raise KeyError(session_id)

    def _set_session(self, key, index, session) -> None:
        rec = self.records[key]
        sessions = list(rec.sessions)
        sessions[index] = session
        self.records[key] = replace(rec, sessions=tuple(sessions))

    def seed(self, record: AttendanceRecord) -> AttendanceRecord:
        with self._lock:
            self._next_id = max(self._next_id, record.attendance_id + 1)
            self.records[(record.user_id, record.work_date)] = record
            return record

    def get_for_user_and_date(self, user_id, work_date):
        return self.records.get((int(user_id), work_date))

    def list_for_user(self, user_id, *, start, end):
        out = [r for (uid, d), r in self.records.items() if uid == int(user_id) and start <= d <= end]
        return sorted(out, key=lambda r: r.work_date)

    def ensure_record(self, *, user_id, work_date, source, actor_id=None):
        with self._lock:
            rec = self.records.get((int(user_id), work_date))
            if rec:
                return rec.attendance_id
            rec = AttendanceRecord(
                attendance_id=self._next_id,
                user_id=int(user_id),
                work_date=work_date,
                source=source,
                created_by=actor_id,
                updated_by=actor_id,
            )
            self._next_id += 1
            self.records[(int(user_id), work_date)] = rec
            return rec.attendance_id

    def add_session(self, session):
        with self._lock:
            key = self._key_for(session.attendance_id)
            rec = self.records[key]
            if any(s.is_open for s in rec.sessions):
                raise AlreadyClockedInError("Already clocked in")
            self.records[key] = replace(rec, sessions=rec.sessions + (session,))

    def close_session(self, *, session_id, check_out, worked_minutes):
        with self._lock:
            key, i, s = self._find_session(session_id)
            if s.status != SessionStatus.ACTIVE:
                return False
            self._set_session(
                key, i, replace(s, check_out=check_out, worked_minutes=int(worked_minutes), status=SessionStatus.COMPLETED)
            )
            return True

    def open_break(self, *, session_id, break_id, start_time):
        with self._lock:
            key, i, s = self._find_session(session_id)
            if s.open_break is not None:
                raise AlreadyOnBreakError("Already on break")
            if s.status != SessionStatus.ACTIVE:
                raise NoActiveSessionError("No active session to start a break")
            b = BreakInterval(break_id=break_id, session_id=session_id, start_time=start_time)
            self._set_session(key, i, replace(s, breaks=s.breaks + (b,), status=SessionStatus.ON_BREAK))

    def close_break(self, *, session_id, break_id, end_time, duration_minutes):
        with self._lock:
            key, i, s = self._find_session(session_id)
            breaks = list(s.breaks)
            for j, b in enumerate(breaks):
                if b.break_id == break_id and b.end_time is None:
                    breaks[j] = replace(b, end_time=end_time, duration_minutes=int(duration_minutes))
                    break
            else:
                return False
            status = SessionStatus.ACTIVE if s.status == SessionStatus.ON_BREAK else s.status
            self._set_session(
                key,
                i,
                replace(
                    s,
                    breaks=tuple(breaks),
                    total_break_minutes=s.total_break_minutes + int(duration_minutes),
                    status=status,
                ),
            )
            return True

    def update_live_totals(self, *, attendance_id, worked_minutes, break_minutes, updated_by=None):
        with self._lock:
            key = self._key_for(attendance_id)
            self.records[key] = replace(
                self.records[key], worked_minutes=int(worked_minutes), break_minutes=int(break_minutes), updated_by=updated_by
            )

    def create_if_missing(self, *, user_id, work_date, outcome, source=RecordSource.SYSTEM, shift_id=None):
        with self._lock:
            if (int(user_id), work_date) in self.records:
                return False
            self.records[(int(user_id), work_date)] = AttendanceRecord(
                attendance_id=self._next_id,
                user_id=int(user_id),
                work_date=work_date,
                status=outcome.status,
                status_reason=outcome.status_reason,
                worked_minutes=outcome.worked_minutes,
                break_minutes=outcome.break_minutes,
                late_minutes=outcome.late_minutes,
                early_exit_minutes=outcome.early_exit_minutes,
                overtime_minutes=outcome.overtime_minutes,
                is_late=outcome.is_late,
                is_early_departure=outcome.is_early_departure,
                correction_requested=outcome.correction_requested,
                source=source,
                shift_id=shift_id,
            )
            self._next_id += 1
            return True

    def save_finalization(
        self,
        *,
        attendance_id,
        outcome,
        shift_id=None,
        expected_status=AttendanceStatus.INCOMPLETE,
        updated_by=None,
    ):
        with self._lock:
            key = self._key_for(attendance_id)
            rec = self.records[key]
            if rec.status != expected_status:
                return False
            self.records[key] = replace(
                rec,
                status=outcome.status,
                status_reason=outcome.status_reason,
                worked_minutes=outcome.worked_minutes,
                break_minutes=outcome.break_minutes,
                late_minutes=outcome.late_minutes,
                early_exit_minutes=outcome.early_exit_minutes,
                overtime_minutes=outcome.overtime_minutes,
                is_late=outcome.is_late,
                is_early_departure=outcome.is_early_departure,
                correction_requested=outcome.correction_requested,
                shift_id=shift_id if shift_id is not None else rec.shift_id,
                updated_by=updated_by,
            )
            return True

    def list_open_sessions(self, *, work_date=None):
        out = []
        for (uid, d), rec in self.records.items():
            if work_date is not None and d != work_date:
                continue
            s = rec.active_session
            if s is None:
                continue
            b = s.open_break
            out.append(
                LiveSession(
                    user_id=uid,
                    full_name=f"User {uid}",
                    work_date=d,
                    session_id=s.session_id,
                    check_in=s.check_in,
                    status=s.status,
                    work_location=s.work_location,
                    location_details=s.location_details,
                    break_started_at=b.start_time if b else None,
                )
            )
        return out

    def count_statuses(self, work_date):
        counts: dict[AttendanceStatus, int] = {}
        for (_, d), rec in self.records.items():
            if d == work_date:
                counts[rec.status] = counts.get(rec.status, 0) + 1
        return counts


class FakeUsersRepo:
    def __init__(self, users=()):
        self._users = {u.user_id: u for u in users}

    def add(self, user: User) -> None:
        self._users[user.user_id] = user

    def get_by_id(self, user_id):
        return self._users.get(int(user_id))

    def list_active_employee_ids(self):
        return [uid for uid, u in sorted(self._users.items()) if u.is_active]


class FakeShiftsRepo:
    def __init__(self, shifts=()):
        self._shifts = {s.shift_id: s for s in shifts}

    def add(self, shift: Shift) -> None:
        self._shifts[shift.shift_id] = shift

    def list_all(self):
        return list(self._shifts.values())

    def get_by_id(self, shift_id):
        return self._shifts.get(int(shift_id))


class FakeSchedulesRepo:
    def __init__(self):
        self._items = {}

    def assign(self, schedule) -> None:
        self._items[(schedule.user_id, schedule.work_date)] = schedule

    def get_for_user_and_date(self, *, user_id, work_date):
        return self._items.get((int(user_id), work_date))


class FakeHolidaysRepo:
    def __init__(self, holidays=()):
        self._by_date = {h.holiday_date: h for h in holidays}

    def add(self, holiday: Holiday) -> None:
        self._by_date[holiday.holiday_date] = holiday

    def get_active_for_date(self, day):
        h = self._by_date.get(day)
        return h if h and h.is_active else None


class FakeWorkingRulesRepo:
    def __init__(self, rules=()):
        self._rules = list(rules)

    def add(self, rule) -> None:
        self._rules.append(rule)

    def get_active_for_date(self, day):
        for r in self._rules:
            if r.covers(day):
                return r
        return None


class FakeLeaveRepo:
    def __init__(self):
        self._days: set[tuple[int, date]] = set()

    def approve(self, user_id: int, day: date) -> None:
        self._days.add((int(user_id), day))

    def has_approved_leave(self, *, user_id, work_date):
        return (int(user_id), work_date) in self._days


class FakeCorrectionsRepo:
    def __init__(self):
        self._next_id = 1
        self.items: dict[int, CorrectionRequest] = {}

    def create_pending(self, *, user_id, work_date, issue_type, reason, attendance_id=None):
        if self.find_pending(user_id=user_id, work_date=work_date, issue_type=issue_type):
            return None
        rid = self._next_id
        self._next_id += 1
        self.items[rid] = CorrectionRequest(
            request_id=rid,
            user_id=int(user_id),
            work_date=work_date,
            issue_type=issue_type,
            reason=reason,
            status=RequestStatus.PENDING,
            created_at=datetime(2026, 1, 27, 0, 30),
            attendance_id=attendance_id,
        )
        return rid

    def get(self, *, request_id):
        return self.items.get(int(request_id))

    def find_pending(self, *, user_id, work_date, issue_type):
        for c in self.items.values():
            if (
                c.user_id == int(user_id)
                and c.work_date == work_date
                and c.issue_type == issue_type
                and c.status == RequestStatus.PENDING
            ):
                return c
        return None

    def list_requests(self, *, status=None, user_id=None, limit=200):
        out = [
            c
            for c in self.items.values()
            if (status is None or c.status == status) and (user_id is None or c.user_id == int(user_id))
        ]
        return out[:limit]

    def decide(self, *, request_id, status, decided_by, admin_note=None):
        c = self.items.get(int(request_id))
        if not c or c.status != RequestStatus.PENDING:
            return False
        self.items[int(request_id)] = replace(
            c, status=status, decided_by=decided_by, decided_at=datetime(2026, 1, 28, 9, 0), admin_note=admin_note
        )
        return True


class RecordingNotifier:
    def __init__(self):
        self.events: list[tuple] = []

    def notify_clock_event(self, *, user_id, event, session_info):
        self.events.append(("clock", user_id, event))

    def notify_employee(self, *, user_id, subject, message):
        self.events.append(("employee", user_id, subject))


class RecordingAudit:
    def __init__(self):
        self.entries: list[dict] = []

    def record_audit_entry(self, *, action, actor_id, entity_type, entity_id, meta=None):
        self.entries.append({"action": action, "actor_id": actor_id, "entity_type": entity_type, "entity_id": entity_id})


DAY_SHIFT = Shift(
    shift_id=1,
    shift_name="Day",
    start_time=time(9, 0),
    end_time=time(17, 0),
    grace_minutes=10,
    full_day_hours=8,
    half_day_hours=4,
    overtime_enabled=True,
    overtime_threshold_minutes=30,
)


def make_user(user_id: int, *, shift_id=1, is_active=True) -> User:
    return User(
        user_id=user_id,
        full_name=f"User {user_id}",
        role=Role.STAFF,
        dept_id=None,
        shift_id=shift_id,
        is_active=is_active,
    )


@pytest.fixture
def attendance_repo():
    return FakeAttendanceRepo()


@pytest.fixture
def users_repo():
    return FakeUsersRepo([make_user(i) for i in range(1, 6)])


@pytest.fixture
def shifts_repo():
    return FakeShiftsRepo([DAY_SHIFT])


@pytest.fixture
def schedules_repo():
    return FakeSchedulesRepo()


@pytest.fixture
def holidays_repo():
    # 2026-01-26 is a Monday
    return FakeHolidaysRepo([Holiday(holiday_id=1, holiday_date=date(2026, 1, 26), name="Republic Day")])


@pytest.fixture
def working_rules_repo():
    return FakeWorkingRulesRepo()


@pytest.fixture
def leave_repo():
    return FakeLeaveRepo()


@pytest.fixture
def corrections_repo():
    return FakeCorrectionsRepo()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def audit():
    return RecordingAudit()
