from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple

from ..core.enums import AttendanceStatus, RecordSource, SessionStatus, WorkLocation


@dataclass(frozen=True)
class BreakInterval:
    break_id: str
    session_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_minutes: int = 0

    @property
    def is_open(self) -> bool:
        return self.end_time is None


@dataclass(frozen=True)
class WorkSession:
    """One clock-in to clock-out interval within a day."""

    session_id: str
    attendance_id: int
    check_in: datetime
    work_location: WorkLocation
    status: SessionStatus = SessionStatus.ACTIVE
    check_out: Optional[datetime] = None
    location_details: Optional[str] = None
    breaks: Tuple[BreakInterval, ...] = ()
    total_break_minutes: int = 0
    worked_minutes: int = 0

    @property
    def is_open(self) -> bool:
        return self.status.is_open

    @property
    def open_break(self) -> Optional[BreakInterval]:
        for b in self.breaks:
            if b.is_open:
                return b
        return None


@dataclass(frozen=True)
class AttendanceRecord:
    """One employee's attendance for one calendar date."""

    attendance_id: int
    user_id: int
    work_date: date
    status: AttendanceStatus = AttendanceStatus.INCOMPLETE
    sessions: Tuple[WorkSession, ...] = ()
    worked_minutes: int = 0
    break_minutes: int = 0
    late_minutes: int = 0
    early_exit_minutes: int = 0
    overtime_minutes: int = 0
    is_late: bool = False
    is_early_departure: bool = False
    status_reason: Optional[str] = None
    correction_requested: bool = False
    source: RecordSource = RecordSource.SELF
    shift_id: Optional[int] = None
    created_by: Optional[int] = None
    updated_by: Optional[int] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def active_session(self) -> Optional[WorkSession]:
        for s in self.sessions:
            if s.is_open:
                return s
        return None

    @property
    def has_open_session(self) -> bool:
        return self.active_session is not None

    @property
    def completed_sessions(self) -> Tuple[WorkSession, ...]:
        return tuple(s for s in self.sessions if s.status == SessionStatus.COMPLETED)

    @property
    def first_check_in(self) -> Optional[datetime]:
        if not self.sessions:
            return None
        return min(s.check_in for s in self.sessions)

    @property
    def last_check_out(self) -> Optional[datetime]:
        outs = [s.check_out for s in self.sessions if s.check_out is not None]
        return max(outs) if outs else None


@dataclass(frozen=True)
class FinalizationOutcome:
    """Terminal values the Daily Finalizer writes onto a record."""

    status: AttendanceStatus
    status_reason: Optional[str] = None
    worked_minutes: int = 0
    break_minutes: int = 0
    late_minutes: int = 0
    early_exit_minutes: int = 0
    overtime_minutes: int = 0
    is_late: bool = False
    is_early_departure: bool = False
    correction_requested: bool = False


@dataclass(frozen=True)
class LiveSession:
    """Read-model for the live attendance board."""

    user_id: int
    full_name: str
    work_date: date
    session_id: str
    check_in: datetime
    status: SessionStatus
    work_location: WorkLocation
    location_details: Optional[str] = None
    break_started_at: Optional[datetime] = None


def session_to_dict(s: WorkSession) -> dict:
    return {
        "session_id": s.session_id,
        "check_in": s.check_in.isoformat(),
        "check_out": s.check_out.isoformat() if s.check_out else None,
        "status": s.status.value,
        "work_location": s.work_location.value,
        "location_details": s.location_details,
        "total_break_minutes": s.total_break_minutes,
        "worked_minutes": s.worked_minutes,
        "breaks": [
            {
                "break_id": b.break_id,
                "start_time": b.start_time.isoformat(),
                "end_time": b.end_time.isoformat() if b.end_time else None,
                "duration_minutes": b.duration_minutes,
            }
            for b in s.breaks
        ],
    }


def record_to_dict(r: AttendanceRecord) -> dict:
    return {
        "attendance_id": r.attendance_id,
        "user_id": r.user_id,
        "date": r.work_date.strftime("%Y-%m-%d"),
        "status": r.status.value,
        "status_reason": r.status_reason,
        "worked_minutes": r.worked_minutes,
        "break_minutes": r.break_minutes,
        "late_minutes": r.late_minutes,
        "is_late": r.is_late,
        "early_exit_minutes": r.early_exit_minutes,
        "is_early_departure": r.is_early_departure,
        "overtime_minutes": r.overtime_minutes,
        "correction_requested": r.correction_requested,
        "source": r.source.value,
        "check_in": r.first_check_in.isoformat() if r.first_check_in else None,
        "check_out": r.last_check_out.isoformat() if r.last_check_out else None,
        "sessions": [session_to_dict(s) for s in r.sessions],
    }
