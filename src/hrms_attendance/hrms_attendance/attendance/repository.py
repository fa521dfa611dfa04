from __future__ import annotations

from datetime import date, datetime
from typing import Mapping, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus, RecordSource
from .model import AttendanceRecord, FinalizationOutcome, LiveSession, WorkSession


class AttendanceRepository(Protocol):
    """Storage for attendance records with their sessions and breaks.

    Implementations must enforce at the storage layer:
    - one record per (user_id, work_date)
    - at most one open (active/on_break) session per record
    - at most one open break per session
    """

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_user(self, user_id: int, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def ensure_record(
        self,
        *,
        user_id: int,
        work_date: date,
        source: RecordSource,
        actor_id: Optional[int] = None,
    ) -> int:
        """Atomically get-or-create the day's record. Returns attendance_id."""

        raise NotImplementedError

    def add_session(self, session: WorkSession) -> None:
        """Insert an open session.

        Raises AlreadyClockedInError when the record already has an open session.
        """

        raise NotImplementedError

    def close_session(self, *, session_id: str, check_out: datetime, worked_minutes: int) -> bool:
        """Complete an ACTIVE session. Returns False if it was not active anymore."""

        raise NotImplementedError

    def open_break(self, *, session_id: str, break_id: str, start_time: datetime) -> None:
        """Insert an open break and flip the session to ON_BREAK.

        Raises AlreadyOnBreakError when the session already has an open break.
        """

        raise NotImplementedError

    def close_break(self, *, session_id: str, break_id: str, end_time: datetime, duration_minutes: int) -> bool:
        """Close the break, add its duration to the session and flip it back to ACTIVE."""

        raise NotImplementedError

    def update_live_totals(
        self,
        *,
        attendance_id: int,
        worked_minutes: int,
        break_minutes: int,
        updated_by: Optional[int] = None,
    ) -> None:
        raise NotImplementedError

    def create_if_missing(
        self,
        *,
        user_id: int,
        work_date: date,
        outcome: FinalizationOutcome,
        source: RecordSource = RecordSource.SYSTEM,
        shift_id: Optional[int] = None,
    ) -> bool:
        """Insert a terminal record unless one already exists. Returns True if inserted."""

        raise NotImplementedError

    def save_finalization(
        self,
        *,
        attendance_id: int,
        outcome: FinalizationOutcome,
        shift_id: Optional[int] = None,
        expected_status: AttendanceStatus = AttendanceStatus.INCOMPLETE,
        updated_by: Optional[int] = None,
    ) -> bool:
        """Write a terminal outcome only while the record is still in expected_status."""

        raise NotImplementedError

    def list_open_sessions(self, *, work_date: Optional[date] = None) -> Sequence[LiveSession]:
        raise NotImplementedError

    def count_statuses(self, work_date: date) -> Mapping[AttendanceStatus, int]:
        """Number of records per status on work_date."""

        raise NotImplementedError
