from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import format_hhmm, now_local
from ..common.validators import require_date_range
from ..core.constants import DEFAULT_RECORDS_DAYS
from ..core.enums import RecordSource, SessionStatus, WorkLocation
from ..core.exceptions import (
    AlreadyClockedInError,
    AlreadyOnBreakError,
    CannotClockOutOnBreakError,
    InvalidLocationError,
    NoActiveSessionError,
    NotOnBreakError,
)
from ..notifications.audit import AuditTrail, audit_quietly
from ..notifications.notifier import Notifier, notify_quietly
from .calculator.base import WorkedTimeCalculator
from .calculator.standard_calculator import StandardWorkedTimeCalculator
from .model import AttendanceRecord, LiveSession, WorkSession, session_to_dict
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Session Tracker: clock-in/out and breaks for the current day.

    Invalid transitions raise AttendanceError subclasses. Notification and
    audit failures are logged and never undo a state change.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        notifier: Notifier | None = None,
        audit: AuditTrail | None = None,
        calculator: WorkedTimeCalculator | None = None,
    ):
        self._attendance = attendance
        self._notifier = notifier
        self._audit = audit
        self._calculator = calculator or StandardWorkedTimeCalculator()

    @staticmethod
    def _parse_location(work_location, location_details: Optional[str]) -> tuple[WorkLocation, Optional[str]]:
        try:
            location = WorkLocation(work_location)
        except ValueError:
            allowed = ", ".join(loc.value for loc in WorkLocation)
            raise InvalidLocationError(f"Invalid work location '{work_location}'. Allowed: {allowed}") from None

        details = (location_details or "").strip() or None
        if location.requires_details and not details:
            raise InvalidLocationError(f"Location details are required for {location.value}")
        return location, details

    def _open_session(self, user_id: int, today: date) -> tuple[Optional[AttendanceRecord], Optional[WorkSession]]:
        record = self._attendance.get_for_user_and_date(int(user_id), today)
        if not record:
            return None, None
        return record, record.active_session

    def _find_open_session(self, user_id: int, today: date) -> tuple[Optional[AttendanceRecord], Optional[WorkSession]]:
        """Today's open session, else one left open since yesterday (overnight shifts)."""
        record, active = self._open_session(user_id, today)
        if active:
            return record, active
        previous, carried = self._open_session(user_id, today - timedelta(days=1))
        if carried and not previous.is_terminal:
            return previous, carried
        return record, None

    def _after_change(self, *, user_id: int, action: str, session: WorkSession, actor_id: Optional[int]) -> None:
        info = session_to_dict(session)
        audit_quietly(
            self._audit,
            action=action,
            actor_id=actor_id if actor_id is not None else int(user_id),
            entity_type="attendance_session",
            entity_id=session.session_id,
            meta={"user_id": int(user_id), "status": session.status.value},
        )
        notify_quietly(self._notifier, "notify_clock_event", user_id=int(user_id), event=action, session_info=info)

    def _refresh_totals(self, user_id: int, work_date: date, actor_id: Optional[int]) -> Optional[AttendanceRecord]:
        record = self._attendance.get_for_user_and_date(int(user_id), work_date)
        if not record:
            return None
        self._attendance.update_live_totals(
            attendance_id=record.attendance_id,
            worked_minutes=self._calculator.record_worked_minutes(record),
            break_minutes=self._calculator.record_break_minutes(record),
            updated_by=actor_id,
        )
        return record

    def start_session(
        self,
        user_id: int,
        work_location,
        location_details: Optional[str] = None,
        *,
        now: datetime | None = None,
        actor_id: Optional[int] = None,
        source: RecordSource = RecordSource.SELF,
    ) -> WorkSession:
        now = now or now_local()
        today = now.date()
        location, details = self._parse_location(work_location, location_details)

        _, active = self._open_session(user_id, today)
        if active:
            raise AlreadyClockedInError(f"Already clocked in since {format_hhmm(active.check_in)}")

        attendance_id = self._attendance.ensure_record(
            user_id=int(user_id),
            work_date=today,
            source=source,
            actor_id=actor_id if actor_id is not None else int(user_id),
        )
        session = WorkSession(
            session_id=uuid.uuid4().hex,
            attendance_id=attendance_id,
            check_in=now,
            work_location=location,
            location_details=details,
            status=SessionStatus.ACTIVE,
        )
        try:
            self._attendance.add_session(session)
        except AlreadyClockedInError:
            # Lost a race against a concurrent clock-in for the same day.
            _, active = self._open_session(user_id, today)
            since = format_hhmm(active.check_in) if active else format_hhmm(now)
            raise AlreadyClockedInError(f"Already clocked in since {since}") from None

        logger.info("User %s clocked in at %s (%s)", user_id, now.isoformat(), location.value)
        self._after_change(user_id=user_id, action="clock_in", session=session, actor_id=actor_id)
        return session

    def end_session(self, user_id: int, *, now: datetime | None = None, actor_id: Optional[int] = None) -> WorkSession:
        now = now or now_local()
        today = now.date()

        record, active = self._find_open_session(user_id, today)
        if not record or not active:
            raise NoActiveSessionError("No active session to clock out from")
        if active.status == SessionStatus.ON_BREAK:
            raise CannotClockOutOnBreakError("End your break before clocking out")

        worked = self._calculator.session_worked_minutes(
            check_in=active.check_in,
            check_out=now,
            break_minutes=active.total_break_minutes,
        )
        closed = self._attendance.close_session(session_id=active.session_id, check_out=now, worked_minutes=worked)
        if not closed:
            raise NoActiveSessionError("Session is no longer active")

        self._refresh_totals(user_id, record.work_date, actor_id)

        session = replace(active, check_out=now, worked_minutes=worked, status=SessionStatus.COMPLETED)
        logger.info("User %s clocked out at %s (%s min)", user_id, now.isoformat(), worked)
        self._after_change(user_id=user_id, action="clock_out", session=session, actor_id=actor_id)
        return session

    def start_break(self, user_id: int, *, now: datetime | None = None, actor_id: Optional[int] = None) -> WorkSession:
        now = now or now_local()
        today = now.date()

        _, active = self._find_open_session(user_id, today)
        if not active:
            raise NoActiveSessionError("No active session to start a break")
        if active.status == SessionStatus.ON_BREAK:
            raise AlreadyOnBreakError("Already on break")

        self._attendance.open_break(session_id=active.session_id, break_id=uuid.uuid4().hex, start_time=now)

        _, session = self._find_open_session(user_id, today)
        session = session or active
        self._after_change(user_id=user_id, action="break_start", session=session, actor_id=actor_id)
        return session

    def end_break(self, user_id: int, *, now: datetime | None = None, actor_id: Optional[int] = None) -> WorkSession:
        now = now or now_local()
        today = now.date()

        record, active = self._find_open_session(user_id, today)
        if not record or not active:
            raise NoActiveSessionError("No active session")
        open_break = active.open_break
        if active.status != SessionStatus.ON_BREAK or open_break is None:
            raise NotOnBreakError("Not on break")

        duration = self._calculator.session_worked_minutes(check_in=open_break.start_time, check_out=now, break_minutes=0)
        closed = self._attendance.close_break(
            session_id=active.session_id,
            break_id=open_break.break_id,
            end_time=now,
            duration_minutes=duration,
        )
        if not closed:
            raise NotOnBreakError("Break was already ended")

        record = self._refresh_totals(user_id, record.work_date, actor_id)
        session = (record.active_session if record else None) or active
        self._after_change(user_id=user_id, action="break_end", session=session, actor_id=actor_id)
        return session

    def get_active_session(self, user_id: int, *, today: date | None = None) -> Optional[WorkSession]:
        today = today or now_local().date()
        _, active = self._find_open_session(user_id, today)
        return active

    def get_record(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_user_and_date(int(user_id), work_date)

    def list_records(
        self,
        user_id: int,
        *,
        start: date | None = None,
        end: date | None = None,
    ) -> Sequence[AttendanceRecord]:
        """Records by date range; defaults to the last month up to today."""
        end = end or now_local().date()
        start = start or end - timedelta(days=DEFAULT_RECORDS_DAYS - 1)
        require_date_range(start, end)
        return self._attendance.list_for_user(int(user_id), start=start, end=end)

    def list_live_sessions(self, *, work_date: date | None = None) -> Sequence[LiveSession]:
        return self._attendance.list_open_sessions(work_date=work_date)
