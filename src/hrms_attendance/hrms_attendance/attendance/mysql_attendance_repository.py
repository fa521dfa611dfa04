from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import AttendanceStatus, RecordSource, SessionStatus, WorkLocation
from ..core.exceptions import AlreadyClockedInError, AlreadyOnBreakError, NoActiveSessionError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, placeholders
from .model import AttendanceRecord, BreakInterval, FinalizationOutcome, LiveSession, WorkSession
from .repository import AttendanceRepository

_RECORD_COLUMNS = """
    attendance_id, user_id, work_date, shift_id, worked_minutes, break_minutes,
    late_minutes, early_exit_minutes, overtime_minutes, is_late, is_early_departure,
    status, status_reason, correction_requested, source, created_by, updated_by
"""


def _row_to_break(r: Dict[str, Any]) -> BreakInterval:
    return BreakInterval(
        break_id=r["break_id"],
        session_id=r["session_id"],
        start_time=r["start_time"],
        end_time=r.get("end_time"),
        duration_minutes=int(r.get("duration_minutes") or 0),
    )


def _row_to_session(r: Dict[str, Any], breaks: Sequence[BreakInterval]) -> WorkSession:
    return WorkSession(
        session_id=r["session_id"],
        attendance_id=int(r["attendance_id"]),
        check_in=r["check_in"],
        check_out=r.get("check_out"),
        work_location=WorkLocation(r["work_location"]),
        location_details=r.get("location_details"),
        breaks=tuple(breaks),
        total_break_minutes=int(r.get("total_break_minutes") or 0),
        worked_minutes=int(r.get("worked_minutes") or 0),
        status=SessionStatus(r["status"]),
    )


def _row_to_record(r: Dict[str, Any], sessions: Sequence[WorkSession]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        shift_id=r.get("shift_id"),
        sessions=tuple(sessions),
        worked_minutes=int(r.get("worked_minutes") or 0),
        break_minutes=int(r.get("break_minutes") or 0),
        late_minutes=int(r.get("late_minutes") or 0),
        early_exit_minutes=int(r.get("early_exit_minutes") or 0),
        overtime_minutes=int(r.get("overtime_minutes") or 0),
        is_late=bool(r.get("is_late")),
        is_early_departure=bool(r.get("is_early_departure")),
        status=AttendanceStatus(r["status"]),
        status_reason=r.get("status_reason"),
        correction_requested=bool(r.get("correction_requested")),
        source=RecordSource(r["source"]),
        created_by=r.get("created_by"),
        updated_by=r.get("updated_by"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load(self, cur, rows: List[Dict[str, Any]]) -> List[AttendanceRecord]:
        if not rows:
            return []

        ids = [int(r["attendance_id"]) for r in rows]
        cur.execute(
            f"""
            SELECT session_id, attendance_id, check_in, check_out, work_location, location_details,
                   total_break_minutes, worked_minutes, status
            FROM attendance_sessions
            WHERE attendance_id IN ({placeholders(len(ids))})
            ORDER BY check_in ASC
            """,
            tuple(ids),
        )
        session_rows = fetchall(cur)

        breaks_by_session: dict[str, list[BreakInterval]] = defaultdict(list)
        if session_rows:
            session_ids = [s["session_id"] for s in session_rows]
            cur.execute(
                f"""
                SELECT break_id, session_id, start_time, end_time, duration_minutes
                FROM attendance_breaks
                WHERE session_id IN ({placeholders(len(session_ids))})
                ORDER BY start_time ASC
                """,
                tuple(session_ids),
            )
            for b in fetchall(cur):
                breaks_by_session[b["session_id"]].append(_row_to_break(b))

        sessions_by_record: dict[int, list[WorkSession]] = defaultdict(list)
        for s in session_rows:
            sessions_by_record[int(s["attendance_id"])].append(_row_to_session(s, breaks_by_session[s["session_id"]]))

        return [_row_to_record(r, sessions_by_record[int(r["attendance_id"])]) for r in rows]

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_RECORD_COLUMNS} FROM attendance_records WHERE user_id=%s AND work_date=%s",
                (int(user_id), work_date),
            )
            r = fetchone(cur)
            if not r:
                return None
            return self._load(cur, [r])[0]

    def list_for_user(self, user_id: int, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date ASC
                """,
                (int(user_id), start, end),
            )
            return self._load(cur, fetchall(cur))

    def ensure_record(
        self,
        *,
        user_id: int,
        work_date: date,
        source: RecordSource,
        actor_id: Optional[int] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            # LAST_INSERT_ID(expr) makes lastrowid report the existing row on duplicates.
            cur.execute(
                """
                INSERT INTO attendance_records(user_id, work_date, status, source, created_by, updated_by)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE attendance_id=LAST_INSERT_ID(attendance_id)
                """,
                (int(user_id), work_date, AttendanceStatus.INCOMPLETE.value, source.value, actor_id, actor_id),
            )
            return int(cur.lastrowid)

    def add_session(self, session: WorkSession) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_sessions(
                        session_id, attendance_id, check_in, work_location, location_details,
                        total_break_minutes, worked_minutes, status, open_flag
                    )
                    VALUES(%s,%s,%s,%s,%s,0,0,%s,1)
                    """,
                    (
                        session.session_id,
                        int(session.attendance_id),
                        session.check_in,
                        session.work_location.value,
                        session.location_details,
                        session.status.value,
                    ),
                )
        except IntegrityError as e:
            if is_duplicate_key(e):
                raise AlreadyClockedInError("Already clocked in") from e
            raise

    def close_session(self, *, session_id: str, check_out: datetime, worked_minutes: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_sessions
                SET check_out=%s, worked_minutes=%s, status=%s, open_flag=NULL
                WHERE session_id=%s AND status=%s
                """,
                (check_out, int(worked_minutes), SessionStatus.COMPLETED.value, session_id, SessionStatus.ACTIVE.value),
            )
            return cur.rowcount > 0

    def open_break(self, *, session_id: str, break_id: str, start_time: datetime) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_breaks(break_id, session_id, start_time, open_flag)
                    VALUES(%s,%s,%s,1)
                    """,
                    (break_id, session_id, start_time),
                )
                cur.execute(
                    "UPDATE attendance_sessions SET status=%s WHERE session_id=%s AND status=%s",
                    (SessionStatus.ON_BREAK.value, session_id, SessionStatus.ACTIVE.value),
                )
                if cur.rowcount == 0:
                    raise NoActiveSessionError("No active session to start a break")
        except IntegrityError as e:
            if is_duplicate_key(e):
                raise AlreadyOnBreakError("Already on break") from e
            raise

    def close_break(self, *, session_id: str, break_id: str, end_time: datetime, duration_minutes: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_breaks
                SET end_time=%s, duration_minutes=%s, open_flag=NULL
                WHERE break_id=%s AND end_time IS NULL
                """,
                (end_time, int(duration_minutes), break_id),
            )
            if cur.rowcount == 0:
                return False
            cur.execute(
                """
                UPDATE attendance_sessions
                SET total_break_minutes=total_break_minutes + %s, status=%s
                WHERE session_id=%s AND status=%s
                """,
                (int(duration_minutes), SessionStatus.ACTIVE.value, session_id, SessionStatus.ON_BREAK.value),
            )
            return True

    def update_live_totals(
        self,
        *,
        attendance_id: int,
        worked_minutes: int,
        break_minutes: int,
        updated_by: Optional[int] = None,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET worked_minutes=%s, break_minutes=%s, updated_by=%s
                WHERE attendance_id=%s
                """,
                (int(worked_minutes), int(break_minutes), updated_by, int(attendance_id)),
            )

    def create_if_missing(
        self,
        *,
        user_id: int,
        work_date: date,
        outcome: FinalizationOutcome,
        source: RecordSource = RecordSource.SYSTEM,
        shift_id: Optional[int] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            # No-op update on duplicates: rowcount is 1 for an insert, 0 otherwise.
            cur.execute(
                """
                INSERT INTO attendance_records(
                    user_id, work_date, shift_id, worked_minutes, break_minutes, late_minutes,
                    early_exit_minutes, overtime_minutes, is_late, is_early_departure,
                    status, status_reason, correction_requested, source
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE attendance_id=attendance_id
                """,
                (
                    int(user_id),
                    work_date,
                    shift_id,
                    outcome.worked_minutes,
                    outcome.break_minutes,
                    outcome.late_minutes,
                    outcome.early_exit_minutes,
                    outcome.overtime_minutes,
                    outcome.is_late,
                    outcome.is_early_departure,
                    outcome.status.value,
                    outcome.status_reason,
                    outcome.correction_requested,
                    source.value,
                ),
            )
            return cur.rowcount == 1

    def save_finalization(
        self,
        *,
        attendance_id: int,
        outcome: FinalizationOutcome,
        shift_id: Optional[int] = None,
        expected_status: AttendanceStatus = AttendanceStatus.INCOMPLETE,
        updated_by: Optional[int] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, status_reason=%s, worked_minutes=%s, break_minutes=%s,
                    late_minutes=%s, early_exit_minutes=%s, overtime_minutes=%s,
                    is_late=%s, is_early_departure=%s, correction_requested=%s,
                    shift_id=COALESCE(%s, shift_id), updated_by=%s
                WHERE attendance_id=%s AND status=%s
                """,
                (
                    outcome.status.value,
                    outcome.status_reason,
                    outcome.worked_minutes,
                    outcome.break_minutes,
                    outcome.late_minutes,
                    outcome.early_exit_minutes,
                    outcome.overtime_minutes,
                    outcome.is_late,
                    outcome.is_early_departure,
                    outcome.correction_requested,
                    shift_id,
                    updated_by,
                    int(attendance_id),
                    expected_status.value,
                ),
            )
            return cur.rowcount > 0

    def list_open_sessions(self, *, work_date: Optional[date] = None) -> Sequence[LiveSession]:
        clauses = ["s.open_flag = 1"]
        params: list[object] = []
        if work_date is not None:
            clauses.append("ar.work_date=%s")
            params.append(work_date)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    u.user_id, u.full_name, ar.work_date,
                    s.session_id, s.check_in, s.status, s.work_location, s.location_details,
                    b.start_time AS break_started_at
                FROM attendance_sessions s
                JOIN attendance_records ar ON ar.attendance_id = s.attendance_id
                JOIN users u ON u.user_id = ar.user_id
                LEFT JOIN attendance_breaks b ON b.session_id = s.session_id AND b.open_flag = 1
                WHERE {where}
                ORDER BY s.check_in ASC
                """,
                tuple(params),
            )
            return [
                LiveSession(
                    user_id=int(r["user_id"]),
                    full_name=r["full_name"],
                    work_date=r["work_date"],
                    session_id=r["session_id"],
                    check_in=r["check_in"],
                    status=SessionStatus(r["status"]),
                    work_location=WorkLocation(r["work_location"]),
                    location_details=r.get("location_details"),
                    break_started_at=r.get("break_started_at"),
                )
                for r in fetchall(cur)
            ]

    def count_statuses(self, work_date: date) -> Mapping[AttendanceStatus, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT status, COUNT(*) AS total
                FROM attendance_records
                WHERE work_date=%s
                GROUP BY status
                """,
                (work_date,),
            )
            return {AttendanceStatus(r["status"]): int(r["total"]) for r in fetchall(cur)}
