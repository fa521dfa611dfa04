from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import CorrectionIssue, RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import CorrectionRequest
from .repository import CorrectionRepository, LeaveRepository

_CORRECTION_COLUMNS = """
    request_id, user_id, attendance_id, work_date, issue_type, reason,
    status, created_at, decided_by, decided_at, admin_note
"""


def _row_to_correction(r: Dict[str, Any]) -> CorrectionRequest:
    return CorrectionRequest(
        request_id=int(r["request_id"]),
        user_id=int(r["user_id"]),
        attendance_id=r.get("attendance_id"),
        work_date=r["work_date"],
        issue_type=CorrectionIssue(r["issue_type"]),
        reason=r["reason"],
        status=RequestStatus(r["status"]),
        created_at=r["created_at"],
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
        admin_note=r.get("admin_note"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def has_approved_leave(self, *, user_id: int, work_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 AS hit
                FROM leave_requests
                WHERE user_id=%s AND status=%s AND %s BETWEEN start_date AND end_date
                LIMIT 1
                """,
                (int(user_id), RequestStatus.APPROVED.value, work_date),
            )
            return fetchone(cur) is not None


class MySQLCorrectionRepository(CorrectionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_pending(
        self,
        *,
        user_id: int,
        work_date: date,
        issue_type: CorrectionIssue,
        reason: str,
        attendance_id: Optional[int] = None,
    ) -> Optional[int]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO correction_requests(user_id, attendance_id, work_date, issue_type, reason, status, pending_flag)
                    VALUES(%s,%s,%s,%s,%s,%s,1)
                    """,
                    (
                        int(user_id),
                        attendance_id,
                        work_date,
                        issue_type.value,
                        reason,
                        RequestStatus.PENDING.value,
                    ),
                )
                return int(cur.lastrowid)
        except IntegrityError as e:
            if is_duplicate_key(e):
                return None
            raise

    def get(self, *, request_id: int) -> Optional[CorrectionRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_CORRECTION_COLUMNS} FROM correction_requests WHERE request_id=%s",
                (int(request_id),),
            )
            r = fetchone(cur)
            return _row_to_correction(r) if r else None

    def find_pending(self, *, user_id: int, work_date: date, issue_type: CorrectionIssue) -> Optional[CorrectionRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_CORRECTION_COLUMNS}
                FROM correction_requests
                WHERE user_id=%s AND work_date=%s AND issue_type=%s AND status=%s
                LIMIT 1
                """,
                (int(user_id), work_date, issue_type.value, RequestStatus.PENDING.value),
            )
            r = fetchone(cur)
            return _row_to_correction(r) if r else None

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        user_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[CorrectionRequest]:
        clauses = ["1=1"]
        params: list[object] = []

        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(int(user_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_CORRECTION_COLUMNS}
                FROM correction_requests
                WHERE {where}
                ORDER BY created_at DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_row_to_correction(r) for r in fetchall(cur)]

    def decide(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        decided_by: int,
        admin_note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE correction_requests
                SET status=%s, decided_by=%s, decided_at=NOW(), admin_note=%s, pending_flag=NULL
                WHERE request_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(decided_by),
                    admin_note,
                    int(request_id),
                    RequestStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0
