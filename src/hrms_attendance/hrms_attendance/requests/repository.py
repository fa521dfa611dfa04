from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import CorrectionIssue, RequestStatus
from .model import CorrectionRequest


class LeaveRepository(Protocol):
    def has_approved_leave(self, *, user_id: int, work_date: date) -> bool:
        raise NotImplementedError


class CorrectionRepository(Protocol):
    def create_pending(
        self,
        *,
        user_id: int,
        work_date: date,
        issue_type: CorrectionIssue,
        reason: str,
        attendance_id: Optional[int] = None,
    ) -> Optional[int]:
        """Insert a PENDING case. Returns None if one is already pending for that user/date/issue."""

        raise NotImplementedError

    def get(self, *, request_id: int) -> Optional[CorrectionRequest]:
        raise NotImplementedError

    def find_pending(self, *, user_id: int, work_date: date, issue_type: CorrectionIssue) -> Optional[CorrectionRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        user_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[CorrectionRequest]:
        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        decided_by: int,
        admin_note: Optional[str] = None,
    ) -> bool:
        """Move a PENDING case to status. Returns False if it was already decided."""

        raise NotImplementedError
