from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import CorrectionIssue, RequestStatus


@dataclass(frozen=True)
class CorrectionRequest:
    """HR case opened when a day could not be finalized on its own."""

    request_id: int
    user_id: int
    work_date: date
    issue_type: CorrectionIssue
    reason: str
    status: RequestStatus
    created_at: datetime
    attendance_id: Optional[int] = None
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    admin_note: Optional[str] = None


def correction_to_dict(c: CorrectionRequest) -> dict:
    return {
        "request_id": c.request_id,
        "user_id": c.user_id,
        "attendance_id": c.attendance_id,
        "work_date": c.work_date.strftime("%Y-%m-%d"),
        "issue_type": c.issue_type.value,
        "reason": c.reason,
        "status": c.status.value,
        "created_at": c.created_at.strftime("%Y-%m-%d %H:%M"),
        "decided_by": c.decided_by,
        "admin_note": c.admin_note or "",
    }
