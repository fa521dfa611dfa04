from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..core.enums import CorrectionIssue, RequestStatus
from ..notifications.audit import AuditTrail, audit_quietly
from .model import CorrectionRequest
from .repository import CorrectionRepository, LeaveRepository

logger = logging.getLogger(__name__)


class LeaveLookup:
    """Approved-leave coverage. The leave module owns those dates' status."""

    def __init__(self, leaves: LeaveRepository):
        self._leaves = leaves

    def is_on_approved_leave(self, user_id: int, work_date: date) -> bool:
        return self._leaves.has_approved_leave(user_id=int(user_id), work_date=work_date)


class CorrectionService:
    def __init__(self, corrections: CorrectionRepository, *, audit: Optional[AuditTrail] = None):
        self._corrections = corrections
        self._audit = audit

    def open_missed_punch_case(
        self,
        *,
        user_id: int,
        work_date: date,
        reason: str,
        attendance_id: Optional[int] = None,
    ) -> bool:
        """Open a missed-punch case unless one is already pending. Returns True if a case was opened."""
        existing = self._corrections.find_pending(
            user_id=int(user_id), work_date=work_date, issue_type=CorrectionIssue.MISSED_PUNCH
        )
        if existing:
            return False

        request_id = self._corrections.create_pending(
            user_id=int(user_id),
            work_date=work_date,
            issue_type=CorrectionIssue.MISSED_PUNCH,
            reason=reason,
            attendance_id=attendance_id,
        )
        if request_id is None:
            return False

        logger.info("Opened missed-punch case %s for user %s on %s", request_id, user_id, work_date.isoformat())
        audit_quietly(
            self._audit,
            action="correction.opened",
            actor_id=None,
            entity_type="correction_request",
            entity_id=str(request_id),
            meta={"user_id": int(user_id), "work_date": work_date.isoformat(), "reason": reason},
        )
        return True

    def list_pending(self, *, user_id: Optional[int] = None) -> Sequence[CorrectionRequest]:
        return self._corrections.list_requests(status=RequestStatus.PENDING, user_id=user_id, limit=500)
