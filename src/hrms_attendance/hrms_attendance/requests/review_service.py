from __future__ import annotations

import logging
from datetime import datetime

from ..attendance.calculator.base import WorkedTimeCalculator
from ..attendance.calculator.standard_calculator import StandardWorkedTimeCalculator
from ..attendance.finalizer import DailyFinalizer, FinalizationResult
from ..attendance.model import AttendanceRecord, FinalizationOutcome
from ..attendance.repository import AttendanceRepository
from ..core.enums import AttendanceStatus, RequestStatus, Role, SessionStatus
from ..core.exceptions import AuthorizationError, ValidationError
from ..notifications.audit import AuditTrail, audit_quietly
from ..notifications.notifier import Notifier, notify_quietly
from .repository import CorrectionRepository

logger = logging.getLogger(__name__)


class CorrectionReviewService:
    """HR decisions on missed-punch cases.

    Approving closes the dangling session at the confirmed time and runs the
    finalizer again; rejecting leaves the day absent.
    """

    def __init__(
        self,
        corrections: CorrectionRepository,
        attendance: AttendanceRepository,
        finalizer: DailyFinalizer,
        *,
        calculator: WorkedTimeCalculator | None = None,
        notifier: Notifier | None = None,
        audit: AuditTrail | None = None,
    ):
        self._corrections = corrections
        self._attendance = attendance
        self._finalizer = finalizer
        self._calculator = calculator or StandardWorkedTimeCalculator()
        self._notifier = notifier
        self._audit = audit

    def _load_pending(self, request_id: int):
        req = self._corrections.get(request_id=int(request_id))
        if not req:
            raise ValidationError("Correction request not found")
        if req.status != RequestStatus.PENDING:
            raise ValidationError("Correction request was already processed")
        return req

    def _close_dangling_session(self, record: AttendanceRecord, check_out: datetime) -> None:
        session = record.active_session
        if session is None:
            return
        if check_out < session.check_in:
            raise ValidationError("Check-out time cannot be before check-in time")

        break_minutes = session.total_break_minutes
        open_break = session.open_break
        if session.status == SessionStatus.ON_BREAK and open_break is not None:
            end = max(check_out, open_break.start_time)
            duration = self._calculator.session_worked_minutes(check_in=open_break.start_time, check_out=end, break_minutes=0)
            self._attendance.close_break(
                session_id=session.session_id,
                break_id=open_break.break_id,
                end_time=end,
                duration_minutes=duration,
            )
            break_minutes += duration

        worked = self._calculator.session_worked_minutes(
            check_in=session.check_in,
            check_out=check_out,
            break_minutes=break_minutes,
        )
        self._attendance.close_session(session_id=session.session_id, check_out=check_out, worked_minutes=worked)

    def approve(
        self,
        *,
        current_role: Role,
        admin_user_id: int,
        request_id: int,
        check_out_time: datetime,
        admin_note: str = "",
    ) -> FinalizationResult:
        if current_role != Role.ADMIN:
            raise AuthorizationError("You are not allowed to review corrections")

        req = self._load_pending(request_id)
        record = self._attendance.get_for_user_and_date(req.user_id, req.work_date)
        if not record:
            raise ValidationError("No attendance record to correct")
        if record.status != AttendanceStatus.PENDING_CORRECTION:
            raise ValidationError("Attendance record is not awaiting correction")

        self._close_dangling_session(record, check_out_time)

        refreshed = self._attendance.get_for_user_and_date(req.user_id, req.work_date) or record
        result = self._finalizer.finalize(
            user_id=req.user_id,
            work_date=req.work_date,
            record=refreshed,
            expected_status=AttendanceStatus.PENDING_CORRECTION,
            actor_id=int(admin_user_id),
        )
        if not result.updated:
            raise ValidationError("Attendance record could not be updated")

        decided = self._corrections.decide(
            request_id=int(request_id),
            status=RequestStatus.APPROVED,
            decided_by=int(admin_user_id),
            admin_note=(admin_note or "").strip() or None,
        )
        if not decided:
            raise ValidationError("Approving the correction failed")

        logger.info("Correction %s approved: user %s on %s is now %s", request_id, req.user_id, req.work_date, result.outcome.status.value)
        audit_quietly(
            self._audit,
            action="correction.approved",
            actor_id=int(admin_user_id),
            entity_type="correction_request",
            entity_id=str(request_id),
            meta={"check_out": check_out_time.isoformat(), "status": result.outcome.status.value},
        )
        notify_quietly(
            self._notifier,
            "notify_employee",
            user_id=req.user_id,
            subject="Attendance corrected",
            message=f"Your attendance for {req.work_date.isoformat()} is now {result.outcome.status.value}.",
        )
        return result

    def reject(
        self,
        *,
        current_role: Role,
        admin_user_id: int,
        request_id: int,
        admin_note: str = "",
    ) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("You are not allowed to review corrections")

        req = self._load_pending(request_id)
        note = (admin_note or "").strip() or None

        decided = self._corrections.decide(
            request_id=int(request_id),
            status=RequestStatus.REJECTED,
            decided_by=int(admin_user_id),
            admin_note=note,
        )
        if not decided:
            raise ValidationError("Rejecting the correction failed")

        record = self._attendance.get_for_user_and_date(req.user_id, req.work_date)
        if record and record.status == AttendanceStatus.PENDING_CORRECTION:
            # Void the dangling session so it stops showing as live.
            active = record.active_session
            if active is not None:
                self._close_dangling_session(record, active.check_in)
            self._attendance.save_finalization(
                attendance_id=record.attendance_id,
                outcome=FinalizationOutcome(
                    status=AttendanceStatus.ABSENT,
                    status_reason=f"Missed punch correction rejected{': ' + note if note else ''}",
                    worked_minutes=record.worked_minutes,
                    break_minutes=record.break_minutes,
                ),
                expected_status=AttendanceStatus.PENDING_CORRECTION,
                updated_by=int(admin_user_id),
            )

        logger.info("Correction %s rejected for user %s on %s", request_id, req.user_id, req.work_date)
        audit_quietly(
            self._audit,
            action="correction.rejected",
            actor_id=int(admin_user_id),
            entity_type="correction_request",
            entity_id=str(request_id),
            meta={"admin_note": note},
        )
        notify_quietly(
            self._notifier,
            "notify_employee",
            user_id=req.user_id,
            subject="Attendance correction rejected",
            message=f"Your missed punch for {req.work_date.isoformat()} was rejected; the day is recorded as absent.",
        )

