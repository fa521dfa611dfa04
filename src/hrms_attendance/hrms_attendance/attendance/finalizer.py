from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import AttendanceStatus, RecordSource
from ..core.exceptions import MissingShiftAssignmentError
from ..requests.service import CorrectionService
from ..shifts.model import Shift
from ..shifts.resolver import ShiftResolver
from .calculator.base import TimingMetrics, WorkedTimeCalculator
from .calculator.standard_calculator import StandardWorkedTimeCalculator
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, FinalizationOutcome
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FinalizationResult:
    outcome: FinalizationOutcome
    created: bool = False
    updated: bool = False
    correction_opened: bool = False

    @property
    def written(self) -> bool:
        return self.created or self.updated


class DailyFinalizer:
    """Turns one employee's day into its terminal status.

    `evaluate` is pure; `finalize` resolves the shift, persists the outcome
    and opens a missed-punch case when the day ended with an open session.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        shift_resolver: ShiftResolver,
        corrections: CorrectionService | None = None,
        *,
        calculator: WorkedTimeCalculator | None = None,
        strategy_factory: AttendanceStrategyFactory | None = None,
    ):
        self._attendance = attendance
        self._shift_resolver = shift_resolver
        self._corrections = corrections
        self._calculator = calculator or StandardWorkedTimeCalculator()
        self._factory = strategy_factory or AttendanceStrategyFactory()

    def resolve_shift(self, user_id: int, work_date: date) -> Optional[Shift]:
        try:
            shift = self._shift_resolver.get_active_shift_for_employee(user_id, work_date)
        except MissingShiftAssignmentError:
            shift = None
        if shift is None:
            logger.warning("No shift assignment for user %s on %s", user_id, work_date.isoformat())
        return shift

    def evaluate(self, record: Optional[AttendanceRecord], shift: Optional[Shift], work_date: date) -> FinalizationOutcome:
        worked = self._calculator.record_worked_minutes(record) if record else 0
        breaks = self._calculator.record_break_minutes(record) if record else 0

        strategy = self._factory.for_day(record=record, shift=shift, worked_minutes=worked)
        decision = strategy.decide(record=record, shift=shift, work_date=work_date, worked_minutes=worked)

        timing = TimingMetrics()
        if record is not None and shift is not None:
            timing = self._calculator.timing(record, shift, work_date)

        return FinalizationOutcome(
            status=decision.status,
            status_reason=decision.reason,
            worked_minutes=worked,
            break_minutes=breaks,
            late_minutes=timing.late_minutes,
            early_exit_minutes=timing.early_exit_minutes,
            overtime_minutes=timing.overtime_minutes,
            is_late=timing.is_late,
            is_early_departure=timing.is_early_departure,
            correction_requested=decision.correction_requested,
        )

    def finalize(
        self,
        *,
        user_id: int,
        work_date: date,
        record: Optional[AttendanceRecord] = None,
        shift: Optional[Shift] = None,
        shift_resolved: bool = False,
        expected_status: AttendanceStatus = AttendanceStatus.INCOMPLETE,
        actor_id: Optional[int] = None,
    ) -> FinalizationResult:
        """Persist the day's terminal status.

        With no record, a system record is created unless one appeared meanwhile.
        With a record, the write only happens while it is still in expected_status.
        Pass shift_resolved=True when the caller already looked the shift up
        (shift may then be None).
        """
        if not shift_resolved:
            shift = self.resolve_shift(user_id, work_date)

        outcome = self.evaluate(record, shift, work_date)
        shift_id = shift.shift_id if shift else None

        if record is None:
            created = self._attendance.create_if_missing(
                user_id=int(user_id),
                work_date=work_date,
                outcome=outcome,
                source=RecordSource.SYSTEM,
                shift_id=shift_id,
            )
            return FinalizationResult(outcome=outcome, created=created)

        if record.status != expected_status:
            return FinalizationResult(outcome=outcome)

        updated = self._attendance.save_finalization(
            attendance_id=record.attendance_id,
            outcome=outcome,
            shift_id=shift_id,
            expected_status=expected_status,
            updated_by=actor_id,
        )
        if not updated:
            logger.info("Record %s was finalized concurrently; leaving it as is", record.attendance_id)
            return FinalizationResult(outcome=outcome)

        opened = False
        if outcome.correction_requested and self._corrections is not None:
            try:
                opened = self._corrections.open_missed_punch_case(
                    user_id=int(user_id),
                    work_date=work_date,
                    reason=outcome.status_reason or "Missed clock-out",
                    attendance_id=record.attendance_id,
                )
            except Exception:
                logger.exception("Could not open correction case for user %s on %s", user_id, work_date.isoformat())

        return FinalizationResult(outcome=outcome, updated=True, correction_opened=opened)
