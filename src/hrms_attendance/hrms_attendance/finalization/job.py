from __future__ import annotations

import logging
import time as _time
from dataclasses import asdict, dataclass
from datetime import date, datetime, time, timedelta
from typing import Callable, List, Optional

from ..attendance.finalizer import DailyFinalizer
from ..attendance.model import AttendanceRecord, FinalizationOutcome
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import iter_dates, now_local
from ..common.validators import require_date_range
from ..core.constants import DEFAULT_BULK_DELAY_SECONDS, DEFAULT_FINALIZATION_BUFFER_MINUTES
from ..core.enums import AttendanceStatus, DayType, RecordSource
from ..core.exceptions import CalendarClassificationError
from ..notifications.notifier import Notifier, notify_quietly
from ..requests.service import LeaveLookup
from ..shifts.model import Shift
from ..users.repository import UserRepository
from ..work_calendar.service import CalendarService

logger = logging.getLogger(__name__)

UNKNOWN_DAY_TYPE = "UNKNOWN"

_CREATED = "created"
_FINALIZED = "finalized"
_SKIPPED = "skipped"

# System day-off records that still get finalized when the employee worked anyway.
_DAY_OFF_STATUSES = frozenset({AttendanceStatus.HOLIDAY, AttendanceStatus.WEEKEND})


@dataclass(frozen=True)
class FinalizationSummary:
    date: date
    day_type: str
    processed: int = 0
    created: int = 0
    finalized: int = 0
    skipped: int = 0
    errors: int = 0

    def to_dict(self) -> dict:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        return data


@dataclass(frozen=True)
class EmployeeFinalizationStatus:
    user_id: int
    work_date: date
    status: str
    status_reason: Optional[str]
    finalized: bool
    shift_end: Optional[datetime]
    finalizes_after: datetime
    day_over: bool

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "date": self.work_date.isoformat(),
            "status": self.status,
            "status_reason": self.status_reason,
            "finalized": self.finalized,
            "shift_end": self.shift_end.isoformat() if self.shift_end else None,
            "finalizes_after": self.finalizes_after.isoformat(),
            "day_over": self.day_over,
        }


def _worked_day_off(record: AttendanceRecord) -> bool:
    return record.status in _DAY_OFF_STATUSES and bool(record.sessions)


class CalendarFinalizationJob:
    """Produces exactly one terminal record per active employee per date.

    Safe to run repeatedly: inserts only happen where no record exists and
    updates only touch records that are still incomplete, or system
    holiday/weekend records the employee logged work on.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        calendar: CalendarService,
        leave: LeaveLookup,
        finalizer: DailyFinalizer,
        *,
        notifier: Notifier | None = None,
        buffer_minutes: int = DEFAULT_FINALIZATION_BUFFER_MINUTES,
        bulk_delay_seconds: float = DEFAULT_BULK_DELAY_SECONDS,
        sleep: Callable[[float], None] = _time.sleep,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._users = users
        self._calendar = calendar
        self._leave = leave
        self._finalizer = finalizer
        self._notifier = notifier
        self._buffer = timedelta(minutes=int(buffer_minutes))
        self._bulk_delay_seconds = float(bulk_delay_seconds)
        self._sleep = sleep
        self._clock = clock

    def day_closes_at(self, shift: Optional[Shift], work_date: date) -> datetime:
        """Shift end plus buffer; without a shift the day ends at the next midnight."""
        if shift is not None:
            end = shift.ends_at(work_date)
        else:
            end = datetime.combine(work_date + timedelta(days=1), time.min)
        return end + self._buffer

    def run_for_date(self, target_date: date, *, now: datetime | None = None) -> FinalizationSummary:
        now = now or self._clock()

        try:
            day_type = self._calendar.classify(target_date)
            holiday = self._calendar.get_holiday_info(target_date) if day_type == DayType.HOLIDAY else None
        except Exception:
            logger.exception("Skipping %s: calendar could not classify the date", target_date.isoformat())
            return FinalizationSummary(date=target_date, day_type=UNKNOWN_DAY_TYPE, errors=1)

        try:
            employee_ids = list(self._users.list_active_employee_ids())
        except Exception:
            logger.exception("Could not load active employees for %s", target_date.isoformat())
            return FinalizationSummary(date=target_date, day_type=day_type.value, errors=1)

        counts = {_CREATED: 0, _FINALIZED: 0, _SKIPPED: 0}
        errors = 0
        for user_id in employee_ids:
            try:
                action = self._process_employee(
                    user_id,
                    target_date,
                    day_type,
                    holiday_name=holiday.name if holiday else None,
                    now=now,
                )
            except Exception:
                logger.exception("Finalization failed for user %s on %s", user_id, target_date.isoformat())
                errors += 1
                continue
            counts[action] += 1

        summary = FinalizationSummary(
            date=target_date,
            day_type=day_type.value,
            processed=len(employee_ids),
            created=counts[_CREATED],
            finalized=counts[_FINALIZED],
            skipped=counts[_SKIPPED],
            errors=errors,
        )
        logger.info(
            "Finalized %s (%s): processed=%d created=%d finalized=%d skipped=%d errors=%d",
            target_date.isoformat(),
            summary.day_type,
            summary.processed,
            summary.created,
            summary.finalized,
            summary.skipped,
            summary.errors,
        )
        return summary

    def run_for_range(self, start: date, end: date, *, now: datetime | None = None) -> List[FinalizationSummary]:
        require_date_range(start, end)
        now = now or self._clock()

        summaries: List[FinalizationSummary] = []
        for i, day in enumerate(iter_dates(start, end)):
            if i and self._bulk_delay_seconds > 0:
                self._sleep(self._bulk_delay_seconds)
            summaries.append(self.run_for_date(day, now=now))

        logger.info(
            "Bulk finalization %s..%s done: %d dates, %d errors",
            start.isoformat(),
            end.isoformat(),
            len(summaries),
            sum(s.errors for s in summaries),
        )
        return summaries

    def _process_employee(
        self,
        user_id: int,
        work_date: date,
        day_type: DayType,
        *,
        holiday_name: Optional[str],
        now: datetime,
    ) -> str:
        record = self._attendance.get_for_user_and_date(user_id, work_date)
        if record is not None and record.is_terminal and not _worked_day_off(record):
            return _SKIPPED

        if record is None and day_type != DayType.WORKING_DAY:
            return self._create_non_working_day(user_id, work_date, day_type, holiday_name)

        if day_type == DayType.WORKING_DAY and self._leave.is_on_approved_leave(user_id, work_date):
            return _SKIPPED

        shift = self._finalizer.resolve_shift(user_id, work_date)
        if now < self.day_closes_at(shift, work_date):
            return _SKIPPED

        result = self._finalizer.finalize(
            user_id=user_id,
            work_date=work_date,
            record=record,
            shift=shift,
            shift_resolved=True,
            expected_status=record.status if record is not None else AttendanceStatus.INCOMPLETE,
        )
        if not result.written:
            return _SKIPPED

        self._notify_outcome(user_id, work_date, result.outcome)
        return _CREATED if result.created else _FINALIZED

    def _create_non_working_day(
        self,
        user_id: int,
        work_date: date,
        day_type: DayType,
        holiday_name: Optional[str],
    ) -> str:
        if day_type == DayType.HOLIDAY:
            outcome = FinalizationOutcome(status=AttendanceStatus.HOLIDAY, status_reason=f"Holiday: {holiday_name}")
        else:
            outcome = FinalizationOutcome(status=AttendanceStatus.WEEKEND, status_reason=f"Weekend: {work_date.strftime('%A')}")

        created = self._attendance.create_if_missing(
            user_id=user_id,
            work_date=work_date,
            outcome=outcome,
            source=RecordSource.SYSTEM,
        )
        return _CREATED if created else _SKIPPED

    def _notify_outcome(
        self,
        user_id: int,
        work_date: date,
        outcome: FinalizationOutcome,
    ) -> None:
        day = work_date.isoformat()
        if outcome.status == AttendanceStatus.ABSENT:
            notify_quietly(
                self._notifier,
                "notify_employee",
                user_id=user_id,
                subject="Marked absent",
                message=f"You were marked absent for {day}: {outcome.status_reason or 'no attendance recorded'}.",
            )
        elif outcome.status == AttendanceStatus.PENDING_CORRECTION:
            notify_quietly(
                self._notifier,
                "notify_employee",
                user_id=user_id,
                subject="Missed clock-out",
                message=f"Your session on {day} was never closed. HR will review the correction request.",
            )

    def get_status(self, user_id: int, work_date: date, *, now: datetime | None = None) -> EmployeeFinalizationStatus:
        now = now or self._clock()
        record = self._attendance.get_for_user_and_date(int(user_id), work_date)
        shift = self._finalizer.resolve_shift(int(user_id), work_date)
        closes_at = self.day_closes_at(shift, work_date)

        return EmployeeFinalizationStatus(
            user_id=int(user_id),
            work_date=work_date,
            status=record.status.value if record else "not_started",
            status_reason=record.status_reason if record else None,
            finalized=bool(record and record.is_terminal and not _worked_day_off(record)),
            shift_end=shift.ends_at(work_date) if shift else None,
            finalizes_after=closes_at,
            day_over=now >= closes_at,
        )

    def get_date_status(self, work_date: date) -> dict:
        """Whether a date still has records waiting for finalization."""
        try:
            day_type = self._calendar.classify(work_date)
        except CalendarClassificationError:
            day_type = None

        counts = self._attendance.count_statuses(work_date)
        incomplete = int(counts.get(AttendanceStatus.INCOMPLETE, 0))
        return {
            "date": work_date.isoformat(),
            "day_type": day_type.value if day_type else UNKNOWN_DAY_TYPE,
            "needs_finalization": incomplete > 0,
            "counts": {status.value: int(counts.get(status, 0)) for status in AttendanceStatus},
        }
