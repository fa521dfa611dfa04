from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .attendance.calculator.standard_calculator import StandardWorkedTimeCalculator
from .attendance.factory import AttendanceStrategyFactory
from .attendance.finalizer import DailyFinalizer
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import (
    DEFAULT_BULK_DELAY_SECONDS,
    DEFAULT_FINALIZATION_BUFFER_MINUTES,
    DEFAULT_WEEKEND_DAYS,
)
from .database.connection import DatabaseConnection
from .finalization.job import CalendarFinalizationJob
from .notifications.audit import MySQLAuditTrail
from .notifications.notifier import LoggingNotifier
from .reports.service import AttendanceReportService
from .requests.mysql_request_repository import MySQLCorrectionRepository, MySQLLeaveRepository
from .requests.review_service import CorrectionReviewService
from .requests.service import CorrectionService, LeaveLookup
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.resolver import ShiftResolver
from .users.mysql_user_repository import MySQLUserRepository
from .work_calendar.model import parse_weekend_days
from .work_calendar.mysql_calendar_repository import MySQLHolidayRepository, MySQLWorkingRuleRepository
from .work_calendar.service import CalendarService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: MySQLUserRepository
    shifts_repo: MySQLShiftRepository
    schedules_repo: MySQLScheduleRepository
    attendance_repo: MySQLAttendanceRepository
    corrections_repo: MySQLCorrectionRepository

    shift_resolver: ShiftResolver
    calendar_service: CalendarService
    leave_lookup: LeaveLookup
    correction_service: CorrectionService
    attendance_service: AttendanceService
    finalizer: DailyFinalizer
    finalization_job: CalendarFinalizationJob
    correction_review_service: CorrectionReviewService
    report_service: AttendanceReportService


def build_container(
    *,
    db_config: dict,
    buffer_minutes: int = DEFAULT_FINALIZATION_BUFFER_MINUTES,
    bulk_delay_seconds: float = DEFAULT_BULK_DELAY_SECONDS,
    weekend_days: str | Iterable[int] = DEFAULT_WEEKEND_DAYS,
) -> Container:
    conn = DatabaseConnection.from_settings(db_config)

    users_repo = MySQLUserRepository(conn)
    shifts_repo = MySQLShiftRepository(conn)
    schedules_repo = MySQLScheduleRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    corrections_repo = MySQLCorrectionRepository(conn)

    notifier = LoggingNotifier()
    audit = MySQLAuditTrail(conn)
    calculator = StandardWorkedTimeCalculator()

    if isinstance(weekend_days, str):
        weekend_days = parse_weekend_days(weekend_days)

    shift_resolver = ShiftResolver(shifts_repo, users_repo, schedules_repo)
    calendar_service = CalendarService(
        MySQLHolidayRepository(conn),
        MySQLWorkingRuleRepository(conn),
        default_weekend_days=weekend_days,
    )
    leave_lookup = LeaveLookup(MySQLLeaveRepository(conn))
    correction_service = CorrectionService(corrections_repo, audit=audit)

    attendance_service = AttendanceService(attendance_repo, notifier=notifier, audit=audit, calculator=calculator)
    finalizer = DailyFinalizer(
        attendance_repo,
        shift_resolver,
        correction_service,
        calculator=calculator,
        strategy_factory=AttendanceStrategyFactory(),
    )
    finalization_job = CalendarFinalizationJob(
        attendance_repo,
        users_repo,
        calendar_service,
        leave_lookup,
        finalizer,
        notifier=notifier,
        buffer_minutes=buffer_minutes,
        bulk_delay_seconds=bulk_delay_seconds,
    )
    correction_review_service = CorrectionReviewService(
        corrections_repo,
        attendance_repo,
        finalizer,
        calculator=calculator,
        notifier=notifier,
        audit=audit,
    )
    report_service = AttendanceReportService(attendance_repo, users_repo)

    return Container(
        conn=conn,
        users_repo=users_repo,
        shifts_repo=shifts_repo,
        schedules_repo=schedules_repo,
        attendance_repo=attendance_repo,
        corrections_repo=corrections_repo,
        shift_resolver=shift_resolver,
        calendar_service=calendar_service,
        leave_lookup=leave_lookup,
        correction_service=correction_service,
        attendance_service=attendance_service,
        finalizer=finalizer,
        finalization_job=finalization_job,
        correction_review_service=correction_review_service,
        report_service=report_service,
    )
