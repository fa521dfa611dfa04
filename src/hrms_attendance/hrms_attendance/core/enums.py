from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller role as provided by the authentication layer."""

    ADMIN = "admin"
    STAFF = "staff"


class AttendanceStatus(str, Enum):
    """Status of one attendance record (one per employee per date).

    INCOMPLETE is the only non-terminal value: the day is still open.
    LEAVE is written by the leave module; finalization never assigns it
    and leaves such records untouched.
    """

    INCOMPLETE = "incomplete"
    PRESENT = "present"
    HALF_DAY = "half_day"
    ABSENT = "absent"
    HOLIDAY = "holiday"
    WEEKEND = "weekend"
    LEAVE = "leave"
    PENDING_CORRECTION = "pending_correction"

    @property
    def is_terminal(self) -> bool:
        try:
            return TERMINAL_STATUSES[self]
        except KeyError:
            raise ValueError(f"Unhandled attendance status: {self.value!r}") from None


# Every status must appear here; a missing entry is a bug, not a default.
TERMINAL_STATUSES: dict[AttendanceStatus, bool] = {
    AttendanceStatus.INCOMPLETE: False,
    AttendanceStatus.PRESENT: True,
    AttendanceStatus.HALF_DAY: True,
    AttendanceStatus.ABSENT: True,
    AttendanceStatus.HOLIDAY: True,
    AttendanceStatus.WEEKEND: True,
    AttendanceStatus.LEAVE: True,
    AttendanceStatus.PENDING_CORRECTION: True,
}


class SessionStatus(str, Enum):
    ACTIVE = "active"
    ON_BREAK = "on_break"
    COMPLETED = "completed"

    @property
    def is_open(self) -> bool:
        return self in (SessionStatus.ACTIVE, SessionStatus.ON_BREAK)


class WorkLocation(str, Enum):
    OFFICE = "office"
    REMOTE = "remote"
    CLIENT_SITE = "client_site"

    @property
    def requires_details(self) -> bool:
        return self == WorkLocation.CLIENT_SITE


class RecordSource(str, Enum):
    """Who produced an attendance record."""

    SELF = "self"
    MANUAL = "manual"
    SYSTEM = "system"


class DayType(str, Enum):
    HOLIDAY = "HOLIDAY"
    WEEKEND = "WEEKEND"
    WORKING_DAY = "WORKING_DAY"


class RequestStatus(str, Enum):
    """Approval state of leave and correction requests."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class CorrectionIssue(str, Enum):
    MISSED_PUNCH = "missed_punch"
