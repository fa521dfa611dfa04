class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class AttendanceError(DomainError):
    """Invalid attendance state transition requested by a client.

    These are returned to the caller as-is and never retried.
    """

    http_status = 400


class AlreadyClockedInError(AttendanceError):
    pass


class NoActiveSessionError(AttendanceError):
    pass


class CannotClockOutOnBreakError(AttendanceError):
    pass


class InvalidLocationError(AttendanceError):
    pass


class AlreadyOnBreakError(AttendanceError):
    pass


class NotOnBreakError(AttendanceError):
    pass


class MissingShiftAssignmentError(DomainError):
    """No shift could be resolved for an employee on a date."""


class CalendarClassificationError(DomainError):
    """The holiday or working-day calendar could not classify a date."""
