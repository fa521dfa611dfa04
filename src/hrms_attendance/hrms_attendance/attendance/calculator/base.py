from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime

from ...shifts.model import Shift
from ..model import AttendanceRecord


@dataclass(frozen=True)
class TimingMetrics:
    late_minutes: int = 0
    early_exit_minutes: int = 0
    overtime_minutes: int = 0

    @property
    def is_late(self) -> bool:
        return self.late_minutes > 0

    @property
    def is_early_departure(self) -> bool:
        return self.early_exit_minutes > 0


class WorkedTimeCalculator(ABC):
    """Calculator interface (Strategy Pattern for worked time)."""

    @abstractmethod
    def session_worked_minutes(self, *, check_in: datetime, check_out: datetime, break_minutes: int) -> int:
        raise NotImplementedError

    @abstractmethod
    def record_worked_minutes(self, record: AttendanceRecord) -> int:
        raise NotImplementedError

    @abstractmethod
    def record_break_minutes(self, record: AttendanceRecord) -> int:
        raise NotImplementedError

    @abstractmethod
    def timing(self, record: AttendanceRecord, shift: Shift, work_date: date) -> TimingMetrics:
        raise NotImplementedError
