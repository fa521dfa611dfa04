from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ...core.enums import AttendanceStatus
from ...shifts.model import Shift
from ..model import AttendanceRecord


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    reason: Optional[str] = None
    correction_requested: bool = False


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide a day's final status."""

    @abstractmethod
    def decide(
        self,
        *,
        record: Optional[AttendanceRecord],
        shift: Optional[Shift],
        work_date: date,
        worked_minutes: int,
    ) -> StatusDecision:
        raise NotImplementedError
