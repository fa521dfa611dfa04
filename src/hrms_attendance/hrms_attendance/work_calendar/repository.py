from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from .model import Holiday, WorkingRule


class HolidayRepository(Protocol):
    def get_active_for_date(self, day: date) -> Optional[Holiday]:
        raise NotImplementedError


class WorkingRuleRepository(Protocol):
    def get_active_for_date(self, day: date) -> Optional[WorkingRule]:
        """Most recent active rule whose effective window covers day."""

        raise NotImplementedError
