from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import FrozenSet, Iterable, Optional

from ..core.constants import DEFAULT_WEEKEND_DAYS
from ..core.enums import DayType
from ..core.exceptions import CalendarClassificationError
from .repository import HolidayRepository, WorkingRuleRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HolidayInfo:
    name: str


class CalendarService:
    """Holiday and working-day questions for one organization-wide rule set."""

    def __init__(
        self,
        holidays: HolidayRepository,
        working_rules: WorkingRuleRepository | None = None,
        *,
        default_weekend_days: Iterable[int] = DEFAULT_WEEKEND_DAYS,
    ):
        self._holidays = holidays
        self._working_rules = working_rules
        self._default_weekend_days: FrozenSet[int] = frozenset(int(d) for d in default_weekend_days)

    def is_holiday(self, day: date) -> bool:
        return self._holidays.get_active_for_date(day) is not None

    def get_holiday_info(self, day: date) -> Optional[HolidayInfo]:
        holiday = self._holidays.get_active_for_date(day)
        if not holiday:
            return None
        return HolidayInfo(name=holiday.name)

    def is_working_day(self, day: date) -> bool:
        """Weekend rule only; holidays are answered separately by is_holiday."""
        rule = self._working_rules.get_active_for_date(day) if self._working_rules else None
        if rule:
            return rule.is_working_day(day)
        return day.weekday() not in self._default_weekend_days

    def classify(self, day: date) -> DayType:
        """Holiday wins over weekend when both apply."""
        try:
            if self.is_holiday(day):
                return DayType.HOLIDAY
            if not self.is_working_day(day):
                return DayType.WEEKEND
            return DayType.WORKING_DAY
        except Exception as e:
            logger.exception("Could not classify %s", day.isoformat())
            raise CalendarClassificationError(f"Could not classify {day.isoformat()}: {e}") from e
