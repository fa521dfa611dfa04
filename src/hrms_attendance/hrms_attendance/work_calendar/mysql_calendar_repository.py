from __future__ import annotations

from datetime import date
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Holiday, WorkingRule, parse_weekend_days
from .repository import HolidayRepository, WorkingRuleRepository


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active_for_date(self, day: date) -> Optional[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT holiday_id, holiday_date, name, is_active
                FROM holidays
                WHERE holiday_date=%s AND is_active=1
                """,
                (day,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Holiday(
                holiday_id=int(r["holiday_id"]),
                holiday_date=r["holiday_date"],
                name=r["name"],
                is_active=bool(r["is_active"]),
            )


class MySQLWorkingRuleRepository(WorkingRuleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active_for_date(self, day: date) -> Optional[WorkingRule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT rule_id, rule_name, weekend_days, effective_from, effective_to
                FROM working_rules
                WHERE is_active=1
                  AND effective_from <= %s
                  AND (effective_to IS NULL OR effective_to >= %s)
                ORDER BY effective_from DESC, rule_id DESC
                LIMIT 1
                """,
                (day, day),
            )
            r = fetchone(cur)
            if not r:
                return None
            return WorkingRule(
                rule_id=int(r["rule_id"]),
                rule_name=r["rule_name"],
                weekend_days=parse_weekend_days(r["weekend_days"]),
                effective_from=r["effective_from"],
                effective_to=r.get("effective_to"),
            )
