from __future__ import annotations

import logging
from datetime import timedelta
from typing import Callable, List

from apscheduler.schedulers.background import BackgroundScheduler

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_FINALIZATION_INTERVAL_MINUTES
from .job import CalendarFinalizationJob, FinalizationSummary

logger = logging.getLogger(__name__)

JOB_ID = "attendance-finalization"


def finalize_recent_days(job: CalendarFinalizationJob, *, clock: Callable = now_local) -> List[FinalizationSummary]:
    """One scheduler tick: yesterday first (late overnight shifts), then today."""
    now = clock()
    today = now.date()
    summaries = []
    for day in (today - timedelta(days=1), today):
        summaries.append(job.run_for_date(day, now=now))
    return summaries


def build_scheduler(
    job: CalendarFinalizationJob,
    *,
    interval_minutes: int = DEFAULT_FINALIZATION_INTERVAL_MINUTES,
) -> BackgroundScheduler:
    scheduler = BackgroundScheduler(
        job_defaults={
            "coalesce": True,
            "max_instances": 1,
            "misfire_grace_time": int(interval_minutes) * 60,
        }
    )
    scheduler.add_job(
        lambda: finalize_recent_days(job),
        "interval",
        minutes=int(interval_minutes),
        id=JOB_ID,
        replace_existing=True,
    )
    return scheduler


def start_scheduler(job: CalendarFinalizationJob, *, interval_minutes: int) -> BackgroundScheduler:
    scheduler = build_scheduler(job, interval_minutes=interval_minutes)
    scheduler.start()
    logger.info("Attendance finalization scheduled every %s minutes", interval_minutes)
    return scheduler
