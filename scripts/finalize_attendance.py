"""Run calendar finalization from the command line (cron, backfills).

    python scripts/finalize_attendance.py                 # yesterday and today
    python scripts/finalize_attendance.py --date 2026-01-26
    python scripts/finalize_attendance.py --start 2026-01-01 --end 2026-01-31
"""

from __future__ import annotations

import argparse
import importlib
import json
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.hrms_attendance.hrms_attendance.common.datetime_utils import parse_iso_date
from src.hrms_attendance.hrms_attendance.container import build_container
from src.hrms_attendance.hrms_attendance.finalization.scheduler import finalize_recent_days


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Finalize attendance records for one date or a date range.")
    parser.add_argument("--date", type=parse_iso_date, help="single date (YYYY-MM-DD)")
    parser.add_argument("--start", type=parse_iso_date, help="range start (YYYY-MM-DD)")
    parser.add_argument("--end", type=parse_iso_date, help="range end, inclusive (YYYY-MM-DD)")
    args = parser.parse_args(argv)

    if (args.start is None) != (args.end is None):
        parser.error("--start and --end must be given together")
    if args.date and args.start:
        parser.error("use either --date or --start/--end")
    return args


def main(argv=None) -> int:
    args = _parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper())

    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        buffer_minutes=int(settings.FINALIZATION_BUFFER_MINUTES),
        bulk_delay_seconds=float(settings.BULK_DELAY_SECONDS),
        weekend_days=str(settings.WEEKEND_DAYS),
    )
    job = container.finalization_job

    if args.date:
        summaries = [job.run_for_date(args.date)]
    elif args.start:
        summaries = job.run_for_range(args.start, args.end)
    else:
        summaries = finalize_recent_days(job)

    print(json.dumps([s.to_dict() for s in summaries], indent=2))
    return 1 if any(s.errors for s in summaries) else 0


if __name__ == "__main__":
    sys.exit(main())
