from __future__ import annotations

import logging

from flask import Flask, request

from ..common.api import admin_required, api_errors, current_user_id, ok, parse_date_arg, parse_int_arg
from ..common.datetime_utils import now_local
from ..core.exceptions import ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    job = container.finalization_job

    @app.route("/api/admin/attendance/finalize", methods=["POST"], endpoint="api_finalize_date")
    @admin_required
    @api_errors
    def finalize_date():
        payload = request.get_json(silent=True) or {}
        target = parse_date_arg(payload.get("date"), "date", default=now_local().date())
        logger.info("Manual finalization of %s triggered by user %s", target.isoformat(), current_user_id())
        summary = job.run_for_date(target)
        return ok(summary.to_dict(), "Attendance finalization completed")

    @app.route("/api/admin/attendance/finalize/bulk", methods=["POST"], endpoint="api_finalize_bulk")
    @admin_required
    @api_errors
    def finalize_bulk():
        payload = request.get_json(silent=True) or {}
        start = parse_date_arg(payload.get("start"), "start")
        end = parse_date_arg(payload.get("end"), "end")
        if start is None or end is None:
            raise ValidationError("start and end are required")

        logger.info("Bulk finalization %s..%s triggered by user %s", start.isoformat(), end.isoformat(), current_user_id())
        summaries = job.run_for_range(start, end)
        return ok(
            {
                "dates": len(summaries),
                "errors": sum(s.errors for s in summaries),
                "summaries": [s.to_dict() for s in summaries],
            },
            "Bulk finalization completed",
        )

    @app.route("/api/admin/attendance/finalize/status", methods=["GET"], endpoint="api_finalize_status")
    @admin_required
    @api_errors
    def finalize_status():
        work_date = parse_date_arg(request.args.get("date"), "date", default=now_local().date())
        employee_id = parse_int_arg(request.args.get("employee_id"), "employee_id")
        if employee_id is None:
            return ok(job.get_date_status(work_date))
        return ok(job.get_status(employee_id, work_date).to_dict())
