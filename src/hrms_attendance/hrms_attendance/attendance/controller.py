from __future__ import annotations

from flask import Flask, request

from ..common.api import (
    admin_required,
    api_errors,
    current_user_id,
    login_required,
    ok,
    parse_date_arg,
    parse_int_arg,
)
from ..common.datetime_utils import now_local
from ..core.exceptions import ValidationError
from ..container import Container
from .model import record_to_dict, session_to_dict


def _live_to_dict(s) -> dict:
    return {
        "user_id": s.user_id,
        "full_name": s.full_name,
        "date": s.work_date.isoformat(),
        "session_id": s.session_id,
        "check_in": s.check_in.isoformat(),
        "status": s.status.value,
        "work_location": s.work_location.value,
        "location_details": s.location_details,
        "break_started_at": s.break_started_at.isoformat() if s.break_started_at else None,
    }


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance/sessions/start", methods=["POST"], endpoint="api_session_start")
    @login_required
    @api_errors
    def session_start():
        payload = request.get_json(silent=True) or {}
        s = service.start_session(
            current_user_id(),
            payload.get("work_location") or "",
            payload.get("location_details"),
        )
        return ok(session_to_dict(s), "Clocked in", 201)

    @app.route("/api/attendance/sessions/end", methods=["POST"], endpoint="api_session_end")
    @login_required
    @api_errors
    def session_end():
        s = service.end_session(current_user_id())
        return ok(session_to_dict(s), "Clocked out")

    @app.route("/api/attendance/breaks/start", methods=["POST"], endpoint="api_break_start")
    @login_required
    @api_errors
    def break_start():
        s = service.start_break(current_user_id())
        return ok(session_to_dict(s), "Break started")

    @app.route("/api/attendance/breaks/end", methods=["POST"], endpoint="api_break_end")
    @login_required
    @api_errors
    def break_end():
        s = service.end_break(current_user_id())
        return ok(session_to_dict(s), "Break ended")

    @app.route("/api/attendance/sessions/active", methods=["GET"], endpoint="api_session_active")
    @login_required
    @api_errors
    def session_active():
        s = service.get_active_session(current_user_id())
        return ok(session_to_dict(s) if s else None)

    @app.route("/api/attendance/records", methods=["GET"], endpoint="api_my_records")
    @login_required
    @api_errors
    def my_records():
        records = service.list_records(
            current_user_id(),
            start=parse_date_arg(request.args.get("start"), "start"),
            end=parse_date_arg(request.args.get("end"), "end"),
        )
        return ok([record_to_dict(r) for r in records])

    @app.route("/api/attendance/records/<work_date>", methods=["GET"], endpoint="api_my_record")
    @login_required
    @api_errors
    def my_record(work_date: str):
        record = service.get_record(current_user_id(), parse_date_arg(work_date, "date"))
        return ok(record_to_dict(record) if record else None)

    @app.route("/api/admin/attendance/records", methods=["GET"], endpoint="api_admin_records")
    @admin_required
    @api_errors
    def admin_records():
        employee_id = parse_int_arg(request.args.get("employee_id"), "employee_id")
        if employee_id is None:
            raise ValidationError("employee_id is required")
        records = service.list_records(
            employee_id,
            start=parse_date_arg(request.args.get("start"), "start"),
            end=parse_date_arg(request.args.get("end"), "end"),
        )
        return ok([record_to_dict(r) for r in records])

    @app.route("/api/admin/attendance/live", methods=["GET"], endpoint="api_admin_live")
    @admin_required
    @api_errors
    def admin_live():
        work_date = parse_date_arg(request.args.get("date"), "date", default=now_local().date())
        return ok([_live_to_dict(s) for s in service.list_live_sessions(work_date=work_date)])

    @app.route("/api/attendance/summary", methods=["GET"], endpoint="api_my_summary")
    @login_required
    @api_errors
    def my_summary():
        today = now_local().date()
        summary = container.report_service.monthly_summary(
            user_id=current_user_id(),
            year=parse_int_arg(request.args.get("year"), "year", default=today.year),
            month=parse_int_arg(request.args.get("month"), "month", default=today.month),
        )
        return ok(summary.to_dict())

    @app.route("/api/admin/attendance/summary", methods=["GET"], endpoint="api_admin_summary")
    @admin_required
    @api_errors
    def admin_summary():
        today = now_local().date()
        year = parse_int_arg(request.args.get("year"), "year", default=today.year)
        month = parse_int_arg(request.args.get("month"), "month", default=today.month)
        employee_id = parse_int_arg(request.args.get("employee_id"), "employee_id")

        if employee_id is not None:
            return ok(container.report_service.monthly_summary(user_id=employee_id, year=year, month=month).to_dict())
        return ok([s.to_dict() for s in container.report_service.monthly_summaries(year=year, month=month)])
