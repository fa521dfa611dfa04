from __future__ import annotations

from datetime import datetime

from flask import Flask, request

from ..common.api import admin_required, api_errors, current_role, current_user_id, ok, parse_int_arg
from ..core.exceptions import ValidationError
from ..container import Container
from .model import correction_to_dict


def _parse_check_out(value) -> datetime:
    v = (value or "").strip()
    if not v:
        raise ValidationError("check_out_time is required")
    try:
        return datetime.fromisoformat(v)
    except ValueError:
        raise ValidationError("check_out_time must be an ISO datetime (YYYY-MM-DDTHH:MM)") from None


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/corrections", methods=["GET"], endpoint="api_admin_corrections")
    @admin_required
    @api_errors
    def admin_corrections():
        user_id = parse_int_arg(request.args.get("employee_id"), "employee_id")
        rows = container.correction_service.list_pending(user_id=user_id)
        return ok([correction_to_dict(c) for c in rows])

    @app.route("/api/admin/corrections/<int:request_id>/approve", methods=["POST"], endpoint="api_approve_correction")
    @admin_required
    @api_errors
    def approve_correction(request_id: int):
        payload = request.get_json(silent=True) or {}
        result = container.correction_review_service.approve(
            current_role=current_role(),
            admin_user_id=current_user_id(),
            request_id=int(request_id),
            check_out_time=_parse_check_out(payload.get("check_out_time")),
            admin_note=payload.get("admin_note", ""),
        )
        return ok({"status": result.outcome.status.value, "worked_minutes": result.outcome.worked_minutes}, "Correction approved")

    @app.route("/api/admin/corrections/<int:request_id>/reject", methods=["POST"], endpoint="api_reject_correction")
    @admin_required
    @api_errors
    def reject_correction(request_id: int):
        payload = request.get_json(silent=True) or {}
        container.correction_review_service.reject(
            current_role=current_role(),
            admin_user_id=current_user_id(),
            request_id=int(request_id),
            admin_note=payload.get("admin_note", ""),
        )
        return ok(None, "Correction rejected")
